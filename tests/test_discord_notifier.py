import asyncio
import base64
import json

import httpx
import pytest

from conftest import T0, at
from models.detection_record import ConfirmedDetection
from services.alerts.discord_notifier import DiscordNotifier, build_alert_message
from utils.media_validation import decode_frame_data

WEBHOOK = "https://discord.example/api/webhooks/1/token"
JPEG_BYTES = b"\xff\xd8\xff\xe0fake-jpeg"


@pytest.fixture
def detection():
    return ConfirmedDetection(
        id="d1",
        user_id="a",
        user_name="Alice",
        object_class="person",
        timestamp_initial=T0,
        timestamp_final=at(4.5),
    )


def _notifier(handler, **kwargs):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return DiscordNotifier(WEBHOOK, client=client, **kwargs), client


def _send(notifier, client, detection, frame=None):
    async def _go():
        try:
            return await notifier.send_detection_alert(detection, frame)
        finally:
            await client.aclose()

    return asyncio.run(_go())


def test_alert_without_frame_posts_json_embed(detection):
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(204)

    notifier, client = _notifier(handler)
    assert _send(notifier, client, detection) is True

    (request,) = requests
    assert str(request.url) == WEBHOOK
    body = json.loads(request.content)
    embed = body["embeds"][0]
    assert embed["title"] == "Person Detected!"
    assert embed["fields"][0]["value"] == "Alice"
    assert "image" not in embed


def test_alert_with_frame_posts_multipart_attachment(detection):
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={"id": "msg"})

    frame = "data:image/jpeg;base64," + base64.b64encode(JPEG_BYTES).decode()
    notifier, client = _notifier(handler)
    assert _send(notifier, client, detection, frame) is True

    (request,) = requests
    assert request.headers["content-type"].startswith("multipart/form-data")
    assert JPEG_BYTES in request.content
    assert b"attachment://frame.jpg" in request.content
    assert b'name="payload_json"' in request.content


def test_undecodable_frame_falls_back_to_plain_alert(detection):
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(204)

    notifier, client = _notifier(handler)
    assert _send(notifier, client, detection, "not base64 !!") is True
    assert requests[0].headers["content-type"] == "application/json"


def test_http_error_status_is_reported_not_raised(detection):
    notifier, client = _notifier(lambda request: httpx.Response(500))
    assert _send(notifier, client, detection) is False


def test_transport_error_is_reported_not_raised(detection):
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    notifier, client = _notifier(handler)
    assert _send(notifier, client, detection) is False


def test_disabled_or_unconfigured_notifier_sends_nothing(detection):
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(204)

    notifier, client = _notifier(handler, enabled=False)
    assert _send(notifier, client, detection) is False

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    unconfigured = DiscordNotifier("  ", client=client)
    assert unconfigured.webhook_url is None
    assert _send(unconfigured, client, detection) is False
    assert requests == []


def test_toggle_flips_the_switch(detection):
    notifier = DiscordNotifier(WEBHOOK, client=httpx.AsyncClient())
    notifier.set_notifications_enabled(False)
    assert notifier.notifications_enabled is False
    notifier.set_notifications_enabled(True)
    assert notifier.notifications_enabled is True


def test_build_alert_message_references_attachment(detection):
    message = build_alert_message(detection, "frame.png")
    embed = message["embeds"][0]
    assert embed["image"] == {"url": "attachment://frame.png"}
    assert embed["timestamp"] == at(4.5).isoformat()


def test_decode_frame_data_variants():
    encoded = base64.b64encode(JPEG_BYTES).decode()

    bare = decode_frame_data(encoded)
    assert bare.content == JPEG_BYTES
    assert bare.mime_type == "image/jpeg"

    png = decode_frame_data("data:image/png;base64," + encoded)
    assert png.filename == "frame.png"

    assert decode_frame_data("") is None
    assert decode_frame_data(None) is None
    assert decode_frame_data("data:image/jpeg," + encoded) is None
    assert decode_frame_data("data:text/plain;base64," + encoded) is None
    assert decode_frame_data("%%%") is None
