"""Send confirmed-detection alerts to a Discord webhook."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import httpx

from models.detection_record import ConfirmedDetection
from utils.media_validation import decode_frame_data

LOGGER = logging.getLogger(__name__)

ALERT_COLOR = 0xFF0000


def build_alert_message(detection: ConfirmedDetection, attachment_name: Optional[str] = None) -> Dict[str, Any]:
    """Return the webhook body (one embed) describing a confirmed detection."""
    embed: Dict[str, Any] = {
        "title": f"{detection.object_class.capitalize()} Detected!",
        "description": f"Surveillance system has confirmed a {detection.object_class} detection",
        "color": ALERT_COLOR,
        "timestamp": detection.timestamp_final.isoformat(),
        "fields": [
            {"name": "Detected by", "value": detection.user_name, "inline": False},
            {
                "name": "Initial Detection",
                "value": detection.timestamp_initial.strftime("%Y-%m-%d %H:%M:%S %Z").strip(),
                "inline": True,
            },
            {
                "name": "Final Detection",
                "value": detection.timestamp_final.strftime("%Y-%m-%d %H:%M:%S %Z").strip(),
                "inline": True,
            },
        ],
    }
    if attachment_name:
        embed["image"] = {"url": f"attachment://{attachment_name}"}
    return {"embeds": [embed]}


class DiscordNotifier:
    """Deliver alerts to a webhook; every failure is logged and reported as False.

    `notifications_enabled` is the process-wide switch that admins flip over
    the websocket. Nothing in here raises into the caller.
    """

    def __init__(
        self,
        webhook_url: Optional[str],
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
        enabled: bool = True,
    ) -> None:
        self.webhook_url = (webhook_url or "").strip() or None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None
        self.notifications_enabled = enabled

    def set_notifications_enabled(self, enabled: bool) -> None:
        self.notifications_enabled = bool(enabled)

    async def send_detection_alert(self, detection: ConfirmedDetection, frame_data: Optional[str] = None) -> bool:
        """Post an alert for `detection`, attaching `frame_data` when it decodes.

        Returns:
            True if the webhook accepted the message, False otherwise.
        """
        if not self.notifications_enabled:
            LOGGER.info("Discord notifications disabled; skipping alert for %s", detection.user_name)
            return False
        if not self.webhook_url:
            LOGGER.warning("Missing Discord webhook URL; skipping alert for %s", detection.user_name)
            return False

        attachment = decode_frame_data(frame_data) if frame_data else None
        if frame_data and attachment is None:
            LOGGER.warning("Latest frame from %s could not be decoded; sending alert without image", detection.user_name)

        try:
            if attachment is not None:
                message = build_alert_message(detection, attachment.filename)
                response = await self._client.post(
                    self.webhook_url,
                    data={"payload_json": json.dumps(message)},
                    files={"files[0]": (attachment.filename, attachment.content, attachment.mime_type)},
                )
            else:
                response = await self._client.post(self.webhook_url, json=build_alert_message(detection))
        except httpx.HTTPError as exc:
            LOGGER.error("Failed to send Discord notification: %s", exc)
            return False

        if not response.is_success:
            LOGGER.error("Discord notification failed: %s %s", response.status_code, response.reason_phrase)
            return False
        LOGGER.info("Discord notification sent for %s", detection.user_name)
        return True

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
