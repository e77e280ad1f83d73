"""Validation helpers for video frames relayed by clients."""

import base64
import binascii
from typing import NamedTuple, Optional

IMAGE_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/bmp": "bmp",
}


class FrameAttachment(NamedTuple):
    content: bytes
    mime_type: str
    filename: str


def decode_frame_data(frame_data: Optional[str]) -> Optional[FrameAttachment]:
    """Decode a client frame into attachment bytes.

    Clients send frames either as a `data:image/...;base64,` URL (what a
    canvas `toDataURL` produces) or as bare base64, which is assumed to be
    JPEG. Returns None when the payload is empty, not base64, or not an
    image type we can attach.
    """
    text = (frame_data or "").strip()
    if not text:
        return None

    mime_type = "image/jpeg"
    if text.startswith("data:"):
        header, _, text = text.partition(",")
        params = header[len("data:"):].split(";")
        if "base64" not in params[1:]:
            return None
        mime_type = params[0].strip().lower() or mime_type

    extension = IMAGE_EXTENSIONS.get(mime_type)
    if extension is None:
        return None
    try:
        content = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError):
        return None
    if not content:
        return None
    return FrameAttachment(content=content, mime_type=mime_type, filename=f"frame.{extension}")
