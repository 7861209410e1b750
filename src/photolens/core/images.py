"""Decoding of client-submitted images.

Clients send either bare base64 or a data URI such as
``data:image/jpeg;base64,/9j/4AAQ...``.  The prefix is stripped, the payload
is decoded, and Pillow checks that the bytes really are an image before
anything is sent upstream.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import re
import struct
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError

from photolens.core.errors import InvalidInput

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "image/jpeg"

_DATA_URI_RE = re.compile(
    r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[^,;]*)*),(?P<payload>.*)$",
    re.DOTALL,
)


@dataclass(frozen=True)
class DecodedImage:
    data: bytes
    mime_type: str


def split_data_uri(image: str) -> tuple[str | None, str]:
    """Return ``(mime_type_or_None, base64_payload)`` for a submitted string."""
    match = _DATA_URI_RE.match(image)
    if match is None:
        return None, image
    return match.group("mime"), match.group("payload")


def sniff_mime_type(data: bytes) -> str | None:
    """Identify the image format with Pillow.

    Raises:
        InvalidInput: Pillow cannot read the bytes as an image.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            image_format = img.format
            img.verify()
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        SyntaxError,
        ValueError,
        struct.error,
    ) as exc:
        raise InvalidInput(f"Image data is not a readable image: {exc}") from exc
    return Image.MIME.get(image_format or "")


def decode_image(image: str | None) -> DecodedImage:
    """Validate and decode the ``image`` field of a request.

    Raises:
        InvalidInput: The field is missing, empty, not base64, or not an image.
    """
    if image is None or not image.strip():
        raise InvalidInput("Image data is required")

    declared_mime, payload = split_data_uri(image.strip())
    payload = "".join(payload.split())
    if not payload:
        raise InvalidInput("Image data is required")

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidInput("Image data is not valid base64") from exc

    sniffed_mime = sniff_mime_type(data)
    if declared_mime and not declared_mime.startswith("image/"):
        declared_mime = None
    mime_type = declared_mime or sniffed_mime or DEFAULT_MIME_TYPE
    logger.debug(f"Decoded {len(data)} image bytes as {mime_type}")
    return DecodedImage(data=data, mime_type=mime_type)
