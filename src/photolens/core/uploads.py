"""Relay of client photos to the Cloudinary media store.

The relay appends the caller's IP to the free-text ``tags`` and ``context``
fields before forwarding.  Both fields have a delimiter syntax (tags are
comma separated, context is ``key=value|key=value``), so every
caller-controlled piece, the forwarded IP included, goes through an
allow-list character filter before it is embedded.
"""

from __future__ import annotations

import logging
import string
from typing import Any

import httpx

from photolens.core.config import PhotolensConfig
from photolens.core.errors import InternalError, UpstreamFailure

logger = logging.getLogger(__name__)

UNKNOWN_IP = "unknown"

IP_CHARS = frozenset(string.ascii_letters + string.digits + ".:")
TAG_CHARS = frozenset(string.ascii_letters + string.digits + " _-.:/")
CONTEXT_KEY_CHARS = frozenset(string.ascii_letters + string.digits + "_-")
CONTEXT_VALUE_CHARS = frozenset(string.ascii_letters + string.digits + " _-.:/@")


def sanitize_field(value: str, allowed: frozenset[str]) -> str:
    """Keep only the characters in ``allowed``."""
    return "".join(char for char in value if char in allowed)


def client_ip(forwarded_for: str | None) -> str:
    """Return the first ``X-Forwarded-For`` entry, filtered, or ``"unknown"``."""
    if not forwarded_for:
        return UNKNOWN_IP
    first = forwarded_for.split(",")[0].strip()
    return sanitize_field(first, IP_CHARS) or UNKNOWN_IP


def build_tags(tags: str | None, ip: str) -> str:
    cleaned = [sanitize_field(tag, TAG_CHARS).strip() for tag in (tags or "").split(",")]
    cleaned = [tag for tag in cleaned if tag]
    cleaned.append(f"ip:{sanitize_field(ip, IP_CHARS) or UNKNOWN_IP}")
    return ",".join(cleaned)


def build_context(context: str | None, ip: str) -> str:
    pairs: list[str] = []
    for entry in (context or "").split("|"):
        key, _, value = entry.partition("=")
        key = sanitize_field(key, CONTEXT_KEY_CHARS).strip()
        if not key:
            continue
        pairs.append(f"{key}={sanitize_field(value, CONTEXT_VALUE_CHARS).strip()}")
    pairs.append(f"ip={sanitize_field(ip, IP_CHARS) or UNKNOWN_IP}")
    return "|".join(pairs)


async def relay_upload(
    file: str,
    tags: str | None,
    context: str | None,
    ip: str,
    config: PhotolensConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, Any]:
    """Forward one upload to Cloudinary and return its asset descriptor.

    Args:
        file: Data URI, URL or base64 payload accepted by Cloudinary.
        tags: Caller tags, comma separated.
        context: Caller context, ``key=value`` pairs separated by ``|``.
        ip: Caller IP, as returned by :func:`client_ip`.
        config: Supplies cloud name, upload preset and base URL.
        transport: Optional httpx transport (used by tests).

    Raises:
        InternalError: Cloud name or upload preset is not configured.
        UpstreamFailure: The request failed or Cloudinary returned an error.
    """
    if not config.cloudinary_cloud_name or not config.cloudinary_upload_preset:
        logger.error("Cloudinary configuration missing on server")
        raise InternalError("Server configuration error")

    url = f"{config.cloudinary_base_url.rstrip('/')}/{config.cloudinary_cloud_name}/image/upload"
    form = {
        "file": file,
        "upload_preset": config.cloudinary_upload_preset,
        "tags": build_tags(tags, ip),
        "context": build_context(context, ip),
    }

    try:
        async with httpx.AsyncClient(transport=transport) as client:
            response = await client.post(url, data=form)
    except httpx.HTTPError as exc:
        logger.error(f"Cloudinary upload request failed: {exc}", exc_info=True)
        raise UpstreamFailure(f"Upload request failed: {exc.__class__.__name__}") from exc

    if response.is_error:
        snippet = (response.text or "").strip().replace("\n", " ")[:500]
        logger.error(f"Cloudinary upload failed with HTTP {response.status_code}: {snippet}")
        raise UpstreamFailure(f"Upload failed with HTTP {response.status_code}: {snippet}")

    return response.json()
