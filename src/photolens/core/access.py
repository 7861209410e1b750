"""Origin-based access gate and CORS header assembly.

Policy
------
A request is allowed when either:

- ``allow_localhost`` is enabled and the origin looks local (loopback host
  or a native-app scheme such as ``capacitor://``), or
- ``primary_domain`` is non-empty and the Origin header contains it.

Everything else is denied, including the "lockdown" configuration where no
domain is set and local origins are off.

On allow, the ``Access-Control-Allow-Origin`` header echoes the caller's own
origin (never ``*``) so credentialed cross-origin calls only work for
allowed origins.  Preflight ``OPTIONS`` requests go through the same gate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from photolens.core.config import PhotolensConfig
from photolens.core.errors import Forbidden

logger = logging.getLogger(__name__)

LOCAL_HOST_MARKERS: tuple[str, ...] = ("localhost", "127.0.0.1")
NATIVE_APP_SCHEMES: tuple[str, ...] = ("capacitor://", "ionic://")

ALLOWED_REQUEST_HEADERS: tuple[str, ...] = (
    "X-CSRF-Token",
    "X-Requested-With",
    "Accept",
    "Accept-Version",
    "Content-Length",
    "Content-MD5",
    "Content-Type",
    "Date",
    "X-Api-Version",
)


@dataclass(frozen=True)
class OriginDescriptor:
    """Everything the gate needs to know about one request's origin."""

    origin: str
    is_local_like: bool
    allowed_domain: str
    allow_localhost: bool


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of the gate.

    Attributes:
        allowed: Whether the request may proceed.
        allow_origin: Value for ``Access-Control-Allow-Origin``; ``None``
            when denied.
    """

    allowed: bool
    allow_origin: str | None = None


def is_local_like(origin: str) -> bool:
    """Return ``True`` for loopback origins and native-app schemes."""
    if origin.startswith(NATIVE_APP_SCHEMES):
        return True
    return any(marker in origin for marker in LOCAL_HOST_MARKERS)


def describe_origin(origin: str | None, config: PhotolensConfig) -> OriginDescriptor:
    origin = origin or ""
    return OriginDescriptor(
        origin=origin,
        is_local_like=is_local_like(origin),
        allowed_domain=config.primary_domain.strip(),
        allow_localhost=config.allow_localhost,
    )


def check_origin(descriptor: OriginDescriptor) -> AccessDecision:
    """Apply the access policy to a described origin."""
    local_ok = descriptor.allow_localhost and descriptor.is_local_like
    domain_ok = bool(descriptor.allowed_domain) and descriptor.allowed_domain in descriptor.origin
    if local_ok or domain_ok:
        return AccessDecision(allowed=True, allow_origin=descriptor.origin)
    return AccessDecision(allowed=False)


def enforce(origin: str | None, config: PhotolensConfig) -> AccessDecision:
    """Check an origin and raise :class:`Forbidden` when it is not allowed.

    Returns:
        The allowing :class:`AccessDecision`.

    Raises:
        Forbidden: The origin is not permitted to use the service.
    """
    decision = check_origin(describe_origin(origin, config))
    if not decision.allowed:
        logger.warning(f"Rejected request from origin {origin!r}")
        raise Forbidden("This API is restricted to authorized domains only.")
    return decision


def cors_headers(decision: AccessDecision | None, methods: str) -> dict[str, str]:
    """Build the CORS response headers for a gated endpoint.

    ``Access-Control-Allow-Origin`` is only emitted for allowed origins.
    """
    headers = {
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Methods": methods,
        "Access-Control-Allow-Headers": ", ".join(ALLOWED_REQUEST_HEADERS),
    }
    if decision is not None and decision.allowed and decision.allow_origin:
        headers["Access-Control-Allow-Origin"] = decision.allow_origin
        headers["Vary"] = "Origin"
    return headers
