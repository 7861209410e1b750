"""Tests for photolens.core.access — origin gate and CORS headers.

Tests cover:
- Loopback and native-app origin detection.
- The allow/deny truth table for domain and localhost settings.
- Lockdown configuration (nothing configured denies everything).
- ``enforce`` raising Forbidden.
- CORS header assembly for allowed and denied origins.
"""

from __future__ import annotations

import pytest

from photolens.core.access import (
    ALLOWED_REQUEST_HEADERS,
    AccessDecision,
    check_origin,
    cors_headers,
    describe_origin,
    enforce,
    is_local_like,
)
from photolens.core.config import PhotolensConfig
from photolens.core.errors import Forbidden


def _config(**overrides) -> PhotolensConfig:
    values = {"_env_file": None, "primary_domain": "", "allow_localhost": False}
    values.update(overrides)
    return PhotolensConfig(**values)


class TestIsLocalLike:
    """Test loopback and native-app origin detection."""

    @pytest.mark.parametrize(
        "origin",
        [
            "http://localhost:3000",
            "http://127.0.0.1:8080",
            "capacitor://localhost",
            "ionic://app",
        ],
    )
    def test_local_origins(self, origin):
        assert is_local_like(origin) is True

    @pytest.mark.parametrize("origin", ["https://photolens.example.com", "", "null"])
    def test_remote_origins(self, origin):
        assert is_local_like(origin) is False


class TestCheckOrigin:
    """Test the access policy."""

    def test_local_allowed_when_flag_on(self):
        decision = check_origin(describe_origin("http://localhost:5173", _config(allow_localhost=True)))
        assert decision.allowed is True
        assert decision.allow_origin == "http://localhost:5173"

    def test_local_denied_when_flag_off(self):
        decision = check_origin(
            describe_origin("http://localhost:5173", _config(primary_domain="photolens.example.com"))
        )
        assert decision.allowed is False
        assert decision.allow_origin is None

    def test_configured_domain_allowed(self):
        cfg = _config(primary_domain="photolens.example.com")
        decision = check_origin(describe_origin("https://app.photolens.example.com", cfg))
        assert decision.allowed is True
        assert decision.allow_origin == "https://app.photolens.example.com"

    def test_other_domain_denied(self):
        cfg = _config(primary_domain="photolens.example.com", allow_localhost=True)
        decision = check_origin(describe_origin("https://evil.example.org", cfg))
        assert decision.allowed is False

    def test_lockdown_denies_everything(self):
        """No domain and no localhost flag is a valid deny-all configuration."""
        cfg = _config()
        for origin in ("http://localhost:3000", "https://photolens.example.com", ""):
            assert check_origin(describe_origin(origin, cfg)).allowed is False

    def test_missing_origin_denied_even_with_domain(self):
        cfg = _config(primary_domain="photolens.example.com")
        assert check_origin(describe_origin(None, cfg)).allowed is False

    def test_allowed_origin_is_never_wildcard(self):
        cfg = _config(primary_domain="photolens.example.com")
        decision = check_origin(describe_origin("https://photolens.example.com", cfg))
        assert decision.allow_origin != "*"


class TestEnforce:
    """Test enforce()."""

    def test_raises_forbidden(self):
        with pytest.raises(Forbidden) as exc_info:
            enforce("https://evil.example.org", _config(primary_domain="photolens.example.com"))
        assert exc_info.value.status_code == 403

    def test_returns_decision(self):
        decision = enforce("http://127.0.0.1:3000", _config(allow_localhost=True))
        assert decision == AccessDecision(allowed=True, allow_origin="http://127.0.0.1:3000")


class TestCorsHeaders:
    """Test CORS header assembly."""

    def test_allowed_echoes_origin(self):
        headers = cors_headers(AccessDecision(True, "https://a.example.com"), "OPTIONS,POST")
        assert headers["Access-Control-Allow-Origin"] == "https://a.example.com"
        assert headers["Access-Control-Allow-Credentials"] == "true"
        assert headers["Access-Control-Allow-Methods"] == "OPTIONS,POST"

    def test_denied_has_no_allow_origin(self):
        headers = cors_headers(AccessDecision(False), "OPTIONS,POST")
        assert "Access-Control-Allow-Origin" not in headers

    def test_explicit_header_allow_list(self):
        headers = cors_headers(None, "OPTIONS,POST")
        allowed = headers["Access-Control-Allow-Headers"]
        assert allowed != "*"
        for name in ALLOWED_REQUEST_HEADERS:
            assert name in allowed
