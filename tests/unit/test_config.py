"""Tests for photolens.core.config — configuration management.

Tests cover:
- Default values for all configuration fields.
- Environment variable overrides via the PHOTOLENS_ prefix.
- The unprefixed deployment names (GEMINI_API_KEY, PRIMARY_DOMAIN, LOCALHOST).
- Pydantic validation constraints (port range, sampling bounds, backend literal).
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from photolens.core.config import PhotolensConfig, config, get_config

_ENV_NAMES = (
    "GEMINI_API_KEY",
    "PRIMARY_DOMAIN",
    "LOCALHOST",
    "CLOUDINARY_CLOUD_NAME",
    "CLOUDINARY_UPLOAD_PRESET",
    "PHOTOLENS_GEMINI_API_KEY",
    "PHOTOLENS_PRIMARY_DOMAIN",
    "PHOTOLENS_ALLOW_LOCALHOST",
    "PHOTOLENS_GENERATION_BACKEND",
    "PHOTOLENS_DEFAULT_MODEL",
    "PHOTOLENS_STRICT_VALIDATION",
    "PHOTOLENS_SERVER_PORT",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every configuration variable from the environment."""
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestConfigDefaults:
    """Verify that PhotolensConfig provides safe defaults."""

    def test_access_gate_locked_down(self, clean_env):
        """With nothing configured every origin is denied."""
        cfg = PhotolensConfig(_env_file=None)
        assert cfg.primary_domain == ""
        assert cfg.allow_localhost is False

    def test_generation_defaults(self, clean_env):
        cfg = PhotolensConfig(_env_file=None)
        assert cfg.generation_backend == "gemini"
        assert cfg.gemini_api_key == ""
        assert cfg.default_model == "gemini-2.0-flash"
        assert cfg.strict_validation is True

    def test_sampling_defaults(self, clean_env):
        cfg = PhotolensConfig(_env_file=None)
        assert cfg.temperature == 1.1
        assert cfg.top_p == 0.95

    def test_server_defaults(self, clean_env):
        cfg = PhotolensConfig(_env_file=None)
        assert cfg.server_host == "0.0.0.0"
        assert cfg.server_port == 8000
        assert cfg.log_level == "INFO"

    def test_get_config_returns_global(self):
        assert get_config() is config


class TestEnvironmentOverrides:
    def test_prefixed_names(self, clean_env):
        clean_env.setenv("PHOTOLENS_PRIMARY_DOMAIN", "photolens.example.com")
        clean_env.setenv("PHOTOLENS_ALLOW_LOCALHOST", "true")
        clean_env.setenv("PHOTOLENS_GENERATION_BACKEND", "mock")
        clean_env.setenv("PHOTOLENS_STRICT_VALIDATION", "false")
        cfg = PhotolensConfig(_env_file=None)
        assert cfg.primary_domain == "photolens.example.com"
        assert cfg.allow_localhost is True
        assert cfg.generation_backend == "mock"
        assert cfg.strict_validation is False

    def test_unprefixed_deployment_names(self, clean_env):
        clean_env.setenv("GEMINI_API_KEY", "secret")
        clean_env.setenv("PRIMARY_DOMAIN", "example.org")
        clean_env.setenv("LOCALHOST", "true")
        clean_env.setenv("CLOUDINARY_CLOUD_NAME", "cloud")
        cfg = PhotolensConfig(_env_file=None)
        assert cfg.gemini_api_key == "secret"
        assert cfg.primary_domain == "example.org"
        assert cfg.allow_localhost is True
        assert cfg.cloudinary_cloud_name == "cloud"

    def test_keyword_arguments_by_field_name(self, clean_env):
        cfg = PhotolensConfig(_env_file=None, primary_domain="a.example", allow_localhost=True)
        assert cfg.primary_domain == "a.example"
        assert cfg.allow_localhost is True


class TestValidation:
    def test_unknown_backend_rejected(self, clean_env):
        with pytest.raises(ValidationError):
            PhotolensConfig(_env_file=None, generation_backend="openai")

    @pytest.mark.parametrize("temperature", [-0.1, 2.5])
    def test_temperature_bounds(self, clean_env, temperature):
        with pytest.raises(ValidationError):
            PhotolensConfig(_env_file=None, temperature=temperature)

    def test_top_p_must_be_positive(self, clean_env):
        with pytest.raises(ValidationError):
            PhotolensConfig(_env_file=None, top_p=0.0)

    def test_privileged_port_rejected(self, clean_env):
        with pytest.raises(ValidationError):
            PhotolensConfig(_env_file=None, server_port=80)
