"""Configuration management for the Photolens analysis service.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the PHOTOLENS_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (PHOTOLENS_* prefix)
2. .env file in the project root
3. Default values defined in PhotolensConfig

The three deployment-facing settings also accept the unprefixed names used by
existing hosting setups: ``GEMINI_API_KEY``, ``PRIMARY_DOMAIN`` and
``LOCALHOST``.

Example .env file:
    GEMINI_API_KEY=...
    PRIMARY_DOMAIN=photolens.example.com
    LOCALHOST=true
    PHOTOLENS_DEFAULT_MODEL=gemini-2.0-flash
    PHOTOLENS_STRICT_VALIDATION=true

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
Route handlers receive it through :func:`get_config` so tests can swap in
their own instance with ``app.dependency_overrides``.

Usage Example
-------------
    from photolens.core.config import config

    print(config.primary_domain)
    print(config.default_model)

Access Policy Settings
----------------------
- primary_domain: substring an Origin header must contain to be allowed.
  Empty means no domain is allowed.
- allow_localhost: also allow loopback and native-app origins.

With both unset every origin is denied ("lockdown"), which is a valid
configuration.
"""

from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PhotolensConfig(BaseSettings):
    """Main configuration for the Photolens analysis service.

    Attributes
    ----------
    Access Gate:
        primary_domain : str
            Allowed origin domain (substring match). Empty disables it.
        allow_localhost : bool
            Allow loopback (localhost / 127.0.0.1) and native-app origins.

    Generation:
        generation_backend : Literal["gemini", "mock"]
            Which generation client the API instantiates at startup.
        gemini_api_key : str
            Google AI Studio key used by the Gemini client.
        default_model : str
            Model identifier used when a request carries no override.
        temperature : float
            Sampling temperature; a little above the SDK default so themed
            suggestions vary between calls.
        top_p : float
            Nucleus sampling cutoff.
        strict_validation : bool
            Reject model output that does not match the analysis schema
            (``True``) or pass it through unchanged (``False``).

    Upload relay:
        cloudinary_cloud_name : str
        cloudinary_upload_preset : str
        cloudinary_base_url : str

    Server:
        server_host : str
        server_port : int
        log_level : str
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PHOTOLENS_",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Access gate
    primary_domain: str = Field(
        default="",
        validation_alias=AliasChoices("PHOTOLENS_PRIMARY_DOMAIN", "PRIMARY_DOMAIN"),
        description="Allowed origin domain; matched as a substring of the Origin header",
    )
    allow_localhost: bool = Field(
        default=False,
        validation_alias=AliasChoices("PHOTOLENS_ALLOW_LOCALHOST", "LOCALHOST"),
        description="Allow localhost, 127.0.0.1 and capacitor:// origins",
    )

    # Generation
    generation_backend: Literal["gemini", "mock"] = Field(
        default="gemini",
        description="Generation client to use (gemini or mock)",
    )
    gemini_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("PHOTOLENS_GEMINI_API_KEY", "GEMINI_API_KEY"),
        description="Gemini API key",
    )
    default_model: str = Field(
        default="gemini-2.0-flash",
        description="Gemini model used when the request does not override it",
    )
    temperature: float = Field(default=1.1, ge=0.0, le=2.0)
    top_p: float = Field(default=0.95, gt=0.0, le=1.0)
    strict_validation: bool = Field(
        default=True,
        description="Reject model output that does not match the analysis schema",
    )

    # Upload relay
    cloudinary_cloud_name: str = Field(
        default="",
        validation_alias=AliasChoices("PHOTOLENS_CLOUDINARY_CLOUD_NAME", "CLOUDINARY_CLOUD_NAME"),
    )
    cloudinary_upload_preset: str = Field(
        default="",
        validation_alias=AliasChoices(
            "PHOTOLENS_CLOUDINARY_UPLOAD_PRESET", "CLOUDINARY_UPLOAD_PRESET"
        ),
    )
    cloudinary_base_url: str = Field(default="https://api.cloudinary.com/v1_1")

    # Server
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address",
    )
    server_port: int = Field(default=8000, ge=1024, le=65535)
    log_level: str = Field(default="INFO")


# Global configuration instance, loaded once from the environment and .env file.
config = PhotolensConfig()


def get_config() -> PhotolensConfig:
    """FastAPI dependency returning the global configuration."""
    return config
