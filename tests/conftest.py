"""Shared pytest fixtures for Photolens tests."""

from __future__ import annotations

import base64
import io
import json
from typing import Any, Generator

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from photolens.api.main import app, get_generation_client
from photolens.core.config import PhotolensConfig, get_config
from photolens.core.generation import (
    GenerationClientBase,
    GenerationOptions,
    GenerationResult,
    TokenUsage,
    sample_report,
)

ALLOWED_ORIGIN = "https://app.photolens.example.com"
LOCAL_ORIGIN = "http://localhost:5173"
FOREIGN_ORIGIN = "https://evil.example.org"


class FakeGenerationClient(GenerationClientBase):
    """Records calls and returns a configurable reply.

    Attributes:
        raw_text: Reply text returned by ``generate``.
        usage: Usage returned by ``generate``.
        error: If set, raised by ``generate`` instead of replying.
        calls: One dict per ``generate`` call.
    """

    name = "Fake Generation Client"

    def __init__(self, config: PhotolensConfig) -> None:
        super().__init__(config)
        self.raw_text = json.dumps(sample_report())
        self.usage: TokenUsage | None = TokenUsage(1200, 800, 2000)
        self.error: Exception | None = None
        self.calls: list[dict[str, Any]] = []

    async def generate(
        self,
        image_bytes: bytes,
        mime_type: str,
        instruction_text: str,
        schema_declaration: dict[str, Any],
        options: GenerationOptions,
    ) -> GenerationResult:
        self.calls.append(
            {
                "image_bytes": image_bytes,
                "mime_type": mime_type,
                "instruction_text": instruction_text,
                "schema_declaration": schema_declaration,
                "options": options,
            }
        )
        if self.error is not None:
            raise self.error
        return GenerationResult(raw_text=self.raw_text, usage=self.usage, model=options.model)

    async def list_models(self) -> list[dict[str, Any]]:
        return [
            {
                "name": "models/gemini-2.0-flash",
                "displayName": "Gemini 2.0 Flash",
                "supportedActions": ["generateContent"],
            }
        ]


@pytest.fixture
def test_config() -> PhotolensConfig:
    """Configuration allowing the example domain and local origins.

    Returns:
        PhotolensConfig instance isolated from any ``.env`` file
    """
    return PhotolensConfig(
        _env_file=None,
        primary_domain="photolens.example.com",
        allow_localhost=True,
        generation_backend="mock",
        gemini_api_key="test-key",
        default_model="gemini-2.0-flash",
        strict_validation=True,
        cloudinary_cloud_name="demo-cloud",
        cloudinary_upload_preset="unsigned-preset",
    )


@pytest.fixture
def fake_client(test_config: PhotolensConfig) -> FakeGenerationClient:
    return FakeGenerationClient(test_config)


@pytest.fixture
def jpeg_bytes() -> bytes:
    """A small valid JPEG image."""
    buffer = io.BytesIO()
    Image.new("RGB", (32, 32), color=(180, 140, 120)).save(buffer, format="JPEG")
    return buffer.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (16, 16), color=(10, 20, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def jpeg_data_uri(jpeg_bytes: bytes) -> str:
    return "data:image/jpeg;base64," + base64.b64encode(jpeg_bytes).decode("ascii")


@pytest.fixture
def valid_report() -> dict[str, Any]:
    """A report that satisfies the analysis field table."""
    return sample_report()


@pytest.fixture
def test_client(
    test_config: PhotolensConfig, fake_client: FakeGenerationClient
) -> Generator[TestClient, None, None]:
    """TestClient with the fake generation client and test configuration.

    Cleanup:
        Dependency overrides are removed after the test
    """
    app.dependency_overrides[get_config] = lambda: test_config
    app.dependency_overrides[get_generation_client] = lambda: fake_client
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
