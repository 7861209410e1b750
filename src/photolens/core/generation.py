"""Generation clients for schema-constrained image analysis.

A generation client performs exactly one round trip to a generative model:
it sends the image, the instruction text and the output schema, and returns
the raw reply text together with token usage.  There is no retry and no
streaming; any failure surfaces as :class:`~photolens.core.errors.UpstreamFailure`.

Clients
-------
GeminiGenerationClient
    Google Gemini through the ``google-genai`` SDK, using JSON response
    mode with ``response_schema``.
MockGenerationClient
    Offline client returning a schema-valid canned report, for local
    development (``PHOTOLENS_GENERATION_BACKEND=mock``).

Usage
-----
::

    from photolens.core.config import config
    from photolens.core.generation import GenerationOptions, create_generation_client

    client = create_generation_client(config)
    result = await client.generate(
        image_bytes,
        "image/jpeg",
        bundle.instruction_text,
        bundle.schema_declaration,
        GenerationOptions(model="gemini-2.0-flash"),
    )
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from google import genai
from google.genai import types

from photolens.core.config import PhotolensConfig
from photolens.core.errors import UpstreamFailure
from photolens.core.schema import ANALYSIS_FIELDS, FieldSpec

logger = logging.getLogger(__name__)

# Shown by GET /api/models next to the live listing.
RECOMMENDED_MODELS: tuple[dict[str, str], ...] = (
    {"name": "gemini-2.0-flash", "note": "Fastest, highest rate limits"},
    {"name": "gemini-2.5-flash", "note": "Better detail, moderate limits"},
    {"name": "gemini-2.5-pro", "note": "Most thorough, lowest limits"},
)


@dataclass(frozen=True)
class TokenUsage:
    prompt_tokens: int
    response_tokens: int
    total_tokens: int

    def to_dict(self) -> dict[str, int]:
        return {
            "promptTokens": self.prompt_tokens,
            "responseTokens": self.response_tokens,
            "totalTokens": self.total_tokens,
        }


@dataclass(frozen=True)
class GenerationOptions:
    """Per-request model settings.

    Attributes:
        model: Model identifier.
        temperature: Sampling temperature; ``None`` leaves the model default.
        top_p: Nucleus sampling cutoff; ``None`` leaves the model default.
    """

    model: str
    temperature: float | None = None
    top_p: float | None = None


@dataclass(frozen=True)
class GenerationResult:
    raw_text: str
    usage: TokenUsage | None
    model: str


class GenerationClientBase(ABC):
    """Common interface for generation clients."""

    name: str = "Base Generation Client"

    def __init__(self, config: PhotolensConfig) -> None:
        self.config = config
        logger.info(f"Initialized {self.name}")

    @abstractmethod
    async def generate(
        self,
        image_bytes: bytes,
        mime_type: str,
        instruction_text: str,
        schema_declaration: dict[str, Any],
        options: GenerationOptions,
    ) -> GenerationResult:
        """Run one schema-constrained generation.

        Raises:
            UpstreamFailure: The model call failed for any reason.
        """

    @abstractmethod
    async def list_models(self) -> list[dict[str, Any]]:
        """Return descriptors of the models available to this client."""


def usage_from_metadata(metadata: Any) -> TokenUsage | None:
    """Convert Gemini ``usage_metadata`` into :class:`TokenUsage`.

    Returns ``None`` when the reply carried no usage data.
    """
    if metadata is None:
        return None
    prompt = metadata.prompt_token_count or 0
    response = metadata.candidates_token_count or 0
    total = metadata.total_token_count or (prompt + response)
    return TokenUsage(prompt_tokens=prompt, response_tokens=response, total_tokens=total)


class GeminiGenerationClient(GenerationClientBase):
    """Gemini client using JSON response mode."""

    name = "Gemini Generation Client"

    def __init__(self, config: PhotolensConfig, client: genai.Client | None = None) -> None:
        super().__init__(config)
        self._client = client

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self.config.gemini_api_key:
                raise UpstreamFailure("GEMINI_API_KEY is not set")
            self._client = genai.Client(api_key=self.config.gemini_api_key)
        return self._client

    async def generate(
        self,
        image_bytes: bytes,
        mime_type: str,
        instruction_text: str,
        schema_declaration: dict[str, Any],
        options: GenerationOptions,
    ) -> GenerationResult:
        client = self._get_client()
        content_config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=schema_declaration,
            temperature=options.temperature,
            top_p=options.top_p,
        )
        contents = [
            types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
            instruction_text,
        ]

        logger.info(f"Calling {options.model} with {len(image_bytes)} image bytes")
        try:
            response = await client.aio.models.generate_content(
                model=options.model,
                contents=contents,
                config=content_config,
            )
        except Exception as exc:
            logger.error(f"Gemini call failed: {exc}", exc_info=True)
            raise UpstreamFailure(f"{exc.__class__.__name__}: {exc}") from exc

        usage = usage_from_metadata(response.usage_metadata)
        if usage is not None:
            logger.info(
                f"Gemini usage: prompt={usage.prompt_tokens} "
                f"response={usage.response_tokens} total={usage.total_tokens}"
            )
        return GenerationResult(raw_text=response.text or "", usage=usage, model=options.model)

    async def list_models(self) -> list[dict[str, Any]]:
        client = self._get_client()
        try:
            pager = await client.aio.models.list()
            models = [model async for model in pager]
        except Exception as exc:
            logger.error(f"Failed to list Gemini models: {exc}", exc_info=True)
            raise UpstreamFailure(f"Failed to fetch models: {exc}") from exc
        return [
            {
                "name": model.name,
                "displayName": model.display_name,
                "supportedActions": list(model.supported_actions or []),
            }
            for model in models
        ]


def _sample_value(spec: FieldSpec) -> Any:
    if spec.kind == "string":
        return f"Sample {spec.name}"
    if spec.kind == "enum":
        return spec.choices[0]
    if spec.kind == "string_list":
        return [f"{spec.name} tip {i}" for i in range(1, 4)]
    if spec.kind == "object":
        return sample_report(spec.children)
    return [sample_report(spec.children) for _ in range(3)]


def sample_report(fields: tuple[FieldSpec, ...] = ANALYSIS_FIELDS) -> dict[str, Any]:
    """Build a report that satisfies the field table."""
    return {spec.name: _sample_value(spec) for spec in fields}


class MockGenerationClient(GenerationClientBase):
    """Offline client for development; never calls the network."""

    name = "Mock Generation Client"

    async def generate(
        self,
        image_bytes: bytes,
        mime_type: str,
        instruction_text: str,
        schema_declaration: dict[str, Any],
        options: GenerationOptions,
    ) -> GenerationResult:
        raw_text = json.dumps(sample_report())
        prompt_tokens = len(instruction_text) // 4
        response_tokens = len(raw_text) // 4
        usage = TokenUsage(prompt_tokens, response_tokens, prompt_tokens + response_tokens)
        return GenerationResult(raw_text=raw_text, usage=usage, model=options.model)

    async def list_models(self) -> list[dict[str, Any]]:
        return [
            {"name": f"models/{model['name']}", "displayName": model["name"], "supportedActions": []}
            for model in RECOMMENDED_MODELS
        ]


def create_generation_client(config: PhotolensConfig) -> GenerationClientBase:
    """Instantiate the client selected by ``config.generation_backend``."""
    if config.generation_backend == "mock":
        return MockGenerationClient(config)
    if config.generation_backend == "gemini":
        return GeminiGenerationClient(config)
    raise ValueError(f"Unknown generation backend: {config.generation_backend}")
