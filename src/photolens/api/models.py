"""Pydantic request and response models for the Photolens API.

Models
------
AnalyzeRequest
    Payload for ``POST /api/analyze``.
UploadRequest
    Payload for ``POST /api/upload``.
HealthResponse
    Body of ``GET /health``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from photolens.core.pipeline import AnalysisRequest


class AnalyzeRequest(BaseModel):
    """Request body for ``POST /api/analyze``.

    Keys use the camelCase names browser clients send; snake_case names are
    accepted too.

    Attributes:
        image: Base64 image or data URI (``data:image/jpeg;base64,...``).
            Checked by the pipeline, so a missing value produces the
            pipeline's own 400 message.
        variant_index: Theme index; any non-negative integer, wraps around.
        prompt_override: Extra guidance appended to the instructions.
        model_override: Gemini model identifier for this request only.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    image: str | None = Field(
        default=None,
        description="Base64 image or data URI.",
    )
    variant_index: int = Field(
        default=0,
        ge=0,
        alias="variantIndex",
        description="Theme index; wraps around the theme catalog.",
    )
    prompt_override: str | None = Field(
        default=None,
        alias="promptOverride",
        description="Extra guidance appended to the model instructions.",
    )
    model_override: str | None = Field(
        default=None,
        alias="modelOverride",
        description="Model identifier used instead of the configured default.",
    )

    def to_analysis_request(self) -> AnalysisRequest:
        return AnalysisRequest(
            image=self.image,
            variant_index=self.variant_index,
            prompt_override=self.prompt_override,
            model_override=self.model_override,
        )


class UploadRequest(BaseModel):
    """Request body for ``POST /api/upload``.

    Attributes:
        file: Data URI, URL or base64 payload to store.
        tags: Comma-separated tags.
        context: ``key=value`` pairs separated by ``|``.
    """

    model_config = ConfigDict(extra="ignore")

    file: str | None = Field(default=None, description="File payload to upload.")
    tags: str | None = Field(default=None, description="Comma-separated tags.")
    context: str | None = Field(default=None, description="key=value|key=value context.")


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str


class ModelsResponse(BaseModel):
    status: str = "success"
    models: list[dict[str, Any]]
    count: int
    recommended: list[dict[str, str]]
