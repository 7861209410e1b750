"""Tests for photolens.api.models — Pydantic request/response models.

Tests cover:
- camelCase aliases and snake_case names on AnalyzeRequest.
- Default values for optional fields.
- Conversion to the pipeline's AnalysisRequest.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from photolens.api.models import AnalyzeRequest, ModelsResponse, UploadRequest
from photolens.core.pipeline import AnalysisRequest


class TestAnalyzeRequest:
    """Test AnalyzeRequest Pydantic model."""

    def test_camel_case_keys(self):
        req = AnalyzeRequest.model_validate(
            {
                "image": "AAAA",
                "variantIndex": 3,
                "promptOverride": "Be brief.",
                "modelOverride": "gemini-2.5-flash",
            }
        )
        assert req.variant_index == 3
        assert req.prompt_override == "Be brief."
        assert req.model_override == "gemini-2.5-flash"

    def test_snake_case_keys(self):
        req = AnalyzeRequest.model_validate({"image": "AAAA", "variant_index": 2})
        assert req.variant_index == 2

    def test_defaults(self):
        """An empty body validates; the pipeline reports the missing image."""
        req = AnalyzeRequest.model_validate({})
        assert req.image is None
        assert req.variant_index == 0
        assert req.prompt_override is None
        assert req.model_override is None

    def test_negative_variant_rejected(self):
        with pytest.raises(ValidationError):
            AnalyzeRequest.model_validate({"image": "AAAA", "variantIndex": -1})

    def test_non_integer_variant_rejected(self):
        with pytest.raises(ValidationError):
            AnalyzeRequest.model_validate({"image": "AAAA", "variantIndex": "first"})

    def test_unknown_keys_ignored(self):
        req = AnalyzeRequest.model_validate({"image": "AAAA", "theme": "x"})
        assert not hasattr(req, "theme")

    def test_to_analysis_request(self):
        req = AnalyzeRequest.model_validate({"image": "AAAA", "variantIndex": 4})
        assert req.to_analysis_request() == AnalysisRequest(image="AAAA", variant_index=4)


class TestUploadRequest:
    def test_all_optional(self):
        req = UploadRequest.model_validate({})
        assert req.file is None
        assert req.tags is None
        assert req.context is None


class TestModelsResponse:
    def test_status_default(self):
        body = ModelsResponse(models=[], count=0, recommended=[])
        assert body.model_dump()["status"] == "success"
