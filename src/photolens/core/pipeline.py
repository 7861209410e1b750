"""End-to-end analysis of one submitted image.

:class:`AnalysisPipeline` wires the stages together::

    decode image -> select theme -> build prompt -> generate -> normalize

It holds no per-request state, so one instance serves concurrent requests.
Access control happens before the pipeline, in the API layer.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

from photolens.core.config import PhotolensConfig
from photolens.core.generation import GenerationClientBase, GenerationOptions
from photolens.core.images import decode_image
from photolens.core.normalizer import normalize
from photolens.core.prompt_builder import build_prompt
from photolens.core.schema import ANALYSIS_FIELDS
from photolens.core.variants import select_variant

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisRequest:
    """One analysis request, independent of the HTTP layer.

    Attributes:
        image: Base64 string or data URI.
        variant_index: Theme index; wraps around the catalog.
        prompt_override: Extra guidance appended to the instructions.
        model_override: Model identifier replacing the configured default.
    """

    image: str | None
    variant_index: int = 0
    prompt_override: str | None = None
    model_override: str | None = None


class AnalysisPipeline:
    """Runs the analysis stages for a request."""

    def __init__(self, client: GenerationClientBase, config: PhotolensConfig) -> None:
        self.client = client
        self.config = config

    def options_for(self, request: AnalysisRequest) -> GenerationOptions:
        model = (request.model_override or "").strip() or self.config.default_model
        return GenerationOptions(
            model=model,
            temperature=self.config.temperature,
            top_p=self.config.top_p,
        )

    async def run(self, request: AnalysisRequest) -> dict[str, Any]:
        """Analyse one image.

        Raises:
            InvalidInput: The image is missing or unreadable.  Raised before
                the generation client is called.
            UpstreamFailure: The model call failed.
            MalformedOutput: The reply could not be parsed or validated.
        """
        started = time.perf_counter()
        image = decode_image(request.image)
        variant = select_variant(request.variant_index)
        bundle = build_prompt(variant, ANALYSIS_FIELDS, extra_guidance=request.prompt_override)
        options = self.options_for(request)

        logger.info(
            f"Analyzing {image.mime_type} image with theme {variant.name!r} "
            f"(index {request.variant_index}) on {options.model}"
        )
        result = await self.client.generate(
            image.data,
            image.mime_type,
            bundle.instruction_text,
            bundle.schema_declaration,
            options,
        )
        report = normalize(
            result.raw_text,
            ANALYSIS_FIELDS,
            result.usage,
            strict=self.config.strict_validation,
        )
        logger.info(f"Analysis finished in {time.perf_counter() - started:.2f}s")
        return report
