"""Core analysis pipeline for Photolens.

Architecture Overview
---------------------
The pipeline runs in this order for each request:

1. **Access Gate** (access.py): origin allow/deny and CORS headers.
2. **Variant Selector** (variants.py): deterministic theme selection.
3. **Prompt Assembler** (prompt_builder.py): instructions plus response
   schema, both derived from the field table in schema.py.
4. **Generation Client** (generation.py): one Gemini round trip.
5. **Response Normalizer** (normalizer.py): JSON parsing, schema validation
   and token usage.

Failures at any stage are raised as the typed errors in errors.py.
Supporting modules: config.py (Pydantic Settings), images.py (request
image decoding), uploads.py (media-store relay) and pipeline.py (stage
orchestration).
"""

from photolens.core.config import PhotolensConfig, config
from photolens.core.pipeline import AnalysisPipeline, AnalysisRequest

__all__ = [
    "AnalysisPipeline",
    "AnalysisRequest",
    "PhotolensConfig",
    "config",
]
