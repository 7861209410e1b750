"""Photolens - portrait photo analysis with schema-constrained Gemini output."""

__version__ = "0.1.0"

from photolens.core.config import PhotolensConfig, config
from photolens.core.pipeline import AnalysisPipeline, AnalysisRequest

__all__ = [
    "AnalysisPipeline",
    "AnalysisRequest",
    "PhotolensConfig",
    "config",
]
