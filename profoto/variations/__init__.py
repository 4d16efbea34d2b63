"""
Product variations module
Renders a product photo in every catalog style with an AI image model.
"""
from .clients import BaseGenerator, GeminiGenerator, GenerationResult, StyleOutcome, get_generator
from .datauri import SourceImage, decode_source_image, encode_data_uri, strip_data_uri
from .orchestrator import BatchOutcome, VariationOrchestrator
from .prompts import compose_prompt
from .styles import STYLE_CATALOG, StyleDescriptor

__all__ = [
    "BaseGenerator",
    "BatchOutcome",
    "GeminiGenerator",
    "GenerationResult",
    "STYLE_CATALOG",
    "SourceImage",
    "StyleDescriptor",
    "StyleOutcome",
    "VariationOrchestrator",
    "compose_prompt",
    "decode_source_image",
    "encode_data_uri",
    "get_generator",
    "strip_data_uri",
]
