"""
Error types raised while producing product photo variations.
"""


class GenerationError(Exception):
    """Base class for all variation generation failures."""


class ValidationError(GenerationError):
    """The request cannot be processed, e.g. no usable source image."""


class StyleGenerationError(GenerationError):
    """A single style failed. Absorbed by the orchestrator, never surfaced alone."""

    def __init__(self, style_name: str, message: str):
        super().__init__(message)
        self.style_name = style_name


class BatchFailureError(GenerationError):
    """No style in the batch produced an image."""
