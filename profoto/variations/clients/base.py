"""
Base Generator class for product variations.
"""
from dataclasses import dataclass
from typing import Optional

from ..datauri import SourceImage
from ..styles import StyleDescriptor


@dataclass
class GenerationResult:
    """One derived image for one style."""
    style_name: str
    image_data: str  # data:image/png;base64,...

    def to_dict(self) -> dict:
        return {"style_name": self.style_name, "image_data": self.image_data}


@dataclass
class StyleOutcome:
    """Settled outcome of one style's call: either a result or an error."""
    style: StyleDescriptor
    result: Optional[GenerationResult] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.result is not None


class BaseGenerator:
    """Abstract base class for image generators."""

    def is_configured(self) -> bool:
        return True

    def get_missing_config(self) -> list:
        return []

    async def generate(self, image: SourceImage, prompt: str, style: StyleDescriptor) -> GenerationResult:
        """
        Derive one image from the source image and an instruction.
        Must be implemented by subclasses.

        Args:
            image: Decoded source image
            prompt: Composed instruction text
            style: Style the instruction was composed for

        Returns:
            GenerationResult with a PNG-labelled data URI

        Raises:
            StyleGenerationError: if the service answered without an image
        """
        raise NotImplementedError("Subclasses must implement generate")
