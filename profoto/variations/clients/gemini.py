"""
Gemini Generator for product variations.
Uses Google Gemini image models through the google-genai SDK.

Required Environment Variables:
    GEMINI_API_KEY: Gemini API key (API_KEY is accepted as a fallback)
    GEMINI_IMAGE_MODEL: Model name (default: gemini-2.5-flash-image)
"""
import base64
import logging
import os
import time
from typing import Any, Optional

from google import genai
from google.genai import types

from ...errors import StyleGenerationError
from ..datauri import SourceImage, encode_data_uri
from ..styles import StyleDescriptor
from .base import BaseGenerator, GenerationResult

logger = logging.getLogger(__name__)


class GeminiGenerator(BaseGenerator):
    """Gemini image generator for background variations."""

    ENV_API_KEY = "GEMINI_API_KEY"
    ENV_API_KEY_FALLBACK = "API_KEY"
    ENV_MODEL = "GEMINI_IMAGE_MODEL"

    DEFAULT_MODEL = "gemini-2.5-flash-image"

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, client: Any = None):
        self.api_key = api_key or os.getenv(self.ENV_API_KEY) or os.getenv(self.ENV_API_KEY_FALLBACK)
        self.model = model or os.getenv(self.ENV_MODEL, self.DEFAULT_MODEL)
        self._client = client

    def is_configured(self) -> bool:
        """Check if a client was injected or an API key is available."""
        return self._client is not None or bool(self.api_key)

    def get_missing_config(self) -> list:
        """Return list of missing configuration variables."""
        if self.is_configured():
            return []
        return [self.ENV_API_KEY]

    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                missing = self.get_missing_config()
                raise ValueError(f"Missing required environment variables: {', '.join(missing)}")
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def generate(self, image: SourceImage, prompt: str, style: StyleDescriptor) -> GenerationResult:
        """Send the instruction and image as one multi-part request."""
        start_time = time.time()
        logger.info(f"Submitting Gemini request for style '{style.name}' (model {self.model})...")

        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=[
                types.Part.from_text(text=prompt),
                types.Part.from_bytes(data=image.data, mime_type=image.mime_type),
            ],
        )

        latency = time.time() - start_time
        data = first_image_bytes(response)
        if data is None:
            logger.warning(f"Gemini returned no image for style '{style.name}' after {latency:.2f}s")
            raise StyleGenerationError(style.name, f"no image produced for style {style.name}")

        logger.info(f"Style '{style.name}' done in {latency:.2f}s ({len(data)} bytes)")
        return GenerationResult(style_name=style.name, image_data=encode_data_uri(data))


def first_image_bytes(response) -> Optional[bytes]:
    """
    Return the bytes of the first content part carrying inline image data.

    Text commentary and any later image parts are ignored.
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None

    content = getattr(candidates[0], "content", None)
    for part in getattr(content, "parts", None) or []:
        inline_data = getattr(part, "inline_data", None)
        if inline_data and inline_data.data:
            data = inline_data.data
            if isinstance(data, str):
                data = base64.b64decode(data)
            return data
    return None
