import asyncio
import base64
import pytest

from profoto.errors import StyleGenerationError
from profoto.variations import BaseGenerator, GenerationResult, encode_data_uri

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image"
SOURCE_BYTES = b"\xff\xd8\xff\xe0fake-jpeg"
SOURCE_DATA_URI = "data:image/jpeg;base64," + base64.b64encode(SOURCE_BYTES).decode("ascii")


class FakeGenerator(BaseGenerator):
    """
    Generator double. ``failures`` maps style names to the exception raised
    for that style, ``delays`` maps style names to a sleep in seconds.
    """

    def __init__(self, failures=None, delays=None, gate=None):
        self.failures = failures or {}
        self.delays = delays or {}
        self.gate = gate
        self.calls = []

    async def generate(self, image, prompt, style):
        self.calls.append((image, prompt, style.name))
        if self.gate is not None:
            await self.gate.wait()
        if style.name in self.delays:
            await asyncio.sleep(self.delays[style.name])
        if style.name in self.failures:
            raise self.failures[style.name]
        return GenerationResult(style_name=style.name, image_data=encode_data_uri(PNG_BYTES))


def no_image(name):
    return StyleGenerationError(name, f"no image produced for style {name}")


@pytest.fixture
def source_data_uri():
    return SOURCE_DATA_URI


@pytest.fixture
def fake_generator():
    return FakeGenerator()
