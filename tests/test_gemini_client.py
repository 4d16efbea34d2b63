import asyncio
import base64
from types import SimpleNamespace

import pytest

from profoto.errors import StyleGenerationError
from profoto.variations import GeminiGenerator, SourceImage, get_generator
from profoto.variations.clients.gemini import first_image_bytes
from profoto.variations.styles import STYLE_CATALOG

STYLE = STYLE_CATALOG[1]
IMAGE = SourceImage(data=b"source", mime_type="image/webp")


def text_part(text):
    return SimpleNamespace(text=text, inline_data=None)


def image_part(data, mime_type="image/jpeg"):
    return SimpleNamespace(text=None, inline_data=SimpleNamespace(data=data, mime_type=mime_type))


def response(*parts):
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=list(parts)))])


class FakeModels:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.requests = []

    async def generate_content(self, model, contents, config=None):
        self.requests.append({"model": model, "contents": contents})
        if self.error is not None:
            raise self.error
        return self.reply


def fake_client(models):
    return SimpleNamespace(aio=SimpleNamespace(models=models))


def run(generator):
    return asyncio.run(generator.generate(IMAGE, "make it shine", STYLE))


def test_sends_text_and_image_in_one_request():
    models = FakeModels(reply=response(image_part(b"out")))
    generator = GeminiGenerator(client=fake_client(models), model="test-model")

    run(generator)

    assert len(models.requests) == 1
    request = models.requests[0]
    assert request["model"] == "test-model"
    text, inline = request["contents"]
    assert text.text == "make it shine"
    assert inline.inline_data.data == b"source"
    assert inline.inline_data.mime_type == "image/webp"


def test_first_image_part_wins_after_text():
    models = FakeModels(reply=response(
        text_part("here is your photo"),
        image_part(b"first"),
        image_part(b"second"),
    ))
    result = run(GeminiGenerator(client=fake_client(models)))

    assert result.style_name == STYLE.name
    assert result.image_data == "data:image/png;base64," + base64.b64encode(b"first").decode()


def test_output_is_relabelled_png():
    models = FakeModels(reply=response(image_part(b"jpeg-bytes", mime_type="image/jpeg")))
    result = run(GeminiGenerator(client=fake_client(models)))
    assert result.image_data.startswith("data:image/png;base64,")


def test_no_image_part_fails_for_that_style():
    models = FakeModels(reply=response(text_part("sorry, I cannot do that")))
    with pytest.raises(StyleGenerationError, match=f"no image produced for style {STYLE.name}"):
        run(GeminiGenerator(client=fake_client(models)))


def test_service_errors_propagate_unchanged():
    boom = RuntimeError("quota exceeded")
    models = FakeModels(error=boom)
    with pytest.raises(RuntimeError) as excinfo:
        run(GeminiGenerator(client=fake_client(models)))
    assert excinfo.value is boom
    assert len(models.requests) == 1


def test_first_image_bytes_handles_base64_strings_and_empty_responses():
    encoded = base64.b64encode(b"raw").decode()
    assert first_image_bytes(response(image_part(encoded))) == b"raw"
    assert first_image_bytes(SimpleNamespace(candidates=[])) is None
    assert first_image_bytes(SimpleNamespace(candidates=None)) is None
    assert first_image_bytes(response()) is None


def test_missing_api_key_is_reported(monkeypatch):
    monkeypatch.delenv(GeminiGenerator.ENV_API_KEY, raising=False)
    monkeypatch.delenv(GeminiGenerator.ENV_API_KEY_FALLBACK, raising=False)
    generator = GeminiGenerator()

    assert not generator.is_configured()
    assert generator.get_missing_config() == [GeminiGenerator.ENV_API_KEY]
    with pytest.raises(ValueError, match=GeminiGenerator.ENV_API_KEY):
        generator.client


def test_model_defaults_and_env_override(monkeypatch):
    monkeypatch.delenv(GeminiGenerator.ENV_MODEL, raising=False)
    assert GeminiGenerator(api_key="k").model == "gemini-2.5-flash-image"
    monkeypatch.setenv(GeminiGenerator.ENV_MODEL, "other-model")
    assert GeminiGenerator(api_key="k").model == "other-model"


def test_get_generator():
    assert isinstance(get_generator("Gemini"), GeminiGenerator)
    with pytest.raises(ValueError, match="Unknown provider"):
        get_generator("dall-e")
