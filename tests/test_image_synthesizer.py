"""Tests for image-to-image synthesis."""

import base64
from io import BytesIO

import httpx
import pytest
from PIL import Image

from aki.core import ImageSynthesizer, image_synthesizer
from aki.models.schemas import GeneratedImage
from aki.providers import StepFunClient
from aki.utils.config import SynthesisConfig
from aki.utils.errors import ImageConversionError, MalformedResponseError, TransportError
from aki.utils.images import JPEG_DATA_URI_PREFIX, base64_to_bytes, decode_image
from conftest import RecordingHandler, image_response, jpeg_bytes, make_image


@pytest.mark.asyncio
async def test_synthesize_decodes_known_fixture(make_synthesizer, source_image, tiny_jpeg):
    synthesizer = make_synthesizer(RecordingHandler(image_response(tiny_jpeg)))

    async with synthesizer.client:
        generated = await synthesizer.synthesize(source_image, "a watercolor cat")

    assert isinstance(generated, GeneratedImage)
    assert (generated.width, generated.height) == (1, 1)
    assert generated.image_bytes == tiny_jpeg
    assert generated.model_name == "step-1x-medium"
    assert generated.prompt_used == "a watercolor cat"


@pytest.mark.asyncio
async def test_synthesize_request_envelope(make_synthesizer, source_image, tiny_jpeg):
    handler = RecordingHandler(image_response(tiny_jpeg))
    synthesizer = make_synthesizer(handler)

    async with synthesizer.client:
        await synthesizer.synthesize(source_image, "a watercolor cat")

    request = handler.requests[0]
    assert str(request.url) == "https://api.stepfun.com/v1/images/image2image"
    assert request.headers["Authorization"] == "Bearer step-test-key"

    body = handler.last_json
    assert set(body) == {"model", "prompt", "source_url", "seed", "source_weight", "response_format"}
    assert body["model"] == "step-1x-medium"
    assert body["prompt"] == "a watercolor cat"
    assert body["seed"] == 42
    assert body["source_weight"] == 0.7
    assert body["response_format"] == "b64_json"
    assert body["source_url"].startswith(JPEG_DATA_URI_PREFIX)
    assert decode_image(base64_to_bytes(body["source_url"])).size == (640, 480)


@pytest.mark.asyncio
async def test_synthesize_downscales_large_source(make_synthesizer, tiny_jpeg):
    handler = RecordingHandler(image_response(tiny_jpeg))
    synthesizer = make_synthesizer(handler)

    async with synthesizer.client:
        await synthesizer.synthesize(make_image(4096, 2048), "wide shot")

    sent = decode_image(base64_to_bytes(handler.last_json["source_url"]))
    assert sent.size == (2048, 1024)


@pytest.mark.asyncio
async def test_synthesize_transport_failure(make_synthesizer, source_image):
    handler = RecordingHandler(httpx.ConnectError("network is unreachable"))
    synthesizer = make_synthesizer(handler)

    async with synthesizer.client:
        with pytest.raises(TransportError) as exc_info:
            await synthesizer.synthesize(source_image, "a cat")

    assert exc_info.value.provider == "stepfun"
    assert isinstance(exc_info.value.cause, httpx.ConnectError)


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [
    {"data": []},
    {"images": []},
    {"data": [{"url": "https://example.com/x.jpg"}]},
    {"data": [{"b64_json": ""}]},
    {"data": [{"b64_json": "%%%not-base64%%%"}]},
    {"data": [{"b64_json": base64.b64encode(b"definitely not an image").decode()}]},
])
async def test_synthesize_malformed_responses(make_synthesizer, source_image, payload):
    synthesizer = make_synthesizer(RecordingHandler(httpx.Response(200, json=payload)))

    async with synthesizer.client:
        with pytest.raises(MalformedResponseError):
            await synthesizer.synthesize(source_image, "a cat")


@pytest.mark.asyncio
async def test_synthesize_empty_body(make_synthesizer, source_image):
    synthesizer = make_synthesizer(RecordingHandler(httpx.Response(200)))

    async with synthesizer.client:
        with pytest.raises(MalformedResponseError):
            await synthesizer.synthesize(source_image, "a cat")


@pytest.mark.asyncio
async def test_encode_failure_skips_network(make_synthesizer, monkeypatch):
    handler = RecordingHandler(image_response(jpeg_bytes()))
    synthesizer = make_synthesizer(handler)
    image = make_image(16, 16)

    def broken_save(*args, **kwargs):
        raise OSError("encoder missing")

    monkeypatch.setattr(image, "save", broken_save)

    async with synthesizer.client:
        with pytest.raises(ImageConversionError):
            await synthesizer.synthesize(image, "a cat")

    assert handler.requests == []


@pytest.mark.asyncio
async def test_resize_failure_still_sends_original(make_synthesizer, monkeypatch, tiny_jpeg):
    handler = RecordingHandler(image_response(tiny_jpeg))
    synthesizer = make_synthesizer(handler)
    image = make_image(2100, 100)

    def broken_resize(*args, **kwargs):
        raise OSError("resampler unavailable")

    monkeypatch.setattr(image, "resize", broken_resize)

    async with synthesizer.client:
        generated = await synthesizer.synthesize(image, "a cat")

    assert generated.width == 1
    sent = decode_image(base64_to_bytes(handler.last_json["source_url"]))
    assert sent.size == (2100, 100)


def png_bytes(width: int, height: int) -> bytes:
    buffer = BytesIO()
    make_image(width, height).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.mark.asyncio
async def test_oversized_generated_image_is_malformed(make_synthesizer, source_image, monkeypatch):
    synthesizer = make_synthesizer(RecordingHandler(image_response(png_bytes(64, 64))))
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)

    async with synthesizer.client:
        with pytest.raises(MalformedResponseError, match="undecodable image"):
            await synthesizer.synthesize(source_image, "a cat")


@pytest.mark.asyncio
async def test_truncated_generated_image_is_malformed(make_synthesizer, source_image):
    synthesizer = make_synthesizer(RecordingHandler(image_response(png_bytes(64, 64)[:60])))

    async with synthesizer.client:
        with pytest.raises(MalformedResponseError):
            await synthesizer.synthesize(source_image, "a cat")


@pytest.mark.asyncio
async def test_large_payload_warns_and_still_sends(source_image, tiny_jpeg, monkeypatch):
    handler = RecordingHandler(image_response(tiny_jpeg))
    client = StepFunClient(api_key="step-test-key", transport=handler.transport())
    synthesizer = ImageSynthesizer(client, SynthesisConfig(max_encoded_mb=0.0001))
    warnings = []
    monkeypatch.setattr(
        image_synthesizer.logger, "warning",
        lambda message, *args, **kwargs: warnings.append((message, kwargs.get("extra"))),
    )

    async with client:
        generated = await synthesizer.synthesize(source_image, "a cat")

    assert generated.width == 1
    assert len(handler.requests) == 1
    assert len(warnings) == 1
    message, extra = warnings[0]
    assert "above 0.0001MB" in message
    assert extra["encoded_mb"] > 0.0001
