"""Pytest configuration and shared fixtures."""

import base64
import json
from io import BytesIO
from typing import Callable, List, Union

import httpx
import pytest
from PIL import Image

from aki.core import CredentialResolver, ImageSynthesizer, PromptEnhancer
from aki.providers import OpenAIClient, StepFunClient
from aki.utils.config import Config


def make_image(width: int, height: int, mode: str = "RGB", color=(200, 120, 40)) -> Image.Image:
    if mode == "RGBA":
        color = (*color, 128)
    return Image.new(mode, (width, height), color)


def jpeg_bytes(width: int = 1, height: int = 1) -> bytes:
    buffer = BytesIO()
    make_image(width, height).save(buffer, format="JPEG")
    return buffer.getvalue()


class RecordingHandler:
    """MockTransport handler that records requests and replays a response."""

    def __init__(self, response: Union[httpx.Response, Callable[[httpx.Request], httpx.Response], Exception]):
        self.response = response
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.response, Exception):
            raise self.response
        if callable(self.response):
            return self.response(request)
        return self.response

    @property
    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def chat_response(content: str) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


def image_response(image_bytes: bytes) -> httpx.Response:
    b64 = base64.b64encode(image_bytes).decode("utf-8")
    return httpx.Response(200, json={"created": 1, "data": [{"b64_json": b64, "seed": 42}]})


@pytest.fixture
def sample_prompt():
    """Sample prompt for testing."""
    return "a cat"


@pytest.fixture
def tiny_jpeg():
    """Known 1x1 JPEG."""
    return jpeg_bytes(1, 1)


@pytest.fixture
def source_image():
    return make_image(640, 480)


@pytest.fixture
def config():
    return Config(require_all_credentials=True)


@pytest.fixture
def resolver():
    return CredentialResolver(
        environ={"OPENAI_API_KEY": "sk-test-openai", "STEP_API_KEY": "step-test-key"},
    )


@pytest.fixture
def make_enhancer() -> Callable[[RecordingHandler], PromptEnhancer]:
    def factory(handler: RecordingHandler) -> PromptEnhancer:
        client = OpenAIClient(api_key="sk-test-openai", transport=handler.transport())
        return PromptEnhancer(openai_client=client)
    return factory


@pytest.fixture
def make_synthesizer() -> Callable[[RecordingHandler], ImageSynthesizer]:
    def factory(handler: RecordingHandler) -> ImageSynthesizer:
        client = StepFunClient(api_key="step-test-key", transport=handler.transport())
        return ImageSynthesizer(stepfun_client=client)
    return factory
