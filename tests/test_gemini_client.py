"""
Unit tests for aicheck/integrations/gemini/client.py.

The genai client is replaced by a MagicMock whose async
`aio.models.generate_content` returns canned responses.
"""

import io
from unittest.mock import AsyncMock, MagicMock

import pytest
from google.genai import errors
from PIL import Image

from aicheck.config import settings
from aicheck.core.errors import ProviderError, ProviderUnavailableError
from aicheck.integrations.gemini.client import GeminiReasoningService, prepare_image
from aicheck.schemas.analysis import BinaryBlob
from tests.conftest import make_tiny_jpeg


def _service(response=None, error=None) -> tuple[GeminiReasoningService, AsyncMock]:
    fake_client = MagicMock()
    generate = AsyncMock(return_value=response, side_effect=error)
    fake_client.aio.models.generate_content = generate
    return GeminiReasoningService(api_key="unused", client=fake_client), generate


def _response(text):
    response = MagicMock()
    response.text = text
    response.usage_metadata.total_token_count = 42
    return response


async def test_reason_returns_text():
    service, generate = _service(_response('{"isAI": true, "confidence": 0.9}'))

    text = await service.reason("Is this AI?")

    assert text.startswith("{")
    kwargs = generate.call_args.kwargs
    assert kwargs["model"] == settings.gemini_model
    assert kwargs["contents"] == ["Is this AI?"]


async def test_reason_attaches_media_first():
    service, generate = _service(_response("ok"))
    blob = BinaryBlob(filename="a.jpg", data=make_tiny_jpeg(), mime_type="image/jpeg")

    await service.reason("prompt", media=blob)

    contents = generate.call_args.kwargs["contents"]
    assert len(contents) == 2
    assert contents[1] == "prompt"


async def test_empty_reply_is_provider_error():
    service, _ = _service(_response(""))
    with pytest.raises(ProviderError):
        await service.reason("prompt")


async def test_quota_error_is_unavailable():
    service, _ = _service(error=errors.APIError(429, {"error": {"message": "quota", "status": "RESOURCE_EXHAUSTED"}}))
    with pytest.raises(ProviderUnavailableError) as exc:
        await service.reason("prompt")
    assert exc.value.status == 429


async def test_server_error_is_provider_error():
    service, _ = _service(error=errors.APIError(500, {"error": {"message": "boom", "status": "INTERNAL"}}))
    with pytest.raises(ProviderError) as exc:
        await service.reason("prompt")
    assert not isinstance(exc.value, ProviderUnavailableError)


def test_prepare_image_downscales_and_converts(monkeypatch):
    monkeypatch.setattr(settings, "gemini_max_pixels", 100)
    buf = io.BytesIO()
    Image.new("RGBA", (40, 40), color=(1, 2, 3, 255)).save(buf, format="PNG")

    out = prepare_image(buf.getvalue())

    with Image.open(io.BytesIO(out)) as img:
        assert img.format == "JPEG"
        assert img.mode == "RGB"
        assert img.size[0] * img.size[1] <= 100
