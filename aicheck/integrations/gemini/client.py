"""
Gemini reasoning client.

`GeminiReasoningService.reason` sends a prompt (plus optional media) to the
async Gemini API and returns the raw response text. Parsing lives in
`parsing.py` so the client stays a thin transport.
"""

import io
import asyncio
import logging
from typing import Optional

import pillow_heif
from PIL import Image
from google import genai
from google.genai import errors, types

from aicheck.config import settings
from aicheck.core.errors import ProviderError, ProviderUnavailableError
from aicheck.integrations.gemini.prompts import REASONING_SYSTEM_INSTRUCTION
from aicheck.schemas.analysis import BinaryBlob

# Uploaded images can be larger than PIL's decompression-bomb cap.
Image.MAX_IMAGE_PIXELS = None
pillow_heif.register_heif_opener()

logger = logging.getLogger(__name__)

PROVIDER = "gemini"
UNAVAILABLE_STATUS_CODES = (401, 403, 429, 503)


def _resize_if_needed(img: Image.Image) -> Image.Image:
    """Scale down to `gemini_max_pixels`, keeping the aspect ratio."""
    w, h = img.size
    pixels = w * h

    if pixels > settings.gemini_max_pixels:
        scale = (settings.gemini_max_pixels / pixels) ** 0.5
        return img.resize((int(w * scale), int(h * scale)), Image.Resampling.LANCZOS)

    return img


def prepare_image(data: bytes) -> bytes:
    """Decode, downscale and re-encode an image as RGB JPEG."""
    to_close = []
    try:
        img = Image.open(io.BytesIO(data))
        to_close.append(img)

        working = _resize_if_needed(img)
        if working is not img:
            to_close.append(working)

        if working.mode != "RGB":
            working = working.convert("RGB")
            to_close.append(working)

        buf = io.BytesIO()
        working.save(buf, format="JPEG", quality=settings.gemini_jpeg_quality)
        return buf.getvalue()
    finally:
        for obj in to_close:
            obj.close()


def media_part(media: BinaryBlob) -> types.Part:
    if media.mime_type.startswith("image/"):
        return types.Part.from_bytes(data=prepare_image(media.data), mime_type="image/jpeg")
    return types.Part.from_bytes(data=media.data, mime_type=media.mime_type)


class GeminiReasoningService:
    name = PROVIDER

    def __init__(self, api_key: str, model: str = settings.gemini_model, client: Optional[genai.Client] = None):
        self.model = model
        self.client = client or genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(
                timeout=settings.gemini_http_timeout_ms,
                retry_options=types.HttpRetryOptions(
                    attempts=settings.gemini_max_retries,
                    initial_delay=settings.gemini_retry_initial_delay,
                    max_delay=settings.gemini_retry_max_delay,
                    exp_base=settings.gemini_retry_exp_base,
                    http_status_codes=[408, 500, 502, 504],
                ),
            ),
        )

    async def reason(self, prompt: str, media: Optional[BinaryBlob] = None) -> str:
        contents: list = [prompt]
        if media is not None:
            part = await asyncio.to_thread(media_part, media)
            contents = [part, prompt]

        config = types.GenerateContentConfig(
            system_instruction=REASONING_SYSTEM_INSTRUCTION,
            temperature=settings.gemini_temperature,
            max_output_tokens=settings.gemini_max_output_tokens,
        )

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=contents,
                config=config,
            )
        except errors.APIError as e:
            if e.code in UNAVAILABLE_STATUS_CODES:
                raise ProviderUnavailableError(PROVIDER, str(e), status=e.code) from e
            raise ProviderError(PROVIDER, str(e), status=e.code) from e

        text = response.text
        if not text:
            raise ProviderError(PROVIDER, "Empty response")

        if getattr(response, "usage_metadata", None):
            logger.info(f"[GEMINI] tokens={response.usage_metadata.total_token_count} model={self.model}")
        return text
