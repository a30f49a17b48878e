"""
Request validation, run before any pipeline stage.

Every violation raises `ValidationError`; nothing else in the pipeline is
allowed to reject a request.

Image payloads are opened with the PIL decompression-bomb cap in force.
Note: aicheck/integrations/gemini/client.py lifts that cap for its own
resizing, after validation has already passed.
"""

import io
import os
import logging
from typing import Union

import pillow_heif
from PIL import Image

from aicheck.config import settings
from aicheck.core.errors import ValidationError
from aicheck.schemas.analysis import AnalysisRequest, BinaryBlob, ContentKind

logger = logging.getLogger(__name__)

# HEIC/HEIF uploads are opened through the pillow-heif plugin.
pillow_heif.register_heif_opener()

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif", ".heic", ".heif", ".tiff", ".tif", ".bmp"}
VIDEO_EXTENSIONS = {".mp4", ".mov", ".avi", ".mkv", ".webm"}
TEXT_DOCUMENT_EXTENSIONS = {".txt", ".md"}
DOCUMENT_EXTENSIONS = {".pdf", ".doc", ".docx", ".rtf", ".odt"} | TEXT_DOCUMENT_EXTENSIONS

_EXTENSIONS = {
    ContentKind.IMAGE: IMAGE_EXTENSIONS,
    ContentKind.VIDEO: VIDEO_EXTENSIONS,
    ContentKind.DOCUMENT: DOCUMENT_EXTENSIONS,
}

_MIME_PREFIXES = {
    ContentKind.IMAGE: ("image/",),
    ContentKind.VIDEO: ("video/",),
    ContentKind.DOCUMENT: ("application/pdf", "application/msword", "application/vnd.", "text/"),
}


def _max_bytes(kind: ContentKind) -> int:
    return {
        ContentKind.IMAGE: settings.max_image_bytes,
        ContentKind.VIDEO: settings.max_video_bytes,
        ContentKind.DOCUMENT: settings.max_document_bytes,
    }[kind]


def validate_text(text: str) -> str:
    stripped = text.strip()
    if len(stripped) < settings.text_min_length:
        raise ValidationError(
            f"Content too short. At least {settings.text_min_length} characters are required."
        )
    if len(stripped) > settings.text_max_length:
        raise ValidationError(
            f"Content too long. At most {settings.text_max_length} characters are allowed."
        )
    return stripped


def _check_image_integrity(blob: BinaryBlob) -> None:
    previous_cap = Image.MAX_IMAGE_PIXELS
    Image.MAX_IMAGE_PIXELS = settings.gemini_max_pixels * 16
    try:
        with Image.open(io.BytesIO(blob.data)) as img:
            img.verify()
    except Exception as e:
        logger.warning(f"[VALIDATION] Corrupted or disguised image ({blob.filename}): {e}")
        raise ValidationError("Invalid image content or format mismatch.")
    finally:
        Image.MAX_IMAGE_PIXELS = previous_cap


def validate_blob(blob: BinaryBlob, kind: ContentKind) -> None:
    if kind == ContentKind.TEXT:
        raise ValidationError("Text analysis expects a string, not a file.")

    if blob.size == 0:
        raise ValidationError("Uploaded file is empty.")

    limit = _max_bytes(kind)
    if blob.size > limit:
        raise ValidationError(f"File too large. Max {limit // 1024 // 1024}MB allowed for {kind.value}.")

    ext = os.path.splitext(blob.filename)[1].lower()
    mime_ok = blob.mime_type.startswith(_MIME_PREFIXES[kind])
    if ext not in _EXTENSIONS[kind] and not mime_ok:
        raise ValidationError(f"Unsupported {kind.value} format.", field="filename")

    if kind == ContentKind.IMAGE:
        _check_image_integrity(blob)


def is_text_document(blob: BinaryBlob, kind: ContentKind) -> bool:
    if kind != ContentKind.DOCUMENT:
        return False
    ext = os.path.splitext(blob.filename)[1].lower()
    return blob.mime_type.startswith("text/") or ext in TEXT_DOCUMENT_EXTENSIONS


def decode_text_document(blob: BinaryBlob) -> str:
    """Decode a plain-text or markdown upload and validate it as text."""
    try:
        text = blob.data.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.warning(f"[VALIDATION] Text document is not UTF-8 ({blob.filename})")
        raise ValidationError("Text document must be UTF-8 encoded.", field="filename")
    return validate_text(text)


def validate_request(request: AnalysisRequest) -> Union[str, BinaryBlob]:
    """
    Raise ValidationError if the request cannot be analyzed.

    Returns the content the stages should see: stripped text, the decoded
    text of a plain-text document, or the upload itself.
    """
    if not isinstance(request.kind, ContentKind):
        raise ValidationError(f"Unsupported content kind: {request.kind}", field="kind")

    if isinstance(request.content, BinaryBlob):
        validate_blob(request.content, request.kind)
        if is_text_document(request.content, request.kind):
            return decode_text_document(request.content)
        return request.content

    if request.kind in (ContentKind.IMAGE, ContentKind.VIDEO):
        raise ValidationError(f"{request.kind.value.capitalize()} analysis requires a file upload.")

    return validate_text(request.content)
