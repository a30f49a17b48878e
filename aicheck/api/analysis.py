"""
Analysis routes: /classify, /verify, /stats

/classify and /verify accept either a JSON body
{ "content": "...", "kind": "text" } or form data with a 'file' or
'content' field (plus an optional 'kind'; for files it is guessed from the
MIME type otherwise).

Only request validation fails a call (422). Provider outages and timeouts
are reported inside the returned body, on the stage that hit them.
"""

import json
import logging
from typing import Union

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import UploadFile

from aicheck.core.dependencies import get_orchestrator
from aicheck.core.errors import ValidationError
from aicheck.detection.pipeline import PipelineOrchestrator
from aicheck.schemas.analysis import AnalysisRequest, AnalysisResult, BinaryBlob, ClassifyRequest, ContentKind
from aicheck.schemas.verification import VerificationReport

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Analysis"])


def _guess_kind(mime_type: str) -> ContentKind:
    if mime_type.startswith("image/"):
        return ContentKind.IMAGE
    if mime_type.startswith("video/"):
        return ContentKind.VIDEO
    return ContentKind.DOCUMENT


def _parse_kind(value, default: ContentKind) -> ContentKind:
    if not value:
        return default
    try:
        return ContentKind(str(value).lower())
    except ValueError:
        raise HTTPException(status_code=422, detail={"field": "kind", "message": f"Unsupported content kind: {value}"})


async def read_content(request: Request) -> tuple[Union[str, BinaryBlob], ContentKind, dict]:
    """Pull (content, kind, options) out of a JSON or multipart request."""
    content_type = request.headers.get("content-type", "")

    if "application/json" in content_type:
        try:
            body = ClassifyRequest.model_validate(await request.json())
        except json.JSONDecodeError:
            raise HTTPException(status_code=400, detail="Invalid JSON body")
        except PydanticValidationError as e:
            raise HTTPException(status_code=422, detail=e.errors(include_url=False))
        return body.content, body.kind, body.options

    if "multipart/form-data" in content_type or "application/x-www-form-urlencoded" in content_type:
        form = await request.form()
        file_obj = form.get("file")
        text = form.get("content")

        if isinstance(file_obj, UploadFile):
            data = await file_obj.read()
            mime_type = file_obj.content_type or "application/octet-stream"
            blob = BinaryBlob(filename=file_obj.filename or "uploaded_file", data=data, mime_type=mime_type)
            return blob, _parse_kind(form.get("kind"), _guess_kind(mime_type)), {}
        if isinstance(text, str):
            return text, _parse_kind(form.get("kind"), ContentKind.TEXT), {}
        raise HTTPException(status_code=400, detail="Must provide 'file' or 'content' in form data")

    raise HTTPException(
        status_code=415,
        detail="Unsupported Media Type. Use multipart/form-data or application/json",
    )


def _rejected(e: ValidationError) -> HTTPException:
    logger.info(f"[API] Rejected request ({e.field}): {e.message}")
    return HTTPException(status_code=422, detail={"field": e.field, "message": e.message})


@router.post("/classify", response_model=AnalysisResult)
async def classify(request: Request, orchestrator: PipelineOrchestrator = Depends(get_orchestrator)):
    """Decide whether content is AI-generated or human-authored."""
    content, kind, options = await read_content(request)
    try:
        return await orchestrator.run(AnalysisRequest(content=content, kind=kind, options=options))
    except ValidationError as e:
        raise _rejected(e)


@router.post("/verify", response_model=VerificationReport)
async def verify(request: Request, orchestrator: PipelineOrchestrator = Depends(get_orchestrator)):
    """Score originality and credibility against web sources."""
    content, kind, _ = await read_content(request)
    try:
        return await orchestrator.verify(content, kind)
    except ValidationError as e:
        raise _rejected(e)


@router.get("/stats")
async def stats(orchestrator: PipelineOrchestrator = Depends(get_orchestrator)):
    body = {"monitoring": orchestrator.monitor.stats() if orchestrator.monitor else None, "cache": {}}
    for cache in (orchestrator.cache, orchestrator.verification_cache):
        if cache is not None:
            body["cache"][cache.namespace] = cache.stats()
    return body
