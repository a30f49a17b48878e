"""
System / health routes.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from aicheck.core.dependencies import get_orchestrator
from aicheck.detection.pipeline import PipelineOrchestrator
from aicheck.integrations import firebase, redis_client

router = APIRouter(tags=["System"])


@router.get("/health")
async def health(orchestrator: PipelineOrchestrator = Depends(get_orchestrator)):
    return {
        "status": "healthy",
        "services": {
            "reasoning": orchestrator.reasoning is not None,
            "classifier": orchestrator.classifier is not None,
            "search": orchestrator.search is not None,
            "redis": redis_client.client is not None,
            "firestore": firebase.db is not None,
        },
    }


@router.get("/robots.txt", response_class=PlainTextResponse)
def robots():
    return "User-agent: *\nDisallow: /"
