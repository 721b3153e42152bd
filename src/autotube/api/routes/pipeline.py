"""Pipeline endpoints."""

import logging

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from autotube.api.dependencies import get_orchestrator
from autotube.models.errors import AutotubeError, OrchestrationError
from autotube.models.pipeline import PipelineResponse, PipelineStage, build_idle_stages
from autotube.models.request import PipelineRequest
from autotube.pipeline.orchestrator import PipelineOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["pipeline"])


@router.post("/pipeline", response_model=PipelineResponse, response_model_by_alias=True)
async def run_pipeline(
    request: PipelineRequest,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
):
    """Run the full script-to-video pipeline and return stage status and assets."""
    try:
        return await run_in_threadpool(orchestrator.run, request)
    except AutotubeError:
        raise
    except Exception as e:
        logger.exception("Unhandled error while running pipeline")
        raise OrchestrationError(str(e) or "Unknown error") from e


@router.get("/pipeline/stages", response_model=list[PipelineStage])
async def list_stages():
    """The idle stage list shown before any run."""
    return build_idle_stages(with_descriptions=True)
