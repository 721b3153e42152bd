"""Celery task definitions."""

from celery import Celery

from autotube.config import get_settings
from autotube.models.pipeline import PipelineStage
from autotube.models.request import PipelineRequest

settings = get_settings()

celery_app = Celery(
    "autotube",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
)


@celery_app.task(bind=True, name="autotube.run_pipeline")
def run_pipeline_task(self, request: dict) -> dict:
    """Celery task wrapping PipelineOrchestrator.run().

    Stage transitions are reported through the task state so callers can poll progress.
    """
    from autotube.pipeline.orchestrator import PipelineOrchestrator

    pipeline_request = PipelineRequest.model_validate(request)

    def on_stage(stage: PipelineStage) -> None:
        if self.request.id:
            self.update_state(state="PROGRESS", meta=stage.model_dump(mode="json", by_alias=True))

    response = PipelineOrchestrator().run(pipeline_request, listener=on_stage)
    return response.model_dump(mode="json", by_alias=True)
