"""Error handlers mapping failures onto the pipeline API error bodies."""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from autotube.models.errors import (
    AutotubeError,
    InvalidRequestResponse,
    PipelineFailedResponse,
    ValidationError,
)

logger = logging.getLogger(__name__)

ROOT_FIELD = "_root"


def flatten_validation_errors(errors: list[dict]) -> dict[str, list[str]]:
    """Group validation messages by top-level body field."""
    details: dict[str, list[str]] = {}
    for err in errors:
        loc = list(err.get("loc", ()))
        if loc and loc[0] == "body":
            loc = loc[1:]
        field = loc[0] if loc and isinstance(loc[0], str) else ROOT_FIELD
        details.setdefault(field, []).append(err.get("msg", "Invalid value"))
    return details


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Reject malformed bodies with a 400 and a field-level error map."""
    response = InvalidRequestResponse(details=flatten_validation_errors(exc.errors()))
    logger.info("Rejected %s %s: %s", request.method, request.url.path, response.details)
    return JSONResponse(status_code=400, content=response.model_dump())


async def autotube_error_handler(request: Request, exc: AutotubeError) -> JSONResponse:
    """Handle AutotubeError exceptions."""
    if isinstance(exc, ValidationError):
        response = InvalidRequestResponse(details=exc.details or {ROOT_FIELD: [exc.message]})
        return JSONResponse(status_code=400, content=response.model_dump())

    logger.error("Pipeline failed: %s", exc.message, exc_info=exc)
    return JSONResponse(
        status_code=500, content=PipelineFailedResponse.from_exception(exc).model_dump()
    )
