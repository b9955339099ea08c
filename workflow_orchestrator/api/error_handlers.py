"""Exception handlers for the FastAPI app."""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from workflow_orchestrator.workflow_engine.errors import (
    AsyncStepExhaustedError,
    InvalidOrchestratorResultError,
    StepFailedError,
    StepTimeoutError,
    UnknownHandlerError,
    UnknownOrchestratorError,
    UnresolvedParameterError,
    WorkflowError,
)

LOGGER = logging.getLogger("workflow_orchestrator.api.errors")


def _error_body(exc: WorkflowError) -> Dict[str, Any]:
    body: Dict[str, Any] = {"detail": str(exc), "error": type(exc).__name__}
    if exc.step is not None:
        body["step"] = exc.step
    return body


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(UnknownOrchestratorError)
    async def unknown_orchestrator_handler(request: Request, exc: UnknownOrchestratorError) -> JSONResponse:  # noqa: WPS430
        return JSONResponse(status_code=404, content=_error_body(exc))

    @app.exception_handler(UnknownHandlerError)
    async def unknown_handler_handler(request: Request, exc: UnknownHandlerError) -> JSONResponse:  # noqa: WPS430
        return JSONResponse(status_code=404, content=_error_body(exc))

    @app.exception_handler(InvalidOrchestratorResultError)
    async def invalid_result_handler(request: Request, exc: InvalidOrchestratorResultError) -> JSONResponse:  # noqa: WPS430
        return JSONResponse(status_code=422, content=_error_body(exc))

    @app.exception_handler(UnresolvedParameterError)
    async def unresolved_parameter_handler(request: Request, exc: UnresolvedParameterError) -> JSONResponse:  # noqa: WPS430
        return JSONResponse(status_code=422, content=_error_body(exc))

    @app.exception_handler(StepTimeoutError)
    async def step_timeout_handler(request: Request, exc: StepTimeoutError) -> JSONResponse:  # noqa: WPS430
        return JSONResponse(status_code=504, content=_error_body(exc))

    @app.exception_handler(StepFailedError)
    async def step_failed_handler(request: Request, exc: StepFailedError) -> JSONResponse:  # noqa: WPS430
        LOGGER.error("workflow_step_failed", extra={"step": exc.step, "error": str(exc)})
        return JSONResponse(status_code=500, content=_error_body(exc))

    @app.exception_handler(AsyncStepExhaustedError)
    async def async_exhausted_handler(request: Request, exc: AsyncStepExhaustedError) -> JSONResponse:  # noqa: WPS430
        LOGGER.error(
            "async_step_exhausted",
            extra={"step": exc.step, "attempts": exc.attempts, "error": str(exc)},
        )
        body = _error_body(exc)
        body["attempts"] = exc.attempts
        return JSONResponse(status_code=500, content=body)

    @app.exception_handler(WorkflowError)
    async def workflow_error_handler(request: Request, exc: WorkflowError) -> JSONResponse:  # noqa: WPS430
        return JSONResponse(status_code=400, content=_error_body(exc))
