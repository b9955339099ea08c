"""Synchronous workflow engine with queue-backed async steps."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Optional, Tuple, Union

from workflow_orchestrator.workflow_engine.container import Container
from workflow_orchestrator.workflow_engine.errors import (
    AsyncStepExhaustedError,
    InvalidOrchestratorResultError,
    StepFailedError,
    StepTimeoutError,
    UnknownHandlerError,
    UnknownOrchestratorError,
    UnresolvedParameterError,
)
from workflow_orchestrator.workflow_engine.listeners import EventListener
from workflow_orchestrator.workflow_engine.message import WorkflowMessage
from workflow_orchestrator.workflow_engine.middleware import Middleware, run_chain
from workflow_orchestrator.workflow_engine.registry import HandlerDescriptor, HandlerRegistry
from workflow_orchestrator.workflow_engine.resolution import resolve_arguments

if TYPE_CHECKING:
    from workflow_orchestrator.queues.base import WorkflowQueue

LOGGER = logging.getLogger("workflow_orchestrator.workflow_engine.engine")

RETRY_ATTEMPT_HEADER = "_retry_attempt"
DEFAULT_MAX_RETRIES = 3


@dataclass(frozen=True)
class Completed:
    """Every step ran; ``payload`` is the final payload."""

    payload: Any

    @property
    def is_suspended(self) -> bool:
        return False


@dataclass(frozen=True)
class Suspended:
    """The run reached an async step and was pushed onto ``queue``."""

    message_id: str
    queue: str

    @property
    def is_suspended(self) -> bool:
        return True


WorkflowResult = Union[Completed, Suspended]

_NOT_RERAISED_AS_STEP_FAILURE = (StepTimeoutError, UnresolvedParameterError)
_RETRYABLE = (StepFailedError, StepTimeoutError)


class WorkflowEngine:
    """Resolves orchestrators and routes messages through step handlers.

    Collaborators are fixed at construction; build a new engine to use a
    different queue, middleware or listener set.
    """

    def __init__(
        self,
        container: Container,
        registry: Optional[HandlerRegistry] = None,
        queue: Optional["WorkflowQueue"] = None,
        middleware: Iterable[Middleware] = (),
        listeners: Iterable[EventListener] = (),
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> None:
        if queue is None:
            from workflow_orchestrator.queues.memory import InMemoryQueue

            queue = InMemoryQueue()
        self._container = container
        self._registry = registry or HandlerRegistry()
        self._queue = queue
        self._middleware: Tuple[Middleware, ...] = tuple(middleware)
        self._listeners: Tuple[EventListener, ...] = tuple(listeners)
        self._max_retries = max_retries

    @property
    def registry(self) -> HandlerRegistry:
        return self._registry

    @property
    def queue(self) -> "WorkflowQueue":
        return self._queue

    @property
    def container(self) -> Container:
        return self._container

    def register(self, target: Union[type, object]) -> "WorkflowEngine":
        self._registry.register_class(target)
        return self

    def execute(
        self,
        channel: str,
        payload: Any,
        headers: Optional[Mapping[str, Any]] = None,
    ) -> WorkflowResult:
        """Ask the channel's orchestrator for steps and run them."""

        if not self._registry.has_orchestrator(channel):
            raise UnknownOrchestratorError(channel)

        descriptor = self._registry.get_orchestrator(channel)
        instance = self._container.get(descriptor.target)
        message = WorkflowMessage(payload=payload, headers=headers or {})

        steps = self._invoke(instance, descriptor.method, payload, message)
        if not isinstance(steps, (list, tuple)) or not all(isinstance(step, str) for step in steps):
            raise InvalidOrchestratorResultError(channel, steps)

        LOGGER.info(
            "workflow_started",
            extra={"channel": channel, "message_id": message.id, "steps": list(steps)},
        )
        return self.process_workflow(message.with_steps(steps))

    def process_workflow(self, message: WorkflowMessage) -> WorkflowResult:
        """Apply middleware once, then run steps until done or suspended."""

        message = run_chain(self._middleware, 0, message)

        while message.has_more_steps():
            step = message.next_step
            message = message.without_first_step()

            if not self._registry.has_handler(step):
                raise UnknownHandlerError(step)

            descriptor = self._registry.get_handler(step)
            if descriptor.is_async:
                self._queue.push(step, message)
                LOGGER.info(
                    "workflow_suspended",
                    extra={
                        "step": step,
                        "message_id": message.id,
                        "remaining_steps": list(message.steps),
                    },
                )
                return Suspended(message_id=message.id, queue=step)

            message = self.execute_step(step, message)

        LOGGER.info("workflow_completed", extra={"message_id": message.id})
        return Completed(payload=message.payload)

    def execute_step(self, step: str, message: WorkflowMessage) -> WorkflowMessage:
        """Run one handler and return the message carrying its result."""

        descriptor = self._registry.get_handler(step)
        instance = self._container.get(descriptor.target)

        for listener in self._listeners:
            listener.on_step_started(step, message)

        started = time.perf_counter()
        try:
            result = self._invoke(instance, descriptor.method, message.payload, message, step=step)
        except _NOT_RERAISED_AS_STEP_FAILURE as exc:
            self._notify_failed(step, message, exc, time.perf_counter() - started)
            raise
        except Exception as exc:
            self._notify_failed(step, message, exc, time.perf_counter() - started)
            raise StepFailedError(step, exc) from exc

        duration = time.perf_counter() - started
        if descriptor.timeout and duration > descriptor.timeout:
            timeout_error = StepTimeoutError(step, descriptor.timeout, duration)
            self._notify_failed(step, message, timeout_error, duration)
            raise timeout_error

        message = self._apply_result(descriptor, message, result)

        for listener in self._listeners:
            listener.on_step_completed(step, message, duration)
        return message

    def process_async_step(self, step: str, max_retries: Optional[int] = None) -> Optional[WorkflowResult]:
        """Take one message from ``step``'s queue and run it.

        Returns ``None`` when the queue is empty or the message was re-queued
        for another attempt. Only step failures and timeouts are retried;
        failures past ``max_retries`` raise ``AsyncStepExhaustedError``. Other
        workflow errors (unknown handler, unresolved parameter, encoding)
        propagate at once and the popped message is not re-queued.
        """

        if max_retries is None:
            max_retries = self._max_retries

        message = self._queue.pop(step)
        if message is None:
            return None

        attempt = int(message.get_header(RETRY_ATTEMPT_HEADER, 0))

        try:
            processed = self.execute_step(step, message)
            if processed.has_more_steps():
                return self.process_workflow(processed)
        except _RETRYABLE as exc:
            if attempt < max_retries:
                self._queue.push(step, message.with_header(RETRY_ATTEMPT_HEADER, attempt + 1))
                LOGGER.warning(
                    "async_step_requeued",
                    extra={
                        "step": step,
                        "message_id": message.id,
                        "attempt": attempt + 1,
                        "error": str(exc),
                    },
                )
                return None

            LOGGER.error(
                "async_step_exhausted",
                extra={"step": step, "message_id": message.id, "attempts": attempt + 1},
            )
            raise AsyncStepExhaustedError(step, attempt + 1, exc) from exc
        except Exception as exc:
            LOGGER.error(
                "async_step_aborted",
                extra={
                    "step": step,
                    "message_id": message.id,
                    "attempt": attempt,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )
            raise

        return Completed(payload=processed.payload)

    def _invoke(
        self,
        instance: Any,
        method: str,
        payload: Any,
        message: WorkflowMessage,
        *,
        step: Optional[str] = None,
    ) -> Any:
        function = getattr(type(instance), method)
        args, kwargs = resolve_arguments(function, payload, self._container, message, step=step)
        return getattr(instance, method)(*args, **kwargs)

    @staticmethod
    def _apply_result(descriptor: HandlerDescriptor, message: WorkflowMessage, result: Any) -> WorkflowMessage:
        if descriptor.returns_headers:
            return message.with_headers(result if isinstance(result, Mapping) else {})
        return message.with_payload(result)

    def _notify_failed(self, step: str, message: WorkflowMessage, error: BaseException, duration: float) -> None:
        for listener in self._listeners:
            listener.on_step_failed(step, message, error, duration)
