"""Convenience facade wiring a registry, container, queue and engine together."""

from __future__ import annotations

import inspect
from typing import Any, Iterable, Mapping, Optional, Union

from workflow_orchestrator.core.config import OrchestratorSettings, get_settings
from workflow_orchestrator.queues import WorkflowQueue, get_workflow_queue
from workflow_orchestrator.workflow_engine.container import Container, SimpleContainer
from workflow_orchestrator.workflow_engine.engine import WorkflowEngine, WorkflowResult
from workflow_orchestrator.workflow_engine.listeners import EventListener
from workflow_orchestrator.workflow_engine.middleware import Middleware
from workflow_orchestrator.workflow_engine.registry import HandlerRegistry


class WorkflowOrchestrator:
    """Entry point for registering workflow classes and running them.

    ``with_queue``, ``with_middleware`` and ``with_event_listener`` return a
    new facade that shares this one's registry and container; the receiver is
    left unchanged.
    """

    def __init__(
        self,
        container: Optional[Container] = None,
        queue: Optional[WorkflowQueue] = None,
        middleware: Iterable[Middleware] = (),
        listeners: Iterable[EventListener] = (),
        *,
        registry: Optional[HandlerRegistry] = None,
        settings: Optional[OrchestratorSettings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._container = container if container is not None else SimpleContainer()
        self._registry = registry or HandlerRegistry()
        self._queue = queue if queue is not None else get_workflow_queue(self._settings)
        self._middleware = tuple(middleware)
        self._listeners = tuple(listeners)
        self._engine = WorkflowEngine(
            self._container,
            registry=self._registry,
            queue=self._queue,
            middleware=self._middleware,
            listeners=self._listeners,
            max_retries=self._settings.max_async_retries,
        )

    @classmethod
    def create(cls, settings: Optional[OrchestratorSettings] = None) -> "WorkflowOrchestrator":
        return cls(settings=settings)

    @property
    def engine(self) -> WorkflowEngine:
        return self._engine

    @property
    def queue(self) -> WorkflowQueue:
        return self._queue

    @property
    def registry(self) -> HandlerRegistry:
        return self._registry

    def register(self, target: Union[type, object]) -> "WorkflowOrchestrator":
        """Register decorated methods of ``target``; instances are bound in the container."""

        if not inspect.isclass(target) and isinstance(self._container, SimpleContainer):
            self._container.set(type(target), target)
        self._registry.register_class(target)
        return self

    def execute(
        self,
        channel: str,
        payload: Any,
        headers: Optional[Mapping[str, Any]] = None,
    ) -> WorkflowResult:
        return self._engine.execute(channel, payload, headers)

    def process_async_step(self, step: str, max_retries: Optional[int] = None) -> Optional[WorkflowResult]:
        return self._engine.process_async_step(step, max_retries)

    def with_queue(self, queue: WorkflowQueue) -> "WorkflowOrchestrator":
        return self._copy(queue=queue)

    def with_middleware(self, middleware: Middleware) -> "WorkflowOrchestrator":
        return self._copy(middleware=(*self._middleware, middleware))

    def with_event_listener(self, listener: EventListener) -> "WorkflowOrchestrator":
        return self._copy(listeners=(*self._listeners, listener))

    def _copy(self, **overrides: Any) -> "WorkflowOrchestrator":
        options = {
            "container": self._container,
            "queue": self._queue,
            "middleware": self._middleware,
            "listeners": self._listeners,
            "registry": self._registry,
            "settings": self._settings,
        }
        options.update(overrides)
        return WorkflowOrchestrator(**options)
