"""Error taxonomy raised by the workflow engine."""

from __future__ import annotations

from typing import Optional


class WorkflowError(Exception):
    """Base class for workflow engine errors.

    ``step`` names the failing step when one is known. The wrapped cause, if
    any, is available through ``__cause__`` (errors are raised ``from`` it).
    """

    def __init__(self, message: str = "", *, step: Optional[str] = None) -> None:
        super().__init__(message)
        self.step = step

    @property
    def cause(self) -> Optional[BaseException]:
        return self.__cause__


class UnknownOrchestratorError(WorkflowError):
    """Raised when no orchestrator is registered for a channel."""

    def __init__(self, channel: str) -> None:
        super().__init__(f"No orchestrator registered for channel: {channel}")
        self.channel = channel


class UnknownHandlerError(WorkflowError):
    """Raised when no handler is registered for a step."""

    def __init__(self, channel: str) -> None:
        super().__init__(f"No handler registered for step: {channel}", step=channel)
        self.channel = channel


class InvalidOrchestratorResultError(WorkflowError):
    """Raised when an orchestrator returns something other than a list of step names."""

    def __init__(self, channel: str, result: object) -> None:
        super().__init__(
            f"Orchestrator for channel '{channel}' must return a list of step names, "
            f"got {type(result).__name__}"
        )
        self.channel = channel


class UnresolvedParameterError(WorkflowError):
    """Raised when a typed parameter matches neither the payload nor the container."""

    def __init__(self, parameter: str, type_name: str, *, step: Optional[str] = None) -> None:
        super().__init__(
            f"Cannot resolve parameter '{parameter}' of type '{type_name}': payload is not an "
            f"instance of {type_name} and no container binding found",
            step=step,
        )
        self.parameter = parameter
        self.type_name = type_name


class StepFailedError(WorkflowError):
    """Raised when a handler raises; wraps the original error exactly once."""

    def __init__(self, step: str, cause: BaseException) -> None:
        super().__init__(f"Step '{step}' failed: {cause}", step=step)


class StepTimeoutError(WorkflowError):
    """Raised when a handler ran longer than its declared timeout."""

    def __init__(self, step: str, timeout: float, duration: float) -> None:
        super().__init__(
            f"Step '{step}' exceeded its timeout of {timeout:g}s (took {duration:.3f}s)",
            step=step,
        )
        self.timeout = timeout
        self.duration = duration


class AsyncStepExhaustedError(WorkflowError):
    """Raised when an async step keeps failing after its retry budget is spent."""

    def __init__(self, step: str, attempts: int, cause: BaseException) -> None:
        super().__init__(
            f"Async step '{step}' failed after {attempts} attempt(s): {cause}",
            step=step,
        )
        self.attempts = attempts


class MessageEncodeError(WorkflowError):
    """Raised when a message payload or header cannot be written as JSON."""


class MessageDecodeError(WorkflowError):
    """Raised when a stored message record cannot be decoded."""


class InvalidChannelError(ValueError):
    """Raised when a descriptor is declared with an empty channel name."""
