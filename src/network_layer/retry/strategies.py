"""
Retry methods a middleware can ask for.

A retry method is a tagged union: each dataclass below is one strategy,
carrying the data (delays, recovery callables) the RetryEngine needs to
execute it. Methods are created by middleware for a single response and
consumed immediately.

Strategies:
    1. Immediate: resubmit with no delay
    2. Delayed: sleep, then resubmit
    3. AfterRequest: send a fallback request (e.g. token refresh), then resubmit
    4. AfterTask: run a recovery coroutine, then resubmit
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional, Union

from network_layer.models.request import HTTPRequest

if TYPE_CHECKING:
    from network_layer.models.response import HTTPResponse


FallbackResponseHandler = Callable[["HTTPResponse"], Any]
RecoveryTask = Callable[[HTTPRequest], Awaitable[None]]
RecoveryErrorHandler = Callable[[BaseException], Awaitable[None]]


@dataclass(frozen=True)
class Immediate:
    """Resubmit the request right away."""

    name = "immediate"

    @property
    def retry_delay(self) -> float:
        return 0.0


@dataclass(frozen=True)
class Delayed:
    """Resubmit the request after `seconds`."""

    seconds: float
    name = "delayed"

    def __post_init__(self) -> None:
        if self.seconds < 0:
            raise ValueError("seconds must be >= 0")

    @property
    def retry_delay(self) -> float:
        return self.seconds


@dataclass(frozen=True)
class AfterRequest:
    """
    Send `fallback_request` first; resubmit the original only if it succeeds.

    Attributes:
        fallback_request: Recovery request (sent flagged as a fallback request)
        delay: Seconds to wait between the fallback response and the resubmission
        handler: Optional callback receiving the fallback response (e.g. persist tokens)
    """

    fallback_request: HTTPRequest
    delay: float = 0.0
    handler: Optional[FallbackResponseHandler] = None
    name = "after_request"

    @property
    def retry_delay(self) -> float:
        return self.delay


@dataclass(frozen=True)
class AfterTask:
    """
    Await `task(original_request)`; resubmit the original only if it succeeds.

    Attributes:
        delay: Seconds to wait between the task and the resubmission
        task: Recovery coroutine function
        error_handler: Awaited with the task's exception when the task fails
    """

    delay: float
    task: RecoveryTask
    error_handler: Optional[RecoveryErrorHandler] = None
    name = "after_task"

    @property
    def retry_delay(self) -> float:
        return self.delay


RetryMethod = Union[Immediate, Delayed, AfterRequest, AfterTask]
