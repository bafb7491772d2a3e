"""
Retry engine executing middleware retry verdicts.

The engine turns a RetryMethod into the context of the next attempt. The
client resubmits that context in its send loop, so any number of retry
verdicts for one request share a single stack frame and a single budget.
Fallback requests go through the injected `send` callable (request
middleware -> transport -> validation).

Retry policy:
    1. Cancellation is checked before anything else (no side effects)
    2. Budget: retry_count must be below max_retry_count, else MaxRetryAttemptsReached
    3. Recovery (AfterRequest / AfterTask): on failure None is returned and
       no resubmission happens
    4. Sleep the strategy delay, return the context with retry_count + 1

Usage:
    engine = RetryEngine(send=client._send)
    next_context = await engine.perform_retry(Delayed(2.0), failed_response)
"""

import asyncio
from typing import Awaitable, Callable, Optional

import structlog

from network_layer.exceptions import MaxRetryAttemptsReached, RequestCancelledError
from network_layer.models.context import RequestContext
from network_layer.models.response import HTTPResponse
from network_layer.monitoring.metrics import recovery_failures_total, retries_total
from network_layer.retry.strategies import (
    AfterRequest,
    AfterTask,
    Delayed,
    Immediate,
    RetryMethod,
)

logger = structlog.get_logger(__name__)

SendFunction = Callable[[RequestContext], Awaitable[HTTPResponse]]
SleepFunction = Callable[[float], Awaitable[None]]


def check_cancellation(context: RequestContext) -> None:
    """
    Raise RequestCancelledError if the call was cancelled.

    Covers both the caller's cancellation event and a pending cancel() on
    the current asyncio task.
    """
    task = asyncio.current_task()
    if context.is_cancelled or (task is not None and task.cancelling()):
        raise RequestCancelledError(f"Request cancelled: {context.request.path}")


class RetryEngine:
    """
    Executes retry methods for a failed response.

    Attributes:
        send: Pipeline entry point used for fallback requests
        sleep: Coroutine used for retry delays (asyncio.sleep by default)
    """

    def __init__(self, send: SendFunction, sleep: SleepFunction = asyncio.sleep):
        self.send = send
        self.sleep = sleep

    async def perform_retry(self, method: RetryMethod, response: HTTPResponse) -> Optional[RequestContext]:
        """
        Execute `method` for `response`.

        Returns:
            The context to resubmit (retry_count + 1, delay already applied),
            or None when a recovery action failed and the original response
            stands.

        Raises:
            RequestCancelledError: The call was cancelled before the retry
            MaxRetryAttemptsReached: The request's retry budget is spent
        """
        context = response.context
        check_cancellation(context)

        if not context.can_retry:
            retries_total.labels(strategy=method.name, outcome="budget_exhausted").inc()
            logger.warning(
                "Retry budget exhausted",
                path=context.request.path,
                retry_count=context.retry_count,
                max_retry_count=context.request.max_retry_count,
                strategy=method.name,
            )
            raise MaxRetryAttemptsReached(
                context.retry_count, context.request.max_retry_count, context.request.path
            )

        logger.info(
            "Retrying request",
            path=context.request.path,
            strategy=method.name,
            attempt=context.retry_count + 1,
            max_retry_count=context.request.max_retry_count,
            status_code=response.status_code,
        )

        if isinstance(method, (Immediate, Delayed)):
            return await self._next_attempt(method, context)
        if isinstance(method, AfterRequest):
            recovered = await self._run_fallback_request(method, response)
        elif isinstance(method, AfterTask):
            recovered = await self._run_recovery_task(method, response)
        else:
            raise TypeError(f"Unsupported retry method: {type(method).__name__}")

        if not recovered:
            return None
        return await self._next_attempt(method, context)

    async def _run_fallback_request(self, method: AfterRequest, response: HTTPResponse) -> bool:
        fallback_context = RequestContext(
            request=method.fallback_request.as_fallback(),
            cancellation=response.context.cancellation,
        ).next_attempt()

        try:
            fallback_response = await self.send(fallback_context)
            if method.handler is not None:
                handled = method.handler(fallback_response)
                if asyncio.iscoroutine(handled):
                    await handled
        except Exception as e:
            self._record_recovery_failure(method, response, e)
            return False
        return True

    async def _run_recovery_task(self, method: AfterTask, response: HTTPResponse) -> bool:
        try:
            await method.task(response.context.request)
        except Exception as e:
            self._record_recovery_failure(method, response, e)
            if method.error_handler is not None:
                await method.error_handler(e)
            return False
        return True

    async def _next_attempt(self, method: RetryMethod, context: RequestContext) -> RequestContext:
        delay = method.retry_delay
        if delay > 0:
            logger.debug("Applying retry delay", path=context.request.path, delay_seconds=delay)
            await self.sleep(delay)

        retries_total.labels(strategy=method.name, outcome="resubmitted").inc()
        return context.next_attempt()

    @staticmethod
    def _record_recovery_failure(method: RetryMethod, response: HTTPResponse, error: Exception) -> None:
        # The caller only sees the original error, so the recovery error is surfaced here.
        recovery_failures_total.labels(strategy=method.name).inc()
        retries_total.labels(strategy=method.name, outcome="recovery_failed").inc()
        logger.warning(
            "Recovery failed, keeping original response",
            path=response.context.request.path,
            strategy=method.name,
            status_code=response.status_code,
            error=str(error),
            error_type=type(error).__name__,
        )
