"""
Retry engine with recovery strategies.

Middleware answers a failed response with a RetryMethod; the RetryEngine
executes it against the request's retry budget:

1. **Immediate**: resubmit right away
2. **Delayed**: resubmit after a delay
3. **AfterRequest**: send a fallback request (e.g. token refresh), then resubmit
4. **AfterTask**: run a recovery coroutine, then resubmit

A failed recovery yields no next attempt (the original error stands); an exhausted
budget raises MaxRetryAttemptsReached.

Usage:
    >>> from network_layer.retry import RetryEngine, Delayed
    >>> engine = RetryEngine(send=client._send)
    >>> next_context = await engine.perform_retry(Delayed(1.0), failed_response)
"""

from network_layer.exceptions import MaxRetryAttemptsReached
from network_layer.retry.engine import RetryEngine, check_cancellation
from network_layer.retry.strategies import (
    AfterRequest,
    AfterTask,
    Delayed,
    Immediate,
    RetryMethod,
)

__all__ = [
    "RetryEngine",
    "check_cancellation",
    "MaxRetryAttemptsReached",
    "RetryMethod",
    "Immediate",
    "Delayed",
    "AfterRequest",
    "AfterTask",
]
