"""
Unit tests for RetryEngine.

Tests budget enforcement, strategy dispatch, recovery failures and
cancellation. The engine returns the next attempt's context; fallback
requests go through a mocked pipeline entry point.
"""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from network_layer.exceptions import MaxRetryAttemptsReached, NetworkError, RequestCancelledError
from network_layer.models.context import RequestContext
from network_layer.models.enums import HTTPMethod
from network_layer.models.request import HTTPRequest
from network_layer.retry.engine import RetryEngine, check_cancellation
from network_layer.retry.strategies import AfterRequest, AfterTask, Delayed, Immediate


@pytest.fixture
def sleep() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def engine(mock_send, sleep) -> RetryEngine:
    return RetryEngine(send=mock_send, sleep=sleep)


@pytest.fixture
def refresh_request() -> HTTPRequest:
    return HTTPRequest(method=HTTPMethod.POST, path="v1/auth/refresh", requires_user_session=False)


class TestBudget:
    @pytest.mark.asyncio
    async def test_returns_context_with_incremented_count(self, engine, mock_send, create_response, sample_request):
        context = await engine.perform_retry(Immediate(), create_response(sample_request, status_code=503))

        assert isinstance(context, RequestContext)
        assert context.retry_count == 1
        assert context.request is sample_request
        mock_send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_keeps_cancellation_event(self, engine, create_response, sample_request):
        event = asyncio.Event()
        response = create_response(sample_request, status_code=503)
        response.context = RequestContext(request=sample_request, cancellation=event, retry_count=2)

        context = await engine.perform_retry(Immediate(), response)

        assert context.retry_count == 3
        assert context.cancellation is event

    @pytest.mark.asyncio
    async def test_exhausted_budget_raises(self, engine, mock_send, create_response, sample_request):
        response = create_response(sample_request, status_code=503, retry_count=3)

        with pytest.raises(MaxRetryAttemptsReached) as exc_info:
            await engine.perform_retry(Immediate(), response)

        assert exc_info.value.retry_count == 3
        assert exc_info.value.max_retry_count == 3
        mock_send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_budget_checked_before_recovery(self, engine, mock_send, create_response, sample_request):
        task = AsyncMock()
        response = create_response(sample_request, status_code=401, retry_count=3)

        with pytest.raises(MaxRetryAttemptsReached):
            await engine.perform_retry(AfterTask(0.0, task), response)

        task.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_zero_budget(self, engine, create_response):
        request = HTTPRequest(method=HTTPMethod.GET, path="v1/items", max_retry_count=0)

        with pytest.raises(MaxRetryAttemptsReached):
            await engine.perform_retry(Immediate(), create_response(request, status_code=503))


class TestDelays:
    @pytest.mark.asyncio
    async def test_immediate_does_not_sleep(self, engine, sleep, create_response, sample_request):
        await engine.perform_retry(Immediate(), create_response(sample_request, status_code=503))
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delayed_sleeps_before_returning(self, engine, sleep, create_response, sample_request):
        context = await engine.perform_retry(Delayed(2.5), create_response(sample_request, status_code=503))

        sleep.assert_awaited_once_with(2.5)
        assert context.retry_count == 1

    def test_negative_delay_rejected(self):
        with pytest.raises(ValueError):
            Delayed(-1.0)


class TestAfterRequest:
    @pytest.mark.asyncio
    async def test_fallback_then_resubmit(self, engine, mock_send, sleep, create_response, sample_request, refresh_request):
        handler = Mock()
        fallback_response = create_response(refresh_request.as_fallback(), body={"accessToken": "t"})
        mock_send.return_value = fallback_response

        context = await engine.perform_retry(
            AfterRequest(refresh_request, delay=1.0, handler=handler),
            create_response(sample_request, status_code=401),
        )

        fallback_context = mock_send.await_args.args[0]
        assert fallback_context.request.is_fallback_request
        assert fallback_context.request.path == "v1/auth/refresh"
        assert context.request is sample_request
        assert context.retry_count == 1
        mock_send.assert_awaited_once()
        handler.assert_called_once_with(fallback_response)
        sleep.assert_awaited_once_with(1.0)

    @pytest.mark.asyncio
    async def test_async_handler_is_awaited(self, engine, mock_send, create_response, sample_request, refresh_request):
        handler = AsyncMock()
        mock_send.return_value = create_response(sample_request)

        await engine.perform_retry(AfterRequest(refresh_request, handler=handler), create_response(sample_request, status_code=401))

        handler.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failed_fallback_yields_no_next_attempt(
        self, engine, mock_send, create_response, sample_request, refresh_request
    ):
        original = create_response(sample_request, status_code=401)
        mock_send.side_effect = NetworkError("refresh rejected")

        result = await engine.perform_retry(AfterRequest(refresh_request), original)

        assert result is None
        assert original.context.retry_count == 0
        assert original.error is None
        assert mock_send.await_count == 1

    @pytest.mark.asyncio
    async def test_failing_handler_yields_no_next_attempt(
        self, engine, mock_send, create_response, sample_request, refresh_request
    ):
        original = create_response(sample_request, status_code=401)
        mock_send.return_value = create_response(refresh_request)
        handler = Mock(side_effect=ValueError("no token in body"))

        result = await engine.perform_retry(AfterRequest(refresh_request, handler=handler), original)

        assert result is None
        assert mock_send.await_count == 1


class TestAfterTask:
    @pytest.mark.asyncio
    async def test_task_then_next_attempt(self, engine, mock_send, create_response, sample_request):
        task = AsyncMock()

        context = await engine.perform_retry(AfterTask(0.0, task), create_response(sample_request, status_code=401))

        task.assert_awaited_once_with(sample_request)
        assert context.retry_count == 1
        mock_send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_task_calls_error_handler(self, engine, mock_send, create_response, sample_request):
        error = NetworkError("refresh rejected")
        task = AsyncMock(side_effect=error)
        error_handler = AsyncMock()
        original = create_response(sample_request, status_code=401)

        result = await engine.perform_retry(AfterTask(1.0, task, error_handler), original)

        assert result is None
        error_handler.assert_awaited_once_with(error)
        mock_send.assert_not_awaited()


class TestCancellation:
    @pytest.mark.asyncio
    async def test_cancelled_before_retry(self, engine, mock_send, create_response, sample_request):
        event = asyncio.Event()
        event.set()
        task = AsyncMock()
        response = create_response(sample_request, status_code=503)
        response.context = RequestContext(request=sample_request, cancellation=event)

        with pytest.raises(RequestCancelledError):
            await engine.perform_retry(AfterTask(0.0, task), response)

        task.assert_not_awaited()
        mock_send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_check_cancellation_passes_when_not_cancelled(self, sample_request):
        check_cancellation(RequestContext(request=sample_request, cancellation=asyncio.Event()))
