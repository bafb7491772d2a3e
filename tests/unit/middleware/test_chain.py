"""
Unit tests for MiddlewareChain ordering and short-circuiting.
"""

from network_layer.exceptions import NetworkError
from network_layer.middleware import (
    Fail,
    HTTPMiddleware,
    MiddlewareChain,
    RequestTracingMiddleware,
    Retry,
    Success,
    TransientFailureMiddleware,
)
from network_layer.retry.strategies import Delayed, Immediate


class TestRequestPhase:
    def test_each_middleware_sees_previous_output(self, stub_middleware, sample_request):
        first = stub_middleware(header=("X-First", "1"))
        second = stub_middleware(header=("X-Second", "2"))
        chain = MiddlewareChain([first, second])

        processed = chain.process_request(sample_request)

        assert processed.headers == {"X-First": "1", "X-Second": "2"}
        assert "X-First" in second.seen_requests[0].headers
        assert sample_request.headers == {}

    def test_opted_out_middleware_is_skipped(self, stub_middleware, sample_request):
        silent = stub_middleware()
        chain = MiddlewareChain([silent])

        assert chain.process_request(sample_request) is sample_request
        assert silent.seen_requests == []


class TestResponsePhase:
    def test_all_success_returns_last_response(self, stub_middleware, create_response, sample_request):
        chain = MiddlewareChain([stub_middleware(), stub_middleware()])
        response = create_response(sample_request)

        result = chain.process_response(response)

        assert isinstance(result, Success)
        assert result.response is response

    def test_empty_chain_is_success(self, create_response, sample_request):
        response = create_response(sample_request, status_code=500)
        assert MiddlewareChain().process_response(response) == Success(response)

    def test_transformed_response_flows_on(self, stub_middleware, create_response, sample_request):
        original = create_response(sample_request, body={"v": 1})
        replacement = create_response(sample_request, body={"v": 2})
        rewriter = stub_middleware(verdict=Success(replacement))
        observer = stub_middleware()
        chain = MiddlewareChain([rewriter, observer])

        result = chain.process_response(original)

        assert observer.seen_responses == [replacement]
        assert result.response is replacement

    def test_retry_short_circuits(self, stub_middleware, create_response, sample_request):
        retrying = stub_middleware(verdict=Retry(Immediate()))
        never_called = stub_middleware()
        chain = MiddlewareChain([retrying, never_called])

        result = chain.process_response(create_response(sample_request, status_code=401))

        assert result == Retry(Immediate())
        assert never_called.seen_responses == []

    def test_fail_short_circuits(self, stub_middleware, create_response, sample_request):
        error = NetworkError("rejected")
        failing = stub_middleware(verdict=Fail(error))
        never_called = stub_middleware(verdict=Retry(Delayed(1.0)))
        chain = MiddlewareChain([failing, never_called])

        result = chain.process_response(create_response(sample_request, status_code=418))

        assert result == Fail(error)
        assert never_called.seen_responses == []

    def test_opted_out_middleware_does_not_vote(self, stub_middleware, create_response, sample_request):
        chain = MiddlewareChain([stub_middleware(verdict=Retry(Immediate()), handles_responses=False)])
        response = create_response(sample_request)

        assert chain.process_response(response) == Success(response)


class TestChainManagement:
    def test_add_and_clear(self, stub_middleware):
        chain = MiddlewareChain()
        chain.add(stub_middleware())
        chain.add(stub_middleware())

        assert len(chain) == 2
        chain.clear()
        assert len(chain) == 0

    def test_builtin_middleware_satisfy_protocol(self):
        assert isinstance(RequestTracingMiddleware(), HTTPMiddleware)
        assert isinstance(TransientFailureMiddleware(), HTTPMiddleware)
