"""
User session middleware: bearer authentication and token refresh.

Requests flagged with `requires_user_session` get the current access token.
Their 401/403 responses are answered with an AfterTask retry that refreshes
the tokens and resubmits. Concurrent 401s share a single refresh: the first
request to take the lock refreshes, the others see a newer token when they
get the lock and resubmit without refreshing again.

The refresh request itself must be built with `requires_user_session=False`,
otherwise a 401 from the refresh endpoint would wait for itself.
"""

import asyncio
from typing import Awaitable, Callable, Optional

import structlog
from pydantic import BaseModel, Field

from network_layer.config import settings
from network_layer.exceptions import InvalidUserSessionError
from network_layer.middleware.base import ProcessingResult, Retry
from network_layer.models.request import HTTPRequest
from network_layer.models.response import HTTPResponse
from network_layer.retry.strategies import AfterTask

logger = structlog.get_logger(__name__)

AUTHORIZATION_HEADER = "Authorization"
BEARER_PREFIX = "Bearer "
SESSION_EXPIRED_STATUSES = frozenset({401, 403})


class TokenPair(BaseModel):
    """Tokens returned by the refresh endpoint."""

    access_token: str = Field(..., description="Short-lived bearer token")
    refresh_token: Optional[str] = Field(default=None, description="Rotated refresh token, if any")


class UserSession:
    """In-memory holder of the current session tokens."""

    def __init__(self, access_token: str | None = None, refresh_token: str | None = None):
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.closed_with: Optional[BaseException] = None

    @property
    def is_active(self) -> bool:
        return self.access_token is not None or self.refresh_token is not None

    def refresh(self, tokens: TokenPair) -> None:
        self.access_token = tokens.access_token
        if tokens.refresh_token is not None:
            self.refresh_token = tokens.refresh_token

    def close(self, error: BaseException | None = None) -> None:
        self.access_token = None
        self.refresh_token = None
        self.closed_with = error


TokenRefresher = Callable[[str], Awaitable[TokenPair]]
SessionInvalidatedHook = Callable[[BaseException], Awaitable[None]]


class UserSessionMiddleware:
    """
    Attaches bearer tokens and refreshes the session on 401/403.

    Attributes:
        user_session: Token holder shared with the rest of the application
        refresh_tokens: Coroutine exchanging a refresh token for a new TokenPair
        refresh_delay: Seconds between a successful refresh and the resubmission
        on_session_invalidated: Optional hook awaited once when a refresh fails
    """

    def __init__(
        self,
        user_session: UserSession,
        refresh_tokens: TokenRefresher,
        refresh_delay: float | None = None,
        on_session_invalidated: SessionInvalidatedHook | None = None,
    ):
        self.user_session = user_session
        self.refresh_tokens = refresh_tokens
        self.refresh_delay = settings.SESSION_REFRESH_DELAY if refresh_delay is None else refresh_delay
        self.on_session_invalidated = on_session_invalidated
        self._refresh_lock = asyncio.Lock()
        self._failed_refresh: tuple[Optional[str], BaseException] | None = None

    def should_process_request(self, request: HTTPRequest) -> bool:
        return request.requires_user_session

    def process_request(self, request: HTTPRequest) -> HTTPRequest:
        access_token = self.user_session.access_token
        if access_token is None:
            return request
        return request.with_headers({AUTHORIZATION_HEADER: BEARER_PREFIX + access_token})

    def should_process_response(self, response: HTTPResponse) -> bool:
        # Only session-bound requests, so the refresh call can never wait for itself.
        if not response.request.requires_user_session:
            return False
        return response.status_code in SESSION_EXPIRED_STATUSES

    def process_response(self, response: HTTPResponse) -> ProcessingResult:
        stale_token = self._sent_token(response.request)

        async def refresh_session(_original_request: HTTPRequest) -> None:
            await self._refresh_once(stale_token)

        return Retry(AfterTask(self.refresh_delay, refresh_session, self._handle_refresh_failure))

    async def _refresh_once(self, stale_token: str | None) -> None:
        async with self._refresh_lock:
            current_token = self.user_session.access_token
            if current_token is not None and current_token != stale_token:
                logger.debug("Session already refreshed by a concurrent request")
                return

            if self._failed_refresh is not None and self._failed_refresh[0] == stale_token:
                raise InvalidUserSessionError("Session refresh already failed") from self._failed_refresh[1]

            refresh_token = self.user_session.refresh_token
            try:
                if refresh_token is None:
                    raise InvalidUserSessionError()
                tokens = await self.refresh_tokens(refresh_token)
            except Exception as e:
                self._failed_refresh = (stale_token, e)
                raise

            self.user_session.refresh(tokens)
            self._failed_refresh = None
            logger.info("User session refreshed")

    async def _handle_refresh_failure(self, error: BaseException) -> None:
        # Every waiting request lands here; only the first one closes the session.
        if not self.user_session.is_active:
            return

        logger.warning(
            "Session refresh failed, invalidating user session",
            error=str(error),
            error_type=type(error).__name__,
        )
        self.user_session.close(error)
        if self.on_session_invalidated is not None:
            await self.on_session_invalidated(error)

    @staticmethod
    def _sent_token(request: HTTPRequest) -> str | None:
        header = request.headers.get(AUTHORIZATION_HEADER)
        if header is None or not header.startswith(BEARER_PREFIX):
            return None
        return header[len(BEARER_PREFIX):]
