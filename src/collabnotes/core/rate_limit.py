"""
Fixed-window rate limiting for the auth endpoints.

Counters live in Redis keyed by route and client socket address. When Redis
is not available requests are let through.
"""

from typing import Optional

from fastapi import Request

from ..config import get_settings
from .exceptions import RateLimitError
from .logging import get_logger
from .redis_client import RedisClient, get_redis_client

logger = get_logger(__name__)


def client_address(request: Request, trust_proxy_headers: Optional[bool] = None) -> str:
    """
    Socket peer address. X-Forwarded-For is only honoured when
    ``trust_proxy_headers`` is enabled, since clients can set it freely.
    """
    if trust_proxy_headers is None:
        trust_proxy_headers = get_settings().trust_proxy_headers
    if trust_proxy_headers:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RateLimiter:
    """
    FastAPI dependency enforcing ``limit`` requests per ``window`` seconds.

    Use as ``Depends(RateLimiter("login"))``.
    """

    def __init__(
        self,
        scope: str,
        limit: Optional[int] = None,
        window: Optional[int] = None,
        client: Optional[RedisClient] = None,
    ):
        settings = get_settings()
        self.scope = scope
        self.limit = limit or settings.auth_rate_limit_requests
        self.window = window or settings.auth_rate_limit_window_seconds
        self._client = client

    @property
    def client(self) -> RedisClient:
        return self._client or get_redis_client()

    def key_for(self, address: str) -> str:
        return f"ratelimit:{self.scope}:{address}"

    async def hit(self, address: str) -> None:
        """Count one request for address; raise RateLimitError over the limit."""
        count = await self.client.increment_rate_limit(self.key_for(address), self.window)
        if count is None:
            # fail open
            logger.debug("Rate limiter skipped, Redis unavailable", extra={"scope": self.scope})
            return
        if count > self.limit:
            logger.warning(
                "Rate limit exceeded",
                extra={"scope": self.scope, "client": address, "count": count, "limit": self.limit},
            )
            raise RateLimitError()

    async def __call__(self, request: Request) -> None:
        await self.hit(client_address(request))
