"""
Base class for external HTTP data services with rate limiting and retry logic
"""

from typing import Any, Dict, Optional, Type
import asyncio
import httpx
import logging

from core.config import settings
from core.rate_limiter import RateLimiter
from core.exceptions import (
    ExtractionError,
    NetworkError,
    RateLimitError,
    ResourceNotFoundError,
)

logger = logging.getLogger(__name__)


class HttpSource:
    """
    Shared plumbing for every outbound service.

    Responsibilities:
    - Pacing through the service's RateLimiter (once per attempt)
    - Bounded timeouts
    - Retry with exponential backoff on 429, 5xx, timeouts and transport errors
    - Mapping failures onto the pipeline exception hierarchy

    Attributes:
        service_name: Name used in logs and error context
        error_class: ExtractionError subclass raised for non-retryable failures
        max_retries: Maximum number of attempts (default: settings.MAX_RETRIES)
        retry_delay: Initial retry delay in seconds (default: settings.RETRY_DELAY)
        timeout: Request timeout in seconds (default: settings.HTTP_TIMEOUT)
    """

    service_name: str = "http"
    error_class: Type[ExtractionError] = ExtractionError

    def __init__(
        self,
        rate_limiter: RateLimiter,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.rate_limiter = rate_limiter
        self.timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT
        self.max_retries = max(1, max_retries if max_retries is not None else settings.MAX_RETRIES)
        self.retry_delay = retry_delay if retry_delay is not None else settings.RETRY_DELAY
        self.user_agent = user_agent or settings.USER_AGENT
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            headers={"User-Agent": self.user_agent},
            transport=self._transport,
        )

    async def _request(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        **kwargs: Any
    ) -> httpx.Response:
        """
        Make a paced HTTP request with retry logic and exponential backoff.

        Returns:
            HTTP response with a 2xx status

        Raises:
            ResourceNotFoundError: On HTTP 404 (never retried)
            RateLimitError: When still throttled after max retries
            NetworkError: For server/transport errors after max retries
            error_class: For any other non-2xx response
        """
        context: Dict[str, Any] = {"service": self.service_name, "api_url": url}
        last_exception: Optional[Exception] = None

        for attempt in range(self.max_retries):
            is_last = attempt == self.max_retries - 1
            delay = self.retry_delay * (2 ** attempt)

            await self.rate_limiter.acquire()

            try:
                logger.debug(f"[{self.service_name}] {method} {url} (attempt {attempt + 1}/{self.max_retries})")
                response = await client.request(method, url, **kwargs)
            except httpx.TimeoutException as e:
                last_exception = e
                if not is_last:
                    logger.warning(f"[{self.service_name}] Request timeout. Retrying in {delay} seconds")
                    await asyncio.sleep(delay)
                    continue
                raise NetworkError(
                    f"Request timeout after {self.max_retries} retries",
                    context={**context, "timeout": self.timeout, "retry_count": attempt + 1},
                    original_exception=e
                )
            except httpx.TransportError as e:
                last_exception = e
                if not is_last:
                    logger.warning(f"[{self.service_name}] Network error. Retrying in {delay} seconds")
                    await asyncio.sleep(delay)
                    continue
                raise NetworkError(
                    f"Network error after {self.max_retries} retries",
                    context={**context, "retry_count": attempt + 1},
                    original_exception=e
                )

            if response.status_code == 404:
                raise ResourceNotFoundError(
                    f"Resource not found: {url}",
                    context={**context, "status_code": 404}
                )

            if response.status_code == 429:
                retry_after = self._retry_after(response, delay)
                if not is_last:
                    logger.warning(f"[{self.service_name}] Rate limited. Retrying after {retry_after} seconds")
                    await asyncio.sleep(retry_after)
                    continue
                raise RateLimitError(
                    f"Rate limit exceeded for {url}",
                    context={**context, "status_code": 429, "retry_count": attempt + 1},
                    retry_after=retry_after
                )

            if response.status_code >= 500:
                if not is_last:
                    logger.warning(
                        f"[{self.service_name}] Server error {response.status_code}. "
                        f"Retrying in {delay} seconds (attempt {attempt + 1}/{self.max_retries})"
                    )
                    await asyncio.sleep(delay)
                    continue
                raise NetworkError(
                    f"Server error after {self.max_retries} retries",
                    context={
                        **context,
                        "status_code": response.status_code,
                        "retry_count": attempt + 1,
                        "response_body": response.text[:500]
                    }
                )

            if response.status_code >= 400:
                raise self.error_class(
                    f"{self.service_name} request failed with HTTP {response.status_code}",
                    context={
                        **context,
                        "status_code": response.status_code,
                        "response_body": response.text[:500]
                    }
                )

            return response

        # Should never reach here, but just in case
        raise self.error_class(
            "Max retries exceeded",
            context=context,
            original_exception=last_exception
        )

    def _decode_json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise self.error_class(
                "Failed to parse JSON response",
                context={
                    "service": self.service_name,
                    "api_url": str(response.request.url),
                    "response_body": response.text[:500]
                },
                original_exception=e
            )

    @staticmethod
    def _retry_after(response: httpx.Response, default: float) -> float:
        try:
            return float(response.headers.get("Retry-After", default))
        except ValueError:
            return default
