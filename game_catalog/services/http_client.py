"""HTTP client service with retry logic for the catalog REST API."""

import asyncio
from typing import Any

import httpx
import structlog

log = structlog.stdlib.get_logger()

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})
IDEMPOTENT_METHODS = frozenset({"GET", "PUT", "DELETE"})


class HttpClientService:
    """JSON HTTP client bound to one API base URL, with retries and timeouts."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        max_retries: int = 2,
        base_delay: float = 0.5,
        max_delay: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client service.

        Args:
            base_url: Root URL of the catalog API (e.g. http://localhost:5000/api)
            timeout: Request timeout in seconds
            max_retries: Maximum number of retry attempts
            base_delay: Base delay for exponential backoff in seconds
            max_delay: Maximum delay between retries in seconds
            transport: Optional transport, used by tests to stub the server
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            headers={
                "User-Agent": "game-catalog/0.1.0",
                "Accept": "application/json",
            },
            follow_redirects=True,
            transport=transport,
        )

        log.info(
            "HTTP client service initialized",
            base_url=self.base_url,
            timeout=timeout,
            max_retries=max_retries,
        )

    async def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send a request, retrying transient failures.

        Transport errors, 5xx and 429 responses are retried with exponential
        backoff (a numeric ``Retry-After`` header wins). Other 4xx responses
        are raised immediately. POST is never retried so a create cannot run twice.

        Raises:
            httpx.HTTPStatusError: If the server answers with an error status
            httpx.RequestError: If the server cannot be reached after all retries
        """
        max_retries = self.max_retries if method.upper() in IDEMPOTENT_METHODS else 0

        for attempt in range(max_retries + 1):
            try:
                log.debug(
                    "Making HTTP request",
                    method=method,
                    path=path,
                    attempt=attempt + 1,
                    max_attempts=max_retries + 1,
                )

                response = await self._client.request(method, path, json=json, params=params)
                response.raise_for_status()

                log.info(
                    "HTTP request successful",
                    method=method,
                    path=path,
                    status_code=response.status_code,
                )
                return response

            except (httpx.HTTPStatusError, httpx.RequestError) as e:
                log.warning(
                    "HTTP request failed",
                    method=method,
                    path=path,
                    attempt=attempt + 1,
                    error=str(e),
                    error_type=type(e).__name__,
                )

                delay = min(self.base_delay * (2 ** attempt), self.max_delay)

                if isinstance(e, httpx.HTTPStatusError):
                    status_code = e.response.status_code
                    if status_code not in RETRYABLE_STATUS_CODES:
                        log.error("Client error, not retrying", status_code=status_code)
                        raise
                    retry_after = e.response.headers.get("retry-after")
                    if status_code == 429 and retry_after:
                        try:
                            delay = float(retry_after)
                        except ValueError:
                            pass

                if attempt == max_retries:
                    log.error(
                        "HTTP request failed after all retries",
                        method=method,
                        path=path,
                        total_attempts=max_retries + 1,
                    )
                    raise

                log.info("Retrying after delay", delay=delay)
                await asyncio.sleep(delay)

        raise RuntimeError("Unexpected end of retry loop")

    async def close(self) -> None:
        """Close the HTTP client and clean up resources."""
        await self._client.aclose()
        log.info("HTTP client closed")

    async def __aenter__(self) -> "HttpClientService":
        return self

    async def __aexit__(self, exc_type: type[Exception] | None, exc_val: Exception | None, exc_tb: Any) -> None:
        await self.close()
