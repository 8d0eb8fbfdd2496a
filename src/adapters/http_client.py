"""httpx wrapper.

- Standardizes timeouts, headers, redirects and the keep-alive pool.
- `HttpPageFetcher` is the production `PageFetcher`: one shared
  `httpx.AsyncClient` for the whole crawl, no retries.
"""

from __future__ import annotations

import logging
from types import TracebackType

import httpx

from core.config import AppSettings
from core.errors import FetchError

logger = logging.getLogger(__name__)


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` with the crawl defaults.

    The client's connection pool is the only resource shared by concurrent
    fetches; httpx makes it safe for concurrent use on one event loop.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        limits=httpx.Limits(
            max_connections=settings.max_connections,
            max_keepalive_connections=settings.keepalive_connections,
        ),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )


class HttpPageFetcher:
    """Fetch pages as text; any transport error or non-2xx becomes `FetchError`.

    When no client is injected, the fetcher owns the client it builds and
    closes it in `aclose` / on context exit.
    """

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._owns_client = client is None
        self._client = client or build_async_client(self._settings)

    async def fetch(self, url: str) -> str:
        try:
            response = await self._client.get(url)
        except httpx.TimeoutException as exc:
            raise FetchError(url, f"timeout ({type(exc).__name__})") from exc
        except httpx.HTTPError as exc:
            raise FetchError(url, f"{type(exc).__name__}: {exc}") from exc

        if not response.is_success:
            raise FetchError(
                url,
                f"HTTP {response.status_code}",
                status_code=response.status_code,
            )

        logger.debug("fetched %s (%d bytes)", url, len(response.content))
        return response.text

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpPageFetcher":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
