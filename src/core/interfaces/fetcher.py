"""Page fetcher contract.

- Structural (Protocol) so the pipeline can run against httpx in production
  and an in-memory fake in tests.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class PageFetcher(Protocol):
    """Minimum contract for the fetch stage.

    Rules:
    - `fetch` is async because it performs network I/O.
    - Returns the decoded body or raises `core.errors.FetchError`; it never retries.
    - Must tolerate concurrent calls (no per-call shared mutable state).
    """

    async def fetch(self, url: str) -> str:
        """Fetch `url` and return its body as text."""

        ...
