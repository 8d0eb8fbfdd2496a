"""Bounded fan-out over a collection.

`run_bounded` applies an async transform to every item with at most `limit`
invocations in flight and returns one `Outcome` per item, in input order.

Scheduling: `min(limit, len(items))` worker coroutines pull the next index from
a shared cursor until it is exhausted. Reading and advancing the cursor never
awaits, so on one event loop no two workers can claim the same index, and a
fast-failing item releases its worker straight back to the cursor.

`FanOutScheduler` binds two such tiers (catalog entries, and chapters per
entry) with their own limits, so the total bound on in-flight transforms is
`outer_limit * inner_limit` by configuration.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, TypeVar

from core.domain.outcome import ErrorKind, Outcome
from core.errors import ExtractionError, FetchError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def capture(func: Callable[..., Awaitable[R]], *args: Any) -> Outcome[R]:
    """Await `func(*args)` and convert the result (or its failure) into an `Outcome`.

    Cancellation is not captured: it propagates like any `BaseException`.
    """

    try:
        value = await func(*args)
    except FetchError as exc:
        logger.warning("fetch failed: %s", exc)
        return Outcome.failure(ErrorKind.FETCH, str(exc))
    except ExtractionError as exc:
        logger.warning("extraction failed: %s", exc)
        return Outcome.failure(ErrorKind.EXTRACTION, str(exc))
    except Exception as exc:
        logger.warning("unexpected failure in fan-out item", exc_info=True)
        return Outcome.failure(ErrorKind.UNEXPECTED, f"{type(exc).__name__}: {exc}")
    return Outcome.success(value)


@dataclass
class TierStats:
    """Counters for one tier of fan-out."""

    name: str
    limit: int
    in_flight: int = 0
    peak_in_flight: int = 0
    started: int = 0
    failed: int = 0

    def enter(self) -> None:
        self.started += 1
        self.in_flight += 1
        if self.in_flight > self.peak_in_flight:
            self.peak_in_flight = self.in_flight

    def leave(self) -> None:
        self.in_flight -= 1


async def run_bounded(
    items: Iterable[T],
    limit: int,
    transform: Callable[[T], Awaitable[R]],
    *,
    stats: TierStats | None = None,
) -> list[Outcome[R]]:
    """Run `transform` over `items` with at most `limit` in flight.

    The returned list has one `Outcome` per item, at the item's index,
    whatever the completion order was.
    """

    if limit < 1:
        raise ValueError(f"limit must be >= 1 (got {limit})")

    pending = list(items)
    if not pending:
        return []

    results: list[Outcome[R]] = [Outcome.failure(ErrorKind.UNEXPECTED, "not run")] * len(pending)
    cursor = 0

    async def worker() -> None:
        nonlocal cursor
        while cursor < len(pending):
            index = cursor
            cursor += 1

            if stats is not None:
                stats.enter()
            try:
                outcome = await capture(transform, pending[index])
            finally:
                if stats is not None:
                    stats.leave()

            if stats is not None and not outcome.ok:
                stats.failed += 1
            results[index] = outcome

    await asyncio.gather(*(worker() for _ in range(min(limit, len(pending)))))
    return results


async def run_bounded_values(
    items: Iterable[T],
    limit: int,
    transform: Callable[[T], Awaitable[R]],
) -> list[R | None]:
    """Same as `run_bounded`, with failed slots collapsed to `None`."""

    outcomes = await run_bounded(items, limit, transform)
    return [outcome.value_or_none() for outcome in outcomes]


class FanOutScheduler:
    """Two-tier bounded fan-out.

    - `outer` runs the catalog tier: at most `outer_limit` entries at once.
    - `inner` runs one entry's chapter tier: at most `inner_limit` chapters at
      once *per entry*. Several inner batches can run concurrently (one per
      in-flight entry), so the global inner peak is bounded by `max_in_flight`.
    """

    def __init__(self, *, outer_limit: int, inner_limit: int) -> None:
        if outer_limit < 1 or inner_limit < 1:
            raise ValueError(
                f"tier limits must be >= 1 (got outer={outer_limit}, inner={inner_limit})"
            )
        self.outer_stats = TierStats(name="outer", limit=outer_limit)
        self.inner_stats = TierStats(name="inner", limit=inner_limit)

    @property
    def outer_limit(self) -> int:
        return self.outer_stats.limit

    @property
    def inner_limit(self) -> int:
        return self.inner_stats.limit

    @property
    def max_in_flight(self) -> int:
        return self.outer_limit * self.inner_limit

    async def outer(
        self,
        items: Iterable[T],
        transform: Callable[[T], Awaitable[R]],
    ) -> list[Outcome[R]]:
        return await run_bounded(items, self.outer_limit, transform, stats=self.outer_stats)

    async def inner(
        self,
        items: Iterable[T],
        transform: Callable[[T], Awaitable[R]],
    ) -> list[Outcome[R]]:
        return await run_bounded(items, self.inner_limit, transform, stats=self.inner_stats)
