"""Search aggregator for parallel multi-source search."""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import nullcontext
from dataclasses import dataclass
from enum import Enum

from ..config import settings
from ..connectors import get_connector
from ..connectors.base import Connector, ResultRecord, SourceDescriptor

logger = logging.getLogger(__name__)

# Upper bound on how long any single source may take
SOURCE_TIMEOUT = 20.0

# Tasks abandoned by a consumer that stopped listening; referenced until done
_detached: set[asyncio.Task] = set()


class OutcomeStatus(str, Enum):
    """How a single source attempt ended."""

    RESULTS = "results"
    EMPTY = "empty"
    TIMEOUT = "timeout"
    ERROR = "error"


@dataclass(frozen=True)
class Outcome:
    """Per-source result of a fan-out."""

    source: SourceDescriptor
    status: OutcomeStatus
    results: tuple[ResultRecord, ...] = ()
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.status in (OutcomeStatus.RESULTS, OutcomeStatus.EMPTY)


class SearchAggregator:
    """Fans a query out to every source, one task per source, each with its own deadline."""

    def __init__(
        self,
        connector_for: Callable[[SourceDescriptor], Connector] | None = None,
        max_concurrency: int | None = None,
    ):
        """
        Initialize aggregator.

        Args:
            connector_for: Resolves the client for a source. Defaults to the
                connector registry keyed on the descriptor's kind.
            max_concurrency: Max sources searched at once (0 or None = unbounded)
        """
        self.connector_for = connector_for or get_connector
        if max_concurrency is None:
            max_concurrency = settings.max_concurrent_sources
        self.max_concurrency = max_concurrency

    async def dispatch(
        self,
        sources: list[SourceDescriptor],
        query: str,
        timeout: float = SOURCE_TIMEOUT,
    ) -> dict[str, Outcome]:
        """
        Search all sources in parallel and wait for every one to settle.

        Args:
            sources: Sources to search
            query: Raw user query
            timeout: Per-source deadline in seconds

        Returns:
            Outcome per source key, in source order
        """
        if not sources:
            return {}

        limiter = self._limiter()
        outcomes = await asyncio.gather(
            *(self._attempt(source, query, timeout, limiter) for source in sources)
        )
        return {outcome.source.key: outcome for outcome in outcomes}

    async def settle(
        self,
        sources: list[SourceDescriptor],
        query: str,
        timeout: float = SOURCE_TIMEOUT,
    ) -> AsyncIterator[Outcome]:
        """
        Yield each source's outcome the moment it settles.

        Order is completion order, not source order. If the consumer stops
        early the remaining attempts keep running and their outcomes are dropped.
        """
        if not sources:
            return

        limiter = self._limiter()
        tasks = [
            asyncio.create_task(self._attempt(source, query, timeout, limiter))
            for source in sources
        ]
        try:
            for next_done in asyncio.as_completed(tasks):
                yield await next_done
        finally:
            for task in tasks:
                if not task.done():
                    _detached.add(task)
                    task.add_done_callback(_detached.discard)

    def _limiter(self) -> asyncio.Semaphore | None:
        if self.max_concurrency and self.max_concurrency > 0:
            return asyncio.Semaphore(self.max_concurrency)
        return None

    async def _attempt(
        self,
        source: SourceDescriptor,
        query: str,
        timeout: float,
        limiter: asyncio.Semaphore | None,
    ) -> Outcome:
        """Run one source against its deadline; never raises for source failures."""
        try:
            results = await asyncio.wait_for(self._search(source, query, limiter), timeout)
        except asyncio.TimeoutError:
            logger.warning("Search timeout %s after %.1fs", source.name, timeout)
            return Outcome(source, OutcomeStatus.TIMEOUT, reason=f"{source.name} timeout")
        except Exception as e:
            logger.warning("Search failed %s: %s", source.name, e)
            return Outcome(source, OutcomeStatus.ERROR, reason=str(e) or type(e).__name__)

        if not results:
            return Outcome(source, OutcomeStatus.EMPTY)
        return Outcome(source, OutcomeStatus.RESULTS, results=tuple(results))

    async def _search(
        self,
        source: SourceDescriptor,
        query: str,
        limiter: asyncio.Semaphore | None,
    ) -> list[ResultRecord]:
        async with limiter or nullcontext():
            connector = self.connector_for(source)
            return await connector.search(source, query)


def flatten(outcomes: dict[str, Outcome]) -> list[ResultRecord]:
    """Concatenate the records of every successful outcome."""
    results: list[ResultRecord] = []
    for outcome in outcomes.values():
        if outcome.ok:
            results.extend(outcome.results)
    return results
