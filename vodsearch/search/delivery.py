"""Batch and streaming delivery of aggregated search results."""

import json
import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import aclosing
from dataclasses import dataclass

from ..connectors.base import ResultRecord, SourceDescriptor
from ..ranking import rank_results
from .aggregator import SOURCE_TIMEOUT, Outcome, SearchAggregator, flatten
from .policy import ContentPolicy

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Ranked results plus whether the response may be cached."""

    results: list[ResultRecord]
    cacheable: bool


class BatchSearch:
    """Waits for every source, then ranks and filters the combined list once."""

    def __init__(
        self,
        aggregator: SearchAggregator,
        policy: ContentPolicy,
        timeout: float = SOURCE_TIMEOUT,
    ):
        self.aggregator = aggregator
        self.policy = policy
        self.timeout = timeout

    async def run(self, query: str, sources: list[SourceDescriptor]) -> BatchResult:
        """
        Execute a batch search.

        An empty result is never cacheable, so an outage of every source does
        not get cached as "no matches".
        """
        query = query.strip()
        if not query:
            return BatchResult(results=[], cacheable=True)

        outcomes = await self.aggregator.dispatch(sources, query, timeout=self.timeout)
        results = rank_results(flatten(outcomes), query)
        results = self.policy.apply(results)

        logger.info(
            "Search %r: %d results from %d/%d sources",
            query,
            len(results),
            sum(1 for o in outcomes.values() if o.ok),
            len(sources),
        )
        return BatchResult(results=results, cacheable=bool(results))


def _timestamp() -> int:
    return int(time.time() * 1000)


def to_sse(event: dict) -> str:
    return f"data: {json.dumps(event, ensure_ascii=False)}\n\n"


async def _connected() -> bool:
    return False


class SearchStream:
    """
    Per-request event stream over a one-way channel.

    Emits ``start``, then one ``source_result`` or ``source_error`` per source
    as it settles, then ``complete``. Outcomes arrive through a single
    iterator, which is the only writer of the completion counter.
    """

    def __init__(
        self,
        aggregator: SearchAggregator,
        query: str,
        sources: list[SourceDescriptor],
        policy: ContentPolicy,
        is_disconnected: Callable[[], Awaitable[bool]] | None = None,
        timeout: float = SOURCE_TIMEOUT,
    ):
        self.aggregator = aggregator
        self.raw_query = query
        self.query = query.strip()
        self.sources = sources
        self.policy = policy
        self.is_disconnected = is_disconnected or _connected
        self.timeout = timeout

        self.closed = False
        self.completed = 0
        self.total_results = 0

    def close(self) -> None:
        """Stop emitting; in-flight sources finish and are discarded."""
        self.closed = True

    async def events(self) -> AsyncIterator[str]:
        """Yield SSE frames until every source is accounted for or the client leaves."""
        frame = await self._emit({
            "type": "start",
            "query": self.raw_query,
            "totalSources": len(self.sources),
        })
        if frame is None:
            return
        yield frame

        settled = self.aggregator.settle(self.sources, self.query, timeout=self.timeout)
        async with aclosing(settled) as outcomes:
            async for outcome in outcomes:
                self.completed += 1
                frame = await self._emit(self._outcome_event(outcome))
                if frame is None:
                    return
                yield frame

        if self.completed == len(self.sources):
            frame = await self._emit({
                "type": "complete",
                "totalResults": self.total_results,
                "completedSources": self.completed,
            })
            if frame is not None:
                yield frame

    def _outcome_event(self, outcome: Outcome) -> dict:
        """Build the per-source event; a failure here only fails that source."""
        if outcome.ok:
            try:
                results = self.policy.apply(rank_results(list(outcome.results), self.query))
            except Exception:
                logger.exception("Ranking failed for %s", outcome.source.name)
            else:
                self.total_results += len(results)
                return {
                    "type": "source_result",
                    "source": outcome.source.key,
                    "sourceName": outcome.source.name,
                    "results": [r.to_dict() for r in results],
                }

        return {
            "type": "source_error",
            "source": outcome.source.key,
            "sourceName": outcome.source.name,
            "error": outcome.reason or "search failed",
        }

    async def _emit(self, event: dict) -> str | None:
        """Render an event, or None once the channel can no longer take writes."""
        if self.closed:
            return None
        if await self.is_disconnected():
            logger.info(
                "Search stream %r: client disconnected after %d/%d sources",
                self.query,
                self.completed,
                len(self.sources),
            )
            self.close()
            return None
        event["timestamp"] = _timestamp()
        return to_sse(event)
