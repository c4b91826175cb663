#!/usr/bin/env python3
"""Quick search against the configured sites for local development."""

import asyncio
import sys
sys.path.insert(0, ".")

from vodsearch.ranking import rank_results
from vodsearch.search import ContentPolicy, OutcomeStatus, SearchAggregator, flatten
from vodsearch.sites import get_site_config


async def main(query: str):
    sources = get_site_config().sources()
    print(f"Searching {len(sources)} sites for {query!r}...")
    if not sources:
        print("  No sites configured (set VODSEARCH_CONFIG_FILE or VODSEARCH_SITES)")
        return

    aggregator = SearchAggregator()
    outcomes = await aggregator.dispatch(sources, query)
    for key, outcome in outcomes.items():
        detail = f"{len(outcome.results)} results" if outcome.ok else outcome.reason
        print(f"  {key:<16} {outcome.status.value:<8} {detail}")

    failed = sum(1 for o in outcomes.values() if o.status in (OutcomeStatus.TIMEOUT, OutcomeStatus.ERROR))
    print(f"\n{failed}/{len(outcomes)} sites failed")

    results = ContentPolicy.from_settings().apply(rank_results(flatten(outcomes), query))
    print(f"Top results ({len(results)} total):")
    for record in results[:10]:
        print(f"  - {record.title} ({record.year}) [{record.source_name}] {record.category}")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("usage: search_local.py <query>")
        sys.exit(1)
    asyncio.run(main(" ".join(sys.argv[1:])))
