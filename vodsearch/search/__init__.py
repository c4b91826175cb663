"""Fan-out search, content policy and delivery."""

from .aggregator import SOURCE_TIMEOUT, Outcome, OutcomeStatus, SearchAggregator, flatten
from .delivery import BatchResult, BatchSearch, SearchStream
from .policy import ContentPolicy, filter_results

__all__ = [
    "SOURCE_TIMEOUT",
    "Outcome",
    "OutcomeStatus",
    "SearchAggregator",
    "flatten",
    "BatchResult",
    "BatchSearch",
    "SearchStream",
    "ContentPolicy",
    "filter_results",
]
