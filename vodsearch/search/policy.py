"""Category denylist applied to search results."""

from dataclasses import dataclass, field

from ..config import settings
from ..connectors.base import ResultRecord


def filter_results(
    results: list[ResultRecord],
    denylist: list[str],
    enabled: bool = True,
) -> list[ResultRecord]:
    """
    Drop results whose category label contains a denylisted term.

    Matching is a case-sensitive substring test on the raw label.
    When disabled the input list is returned as is.
    """
    if not enabled:
        return results
    terms = [term for term in denylist if term]
    if not terms:
        return list(results)
    return [
        record for record in results
        if not any(term in record.category for term in terms)
    ]


@dataclass(frozen=True)
class ContentPolicy:
    """Content filter settings for one request."""

    enabled: bool = True
    denylist: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_settings(cls) -> "ContentPolicy":
        return cls(
            enabled=not settings.disable_content_filter,
            denylist=tuple(settings.content_denylist),
        )

    def apply(self, results: list[ResultRecord]) -> list[ResultRecord]:
        return filter_results(results, list(self.denylist), self.enabled)
