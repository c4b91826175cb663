"""Base connector types and protocol."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class SourceDescriptor:
    """One configured upstream video site."""

    key: str
    name: str
    api: str
    detail: str = ""
    kind: str = "maccms"


@dataclass(frozen=True)
class ResultRecord:
    """Source-agnostic search hit.

    Only title, description, category and year take part in ranking and
    filtering; the remaining fields are carried through untouched.
    """

    title: str
    source: str
    source_name: str
    id: str = ""
    description: str = ""
    category: str = ""
    year: str = ""
    poster: str = ""
    episodes: tuple[str, ...] = ()
    episode_titles: tuple[str, ...] = ()
    vod_class: str = ""
    douban_id: int = 0

    def to_dict(self) -> dict:
        """Render the wire shape returned to callers."""
        return {
            "id": self.id,
            "title": self.title,
            "poster": self.poster,
            "episodes": list(self.episodes),
            "episodes_titles": list(self.episode_titles),
            "source": self.source,
            "source_name": self.source_name,
            "class": self.vod_class,
            "year": self.year,
            "desc": self.description,
            "type_name": self.category,
            "douban_id": self.douban_id,
        }


class SourceError(Exception):
    """A source could not be searched or returned an unusable payload."""

    def __init__(self, source: str, reason: str):
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason


class Connector(ABC):
    """Base connector protocol for upstream sources."""

    name: str = "base"

    @abstractmethod
    async def search(self, descriptor: SourceDescriptor, query: str) -> list[ResultRecord]:
        """Search one source and return normalised records."""
        ...

    @abstractmethod
    def parse(self, descriptor: SourceDescriptor, payload: object) -> list[ResultRecord]:
        """Map a decoded provider payload to records.

        Returns an empty list for a recognised "no matches" payload and raises
        SourceError for anything malformed.
        """
        ...
