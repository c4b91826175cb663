"""Site configuration: which sources exist and who may search them."""

import json
import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field

from .config import settings
from .connectors.base import SourceDescriptor

logger = logging.getLogger(__name__)


class SiteEntry(BaseModel):
    """One entry of the api_site mapping."""

    name: str
    api: str
    detail: str = ""
    kind: str = "maccms"
    disabled: bool = False


class UserEntry(BaseModel):
    """Per-user source restrictions."""

    enabled_apis: list[str] = Field(default_factory=list)


class SiteConfig(BaseModel):
    """Configured sources and per-user access."""

    cache_time: int | None = None
    api_site: dict[str, SiteEntry] = Field(default_factory=dict)
    users: dict[str, UserEntry] = Field(default_factory=dict)

    @classmethod
    def load(cls, path: str | Path) -> "SiteConfig":
        """Read a JSON config file."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        config = cls.model_validate(data)
        logger.info("Loaded %d sites from %s", len(config.api_site), path)
        return config

    def sources(self) -> list[SourceDescriptor]:
        """All enabled sources, in configuration order."""
        return [
            SourceDescriptor(
                key=key,
                name=entry.name,
                api=entry.api,
                detail=entry.detail,
                kind=entry.kind,
            )
            for key, entry in self.api_site.items()
            if not entry.disabled
        ]

    def available_sources(self, username: str) -> list[SourceDescriptor]:
        """
        Sources a user may search.

        A user with a non-empty enabled_apis list only sees those sites;
        everyone else sees every enabled site.
        """
        sources = self.sources()
        user = self.users.get(username)
        if user and user.enabled_apis:
            allowed = set(user.enabled_apis)
            sources = [s for s in sources if s.key in allowed]
        return sources

    def resolved_cache_time(self) -> int:
        if self.cache_time is not None:
            return self.cache_time
        return settings.cache_time


@lru_cache
def get_site_config() -> SiteConfig:
    """Site config from the config file, else from the inline sites setting."""
    if settings.config_file:
        return SiteConfig.load(settings.config_file)
    return SiteConfig.model_validate({"api_site": settings.sites})
