"""Configuration for the search service."""

from pydantic_settings import BaseSettings
from pydantic import Field


DEFAULT_DENYLIST = [
    "伦理片",
    "福利",
    "里番动漫",
    "门事件",
    "萝莉少女",
    "制服诱惑",
    "国产传媒",
    "cosplay",
    "黑丝诱惑",
    "无码",
    "日本无码",
    "有码",
    "日本有码",
    "SWAG",
    "网红主播",
    "色情片",
    "同性片",
    "福利视频",
    "福利片",
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Root log level")

    # Site Configuration
    config_file: str = Field(default="", description="Path to the JSON site config file")
    sites: dict[str, dict] = Field(
        default_factory=dict,
        description="Inline api_site mapping, used when no config file is set",
    )
    cache_time: int = Field(default=7200, description="Cache lifetime for search responses (seconds)")

    # Upstream Configuration
    search_max_page: int = Field(default=5, ge=1, description="Max result pages fetched per source")
    request_timeout: float = Field(default=20.0, description="HTTP timeout for a single upstream call")
    max_concurrent_sources: int = Field(
        default=0, ge=0, description="Cap on sources searched at once (0 = unbounded)"
    )

    # Content Policy
    disable_content_filter: bool = Field(default=False, description="Turn the category denylist off")
    content_denylist: list[str] = Field(
        default_factory=lambda: list(DEFAULT_DENYLIST),
        description="Category substrings removed from results",
    )

    # Auth
    auth_secret: str = Field(default="", description="HMAC secret for auth cookie signatures")

    model_config = {"env_prefix": "VODSEARCH_"}


settings = Settings()
