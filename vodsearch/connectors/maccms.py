"""Apple CMS (MacCMS v10) connector for video sites."""

import asyncio
import html
import logging
import re

import httpx

from .base import Connector, ResultRecord, SourceDescriptor, SourceError
from ..config import settings

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
)

_M3U8_URL = re.compile(r"^https?://\S+?\.m3u8(\?\S*)?$")
_YEAR = re.compile(r"\d{4}")
_TAG = re.compile(r"<[^>]+>")
_SPACE = re.compile(r"\s+")


def clean_html(text: str) -> str:
    """Strip tags and entities from an upstream description."""
    text = html.unescape(_TAG.sub(" ", text))
    return _SPACE.sub(" ", text).strip()


def parse_play_url(play_url: str) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """
    Pick the playable episode list out of a vod_play_url field.

    The field holds play groups separated by "$$$", each a "#"-joined list of
    "title$url" entries. The group with the most m3u8 links wins.

    Returns:
        Tuple of (episode urls, episode titles)
    """
    best_urls: list[str] = []
    best_titles: list[str] = []

    for group in play_url.split("$$$"):
        urls: list[str] = []
        titles: list[str] = []
        for entry in group.split("#"):
            name, sep, url = entry.partition("$")
            if not sep:
                name, url = "", name
            url = url.strip()
            if _M3U8_URL.match(url):
                urls.append(url)
                titles.append(name.strip() or str(len(urls)))
        if len(urls) > len(best_urls):
            best_urls, best_titles = urls, titles

    return tuple(best_urls), tuple(best_titles)


def _page_count(payload: dict) -> int:
    try:
        return int(payload.get("pagecount") or 1)
    except (TypeError, ValueError):
        return 1


def _douban_id(value) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


class MacCMSConnector(Connector):
    """Connector for sites exposing the MacCMS JSON search API."""

    name = "maccms"

    def __init__(
        self,
        max_page: int | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.max_page = max_page or settings.search_max_page
        self.timeout = timeout or settings.request_timeout
        self.transport = transport

    async def search(self, descriptor: SourceDescriptor, query: str) -> list[ResultRecord]:
        """Execute MacCMS search, following extra pages up to max_page."""
        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self.transport,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            follow_redirects=True,
        ) as client:
            payload = await self._fetch(client, descriptor, query, page=1)
            results = self.parse(descriptor, payload)

            last_page = min(_page_count(payload), self.max_page)
            if not results or last_page < 2:
                return results

            pages = range(2, last_page + 1)
            extra = await asyncio.gather(
                *(self._fetch_records(client, descriptor, query, page) for page in pages),
                return_exceptions=True,
            )

        for page, records in zip(pages, extra):
            if isinstance(records, Exception):
                logger.warning("%s page %d skipped: %s", descriptor.name, page, records)
                continue
            results.extend(records)

        return results

    def parse(self, descriptor: SourceDescriptor, payload: object) -> list[ResultRecord]:
        if not isinstance(payload, dict) or not isinstance(payload.get("list"), list):
            raise SourceError(descriptor.key, "unexpected payload shape")

        items = payload["list"]
        if not items:
            return []

        records = []
        for item in items:
            if not isinstance(item, dict):
                continue
            record = self._to_record(descriptor, item)
            if record is not None:
                records.append(record)

        if not records:
            raise SourceError(descriptor.key, "no valid records in payload")
        return records

    async def _fetch(
        self,
        client: httpx.AsyncClient,
        descriptor: SourceDescriptor,
        query: str,
        page: int,
    ) -> object:
        params = {"ac": "videolist", "wd": query}
        if page > 1:
            params["pg"] = str(page)

        try:
            response = await client.get(descriptor.api, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise SourceError(descriptor.key, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise SourceError(descriptor.key, str(e) or type(e).__name__) from e
        except ValueError as e:
            raise SourceError(descriptor.key, "invalid JSON payload") from e

    async def _fetch_records(
        self,
        client: httpx.AsyncClient,
        descriptor: SourceDescriptor,
        query: str,
        page: int,
    ) -> list[ResultRecord]:
        payload = await self._fetch(client, descriptor, query, page)
        return self.parse(descriptor, payload)

    def _to_record(self, descriptor: SourceDescriptor, item: dict) -> ResultRecord | None:
        title = _SPACE.sub(" ", str(item.get("vod_name") or "")).strip()
        if not title:
            return None

        episodes, episode_titles = parse_play_url(str(item.get("vod_play_url") or ""))
        year = _YEAR.search(str(item.get("vod_year") or ""))

        return ResultRecord(
            id=str(item.get("vod_id", "")),
            title=title,
            source=descriptor.key,
            source_name=descriptor.name,
            description=clean_html(str(item.get("vod_content") or "")),
            category=str(item.get("type_name") or ""),
            year=year.group(0) if year else "unknown",
            poster=str(item.get("vod_pic") or ""),
            episodes=episodes,
            episode_titles=episode_titles,
            vod_class=str(item.get("vod_class") or ""),
            douban_id=_douban_id(item.get("vod_douban_id")),
        )
