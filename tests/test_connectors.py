"""Tests for source connectors."""

import httpx
import pytest

from vodsearch.connectors import MacCMSConnector, SourceError, get_connector
from vodsearch.connectors.base import ResultRecord, SourceDescriptor
from vodsearch.connectors.maccms import clean_html, parse_play_url

SITE = SourceDescriptor(key="demo", name="Demo Site", api="https://demo.example.com/api.php/provide/vod")


def page_payload(items, pagecount=1):
    return {"code": 1, "msg": "数据列表", "page": 1, "pagecount": pagecount, "list": items}


def connector_for(handler, **kwargs) -> MacCMSConnector:
    return MacCMSConnector(transport=httpx.MockTransport(handler), **kwargs)


class TestParsePlayUrl:
    """Tests for episode extraction."""

    @pytest.mark.unit
    def test_picks_group_with_most_m3u8_links(self):
        play_url = (
            "第1集$https://a.example.com/1.mp4#第2集$https://a.example.com/2.mp4$$$"
            "第1集$https://b.example.com/1.m3u8#第2集$https://b.example.com/2.m3u8"
        )
        episodes, titles = parse_play_url(play_url)

        assert episodes == ("https://b.example.com/1.m3u8", "https://b.example.com/2.m3u8")
        assert titles == ("第1集", "第2集")

    @pytest.mark.unit
    def test_untitled_entries_are_numbered(self):
        episodes, titles = parse_play_url("https://a.example.com/1.m3u8#https://a.example.com/2.m3u8")

        assert len(episodes) == 2
        assert titles == ("1", "2")

    @pytest.mark.unit
    def test_signed_m3u8_links_are_kept(self):
        episodes, titles = parse_play_url(
            "第1集$https://a.example.com/index.m3u8?sign=abc&t=1700000000"
        )

        assert episodes == ("https://a.example.com/index.m3u8?sign=abc&t=1700000000",)
        assert titles == ("第1集",)

    @pytest.mark.unit
    def test_empty_field(self):
        assert parse_play_url("") == ((), ())


class TestCleanHtml:
    """Tests for description cleanup."""

    @pytest.mark.unit
    def test_strips_tags_and_entities(self):
        assert clean_html("<p>Jake&nbsp;Sully <b>returns</b></p>") == "Jake Sully returns"


class TestMacCMSConnector:
    """Tests for the MacCMS connector."""

    @pytest.mark.unit
    def test_connector_name(self):
        """Verify connector name."""
        assert MacCMSConnector().name == "maccms"

    @pytest.mark.unit
    def test_parse_normalises_item(self, maccms_item):
        records = MacCMSConnector().parse(SITE, page_payload([maccms_item]))

        assert len(records) == 1
        record = records[0]
        assert isinstance(record, ResultRecord)
        assert record.id == "1024"
        assert record.title == "Avatar The Way of Water"
        assert record.description == "Jake Sully returns"
        assert record.category == "科幻片"
        assert record.year == "2022"
        assert record.source == "demo"
        assert record.source_name == "Demo Site"
        assert record.episodes == ("https://cdn.example.com/1.m3u8", "https://cdn.example.com/2.m3u8")
        assert record.douban_id == 4811774

    @pytest.mark.unit
    def test_parse_drops_empty_titles(self, maccms_item):
        blank = dict(maccms_item, vod_name="   ")
        records = MacCMSConnector().parse(SITE, page_payload([blank, maccms_item]))

        assert [r.id for r in records] == ["1024"]

    @pytest.mark.unit
    def test_parse_unknown_year(self, maccms_item):
        item = dict(maccms_item, vod_year="")
        record = MacCMSConnector().parse(SITE, page_payload([item]))[0]
        assert record.year == "unknown"

    @pytest.mark.unit
    def test_parse_empty_list_is_no_matches(self):
        assert MacCMSConnector().parse(SITE, page_payload([])) == []

    @pytest.mark.unit
    @pytest.mark.parametrize("payload", [None, [], {"code": 0}, {"list": "nope"}])
    def test_parse_malformed_payload_raises(self, payload):
        with pytest.raises(SourceError):
            MacCMSConnector().parse(SITE, payload)

    @pytest.mark.unit
    def test_parse_without_any_valid_record_raises(self):
        with pytest.raises(SourceError, match="no valid records"):
            MacCMSConnector().parse(SITE, page_payload([{"vod_name": ""}, "junk"]))

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_search_builds_request(self, maccms_item):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=page_payload([maccms_item]))

        records = await connector_for(handler).search(SITE, "阿凡达 2")

        assert len(records) == 1
        params = seen[0].url.params
        assert params["ac"] == "videolist"
        assert params["wd"] == "阿凡达 2"
        assert "pg" not in params
        assert seen[0].url.host == "demo.example.com"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_search_follows_pages_up_to_max(self, maccms_item):
        pages = []

        def handler(request: httpx.Request) -> httpx.Response:
            page = int(request.url.params.get("pg", "1"))
            pages.append(page)
            item = dict(maccms_item, vod_id=page, vod_name=f"Avatar {page}")
            return httpx.Response(200, json=page_payload([item], pagecount=5))

        records = await connector_for(handler, max_page=3).search(SITE, "Avatar")

        assert sorted(pages) == [1, 2, 3]
        assert [r.title for r in records] == ["Avatar 1", "Avatar 2", "Avatar 3"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_search_skips_failing_extra_page(self, maccms_item):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.params.get("pg") == "2":
                return httpx.Response(502)
            return httpx.Response(200, json=page_payload([maccms_item], pagecount=2))

        records = await connector_for(handler, max_page=5).search(SITE, "Avatar")

        assert len(records) == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_search_empty_result(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=page_payload([], pagecount=0))

        assert await connector_for(handler).search(SITE, "nothing") == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_search_http_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        with pytest.raises(SourceError, match="HTTP 503"):
            await connector_for(handler).search(SITE, "Avatar")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_search_invalid_json_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>maintenance</html>")

        with pytest.raises(SourceError, match="invalid JSON"):
            await connector_for(handler).search(SITE, "Avatar")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_search_network_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(SourceError) as exc_info:
            await connector_for(handler).search(SITE, "Avatar")
        assert exc_info.value.source == "demo"


class TestConnectorRegistry:
    """Tests for connector lookup by source kind."""

    @pytest.mark.unit
    def test_maccms_kind(self):
        connector = get_connector(SITE)
        assert isinstance(connector, MacCMSConnector)
        assert get_connector(SITE) is connector

    @pytest.mark.unit
    def test_unknown_kind_raises(self):
        site = SourceDescriptor(key="odd", name="Odd", api="https://odd.example.com", kind="rss")
        with pytest.raises(SourceError, match="unsupported source kind"):
            get_connector(site)


class TestResultRecord:
    """Tests for the result data model."""

    @pytest.mark.unit
    def test_to_dict_wire_shape(self):
        record = ResultRecord(
            title="Avatar",
            source="demo",
            source_name="Demo Site",
            description="Pandora",
            category="科幻片",
            vod_class="科幻",
            episodes=("https://cdn.example.com/1.m3u8",),
        )
        data = record.to_dict()

        assert data["desc"] == "Pandora"
        assert data["type_name"] == "科幻片"
        assert data["class"] == "科幻"
        assert data["episodes"] == ["https://cdn.example.com/1.m3u8"]
        assert data["episodes_titles"] == []
