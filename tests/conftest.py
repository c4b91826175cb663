"""Pytest configuration and fixtures."""

import asyncio
import os
from dataclasses import dataclass, field
from pathlib import Path

import pytest
from dotenv import load_dotenv

from vodsearch.connectors.base import Connector, ResultRecord, SourceDescriptor

# Load test environment
test_env = Path(__file__).parent / ".env"
if test_env.exists():
    load_dotenv(test_env)


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (require external services)")


def make_record(title: str, source: str = "s1", **kwargs) -> ResultRecord:
    """Build a result record with sensible defaults."""
    return ResultRecord(title=title, source=source, source_name=source.upper(), **kwargs)


def make_source(key: str, name: str | None = None) -> SourceDescriptor:
    return SourceDescriptor(key=key, name=name or key.upper(), api=f"https://{key}.example.com/api.php/provide/vod")


@dataclass
class Scripted:
    """Canned behaviour for one source."""

    results: list[ResultRecord] = field(default_factory=list)
    delay: float = 0.0
    error: Exception | None = None


class FakeConnector(Connector):
    """Connector that replays scripted behaviour per source key."""

    name = "fake"

    def __init__(self, script: dict[str, Scripted]):
        self.script = script
        self.started: list[str] = []
        self.finished: list[str] = []

    async def search(self, descriptor: SourceDescriptor, query: str) -> list[ResultRecord]:
        behaviour = self.script[descriptor.key]
        self.started.append(descriptor.key)
        if behaviour.delay:
            await asyncio.sleep(behaviour.delay)
        self.finished.append(descriptor.key)
        if behaviour.error is not None:
            raise behaviour.error
        return list(behaviour.results)

    def parse(self, descriptor: SourceDescriptor, payload: object) -> list[ResultRecord]:
        return list(payload)


@pytest.fixture
def sample_query():
    """Sample search query for tests."""
    return "Avatar"


@pytest.fixture
def sample_records():
    """Records as two different sites would return them."""
    return [
        make_record("Avatar: The Way of Water", source="s2", year="2022", category="科幻片"),
        make_record("Avatar", source="s1", year="2009", category="动作片"),
        make_record("Avatar Legends", source="s1", year="2024", category="伦理片"),
    ]


@pytest.fixture
def maccms_item():
    """One raw MacCMS list item."""
    return {
        "vod_id": 1024,
        "vod_name": "  Avatar   The Way of Water ",
        "vod_pic": "https://img.example.com/avatar.jpg",
        "vod_remarks": "HD",
        "vod_play_url": (
            "第1集$https://cdn.example.com/1.mp4$$$"
            "第1集$https://cdn.example.com/1.m3u8#第2集$https://cdn.example.com/2.m3u8"
        ),
        "vod_class": "科幻,冒险",
        "vod_year": "2022年",
        "vod_content": "<p>Jake&nbsp;Sully <b>returns</b></p>",
        "type_name": "科幻片",
        "vod_douban_id": "4811774",
    }


@pytest.fixture
def live_site():
    """A real MacCMS site from the environment, or skip."""
    api = os.getenv("VODSEARCH_TEST_SITE_API", "")
    if not api:
        pytest.skip("VODSEARCH_TEST_SITE_API not configured")
    return SourceDescriptor(key="live", name="Live Site", api=api)
