"""Shared test fixtures."""

from __future__ import annotations

import asyncio
import os
import sys
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone

import pytest

# Add src to path so imports work
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "../src")))

from newsocial.domain.entities import (
    HighlightExtractionRequest,
    NewsArticle,
    NewsHighlight,
    SocialMediaPost,
)
from newsocial.domain.enums import ContentTone, HighlightCategory, ProviderStatus, SocialPlatform
from newsocial.ports.outbound import ContentFormatterPort, ProviderClient
from newsocial.shared.providers.types import ProviderHealth


class FakeClock:
    """Controllable UTC clock for cache-TTL tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, *, ms: float) -> None:
        self.now += timedelta(milliseconds=ms)


class FakeProvider(ProviderClient):
    """In-memory provider with scriptable health and operation outcomes."""

    def __init__(
        self,
        name: str,
        *,
        status: ProviderStatus = ProviderStatus.HEALTHY,
        response_time_ms: float | None = 100.0,
        probe_error: Exception | None = None,
        probe_delay_s: float = 0.0,
        highlights: Sequence[NewsHighlight] | None = None,
        extract_error: Exception | None = None,
        posts: Sequence[SocialMediaPost] | None = None,
        content_error: Exception | None = None,
    ) -> None:
        self._name = name
        self.status = status
        self.response_time_ms = response_time_ms
        self.probe_error = probe_error
        self.probe_delay_s = probe_delay_s
        self.highlights = list(highlights) if highlights is not None else [
            NewsHighlight(f"{name} highlight", 3, HighlightCategory.GENERAL)
        ]
        self.extract_error = extract_error
        self.posts = posts
        self.content_error = content_error

        self.probe_calls = 0
        self.extract_calls: list[HighlightExtractionRequest] = []
        self.content_calls = 0

    @property
    def name(self) -> str:
        return self._name

    async def probe_health(self) -> ProviderHealth:
        self.probe_calls += 1
        if self.probe_delay_s:
            await asyncio.sleep(self.probe_delay_s)
        if self.probe_error is not None:
            raise self.probe_error
        return ProviderHealth(
            service_name=self._name,
            status=self.status,
            last_checked_at=datetime.now(timezone.utc),
            response_time_ms=self.response_time_ms,
        )

    async def extract_highlights(
        self, request: HighlightExtractionRequest
    ) -> list[NewsHighlight]:
        self.extract_calls.append(request)
        if self.extract_error is not None:
            raise self.extract_error
        return list(self.highlights)

    async def generate_social_content(
        self,
        highlights: Sequence[NewsHighlight],
        company_name: str,
        platforms: Sequence[SocialPlatform],
        tone: ContentTone = ContentTone.PROFESSIONAL,
    ) -> list[SocialMediaPost]:
        self.content_calls += 1
        if self.content_error is not None:
            raise self.content_error
        if self.posts is not None:
            return list(self.posts)
        return [
            SocialMediaPost(platform, f"{company_name} via {self._name}: {highlights[0].text}")
            for platform in platforms
        ]


class RecordingFormatter(ContentFormatterPort):
    """Formatter that echoes one post per platform and records its inputs."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[tuple[list[NewsHighlight], str, list[SocialPlatform], ContentTone]] = []

    async def format_posts(
        self,
        highlights: Sequence[NewsHighlight],
        company_name: str,
        platforms: Sequence[SocialPlatform],
        tone: ContentTone = ContentTone.PROFESSIONAL,
    ) -> list[SocialMediaPost]:
        self.calls.append((list(highlights), company_name, list(platforms), tone))
        if self.error is not None:
            raise self.error
        return [
            SocialMediaPost(platform, f"{company_name}: {highlights[0].text}", ("#News",))
            for platform in platforms
        ]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sample_article() -> NewsArticle:
    return NewsArticle(
        title="Acme Corp posts record quarterly revenue",
        content="Acme Corp reported revenue of $2.1 billion, up 18% year over year.",
        url="https://news.example.com/acme-q3",
        source_name="Example News",
    )


@pytest.fixture
def sample_highlights() -> list[NewsHighlight]:
    return [
        NewsHighlight("Acme revenue grew 18% to $2.1 billion", 5, HighlightCategory.FINANCIAL),
        NewsHighlight("Acme expands into three new markets", 3, HighlightCategory.STRATEGIC),
    ]
