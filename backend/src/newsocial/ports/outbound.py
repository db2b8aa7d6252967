"""Outbound ports — interfaces that provider and formatter adapters implement.

The orchestration layer depends only on these abstractions, never on a
concrete text-generation SDK or HTTP client.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from newsocial.domain.entities import (
    HighlightExtractionRequest,
    NewsHighlight,
    SocialMediaPost,
)
from newsocial.domain.enums import ContentTone, SocialPlatform
from newsocial.shared.providers.types import ProviderHealth


# ═══════════════════════════════════════════════════════════════
#  Provider client port
# ═══════════════════════════════════════════════════════════════
class ProviderClient(ABC):
    """One text-generation backend (e.g. ``openai``, ``claude``).

    Per-request timeouts and transport-level retries belong here, not in
    the orchestration layer.
    """

    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    async def probe_health(self) -> ProviderHealth:
        """Report current health.

        Must not raise: failures are reported as an ``unhealthy`` result.
        """
        ...

    @abstractmethod
    async def extract_highlights(
        self, request: HighlightExtractionRequest
    ) -> list[NewsHighlight]:
        """Extract key highlights from one article.  May raise on failure."""
        ...

    @abstractmethod
    async def generate_social_content(
        self,
        highlights: Sequence[NewsHighlight],
        company_name: str,
        platforms: Sequence[SocialPlatform],
        tone: ContentTone = ContentTone.PROFESSIONAL,
    ) -> list[SocialMediaPost]: ...


# ═══════════════════════════════════════════════════════════════
#  Content formatter port
# ═══════════════════════════════════════════════════════════════
class ContentFormatterPort(ABC):
    """Turns highlights into platform-ready posts (content, hashtags, length)."""

    @abstractmethod
    async def format_posts(
        self,
        highlights: Sequence[NewsHighlight],
        company_name: str,
        platforms: Sequence[SocialPlatform],
        tone: ContentTone = ContentTone.PROFESSIONAL,
    ) -> list[SocialMediaPost]: ...
