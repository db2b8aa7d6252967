"""Domain value types for articles, highlights, and social posts.

These are immutable and validate themselves at construction time so the
orchestration layer can trust their contents without re-checking.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Mapping

from newsocial.domain.enums import ContentTone, HighlightCategory, SocialPlatform
from newsocial.domain.exceptions import ValidationError

MIN_IMPORTANCE = 0.0
MAX_IMPORTANCE = 5.0


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ═══════════════════════════════════════════════════════════════
#  News input
# ═══════════════════════════════════════════════════════════════
@dataclass(frozen=True, slots=True)
class NewsArticle:
    """A processed article as delivered by the news-retrieval client."""

    title: str
    content: str = ""
    url: str = ""
    source_name: str = ""
    published_at: datetime = field(default_factory=_utcnow)
    relevance_score: float | None = None


@dataclass(frozen=True, slots=True)
class HighlightExtractionRequest:
    title: str
    content: str
    source_name: str
    company_name: str

    @classmethod
    def from_article(cls, article: NewsArticle, company_name: str) -> HighlightExtractionRequest:
        return cls(
            title=article.title,
            content=article.content or "",
            source_name=article.source_name,
            company_name=company_name,
        )


# ═══════════════════════════════════════════════════════════════
#  Highlights
# ═══════════════════════════════════════════════════════════════
@dataclass(frozen=True, slots=True)
class NewsHighlight:
    """One key insight extracted from an article.

    ``importance`` is either on the 1–5 scale or a 0–1 normalised score;
    anything outside ``[0, 5]`` is rejected.
    """

    text: str
    importance: float
    category: HighlightCategory = HighlightCategory.GENERAL

    def __post_init__(self) -> None:
        if not self.text or not self.text.strip():
            raise ValidationError("Highlight text must not be empty")
        if not MIN_IMPORTANCE <= self.importance <= MAX_IMPORTANCE:
            raise ValidationError(
                f"Highlight importance {self.importance} outside "
                f"[{MIN_IMPORTANCE:g}, {MAX_IMPORTANCE:g}]"
            )
        if not isinstance(self.category, HighlightCategory):
            try:
                object.__setattr__(self, "category", HighlightCategory(self.category))
            except ValueError:
                raise ValidationError(f"Unknown highlight category: {self.category!r}") from None


# ═══════════════════════════════════════════════════════════════
#  Social content
# ═══════════════════════════════════════════════════════════════
@dataclass(frozen=True, slots=True)
class SocialMediaPost:
    platform: SocialPlatform
    content: str
    hashtags: tuple[str, ...] = ()
    character_count: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.hashtags, tuple):
            object.__setattr__(self, "hashtags", tuple(self.hashtags))
        if not self.character_count:
            tags = " ".join(self.hashtags)
            count = len(self.content) + (len(tags) + 1 if tags else 0)
            object.__setattr__(self, "character_count", count)


@dataclass(frozen=True, slots=True)
class SocialContentResult:
    """Posts grouped by platform, how long generation took, and who served them.

    ``provider`` is the AI provider that wrote the posts, or ``None`` when an
    injected formatter produced them without one.
    """

    company_name: str
    tone: ContentTone
    posts_by_platform: Mapping[SocialPlatform, tuple[SocialMediaPost, ...]]
    processing_time_ms: float = 0.0
    provider: str | None = None

    def __post_init__(self) -> None:
        frozen = {p: tuple(posts) for p, posts in self.posts_by_platform.items()}
        object.__setattr__(self, "posts_by_platform", MappingProxyType(frozen))

    @property
    def platforms(self) -> list[SocialPlatform]:
        return list(self.posts_by_platform)

    @property
    def posts(self) -> list[SocialMediaPost]:
        return [post for posts in self.posts_by_platform.values() for post in posts]


@dataclass(frozen=True, slots=True)
class ArticleProcessingResult:
    highlights: tuple[NewsHighlight, ...]
    social_content: SocialContentResult
    highlight_provider: str
