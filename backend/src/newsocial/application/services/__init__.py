"""Content Orchestration Service.

Caller-facing façade over the AI provider layer: extracts highlights from a
news article through the fallback orchestrator, then turns them into posts
for the requested social platforms.  Every failure leaves this service as an
``AIServiceError`` with a machine-readable ``kind``.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager

import structlog

from newsocial.domain.entities import (
    ArticleProcessingResult,
    HighlightExtractionRequest,
    NewsArticle,
    NewsHighlight,
    SocialContentResult,
    SocialMediaPost,
)
from newsocial.domain.enums import ContentTone, SocialPlatform
from newsocial.domain.exceptions import AIServiceError, ValidationError
from newsocial.ports.outbound import ContentFormatterPort
from newsocial.shared.observability.metrics import (
    CONTENT_PIPELINE_ERRORS,
    CONTENT_PROCESSING_DURATION,
)
from newsocial.shared.providers.gateway import FallbackOrchestrator
from newsocial.shared.providers.types import FallbackResult, HealthSnapshot, ProviderHealth

logger = structlog.get_logger(__name__)

FORMATTER_SERVICE = "content-formatter"
PIPELINE_SERVICE = "content-generation"
DEFAULT_PLATFORMS: tuple[str, ...] = (SocialPlatform.LINKEDIN.value,)


class ProviderContentFormatter(ContentFormatterPort):
    """Formats posts by asking the AI providers, with the same failover rules."""

    def __init__(self, orchestrator: FallbackOrchestrator) -> None:
        self._orchestrator = orchestrator

    async def format_posts(
        self,
        highlights: Sequence[NewsHighlight],
        company_name: str,
        platforms: Sequence[SocialPlatform],
        tone: ContentTone = ContentTone.PROFESSIONAL,
    ) -> list[SocialMediaPost]:
        result = await self.format_with_provider(highlights, company_name, platforms, tone)
        return result.value

    async def format_with_provider(
        self,
        highlights: Sequence[NewsHighlight],
        company_name: str,
        platforms: Sequence[SocialPlatform],
        tone: ContentTone = ContentTone.PROFESSIONAL,
    ) -> FallbackResult[list[SocialMediaPost]]:
        """Same as ``format_posts`` but keeps which provider served the call."""
        monitor = self._orchestrator.monitor
        result = await self._orchestrator.execute(
            lambda name: monitor.client(name).generate_social_content(
                highlights, company_name, platforms, tone
            ),
            operation_name="generate_social_content",
        )
        return FallbackResult(
            value=list(result.value or []),
            provider_used=result.provider_used,
            attempts=result.attempts,
        )


class ContentOrchestrationService:
    """Highlight extraction and social content generation with provider failover."""

    def __init__(
        self,
        orchestrator: FallbackOrchestrator,
        formatter: ContentFormatterPort | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._orchestrator = orchestrator
        self._monitor = orchestrator.monitor
        self._formatter = formatter or ProviderContentFormatter(orchestrator)
        self._clock = clock

    # ── Highlights ───────────────────────────────────────────
    async def extract_highlights(
        self, article: NewsArticle, company_name: str
    ) -> list[NewsHighlight]:
        """Extract highlights, most important first.

        An empty extraction is a failure: there is nothing to post about.
        """
        with self._normalized_errors("extract_highlights"):
            result = await self._extract(article, company_name)
        return list(result.value)

    async def _extract(
        self, article: NewsArticle, company_name: str
    ) -> FallbackResult[list[NewsHighlight]]:
        company_name = self._require_company(company_name)
        if not (article.title.strip() or (article.content or "").strip()):
            raise AIServiceError.validation_failed("Article has neither title nor content")

        request = HighlightExtractionRequest.from_article(article, company_name)
        log = logger.bind(company=company_name, source=article.source_name)

        result = await self._orchestrator.execute(
            lambda name: self._monitor.client(name).extract_highlights(request),
            operation_name="extract_highlights",
        )
        highlights = list(result.value or [])
        if not highlights:
            raise AIServiceError.validation_failed(
                "No highlights extracted from article", service=result.provider_used
            )

        # sorted() is stable: equal importance keeps provider order.
        ordered = sorted(highlights, key=lambda h: -h.importance)
        log.info(
            "highlights_extracted",
            provider=result.provider_used,
            count=len(ordered),
            used_fallback=result.used_fallback,
        )
        return FallbackResult(value=ordered, provider_used=result.provider_used, attempts=result.attempts)

    # ── Social content ───────────────────────────────────────
    async def generate_social_content(
        self,
        highlights: Sequence[NewsHighlight],
        company_name: str,
        platforms: Sequence[str] = DEFAULT_PLATFORMS,
        tone: ContentTone | str = ContentTone.PROFESSIONAL,
    ) -> SocialContentResult:
        with self._normalized_errors("generate_social_content"):
            return await self._generate(highlights, company_name, platforms, tone)

    async def _generate(
        self,
        highlights: Sequence[NewsHighlight],
        company_name: str,
        platforms: Sequence[str],
        tone: ContentTone | str,
    ) -> SocialContentResult:
        start = self._clock()
        if not highlights:
            raise AIServiceError.validation_failed(
                "No highlights provided for social content generation"
            )
        company_name = self._require_company(company_name)
        tone = self._parse_tone(tone)

        if isinstance(platforms, str):
            platforms = [platforms]
        selected = SocialPlatform.parse_many(platforms)
        if not selected:
            raise AIServiceError.no_valid_platforms(platforms)
        dropped = [p for p in platforms if str(p).strip().lower() not in SocialPlatform.supported()]
        if dropped:
            logger.debug("unsupported_platforms_dropped", platforms=dropped)

        provider: str | None = None
        try:
            if isinstance(self._formatter, ProviderContentFormatter):
                served = await self._formatter.format_with_provider(
                    list(highlights), company_name, selected, tone
                )
                posts, provider = served.value, served.provider_used
            else:
                posts = await self._formatter.format_posts(
                    list(highlights), company_name, selected, tone
                )
        except AIServiceError:
            raise
        except Exception as exc:
            raise AIServiceError.provider_operation_failed(FORMATTER_SERVICE, exc) from exc

        grouped: dict[SocialPlatform, list[SocialMediaPost]] = {p: [] for p in selected}
        for post in posts:
            if post.platform in grouped:
                grouped[post.platform].append(post)
        if not any(grouped.values()):
            raise AIServiceError.validation_failed(
                "No social content generated", service=FORMATTER_SERVICE
            )

        elapsed_s = self._clock() - start
        CONTENT_PROCESSING_DURATION.observe(elapsed_s)
        logger.info(
            "social_content_generated",
            company=company_name,
            provider=provider,
            platforms=[p.value for p in selected],
            posts=sum(len(v) for v in grouped.values()),
            processing_time_ms=round(elapsed_s * 1000, 1),
        )
        return SocialContentResult(
            company_name=company_name,
            tone=tone,
            posts_by_platform={p: tuple(v) for p, v in grouped.items()},
            processing_time_ms=elapsed_s * 1000,
            provider=provider,
        )

    # ── Full pipeline ────────────────────────────────────────
    async def process_article(
        self,
        article: NewsArticle,
        company_name: str,
        platforms: Sequence[str] = DEFAULT_PLATFORMS,
        tone: ContentTone | str = ContentTone.PROFESSIONAL,
    ) -> ArticleProcessingResult:
        """Extract highlights, then generate posts; stops at the first failure."""
        with self._normalized_errors("process_article"):
            extraction = await self._extract(article, company_name)
            social = await self._generate(extraction.value, company_name, platforms, tone)
        return ArticleProcessingResult(
            highlights=tuple(extraction.value),
            social_content=social,
            highlight_provider=extraction.provider_used,
        )

    # ── Health passthrough ───────────────────────────────────
    async def check_service_health(self) -> list[ProviderHealth]:
        snapshot = await self._monitor.get_snapshot(True)
        return list(snapshot.providers.values())

    async def get_health_status(self) -> HealthSnapshot:
        return await self._monitor.get_snapshot(False)

    def reset_health_status(self) -> None:
        self._monitor.reset_cache()

    # ── Helpers ──────────────────────────────────────────────
    @staticmethod
    def _require_company(company_name: str) -> str:
        name = (company_name or "").strip()
        if not name:
            raise AIServiceError.validation_failed("Company name is required")
        return name

    @staticmethod
    def _parse_tone(tone: ContentTone | str) -> ContentTone:
        if isinstance(tone, ContentTone):
            return tone
        try:
            return ContentTone(str(tone).strip().lower())
        except ValueError:
            raise AIServiceError.validation_failed(
                f"Unsupported tone {tone!r}. Supported tones: "
                f"{', '.join(t.value for t in ContentTone)}"
            ) from None

    @contextmanager
    def _normalized_errors(self, operation: str) -> Iterator[None]:
        """Re-raise every failure as an ``AIServiceError``."""
        try:
            yield
        except AIServiceError as exc:
            CONTENT_PIPELINE_ERRORS.labels(operation=operation, kind=exc.kind.value).inc()
            logger.warning("content_operation_failed", operation=operation, **exc.to_dict())
            raise
        except ValidationError as exc:
            error = AIServiceError.validation_failed(exc.message, cause=exc)
            CONTENT_PIPELINE_ERRORS.labels(operation=operation, kind=error.kind.value).inc()
            logger.warning("content_operation_failed", operation=operation, **error.to_dict())
            raise error from exc
        except Exception as exc:
            error = AIServiceError.provider_operation_failed(PIPELINE_SERVICE, exc)
            CONTENT_PIPELINE_ERRORS.labels(operation=operation, kind=error.kind.value).inc()
            logger.exception("content_operation_failed", operation=operation, **error.to_dict())
            raise error from exc
