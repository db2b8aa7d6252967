"""Domain-specific exception hierarchy.

All exceptions inherit from ``DomainError`` so callers can catch the entire
family in one clause.  Everything the AI orchestration layer surfaces is an
``AIServiceError`` whose ``kind`` lets callers branch without string-matching.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from newsocial.domain.enums import AIErrorKind, SocialPlatform


class DomainError(Exception):
    """Base class for all domain-layer errors."""

    def __init__(self, message: str, *, code: str = "DOMAIN_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(message)


# ── Validation ───────────────────────────────────────────────
class ValidationError(DomainError):
    """Input failed domain validation rules."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="VALIDATION_ERROR")


# ── AI services ──────────────────────────────────────────────
class AIServiceError(DomainError):
    """The single error shape surfaced by the orchestration core.

    Build instances through the classmethod constructors; each one fixes
    ``kind`` and the fields that variant carries.
    """

    def __init__(
        self,
        kind: AIErrorKind,
        message: str,
        *,
        service: str | None = None,
        cause: BaseException | None = None,
        failures: Iterable[AIServiceError] = (),
    ) -> None:
        super().__init__(message, code=kind.value)
        self.kind = kind
        self.service = service
        self.cause = cause
        self.failures: tuple[AIServiceError, ...] = tuple(failures)

    def __repr__(self) -> str:
        return f"AIServiceError(kind={self.kind.value!r}, service={self.service!r}, message={self.message!r})"

    # ── Variants ─────────────────────────────────────────────
    @classmethod
    def configuration(cls, message: str, *, cause: BaseException | None = None) -> AIServiceError:
        return cls(AIErrorKind.CONFIGURATION_ERROR, message, cause=cause)

    @classmethod
    def no_provider_available(cls) -> AIServiceError:
        return cls(
            AIErrorKind.NO_PROVIDER_AVAILABLE,
            "No AI provider is currently available",
        )

    @classmethod
    def all_providers_failed(cls, failures: Iterable[AIServiceError]) -> AIServiceError:
        failures = tuple(failures)
        names = [f.service for f in failures if f.service]
        detail = "; ".join(f"{f.service}: {f.message}" for f in failures)
        return cls(
            AIErrorKind.ALL_PROVIDERS_FAILED,
            f"All AI providers failed ({detail})" if detail else "All AI providers failed",
            service=",".join(names) or None,
            cause=failures[-1] if failures else None,
            failures=failures,
        )

    @classmethod
    def validation_failed(
        cls,
        message: str,
        *,
        service: str | None = None,
        cause: BaseException | None = None,
    ) -> AIServiceError:
        return cls(AIErrorKind.VALIDATION_FAILED, message, service=service, cause=cause)

    @classmethod
    def no_valid_platforms(cls, requested: Iterable[str]) -> AIServiceError:
        return cls.validation_failed(
            f"No valid platforms in {list(requested)!r}. "
            f"Supported platforms: {', '.join(SocialPlatform.supported())}"
        )

    @classmethod
    def provider_operation_failed(cls, service: str, cause: BaseException) -> AIServiceError:
        if (
            isinstance(cause, AIServiceError)
            and cause.kind == AIErrorKind.PROVIDER_OPERATION_FAILED
            and cause.service == service
        ):
            return cause
        return cls(
            AIErrorKind.PROVIDER_OPERATION_FAILED,
            f"{service} service failed: {type(cause).__name__}: {cause}",
            service=service,
            cause=cause,
        )

    # ── Introspection ────────────────────────────────────────
    @property
    def services(self) -> tuple[str, ...]:
        """Every provider name this error is attributed to."""
        if self.failures:
            return tuple(f.service for f in self.failures if f.service)
        return (self.service,) if self.service else ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "service": self.service,
            "services": list(self.services),
            "message": self.message,
        }
