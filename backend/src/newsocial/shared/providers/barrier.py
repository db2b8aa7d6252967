"""Settle-all join for concurrent provider calls.

Unlike ``asyncio.gather`` without ``return_exceptions``, one failing task
never aborts or hides the others: every awaitable runs to completion and
its outcome is captured.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Settled(Generic[T]):
    """Outcome of one awaitable: exactly one of ``value`` / ``error`` is meaningful."""

    index: int
    value: T | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def settle_all(awaitables: Iterable[Awaitable[T]]) -> list[Settled[T]]:
    """Await every awaitable concurrently and return their outcomes in input order.

    Cancellation of the caller still propagates; an individual task being
    cancelled is recorded as that task's error.
    """
    outcomes = await asyncio.gather(*awaitables, return_exceptions=True)
    settled: list[Settled[T]] = []
    for idx, outcome in enumerate(outcomes):
        if isinstance(outcome, BaseException):
            settled.append(Settled(index=idx, error=outcome))
        else:
            settled.append(Settled(index=idx, value=outcome))
    return settled


def partition(settled: Iterable[Settled[T]]) -> tuple[list[Settled[T]], list[Settled[T]]]:
    """Split outcomes into (succeeded, failed)."""
    succeeded: list[Settled[T]] = []
    failed: list[Settled[T]] = []
    for outcome in settled:
        (succeeded if outcome.ok else failed).append(outcome)
    return succeeded, failed
