"""Guards for async operations that must not run twice or apply stale results.

This module provides:
- OnceGuard for work that must run at most once per guard (session restore)
- RequestSequence for discarding responses that were superseded by a newer
  request of the same kind

Usage:
    from utils.request_guards import OnceGuard, RequestSequence

    guard = OnceGuard()
    user = await guard.run(restore_session)   # runs restore_session
    user = await guard.run(restore_session)   # returns the first result
                                              # (a failed run is retried)

    sequence = RequestSequence()
    ticket = sequence.next("page")
    page = await fetch_page()
    if sequence.is_current("page", ticket):
        apply(page)
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

T = TypeVar("T")


class OnceGuard:
    """Run an async operation at most once and share its outcome.

    The first call to ``run`` starts the operation; concurrent callers await
    the same future and receive the same result or exception. A successful
    result is kept for later callers until ``reset``. A failed or cancelled
    run is forgotten once it finishes, so the next call starts a new attempt.
    """

    def __init__(self) -> None:
        self._future: asyncio.Future[Any] | None = None

    @property
    def started(self) -> bool:
        """Whether the guarded operation has been started."""
        return self._future is not None

    @property
    def done(self) -> bool:
        """Whether the guarded operation has finished and its result is kept."""
        return self._future is not None and self._future.done()

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run ``operation`` the first time; afterwards return its outcome."""
        if self._future is None:
            future = asyncio.ensure_future(operation())
            future.add_done_callback(self._forget_failure)
            self._future = future
        return await asyncio.shield(self._future)

    def _forget_failure(self, future: asyncio.Future[Any]) -> None:
        if future is not self._future:
            return
        if future.cancelled() or future.exception() is not None:
            self._future = None

    def reset(self) -> None:
        """Forget the previous outcome (e.g. after sign-out)."""
        if self._future is not None and not self._future.done():
            self._future.cancel()
        self._future = None


class RequestSequence:
    """Monotonic request tickets per fetch kind.

    Each call to ``next`` invalidates every earlier ticket of the same kind,
    so a response is applied only when its ticket is still the latest.
    """

    def __init__(self) -> None:
        self._counter = 0
        self._latest: dict[str, int] = {}

    def next(self, kind: str) -> int:
        """Issue a new ticket for ``kind``."""
        self._counter += 1
        self._latest[kind] = self._counter
        return self._counter

    def is_current(self, kind: str, ticket: int) -> bool:
        """Check whether ``ticket`` is the latest issued for ``kind``."""
        return self._latest.get(kind) == ticket

    def invalidate(self, kind: str) -> None:
        """Make every outstanding ticket of ``kind`` stale."""
        self._counter += 1
        self._latest[kind] = self._counter
