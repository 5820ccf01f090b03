"""First-success iteration over ordered fallback candidates."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Iterable, TypeVar

from hf_wrapped.errors import TransientFetchError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class FallbackExhausted(Exception):
    """Every candidate failed or produced an unacceptable result."""

    def __init__(self, attempted: list, last_error: Exception | None) -> None:
        self.attempted = attempted
        self.last_error = last_error
        super().__init__(f"all {len(attempted)} candidates exhausted")


def dedupe(values: Iterable[str]) -> list[str]:
    """Drop empty strings and duplicates, keeping first-seen order."""
    return list(dict.fromkeys(v for v in values if v))


async def first_success(
    candidates: Iterable[T],
    attempt: Callable[[T], Awaitable[R]],
    accept: Callable[[R], bool] = bool,
) -> tuple[T, R]:
    """Run ``attempt`` on each candidate in order and return the first accepted result.

    A ``TransientFetchError`` abandons the candidate and moves on; a result
    rejected by ``accept`` does the same. Raises ``FallbackExhausted`` with
    the attempted candidates and the last error once the list runs out.
    """
    attempted: list[T] = []
    last_error: Exception | None = None
    for candidate in candidates:
        attempted.append(candidate)
        try:
            result = await attempt(candidate)
        except TransientFetchError as exc:
            logger.debug("candidate %r failed: %s", candidate, exc)
            last_error = exc
            continue
        if accept(result):
            return candidate, result
    raise FallbackExhausted(attempted, last_error)
