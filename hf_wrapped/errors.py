"""Error taxonomy for wrapped generation.

Only ``NotFoundError`` and ``RefreshWindowClosedError`` ever reach the caller of
``generate_wrapped``. ``TransientFetchError`` is raised by the Hub client and is
always caught by the resolver, the fetcher or the cache.
"""

from __future__ import annotations

from datetime import datetime


class WrappedError(Exception):
    """Base class for every error raised by hf_wrapped."""


class NotFoundError(WrappedError):
    """No organization or user matched any variant of the handle."""

    def __init__(self, handle: str, attempted: list[str], last_error: Exception | None = None) -> None:
        self.handle = handle
        self.attempted = attempted
        self.last_error = last_error
        message = f"Handle not found on Hugging Face Hub (tried: {', '.join(attempted)})"
        if last_error is not None:
            message += f"; last error: {last_error}"
        super().__init__(message)


class RefreshWindowClosedError(WrappedError):
    """A refresh was requested after the freeze cutoff."""

    def __init__(self, year: int, freeze_at: datetime) -> None:
        self.year = year
        self.freeze_at = freeze_at
        super().__init__(
            f"Refresh window is closed for {year} (frozen since {freeze_at.isoformat()})"
        )


class TransientFetchError(WrappedError):
    """A single Hub request failed: transport error, non-2xx status or bad JSON."""

    def __init__(self, url: str, reason: str, status_code: int | None = None) -> None:
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Failed to fetch {url}: {reason}")
