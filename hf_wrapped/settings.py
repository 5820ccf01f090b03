"""Configuration loaded from environment variables.

Usage:
    from hf_wrapped.settings import Settings
    settings = Settings()
    settings.cache_readable   # True when WRAPPED_DATASET_ID is set

Values are read at instantiation time so tests can override them with
``monkeypatch.setenv``. ``.env`` files are loaded by the CLI and the server
entry points, not here.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone

from hf_wrapped.utils.dates import parse_timestamp

DEFAULT_HUB_URL = "https://huggingface.co"
#: Single global cutoff after which no year can be refreshed.
DEFAULT_FREEZE_AT = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _env_int(name: str, default: int | None) -> int | None:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() == "true"


def _env_freeze_at() -> datetime:
    return parse_timestamp(os.environ.get("WRAPPED_FREEZE_AT")) or DEFAULT_FREEZE_AT


@dataclass
class Settings:
    """Centralised configuration for the Hub client, cache and HTTP surface."""

    # ── Hub ─────────────────────────────────────────────────────────────────
    hub_url: str = field(
        default_factory=lambda: os.environ.get("HF_HUB_URL", DEFAULT_HUB_URL).rstrip("/")
    )
    #: Page size sent as ``limit=``; None lets the Hub pick and we follow cursors.
    page_limit: int | None = field(default_factory=lambda: _env_int("WRAPPED_PAGE_LIMIT", None))
    http_timeout: float = field(default_factory=lambda: _env_float("WRAPPED_HTTP_TIMEOUT", 30.0))

    # ── Snapshot dataset ────────────────────────────────────────────────────
    dataset_id: str = field(default_factory=lambda: os.environ.get("WRAPPED_DATASET_ID", ""))
    dataset_dir: str = field(
        default_factory=lambda: os.environ.get("WRAPPED_DATASET_DIR", "data").strip("/") or "data"
    )
    write_enabled: bool = field(default_factory=lambda: _env_flag("WRAPPED_DATASET_WRITE"))
    hf_token: str = field(default_factory=lambda: os.environ.get("HF_TOKEN", ""))

    # ── Refresh policy ──────────────────────────────────────────────────────
    freeze_at: datetime = field(default_factory=_env_freeze_at)

    # ── Rate limiting (HTTP surface only) ───────────────────────────────────
    rate_limit_enabled: bool = field(default_factory=lambda: _env_flag("WRAPPED_RATE_LIMIT_ENABLED"))
    rate_limit_window_ms: int = field(
        default_factory=lambda: _env_int("WRAPPED_RATE_LIMIT_WINDOW_MS", 60_000) or 60_000
    )
    rate_limit_max: int = field(
        default_factory=lambda: _env_int("WRAPPED_RATE_LIMIT_MAX", 30) or 30
    )

    @property
    def cache_readable(self) -> bool:
        return bool(self.dataset_id)

    @property
    def cache_writable(self) -> bool:
        return bool(self.dataset_id and self.write_enabled and self.hf_token)
