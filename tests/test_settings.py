from datetime import datetime, timezone

from hf_wrapped.generate import is_refresh_allowed
from hf_wrapped.models import SubjectType
from hf_wrapped.settings import DEFAULT_FREEZE_AT, DEFAULT_HUB_URL, Settings
from hf_wrapped.storage.dataset_cache import build_cache_path

ENV_VARS = [
    "HF_HUB_URL", "WRAPPED_DATASET_ID", "WRAPPED_DATASET_WRITE", "WRAPPED_DATASET_DIR", "HF_TOKEN",
    "WRAPPED_FREEZE_AT", "WRAPPED_PAGE_LIMIT", "WRAPPED_HTTP_TIMEOUT", "WRAPPED_RATE_LIMIT_ENABLED",
    "WRAPPED_RATE_LIMIT_WINDOW_MS", "WRAPPED_RATE_LIMIT_MAX",
]


def _clear(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch):
    _clear(monkeypatch)
    s = Settings()
    assert s.hub_url == DEFAULT_HUB_URL
    assert s.freeze_at == DEFAULT_FREEZE_AT
    assert s.page_limit is None
    assert s.dataset_dir == "data"
    assert s.rate_limit_window_ms == 60_000
    assert s.rate_limit_max == 30
    assert not s.cache_readable
    assert not s.cache_writable


def test_env_overrides(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setenv("HF_HUB_URL", "https://mirror.test/")
    monkeypatch.setenv("WRAPPED_DATASET_ID", "me/wrapped")
    monkeypatch.setenv("WRAPPED_DATASET_DIR", "/snapshots/")
    monkeypatch.setenv("WRAPPED_FREEZE_AT", "2027-01-01T00:00:00Z")
    monkeypatch.setenv("WRAPPED_PAGE_LIMIT", "100")
    s = Settings()
    assert s.hub_url == "https://mirror.test"
    assert s.dataset_dir == "snapshots"
    assert s.freeze_at == datetime(2027, 1, 1, tzinfo=timezone.utc)
    assert s.page_limit == 100
    assert s.cache_readable
    assert not s.cache_writable


def test_writes_need_flag_and_token(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setenv("WRAPPED_DATASET_ID", "me/wrapped")
    monkeypatch.setenv("WRAPPED_DATASET_WRITE", "true")
    assert not Settings().cache_writable
    monkeypatch.setenv("HF_TOKEN", "hf_x")
    assert Settings().cache_writable
    monkeypatch.setenv("WRAPPED_DATASET_WRITE", "yes")
    assert not Settings().cache_writable


def test_invalid_numbers_fall_back(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setenv("WRAPPED_HTTP_TIMEOUT", "soon")
    monkeypatch.setenv("WRAPPED_RATE_LIMIT_MAX", "many")
    monkeypatch.setenv("WRAPPED_FREEZE_AT", "never")
    s = Settings()
    assert s.http_timeout == 30.0
    assert s.rate_limit_max == 30
    assert s.freeze_at == DEFAULT_FREEZE_AT


def test_refresh_window_is_a_single_global_cutoff():
    assert is_refresh_allowed(datetime(2025, 12, 31, 23, 59, tzinfo=timezone.utc), DEFAULT_FREEZE_AT)
    assert not is_refresh_allowed(DEFAULT_FREEZE_AT, DEFAULT_FREEZE_AT)
    assert not is_refresh_allowed(datetime(2026, 3, 1, tzinfo=timezone.utc), DEFAULT_FREEZE_AT)


def test_cache_path_format():
    assert build_cache_path("acme", 2025, SubjectType.ORGANIZATION) == "data/2025-organization-acme.json"
    assert build_cache_path("julien", 2024, "user", "snapshots") == "snapshots/2024-user-julien.json"
