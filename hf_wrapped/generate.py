"""Wrapped generation: cache lookup, refresh policy and the live pipeline."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from hf_wrapped.analyzers.activity import build_activity_snapshot
from hf_wrapped.analyzers.archetype import assign_badges, derive_archetype
from hf_wrapped.analyzers.slides import ClosingSlide, build_slides
from hf_wrapped.errors import RefreshWindowClosedError
from hf_wrapped.hub.client import HubClient
from hf_wrapped.hub.fetcher import fetch_activity
from hf_wrapped.hub.resolver import resolve_profile
from hf_wrapped.models import SubjectType, WrappedResult
from hf_wrapped.settings import Settings
from hf_wrapped.storage.dataset_cache import AUTO, SnapshotCache

logger = logging.getLogger(__name__)


def is_refresh_allowed(now: datetime, freeze_at: datetime) -> bool:
    """Refreshes are allowed until the single global freeze instant, whatever the year."""
    return now < freeze_at


async def generate_wrapped(
    handle: str,
    year: int | None = None,
    subject_type: SubjectType | str = AUTO,
    allow_refresh: bool = False,
    *,
    client: HubClient,
    cache: SnapshotCache,
    settings: Settings,
    now: datetime | None = None,
    closing: ClosingSlide = ClosingSlide.CTA,
) -> WrappedResult:
    """Return the wrapped result for ``handle`` and ``year``.

    Without ``allow_refresh`` a cached snapshot is returned when one exists.
    Otherwise the profile is resolved and its activity fetched live, then the
    result is written back to the cache on a best-effort basis.

    Raises ``NotFoundError`` if the handle cannot be resolved and
    ``RefreshWindowClosedError`` if a refresh is requested after
    ``settings.freeze_at``.
    """
    now = now or datetime.now(timezone.utc)
    handle = handle.strip()
    year = year or now.year
    subject_type = subject_type or AUTO

    if not allow_refresh:
        # Snapshots are written under the resolved handle. Before resolving,
        # only the "@" prefix can be undone; other spellings miss the cache.
        cached = await cache.read(handle.removeprefix("@"), year, subject_type)
        if cached is not None:
            logger.info("Serving cached wrapped handle=%r year=%d", handle, year)
            return cached.model_copy(update={"cached": True, "source": "cache"})

    if allow_refresh and not is_refresh_allowed(now, settings.freeze_at):
        raise RefreshWindowClosedError(year, settings.freeze_at)

    profile = await resolve_profile(client, handle)
    activity = await fetch_activity(client, profile, year, input_handle=handle, limit=settings.page_limit)

    snapshot = build_activity_snapshot(activity.models, activity.datasets, activity.spaces, activity.papers)
    archetype = derive_archetype(snapshot)
    badges = assign_badges(snapshot)
    slides = build_slides(profile, year, snapshot, archetype, badges, closing=closing)

    result = WrappedResult(
        profile=profile,
        year=year,
        activity=snapshot,
        archetype=archetype,
        badges=badges,
        slides=slides,
        cached=False,
        generated_at=now,
        source="live",
    )
    await cache.write(result)
    return result
