"""Resolve a raw handle to a canonical organization or user profile."""

from __future__ import annotations

import logging
from typing import Any

from hf_wrapped.errors import NotFoundError
from hf_wrapped.hub.client import HubClient
from hf_wrapped.models import SubjectType, WrappedProfile
from hf_wrapped.utils.fallback import FallbackExhausted, dedupe, first_success

logger = logging.getLogger(__name__)

_LOOKUP_PATHS = {
    SubjectType.ORGANIZATION: "/api/organizations/{handle}",
    SubjectType.USER: "/api/users/{handle}",
}


def build_handle_candidates(handle: str) -> list[str]:
    """Return the handle variants to try, in order.

    As given, without a leading "@", lower-cased, and lower-cased without "@".
    """
    trimmed = handle.strip()
    no_at = trimmed.removeprefix("@")
    return dedupe([trimmed, no_at, trimmed.lower(), no_at.lower()])


async def resolve_profile(client: HubClient, handle: str) -> WrappedProfile:
    """Find the first variant of ``handle`` that exists on the Hub.

    Each variant is looked up as an organization first, then as a user, so a
    lowercase org wins over a same-named user. Raises ``NotFoundError`` when
    every lookup fails.
    """
    candidates = build_handle_candidates(handle)
    attempts = [
        (candidate, subject_type)
        for candidate in candidates
        for subject_type in (SubjectType.ORGANIZATION, SubjectType.USER)
    ]

    async def lookup(attempt: tuple[str, SubjectType]) -> Any:
        candidate, subject_type = attempt
        return await client.get_json(_LOOKUP_PATHS[subject_type].format(handle=candidate))

    try:
        (candidate, subject_type), data = await first_success(
            attempts, lookup, accept=lambda data: isinstance(data, dict)
        )
    except FallbackExhausted as exc:
        raise NotFoundError(handle, candidates, exc.last_error) from exc

    logger.info("Resolved %r to %s %r", handle, subject_type.value, candidate)
    return WrappedProfile(
        handle=candidate,
        display_name=data.get("fullname") or data.get("name") or candidate,
        avatar_url=data.get("avatarUrl"),
        bio=data.get("bio"),
        subject_type=subject_type,
    )
