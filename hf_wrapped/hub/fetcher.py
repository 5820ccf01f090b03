"""Fetch a profile's models, datasets, Spaces and papers from the Hub.

The repo listings are requested sorted by ``createdAt`` descending and this
module relies on that order twice: pagination stops once a page reaches items
older than the target year, and ``collect_year_sorted_desc`` stops scanning at
the first older item. If the Hub ever returns unsorted pages, both can
under-collect.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from hf_wrapped.hub.client import HubClient
from hf_wrapped.models import PaperStats, RepoKind, RepoStats, WrappedProfile
from hf_wrapped.utils.dates import utc_year
from hf_wrapped.utils.fallback import FallbackExhausted, dedupe, first_success

logger = logging.getLogger(__name__)

PAPERS_LIMIT = 20


@dataclass
class Page:
    items: list[dict[str, Any]]
    next_cursor: str | None = None


@dataclass
class HubActivity:
    models: list[RepoStats] = field(default_factory=list)
    datasets: list[RepoStats] = field(default_factory=list)
    spaces: list[RepoStats] = field(default_factory=list)
    papers: list[PaperStats] = field(default_factory=list)


def normalize_page(raw: Any) -> Page:
    """Turn either wire shape of a listing page into a ``Page``.

    A bare JSON array is a complete, final page. An object carries ``items``
    and an optional ``next`` (URL) or ``cursor`` (token). Anything else is
    treated as an empty page.
    """
    if isinstance(raw, list):
        return Page(items=[item for item in raw if isinstance(item, dict)])
    if not isinstance(raw, dict):
        return Page(items=[])
    items = raw.get("items")
    items = [item for item in items if isinstance(item, dict)] if isinstance(items, list) else []
    next_cursor = raw.get("next") if isinstance(raw.get("next"), str) else raw.get("cursor")
    return Page(items=items, next_cursor=next_cursor if isinstance(next_cursor, str) and next_cursor else None)


def build_author_candidates(canonical_handle: str, input_handle: str | None = None) -> list[str]:
    """Author names to query: resolved handle first, then the supplied one, each also lower-cased."""
    canonical = canonical_handle.strip().removeprefix("@")
    supplied = (input_handle or "").strip().removeprefix("@")
    return dedupe([canonical, canonical.lower(), supplied, supplied.lower()])


def collect_year_sorted_desc(repos: list[RepoStats], year: int) -> list[RepoStats]:
    """Keep repos created in ``year`` from a newest-first list.

    Undated items are skipped; the scan stops at the first item older than
    ``year``.
    """
    results: list[RepoStats] = []
    for repo in repos:
        created_year = utc_year(repo.created_at)
        if created_year is None:
            continue
        if created_year < year:
            break
        if created_year == year:
            results.append(repo)
    return results


def _to_repo(item: dict[str, Any], kind: RepoKind, author: str) -> RepoStats | None:
    repo_id = item.get("id") or item.get("modelId")
    if not isinstance(repo_id, str) or not repo_id:
        return None
    tags = item.get("tags")
    try:
        return RepoStats(
            id=repo_id,
            kind=kind,
            name=repo_id.split("/", 1)[1] if "/" in repo_id else repo_id,
            author=item.get("author") or author,
            task=item.get("pipeline_tag") or item.get("task"),
            tags=[t for t in tags if isinstance(t, str)] if isinstance(tags, list) else [],
            likes=item.get("likes") or 0,
            downloads=item.get("downloads") or 0,
            created_at=item.get("createdAt"),
            updated_at=item.get("lastModified"),
            private=item.get("private"),
        )
    except ValidationError as exc:
        logger.debug("Skipping malformed %s %r: %s", kind.value, repo_id, exc)
        return None


def _page_predates(items: list[dict[str, Any]], year: int) -> bool:
    """True when the oldest dated item on a newest-first page is before ``year``."""
    for item in reversed(items):
        created_year = utc_year(item.get("createdAt"))
        if created_year is not None:
            return created_year < year
    return False


async def fetch_repos(
    client: HubClient,
    kind: RepoKind,
    author: str,
    year: int | None = None,
    limit: int | None = None,
) -> list[RepoStats]:
    """Follow listing pages for ``author`` until the cursor runs out.

    With ``year`` set, stops after the first page whose oldest item predates
    it. Raises ``TransientFetchError`` if any page fails.
    """
    path = f"/api/{kind.value}s"
    base_params: dict[str, Any] = {
        "author": author,
        "full": "true",
        "sort": "createdAt",
        "direction": "-1",
    }
    if limit:
        base_params["limit"] = limit

    results: list[RepoStats] = []
    url, params = path, dict(base_params)
    while True:
        page = normalize_page(await client.get_json(url, params=params))
        if not page.items:
            break

        for item in page.items:
            repo = _to_repo(item, kind, author)
            if repo is not None:
                results.append(repo)

        if year is not None and _page_predates(page.items, year):
            break
        if not page.next_cursor:
            break

        if page.next_cursor.startswith(("http://", "https://")):
            url, params = page.next_cursor, None
        else:
            url, params = path, {**base_params, "cursor": page.next_cursor}

    return results


async def fetch_papers(client: HubClient, submitter: str) -> list[PaperStats]:
    """Fetch one bounded page of daily papers submitted by ``submitter``."""
    raw = await client.get_json(
        "/api/daily_papers", params={"submitter": submitter, "limit": PAPERS_LIMIT}
    )
    if not isinstance(raw, list):
        return []

    papers: list[PaperStats] = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        paper = _to_paper(client, entry)
        if paper is not None:
            papers.append(paper)
    return papers


def _to_paper(client: HubClient, entry: dict[str, Any]) -> PaperStats | None:
    # Newer responses nest the paper under "paper"
    paper = entry.get("paper") if isinstance(entry.get("paper"), dict) else entry
    arxiv_id = paper.get("arxivId") or paper.get("id")
    title = paper.get("title") or entry.get("title")
    if not arxiv_id or not title:
        return None
    try:
        return PaperStats(
            id=arxiv_id,
            title=title,
            summary=paper.get("summary"),
            submitter=_submitter_name(paper.get("submitter") or entry.get("submittedBy")),
            published_at=paper.get("publishedAt") or entry.get("publishedAt"),
            link=paper.get("url") or client.url(f"/papers/{arxiv_id}"),
        )
    except ValidationError as exc:
        logger.debug("Skipping malformed paper %r: %s", arxiv_id, exc)
        return None


def _submitter_name(value: Any) -> str | None:
    if isinstance(value, dict):
        return value.get("name") or value.get("fullname")
    return value if isinstance(value, str) else None


async def fetch_repos_with_fallback(
    client: HubClient,
    kind: RepoKind,
    authors: list[str],
    year: int | None = None,
    limit: int | None = None,
) -> list[RepoStats]:
    """Return the first non-empty listing across ``authors``, or ``[]``."""

    async def attempt(author: str) -> list[RepoStats]:
        repos = await fetch_repos(client, kind, author, year, limit)
        logger.info("fetch_repos %s author=%s count=%d", kind.value, author, len(repos))
        return repos

    try:
        _, repos = await first_success(authors, attempt)
    except FallbackExhausted as exc:
        if exc.last_error is not None:
            logger.warning("fetch_repos %s failed for %s: %s", kind.value, authors, exc.last_error)
        return []
    return repos


async def fetch_papers_with_fallback(client: HubClient, handles: list[str]) -> list[PaperStats]:
    """Return the first non-empty papers page across ``handles``, or ``[]``."""

    async def attempt(handle: str) -> list[PaperStats]:
        papers = await fetch_papers(client, handle)
        logger.info("fetch_papers handle=%s count=%d", handle, len(papers))
        return papers

    try:
        _, papers = await first_success(handles, attempt)
    except FallbackExhausted as exc:
        if exc.last_error is not None:
            logger.warning("fetch_papers failed for %s: %s", handles, exc.last_error)
        return []
    return papers


async def fetch_activity(
    client: HubClient,
    profile: WrappedProfile,
    year: int,
    input_handle: str | None = None,
    limit: int | None = None,
) -> HubActivity:
    """Fetch every artifact kind for ``profile`` concurrently and keep ``year``'s repos.

    Papers are not year-filtered. A kind that fails for every author candidate
    comes back empty without affecting the others.
    """
    authors = build_author_candidates(profile.handle, input_handle)
    logger.info(
        "fetch_activity handle=%r subject_type=%s authors=%s",
        input_handle or profile.handle, profile.subject_type.value, authors,
    )

    models, datasets, spaces, papers = await asyncio.gather(
        fetch_repos_with_fallback(client, RepoKind.MODEL, authors, year, limit),
        fetch_repos_with_fallback(client, RepoKind.DATASET, authors, year, limit),
        fetch_repos_with_fallback(client, RepoKind.SPACE, authors, year, limit),
        fetch_papers_with_fallback(client, authors),
    )

    activity = HubActivity(
        models=collect_year_sorted_desc(models, year),
        datasets=collect_year_sorted_desc(datasets, year),
        spaces=collect_year_sorted_desc(spaces, year),
        papers=papers,
    )
    logger.info(
        "fetch_activity results models=%d datasets=%d spaces=%d papers=%d",
        len(activity.models), len(activity.datasets), len(activity.spaces), len(activity.papers),
    )
    return activity
