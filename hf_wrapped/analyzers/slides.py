"""Turn an activity snapshot into the ordered story slides.

Slide order is fixed: intro, summary, models, datasets, spaces, papers,
badges, archetype and one closing slide. The four artifact slides are left
out entirely when their list is empty.
"""

from __future__ import annotations

from enum import Enum

from hf_wrapped.models import (
    ActivitySnapshot,
    Archetype,
    PaperStats,
    RepoKind,
    RepoStats,
    StoryMetric,
    StorySlide,
    WrappedProfile,
)
from hf_wrapped.utils.dates import parse_timestamp, timestamp_ms
from hf_wrapped.utils.formatting import compact_number

TOP_N = 3


class ClosingSlide(str, Enum):
    """Which closing slide to end on: the in-app call to action or the shareable card."""

    CTA = "cta"
    SHARE = "share"


def _recency_ms(repo: RepoStats) -> int:
    return timestamp_ms(repo.created_at or repo.updated_at)


def rank_repos(repos: list[RepoStats], kind: RepoKind) -> list[RepoStats]:
    """Order repos for a "top N" list.

    Spaces rank by likes, then downloads; models and datasets by downloads,
    then likes. Both then prefer the most recent, then the name.
    """
    if kind is RepoKind.SPACE:
        def key(repo: RepoStats):
            return (-repo.likes, -repo.downloads, -_recency_ms(repo), repo.name.casefold(), repo.name)
    else:
        def key(repo: RepoStats):
            return (-repo.downloads, -repo.likes, -_recency_ms(repo), repo.name.casefold(), repo.name)
    return sorted(repos, key=key)


def _paper_year(paper: PaperStats) -> str:
    dt = parse_timestamp(paper.published_at)
    return str(dt.year) if dt else "Published"


def _intro(profile: WrappedProfile, year: int, activity: ActivitySnapshot) -> StorySlide:
    return StorySlide(
        id="intro",
        kind="intro",
        title=f"Your {year} Hugging Face Wrapped",
        subtitle=f"Hello {profile.display_name or profile.handle}!",
        metrics=[
            StoryMetric(label="Total repositories", value=str(activity.total_repos), accent="primary"),
            StoryMetric(label="Total downloads", value=compact_number(activity.total_downloads)),
        ],
        highlights=activity.top_tags[:3],
    )


def _summary(activity: ActivitySnapshot) -> StorySlide:
    return StorySlide(
        id="summary",
        kind="summary",
        title="Activity pulse",
        subtitle="Across models, datasets, spaces and papers",
        metrics=[
            StoryMetric(label="Models", value=compact_number(len(activity.models))),
            StoryMetric(label="Datasets", value=compact_number(len(activity.datasets))),
            StoryMetric(label="Spaces", value=compact_number(len(activity.spaces))),
            StoryMetric(label="Papers", value=compact_number(len(activity.papers))),
        ],
        highlights=[
            f"Busiest month: {activity.busiest_month}"
            if activity.busiest_month
            else "Consistent contributions all year"
        ],
    )


def _artifact_slides(activity: ActivitySnapshot) -> list[StorySlide]:
    slides: list[StorySlide] = []

    top_models = rank_repos(activity.models, RepoKind.MODEL)[:TOP_N]
    if top_models:
        slides.append(StorySlide(
            id="models",
            kind="models",
            title="Top models",
            subtitle="Most loved by downloads & likes",
            metrics=[
                StoryMetric(label=repo.name, value=f"{compact_number(repo.downloads)} downloads")
                for repo in top_models
            ],
            highlights=activity.top_tags[:2],
        ))

    top_datasets = rank_repos(activity.datasets, RepoKind.DATASET)[:TOP_N]
    if top_datasets:
        slides.append(StorySlide(
            id="datasets",
            kind="datasets",
            title="Top datasets",
            subtitle="Fueling experiments everywhere",
            metrics=[
                StoryMetric(label=repo.name, value=f"{compact_number(repo.downloads)} downloads")
                for repo in top_datasets
            ],
        ))

    top_spaces = rank_repos(activity.spaces, RepoKind.SPACE)[:TOP_N]
    if top_spaces:
        slides.append(StorySlide(
            id="spaces",
            kind="spaces",
            title="Spaces that sparked engagement",
            subtitle="Most engaging demos",
            metrics=[
                StoryMetric(label=repo.name, value=f"{compact_number(repo.likes)} likes")
                for repo in top_spaces
            ],
        ))

    if activity.papers:
        slides.append(StorySlide(
            id="papers",
            kind="papers",
            title="Research you shared",
            subtitle="Papers and findings",
            metrics=[
                StoryMetric(label=paper.title, value=_paper_year(paper))
                for paper in activity.papers[:TOP_N]
            ],
        ))

    return slides


def _badges(badges: list[str]) -> StorySlide:
    return StorySlide(
        id="badges",
        kind="badges",
        title="Badges earned",
        subtitle="Your year at a glance" if badges else "Fresh start: badges await",
        highlights=badges[:6],
    )


def _archetype(activity: ActivitySnapshot, archetype: Archetype) -> StorySlide:
    return StorySlide(
        id="archetype",
        kind="archetype",
        title="Your archetype",
        subtitle=archetype.value,
        metrics=[
            StoryMetric(label="Downloads", value=compact_number(activity.total_downloads), accent="primary"),
            StoryMetric(label="Likes", value=compact_number(activity.total_likes)),
            StoryMetric(label="Repos", value=compact_number(activity.total_repos)),
        ],
        highlights=activity.top_tags[:3],
    )


def _leading_count(activity: ActivitySnapshot) -> StoryMetric:
    counts = [
        ("Models", len(activity.models)),
        ("Datasets", len(activity.datasets)),
        ("Spaces", len(activity.spaces)),
        ("Papers", len(activity.papers)),
    ]
    label, count = max(counts, key=lambda item: item[1])
    return StoryMetric(label=label, value=compact_number(count))


def _cta(activity: ActivitySnapshot) -> StorySlide:
    return StorySlide(
        id="cta",
        kind="cta",
        title="Share it",
        subtitle="Download the slides or share your Space link",
        metrics=[
            StoryMetric(label="Models", value=compact_number(len(activity.models))),
            StoryMetric(label="Datasets", value=compact_number(len(activity.datasets))),
            StoryMetric(label="Spaces", value=compact_number(len(activity.spaces))),
        ],
    )


def _share(
    profile: WrappedProfile,
    year: int,
    activity: ActivitySnapshot,
    archetype: Archetype,
    badges: list[str],
) -> StorySlide:
    return StorySlide(
        id="share",
        kind="share",
        title=f"@{profile.handle}",
        subtitle=f"Your Hugging Face in {year}",
        metrics=[
            StoryMetric(label="Archetype", value=archetype.value, accent="primary"),
            StoryMetric(label="Badge", value=badges[0] if badges else archetype.value),
            _leading_count(activity),
            StoryMetric(label="Downloads", value=compact_number(activity.total_downloads)),
        ],
        highlights=["Share your Wrapped with the community"],
    )


def build_slides(
    profile: WrappedProfile,
    year: int,
    activity: ActivitySnapshot,
    archetype: Archetype,
    badges: list[str],
    closing: ClosingSlide = ClosingSlide.CTA,
) -> list[StorySlide]:
    slides = [
        _intro(profile, year, activity),
        _summary(activity),
        *_artifact_slides(activity),
        _badges(badges),
        _archetype(activity, archetype),
    ]
    if ClosingSlide(closing) is ClosingSlide.SHARE:
        slides.append(_share(profile, year, activity, archetype, badges))
    else:
        slides.append(_cta(activity))
    return slides
