from collections import Counter

from hf_wrapped.models import ActivitySnapshot, PaperStats, RepoStats
from hf_wrapped.utils.dates import MONTH_NAMES, parse_timestamp

TOP_TAGS = 6


def sum_metric(repos: list[RepoStats], metric: str) -> int:
    """Sum a count field; negative upstream values count as zero."""
    return sum(max(getattr(repo, metric) or 0, 0) for repo in repos)


def _top_tags(repos: list[RepoStats], limit: int = TOP_TAGS) -> list[str]:
    """Most frequent tags; ties keep first-seen order."""
    counts: Counter = Counter()
    for repo in repos:
        counts.update(repo.tags)
    # sorted() is stable under reverse=True, so equal counts keep insertion order
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [tag for tag, _ in ranked[:limit]]


def find_busiest_month(repos: list[RepoStats]) -> str | None:
    """Month name with the most repo activity (last update, else creation), UTC."""
    hits = [0] * 12
    for repo in repos:
        dt = parse_timestamp(repo.updated_at or repo.created_at)
        if dt is None:
            continue
        hits[dt.month - 1] += 1
    peak = max(hits)
    if peak == 0:
        return None
    return MONTH_NAMES[hits.index(peak)]


def build_activity_snapshot(
    models: list[RepoStats],
    datasets: list[RepoStats],
    spaces: list[RepoStats],
    papers: list[PaperStats],
) -> ActivitySnapshot:
    """Reduce a year's repos and papers into summary statistics.

    Totals and tags cover models, datasets and Spaces only; papers are carried
    along but never counted.
    """
    repos = [*models, *datasets, *spaces]
    return ActivitySnapshot(
        models=models,
        datasets=datasets,
        spaces=spaces,
        papers=papers,
        total_downloads=sum_metric(repos, "downloads"),
        total_likes=sum_metric(repos, "likes"),
        total_repos=len(repos),
        top_tags=_top_tags(repos),
        busiest_month=find_busiest_month(repos),
    )
