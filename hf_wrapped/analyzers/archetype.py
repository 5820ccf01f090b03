"""Archetype and badge scoring.

Thresholds and weights are fixed constants; there is no configuration surface
for them.
"""

from __future__ import annotations

from hf_wrapped.analyzers.activity import sum_metric
from hf_wrapped.models import ActivitySnapshot, Archetype

TOP_DOWNLOADS_THRESHOLD = 1_000_000
COMMUNITY_LIKES_THRESHOLD = 5_000
MODEL_BUILDER_COUNT = 10
DATA_SHAPER_COUNT = 5
SPACES_STORYTELLER_COUNT = 3


def archetype_weights(activity: ActivitySnapshot) -> list[tuple[Archetype, float]]:
    """Weighted score per archetype, in tie-break priority order."""
    return [
        (Archetype.MODEL_MAESTRO,
         len(activity.models) * 2 + sum_metric(activity.models, "downloads") * 0.000001),
        (Archetype.DATASET_ARCHITECT,
         len(activity.datasets) * 2 + sum_metric(activity.datasets, "downloads") * 0.000001),
        (Archetype.SPACE_STORYTELLER,
         len(activity.spaces) * 2 + sum_metric(activity.spaces, "likes") * 0.001),
        (Archetype.RESEARCH_CURATOR, len(activity.papers) * 3),
    ]


def derive_archetype(activity: ActivitySnapshot) -> Archetype:
    """Pick the archetype with the strictly greatest weight.

    Earlier entries win ties. Falls back to ``HF_EXPLORER`` when no weight is
    positive.
    """
    best, best_weight = Archetype.HF_EXPLORER, 0.0
    for archetype, weight in archetype_weights(activity):
        if weight > best_weight:
            best, best_weight = archetype, weight
    return best


def assign_badges(activity: ActivitySnapshot) -> list[str]:
    """Evaluate every badge rule in order; several may fire."""
    badges: list[str] = []
    if activity.total_downloads > TOP_DOWNLOADS_THRESHOLD:
        badges.append("Top 1M+ downloads")
    if activity.total_likes > COMMUNITY_LIKES_THRESHOLD:
        badges.append("Community favorite")
    if len(activity.models) >= MODEL_BUILDER_COUNT:
        badges.append("Model builder")
    if len(activity.datasets) >= DATA_SHAPER_COUNT:
        badges.append("Data shaper")
    if len(activity.spaces) >= SPACES_STORYTELLER_COUNT:
        badges.append("Spaces storyteller")
    if activity.busiest_month:
        badges.append(f"Peak month: {activity.busiest_month}")
    if activity.top_tags:
        badges.append(f"Signature tags: {', '.join(activity.top_tags[:3])}")
    return badges
