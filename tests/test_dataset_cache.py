import base64
import json
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from hf_wrapped.analyzers.slides import build_slides
from hf_wrapped.models import ActivitySnapshot, Archetype, SubjectType, WrappedProfile, WrappedResult
from hf_wrapped.storage.dataset_cache import SnapshotCache

pytestmark = pytest.mark.asyncio


def _result(handle="acme", subject_type=SubjectType.ORGANIZATION, year=2025) -> WrappedResult:
    profile = WrappedProfile(handle=handle, display_name="Acme", subject_type=subject_type)
    activity = ActivitySnapshot()
    return WrappedResult(
        profile=profile,
        year=year,
        activity=activity,
        archetype=Archetype.HF_EXPLORER,
        badges=[],
        slides=build_slides(profile, year, activity, Archetype.HF_EXPLORER, []),
        generated_at=datetime(2025, 12, 1, tzinfo=timezone.utc),
    )


async def test_write_then_read_round_trip(fake_hub, cache):
    result = _result()

    await cache.write(result)
    restored = await cache.read("acme", 2025, SubjectType.ORGANIZATION)

    assert "data/2025-organization-acme.json" in fake_hub.files
    assert restored.model_dump() == result.model_dump()


async def test_write_commits_base64_document_with_token(fake_hub, cache):
    await cache.write(_result())

    [commit] = [r for r in fake_hub.requests if r.method == "POST"]
    assert commit.headers["authorization"] == "Bearer hf_test_token"
    body = json.loads(commit.content)
    [op] = body["operations"]
    assert op["operation"] == "add_or_update"
    assert op["encoding"] == "base64"
    document = json.loads(base64.b64decode(op["content"]))
    # stored documents use the camelCase wire format
    assert document["profile"]["subjectType"] == "organization"
    assert "generatedAt" in document


async def test_auto_probes_user_before_organization(fake_hub, cache):
    await cache.write(_result(subject_type=SubjectType.ORGANIZATION))
    fake_hub.requests.clear()

    restored = await cache.read("acme", 2025)

    assert restored is not None
    assert restored.profile.subject_type is SubjectType.ORGANIZATION
    assert fake_hub.requested_paths() == [
        "/datasets/wrapped/cache/resolve/main/data/2025-user-acme.json",
        "/datasets/wrapped/cache/resolve/main/data/2025-organization-acme.json",
    ]


async def test_explicit_subject_type_reads_one_path(fake_hub, cache):
    await cache.write(_result(subject_type=SubjectType.ORGANIZATION))
    fake_hub.requests.clear()

    assert await cache.read("acme", 2025, SubjectType.USER) is None
    assert len(fake_hub.requests) == 1


async def test_unreadable_document_is_a_miss(fake_hub, cache):
    fake_hub.files["data/2025-user-acme.json"] = b"{not json"
    assert await cache.read("acme", 2025, "user") is None


async def test_writes_disabled_never_post(fake_hub, hub_client, settings):
    cache = SnapshotCache(hub_client.http, replace(settings, write_enabled=False))

    await cache.write(_result())

    assert fake_hub.requests == []


async def test_writes_need_a_token(fake_hub, hub_client, settings):
    cache = SnapshotCache(hub_client.http, replace(settings, hf_token=""))

    await cache.write(_result())

    assert fake_hub.requests == []


async def test_failed_write_is_logged_not_raised(fake_hub, cache, caplog):
    fake_hub.failing_paths.add("/api/datasets/wrapped/cache/commit/main")

    await cache.write(_result())

    assert fake_hub.files == {}
    assert "Failed to write snapshot" in caplog.text


async def test_no_dataset_is_always_a_miss(fake_hub, hub_client, settings):
    cache = SnapshotCache(hub_client.http, replace(settings, dataset_id=""))

    assert await cache.read("acme", 2025) is None
    assert fake_hub.requests == []
