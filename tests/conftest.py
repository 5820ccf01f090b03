"""Shared fixtures: an in-memory Hub served through httpx.MockTransport."""
import base64
import json
from datetime import datetime, timezone

import httpx
import pytest

from hf_wrapped.hub.client import HubClient
from hf_wrapped.settings import Settings
from hf_wrapped.storage.dataset_cache import SnapshotCache

HUB_URL = "https://hub.test"
DATASET_ID = "wrapped/cache"


class FakeHub:
    """Minimal Hub: profile lookups, repo listings, daily papers and one dataset repo.

    ``repos[(kind, author)]`` is a list of pages; each page is returned as-is
    (bare list or ``{"items", "cursor"|"next"}`` dict) in order, keyed by the
    ``cursor`` query param (page index as a string).
    """

    def __init__(self) -> None:
        self.organizations: dict[str, dict] = {}
        self.users: dict[str, dict] = {}
        self.repos: dict[tuple[str, str], list] = {}
        self.papers: dict[str, list] = {}
        self.failing_paths: set[str] = set()
        self.files: dict[str, bytes] = {}
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path in self.failing_paths:
            return httpx.Response(500, text="boom")

        if request.method == "POST" and path == f"/api/datasets/{DATASET_ID}/commit/main":
            body = json.loads(request.content)
            for op in body["operations"]:
                self.files[op["path_in_repo"]] = base64.b64decode(op["content"])
            return httpx.Response(200, json={"commitOid": "abc123"})

        resolve_prefix = f"/datasets/{DATASET_ID}/resolve/main/"
        if path.startswith(resolve_prefix):
            stored = self.files.get(path[len(resolve_prefix):])
            return httpx.Response(200, content=stored) if stored is not None else httpx.Response(404)

        if path.startswith("/api/organizations/"):
            org = self.organizations.get(path.rsplit("/", 1)[1])
            return httpx.Response(200, json=org) if org else httpx.Response(404)

        if path.startswith("/api/users/"):
            user = self.users.get(path.rsplit("/", 1)[1])
            return httpx.Response(200, json=user) if user else httpx.Response(404)

        if path == "/api/daily_papers":
            return httpx.Response(200, json=self.papers.get(request.url.params.get("submitter"), []))

        for kind in ("model", "dataset", "space"):
            if path == f"/api/{kind}s":
                pages = self.repos.get((kind, request.url.params.get("author")), [[]])
                index = int(request.url.params.get("cursor", "0"))
                return httpx.Response(200, json=pages[index])

        return httpx.Response(404)

    def requested_paths(self) -> list[str]:
        return [r.url.path for r in self.requests]


@pytest.fixture
def fake_hub() -> FakeHub:
    return FakeHub()


@pytest.fixture
def hub_client(fake_hub) -> HubClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(fake_hub.handler))
    return HubClient(HUB_URL, http=http)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        hub_url=HUB_URL,
        page_limit=None,
        dataset_id=DATASET_ID,
        dataset_dir="data",
        write_enabled=True,
        hf_token="hf_test_token",
        freeze_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def cache(hub_client, settings) -> SnapshotCache:
    return SnapshotCache(hub_client.http, settings)
