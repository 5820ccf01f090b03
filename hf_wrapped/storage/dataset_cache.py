"""Snapshot cache backed by a Hugging Face dataset repository.

One JSON document per ``(year, subject_type, handle)``:

    {WRAPPED_DATASET_DIR}/{year}-{subject_type}-{handle}.json

Reads go through the public ``resolve`` URL and need only
``WRAPPED_DATASET_ID``. Writes commit through the Hub API and additionally
need ``WRAPPED_DATASET_WRITE=true`` and ``HF_TOKEN``. Neither direction ever
raises: a failed read is a miss and a failed write is logged.
"""

from __future__ import annotations

import base64
import logging
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from hf_wrapped.models import SubjectType, WrappedResult
from hf_wrapped.settings import Settings

logger = logging.getLogger(__name__)

AUTO = "auto"
#: Probe order when the caller does not know the subject type.
_AUTO_PROBE_ORDER = (SubjectType.USER, SubjectType.ORGANIZATION)


def build_cache_path(handle: str, year: int, subject_type: SubjectType | str, data_dir: str = "data") -> str:
    subject = SubjectType(subject_type).value
    return f"{data_dir}/{year}-{subject}-{handle}.json"


class SnapshotCache:
    def __init__(self, http: httpx.AsyncClient, settings: Settings) -> None:
        self._http = http
        self._settings = settings

    def path_for(self, handle: str, year: int, subject_type: SubjectType | str) -> str:
        return build_cache_path(handle, year, subject_type, self._settings.dataset_dir)

    def resolve_url(self, path: str) -> str:
        s = self._settings
        return f"{s.hub_url}/datasets/{s.dataset_id}/resolve/main/{quote(path, safe='/')}"

    def commit_url(self) -> str:
        s = self._settings
        return f"{s.hub_url}/api/datasets/{s.dataset_id}/commit/main"

    async def read(self, handle: str, year: int, subject_type: SubjectType | str = AUTO) -> WrappedResult | None:
        """Return the cached result for this identity, or None on any miss."""
        if not self._settings.cache_readable:
            return None

        if subject_type == AUTO:
            candidates = _AUTO_PROBE_ORDER
        else:
            candidates = (SubjectType(subject_type),)

        for candidate in candidates:
            cached = await self._read_path(self.path_for(handle, year, candidate))
            if cached is not None:
                return cached
        return None

    async def _read_path(self, path: str) -> WrappedResult | None:
        url = self.resolve_url(path)
        try:
            response = await self._http.get(url, headers={"accept": "application/json"})
        except httpx.HTTPError as exc:
            logger.debug("cache read failed path=%s: %s", path, exc)
            return None
        if not response.is_success:
            logger.debug("cache miss path=%s status=%d", path, response.status_code)
            return None
        try:
            result = WrappedResult.model_validate_json(response.content)
        except ValidationError as exc:
            logger.warning("Ignoring unreadable cache document path=%s: %s", path, exc)
            return None
        logger.info("cache hit path=%s", path)
        return result

    async def write(self, result: WrappedResult) -> None:
        """Commit ``result`` to the dataset; silently skipped when writes are not configured."""
        if not self._settings.cache_writable:
            return

        path = self.path_for(result.profile.handle, result.year, result.profile.subject_type)
        content = base64.b64encode(result.to_document().encode("utf-8")).decode("ascii")
        payload = {
            "operations": [
                {
                    "operation": "add_or_update",
                    "path_in_repo": path,
                    "content": content,
                    "encoding": "base64",
                }
            ],
            "commit_message": "Add wrapped snapshot",
            "summary": "Add wrapped snapshot",
        }
        try:
            response = await self._http.post(
                self.commit_url(),
                json=payload,
                headers={
                    "Authorization": f"Bearer {self._settings.hf_token}",
                    "accept": "application/json",
                },
            )
        except httpx.HTTPError as exc:
            logger.error("Failed to write snapshot path=%s: %s", path, exc)
            return

        if not response.is_success:
            logger.error(
                "Failed to write snapshot path=%s status=%d %s body=%s",
                path, response.status_code, response.reason_phrase, response.text[:500],
            )
            return

        try:
            info = response.json()
        except ValueError:
            info = None
        logger.info(
            "Snapshot stored dataset=%s path=%s status=%d info=%s",
            self._settings.dataset_id, path, response.status_code, info,
        )
