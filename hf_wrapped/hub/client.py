"""Async JSON client for the Hugging Face Hub REST API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from hf_wrapped.errors import TransientFetchError
from hf_wrapped.settings import DEFAULT_HUB_URL

logger = logging.getLogger(__name__)


class HubClient:
    """Thin wrapper over ``httpx.AsyncClient`` that turns every failure into
    ``TransientFetchError``.

    Pass ``http`` to share a client (tests inject one built on
    ``httpx.MockTransport``); otherwise one is created and closed with the
    context manager.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_HUB_URL,
        *,
        http: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(timeout=timeout, headers={"accept": "application/json"})

    async def __aenter__(self) -> "HubClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    def url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    async def get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET ``path`` and decode the JSON body."""
        url = self.url(path)
        try:
            response = await self.http.get(url, params=params)
        except httpx.HTTPError as exc:
            raise TransientFetchError(url, str(exc) or type(exc).__name__) from exc
        if not response.is_success:
            raise TransientFetchError(
                str(response.url),
                f"{response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise TransientFetchError(str(response.url), f"invalid JSON: {exc}") from exc
