"""FastAPI server exposing wrapped generation over HTTP.

Run with ``uvicorn hf_wrapped.api.server:app``.
"""

import logging
from functools import lru_cache
from typing import Annotated, Awaitable, Callable, Literal, Optional

from dotenv import load_dotenv

load_dotenv()

from fastapi import Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel

from hf_wrapped.analyzers.slides import ClosingSlide
from hf_wrapped.api.rate_limit import RateLimiter
from hf_wrapped.errors import NotFoundError, RefreshWindowClosedError
from hf_wrapped.generate import generate_wrapped
from hf_wrapped.hub.client import HubClient
from hf_wrapped.settings import Settings
from hf_wrapped.storage.dataset_cache import SnapshotCache

_log = logging.getLogger(__name__)

app = FastAPI(title="hf-wrapped API")


class WrappedRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    handle: Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=80)]
    subject_type: Optional[Literal["user", "organization", "auto"]] = None
    year: Optional[int] = Field(default=None, ge=2000, le=2100)
    allow_refresh: Optional[bool] = None
    closing: ClosingSlide = ClosingSlide.CTA


Generator = Callable[[WrappedRequest, Settings], Awaitable[dict]]


# ── Dependencies ─────────────────────────────────────────────────────────────
# Overridable through app.dependency_overrides in tests.

@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_rate_limiter(request: Request, settings: Settings = Depends(get_settings)) -> RateLimiter:
    """One limiter per app instance, created on first use."""
    limiter = getattr(request.app.state, "rate_limiter", None)
    if limiter is None:
        limiter = RateLimiter(settings.rate_limit_window_ms, settings.rate_limit_max)
        request.app.state.rate_limiter = limiter
    return limiter


async def run_generation(req: WrappedRequest, settings: Settings) -> dict:
    async with HubClient(settings.hub_url, timeout=settings.http_timeout) as client:
        cache = SnapshotCache(client.http, settings)
        result = await generate_wrapped(
            req.handle,
            year=req.year,
            subject_type=req.subject_type or "auto",
            allow_refresh=bool(req.allow_refresh),
            client=client,
            cache=cache,
            settings=settings,
            closing=req.closing,
        )
    return result.model_dump(mode="json", by_alias=True)


def get_generator() -> Generator:
    return run_generation


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded.split(",")[0].strip():
        return forwarded.split(",")[0].strip()
    if request.headers.get("x-real-ip"):
        return request.headers["x-real-ip"]
    return request.client.host if request.client else "unknown"


# ── Endpoints ────────────────────────────────────────────────────────────────

@app.get("/api/health")
def health():
    return {"status": "ok"}


@app.post("/api/wrapped")
async def wrapped(
    req: WrappedRequest,
    request: Request,
    settings: Settings = Depends(get_settings),
    limiter: RateLimiter = Depends(get_rate_limiter),
    generator: Generator = Depends(get_generator),
):
    """Generate (or serve from cache) the wrapped result for a handle."""
    if settings.rate_limit_enabled and not limiter.allow(client_ip(request)):
        raise HTTPException(status_code=429, detail="Rate limit exceeded")

    try:
        return await generator(req, settings)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except RefreshWindowClosedError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc
    except Exception as exc:
        _log.exception("Wrapped generation failed for %r", req.handle)
        raise HTTPException(status_code=500, detail=str(exc) or "Failed to generate wrapped") from exc
