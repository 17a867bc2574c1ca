"""
API routes for the cache tools.

Endpoints are plain `def` so FastAPI runs them in its threadpool: downloads
and browser rendering block and must stay off the event loop.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from fastapi import APIRouter
from pydantic import BaseModel

from src.backend.settings.models import GlobalSettings

from .service import CacheToolService


class StoreMediaIn(BaseModel):
    media_locator: Optional[str] = None
    source_locator: Optional[str] = None
    bucket: Optional[str] = None


class ExistsBySourceIn(BaseModel):
    source_locator: Optional[str] = None
    bucket: Optional[str] = None


class ResolveShareLinkIn(BaseModel):
    share_link: Optional[str] = None
    bucket: Optional[str] = None


def create_tools_router(
    *,
    settings_provider: Callable[[], GlobalSettings],
    service_factory: Callable[[GlobalSettings], CacheToolService] = CacheToolService,
) -> APIRouter:
    router = APIRouter(prefix="/api/tools", tags=["tools"])

    def _service() -> CacheToolService:
        return service_factory(settings_provider())

    @router.post("/store-media")
    def store_media(body: StoreMediaIn) -> dict[str, Any]:
        result = _service().store_media_from_locator(body.media_locator, body.source_locator, body.bucket)
        return result.to_dict()

    @router.post("/exists-by-source")
    def exists_by_source(body: ExistsBySourceIn) -> dict[str, Any]:
        result = _service().exists_by_source_locator(body.source_locator, body.bucket)
        return result.to_dict()

    @router.post("/resolve-share-link")
    def resolve_share_link(body: ResolveShareLinkIn) -> dict[str, Any]:
        result = _service().resolve_share_link(body.share_link, body.bucket)
        return result.to_dict()

    return router
