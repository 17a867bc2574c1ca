from __future__ import annotations

import re
from typing import List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ..net.proxy import ProxyConfig
from ..net.retry import RetryConfig
from ..scraper.config import ScrapeConfig
from .models import BACKEND_S3, BACKENDS, GlobalSettings, StoreCredentials
from .store import SettingsStore


class StoreIn(BaseModel):
    endpoint: str = Field(min_length=1)
    access_key_id: str = ""
    access_key_secret: str = ""
    region: Optional[str] = None
    backend: str = BACKEND_S3


class BucketIn(BaseModel):
    bucket_name: str = Field(min_length=1)


class RetryIn(BaseModel):
    max_retries: int = Field(ge=0, le=10, default=2)
    base_delay_s: float = Field(ge=0.1, le=60.0, default=1.5)
    max_delay_s: float = Field(ge=1.0, le=300.0, default=30.0)
    enabled: bool = True


class FetchIn(BaseModel):
    fetch_timeout_s: float = Field(ge=1.0, le=600.0)


class ProxyIn(BaseModel):
    enabled: bool = False
    url: str = ""


class ScrapeIn(BaseModel):
    share_link_pattern: Optional[str] = None
    media_url_prefixes: Optional[List[str]] = None
    page_timeout_s: float = Field(ge=1.0, le=300.0, default=30.0)
    headless: bool = True


class StoreStatusOut(BaseModel):
    configured: bool
    backend: str
    endpoint: str
    access_key_id_set: bool
    access_key_secret_set: bool


class RetryOut(BaseModel):
    max_retries: int
    base_delay_s: float
    max_delay_s: float
    enabled: bool


class ProxyOut(BaseModel):
    enabled: bool
    url_configured: bool  # Don't expose actual URL for security


class ScrapeOut(BaseModel):
    share_link_pattern: str
    media_url_prefixes: List[str]
    page_timeout_s: float
    headless: bool


class SettingsOut(BaseModel):
    store: StoreStatusOut
    bucket_name: str
    fetch_timeout_s: float
    retry: RetryOut
    proxy: ProxyOut
    scrape: ScrapeOut


def _public_settings(settings: GlobalSettings) -> SettingsOut:
    store = settings.store or StoreCredentials()
    retry = settings.get_retry()
    proxy = settings.get_proxy()
    scrape = settings.get_scrape()

    return SettingsOut(
        store=StoreStatusOut(
            configured=settings.store_configured(),
            backend=store.backend,
            endpoint=store.endpoint,
            access_key_id_set=bool(store.access_key_id.strip()),
            access_key_secret_set=bool(store.access_key_secret.strip()),
        ),
        bucket_name=settings.bucket_name,
        fetch_timeout_s=settings.fetch_timeout_s,
        retry=RetryOut(
            max_retries=retry.max_retries,
            base_delay_s=retry.base_delay_s,
            max_delay_s=retry.max_delay_s,
            enabled=retry.enabled,
        ),
        proxy=ProxyOut(
            enabled=proxy.enabled,
            url_configured=bool(proxy.url.strip()),
        ),
        scrape=ScrapeOut(
            share_link_pattern=scrape.share_link_pattern,
            media_url_prefixes=list(scrape.media_url_prefixes),
            page_timeout_s=scrape.page_timeout_s,
            headless=scrape.headless,
        ),
    )


def create_settings_router(*, store: SettingsStore) -> APIRouter:
    router = APIRouter(prefix="/api/settings", tags=["settings"])

    @router.get("", response_model=SettingsOut)
    def get_settings() -> SettingsOut:
        return _public_settings(store.load())

    @router.post("/store", response_model=SettingsOut)
    def set_store(body: StoreIn) -> SettingsOut:
        backend = body.backend.strip().lower()
        if backend not in BACKENDS:
            raise HTTPException(status_code=400, detail=f"不支持的存储类型：{body.backend}")

        credentials = StoreCredentials(
            endpoint=body.endpoint.strip(),
            access_key_id=body.access_key_id.strip(),
            access_key_secret=body.access_key_secret.strip(),
            region=(body.region.strip() if body.region and body.region.strip() else None),
            backend=backend,
        )
        if not credentials.is_complete():
            raise HTTPException(status_code=400, detail="对象存储需要 endpoint、access_key_id、access_key_secret")

        return _public_settings(store.set_store(credentials))

    @router.delete("/store", response_model=SettingsOut)
    def clear_store() -> SettingsOut:
        return _public_settings(store.clear_store())

    @router.post("/bucket", response_model=SettingsOut)
    def set_bucket(body: BucketIn) -> SettingsOut:
        bucket = body.bucket_name.strip()
        if not bucket:
            raise HTTPException(status_code=400, detail="bucket_name 不能为空")
        return _public_settings(store.set_bucket(bucket))

    @router.post("/retry", response_model=SettingsOut)
    def set_retry(body: RetryIn) -> SettingsOut:
        retry = RetryConfig(
            max_retries=body.max_retries,
            base_delay_s=body.base_delay_s,
            max_delay_s=body.max_delay_s,
            enabled=body.enabled,
        )
        return _public_settings(store.set_section("retry", retry))

    @router.post("/proxy", response_model=SettingsOut)
    def set_proxy(body: ProxyIn) -> SettingsOut:
        proxy = ProxyConfig(enabled=body.enabled, url=body.url.strip())

        is_valid, error = proxy.validate()
        if not is_valid:
            raise HTTPException(status_code=400, detail=error)

        return _public_settings(store.set_section("proxy", proxy))

    @router.delete("/proxy", response_model=SettingsOut)
    def clear_proxy() -> SettingsOut:
        return _public_settings(store.set_section("proxy", ProxyConfig()))

    @router.post("/fetch", response_model=SettingsOut)
    def set_fetch(body: FetchIn) -> SettingsOut:
        return _public_settings(store.set_section("fetch_timeout_s", body.fetch_timeout_s))

    @router.post("/scrape", response_model=SettingsOut)
    def set_scrape(body: ScrapeIn) -> SettingsOut:
        current = store.load().get_scrape()
        pattern = (body.share_link_pattern or "").strip() or current.share_link_pattern
        try:
            re.compile(pattern)
        except re.error as exc:
            raise HTTPException(status_code=400, detail=f"分享链接正则无效：{exc}") from exc

        prefixes = current.media_url_prefixes
        if body.media_url_prefixes is not None:
            prefixes = tuple(p.strip() for p in body.media_url_prefixes if p.strip())
            if not prefixes:
                raise HTTPException(status_code=400, detail="媒体地址前缀不能为空")

        scrape = ScrapeConfig(
            share_link_pattern=pattern,
            media_url_prefixes=prefixes,
            page_timeout_s=body.page_timeout_s,
            headless=body.headless,
            user_agent=current.user_agent,
        )
        return _public_settings(store.set_section("scrape", scrape))

    return router
