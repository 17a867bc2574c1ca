"""
Tool operations exposed to the outer invocation layer.

Every call is an independent unit of work: validate input, resolve the store
configuration, open the store for this call only, run the operation, and
turn any error into a ToolFailure. Nothing raised here reaches the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, ContextManager, Mapping, Optional

from src.backend.blobstore import BlobStore, StoreError, open_blob_store
from src.backend.cache.query import exists_by_source
from src.backend.cache.resolver import CacheResolver, ResolutionStatus
from src.backend.downloader.fetcher import MediaFetcher, TransportError, UrllibMediaFetcher
from src.backend.pipeline.share_link_runner import ShareLinkRunner, ShareLinkStage, detect_share_link
from src.backend.scraper.share_scraper import PlaywrightShareScraper, ScrapeError, ShareScraper
from src.backend.settings.models import ConfigurationError, GlobalSettings, StoreConfig, resolve_store_config
from src.shared.locators import LocatorValidationError, normalize_locator
from .results import (
    ErrorKind,
    ExistsOutcome,
    ExistsResult,
    ResolveShareLinkOutcome,
    ShareLinkResolved,
    StoreMediaOutcome,
    StoreMediaResult,
    ToolFailure,
)


logger = logging.getLogger(__name__)

StoreOpener = Callable[[StoreConfig], ContextManager[BlobStore]]

RESOLUTION_MESSAGES = {
    ResolutionStatus.HIT: "命中缓存",
    ResolutionStatus.HIT_VIA_SOURCE: "命中缓存（通过原始地址指向）",
    ResolutionStatus.STORED: "上传成功",
}
MESSAGE_SHARE_EXISTING = "已存在视频"


def _failure(operation: str, exc: Exception, defaults: Mapping[str, Any]) -> ToolFailure:
    if isinstance(exc, ConfigurationError):
        kind = ErrorKind.CONFIGURATION
    elif isinstance(exc, LocatorValidationError):
        kind = ErrorKind.VALIDATION
    elif isinstance(exc, TransportError):
        kind = ErrorKind.TRANSPORT
    elif isinstance(exc, StoreError):
        kind = ErrorKind.STORE
    elif isinstance(exc, ScrapeError):
        kind = ErrorKind.SCRAPE
    else:
        kind = ErrorKind.INTERNAL

    if kind == ErrorKind.INTERNAL:
        logger.exception("%s failed unexpectedly", operation)
        message = f"失败: {exc}"
    else:
        logger.warning("%s failed (%s): %s", operation, kind.value, exc)
        message = str(exc)
    return ToolFailure(message=message, error_kind=kind, defaults=dict(defaults))


class CacheToolService:
    """
    Usage:
        service = CacheToolService(settings)
        result = service.store_media_from_locator("https://cdn.example.com/a.mp4")
        print(result.to_dict())
    """

    def __init__(
        self,
        settings: GlobalSettings,
        *,
        store_opener: StoreOpener = open_blob_store,
        fetcher: Optional[MediaFetcher] = None,
        scraper: Optional[ShareScraper] = None,
    ) -> None:
        self._settings = settings
        self._store_opener = store_opener
        self._fetcher = fetcher or UrllibMediaFetcher(
            timeout_s=settings.fetch_timeout_s,
            retry=settings.get_retry(),
            proxy=settings.get_proxy(),
        )
        self._scraper = scraper or PlaywrightShareScraper(settings.get_scrape(), proxy=settings.get_proxy())

    def store_media_from_locator(
        self,
        media_locator: Optional[str],
        source_locator: Optional[str] = None,
        bucket_override: Optional[str] = None,
    ) -> StoreMediaOutcome:
        """
        Store the video behind a media URL, reusing the cache when possible.

        `cached` is True iff no download happened; `path` is the store key of
        the video.
        """
        try:
            media_url = normalize_locator(media_locator, field_name="mediaLocator")
            config = resolve_store_config(self._settings, bucket_override)
            with self._store_opener(config) as store:
                resolution = CacheResolver(store, self._fetcher).resolve(media_url, source_locator)
        except Exception as exc:  # noqa: BLE001
            return _failure("store_media_from_locator", exc, {"cached": False})

        return StoreMediaResult(
            message=RESOLUTION_MESSAGES[resolution.status],
            cached=resolution.cached,
            bucket=config.bucket,
            path=resolution.path,
        )

    def exists_by_source_locator(
        self,
        source_locator: Optional[str],
        bucket_override: Optional[str] = None,
    ) -> ExistsOutcome:
        """Report whether a source URL already leads to a complete stored video."""
        try:
            source_url = normalize_locator(source_locator, field_name="sourceLocator")
            config = resolve_store_config(self._settings, bucket_override)
            with self._store_opener(config) as store:
                lookup = exists_by_source(store, source_url)
        except Exception as exc:  # noqa: BLE001
            return _failure("exists_by_source_locator", exc, {"exists": False})

        return ExistsResult(exists=lookup.exists, message=lookup.message, bucket=config.bucket, path=lookup.path)

    def resolve_share_link(
        self,
        share_link: Optional[str],
        bucket_override: Optional[str] = None,
    ) -> ResolveShareLinkOutcome:
        """
        Turn a share link (or text containing one) into a public video URL.

        The scraper is only started when the link has no complete stored video.
        """
        scrape = self._settings.get_scrape()
        try:
            source = detect_share_link(share_link, scrape.share_link_pattern)
            config = resolve_store_config(self._settings, bucket_override)
            with self._store_opener(config) as store:
                runner = ShareLinkRunner(
                    store=store,
                    fetcher=self._fetcher,
                    scraper=self._scraper,
                    share_link_pattern=scrape.share_link_pattern,
                    media_url_prefixes=scrape.media_url_prefixes,
                )
                outcome = runner.run(source.url)
        except Exception as exc:  # noqa: BLE001
            return _failure("resolve_share_link", exc, {})

        if outcome.finished_at == ShareLinkStage.CHECK_EXISTING:
            message = MESSAGE_SHARE_EXISTING
        else:
            message = RESOLUTION_MESSAGES[outcome.resolution or ResolutionStatus.STORED]

        return ShareLinkResolved(
            message=message,
            public_url=config.public_url(outcome.path),
            path=outcome.path,
            bucket=config.bucket,
            cached=outcome.cached,
        )
