from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Pattern, Union

from src.backend.blobstore.base import BlobStore
from src.backend.cache.layout import MediaDirectory
from src.backend.cache.query import exists_by_source
from src.backend.cache.resolver import CacheResolver, ResolutionStatus
from src.backend.downloader.fetcher import MediaFetcher
from src.backend.scraper.share_scraper import ScrapeError, ShareScraper
from src.shared.locators import DirectMediaLocator, LocatorValidationError, SourceShareLocator
from src.shared.validators.share_link import DEFAULT_MEDIA_URL_PREFIXES, extract_share_link, is_media_url


logger = logging.getLogger(__name__)


class ShareLinkStage(str, Enum):
    CHECK_EXISTING = "check_existing"
    RESOLVE = "resolve"


@dataclass(frozen=True)
class ShareLinkOutcome:
    share_link: SourceShareLocator
    directory: MediaDirectory
    cached: bool
    finished_at: ShareLinkStage
    media_locator: Optional[DirectMediaLocator] = None
    resolution: Optional[ResolutionStatus] = None

    @property
    def path(self) -> str:
        return self.directory.artifact_key


def detect_share_link(
    text: Optional[str],
    pattern: Union[str, Pattern[str], None] = None,
) -> SourceShareLocator:
    """
    Pull a share link out of free-form input.

    Raises:
        LocatorValidationError: With a user-readable reason when nothing matches.
    """
    found = extract_share_link(text, pattern)
    if not found.valid or not found.url:
        raise LocatorValidationError(found.error or "未识别到有效的分享链接")
    return SourceShareLocator.parse(found.url)


class ShareLinkRunner:
    """
    Single-request runner: detect -> check existing -> scrape -> resolve.

    The existing-video check always runs before the browser is started, so a
    share link seen before never costs a page render or a download.
    """

    def __init__(
        self,
        *,
        store: BlobStore,
        fetcher: MediaFetcher,
        scraper: ShareScraper,
        share_link_pattern: Union[str, Pattern[str], None] = None,
        media_url_prefixes: Iterable[str] = DEFAULT_MEDIA_URL_PREFIXES,
    ) -> None:
        self._store = store
        self._fetcher = fetcher
        self._scraper = scraper
        self._pattern = share_link_pattern
        self._media_url_prefixes = tuple(media_url_prefixes)

    def run(self, text: Optional[str]) -> ShareLinkOutcome:
        """
        Resolve a share link (or text containing one) to a stored video.

        Raises:
            LocatorValidationError: No share link in the input.
            ScrapeError: The page yielded no acceptable media URL.
            TransportError / StoreError: From the resolve step.
        """
        share_link = detect_share_link(text, self._pattern)

        existing = exists_by_source(self._store, share_link.url)
        if existing.exists and existing.directory is not None:
            logger.info("Share link %s already stored at %s", share_link.url, existing.path)
            return ShareLinkOutcome(
                share_link=share_link,
                directory=existing.directory,
                cached=True,
                finished_at=ShareLinkStage.CHECK_EXISTING,
            )

        scraped = self._scraper.extract_media_url(share_link.url)
        if not is_media_url(scraped, self._media_url_prefixes):
            raise ScrapeError("未找到视频地址", no_media=True)
        media_locator = DirectMediaLocator.parse(scraped)
        logger.info("Share link %s -> media %s", share_link.url, media_locator.url)

        resolution = CacheResolver(self._store, self._fetcher).resolve(media_locator.url, share_link.url)
        return ShareLinkOutcome(
            share_link=share_link,
            directory=resolution.directory,
            cached=resolution.cached,
            finished_at=ShareLinkStage.RESOLVE,
            media_locator=media_locator,
            resolution=resolution.status,
        )
