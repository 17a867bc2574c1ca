"""
Share-page scraper backed by Playwright.

A share link only serves an HTML page; the playable video URL appears once
the page's scripts have run. The scraper renders the page in headless
Chromium, waits for a <video> element and reads its source URLs.

A browser is launched per call and closed on every exit path.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Protocol

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from src.shared.validators.share_link import is_media_url
from ..net.proxy import ProxyConfig, playwright_proxy
from .config import ScrapeConfig


logger = logging.getLogger(__name__)

_COLLECT_VIDEO_SOURCES_JS = """
() => {
  const urls = [];
  for (const video of document.querySelectorAll("video")) {
    if (video.currentSrc) urls.push(video.currentSrc);
    if (video.src) urls.push(video.src);
    for (const source of video.querySelectorAll("source")) {
      if (source.src) urls.push(source.src);
    }
  }
  return urls;
}
"""


class ScrapeError(RuntimeError):
    """
    Extracting a media URL from a share page failed.

    Attributes:
        no_media: True when the page rendered but held no acceptable video URL.
    """

    def __init__(self, message: str, *, no_media: bool = False) -> None:
        super().__init__(message)
        self.no_media = no_media


class ShareScraper(Protocol):
    def extract_media_url(self, share_link: str) -> str: ...


def select_media_url(candidates: Iterable[str], prefixes: Iterable[str]) -> str:
    """
    Pick the first candidate that matches a media prefix.

    Raises:
        ScrapeError: (no_media=True) if nothing matches.
    """
    allowed = tuple(prefixes)
    for candidate in candidates:
        if is_media_url(candidate, allowed):
            return candidate.strip()
    raise ScrapeError("未找到视频地址", no_media=True)


class PlaywrightShareScraper:
    def __init__(self, config: Optional[ScrapeConfig] = None, *, proxy: Optional[ProxyConfig] = None) -> None:
        self._config = config or ScrapeConfig()
        self._proxy = proxy

    def extract_media_url(self, share_link: str) -> str:
        candidates = self._collect_candidates(share_link.strip())
        logger.info("Share page %s exposed %d video source(s)", share_link, len(candidates))
        return select_media_url(candidates, self._config.media_url_prefixes)

    def _collect_candidates(self, share_link: str) -> list[str]:
        timeout_ms = int(self._config.page_timeout_s * 1000)
        try:
            with sync_playwright() as pw:
                browser = pw.chromium.launch(
                    headless=self._config.headless,
                    proxy=playwright_proxy(self._proxy),
                )
                try:
                    context = browser.new_context(user_agent=self._config.user_agent)
                    page = context.new_page()
                    page.set_default_timeout(timeout_ms)
                    page.goto(share_link, wait_until="domcontentloaded")
                    try:
                        page.wait_for_selector("video", state="attached", timeout=timeout_ms)
                    except PlaywrightTimeoutError:
                        logger.info("No <video> element on %s after %.0fs", share_link, self._config.page_timeout_s)
                        return []
                    raw = page.evaluate(_COLLECT_VIDEO_SOURCES_JS) or []
                    return [str(u) for u in raw if u]
                finally:
                    browser.close()
        except PlaywrightError as exc:
            raise ScrapeError(f"页面抓取失败：{exc}") from exc
