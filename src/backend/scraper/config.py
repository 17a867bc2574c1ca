from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from src.shared.validators.share_link import DEFAULT_MEDIA_URL_PREFIXES, DEFAULT_SHARE_LINK_PATTERN


DEFAULT_PAGE_TIMEOUT_S = 30.0
DEFAULT_SCRAPE_USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 16_6 like Mac OS X) "
    "AppleWebKit/605.1.15 (KHTML, like Gecko) "
    "Version/16.6 Mobile/15E148 Safari/604.1"
)


@dataclass
class ScrapeConfig:
    """
    Share-page scraping options.

    Attributes:
        share_link_pattern: Regex locating a share link in free-form input.
        media_url_prefixes: Accepted prefixes for extracted media URLs.
        page_timeout_s: Navigation / selector wait timeout.
        headless: Run Chromium headless.
        user_agent: UA used for the browser context.
    """
    share_link_pattern: str = DEFAULT_SHARE_LINK_PATTERN
    media_url_prefixes: tuple[str, ...] = field(default_factory=lambda: tuple(DEFAULT_MEDIA_URL_PREFIXES))
    page_timeout_s: float = DEFAULT_PAGE_TIMEOUT_S
    headless: bool = True
    user_agent: str = DEFAULT_SCRAPE_USER_AGENT

    def to_persist_dict(self) -> dict[str, Any]:
        return {
            "share_link_pattern": self.share_link_pattern,
            "media_url_prefixes": list(self.media_url_prefixes),
            "page_timeout_s": self.page_timeout_s,
            "headless": self.headless,
            "user_agent": self.user_agent,
        }

    @classmethod
    def from_persist_dict(cls, data: dict[str, Any]) -> "ScrapeConfig":
        pattern = str(data.get("share_link_pattern") or DEFAULT_SHARE_LINK_PATTERN)

        raw_prefixes = data.get("media_url_prefixes")
        prefixes: tuple[str, ...] = tuple(DEFAULT_MEDIA_URL_PREFIXES)
        if isinstance(raw_prefixes, (list, tuple)):
            parsed = tuple(str(p).strip() for p in raw_prefixes if str(p).strip())
            if parsed:
                prefixes = parsed

        try:
            timeout = float(data.get("page_timeout_s", DEFAULT_PAGE_TIMEOUT_S))
        except (TypeError, ValueError):
            timeout = DEFAULT_PAGE_TIMEOUT_S

        return cls(
            share_link_pattern=pattern,
            media_url_prefixes=prefixes,
            page_timeout_s=max(1.0, timeout),
            headless=bool(data.get("headless", True)),
            user_agent=str(data.get("user_agent") or DEFAULT_SCRAPE_USER_AGENT),
        )
