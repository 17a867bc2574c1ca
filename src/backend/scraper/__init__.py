from .config import ScrapeConfig
from .share_scraper import PlaywrightShareScraper, ScrapeError, ShareScraper, select_media_url

__all__ = [
    "PlaywrightShareScraper",
    "ScrapeConfig",
    "ScrapeError",
    "ShareScraper",
    "select_media_url",
]
