"""
Tests for src/backend/scraper/share_scraper.py

The browser is replaced by mocks; these tests check candidate selection and
that the browser is always closed.
"""

import unittest
from unittest.mock import MagicMock, patch

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from src.backend.net.proxy import ProxyConfig
from src.backend.scraper.config import ScrapeConfig
from src.backend.scraper.share_scraper import PlaywrightShareScraper, ScrapeError, select_media_url


SHARE = "https://v.douyin.com/AbC123/"
PLAY = "https://www.douyin.com/aweme/v1/play/?video_id=v0200f"


def _fake_playwright(page):
    browser = MagicMock()
    browser.new_context.return_value.new_page.return_value = page

    pw = MagicMock()
    pw.chromium.launch.return_value = browser

    manager = MagicMock()
    manager.__enter__.return_value = pw
    manager.__exit__.return_value = False
    return manager, pw, browser


class TestSelectMediaUrl(unittest.TestCase):
    def test_first_matching_candidate(self):
        candidates = ["blob:https://www.douyin.com/x", f" {PLAY} ", "https://v3-web.douyinvod.com/b.mp4"]
        self.assertEqual(select_media_url(candidates, ScrapeConfig().media_url_prefixes), PLAY)

    def test_no_match(self):
        with self.assertRaises(ScrapeError) as ctx:
            select_media_url(["https://www.douyin.com/video/1"], ScrapeConfig().media_url_prefixes)
        self.assertTrue(ctx.exception.no_media)
        self.assertEqual(str(ctx.exception), "未找到视频地址")


class TestPlaywrightShareScraper(unittest.TestCase):
    def test_extracts_media_url_and_closes_browser(self):
        page = MagicMock()
        page.evaluate.return_value = ["", PLAY]
        manager, pw, browser = _fake_playwright(page)

        config = ScrapeConfig(page_timeout_s=10, headless=True)
        proxy = ProxyConfig(enabled=True, url="http://127.0.0.1:7890")
        with patch("src.backend.scraper.share_scraper.sync_playwright", return_value=manager):
            url = PlaywrightShareScraper(config, proxy=proxy).extract_media_url(f" {SHARE} ")

        self.assertEqual(url, PLAY)
        pw.chromium.launch.assert_called_once_with(headless=True, proxy={"server": "http://127.0.0.1:7890"})
        page.goto.assert_called_once_with(SHARE, wait_until="domcontentloaded")
        page.wait_for_selector.assert_called_once_with("video", state="attached", timeout=10000)
        browser.close.assert_called_once_with()

    def test_no_video_element(self):
        page = MagicMock()
        page.wait_for_selector.side_effect = PlaywrightTimeoutError("Timeout 10000ms exceeded")
        manager, _, browser = _fake_playwright(page)

        with patch("src.backend.scraper.share_scraper.sync_playwright", return_value=manager):
            with self.assertRaises(ScrapeError) as ctx:
                PlaywrightShareScraper().extract_media_url(SHARE)

        self.assertTrue(ctx.exception.no_media)
        browser.close.assert_called_once_with()

    def test_navigation_failure(self):
        page = MagicMock()
        page.goto.side_effect = PlaywrightError("net::ERR_NAME_NOT_RESOLVED")
        manager, _, browser = _fake_playwright(page)

        with patch("src.backend.scraper.share_scraper.sync_playwright", return_value=manager):
            with self.assertRaises(ScrapeError) as ctx:
                PlaywrightShareScraper().extract_media_url(SHARE)

        self.assertFalse(ctx.exception.no_media)
        self.assertIn("页面抓取失败", str(ctx.exception))
        browser.close.assert_called_once_with()


class TestScrapeConfig(unittest.TestCase):
    def test_persist_roundtrip_and_fallbacks(self):
        config = ScrapeConfig(media_url_prefixes=("https://cdn.example.com/",), page_timeout_s=12)
        restored = ScrapeConfig.from_persist_dict(config.to_persist_dict())
        self.assertEqual(restored.media_url_prefixes, ("https://cdn.example.com/",))
        self.assertEqual(restored.page_timeout_s, 12)

        fallback = ScrapeConfig.from_persist_dict({"media_url_prefixes": [], "page_timeout_s": "x"})
        self.assertEqual(fallback.media_url_prefixes, ScrapeConfig().media_url_prefixes)
        self.assertEqual(fallback.page_timeout_s, 30.0)


if __name__ == "__main__":
    unittest.main()
