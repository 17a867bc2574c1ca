"""
分享链接提取与媒体地址校验测试
"""

import re
import unittest

from src.shared.validators.share_link import (
    DEFAULT_MEDIA_URL_PREFIXES,
    extract_share_link,
    is_media_url,
)


class TestExtractShareLink(unittest.TestCase):
    def test_plain_link(self):
        result = extract_share_link("https://v.douyin.com/iRNBho6/")
        self.assertTrue(result.valid)
        self.assertEqual(result.url, "https://v.douyin.com/iRNBho6/")

    def test_link_inside_share_text(self):
        text = "7.17 复制打开抖音，看看【某某的作品】 https://v.douyin.com/iRNBho6/ a@B.Yt 03/15 Xzg:/"
        result = extract_share_link(text)
        self.assertTrue(result)
        self.assertEqual(result.url, "https://v.douyin.com/iRNBho6/")

    def test_first_link_wins(self):
        result = extract_share_link("https://v.douyin.com/first/ https://v.douyin.com/second/")
        self.assertEqual(result.url, "https://v.douyin.com/first/")

    def test_empty_input(self):
        for value in (None, "", "   "):
            result = extract_share_link(value)
            self.assertFalse(result.valid)
            self.assertEqual(result.error, "分享链接不能为空")

    def test_no_link(self):
        result = extract_share_link("https://www.example.com/video/1")
        self.assertFalse(result)
        self.assertEqual(result.error, "未识别到有效的分享链接")

    def test_custom_pattern(self):
        pattern = re.compile(r"https://share\.example\.com/s/\w+")
        result = extract_share_link("look https://share.example.com/s/abc123 now", pattern)
        self.assertEqual(result.url, "https://share.example.com/s/abc123")
        self.assertFalse(extract_share_link("https://v.douyin.com/iRNBho6/", r"https://share\.example\.com/\w+"))


class TestIsMediaUrl(unittest.TestCase):
    def test_default_prefixes(self):
        self.assertTrue(is_media_url("https://www.douyin.com/aweme/v1/play/?video_id=v0200f"))
        self.assertTrue(is_media_url(" https://v26-web.douyinvod.com/abc/video/tos/a.mp4 "))
        self.assertFalse(is_media_url("https://www.douyin.com/video/123"))
        self.assertFalse(is_media_url("blob:https://www.douyin.com/4b1f"))
        self.assertFalse(is_media_url(None))
        self.assertFalse(is_media_url("  "))

    def test_custom_prefixes(self):
        prefixes = ("https://cdn.example.com/",)
        self.assertTrue(is_media_url("https://cdn.example.com/a.mp4", prefixes))
        self.assertFalse(is_media_url(DEFAULT_MEDIA_URL_PREFIXES[0] + "x", prefixes))


if __name__ == "__main__":
    unittest.main()
