"""
分享链接提取与媒体地址校验。

约定：
- 输入可以是整段分享文案（如 "7.17 复制打开抖音 https://v.douyin.com/iRNBho6/ 看看"），
  从中提取第一个匹配的分享链接
- 未匹配到分享链接时返回可理解的错误原因
- 抓取得到的媒体地址必须以配置的媒体域名前缀开头，否则视为未找到媒体
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Pattern, Union


# 抖音短链：https://v.douyin.com/<code>/
DEFAULT_SHARE_LINK_PATTERN = r"https?://v\.douyin\.com/[A-Za-z0-9_\-]+/?"

# 抖音播放地址常见前缀
DEFAULT_MEDIA_URL_PREFIXES: tuple[str, ...] = (
    "https://www.douyin.com/aweme/v1/play/",
    "https://aweme.snssdk.com/aweme/v1/play/",
    "https://v3-web.douyinvod.com/",
    "https://v26-web.douyinvod.com/",
)


@dataclass(frozen=True)
class ShareLinkResult:
    """分享链接提取结果"""

    valid: bool
    url: Optional[str] = None
    error: Optional[str] = None

    def __bool__(self) -> bool:
        return self.valid


def compile_share_link_pattern(pattern: Union[str, Pattern[str], None]) -> Pattern[str]:
    if pattern is None:
        return re.compile(DEFAULT_SHARE_LINK_PATTERN)
    if isinstance(pattern, str):
        return re.compile(pattern)
    return pattern


def extract_share_link(
    text: Optional[str],
    pattern: Union[str, Pattern[str], None] = None,
) -> ShareLinkResult:
    """
    从任意文本中提取分享链接。

    Args:
        text: 用户输入（完整链接或包含链接的分享文案）
        pattern: 分享链接正则，默认匹配抖音短链

    Returns:
        ShareLinkResult: 包含 valid、url（成功时）、error（失败时）
    """
    if text is None or not text.strip():
        return ShareLinkResult(valid=False, error="分享链接不能为空")

    match = compile_share_link_pattern(pattern).search(text.strip())
    if match is None:
        return ShareLinkResult(valid=False, error="未识别到有效的分享链接")

    return ShareLinkResult(valid=True, url=match.group(0))


def is_media_url(url: Optional[str], prefixes: Iterable[str] = DEFAULT_MEDIA_URL_PREFIXES) -> bool:
    """
    判断抓取到的地址是否为可直接下载的媒体地址。

    Args:
        url: 候选地址
        prefixes: 允许的媒体域名前缀

    Returns:
        True 表示以任一前缀开头
    """
    if url is None:
        return False
    candidate = url.strip()
    if not candidate:
        return False
    return any(candidate.startswith(prefix) for prefix in prefixes if prefix)
