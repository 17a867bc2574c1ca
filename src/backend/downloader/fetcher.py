"""
HTTP fetcher for direct media URLs.

Downloads the whole video into memory with urllib. Transient failures
(429/5xx, dropped connections, timeouts) are retried with exponential
backoff; every other failure is reported as a TransportError on the spot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from http.client import HTTPException
from typing import Any, Optional, Protocol
from urllib.error import HTTPError, URLError
from urllib.request import OpenerDirector, Request, build_opener

from ..net.proxy import ProxyConfig, urllib_proxy_handler
from ..net.retry import RetryConfig, RetryableError, with_retry


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)
DEFAULT_TIMEOUT_S = 60.0

logger = logging.getLogger(__name__)


class TransportError(RetryableError):
    """Fetching media bytes failed (non-2xx status, empty body, network error)."""


@dataclass(frozen=True)
class FetchedMedia:
    content: bytes
    content_length: int
    content_type: Optional[str] = None


class MediaFetcher(Protocol):
    def fetch(self, url: str) -> FetchedMedia: ...


class UrllibMediaFetcher:
    """
    Fetch media bytes with urllib.

    Usage:
        fetcher = UrllibMediaFetcher(timeout_s=60, retry=RetryConfig())
        media = fetcher.fetch("https://cdn.example.com/a.mp4")
    """

    def __init__(
        self,
        *,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        retry: Optional[RetryConfig] = None,
        proxy: Optional[ProxyConfig] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        opener: Optional[OpenerDirector] = None,
    ) -> None:
        self._timeout_s = timeout_s
        self._retry = retry or RetryConfig()
        self._user_agent = user_agent
        if opener is None:
            handler = urllib_proxy_handler(proxy)
            if handler is not None:
                logger.debug("Media downloads go through proxy %s", proxy.redacted())
                opener = build_opener(handler)
            else:
                opener = build_opener()
        self._opener = opener

    def fetch(self, url: str) -> FetchedMedia:
        """
        Download a media URL.

        Raises:
            TransportError: On any non-success outcome after retries.
        """
        target = url.strip()
        media = with_retry(lambda: self._fetch_once(target), config=self._retry)
        logger.info("Fetched %d bytes from %s", media.content_length, target)
        return media

    def _fetch_once(self, url: str) -> FetchedMedia:
        try:
            request = Request(url, headers={"User-Agent": self._user_agent, "Accept": "*/*"})
            with self._opener.open(request, timeout=self._timeout_s) as resp:
                status = _status_of(resp)
                if not 200 <= status < 300:
                    raise TransportError(
                        f"下载失败：HTTP {status}",
                        status_code=status,
                        should_retry=self._retry.is_retryable_status(status),
                    )
                content = resp.read()
                content_type = resp.headers.get("Content-Type") if resp.headers else None
        except HTTPError as exc:
            raise TransportError(
                f"下载失败：HTTP {exc.code}",
                status_code=exc.code,
                should_retry=self._retry.is_retryable_status(exc.code),
            ) from exc
        except (URLError, HTTPException, OSError) as exc:
            # OSError covers socket.timeout, which is not a TimeoutError before 3.10
            raise TransportError(f"下载失败：网络错误 {exc}") from exc
        except ValueError as exc:
            # urllib raises ValueError for unknown URL types
            raise TransportError(f"下载失败：无效地址 {url}", should_retry=False) from exc

        if not content:
            raise TransportError("下载失败：响应体为空", status_code=status, should_retry=False)
        return FetchedMedia(content=content, content_length=len(content), content_type=content_type)


def _status_of(resp: Any) -> int:
    status = getattr(resp, "status", None)
    if status is None:
        status = resp.getcode()
    return int(status or 0)
