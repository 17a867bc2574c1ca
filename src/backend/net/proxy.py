"""
Outbound proxy shared by the media fetcher and the share-page browser.

One URL serves both clients: urllib gets a ProxyHandler for http and https,
Playwright gets `{"server": url}` when the browser is launched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional
from urllib.parse import urlparse
from urllib.request import ProxyHandler


SUPPORTED_SCHEMES = ("http", "https", "socks5")


@dataclass(frozen=True)
class ProxyConfig:
    enabled: bool = False
    url: str = ""

    def get_url(self) -> Optional[str]:
        """Proxy URL when enabled and configured, else None."""
        url = self.url.strip()
        return url if self.enabled and url else None

    def redacted(self) -> str:
        """scheme://host:port without credentials, for logs."""
        parsed = urlparse(self.url.strip())
        return f"{parsed.scheme}://{parsed.hostname or ''}:{parsed.port or ''}"

    def validate(self) -> tuple[bool, str]:
        """
        Check the URL before it is saved.

        Returns:
            (True, "") when usable or disabled, else (False, reason).
        """
        if not self.enabled:
            return True, ""
        url = self.url.strip()
        if not url:
            return False, "代理地址不能为空"

        parsed = urlparse(url)
        if parsed.scheme.lower() not in SUPPORTED_SCHEMES:
            return False, f"不支持的代理协议：{parsed.scheme or '（缺失）'}，可选 {', '.join(SUPPORTED_SCHEMES)}"
        try:
            port = parsed.port
        except ValueError:
            port = None
        if not parsed.hostname or port is None:
            return False, "代理地址需包含主机和端口，例如 http://127.0.0.1:7890"
        return True, ""

    def to_persist_dict(self) -> dict[str, Any]:
        return {"enabled": self.enabled, "url": self.url}

    @classmethod
    def from_persist_dict(cls, data: Mapping[str, Any]) -> "ProxyConfig":
        return cls(enabled=bool(data.get("enabled", False)), url=str(data.get("url") or ""))


def urllib_proxy_handler(config: Optional[ProxyConfig]) -> Optional[ProxyHandler]:
    url = config.get_url() if config is not None else None
    if url is None:
        return None
    return ProxyHandler({"http": url, "https": url})


def playwright_proxy(config: Optional[ProxyConfig]) -> Optional[dict[str, str]]:
    """Proxy settings in the shape `browser_type.launch(proxy=...)` expects."""
    url = config.get_url() if config is not None else None
    if url is None:
        return None
    return {"server": url}
