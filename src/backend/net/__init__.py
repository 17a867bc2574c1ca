"""
Network utilities: retry with exponential backoff and proxy config.
"""

from .retry import RetryConfig, RetryableError, with_retry
from .proxy import ProxyConfig, playwright_proxy, urllib_proxy_handler

__all__ = [
    "RetryConfig",
    "RetryableError",
    "with_retry",
    "ProxyConfig",
    "playwright_proxy",
    "urllib_proxy_handler",
]
