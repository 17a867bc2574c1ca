"""
Backoff for origin downloads.

A CDN that answers 429 or 5xx, or drops the connection, usually serves the
same URL again a moment later. Those attempts are repeated with exponential
backoff; any other failure ends the download at once.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, FrozenSet, Mapping, Optional, TypeVar

R = TypeVar("R")

TRANSIENT_STATUS_CODES: FrozenSet[int] = frozenset({429, 500, 502, 503, 504})

logger = logging.getLogger(__name__)


class RetryableError(Exception):
    """An attempt failed; `should_retry` says whether repeating it may help."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        should_retry: bool = True,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.should_retry = should_retry


@dataclass
class RetryConfig:
    """
    Attributes:
        max_retries: Extra attempts after the first one.
        base_delay_s: Wait before the first retry; doubles on every retry.
        max_delay_s: Upper bound of a single wait, before jitter.
        jitter_factor: Random extra wait as a fraction of the delay.
        retryable_status_codes: HTTP statuses treated as transient.
        enabled: False means exactly one attempt.
    """
    max_retries: int = 2
    base_delay_s: float = 1.5
    max_delay_s: float = 30.0
    jitter_factor: float = 0.25
    retryable_status_codes: set[int] = field(default_factory=lambda: set(TRANSIENT_STATUS_CODES))
    enabled: bool = True

    @property
    def attempts(self) -> int:
        return 1 + (self.max_retries if self.enabled else 0)

    def compute_delay(self, attempt: int) -> float:
        capped = min(self.max_delay_s, self.base_delay_s * 2 ** attempt)
        return capped * (1.0 + random.uniform(0.0, self.jitter_factor))

    def is_retryable_status(self, status_code: int) -> bool:
        return status_code in self.retryable_status_codes

    def to_persist_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["retryable_status_codes"] = sorted(self.retryable_status_codes)
        return data

    @classmethod
    def from_persist_dict(cls, data: Mapping[str, Any]) -> "RetryConfig":
        defaults = cls()
        return cls(
            max_retries=max(0, _coerce(data, "max_retries", int, defaults.max_retries)),
            base_delay_s=max(0.1, _coerce(data, "base_delay_s", float, defaults.base_delay_s)),
            max_delay_s=max(1.0, _coerce(data, "max_delay_s", float, defaults.max_delay_s)),
            jitter_factor=min(1.0, max(0.0, _coerce(data, "jitter_factor", float, defaults.jitter_factor))),
            retryable_status_codes=_status_codes(data.get("retryable_status_codes")) or set(TRANSIENT_STATUS_CODES),
            enabled=bool(data.get("enabled", True)),
        )


def _coerce(data: Mapping[str, Any], key: str, cast: Callable[[Any], Any], default: Any) -> Any:
    try:
        return cast(data.get(key, default))
    except (TypeError, ValueError):
        return default


def _status_codes(raw: Any) -> set[int]:
    if not isinstance(raw, (list, tuple)):
        return set()
    codes: set[int] = set()
    for item in raw:
        try:
            codes.add(int(item))
        except (TypeError, ValueError):
            continue
    return codes


def with_retry(
    func: Callable[[], R],
    *,
    config: Optional[RetryConfig] = None,
    sleep: Callable[[float], None] = time.sleep,
    on_retry: Optional[Callable[[int, Exception, float], None]] = None,
) -> R:
    """
    Run `func`, repeating it after transient failures.

    Args:
        func: One attempt, no arguments.
        config: Backoff settings (defaults when None).
        sleep: Wait function; tests pass a recorder.
        on_retry: Called as (attempt, error, delay) instead of the warning log.

    Raises:
        The first RetryableError with should_retry=False, the last one once
        attempts run out, or any other exception unchanged.
    """
    cfg = config or RetryConfig()
    attempt = 0
    while True:
        try:
            return func()
        except RetryableError as exc:
            if not exc.should_retry or attempt + 1 >= cfg.attempts:
                raise
            delay = cfg.compute_delay(attempt)
            if on_retry is not None:
                on_retry(attempt, exc, delay)
            else:
                logger.warning("Attempt %d/%d failed, retrying in %.1fs: %s", attempt + 1, cfg.attempts, delay, exc)
            sleep(delay)
            attempt += 1
