"""
Locator variants shared by the cache core and the share-link pipeline.

Two identity spaces point at the same stored video:

- DirectMediaLocator: a URL that serves the video bytes directly.
- SourceShareLocator: a share/page URL that must be rendered to obtain
  a direct media URL.

Only surrounding whitespace is trimmed. Case, trailing slashes and query
order stay significant because they change the derived cache key.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class LocatorValidationError(ValueError):
    """Raised for blank or malformed locator input."""


def is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def normalize_locator(value: Optional[str], *, field_name: str = "locator") -> str:
    """
    Trim a locator and reject blank input.

    Args:
        value: Raw locator text.
        field_name: Name used in the error message.

    Returns:
        The trimmed locator.

    Raises:
        LocatorValidationError: If the locator is None or blank.
    """
    if is_blank(value):
        raise LocatorValidationError(f"{field_name} 不能为空")
    return value.strip()


def optional_locator(value: Optional[str]) -> Optional[str]:
    """Trim an optional locator; blank input means "not given"."""
    if is_blank(value):
        return None
    return value.strip()


@dataclass(frozen=True)
class DirectMediaLocator:
    url: str

    @classmethod
    def parse(cls, value: Optional[str]) -> "DirectMediaLocator":
        return cls(url=normalize_locator(value, field_name="mediaLocator"))


@dataclass(frozen=True)
class SourceShareLocator:
    url: str

    @classmethod
    def parse(cls, value: Optional[str]) -> "SourceShareLocator":
        return cls(url=normalize_locator(value, field_name="sourceLocator"))
