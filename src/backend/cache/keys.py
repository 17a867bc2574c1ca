"""
Locator -> storage key derivation.

Keys are the lowercase MD5 hex digest of the trimmed locator text. MD5 is
used for its short fixed length, not for security: the key only needs to be
stable and collision-resistant for the expected number of locators.
"""

from __future__ import annotations

import hashlib
from typing import Optional

from src.shared.locators import normalize_locator


# Hash algorithm used for locator keys
KEY_ALGORITHM = "md5"

# Length of a hex key (128-bit digest)
KEY_LENGTH = 32


def derive_key(locator: Optional[str]) -> str:
    """
    Derive the storage key fragment for a locator.

    Args:
        locator: Media or source locator. Surrounding whitespace is ignored.

    Returns:
        32-character lowercase hexadecimal digest.

    Raises:
        LocatorValidationError: If the locator is blank.
    """
    text = normalize_locator(locator)
    return hashlib.new(KEY_ALGORITHM, text.encode("utf-8")).hexdigest()


def is_content_key(value: str) -> bool:
    """Check whether a path segment looks like a derived key."""
    if len(value) != KEY_LENGTH:
        return False
    return all(c in "0123456789abcdef" for c in value)
