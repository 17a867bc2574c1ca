"""
Blob store contract consumed by the cache core.

The store is an opaque flat key/value object store. There are no
transactions and no conditional writes; `put_bytes` always overwrites.
"""

from __future__ import annotations

from typing import Optional, Protocol


class StoreError(RuntimeError):
    """
    A blob store operation failed.

    Attributes:
        key: The object key involved, if any.
    """

    def __init__(self, message: str, *, key: Optional[str] = None) -> None:
        super().__init__(message)
        self.key = key


class BlobStore(Protocol):
    def exists(self, key: str) -> bool:
        """Return False for missing keys; never raise for "not found"."""
        ...

    def get_text(self, key: str) -> Optional[str]:
        """Read a small UTF-8 object; None when missing or unreadable."""
        ...

    def put_bytes(self, key: str, data: bytes, content_type: str) -> None:
        """Write (overwrite) an object. Raises StoreError on failure."""
        ...

    def close(self) -> None: ...
