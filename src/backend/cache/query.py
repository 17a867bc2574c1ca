"""
Read-only lookup of a source URL.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from src.backend.blobstore.base import BlobStore
from src.shared.locators import normalize_locator
from .layout import MediaDirectory, is_complete, read_pointer, source_pointer_key_for


MESSAGE_FOUND = "已存在视频"
MESSAGE_NO_POINTER = "该原始地址下暂无视频"
MESSAGE_INVALID_POINTER = "原始地址指向内容无效"
MESSAGE_INCOMPLETE_TARGET = "指向的视频目录不完整"


@dataclass(frozen=True)
class SourceLookup:
    exists: bool
    message: str
    directory: Optional[MediaDirectory] = None

    @property
    def path(self) -> Optional[str]:
        return self.directory.artifact_key if self.directory is not None else None


def exists_by_source(store: BlobStore, source_locator: Optional[str]) -> SourceLookup:
    """
    Check whether a source URL already leads to a complete stored video.

    Never writes. "No pointer", "invalid pointer" and "incomplete target" all
    report exists=False.

    Raises:
        LocatorValidationError: If source_locator is blank.
    """
    source_url = normalize_locator(source_locator, field_name="sourceLocator")
    pointer_key = source_pointer_key_for(source_url)

    if not store.exists(pointer_key):
        return SourceLookup(exists=False, message=MESSAGE_NO_POINTER)

    target = read_pointer(store, pointer_key)
    if target is None:
        return SourceLookup(exists=False, message=MESSAGE_INVALID_POINTER)

    if not is_complete(store, target):
        return SourceLookup(exists=False, message=MESSAGE_INCOMPLETE_TARGET)

    return SourceLookup(exists=True, message=MESSAGE_FOUND, directory=target)
