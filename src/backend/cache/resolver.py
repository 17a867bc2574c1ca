"""
Cache resolution and population.

Given a media URL and optionally the source URL it was obtained from, the
resolver proves the video is already stored by the cheapest route it can,
and only downloads when no route exists:

1. Direct hit: the media directory for the media URL is complete. A missing
   source pointer is written on the way out (self-heal).
2. Indirect hit: the source pointer names another complete media directory.
   Nothing is written or fetched.
3. Miss: fetch the bytes, write artifact then marker, then the pointer.

There is no locking. Concurrent misses for the same URL both fetch and both
overwrite the same keys with the same bytes, which converges to the same
final state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from src.backend.blobstore.base import BlobStore
from src.backend.downloader.fetcher import MediaFetcher
from src.shared.locators import normalize_locator, optional_locator
from .layout import (
    ARTIFACT_CONTENT_TYPE,
    TEXT_CONTENT_TYPE,
    MediaDirectory,
    is_complete,
    media_directory_for,
    read_pointer,
    source_pointer_key_for,
    write_pointer,
)


logger = logging.getLogger(__name__)


class ResolutionStatus(str, Enum):
    HIT = "hit"
    HIT_VIA_SOURCE = "hit_via_source"
    STORED = "stored"


@dataclass(frozen=True)
class Resolution:
    status: ResolutionStatus
    directory: MediaDirectory
    pointer_written: bool = False

    @property
    def cached(self) -> bool:
        """True when no fetch happened."""
        return self.status != ResolutionStatus.STORED

    @property
    def path(self) -> str:
        """Store-relative path of the video."""
        return self.directory.artifact_key


class CacheResolver:
    """
    Resolve locators against one blob store.

    Usage:
        with open_blob_store(config) as store:
            resolver = CacheResolver(store, UrllibMediaFetcher())
            resolution = resolver.resolve(media_url, source_url)
            print(resolution.status, resolution.path)
    """

    def __init__(self, store: BlobStore, fetcher: MediaFetcher) -> None:
        self._store = store
        self._fetcher = fetcher

    def resolve(self, media_locator: Optional[str], source_locator: Optional[str] = None) -> Resolution:
        """
        Return the stored location for a media URL, downloading on a miss.

        Args:
            media_locator: Direct media URL (required).
            source_locator: Share/original URL; blank means not given.

        Returns:
            Resolution with status HIT, HIT_VIA_SOURCE or STORED.

        Raises:
            LocatorValidationError: If media_locator is blank.
            TransportError: If the download fails (nothing is written).
            StoreError: If a store write fails.
        """
        media_url = normalize_locator(media_locator, field_name="mediaLocator")
        source_url = optional_locator(source_locator)

        directory = media_directory_for(media_url)
        pointer_key = source_pointer_key_for(source_url) if source_url else None

        if is_complete(self._store, directory):
            healed = False
            if pointer_key is not None and not self._pointer_usable(pointer_key):
                write_pointer(self._store, pointer_key, directory)
                healed = True
                logger.info("Restored source pointer %s -> %s", pointer_key, directory.dir_ref)
            logger.info("Cache hit %s", directory.dir_ref)
            return Resolution(ResolutionStatus.HIT, directory, pointer_written=healed)

        if pointer_key is not None:
            routed = self._resolve_via_pointer(pointer_key, directory)
            if routed is not None:
                logger.info("Cache hit via source pointer %s -> %s", pointer_key, routed.dir_ref)
                return Resolution(ResolutionStatus.HIT_VIA_SOURCE, routed)

        return self._populate(media_url, directory, pointer_key)

    def _pointer_usable(self, pointer_key: str) -> bool:
        """A missing, unreadable or incomplete-target pointer counts as absent."""
        target = read_pointer(self._store, pointer_key)
        return target is not None and is_complete(self._store, target)

    def _resolve_via_pointer(self, pointer_key: str, requested: MediaDirectory) -> Optional[MediaDirectory]:
        if not self._store.exists(pointer_key):
            return None
        target = read_pointer(self._store, pointer_key)
        if target is None:
            logger.warning("Ignoring unreadable source pointer %s", pointer_key)
            return None
        if target.dir_ref == requested.dir_ref:
            # Same directory the direct check just found incomplete.
            return None
        if not is_complete(self._store, target):
            return None
        return target

    def _populate(self, media_url: str, directory: MediaDirectory, pointer_key: Optional[str]) -> Resolution:
        logger.info("Cache miss %s, fetching %s", directory.dir_ref, media_url)
        media = self._fetcher.fetch(media_url)

        self._store.put_bytes(directory.artifact_key, media.content, ARTIFACT_CONTENT_TYPE)
        self._store.put_bytes(directory.marker_key, media_url.encode("utf-8"), TEXT_CONTENT_TYPE)
        if pointer_key is not None:
            write_pointer(self._store, pointer_key, directory)

        logger.info("Stored %d bytes at %s", media.content_length, directory.artifact_key)
        return Resolution(ResolutionStatus.STORED, directory, pointer_written=pointer_key is not None)
