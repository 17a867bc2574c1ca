"""
Dual-namespace layout of the blob store.

Layout:
    media/<md5(media_url)>/url.txt       trimmed media URL (marker)
    media/<md5(media_url)>/video.mp4     the video bytes (artifact)
    source/<md5(source_url)>/target.txt  "media/<md5(media_url)>" (pointer)

A media directory is complete only when both members exist. Partial state is
treated exactly like absence. Every read and write path must build keys
through this module so the two sides can never drift apart.
"""

from __future__ import annotations

from typing import NamedTuple, Optional

from src.backend.blobstore.base import BlobStore
from .keys import derive_key, is_content_key


MEDIA_PREFIX = "media/"
SOURCE_PREFIX = "source/"

MARKER_FILENAME = "url.txt"
ARTIFACT_FILENAME = "video.mp4"
POINTER_FILENAME = "target.txt"

ARTIFACT_CONTENT_TYPE = "video/mp4"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"


class MediaDirectory(NamedTuple):
    """Keys of one media directory."""
    dir_ref: str        # media/<key>  (pointer target, no trailing slash)
    marker_key: str     # media/<key>/url.txt
    artifact_key: str   # media/<key>/video.mp4


def _directory(key: str) -> MediaDirectory:
    dir_ref = f"{MEDIA_PREFIX}{key}"
    return MediaDirectory(
        dir_ref=dir_ref,
        marker_key=f"{dir_ref}/{MARKER_FILENAME}",
        artifact_key=f"{dir_ref}/{ARTIFACT_FILENAME}",
    )


def media_directory_for(media_locator: str) -> MediaDirectory:
    """
    Get the media directory for a direct media locator.

    Raises:
        LocatorValidationError: If the locator is blank.
    """
    return _directory(derive_key(media_locator))


def media_directory_from_ref(dir_ref: Optional[str]) -> Optional[MediaDirectory]:
    """
    Rebuild a media directory from pointer content.

    Returns None for blank content or anything that is not `media/<key>`,
    so a corrupted pointer reads the same as a missing one.
    """
    if dir_ref is None:
        return None
    ref = dir_ref.strip().rstrip("/")
    if not ref.startswith(MEDIA_PREFIX):
        return None
    key = ref[len(MEDIA_PREFIX):]
    if not is_content_key(key):
        return None
    return _directory(key)


def source_pointer_key_for(source_locator: str) -> str:
    """
    Get the pointer key for a source locator.

    Raises:
        LocatorValidationError: If the locator is blank.
    """
    return f"{SOURCE_PREFIX}{derive_key(source_locator)}/{POINTER_FILENAME}"


def is_complete(store: BlobStore, directory: MediaDirectory) -> bool:
    """True iff both the marker and the artifact exist."""
    return store.exists(directory.marker_key) and store.exists(directory.artifact_key)


def read_pointer(store: BlobStore, pointer_key: str) -> Optional[MediaDirectory]:
    """Read a source pointer; missing, unreadable or invalid pointers give None."""
    return media_directory_from_ref(store.get_text(pointer_key))


def write_pointer(store: BlobStore, pointer_key: str, directory: MediaDirectory) -> None:
    store.put_bytes(pointer_key, directory.dir_ref.encode("utf-8"), TEXT_CONTENT_TYPE)
