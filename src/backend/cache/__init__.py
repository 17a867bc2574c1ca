"""
Locator-addressed video cache on top of a blob store.

Provides:
- Locator key derivation (keys.py)
- media/ + source/ namespace layout (layout.py)
- Hit / indirect hit / miss resolution (resolver.py)
- Read-only source lookup (query.py)
"""

from .keys import derive_key
from .layout import (
    ARTIFACT_FILENAME,
    MARKER_FILENAME,
    MEDIA_PREFIX,
    POINTER_FILENAME,
    SOURCE_PREFIX,
    MediaDirectory,
    is_complete,
    media_directory_for,
    source_pointer_key_for,
)
from .query import SourceLookup, exists_by_source
from .resolver import CacheResolver, Resolution, ResolutionStatus

__all__ = [
    "ARTIFACT_FILENAME",
    "MARKER_FILENAME",
    "MEDIA_PREFIX",
    "POINTER_FILENAME",
    "SOURCE_PREFIX",
    "CacheResolver",
    "MediaDirectory",
    "Resolution",
    "ResolutionStatus",
    "SourceLookup",
    "derive_key",
    "exists_by_source",
    "is_complete",
    "media_directory_for",
    "source_pointer_key_for",
]
