"""
Media fetching from origin URLs.
"""

from .fetcher import FetchedMedia, MediaFetcher, TransportError, UrllibMediaFetcher

__all__ = [
    "FetchedMedia",
    "MediaFetcher",
    "TransportError",
    "UrllibMediaFetcher",
]
