"""
Blob store adapters.

Provides:
- The store contract and StoreError (base.py)
- boto3-backed S3-compatible store (s3_store.py)
- In-process store for local runs and tests (memory.py)
- Per-call scoped acquisition (open_blob_store)
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from src.backend.settings.models import BACKEND_MEMORY, StoreConfig

from .base import BlobStore, StoreError
from .memory import MemoryBlobStore
from .s3_store import S3BlobStore


@contextmanager
def open_blob_store(config: StoreConfig) -> Iterator[BlobStore]:
    """
    Build the store for one call and always close it.

    Args:
        config: Resolved store configuration (bucket already chosen).

    Yields:
        A BlobStore bound to `config.bucket`.
    """
    if config.backend == BACKEND_MEMORY:
        store: BlobStore = MemoryBlobStore(config.bucket)
    else:
        store = S3BlobStore(
            endpoint=config.endpoint,
            access_key_id=config.access_key_id,
            access_key_secret=config.access_key_secret,
            bucket=config.bucket,
            region=config.region,
        )
    try:
        yield store
    finally:
        store.close()


__all__ = [
    "BlobStore",
    "MemoryBlobStore",
    "S3BlobStore",
    "StoreError",
    "open_blob_store",
]
