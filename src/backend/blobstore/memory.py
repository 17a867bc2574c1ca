from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class StoredObject:
    data: bytes
    content_type: str


class MemoryBlobStore:
    """
    In-process blob store keyed by bucket.

    Development and test backend only (backend = "memory"). Objects live in
    `_buckets`, a process-wide dict shared by every instance, so per-call
    instances for the same bucket see the same state. Nothing survives a
    restart and `reset()` clears every bucket.
    """

    _buckets: dict[str, dict[str, StoredObject]] = {}
    _lock = threading.RLock()

    def __init__(self, bucket: str = "default") -> None:
        self._bucket = bucket
        with self._lock:
            self._objects = self._buckets.setdefault(bucket, {})
        self.closed = False

    @property
    def bucket(self) -> str:
        return self._bucket

    def exists(self, key: str) -> bool:
        with self._lock:
            return key in self._objects

    def get_text(self, key: str) -> Optional[str]:
        with self._lock:
            obj = self._objects.get(key)
        if obj is None:
            return None
        try:
            return obj.data.decode("utf-8")
        except UnicodeDecodeError:
            return None

    def get_bytes(self, key: str) -> Optional[bytes]:
        with self._lock:
            obj = self._objects.get(key)
        return obj.data if obj is not None else None

    def content_type(self, key: str) -> Optional[str]:
        with self._lock:
            obj = self._objects.get(key)
        return obj.content_type if obj is not None else None

    def put_bytes(self, key: str, data: bytes, content_type: str) -> None:
        with self._lock:
            self._objects[key] = StoredObject(data=bytes(data), content_type=content_type)

    def delete(self, key: str) -> None:
        with self._lock:
            self._objects.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._objects)

    def close(self) -> None:
        self.closed = True

    @classmethod
    def reset(cls) -> None:
        """Drop every bucket (tests)."""
        with cls._lock:
            cls._buckets.clear()
