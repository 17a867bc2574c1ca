"""
Tests for src/backend/cache/query.py
"""

import unittest

from src.backend.blobstore.memory import MemoryBlobStore
from src.backend.cache.layout import media_directory_for, source_pointer_key_for, write_pointer
from src.backend.cache.query import (
    MESSAGE_FOUND,
    MESSAGE_INCOMPLETE_TARGET,
    MESSAGE_INVALID_POINTER,
    MESSAGE_NO_POINTER,
    exists_by_source,
)
from src.shared.locators import LocatorValidationError


MEDIA_URL = "https://cdn.example.com/a.mp4"
SOURCE_URL = "https://v.douyin.com/AbC123/"


class TestExistsBySource(unittest.TestCase):
    def setUp(self):
        MemoryBlobStore.reset()
        self.store = MemoryBlobStore("query")
        self.directory = media_directory_for(MEDIA_URL)

    def _store_complete(self):
        self.store.put_bytes(self.directory.artifact_key, b"video", "video/mp4")
        self.store.put_bytes(self.directory.marker_key, MEDIA_URL.encode("utf-8"), "text/plain")

    def test_unknown_source(self):
        lookup = exists_by_source(self.store, SOURCE_URL)
        self.assertFalse(lookup.exists)
        self.assertEqual(lookup.message, MESSAGE_NO_POINTER)
        self.assertIsNone(lookup.path)

    def test_pointer_to_complete_directory(self):
        self._store_complete()
        write_pointer(self.store, source_pointer_key_for(SOURCE_URL), self.directory)

        lookup = exists_by_source(self.store, f" {SOURCE_URL} ")

        self.assertTrue(lookup.exists)
        self.assertEqual(lookup.message, MESSAGE_FOUND)
        self.assertEqual(lookup.path, self.directory.artifact_key)

    def test_pointer_to_incomplete_directory(self):
        self.store.put_bytes(self.directory.artifact_key, b"video", "video/mp4")
        write_pointer(self.store, source_pointer_key_for(SOURCE_URL), self.directory)

        lookup = exists_by_source(self.store, SOURCE_URL)

        self.assertFalse(lookup.exists)
        self.assertEqual(lookup.message, MESSAGE_INCOMPLETE_TARGET)

    def test_invalid_pointer_content(self):
        self.store.put_bytes(source_pointer_key_for(SOURCE_URL), b"", "text/plain")

        lookup = exists_by_source(self.store, SOURCE_URL)

        self.assertFalse(lookup.exists)
        self.assertEqual(lookup.message, MESSAGE_INVALID_POINTER)

    def test_query_never_writes(self):
        self._store_complete()
        before = self.store.keys()
        exists_by_source(self.store, SOURCE_URL)
        self.assertEqual(self.store.keys(), before)

    def test_blank_source_rejected(self):
        with self.assertRaises(LocatorValidationError):
            exists_by_source(self.store, " ")


if __name__ == "__main__":
    unittest.main()
