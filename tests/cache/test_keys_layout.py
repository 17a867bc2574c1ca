"""
Tests for key derivation and the dual-namespace layout.

Covers:
- derive_key is md5 of the trimmed locator
- Blank locators are rejected
- Pointer content parsing (valid, foreign, corrupted)
- Completeness requires both marker and artifact
"""

import hashlib
import unittest

from src.backend.blobstore.memory import MemoryBlobStore
from src.backend.cache.keys import KEY_LENGTH, derive_key, is_content_key
from src.backend.cache.layout import (
    is_complete,
    media_directory_for,
    media_directory_from_ref,
    read_pointer,
    source_pointer_key_for,
    write_pointer,
)
from src.shared.locators import LocatorValidationError


MEDIA_URL = "https://cdn.example.com/a.mp4"


class TestDeriveKey(unittest.TestCase):
    def test_md5_of_trimmed_text(self):
        expected = hashlib.md5(MEDIA_URL.encode("utf-8")).hexdigest()
        self.assertEqual(derive_key(MEDIA_URL), expected)
        self.assertEqual(derive_key(f"  {MEDIA_URL}\n"), expected)
        self.assertEqual(len(derive_key(MEDIA_URL)), KEY_LENGTH)

    def test_keys_equal_iff_trimmed_text_equal(self):
        self.assertEqual(derive_key(" x "), derive_key("x"))
        self.assertNotEqual(derive_key("https://a/b"), derive_key("https://a/b/"))
        self.assertNotEqual(derive_key("https://a/B"), derive_key("https://a/b"))

    def test_blank_rejected(self):
        for value in (None, "", "   ", "\t\n"):
            with self.assertRaises(LocatorValidationError):
                derive_key(value)

    def test_is_content_key(self):
        self.assertTrue(is_content_key(derive_key(MEDIA_URL)))
        self.assertFalse(is_content_key("abc"))
        self.assertFalse(is_content_key("Z" * KEY_LENGTH))


class TestLayout(unittest.TestCase):
    def setUp(self):
        MemoryBlobStore.reset()
        self.store = MemoryBlobStore("layout")

    def test_media_directory_paths(self):
        key = derive_key(MEDIA_URL)
        directory = media_directory_for(MEDIA_URL)
        self.assertEqual(directory.dir_ref, f"media/{key}")
        self.assertEqual(directory.marker_key, f"media/{key}/url.txt")
        self.assertEqual(directory.artifact_key, f"media/{key}/video.mp4")

    def test_source_pointer_key(self):
        key = derive_key("https://v.douyin.com/AbC/")
        self.assertEqual(source_pointer_key_for("https://v.douyin.com/AbC/"), f"source/{key}/target.txt")

    def test_ref_roundtrip(self):
        directory = media_directory_for(MEDIA_URL)
        self.assertEqual(media_directory_from_ref(directory.dir_ref), directory)
        self.assertEqual(media_directory_from_ref(f" {directory.dir_ref}/ \n"), directory)

    def test_foreign_or_corrupted_refs(self):
        for value in (None, "", "   ", "media/", "media/xyz", "other/" + "a" * 32, "garbage"):
            self.assertIsNone(media_directory_from_ref(value), value)

    def test_completeness_needs_both_members(self):
        directory = media_directory_for(MEDIA_URL)
        self.assertFalse(is_complete(self.store, directory))

        self.store.put_bytes(directory.artifact_key, b"video", "video/mp4")
        self.assertFalse(is_complete(self.store, directory))

        self.store.put_bytes(directory.marker_key, MEDIA_URL.encode("utf-8"), "text/plain")
        self.assertTrue(is_complete(self.store, directory))

        self.store.delete(directory.artifact_key)
        self.assertFalse(is_complete(self.store, directory))

    def test_pointer_write_and_read(self):
        directory = media_directory_for(MEDIA_URL)
        pointer_key = source_pointer_key_for("https://v.douyin.com/AbC/")

        self.assertIsNone(read_pointer(self.store, pointer_key))
        write_pointer(self.store, pointer_key, directory)

        self.assertEqual(self.store.get_text(pointer_key), directory.dir_ref)
        self.assertEqual(read_pointer(self.store, pointer_key), directory)

    def test_pointer_with_invalid_content(self):
        pointer_key = source_pointer_key_for("https://v.douyin.com/AbC/")
        self.store.put_bytes(pointer_key, b"not-a-directory", "text/plain")
        self.assertIsNone(read_pointer(self.store, pointer_key))


if __name__ == "__main__":
    unittest.main()
