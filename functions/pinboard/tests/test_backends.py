import unittest
from unittest.mock import MagicMock

from pinboard.db import FirestoreDbClient
from pinboard.storage import FirebaseStorageClient, InMemoryStorageClient


class FirestoreDbClientTests(unittest.TestCase):
    def setUp(self):
        self.client = MagicMock()
        self.collection = self.client.collection.return_value
        self.db = FirestoreDbClient("pins", client=self.client)

    def test_uses_collection(self):
        self.client.collection.assert_called_once_with("pins")

    def test_insert_returns_generated_id(self):
        ref = MagicMock(id="abc123")
        self.collection.add.return_value = (None, ref)
        self.assertEqual(self.db.insert_pin({"title": "x"}), "abc123")
        self.collection.add.assert_called_once_with({"title": "x"})

    def test_patch_missing_document(self):
        self.collection.document.return_value.get.return_value.exists = False
        self.assertFalse(self.db.patch_pin("abc", {"img_url": "u"}))
        self.collection.document.return_value.update.assert_not_called()

    def test_patch_existing_document(self):
        ref = self.collection.document.return_value
        ref.get.return_value.exists = True
        self.assertTrue(self.db.patch_pin("abc", {"img_url": "u"}))
        ref.update.assert_called_once_with({"img_url": "u"})

    def test_list_pins(self):
        doc = MagicMock(id="a")
        doc.to_dict.return_value = {"title": "one"}
        self.collection.stream.return_value = [doc]
        self.assertEqual(self.db.list_pins(), [("a", {"title": "one"})])

    def test_delete(self):
        ref = self.collection.document.return_value
        ref.get.return_value.exists = True
        self.assertTrue(self.db.delete_pin("a"))
        ref.delete.assert_called_once_with()


class FirebaseStorageClientTests(unittest.TestCase):
    def setUp(self):
        self.bucket = MagicMock()
        self.blob = self.bucket.blob.return_value
        self.storage = FirebaseStorageClient(bucket=self.bucket, url_expires_in=60)

    def test_upload(self):
        self.storage.upload_bytes("pin1", b"data", "image/png")
        self.bucket.blob.assert_called_with("pin1")
        self.blob.upload_from_string.assert_called_once_with(
            b"data", content_type="image/png"
        )

    def test_get_url_signs_existing_blob(self):
        self.blob.exists.return_value = True
        self.blob.generate_signed_url.return_value = "https://signed.test/pin1"
        self.assertEqual(self.storage.get_url("pin1"), "https://signed.test/pin1")

    def test_get_url_missing_blob(self):
        self.blob.exists.return_value = False
        with self.assertRaises(FileNotFoundError):
            self.storage.get_url("pin1")


class InMemoryStorageClientTests(unittest.TestCase):
    def test_missing_key(self):
        storage = InMemoryStorageClient()
        with self.assertRaises(FileNotFoundError):
            storage.get_url("nope")
        with self.assertRaises(FileNotFoundError):
            storage.delete("nope")


if __name__ == "__main__":
    unittest.main()
