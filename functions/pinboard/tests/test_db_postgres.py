import unittest

from pinboard.db import PostgresDbClient


class PostgresDbClientTests(unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing of the Postgres client logic.
    """

    def setUp(self):
        self.db = PostgresDbClient("sqlite+pysqlite:///:memory:")

    def test_insert_and_get_pin(self):
        pin_id = self.db.insert_pin(
            {"title": "Lake", "tags": ["nature", "nature"], "img_url": ""}
        )
        self.assertTrue(pin_id)
        doc = self.db.get_pin(pin_id)
        self.assertEqual(doc["title"], "Lake")
        self.assertEqual(doc["tags"], ["nature", "nature"])
        self.assertEqual(doc["pin_size"], "medium")
        self.assertEqual(doc["board"], "default")
        self.assertNotIn("id", doc)

    def test_unknown_keys_are_ignored(self):
        pin_id = self.db.insert_pin({"title": "x", "id": "forced", "likes": 3})
        self.assertNotEqual(pin_id, "forced")
        self.assertNotIn("likes", self.db.get_pin(pin_id))

    def test_patch_merges(self):
        pin_id = self.db.insert_pin({"title": "Lake", "description": "Calm"})
        self.assertTrue(self.db.patch_pin(pin_id, {"img_url": "https://x.test/1"}))
        doc = self.db.get_pin(pin_id)
        self.assertEqual(doc["img_url"], "https://x.test/1")
        self.assertEqual(doc["description"], "Calm")

    def test_patch_missing(self):
        self.assertFalse(self.db.patch_pin("missing", {"title": "x"}))

    def test_list_in_insertion_order(self):
        first = self.db.insert_pin({"title": "one"})
        second = self.db.insert_pin({"title": "two"})
        ids = [pin_id for pin_id, _ in self.db.list_pins()]
        self.assertEqual(ids, [first, second])

    def test_delete(self):
        pin_id = self.db.insert_pin({"title": "gone"})
        self.assertTrue(self.db.delete_pin(pin_id))
        self.assertIsNone(self.db.get_pin(pin_id))
        self.assertFalse(self.db.delete_pin(pin_id))


if __name__ == "__main__":
    unittest.main()
