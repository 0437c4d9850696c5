import tempfile
import unittest
from pathlib import Path

from utils import app_config


class TestAppConfig(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "nested" / "config.json"

    def tearDown(self):
        self._tmp.cleanup()

    def test_missing_file_is_empty(self):
        self.assertEqual(app_config.load_config(self.path), {})
        self.assertIsNone(app_config.get_db_folder(self.path))
        self.assertEqual(app_config.get_log_level(self.path), "INFO")
        self.assertEqual(app_config.get_owner_id("local", self.path), "local")

    def test_corrupt_file_is_empty(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{oops", encoding="utf-8")
        self.assertEqual(app_config.load_config(self.path), {})

    def test_set_and_clear_db_folder(self):
        app_config.set_db_folder("/data/bills", self.path)
        self.assertEqual(app_config.get_db_folder(self.path), "/data/bills")
        self.assertFalse(self.path.with_suffix(".tmp").exists())
        app_config.set_db_folder(None, self.path)
        self.assertIsNone(app_config.get_db_folder(self.path))

    def test_values_from_file(self):
        app_config.save_config({"log_level": "debug", "owner_id": "u-42"}, self.path)
        self.assertEqual(app_config.get_log_level(self.path), "DEBUG")
        self.assertEqual(app_config.get_owner_id("local", self.path), "u-42")


if __name__ == "__main__":
    unittest.main()
