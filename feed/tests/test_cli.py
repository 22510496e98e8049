import json
import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from cli import cli


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = tempfile.mkdtemp(prefix="civicfeed-cli-")
        root = Path(self.tmpdir)
        self.env = {
            "CIVICFEED_DATABASE_URL": f"sqlite:///{root / 'cli.db'}",
            "DIRECTORY_SOURCE": "fixture",
            "DIRECTORY_CACHE_PATH": str(root / "directory.db"),
        }
        self.runner = CliRunner()

    def tearDown(self) -> None:
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def invoke(self, *args):
        with patch.dict(os.environ, self.env), patch("cli.configure_logging"):
            return self.runner.invoke(cli, list(args))

    def test_seed_then_feed_page(self):
        seeded = self.invoke("seed")
        self.assertEqual(seeded.exit_code, 0, seeded.output)
        self.assertEqual(json.loads(seeded.output)["petitions"], 2)

        result = self.invoke("feed", "--limit", "2", "--search", "climate")
        self.assertEqual(result.exit_code, 0, result.output)
        page = json.loads(result.output)
        self.assertEqual(page["total"], 2)
        self.assertFalse(page["hasMore"])

    def test_invalid_page_exits_non_zero(self):
        result = self.invoke("feed", "--page", "0")
        self.assertEqual(result.exit_code, 1)

    def test_sync_then_read_directory(self):
        synced = self.invoke("sync-directory")
        self.assertEqual(synced.exit_code, 0, synced.output)
        self.assertIn("4 legislators cached", synced.output)

        listed = self.invoke("directory", "--search", "chen")
        self.assertIn("Rep. Sarah Chen (Democrat, CA-11)", listed.output)

        missing = self.invoke("directory", "--id", "Z000000")
        self.assertEqual(missing.exit_code, 1)


if __name__ == "__main__":
    unittest.main()
