import os
import tempfile
import unittest
from datetime import timezone
from pathlib import Path
from unittest.mock import patch

from watchqueue.core.web_config import (
    CONFIG_ENV_VAR,
    QueueConfig,
    load_settings,
    resolve_config_path,
)


class QueueConfigTests(unittest.TestCase):
    def test_reads_basic_values(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            conf = root / "wqweb.env"
            conf.write_text(
                "\n".join(
                    [
                        "# comment",
                        "WEB_HOST=0.0.0.0",
                        "WEB_PORT=9000",
                        "RATIO=2.5",
                        "DATA_DIR=./state",
                        "VERBOSE=yes",
                        'QUOTED="hello"',
                    ]
                ),
                encoding="utf-8",
            )
            cfg = QueueConfig(conf, root)
            self.assertEqual(cfg.get_str("WEB_HOST", "x"), "0.0.0.0")
            self.assertEqual(cfg.get_int("WEB_PORT", 0), 9000)
            self.assertEqual(cfg.get_float("RATIO", 0.0), 2.5)
            self.assertEqual(cfg.get_path("DATA_DIR", root / "none"), root / "state")
            self.assertTrue(cfg.get_bool("VERBOSE", False))
            self.assertEqual(cfg.get_str("QUOTED", ""), "hello")

    def test_invalid_and_missing_values_fall_back(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            conf = root / "wqweb.env"
            conf.write_text("WEB_PORT=abc\nSTATE_WRITE_RETRIES=-4\nEMPTY=\n", encoding="utf-8")
            cfg = QueueConfig(conf, root)
            self.assertEqual(cfg.get_int("WEB_PORT", 8765), 8765)
            self.assertEqual(cfg.get_int("STATE_WRITE_RETRIES", 3, minimum=0), 0)
            self.assertEqual(cfg.get_str("EMPTY", "dflt"), "dflt")
            self.assertEqual(cfg.get_str("MISSING", "dflt"), "dflt")
            self.assertFalse(cfg.get_bool("MISSING", False))

    def test_missing_file_yields_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            settings = load_settings(QueueConfig(root / "absent.env", root))
            self.assertEqual(settings.web_host, "127.0.0.1")
            self.assertEqual(settings.web_port, 8765)
            self.assertEqual(settings.state_db_path, root / "data" / "watchqueue.sqlite3")
            self.assertEqual(settings.legacy_state_file, root / "data" / "state.json")
            self.assertEqual(settings.log_dir, root / "logs")
            self.assertEqual(settings.state_write_retries, 3)
            self.assertEqual(settings.auto_collect_cooldown_seconds, 3600)
            self.assertTrue(settings.secret_key)

    def test_invalid_timezone_falls_back_to_utc(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            conf = root / "wqweb.env"
            conf.write_text("DISPLAY_TZ=Not/AZone\n", encoding="utf-8")
            settings = load_settings(QueueConfig(conf, root))
            self.assertIs(settings.display_tz, timezone.utc)

    def test_config_path_resolution_order(self):
        base = Path("/srv/wq")
        with patch.dict(os.environ, {CONFIG_ENV_VAR: "/etc/wq.env"}):
            self.assertEqual(resolve_config_path(base, "/tmp/explicit.env"), Path("/tmp/explicit.env"))
            self.assertEqual(resolve_config_path(base), Path("/etc/wq.env"))
        with patch.dict(os.environ, {CONFIG_ENV_VAR: ""}):
            self.assertEqual(resolve_config_path(base), base / "wqweb.env")


if __name__ == "__main__":
    unittest.main()
