import tempfile
import unittest
from datetime import timezone
from pathlib import Path

from flask import Flask

from watchqueue.core import action_logging
from watchqueue.core.logging_setup import build_loggers


class ActionLoggingTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.log_dir = Path(self._tmp.name) / "logs"

    def test_sanitize_log_fragment_flattens_whitespace(self):
        self.assertEqual(action_logging.sanitize_log_fragment(" a\r\nb \n  c "), "a b c")
        self.assertEqual(action_logging.sanitize_log_fragment(None), "")

    def test_action_line_outside_request(self):
        log_action, _, _ = build_loggers(timezone.utc, self.log_dir)
        log_action("add-videos", command="count=2", rejection_message="List x\nnot found")
        line = (self.log_dir / "queue-actions.log").read_text(encoding="utf-8").strip()
        self.assertTrue(line.endswith("<watchqueue> [watchqueue/add-videos] count=2 rejected: List x not found"))

    def test_caller_label_prefers_context_header(self):
        app = Flask(__name__)
        with app.test_request_context("/", headers={"X-Queue-Context": "tab-42 <script>"}):
            self.assertEqual(action_logging.get_caller_label(), "tab-42script")
        with app.test_request_context("/", headers={"X-Forwarded-For": "10.0.0.9, 10.0.0.1"}):
            self.assertEqual(action_logging.get_caller_label(), "10.0.0.9")
        with app.test_request_context("/", environ_base={"REMOTE_ADDR": "127.0.0.5"}):
            self.assertEqual(action_logging.get_caller_label(), "127.0.0.5")

    def test_exception_logger_writes_system_log(self):
        _, _, log_exception = build_loggers(timezone.utc, self.log_dir)
        try:
            raise ValueError("bad value")
        except ValueError as exc:
            log_exception("unit", exc)
        text = (self.log_dir / "watchqueue.log").read_text(encoding="utf-8")
        self.assertIn("[watchqueue/error] rejected: unit: ValueError: bad value | traceback:", text)

    def test_rotation_keeps_backups(self):
        path = self.log_dir / "queue-actions.log"
        self.log_dir.mkdir(parents=True)
        path.write_text("x" * 20, encoding="utf-8")
        action_logging._rotate_log_file(path, max_bytes=10, backup_count=2)
        self.assertFalse(path.exists())
        self.assertEqual(path.with_name("queue-actions.log.1").read_text(encoding="utf-8"), "x" * 20)
        path.write_text("y" * 20, encoding="utf-8")
        action_logging._rotate_log_file(path, max_bytes=10, backup_count=2)
        self.assertEqual(path.with_name("queue-actions.log.2").read_text(encoding="utf-8"), "x" * 20)
        self.assertEqual(path.with_name("queue-actions.log.1").read_text(encoding="utf-8"), "y" * 20)

    def test_unwritable_log_dir_is_ignored(self):
        blocker = Path(self._tmp.name) / "file"
        blocker.write_text("", encoding="utf-8")
        log_action = action_logging.make_log_action(timezone.utc, blocker / "logs", blocker / "logs" / "a.log")
        log_action("noop")


if __name__ == "__main__":
    unittest.main()
