import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from watchqueue.core.queue_model import sanitize_video_progress
from watchqueue.services import queue_progress
from watchqueue.services.queue_playback import mark_video_watched
from watchqueue.services.queue_projection import get_presentation_state
from watchqueue.services.state_runner import StateRunner


def _vid(number):
    return f"vid{number:08d}"


class VideoProgressTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.runner = StateRunner(Path(self._tmp.name) / "queue.sqlite3")

    def progress(self):
        return self.runner.read()["videoProgress"]

    def test_percent_is_rounded_and_clamped(self):
        self.assertTrue(queue_progress.record_video_progress(self.runner, _vid(1), 42.5, timestamp=10))
        self.assertTrue(queue_progress.record_video_progress(self.runner, _vid(2), 250, timestamp=10))
        self.assertEqual(self.progress()[_vid(1)], {"percent": 43, "updatedAt": 10})
        self.assertEqual(self.progress()[_vid(2)]["percent"], 100)

    def test_rejects_bad_ids_and_values(self):
        self.assertFalse(queue_progress.record_video_progress(self.runner, "short", 50))
        self.assertFalse(queue_progress.record_video_progress(self.runner, _vid(1), "half"))
        self.assertFalse(queue_progress.record_video_progress(self.runner, _vid(1), float("nan")))
        self.assertFalse(queue_progress.record_video_progress(self.runner, _vid(1), 0))
        self.assertEqual(self.progress(), {})

    def test_stale_report_does_not_roll_back(self):
        queue_progress.record_video_progress(self.runner, _vid(1), 60, timestamp=2_000)
        self.assertFalse(queue_progress.record_video_progress(self.runner, _vid(1), 30, timestamp=1_000))
        self.assertFalse(queue_progress.record_video_progress(self.runner, _vid(1), 60, timestamp=1_500))
        self.assertEqual(self.progress()[_vid(1)], {"percent": 60, "updatedAt": 2_000})
        self.assertTrue(queue_progress.record_video_progress(self.runner, _vid(1), 80, timestamp=1_000))
        self.assertEqual(self.progress()[_vid(1)], {"percent": 80, "updatedAt": 1_000})

    def test_zero_percent_forgets_record(self):
        queue_progress.record_video_progress(self.runner, _vid(1), 60, timestamp=2_000)
        self.assertTrue(queue_progress.record_video_progress(self.runner, _vid(1), 0))
        self.assertNotIn(_vid(1), self.progress())

    def test_limit_evicts_oldest_unqueued_first(self):
        self.runner.replace({
            "lists": {"default": {"queue": [{"id": _vid(1), "addedAt": 1}]}},
            "videoProgress": {
                _vid(1): {"percent": 10, "updatedAt": 1},
                _vid(2): {"percent": 10, "updatedAt": 2},
                _vid(3): {"percent": 10, "updatedAt": 3},
            },
        })
        with patch.object(queue_progress, "VIDEO_PROGRESS_LIMIT", 3):
            queue_progress.record_video_progress(self.runner, _vid(4), 50, timestamp=4)
        self.assertEqual(sorted(self.progress()), [_vid(1), _vid(3), _vid(4)])

    def test_watched_video_reaches_full_progress(self):
        self.runner.replace({"lists": {"default": {"queue": [{"id": _vid(7), "addedAt": 1}]}}})
        queue_progress.record_video_progress(self.runner, _vid(7), 35)
        mark_video_watched(self.runner, _vid(7))
        self.assertEqual(self.progress()[_vid(7)]["percent"], 100)
        self.assertEqual(get_presentation_state(self.runner)["videoProgress"][_vid(7)]["percent"], 100)

    def test_sanitize_keeps_newest_valid_records(self):
        raw = {
            _vid(1): {"percent": 20, "updatedAt": 5},
            _vid(2): {"percent": 0, "updatedAt": 9},
            "bad id": {"percent": 50, "updatedAt": 9},
            _vid(3): "junk",
        }
        self.assertEqual(sanitize_video_progress(raw), {_vid(1): {"percent": 20, "updatedAt": 5}})
        self.assertEqual(sanitize_video_progress(["bad"]), {})


if __name__ == "__main__":
    unittest.main()
