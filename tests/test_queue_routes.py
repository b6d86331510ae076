import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from watchqueue.main import create_app
from watchqueue.routes import queue_routes


class QueueRouteTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        root = Path(self._tmp.name)
        conf = root / "wqweb.env"
        conf.write_text("DATA_DIR=./data\nLOG_DIR=./logs\nAUTO_COLLECT_COOLDOWN_SECONDS=120\n", encoding="utf-8")
        self.root = root
        self.app = create_app(config_path=conf, base_dir=root)
        self.client = self.app.test_client()

    def post(self, path, payload=None, context="popup"):
        return self.client.post(path, json=payload or {}, headers={"X-Queue-Context": context})

    def action_log(self):
        return (self.root / "logs" / "queue-actions.log").read_text(encoding="utf-8")

    def test_state_starts_with_default_list(self):
        resp = self.client.get("/api/state")
        self.assertEqual(resp.status_code, 200)
        body = resp.get_json()
        self.assertTrue(body["ok"])
        self.assertEqual([item["id"] for item in body["state"]["lists"]], ["default"])
        self.assertEqual(body["state"]["currentQueue"]["queue"], [])

    def test_add_videos_and_mark_watched(self):
        resp = self.post("/api/videos/add", {"entries": [{"id": "v1"}, {"id": "v2"}, {"title": "skip"}]})
        body = resp.get_json()
        self.assertEqual([item["id"] for item in body["state"]["currentQueue"]["queue"]], ["v1", "v2"])
        resp = self.post("/api/playback/watched", {"videoId": "v1"})
        body = resp.get_json()
        self.assertEqual([item["id"] for item in body["state"]["currentQueue"]["queue"]], ["v2"])
        self.assertEqual(body["state"]["history"][0]["id"], "v1")
        self.assertIn("<popup> [watchqueue/add-videos]", self.action_log())

    def test_create_list_returns_its_id(self):
        body = self.post("/api/lists", {"name": "Music"}).get_json()
        list_id = body["listId"]
        self.assertEqual(body["state"]["lists"][-1]["id"], list_id)
        detail = self.client.get(f"/api/lists/{list_id}").get_json()
        self.assertEqual(detail["list"]["name"], "Music")
        exported = self.client.get(f"/api/lists/{list_id}/export").get_json()
        self.assertEqual(exported["data"], {"id": list_id, "name": "Music", "freeze": False, "queue": []})

    def test_unknown_list_is_rejected_with_404(self):
        resp = self.post("/api/lists/rename", {"listId": "ghost", "newName": "x"})
        self.assertEqual(resp.status_code, 404)
        body = resp.get_json()
        self.assertEqual(body, {"ok": False, "error": "list_not_found", "message": "List ghost not found"})
        self.assertIn("[watchqueue/rename-list] list=ghost name=x rejected: List ghost not found", self.action_log())
        self.assertEqual(self.client.get("/api/lists/ghost").status_code, 404)

    def test_import_validation_error_is_400(self):
        resp = self.post("/api/lists/import", {"data": ["bad"]})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["error"], "invalid_payload")

    def test_import_new_list(self):
        data = {"name": "Shared", "freeze": True, "queue": [{"id": "a"}, {"id": "b"}]}
        body = self.post("/api/lists/import", {"data": data, "mode": "new"}).get_json()
        self.assertTrue(body["ok"])
        imported = next(item for item in body["state"]["lists"] if item["id"] == body["listId"])
        self.assertEqual(imported["length"], 2)
        self.assertTrue(imported["freeze"])

    def test_malformed_body_is_a_noop(self):
        resp = self.client.post("/api/videos/remove", data="{not json", content_type="application/json")
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.get_json()["ok"])

    def test_remove_list_move_mode(self):
        list_id = self.post("/api/lists", {"name": "L"}).get_json()["listId"]
        self.post("/api/videos/add", {"entries": [{"id": "v5"}]})
        self.post("/api/videos/add", {"entries": [{"id": "v4"}, {"id": "v5"}], "listId": list_id})
        body = self.post("/api/lists/remove", {"listId": list_id, "mode": "move", "targetListId": "default"}).get_json()
        self.assertEqual([item["id"] for item in body["state"]["lists"]], ["default"])
        self.assertEqual([item["id"] for item in body["state"]["currentQueue"]["queue"]], ["v5", "v4"])

    def test_reorder_and_next_entry(self):
        self.post("/api/videos/add", {"entries": [{"id": x} for x in "abcd"]})
        body = self.post("/api/videos/reorder", {"videoId": "a", "targetIndex": 2}).get_json()
        self.assertEqual([item["id"] for item in body["state"]["currentQueue"]["queue"]], list("bcad"))
        self.assertEqual(body["state"]["currentQueue"]["currentIndex"], 2)
        upcoming = self.client.get("/api/next").get_json()["next"]
        self.assertEqual(upcoming["entry"]["id"], "d")

    def test_refresh_and_auto_collect_signals(self):
        body = self.client.get("/api/signals/refresh").get_json()
        self.assertTrue(body["shouldRefresh"])
        self.assertTrue(body["status"]["shouldCollect"])
        body = self.post("/api/signals/auto-collect", {"added": 2, "fetched": 5}, context="collector").get_json()
        self.assertEqual(body["state"]["autoCollect"]["lastAdded"], 2)
        status = self.client.get("/api/signals/refresh").get_json()["status"]
        self.assertTrue(status["onCooldown"])
        meta = self.client.get("/api/signals/auto-collect").get_json()["autoCollect"]
        self.assertEqual(meta["lastFetched"], 5)
        self.assertGreaterEqual(meta["nextAutoCollectAt"] - meta["lastRunAt"], 120_000)

    def test_progress_and_run_start(self):
        body = self.post("/api/playback/progress", {"videoId": "dQw4w9WgXcQ", "percent": 41.6, "timestamp": 5})
        self.assertTrue(body.get_json()["changed"])
        body = self.post("/api/playback/progress", {"videoId": "dQw4w9WgXcQ", "percent": 10, "timestamp": 1})
        self.assertFalse(body.get_json()["changed"])
        state = self.client.get("/api/state").get_json()["state"]
        self.assertEqual(state["videoProgress"], {"dQw4w9WgXcQ": {"percent": 42, "updatedAt": 5}})
        meta = self.post("/api/signals/auto-collect/start", {"startedAt": "1970-01-01T00:00:02Z"}).get_json()
        self.assertEqual(meta["autoCollect"]["lastRunAt"], 2_000)

    def test_notifications_mailbox(self):
        self.post("/api/signals/notifications/list-empty", {})
        notes = self.post("/api/signals/notifications/consume").get_json()["notifications"]
        self.assertEqual(notes, [{"type": "listEmpty", "listId": "default", "name": "Main"}])
        self.assertEqual(self.post("/api/signals/notifications/consume").get_json()["notifications"], [])

    def test_history_routes(self):
        self.assertEqual(self.client.get("/api/history/limit").get_json()["limit"], 10)
        self.post("/api/videos/add", {"entries": [{"id": "a"}, {"id": "b"}]})
        self.post("/api/videos/remove", {"videoId": "a"})
        body = self.post("/api/history/restore-deleted", {"position": 0}).get_json()
        self.assertEqual([item["id"] for item in body["state"]["currentQueue"]["queue"]], ["b", "a"])

    def test_unknown_route_returns_json_error(self):
        resp = self.client.get("/api/nope")
        self.assertEqual(resp.status_code, 404)
        self.assertFalse(resp.get_json()["ok"])

    def test_unhandled_error_is_logged_and_hidden(self):
        with patch.object(queue_routes, "get_presentation_state", side_effect=RuntimeError("disk gone")):
            resp = self.client.get("/api/state")
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.get_json()["error"], "internal_error")
        system_log = (self.root / "logs" / "watchqueue.log").read_text(encoding="utf-8")
        self.assertIn("unhandled_exception path=/api/state: RuntimeError: disk gone", system_log)


if __name__ == "__main__":
    unittest.main()
