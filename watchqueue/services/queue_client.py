"""HTTP client for processes that talk to the queue service.

The subscription fetch pipeline and other out-of-process helpers send
their intents through this client instead of touching the stored state.
"""

from typing import Optional, Union

import requests

from watchqueue.core.action_logging import CALLER_HEADER

DEFAULT_BASE_URL = "http://127.0.0.1:8765"
DEFAULT_TIMEOUT_SECONDS = 10


class QueueClientError(Exception):
    """Raised when the service rejects a call or cannot be reached."""

    def __init__(self, code: str, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.code = code
        self.status = status


class QueueClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        context: str = "collector",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers[CALLER_HEADER] = context

    def call(self, method: str, path: str, payload: Optional[dict] = None) -> dict:
        """Send one request and return the decoded success body."""
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            raise QueueClientError("unreachable", f"{method} {path} failed: {exc}") from exc
        try:
            body = resp.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            raise QueueClientError("invalid_response", f"{method} {path} returned non-JSON", resp.status_code)
        if not resp.ok or not body.get("ok"):
            raise QueueClientError(
                body.get("error") or "http_error",
                body.get("message") or f"{method} {path} failed",
                resp.status_code,
            )
        return body

    def add_videos(self, entries: list, list_id: Optional[str] = None) -> dict:
        body = self.call("POST", "/api/videos/add", {"entries": entries, "listId": list_id})
        return body["state"]

    def should_auto_refresh_default(self) -> bool:
        return bool(self.call("GET", "/api/signals/refresh").get("shouldRefresh"))

    def get_auto_refresh_status(self) -> dict:
        return self.call("GET", "/api/signals/refresh").get("status") or {}

    def clear_pending_default_refresh(self) -> dict:
        return self.call("POST", "/api/signals/refresh/clear")["state"]

    def consume_pending_notifications(self) -> list:
        return self.call("POST", "/api/signals/notifications/consume").get("notifications") or []

    def record_default_auto_collect(self, added: int = 0, fetched: int = 0, started_at: Optional[int] = None) -> dict:
        payload = {"added": added, "fetched": fetched, "startedAt": started_at}
        return self.call("POST", "/api/signals/auto-collect", payload)["state"]

    def mark_auto_collect_run_started(self, started_at: Optional[Union[int, str]] = None) -> dict:
        return self.call("POST", "/api/signals/auto-collect/start", {"startedAt": started_at}).get("autoCollect") or {}

    def record_video_progress(self, video_id: str, percent: float, timestamp: Optional[int] = None) -> bool:
        payload = {"videoId": video_id, "percent": percent, "timestamp": timestamp}
        return bool(self.call("POST", "/api/playback/progress", payload).get("changed"))

    def get_presentation_state(self) -> dict:
        return self.call("GET", "/api/state")["state"]

    def get_next_queue_entry(self) -> Optional[dict]:
        return self.call("GET", "/api/next").get("next")
