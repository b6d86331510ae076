"""Queue state model: defaults, errors and the total sanitizer.

The persisted document keeps the camelCase keys the browser add-on reads,
so every field name below matches the JSON blob stored on disk.
"""

from __future__ import annotations

import copy
import math
import re
import time
from collections.abc import Mapping
from datetime import datetime, timezone


STORAGE_KEY = "runtimePlaylistState"
HISTORY_LIMIT = 10
DEFAULT_LIST_ID = "default"
DEFAULT_LIST_NAME = "Main"
FALLBACK_LIST_NAME = "List"
NEW_LIST_NAME = "New list"
IMPORTED_LIST_NAME = "Imported list"
DEFAULT_REFRESH_THRESHOLD = 1
LIST_EMPTY_NOTIFICATION = "listEmpty"
VIDEO_PROGRESS_LIMIT = 500
VIDEO_ID_PATTERN = re.compile(r"[\w-]{11}", re.ASCII)

_AUTO_COLLECT_FIELDS = ("lastRunAt", "lastAdded", "lastFetched", "nextAutoCollectAt")


class QueueStoreError(Exception):
    """Base class for queue store failures surfaced to callers."""

    error_code = "queue_error"


class EntryValidationError(QueueStoreError, ValueError):
    """Raised when an entry or import payload is shaped incorrectly."""

    error_code = "invalid_payload"


class ListNotFoundError(QueueStoreError, LookupError):
    """Raised when an operation names a list id that does not exist."""

    error_code = "list_not_found"

    def __init__(self, list_id):
        super().__init__(f"List {list_id} not found")
        self.list_id = list_id


class StateConflictError(QueueStoreError):
    """Raised when a versioned write keeps losing to concurrent writers."""

    error_code = "state_conflict"


def now_ms():
    """Return the current wall clock as integer epoch milliseconds."""
    return int(time.time() * 1000)


def to_timestamp(value):
    """Convert epoch ms, an ISO 8601 string or a datetime to epoch ms.

    Naive datetimes are read as UTC. Returns None for anything unusable.
    """
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return max(0, int(value.timestamp() * 1000))
    if _is_number(value) and math.isfinite(value):
        return max(0, int(value))
    return None


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def _clean_str(value):
    return value if isinstance(value, str) else ""


def _clean_id(value):
    if not isinstance(value, str):
        return ""
    return value.strip()


def empty_list(list_id, name=None, *, freeze=False):
    """Return a structurally valid list with an empty queue."""
    if list_id == DEFAULT_LIST_ID:
        name = DEFAULT_LIST_NAME
        freeze = False
    return {
        "id": list_id,
        "name": name or FALLBACK_LIST_NAME,
        "freeze": bool(freeze),
        "queue": [],
        "currentIndex": None,
        "revision": 0,
    }


def default_state():
    """Return a fresh default state holding only the default list."""
    return {
        "lists": {DEFAULT_LIST_ID: empty_list(DEFAULT_LIST_ID)},
        "listOrder": [DEFAULT_LIST_ID],
        "currentListId": DEFAULT_LIST_ID,
        "activeListId": None,
        "currentVideoId": None,
        "history": [],
        "deletedHistory": [],
        "currentTabId": None,
        "pendingNotifications": [],
        "pendingDefaultRefresh": False,
        "autoCollect": {field: 0 for field in _AUTO_COLLECT_FIELDS},
        "videoProgress": {},
    }


def sanitize_entry(entry):
    """Validate one video entry and return its normalized copy.

    Raises ``EntryValidationError`` when the value is not a mapping or has no
    usable ``id``. ``addedAt`` defaults to the insertion time.
    """
    if not isinstance(entry, Mapping):
        raise EntryValidationError("Invalid playlist entry")
    video_id = _clean_id(entry.get("id"))
    if not video_id:
        raise EntryValidationError("Playlist entry must include id")
    published_at = entry.get("publishedAt")
    if isinstance(published_at, datetime):
        published_at = published_at.isoformat()
    elif not isinstance(published_at, str):
        published_at = None
    duration = entry.get("duration")
    if not (isinstance(duration, str) or _is_number(duration)):
        duration = None
    added_at = entry.get("addedAt")
    return {
        "id": video_id,
        "title": _clean_str(entry.get("title")),
        "channelId": _clean_str(entry.get("channelId")),
        "channelTitle": _clean_str(entry.get("channelTitle")),
        "thumbnail": _clean_str(entry.get("thumbnail")),
        "publishedAt": published_at,
        "duration": duration,
        "addedAt": added_at if _is_number(added_at) else now_ms(),
    }


def _sanitize_list_ref(value):
    list_id = _clean_id(value)
    return list_id or None


def sanitize_history_entry(entry):
    """Validate a watched-history record (entry plus ``watchedAt``/``listId``)."""
    base = sanitize_entry(entry)
    watched_at = entry.get("watchedAt")
    base["watchedAt"] = watched_at if _is_number(watched_at) else now_ms()
    base["listId"] = _sanitize_list_ref(entry.get("listId"))
    return base


def sanitize_deleted_entry(entry):
    """Validate a deleted-history record (entry plus ``deletedAt``/``listId``)."""
    base = sanitize_entry(entry)
    deleted_at = entry.get("deletedAt")
    base["deletedAt"] = deleted_at if _is_number(deleted_at) else now_ms()
    base["listId"] = _sanitize_list_ref(entry.get("listId"))
    return base


def sanitize_entries(raw_entries, sanitizer=sanitize_entry, *, unique=True):
    """Sanitize a sequence of entries, dropping invalid ones (and repeats)."""
    if not isinstance(raw_entries, (list, tuple)):
        return []
    seen = set()
    entries = []
    for item in raw_entries:
        try:
            clean = sanitizer(item)
        except EntryValidationError:
            continue
        if unique:
            if clean["id"] in seen:
                continue
            seen.add(clean["id"])
        entries.append(clean)
    return entries


def sanitize_list(raw_list, list_id):
    """Repair one list stored under ``list_id``."""
    if not isinstance(raw_list, Mapping):
        return empty_list(list_id)
    queue = sanitize_entries(raw_list.get("queue"))
    name = raw_list.get("name")
    name = name.strip() if isinstance(name, str) else ""
    current_index = raw_list.get("currentIndex")
    if not _is_int(current_index) or not 0 <= current_index < len(queue):
        current_index = 0 if queue else None
    revision = raw_list.get("revision")
    is_default = list_id == DEFAULT_LIST_ID
    return {
        "id": list_id,
        "name": DEFAULT_LIST_NAME if is_default else (name or FALLBACK_LIST_NAME),
        "freeze": False if is_default else bool(raw_list.get("freeze")),
        "queue": queue,
        "currentIndex": current_index,
        "revision": revision if _is_int(revision) and revision >= 0 else 0,
    }


def _sanitize_notifications(raw):
    if not isinstance(raw, (list, tuple)):
        return []
    notifications = []
    for item in raw:
        if not isinstance(item, Mapping):
            continue
        kind = _clean_id(item.get("type"))
        if not kind:
            continue
        notifications.append({
            "type": kind,
            "listId": _sanitize_list_ref(item.get("listId")),
            "name": _clean_str(item.get("name")),
        })
    return notifications


def _sanitize_auto_collect(raw):
    raw = raw if isinstance(raw, Mapping) else {}
    meta = {}
    for field in _AUTO_COLLECT_FIELDS:
        value = raw.get(field)
        meta[field] = value if _is_number(value) and value > 0 else 0
    return meta


def clamp_percent(value):
    """Round a progress value to a whole percent in ``[0, 100]``, or None."""
    if not _is_number(value) or not math.isfinite(value):
        return None
    return min(max(math.floor(value + 0.5), 0), 100)


def is_video_id(value):
    return isinstance(value, str) and VIDEO_ID_PATTERN.fullmatch(value) is not None


def sanitize_video_progress(raw):
    """Keep well-formed ``{percent, updatedAt}`` records, newest first, capped."""
    if not isinstance(raw, Mapping):
        return {}
    records = []
    for video_id, item in raw.items():
        if not is_video_id(video_id) or not isinstance(item, Mapping):
            continue
        percent = clamp_percent(item.get("percent"))
        if not percent:
            continue
        updated_at = item.get("updatedAt")
        if _is_number(updated_at) and math.isfinite(updated_at):
            updated_at = max(0, int(updated_at))
        else:
            updated_at = now_ms()
        records.append((video_id, {"percent": percent, "updatedAt": updated_at}))
    records.sort(key=lambda record: record[1]["updatedAt"], reverse=True)
    return dict(records[:VIDEO_PROGRESS_LIMIT])


def sanitize_state(raw):
    """Repair any value into a state that satisfies every store invariant.

    Total and idempotent: never raises, and sanitizing an already sanitized
    state returns an equal state.
    """
    if not isinstance(raw, Mapping):
        return default_state()

    raw_lists = raw.get("lists")
    lists = {}
    if isinstance(raw_lists, Mapping):
        for key, raw_list in raw_lists.items():
            list_id = _clean_id(key)
            if list_id and list_id not in lists:
                lists[list_id] = sanitize_list(raw_list, list_id)
    if DEFAULT_LIST_ID not in lists:
        lists[DEFAULT_LIST_ID] = empty_list(DEFAULT_LIST_ID)

    order = []
    raw_order = raw.get("listOrder")
    if isinstance(raw_order, (list, tuple)):
        for item in raw_order:
            list_id = _clean_id(item)
            if list_id in lists and list_id not in order:
                order.append(list_id)
    if DEFAULT_LIST_ID not in order:
        order.insert(0, DEFAULT_LIST_ID)
    for list_id in lists:
        if list_id not in order:
            order.append(list_id)

    current_list_id = _clean_id(raw.get("currentListId"))
    if current_list_id not in lists:
        current_list_id = DEFAULT_LIST_ID
    active_list_id = _clean_id(raw.get("activeListId"))
    if active_list_id not in lists:
        active_list_id = None
    current_video_id = _clean_id(raw.get("currentVideoId")) or None
    if active_list_id is None:
        current_video_id = None

    tab_id = raw.get("currentTabId")
    pending_refresh = bool(raw.get("pendingDefaultRefresh") is True)
    if len(lists[DEFAULT_LIST_ID]["queue"]) > DEFAULT_REFRESH_THRESHOLD:
        pending_refresh = False

    history = sanitize_entries(raw.get("history"), sanitize_history_entry, unique=False)
    deleted = sanitize_entries(raw.get("deletedHistory"), sanitize_deleted_entry)
    return {
        "lists": {list_id: lists[list_id] for list_id in order},
        "listOrder": order,
        "currentListId": current_list_id,
        "activeListId": active_list_id,
        "currentVideoId": current_video_id,
        "history": history[:HISTORY_LIMIT],
        "deletedHistory": deleted[:HISTORY_LIMIT],
        "currentTabId": tab_id if _is_int(tab_id) else None,
        "pendingNotifications": _sanitize_notifications(raw.get("pendingNotifications")),
        "pendingDefaultRefresh": pending_refresh,
        "autoCollect": _sanitize_auto_collect(raw.get("autoCollect")),
        "videoProgress": sanitize_video_progress(raw.get("videoProgress")),
    }


def ensure_list_exists(state, list_id):
    """Raise ``ListNotFoundError`` unless ``list_id`` names a list."""
    if not list_id or list_id not in state["lists"]:
        raise ListNotFoundError(list_id)
    return state["lists"][list_id]


def clone_state(state):
    """Return a deep copy safe to hand to code that may mutate it."""
    return copy.deepcopy(state)
