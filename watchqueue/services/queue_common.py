"""Helpers shared by the queue state transforms.

Everything here works in place on a state that ``sanitize_state`` produced;
the runner sanitizes again after each transform.
"""

import secrets
import time

from watchqueue.core.queue_model import (
    DEFAULT_LIST_ID,
    DEFAULT_REFRESH_THRESHOLD,
    HISTORY_LIMIT,
    LIST_EMPTY_NOTIFICATION,
    ensure_list_exists,
    now_ms,
    sanitize_deleted_entry,
    sanitize_history_entry,
)


def generate_list_id():
    """Return a fresh list id such as ``list_18f3a2b4c1d_ab12``."""
    stamp = format(int(time.time() * 1000), "x")
    return f"list_{stamp}_{secrets.token_hex(2)}"


def current_list(state):
    """Return the list new videos go to by default."""
    return state["lists"].get(state["currentListId"]) or state["lists"][DEFAULT_LIST_ID]


def resolve_list(state, list_id=None):
    """Return the named list (raising when missing) or the current list."""
    if list_id:
        return ensure_list_exists(state, list_id)
    return current_list(state)


def index_of(queue, video_id):
    for index, item in enumerate(queue):
        if item["id"] == video_id:
            return index
    return -1


def find_video(state, video_id, *, prefer_list_id=None):
    """Locate ``video_id``; return ``(list, index)`` or None.

    The preferred list is searched first, then every list in display order.
    """
    order = list(state["listOrder"])
    if prefer_list_id in state["lists"]:
        order.remove(prefer_list_id)
        order.insert(0, prefer_list_id)
    for list_id in order:
        queue_list = state["lists"][list_id]
        index = index_of(queue_list["queue"], video_id)
        if index != -1:
            return queue_list, index
    return None


def adjust_index_after_removal(queue_list, removed_index):
    """Reposition ``currentIndex`` after the entry at ``removed_index`` left."""
    current = queue_list["currentIndex"]
    length = len(queue_list["queue"])
    if current is not None:
        if removed_index < current:
            current -= 1
        elif removed_index == current:
            current = min(removed_index, length - 1) if length else None
    if not length:
        current = None
    elif current is None or not 0 <= current < length:
        current = 0
    queue_list["currentIndex"] = current


def remove_at(queue_list, index):
    """Splice out one entry, fix the cursor and return the entry."""
    entry = queue_list["queue"].pop(index)
    adjust_index_after_removal(queue_list, index)
    bump_revision(queue_list)
    return entry


def append_entry(queue_list, entry):
    queue_list["queue"].append(entry)
    if queue_list["currentIndex"] is None:
        queue_list["currentIndex"] = 0
    bump_revision(queue_list)


def bump_revision(queue_list):
    queue_list["revision"] = int(queue_list.get("revision") or 0) + 1


def mark_list_empty(state, queue_list):
    """Queue a one-shot "list emptied" notification."""
    state["pendingNotifications"].append({
        "type": LIST_EMPTY_NOTIFICATION,
        "listId": queue_list["id"],
        "name": queue_list["name"],
    })


def default_needs_refresh(state):
    return len(state["lists"][DEFAULT_LIST_ID]["queue"]) <= DEFAULT_REFRESH_THRESHOLD


def refresh_default_flag(state):
    """Recompute the refresh hint from the default list's length."""
    state["pendingDefaultRefresh"] = default_needs_refresh(state)


def after_list_shrank(state, queue_list):
    """Raise the signals owed when a list lost entries."""
    if queue_list["id"] == DEFAULT_LIST_ID:
        refresh_default_flag(state)
    elif not queue_list["queue"]:
        mark_list_empty(state, queue_list)


def after_list_grew(state, queue_list):
    if queue_list["id"] == DEFAULT_LIST_ID:
        refresh_default_flag(state)


def clear_playback_if_current(state, list_id, video_id):
    """Stop playback when ``video_id`` in ``list_id`` is the active video."""
    if state["activeListId"] == list_id and state["currentVideoId"] == video_id:
        state["activeListId"] = None
        state["currentVideoId"] = None


def append_history(state, entry, list_id):
    record = sanitize_history_entry({**entry, "listId": list_id, "watchedAt": now_ms()})
    state["history"] = [record] + state["history"][: HISTORY_LIMIT - 1]


def append_deleted_history(state, entry, list_id):
    record = sanitize_deleted_entry({**entry, "listId": list_id, "deletedAt": now_ms()})
    kept = [item for item in state["deletedHistory"] if item["id"] != record["id"]]
    state["deletedHistory"] = [record] + kept[: HISTORY_LIMIT - 1]


def clamp_position(position, length):
    """Clamp a caller supplied position into ``[0, length - 1]``."""
    try:
        index = int(position)
    except (TypeError, ValueError, OverflowError):
        index = 0
    return min(max(index, 0), length - 1)
