"""Playback cursor operations and the watched-video transition."""

from watchqueue.core.queue_model import DEFAULT_LIST_ID, now_ms
from watchqueue.services.queue_common import (
    after_list_shrank,
    append_history,
    find_video,
    index_of,
    remove_at,
)
from watchqueue.services.queue_progress import apply_video_progress


def set_current_video(runner, video_id, list_id=None):
    """Point playback at ``video_id``; a video that is not queued is a no-op."""
    if not video_id:
        return runner.read()

    def transform(state):
        located = None
        queue_list = state["lists"].get(list_id) if list_id else None
        if queue_list is not None:
            index = index_of(queue_list["queue"], video_id)
            if index != -1:
                located = (queue_list, index)
        else:
            located = find_video(state, video_id)
        if located is None:
            return state
        queue_list, index = located
        queue_list["currentIndex"] = index
        state["activeListId"] = queue_list["id"]
        state["currentVideoId"] = video_id
        state["currentListId"] = queue_list["id"]
        return state

    return runner.mutate(transform)


def suspend_playback(runner):
    """Detach playback from its list; queued videos stay where they are."""

    def transform(state):
        state["activeListId"] = None
        return state

    return runner.mutate(transform)


def set_current_tab(runner, tab_id):
    """Record the browser tab that owns playback (non-integers clear it)."""

    def transform(state):
        valid = isinstance(tab_id, int) and not isinstance(tab_id, bool)
        state["currentTabId"] = tab_id if valid else None
        return state

    return runner.mutate(transform)


def clear_current_tab(runner, tab_id):
    """Forget the playback tab, but only if ``tab_id`` still owns it."""

    def transform(state):
        if state["currentTabId"] is not None and state["currentTabId"] == tab_id:
            state["currentTabId"] = None
        return state

    return runner.mutate(transform)


def mark_watched_in_state(state, video_id, list_id=None):
    """Consume ``video_id`` in place; return False when it is not queued.

    The entry goes to the front of the history. Unfrozen lists (and the
    default list) drop it; frozen lists keep it and advance the cursor.
    Its progress is recorded as 100 percent.
    """
    located = find_video(state, video_id, prefer_list_id=list_id)
    if located is None:
        return False
    queue_list, index = located
    append_history(state, queue_list["queue"][index], queue_list["id"])
    apply_video_progress(state, video_id, 100, now_ms())
    if queue_list["id"] == DEFAULT_LIST_ID or not queue_list["freeze"]:
        remove_at(queue_list, index)
    elif queue_list["currentIndex"] == index and len(queue_list["queue"]) > 1:
        queue_list["currentIndex"] = (index + 1) % len(queue_list["queue"])
    if state["activeListId"] == queue_list["id"] and state["currentVideoId"] == video_id:
        if queue_list["queue"] and queue_list["currentIndex"] is not None:
            state["currentVideoId"] = queue_list["queue"][queue_list["currentIndex"]]["id"]
        else:
            state["currentVideoId"] = None
            state["activeListId"] = None
    after_list_shrank(state, queue_list)
    return True


def mark_video_watched(runner, video_id, list_id=None):
    """Record ``video_id`` as watched; see ``mark_watched_in_state``."""
    if not video_id:
        return runner.read()

    def transform(state):
        mark_watched_in_state(state, video_id, list_id)
        return state

    return runner.mutate(transform)


def next_queue_entry(state):
    """Return ``{entry, index, listId}`` following the cursor, or None."""
    queue_list = state["lists"].get(state["activeListId"]) or state["lists"][state["currentListId"]]
    if queue_list["currentIndex"] is None:
        return None
    next_index = queue_list["currentIndex"] + 1
    if next_index >= len(queue_list["queue"]):
        return None
    return {
        "entry": dict(queue_list["queue"][next_index]),
        "index": next_index,
        "listId": queue_list["id"],
    }


def get_next_queue_entry(runner):
    """Return the entry after the cursor of the active (or current) list."""
    return next_queue_entry(runner.read())
