"""Read-only projections for UI callers, plus list import/export.

Projections are deep copies: changing a returned structure never reaches
the stored state.
"""

from collections.abc import Mapping

from watchqueue.core.queue_model import (
    DEFAULT_LIST_ID,
    IMPORTED_LIST_NAME,
    EntryValidationError,
    clone_state,
    ensure_list_exists,
    sanitize_entries,
)
from watchqueue.services.queue_common import generate_list_id
from watchqueue.services.queue_content import add_videos_to_state

IMPORT_MODES = ("new", "append")


def build_presentation(state):
    """Project a sanitized state into what the popup and content scripts render."""
    state = clone_state(state)
    lists_meta = []
    for list_id in state["listOrder"]:
        queue_list = state["lists"][list_id]
        lists_meta.append({
            "id": queue_list["id"],
            "name": queue_list["name"],
            "freeze": queue_list["freeze"],
            "length": len(queue_list["queue"]),
            "revision": queue_list["revision"],
        })
    current = state["lists"][state["currentListId"]]
    return {
        "lists": lists_meta,
        "currentListId": state["currentListId"],
        "activeListId": state["activeListId"],
        "currentVideoId": state["currentVideoId"],
        "currentTabId": state["currentTabId"],
        "videoProgress": state["videoProgress"],
        "currentQueue": {
            "id": current["id"],
            "name": current["name"],
            "freeze": current["freeze"],
            "queue": current["queue"],
            "currentIndex": current["currentIndex"],
            "revision": current["revision"],
        },
        "history": state["history"],
        "deletedHistory": state["deletedHistory"],
        "pendingDefaultRefresh": state["pendingDefaultRefresh"],
        "autoCollect": state["autoCollect"],
    }


def get_presentation_state(runner):
    return build_presentation(runner.read())


def list_details(state, list_id):
    queue_list = clone_state(ensure_list_exists(state, list_id))
    return {
        "id": queue_list["id"],
        "name": queue_list["name"],
        "freeze": queue_list["freeze"],
        "queue": queue_list["queue"],
        "currentIndex": queue_list["currentIndex"],
        "length": len(queue_list["queue"]),
        "revision": queue_list["revision"],
    }


def get_list_details(runner, list_id):
    """Return one list's metadata and full queue; unknown ids raise."""
    return list_details(runner.read(), list_id)


def export_list(runner, list_id):
    """Serialize one list as ``{id, name, freeze, queue}``."""
    details = get_list_details(runner, list_id)
    return {key: details[key] for key in ("id", "name", "freeze", "queue")}


def import_list(runner, data, mode="new", target_list_id=None):
    """Load an exported list.

    ``append`` re-validates the entries into an existing list (default list
    when unset) through the regular add path. ``new`` creates a list with a
    fresh id, which ends up last in ``listOrder``.
    """
    if not isinstance(data, Mapping):
        raise EntryValidationError("Invalid import data")
    if mode not in IMPORT_MODES:
        raise EntryValidationError(f"Unknown import mode: {mode}")
    entries = data.get("queue")
    entries = entries if isinstance(entries, (list, tuple)) else []

    if mode == "append":
        destination = target_list_id or DEFAULT_LIST_ID

        def append_transform(state):
            add_videos_to_state(state, entries, destination)
            return state

        return runner.mutate(append_transform)

    list_id = generate_list_id()
    name = data.get("name")
    name = name.strip() if isinstance(name, str) else ""

    def new_transform(state):
        queue = sanitize_entries(entries)
        state["lists"][list_id] = {
            "id": list_id,
            "name": name or IMPORTED_LIST_NAME,
            "freeze": bool(data.get("freeze")),
            "queue": queue,
            "currentIndex": 0 if queue else None,
            "revision": len(queue),
        }
        state["listOrder"].append(list_id)
        return state

    return runner.mutate(new_transform)
