"""List lifecycle operations: create, rename, freeze, remove, select, merge."""

from watchqueue.core.queue_model import (
    DEFAULT_LIST_ID,
    NEW_LIST_NAME,
    empty_list,
    ensure_list_exists,
)
from watchqueue.services.queue_common import (
    after_list_grew,
    append_entry,
    bump_revision,
    generate_list_id,
    index_of,
    mark_list_empty,
    refresh_default_flag,
)

REMOVE_MODES = ("move", "delete")


def _clean_name(name):
    return name.strip() if isinstance(name, str) else ""


def add_list(runner, name=None, freeze=False):
    """Create an empty list and append it to the display order.

    The new list is the last id of the returned state's ``listOrder``.
    """
    list_id = generate_list_id()

    def transform(state):
        state["lists"][list_id] = empty_list(list_id, _clean_name(name) or NEW_LIST_NAME, freeze=freeze)
        state["listOrder"].append(list_id)
        return state

    return runner.mutate(transform)


def rename_list(runner, list_id, new_name):
    """Rename a list; the default list keeps its fixed name."""
    if not list_id:
        return runner.read()

    def transform(state):
        queue_list = ensure_list_exists(state, list_id)
        cleaned = _clean_name(new_name)
        if list_id != DEFAULT_LIST_ID and cleaned:
            queue_list["name"] = cleaned
        return state

    return runner.mutate(transform)


def set_list_freeze(runner, list_id, freeze):
    """Toggle the freeze flag; the default list is never frozen."""
    if not list_id:
        return runner.read()

    def transform(state):
        queue_list = ensure_list_exists(state, list_id)
        queue_list["freeze"] = bool(freeze) and list_id != DEFAULT_LIST_ID
        return state

    return runner.mutate(transform)


def _detach_list(state, list_id):
    queue_list = state["lists"].pop(list_id)
    state["listOrder"] = [item for item in state["listOrder"] if item != list_id]
    if state["currentListId"] == list_id:
        state["currentListId"] = DEFAULT_LIST_ID
    if state["activeListId"] == list_id:
        state["activeListId"] = None
        state["currentVideoId"] = None
    return queue_list


def remove_list(runner, list_id, mode="move", target_list_id=None):
    """Delete a non-default list.

    ``move`` merges its queue into ``target_list_id`` (default list when
    unset), skipping ids the target already holds. ``delete`` discards the
    queue and reports the list as emptied when it still had entries.
    """
    if not list_id or list_id == DEFAULT_LIST_ID or mode not in REMOVE_MODES:
        return runner.read()

    def transform(state):
        ensure_list_exists(state, list_id)
        target_id = target_list_id if target_list_id and target_list_id != list_id else DEFAULT_LIST_ID
        if mode == "move":
            ensure_list_exists(state, target_id)
        removed = _detach_list(state, list_id)
        if mode == "delete":
            if removed["queue"]:
                mark_list_empty(state, removed)
            return state
        target = state["lists"][target_id]
        moved = False
        for entry in removed["queue"]:
            if index_of(target["queue"], entry["id"]) == -1:
                target["queue"].append(entry)
                moved = True
        if moved:
            bump_revision(target)
            if target["currentIndex"] is None:
                target["currentIndex"] = 0
            after_list_grew(state, target)
        return state

    return runner.mutate(transform)


def set_current_list(runner, list_id):
    """Select the list that receives new videos and is shown in the UI."""
    if not list_id:
        return runner.read()

    def transform(state):
        ensure_list_exists(state, list_id)
        state["currentListId"] = list_id
        return state

    return runner.mutate(transform)


def move_all_videos(runner, source_list_id, target_list_id):
    """Transfer every entry of one list to the end of another.

    Entries already present in the target are dropped from the source
    rather than duplicated. The source ends up empty.
    """
    if not source_list_id or not target_list_id or source_list_id == target_list_id:
        return runner.read()

    def transform(state):
        source = ensure_list_exists(state, source_list_id)
        target = ensure_list_exists(state, target_list_id)
        if not source["queue"]:
            return state
        for entry in source["queue"]:
            if index_of(target["queue"], entry["id"]) == -1:
                append_entry(target, entry)
        if state["activeListId"] == source_list_id:
            state["activeListId"] = None
            state["currentVideoId"] = None
        source["queue"] = []
        source["currentIndex"] = None
        bump_revision(source)
        if DEFAULT_LIST_ID in (source_list_id, target_list_id):
            refresh_default_flag(state)
        if source_list_id != DEFAULT_LIST_ID:
            mark_list_empty(state, source)
        return state

    return runner.mutate(transform)
