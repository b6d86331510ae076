"""Replaying watched history and restoring deleted entries."""

from watchqueue.core.queue_model import HISTORY_LIMIT, now_ms, sanitize_entry
from watchqueue.services.queue_common import (
    after_list_grew,
    append_entry,
    bump_revision,
    clamp_position,
    current_list,
    index_of,
    remove_at,
)

PLACEMENTS = ("front", "beforeCurrent", "end")


def get_history_limit():
    return HISTORY_LIMIT


def _revive(state, records, position):
    """Pop a history record; return ``(destination list, fresh entry)``.

    The record's ``listId`` is only a lookup hint: a list deleted since then
    falls back to the current list. An existing copy of the video in the
    destination is removed first so the revival moves instead of duplicating.
    """
    record = records.pop(clamp_position(position, len(records)))
    destination = state["lists"].get(record["listId"]) or current_list(state)
    entry = sanitize_entry({**record, "addedAt": now_ms()})
    existing = index_of(destination["queue"], entry["id"])
    if existing != -1:
        remove_at(destination, existing)
    return destination, entry


def play_history_entry(runner, position=0, placement="front"):
    """Requeue a watched video and make it the playing entry.

    ``placement`` is ``front`` (index 0), ``beforeCurrent`` (at the list's
    cursor) or ``end``; anything else is treated as ``front``.
    """
    if placement not in PLACEMENTS:
        placement = "front"

    def transform(state):
        if not state["history"]:
            return state
        destination, entry = _revive(state, state["history"], position)
        queue = destination["queue"]
        insert_at = 0
        if placement == "beforeCurrent" and destination["currentIndex"] is not None:
            insert_at = destination["currentIndex"]
        elif placement == "end":
            insert_at = len(queue)
        queue.insert(insert_at, entry)
        destination["currentIndex"] = insert_at
        bump_revision(destination)
        state["currentListId"] = destination["id"]
        state["activeListId"] = destination["id"]
        state["currentVideoId"] = entry["id"]
        after_list_grew(state, destination)
        return state

    return runner.mutate(transform)


def restore_deleted_entry(runner, position=0):
    """Put an explicitly removed video back at the end of its list."""

    def transform(state):
        if not state["deletedHistory"]:
            return state
        destination, entry = _revive(state, state["deletedHistory"], position)
        append_entry(destination, entry)
        after_list_grew(state, destination)
        return state

    return runner.mutate(transform)
