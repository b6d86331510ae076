"""Queue content operations: add, remove, reorder, move and postpone videos."""

from watchqueue.core.queue_model import (
    EntryValidationError,
    ensure_list_exists,
    sanitize_entry,
)
from watchqueue.services.queue_common import (
    after_list_grew,
    after_list_shrank,
    append_deleted_history,
    append_entry,
    bump_revision,
    clear_playback_if_current,
    find_video,
    index_of,
    remove_at,
    resolve_list,
)


def _unique_ids(video_ids):
    if isinstance(video_ids, str):
        video_ids = [video_ids]
    if not isinstance(video_ids, (list, tuple)):
        return []
    ids = []
    for value in video_ids:
        video_id = value.strip() if isinstance(value, str) else ""
        if video_id and video_id not in ids:
            ids.append(video_id)
    return ids


def add_videos_to_state(state, entries, list_id=None):
    """Append valid, not yet queued entries to a list (in place).

    Invalid entries are skipped; only a missing explicit list fails.
    """
    queue_list = resolve_list(state, list_id)
    known = {item["id"] for item in queue_list["queue"]}
    added = 0
    for raw in entries:
        try:
            entry = sanitize_entry(raw)
        except EntryValidationError:
            continue
        if entry["id"] in known:
            continue
        known.add(entry["id"])
        queue_list["queue"].append(entry)
        added += 1
    if added:
        bump_revision(queue_list)
        if queue_list["currentIndex"] is None:
            queue_list["currentIndex"] = 0
        after_list_grew(state, queue_list)
    return added


def add_videos(runner, entries, list_id=None):
    """Add entries to ``list_id`` or to the current list."""
    if not isinstance(entries, (list, tuple)) or not entries:
        return runner.read()

    def transform(state):
        add_videos_to_state(state, entries, list_id)
        return state

    return runner.mutate(transform)


def remove_videos(runner, video_ids, list_id=None):
    """Remove each id from ``list_id``, or from every list when none is given.

    Removed entries are recorded in the deleted history and purged from the
    watched history. An unknown ``list_id``, or ids queued nowhere, leave the
    state untouched.
    """
    ids = _unique_ids(video_ids)
    if not ids:
        return runner.read()

    def transform(state):
        if list_id:
            if list_id not in state["lists"]:
                return state
            targets = [list_id]
        else:
            targets = list(state["listOrder"])
        removed_any = False
        for target_id in targets:
            queue_list = state["lists"][target_id]
            shrunk = False
            for index in reversed(range(len(queue_list["queue"]))):
                video_id = queue_list["queue"][index]["id"]
                if video_id not in ids:
                    continue
                entry = remove_at(queue_list, index)
                append_deleted_history(state, entry, target_id)
                clear_playback_if_current(state, target_id, video_id)
                shrunk = True
            if shrunk:
                removed_any = True
                after_list_shrank(state, queue_list)
        if removed_any:
            state["history"] = [item for item in state["history"] if item["id"] not in ids]
        return state

    return runner.mutate(transform)


def remove_video(runner, video_id, list_id=None):
    """Remove one video; see ``remove_videos``."""
    if not video_id:
        return runner.read()
    return remove_videos(runner, [video_id], list_id)


def reorder_queue(runner, video_id, target_index, list_id=None):
    """Move one entry so it ends up at ``target_index`` of its list.

    The cursor keeps pointing at the same entry: it follows the moved entry,
    or shifts by one when the move crosses over it.
    """
    if not video_id or not isinstance(target_index, int) or isinstance(target_index, bool):
        return runner.read()

    def transform(state):
        if list_id:
            queue_list = ensure_list_exists(state, list_id)
            from_index = index_of(queue_list["queue"], video_id)
        else:
            located = find_video(state, video_id, prefer_list_id=state["currentListId"])
            queue_list, from_index = located if located else (None, -1)
        if from_index == -1:
            return state
        queue = queue_list["queue"]
        to_index = min(max(target_index, 0), len(queue) - 1)
        if to_index == from_index:
            return state
        queue.insert(to_index, queue.pop(from_index))
        current = queue_list["currentIndex"]
        if current == from_index:
            current = to_index
        elif from_index < current <= to_index:
            current -= 1
        elif to_index <= current < from_index:
            current += 1
        queue_list["currentIndex"] = current
        bump_revision(queue_list)
        return state

    return runner.mutate(transform)


def _move_one(state, video_id, target):
    located = find_video(state, video_id)
    if located is None or located[0] is target:
        return None
    source, index = located
    entry = remove_at(source, index)
    existing = index_of(target["queue"], video_id)
    if existing != -1:
        remove_at(target, existing)
    append_entry(target, entry)
    clear_playback_if_current(state, source["id"], video_id)
    return source


def move_videos(runner, video_ids, target_list_id):
    """Transfer videos from wherever they are queued to the end of a list."""
    ids = _unique_ids(video_ids)
    if not ids or not target_list_id:
        return runner.read()

    def transform(state):
        target = ensure_list_exists(state, target_list_id)
        sources = []
        for video_id in ids:
            source = _move_one(state, video_id, target)
            if source is not None and source["id"] not in sources:
                sources.append(source["id"])
        if not sources:
            return state
        for source_id in sources:
            after_list_shrank(state, state["lists"][source_id])
        after_list_grew(state, target)
        return state

    return runner.mutate(transform)


def move_video_to_list(runner, video_id, target_list_id):
    """Transfer one video to the end of ``target_list_id``."""
    if not video_id:
        return runner.read()
    return move_videos(runner, [video_id], target_list_id)


def postpone_video(runner, video_id, list_id=None):
    """Send an entry to the end of its list.

    Frozen lists and lists with a single entry are left alone. When the
    postponed entry was playing, playback moves to the entry now under the
    cursor.
    """
    if not video_id:
        return runner.read()

    def transform(state):
        located = find_video(state, video_id, prefer_list_id=list_id)
        if located is None:
            return state
        queue_list, index = located
        if queue_list["freeze"] or len(queue_list["queue"]) <= 1:
            return state
        was_playing = (
            queue_list["currentIndex"] == index
            and state["activeListId"] == queue_list["id"]
            and state["currentVideoId"] == video_id
        )
        append_entry(queue_list, remove_at(queue_list, index))
        if was_playing:
            state["currentVideoId"] = queue_list["queue"][queue_list["currentIndex"]]["id"]
        return state

    return runner.mutate(transform)
