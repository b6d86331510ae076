"""Per-video watch progress, kept beside the queues for UI progress bars."""

from watchqueue.core.queue_model import (
    VIDEO_PROGRESS_LIMIT,
    clamp_percent,
    is_video_id,
    now_ms,
    to_timestamp,
)


def _enforce_progress_limit(state):
    """Evict the oldest records over the cap, sparing queued videos first."""
    progress = state["videoProgress"]
    overflow = len(progress) - VIDEO_PROGRESS_LIMIT
    if overflow <= 0:
        return
    queued = {item["id"] for queue_list in state["lists"].values() for item in queue_list["queue"]}
    oldest_first = sorted(progress, key=lambda video_id: progress[video_id]["updatedAt"])
    evicted = [video_id for video_id in oldest_first if video_id not in queued][:overflow]
    if len(evicted) < overflow:
        evicted += [video_id for video_id in oldest_first if video_id in queued][: overflow - len(evicted)]
    for video_id in evicted:
        del progress[video_id]


def apply_video_progress(state, video_id, percent, timestamp):
    """Store ``percent`` for ``video_id`` in place; return True when it changed.

    A zero percent forgets the record. An older timestamp only wins when it
    reports more progress than what is stored.
    """
    if not is_video_id(video_id):
        return False
    clamped = clamp_percent(percent)
    progress = state["videoProgress"]
    existing = progress.get(video_id)
    if not clamped:
        if existing is None:
            return False
        del progress[video_id]
        return True
    if existing is not None:
        if existing["percent"] == clamped and timestamp <= existing["updatedAt"]:
            return False
        if timestamp < existing["updatedAt"] and clamped <= existing["percent"]:
            return False
    progress[video_id] = {"percent": clamped, "updatedAt": timestamp}
    _enforce_progress_limit(state)
    return existing != progress.get(video_id)


def record_video_progress(runner, video_id, percent, timestamp=None):
    """Record how far ``video_id`` was watched; return whether anything changed."""
    video_id = video_id.strip() if isinstance(video_id, str) else ""
    clamped = clamp_percent(percent)
    if not video_id or clamped is None:
        return False
    stamp = to_timestamp(timestamp)
    if stamp is None:
        stamp = now_ms()
    existing = runner.read()["videoProgress"].get(video_id)
    if existing is None and clamped == 0:
        return False
    if existing is not None and existing["percent"] == clamped and stamp <= existing["updatedAt"]:
        return False
    changed = [False]

    def transform(state):
        changed[0] = apply_video_progress(state, video_id, clamped, stamp)
        return state

    runner.mutate(transform)
    return changed[0]
