"""Notification mailbox and default-list refresh signalling.

``should_auto_refresh_default`` is the authoritative refresh check: it looks
only at the default list's length. ``pendingDefaultRefresh`` is a hint that
operations recompute from that length and collaborators may acknowledge with
``clear_pending_default_refresh``.
"""

from watchqueue.core.queue_model import (
    DEFAULT_LIST_ID,
    ensure_list_exists,
    now_ms,
    to_timestamp,
)
from watchqueue.services.queue_common import default_needs_refresh, mark_list_empty

DEFAULT_AUTO_COLLECT_COOLDOWN_SECONDS = 60 * 60


def consume_pending_notifications(runner):
    """Drain the notification mailbox and return what it held.

    The drain happens inside one mutation, so a record is handed out once.
    """
    drained = []

    def transform(state):
        drained[:] = state["pendingNotifications"]
        state["pendingNotifications"] = []
        return state

    if not runner.read()["pendingNotifications"]:
        return []
    runner.mutate(transform)
    return [dict(item) for item in drained]


def queue_list_empty_notification(runner, list_id=DEFAULT_LIST_ID):
    """Enqueue a "list emptied" record for ``list_id``."""
    if not list_id:
        return runner.read()

    def transform(state):
        mark_list_empty(state, ensure_list_exists(state, list_id))
        return state

    return runner.mutate(transform)


def should_auto_refresh_default(runner):
    """True whenever the default list holds at most one entry."""
    return default_needs_refresh(runner.read())


def clear_pending_default_refresh(runner):
    """Acknowledge the refresh hint without touching any queue."""

    def transform(state):
        state["pendingDefaultRefresh"] = False
        return state

    return runner.mutate(transform)


def get_auto_collect_meta(runner):
    return dict(runner.read()["autoCollect"])


def get_auto_refresh_status(runner, *, now=None):
    """Combine the refresh level with the auto-collect cooldown."""
    state = runner.read()
    now = now_ms() if now is None else now
    needed = default_needs_refresh(state)
    next_at = state["autoCollect"]["nextAutoCollectAt"]
    on_cooldown = bool(needed and next_at and next_at > now)
    return {
        "shouldCollect": needed and not on_cooldown,
        "onCooldown": on_cooldown,
        "queueLength": len(state["lists"][DEFAULT_LIST_ID]["queue"]),
        "pendingDefaultRefresh": state["pendingDefaultRefresh"],
    }


def _as_count(value):
    try:
        return max(0, int(value))
    except (TypeError, ValueError, OverflowError):
        return 0


def record_default_auto_collect(
    runner,
    added=0,
    fetched=0,
    started_at=None,
    *,
    cooldown_seconds=DEFAULT_AUTO_COLLECT_COOLDOWN_SECONDS,
):
    """Store the outcome of a subscription fetch run and start the cooldown."""

    def transform(state):
        meta = state["autoCollect"]
        now = now_ms()
        started = to_timestamp(started_at)
        if started is not None:
            meta["lastRunAt"] = started
        elif not meta["lastRunAt"]:
            meta["lastRunAt"] = now
        meta["lastAdded"] = _as_count(added)
        meta["lastFetched"] = _as_count(fetched)
        meta["nextAutoCollectAt"] = now + int(cooldown_seconds * 1000)
        return state

    return runner.mutate(transform)


def mark_auto_collect_run_started(runner, start_time=None):
    """Stamp ``lastRunAt`` with ``start_time`` (now when missing or unparsable)."""
    started = to_timestamp(start_time)
    if started is None:
        started = now_ms()

    def transform(state):
        state["autoCollect"]["lastRunAt"] = started
        return state

    return dict(runner.mutate(transform)["autoCollect"])


def set_auto_collect_start_date(runner, value):
    """Like ``mark_auto_collect_run_started`` but ignores unparsable dates."""
    if to_timestamp(value) is None:
        return get_auto_collect_meta(runner)
    return mark_auto_collect_run_started(runner, value)
