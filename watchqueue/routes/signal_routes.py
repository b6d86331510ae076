"""Refresh signal, notification mailbox and auto-collect routes."""
from flask import request

from watchqueue.core.queue_model import DEFAULT_LIST_ID
from watchqueue.core.response_helpers import ok_response, read_payload
from watchqueue.routes.route_support import payload_str, perform, state_response
from watchqueue.services.queue_signals import (
    clear_pending_default_refresh,
    consume_pending_notifications,
    get_auto_collect_meta,
    get_auto_refresh_status,
    mark_auto_collect_run_started,
    queue_list_empty_notification,
    record_default_auto_collect,
    should_auto_refresh_default,
)


def register_signal_routes(app, state):
    """Register the routes the fetch pipeline and UI poll for signals."""

    # Route: /api/signals/refresh
    @app.route("/api/signals/refresh", methods=["GET"])
    def refresh_signal():
        runner = state["runner"]
        return ok_response(
            shouldRefresh=should_auto_refresh_default(runner),
            status=get_auto_refresh_status(runner),
        )

    # Route: /api/signals/refresh/clear
    @app.route("/api/signals/refresh/clear", methods=["POST"])
    def refresh_clear():
        return state_response(
            state,
            "clear-default-refresh",
            lambda: clear_pending_default_refresh(state["runner"]),
        )

    # Route: /api/signals/notifications/consume
    @app.route("/api/signals/notifications/consume", methods=["POST"])
    def notifications_consume():
        notifications, rejected = perform(
            state,
            "consume-notifications",
            lambda: consume_pending_notifications(state["runner"]),
            quiet=True,
        )
        if rejected is not None:
            return rejected
        if notifications:
            state["log_queue_action"]("consume-notifications", command=f"count={len(notifications)}")
        return ok_response(notifications=notifications)

    # Route: /api/signals/notifications/list-empty
    @app.route("/api/signals/notifications/list-empty", methods=["POST"])
    def notifications_list_empty():
        list_id = payload_str(read_payload(request), "listId") or DEFAULT_LIST_ID
        return state_response(
            state,
            "list-empty-notification",
            lambda: queue_list_empty_notification(state["runner"], list_id),
            detail=f"list={list_id}",
        )

    # Route: /api/signals/auto-collect
    @app.route("/api/signals/auto-collect", methods=["GET"])
    def auto_collect_meta():
        return ok_response(autoCollect=get_auto_collect_meta(state["runner"]))

    # Route: /api/signals/auto-collect
    @app.route("/api/signals/auto-collect", methods=["POST"])
    def auto_collect_record():
        payload = read_payload(request)
        added = payload.get("added", 0)
        fetched = payload.get("fetched", 0)
        return state_response(
            state,
            "record-auto-collect",
            lambda: record_default_auto_collect(
                state["runner"],
                added,
                fetched,
                payload.get("startedAt"),
                cooldown_seconds=state["AUTO_COLLECT_COOLDOWN_SECONDS"],
            ),
            detail=f"added={added} fetched={fetched}",
        )

    # Route: /api/signals/auto-collect/start
    @app.route("/api/signals/auto-collect/start", methods=["POST"])
    def auto_collect_start():
        started_at = read_payload(request).get("startedAt")
        meta, rejected = perform(
            state,
            "auto-collect-start",
            lambda: mark_auto_collect_run_started(state["runner"], started_at),
            detail=f"startedAt={started_at}",
        )
        if rejected is not None:
            return rejected
        return ok_response(autoCollect=meta)
