"""Playback cursor and history replay routes."""
from flask import request

from watchqueue.core.response_helpers import ok_response, read_payload
from watchqueue.routes.route_support import payload_str, perform, state_response
from watchqueue.services.queue_history import play_history_entry, restore_deleted_entry
from watchqueue.services.queue_playback import (
    clear_current_tab,
    mark_video_watched,
    set_current_tab,
    set_current_video,
    suspend_playback,
)
from watchqueue.services.queue_progress import record_video_progress


def register_playback_routes(app, state):
    """Register cursor, tab ownership and history routes."""

    # Route: /api/playback/current
    @app.route("/api/playback/current", methods=["POST"])
    def current_video():
        payload = read_payload(request)
        video_id = payload_str(payload, "videoId")
        list_id = payload_str(payload, "listId")
        return state_response(
            state,
            "set-current-video",
            lambda: set_current_video(state["runner"], video_id, list_id),
            detail=f"video={video_id} list={list_id}",
        )

    # Route: /api/playback/suspend
    @app.route("/api/playback/suspend", methods=["POST"])
    def suspend():
        return state_response(state, "suspend-playback", lambda: suspend_playback(state["runner"]))

    # Route: /api/playback/watched
    @app.route("/api/playback/watched", methods=["POST"])
    def watched():
        payload = read_payload(request)
        video_id = payload_str(payload, "videoId")
        list_id = payload_str(payload, "listId")
        return state_response(
            state,
            "mark-watched",
            lambda: mark_video_watched(state["runner"], video_id, list_id),
            detail=f"video={video_id} list={list_id}",
        )

    # Route: /api/playback/progress
    @app.route("/api/playback/progress", methods=["POST"])
    def progress():
        payload = read_payload(request)
        video_id = payload_str(payload, "videoId")
        percent = payload.get("percent")
        changed, rejected = perform(
            state,
            "record-progress",
            lambda: record_video_progress(state["runner"], video_id, percent, payload.get("timestamp")),
            detail=f"video={video_id} percent={percent}",
            quiet=True,
        )
        if rejected is not None:
            return rejected
        return ok_response(changed=changed)

    # Route: /api/playback/tab
    @app.route("/api/playback/tab", methods=["POST"])
    def claim_tab():
        tab_id = read_payload(request).get("tabId")
        return state_response(
            state,
            "set-current-tab",
            lambda: set_current_tab(state["runner"], tab_id),
            detail=f"tab={tab_id}",
        )

    # Route: /api/playback/tab/clear
    @app.route("/api/playback/tab/clear", methods=["POST"])
    def release_tab():
        tab_id = read_payload(request).get("tabId")
        return state_response(
            state,
            "clear-current-tab",
            lambda: clear_current_tab(state["runner"], tab_id),
            detail=f"tab={tab_id}",
        )

    # Route: /api/history/play
    @app.route("/api/history/play", methods=["POST"])
    def play_history():
        payload = read_payload(request)
        position = payload.get("position", 0)
        placement = payload_str(payload, "placement") or "front"
        return state_response(
            state,
            "play-history",
            lambda: play_history_entry(state["runner"], position, placement),
            detail=f"position={position} placement={placement}",
        )

    # Route: /api/history/restore-deleted
    @app.route("/api/history/restore-deleted", methods=["POST"])
    def restore_deleted():
        position = read_payload(request).get("position", 0)
        return state_response(
            state,
            "restore-deleted",
            lambda: restore_deleted_entry(state["runner"], position),
            detail=f"position={position}",
        )
