"""Queue content routes: add, remove, reorder, move and postpone."""
from flask import request

from watchqueue.core.response_helpers import read_payload
from watchqueue.routes.route_support import payload_ids, payload_str, state_response
from watchqueue.services.queue_content import (
    add_videos,
    move_videos,
    postpone_video,
    remove_videos,
    reorder_queue,
)


def register_video_routes(app, state):
    """Register routes that change which videos a list holds."""

    # Route: /api/videos/add
    @app.route("/api/videos/add", methods=["POST"])
    def add():
        payload = read_payload(request)
        entries = payload.get("entries")
        entries = entries if isinstance(entries, list) else []
        list_id = payload_str(payload, "listId")
        return state_response(
            state,
            "add-videos",
            lambda: add_videos(state["runner"], entries, list_id),
            detail=f"count={len(entries)} list={list_id}",
        )

    # Route: /api/videos/remove
    @app.route("/api/videos/remove", methods=["POST"])
    def remove_videos_route():
        payload = read_payload(request)
        video_ids = payload_ids(payload)
        list_id = payload_str(payload, "listId")
        return state_response(
            state,
            "remove-videos",
            lambda: remove_videos(state["runner"], video_ids, list_id),
            detail=f"ids={','.join(video_ids)[:200]} list={list_id}",
        )

    # Route: /api/videos/reorder
    @app.route("/api/videos/reorder", methods=["POST"])
    def reorder():
        payload = read_payload(request)
        video_id = payload_str(payload, "videoId")
        target_index = payload.get("targetIndex")
        list_id = payload_str(payload, "listId")
        return state_response(
            state,
            "reorder-queue",
            lambda: reorder_queue(state["runner"], video_id, target_index, list_id),
            detail=f"video={video_id} index={target_index} list={list_id}",
        )

    # Route: /api/videos/move
    @app.route("/api/videos/move", methods=["POST"])
    def move():
        payload = read_payload(request)
        video_ids = payload_ids(payload)
        target_id = payload_str(payload, "targetListId")
        return state_response(
            state,
            "move-videos",
            lambda: move_videos(state["runner"], video_ids, target_id),
            detail=f"ids={','.join(video_ids)[:200]} target={target_id}",
        )

    # Route: /api/videos/postpone
    @app.route("/api/videos/postpone", methods=["POST"])
    def postpone():
        payload = read_payload(request)
        video_id = payload_str(payload, "videoId")
        list_id = payload_str(payload, "listId")
        return state_response(
            state,
            "postpone-video",
            lambda: postpone_video(state["runner"], video_id, list_id),
            detail=f"video={video_id} list={list_id}",
        )
