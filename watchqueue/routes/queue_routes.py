"""Queue API route registration and the read-only projection routes."""
from watchqueue.core.response_helpers import ok_response
from watchqueue.routes.list_routes import register_list_routes
from watchqueue.routes.playback_routes import register_playback_routes
from watchqueue.routes.signal_routes import register_signal_routes
from watchqueue.routes.video_routes import register_video_routes
from watchqueue.services.queue_history import get_history_limit
from watchqueue.services.queue_playback import get_next_queue_entry
from watchqueue.services.queue_projection import get_presentation_state


def register_routes(app, state):
    """Register every queue route on ``app``."""

    # Route: /api/state
    @app.route("/api/state", methods=["GET"])
    def presentation_state():
        return ok_response(get_presentation_state(state["runner"]))

    # Route: /api/next
    @app.route("/api/next", methods=["GET"])
    def next_entry():
        return ok_response(next=get_next_queue_entry(state["runner"]))

    # Route: /api/history/limit
    @app.route("/api/history/limit", methods=["GET"])
    def history_limit():
        return ok_response(limit=get_history_limit())

    register_list_routes(app, state)
    register_video_routes(app, state)
    register_playback_routes(app, state)
    register_signal_routes(app, state)
