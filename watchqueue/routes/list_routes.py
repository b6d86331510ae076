"""List lifecycle and import/export routes."""
from flask import request

from watchqueue.core.response_helpers import ok_response, read_payload
from watchqueue.routes.route_support import payload_str, perform, state_response
from watchqueue.services.queue_lists import (
    add_list,
    move_all_videos,
    remove_list,
    rename_list,
    set_current_list,
    set_list_freeze,
)
from watchqueue.services.queue_projection import (
    build_presentation,
    export_list,
    get_list_details,
    import_list,
)


def register_list_routes(app, state):
    """Register create/rename/freeze/remove/select/merge and import/export routes."""

    # Route: /api/lists
    @app.route("/api/lists", methods=["POST"])
    def create_list():
        payload = read_payload(request)
        name = payload_str(payload, "name")
        updated, rejected = perform(
            state,
            "add-list",
            lambda: add_list(state["runner"], name, bool(payload.get("freeze"))),
            detail=f"name={name or ''}",
        )
        if rejected is not None:
            return rejected
        return ok_response(build_presentation(updated), listId=updated["listOrder"][-1])

    # Route: /api/lists/rename
    @app.route("/api/lists/rename", methods=["POST"])
    def rename():
        payload = read_payload(request)
        list_id = payload_str(payload, "listId")
        new_name = payload_str(payload, "newName")
        return state_response(
            state,
            "rename-list",
            lambda: rename_list(state["runner"], list_id, new_name),
            detail=f"list={list_id} name={new_name or ''}",
        )

    # Route: /api/lists/freeze
    @app.route("/api/lists/freeze", methods=["POST"])
    def freeze():
        payload = read_payload(request)
        list_id = payload_str(payload, "listId")
        frozen = bool(payload.get("freeze"))
        return state_response(
            state,
            "freeze-list",
            lambda: set_list_freeze(state["runner"], list_id, frozen),
            detail=f"list={list_id} freeze={frozen}",
        )

    # Route: /api/lists/remove
    @app.route("/api/lists/remove", methods=["POST"])
    def remove_list_route():
        payload = read_payload(request)
        list_id = payload_str(payload, "listId")
        mode = payload_str(payload, "mode") or "move"
        target_id = payload_str(payload, "targetListId")
        return state_response(
            state,
            "remove-list",
            lambda: remove_list(state["runner"], list_id, mode, target_id),
            detail=f"list={list_id} mode={mode} target={target_id}",
        )

    # Route: /api/lists/current
    @app.route("/api/lists/current", methods=["POST"])
    def select_list():
        list_id = payload_str(read_payload(request), "listId")
        return state_response(
            state,
            "set-current-list",
            lambda: set_current_list(state["runner"], list_id),
            detail=f"list={list_id}",
        )

    # Route: /api/lists/move-all
    @app.route("/api/lists/move-all", methods=["POST"])
    def move_all():
        payload = read_payload(request)
        source_id = payload_str(payload, "sourceListId")
        target_id = payload_str(payload, "targetListId")
        return state_response(
            state,
            "move-all-videos",
            lambda: move_all_videos(state["runner"], source_id, target_id),
            detail=f"source={source_id} target={target_id}",
        )

    # Route: /api/lists/import
    @app.route("/api/lists/import", methods=["POST"])
    def import_data():
        payload = read_payload(request)
        mode = payload_str(payload, "mode") or "new"
        target_id = payload_str(payload, "targetListId")
        updated, rejected = perform(
            state,
            "import-list",
            lambda: import_list(state["runner"], payload.get("data"), mode, target_id),
            detail=f"mode={mode} target={target_id}",
        )
        if rejected is not None:
            return rejected
        extra = {"listId": updated["listOrder"][-1]} if mode == "new" else {}
        return ok_response(build_presentation(updated), **extra)

    # Route: /api/lists/<list_id>
    @app.route("/api/lists/<list_id>", methods=["GET"])
    def list_detail(list_id):
        details, rejected = perform(
            state,
            "get-list",
            lambda: get_list_details(state["runner"], list_id),
            detail=f"list={list_id}",
            quiet=True,
        )
        if rejected is not None:
            return rejected
        return ok_response(list=details)

    # Route: /api/lists/<list_id>/export
    @app.route("/api/lists/<list_id>/export", methods=["GET"])
    def export(list_id):
        data, rejected = perform(
            state,
            "export-list",
            lambda: export_list(state["runner"], list_id),
            detail=f"list={list_id}",
            quiet=True,
        )
        if rejected is not None:
            return rejected
        return ok_response(data=data)
