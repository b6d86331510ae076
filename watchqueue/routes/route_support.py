"""Helpers shared by the queue route modules."""

from watchqueue.core.queue_model import QueueStoreError
from watchqueue.core.response_helpers import ok_response, store_error_response
from watchqueue.services.queue_projection import build_presentation


def payload_str(payload, key):
    """Return ``payload[key]`` when it is a non-empty string, else None."""
    value = payload.get(key)
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return None


def payload_ids(payload, many_key="videoIds", one_key="videoId"):
    """Read a list of ids, accepting the single-id form as well."""
    values = payload.get(many_key)
    if isinstance(values, list):
        return [value for value in values if isinstance(value, str)]
    single = payload_str(payload, one_key)
    return [single] if single else []


def perform(state, action, operation, detail=None, quiet=False):
    """Run one store operation and log it.

    Returns ``(result, None)`` on success and ``(None, response)`` when the
    store rejected the call. ``quiet`` reads only log rejections.
    """
    try:
        result = operation()
    except QueueStoreError as exc:
        state["log_queue_action"](action, command=detail, rejection_message=str(exc))
        return None, store_error_response(exc)
    if not quiet:
        state["log_queue_action"](action, command=detail)
    return result, None


def state_response(state, action, operation, detail=None):
    """Run a mutation and answer with the resulting presentation state."""
    updated, rejected = perform(state, action, operation, detail)
    if rejected is not None:
        return rejected
    return ok_response(build_presentation(updated))
