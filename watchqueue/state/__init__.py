"""Read-only runtime members shared by the queue routes."""
from collections.abc import Iterator, Mapping
from typing import Any


_STATE_CORE_KEYS = (
    "AUTO_COLLECT_COOLDOWN_SECONDS",
    "STATE_DB_PATH",
)

_STATE_BINDING_KEYS = (
    "log_queue_action",
    "log_queue_exception",
    "log_queue_system",
    "runner",
)

REQUIRED_STATE_KEYS = _STATE_CORE_KEYS + _STATE_BINDING_KEYS
REQUIRED_STATE_KEY_SET = frozenset(REQUIRED_STATE_KEYS)


class AppState(Mapping[str, Any]):
    """Fixed set of settings and callables, readable as ``state[key]`` or ``state.key``.

    Members are bound once at app creation; ``replace`` returns a copy with
    some members swapped, which tests use to inject fakes.
    """

    __slots__ = ("_members",)

    def __init__(self, members: Mapping[str, Any]):
        missing = [key for key in REQUIRED_STATE_KEYS if key not in members]
        if missing:
            raise KeyError(f"Missing state members: {', '.join(missing)}")
        unknown = sorted(set(members) - REQUIRED_STATE_KEY_SET)
        if unknown:
            raise KeyError(f"Unknown state members: {', '.join(unknown)}")
        object.__setattr__(self, "_members", dict(members))

    def __getitem__(self, key: str) -> Any:
        return self._members[key]

    def __iter__(self) -> Iterator[str]:
        return iter(REQUIRED_STATE_KEYS)

    def __len__(self) -> int:
        return len(REQUIRED_STATE_KEYS)

    def __getattr__(self, name: str) -> Any:
        try:
            return self._members[name]
        except KeyError:
            raise AttributeError(name) from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"AppState is read-only: {name}")

    def replace(self, **changes: Any) -> "AppState":
        return AppState({**self._members, **changes})
