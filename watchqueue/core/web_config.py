"""KEY=VALUE config loader with typed accessors and resolved service settings."""

import os
import secrets
from dataclasses import dataclass
from datetime import timezone, tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

CONFIG_ENV_VAR = "WATCHQUEUE_CONFIG"
CONFIG_FILE_NAME = "wqweb.env"
_TRUE_VALUES = {"1", "true", "yes", "y", "on"}
_FALSE_VALUES = {"0", "false", "no", "n", "off"}


class QueueConfig:
    """Read a dotenv-like config file and expose typed getters."""

    def __init__(self, config_path, base_dir):
        self.config_path = Path(config_path)
        self.base_dir = Path(base_dir)
        self.values = self._load()

    @staticmethod
    def _unquote(value):
        for quote in ("'", '"'):
            if len(value) >= 2 and value.startswith(quote) and value.endswith(quote):
                return value[1:-1]
        return value

    def _load(self):
        """Parse ``KEY=VALUE`` lines; a missing file yields no values."""
        try:
            text = self.config_path.read_text(encoding="utf-8")
        except OSError:
            return {}
        values = {}
        for line in map(str.strip, text.splitlines()):
            if line.startswith("#"):
                continue
            key, sep, value = line.partition("=")
            if sep and key.strip():
                values[key.strip()] = self._unquote(value.strip())
        return values

    def get_str(self, name, default):
        return (self.values.get(name) or "").strip() or default

    def _get_number(self, name, default, parse, minimum):
        raw = self.values.get(name)
        if raw is None:
            return default
        try:
            parsed = parse(str(raw).strip())
        except (TypeError, ValueError):
            return default
        if minimum is not None and parsed < minimum:
            return minimum
        return parsed

    def get_int(self, name, default, minimum=None):
        """Read an integer setting, clamped to ``minimum`` when given."""
        return self._get_number(name, default, int, minimum)

    def get_float(self, name, default, minimum=None):
        """Read a float setting, clamped to ``minimum`` when given."""
        return self._get_number(name, default, float, minimum)

    def get_bool(self, name, default):
        raw = (self.values.get(name) or "").strip().lower()
        if raw in _TRUE_VALUES:
            return True
        if raw in _FALSE_VALUES:
            return False
        return default

    def get_path(self, name, default):
        """Read a path setting and resolve relative values from ``base_dir``."""
        raw = (self.values.get(name) or "").strip()
        if not raw:
            return Path(default)
        candidate = Path(raw)
        if candidate.is_absolute():
            return candidate
        return self.base_dir / candidate


@dataclass(frozen=True)
class QueueSettings:
    """Resolved runtime settings for one service process."""
    web_host: str
    web_port: int
    data_dir: Path
    state_db_path: Path
    legacy_state_file: Path
    log_dir: Path
    display_tz: tzinfo
    state_write_retries: int
    auto_collect_cooldown_seconds: int
    secret_key: str


def resolve_config_path(base_dir, explicit=None):
    """Pick the config file: explicit argument, then env var, then ``wqweb.env``."""
    if explicit:
        return Path(explicit)
    from_env = (os.environ.get(CONFIG_ENV_VAR) or "").strip()
    if from_env:
        return Path(from_env)
    return Path(base_dir) / CONFIG_FILE_NAME


def resolve_secret_key(cfg):
    """Resolve the Flask secret key from env/config with a random fallback."""
    value = (os.environ.get("WATCHQUEUE_SECRET_KEY") or "").strip()
    if value:
        return value
    return cfg.get_str("WATCHQUEUE_SECRET_KEY", "") or secrets.token_hex(32)


def load_settings(cfg):
    """Build ``QueueSettings`` from a ``QueueConfig``."""
    data_dir = cfg.get_path("DATA_DIR", cfg.base_dir / "data")
    try:
        display_tz = ZoneInfo(cfg.get_str("DISPLAY_TZ", "UTC"))
    except (ZoneInfoNotFoundError, ValueError):
        display_tz = timezone.utc
    return QueueSettings(
        web_host=cfg.get_str("WEB_HOST", "127.0.0.1"),
        web_port=cfg.get_int("WEB_PORT", 8765, minimum=1),
        data_dir=data_dir,
        state_db_path=cfg.get_path("STATE_DB_PATH", data_dir / "watchqueue.sqlite3"),
        legacy_state_file=cfg.get_path("LEGACY_STATE_FILE", data_dir / "state.json"),
        log_dir=cfg.get_path("LOG_DIR", cfg.base_dir / "logs"),
        display_tz=display_tz,
        state_write_retries=cfg.get_int("STATE_WRITE_RETRIES", 3, minimum=0),
        auto_collect_cooldown_seconds=cfg.get_int("AUTO_COLLECT_COOLDOWN_SECONDS", 3600, minimum=0),
        secret_key=resolve_secret_key(cfg),
    )
