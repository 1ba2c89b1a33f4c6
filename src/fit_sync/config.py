"""Runtime configuration read from the environment."""

import os
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigError

DEFAULT_DATA_DIR = Path.cwd() / "data"
DEFAULT_DEBOUNCE_SECONDS = 1.2
DEFAULT_HTTP_TIMEOUT = 15.0


@dataclass(frozen=True)
class Settings:
    """fit-sync settings.

    Environment variables:
        FIT_SYNC_DATA_DIR: directory for local files (default ``./data``)
        FIT_SYNC_SUPABASE_URL: project URL, e.g. ``https://xyz.supabase.co``
        FIT_SYNC_SUPABASE_ANON_KEY: public anon API key
        FIT_SYNC_DEBOUNCE_SECONDS: quiet period before a push (default 1.2)
        FIT_SYNC_HTTP_TIMEOUT: per-request timeout in seconds (default 15)
    """

    data_dir: Path = DEFAULT_DATA_DIR
    supabase_url: str = ""
    supabase_anon_key: str = ""
    debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS
    http_timeout: float = DEFAULT_HTTP_TIMEOUT

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ

        data_dir = env.get("FIT_SYNC_DATA_DIR")
        return cls(
            data_dir=Path(data_dir).expanduser() if data_dir else DEFAULT_DATA_DIR,
            supabase_url=env.get("FIT_SYNC_SUPABASE_URL", "").rstrip("/"),
            supabase_anon_key=env.get("FIT_SYNC_SUPABASE_ANON_KEY", ""),
            debounce_seconds=_float_setting(
                env, "FIT_SYNC_DEBOUNCE_SECONDS", DEFAULT_DEBOUNCE_SECONDS
            ),
            http_timeout=_float_setting(env, "FIT_SYNC_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),
        )

    def require_remote(self) -> None:
        """Raise ConfigError unless the Supabase project is configured."""
        missing = [
            name
            for name, value in (
                ("FIT_SYNC_SUPABASE_URL", self.supabase_url),
                ("FIT_SYNC_SUPABASE_ANON_KEY", self.supabase_anon_key),
            )
            if not value
        ]
        if missing:
            raise ConfigError(f"Missing configuration: {', '.join(missing)}")


def _float_setting(env, name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if value < 0:
        raise ConfigError(f"{name} must not be negative")
    return value
