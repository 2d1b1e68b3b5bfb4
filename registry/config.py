"""
Runtime configuration, read from environment variables.

A .env file in the working directory is loaded first, so local
development works without exporting anything by hand.

load_settings() raises ConfigError when a required value is missing.
The app calls it during startup, so a misconfigured deployment dies
immediately instead of failing on the first request.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from registry.errors import ConfigError

PROJECT_DIR = Path(__file__).resolve().parent.parent

BACKENDS = ("file", "supabase")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    admin_username: str
    admin_password: str
    storage_backend: str = "file"
    data_file: Path = PROJECT_DIR / "data.json"
    supabase_url: str | None = None
    supabase_key: str | None = None
    supabase_table: str = "submissions"
    supabase_timeout: float = 30.0
    session_ttl_hours: float = 24.0
    session_sweep_seconds: float = 600.0
    log_level: str = "INFO"


def _default_data_file() -> Path:
    # Serverless deployments only allow writes under /tmp
    if os.getenv("VERCEL"):
        return Path("/tmp") / "data.json"
    return PROJECT_DIR / "data.json"


def _float_env(name: str, default: float) -> float:
    """Positive number from the environment, or `default` when unset."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be greater than zero, got {raw!r}")
    return value


def _log_level_env() -> str:
    level = (os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    if level not in LOG_LEVELS:
        raise ConfigError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {level!r}")
    return level


def load_settings() -> Settings:
    """Build Settings from the environment (after loading .env)."""
    load_dotenv()

    admin_password = os.getenv("ADMIN_PASSWORD")
    if not admin_password:
        raise ConfigError("ADMIN_PASSWORD is not set")

    supabase_url = os.getenv("SUPABASE_URL") or None
    supabase_key = os.getenv("SUPABASE_KEY") or None

    backend = (os.getenv("STORAGE_BACKEND") or ("supabase" if supabase_url else "file")).lower()
    if backend not in BACKENDS:
        raise ConfigError(f"STORAGE_BACKEND must be one of {', '.join(BACKENDS)}, got {backend!r}")

    if backend == "supabase":
        missing = [n for n, v in (("SUPABASE_URL", supabase_url), ("SUPABASE_KEY", supabase_key)) if not v]
        if missing:
            raise ConfigError(f"{', '.join(missing)} required for the supabase backend")

    data_file = os.getenv("DATA_FILE")

    return Settings(
        admin_username=os.getenv("ADMIN_USERNAME") or "admin",
        admin_password=admin_password,
        storage_backend=backend,
        data_file=Path(data_file) if data_file else _default_data_file(),
        supabase_url=supabase_url,
        supabase_key=supabase_key,
        supabase_table=os.getenv("SUPABASE_TABLE") or "submissions",
        supabase_timeout=_float_env("SUPABASE_TIMEOUT", 30.0),
        session_ttl_hours=_float_env("SESSION_TTL_HOURS", 24.0),
        session_sweep_seconds=_float_env("SESSION_SWEEP_SECONDS", 600.0),
        log_level=_log_level_env(),
    )
