"""Environment-backed configuration and Supabase client construction."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv
from supabase import Client, create_client

DEFAULT_ORIGIN = "http://localhost:8000"
PORTFOLIO_PATH = "/portfolio.html"

_TRUTHY = {"1", "true", "yes", "on"}


class ConfigError(Exception):
    """Raised when the gateway cannot be configured."""


def _default_session_path() -> Path:
    return Path.home() / ".portfolio_gateway" / "session.json"


@dataclass
class GatewayConfig:
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    origin: str = DEFAULT_ORIGIN
    session_path: Optional[Path] = field(default_factory=_default_session_path)
    export_dir: Optional[Path] = None
    # Adds a profile_id filter to update/delete so callers can only touch their own rows
    enforce_ownership: bool = False


def load_config(env: Optional[Mapping[str, str]] = None) -> GatewayConfig:
    """
    Build a GatewayConfig from environment variables.

    A ``.env`` file in the working directory is loaded first when reading
    from the real process environment.

    Args:
        env: Mapping to read instead of ``os.environ`` (used by tests)

    Returns:
        Populated GatewayConfig
    """
    if env is None:
        load_dotenv()
        env = os.environ

    session_path = env.get("PORTFOLIO_SESSION_PATH")
    export_dir = env.get("PORTFOLIO_EXPORT_DIR")
    origin = (env.get("PORTFOLIO_ORIGIN") or DEFAULT_ORIGIN).rstrip("/")

    return GatewayConfig(
        supabase_url=env.get("SUPABASE_URL"),
        supabase_key=env.get("SUPABASE_KEY") or env.get("SUPABASE_ANON_KEY"),
        origin=origin,
        session_path=Path(session_path).expanduser() if session_path else _default_session_path(),
        export_dir=Path(export_dir).expanduser() if export_dir else None,
        enforce_ownership=(env.get("PORTFOLIO_ENFORCE_OWNERSHIP", "").strip().lower() in _TRUTHY),
    )


def create_supabase_client(config: GatewayConfig) -> Client:
    if not config.supabase_url or not config.supabase_key:
        raise ConfigError("Supabase credentials missing. Set SUPABASE_URL and SUPABASE_KEY.")
    try:
        return create_client(config.supabase_url, config.supabase_key)
    except Exception as exc:
        raise ConfigError(f"Failed to initialize Supabase client: {exc}") from exc
