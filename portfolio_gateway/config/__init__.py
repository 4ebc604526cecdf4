from .config_manager import (
    DEFAULT_ORIGIN,
    PORTFOLIO_PATH,
    ConfigError,
    GatewayConfig,
    create_supabase_client,
    load_config,
)

__all__ = [
    "DEFAULT_ORIGIN",
    "PORTFOLIO_PATH",
    "ConfigError",
    "GatewayConfig",
    "create_supabase_client",
    "load_config",
]
