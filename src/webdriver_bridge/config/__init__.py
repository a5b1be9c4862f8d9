"""Configuration management for driver services and sessions."""

from .environment import get_env_config

from .options import ServiceConfig

from .paths import (
    get_log_dir,
    driver_log_path,
    cli_log_path,
)

__all__ = [
    "get_env_config",
    "ServiceConfig",
    "get_log_dir",
    "driver_log_path",
    "cli_log_path",
]
