"""
Runtime Configuration Module

Provides configuration loading and management for Arbor.
"""

from .runtime import (
    ENV_PREFIX,
    RuntimeConfig,
    load_config,
    get_default_config,
    set_default_config,
    get_default_config_template,
)

__all__ = [
    "ENV_PREFIX",
    "RuntimeConfig",
    "load_config",
    "get_default_config",
    "set_default_config",
    "get_default_config_template",
]
