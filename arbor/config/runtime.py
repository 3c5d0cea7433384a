"""
Runtime Configuration

Central configuration for tree construction and the CLI.

Sources, lowest to highest precedence:
- Dataclass defaults
- JSON config file
- Environment variables (a .env file is loaded first)
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from arbor.crypto.hashing import DEFAULT_HASH_ALGORITHM, HashFunction, get_hash_function
from arbor.merkle.insert import InsertStrategy

load_dotenv()


# Environment variable prefix
ENV_PREFIX = "ARBOR_"

DEFAULT_CONFIG_PATHS = (
    Path("arbor.json"),
    Path(".arbor.json"),
    Path.home() / ".config" / "arbor" / "config.json",
)


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables
    - JSON file
    - Programmatic construction
    """
    hash_algorithm: str = DEFAULT_HASH_ALGORITHM
    insert_strategy: str = InsertStrategy.REBUILD.value

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # Output
    output_format: str = "human"  # "human" or "json"

    def __post_init__(self) -> None:
        # Fail at load time rather than on first use
        get_hash_function(self.hash_algorithm)
        self.insert_strategy = InsertStrategy(self.insert_strategy).value
        if self.output_format not in ("human", "json"):
            raise ValueError(f"output_format must be 'human' or 'json', got {self.output_format!r}")

    def hash_function(self) -> HashFunction:
        """Resolve the configured hash callable."""
        return get_hash_function(self.hash_algorithm)

    def strategy(self) -> InsertStrategy:
        return InsertStrategy(self.insert_strategy)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        Supported variables:
        - ARBOR_HASH_ALGORITHM: sha256, sha3_256, blake2b_256
        - ARBOR_INSERT_STRATEGY: rebuild or incremental
        - ARBOR_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR
        - ARBOR_LOG_FILE: also log to this file
        - ARBOR_OUTPUT_FORMAT: human or json
        """
        overrides: dict[str, Any] = {}
        for key in ("hash_algorithm", "insert_strategy", "log_level", "log_file", "output_format"):
            value = os.getenv(f"{ENV_PREFIX}{key.upper()}")
            if value:
                overrides[key] = value
        return overrides

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data, ignores unknown keys)."""
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """Load configuration purely from environment variables."""
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_file(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Config file must hold a JSON object: {path}")
        return cls.from_dict(data)

    def with_env_overrides(self) -> "RuntimeConfig":
        """Return a new config with environment variable overrides applied."""
        overrides = self._get_env_overrides()
        if not overrides:
            return self
        return self.from_dict({**self.to_dict(), **overrides})

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return asdict(self)


def load_config(config_path: Path | None = None) -> RuntimeConfig:
    """
    Load configuration from file and/or environment.

    Environment variables override file settings. Without an explicit
    path the first existing default location is used.

    Args:
        config_path: Optional path to a JSON config file

    Returns:
        Merged configuration
    """
    config = RuntimeConfig()

    if config_path is not None:
        config = RuntimeConfig.from_file(config_path)
    else:
        for default_path in DEFAULT_CONFIG_PATHS:
            if default_path.exists():
                config = RuntimeConfig.from_file(default_path)
                break

    return config.with_env_overrides()


def get_default_config_template() -> str:
    """Get a template configuration file."""
    return json.dumps(RuntimeConfig().to_dict(), indent=2)


# Global default configuration
_default_config: Optional[RuntimeConfig] = None


def get_default_config() -> RuntimeConfig:
    """Get the default runtime configuration."""
    global _default_config
    if _default_config is None:
        _default_config = RuntimeConfig.from_env()
    return _default_config


def set_default_config(config: RuntimeConfig | None) -> None:
    """Set (or with None, reset) the default runtime configuration."""
    global _default_config
    _default_config = config
