"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var, require_env_vars
from .errors import ConfigurationError, InvalidConfigurationError, MissingConfigurationError
from .seeding import DUPLICATE_POLICY_ENV_VAR, SeedingConfig, get_seeding_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "DUPLICATE_POLICY_ENV_VAR",
    "ConfigurationError",
    "DatabaseConfig",
    "InvalidConfigurationError",
    "MissingConfigurationError",
    "SeedingConfig",
    "StorageConfig",
    "get_database_config",
    "get_seeding_config",
    "get_storage_config",
    "optional_env_var",
    "require_env_vars",
]
