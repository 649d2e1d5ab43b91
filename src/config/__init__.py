"""
Configuration loaders.

App config:        reads config.yaml, resolves env var overrides.
Indicator config:  reads amw.default.json (or override), validates against JSON Schema.
"""

from config.amw_config import (
    AMWConfigError,
    AMWTrendConfig,
    BranchConfig,
    load_amw_config,
)
from config.loader import (
    AppConfig,
    DataConfig,
    LoggingConfig,
    load_config,
)

__all__ = [
    # App config (YAML)
    "AppConfig",
    "DataConfig",
    "LoggingConfig",
    "load_config",
    # Indicator config (JSON + schema)
    "AMWConfigError",
    "AMWTrendConfig",
    "BranchConfig",
    "load_amw_config",
]
