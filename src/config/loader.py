"""
Config loader: YAML file -> frozen dataclass tree.

Paths can be overridden from environment variables (AMW_BAR_STORE_PATH,
AMW_INDICATOR_CONFIG). The CLI loads a ``.env`` file before reading them.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

import yaml


@dataclass(frozen=True)
class DataConfig:
    bar_store_path: str = "data/bars.db"
    indicator_config: str = ""


@dataclass(frozen=True)
class LoggingConfig:
    structured_logs: bool = True
    level: str = "INFO"
    webhook_url: str = ""


@dataclass(frozen=True)
class AppConfig:
    symbol: str
    timeframe: str
    data: DataConfig
    logging: LoggingConfig = LoggingConfig()


def load_config(path: str | Path = "config.yaml") -> AppConfig:
    """
    Load configuration from a YAML file.

    Environment variables win over file values:
      - AMW_BAR_STORE_PATH   -> data.bar_store_path
      - AMW_INDICATOR_CONFIG -> data.indicator_config
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"Config file must be a YAML mapping, got {type(raw).__name__}")

    data_raw = raw.get("data") or {}
    data_cfg = DataConfig(
        bar_store_path=os.environ.get("AMW_BAR_STORE_PATH")
        or data_raw.get("bar_store_path", "data/bars.db"),
        indicator_config=os.environ.get("AMW_INDICATOR_CONFIG")
        or str(data_raw.get("indicator_config", "")),
    )

    log_raw = raw.get("logging") or {}
    level = str(log_raw.get("level", "INFO")).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"Unknown logging level: {level!r}")
    log_cfg = LoggingConfig(
        structured_logs=bool(log_raw.get("structured_logs", True)),
        level=level,
        webhook_url=str(log_raw.get("webhook_url", "")),
    )

    return AppConfig(
        symbol=raw.get("symbol", "SPY"),
        timeframe=str(raw.get("timeframe", "1d")),
        data=data_cfg,
        logging=log_cfg,
    )
