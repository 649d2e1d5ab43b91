"""
AMW indicator config loader: JSON file -> frozen dataclass tree, validated against JSON Schema.

Default values:      docs/config/amw.default.json
Schema:              docs/config/amw_config.schema.json

Per-symbol overrides: place a partial JSON file named ``amw.{SYMBOL}.json``
next to the default config (e.g. ``docs/config/amw.ES.json``). Only the
keys you want to override need to be present; they are deep-merged on top
of the base config before schema validation.

Usage:
    from config.amw_config import load_amw_config
    cfg = load_amw_config()                        # loads default
    cfg = load_amw_config(symbol="ES")             # merges amw.ES.json if present
    cfg = load_amw_config("my_overrides.json")     # loads custom file
    cfg.long.multiple  # -> Decimal("2.6")
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any

import jsonschema

from amw_core.smoothing import MovingAverageType

logger = logging.getLogger("amw.config")

# ---------------------------------------------------------------------------
# Project root detection (walk up from this file to find pyproject.toml)
# ---------------------------------------------------------------------------


def _find_project_root() -> Path:
    """Walk up from this file looking for pyproject.toml.

    When running from source, finds the repo root.  When installed as a
    package, pyproject.toml won't exist; fall back to CWD.
    """
    candidate = Path(__file__).resolve().parent
    for _ in range(10):
        if (candidate / "pyproject.toml").exists():
            return candidate
        parent = candidate.parent
        if parent == candidate:
            break
        candidate = parent
    return Path.cwd()


_PROJECT_ROOT = _find_project_root()

DEFAULT_CONFIG_PATH = _PROJECT_ROOT / "docs" / "config" / "amw.default.json"
DEFAULT_SCHEMA_PATH = _PROJECT_ROOT / "docs" / "config" / "amw_config.schema.json"


# ---------------------------------------------------------------------------
# Frozen dataclass tree mirroring amw.default.json structure exactly
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BranchConfig:
    """Smoothing and multiplier for one side (long or short)."""
    period: int
    multiple: Decimal
    smoothing: MovingAverageType = MovingAverageType.WILDERS


@dataclass(frozen=True)
class AMWTrendConfig:
    """Top-level AMW indicator configuration."""
    version: str = "1.0"
    long: BranchConfig = field(
        default_factory=lambda: BranchConfig(20, Decimal("2.6"))
    )
    short: BranchConfig = field(
        default_factory=lambda: BranchConfig(20, Decimal("2.9"))
    )


# ---------------------------------------------------------------------------
# Deep merge for per-symbol overrides
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge *overrides* into a copy of *base*.

    - Dict values are merged recursively (override keys win).
    - Non-dict values in overrides replace the base value.
    - Keys in base that are absent from overrides are preserved.
    """
    merged = dict(base)
    for key, val in overrides.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(val, dict):
            merged[key] = _deep_merge(merged[key], val)
        else:
            merged[key] = val
    return merged


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------


class AMWConfigError(Exception):
    """Raised when AMW config loading or validation fails."""


def _validate_schema(data: dict[str, Any], schema_path: Path) -> None:
    """Validate *data* against the JSON Schema at *schema_path*."""
    if not schema_path.exists():
        raise AMWConfigError(f"Schema file not found: {schema_path}")
    with open(schema_path) as f:
        schema = json.load(f)
    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as exc:
        raise AMWConfigError(f"AMW config validation failed: {exc.message}") from exc


def _build_branch(raw: dict[str, Any]) -> BranchConfig:
    return BranchConfig(
        # the schema accepts 20.0 as an integer
        period=int(raw["period"]),
        # str() keeps 2.6 from becoming 2.600000000000000088817841970012523
        multiple=Decimal(str(raw["multiple"])),
        smoothing=MovingAverageType.parse(raw.get("smoothing", "WILDERS")),
    )


def _build_config(data: dict[str, Any]) -> AMWTrendConfig:
    """Convert a raw dict (already validated) into the frozen dataclass tree."""
    return AMWTrendConfig(
        version=data["version"],
        long=_build_branch(data["long"]),
        short=_build_branch(data["short"]),
    )


def load_amw_config(
    config_path: str | Path | None = None,
    schema_path: str | Path | None = None,
    symbol: str | None = None,
) -> AMWTrendConfig:
    """Load and validate AMW indicator configuration.

    Parameters
    ----------
    config_path:
        Path to an AMW JSON config file.  Defaults to ``docs/config/amw.default.json``.
    schema_path:
        Path to the JSON Schema file.  Defaults to ``docs/config/amw_config.schema.json``.
    symbol:
        Optional ticker symbol.  When provided, the loader looks for a
        per-symbol override file ``amw.{SYMBOL}.json`` in the same directory
        as the base config and deep-merges it before validation.  A missing
        override file is not an error.

    Returns
    -------
    AMWTrendConfig
        Frozen dataclass tree with both branch parameter sets.

    Raises
    ------
    AMWConfigError
        If the file is missing, unparseable, or fails schema validation.
    """
    cfg_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    sch_path = Path(schema_path) if schema_path else DEFAULT_SCHEMA_PATH

    if not cfg_path.exists():
        raise AMWConfigError(f"AMW config file not found: {cfg_path}")

    try:
        with open(cfg_path) as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise AMWConfigError(f"AMW config is not valid JSON: {exc}") from exc

    if symbol:
        override_path = cfg_path.parent / f"amw.{symbol.upper()}.json"
        if override_path.exists():
            try:
                with open(override_path) as f:
                    overrides = json.load(f)
            except json.JSONDecodeError as exc:
                raise AMWConfigError(
                    f"Per-symbol config {override_path.name} is not valid JSON: {exc}"
                ) from exc
            data = _deep_merge(data, overrides)
            logger.info("Loaded per-symbol config: %s", override_path.name)
        else:
            logger.debug("No per-symbol config found at %s, using defaults", override_path)

    _validate_schema(data, sch_path)

    return _build_config(data)
