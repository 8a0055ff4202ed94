"""Engine settings, optionally overridden by the `engine:` section of a YAML file."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "DEMAND_ENGINE_CONFIG"


@dataclass(frozen=True)
class EngineSettings:
    decimals: int = 3

    # Warnings
    low_diversity_threshold: float = 0.1
    high_connected_load_kw: float = 500.0
    very_high_connected_load_kw: float = 1000.0
    high_voltage_v: float = 480.0

    # Validation limits
    max_load_per_category_kw: float = 10000.0
    max_future_expansion: float = 1.0
    min_power_factor: float = 0.1
    max_power_factor: float = 1.0

    # Sizing
    breaker_sizing_factor: float = 1.25  # NEC 210.20(A) continuous allowance
    continuous_load_factor: float = 1.25
    default_kitchen_equipment_units: int = 4

    # History collaborator
    history_limit: int = 50


def _read_engine_section(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}
    if not isinstance(cfg, dict):
        raise ValueError(f"Settings file must hold a mapping: {path}")
    section = cfg.get("engine") or {}
    if not isinstance(section, dict):
        raise ValueError(f"'engine' section must be a mapping: {path}")
    return section


def settings_from_dict(overrides: Dict[str, Any]) -> EngineSettings:
    known = {f.name for f in fields(EngineSettings)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ValueError(f"Unknown engine setting(s): {', '.join(unknown)}")

    settings = replace(EngineSettings(), **overrides)

    if settings.breaker_sizing_factor < 1.0:
        raise ValueError("breaker_sizing_factor must be >= 1.0")
    if settings.decimals < 0:
        raise ValueError("decimals must be >= 0")
    if settings.history_limit < 1:
        raise ValueError("history_limit must be >= 1")
    return settings


def load_settings(path: Optional[Union[str, Path]] = None) -> EngineSettings:
    if path is None:
        env_path = os.getenv(CONFIG_ENV_VAR, "").strip()
        if not env_path:
            return EngineSettings()
        path = env_path

    cfg_path = Path(path)
    settings = settings_from_dict(_read_engine_section(cfg_path))
    logger.info("Loaded engine settings from %s", cfg_path)
    return settings
