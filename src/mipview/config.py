"""Configuration schema and loading utilities.

Settings are stored as JSON (by default in ~/.mipview/config.json) and merged
over the built-in defaults from constants.py.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from mipview.constants import (
    DEFAULT_CLEAR_COLOR, DEFAULT_EXPORT_FORMAT, DEFAULT_FILTER_MODE,
    DEFAULT_LOAD_TIMEOUT, DEFAULT_MIP_STRATEGY, DEFAULT_OUTPUT_DIR,
    DEFAULT_TEXTURE_UNIT, FILTER_MODES, MAX_CONFIGURABLE_POWER,
    MIP_STRATEGIES, SQUARE_MAX_POWER,
)
from mipview.errors import ConfigError
from mipview.utils.path_resolver import get_config_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineConfig:
    """Settings shared by every stage of the texture pipeline."""

    max_power: int = SQUARE_MAX_POWER
    mip_strategy: str = DEFAULT_MIP_STRATEGY
    filter_mode: str = DEFAULT_FILTER_MODE
    clear_color: Tuple[float, float, float, float] = DEFAULT_CLEAR_COLOR
    texture_unit: int = DEFAULT_TEXTURE_UNIT
    export_format: str = DEFAULT_EXPORT_FORMAT
    output_dir: Path = Path(DEFAULT_OUTPUT_DIR)
    load_timeout: Optional[float] = DEFAULT_LOAD_TIMEOUT

    def __post_init__(self):
        if not 1 <= self.max_power <= MAX_CONFIGURABLE_POWER:
            raise ConfigError(
                f"max_power must be between 1 and {MAX_CONFIGURABLE_POWER}, got {self.max_power}"
            )
        if self.mip_strategy not in MIP_STRATEGIES:
            raise ConfigError(
                f"Unknown mip_strategy '{self.mip_strategy}'. Available: {', '.join(MIP_STRATEGIES)}"
            )
        if self.filter_mode not in FILTER_MODES:
            raise ConfigError(
                f"Unknown filter_mode '{self.filter_mode}'. Available: {', '.join(FILTER_MODES)}"
            )
        if len(self.clear_color) != 4:
            raise ConfigError("clear_color must have four components (r, g, b, a)")
        if self.texture_unit < 0:
            raise ConfigError("texture_unit must not be negative")
        if not self.export_format:
            raise ConfigError("export_format must not be empty")
        if self.load_timeout is not None and self.load_timeout <= 0:
            raise ConfigError("load_timeout must be positive (or null for no timeout)")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['clear_color'] = list(self.clear_color)
        data['output_dir'] = str(self.output_dir)
        return data


def _merge_dict(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge overrides into base without mutating either input."""

    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge_dict(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Optional[Path] = None, **overrides: Any) -> PipelineConfig:
    """Load configuration from JSON and apply defaults.
    
    Args:
        path: JSON file to read. None reads nothing and uses the defaults.
        **overrides: Values applied on top of the file (e.g. from CLI flags).
            Entries that are None are ignored.
    
    Raises:
        ConfigError: If the file is unreadable or holds invalid values.
    """
    base = PipelineConfig().to_dict()

    if path:
        try:
            raw = json.loads(Path(path).read_text(encoding='utf-8'))
        except (OSError, ValueError) as e:
            raise ConfigError(f"Error loading config {path}: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"Config {path} must contain a JSON object")
        unknown = set(raw) - set(base)
        if unknown:
            logger.warning("Ignoring unknown config keys: %s", ", ".join(sorted(unknown)))
        merged = _merge_dict(base, {k: v for k, v in raw.items() if k in base})
    else:
        merged = base

    merged = _merge_dict(merged, {k: v for k, v in overrides.items() if v is not None})

    try:
        timeout = merged.get('load_timeout')
        return PipelineConfig(
            max_power=int(merged['max_power']),
            mip_strategy=str(merged['mip_strategy']),
            filter_mode=str(merged['filter_mode']),
            clear_color=tuple(float(c) for c in merged['clear_color']),
            texture_unit=int(merged['texture_unit']),
            export_format=str(merged['export_format']).lower().lstrip('.'),
            output_dir=Path(merged['output_dir']),
            load_timeout=float(timeout) if timeout is not None else None,
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid config value: {e}") from e


def load_user_config(**overrides: Any) -> PipelineConfig:
    """Load ~/.mipview/config.json if it exists, else the defaults."""
    path = get_config_path()
    return load_config(path if path.exists() else None, **overrides)


def save_config(config: PipelineConfig, path: Optional[Path] = None) -> Path:
    """Save configuration as JSON, creating the directory if needed."""
    path = Path(path) if path else get_config_path()
    os.makedirs(path.parent, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(config.to_dict(), f, indent=2)
    return path
