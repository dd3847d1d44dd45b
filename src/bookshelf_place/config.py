"""Run configuration, optionally loaded from YAML.

Example file:

    log_level: INFO
    parallel: true
    placer:
      order: area
      tolerance: 1.0e-6
    render:
      output: layout.ps
      draw_nets: false
"""

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging

import yaml

from .errors import ConfigError
from .placer.block_placer import PlacerConfig
from .render.layout import RenderConfig

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class RunConfig:
    """Configuration for one read / place / render run."""
    placer: PlacerConfig = field(default_factory=PlacerConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    parallel: bool = False
    log_level: str = "INFO"
    log_file: Optional[str] = None
    write_dir: Optional[str] = None

    def __post_init__(self):
        self.log_level = str(self.log_level).upper()
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"Unknown log level {self.log_level}")

    @property
    def level(self) -> int:
        return getattr(logging, self.log_level)


def _build(cls, data: Dict[str, Any], section: str):
    if not isinstance(data, dict):
        raise ConfigError(f"Section '{section}' must be a mapping")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown keys in '{section}': {', '.join(unknown)}")
    try:
        return cls(**data)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid '{section}' configuration: {e}") from e


def config_from_dict(data: Optional[Dict[str, Any]]) -> RunConfig:
    data = dict(data or {})
    placer = _build(PlacerConfig, data.pop("placer", None) or {}, "placer")
    render = _build(RenderConfig, data.pop("render", None) or {}, "render")
    return _build(RunConfig, {**data, "placer": placer, "render": render}, "root")


def load_config(path: Union[str, Path]) -> RunConfig:
    """Load a RunConfig from a YAML file.

    Raises:
        ConfigError: Unreadable file, invalid YAML or unknown keys
    """
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    logger.debug(f"Loaded config from {path}")
    return config_from_dict(data)


def override(config: RunConfig, **changes: Any) -> RunConfig:
    """Copy of config with non-None top-level values replaced."""
    changes = {k: v for k, v in changes.items() if v is not None}
    return replace(config, **changes)
