"""Configuration manager for depgraph using TOML files."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import toml

from . import config

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when a configuration value is out of range."""


@dataclass
class GraphConfig:
    """Tunable settings for extraction, resolution and graph metrics."""

    extensions: List[str] = field(default_factory=lambda: list(config.DEFAULT_EXTENSIONS))
    python_extensions: List[str] = field(default_factory=lambda: list(config.PYTHON_EXTENSIONS))
    min_cluster_size: int = config.DEFAULT_MIN_CLUSTER_SIZE
    damping_factor: float = config.DEFAULT_DAMPING_FACTOR
    max_iterations: int = config.DEFAULT_MAX_ITERATIONS
    tolerance: float = config.DEFAULT_TOLERANCE
    bridge_top_k: int = config.DEFAULT_BRIDGE_TOP_K
    max_mermaid_nodes: int = config.DEFAULT_MAX_MERMAID_NODES
    workers: int = 1

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        if not 0.0 < self.damping_factor < 1.0:
            raise ConfigError(f"damping_factor must be in (0, 1), got {self.damping_factor}")
        if self.max_iterations < 1:
            raise ConfigError(f"max_iterations must be positive, got {self.max_iterations}")
        if self.tolerance <= 0:
            raise ConfigError(f"tolerance must be positive, got {self.tolerance}")
        if self.min_cluster_size < 1:
            raise ConfigError(f"min_cluster_size must be at least 1, got {self.min_cluster_size}")
        if self.bridge_top_k < 0:
            raise ConfigError(f"bridge_top_k must not be negative, got {self.bridge_top_k}")
        if self.workers < 1:
            raise ConfigError(f"workers must be at least 1, got {self.workers}")
        for ext in self.extensions + self.python_extensions:
            if not ext.startswith("."):
                raise ConfigError(f"extensions must start with '.', got {ext!r}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GraphConfig":
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            if key in known:
                kwargs[key] = value
            else:
                logger.warning("Ignoring unknown graph config key '%s'", key)
        return cls(**kwargs)


def load_full_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load the entire TOML config (all sections)."""
    config_file = path or config.CONFIG_FILE
    if not config_file.exists():
        return {}
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Could not read config %s: %s", config_file, exc)
        return {}


def load_graph_config(path: Optional[Path] = None) -> GraphConfig:
    """Load the ``[graph]`` section, falling back to defaults.

    Raises:
        ConfigError: if a value in the file is out of range.
    """
    section = load_full_config(path).get("graph", {})
    return GraphConfig.from_dict(section)


def save_graph_config(graph_config: GraphConfig, path: Optional[Path] = None) -> bool:
    """Write ``[graph]`` to the TOML file, preserving other sections.

    Returns:
        True if saved successfully, False otherwise
    """
    config_file = path or config.CONFIG_FILE
    full = load_full_config(config_file)
    full["graph"] = graph_config.to_dict()
    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(config_file, "w", encoding="utf-8") as f:
            toml.dump(full, f)
        return True
    except OSError as exc:
        logger.warning("Could not write config %s: %s", config_file, exc)
        return False
