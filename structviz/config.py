"""Runtime configuration for hosts driving the data structures.

Configuration files may be JSON or YAML (``.yaml``/``.yml``) and contain any
subset of the :class:`VisualizerConfig` fields; omitted fields keep their
defaults.  Validation happens eagerly so a malformed file fails before any
structure is created.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .animation.player import DEFAULT_INTERVAL
from .structures.binary_heap import HeapKind
from .structures.hash_table import (
    DEFAULT_CAPACITY,
    MAX_CAPACITY,
    MIN_CAPACITY,
    CollisionStrategy,
)

logger = logging.getLogger(__name__)

__all__ = [
    "ConfigError",
    "VisualizerConfig",
    "load_config",
]


class ConfigError(ValueError):
    """Raised when a configuration payload is invalid."""


@dataclass(frozen=True)
class VisualizerConfig:
    """Defaults and bounds shared by the CLI and embedding hosts."""

    step_interval: float = DEFAULT_INTERVAL
    table_capacity: int = DEFAULT_CAPACITY
    min_capacity: int = MIN_CAPACITY
    max_capacity: int = MAX_CAPACITY
    collision_strategy: CollisionStrategy = CollisionStrategy.CHAINING
    heap_kind: HeapKind = HeapKind.MIN
    tombstones: bool = False
    prefer_native: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.step_interval, bool) or not isinstance(self.step_interval, (int, float)):
            raise ConfigError("step_interval must be a number")
        if self.step_interval < 0:
            raise ConfigError("step_interval must be non-negative")
        for name in ("table_capacity", "min_capacity", "max_capacity"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"{name} must be an integer")
        if not 1 <= self.min_capacity <= self.max_capacity:
            raise ConfigError("capacity bounds must satisfy 1 <= min_capacity <= max_capacity")
        if not self.min_capacity <= self.table_capacity <= self.max_capacity:
            raise ConfigError(
                f"table_capacity must be between {self.min_capacity} and {self.max_capacity}"
            )
        for name in ("tombstones", "prefer_native"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigError(f"{name} must be a boolean")
        try:
            object.__setattr__(self, "collision_strategy", CollisionStrategy(self.collision_strategy))
            object.__setattr__(self, "heap_kind", HeapKind(self.heap_kind))
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc

    @property
    def capacity_bounds(self) -> tuple[int, int]:
        return (self.min_capacity, self.max_capacity)

    def with_overrides(self, **overrides: Any) -> "VisualizerConfig":
        """Return a copy with the non-``None`` *overrides* applied."""

        applied = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **applied)

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["collision_strategy"] = self.collision_strategy.value
        payload["heap_kind"] = self.heap_kind.value
        return payload


def _parse_payload(path: Path) -> Mapping[str, Any]:
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in {".yaml", ".yml"}:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Failed to parse configuration file {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigError("Configuration root must be a mapping")
    return data


def load_config(path: Optional[str | Path]) -> VisualizerConfig:
    """Load a :class:`VisualizerConfig` from *path*; ``None`` yields defaults."""

    if path is None:
        return VisualizerConfig()
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Configuration file {config_path} does not exist")

    payload = _parse_payload(config_path)
    known = {field.name for field in fields(VisualizerConfig)}
    unknown = sorted(set(payload) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    config = VisualizerConfig(**payload)
    logger.debug("Loaded configuration from %s: %s", config_path, config.to_dict())
    return config
