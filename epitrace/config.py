"""Configuration for contact tracing runs."""

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

from .errors import InvalidArgument


@dataclass(frozen=True)
class TraceConfig:
    """Defaults applied when a query leaves a parameter unset."""

    days: int = 90
    max_distance: int | None = None
    workers: int = 1
    chunk_size: int | None = None
    date_format: str = "%Y-%m-%d"

    def resolve_workers(self, workers: int | None = None) -> int:
        """Return the worker count to use, never below 1."""
        value = self.workers if workers is None else workers
        return max(1, value)

    def resolve_max_distance(self, max_distance: int | None = None) -> int | None:
        """Return the hop cutoff to use; 0 and None both mean unlimited."""
        value = self.max_distance if max_distance is None else max_distance
        if not value:
            return None
        return value


DEFAULT_TRACE_CONFIG = TraceConfig()

_OPTIONAL_INT = {"max_distance", "chunk_size"}


def _check_value(name: str, value: Any) -> None:
    if name == "date_format":
        if not isinstance(value, str) or not value:
            raise InvalidArgument(f"Config '{name}' must be a non-empty string")
        return

    if value is None and name in _OPTIONAL_INT:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"Config '{name}' must be an integer, got {value!r}")
    if value < 0:
        raise InvalidArgument(f"Config '{name}' must not be negative, got {value}")


def config_from_mapping(
    data: dict[str, Any], base: TraceConfig = DEFAULT_TRACE_CONFIG
) -> TraceConfig:
    """Overlay a mapping of settings on top of ``base``."""
    known = {f.name for f in fields(TraceConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise InvalidArgument(f"Unknown config keys: {', '.join(unknown)}")

    for name, value in data.items():
        _check_value(name, value)
    return replace(base, **data)


def load_config(path: str | Path) -> TraceConfig:
    """Load a YAML config file.

    Args:
        path: File holding a YAML mapping of ``TraceConfig`` fields

    Returns:
        TraceConfig with the file's values over the defaults
    """
    config_path = Path(path)
    if not config_path.exists():
        raise InvalidArgument(f"Config file not found: {config_path}")

    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise InvalidArgument(f"Invalid YAML in {config_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise InvalidArgument(f"Config {config_path} must contain a mapping")
    return config_from_mapping(data)
