"""Utilities for loading client configuration from JSON or YAML files."""

from __future__ import annotations

import json
from pathlib import Path

try:
    import yaml
except ImportError:  # pragma: no cover - optional dependency
    yaml = None

from .config import ClientConfig


def load_config(path: str | Path) -> ClientConfig:
    """Load a :class:`ClientConfig` from a JSON or YAML file."""

    return ClientConfig.model_validate(_read_file(path))


def _read_file(path: str | Path) -> dict:
    payload = Path(path).read_text(encoding="utf-8")
    suffix = Path(path).suffix.lower()
    if suffix in {".yaml", ".yml"}:
        if yaml is None:
            raise RuntimeError("PyYAML is required for YAML configuration files")
        return yaml.safe_load(payload) or {}
    return json.loads(payload)


__all__ = ["load_config"]
