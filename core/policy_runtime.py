"""Configuration bootstrapping for the engines."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger("planwise.config")

ENGINE_SECTIONS = ("planner", "risk", "memory")


def load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML from file, returning empty mapping when missing."""
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    return data


def merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge dictionaries."""
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_effective_config(root: Path, overrides: Path | None = None) -> dict[str, Any]:
    """Load ``config/default.yaml`` under root, then an optional override file."""
    merged = load_yaml(root / "config" / "default.yaml")
    if overrides is not None:
        merged = merge_dicts(merged, load_yaml(overrides))
    for section in ENGINE_SECTIONS:
        value = merged.setdefault(section, {})
        if not isinstance(value, dict):
            raise ValueError(f"Config section '{section}' must be a mapping.")
    logger.debug("Effective config sections: %s", sorted(merged))
    return merged


def section(config: dict[str, Any], name: str) -> dict[str, Any]:
    """Return one engine section of the effective config."""
    return dict(config.get(name, {}) or {})
