"""Configuration models and loading for hookline."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

from hookline.models import DEFAULT_PRIORITY

CONFIG_FILENAME = ".hookline.yaml"


class HooklineConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    default_priority: int = DEFAULT_PRIORITY
    # Re-sort any list-shaped result by its elements' priority, not only lists built by push/add helpers.
    sort_list_results: bool = True
    fallback_origin: str = Field(default="no-origin", min_length=1)
    key_prefix: str = "key_"
    digest_size: int = Field(default=20, ge=1, le=64)
    log_level: str = "INFO"


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    data = yaml.safe_load(path.read_text())
    if data is not None and not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data or {}


def load_effective_config(
    project_path: str | Path,
    system_defaults: dict[str, Any] | None = None,
    runtime_override: dict[str, Any] | None = None,
) -> HooklineConfig:
    """Load config with precedence runtime > project .hookline.yaml > system."""
    project_config = _load_yaml(Path(project_path) / CONFIG_FILENAME)

    merged: dict[str, Any] = {}
    for layer in (system_defaults, project_config, runtime_override):
        if layer:
            merged = _deep_merge(merged, layer)

    return HooklineConfig.model_validate(merged)
