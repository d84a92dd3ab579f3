"""Process-wide filter registry and applied-result cache."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

from hookline.config import HooklineConfig, load_effective_config
from hookline.models import FilterEntry, FilterValue

logger = logging.getLogger(__name__)


class FilterContext:
    """Owns the registry (hook -> identity key -> entry) and the applied cache."""

    def __init__(self, config: HooklineConfig | None = None) -> None:
        self.config = config or HooklineConfig()
        self._filters: dict[str, dict[str, FilterEntry]] = {}
        self._applied: dict[str, Any] = {}

    @classmethod
    def from_project(
        cls,
        project_path: str | Path,
        system_defaults: dict[str, Any] | None = None,
        runtime_override: dict[str, Any] | None = None,
    ) -> FilterContext:
        config = load_effective_config(
            project_path,
            system_defaults=system_defaults,
            runtime_override=runtime_override,
        )
        return cls(config=config)

    def register(
        self,
        hook_id: str,
        identity_key: str,
        callback: FilterValue,
        context: object | None = None,
        priority: int | float | None = None,
    ) -> None:
        entries = self._filters.setdefault(hook_id, {})
        if identity_key in entries:
            logger.debug("Replacing filter %s on hook %s", identity_key, hook_id)
        entries[identity_key] = FilterEntry(
            hook_id=hook_id,
            identity_key=identity_key,
            callback=callback,
            context=context,
            priority=self.config.default_priority if priority is None else priority,
        )

    def count(self, hook_id: str) -> int:
        return len(self._filters.get(hook_id, {}))

    def entries(self, hook_id: str) -> list[FilterEntry]:
        return list(self._filters.get(hook_id, {}).values())

    def hooks(self) -> list[str]:
        return [hook_id for hook_id, entries in self._filters.items() if entries]

    def snapshot(self) -> Mapping[str, Mapping[str, FilterEntry]]:
        return MappingProxyType({hook_id: MappingProxyType(dict(entries)) for hook_id, entries in self._filters.items()})

    def applied_snapshot(self) -> Mapping[str, Any]:
        return MappingProxyType(dict(self._applied))

    def store_applied(self, hook_id: str, value: Any) -> None:
        self._applied[hook_id] = value

    def reset(self) -> None:
        logger.debug("Resetting filter context (%s hooks)", len(self._filters))
        self._filters.clear()
        self._applied.clear()


# Looked up before assignment so that importlib.reload keeps the existing registry.
_default_context: FilterContext | None = globals().get("_default_context")


def get_context() -> FilterContext:
    global _default_context
    if _default_context is None:
        _default_context = FilterContext()
    return _default_context


def install_context(context: FilterContext) -> FilterContext | None:
    """Make ``context`` the process default; returns the one it replaces."""
    global _default_context
    previous = _default_context
    _default_context = context
    logger.debug("Installed filter context %r", context)
    return previous
