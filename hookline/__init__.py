"""Priority-ordered filter hooks for in-process extension points.

Usage:
    import hookline

    hookline.add_filter("title", lambda title: title.upper(), origin=__name__)
    hookline.apply_filters("title", "hello")  # "HELLO"

Modules registering plain values (dicts, strings) should go through
``hookline.scoped(__name__)`` so their registrations stay distinct from
equal values pushed by other modules.

The module-level functions operate on the process default context, which
survives ``importlib.reload``. Build a :class:`FilterEngine` around your own
:class:`FilterContext` for isolated registries.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

from hookline.config import HooklineConfig, load_effective_config
from hookline.engine import FilterEngine, FilterScope, sort_priority
from hookline.identity import resolve_identity
from hookline.models import (
    APPEND,
    DEFAULT_PRIORITY,
    CallbackOptions,
    Constant,
    FilterEntry,
    FilterOptions,
    PushOptions,
    Transform,
)
from hookline.registry import FilterContext, get_context, install_context

__all__ = [
    "APPEND",
    "DEFAULT_PRIORITY",
    "CallbackOptions",
    "Constant",
    "FilterContext",
    "FilterEngine",
    "FilterEntry",
    "FilterOptions",
    "FilterScope",
    "HooklineConfig",
    "PushOptions",
    "Transform",
    "add_callback",
    "add_filter",
    "apply_filters",
    "get_applied",
    "get_context",
    "get_filter_count",
    "get_filters",
    "install_context",
    "load_effective_config",
    "push_to_filter",
    "resolve_identity",
    "run_callbacks",
    "scoped",
    "sort_priority",
]

T = TypeVar("T")


def _engine() -> FilterEngine:
    return FilterEngine(get_context())


def scoped(origin: str) -> FilterScope:
    """Registration surface tagging every registration with ``origin``, usually ``__name__``."""
    return FilterScope(origin)


def add_filter(hook_id: str, callback: T, options: FilterOptions | None = None, **kwargs: Any) -> T:
    return _engine().add_filter(hook_id, callback, options, **kwargs)


def push_to_filter(hook_id: str, item: T, options: PushOptions | None = None, **kwargs: Any) -> T:
    return _engine().push_to_filter(hook_id, item, options, **kwargs)


def add_callback(hook_id: str, callback: T, options: CallbackOptions | None = None, **kwargs: Any) -> T:
    return _engine().add_callback(hook_id, callback, options, **kwargs)


def apply_filters(hook_id: str, seed: Any, *extra: Any) -> Any:
    return _engine().apply_filters(hook_id, seed, *extra)


async def run_callbacks(hook_id: str, args: dict[str, Any] | None = None) -> list[Any]:
    return await _engine().run_callbacks(hook_id, args)


def get_filter_count(hook_id: str) -> int:
    return get_context().count(hook_id)


def get_filters() -> Mapping[str, Mapping[str, FilterEntry]]:
    return get_context().snapshot()


def get_applied() -> Mapping[str, Any]:
    return get_context().applied_snapshot()
