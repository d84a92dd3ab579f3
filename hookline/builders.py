"""List-building registrations on top of the filter engine."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

from hookline.collector import close_pending
from hookline.models import CallbackOptions, FilterOptions, FilterValue, PushOptions, as_filter_value

if TYPE_CHECKING:
    from hookline.engine import FilterEngine

T = TypeVar("T")


def _resolve(value: FilterValue, args: Any) -> Any:
    return value(args if args is not None else {})


def _as_list(current: Any) -> list[Any]:
    return list(current) if current is not None else []


def make_insert_filter(item: Any, insert_at: int) -> Callable[..., list[Any]]:
    value = as_filter_value(item)

    def insert_item(current: Any, args: Any = None, *_: Any) -> list[Any]:
        items = _as_list(current)
        resolved = _resolve(value, args)
        if insert_at < 0:
            items.append(resolved)
        else:
            items.insert(insert_at, resolved)
        return items

    return insert_item


def make_append_filter(callback: Any) -> Callable[..., list[Any]]:
    value = as_filter_value(callback)

    def append_result(current: Any, args: Any = None, *_: Any) -> list[Any]:
        items = _as_list(current)
        try:
            resolved = _resolve(value, args)
        except BaseException:
            close_pending(items)
            raise
        return [*items, resolved]

    return append_result


def push_to_filter(engine: FilterEngine, hook_id: str, item: T, options: PushOptions) -> T:
    """Register a filter inserting ``item`` (or ``item(args)``) into the hook's list."""
    key = engine.resolve_key(item, options.identity_key, options.origin)
    engine.add_filter(
        hook_id,
        make_insert_filter(item, options.insert_at),
        FilterOptions(identity_key=key, priority=options.priority),
    )
    return item


def add_callback(engine: FilterEngine, hook_id: str, callback: T, options: CallbackOptions) -> T:
    """Register a filter appending ``callback(args)`` to the hook's list."""
    key = engine.resolve_key(callback, options.identity_key, options.origin)
    engine.add_filter(
        hook_id,
        make_append_filter(callback),
        FilterOptions(identity_key=key, priority=options.priority),
    )
    return callback
