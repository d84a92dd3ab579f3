"""Filter application engine."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import FunctionType
from typing import Any, TypeVar

from hookline import builders, collector
from hookline.config import HooklineConfig
from hookline.identity import resolve_identity
from hookline.models import CallbackOptions, FilterOptions, PushOptions, as_filter_value
from hookline.registry import FilterContext, get_context

logger = logging.getLogger(__name__)

T = TypeVar("T")
OptionsT = TypeVar("OptionsT", FilterOptions, PushOptions, CallbackOptions)


def _require_hook_id(hook_id: str) -> str:
    if not isinstance(hook_id, str) or not hook_id:
        raise ValueError(f"hook id must be a non-empty string, got {hook_id!r}")
    return hook_id


def _options(model: type[OptionsT], options: OptionsT | None, kwargs: dict[str, Any]) -> OptionsT:
    if options is not None:
        if kwargs:
            raise TypeError(f"pass either {model.__name__} or keyword options, not both")
        return options
    return model.model_validate(kwargs)


def item_priority(item: Any, default: int | float) -> int | float:
    if isinstance(item, Mapping):
        value = item.get("priority", default)
    else:
        value = getattr(item, "priority", default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return value


def sort_priority(items: list[Any], default: int | float) -> list[Any]:
    """Stable sort of ``items`` by their own priority; returns a new list."""
    return sorted(items, key=lambda item: item_priority(item, default))


class FilterEngine:
    """Registers filters on a :class:`FilterContext` and threads values through them."""

    def __init__(self, context: FilterContext | None = None) -> None:
        self.context = context or get_context()

    @property
    def config(self) -> HooklineConfig:
        return self.context.config

    def scoped(self, origin: str) -> FilterScope:
        return FilterScope(origin, self)

    def resolve_key(self, candidate: Any, identity_key: str = "", origin: str | None = None) -> str:
        if not identity_key and origin is None and not callable(candidate):
            logger.debug("No origin for plain value %r; identity uses %s", candidate, self.config.fallback_origin)
        return resolve_identity(
            candidate,
            identity_key,
            origin,
            fallback_origin=self.config.fallback_origin,
            prefix=self.config.key_prefix,
            digest_size=self.config.digest_size,
        )

    def add_filter(self, hook_id: str, callback: T, options: FilterOptions | None = None, **kwargs: Any) -> T:
        """Register ``callback`` (a callable or a constant) on ``hook_id`` and return it unchanged."""
        _require_hook_id(hook_id)
        opts = _options(FilterOptions, options, kwargs)
        if opts.context is not None and not isinstance(callback, FunctionType):
            raise TypeError(f"context can only be bound to a plain function, got {type(callback).__name__}")
        key = self.resolve_key(callback, opts.identity_key, opts.origin)
        priority = self.config.default_priority if opts.priority is None else opts.priority
        self.context.register(hook_id, key, as_filter_value(callback), context=opts.context, priority=priority)
        logger.debug("Registered filter %s on hook %s (priority=%s)", key, hook_id, priority)
        return callback

    def push_to_filter(self, hook_id: str, item: T, options: PushOptions | None = None, **kwargs: Any) -> T:
        return builders.push_to_filter(self, hook_id, item, _options(PushOptions, options, kwargs))

    def add_callback(self, hook_id: str, callback: T, options: CallbackOptions | None = None, **kwargs: Any) -> T:
        return builders.add_callback(self, hook_id, callback, _options(CallbackOptions, options, kwargs))

    def count(self, hook_id: str) -> int:
        return self.context.count(hook_id)

    def apply_filters(self, hook_id: str, seed: Any, *extra: Any) -> Any:
        """Thread ``seed`` through the filters of ``hook_id`` in priority order.

        A filter returning ``None`` leaves the value unchanged. Exceptions from
        filters propagate and leave the applied cache untouched. A list result
        is re-sorted by the priority of its elements.
        """
        data = seed
        # Snapshot first: filters registering filters must not disturb this run.
        entries = sorted(self.context.entries(hook_id), key=lambda entry: entry.priority)
        for entry in entries:
            result = entry.callback.bind(entry.context)(data, *extra)
            if result is not None:
                data = result

        if isinstance(data, list) and self.config.sort_list_results:
            data = sort_priority(data, self.config.default_priority)

        self.context.store_applied(hook_id, data)
        return data

    async def run_callbacks(self, hook_id: str, args: dict[str, Any] | None = None) -> list[Any]:
        return await collector.run_callbacks(self, hook_id, args)


class FilterScope:
    """Registration surface that tags every registration with one origin.

    Plain values (pushed dicts, strings, constants) carry no module of their
    own, so two modules pushing the same value share one identity unless each
    registers through its own scope::

        filters = hookline.scoped(__name__)
        filters.push_to_filter("menu", {"path": "/"})
    """

    def __init__(self, origin: str, engine: FilterEngine | None = None) -> None:
        if not isinstance(origin, str) or not origin:
            raise ValueError(f"origin must be a non-empty string, got {origin!r}")
        self.origin = origin
        self._engine = engine

    @property
    def engine(self) -> FilterEngine:
        return self._engine or FilterEngine(get_context())

    def _tagged(self, model: type[OptionsT], options: OptionsT | None, kwargs: dict[str, Any]) -> OptionsT:
        opts = _options(model, options, kwargs)
        if opts.origin is None:
            opts = opts.model_copy(update={"origin": self.origin})
        return opts

    def add_filter(self, hook_id: str, callback: T, options: FilterOptions | None = None, **kwargs: Any) -> T:
        return self.engine.add_filter(hook_id, callback, self._tagged(FilterOptions, options, kwargs))

    def push_to_filter(self, hook_id: str, item: T, options: PushOptions | None = None, **kwargs: Any) -> T:
        return self.engine.push_to_filter(hook_id, item, self._tagged(PushOptions, options, kwargs))

    def add_callback(self, hook_id: str, callback: T, options: CallbackOptions | None = None, **kwargs: Any) -> T:
        return self.engine.add_callback(hook_id, callback, self._tagged(CallbackOptions, options, kwargs))
