"""Core domain models for hookline."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from types import FunctionType, MethodType
from typing import Any, Union

from pydantic import BaseModel, ConfigDict

DEFAULT_PRIORITY = 100
APPEND = -1


@dataclass(frozen=True)
class Constant:
    """Filter value that ignores its inputs and always yields ``value``."""

    value: Any

    kind = "constant"

    def bind(self, context: object | None) -> Constant:
        return self

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.value


@dataclass(frozen=True)
class Transform:
    """Filter value wrapping a callable ``func(current, *extra)``."""

    func: Callable[..., Any]

    kind = "transform"

    def bind(self, context: object | None) -> Callable[..., Any]:
        # Plain functions registered with a context receive it as their first argument;
        # FilterEngine.add_filter rejects a context for any other kind of callback.
        if context is None or not isinstance(self.func, FunctionType):
            return self.func
        return MethodType(self.func, context)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.func(*args, **kwargs)

    @property
    def name(self) -> str:
        return getattr(self.func, "__qualname__", None) or repr(self.func)


FilterValue = Union[Constant, Transform]


def as_filter_value(candidate: Any) -> FilterValue:
    if isinstance(candidate, (Constant, Transform)):
        return candidate
    if callable(candidate):
        return Transform(candidate)
    return Constant(candidate)


@dataclass(frozen=True)
class FilterEntry:
    hook_id: str
    identity_key: str
    callback: FilterValue
    context: object | None = None
    priority: int | float = DEFAULT_PRIORITY


class FilterOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    context: Any = None
    priority: int | float | None = None
    identity_key: str = ""
    origin: str | None = None


class PushOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    identity_key: str = ""
    insert_at: int = APPEND
    priority: int | float | None = None
    origin: str | None = None


class CallbackOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    identity_key: str = ""
    priority: int | float | None = None
    origin: str | None = None
