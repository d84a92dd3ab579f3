"""Stable identity keys for filter registrations.

A registration made twice from the same place (for example when a module is
reloaded) must resolve to the same key so that it replaces the earlier entry
instead of adding a second one. Keys are derived from the structure of the
registered value plus an origin tag naming where it was registered.

Nothing that depends on memory addresses enters the hash: nested callables
are hashed structurally and objects with the default ``object.__repr__`` are
represented by their type's dotted path.
"""

from __future__ import annotations

import functools
import hashlib
import json
import logging
from collections.abc import Mapping
from types import BuiltinFunctionType, CodeType, FunctionType, MethodType, ModuleType
from typing import Any

logger = logging.getLogger(__name__)

FALLBACK_ORIGIN = "no-origin"
KEY_PREFIX = "key_"


def _type_path(value: Any) -> str:
    kind = value if isinstance(value, type) else type(value)
    return f"{kind.__module__}.{kind.__qualname__}"


def _stable_repr(value: Any, seen: frozenset[int]) -> str:
    if callable(value):
        return "callable:" + _material(value, seen)
    if type(value).__repr__ is object.__repr__:
        return f"object:{_type_path(value)}"
    return repr(value)


def _serialize(value: Any, seen: frozenset[int] = frozenset()) -> str:
    try:
        return json.dumps(value, sort_keys=True, default=functools.partial(_stable_repr, seen=seen))
    except (TypeError, ValueError):
        return _serialize_container(value, seen)


def _serialize_container(value: Any, seen: frozenset[int]) -> str:
    if id(value) in seen:
        return "<cycle>"
    seen = seen | {id(value)}
    if isinstance(value, Mapping):
        pairs = sorted(f"{_serialize(key, seen)}:{_serialize(item, seen)}" for key, item in value.items())
        return "{" + ",".join(pairs) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_serialize(item, seen) for item in value) + "]"
    if isinstance(value, (set, frozenset)):
        return "{" + ",".join(sorted(_serialize(item, seen) for item in value)) + "}"
    return _stable_repr(value, seen)


def _code_material(code: CodeType) -> list[str]:
    parts = [code.co_name, code.co_code.hex(), " ".join(code.co_names)]
    for const in code.co_consts:
        if isinstance(const, CodeType):
            parts.extend(_code_material(const))
        elif isinstance(const, frozenset):
            # set literal order depends on hash seeding
            parts.append(repr(sorted(repr(item) for item in const)))
        else:
            parts.append(repr(const))
    return parts


def _function_material(func: FunctionType, seen: frozenset[int]) -> list[str]:
    parts = [getattr(func, "__qualname__", func.__name__)]
    parts.extend(_code_material(func.__code__))
    if func.__defaults__:
        parts.append(_serialize(list(func.__defaults__), seen))
    if func.__kwdefaults__:
        parts.append(_serialize(func.__kwdefaults__, seen))
    for cell in func.__closure__ or ():
        try:
            contents = cell.cell_contents
        except ValueError:
            parts.append("<empty-cell>")
            continue
        parts.append(_serialize(contents, seen))
    return parts


def _material(candidate: Any, seen: frozenset[int] = frozenset()) -> str:
    if isinstance(candidate, MethodType):
        candidate = candidate.__func__
    if id(candidate) in seen:
        # recursive closures refer back to themselves
        return f"<cycle:{getattr(candidate, '__qualname__', _type_path(candidate))}>"
    seen = seen | {id(candidate)}

    if isinstance(candidate, FunctionType):
        return "|".join(_function_material(candidate, seen))
    if isinstance(candidate, functools.partial):
        return "|".join(
            [
                "partial",
                _material(candidate.func, seen),
                _serialize(list(candidate.args), seen),
                _serialize(candidate.keywords, seen),
            ]
        )
    if isinstance(candidate, type):
        return f"type:{_type_path(candidate)}"
    if isinstance(candidate, BuiltinFunctionType):
        owner = getattr(candidate, "__self__", None)
        qualifier = "" if owner is None or isinstance(owner, ModuleType) else f"{_type_path(owner)}:"
        return f"builtin:{qualifier}{candidate.__module__}.{candidate.__qualname__}"
    if callable(candidate):
        # callable instance: its type plus its own repr, when it has one
        if type(candidate).__repr__ is object.__repr__:
            return f"instance:{_type_path(candidate)}"
        return f"instance:{_type_path(candidate)}:{repr(candidate)}"
    return f"{type(candidate).__qualname__}:{_serialize(candidate, seen)}"


def content_hash(candidate: Any, digest_size: int = 20) -> str:
    """Hash the structure of ``candidate``, ignoring where it lives in memory."""
    try:
        material = _material(candidate)
    except Exception:  # noqa: BLE001
        logger.debug("Falling back to type name for identity of %r", type(candidate))
        material = _type_path(candidate)

    return hashlib.blake2b(material.encode("utf-8"), digest_size=digest_size).hexdigest()


def default_origin(candidate: Any, fallback: str = FALLBACK_ORIGIN) -> str:
    # plain values only carry their type's module, which says nothing about the caller
    if callable(candidate):
        module = getattr(candidate, "__module__", None)
        if isinstance(module, str) and module:
            return module
    return fallback


def resolve_identity(
    candidate: Any,
    explicit_key: str = "",
    origin: str | None = None,
    *,
    fallback_origin: str = FALLBACK_ORIGIN,
    prefix: str = KEY_PREFIX,
    digest_size: int = 20,
) -> str:
    """Return the identity key for registering ``candidate``.

    ``explicit_key`` wins verbatim when given. Otherwise the key combines the
    candidate's content hash with ``origin``, defaulting to the candidate's
    ``__module__`` and then to ``fallback_origin``.
    """
    if explicit_key:
        return explicit_key

    location = origin or default_origin(candidate, fallback_origin)
    material = f"{content_hash(candidate, digest_size)}|{location}"
    digest = hashlib.blake2b(material.encode("utf-8"), digest_size=digest_size).hexdigest()
    return f"{prefix}{digest}"
