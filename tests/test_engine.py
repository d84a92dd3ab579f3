from functools import partial
from types import SimpleNamespace

import pytest

from hookline.config import HooklineConfig
from hookline.engine import FilterEngine, sort_priority
from hookline.registry import FilterContext


def _engine(**config) -> FilterEngine:
    return FilterEngine(FilterContext(HooklineConfig(**config)))


def test_unknown_hook_returns_seed_and_caches_it() -> None:
    engine = _engine()
    seed = {"title": "x"}

    assert engine.apply_filters("missing", seed) is seed
    assert engine.context.applied_snapshot()["missing"] is seed


def test_filters_run_in_priority_order_regardless_of_registration_order() -> None:
    engine = _engine()
    engine.add_filter("list", lambda arr: arr + [1], priority=50)
    engine.add_filter("list", lambda arr: arr + [2], priority=10)

    assert engine.apply_filters("list", []) == [2, 1]


def test_equal_priorities_keep_registration_order() -> None:
    engine = _engine()
    engine.add_filter("chain", lambda text: text + "a", identity_key="a")
    engine.add_filter("chain", lambda text: text + "b", identity_key="b")
    engine.add_filter("chain", lambda text: text + "c", identity_key="c", priority=100)

    assert engine.apply_filters("chain", "") == "abc"


def test_none_return_keeps_current_value() -> None:
    engine = _engine()
    seen: list[str] = []

    engine.add_filter("value", lambda value: None, priority=1)
    engine.add_filter("value", lambda value: seen.append(value), priority=2)

    assert engine.apply_filters("value", "X") == "X"
    assert seen == ["X"]


def test_extra_args_are_passed_to_every_filter() -> None:
    engine = _engine()
    engine.add_filter("greet", lambda value, name, punct: f"{value} {name}{punct}")

    assert engine.apply_filters("greet", "hello", "ada", "!") == "hello ada!"


def test_constant_filter_replaces_value() -> None:
    engine = _engine()
    engine.add_filter("setting", "configured")

    assert engine.apply_filters("setting", "default") == "configured"


def test_add_filter_returns_callback_unchanged() -> None:
    engine = _engine()

    def upper(value: str) -> str:
        return value.upper()

    assert engine.add_filter("title", upper) is upper


def test_callback_bound_to_context() -> None:
    engine = _engine()
    settings = SimpleNamespace(suffix="-ctx")

    def add_suffix(self, value: str) -> str:
        return value + self.suffix

    engine.add_filter("title", add_suffix, context=settings)

    assert engine.apply_filters("title", "name") == "name-ctx"


def test_callback_failure_propagates_and_aborts_pipeline() -> None:
    engine = _engine()
    calls: list[str] = []

    def boom(value: str) -> str:
        raise RuntimeError("filter failed")

    engine.add_filter("title", boom, priority=10)
    engine.add_filter("title", lambda value: calls.append("after") or value, priority=20)

    with pytest.raises(RuntimeError, match="filter failed"):
        engine.apply_filters("title", "x")
    assert calls == []
    assert "title" not in engine.context.applied_snapshot()


def test_registration_during_apply_does_not_affect_running_pipeline() -> None:
    engine = _engine()

    def register_more(value: list[str]) -> list[str]:
        engine.add_filter("list", lambda arr: arr + ["late"], identity_key="late")
        return value + ["first"]

    engine.add_filter("list", register_more, identity_key="first")

    assert engine.apply_filters("list", []) == ["first"]
    assert engine.count("list") == 2
    assert engine.apply_filters("list", []) == ["first", "late"]


def test_apply_is_repeatable() -> None:
    engine = _engine()
    engine.add_filter("n", lambda n: n + 1)

    assert engine.apply_filters("n", 1) == 2
    assert engine.apply_filters("n", 1) == 2
    assert engine.context.applied_snapshot()["n"] == 2


def test_list_results_are_sorted_by_element_priority() -> None:
    engine = _engine()
    seed = [{"id": "late", "priority": 200}, {"id": "plain"}, {"id": "early", "priority": 5}]

    result = engine.apply_filters("menu", seed)

    assert [item["id"] for item in result] == ["early", "plain", "late"]
    assert [item["id"] for item in seed] == ["late", "plain", "early"]


def test_list_sorting_can_be_disabled() -> None:
    engine = _engine(sort_list_results=False)
    seed = [{"id": "late", "priority": 200}, {"id": "early", "priority": 5}]

    assert engine.apply_filters("menu", seed) == seed


def test_sort_priority_reads_attributes_and_defaults_missing() -> None:
    items = [
        SimpleNamespace(name="b", priority=100),
        SimpleNamespace(name="a", priority=1),
        SimpleNamespace(name="c"),
        SimpleNamespace(name="d", priority="high"),
        SimpleNamespace(name="e", priority=150),
    ]

    ordered = sort_priority(items, default=100)

    assert [item.name for item in ordered] == ["a", "b", "c", "d", "e"]


def test_default_priority_comes_from_config() -> None:
    engine = _engine(default_priority=10)
    engine.add_filter("order", lambda arr: arr + ["default"], identity_key="default")
    engine.add_filter("order", lambda arr: arr + ["explicit"], identity_key="explicit", priority=5)

    assert engine.context.entries("order")[0].priority == 10
    assert engine.apply_filters("order", []) == ["explicit", "default"]


def test_invalid_hook_id_is_rejected() -> None:
    engine = _engine()

    with pytest.raises(ValueError, match="hook id"):
        engine.add_filter("", lambda value: value)


def test_context_requires_plain_function() -> None:
    engine = _engine()

    with pytest.raises(TypeError, match="plain function"):
        engine.add_filter("title", str.upper, context=SimpleNamespace())
    with pytest.raises(TypeError, match="plain function"):
        engine.add_filter("title", partial(lambda self, value: value), context=SimpleNamespace())
    assert engine.count("title") == 0
