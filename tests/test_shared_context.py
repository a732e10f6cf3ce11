from __future__ import annotations

from collections.abc import Callable

import pytest

from semantic_disambiguation.constraints import ContextValidationError, ValidationCode
from semantic_disambiguation.rules import SharedRule, Source
from semantic_disambiguation.shared_context import SharedContext
from semantic_disambiguation.unification import Atom, Num


def test_set_and_get_records_provenance(shared_context: SharedContext) -> None:
    outcome = shared_context.set("current_theme", Atom("viajes"), Source.SEMANTIC, 0.8)

    assert outcome.passed is True
    binding = shared_context.get("current_theme")
    assert binding is not None
    assert binding.value == Atom("viajes")
    assert binding.source is Source.SEMANTIC
    assert binding.confidence == 0.8
    assert binding.immutable is False


def test_creation_order_is_monotonic(shared_context: SharedContext) -> None:
    shared_context.set("a", Atom("1"), Source.USER, 1.0)
    shared_context.set("b", Atom("2"), Source.USER, 1.0)

    a = shared_context.get("a")
    b = shared_context.get("b")
    assert a is not None and b is not None
    assert a.created_at < b.created_at


def test_immutable_binding_rejects_writes(shared_context: SharedContext) -> None:
    assert shared_context.set_immutable("pi", Num(3.14159), Source.SYSTEM)
    before = shared_context.checkpoint()

    outcome = shared_context.set("pi", Num(3.0), Source.USER, 1.0)

    assert outcome.passed is False
    assert outcome.code is ValidationCode.IMMUTABLE_BINDING
    binding = shared_context.get("pi")
    assert binding is not None and binding.value == Num(3.14159)
    assert binding.confidence == 1.0
    assert shared_context.checkpoint() == before


def test_set_immutable_on_existing_key_fails(shared_context: SharedContext) -> None:
    shared_context.set("k", Atom("v"), Source.USER, 0.9)

    outcome = shared_context.set_immutable("k", Atom("w"), Source.SYSTEM)

    assert outcome.code is ValidationCode.IMMUTABLE_BINDING
    with pytest.raises(ContextValidationError):
        outcome.raise_for_failure()


def test_strict_mode_requires_confident_improvisation(shared_context: SharedContext) -> None:
    low = shared_context.set("guess", Atom("x"), Source.IMPROVISED, 0.5)
    high = shared_context.set("guess", Atom("x"), Source.IMPROVISED, 0.85)

    assert low.code is ValidationCode.UNAUTHORIZED_SOURCE
    assert high.passed is True


def test_rejected_write_is_not_logged(shared_context: SharedContext) -> None:
    cp = shared_context.checkpoint()
    shared_context.set("guess", Atom("x"), Source.IMPROVISED, 0.1)

    assert shared_context.checkpoint() == cp
    assert "guess" not in shared_context


def test_lenient_mode_accepts_low_confidence_improvisation() -> None:
    ctx = SharedContext(strict_mode=False)
    assert ctx.set("guess", Atom("x"), Source.IMPROVISED, 0.1).passed is True


def test_rollback_restores_bindings_and_rules_exactly(
    shared_context: SharedContext, make_rule: Callable[..., SharedRule]
) -> None:
    shared_context.set("keep", Atom("old"), Source.USER, 0.9)
    base_rule = make_rule("lugar", 1)
    assert shared_context.add_rule(base_rule)

    cp = shared_context.checkpoint()
    snapshot = {key: shared_context.get(key) for key in shared_context.keys()}
    rules_before = shared_context.find_rules("lugar")

    shared_context.set("keep", Atom("new"), Source.USER, 0.95)
    shared_context.set("added", Atom("x"), Source.GRAMMAR, 0.7)
    shared_context.add_rule(make_rule("lugar", 2))
    shared_context.add_rule(make_rule("tema", 1))
    shared_context.remove_rule(base_rule.id)

    undone = shared_context.rollback(cp)

    assert undone == 5
    assert {key: shared_context.get(key) for key in shared_context.keys()} == snapshot
    assert shared_context.find_rules("lugar") == rules_before
    assert shared_context.find_rules("tema") == []


def test_removed_rule_returns_to_its_position(
    shared_context: SharedContext, make_rule: Callable[..., SharedRule]
) -> None:
    first, second, third = make_rule("a", 1), make_rule("b", 1), make_rule("c", 1)
    for rule in (first, second, third):
        shared_context.add_rule(rule)

    cp = shared_context.checkpoint()
    assert shared_context.remove_rule(second.id) == second
    assert shared_context.remove_rule("rule_missing") is None

    shared_context.rollback(cp)

    assert [r.id for r in shared_context.iter_rules()] == [first.id, second.id, third.id]


def test_rollback_of_duplicate_rules_removes_only_the_new_copy(
    shared_context: SharedContext, make_rule: Callable[..., SharedRule]
) -> None:
    rule = make_rule("lugar", 1)
    shared_context.add_rule(rule)
    cp = shared_context.checkpoint()
    shared_context.add_rule(rule)

    shared_context.rollback(cp)

    assert shared_context.find_rules("lugar") == [rule]


def test_rollback_past_end_is_noop_and_negative_raises(shared_context: SharedContext) -> None:
    shared_context.set("k", Atom("v"), Source.USER, 1.0)

    assert shared_context.rollback(100) == 0
    assert "k" in shared_context
    with pytest.raises(ValueError):
        shared_context.rollback(-1)


def test_queries_by_source_and_arity(
    shared_context: SharedContext, make_rule: Callable[..., SharedRule]
) -> None:
    shared_context.set("a", Atom("1"), Source.GRAMMAR, 1.0)
    shared_context.set("b", Atom("2"), Source.SEMANTIC, 1.0)
    shared_context.add_rule(make_rule("lugar", 1, source=Source.GRAMMAR))
    shared_context.add_rule(make_rule("lugar", 2, source=Source.USER))

    assert [key for key, _ in shared_context.bindings_from(Source.GRAMMAR)] == ["a"]
    assert [r.arity for r in shared_context.find_rules_exact("lugar", 2)] == [2]
    assert [r.source for r in shared_context.rules_from(Source.GRAMMAR)] == [Source.GRAMMAR]
    assert len(shared_context) == 2


def test_reset_clears_everything(
    shared_context: SharedContext, make_rule: Callable[..., SharedRule]
) -> None:
    shared_context.set("k", Atom("v"), Source.USER, 1.0)
    shared_context.add_rule(make_rule())

    shared_context.reset()

    assert len(shared_context) == 0
    assert list(shared_context.iter_rules()) == []
    assert shared_context.checkpoint() == 0


def test_add_rule_rejects_tautology(
    shared_context: SharedContext, make_tautology: Callable[..., SharedRule]
) -> None:
    outcome = shared_context.add_rule(make_tautology("p"))

    assert outcome.code is ValidationCode.TAUTOLOGY_DETECTED
    assert shared_context.find_rules("p") == []
    assert shared_context.checkpoint() == 0


@pytest.mark.parametrize("confidence", [7.5, -2.0, 1.0001, float("nan")])
def test_out_of_range_confidence_is_rejected(shared_context: SharedContext, confidence: float) -> None:
    before = shared_context.checkpoint()

    outcome = shared_context.set("k", Atom("v"), Source.USER, confidence)

    assert outcome.code is ValidationCode.INVALID_CONFIDENCE
    assert "k" not in shared_context
    assert shared_context.checkpoint() == before


def test_confidence_bounds_are_inclusive(shared_context: SharedContext) -> None:
    assert shared_context.set("low", Atom("v"), Source.USER, 0.0).passed is True
    assert shared_context.set("high", Atom("v"), Source.USER, 1.0).passed is True


@pytest.mark.parametrize(("field", "value"), [("confidence", 1.5), ("confidence", -0.1), ("flexibility", 2.0)])
def test_rule_fields_must_be_in_unit_interval(field: str, value: float) -> None:
    with pytest.raises(ValueError, match=field):
        SharedRule(predicate="lugar", arity=1, **{field: value})
