from __future__ import annotations

from collections.abc import Callable

import pytest

from semantic_disambiguation.constraints import (
    OK,
    REGISTRY,
    ConstraintKind,
    ConstraintValidator,
    ContextValidationError,
    ValidationCode,
    fixed_arity,
    forbidden,
    no_contradiction,
)
from semantic_disambiguation.rules import Goal, SharedRule, Source
from semantic_disambiguation.unification import Var


def test_registry_covers_every_constraint_kind() -> None:
    assert set(REGISTRY) == set(ConstraintKind)


def test_default_validator_accepts_facts(make_rule: Callable[..., SharedRule]) -> None:
    outcome = ConstraintValidator().validate_rule(make_rule(), [])
    assert outcome is OK
    assert bool(outcome) is True
    outcome.raise_for_failure()


def test_non_tautological_conjunction_is_accepted(make_rule: Callable[..., SharedRule]) -> None:
    rule = make_rule("p", 1, goals=(Goal("q", (Var("X"),)),))
    assert ConstraintValidator().validate_rule(rule, []).passed is True


def test_forbidden_predicate(make_rule: Callable[..., SharedRule]) -> None:
    validator = ConstraintValidator()
    validator.add_invariant(forbidden("borrar"))

    outcome = validator.validate_rule(make_rule("borrar", 1), [])

    assert outcome.code is ValidationCode.INVARIANT_VIOLATION
    assert outcome.details["invariant"] == "forbidden:borrar"


def test_fixed_arity(make_rule: Callable[..., SharedRule]) -> None:
    validator = ConstraintValidator()
    validator.add_invariant(fixed_arity("lugar", 1))

    assert validator.validate_rule(make_rule("lugar", 1), []).passed is True
    outcome = validator.validate_rule(make_rule("lugar", 2), [])
    assert outcome.code is ValidationCode.ARITY_MISMATCH
    assert outcome.details == {"predicate": "lugar", "expected": 1, "actual": 2}


def test_no_contradiction_is_coarse(make_rule: Callable[..., SharedRule]) -> None:
    validator = ConstraintValidator()
    validator.add_invariant(no_contradiction("vivo", "muerto"))
    existing = [make_rule("muerto", 1)]

    outcome = validator.validate_rule(make_rule("vivo", 1), existing)

    assert outcome.code is ValidationCode.CONTRADICTION_DETECTED
    assert outcome.reason == "vivo vs muerto"
    assert validator.validate_rule(make_rule("vivo", 1), []).passed is True


def test_protected_predicate_blocks_only_improvisation(make_rule: Callable[..., SharedRule]) -> None:
    validator = ConstraintValidator()
    validator.protect_predicate("verbo")

    improvised = validator.validate_rule(make_rule("verbo", 1, source=Source.IMPROVISED), [])
    grammar = validator.validate_rule(make_rule("verbo", 1, source=Source.GRAMMAR), [])

    assert improvised.code is ValidationCode.PROTECTED_PREDICATE
    assert grammar.passed is True


def test_evidence_requirement_applies_to_improvised_rules(make_rule: Callable[..., SharedRule]) -> None:
    validator = ConstraintValidator()
    validator.require_evidence("tema", 2)
    candidate = make_rule("tema", 1, source=Source.IMPROVISED)

    short = validator.validate_rule(candidate, [make_rule("tema", 1)])
    enough = validator.validate_rule(candidate, [make_rule("tema", 1), make_rule("tema", 2)])
    user = validator.validate_rule(make_rule("tema", 1, source=Source.USER), [])

    assert short.code is ValidationCode.INSUFFICIENT_EVIDENCE
    assert short.details["found"] == 1
    assert enough.passed is True
    assert user.passed is True


def test_first_failing_check_short_circuits(
    make_rule: Callable[..., SharedRule], make_tautology: Callable[..., SharedRule]
) -> None:
    validator = ConstraintValidator()
    validator.protect_predicate("p")
    validator.add_invariant(forbidden("p"))
    validator.require_evidence("p", 5)

    improvised = validator.validate_rule(make_tautology("p", source=Source.IMPROVISED), [])
    user = validator.validate_rule(make_tautology("p", source=Source.USER), [])
    user_fact = validator.validate_rule(make_rule("p", 1, source=Source.USER), [])

    assert improvised.code is ValidationCode.PROTECTED_PREDICATE
    assert user.code is ValidationCode.TAUTOLOGY_DETECTED
    assert user_fact.code is ValidationCode.INVARIANT_VIOLATION


def test_raise_for_failure_wraps_outcome(make_tautology: Callable[..., SharedRule]) -> None:
    outcome = ConstraintValidator().validate_rule(make_tautology(), [])

    with pytest.raises(ContextValidationError) as excinfo:
        outcome.raise_for_failure()

    assert excinfo.value.outcome is outcome
    assert "tautology_detected" in str(excinfo.value)
    assert isinstance(excinfo.value, ValueError)
