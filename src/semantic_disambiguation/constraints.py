# semantic_disambiguation/constraints.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Sequence

from semantic_disambiguation._compat import StrEnum
from semantic_disambiguation.rules import SharedRule, Source


class ValidationCode(StrEnum):
    OK = "ok"
    INVARIANT_VIOLATION = "invariant_violation"
    INSUFFICIENT_EVIDENCE = "insufficient_evidence"
    PROTECTED_PREDICATE = "protected_predicate"
    TAUTOLOGY_DETECTED = "tautology_detected"
    CONTRADICTION_DETECTED = "contradiction_detected"
    ARITY_MISMATCH = "arity_mismatch"
    IMMUTABLE_BINDING = "immutable_binding"
    UNAUTHORIZED_SOURCE = "unauthorized_source"
    INVALID_CONFIDENCE = "invalid_confidence"


class ContextValidationError(ValueError):
    """Raised by `ValidationOutcome.raise_for_failure` for a rejected write."""

    def __init__(self, outcome: ValidationOutcome) -> None:
        self.outcome = outcome
        super().__init__(f"[{outcome.code.value}] {outcome.reason}")


@dataclass(frozen=True)
class ValidationOutcome:
    passed: bool
    code: ValidationCode
    reason: str
    details: Mapping[str, Any] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.passed

    def raise_for_failure(self) -> None:
        if not self.passed:
            raise ContextValidationError(self)


OK = ValidationOutcome(passed=True, code=ValidationCode.OK, reason="ok")


def rejected(code: ValidationCode, reason: str, **details: Any) -> ValidationOutcome:
    return ValidationOutcome(passed=False, code=code, reason=reason, details=details)


class ConstraintKind(StrEnum):
    NO_TAUTOLOGY = "no_tautology"
    FORBIDDEN = "forbidden"
    FIXED_ARITY = "fixed_arity"
    NO_CONTRADICTION = "no_contradiction"


@dataclass(frozen=True)
class Constraint:
    name: str
    kind: ConstraintKind
    predicate: Optional[str] = None
    other_predicate: Optional[str] = None
    arity: Optional[int] = None


def no_tautology() -> Constraint:
    return Constraint(name="no_tautology", kind=ConstraintKind.NO_TAUTOLOGY)


def forbidden(predicate: str, *, name: Optional[str] = None) -> Constraint:
    return Constraint(name=name or f"forbidden:{predicate}", kind=ConstraintKind.FORBIDDEN, predicate=predicate)


def fixed_arity(predicate: str, arity: int, *, name: Optional[str] = None) -> Constraint:
    return Constraint(
        name=name or f"fixed_arity:{predicate}/{arity}",
        kind=ConstraintKind.FIXED_ARITY,
        predicate=predicate,
        arity=arity,
    )


def no_contradiction(predicate: str, other_predicate: str, *, name: Optional[str] = None) -> Constraint:
    return Constraint(
        name=name or f"no_contradiction:{predicate}:{other_predicate}",
        kind=ConstraintKind.NO_CONTRADICTION,
        predicate=predicate,
        other_predicate=other_predicate,
    )


Checker = Callable[[Constraint, SharedRule, Sequence[SharedRule]], Optional[ValidationOutcome]]


def check_no_tautology(
    constraint: Constraint, rule: SharedRule, existing: Sequence[SharedRule]
) -> Optional[ValidationOutcome]:
    if rule.is_tautology:
        return rejected(
            ValidationCode.TAUTOLOGY_DETECTED,
            f"Rule {rule.predicate}/{rule.arity} only restates its own head.",
            rule_id=rule.id,
        )
    return None


def check_forbidden(
    constraint: Constraint, rule: SharedRule, existing: Sequence[SharedRule]
) -> Optional[ValidationOutcome]:
    if rule.predicate == constraint.predicate:
        return rejected(
            ValidationCode.INVARIANT_VIOLATION,
            f"Predicate '{rule.predicate}' is forbidden by invariant '{constraint.name}'.",
            invariant=constraint.name,
        )
    return None


def check_fixed_arity(
    constraint: Constraint, rule: SharedRule, existing: Sequence[SharedRule]
) -> Optional[ValidationOutcome]:
    if rule.predicate == constraint.predicate and rule.arity != constraint.arity:
        return rejected(
            ValidationCode.ARITY_MISMATCH,
            f"Predicate '{rule.predicate}' requires arity {constraint.arity}, got {rule.arity}.",
            predicate=rule.predicate,
            expected=constraint.arity,
            actual=rule.arity,
        )
    return None


def check_no_contradiction(
    constraint: Constraint, rule: SharedRule, existing: Sequence[SharedRule]
) -> Optional[ValidationOutcome]:
    # Coarse: any rule for the paired predicate counts as a contradiction.
    if rule.predicate != constraint.predicate:
        return None
    for other in existing:
        if other.predicate == constraint.other_predicate:
            return rejected(
                ValidationCode.CONTRADICTION_DETECTED,
                f"{constraint.predicate} vs {constraint.other_predicate}",
                conflicting_rule_id=other.id,
            )
    return None


REGISTRY: dict[ConstraintKind, Checker] = {
    ConstraintKind.NO_TAUTOLOGY: check_no_tautology,
    ConstraintKind.FORBIDDEN: check_forbidden,
    ConstraintKind.FIXED_ARITY: check_fixed_arity,
    ConstraintKind.NO_CONTRADICTION: check_no_contradiction,
}


@dataclass
class ConstraintValidator:
    invariants: list[Constraint] = field(default_factory=lambda: [no_tautology()])
    evidence_required: dict[str, int] = field(default_factory=dict)
    protected_predicates: list[str] = field(default_factory=list)

    def add_invariant(self, constraint: Constraint) -> None:
        self.invariants.append(constraint)

    def protect_predicate(self, predicate: str) -> None:
        if predicate not in self.protected_predicates:
            self.protected_predicates.append(predicate)

    def require_evidence(self, predicate: str, min_count: int) -> None:
        self.evidence_required[predicate] = min_count

    def validate_rule(self, rule: SharedRule, existing: Sequence[SharedRule]) -> ValidationOutcome:
        if rule.source == Source.IMPROVISED and rule.predicate in self.protected_predicates:
            return rejected(
                ValidationCode.PROTECTED_PREDICATE,
                f"Predicate '{rule.predicate}' cannot be changed by improvisation.",
                predicate=rule.predicate,
            )

        for constraint in self.invariants:
            outcome = REGISTRY[constraint.kind](constraint, rule, existing)
            if outcome is not None:
                return outcome

        minimum = self.evidence_required.get(rule.predicate)
        if minimum is not None and rule.source == Source.IMPROVISED:
            count = sum(1 for other in existing if other.predicate == rule.predicate)
            if count < minimum:
                return rejected(
                    ValidationCode.INSUFFICIENT_EVIDENCE,
                    f"Predicate '{rule.predicate}' needs {minimum} supporting rules, found {count}.",
                    predicate=rule.predicate,
                    required=minimum,
                    found=count,
                )

        return OK


__all__ = [
    "Checker",
    "Constraint",
    "ConstraintKind",
    "ConstraintValidator",
    "ContextValidationError",
    "OK",
    "REGISTRY",
    "ValidationCode",
    "ValidationOutcome",
    "fixed_arity",
    "forbidden",
    "no_contradiction",
    "no_tautology",
    "rejected",
]
