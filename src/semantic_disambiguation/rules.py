# semantic_disambiguation/rules.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from semantic_disambiguation._compat import Self, StrEnum
from semantic_disambiguation.stable_ids import derive_rule_id
from semantic_disambiguation.unification import Value


def check_unit_interval(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be within [0, 1], got {value}")


class Source(StrEnum):
    """Provenance of a binding or rule; gates trust-sensitive writes."""

    SYSTEM = "system"
    GRAMMAR = "grammar"
    SEMANTIC = "semantic"
    DISAMBIGUATOR = "disambiguator"
    USER = "user"
    IMPROVISED = "improvised"


class BodyKind(StrEnum):
    FACT = "fact"
    CONJUNCTION = "conjunction"
    DISJUNCTION = "disjunction"


@dataclass(frozen=True)
class Goal:
    predicate: str
    args: tuple[Value, ...] = ()


@dataclass(frozen=True)
class RuleBody:
    kind: BodyKind = BodyKind.FACT
    goals: tuple[Goal, ...] = ()

    @classmethod
    def fact(cls) -> Self:
        return cls(kind=BodyKind.FACT)

    @classmethod
    def conjunction(cls, goals: Sequence[Goal]) -> Self:
        return cls(kind=BodyKind.CONJUNCTION, goals=tuple(goals))

    @classmethod
    def disjunction(cls, goals: Sequence[Goal]) -> Self:
        return cls(kind=BodyKind.DISJUNCTION, goals=tuple(goals))


@dataclass(frozen=True)
class SharedRule:
    predicate: str
    arity: int
    body: RuleBody = field(default_factory=RuleBody.fact)
    source: Source = Source.SYSTEM
    confidence: float = 1.0
    # 0.0 = rigid, 1.0 = open to improvisation
    flexibility: float = 0.0
    id: str = ""

    def __post_init__(self) -> None:
        check_unit_interval("confidence", self.confidence)
        check_unit_interval("flexibility", self.flexibility)
        if not self.id:
            object.__setattr__(self, "id", self.derive_id())

    def derive_id(self) -> str:
        return derive_rule_id(
            predicate=self.predicate,
            arity=self.arity,
            body_kind=self.body.kind.value,
            goals=[(goal.predicate, goal.args) for goal in self.body.goals],
            source=self.source.value,
        )

    @property
    def is_tautology(self) -> bool:
        """`p(X) :- p(X)`: a single conjunct with the head's predicate and arity."""
        if self.body.kind != BodyKind.CONJUNCTION or len(self.body.goals) != 1:
            return False
        goal = self.body.goals[0]
        return goal.predicate == self.predicate and len(goal.args) == self.arity


@dataclass(frozen=True)
class SharedBinding:
    value: Value
    source: Source
    confidence: float
    created_at: int
    immutable: bool = False

    def __post_init__(self) -> None:
        check_unit_interval("confidence", self.confidence)


def make_rule(
    predicate: str,
    arity: int,
    *,
    body: Optional[RuleBody] = None,
    source: Source = Source.SYSTEM,
    confidence: float = 1.0,
    flexibility: float = 0.0,
    rule_id: str = "",
) -> SharedRule:
    return SharedRule(
        predicate=predicate,
        arity=arity,
        body=body or RuleBody.fact(),
        source=source,
        confidence=confidence,
        flexibility=flexibility,
        id=rule_id,
    )


__all__ = [
    "BodyKind",
    "Goal",
    "RuleBody",
    "SharedBinding",
    "SharedRule",
    "Source",
    "check_unit_interval",
    "make_rule",
]
