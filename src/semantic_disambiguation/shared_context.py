# semantic_disambiguation/shared_context.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Union

from semantic_disambiguation.constraints import (
    OK,
    ConstraintValidator,
    ValidationCode,
    ValidationOutcome,
    rejected,
)
from semantic_disambiguation.rules import SharedBinding, SharedRule, Source
from semantic_disambiguation.unification import Value

logger = logging.getLogger(__name__)

IMPROVISED_MIN_CONFIDENCE = 0.8


# ------------------------------------------------------------------------------
# Change log entries (each carries what is needed to undo it)
# ------------------------------------------------------------------------------


@dataclass(frozen=True)
class BindingAdded:
    key: str


@dataclass(frozen=True)
class BindingModified:
    key: str
    previous: SharedBinding


@dataclass(frozen=True)
class RuleAdded:
    rule_id: str
    index: int


@dataclass(frozen=True)
class RuleRemoved:
    index: int
    rule: SharedRule


ContextChange = Union[BindingAdded, BindingModified, RuleAdded, RuleRemoved]


class SharedContext:
    """
    Bindings and rules shared between the engines.

    Every write goes through validation first; only confirmed writes reach
    the change log, so `rollback(checkpoint())` restores exactly the state
    observed at the checkpoint. Not safe for concurrent mutation: one
    context per session.
    """

    def __init__(self, validator: Optional[ConstraintValidator] = None, *, strict_mode: bool = True) -> None:
        self.validator = validator or ConstraintValidator()
        self.strict_mode = strict_mode
        self._bindings: dict[str, SharedBinding] = {}
        self._rules: list[SharedRule] = []
        self._history: list[ContextChange] = []
        self._clock = 0

    # === bindings ===

    def get(self, key: str) -> Optional[SharedBinding]:
        return self._bindings.get(key)

    def keys(self) -> list[str]:
        return list(self._bindings)

    def __contains__(self, key: object) -> bool:
        return key in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)

    def set(self, key: str, value: Value, source: Source, confidence: float) -> ValidationOutcome:
        if not 0.0 <= confidence <= 1.0:
            return self._reject(
                rejected(
                    ValidationCode.INVALID_CONFIDENCE,
                    f"Confidence must be within [0, 1], got {confidence}.",
                    key=key,
                    confidence=confidence,
                )
            )

        existing = self._bindings.get(key)
        if existing is not None and existing.immutable:
            return self._reject(
                rejected(ValidationCode.IMMUTABLE_BINDING, f"Binding '{key}' is immutable.", key=key)
            )

        if source == Source.IMPROVISED and self.strict_mode and confidence < IMPROVISED_MIN_CONFIDENCE:
            return self._reject(
                rejected(
                    ValidationCode.UNAUTHORIZED_SOURCE,
                    f"Improvised writes need confidence >= {IMPROVISED_MIN_CONFIDENCE}, got {confidence}.",
                    key=key,
                    source=source.value,
                    confidence=confidence,
                )
            )

        if existing is None:
            self._history.append(BindingAdded(key))
        else:
            self._history.append(BindingModified(key, existing))

        self._bindings[key] = SharedBinding(
            value=value,
            source=source,
            confidence=confidence,
            created_at=self._tick(),
        )
        return OK

    def set_immutable(self, key: str, value: Value, source: Source) -> ValidationOutcome:
        if key in self._bindings:
            return self._reject(
                rejected(ValidationCode.IMMUTABLE_BINDING, f"Binding '{key}' already exists.", key=key)
            )

        self._history.append(BindingAdded(key))
        self._bindings[key] = SharedBinding(
            value=value,
            source=source,
            confidence=1.0,
            created_at=self._tick(),
            immutable=True,
        )
        return OK

    def bindings_from(self, source: Source) -> list[tuple[str, SharedBinding]]:
        return [(key, binding) for key, binding in self._bindings.items() if binding.source == source]

    # === rules ===

    def add_rule(self, rule: SharedRule) -> ValidationOutcome:
        outcome = self.validator.validate_rule(rule, self._rules)
        if not outcome.passed:
            return self._reject(outcome)

        self._history.append(RuleAdded(rule.id, len(self._rules)))
        self._rules.append(rule)
        return OK

    def remove_rule(self, rule_id: str) -> Optional[SharedRule]:
        for index, rule in enumerate(self._rules):
            if rule.id == rule_id:
                self._history.append(RuleRemoved(index, rule))
                del self._rules[index]
                return rule
        return None

    def find_rules(self, predicate: str) -> list[SharedRule]:
        return [rule for rule in self._rules if rule.predicate == predicate]

    def find_rules_exact(self, predicate: str, arity: int) -> list[SharedRule]:
        return [rule for rule in self._rules if rule.predicate == predicate and rule.arity == arity]

    def rules_from(self, source: Source) -> list[SharedRule]:
        return [rule for rule in self._rules if rule.source == source]

    def iter_rules(self) -> Iterator[SharedRule]:
        return iter(tuple(self._rules))

    # === rollback ===

    def checkpoint(self) -> int:
        return len(self._history)

    def rollback(self, checkpoint: int) -> int:
        """Undo every change recorded after `checkpoint`; returns how many were undone."""
        if checkpoint < 0:
            raise ValueError(f"checkpoint must be >= 0, got {checkpoint}")

        undone = 0
        while len(self._history) > checkpoint:
            change = self._history.pop()
            if isinstance(change, BindingAdded):
                self._bindings.pop(change.key, None)
            elif isinstance(change, BindingModified):
                self._bindings[change.key] = change.previous
            elif isinstance(change, RuleAdded):
                if change.index < len(self._rules) and self._rules[change.index].id == change.rule_id:
                    del self._rules[change.index]
                else:
                    self._drop_last_rule_with_id(change.rule_id)
            elif isinstance(change, RuleRemoved):
                self._rules.insert(min(change.index, len(self._rules)), change.rule)
            undone += 1

        if undone:
            logger.debug("rolled back %d change(s) to checkpoint %d", undone, checkpoint)
        return undone

    def reset(self) -> None:
        self._bindings.clear()
        self._rules.clear()
        self._history.clear()
        self._clock = 0

    # === internals ===

    def _tick(self) -> int:
        self._clock += 1
        return self._clock

    def _drop_last_rule_with_id(self, rule_id: str) -> None:
        for index in range(len(self._rules) - 1, -1, -1):
            if self._rules[index].id == rule_id:
                del self._rules[index]
                return

    def _reject(self, outcome: ValidationOutcome) -> ValidationOutcome:
        logger.debug("shared context write rejected: %s (%s)", outcome.code.value, outcome.reason)
        return outcome


__all__ = [
    "BindingAdded",
    "BindingModified",
    "ContextChange",
    "IMPROVISED_MIN_CONFIDENCE",
    "RuleAdded",
    "RuleRemoved",
    "SharedContext",
]
