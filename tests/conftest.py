from __future__ import annotations

from collections.abc import Callable

import pytest

from semantic_disambiguation import rules
from semantic_disambiguation.char_matcher import CharMatcher
from semantic_disambiguation.contracts import CharMatchConfig, DisambiguationConfig
from semantic_disambiguation.engine import SemanticDisambiguator
from semantic_disambiguation.grammar import SpanishGrammar
from semantic_disambiguation.rules import Goal, RuleBody, SharedRule, Source
from semantic_disambiguation.semantic import SemanticDB
from semantic_disambiguation.shared_context import SharedContext
from semantic_disambiguation.unification import UnifyContext, Value, Var


@pytest.fixture
def unify_ctx() -> UnifyContext:
    return UnifyContext()


@pytest.fixture
def shared_context() -> SharedContext:
    return SharedContext()


@pytest.fixture
def grammar() -> SpanishGrammar:
    return SpanishGrammar()


@pytest.fixture
def semantic_db() -> SemanticDB:
    return SemanticDB()


@pytest.fixture
def engine() -> SemanticDisambiguator:
    return SemanticDisambiguator()


@pytest.fixture
def make_matcher() -> Callable[..., CharMatcher]:
    def _make_matcher(*words: str, config: CharMatchConfig | None = None) -> CharMatcher:
        matcher = CharMatcher(config)
        matcher.load_dictionary(words)
        return matcher

    return _make_matcher


@pytest.fixture
def make_rule() -> Callable[..., SharedRule]:
    def _make_rule(
        predicate: str = "lugar",
        arity: int = 1,
        *,
        goals: tuple[Goal, ...] = (),
        source: Source = Source.SYSTEM,
        confidence: float = 1.0,
        rule_id: str = "",
    ) -> SharedRule:
        body = RuleBody.conjunction(goals) if goals else None
        return rules.make_rule(predicate, arity, body=body, source=source, confidence=confidence, rule_id=rule_id)

    return _make_rule


@pytest.fixture
def make_tautology() -> Callable[..., SharedRule]:
    def _make_tautology(predicate: str = "p", *, source: Source = Source.USER) -> SharedRule:
        arg: Value = Var("X")
        return SharedRule(
            predicate=predicate,
            arity=1,
            body=RuleBody.conjunction([Goal(predicate, (arg,))]),
            source=source,
        )

    return _make_tautology


@pytest.fixture
def make_engine() -> Callable[..., SemanticDisambiguator]:
    def _make_engine(
        *,
        alpha: float = 0.30,
        beta: float = 0.30,
        gamma: float = 0.40,
        min_confidence: float = 0.60,
        extra_words: tuple[str, ...] = (),
    ) -> SemanticDisambiguator:
        engine = SemanticDisambiguator(
            DisambiguationConfig(alpha=alpha, beta=beta, gamma=gamma, min_confidence=min_confidence)
        )
        engine.add_to_dictionary(extra_words)
        return engine

    return _make_engine
