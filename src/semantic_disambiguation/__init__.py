# src/semantic_disambiguation/__init__.py
"""Spanish semantic disambiguation: fuses character, grammar and context evidence to correct anomalous words."""

from semantic_disambiguation.adapters.dictionary import DictionaryProvider, InMemoryDictionary
from semantic_disambiguation.char_matcher import CharMatcher, MatchResult, normalize_word
from semantic_disambiguation.constraints import (
    ConstraintValidator,
    ContextValidationError,
    ValidationCode,
    ValidationOutcome,
)
from semantic_disambiguation.contracts import (
    CharMatchConfig,
    Correction,
    CorrectionExplanation,
    DisambiguationConfig,
    ProcessedSentence,
    ScoredCandidate,
    UnresolvedAnomaly,
)
from semantic_disambiguation.engine import SemanticDisambiguator, Token, tokenize
from semantic_disambiguation.grammar import GrammarAnalysis, SentenceType, SpanishGrammar, TokenKind
from semantic_disambiguation.rules import SharedBinding, SharedRule, Source
from semantic_disambiguation.semantic import SemanticAnalysis, SemanticDB
from semantic_disambiguation.shared_context import SharedContext
from semantic_disambiguation.unification import Atom, Num, Struct, UnifyContext, ValueList, Var

__all__ = [
    "Atom",
    "CharMatchConfig",
    "CharMatcher",
    "ConstraintValidator",
    "ContextValidationError",
    "Correction",
    "CorrectionExplanation",
    "DictionaryProvider",
    "DisambiguationConfig",
    "GrammarAnalysis",
    "InMemoryDictionary",
    "MatchResult",
    "Num",
    "ProcessedSentence",
    "ScoredCandidate",
    "SemanticAnalysis",
    "SemanticDB",
    "SemanticDisambiguator",
    "SentenceType",
    "SharedBinding",
    "SharedContext",
    "SharedRule",
    "Source",
    "SpanishGrammar",
    "Struct",
    "Token",
    "TokenKind",
    "UnifyContext",
    "UnresolvedAnomaly",
    "ValidationCode",
    "ValidationOutcome",
    "ValueList",
    "Var",
    "normalize_word",
    "tokenize",
]
