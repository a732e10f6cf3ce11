# semantic_disambiguation/engine.py
from __future__ import annotations

import logging
import unicodedata
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from semantic_disambiguation.adapters.dictionary import DictionaryProvider
from semantic_disambiguation.char_matcher import CharMatcher
from semantic_disambiguation.contracts import (
    CharMatchConfig,
    Correction,
    CorrectionExplanation,
    DisambiguationConfig,
    ProcessedSentence,
    ScoredCandidate,
    UnresolvedAnomaly,
)
from semantic_disambiguation.grammar import (
    Gender,
    NounCategory,
    NounInfo,
    Number,
    SpanishGrammar,
)
from semantic_disambiguation.rules import Source
from semantic_disambiguation.semantic import UNKNOWN_COMPATIBILITY, SemanticDB
from semantic_disambiguation.shared_context import SharedContext
from semantic_disambiguation.unification import Atom

logger = logging.getLogger(__name__)

CURRENT_THEME_KEY = "current_theme"
THEME_BINDING_CONFIDENCE = 0.8
NO_CANDIDATES_REASON = "no candidates found"

DEFAULT_SEMANTIC_WORDS = (
    "roma", "coliseo", "paris", "madrid", "amor", "odio", "paz",
    "ramo", "mora", "casa", "rosita", "azul", "romano",
)

DEFAULT_NOUNS: dict[str, NounInfo] = {
    "roma": NounInfo(Gender.FEMININE, Number.SINGULAR, NounCategory.PLACE),
    "coliseo": NounInfo(Gender.MASCULINE, Number.SINGULAR, NounCategory.PLACE, can_be_subject=False),
    "casa": NounInfo(Gender.FEMININE, Number.SINGULAR, NounCategory.THING),
    "amor": NounInfo(Gender.MASCULINE, Number.SINGULAR, NounCategory.CONCEPT),
}

DEFAULT_ADJECTIVES = ("azul", "romano", "grande", "pequeño")


# ------------------------------------------------------------------------------
# Tokenizer
# ------------------------------------------------------------------------------


@dataclass(frozen=True)
class Token:
    text: str
    start: int
    end: int


def _is_word_char(c: str) -> bool:
    # Combining marks keep decomposed (NFD) accents attached to their letter.
    return c.isalnum() or c in "'-" or unicodedata.category(c) == "Mn"


def tokenize(sentence: str) -> list[Token]:
    """
    Words are runs of letters, combining marks, digits, apostrophes and
    hyphens. Whitespace separates; every other character becomes a token of
    its own.
    """
    tokens: list[Token] = []
    start: Optional[int] = None

    for i, c in enumerate(sentence):
        if _is_word_char(c):
            if start is None:
                start = i
            continue

        if start is not None:
            tokens.append(Token(sentence[start:i], start, i))
            start = None
        if not c.isspace():
            tokens.append(Token(c, i, i + 1))

    if start is not None:
        tokens.append(Token(sentence[start:], start, len(sentence)))
    return tokens


def is_punctuation(text: str) -> bool:
    return bool(text) and not any(c.isalnum() for c in text)


def _splice(sentence: str, replacements: dict[int, str], tokens: Sequence[Token]) -> str:
    out = sentence
    for index in sorted(replacements, reverse=True):
        token = tokens[index]
        out = out[: token.start] + replacements[index] + out[token.end :]
    return out


# ------------------------------------------------------------------------------
# Orchestrator
# ------------------------------------------------------------------------------


class SemanticDisambiguator:
    """
    Fuses character similarity, grammatical fit and theme compatibility into
    one score per candidate: `alpha*char + beta*grammar + gamma*context`.

    Owns its shared context; use one instance per worker.
    """

    def __init__(
        self,
        config: Optional[DisambiguationConfig] = None,
        dictionary: Optional[DictionaryProvider] = None,
        *,
        char_config: Optional[CharMatchConfig] = None,
    ) -> None:
        self._config = config or DisambiguationConfig()
        self.char_matcher = CharMatcher(char_config)
        self.grammar = SpanishGrammar()
        self.semantic_db = SemanticDB()
        self._shared_context = SharedContext()
        self._dictionary = dictionary

        if dictionary is None:
            self._load_default_dictionary()
        else:
            self.char_matcher.load_dictionary(dictionary.all_words())
            self.char_matcher.load_dictionary(self.grammar.closed_class_words())

    @classmethod
    def with_dictionary(
        cls, dictionary: DictionaryProvider, config: Optional[DisambiguationConfig] = None
    ) -> SemanticDisambiguator:
        return cls(config=config, dictionary=dictionary)

    def _load_default_dictionary(self) -> None:
        self.char_matcher.load_dictionary(DEFAULT_SEMANTIC_WORDS)
        self.char_matcher.load_dictionary(self.grammar.closed_class_words())
        for word, info in DEFAULT_NOUNS.items():
            self.grammar.add_noun(word, info)
        for word in DEFAULT_ADJECTIVES:
            self.grammar.add_adjective(word)

    # === configuration / dictionary ===

    @property
    def config(self) -> DisambiguationConfig:
        return self._config

    def set_config(self, config: DisambiguationConfig) -> None:
        if not isinstance(config, DisambiguationConfig):
            raise TypeError(f"expected DisambiguationConfig, got {type(config).__name__}")
        self._config = config

    @property
    def shared_context(self) -> SharedContext:
        return self._shared_context

    def has_external_dictionary(self) -> bool:
        return self._dictionary is not None

    def add_to_dictionary(self, words: Iterable[str]) -> None:
        self.char_matcher.load_dictionary(words)

    def dictionary_size(self) -> int:
        return self.char_matcher.dictionary_size()

    def word_frequency(self, word: str) -> int:
        if self._dictionary is None:
            return 0
        return self._dictionary.frequency(word)

    # === processing ===

    def process(self, sentence: str) -> ProcessedSentence:
        tokens = tokenize(sentence)
        texts = [token.text for token in tokens]

        anomalies = [
            i for i, text in enumerate(texts) if not self.char_matcher.is_valid(text) and not is_punctuation(text)
        ]
        if not anomalies:
            return ProcessedSentence(original=sentence, corrected=sentence, confidence=1.0)

        context_words = [text for text in texts if self.char_matcher.is_valid(text)]
        inferred = self.semantic_db.infer_theme(context_words)
        theme = inferred[0] if inferred else None
        if theme is not None:
            self._record_theme(theme)

        replacements: dict[int, str] = {}
        corrections: list[Correction] = []
        unresolved: list[UnresolvedAnomaly] = []

        for index in anomalies:
            original = texts[index]
            ranked = self._rank_candidates(original, index, texts, theme)

            if not ranked:
                logger.debug("anomaly %r at %d: %s", original, index, NO_CANDIDATES_REASON)
                unresolved.append(
                    UnresolvedAnomaly(
                        position=index,
                        original=original,
                        explanation=CorrectionExplanation(reason=NO_CANDIDATES_REASON),
                    )
                )
                continue

            best = ranked[0]
            if best.score >= self._config.min_confidence:
                logger.debug("anomaly %r at %d -> %r (%.3f)", original, index, best.word, best.score)
                replacements[index] = best.word
                corrections.append(
                    Correction(
                        position=index,
                        original=original,
                        corrected=best.word,
                        confidence=best.score,
                        explanation=self._explain(best, ranked),
                    )
                )
            else:
                logger.debug(
                    "anomaly %r at %d left as is: best %r scored %.3f < %.3f",
                    original,
                    index,
                    best.word,
                    best.score,
                    self._config.min_confidence,
                )
                unresolved.append(
                    UnresolvedAnomaly(
                        position=index,
                        original=original,
                        best_score=best.score,
                        explanation=self._explain(
                            best,
                            ranked,
                            reason=(
                                f"Best candidate '{best.word}' scored {best.score:.2f}, "
                                f"below min_confidence {self._config.min_confidence:.2f}"
                            ),
                        ),
                    )
                )

        if corrections:
            confidence = sum(c.confidence for c in corrections) / len(corrections)
        else:
            confidence = 1.0

        return ProcessedSentence(
            original=sentence,
            corrected=_splice(sentence, replacements, tokens),
            confidence=confidence,
            corrections=tuple(corrections),
            unresolved=tuple(unresolved),
            theme=theme,
        )

    def _record_theme(self, theme: str) -> None:
        value = Atom(theme)
        current = self._shared_context.get(CURRENT_THEME_KEY)
        if (
            current is not None
            and current.value == value
            and current.source == Source.SEMANTIC
            and current.confidence == THEME_BINDING_CONFIDENCE
        ):
            return

        outcome = self._shared_context.set(CURRENT_THEME_KEY, value, Source.SEMANTIC, THEME_BINDING_CONFIDENCE)
        if not outcome:
            logger.debug("could not record theme %s: %s", theme, outcome.reason)

    def _rank_candidates(
        self, word: str, position: int, sentence: Sequence[str], theme: Optional[str]
    ) -> list[ScoredCandidate]:
        cfg = self._config
        scored: list[ScoredCandidate] = []

        for match in self.char_matcher.find_candidates(word):
            grammar_score = self.grammar.is_valid_at_position(match.word, position, sentence)
            if theme is not None:
                context_score = self.semantic_db.compatibility_score(match.word, theme)
            else:
                context_score = UNKNOWN_COMPATIBILITY

            scored.append(
                ScoredCandidate(
                    word=match.word,
                    score=cfg.alpha * match.score + cfg.beta * grammar_score + cfg.gamma * context_score,
                    char_score=match.score,
                    grammar_score=grammar_score,
                    context_score=context_score,
                )
            )

        # The matcher already bounds the pool; max_candidates caps the fused ranking.
        scored.sort(key=lambda c: (-c.score, c.word))
        return scored[: cfg.max_candidates]

    @staticmethod
    def _explain(
        best: ScoredCandidate, ranked: Sequence[ScoredCandidate], reason: Optional[str] = None
    ) -> CorrectionExplanation:
        if reason is None:
            reason = (
                f"Chosen '{best.word}': characters={best.char_score:.0%}, "
                f"grammar={best.grammar_score:.0%}, context={best.context_score:.0%}"
            )
        return CorrectionExplanation(
            char_score=best.char_score,
            grammar_score=best.grammar_score,
            context_score=best.context_score,
            candidates=list(ranked[:5]),
            reason=reason,
        )


__all__ = [
    "CURRENT_THEME_KEY",
    "DEFAULT_ADJECTIVES",
    "DEFAULT_NOUNS",
    "DEFAULT_SEMANTIC_WORDS",
    "NO_CANDIDATES_REASON",
    "SemanticDisambiguator",
    "Token",
    "is_punctuation",
    "tokenize",
]
