# semantic_disambiguation/char_matcher.py
from __future__ import annotations

import math
import unicodedata
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Optional

from semantic_disambiguation.contracts import CharMatchConfig


def normalize_word(word: str) -> str:
    """
    Canonical dictionary key: lowercase, accents stripped, letters only.

    Total and idempotent; non-alphabetic input yields "".
    """
    decomposed = unicodedata.normalize("NFD", word.lower())
    return "".join(c for c in decomposed if unicodedata.category(c) != "Mn" and c.isalpha())


# ------------------------------------------------------------------------------
# Similarity metrics
# ------------------------------------------------------------------------------


def jaccard_similarity(a: str, b: str) -> float:
    set_a, set_b = set(a), set(b)
    union = set_a | set_b
    if not union:
        return 1.0
    return len(set_a & set_b) / len(union)


def positional_similarity(a: str, b: str) -> float:
    max_len = max(len(a), len(b))
    if max_len == 0:
        return 1.0
    matches = sum(1 for ca, cb in zip(a, b) if ca == cb)
    return matches / max_len


def length_similarity(a: str, b: str) -> float:
    max_len = max(len(a), len(b))
    if max_len == 0:
        return 1.0
    return 1.0 - abs(len(a) - len(b)) / max_len


def levenshtein_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein edit distance between two strings."""
    if len(s1) < len(s2):
        return levenshtein_distance(s2, s1)

    if len(s2) == 0:
        return len(s1)

    prev_row = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        curr_row = [i + 1]
        for j, c2 in enumerate(s2):
            insertions = prev_row[j + 1] + 1
            deletions = curr_row[j] + 1
            substitutions = prev_row[j] + (c1 != c2)
            curr_row.append(min(insertions, deletions, substitutions))
        prev_row = curr_row

    return prev_row[-1]


def levenshtein_similarity(a: str, b: str) -> float:
    max_len = max(len(a), len(b))
    if max_len == 0:
        return 1.0
    return 1.0 - levenshtein_distance(a, b) / max_len


def letter_weight_similarity(input_word: str, candidate: str) -> float:
    """
    Each input letter is worth 1/len(input); a letter scores when the
    candidate still has an unused copy of it.
    """
    if not input_word:
        return 1.0 if not candidate else 0.0

    weight = 1.0 / len(input_word)
    available = Counter(candidate)
    total = 0.0
    for c in input_word:
        if available[c] > 0:
            available[c] -= 1
            total += weight
    return total


# ------------------------------------------------------------------------------
# Matcher
# ------------------------------------------------------------------------------


@dataclass(frozen=True)
class SimilarityBreakdown:
    """Per-metric scores. `letter_weight` is reported for explanations only; it carries no weight."""

    jaccard: float
    positional: float
    length: float
    levenshtein: float
    letter_weight: float = 0.0

    @classmethod
    def perfect(cls) -> SimilarityBreakdown:
        return cls(jaccard=1.0, positional=1.0, length=1.0, levenshtein=1.0, letter_weight=1.0)


@dataclass(frozen=True)
class MatchResult:
    word: str
    score: float
    breakdown: SimilarityBreakdown


class CharMatcher:
    def __init__(self, config: Optional[CharMatchConfig] = None) -> None:
        self.config = config or CharMatchConfig()
        self._dictionary: set[str] = set()
        self._letter_index: dict[str, list[str]] = {}

    def load_dictionary(self, words: Iterable[str]) -> None:
        for word in words:
            self.add_word(word)

    def add_word(self, word: str) -> None:
        normalized = normalize_word(word)
        if not normalized or normalized in self._dictionary:
            return

        self._dictionary.add(normalized)
        for c in sorted(set(normalized)):
            self._letter_index.setdefault(c, []).append(normalized)

    def is_valid(self, word: str) -> bool:
        normalized = normalize_word(word)
        return bool(normalized) and normalized in self._dictionary

    def dictionary_size(self) -> int:
        return len(self._dictionary)

    def words(self) -> list[str]:
        return sorted(self._dictionary)

    def find_candidates(self, input_word: str) -> list[MatchResult]:
        normalized = normalize_word(input_word)
        if not normalized:
            return []

        if normalized in self._dictionary:
            return [MatchResult(word=normalized, score=1.0, breakdown=SimilarityBreakdown.perfect())]

        input_chars = set(normalized)
        shared: Counter[str] = Counter()
        for c in input_chars:
            for word in self._letter_index.get(c, ()):
                shared[word] += 1

        min_shared = max(1, math.ceil(len(input_chars) * 0.5))
        results = [
            self.score(normalized, word)
            for word, count in shared.items()
            if count >= min_shared
        ]
        results = [r for r in results if r.score >= self.config.min_similarity]
        results.sort(key=lambda r: (-r.score, r.word))
        return results[: self.config.max_candidates]

    def score(self, input_word: str, candidate: str) -> MatchResult:
        breakdown = SimilarityBreakdown(
            jaccard=jaccard_similarity(input_word, candidate),
            positional=positional_similarity(input_word, candidate),
            length=length_similarity(input_word, candidate),
            levenshtein=levenshtein_similarity(input_word, candidate),
            letter_weight=letter_weight_similarity(input_word, candidate),
        )
        cfg = self.config
        total = (
            cfg.weight_jaccard * breakdown.jaccard
            + cfg.weight_positional * breakdown.positional
            + cfg.weight_length * breakdown.length
            + cfg.weight_levenshtein * breakdown.levenshtein
        )
        return MatchResult(word=candidate, score=total, breakdown=breakdown)


__all__ = [
    "CharMatcher",
    "MatchResult",
    "SimilarityBreakdown",
    "jaccard_similarity",
    "length_similarity",
    "letter_weight_similarity",
    "levenshtein_distance",
    "levenshtein_similarity",
    "normalize_word",
    "positional_similarity",
]
