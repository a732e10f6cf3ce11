# semantic_disambiguation/adapters/dictionary.py
from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Optional, Protocol

from semantic_disambiguation.char_matcher import normalize_word


class DictionaryProvider(Protocol):
    """Adapter interface for an external word list (RAE dump, frequency table, ...)."""

    def is_valid(self, word: str) -> bool:
        """Return True when the word is a known entry."""
        ...

    def all_words(self) -> Iterator[str]:
        """Yield every valid word; fed to the character matcher."""
        ...

    def frequency(self, word: str) -> int:
        """Return the usage frequency of the word (or of its lemma), 0 when unknown."""
        ...

    def get_lemma(self, word: str) -> Optional[str]:
        """Return the lemma of a word or inflected form, or None."""
        ...


class InMemoryDictionary:
    """Dictionary provider backed by plain dicts, keyed by normalized word."""

    def __init__(self, words: Iterable[str] = ()) -> None:
        self._words: set[str] = set()
        self._frequencies: dict[str, int] = {}
        self._lemmas: dict[str, str] = {}
        for word in words:
            self.add_entry(word)

    def add_entry(self, word: str, *, frequency: Optional[int] = None, lemma: Optional[str] = None) -> None:
        key = normalize_word(word)
        if not key:
            return
        self._words.add(key)
        if frequency is not None:
            if frequency < 0:
                raise ValueError(f"frequency must be >= 0, got {frequency}")
            self._frequencies[key] = frequency
        if lemma is not None:
            lemma_key = normalize_word(lemma)
            if lemma_key and lemma_key != key:
                self._lemmas[key] = lemma_key

    def __len__(self) -> int:
        return len(self._words)

    def is_valid(self, word: str) -> bool:
        return normalize_word(word) in self._words

    def all_words(self) -> Iterator[str]:
        return iter(sorted(self._words))

    def frequency(self, word: str) -> int:
        key = normalize_word(word)
        if key in self._frequencies:
            return self._frequencies[key]
        lemma = self._lemmas.get(key)
        if lemma is not None:
            return self._frequencies.get(lemma, 0)
        return 0

    def get_lemma(self, word: str) -> Optional[str]:
        key = normalize_word(word)
        if key in self._frequencies:
            return key
        return self._lemmas.get(key)


__all__ = ["DictionaryProvider", "InMemoryDictionary"]
