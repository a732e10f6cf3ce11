# semantic_disambiguation/unification.py
from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Union

NUM_EPSILON = 1e-10


@dataclass(frozen=True)
class Atom:
    name: str


@dataclass(frozen=True)
class Var:
    name: str


@dataclass(frozen=True, eq=False)
class Num:
    value: float

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Num):
            return NotImplemented
        return abs(self.value - other.value) < NUM_EPSILON

    def __hash__(self) -> int:
        # Tolerance-based equality cannot be hashed by value.
        return hash(Num)


@dataclass(frozen=True)
class ValueList:
    items: tuple[Value, ...] = ()


@dataclass(frozen=True)
class Struct:
    functor: str
    args: tuple[Value, ...] = ()


Value = Union[Atom, Var, Num, ValueList, Struct]


def format_value(value: Value) -> str:
    """Prolog-ish rendering, stable across runs."""
    if isinstance(value, Atom):
        return value.name
    if isinstance(value, Var):
        return value.name
    if isinstance(value, Num):
        return repr(float(value.value))
    if isinstance(value, ValueList):
        return "[" + ", ".join(format_value(v) for v in value.items) + "]"
    if isinstance(value, Struct):
        return f"{value.functor}(" + ", ".join(format_value(a) for a in value.args) + ")"
    raise TypeError(f"not a symbolic value: {value!r}")


@dataclass
class UnifyContext:
    """
    Substitution store for one unification session.

    Failed unification is a plain `False`; the store is left as it was
    before the failing call. Backtracking across several calls is done by
    the caller with `checkpoint()` / `restore()`.
    """

    _substitutions: dict[str, Value] = field(default_factory=dict)
    _fresh_counter: int = 0

    @property
    def substitutions(self) -> Mapping[str, Value]:
        return MappingProxyType(self._substitutions)

    def fresh_var(self) -> Var:
        self._fresh_counter += 1
        return Var(f"_G{self._fresh_counter}")

    def deref(self, value: Value) -> Value:
        while isinstance(value, Var) and value.name in self._substitutions:
            value = self._substitutions[value.name]
        return value

    def occurs_in(self, name: str, value: Value) -> bool:
        value = self.deref(value)
        if isinstance(value, Var):
            return value.name == name
        if isinstance(value, ValueList):
            return any(self.occurs_in(name, item) for item in value.items)
        if isinstance(value, Struct):
            return any(self.occurs_in(name, arg) for arg in value.args)
        return False

    def bind(self, name: str, value: Value) -> bool:
        if self.occurs_in(name, value):
            return False
        self._substitutions[name] = value
        return True

    def unify(self, a: Value, b: Value) -> bool:
        snapshot = dict(self._substitutions)
        if self._unify(a, b):
            return True
        self._substitutions = snapshot
        return False

    def _unify(self, a: Value, b: Value) -> bool:
        a = self.deref(a)
        b = self.deref(b)

        if isinstance(a, Var) and isinstance(b, Var) and a.name == b.name:
            return True
        if isinstance(a, Var):
            return self.bind(a.name, b)
        if isinstance(b, Var):
            return self.bind(b.name, a)

        if isinstance(a, Atom) and isinstance(b, Atom):
            return a.name == b.name
        if isinstance(a, Num) and isinstance(b, Num):
            return abs(a.value - b.value) < NUM_EPSILON
        if isinstance(a, ValueList) and isinstance(b, ValueList):
            if len(a.items) != len(b.items):
                return False
            return all(self._unify(x, y) for x, y in zip(a.items, b.items))
        if isinstance(a, Struct) and isinstance(b, Struct):
            if a.functor != b.functor or len(a.args) != len(b.args):
                return False
            return all(self._unify(x, y) for x, y in zip(a.args, b.args))
        return False

    def apply(self, value: Value) -> Value:
        value = self.deref(value)
        if isinstance(value, ValueList):
            return ValueList(tuple(self.apply(item) for item in value.items))
        if isinstance(value, Struct):
            return Struct(value.functor, tuple(self.apply(arg) for arg in value.args))
        return value

    def checkpoint(self) -> UnifyContext:
        return UnifyContext(dict(self._substitutions), self._fresh_counter)

    def restore(self, snapshot: UnifyContext) -> None:
        self._substitutions = dict(snapshot._substitutions)
        self._fresh_counter = snapshot._fresh_counter


# ------------------------------------------------------------------------------
# Flexible string matching
# ------------------------------------------------------------------------------


def _fold(s: str) -> str:
    decomposed = unicodedata.normalize("NFD", s.lower())
    return "".join(c for c in decomposed if unicodedata.category(c) != "Mn")


def longest_common_subsequence(a: str, b: str) -> int:
    if not a or not b:
        return 0

    prev = [0] * (len(b) + 1)
    for ca in a:
        curr = [0]
        for j, cb in enumerate(b, start=1):
            if ca == cb:
                curr.append(prev[j - 1] + 1)
            else:
                curr.append(max(prev[j], curr[j - 1]))
        prev = curr
    return prev[-1]


def unify_flexible(pattern: str, text: str) -> float:
    """
    Accent- and case-insensitive match score in [0, 1].

    1.0 on equality, otherwise LCS length over the longer string. A
    standalone helper for callers matching free text against symbols; the
    kernel itself only unifies exactly.
    """
    p = _fold(pattern)
    t = _fold(text)
    if p == t:
        return 1.0
    max_len = max(len(p), len(t))
    return longest_common_subsequence(p, t) / max_len


__all__ = [
    "Atom",
    "NUM_EPSILON",
    "Num",
    "Struct",
    "UnifyContext",
    "Value",
    "ValueList",
    "Var",
    "format_value",
    "longest_common_subsequence",
    "unify_flexible",
]
