# semantic_disambiguation/semantic.py
"""
Word categories, themes and theme compatibility.

"roma" is a place in Italy and fits a Roman-architecture context; "amor" is
a positive emotion and does not. Every lookup goes through `normalize_word`,
so "París" and "paris" are the same entry.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence, Union

from semantic_disambiguation._compat import StrEnum
from semantic_disambiguation.char_matcher import normalize_word

logger = logging.getLogger(__name__)

UNKNOWN_COMPATIBILITY = 0.5
GENERIC_COMPATIBILITY = 0.7
NO_COMPATIBILITY = 0.2
UNKNOWN_WORD_CONTEXT_SCORE = 0.3

# ------------------------------------------------------------------------------
# Categories
# ------------------------------------------------------------------------------


class PlaceType(StrEnum):
    CITY = "city"
    COUNTRY = "country"
    BUILDING = "building"
    MONUMENT = "monument"
    NATURAL_FEATURE = "natural_feature"
    REGION = "region"
    GENERIC = "generic"


class ObjectType(StrEnum):
    FOOD = "food"
    PLANT = "plant"
    ANIMAL = "animal"
    ARTIFACT = "artifact"
    NATURAL = "natural"
    ABSTRACT = "abstract"


class Valence(StrEnum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class ActionType(StrEnum):
    PHYSICAL = "physical"
    MENTAL = "mental"
    SOCIAL = "social"
    MOVEMENT = "movement"


class TimeType(StrEnum):
    DURATION = "duration"
    POINT = "point"
    FREQUENCY = "frequency"
    SEASON = "season"


@dataclass(frozen=True)
class Place:
    place_type: PlaceType = PlaceType.GENERIC
    region: Optional[str] = None
    country: Optional[str] = None


@dataclass(frozen=True)
class Person:
    role: Optional[str] = None


@dataclass(frozen=True)
class ObjectCategory:
    object_type: ObjectType


@dataclass(frozen=True)
class Emotion:
    valence: Valence


@dataclass(frozen=True)
class Concept:
    domain: Optional[str] = None


@dataclass(frozen=True)
class Action:
    action_type: ActionType


@dataclass(frozen=True)
class Time:
    time_type: TimeType


@dataclass(frozen=True)
class Quantity:
    pass


@dataclass(frozen=True)
class Quality:
    pass


@dataclass(frozen=True)
class UnknownCategory:
    pass


SemanticCategory = Union[
    Place, Person, ObjectCategory, Emotion, Concept, Action, Time, Quantity, Quality, UnknownCategory
]


def describe_category(category: SemanticCategory) -> str:
    if isinstance(category, Place):
        where = f" in {category.region}" if category.region else ""
        return f"place ({category.place_type.value}){where}"
    if isinstance(category, ObjectCategory):
        return f"object ({category.object_type.value})"
    if isinstance(category, Emotion):
        return f"emotion ({category.valence.value})"
    if isinstance(category, Concept):
        return f"concept ({category.domain})" if category.domain else "concept"
    if isinstance(category, Action):
        return f"action ({category.action_type.value})"
    if isinstance(category, Time):
        return f"time ({category.time_type.value})"
    if isinstance(category, UnknownCategory):
        return "unknown"
    return type(category).__name__.lower()


# ------------------------------------------------------------------------------
# Category matchers
# ------------------------------------------------------------------------------


@dataclass(frozen=True)
class PlaceInRegion:
    region: str

    def matches(self, category: SemanticCategory) -> bool:
        return isinstance(category, Place) and category.region is not None and category.region == self.region


@dataclass(frozen=True)
class AnyPlace:
    def matches(self, category: SemanticCategory) -> bool:
        return isinstance(category, Place)


@dataclass(frozen=True)
class ObjectOfType:
    object_type: ObjectType

    def matches(self, category: SemanticCategory) -> bool:
        return isinstance(category, ObjectCategory) and category.object_type == self.object_type


@dataclass(frozen=True)
class EmotionWithValence:
    valence: Valence

    def matches(self, category: SemanticCategory) -> bool:
        return isinstance(category, Emotion) and category.valence == self.valence


@dataclass(frozen=True)
class ConceptInDomain:
    domain: str

    def matches(self, category: SemanticCategory) -> bool:
        return isinstance(category, Concept) and category.domain is not None and category.domain == self.domain


@dataclass(frozen=True)
class AnyCategory:
    def matches(self, category: SemanticCategory) -> bool:
        return True


CategoryMatcher = Union[PlaceInRegion, AnyPlace, ObjectOfType, EmotionWithValence, ConceptInDomain, AnyCategory]


# ------------------------------------------------------------------------------
# Entries, themes, rules, relations
# ------------------------------------------------------------------------------


@dataclass(frozen=True)
class SemanticEntry:
    word: str
    category: SemanticCategory
    subcategory: Optional[str] = None
    tags: tuple[str, ...] = ()
    related: tuple[str, ...] = ()


@dataclass(frozen=True)
class Theme:
    name: str
    description: str = ""
    keywords: tuple[str, ...] = ()
    compatible_categories: tuple[CategoryMatcher, ...] = ()


@dataclass(frozen=True)
class CompatibilityRule:
    theme: str
    matcher: CategoryMatcher
    score: float


class RelationType(StrEnum):
    HYPONYM = "hyponym"
    HYPERNYM = "hypernym"
    SYNONYM = "synonym"
    ANTONYM = "antonym"
    MERONYM = "meronym"
    HOLONYM = "holonym"
    RELATED = "related"


@dataclass(frozen=True)
class SemanticRelation:
    word1: str
    word2: str
    relation_type: RelationType
    strength: float = 1.0


@dataclass(frozen=True)
class SemanticAnalysis:
    word: str
    category: Optional[SemanticCategory]
    inferred_theme: Optional[str]
    context_score: float
    explanation: str


# ------------------------------------------------------------------------------
# Base vocabulary
# ------------------------------------------------------------------------------

BASE_ENTRIES: tuple[SemanticEntry, ...] = (
    SemanticEntry(
        "roma",
        Place(PlaceType.CITY, region="italia", country="italia"),
        subcategory="capital_historica",
        tags=("arquitectura", "historia", "imperio_romano"),
        related=("coliseo", "vaticano", "italia"),
    ),
    SemanticEntry(
        "coliseo",
        Place(PlaceType.MONUMENT, region="italia", country="italia"),
        subcategory="anfiteatro",
        tags=("arquitectura", "romano", "monumento"),
        related=("roma", "gladiador"),
    ),
    SemanticEntry(
        "paris",
        Place(PlaceType.CITY, region="francia", country="francia"),
        subcategory="capital",
        tags=("romantico", "arte"),
        related=("torre_eiffel", "louvre"),
    ),
    SemanticEntry(
        "madrid",
        Place(PlaceType.CITY, region="espana", country="espana"),
        subcategory="capital",
        tags=("espana",),
        related=("prado",),
    ),
    SemanticEntry(
        "amor",
        Emotion(Valence.POSITIVE),
        subcategory="afecto",
        tags=("sentimiento", "romantico"),
        related=("carino", "querer"),
    ),
    SemanticEntry(
        "odio",
        Emotion(Valence.NEGATIVE),
        subcategory="aversion",
        tags=("sentimiento", "negativo"),
        related=("rencor",),
    ),
    SemanticEntry(
        "paz",
        Concept(domain="estado_social"),
        tags=("positivo", "armonia"),
        related=("tranquilidad",),
    ),
    SemanticEntry(
        "ramo",
        ObjectCategory(ObjectType.PLANT),
        subcategory="flores",
        tags=("naturaleza", "regalo"),
        related=("flor", "rosa"),
    ),
    SemanticEntry(
        "mora",
        ObjectCategory(ObjectType.FOOD),
        subcategory="fruta",
        tags=("comida", "naturaleza"),
        related=("fruta", "zarzamora"),
    ),
    SemanticEntry(
        "casa",
        Place(PlaceType.BUILDING),
        subcategory="vivienda",
        tags=("edificio", "hogar"),
        related=("hogar", "edificio"),
    ),
    SemanticEntry("rosita", Person(), subcategory="nombre_propio", tags=("femenino",)),
    SemanticEntry(
        "azul",
        Quality(),
        subcategory="color",
        tags=("color", "frio"),
        related=("celeste", "marino"),
    ),
    SemanticEntry(
        "romano",
        Quality(),
        subcategory="gentilicio",
        tags=("roma", "italia", "antiguo"),
        related=("roma", "imperio"),
    ),
)

BASE_THEMES: tuple[Theme, ...] = (
    Theme(
        "arquitectura_romana",
        "Arquitectura y monumentos del Imperio Romano",
        keywords=("coliseo", "romano", "roma", "imperio", "gladiador", "anfiteatro"),
        compatible_categories=(PlaceInRegion("italia"), ConceptInDomain("historia")),
    ),
    Theme(
        "romance",
        "Temas románticos y emocionales",
        keywords=("amor", "querer", "corazon", "romantico"),
        compatible_categories=(EmotionWithValence(Valence.POSITIVE), ConceptInDomain("sentimiento")),
    ),
    Theme(
        "naturaleza",
        "Flora, fauna y elementos naturales",
        keywords=("flor", "arbol", "rio", "montana"),
        compatible_categories=(
            ObjectOfType(ObjectType.PLANT),
            ObjectOfType(ObjectType.ANIMAL),
            ObjectOfType(ObjectType.NATURAL),
        ),
    ),
    Theme(
        "hogar",
        "Casa, familia, vida doméstica",
        keywords=("casa", "familia", "hogar"),
        compatible_categories=(AnyPlace(), AnyCategory()),
    ),
    Theme(
        "viajes",
        "Viajes y geografía",
        keywords=("viajé", "visité", "fui", "desde", "hacia", "madrid", "paris", "roma"),
        compatible_categories=(AnyPlace(),),
    ),
)

BASE_RULES: tuple[CompatibilityRule, ...] = (
    CompatibilityRule("arquitectura_romana", PlaceInRegion("italia"), 0.98),
    CompatibilityRule("arquitectura_romana", EmotionWithValence(Valence.POSITIVE), 0.05),
    CompatibilityRule("arquitectura_romana", EmotionWithValence(Valence.NEGATIVE), 0.05),
    CompatibilityRule("arquitectura_romana", ObjectOfType(ObjectType.PLANT), 0.15),
    CompatibilityRule("arquitectura_romana", ObjectOfType(ObjectType.FOOD), 0.10),
    CompatibilityRule("romance", EmotionWithValence(Valence.POSITIVE), 0.98),
    CompatibilityRule("romance", PlaceInRegion("italia"), 0.30),
    CompatibilityRule("romance", PlaceInRegion("francia"), 0.60),
    CompatibilityRule("naturaleza", ObjectOfType(ObjectType.PLANT), 0.90),
    CompatibilityRule("naturaleza", ObjectOfType(ObjectType.FOOD), 0.70),
    CompatibilityRule("viajes", AnyPlace(), 0.95),
    CompatibilityRule("viajes", EmotionWithValence(Valence.POSITIVE), 0.20),
)


# ------------------------------------------------------------------------------
# Database
# ------------------------------------------------------------------------------


@dataclass
class SemanticDB:
    """In-memory semantic vocabulary. Themes keep their registration order."""

    _words: dict[str, SemanticEntry] = field(default_factory=dict, init=False, repr=False)
    _themes: dict[str, Theme] = field(default_factory=dict, init=False, repr=False)
    _theme_keywords: dict[str, frozenset[str]] = field(default_factory=dict, init=False, repr=False)
    _rules: list[CompatibilityRule] = field(default_factory=list, init=False, repr=False)
    _relations: list[SemanticRelation] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        for entry in BASE_ENTRIES:
            self.add_word(entry)
        for theme in BASE_THEMES:
            self.add_theme(theme)
        for rule in BASE_RULES:
            self._rules.append(rule)

    # === vocabulary ===

    def add_word(self, entry: SemanticEntry) -> None:
        key = normalize_word(entry.word)
        if not key:
            raise ValueError(f"cannot index semantic entry with empty normalized word: {entry.word!r}")
        self._words[key] = entry

    def lookup(self, word: str) -> Optional[SemanticEntry]:
        return self._words.get(normalize_word(word))

    def word_count(self) -> int:
        return len(self._words)

    def add_theme(self, theme: Theme) -> None:
        self._themes[theme.name] = theme
        self._theme_keywords[theme.name] = frozenset(k for k in map(normalize_word, theme.keywords) if k)

    def theme(self, name: str) -> Optional[Theme]:
        return self._themes.get(name)

    def theme_names(self) -> list[str]:
        return list(self._themes)

    def add_compatibility_rule(self, theme: str, matcher: CategoryMatcher, score: float) -> CompatibilityRule:
        if not 0.0 <= score <= 1.0:
            raise ValueError(f"compatibility score must be within [0, 1], got {score}")
        rule = CompatibilityRule(theme=theme, matcher=matcher, score=score)
        self._rules.append(rule)
        return rule

    def add_relation(
        self,
        word1: str,
        word2: str,
        relation_type: RelationType = RelationType.RELATED,
        strength: float = 1.0,
    ) -> SemanticRelation:
        relation = SemanticRelation(normalize_word(word1), normalize_word(word2), relation_type, strength)
        self._relations.append(relation)
        return relation

    def relations_of(self, word: str) -> list[SemanticRelation]:
        key = normalize_word(word)
        return [r for r in self._relations if key in (r.word1, r.word2)]

    def related_words(self, word: str) -> list[str]:
        """Entry's own related words followed by relation partners, without duplicates."""
        key = normalize_word(word)
        out: list[str] = []
        entry = self._words.get(key)
        if entry is not None:
            out.extend(entry.related)
        for relation in self.relations_of(key):
            out.append(relation.word2 if relation.word1 == key else relation.word1)
        return list(dict.fromkeys(w for w in out if w != key))

    # === scoring ===

    def infer_theme(self, context_words: Iterable[str]) -> Optional[tuple[str, float]]:
        scores: dict[str, float] = {}
        for word in context_words:
            key = normalize_word(word)
            if not key:
                continue

            for name, keywords in self._theme_keywords.items():
                if key in keywords:
                    scores[name] = scores.get(name, 0.0) + 1.0

            entry = self._words.get(key)
            if entry is None:
                continue
            tags = {normalize_word(tag) for tag in entry.tags}
            for name, keywords in self._theme_keywords.items():
                hits = len(keywords & tags)
                if hits:
                    scores[name] = scores.get(name, 0.0) + 0.5 * hits

        best: Optional[tuple[str, float]] = None
        for name in self._themes:
            score = scores.get(name)
            if score is not None and (best is None or score > best[1]):
                best = (name, score)

        if best is not None:
            logger.debug("inferred theme %s (score %.2f)", best[0], best[1])
        return best

    def compatibility_score(self, word: str, theme: str) -> float:
        entry = self.lookup(word)
        theme_info = self._themes.get(theme)
        if entry is None or theme_info is None:
            return UNKNOWN_COMPATIBILITY

        for rule in self._rules:
            if rule.theme == theme and rule.matcher.matches(entry.category):
                return rule.score

        if any(matcher.matches(entry.category) for matcher in theme_info.compatible_categories):
            return GENERIC_COMPATIBILITY
        return NO_COMPATIBILITY

    def analyze(self, word: str, context_words: Sequence[str]) -> SemanticAnalysis:
        entry = self.lookup(word)
        inferred = self.infer_theme(context_words)
        theme = inferred[0] if inferred else None

        if entry is not None and theme is not None:
            score = self.compatibility_score(word, theme)
            explanation = (
                f"'{word}' is {describe_category(entry.category)}, "
                f"inferred theme '{theme}', compatibility {score:.0%}"
            )
        elif entry is not None:
            score = UNKNOWN_COMPATIBILITY
            explanation = f"'{word}' is {describe_category(entry.category)}, no clear theme in context"
        elif theme is not None:
            score = UNKNOWN_WORD_CONTEXT_SCORE
            explanation = f"'{word}' is unknown, inferred theme '{theme}'"
        else:
            score = UNKNOWN_WORD_CONTEXT_SCORE
            explanation = f"'{word}' is unknown, no clear context"

        return SemanticAnalysis(
            word=word,
            category=entry.category if entry is not None else None,
            inferred_theme=theme,
            context_score=score,
            explanation=explanation,
        )


__all__ = [
    "Action",
    "ActionType",
    "AnyCategory",
    "AnyPlace",
    "BASE_ENTRIES",
    "BASE_RULES",
    "BASE_THEMES",
    "CategoryMatcher",
    "CompatibilityRule",
    "Concept",
    "ConceptInDomain",
    "Emotion",
    "EmotionWithValence",
    "ObjectCategory",
    "ObjectOfType",
    "ObjectType",
    "Person",
    "Place",
    "PlaceInRegion",
    "PlaceType",
    "Quality",
    "Quantity",
    "RelationType",
    "SemanticAnalysis",
    "SemanticCategory",
    "SemanticDB",
    "SemanticEntry",
    "SemanticRelation",
    "Theme",
    "Time",
    "TimeType",
    "UnknownCategory",
    "Valence",
    "describe_category",
]
