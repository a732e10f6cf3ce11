# semantic_disambiguation/grammar.py
"""
Spanish grammar with free word order.

"Me gusta la casa azul de Rosita" and "La casa azul de Rosita me gusta" are
both valid, so validity is judged from the roles around the verb rather than
from a fixed template.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Sequence, Union

from semantic_disambiguation._compat import StrEnum
from semantic_disambiguation.char_matcher import normalize_word

# ------------------------------------------------------------------------------
# Lexicon vocabulary
# ------------------------------------------------------------------------------


class Person(StrEnum):
    FIRST = "first"
    SECOND = "second"
    THIRD = "third"


class Number(StrEnum):
    SINGULAR = "singular"
    PLURAL = "plural"


class Tense(StrEnum):
    PRESENT = "present"
    PAST = "past"
    FUTURE = "future"
    IMPERFECT = "imperfect"
    CONDITIONAL = "conditional"
    SUBJUNCTIVE = "subjunctive"


class VerbCategory(StrEnum):
    ACTION = "action"
    STATE = "state"
    MOVEMENT = "movement"
    PERCEPTION = "perception"
    EMOTION = "emotion"
    COGNITIVE = "cognitive"


class Gender(StrEnum):
    MASCULINE = "masculine"
    FEMININE = "feminine"
    NEUTRAL = "neutral"


class NounCategory(StrEnum):
    PERSON = "person"
    PLACE = "place"
    THING = "thing"
    ANIMAL = "animal"
    CONCEPT = "concept"
    TIME = "time"


class PronounCase(StrEnum):
    SUBJECT = "subject"
    DIRECT_OBJ = "direct_obj"
    INDIRECT_OBJ = "indirect_obj"
    REFLEXIVE = "reflexive"


@dataclass(frozen=True)
class Conjugation:
    person: Person
    number: Number
    tense: Tense


@dataclass(frozen=True)
class VerbInfo:
    infinitive: str
    conjugations: Mapping[str, Conjugation]
    category: VerbCategory
    transitive: bool = False


@dataclass(frozen=True)
class NounInfo:
    gender: Gender
    number: Number
    category: NounCategory
    can_be_subject: bool = True
    can_be_object: bool = True


@dataclass(frozen=True)
class ArticleInfo:
    definite: bool
    gender: Gender
    number: Number


@dataclass(frozen=True)
class PronounInfo:
    person: Person
    number: Number
    case: PronounCase


LexiconInfo = Union[VerbInfo, NounInfo, ArticleInfo, PronounInfo]


# ------------------------------------------------------------------------------
# Analysis results
# ------------------------------------------------------------------------------


class TokenKind(StrEnum):
    VERB = "verb"
    NOUN = "noun"
    ARTICLE = "article"
    PREPOSITION = "preposition"
    PRONOUN = "pronoun"
    CONJUNCTION = "conjunction"
    ADVERB = "adverb"
    ADJECTIVE = "adjective"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ClassifiedToken:
    text: str
    kind: TokenKind
    info: Optional[LexiconInfo] = None
    conjugation: Optional[Conjugation] = None

    @property
    def is_subject_like(self) -> bool:
        if self.kind == TokenKind.NOUN:
            return True
        return isinstance(self.info, PronounInfo) and self.info.case == PronounCase.SUBJECT

    @property
    def is_object_pronoun(self) -> bool:
        return isinstance(self.info, PronounInfo) and self.info.case in (
            PronounCase.DIRECT_OBJ,
            PronounCase.INDIRECT_OBJ,
        )


class GrammaticalRole(StrEnum):
    SUBJECT = "subject"
    VERB = "verb"
    DIRECT_OBJECT = "direct_object"
    INDIRECT_OBJECT = "indirect_object"
    ARTICLE = "article"
    ADJECTIVE = "adjective"
    PREPOSITION = "preposition"
    ADVERB = "adverb"
    CONJUNCTION = "conjunction"


class SentenceType(StrEnum):
    SVO = "svo"
    SV = "sv"
    VSO = "vso"
    OVS = "ovs"
    IMPERSONAL = "impersonal"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class GrammaticalComponent:
    role: GrammaticalRole
    tokens: tuple[int, ...]
    head: Optional[int] = None


@dataclass(frozen=True)
class GrammaticalStructure:
    sentence_type: SentenceType
    components: tuple[GrammaticalComponent, ...] = ()

    def has_role(self, role: GrammaticalRole) -> bool:
        return any(component.role == role for component in self.components)


@dataclass(frozen=True)
class ExpectedWord:
    roles: tuple[GrammaticalRole, ...]
    categories: tuple[str, ...] = ()
    required: bool = True


class IssueSeverity(StrEnum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class GrammarIssue:
    position: int
    severity: IssueSeverity
    message: str


@dataclass(frozen=True)
class GrammarAnalysis:
    structure: GrammaticalStructure
    validity_score: float
    tokens: tuple[ClassifiedToken, ...] = ()
    issues: tuple[GrammarIssue, ...] = ()
    expected_at: Mapping[int, ExpectedWord] = field(default_factory=dict)

    @property
    def sentence_type(self) -> SentenceType:
        return self.structure.sentence_type


_AFTER_ARTICLE = ExpectedWord(
    roles=(GrammaticalRole.SUBJECT, GrammaticalRole.DIRECT_OBJECT, GrammaticalRole.ADJECTIVE),
    categories=("sustantivo", "adjetivo"),
)

_AFTER_PREPOSITION = ExpectedWord(
    roles=(GrammaticalRole.DIRECT_OBJECT,),
    categories=("lugar", "cosa", "persona"),
)

_PRONOUN_ROLES: dict[PronounCase, GrammaticalRole] = {
    PronounCase.SUBJECT: GrammaticalRole.SUBJECT,
    PronounCase.DIRECT_OBJ: GrammaticalRole.DIRECT_OBJECT,
    PronounCase.INDIRECT_OBJ: GrammaticalRole.INDIRECT_OBJECT,
    PronounCase.REFLEXIVE: GrammaticalRole.DIRECT_OBJECT,
}

_FIXED_ROLES: dict[TokenKind, GrammaticalRole] = {
    TokenKind.VERB: GrammaticalRole.VERB,
    TokenKind.ARTICLE: GrammaticalRole.ARTICLE,
    TokenKind.ADJECTIVE: GrammaticalRole.ADJECTIVE,
    TokenKind.PREPOSITION: GrammaticalRole.PREPOSITION,
    TokenKind.ADVERB: GrammaticalRole.ADVERB,
    TokenKind.CONJUNCTION: GrammaticalRole.CONJUNCTION,
}


# ------------------------------------------------------------------------------
# Base lexicon
# ------------------------------------------------------------------------------

_S, _P = Number.SINGULAR, Number.PLURAL
_M, _F = Gender.MASCULINE, Gender.FEMININE

BASE_ARTICLES: dict[str, ArticleInfo] = {
    "el": ArticleInfo(True, _M, _S),
    "la": ArticleInfo(True, _F, _S),
    "los": ArticleInfo(True, _M, _P),
    "las": ArticleInfo(True, _F, _P),
    "un": ArticleInfo(False, _M, _S),
    "una": ArticleInfo(False, _F, _S),
    "unos": ArticleInfo(False, _M, _P),
    "unas": ArticleInfo(False, _F, _P),
}

BASE_PREPOSITIONS = (
    "a", "ante", "bajo", "con", "contra", "de", "desde", "en", "entre",
    "hacia", "hasta", "para", "por", "según", "sin", "sobre", "tras",
)

BASE_PRONOUNS: dict[str, PronounInfo] = {
    "yo": PronounInfo(Person.FIRST, _S, PronounCase.SUBJECT),
    "tú": PronounInfo(Person.SECOND, _S, PronounCase.SUBJECT),
    "él": PronounInfo(Person.THIRD, _S, PronounCase.SUBJECT),
    "ella": PronounInfo(Person.THIRD, _S, PronounCase.SUBJECT),
    "nosotros": PronounInfo(Person.FIRST, _P, PronounCase.SUBJECT),
    "me": PronounInfo(Person.FIRST, _S, PronounCase.DIRECT_OBJ),
    "te": PronounInfo(Person.SECOND, _S, PronounCase.DIRECT_OBJ),
    "le": PronounInfo(Person.THIRD, _S, PronounCase.INDIRECT_OBJ),
    "se": PronounInfo(Person.THIRD, _S, PronounCase.REFLEXIVE),
}

BASE_CONJUNCTIONS = (
    "y", "e", "o", "u", "pero", "sino", "que", "porque", "aunque", "si",
    "cuando", "donde", "como",
)

BASE_ADVERBS = (
    "muy", "bien", "mal", "mucho", "poco", "siempre", "nunca", "ya",
    "todavía", "aquí", "allí", "ahora", "después", "antes", "también",
    "tampoco", "sí", "no",
)


def _forms(*rows: tuple[str, Person, Number, Tense]) -> dict[str, Conjugation]:
    return {form: Conjugation(person, number, tense) for form, person, number, tense in rows}


_1, _2, _3 = Person.FIRST, Person.SECOND, Person.THIRD
_PRES, _PAST = Tense.PRESENT, Tense.PAST

BASE_VERBS: tuple[VerbInfo, ...] = (
    VerbInfo(
        "gustar",
        _forms(("gusta", _3, _S, _PRES), ("gustan", _3, _P, _PRES), ("gustó", _3, _S, _PAST)),
        VerbCategory.EMOTION,
    ),
    VerbInfo(
        "ser",
        _forms(
            ("soy", _1, _S, _PRES), ("eres", _2, _S, _PRES), ("es", _3, _S, _PRES),
            ("somos", _1, _P, _PRES), ("son", _3, _P, _PRES),
        ),
        VerbCategory.STATE,
    ),
    VerbInfo(
        "estar",
        _forms(
            ("estoy", _1, _S, _PRES), ("estás", _2, _S, _PRES), ("está", _3, _S, _PRES),
            ("estamos", _1, _P, _PRES), ("están", _3, _P, _PRES),
        ),
        VerbCategory.STATE,
    ),
    VerbInfo(
        "visitar",
        _forms(
            ("visito", _1, _S, _PRES), ("visitas", _2, _S, _PRES), ("visita", _3, _S, _PRES),
            ("visité", _1, _S, _PAST), ("visitó", _3, _S, _PAST),
        ),
        VerbCategory.MOVEMENT,
        transitive=True,
    ),
    VerbInfo(
        "correr",
        _forms(
            ("corro", _1, _S, _PRES), ("corres", _2, _S, _PRES), ("corre", _3, _S, _PRES),
            ("corremos", _1, _P, _PRES), ("corren", _3, _P, _PRES),
        ),
        VerbCategory.ACTION,
    ),
    VerbInfo(
        "ir",
        _forms(
            ("voy", _1, _S, _PRES), ("vas", _2, _S, _PRES), ("va", _3, _S, _PRES),
            ("vamos", _1, _P, _PRES), ("van", _3, _P, _PRES),
            ("fui", _1, _S, _PAST), ("fue", _3, _S, _PAST),
        ),
        VerbCategory.MOVEMENT,
    ),
)


# ------------------------------------------------------------------------------
# Grammar engine
# ------------------------------------------------------------------------------


class SpanishGrammar:
    def __init__(self) -> None:
        self._articles: dict[str, ArticleInfo] = dict(BASE_ARTICLES)
        self._prepositions: set[str] = set(BASE_PREPOSITIONS)
        self._pronouns: dict[str, PronounInfo] = dict(BASE_PRONOUNS)
        self._conjunctions: set[str] = set(BASE_CONJUNCTIONS)
        self._adverbs: set[str] = set(BASE_ADVERBS)
        self._verbs: dict[str, VerbInfo] = {}
        self._verb_forms: dict[str, VerbInfo] = {}
        self._adjectives: set[str] = set()
        self._nouns: dict[str, NounInfo] = {}
        self._folded: Optional[dict[str, str]] = None

        for verb in BASE_VERBS:
            self._register_verb(verb)

    # === lexicon ===

    def add_noun(self, word: str, info: NounInfo) -> None:
        self._nouns[word.lower()] = info
        self._folded = None

    def add_adjective(self, word: str) -> None:
        self._adjectives.add(word.lower())
        self._folded = None

    def add_verb(
        self,
        infinitive: str,
        conjugations: Mapping[str, Conjugation],
        category: VerbCategory,
        *,
        transitive: bool = False,
    ) -> VerbInfo:
        verb = VerbInfo(
            infinitive=infinitive.lower(),
            conjugations=MappingProxyType({form.lower(): c for form, c in conjugations.items()}),
            category=category,
            transitive=transitive,
        )
        self._register_verb(verb)
        return verb

    def verb(self, infinitive: str) -> Optional[VerbInfo]:
        return self._verbs.get(infinitive.lower())

    def closed_class_words(self) -> list[str]:
        """Articles, prepositions, pronouns, conjunctions, adverbs and every conjugated verb form."""
        words: list[str] = []
        words.extend(self._articles)
        words.extend(sorted(self._prepositions))
        words.extend(self._pronouns)
        words.extend(sorted(self._conjunctions))
        words.extend(sorted(self._adverbs))
        words.extend(self._verb_forms)
        return words

    def _register_verb(self, verb: VerbInfo) -> None:
        self._verbs[verb.infinitive] = verb
        stale = [f for f, owner in self._verb_forms.items() if owner.infinitive == verb.infinitive]
        for form in stale:
            del self._verb_forms[form]
        for form in verb.conjugations:
            # A form shared with another verb stays with whichever registered it first.
            self._verb_forms.setdefault(form, verb)
        self._folded = None

    # === classification ===

    def classify_token(self, word: str) -> ClassifiedToken:
        """
        Exactly one class per token. Closed-class words win over verbs,
        adjectives and nouns. An accent-insensitive lookup runs only when the
        exact lowercase one finds nothing.
        """
        lower = word.lower()
        token = self._classify_exact(word, lower)
        if token.kind != TokenKind.UNKNOWN:
            return token

        folded = normalize_word(word)
        if not folded:
            return token
        key = self._folded_index().get(folded)
        if key is None:
            return token
        return self._classify_exact(word, key)

    def _classify_exact(self, text: str, lower: str) -> ClassifiedToken:
        article = self._articles.get(lower)
        if article is not None:
            return ClassifiedToken(text, TokenKind.ARTICLE, article)
        if lower in self._prepositions:
            return ClassifiedToken(text, TokenKind.PREPOSITION)
        pronoun = self._pronouns.get(lower)
        if pronoun is not None:
            return ClassifiedToken(text, TokenKind.PRONOUN, pronoun)
        if lower in self._conjunctions:
            return ClassifiedToken(text, TokenKind.CONJUNCTION)
        if lower in self._adverbs:
            return ClassifiedToken(text, TokenKind.ADVERB)
        verb = self._verb_forms.get(lower)
        if verb is not None:
            return ClassifiedToken(text, TokenKind.VERB, verb, verb.conjugations[lower])
        if lower in self._adjectives:
            return ClassifiedToken(text, TokenKind.ADJECTIVE)
        noun = self._nouns.get(lower)
        if noun is not None:
            return ClassifiedToken(text, TokenKind.NOUN, noun)
        return ClassifiedToken(text, TokenKind.UNKNOWN)

    def _folded_index(self) -> dict[str, str]:
        # Built in classification priority order so the first class claiming a folded key keeps it.
        if self._folded is None:
            index: dict[str, str] = {}
            for table in (
                self._articles,
                sorted(self._prepositions),
                self._pronouns,
                sorted(self._conjunctions),
                sorted(self._adverbs),
                self._verb_forms,
                sorted(self._adjectives),
                self._nouns,
            ):
                for key in table:
                    folded = normalize_word(key)
                    if folded:
                        index.setdefault(folded, key)
            self._folded = index
        return self._folded

    # === analysis ===

    def analyze(self, tokens: Sequence[str]) -> GrammarAnalysis:
        classified = tuple(self.classify_token(t) for t in tokens)
        verb_positions = [i for i, tok in enumerate(classified) if tok.kind == TokenKind.VERB]

        if verb_positions:
            sentence_type = self._determine_sentence_type(classified, verb_positions[0])
        else:
            sentence_type = SentenceType.UNKNOWN

        components = tuple(self._components(classified, verb_positions[0] if verb_positions else None))
        structure = GrammaticalStructure(sentence_type=sentence_type, components=components)

        return GrammarAnalysis(
            structure=structure,
            validity_score=self._validity(structure),
            tokens=classified,
            issues=tuple(self._issues(classified, bool(verb_positions))),
            expected_at=MappingProxyType(self._expectations(classified)),
        )

    def is_valid_at_position(self, word: str, position: int, sentence: Sequence[str]) -> float:
        """Validity of the sentence with `word` placed at `position` (appended when past the end)."""
        test_sentence = list(sentence)
        if position < len(test_sentence):
            test_sentence[position] = word
        else:
            test_sentence.append(word)

        analysis = self.analyze(test_sentence)
        expected = analysis.expected_at.get(position)
        if expected is not None and self._fits(self.classify_token(word), expected):
            return min(1.0, analysis.validity_score + 0.1)
        return analysis.validity_score

    @staticmethod
    def _fits(token: ClassifiedToken, expected: ExpectedWord) -> bool:
        if token.kind == TokenKind.NOUN:
            return GrammaticalRole.SUBJECT in expected.roles or GrammaticalRole.DIRECT_OBJECT in expected.roles
        if token.kind == TokenKind.ADJECTIVE:
            return GrammaticalRole.ADJECTIVE in expected.roles
        return False

    @staticmethod
    def _determine_sentence_type(tokens: Sequence[ClassifiedToken], first_verb: int) -> SentenceType:
        before = tokens[:first_verb]
        after = tokens[first_verb + 1 :]

        has_subject_before = any(tok.is_subject_like for tok in before)
        has_object_after = any(tok.kind == TokenKind.NOUN for tok in after)
        has_dative_before = any(tok.is_object_pronoun for tok in before)

        # "me gusta X": the pronoun is the experiencer, X the grammatical subject.
        if has_dative_before and not has_subject_before:
            return SentenceType.VSO

        if first_verb == 0:
            return SentenceType.VSO if has_object_after else SentenceType.SV
        if has_subject_before and has_object_after:
            return SentenceType.SVO
        if has_subject_before:
            return SentenceType.SV
        if has_object_after:
            return SentenceType.OVS
        return SentenceType.IMPERSONAL

    @staticmethod
    def _components(
        tokens: Sequence[ClassifiedToken], first_verb: Optional[int]
    ) -> Iterable[GrammaticalComponent]:
        for i, tok in enumerate(tokens):
            role: Optional[GrammaticalRole]
            if tok.kind == TokenKind.NOUN:
                before_verb = first_verb is not None and i < first_verb
                role = GrammaticalRole.SUBJECT if before_verb else GrammaticalRole.DIRECT_OBJECT
            elif isinstance(tok.info, PronounInfo):
                role = _PRONOUN_ROLES[tok.info.case]
            else:
                role = _FIXED_ROLES.get(tok.kind)

            if role is not None:
                yield GrammaticalComponent(role=role, tokens=(i,), head=i)

    @staticmethod
    def _validity(structure: GrammaticalStructure) -> float:
        score = 0.5
        if structure.has_role(GrammaticalRole.VERB):
            score += 0.2
        if structure.has_role(GrammaticalRole.SUBJECT):
            score += 0.15
        if structure.sentence_type != SentenceType.UNKNOWN:
            score += 0.1
        return min(score, 1.0)

    @staticmethod
    def _issues(tokens: Sequence[ClassifiedToken], has_verb: bool) -> Iterable[GrammarIssue]:
        if tokens and not has_verb:
            yield GrammarIssue(position=0, severity=IssueSeverity.WARNING, message="no verb found")
        for i, tok in enumerate(tokens):
            if tok.kind == TokenKind.UNKNOWN:
                yield GrammarIssue(position=i, severity=IssueSeverity.INFO, message=f"unknown token '{tok.text}'")

    @staticmethod
    def _expectations(tokens: Sequence[ClassifiedToken]) -> dict[int, ExpectedWord]:
        expected: dict[int, ExpectedWord] = {}
        for i, tok in enumerate(tokens[:-1]):
            if tok.kind == TokenKind.PREPOSITION:
                expected[i + 1] = _AFTER_PREPOSITION
            elif tok.kind == TokenKind.ARTICLE:
                expected[i + 1] = _AFTER_ARTICLE
        return expected


__all__ = [
    "ArticleInfo",
    "BASE_ADVERBS",
    "BASE_ARTICLES",
    "BASE_CONJUNCTIONS",
    "BASE_PREPOSITIONS",
    "BASE_PRONOUNS",
    "BASE_VERBS",
    "ClassifiedToken",
    "Conjugation",
    "ExpectedWord",
    "Gender",
    "GrammarAnalysis",
    "GrammarIssue",
    "GrammaticalComponent",
    "GrammaticalRole",
    "GrammaticalStructure",
    "IssueSeverity",
    "LexiconInfo",
    "NounCategory",
    "NounInfo",
    "Number",
    "Person",
    "PronounCase",
    "PronounInfo",
    "SentenceType",
    "SpanishGrammar",
    "TokenKind",
    "VerbCategory",
    "VerbInfo",
]
