# semantic_disambiguation/contracts.py
from __future__ import annotations

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

# ------------------------------------------------------------------------------
# Shared BaseModel config helpers
# ------------------------------------------------------------------------------

_CONTRACT_CONFIG = ConfigDict(
    extra="forbid",
    validate_assignment=True,
    use_enum_values=False,  # keep enums as enums in Python
)

_IMMUTABLE_CONTRACT_CONFIG = ConfigDict(
    extra="forbid",
    use_enum_values=False,
    frozen=True,
)

# ------------------------------------------------------------------------------
# Configuration
# ------------------------------------------------------------------------------


class CharMatchConfig(BaseModel):
    """Weights of the four character-similarity metrics (defaults sum to 1.0)."""

    model_config = _CONTRACT_CONFIG

    weight_jaccard: float = Field(default=0.40, ge=0.0, le=1.0)
    weight_positional: float = Field(default=0.15, ge=0.0, le=1.0)
    weight_length: float = Field(default=0.15, ge=0.0, le=1.0)
    weight_levenshtein: float = Field(default=0.30, ge=0.0, le=1.0)
    max_candidates: int = Field(default=15, ge=1)
    min_similarity: float = Field(default=0.25, ge=0.0, le=1.0)

    @property
    def total_weight(self) -> float:
        return self.weight_jaccard + self.weight_positional + self.weight_length + self.weight_levenshtein


class DisambiguationConfig(BaseModel):
    """
    Fusion weights for `alpha*char + beta*grammar + gamma*context`.

    The weights are meant to sum to 1.0 but that is not enforced.
    """

    model_config = _CONTRACT_CONFIG

    alpha: float = Field(default=0.30, ge=0.0)
    beta: float = Field(default=0.30, ge=0.0)
    gamma: float = Field(default=0.40, ge=0.0)
    min_confidence: float = Field(default=0.60, ge=0.0, le=1.0)
    max_candidates: int = Field(default=10, ge=1)

    @property
    def total_weight(self) -> float:
        return self.alpha + self.beta + self.gamma


# ------------------------------------------------------------------------------
# Processing results
# ------------------------------------------------------------------------------


class ScoredCandidate(BaseModel):
    model_config = _IMMUTABLE_CONTRACT_CONFIG

    word: str
    score: float
    char_score: float = 0.0
    grammar_score: float = 0.0
    context_score: float = 0.0


class CorrectionExplanation(BaseModel):
    model_config = _IMMUTABLE_CONTRACT_CONFIG

    char_score: float = 0.0
    grammar_score: float = 0.0
    context_score: float = 0.0
    candidates: tuple[ScoredCandidate, ...] = ()
    reason: str = ""

    @field_validator("candidates", mode="before")
    @classmethod
    def _at_most_five(cls, value: object) -> object:
        if isinstance(value, (list, tuple)):
            return tuple(value)[:5]
        return value


class Correction(BaseModel):
    model_config = _IMMUTABLE_CONTRACT_CONFIG

    position: int = Field(ge=0)
    original: str
    corrected: str
    confidence: float
    explanation: CorrectionExplanation


class UnresolvedAnomaly(BaseModel):
    """An out-of-dictionary token left unchanged; confidence is always 0.0."""

    model_config = _IMMUTABLE_CONTRACT_CONFIG

    position: int = Field(ge=0)
    original: str
    best_score: float = 0.0
    confidence: float = 0.0
    explanation: CorrectionExplanation


class ProcessedSentence(BaseModel):
    model_config = _IMMUTABLE_CONTRACT_CONFIG

    original: str
    corrected: str
    confidence: float = Field(ge=0.0)
    corrections: tuple[Correction, ...] = ()
    unresolved: tuple[UnresolvedAnomaly, ...] = ()
    theme: str | None = None

    @property
    def changed(self) -> bool:
        return self.corrected != self.original


__all__ = [
    "CharMatchConfig",
    "Correction",
    "CorrectionExplanation",
    "DisambiguationConfig",
    "ProcessedSentence",
    "ScoredCandidate",
    "UnresolvedAnomaly",
]
