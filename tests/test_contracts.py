from __future__ import annotations

import pytest
from pydantic import ValidationError

from semantic_disambiguation.contracts import (
    CharMatchConfig,
    CorrectionExplanation,
    DisambiguationConfig,
    ProcessedSentence,
    ScoredCandidate,
    UnresolvedAnomaly,
)


def test_config_defaults() -> None:
    char = CharMatchConfig()
    fusion = DisambiguationConfig()

    assert char.total_weight == pytest.approx(1.0)
    assert char.max_candidates == 15
    assert char.min_similarity == pytest.approx(0.25)
    assert fusion.total_weight == pytest.approx(1.0)
    assert (fusion.alpha, fusion.beta, fusion.gamma) == (0.30, 0.30, 0.40)
    assert fusion.min_confidence == pytest.approx(0.60)
    assert fusion.max_candidates == 10


@pytest.mark.parametrize(
    "kwargs",
    [
        {"alpha": -0.1},
        {"min_confidence": 1.5},
        {"max_candidates": 0},
        {"delta": 0.2},
    ],
)
def test_disambiguation_config_rejects_bad_values(kwargs: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        DisambiguationConfig(**kwargs)


def test_config_validates_assignment() -> None:
    config = CharMatchConfig()

    with pytest.raises(ValidationError):
        config.weight_jaccard = 2.0


def test_weights_need_not_sum_to_one() -> None:
    assert DisambiguationConfig(alpha=1.0, beta=1.0, gamma=1.0).total_weight == pytest.approx(3.0)


def test_explanation_keeps_at_most_five_candidates() -> None:
    candidates = [ScoredCandidate(word=f"w{i}", score=1.0 - i / 10) for i in range(8)]

    explanation = CorrectionExplanation(candidates=candidates, reason="test")

    assert [c.word for c in explanation.candidates] == ["w0", "w1", "w2", "w3", "w4"]


def test_results_are_frozen() -> None:
    result = ProcessedSentence(original="a", corrected="a", confidence=1.0)

    with pytest.raises(ValidationError):
        result.corrected = "b"


def test_changed_flag() -> None:
    assert ProcessedSentence(original="smor", corrected="roma", confidence=0.8).changed is True
    assert ProcessedSentence(original="roma", corrected="roma", confidence=1.0).changed is False


def test_unresolved_anomaly_defaults() -> None:
    anomaly = UnresolvedAnomaly(position=2, original="xyz", explanation=CorrectionExplanation())

    assert anomaly.confidence == 0.0
    assert anomaly.best_score == 0.0
    with pytest.raises(ValidationError):
        UnresolvedAnomaly(position=-1, original="xyz", explanation=CorrectionExplanation())
