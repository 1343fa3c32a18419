import pytest

from asd_screening.config import AssessmentConfig
from asd_screening.core.assessment_types import (
    EyeTrackingSummary,
    FacialAnalysisSummary,
    QuestionnaireSummary,
)
from asd_screening.domain.stages import EMOTIONS, StageKind
from asd_screening.engine.aggregator import MetricAggregator, aggregate


def test_questionnaire_category_scores():
    answers = {"1": 3, "2": 3, "3": 0, "4": 0, "5": 0, "6": 0}
    summary = aggregate(StageKind.QUESTIONNAIRE, [{"answers": answers}])

    assert isinstance(summary, QuestionnaireSummary)
    assert summary.total_score == 6
    assert summary.max_total_score == 18
    assert summary.percentage == pytest.approx(33.333, abs=1e-3)

    by_category = {c.category: c for c in summary.category_scores}
    social = by_category["Social Communication"]
    assert social.score == 6
    assert social.item_count == 2
    assert social.max_score == 6
    assert social.percentage == pytest.approx(100.0)
    assert by_category["Communication"].percentage == 0.0


def test_questionnaire_later_batch_revises_answer():
    samples = [{"answers": {"1": 1}}, {"answers": {"1": 2, "2": 1}}]
    summary = aggregate(StageKind.QUESTIONNAIRE, samples)

    assert summary.answers == {"1": 2, "2": 1}
    assert summary.total_score == 3


def test_empty_questionnaire_has_zero_ratio():
    summary = aggregate(StageKind.QUESTIONNAIRE, [])

    assert summary.total_score == 0
    assert summary.max_total_score == 18
    assert summary.ratio == 0.0


def test_eye_tracking_rates_use_configured_duration():
    samples = [
        {"fixation_duration": 1000, "saccade": True, "blink": False, "gaze_stability": 0.7},
        {"fixation_duration": 1500, "saccade": True, "blink": True, "gaze_stability": 0.5},
        {"fixation_duration": 2000, "saccade": False, "blink": False, "gaze_stability": 0.4},
    ]
    summary = aggregate(StageKind.EYE_TRACKING, samples)

    assert isinstance(summary, EyeTrackingSummary)
    assert summary.avg_fixation_duration == pytest.approx(1500.0)
    # 2 saccades over a 30 s window, even though only 3 ticks were recorded
    assert summary.saccadic_rate == pytest.approx(4.0)
    assert summary.blink_rate == pytest.approx(2.0)
    assert summary.gaze_stability == pytest.approx(0.4)
    assert summary.sample_count == 3
    assert summary.duration_s == 30


def test_eye_tracking_custom_duration():
    config = AssessmentConfig(eye_tracking_duration_s=60)
    samples = [{"fixation_duration": 900, "saccade": True, "gaze_stability": 0.8}] * 3
    summary = MetricAggregator(config).aggregate(StageKind.EYE_TRACKING, samples)

    assert summary.saccadic_rate == pytest.approx(3.0)
    assert summary.duration_s == 60


def test_empty_eye_tracking_defaults_to_zero():
    summary = aggregate(StageKind.EYE_TRACKING, [])

    assert summary.avg_fixation_duration == 0.0
    assert summary.saccadic_rate == 0.0
    assert summary.blink_rate == 0.0
    assert summary.gaze_stability == 0.0
    assert summary.sample_count == 0
    assert summary.has_data is False


def test_facial_analysis_distribution_and_rates():
    samples = [
        {"emotion": "neutral", "eye_contact": True, "micro_expression": "eye_squint", "symmetry": 0.8},
        {"emotion": "neutral", "eye_contact": True, "micro_expression": "eye_squint", "symmetry": 0.85},
        {"emotion": "happy", "eye_contact": True, "micro_expression": "smile_onset", "symmetry": 0.95},
        {"emotion": "sad", "eye_contact": False, "symmetry": 0.9},
    ]
    summary = aggregate(StageKind.FACIAL_ANALYSIS, samples)

    assert isinstance(summary, FacialAnalysisSummary)
    assert summary.emotion_counts["neutral"] == 2
    assert summary.total_emotions == 4
    assert summary.emotion_distribution["neutral"] == pytest.approx(50.0)
    assert summary.emotion_distribution["happy"] == pytest.approx(25.0)
    assert summary.emotion_distribution["angry"] == 0.0
    assert summary.eye_contact_rate == pytest.approx(3 / 45 * 100)
    assert summary.micro_expressions == frozenset({"eye_squint", "smile_onset"})
    assert summary.symmetry == pytest.approx(0.9)
    assert summary.neutral_share == pytest.approx(0.5)


def test_empty_facial_analysis_has_all_zero_distribution():
    summary = aggregate(StageKind.FACIAL_ANALYSIS, [])

    assert summary.total_emotions == 0
    assert set(summary.emotion_distribution) == set(EMOTIONS)
    assert all(v == 0.0 for v in summary.emotion_distribution.values())
    assert summary.eye_contact_rate == 0.0
    assert summary.neutral_share == 0.0
    assert summary.symmetry == 0.0


def test_malformed_samples_are_dropped():
    samples = [
        {"fixation_duration": 1000},
        {"fixation_duration": 1200, "gaze_stability": 0.9},
        "garbage",
    ]
    summary = aggregate(StageKind.EYE_TRACKING, samples)

    assert summary.sample_count == 1
    assert summary.avg_fixation_duration == pytest.approx(1200.0)


def test_each_aggregation_starts_from_a_fresh_accumulator():
    aggregator = MetricAggregator()
    first = aggregator.aggregate(StageKind.FACIAL_ANALYSIS, [{"emotion": "happy", "symmetry": 0.9}])
    second = aggregator.aggregate(StageKind.FACIAL_ANALYSIS, [])

    assert first.emotion_counts["happy"] == 1
    assert second.emotion_counts["happy"] == 0


def test_non_finite_fixation_is_dropped_not_averaged():
    samples = [
        {"fixation_duration": 2000, "gaze_stability": 0.8},
        {"fixation_duration": float("inf"), "gaze_stability": 0.8},
    ]
    summary = aggregate(StageKind.EYE_TRACKING, samples)

    assert summary.sample_count == 1
    assert summary.avg_fixation_duration == pytest.approx(2000.0)
