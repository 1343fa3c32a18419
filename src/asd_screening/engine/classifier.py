from __future__ import annotations

import logging
from typing import Dict

from asd_screening.core.assessment_types import (
    EyeTrackingSummary,
    FacialAnalysisSummary,
    QuestionnaireSummary,
    RiskLevel,
    StageResult,
    StageSummary,
)
from asd_screening.core.stats import finite_or_zero, safe_ratio
from asd_screening.domain.stages import StageKind

logger = logging.getLogger(__name__)


HIGH_RISK_THRESHOLD = 0.6
MEDIUM_RISK_THRESHOLD = 0.3

LONG_FIXATION_MS = 1200.0
LOW_SACCADIC_RATE_PER_MIN = 30.0
BLINK_RATE_RANGE_PER_MIN = (10.0, 25.0)
POOR_GAZE_STABILITY = 0.6

EMOTION_PRESENCE_PCT = 10.0
MIN_EXPRESSED_EMOTIONS = 3
LOW_EYE_CONTACT_PCT = 40.0
MIN_MICRO_EXPRESSIONS = 2
FACIAL_SYMMETRY_MIN = 0.8
NEUTRAL_DOMINANCE_SHARE = 0.7


def risk_level_for(score: float) -> RiskLevel:
    s = finite_or_zero(score)
    if s > HIGH_RISK_THRESHOLD:
        return RiskLevel.HIGH
    if s > MEDIUM_RISK_THRESHOLD:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def score_indicators(indicators: Dict[str, bool]) -> float:
    """Fraction of raised indicator flags; an empty set scores 0."""
    raised = sum(1 for v in indicators.values() if v)
    return safe_ratio(raised, len(indicators))


def eye_tracking_indicators(summary: EyeTrackingSummary) -> Dict[str, bool]:
    fixation = finite_or_zero(summary.avg_fixation_duration)
    saccadic = finite_or_zero(summary.saccadic_rate)
    blink = finite_or_zero(summary.blink_rate)
    stability = finite_or_zero(summary.gaze_stability)
    blink_low, blink_high = BLINK_RATE_RANGE_PER_MIN

    indicators = {
        "long_fixations": fixation > LONG_FIXATION_MS,
        "low_saccadic_rate": saccadic < LOW_SACCADIC_RATE_PER_MIN,
        "atypical_blinking": blink < blink_low or blink > blink_high,
        "poor_gaze_stability": stability < POOR_GAZE_STABILITY,
    }
    if not summary.has_data:
        return {k: False for k in indicators}
    return indicators


def facial_analysis_indicators(summary: FacialAnalysisSummary) -> Dict[str, bool]:
    distribution = summary.emotion_distribution
    expressed = [e for e, pct in distribution.items() if finite_or_zero(pct) > EMOTION_PRESENCE_PCT]

    indicators = {
        "limited_emotional_range": len(expressed) < MIN_EXPRESSED_EMOTIONS,
        "low_eye_contact": finite_or_zero(summary.eye_contact_rate) < LOW_EYE_CONTACT_PCT,
        "reduced_micro_expressions": len(summary.micro_expressions) < MIN_MICRO_EXPRESSIONS,
        "facial_asymmetry": finite_or_zero(summary.symmetry) < FACIAL_SYMMETRY_MIN,
        "neutral_dominance": finite_or_zero(summary.neutral_share) > NEUTRAL_DOMINANCE_SHARE,
    }
    if not summary.has_data:
        return {k: False for k in indicators}
    return indicators


def _expected_summary_type(stage_kind: StageKind) -> type:
    if stage_kind == StageKind.QUESTIONNAIRE:
        return QuestionnaireSummary
    if stage_kind == StageKind.EYE_TRACKING:
        return EyeTrackingSummary
    return FacialAnalysisSummary


class StageClassifier:
    def classify(self, stage_kind: StageKind, summary: StageSummary) -> StageResult:
        expected = _expected_summary_type(stage_kind)
        if not isinstance(summary, expected):
            raise TypeError(f"{stage_kind.value} expects {expected.__name__}, got {type(summary).__name__}")

        if isinstance(summary, QuestionnaireSummary):
            # the behavioral ratio is the stage score; there is no flag step
            indicators: Dict[str, bool] = {}
            score = finite_or_zero(summary.ratio)
        elif isinstance(summary, EyeTrackingSummary):
            indicators = eye_tracking_indicators(summary)
            score = score_indicators(indicators)
        else:
            indicators = facial_analysis_indicators(summary)
            score = score_indicators(indicators)

        score = min(max(score, 0.0), 1.0)
        level = risk_level_for(score)
        logger.info("Classified %s: score=%.3f level=%s", stage_kind.value, score, level.value)

        return StageResult(
            stage_kind=stage_kind,
            summary=summary,
            risk_score=score,
            risk_level=level,
            indicators=indicators,
        )


def classify(stage_kind: StageKind, summary: StageSummary) -> StageResult:
    return StageClassifier().classify(stage_kind, summary)
