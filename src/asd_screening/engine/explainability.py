from __future__ import annotations

from typing import Dict, List, Mapping

from asd_screening.core.assessment_types import (
    EyeTrackingSummary,
    FacialAnalysisSummary,
    PredictionFactor,
    QuestionnaireSummary,
    RiskLevel,
    StageResult,
)
from asd_screening.domain.stages import STAGE_TITLES, StageKind
from asd_screening.engine import classifier as rules


_QUESTIONNAIRE_TEXT = {
    RiskLevel.HIGH: "Several behavioral domains, such as repetitive behaviors, social communication and sensory sensitivity, are consistent with ASD characteristics.",
    RiskLevel.MEDIUM: "Some behavioral patterns point to ASD traits in specific domains such as social interaction or routine preferences.",
    RiskLevel.LOW: "Behavioral patterns are largely within typical ranges.",
}
_EYE_TEXT = {
    RiskLevel.HIGH: "The pattern suggests detail-focused visual processing and possible differences in attention regulation.",
    RiskLevel.MEDIUM: "Some atypical eye movement patterns were observed.",
    RiskLevel.LOW: "Eye movement patterns are within typical ranges.",
}
_FACE_TEXT = {
    RiskLevel.HIGH: "Reduced eye contact and a narrow range of expressions are consistent with ASD presentation.",
    RiskLevel.MEDIUM: "Some differences in expression variety and eye contact frequency were observed.",
    RiskLevel.LOW: "Facial expression and eye contact are within typical ranges.",
}

_CONFIDENCE = {
    StageKind.QUESTIONNAIRE: {RiskLevel.HIGH: 85, RiskLevel.MEDIUM: 65, RiskLevel.LOW: 90},
    StageKind.EYE_TRACKING: {RiskLevel.HIGH: 82, RiskLevel.MEDIUM: 68, RiskLevel.LOW: 88},
    StageKind.FACIAL_ANALYSIS: {RiskLevel.HIGH: 79, RiskLevel.MEDIUM: 72, RiskLevel.LOW: 86},
}


def observed_emotions(summary: FacialAnalysisSummary) -> int:
    return sum(1 for pct in summary.emotion_distribution.values() if pct > 0)


def questionnaire_factor(summary: QuestionnaireSummary) -> PredictionFactor:
    pct = summary.percentage
    if pct > 60:
        impact = RiskLevel.HIGH
    elif pct > 30:
        impact = RiskLevel.MEDIUM
    else:
        impact = RiskLevel.LOW
    return PredictionFactor(
        stage_kind=StageKind.QUESTIONNAIRE,
        factor=STAGE_TITLES[StageKind.QUESTIONNAIRE],
        impact=impact,
        reasoning=f"Behavioral assessment scored {pct:.1f}%. {_QUESTIONNAIRE_TEXT[impact]}",
        confidence=_CONFIDENCE[StageKind.QUESTIONNAIRE][impact],
    )


def eye_tracking_factor(summary: EyeTrackingSummary) -> PredictionFactor:
    fixation = summary.avg_fixation_duration
    stability_pct = summary.gaze_stability * 100.0
    if fixation > 1200 or stability_pct < 70:
        impact = RiskLevel.HIGH
    elif fixation > 800 or stability_pct < 85:
        impact = RiskLevel.MEDIUM
    else:
        impact = RiskLevel.LOW
    return PredictionFactor(
        stage_kind=StageKind.EYE_TRACKING,
        factor=STAGE_TITLES[StageKind.EYE_TRACKING],
        impact=impact,
        reasoning=(
            f"Average fixation of {fixation:.0f}ms with {stability_pct:.0f}% gaze stability. "
            f"{_EYE_TEXT[impact]}"
        ),
        confidence=_CONFIDENCE[StageKind.EYE_TRACKING][impact],
    )


def facial_analysis_factor(summary: FacialAnalysisSummary) -> PredictionFactor:
    eye_contact = summary.eye_contact_rate
    emotions = observed_emotions(summary)
    if eye_contact < 40 or emotions < 3:
        impact = RiskLevel.HIGH
    elif eye_contact < 60 or emotions < 4:
        impact = RiskLevel.MEDIUM
    else:
        impact = RiskLevel.LOW
    return PredictionFactor(
        stage_kind=StageKind.FACIAL_ANALYSIS,
        factor=STAGE_TITLES[StageKind.FACIAL_ANALYSIS],
        impact=impact,
        reasoning=(
            f"Eye contact rate of {eye_contact:.1f}% across {emotions} distinct emotional expressions. "
            f"{_FACE_TEXT[impact]}"
        ),
        confidence=_CONFIDENCE[StageKind.FACIAL_ANALYSIS][impact],
    )


def metric_notes(result: StageResult) -> Dict[str, str]:
    s = result.summary
    notes: Dict[str, str] = {}

    if isinstance(s, QuestionnaireSummary):
        pct = s.percentage
        notes["Behavioral Score"] = f"Score of {pct:.1f}%. " + (
            "Higher scores indicate more ASD-related behavioral patterns."
            if pct > rules.HIGH_RISK_THRESHOLD * 100
            else "Lower scores suggest fewer ASD indicators."
        )
        for c in s.category_scores:
            notes[c.category] = f"{c.score}/{c.max_score} ({c.percentage:.1f}%)"

    elif isinstance(s, EyeTrackingSummary):
        low, high = rules.BLINK_RATE_RANGE_PER_MIN
        notes["Fixation Duration"] = f"Average fixation of {s.avg_fixation_duration:.0f}ms. " + (
            "Longer fixations may indicate a detail-focused processing style."
            if s.avg_fixation_duration > rules.LONG_FIXATION_MS
            else "Fixation duration is typical."
        )
        notes["Saccadic Rate"] = f"{s.saccadic_rate:.1f} saccadic movements per minute. " + (
            "Lower rates may indicate different visual scanning patterns."
            if s.saccadic_rate < rules.LOW_SACCADIC_RATE_PER_MIN
            else "Saccadic movement is typical."
        )
        notes["Blink Rate"] = f"{s.blink_rate:.1f} blinks per minute. " + (
            "Atypical blink rates can indicate sensory processing differences."
            if s.blink_rate < low or s.blink_rate > high
            else "Blink rate is typical."
        )
        notes["Gaze Stability"] = f"{s.gaze_stability * 100:.0f}% gaze stability. " + (
            "Lower stability may indicate attention regulation differences."
            if s.gaze_stability < rules.POOR_GAZE_STABILITY
            else "Gaze stability is good."
        )

    elif isinstance(s, FacialAnalysisSummary):
        expressed = sum(1 for pct in s.emotion_distribution.values() if pct > rules.EMOTION_PRESENCE_PCT)
        notes["Eye Contact"] = f"{s.eye_contact_rate:.1f}% eye contact. " + (
            "Reduced eye contact frequency."
            if s.eye_contact_rate < rules.LOW_EYE_CONTACT_PCT
            else "Eye contact frequency is typical."
        )
        notes["Emotional Range"] = f"{expressed} emotions above {rules.EMOTION_PRESENCE_PCT:.0f}% share. " + (
            "Restricted emotional expression can be an ASD indicator."
            if expressed < rules.MIN_EXPRESSED_EMOTIONS
            else "Emotional range is typical."
        )
        notes["Micro Expressions"] = f"{len(s.micro_expressions)} distinct micro-expressions. " + (
            "Few micro-expressions may indicate restricted facial expression."
            if len(s.micro_expressions) < rules.MIN_MICRO_EXPRESSIONS
            else "Micro-expression variety is typical."
        )
        notes["Facial Symmetry"] = f"{s.symmetry * 100:.0f}% facial symmetry. " + (
            "Lower symmetry may indicate muscle tone differences."
            if s.symmetry < rules.FACIAL_SYMMETRY_MIN
            else "Facial symmetry is typical."
        )

    return notes


class StageExplainability:
    def explain(self, results: Mapping[StageKind, StageResult]) -> Dict[str, object]:
        factors: List[PredictionFactor] = []
        notes: Dict[str, Dict[str, str]] = {}

        for kind, result in results.items():
            s = result.summary
            if isinstance(s, QuestionnaireSummary):
                factors.append(questionnaire_factor(s))
            elif isinstance(s, EyeTrackingSummary):
                factors.append(eye_tracking_factor(s))
            elif isinstance(s, FacialAnalysisSummary):
                factors.append(facial_analysis_factor(s))
            notes[kind.value] = metric_notes(result)

        return {
            "factors": factors,
            "metric_notes": notes,
        }
