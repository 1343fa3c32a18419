from asd_screening.core.assessment_types import (
    EyeTrackingSummary,
    FacialAnalysisSummary,
    QuestionnaireSummary,
    RiskLevel,
)
from asd_screening.domain.stages import StageKind
from asd_screening.engine.classifier import classify
from asd_screening.engine.explainability import (
    StageExplainability,
    eye_tracking_factor,
    facial_analysis_factor,
    metric_notes,
    questionnaire_factor,
)


def test_questionnaire_factor():
    factor = questionnaire_factor(QuestionnaireSummary(total_score=6, max_total_score=18))

    assert factor.impact == RiskLevel.MEDIUM
    assert factor.confidence == 65
    assert factor.reasoning.startswith("Behavioral assessment scored 33.3%.")


def test_eye_tracking_factor_levels():
    high = eye_tracking_factor(EyeTrackingSummary(avg_fixation_duration=1500, gaze_stability=0.9))
    medium = eye_tracking_factor(EyeTrackingSummary(avg_fixation_duration=900, gaze_stability=0.9))
    low = eye_tracking_factor(EyeTrackingSummary(avg_fixation_duration=600, gaze_stability=0.9))

    assert (high.impact, high.confidence) == (RiskLevel.HIGH, 82)
    assert (medium.impact, medium.confidence) == (RiskLevel.MEDIUM, 68)
    assert (low.impact, low.confidence) == (RiskLevel.LOW, 88)


def test_facial_factor_counts_observed_emotions():
    summary = FacialAnalysisSummary(
        emotion_counts={"neutral": 10, "happy": 10, "sad": 10, "surprised": 10, "angry": 0, "fearful": 0},
        eye_contact_count=30,
        duration_s=45,
        symmetry=0.9,
    )
    factor = facial_analysis_factor(summary)

    assert factor.impact == RiskLevel.LOW
    assert factor.confidence == 86
    assert "4 distinct emotional expressions" in factor.reasoning


def test_metric_notes_follow_classifier_thresholds():
    result = classify(
        StageKind.EYE_TRACKING,
        EyeTrackingSummary(avg_fixation_duration=1500, saccadic_rate=20, blink_rate=15, gaze_stability=0.9),
    )
    notes = metric_notes(result)

    assert set(notes) == {"Fixation Duration", "Saccadic Rate", "Blink Rate", "Gaze Stability"}
    assert "Longer fixations" in notes["Fixation Duration"]
    assert notes["Blink Rate"].endswith("Blink rate is typical.")


def test_explain_covers_every_completed_stage():
    results = {
        StageKind.QUESTIONNAIRE: classify(StageKind.QUESTIONNAIRE, QuestionnaireSummary(total_score=15, max_total_score=18)),
        StageKind.FACIAL_ANALYSIS: classify(StageKind.FACIAL_ANALYSIS, FacialAnalysisSummary(symmetry=0.9)),
    }
    parts = StageExplainability().explain(results)

    assert [f.stage_kind for f in parts["factors"]] == [StageKind.QUESTIONNAIRE, StageKind.FACIAL_ANALYSIS]
    assert parts["factors"][0].impact == RiskLevel.HIGH
    assert set(parts["metric_notes"]) == {"questionnaire", "facial_analysis"}
    assert "Behavioral Score" in parts["metric_notes"]["questionnaire"]
