from asd_screening.core.assessment_types import EyeTrackingSummary, QuestionnaireSummary
from asd_screening.core.fingerprints import build_fingerprints
from asd_screening.domain.stages import StageKind
from asd_screening.engine.audit_trail import RULESET_REF, ScreeningAuditTrail, rule_config
from asd_screening.engine.classifier import classify
from asd_screening.engine.combiner import combine


def _results(total_score):
    return {
        StageKind.QUESTIONNAIRE: classify(
            StageKind.QUESTIONNAIRE, QuestionnaireSummary(total_score=total_score, max_total_score=18)
        ),
        StageKind.EYE_TRACKING: classify(
            StageKind.EYE_TRACKING,
            EyeTrackingSummary(avg_fixation_duration=1500, saccadic_rate=20, blink_rate=15, gaze_stability=0.9),
        ),
    }


def test_fingerprints_are_stable():
    fp1 = build_fingerprints(results=_results(6), config=rule_config(), model_ref="test")
    fp2 = build_fingerprints(results=_results(6), config=rule_config(), model_ref="test")

    assert fp1["input_hash"] == fp2["input_hash"]
    assert fp1["config_hash"] == fp2["config_hash"]
    assert fp1["model_hash"] == "test"


def test_fingerprint_changes_with_inputs():
    fp1 = build_fingerprints(results=_results(6), config=rule_config())
    fp2 = build_fingerprints(results=_results(7), config=rule_config())

    assert fp1["input_hash"] != fp2["input_hash"]
    assert fp1["config_hash"] == fp2["config_hash"]


def test_audit_trail_records_raised_indicators():
    results = _results(6)
    audit = ScreeningAuditTrail().build_audit(overall=combine(results), results=results)

    entries = {e["key"]: e["value"] for e in audit["audit_trail"]}
    assert entries["overall_risk"]["level"] == "Medium"
    assert entries["per_stage_risk"]["eye_tracking"]["score"] == 0.5
    assert entries["raised_indicators"]["eye_tracking"] == ["long_fixations", "low_saccadic_rate"]
    assert entries["raised_indicators"]["questionnaire"] == []
    assert audit["fingerprint"]["model_hash"] == RULESET_REF
