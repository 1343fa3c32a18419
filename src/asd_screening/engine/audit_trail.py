from __future__ import annotations

from typing import Any, Dict, List, Mapping

from asd_screening.core.assessment_types import OverallResult, StageResult
from asd_screening.core.fingerprints import build_fingerprints
from asd_screening.domain.stages import StageKind
from asd_screening.engine import classifier as rules

RULESET_REF = "asd-screening-rules-v1"


def rule_config() -> Dict[str, Any]:
    return {
        "levels": {"high": rules.HIGH_RISK_THRESHOLD, "medium": rules.MEDIUM_RISK_THRESHOLD},
        "eye_tracking": {
            "long_fixation_ms": rules.LONG_FIXATION_MS,
            "low_saccadic_rate": rules.LOW_SACCADIC_RATE_PER_MIN,
            "blink_rate_range": list(rules.BLINK_RATE_RANGE_PER_MIN),
            "poor_gaze_stability": rules.POOR_GAZE_STABILITY,
        },
        "facial_analysis": {
            "emotion_presence_pct": rules.EMOTION_PRESENCE_PCT,
            "min_expressed_emotions": rules.MIN_EXPRESSED_EMOTIONS,
            "low_eye_contact_pct": rules.LOW_EYE_CONTACT_PCT,
            "min_micro_expressions": rules.MIN_MICRO_EXPRESSIONS,
            "facial_symmetry_min": rules.FACIAL_SYMMETRY_MIN,
            "neutral_dominance_share": rules.NEUTRAL_DOMINANCE_SHARE,
        },
    }


class ScreeningAuditTrail:
    def build_audit(
        self,
        overall: OverallResult,
        results: Mapping[StageKind, StageResult],
    ) -> Dict[str, Any]:
        fingerprint = build_fingerprints(
            results=results,
            config=rule_config(),
            model_ref=RULESET_REF,
        )

        audit_entries: List[Dict[str, Any]] = []

        audit_entries.append(
            {
                "key": "overall_risk",
                "value": {"score": overall.risk_score, "level": overall.risk_level.value},
            }
        )

        audit_entries.append(
            {
                "key": "per_stage_risk",
                "value": {
                    k.value: {"score": r.risk_score, "level": r.risk_level.value}
                    for k, r in results.items()
                },
            }
        )

        audit_entries.append(
            {
                "key": "raised_indicators",
                "value": {
                    k.value: sorted(name for name, raised in r.indicators.items() if raised)
                    for k, r in results.items()
                },
            }
        )

        return {
            "audit_trail": audit_entries,
            "fingerprint": fingerprint,
        }
