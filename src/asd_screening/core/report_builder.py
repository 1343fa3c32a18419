from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Protocol

from asd_screening.core.assessment_types import (
    AssessmentReport,
    AuditFingerprint,
    OverallResult,
    StageResult,
)
from asd_screening.core.fingerprints import summary_to_dict
from asd_screening.core.session import AssessmentSession
from asd_screening.domain.stages import StageKind


class ExplainabilityComponent(Protocol):
    def explain(self, results: Mapping[StageKind, StageResult]) -> Dict[str, Any]:
        raise NotImplementedError


class AuditComponent(Protocol):
    def build_audit(
        self,
        overall: OverallResult,
        results: Mapping[StageKind, StageResult],
    ) -> Dict[str, Any]:
        raise NotImplementedError


@dataclass
class ReportBuilder:
    explainability: Optional[ExplainabilityComponent] = None
    audit: Optional[AuditComponent] = None

    def build(self, session: AssessmentSession) -> AssessmentReport:
        # raises NotReadyError when nothing has completed yet
        overall = session.overall_result()
        results = session.results

        factors: list = []
        notes: Dict[str, Dict[str, str]] = {}
        if self.explainability is not None:
            expl_parts = self.explainability.explain(results)
            factors = list(expl_parts.get("factors", []) or [])
            notes = dict(expl_parts.get("metric_notes", {}) or {})

        audit_trail: list = []
        fingerprint: Optional[AuditFingerprint] = None
        if self.audit is not None:
            audit_result = self.audit.build_audit(overall=overall, results=results)
            audit_trail = list(audit_result.get("audit_trail", []) or [])
            fp = audit_result.get("fingerprint")
            if isinstance(fp, dict):
                fingerprint = AuditFingerprint(
                    input_hash=str(fp.get("input_hash", "")),
                    config_hash=str(fp.get("config_hash", "")),
                    model_hash=str(fp.get("model_hash", "")),
                )

        return AssessmentReport(
            session_id=session.session_id,
            overall=overall,
            stage_results={k.value: r for k, r in results.items()},
            factors=factors,
            metric_notes=notes,
            audit_trail=audit_trail,
            fingerprint=fingerprint,
            complete=session.is_complete,
        )


def report_to_dict(report: AssessmentReport) -> Dict[str, Any]:
    return {
        "session_id": report.session_id,
        "complete": report.complete,
        "overall": {
            "risk_score": report.overall.risk_score,
            "risk_level": report.overall.risk_level.value,
            "description": report.overall.description,
            "stage_scores": report.overall.stage_scores,
        },
        "stages": {
            kind: {
                "risk_score": r.risk_score,
                "risk_level": r.risk_level.value,
                "indicators": r.indicators,
                "summary": summary_to_dict(r.summary),
            }
            for kind, r in report.stage_results.items()
        },
        "factors": [
            {
                "stage": f.stage_kind.value,
                "factor": f.factor,
                "impact": f.impact.value,
                "reasoning": f.reasoning,
                "confidence": f.confidence,
            }
            for f in report.factors
        ],
        "metric_notes": report.metric_notes,
        "audit": {
            "trail": report.audit_trail,
            "fingerprint": {
                "input_hash": report.fingerprint.input_hash,
                "config_hash": report.fingerprint.config_hash,
                "model_hash": report.fingerprint.model_hash,
            }
            if report.fingerprint
            else {},
        },
    }
