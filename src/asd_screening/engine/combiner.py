from __future__ import annotations

from typing import Dict, Mapping

from asd_screening.core.assessment_types import OverallResult, RiskLevel, StageResult
from asd_screening.core.errors import NotReadyError
from asd_screening.core.stats import mean
from asd_screening.engine.classifier import risk_level_for


LEVEL_DESCRIPTIONS: Dict[RiskLevel, str] = {
    RiskLevel.HIGH: "Multiple indicators suggest potential ASD characteristics",
    RiskLevel.MEDIUM: "Some indicators present, further evaluation recommended",
    RiskLevel.LOW: "Minimal indicators detected in this assessment",
}


class OverallCombiner:
    def combine(self, results: Mapping[str, StageResult]) -> OverallResult:
        if not results:
            raise NotReadyError("No completed stages to combine")

        stage_scores = {
            str(getattr(kind, "value", kind)): float(result.risk_score)
            for kind, result in results.items()
        }
        stage_scores = dict(sorted(stage_scores.items()))
        score = mean(stage_scores.values())
        level = risk_level_for(score)

        return OverallResult(
            risk_score=score,
            risk_level=level,
            description=LEVEL_DESCRIPTIONS[level],
            stage_scores=stage_scores,
        )


def combine(results: Mapping[str, StageResult]) -> OverallResult:
    return OverallCombiner().combine(results)
