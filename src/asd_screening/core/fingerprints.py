from __future__ import annotations

import hashlib
import json
from dataclasses import asdict
from typing import Any, Dict, Mapping

from asd_screening.core.assessment_types import (
    FacialAnalysisSummary,
    QuestionnaireSummary,
    StageResult,
    StageSummary,
)


def _stable_serialize(obj: Any) -> str:
    try:
        return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    except TypeError:
        return json.dumps(str(obj), sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def hash_object(obj: Any) -> str:
    serialized = _stable_serialize(obj)
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()


def summary_to_dict(summary: StageSummary) -> Dict[str, Any]:
    data = asdict(summary)
    if isinstance(summary, QuestionnaireSummary):
        data["category_scores"] = [
            {
                "category": c.category,
                "score": c.score,
                "max_score": c.max_score,
                "percentage": c.percentage,
            }
            for c in summary.category_scores
        ]
        data["percentage"] = summary.percentage
    elif isinstance(summary, FacialAnalysisSummary):
        data["micro_expressions"] = sorted(summary.micro_expressions)
        data["emotion_distribution"] = summary.emotion_distribution
        data["eye_contact_rate"] = summary.eye_contact_rate
    return data


def build_fingerprints(
    results: Mapping[Any, StageResult],
    config: Dict[str, Any],
    model_ref: str = "",
) -> Dict[str, str]:
    payload = {
        str(getattr(kind, "value", kind)): summary_to_dict(result.summary)
        for kind, result in results.items()
    }
    return {
        "input_hash": hash_object(payload),
        "config_hash": hash_object(config),
        "model_hash": model_ref or "",
    }
