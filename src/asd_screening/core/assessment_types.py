from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple, Union

from asd_screening.core.stats import safe_ratio
from asd_screening.domain.stages import (
    EMOTIONS,
    EYE_TRACKING_DURATION_S,
    FACIAL_ANALYSIS_DURATION_S,
    StageKind,
)
from asd_screening.domain.questions import MAX_ANSWER_VALUE


class RiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


@dataclass(frozen=True)
class CategoryScore:
    category: str
    score: int
    item_count: int

    @property
    def max_score(self) -> int:
        return self.item_count * MAX_ANSWER_VALUE

    @property
    def percentage(self) -> float:
        return safe_ratio(self.score, self.max_score) * 100.0


@dataclass(frozen=True)
class QuestionnaireSummary:
    answers: Dict[str, int] = field(default_factory=dict)
    category_scores: Tuple[CategoryScore, ...] = ()
    total_score: int = 0
    max_total_score: int = 0

    stage_kind = StageKind.QUESTIONNAIRE

    @property
    def ratio(self) -> float:
        return safe_ratio(self.total_score, self.max_total_score)

    @property
    def percentage(self) -> float:
        return self.ratio * 100.0


@dataclass(frozen=True)
class EyeTrackingSummary:
    avg_fixation_duration: float = 0.0
    saccadic_rate: float = 0.0
    blink_rate: float = 0.0
    gaze_stability: float = 0.0
    sample_count: Optional[int] = None
    duration_s: int = EYE_TRACKING_DURATION_S

    stage_kind = StageKind.EYE_TRACKING

    @property
    def has_data(self) -> bool:
        # None: built from externally supplied metrics
        return self.sample_count is None or self.sample_count > 0


@dataclass(frozen=True)
class FacialAnalysisSummary:
    emotion_counts: Dict[str, int] = field(default_factory=lambda: {e: 0 for e in EMOTIONS})
    eye_contact_count: int = 0
    micro_expressions: FrozenSet[str] = frozenset()
    symmetry: float = 0.0
    sample_count: Optional[int] = None
    duration_s: int = FACIAL_ANALYSIS_DURATION_S

    stage_kind = StageKind.FACIAL_ANALYSIS

    @property
    def has_data(self) -> bool:
        return self.sample_count is None or self.sample_count > 0

    @property
    def total_emotions(self) -> int:
        return sum(int(v) for v in self.emotion_counts.values())

    @property
    def emotion_distribution(self) -> Dict[str, float]:
        total = self.total_emotions
        return {e: safe_ratio(self.emotion_counts.get(e, 0), total) * 100.0 for e in self.emotion_counts}

    @property
    def eye_contact_rate(self) -> float:
        return safe_ratio(self.eye_contact_count, self.duration_s) * 100.0

    @property
    def neutral_share(self) -> float:
        return safe_ratio(self.emotion_counts.get("neutral", 0), self.total_emotions)


StageSummary = Union[QuestionnaireSummary, EyeTrackingSummary, FacialAnalysisSummary]


@dataclass(frozen=True)
class StageResult:
    stage_kind: StageKind
    summary: StageSummary
    risk_score: float
    risk_level: RiskLevel
    indicators: Dict[str, bool] = field(default_factory=dict)


@dataclass(frozen=True)
class OverallResult:
    risk_score: float
    risk_level: RiskLevel
    description: str
    stage_scores: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class PredictionFactor:
    stage_kind: StageKind
    factor: str
    impact: RiskLevel
    reasoning: str
    confidence: int


@dataclass(frozen=True)
class AuditFingerprint:
    input_hash: str
    config_hash: str
    model_hash: str = ""


@dataclass(frozen=True)
class AssessmentReport:
    session_id: str
    overall: OverallResult
    stage_results: Dict[str, StageResult]

    factors: List[PredictionFactor] = field(default_factory=list)
    metric_notes: Dict[str, Dict[str, str]] = field(default_factory=dict)

    audit_trail: List[Dict[str, Any]] = field(default_factory=list)
    fingerprint: Optional[AuditFingerprint] = None

    complete: bool = True
