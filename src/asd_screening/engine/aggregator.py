from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from asd_screening.config import AssessmentConfig
from asd_screening.core.assessment_types import (
    CategoryScore,
    EyeTrackingSummary,
    FacialAnalysisSummary,
    QuestionnaireSummary,
    StageSummary,
)
from asd_screening.core.errors import MalformedSampleError
from asd_screening.core.stats import mean, safe_ratio
from asd_screening.domain.questions import MAX_ANSWER_VALUE, Question, questions_by_category
from asd_screening.domain.schemas import (
    EyeTrackingSample,
    FacialAnalysisSample,
    QuestionnaireSample,
    Sample,
    parse_sample,
)
from asd_screening.domain.stages import EMOTIONS, StageKind

logger = logging.getLogger(__name__)


@dataclass
class QuestionnaireAccumulator:
    questions: Tuple[Question, ...]
    answers: Dict[str, int] = field(default_factory=dict)

    def add(self, sample: QuestionnaireSample) -> None:
        # a later batch may revise an earlier answer
        self.answers.update(sample.answers)

    def summarize(self) -> QuestionnaireSummary:
        category_scores = tuple(
            CategoryScore(
                category=category,
                score=sum(self.answers.get(q.qid, 0) for q in items),
                item_count=len(items),
            )
            for category, items in questions_by_category(self.questions).items()
        )
        total = sum(self.answers.get(q.qid, 0) for q in self.questions)
        return QuestionnaireSummary(
            answers=dict(self.answers),
            category_scores=category_scores,
            total_score=total,
            max_total_score=len(self.questions) * MAX_ANSWER_VALUE,
        )


@dataclass
class EyeTrackingAccumulator:
    duration_s: int
    fixation_durations: List[float] = field(default_factory=list)
    saccades: int = 0
    blinks: int = 0
    gaze_stability: float = 0.0
    samples: int = 0

    def add(self, sample: EyeTrackingSample) -> None:
        self.fixation_durations.append(float(sample.fixation_duration))
        if sample.saccade:
            self.saccades += 1
        if sample.blink:
            self.blinks += 1
        self.gaze_stability = float(sample.gaze_stability)
        self.samples += 1

    def summarize(self) -> EyeTrackingSummary:
        return EyeTrackingSummary(
            avg_fixation_duration=mean(self.fixation_durations),
            saccadic_rate=safe_ratio(self.saccades, self.duration_s / 60.0),
            blink_rate=safe_ratio(self.blinks, self.duration_s) * 60.0,
            gaze_stability=self.gaze_stability,
            sample_count=self.samples,
            duration_s=self.duration_s,
        )


@dataclass
class FacialAnalysisAccumulator:
    duration_s: int
    emotion_counts: Dict[str, int] = field(default_factory=lambda: {e: 0 for e in EMOTIONS})
    eye_contact: int = 0
    micro_expressions: List[str] = field(default_factory=list)
    symmetry: float = 0.0
    samples: int = 0

    def add(self, sample: FacialAnalysisSample) -> None:
        self.emotion_counts[sample.emotion] = self.emotion_counts.get(sample.emotion, 0) + 1
        if sample.eye_contact:
            self.eye_contact += 1
        if sample.micro_expression and sample.micro_expression not in self.micro_expressions:
            self.micro_expressions.append(sample.micro_expression)
        self.symmetry = float(sample.symmetry)
        self.samples += 1

    def summarize(self) -> FacialAnalysisSummary:
        return FacialAnalysisSummary(
            emotion_counts=dict(self.emotion_counts),
            eye_contact_count=self.eye_contact,
            micro_expressions=frozenset(self.micro_expressions),
            symmetry=self.symmetry,
            sample_count=self.samples,
            duration_s=self.duration_s,
        )


Accumulator = QuestionnaireAccumulator | EyeTrackingAccumulator | FacialAnalysisAccumulator


class MetricAggregator:
    def __init__(self, config: Optional[AssessmentConfig] = None):
        self.config = config or AssessmentConfig()
        self.questions: Tuple[Question, ...] = self.config.load_questions()

    def new_accumulator(self, stage_kind: StageKind) -> Accumulator:
        if stage_kind == StageKind.QUESTIONNAIRE:
            return QuestionnaireAccumulator(questions=self.questions)
        if stage_kind == StageKind.EYE_TRACKING:
            return EyeTrackingAccumulator(duration_s=self.config.eye_tracking_duration_s)
        return FacialAnalysisAccumulator(duration_s=self.config.facial_analysis_duration_s)

    def ingest(self, stage_kind: StageKind, raw: Any) -> Sample:
        return parse_sample(stage_kind, raw, questions=self.questions)

    def aggregate(self, stage_kind: StageKind, samples: Iterable[Any]) -> StageSummary:
        accumulator = self.new_accumulator(stage_kind)
        accepted = 0
        dropped = 0

        for raw in samples:
            try:
                sample = self.ingest(stage_kind, raw)
            except MalformedSampleError as e:
                dropped += 1
                logger.warning("Dropping sample: %s", e)
                continue
            accumulator.add(sample)  # type: ignore[arg-type]
            accepted += 1

        if accepted == 0:
            logger.warning("No valid samples for stage %s; using zero defaults", stage_kind.value)

        logger.debug("Aggregated %s: %d accepted, %d dropped", stage_kind.value, accepted, dropped)
        return accumulator.summarize()


def aggregate(
    stage_kind: StageKind,
    samples: Sequence[Any],
    config: Optional[AssessmentConfig] = None,
) -> StageSummary:
    return MetricAggregator(config).aggregate(stage_kind, samples)
