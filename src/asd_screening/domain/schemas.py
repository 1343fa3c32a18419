from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from asd_screening.core.errors import MalformedSampleError
from asd_screening.domain.questions import MAX_ANSWER_VALUE, Question
from asd_screening.domain.stages import EMOTIONS, MICRO_EXPRESSIONS, StageKind


class QuestionnaireSample(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    answers: Dict[str, int] = Field(..., min_length=1)

    @field_validator("answers")
    @classmethod
    def validate_answers(cls, v: Dict[str, int]) -> Dict[str, int]:
        for qid, value in v.items():
            if not 0 <= int(value) <= MAX_ANSWER_VALUE:
                raise ValueError(f"Answer for question {qid} must be between 0 and {MAX_ANSWER_VALUE}.")
        return {str(k): int(val) for k, val in v.items()}


class EyeTrackingSample(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    fixation_duration: float = Field(..., ge=0)
    gaze_stability: float = Field(..., ge=0, le=1)
    saccade: bool = False
    blink: bool = False


class FacialAnalysisSample(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    emotion: str
    symmetry: float = Field(..., ge=0, le=1)
    eye_contact: bool = False
    micro_expression: Optional[str] = None

    @field_validator("emotion")
    @classmethod
    def validate_emotion(cls, v: str) -> str:
        label = v.strip().lower()
        if label not in EMOTIONS:
            raise ValueError(f"Unknown emotion label: {v}")
        return label

    @field_validator("micro_expression")
    @classmethod
    def validate_micro_expression(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        label = v.strip().lower()
        if label not in MICRO_EXPRESSIONS:
            raise ValueError(f"Unknown micro-expression label: {v}")
        return label


Sample = Union[QuestionnaireSample, EyeTrackingSample, FacialAnalysisSample]

SAMPLE_MODELS = {
    StageKind.QUESTIONNAIRE: QuestionnaireSample,
    StageKind.EYE_TRACKING: EyeTrackingSample,
    StageKind.FACIAL_ANALYSIS: FacialAnalysisSample,
}


def parse_sample(
    stage_kind: StageKind,
    raw: Any,
    questions: Optional[Iterable[Question]] = None,
) -> Sample:
    model = SAMPLE_MODELS[stage_kind]
    if isinstance(raw, model):
        sample = raw
    elif isinstance(raw, BaseModel):
        raise MalformedSampleError(stage_kind.value, f"expected {model.__name__}, got {type(raw).__name__}")
    elif not isinstance(raw, dict):
        raise MalformedSampleError(stage_kind.value, "sample must be a mapping")
    else:
        try:
            sample = model.model_validate(raw)
        except ValidationError as e:
            raise MalformedSampleError(stage_kind.value, str(e)) from e

    if questions is not None and isinstance(sample, QuestionnaireSample):
        known = {q.qid for q in questions}
        unknown = sorted(set(sample.answers) - known)
        if unknown:
            raise MalformedSampleError(stage_kind.value, f"unknown question ids: {', '.join(unknown)}")

    return sample
