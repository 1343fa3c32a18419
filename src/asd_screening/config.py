from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from asd_screening.domain.questions import DEFAULT_QUESTION_BANK, Question, load_question_bank
from asd_screening.domain.stages import (
    DEFAULT_STAGE_SEQUENCE,
    EYE_TRACKING_DURATION_S,
    FACIAL_ANALYSIS_DURATION_S,
    StageKind,
    parse_stage_kind,
)


class AssessmentConfig(BaseModel):
    """Runtime settings for one screening flow.

    Scoring thresholds live in the classifier and are not configurable.
    """

    stages: List[StageKind] = Field(default_factory=lambda: list(DEFAULT_STAGE_SEQUENCE), min_length=1)
    eye_tracking_duration_s: int = Field(EYE_TRACKING_DURATION_S, gt=0)
    facial_analysis_duration_s: int = Field(FACIAL_ANALYSIS_DURATION_S, gt=0)
    tick_interval_s: float = Field(1.0, gt=0)
    log_level: str = "INFO"
    question_bank: Optional[Path] = None

    @field_validator("stages", mode="before")
    @classmethod
    def parse_stages(cls, v):
        if isinstance(v, (list, tuple)):
            return [parse_stage_kind(s) for s in v]
        return v

    @field_validator("stages")
    @classmethod
    def validate_unique_stages(cls, v: List[StageKind]) -> List[StageKind]:
        if len(set(v)) != len(v):
            raise ValueError("Stage sequence must not repeat a stage.")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    def duration_for(self, stage_kind: StageKind) -> Optional[int]:
        if stage_kind == StageKind.EYE_TRACKING:
            return self.eye_tracking_duration_s
        if stage_kind == StageKind.FACIAL_ANALYSIS:
            return self.facial_analysis_duration_s
        return None

    def load_questions(self) -> Tuple[Question, ...]:
        if self.question_bank is None:
            return DEFAULT_QUESTION_BANK
        return tuple(load_question_bank(self.question_bank))


def load_config(path: Path) -> AssessmentConfig:
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError("Config must be a JSON object")
    bank = raw.get("question_bank")
    if bank:
        # relative bank paths resolve against the config file
        bank_path = Path(bank)
        if not bank_path.is_absolute():
            raw = dict(raw)
            raw["question_bank"] = str(path.parent / bank_path)
    return AssessmentConfig.model_validate(raw)
