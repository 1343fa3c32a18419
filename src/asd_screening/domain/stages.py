from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple


class StageKind(str, Enum):
    QUESTIONNAIRE = "questionnaire"
    EYE_TRACKING = "eye_tracking"
    FACIAL_ANALYSIS = "facial_analysis"


DEFAULT_STAGE_SEQUENCE: Tuple[StageKind, ...] = (
    StageKind.QUESTIONNAIRE,
    StageKind.EYE_TRACKING,
    StageKind.FACIAL_ANALYSIS,
)


STAGE_TITLES: Dict[StageKind, str] = {
    StageKind.QUESTIONNAIRE: "Behavioral Questionnaire",
    StageKind.EYE_TRACKING: "Eye Tracking Analysis",
    StageKind.FACIAL_ANALYSIS: "Facial Expression Analysis",
}


# Nominal recording windows in seconds. Rates are normalised against these,
# never against the elapsed time of a truncated recording.
EYE_TRACKING_DURATION_S = 30
FACIAL_ANALYSIS_DURATION_S = 45

EMOTIONS: Tuple[str, ...] = ("neutral", "happy", "sad", "surprised", "angry", "fearful")

MICRO_EXPRESSIONS: Tuple[str, ...] = ("eyebrow_raise", "lip_compression", "eye_squint", "smile_onset")


def parse_stage_kind(value: str | StageKind) -> StageKind:
    if isinstance(value, StageKind):
        return value
    text = str(value).strip().lower().replace("-", "_")
    # camelCase aliases used by the web front end
    aliases = {"eyetracking": "eye_tracking", "facialanalysis": "facial_analysis"}
    text = aliases.get(text, text)
    try:
        return StageKind(text)
    except ValueError:
        raise ValueError(f"Unknown stage kind: {value!r}") from None
