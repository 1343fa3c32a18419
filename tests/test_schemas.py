import pytest

from asd_screening.core.errors import MalformedSampleError, ScreeningError
from asd_screening.domain.questions import DEFAULT_QUESTION_BANK
from asd_screening.domain.schemas import EyeTrackingSample, FacialAnalysisSample, parse_sample
from asd_screening.domain.stages import StageKind


def test_valid_samples_parse():
    eye = parse_sample(StageKind.EYE_TRACKING, {"fixation_duration": "800", "gaze_stability": 0.7})
    face = parse_sample(StageKind.FACIAL_ANALYSIS, {"emotion": "Happy", "symmetry": 0.9, "micro_expression": ""})

    assert isinstance(eye, EyeTrackingSample)
    assert eye.fixation_duration == 800.0
    assert eye.saccade is False
    assert isinstance(face, FacialAnalysisSample)
    assert face.emotion == "happy"
    assert face.micro_expression is None


def test_model_instances_pass_through():
    sample = EyeTrackingSample(fixation_duration=900, gaze_stability=0.5)

    assert parse_sample(StageKind.EYE_TRACKING, sample) is sample


@pytest.mark.parametrize(
    "stage_kind, raw",
    [
        (StageKind.QUESTIONNAIRE, {"answers": {"1": 4}}),
        (StageKind.QUESTIONNAIRE, {"answers": {}}),
        (StageKind.EYE_TRACKING, {"fixation_duration": 900}),
        (StageKind.EYE_TRACKING, {"fixation_duration": 900, "gaze_stability": 1.5}),
        (StageKind.EYE_TRACKING, {"fixation_duration": float("inf"), "gaze_stability": 0.5}),
        (StageKind.EYE_TRACKING, {"fixation_duration": 900, "gaze_stability": float("nan")}),
        (StageKind.FACIAL_ANALYSIS, {"emotion": "happy", "symmetry": float("nan")}),
        (StageKind.FACIAL_ANALYSIS, {"emotion": "bored", "symmetry": 0.9}),
        (StageKind.FACIAL_ANALYSIS, {"emotion": "happy", "symmetry": 0.9, "micro_expression": "wink"}),
        (StageKind.FACIAL_ANALYSIS, ["happy", 0.9]),
    ],
)
def test_malformed_samples(stage_kind, raw):
    with pytest.raises(MalformedSampleError):
        parse_sample(stage_kind, raw)


def test_wrong_sample_model_is_malformed():
    sample = EyeTrackingSample(fixation_duration=900, gaze_stability=0.5)

    with pytest.raises(MalformedSampleError):
        parse_sample(StageKind.FACIAL_ANALYSIS, sample)


def test_unknown_question_ids_are_malformed():
    with pytest.raises(MalformedSampleError) as exc:
        parse_sample(StageKind.QUESTIONNAIRE, {"answers": {"1": 2, "99": 1}}, questions=DEFAULT_QUESTION_BANK)

    assert isinstance(exc.value, ScreeningError)
    assert "99" in exc.value.reason
