from __future__ import annotations

import random
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from asd_screening.domain.questions import DEFAULT_QUESTION_BANK, MAX_ANSWER_VALUE, Question
from asd_screening.domain.stages import EMOTIONS, MICRO_EXPRESSIONS, StageKind, parse_stage_kind


class MeasurementProvider(Protocol):
    def next_sample(self, stage_kind: StageKind, tick: int) -> Optional[Dict[str, Any]]:
        """Return the raw sample for ``tick``, or None once the source is exhausted."""
        raise NotImplementedError


class SimulatedProvider:
    """Placeholder measurements drawn from a seeded generator.

    Value ranges follow the demo front end: they are stand-ins for a real
    capture pipeline, not a model of anything.
    """

    def __init__(self, seed: Optional[int] = None, questions: Sequence[Question] = DEFAULT_QUESTION_BANK):
        self._rng = random.Random(seed)
        self.questions: Tuple[Question, ...] = tuple(questions)

    def next_sample(self, stage_kind: StageKind, tick: int) -> Optional[Dict[str, Any]]:
        if stage_kind == StageKind.QUESTIONNAIRE:
            if tick > 0:
                return None
            return {"answers": {q.qid: self._rng.randint(0, MAX_ANSWER_VALUE) for q in self.questions}}

        if stage_kind == StageKind.EYE_TRACKING:
            return {
                "fixation_duration": self._rng.random() * 2000 + 500,
                "saccade": self._rng.random() > 0.7,
                "blink": self._rng.random() > 0.95,
                "gaze_stability": self._rng.random() * 0.8 + 0.1,
            }

        micro = None
        if self._rng.random() > 0.8:
            micro = self._rng.choice(MICRO_EXPRESSIONS)
        return {
            "emotion": self._rng.choice(EMOTIONS),
            "eye_contact": self._rng.random() > 0.4,
            "micro_expression": micro,
            "symmetry": self._rng.random() * 0.3 + 0.7,
        }


class ReplayProvider:
    def __init__(self, samples: Mapping[Any, Sequence[Dict[str, Any]]]):
        self._samples: Dict[StageKind, List[Dict[str, Any]]] = {
            parse_stage_kind(k): list(v or []) for k, v in samples.items()
        }

    def has_samples(self, stage_kind: StageKind) -> bool:
        return bool(self._samples.get(stage_kind))

    def next_sample(self, stage_kind: StageKind, tick: int) -> Optional[Dict[str, Any]]:
        seq = self._samples.get(stage_kind, [])
        if tick >= len(seq):
            return None
        return seq[tick]
