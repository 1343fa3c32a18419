from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple

from asd_screening.core.assessment_types import OverallResult, StageResult, StageSummary
from asd_screening.core.errors import InvalidTransitionError, NotReadyError
from asd_screening.domain.stages import DEFAULT_STAGE_SEQUENCE, StageKind, parse_stage_kind
from asd_screening.engine.classifier import StageClassifier
from asd_screening.engine.combiner import OverallCombiner

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    INTRO = "intro"
    IN_STAGE = "in_stage"
    RESULTS = "results"


def new_session_id() -> str:
    return uuid.uuid4().hex[:10]


@dataclass
class AssessmentSession:
    """Linear sequencer over the configured stages.

    The pointer starts before the first stage (intro), moves forward by
    exactly one position per completed stage and ends past the last stage
    (results). Each stage kind receives at most one result.
    """

    stages: Tuple[StageKind, ...] = DEFAULT_STAGE_SEQUENCE
    session_id: str = field(default_factory=new_session_id)
    classifier: StageClassifier = field(default_factory=StageClassifier, repr=False)
    combiner: OverallCombiner = field(default_factory=OverallCombiner, repr=False)
    current_index: Optional[int] = field(default=None, init=False)
    _results: Dict[StageKind, StageResult] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self.stages = tuple(parse_stage_kind(s) for s in self.stages)
        if not self.stages:
            raise ValueError("A session needs at least one stage")
        if len(set(self.stages)) != len(self.stages):
            raise ValueError("Stage sequence must not repeat a stage")

    @property
    def state(self) -> SessionState:
        if self.current_index is None:
            return SessionState.INTRO
        if self.current_index >= len(self.stages):
            return SessionState.RESULTS
        return SessionState.IN_STAGE

    @property
    def current_stage(self) -> Optional[StageKind]:
        if self.state != SessionState.IN_STAGE:
            return None
        return self.stages[self.current_index]  # type: ignore[index]

    @property
    def results(self) -> Dict[StageKind, StageResult]:
        return dict(self._results)

    @property
    def is_complete(self) -> bool:
        return self.state == SessionState.RESULTS

    def begin(self) -> "AssessmentSession":
        if self.state != SessionState.INTRO:
            raise InvalidTransitionError(expected=None, received="begin")
        self.current_index = 0
        logger.info("Session %s started with stages: %s", self.session_id, ", ".join(s.value for s in self.stages))
        return self

    def advance(self, stage_kind: StageKind | str, result: StageResult) -> None:
        kind = parse_stage_kind(stage_kind)
        current = self.current_stage
        if current is None or kind != current:
            raise InvalidTransitionError(
                expected=current.value if current is not None else None,
                received=kind.value,
            )
        if result.stage_kind != kind:
            raise InvalidTransitionError(expected=kind.value, received=result.stage_kind.value)

        self._results[kind] = result
        self.current_index = int(self.current_index or 0) + 1

        if self.is_complete:
            logger.info("Session %s finished all %d stages", self.session_id, len(self.stages))
        else:
            logger.info("Session %s advanced to %s", self.session_id, self.stages[self.current_index].value)

    def complete_stage(self, stage_kind: StageKind | str, summary: StageSummary) -> StageResult:
        kind = parse_stage_kind(stage_kind)
        current = self.current_stage
        if current is None or kind != current:
            raise InvalidTransitionError(
                expected=current.value if current is not None else None,
                received=kind.value,
            )
        result = self.classifier.classify(kind, summary)
        self.advance(kind, result)
        return result

    def current_progress(self) -> Optional[float]:
        state = self.state
        if state == SessionState.INTRO:
            return None
        if state == SessionState.RESULTS:
            return 1.0
        return (int(self.current_index) + 1) / len(self.stages)  # type: ignore[arg-type]

    def overall_result(self) -> OverallResult:
        if not self._results:
            raise NotReadyError("Overall result requested before any stage completed")
        return self.combiner.combine(self._results)


def start_session(stages: Iterable[StageKind | str] = DEFAULT_STAGE_SEQUENCE) -> AssessmentSession:
    return AssessmentSession(stages=tuple(stages)).begin()
