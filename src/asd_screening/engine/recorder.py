from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from asd_screening.core.assessment_types import StageSummary
from asd_screening.core.errors import MalformedSampleError
from asd_screening.domain.schemas import Sample
from asd_screening.domain.stages import StageKind
from asd_screening.engine.aggregator import MetricAggregator
from asd_screening.engine.providers import MeasurementProvider

logger = logging.getLogger(__name__)


class StageRecorder:
    """Collects the samples of one stage in arrival order.

    Timed stages close themselves once the tick count reaches the configured
    duration. Samples pushed after the stage has closed are discarded, and the
    aggregator runs exactly once, on the first call to ``finish``.
    """

    def __init__(self, stage_kind: StageKind, aggregator: Optional[MetricAggregator] = None):
        self.stage_kind = stage_kind
        self.aggregator = aggregator or MetricAggregator()
        self.duration_ticks: Optional[int] = self.aggregator.config.duration_for(stage_kind)
        self.samples: List[Sample] = []
        self.elapsed_ticks = 0
        self.dropped = 0
        self.discarded = 0
        self._summary: Optional[StageSummary] = None
        logger.info("Recording stage %s", stage_kind.value)

    @property
    def closed(self) -> bool:
        return self._summary is not None

    @property
    def remaining_ticks(self) -> Optional[int]:
        if self.duration_ticks is None:
            return None
        return max(self.duration_ticks - self.elapsed_ticks, 0)

    def push(self, raw: Any) -> bool:
        if self.closed:
            self.discarded += 1
            logger.warning("Discarding late %s sample after stage end", self.stage_kind.value)
            return False

        self.elapsed_ticks += 1
        accepted = True
        try:
            sample = self.aggregator.ingest(self.stage_kind, raw)
        except MalformedSampleError as e:
            self.dropped += 1
            accepted = False
            logger.warning("Dropping sample at tick %d: %s", self.elapsed_ticks, e)
        else:
            self.samples.append(sample)
            logger.debug("Accepted %s sample at tick %d", self.stage_kind.value, self.elapsed_ticks)

        if self.duration_ticks is not None and self.elapsed_ticks >= self.duration_ticks:
            self.finish()

        return accepted

    def finish(self) -> StageSummary:
        if self._summary is None:
            self._summary = self.aggregator.aggregate(self.stage_kind, self.samples)
            logger.info(
                "Stage %s finished after %d ticks (%d samples, %d dropped)",
                self.stage_kind.value,
                self.elapsed_ticks,
                len(self.samples),
                self.dropped,
            )
        return self._summary


def run_stage(
    recorder: StageRecorder,
    provider: MeasurementProvider,
    sleep: Optional[Callable[[float], None]] = None,
) -> StageSummary:
    interval = recorder.aggregator.config.tick_interval_s
    while not recorder.closed:
        raw = provider.next_sample(recorder.stage_kind, recorder.elapsed_ticks)
        if raw is None:
            break
        recorder.push(raw)
        if sleep is not None and not recorder.closed:
            sleep(interval)
    return recorder.finish()
