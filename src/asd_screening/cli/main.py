from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from asd_screening.config import AssessmentConfig, load_config
from asd_screening.core.assessment_types import (
    CategoryScore,
    EyeTrackingSummary,
    FacialAnalysisSummary,
    QuestionnaireSummary,
    StageSummary,
)
from asd_screening.core.errors import ScreeningError
from asd_screening.core.report_builder import ReportBuilder, report_to_dict
from asd_screening.core.session import AssessmentSession
from asd_screening.domain.stages import StageKind, parse_stage_kind
from asd_screening.engine.aggregator import MetricAggregator
from asd_screening.engine.audit_trail import ScreeningAuditTrail
from asd_screening.engine.explainability import StageExplainability
from asd_screening.engine.providers import MeasurementProvider, ReplayProvider, SimulatedProvider
from asd_screening.engine.recorder import StageRecorder, run_stage

logger = logging.getLogger("asd_screening.cli")


def _load_input(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _provider_has_data(provider: Optional[MeasurementProvider], stage_kind: StageKind) -> bool:
    if provider is None:
        return False
    if isinstance(provider, ReplayProvider):
        return provider.has_samples(stage_kind)
    return True


def summary_from_dict(stage_kind: StageKind, data: Dict[str, Any]) -> StageSummary:
    if stage_kind == StageKind.QUESTIONNAIRE:
        return QuestionnaireSummary(
            answers={str(k): int(v) for k, v in dict(data.get("answers", {}) or {}).items()},
            category_scores=tuple(
                CategoryScore(
                    category=str(c.get("category", "")),
                    score=int(c.get("score", 0)),
                    item_count=int(c.get("item_count", 0)),
                )
                for c in data.get("category_scores", []) or []
            ),
            total_score=int(data.get("total_score", 0)),
            max_total_score=int(data.get("max_total_score", 0)),
        )

    if stage_kind == StageKind.EYE_TRACKING:
        kwargs: Dict[str, Any] = {
            "avg_fixation_duration": float(data.get("avg_fixation_duration", 0.0)),
            "saccadic_rate": float(data.get("saccadic_rate", 0.0)),
            "blink_rate": float(data.get("blink_rate", 0.0)),
            "gaze_stability": float(data.get("gaze_stability", 0.0)),
        }
        if data.get("duration_s") is not None:
            kwargs["duration_s"] = int(data["duration_s"])
        return EyeTrackingSummary(**kwargs)

    kwargs = {
        "emotion_counts": {str(k): int(v) for k, v in dict(data.get("emotion_counts", {}) or {}).items()},
        "eye_contact_count": int(data.get("eye_contact_count", 0)),
        "micro_expressions": frozenset(str(m) for m in data.get("micro_expressions", []) or []),
        "symmetry": float(data.get("symmetry", 0.0)),
    }
    if data.get("duration_s") is not None:
        kwargs["duration_s"] = int(data["duration_s"])
    return FacialAnalysisSummary(**kwargs)


def run_assessment(
    config: AssessmentConfig,
    raw: Dict[str, Any],
    provider: Optional[MeasurementProvider] = None,
    realtime: bool = False,
) -> Dict[str, Any]:
    stages: List[StageKind] = [parse_stage_kind(s) for s in raw.get("stages", [])] or list(config.stages)
    summaries = {parse_stage_kind(k): v for k, v in (raw.get("summaries", {}) or {}).items()}
    samples = raw.get("samples", {}) or {}

    if provider is None and samples:
        provider = ReplayProvider(samples)

    aggregator = MetricAggregator(config)
    session = AssessmentSession(stages=tuple(stages)).begin()

    while not session.is_complete:
        kind = session.current_stage
        if kind is None:
            break
        if kind in summaries:
            summary = summary_from_dict(kind, dict(summaries[kind] or {}))
        elif _provider_has_data(provider, kind):
            recorder = StageRecorder(kind, aggregator)
            summary = run_stage(recorder, provider, sleep=time.sleep if realtime else None)
        else:
            logger.warning("No data for stage %s; stopping with a partial result", kind.value)
            break
        session.complete_stage(kind, summary)

    builder = ReportBuilder(
        explainability=StageExplainability(),
        audit=ScreeningAuditTrail(),
    )
    return report_to_dict(builder.build(session))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="asd-screening",
        description="Run a three-stage ASD screening assessment and print the report as JSON.",
    )
    parser.add_argument("input", nargs="?", help="JSON file with stage summaries and/or raw samples")
    parser.add_argument("--config", help="JSON config file")
    parser.add_argument("--simulate", action="store_true", help="Use simulated measurements instead of recorded samples")
    parser.add_argument("--seed", type=int, default=None, help="Seed for simulated measurements")
    parser.add_argument("--realtime", action="store_true", help="Pace sampling at the configured tick interval")
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.input and not args.simulate:
        parser.print_usage(sys.stderr)
        sys.stderr.write("error: an input file or --simulate is required\n")
        return 2

    try:
        config = load_config(Path(args.config)) if args.config else AssessmentConfig()
        level = (args.log_level or config.log_level).upper()
        logging.basicConfig(
            level=level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            stream=sys.stderr,
        )

        raw = _load_input(args.input) if args.input else {}
        provider: Optional[MeasurementProvider] = None
        if args.simulate:
            provider = SimulatedProvider(seed=args.seed, questions=config.load_questions())

        result = run_assessment(config, raw, provider=provider, realtime=args.realtime)
    except (ScreeningError, ValueError, OSError) as e:
        sys.stderr.write(f"error: {e}\n")
        return 1

    sys.stdout.write(json.dumps(result, ensure_ascii=False, indent=2))
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
