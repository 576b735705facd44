from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Sequence, TextIO

from index_effectiveness.core.config.experiment_config import (
    ExperimentConfig,
    RealGapsConfig,
    SegmentCountConfig,
)
from index_effectiveness.core.domain.errors import IndexEffectivenessError, PreconditionViolation
from index_effectiveness.core.events.event_bus import EventBus
from index_effectiveness.core.events.sinks.checkpoint_buffer import CheckpointBuffer
from index_effectiveness.core.events.sinks.file_recorder import FileCheckpointSink
from index_effectiveness.core.events.sinks.sink_logging import LoggingEventSink
from index_effectiveness.core.gaps.distributions import DISTRIBUTION_PARAMETERS, build_distribution
from index_effectiveness.simulation.engine.real_gaps import evaluate_dataset
from index_effectiveness.simulation.harness.cancellation import CancellationToken
from index_effectiveness.simulation.harness.experiments import (
    ExitTimeExperiment,
    SegmentCountExperiment,
)
from index_effectiveness.simulation.harness.monte_carlo import HarnessOutcome
from index_effectiveness.simulation.harness.signals import install_signal_handlers
from index_effectiveness.simulation.io.datasets import load_gaps
from index_effectiveness.simulation.runtime.mlflow_run_logger import MlflowRunLogger
from index_effectiveness.simulation.runtime.prometheus_metrics import PrometheusMetricsClient
from index_effectiveness.simulation.runtime.report import (
    REAL_GAPS_COLUMNS,
    real_gaps_table,
    write_comments,
    write_table,
    write_text,
)

LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INTERRUPTED = 1
EXIT_USAGE = 2
EXIT_DATA = 3

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_json(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(path)
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object")
    return data


def _merge_overrides(base: dict[str, Any], args: argparse.Namespace, fields: Sequence[str]) -> dict[str, Any]:
    """Explicit command-line flags win over values from --config."""
    merged = dict(base)
    for name in fields:
        value = getattr(args, name, None)
        if value is not None:
            merged[name] = value
    return merged


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _report_metrics(*, experiment: str, outcome: HarnessOutcome, censored: int) -> None:
    metrics = PrometheusMetricsClient()
    if not metrics.is_enabled():
        return
    try:
        metrics.record_run(
            experiment=experiment,
            duration_seconds=outcome.duration_seconds,
            completed=outcome.completed,
            censored=censored,
            cancelled=outcome.cancelled,
        )
        metrics.push_all(job="index_effectiveness")
    except Exception:  # pylint: disable=broad-exception-caught
        LOGGER.exception("Prometheus push failed")


def _log_mlflow(
    *, experiment: str, params: dict[str, Any], outcome: HarnessOutcome, step_column: str
) -> None:
    try:
        MlflowRunLogger().log(
            experiment=experiment,
            params=params,
            table=outcome.table,
            step_column=step_column,
            duration_seconds=outcome.duration_seconds,
            status="cancelled" if outcome.cancelled else "success",
        )
    except Exception:  # pylint: disable=broad-exception-caught
        LOGGER.exception("MLflow logging failed")


def _event_bus(buffer: CheckpointBuffer, checkpoint_file: Path | None) -> EventBus:
    bus = EventBus([buffer, LoggingEventSink(LOGGER)])
    if checkpoint_file is not None:
        bus.register(FileCheckpointSink(checkpoint_file))
    return bus


def _run_monte_carlo(
    experiment: ExitTimeExperiment | SegmentCountExperiment,
    args: argparse.Namespace,
    stdout: TextIO,
    stderr: TextIO,
) -> tuple[Any, HarnessOutcome]:
    """Run an experiment with checkpointing and signal handling attached."""
    buffer = CheckpointBuffer()
    bus = _event_bus(buffer, args.checkpoint_file)
    token = CancellationToken()
    restore = install_signal_handlers(token)

    write_comments(stdout, experiment.comments())
    try:
        reducer, outcome = experiment.run(
            event_bus=bus,
            token=token,
            on_dump=lambda: write_text(stderr, buffer.read()),
            progress=not args.no_progress,
        )
    finally:
        restore()
        bus.close()

    if outcome.cancelled:
        snapshot = buffer.read()
        write_text(stderr, snapshot)
        write_text(stdout, snapshot)
    else:
        write_table(stdout, outcome.table)
    return reducer, outcome


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------

_SIMULATE_FIELDS = (
    "min_epsilon",
    "max_epsilon",
    "step",
    "iterations",
    "threads",
    "met_only",
    "ma_order",
    "ar1_phi",
    "max_steps",
    "seed",
)

_SEGMENTS_FIELDS = ("epsilon", "n", "step", "iterations", "threads", "seed")

_REAL_GAPS_FIELDS = ("min_epsilon", "max_epsilon", "threads", "binary")


def _cmd_simulate(args: argparse.Namespace, stdout: TextIO, stderr: TextIO) -> int:
    base = _load_json(args.config) if args.config else {}
    distribution = build_distribution(args.distribution, args.parameters)
    config = ExperimentConfig.from_json_obj(_merge_overrides(base, args, _SIMULATE_FIELDS))
    experiment = ExitTimeExperiment(config, distribution)

    reducer, outcome = _run_monte_carlo(experiment, args, stdout, stderr)

    _report_metrics(experiment=experiment.name, outcome=outcome, censored=reducer.censored_opt)
    _log_mlflow(
        experiment=experiment.name,
        params={"distribution": args.distribution, **distribution.model_dump(), **config.model_dump()},
        outcome=outcome,
        step_column="epsilon",
    )
    return EXIT_INTERRUPTED if outcome.cancelled else EXIT_OK


def _cmd_segments(args: argparse.Namespace, stdout: TextIO, stderr: TextIO) -> int:
    base = _load_json(args.config) if args.config else {}
    distribution = build_distribution(args.distribution, args.parameters)
    config = SegmentCountConfig.from_json_obj(_merge_overrides(base, args, _SEGMENTS_FIELDS))
    experiment = SegmentCountExperiment(config, distribution)

    _, outcome = _run_monte_carlo(experiment, args, stdout, stderr)

    _report_metrics(experiment=experiment.name, outcome=outcome, censored=0)
    _log_mlflow(
        experiment=experiment.name,
        params={"distribution": args.distribution, **distribution.model_dump(), **config.model_dump()},
        outcome=outcome,
        step_column="n",
    )
    return EXIT_INTERRUPTED if outcome.cancelled else EXIT_OK


def _cmd_real_gaps(args: argparse.Namespace, stdout: TextIO, stderr: TextIO) -> int:
    base = _load_json(args.config) if args.config else {}
    merged = _merge_overrides(base, args, _REAL_GAPS_FIELDS)
    if args.paths:
        merged["paths"] = [str(p) for p in args.paths]
    config = RealGapsConfig.from_json_obj(merged)

    write_text(stdout, ",".join(REAL_GAPS_COLUMNS) + "\n")
    for path in config.paths:
        gaps = load_gaps(path, binary=config.binary)
        rows = evaluate_dataset(path.name, gaps, config.epsilons(), threads=config.threads)
        write_text(stdout, real_gaps_table(rows).render(header=False))
    return EXIT_OK


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON config; explicit flags override its values.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level for stderr diagnostics (default: WARNING).",
    )


def _add_monte_carlo(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("distribution", choices=sorted(DISTRIBUTION_PARAMETERS))
    parser.add_argument("parameters", nargs="+", type=float, help="Distribution parameters.")
    parser.add_argument("-s", "--step", type=int, default=None)
    parser.add_argument("-i", "--iterations", type=int, default=None)
    parser.add_argument("-t", "--threads", type=int, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument(
        "--checkpoint-file",
        type=Path,
        default=None,
        help="Mirror every checkpoint to this file.",
    )
    parser.add_argument("--no-progress", action="store_true", help="Disable the progress bar.")
    _add_common(parser)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="index-effectiveness",
        description="Monte Carlo study of error-bounded piecewise-linear indexing",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    simulate = sub.add_parser("simulate", help="OPT vs MET exit times over a range of epsilon.")
    _add_monte_carlo(simulate)
    simulate.add_argument("-m", "--min-epsilon", type=int, default=None)
    simulate.add_argument("-M", "--max-epsilon", type=int, default=None)
    simulate.add_argument(
        "--met",
        dest="met_only",
        action="store_const",
        const=True,
        default=None,
        help="Simulate MET only.",
    )
    correlation = simulate.add_mutually_exclusive_group()
    correlation.add_argument("-o", "--ma-order", type=int, default=None)
    correlation.add_argument("-a", "--ar1-phi", type=float, default=None)
    simulate.add_argument("--max-steps", type=int, default=None)
    simulate.set_defaults(handler=_cmd_simulate)

    segments = sub.add_parser("segments", help="MET segment count growth with stream length.")
    _add_monte_carlo(segments)
    segments.add_argument("-n", type=int, default=None, help="Stream length.")
    segments.add_argument("-e", "--epsilon", type=int, default=None)
    segments.set_defaults(handler=_cmd_segments)

    real = sub.add_parser("real-gaps", help="OPT segment lengths on real key sets.")
    real.add_argument("paths", nargs="*", type=Path, help="Dataset files.")
    real.add_argument("-m", "--min-epsilon", type=int, default=None)
    real.add_argument("-M", "--max-epsilon", type=int, default=None, help="Exclusive.")
    real.add_argument("-t", "--threads", type=int, default=None)
    real.add_argument(
        "-b",
        "--binary",
        action="store_const",
        const=True,
        default=None,
        help="Datasets are binary uint64 files with a size header.",
    )
    _add_common(real)
    real.set_defaults(handler=_cmd_real_gaps)

    return parser


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def run_cli(
    argv: Sequence[str] | None = None,
    *,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    stdout = stdout if stdout is not None else sys.stdout
    stderr = stderr if stderr is not None else sys.stderr

    args = build_parser().parse_args(argv)
    _configure_logging(args.log_level)

    try:
        return args.handler(args, stdout, stderr)
    except PreconditionViolation as exc:
        # Raised mid-run by a worker, not by argument or config validation.
        print(f"Error: invalid point stream: {exc}", file=stderr)
        return EXIT_DATA
    except (IndexEffectivenessError, FileNotFoundError, ValueError) as exc:
        print(f"Error: {exc}", file=stderr)
        return EXIT_USAGE


def main() -> None:
    sys.exit(run_cli())


if __name__ == "__main__":
    main()
