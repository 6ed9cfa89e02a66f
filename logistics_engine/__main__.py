"""CLI entry point for the logistics decision engine.

Usage:
    # Start the sidecar API server
    python -m logistics_engine serve
    LOGISTICS_SIDECAR_DEV_MODE=true python -m logistics_engine serve

    # Trend + anomalies over a JSON list of {"x", "y", "label"} samples
    python -m logistics_engine trend --input samples.json --future 5
    python -m logistics_engine anomalies --input samples.json

    # Vendor visit order over a JSON list of vendors
    python -m logistics_engine optimize --input vendors.json --generations 50 --seed 7

    # Rank, simulate and learn over a JSON list of strategies
    python -m logistics_engine simulate --scenario "Peak Traffic" --trials 500 --seed 7

Without --input each command runs on the built-in demo data.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import TypeAdapter, ValidationError


def _load(path: str | None, model, default):
    """Parse a JSON list of ``model`` items, or return ``default``."""
    if path is None:
        return default
    source = Path(path)
    if not source.exists():
        print(f"Error: Path not found: {source}", file=sys.stderr)
        sys.exit(1)
    if not source.is_file():
        print(f"Error: Not a file: {source}", file=sys.stderr)
        sys.exit(1)
    try:
        return TypeAdapter(list[model]).validate_json(source.read_bytes())
    except OSError as exc:
        print(f"Error: Cannot read {source}: {exc}", file=sys.stderr)
        sys.exit(1)
    except ValidationError as exc:
        print(f"Error: Invalid input in {source}:\n{exc}", file=sys.stderr)
        sys.exit(1)


def _emit(payload: dict) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _cmd_serve(args: argparse.Namespace) -> None:
    """Start the sidecar API server."""
    import uvicorn

    from .config import get_settings
    from .sidecar import create_app

    settings = get_settings()
    app = create_app(settings)

    uvicorn.run(
        app,
        host=settings.sidecar_host,
        port=settings.sidecar_port,
        log_level="info",
    )


def _cmd_trend(args: argparse.Namespace) -> None:
    from .analytics import analyze_series
    from .demo import HOURLY_DELIVERIES
    from .models import Sample

    samples = _load(args.input, Sample, HOURLY_DELIVERIES)
    _emit(analyze_series(samples, args.future).to_dict())


def _cmd_anomalies(args: argparse.Namespace) -> None:
    from .anomaly import detect, get_alerts
    from .demo import HOURLY_DELIVERIES
    from .models import Sample

    samples = _load(args.input, Sample, HOURLY_DELIVERIES)
    report = detect(samples)
    payload = report.to_dict()
    payload["alerts"] = [a.to_dict() for a in get_alerts(report)]
    _emit(payload)


def _cmd_optimize(args: argparse.Namespace) -> None:
    from .config import get_settings
    from .demo import VENDORS
    from .models import Vendor
    from .sequencing import SequenceOptimizer

    vendors = _load(args.input, Vendor, VENDORS)
    optimizer = SequenceOptimizer.from_settings(get_settings(), seed=args.seed)
    if args.generations is not None:
        optimizer.generations = max(0, args.generations)
    _emit(optimizer.optimize(vendors).to_dict())


def _cmd_simulate(args: argparse.Namespace) -> None:
    from .config import get_settings
    from .demo import STRATEGIES
    from .learning import WeightLearner
    from .models import Strategy
    from .simulation import run_cycle
    from .uncertainty import UncertaintySimulator

    settings = get_settings()
    strategies = _load(args.input, Strategy, STRATEGIES)
    simulator = UncertaintySimulator.from_settings(settings, seed=args.seed)
    if args.trials is not None:
        simulator.trials = max(1, args.trials)

    result = run_cycle(
        strategies,
        scenario=args.scenario or settings.default_scenario,
        delay_threshold=settings.delay_threshold,
        simulator=simulator,
        learner=WeightLearner.from_settings(settings),
    )
    _emit(result.to_dict())


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="logistics_engine",
        description="Logistics decision and predictive analytics engine",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log engine steps to stderr"
    )
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("serve", help="Start the sidecar API server")

    trend_p = sub.add_parser("trend", help="Fit a trend line and flag anomalies")
    trend_p.add_argument("--input", help="JSON file with a list of samples")
    trend_p.add_argument("--future", type=int, default=5, help="Points to extrapolate")

    anomaly_p = sub.add_parser("anomalies", help="Flag z-score anomalies")
    anomaly_p.add_argument("--input", help="JSON file with a list of samples")

    optimize_p = sub.add_parser("optimize", help="Optimize vendor visit order")
    optimize_p.add_argument("--input", help="JSON file with a list of vendors")
    optimize_p.add_argument("--generations", type=int, default=None)
    optimize_p.add_argument("--seed", type=int, default=None)

    simulate_p = sub.add_parser("simulate", help="Rank, simulate and learn")
    simulate_p.add_argument("--input", help="JSON file with a list of strategies")
    simulate_p.add_argument("--scenario", default=None, help="Scenario preset name")
    simulate_p.add_argument("--trials", type=int, default=None)
    simulate_p.add_argument("--seed", type=int, default=None)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    commands = {
        "serve": _cmd_serve,
        "trend": _cmd_trend,
        "anomalies": _cmd_anomalies,
        "optimize": _cmd_optimize,
        "simulate": _cmd_simulate,
    }
    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        sys.exit(1)
    handler(args)


if __name__ == "__main__":
    main()
