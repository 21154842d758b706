"""
Command-line adapter: JSON parameters in, JSON result out.

Example:
    mcoption '{"S0": 100, "K": 100, "r": 0.05, "sigma": 0.2, "T": 1, "isCall": true, "numTrials": 1000000}'
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from typing import Any, Optional, Sequence

from .analytical import black_scholes_price
from .benchmark import run_benchmark
from .config import VALID_BACKENDS, EngineConfig
from .core import SimulationParameters
from .engine import simulate

__all__ = ["main", "build_parser"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcoption",
        description="Monte Carlo Black-Scholes pricing for European options",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  mcoption '{"S0":100,"K":100,"r":0.05,"sigma":0.2,"T":1,"isCall":true,"numTrials":1000000}'
  mcoption '{...}' --threads 8 --analytical
  mcoption '{...}' --benchmark --iterations 10
        """,
    )
    parser.add_argument("params", type=str, help="JSON record with S0, K, r, sigma, T, isCall, numTrials")
    parser.add_argument("--threads", type=int, default=None,
                        help="Worker count; overrides workerCount in the JSON (0 = auto)")
    parser.add_argument("--backend", choices=VALID_BACKENDS, default="auto",
                        help="Execution backend (default: auto)")
    parser.add_argument("--seed", type=int, default=None, help="Root seed for reproducible runs")
    parser.add_argument("--batch-size", type=int, default=None, help="Variates drawn per batch")
    parser.add_argument("--analytical", action="store_true",
                        help="Also report the closed-form Black-Scholes price")
    parser.add_argument("--benchmark", action="store_true", help="Time repeated runs instead of pricing once")
    parser.add_argument("--iterations", type=int, default=5, help="Timed runs in benchmark mode (default: 5)")
    return parser


def _run(args: argparse.Namespace) -> dict[str, Any]:
    data = json.loads(args.params)
    if not isinstance(data, dict):
        raise ValueError("params must be a JSON object")
    params = SimulationParameters.from_mapping(data)
    if args.threads is not None:
        params = replace(params, n_workers=args.threads)

    config = EngineConfig(backend=args.backend, seed=args.seed)
    if args.batch_size is not None:
        config = config.with_overrides(batch_size=args.batch_size)

    if args.benchmark:
        params.validate()
        return run_benchmark(params, iterations=args.iterations, config=config).to_dict()

    out = simulate(params, config).to_dict()
    if args.analytical:
        out["analyticalPrice"] = black_scholes_price(params)
    return out


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    try:
        out = _run(args)
    except Exception as e:  # pylint: disable=broad-exception-caught
        print(json.dumps({"error": str(e)}))
        return 1
    print(json.dumps(out))
    return 0


if __name__ == "__main__":
    sys.exit(main())
