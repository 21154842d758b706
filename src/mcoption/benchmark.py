r"""
Wall-clock benchmarking around :func:`mcoption.engine.simulate`.

The harness repeatedly prices the same contract and summarizes the timings;
:func:`sweep_workers` repeats that for a range of worker counts and reports
the speedup over a single worker. The engine never imports this module.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field, replace
from typing import Any, Optional

import numpy as np

from .config import EngineConfig
from .core import SimulationParameters
from .engine import EuropeanOptionEngine

logger = logging.getLogger(__name__)

__all__ = ["BenchmarkRun", "BenchmarkReport", "run_benchmark", "sweep_workers"]


@dataclass(frozen=True)
class BenchmarkRun:
    """One timed engine invocation."""

    iteration: int
    execution_time_ms: float
    option_price: float
    lower: float
    upper: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "iteration": self.iteration,
            "executionTimeMs": self.execution_time_ms,
            "optionPrice": self.option_price,
            "confidence": {"lower": self.lower, "upper": self.upper},
        }


@dataclass
class BenchmarkReport:
    r"""
    Timings for repeated runs of one configuration.

    Attributes
    ----------
    runs : list of BenchmarkRun
        Timed runs in execution order (the warm-up run is not included).
    workers_used : int
        Worker count reported by the engine.
    statistics : dict
        ``min``, ``max``, ``mean`` and ``median`` of ``execution_time_ms``.
    """

    runs: list[BenchmarkRun]
    workers_used: int
    statistics: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "statistics": dict(self.statistics),
            "iterations": len(self.runs),
            "workersUsed": self.workers_used,
            "runs": [run.to_dict() for run in self.runs],
        }


def _timing_statistics(times_ms: list[float]) -> dict[str, float]:
    arr = np.asarray(times_ms, dtype=float)
    return {
        "min": float(np.min(arr)),
        "max": float(np.max(arr)),
        "mean": float(np.mean(arr)),
        "median": float(np.median(arr)),
    }


def run_benchmark(
    params: SimulationParameters,
    iterations: int = 5,
    warmup: bool = True,
    config: Optional[EngineConfig] = None,
) -> BenchmarkReport:
    r"""
    Time ``iterations`` engine runs on ``params``.

    Parameters
    ----------
    params : SimulationParameters
        Contract and trial count.
    iterations : int, default ``5``
        Number of timed runs.
    warmup : bool, default ``True``
        Run once untimed first (thread start-up, import and cache effects).
    config : EngineConfig, optional
        Engine configuration.

    Returns
    -------
    BenchmarkReport
    """
    if iterations <= 0:
        raise ValueError("iterations must be positive")
    engine = EuropeanOptionEngine(config)
    if warmup:
        engine.simulate(params)

    runs: list[BenchmarkRun] = []
    workers_used = 0
    for i in range(iterations):
        t0 = time.perf_counter()
        result = engine.simulate(params)
        elapsed_ms = (time.perf_counter() - t0) * 1000.0
        workers_used = result.workers_used
        runs.append(BenchmarkRun(i + 1, elapsed_ms, result.option_price, result.lower, result.upper))

    report = BenchmarkReport(
        runs=runs,
        workers_used=workers_used,
        statistics=_timing_statistics([run.execution_time_ms for run in runs]),
    )
    logger.info(
        "Benchmark with %d workers: mean %.2f ms over %d runs",
        workers_used, report.statistics["mean"], iterations,
    )
    return report


def sweep_workers(
    params: SimulationParameters,
    max_workers: int = 16,
    iterations: int = 5,
    config: Optional[EngineConfig] = None,
) -> dict[str, Any]:
    r"""
    Benchmark worker counts ``1..max_workers``.

    Returns
    -------
    dict
        ``{"reports": {n: BenchmarkReport}, "speedup": {n: float}}`` where speedup is
        the one-worker mean time divided by the ``n``-worker mean time.
    """
    if max_workers <= 0:
        raise ValueError("max_workers must be positive")
    reports: dict[int, BenchmarkReport] = {}
    for n in range(1, max_workers + 1):
        reports[n] = run_benchmark(replace(params, n_workers=n), iterations=iterations, config=config)

    baseline = reports[1].statistics["mean"]
    speedup = {
        n: (baseline / rep.statistics["mean"]) if rep.statistics["mean"] > 0 else float("nan")
        for n, rep in reports.items()
    }
    return {"reports": reports, "speedup": speedup}
