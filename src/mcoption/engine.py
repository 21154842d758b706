r"""
Monte Carlo pricing engine for European options.

This module provides:

Classes
    :class:`EuropeanOptionEngine` — Validation, partitioning, worker orchestration
    and aggregation behind a single :meth:`~EuropeanOptionEngine.simulate` call

Functions
    :func:`simulate` — Convenience wrapper around a one-off engine

The engine handles:
- Fail-fast validation before any worker exists
- Worker-count resolution and contiguous trial partitioning
- Independent per-worker streams via :meth:`numpy.random.SeedSequence.spawn`
- Execution on a sequential, thread or process backend
- Reduction of the workers' ``(sum, sum_squares, count)`` summaries

Example
-------
>>> from mcoption import SimulationParameters, simulate
>>> params = SimulationParameters(S0=100, K=100, r=0.05, sigma=0.2, T=1.0, n_trials=200_000)
>>> result = simulate(params)  # doctest: +SKIP
>>> result.lower <= result.option_price <= result.upper  # doctest: +SKIP
True

See Also
--------
mcoption.backends
    Execution backends.
mcoption.stats_engine
    Aggregation of worker summaries.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from .backends import (
    ProcessBackend,
    SequentialBackend,
    ThreadBackend,
    is_windows_platform,
    make_ranges,
    resolve_n_workers,
)
from .config import EngineConfig
from .core import PartialStatistics, PricingResult, SimulationParameters, TrialRange
from .stats_engine import aggregate

logger = logging.getLogger(__name__)  # pragma: no cover
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)

__all__ = ["EuropeanOptionEngine", "simulate"]


class EuropeanOptionEngine:
    r"""
    Price European options by parallel Monte Carlo simulation.

    Parameters
    ----------
    config : EngineConfig, optional
        Backend, batch size, confidence level and seeding. Defaults to
        :class:`~mcoption.config.EngineConfig` with all defaults.

    Examples
    --------
    >>> engine = EuropeanOptionEngine(EngineConfig(backend="thread", seed=42))
    >>> params = SimulationParameters(S0=100, K=95, r=0.01, sigma=0.3, T=0.5, kind="put")
    >>> engine.simulate(params).workers_used  # doctest: +SKIP
    8

    Notes
    -----
    **Seeding.** With ``config.seed=None`` the root
    :class:`~numpy.random.SeedSequence` draws OS entropy on every call, so results
    are statistically random rather than reproducible. A fixed seed reproduces a
    run bit for bit as long as the worker count is unchanged.

    **Backends.** ``"auto"`` prefers threads because NumPy releases the GIL in the
    batched RNG fill and payoff ufuncs; on Windows it resolves to processes.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def simulate(self, params: SimulationParameters) -> PricingResult:
        r"""
        Run one pricing invocation.

        Parameters
        ----------
        params : SimulationParameters
            Pricing inputs. Validated here, once, before any worker is created.

        Returns
        -------
        PricingResult
            Discounted price, confidence bounds and the number of workers used.

        Raises
        ------
        ValidationError
            If ``params`` is invalid. No worker has been started.
        AggregationError
            If the workers report zero trials in total (an internal defect).
        Exception
            The first exception raised by any worker, after all workers finished.
        """
        params.validate()

        n_workers = resolve_n_workers(params.n_workers, params.n_trials, self.config.fallback_workers)
        ranges = make_ranges(params.n_trials, n_workers)
        seed_seqs = self._spawn_seeds(len(ranges))

        partials = self._execute_with_backend(self.config.backend, params, ranges, seed_seqs)

        result = aggregate(
            partials,
            params.r,
            params.T,
            confidence=self.config.confidence,
            workers_used=len(ranges),
        )
        logger.debug(
            "Price %.6f in [%.6f, %.6f] from %d trials",
            result.option_price, result.lower, result.upper, result.n_trials,
        )
        return result

    def _spawn_seeds(self, n: int) -> list[np.random.SeedSequence]:
        """One independent child sequence per worker; the spawn key tells workers apart."""
        root = np.random.SeedSequence(self.config.seed)
        return root.spawn(n)

    def _resolve_backend_type(self, requested: str | None = None) -> str:
        """
        Resolve the effective backend type.

        ``"auto"`` maps to ``"process"`` on Windows and ``"thread"`` elsewhere.
        """
        backend = requested or self.config.backend
        if backend == "auto":
            on_windows = is_windows_platform()
            if on_windows:
                logger.info("Backend 'auto' resolved to 'process' on Windows platform.")
            return "process" if on_windows else "thread"

        return backend

    @staticmethod
    def _create_backend(backend: str) -> SequentialBackend | ThreadBackend | ProcessBackend:
        if backend == "sequential":
            return SequentialBackend()
        if backend == "thread":
            return ThreadBackend()
        return ProcessBackend()

    def _execute_with_backend(
        self,
        backend: str,
        params: SimulationParameters,
        ranges: list[TrialRange],
        seed_seqs: list[np.random.SeedSequence],
    ) -> list[PartialStatistics]:
        """Resolve the backend, log the plan and run every worker to completion."""
        backend = self._resolve_backend_type(backend)
        if len(ranges) == 1 and backend == "process":
            # A single range gains nothing from a process spawn
            backend = "sequential"

        if backend == "sequential":
            logger.info("Computing %d trials sequentially in %d range(s)...", params.n_trials, len(ranges))
        else:
            logger.info(
                "Computing %d trials in parallel using %s backend with %d workers...",
                params.n_trials, backend, len(ranges),
            )

        backend_instance = self._create_backend(backend)
        return backend_instance.run(params, ranges, seed_seqs, self.config.batch_size)


def simulate(params: SimulationParameters, config: Optional[EngineConfig] = None) -> PricingResult:
    """Price ``params`` with a fresh :class:`EuropeanOptionEngine`."""
    return EuropeanOptionEngine(config).simulate(params)
