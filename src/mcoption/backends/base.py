r"""
Base classes and utilities for execution backends.

This module provides:

Protocol
    :class:`ExecutionBackend` — Interface for worker execution strategies

Functions
    :func:`resolve_n_workers` — Decide how many workers a run uses
    :func:`make_ranges` — Split ``[0, n)`` into near-equal contiguous trial ranges
    :func:`worker_run_range` — Top-level worker that accumulates one trial range

Helpers
    :func:`is_windows_platform` — Platform detection for backend selection
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Protocol, Sequence

import numpy as np

from ..config import DEFAULT_BATCH_SIZE, FALLBACK_WORKERS
from ..core import PartialStatistics, SimulationParameters, TrialRange
from ..paths import PathGenerator

logger = logging.getLogger(__name__)

__all__ = [
    "ExecutionBackend",
    "resolve_n_workers",
    "make_ranges",
    "worker_run_range",
    "is_windows_platform",
]


def is_windows_platform() -> bool:
    """Return True when running on a Windows platform."""
    return sys.platform.startswith("win") or (sys.platform == "cli")


def resolve_n_workers(requested: int, n_trials: int, fallback: int = FALLBACK_WORKERS) -> int:
    r"""
    Decide the worker count for a run.

    Parameters
    ----------
    requested : int
        Requested workers. ``0`` means :func:`os.cpu_count`, or ``fallback`` when the
        CPU count cannot be determined.
    n_trials : int
        Total trials. A worker never receives zero trials, so the result is at most
        ``n_trials``.
    fallback : int, default ``4``
        Count used when auto-detection fails.

    Returns
    -------
    int
        Worker count in ``[1, n_trials]``.

    Examples
    --------
    >>> resolve_n_workers(8, 3)
    3
    """
    n_workers = requested
    if n_workers == 0:
        n_workers = os.cpu_count() or fallback
    return max(1, min(n_workers, n_trials))


def make_ranges(n_trials: int, n_workers: int) -> list[TrialRange]:
    r"""
    Partition :math:`[0, n)` into ``n_workers`` contiguous half-open ranges.

    The first ``n_trials % n_workers`` ranges get one extra trial, so range lengths
    differ by at most one and their union is exactly :math:`[0, n)`.

    Parameters
    ----------
    n_trials : int
        Total number of trials.
    n_workers : int
        Number of ranges, ``1 <= n_workers <= n_trials``.

    Returns
    -------
    list of TrialRange

    Examples
    --------
    >>> [(rg.start, rg.end) for rg in make_ranges(10, 3)]
    [(0, 4), (4, 7), (7, 10)]
    """
    if not 1 <= n_workers <= n_trials:
        raise ValueError(f"n_workers must be in [1, {n_trials}], got {n_workers}")
    base, extra = divmod(n_trials, n_workers)
    ranges = []
    start = 0
    for k in range(n_workers):
        end = start + base + (1 if k < extra else 0)
        ranges.append(TrialRange(start, end))
        start = end
    return ranges


def worker_run_range(
    params: SimulationParameters,
    trial_range: TrialRange,
    seed_seq: np.random.SeedSequence,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> PartialStatistics:
    r"""
    Simulate one trial range in a **separate worker** and summarize it.

    Parameters
    ----------
    params : SimulationParameters
        Validated pricing inputs. Workers trust the engine and do not re-validate.
    trial_range : TrialRange
        Trials owned by this worker.
    seed_seq : :class:`numpy.random.SeedSequence`
        Child sequence for an **independent** RNG stream.
    batch_size : int, default ``4096``
        Variate buffer capacity.

    Returns
    -------
    PartialStatistics
        ``count == len(trial_range)``.

    Notes
    -----
    Uses :class:`numpy.random.Philox` for the worker stream. Each batch of payoffs is
    folded into running sums and then discarded, so memory does not depend on the
    range length.
    """
    rng = np.random.Generator(np.random.Philox(seed_seq))
    gen = PathGenerator(params, rng, batch_size)
    total = 0.0
    total_sq = 0.0
    remaining = len(trial_range)
    while remaining > 0:
        n = min(gen.batch_size, remaining)
        payoffs = gen.next_payoffs(n)
        total += float(np.sum(payoffs))
        total_sq += float(np.dot(payoffs, payoffs))
        remaining -= n
    logger.debug("Worker finished trials [%d, %d)", trial_range.start, trial_range.end)
    return PartialStatistics(total, total_sq, len(trial_range))


class ExecutionBackend(Protocol):
    r"""
    Protocol defining the interface for execution backends.

    A backend runs one worker per trial range and returns the published
    :class:`~mcoption.core.PartialStatistics` only after every worker has finished.
    """

    def run(
        self,
        params: SimulationParameters,
        ranges: Sequence[TrialRange],
        seed_seqs: Sequence[np.random.SeedSequence],
        batch_size: int,
    ) -> list[PartialStatistics]:
        r"""
        Run all workers and return their summaries.

        Parameters
        ----------
        params : SimulationParameters
            Validated pricing inputs.
        ranges : sequence of TrialRange
            One range per worker.
        seed_seqs : sequence of SeedSequence
            One independent child sequence per worker, aligned with ``ranges``.
        batch_size : int
            Variate buffer capacity per worker.

        Returns
        -------
        list of PartialStatistics
            One entry per range, in range order.
        """
