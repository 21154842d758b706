r"""
Parallel execution backends.

This module provides:

Classes
    :class:`ThreadBackend` — Thread-based parallelism using ThreadPoolExecutor
    :class:`ProcessBackend` — Process-based parallelism using ProcessPoolExecutor

Both create exactly one task per trial range and tear the executor down
before returning. Each task owns one output slot; slots are read only after
every task has completed.
"""

from __future__ import annotations

import logging
import multiprocessing as mp
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from typing import Optional, Sequence

import numpy as np

from ..core import PartialStatistics, SimulationParameters, TrialRange
from .base import worker_run_range

logger = logging.getLogger(__name__)

__all__ = [
    "ThreadBackend",
    "ProcessBackend",
]


def _collect(futs, slots: list[Optional[PartialStatistics]]) -> list[PartialStatistics]:
    """Wait for every future, then re-raise the first failure or return the slots."""
    first_error: Optional[BaseException] = None
    for f in as_completed(futs):
        exc = f.exception()
        if exc is not None and first_error is None:
            first_error = exc
    if first_error is not None:
        raise first_error
    return [s for s in slots if s is not None]


class ThreadBackend:
    r"""
    Thread-based parallel execution backend.

    Uses :class:`concurrent.futures.ThreadPoolExecutor` with one thread per trial
    range. Effective because NumPy releases the GIL inside
    :meth:`~numpy.random.Generator.standard_normal` and the payoff ufuncs.

    Examples
    --------
    >>> backend = ThreadBackend()
    >>> partials = backend.run(params, ranges, seed_seqs, batch_size=4096)  # doctest: +SKIP
    """

    def run(
        self,
        params: SimulationParameters,
        ranges: Sequence[TrialRange],
        seed_seqs: Sequence[np.random.SeedSequence],
        batch_size: int,
    ) -> list[PartialStatistics]:
        slots: list[Optional[PartialStatistics]] = [None] * len(ranges)

        def _work(k: int) -> None:
            slots[k] = worker_run_range(params, ranges[k], seed_seqs[k], batch_size)

        with ThreadPoolExecutor(max_workers=len(ranges)) as ex:
            futs = [ex.submit(_work, k) for k in range(len(ranges))]
            return _collect(futs, slots)


class ProcessBackend:
    r"""
    Process-based parallel execution backend.

    Uses :class:`concurrent.futures.ProcessPoolExecutor` with the spawn context,
    one process per trial range. Useful on Windows, where threads tend to
    serialize.

    Notes
    -----
    Arguments cross the process boundary by pickling; parameters, ranges and
    seed sequences are all plain picklable values, and only the small
    :class:`~mcoption.core.PartialStatistics` comes back.
    """

    def run(
        self,
        params: SimulationParameters,
        ranges: Sequence[TrialRange],
        seed_seqs: Sequence[np.random.SeedSequence],
        batch_size: int,
    ) -> list[PartialStatistics]:
        slots: list[Optional[PartialStatistics]] = [None] * len(ranges)

        with ProcessPoolExecutor(
            max_workers=len(ranges),
            mp_context=mp.get_context("spawn"),
        ) as ex:
            futs = []
            for k, (rg, ss) in enumerate(zip(ranges, seed_seqs)):
                f = ex.submit(worker_run_range, params, rg, ss, batch_size)
                f.slot = k  # type: ignore[attr-defined]
                futs.append(f)
            try:
                for f in as_completed(futs):
                    if f.exception() is None:
                        slots[f.slot] = f.result()  # type: ignore[attr-defined]
            except KeyboardInterrupt:  # pragma: no cover
                for f in futs:
                    f.cancel()
                raise
            return _collect(futs, slots)
