r"""
Sequential execution backend.

Runs every trial range on the calling thread, one after another, with the
same partitioning and per-range seeding as the parallel backends.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ..core import PartialStatistics, SimulationParameters, TrialRange
from .base import worker_run_range

__all__ = ["SequentialBackend"]


class SequentialBackend:
    r"""
    Sequential (single-threaded) execution backend.

    Suitable for small runs or debugging.

    Examples
    --------
    >>> backend = SequentialBackend()
    >>> partials = backend.run(params, ranges, seed_seqs, batch_size=4096)  # doctest: +SKIP
    """

    def run(
        self,
        params: SimulationParameters,
        ranges: Sequence[TrialRange],
        seed_seqs: Sequence[np.random.SeedSequence],
        batch_size: int,
    ) -> list[PartialStatistics]:
        return [worker_run_range(params, rg, ss, batch_size) for rg, ss in zip(ranges, seed_seqs)]
