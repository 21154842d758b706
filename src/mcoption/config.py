r"""
mcoption.config
===============

Engine configuration.

:class:`EngineConfig` collects the tuning knobs that are not part of the
pricing problem itself: which execution backend runs the workers, the size of
each worker's variate buffer, the confidence level of the reported interval,
and an optional root seed.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from .core import ValidationError

__all__ = ["EngineConfig", "DEFAULT_BATCH_SIZE", "FALLBACK_WORKERS", "VALID_BACKENDS"]

DEFAULT_BATCH_SIZE = 4096
FALLBACK_WORKERS = 4
VALID_BACKENDS = ("auto", "sequential", "thread", "process")


@dataclass(frozen=True)
class EngineConfig:
    r"""
    Settings for :class:`~mcoption.engine.EuropeanOptionEngine`.

    Attributes
    ----------
    backend : {"auto", "sequential", "thread", "process"}, default ``"auto"``
        Execution backend. ``"auto"`` resolves to threads on POSIX platforms and
        processes on Windows.
    batch_size : int, default ``4096``
        Capacity of each worker's standard-normal buffer.
    confidence : float, default ``0.95``
        Confidence level of ``[lower, upper]``.
    seed : int, optional
        Root seed for :class:`numpy.random.SeedSequence`. ``None`` draws entropy
        from the OS, so runs are not reproducible.
    fallback_workers : int, default ``4``
        Worker count used when auto-detection cannot read the CPU count.

    Examples
    --------
    >>> cfg = EngineConfig(backend="thread")
    >>> cfg.with_overrides(seed=42).seed
    42
    """

    backend: str = "auto"
    batch_size: int = DEFAULT_BATCH_SIZE
    confidence: float = 0.95
    seed: Optional[int] = None
    fallback_workers: int = FALLBACK_WORKERS

    def __post_init__(self) -> None:
        if self.backend not in VALID_BACKENDS:
            raise ValidationError(f"backend must be one of {VALID_BACKENDS}, got '{self.backend}'")
        if self.batch_size <= 0:
            raise ValidationError("batch_size must be positive")
        if not 0.0 < self.confidence < 1.0:
            raise ValidationError("confidence must be in the interval (0, 1)")
        if self.fallback_workers <= 0:
            raise ValidationError("fallback_workers must be positive")
        if self.seed is not None and self.seed < 0:
            raise ValidationError("seed must be non-negative")

    def with_overrides(self, **changes) -> "EngineConfig":
        """Return a copy with selected fields replaced."""
        return replace(self, **changes)
