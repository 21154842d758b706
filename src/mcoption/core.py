r"""

mcoption.core
=============

Value types shared by every stage of the pricing engine.

This module provides:

* :class:`~mcoption.core.SimulationParameters` – immutable pricing inputs.
* :class:`~mcoption.core.TrialRange` – half-open block of trial indices owned by one worker.
* :class:`~mcoption.core.PartialStatistics` – the compact ``(sum, sum_squares, count)``
  summary a worker publishes.
* :class:`~mcoption.core.PricingResult` – discounted price and confidence bounds.
* :class:`~mcoption.core.ValidationError` and :class:`~mcoption.core.AggregationError`.

Partial statistics
------------------

Workers never publish raw payoffs. Each one folds its payoffs :math:`X_i` into

.. math::

   \Big(\sum_i X_i,\; \sum_i X_i^2,\; n\Big)

and these triples combine by component-wise addition, so the reduction is
associative and commutative.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from numbers import Integral, Real
from typing import Any, Mapping

import numpy as np

__all__ = [
    "OptionKind",
    "SimulationParameters",
    "TrialRange",
    "PartialStatistics",
    "PricingResult",
    "ValidationError",
    "AggregationError",
]


class ValidationError(ValueError):
    """Raised when pricing inputs or engine settings are out of range."""


class AggregationError(ArithmeticError):
    """Raised when partial statistics cannot be reduced (e.g. zero total count)."""


class OptionKind(str, Enum):
    r"""
    Payoff family of a European option.

    Attributes
    ----------
    call : str
        :math:`\max(S_T - K, 0)`.
    put : str
        :math:`\max(K - S_T, 0)`.
    """

    call = "call"
    put = "put"


def _is_real(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _is_int(value: Any) -> bool:
    return isinstance(value, Integral) and not isinstance(value, bool)


def _integral_count(value: Any) -> Any:
    # JSON numbers such as 1e6 decode as float
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


@dataclass(frozen=True)
class SimulationParameters:
    r"""
    Inputs for one Monte Carlo pricing run.

    Attributes
    ----------
    S0 : float
        Spot price :math:`S_0 > 0`.
    K : float
        Strike :math:`K > 0`.
    r : float
        Continuously compounded risk-free rate (any finite real).
    sigma : float
        Volatility :math:`\sigma > 0`.
    T : float
        Time to maturity in years, :math:`T > 0`.
    kind : OptionKind, default ``"call"``
        Payoff family.
    n_trials : int, default ``1_000_000``
        Number of simulated terminal prices.
    n_workers : int, default ``0``
        Requested worker count; ``0`` means use the available hardware parallelism.

    Notes
    -----
    Construction does not validate. :class:`~mcoption.engine.EuropeanOptionEngine`
    calls :meth:`validate` once, before any worker is created.

    Examples
    --------
    >>> params = SimulationParameters(S0=100.0, K=100.0, r=0.05, sigma=0.2, T=1.0)
    >>> params.is_call
    True
    """

    S0: float
    K: float
    r: float
    sigma: float
    T: float
    kind: OptionKind = OptionKind.call
    n_trials: int = 1_000_000
    n_workers: int = 0

    @property
    def is_call(self) -> bool:
        return OptionKind(self.kind) is OptionKind.call

    def validate(self) -> None:
        r"""
        Check every field and raise on the first violation.

        Raises
        ------
        ValidationError
            If ``S0``, ``K``, ``sigma`` or ``T`` is not a strictly positive finite number,
            ``r`` is not finite, ``kind`` is unknown, ``n_trials`` is not a positive
            integer, or ``n_workers`` is negative.
        """
        for name in ("S0", "K", "sigma", "T"):
            value = getattr(self, name)
            if not _is_real(value) or not math.isfinite(value) or value <= 0:
                raise ValidationError(f"{name} must be a positive finite number, got {value!r}")
        if not _is_real(self.r) or not math.isfinite(self.r):
            raise ValidationError(f"r must be a finite number, got {self.r!r}")
        try:
            OptionKind(self.kind)
        except ValueError:
            raise ValidationError(f"kind must be 'call' or 'put', got {self.kind!r}") from None
        if not _is_int(self.n_trials) or self.n_trials <= 0:
            raise ValidationError(f"n_trials must be a positive integer, got {self.n_trials!r}")
        if not _is_int(self.n_workers) or self.n_workers < 0:
            raise ValidationError(f"n_workers must be a non-negative integer, got {self.n_workers!r}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SimulationParameters":
        r"""
        Build parameters from the external JSON-style record.

        Parameters
        ----------
        data : mapping
            Keys ``S0``, ``K``, ``r``, ``sigma``, ``T``, ``isCall`` and ``numTrials``;
            optional ``workerCount`` (or ``threads``).

        Returns
        -------
        SimulationParameters
            Unvalidated parameters.

        Raises
        ------
        ValidationError
            If a required key is missing or ``isCall`` is not a boolean.
        """
        required = ("S0", "K", "r", "sigma", "T", "isCall", "numTrials")
        missing = [key for key in required if key not in data]
        if missing:
            raise ValidationError(f"Missing required parameters: {', '.join(missing)}")
        if not isinstance(data["isCall"], bool):
            raise ValidationError(f"isCall must be a boolean, got {data['isCall']!r}")
        n_workers = data.get("workerCount", data.get("threads", 0))
        return cls(
            S0=data["S0"],
            K=data["K"],
            r=data["r"],
            sigma=data["sigma"],
            T=data["T"],
            kind=OptionKind.call if data["isCall"] else OptionKind.put,
            n_trials=_integral_count(data["numTrials"]),
            n_workers=_integral_count(n_workers),
        )


@dataclass(frozen=True)
class TrialRange:
    """Half-open trial interval ``[start, end)`` assigned to exactly one worker."""

    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class PartialStatistics:
    r"""
    Summary published by one worker.

    Attributes
    ----------
    sum : float
        :math:`\sum_i X_i` over the worker's payoffs.
    sum_squares : float
        :math:`\sum_i X_i^2`.
    count : int
        Number of trials folded in.
    """

    sum: float
    sum_squares: float
    count: int

    @classmethod
    def empty(cls) -> "PartialStatistics":
        """Identity element of :meth:`merge`."""
        return cls(0.0, 0.0, 0)

    @classmethod
    def from_payoffs(cls, payoffs: np.ndarray) -> "PartialStatistics":
        """Summarize an explicit payoff sample."""
        arr = np.asarray(payoffs, dtype=float).ravel()
        return cls(float(np.sum(arr)), float(np.dot(arr, arr)), int(arr.size))

    def merge(self, other: "PartialStatistics") -> "PartialStatistics":
        return PartialStatistics(
            self.sum + other.sum,
            self.sum_squares + other.sum_squares,
            self.count + other.count,
        )

    __add__ = merge


@dataclass(frozen=True)
class PricingResult:
    r"""
    Outcome of one engine invocation.

    Attributes
    ----------
    option_price : float
        Discounted mean payoff :math:`e^{-rT}\bar X`.
    lower, upper : float
        Confidence bounds :math:`\text{price} \mp z\,SE\,e^{-rT}`.
    workers_used : int
        Number of workers the trials were split across.
    std_error : float
        Undiscounted standard error of the mean payoff.
    variance : float
        Payoff variance (population convention, never negative).
    n_trials : int
        Total trials aggregated.
    confidence : float
        Confidence level of ``[lower, upper]``.
    """

    option_price: float
    lower: float
    upper: float
    workers_used: int
    std_error: float = float("nan")
    variance: float = float("nan")
    n_trials: int = 0
    confidence: float = 0.95

    @property
    def width(self) -> float:
        return self.upper - self.lower

    @property
    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (self.option_price, self.lower, self.upper))

    def contains(self, value: float) -> bool:
        """Return ``True`` when ``value`` lies inside ``[lower, upper]``."""
        return self.lower <= value <= self.upper

    def to_dict(self) -> dict[str, Any]:
        """External record ``{optionPrice, confidence: {lower, upper}, workersUsed}``."""
        return {
            "optionPrice": self.option_price,
            "confidence": {"lower": self.lower, "upper": self.upper},
            "workersUsed": self.workers_used,
        }
