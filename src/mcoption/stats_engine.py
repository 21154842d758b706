r"""
mcoption.stats_engine
=====================
Reduction of per-worker summaries into a priced confidence interval.

Given worker summaries :math:`(S_k, Q_k, n_k)` with :math:`S_k = \sum X_i`,
:math:`Q_k = \sum X_i^2`, the totals :math:`S, Q, n` give

.. math::
   \bar X = \frac{S}{n}, \qquad
   \hat\sigma^2 = \frac{Q}{n} - \bar X^2, \qquad
   SE = \sqrt{\hat\sigma^2 / n},

and the discounted interval

.. math::
   e^{-rT}\bar X \;\pm\; z_{1-\alpha/2}\, SE\, e^{-rT}.

See Also
--------
mcoption.utils.z_crit
    Critical value for the requested confidence level.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable

from .core import AggregationError, PartialStatistics, PricingResult
from .utils import z_crit

logger = logging.getLogger(__name__)

__all__ = ["combine", "payoff_variance", "aggregate"]


def _exact_sum(values: list[float]) -> float:
    # fsum is correctly rounded, hence independent of input order
    try:
        return math.fsum(values)
    except OverflowError:
        # All terms are non-negative payoff sums, so the true total is +inf
        return float("inf")


def _discount_factor(r: float, T: float) -> float:
    try:
        return math.exp(-r * T)
    except OverflowError:
        # -r*T is large and positive
        return float("inf")


def combine(partials: Iterable[PartialStatistics]) -> PartialStatistics:
    r"""
    Reduce worker summaries into one.

    Parameters
    ----------
    partials : iterable of PartialStatistics

    Returns
    -------
    PartialStatistics
        Component-wise totals. Float components use :func:`math.fsum`, so any
        permutation of ``partials`` gives a bit-identical total.
    """
    items = list(partials)
    return PartialStatistics(
        _exact_sum([p.sum for p in items]),
        _exact_sum([p.sum_squares for p in items]),
        sum(p.count for p in items),
    )


def payoff_variance(total: PartialStatistics) -> float:
    r"""
    Population variance :math:`Q/n - (S/n)^2` of the payoffs.

    Cancellation can make the identity slightly negative when the true variance
    is near zero; such values are clamped to ``0.0``. NaN passes through.

    Raises
    ------
    AggregationError
        If ``total.count`` is zero.
    """
    if total.count == 0:
        raise AggregationError("cannot aggregate zero trials")
    mean = total.sum / total.count
    variance = total.sum_squares / total.count - mean * mean
    if variance < 0.0:
        variance = 0.0
    return variance


def aggregate(
    partials: Iterable[PartialStatistics],
    r: float,
    T: float,
    confidence: float = 0.95,
    workers_used: int | None = None,
) -> PricingResult:
    r"""
    Turn worker summaries into a discounted price and confidence interval.

    Parameters
    ----------
    partials : iterable of PartialStatistics
        One summary per worker, in any order.
    r : float
        Risk-free rate used for discounting.
    T : float
        Maturity in years.
    confidence : float, default ``0.95``
        Interval confidence level; ``0.95`` uses :math:`z = 1.96`.
    workers_used : int, optional
        Reported worker count. Defaults to the number of summaries.

    Returns
    -------
    PricingResult

    Raises
    ------
    AggregationError
        If the summaries contain zero trials in total.

    Notes
    -----
    Non-finite sums (e.g. from ``exp`` overflow at extreme :math:`\sigma^2 T`) and an
    infinite discount factor (large negative :math:`rT`) are carried into the result
    rather than dropped, and a warning is logged.
    """
    items = list(partials)
    total = combine(items)
    variance = payoff_variance(total)
    mean = total.sum / total.count
    std_error = math.sqrt(variance / total.count)
    discount = _discount_factor(r, T)
    price = mean * discount
    margin = z_crit(confidence) * std_error * discount

    result = PricingResult(
        option_price=price,
        lower=price - margin,
        upper=price + margin,
        workers_used=len(items) if workers_used is None else workers_used,
        std_error=std_error,
        variance=variance,
        n_trials=total.count,
        confidence=confidence,
    )
    if not result.is_finite:
        logger.warning(
            "Non-finite price estimate (price=%s, variance=%s); inputs are likely extreme.",
            price,
            variance,
        )
    return result
