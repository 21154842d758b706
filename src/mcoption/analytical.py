r"""
Closed-form Black–Scholes prices, used to check Monte Carlo estimates.

.. math::
   d_1 = \frac{\ln(S_0/K) + (r + \tfrac{1}{2}\sigma^2)T}{\sigma\sqrt{T}}, \qquad
   d_2 = d_1 - \sigma\sqrt{T},

.. math::
   C = S_0 N(d_1) - K e^{-rT} N(d_2), \qquad
   P = K e^{-rT} N(-d_2) - S_0 N(-d_1).
"""

from __future__ import annotations

import math

from scipy.stats import norm

from .core import SimulationParameters

__all__ = ["black_scholes_price"]


def black_scholes_price(params: SimulationParameters) -> float:
    """
    Exact European price for ``params`` (``n_trials`` and ``n_workers`` are ignored).

    Raises
    ------
    ValidationError
        If ``params`` is invalid.
    """
    params.validate()
    S0, K, r, sigma, T = params.S0, params.K, params.r, params.sigma, params.T
    vol = sigma * math.sqrt(T)
    d1 = (math.log(S0 / K) + (r + 0.5 * sigma * sigma) * T) / vol
    d2 = d1 - vol
    discount = math.exp(-r * T)
    if params.is_call:
        return float(S0 * norm.cdf(d1) - K * discount * norm.cdf(d2))
    return float(K * discount * norm.cdf(-d2) - S0 * norm.cdf(-d1))
