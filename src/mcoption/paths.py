r"""
Terminal-price sampling under risk-neutral Black–Scholes dynamics.

The solution of :math:`dS_t = r S_t\,dt + \sigma S_t\,dW_t` at maturity is

.. math::
   S_T = S_0 \exp\!\left((r - \tfrac{1}{2}\sigma^2)T + \sigma\sqrt{T}\,Z\right),
   \qquad Z \sim \mathcal{N}(0, 1),

so a European payoff needs one normal draw per trial and no path grid.
"""

from __future__ import annotations

import math

import numpy as np
from numpy.random import Generator

from .config import DEFAULT_BATCH_SIZE
from .core import SimulationParameters

__all__ = ["PathGenerator"]


class PathGenerator:
    r"""
    Batched generator of undiscounted European payoffs.

    Parameters
    ----------
    params : SimulationParameters
        Market and contract inputs. Only ``S0``, ``K``, ``r``, ``sigma``, ``T`` and
        ``kind`` are read.
    rng : numpy.random.Generator
        Worker-private generator. Never shared between workers.
    batch_size : int, default ``4096``
        Capacity of the variate buffer.

    Notes
    -----
    ``drift`` :math:`= (r - \tfrac{1}{2}\sigma^2)T` and ``vol`` :math:`= \sigma\sqrt{T}`
    are computed once here. The payoff is

    .. math::
       \Phi(S_T) = \max\big(s\,(S_T - K),\, 0\big), \qquad s = \begin{cases} +1 & \text{call} \\ -1 & \text{put} \end{cases}

    A single buffer of ``batch_size`` floats is filled with normals by
    :meth:`numpy.random.Generator.standard_normal` and transformed in place into
    payoffs, so the working set does not grow with the trial count.

    Examples
    --------
    >>> gen = PathGenerator(params, np.random.default_rng(0), batch_size=1024)  # doctest: +SKIP
    >>> gen.next_payoffs(1024).shape  # doctest: +SKIP
    (1024,)
    """

    def __init__(self, params: SimulationParameters, rng: Generator, batch_size: int = DEFAULT_BATCH_SIZE):
        self.rng = rng
        self.batch_size = int(batch_size)
        self.S0 = float(params.S0)
        self.K = float(params.K)
        self.drift = (params.r - 0.5 * params.sigma * params.sigma) * params.T
        self.vol = params.sigma * math.sqrt(params.T)
        self.sign = 1.0 if params.is_call else -1.0
        self._buffer = np.empty(self.batch_size, dtype=np.float64)

    def terminal_price(self, z: float) -> float:
        """Map one standard-normal draw to :math:`S_T`."""
        return self.S0 * math.exp(self.drift + self.vol * z)

    def payoff(self, st: float) -> float:
        """Payoff at terminal price ``st``."""
        return max(self.sign * (st - self.K), 0.0)

    def next_payoffs(self, n: int) -> np.ndarray:
        r"""
        Draw ``n`` fresh variates and return their payoffs.

        Parameters
        ----------
        n : int
            Number of trials, ``0 < n <= batch_size``.

        Returns
        -------
        numpy.ndarray
            A view into the internal buffer. It is overwritten by the next call,
            so fold it into running sums before asking for more.
        """
        if not 0 < n <= self.batch_size:
            raise ValueError(f"n must be in [1, {self.batch_size}], got {n}")
        buf = self._buffer[:n]
        self.rng.standard_normal(out=buf)
        # Overflow in exp gives inf and is left for the aggregate to report
        with np.errstate(over="ignore"):
            np.multiply(buf, self.vol, out=buf)
            buf += self.drift
            np.exp(buf, out=buf)
            buf *= self.S0
            buf -= self.K
            buf *= self.sign
        np.maximum(buf, 0.0, out=buf)
        return buf
