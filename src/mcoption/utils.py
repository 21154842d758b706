r"""
Critical values for normal-approximation confidence intervals.
"""

from __future__ import annotations

from scipy.stats import norm

__all__ = ["z_crit"]

# Conventional two-sided z values quoted to the precision used in practice
_Z_TABLE = {
    0.90: 1.645,
    0.95: 1.96,
    0.99: 2.576,
}


def z_crit(confidence: float) -> float:
    r"""
    Two-sided normal critical value :math:`z_{1-\alpha/2}`.

    Parameters
    ----------
    confidence : float
        Confidence level in :math:`(0, 1)`.

    Returns
    -------
    float
        The tabulated value for 90/95/99% (``1.645``, ``1.96``, ``2.576``),
        otherwise :func:`scipy.stats.norm.ppf` at :math:`1 - \alpha/2`.

    Examples
    --------
    >>> z_crit(0.95)
    1.96
    """
    if not 0.0 < confidence < 1.0:
        raise ValueError("confidence must be in (0,1)")
    for level, z in _Z_TABLE.items():
        if abs(confidence - level) < 1e-12:
            return z
    alpha = 1.0 - confidence
    return float(norm.ppf(1.0 - alpha / 2.0))
