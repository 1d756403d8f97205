"""Point and interval estimators over one-dimensional samples.

Interval conventions:
- qi: equal-tailed interval [q(alpha/2), q(1 - alpha/2)] with alpha = 1 - prob,
  using linear interpolation between order statistics (numpy default).
- hdi: ArviZ single-mode HDI, the narrowest window over the sorted samples
  spanning floor(prob * n) positions. Ties resolve to the leftmost window.

The HDI returned is always one contiguous interval. For multimodal samples
the true highest-density region can be a union of intervals; this module
does not attempt to find it.

Usage:
    >>> qi(np.array([1.0, 2.0, 3.0]), prob=0.5)
    (1.5, 2.5)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import arviz as az
import numpy as np
from scipy.stats import gaussian_kde

__all__ = [
    "INTERVALS",
    "POINTS",
    "discrete_mode",
    "hdi",
    "is_discrete",
    "kde_mode",
    "mean",
    "median",
    "qi",
]


def _validate_prob(prob: float) -> None:
    if not 0 < prob <= 1:
        raise ValueError(f"Probability level must be in (0, 1], got {prob}")


def _as_samples(x: Any) -> np.ndarray:
    samples = np.asarray(x)
    if samples.ndim != 1:
        samples = samples.ravel()
    if samples.size == 0:
        raise ValueError("Cannot summarize an empty sample")
    return samples


def mean(x: np.ndarray) -> float:
    return float(np.mean(_as_samples(x)))


def median(x: np.ndarray) -> float:
    """50th percentile with the same interpolation as qi()."""
    return float(np.quantile(_as_samples(x), 0.5))


def qi(x: np.ndarray, prob: float = 0.95) -> tuple[float, float]:
    """Equal-tailed (quantile) interval.

    Parameters
    ----------
    x : array-like
        Samples.
    prob : float, default 0.95
        Probability mass inside the interval.

    Returns
    -------
    tuple[float, float]
        Lower and upper bounds.
    """
    _validate_prob(prob)
    alpha = 1 - prob
    lower, upper = np.quantile(_as_samples(x), [alpha / 2, 1 - alpha / 2])
    return float(lower), float(upper)


def hdi(x: np.ndarray, prob: float = 0.95) -> tuple[float, float]:
    """Highest-density interval via ``az.hdi``.

    Parameters
    ----------
    x : array-like
        Samples.
    prob : float, default 0.95
        Probability mass inside the interval.

    Returns
    -------
    tuple[float, float]
        Lower and upper bounds, both sample values, so the interval always
        lies within [min(x), max(x)].
    """
    _validate_prob(prob)
    samples = _as_samples(x).astype(float)
    # ArviZ needs at least one candidate window; full mass is the range
    if int(np.floor(prob * samples.size)) >= samples.size:
        return float(samples.min()), float(samples.max())
    lower, upper = az.hdi(samples, hdi_prob=prob)
    return float(lower), float(upper)


def kde_mode(x: np.ndarray, bw_method: str | float = "scott", grid_size: int = 512) -> float:
    """Location of the kernel density maximum over the sample range.

    Falls back to the single distinct value when the sample has fewer than
    two points or no spread, where a Gaussian KDE is undefined.
    """
    samples = _as_samples(x).astype(float)
    lo, hi = float(samples.min()), float(samples.max())
    if samples.size < 2 or lo == hi:
        return lo
    density = gaussian_kde(samples, bw_method=bw_method)
    grid = np.linspace(lo, hi, grid_size)
    return float(grid[int(np.argmax(density(grid)))])


def discrete_mode(x: Any) -> Any:
    """Most frequent value; ties go to the smallest value in sort order."""
    values, counts = np.unique(_as_samples(x), return_counts=True)
    top = values[int(np.argmax(counts))]
    return top.item() if isinstance(top, np.generic) else top


def is_discrete(x: Any) -> bool:
    """True for integer, boolean and non-numeric samples."""
    dtype = np.asarray(x).dtype
    return not np.issubdtype(dtype, np.floating)


POINTS: dict[str, Callable[..., Any]] = {
    "mean": mean,
    "median": median,
    "mode": kde_mode,
}

INTERVALS: dict[str, Callable[..., tuple[float, float]]] = {
    "qi": qi,
    "hdi": hdi,
}
