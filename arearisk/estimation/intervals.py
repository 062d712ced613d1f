"""Quantile-based credible intervals for Beta posteriors."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence, Tuple

import numpy as np
from scipy import stats as sp_stats

from ..errors import ConfigError, NumericalError
from .records import PosteriorEstimate

Tails = Tuple[float, float]

DEFAULT_TAILS: Tails = (0.025, 0.975)
QUANTILE_RTOL = 1e-6
QUANTILE_ATOL = 1e-12


def validate_tails(tails: Sequence[float]) -> Tails:
    """Return `tails` as a (low, high) pair or raise ConfigError."""
    if isinstance(tails, (str, bytes)):
        raise ConfigError(f"Tail probabilities must be a (low, high) pair, got {tails!r}.")
    try:
        count = len(tails)
    except TypeError as exc:
        raise ConfigError(f"Tail probabilities must be a (low, high) pair, got {tails!r}.") from exc
    if count != 2:
        raise ConfigError(f"Expected exactly two tail probabilities, got {count}.")
    try:
        p_low, p_high = float(tails[0]), float(tails[1])
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Tail probabilities must be numeric: {exc}") from exc
    if not (np.isfinite(p_low) and np.isfinite(p_high)):
        raise ConfigError("Tail probabilities must be finite.")
    if not 0.0 < p_low < p_high < 1.0:
        raise ConfigError(f"Tail probabilities must satisfy 0 < low < high < 1, got ({p_low}, {p_high}).")
    return p_low, p_high


def credible_interval(alpha: float, beta: float, tails: Tails = DEFAULT_TAILS) -> Tails:
    """Inverse-CDF bounds of Beta(alpha, beta) at the requested tail probabilities.

    The solver output is checked by pushing it back through the CDF; anything
    non-finite, outside [0, 1] or not reproducing the tail probability counts
    as non-convergence.

    Raises:
        NumericalError: If either quantile cannot be resolved.
    """
    probs = np.asarray(tails, dtype=float)
    bounds = np.asarray(sp_stats.beta.ppf(probs, alpha, beta), dtype=float)

    if not np.all(np.isfinite(bounds)):
        raise NumericalError(f"Beta({alpha:.6g}, {beta:.6g}) quantile solver returned a non-finite value.")
    if np.any(bounds < 0.0) or np.any(bounds > 1.0):
        raise NumericalError(f"Beta({alpha:.6g}, {beta:.6g}) quantiles fall outside [0, 1].")

    achieved = np.asarray(sp_stats.beta.cdf(bounds, alpha, beta), dtype=float)
    if not np.allclose(achieved, probs, rtol=QUANTILE_RTOL, atol=QUANTILE_ATOL):
        raise NumericalError(
            f"Beta({alpha:.6g}, {beta:.6g}) quantile solver did not converge "
            f"(requested {probs.tolist()}, achieved {achieved.tolist()})."
        )

    lower, upper = float(bounds[0]), float(bounds[1])
    if lower > upper:
        raise NumericalError(f"Beta({alpha:.6g}, {beta:.6g}) quantiles are out of order.")
    return lower, upper


def exceedance_probability(alpha: float, beta: float, threshold: float) -> float:
    """Posterior probability that the area risk exceeds `threshold`."""
    return float(sp_stats.beta.sf(threshold, alpha, beta))


def attach_interval(
    estimate: PosteriorEstimate,
    tails: Tails = DEFAULT_TAILS,
    threshold: Optional[float] = None,
) -> PosteriorEstimate:
    """Return a copy of `estimate` carrying interval bounds.

    Bounds that do not bracket the posterior mean (extreme skew with tiny
    alpha) are treated as a failed interval rather than reported.

    Raises:
        NumericalError: Tagged with the estimate's area id.
    """
    try:
        lower, upper = credible_interval(estimate.alpha, estimate.beta, tails)
    except NumericalError as exc:
        raise NumericalError(str(exc), area_id=estimate.area_id) from exc

    if not lower <= estimate.mean <= upper:
        raise NumericalError(
            f"Interval [{lower:.6g}, {upper:.6g}] does not bracket the posterior mean {estimate.mean:.6g}.",
            area_id=estimate.area_id,
        )

    exceedance = None
    if threshold is not None:
        exceedance = exceedance_probability(estimate.alpha, estimate.beta, threshold)
    return replace(estimate, lower_bound=lower, upper_bound=upper, exceedance_probability=exceedance)


__all__ = [
    "DEFAULT_TAILS",
    "Tails",
    "attach_interval",
    "credible_interval",
    "exceedance_probability",
    "validate_tails",
]
