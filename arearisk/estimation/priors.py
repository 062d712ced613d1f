"""Derivation of the global Beta prior from aggregate incidence."""

from __future__ import annotations

import logging
from typing import Iterable

import numpy as np

from ..errors import ConfigError
from .records import PriorHyperparameters, SanitizedObservation

logger = logging.getLogger(__name__)


def derive_prior(
    global_incidence_rate: float,
    global_exposure_total: float,
    reference_exposure_scale: float,
) -> PriorHyperparameters:
    """Build Beta hyperparameters from an aggregate rate, rescaled to one area's worth of evidence.

    The aggregate population is first turned into pseudo-counts of events and
    non-events, then shrunk by `reference_exposure_scale / global_exposure_total`
    so the prior weighs as much as a typical area rather than the whole
    aggregate population. The prior mean stays equal to `global_incidence_rate`;
    only the effective sample size changes (it becomes `reference_exposure_scale`).

    Args:
        global_incidence_rate: Events per unit exposure at the aggregate level.
        global_exposure_total: Total exposure behind the aggregate rate.
        reference_exposure_scale: Representative area exposure, e.g. the median.

    Raises:
        ConfigError: If any input cannot yield a proper prior.
    """
    _validate_aggregate(global_incidence_rate, global_exposure_total, reference_exposure_scale)

    extrapolated_events = global_incidence_rate * global_exposure_total
    extrapolated_non_events = global_exposure_total - extrapolated_events
    scaling_factor = reference_exposure_scale / global_exposure_total

    prior = PriorHyperparameters(
        alpha0=extrapolated_events * scaling_factor,
        beta0=extrapolated_non_events * scaling_factor,
    )
    logger.debug(
        "Derived prior alpha0=%.6g beta0=%.6g (scaling factor %.6g)",
        prior.alpha0,
        prior.beta0,
        scaling_factor,
    )
    return prior


def prior_from_moments(mean: float, stddev: float) -> PriorHyperparameters:
    """Literal mean/stddev parameterization: alpha0 = mean/stddev, beta0 = (1 - mean)/stddev.

    This is not a moment match. With `mean == stddev` it always yields
    alpha0 == 1 whatever the mean, so prefer `derive_prior`.
    """
    if not (np.isfinite(mean) and np.isfinite(stddev)):
        raise ConfigError("Prior mean and stddev must be finite.")
    if not 0.0 < mean < 1.0:
        raise ConfigError(f"Prior mean must fall within (0, 1), got {mean}.")
    if stddev <= 0:
        raise ConfigError(f"Prior stddev must be strictly positive, got {stddev}.")
    return PriorHyperparameters(alpha0=mean / stddev, beta0=(1.0 - mean) / stddev)


def fit_prior_from_areas(observations: Iterable[SanitizedObservation]) -> PriorHyperparameters:
    """Method-of-moments Beta fit to the observed area rates.

    Only areas with positive exposure contribute. Uses
    var = mu (1 - mu) / (alpha0 + beta0 + 1).

    Raises:
        ConfigError: When the rates are too few or too degenerate for a Beta fit.
    """
    rates = np.asarray(
        [obs.event_count / obs.exposure_count for obs in observations if not obs.zero_exposure],
        dtype=float,
    )
    if rates.size < 2:
        raise ConfigError("Method-of-moments prior needs at least two areas with positive exposure.")

    mu = float(np.mean(rates))
    var = float(np.var(rates, ddof=1))
    if mu <= 0.0 or mu >= 1.0:
        raise ConfigError(f"Mean area rate {mu} lies on the boundary; Beta prior is undefined.")
    if var <= 0.0:
        raise ConfigError("Area rates have zero variance; prior strength cannot be estimated.")
    if var >= mu * (1.0 - mu):
        raise ConfigError(f"Area rate variance {var:.6g} exceeds the Beta maximum {mu * (1.0 - mu):.6g}.")

    common = mu * (1.0 - mu) / var - 1.0
    return PriorHyperparameters(alpha0=mu * common, beta0=(1.0 - mu) * common)


def median_reference_exposure(observations: Iterable[SanitizedObservation]) -> float:
    """Median exposure over areas with a positive denominator."""
    exposures = [obs.exposure_count for obs in observations if not obs.zero_exposure]
    if not exposures:
        raise ConfigError("Cannot derive a reference exposure scale: no area has positive exposure.")
    return float(np.median(np.asarray(exposures, dtype=float)))


def _validate_aggregate(rate: float, total: float, scale: float) -> None:
    if not all(np.isfinite(value) for value in (rate, total, scale)):
        raise ConfigError("Aggregate reference values must be finite.")
    if not 0.0 < rate < 1.0:
        raise ConfigError(f"global_incidence_rate must fall within (0, 1), got {rate}.")
    if total <= 0:
        raise ConfigError(f"global_exposure_total must be strictly positive, got {total}.")
    if scale <= 0:
        raise ConfigError(f"reference_exposure_scale must be strictly positive, got {scale}.")


__all__ = [
    "derive_prior",
    "fit_prior_from_areas",
    "median_reference_exposure",
    "prior_from_moments",
]
