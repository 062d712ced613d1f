"""Batch orchestration: sanitize, derive the prior once, then estimate every area."""

from __future__ import annotations

import logging
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, replace
from functools import partial
from typing import Iterable, List, Optional, Sequence, Tuple

from ..config import ReferenceConfig
from ..errors import DataError, NumericalError
from ..estimation.intervals import DEFAULT_TAILS, Tails, attach_interval, exceedance_probability, validate_tails
from ..estimation.posterior import update_area
from ..estimation.priors import derive_prior, fit_prior_from_areas, median_reference_exposure
from ..estimation.records import (
    AreaObservation,
    PosteriorEstimate,
    PriorHyperparameters,
    RejectedArea,
    SanitizedObservation,
)
from ..estimation.sanitize import sanitize_observation

logger = logging.getLogger(__name__)

REJECTED = "rejected"
DEGRADED = "degraded"


@dataclass(frozen=True)
class AreaOutcome:
    """Result of evaluating one area; `failure` is set when the interval was dropped."""

    estimate: PosteriorEstimate
    failure: Optional[str] = None


@dataclass(frozen=True)
class EstimationRun:
    """Everything a completed batch produced, in input order."""

    prior: PriorHyperparameters
    tails: Tails
    estimates: Tuple[PosteriorEstimate, ...]
    rejected: Tuple[RejectedArea, ...]
    degraded: Tuple[RejectedArea, ...]

    @property
    def manifest(self) -> Tuple[RejectedArea, ...]:
        """Rejected rows followed by degraded areas."""
        return self.rejected + self.degraded


def sanitize_batch(
    observations: Iterable[AreaObservation],
) -> Tuple[List[SanitizedObservation], List[RejectedArea]]:
    """Sanitize every row, collecting invalid or duplicate areas instead of raising."""
    accepted: List[SanitizedObservation] = []
    rejected: List[RejectedArea] = []
    seen: set = set()

    for observation in observations:
        try:
            sanitized = sanitize_observation(observation)
        except DataError as exc:
            logger.warning("Rejected area %r: %s", observation.area_id, exc)
            rejected.append(RejectedArea(area_id=observation.area_id, status=REJECTED, reason=str(exc)))
            continue

        if sanitized.area_id in seen:
            reason = f"Duplicate area id {sanitized.area_id!r}; only the first valid row is used."
            logger.warning(reason)
            rejected.append(RejectedArea(area_id=sanitized.area_id, status=REJECTED, reason=reason))
            continue
        seen.add(sanitized.area_id)
        accepted.append(sanitized)
    return accepted, rejected


def estimate_area(
    observation: SanitizedObservation,
    prior: PriorHyperparameters,
    tails: Tails = DEFAULT_TAILS,
) -> AreaOutcome:
    """Pure per-area worker. Numerical failures come back as a degraded outcome."""
    estimate = update_area(observation, prior)
    try:
        return AreaOutcome(estimate=attach_interval(estimate, tails, threshold=prior.mean))
    except NumericalError as exc:
        exceedance = exceedance_probability(estimate.alpha, estimate.beta, prior.mean)
        return AreaOutcome(estimate=replace(estimate, exceedance_probability=exceedance), failure=str(exc))


def estimate_areas(
    observations: Sequence[SanitizedObservation],
    prior: PriorHyperparameters,
    tails: Sequence[float] = DEFAULT_TAILS,
    max_workers: Optional[int] = None,
    rejected: Sequence[RejectedArea] = (),
) -> EstimationRun:
    """Estimate every sanitized area against a fixed prior.

    Args:
        observations: Output of `sanitize_batch`.
        prior: Shared, read-only hyperparameters.
        tails: Credible interval tail probabilities.
        max_workers: Fan the areas out over a process pool when greater than one.
        rejected: Rows already rejected upstream, carried into the manifest.
    """
    tail_pair = validate_tails(tails)
    worker = partial(estimate_area, prior=prior, tails=tail_pair)

    if max_workers is not None and max_workers > 1 and len(observations) > 1:
        chunksize = max(1, len(observations) // (max_workers * 4))
        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            outcomes = list(executor.map(worker, observations, chunksize=chunksize))
    else:
        outcomes = [worker(observation) for observation in observations]

    estimates: List[PosteriorEstimate] = []
    degraded: List[RejectedArea] = []
    for outcome in outcomes:
        estimates.append(outcome.estimate)
        if outcome.failure is not None:
            logger.warning("Interval unavailable for area %r: %s", outcome.estimate.area_id, outcome.failure)
            degraded.append(RejectedArea(area_id=outcome.estimate.area_id, status=DEGRADED, reason=outcome.failure))

    logger.info(
        "Estimated %d areas (%d rejected, %d without interval).",
        len(estimates),
        len(rejected),
        len(degraded),
    )
    return EstimationRun(
        prior=prior,
        tails=tail_pair,
        estimates=tuple(estimates),
        rejected=tuple(rejected),
        degraded=tuple(degraded),
    )


def run_estimation(
    observations: Iterable[AreaObservation],
    config: ReferenceConfig,
    max_workers: Optional[int] = None,
) -> EstimationRun:
    """Full batch: sanitize rows, derive the prior from `config`, estimate all valid areas.

    Without a global incidence rate in `config` the prior is fitted to the
    valid area rates by method of moments. An explicit reference scale then
    replaces the fitted strength while keeping the fitted mean.

    Raises:
        ConfigError: If the aggregate values (or the area rates, for a fitted
            prior) cannot produce a prior. Nothing is estimated in that case.
    """
    config.validate()
    sanitized, rejected = sanitize_batch(observations)

    if config.fits_prior_from_areas:
        prior = _fitted_prior(sanitized, config.reference_exposure_scale)
    else:
        reference_scale = config.reference_exposure_scale
        if reference_scale is None:
            reference_scale = median_reference_exposure(sanitized)
            logger.info("Using median area exposure %.6g as the reference scale.", reference_scale)
        prior = derive_prior(config.global_incidence_rate, config.global_exposure_total, reference_scale)
    return estimate_areas(sanitized, prior, config.tails, max_workers=max_workers, rejected=rejected)


def _fitted_prior(
    sanitized: Sequence[SanitizedObservation],
    reference_scale: Optional[float],
) -> PriorHyperparameters:
    fitted = fit_prior_from_areas(sanitized)
    logger.info(
        "Fitted prior to %d areas: mean %.6g, equivalent sample size %.6g.",
        len(sanitized),
        fitted.mean,
        fitted.effective_sample_size,
    )
    if reference_scale is None:
        return fitted
    return PriorHyperparameters(alpha0=fitted.mean * reference_scale, beta0=(1.0 - fitted.mean) * reference_scale)


__all__ = [
    "AreaOutcome",
    "DEGRADED",
    "EstimationRun",
    "REJECTED",
    "estimate_area",
    "estimate_areas",
    "run_estimation",
    "sanitize_batch",
]
