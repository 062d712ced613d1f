"""Conjugate Beta-Binomial update for a single area."""

from __future__ import annotations

from .records import PosteriorEstimate, PriorHyperparameters, SanitizedObservation


def update_area(observation: SanitizedObservation, prior: PriorHyperparameters) -> PosteriorEstimate:
    """Combine the shared prior with one area's counts.

    Zero-exposure areas receive the prior unchanged, so their mean equals
    `prior.mean` exactly. Any events reported against zero exposure
    are not added to `alpha`. Interval bounds are filled in later by
    `attach_interval`.
    """
    if observation.zero_exposure:
        alpha = prior.alpha0
        beta = prior.beta0
        raw_rate = None
    else:
        alpha = prior.alpha0 + observation.event_count
        beta = prior.beta0 + (observation.exposure_count - observation.event_count)
        raw_rate = observation.event_count / observation.exposure_count

    mean = alpha / (alpha + beta)
    # Weight given to the prior mean in the posterior mean.
    shrinkage = prior.effective_sample_size / (prior.effective_sample_size + observation.exposure_count)

    return PosteriorEstimate(
        area_id=observation.area_id,
        alpha=alpha,
        beta=beta,
        mean=mean,
        event_count=observation.event_count,
        exposure_count=observation.exposure_count,
        zero_exposure=observation.zero_exposure,
        shrinkage=shrinkage,
        raw_rate=raw_rate,
        relative_risk=mean / prior.mean,
    )


__all__ = ["update_area"]
