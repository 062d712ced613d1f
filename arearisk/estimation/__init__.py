"""Beta-Binomial shrinkage estimation for sparse per-area counts."""

from .intervals import DEFAULT_TAILS, attach_interval, credible_interval, exceedance_probability, validate_tails
from .posterior import update_area
from .priors import derive_prior, fit_prior_from_areas, median_reference_exposure, prior_from_moments
from .records import (
    AreaObservation,
    PosteriorEstimate,
    PriorHyperparameters,
    RejectedArea,
    SanitizedObservation,
)
from .sanitize import sanitize_observation

__all__ = [
    "AreaObservation",
    "DEFAULT_TAILS",
    "PosteriorEstimate",
    "PriorHyperparameters",
    "RejectedArea",
    "SanitizedObservation",
    "attach_interval",
    "credible_interval",
    "derive_prior",
    "exceedance_probability",
    "fit_prior_from_areas",
    "median_reference_exposure",
    "prior_from_moments",
    "sanitize_observation",
    "update_area",
    "validate_tails",
]
