"""Empirical-Bayes shrinkage estimates of rare-event risk for small areas."""

from .config import ReferenceConfig, load_reference_config
from .errors import ConfigError, DataError, EstimationError, NumericalError
from .estimation import (
    AreaObservation,
    PosteriorEstimate,
    PriorHyperparameters,
    derive_prior,
    prior_from_moments,
)
from .pipelines import EstimationRun, run_estimation
from .reporting import RankingReporter

__all__ = [
    "AreaObservation",
    "ConfigError",
    "DataError",
    "EstimationError",
    "EstimationRun",
    "NumericalError",
    "PosteriorEstimate",
    "PriorHyperparameters",
    "RankingReporter",
    "ReferenceConfig",
    "derive_prior",
    "load_reference_config",
    "prior_from_moments",
    "run_estimation",
]
