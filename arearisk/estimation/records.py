"""Shared data records for area-level risk estimation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable, Optional

import numpy as np

from ..errors import ConfigError

AreaId = Hashable


@dataclass(frozen=True)
class AreaObservation:
    """Single area row: observed events over an (often proxied) exposure."""

    area_id: AreaId
    event_count: int
    exposure_count: int


@dataclass(frozen=True)
class SanitizedObservation:
    """Validated observation tagged with its denominator state."""

    area_id: AreaId
    event_count: int
    exposure_count: int
    zero_exposure: bool


@dataclass(frozen=True)
class PriorHyperparameters:
    """Global Beta(alpha0, beta0) prior shared read-only by every area."""

    alpha0: float
    beta0: float

    def __post_init__(self) -> None:
        if not (np.isfinite(self.alpha0) and np.isfinite(self.beta0)):
            raise ConfigError("Prior hyperparameters must be finite.")
        if self.alpha0 <= 0 or self.beta0 <= 0:
            raise ConfigError(
                f"Prior hyperparameters must be strictly positive, got alpha0={self.alpha0}, beta0={self.beta0}."
            )

    @property
    def mean(self) -> float:
        return self.alpha0 / (self.alpha0 + self.beta0)

    @property
    def effective_sample_size(self) -> float:
        """Number of pseudo-observations the prior contributes."""
        return self.alpha0 + self.beta0


@dataclass(frozen=True)
class PosteriorEstimate:
    """Posterior summary for one area.

    `lower_bound`/`upper_bound` are None when the quantile solver failed for
    this area; `raw_rate` is None when the area has no exposure.

    A zero-exposure area is estimated from the prior alone: `alpha` and `beta`
    equal `alpha0` and `beta0` even when `event_count` is positive, and the
    counts are carried only for traceability.
    """

    area_id: AreaId
    alpha: float
    beta: float
    mean: float
    event_count: int
    exposure_count: int
    zero_exposure: bool
    shrinkage: float
    raw_rate: Optional[float]
    relative_risk: float
    lower_bound: Optional[float] = None
    upper_bound: Optional[float] = None
    exceedance_probability: Optional[float] = None

    @property
    def interval_available(self) -> bool:
        return self.lower_bound is not None and self.upper_bound is not None

    @property
    def interval_width(self) -> Optional[float]:
        if self.lower_bound is None or self.upper_bound is None:
            return None
        return self.upper_bound - self.lower_bound


@dataclass(frozen=True)
class RejectedArea:
    """Manifest entry for an area that was rejected or degraded during a run."""

    area_id: AreaId
    status: str
    reason: str
