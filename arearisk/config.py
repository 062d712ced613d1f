"""Static defaults and aggregate reference configuration."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple, TypedDict

import numpy as np

from .errors import ConfigError
from .estimation.intervals import DEFAULT_TAILS, validate_tails


class ReferencePayload(TypedDict, total=False):
    globalIncidenceRate: float
    globalExposureTotal: float
    referenceExposureScale: float
    scaleFactor: float
    tails: Tuple[float, float]


# Report rates per 100,000 exposure units unless told otherwise.
DEFAULT_SCALE_FACTOR = 100_000.0

# ---------------------------------------------------------------------------
# Table column names.

AREA_COLUMN = "areaId"
EVENT_COLUMN = "eventCount"
EXPOSURE_COLUMN = "exposureCount"
INPUT_COLUMNS = (AREA_COLUMN, EVENT_COLUMN, EXPOSURE_COLUMN)


@dataclass(frozen=True)
class ReferenceConfig:
    """Caller-supplied aggregate values that parameterize a run.

    Leaving `global_incidence_rate` unset asks the batch pipeline to fit the
    prior to the area rates by method of moments instead. `reference_exposure_scale`
    may be left unset, in which case the scaled prior uses the median exposure
    of the valid areas and a fitted prior keeps its own strength.
    """

    global_incidence_rate: Optional[float] = None
    global_exposure_total: Optional[float] = None
    reference_exposure_scale: Optional[float] = None
    scale_factor: float = DEFAULT_SCALE_FACTOR
    tails: Tuple[float, float] = DEFAULT_TAILS

    @property
    def fits_prior_from_areas(self) -> bool:
        return self.global_incidence_rate is None

    def validate(self) -> None:
        rate = self.global_incidence_rate
        if rate is None:
            if self.global_exposure_total is not None:
                raise ConfigError("globalExposureTotal was given without globalIncidenceRate.")
        else:
            if not _is_finite(rate) or not 0.0 < rate < 1.0:
                raise ConfigError(f"globalIncidenceRate must fall within (0, 1), got {rate}.")
            if not _is_finite(self.global_exposure_total) or self.global_exposure_total <= 0:
                raise ConfigError(f"globalExposureTotal must be strictly positive, got {self.global_exposure_total}.")
        scale = self.reference_exposure_scale
        if scale is not None and (not _is_finite(scale) or scale <= 0):
            raise ConfigError(f"referenceExposureScale must be strictly positive, got {scale}.")
        if not _is_finite(self.scale_factor) or self.scale_factor <= 0:
            raise ConfigError(f"scaleFactor must be strictly positive, got {self.scale_factor}.")
        validate_tails(self.tails)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "ReferenceConfig":
        """Build a config from the camelCase keys used by the JSON payload."""
        try:
            rate = _optional_float(payload.get("globalIncidenceRate"))
            total = _optional_float(payload.get("globalExposureTotal"))
            scale = _optional_float(payload.get("referenceExposureScale"))
            scale_factor = float(payload.get("scaleFactor", DEFAULT_SCALE_FACTOR))
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Reference config values must be numeric: {exc}") from exc

        config = cls(
            global_incidence_rate=rate,
            global_exposure_total=total,
            reference_exposure_scale=scale,
            scale_factor=scale_factor,
            tails=validate_tails(payload.get("tails", DEFAULT_TAILS)),
        )
        config.validate()
        return config


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def _is_finite(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    try:
        return bool(np.isfinite(value))
    except TypeError:
        return False


def load_reference_config(path: Path) -> ReferenceConfig:
    """Read a `ReferencePayload` JSON file."""
    try:
        payload: ReferencePayload = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Reference config {path} is not valid JSON: {exc}") from exc
    if not isinstance(payload, Mapping):
        raise ConfigError(f"Reference config {path} must contain a JSON object.")
    return ReferenceConfig.from_mapping(payload)


__all__ = [
    "AREA_COLUMN",
    "DEFAULT_SCALE_FACTOR",
    "EVENT_COLUMN",
    "EXPOSURE_COLUMN",
    "INPUT_COLUMNS",
    "ReferenceConfig",
    "ReferencePayload",
    "load_reference_config",
]
