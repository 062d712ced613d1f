"""Denominator sanitization ahead of the conjugate update."""

from __future__ import annotations

import numbers
from typing import Any

import numpy as np

from ..errors import DataError
from .records import AreaId, AreaObservation, SanitizedObservation


def sanitize_observation(observation: AreaObservation) -> SanitizedObservation:
    """Validate counts and tag zero-exposure areas for prior-only estimation.

    Zero exposure is not an error: the observation passes through unchanged
    with `zero_exposure=True` so the estimator never divides by it.

    Raises:
        DataError: If either count is missing, non-integral or negative, or if
            events exceed a positive exposure.
    """
    area_id = observation.area_id
    if area_id is None:
        raise DataError("Observation has no area id.")
    events = _to_count(observation.event_count, "event_count", area_id)
    exposure = _to_count(observation.exposure_count, "exposure_count", area_id)

    if exposure > 0 and events > exposure:
        raise DataError(
            f"event_count ({events}) exceeds exposure_count ({exposure}) for area {area_id!r}.",
            area_id=area_id,
        )

    return SanitizedObservation(
        area_id=area_id,
        event_count=events,
        exposure_count=exposure,
        zero_exposure=exposure == 0,
    )


def _to_count(value: Any, field_name: str, area_id: AreaId) -> int:
    if value is None or isinstance(value, bool):
        raise DataError(f"{field_name} is missing for area {area_id!r}.", area_id=area_id)
    if isinstance(value, numbers.Integral):
        count = int(value)
    elif isinstance(value, numbers.Real):
        as_float = float(value)
        if not np.isfinite(as_float):
            raise DataError(f"{field_name} is missing for area {area_id!r}.", area_id=area_id)
        if not as_float.is_integer():
            raise DataError(
                f"{field_name} must be an integer count, got {value!r} for area {area_id!r}.",
                area_id=area_id,
            )
        count = int(as_float)
    else:
        raise DataError(
            f"{field_name} must be an integer count, got {type(value).__name__} for area {area_id!r}.",
            area_id=area_id,
        )

    if count < 0:
        raise DataError(f"{field_name} cannot be negative ({count}) for area {area_id!r}.", area_id=area_id)
    return count


__all__ = ["sanitize_observation"]
