"""pandas adapters for the observation, estimate and manifest tables."""

from __future__ import annotations

from typing import Any, Iterator, List

import pandas as pd

from ..config import AREA_COLUMN, DEFAULT_SCALE_FACTOR, EVENT_COLUMN, EXPOSURE_COLUMN, INPUT_COLUMNS
from ..errors import DataError
from ..estimation.records import AreaObservation
from ..pipelines.batch import EstimationRun

OUTPUT_COLUMNS = (
    AREA_COLUMN,
    "mean",
    "lowerBound",
    "upperBound",
    EVENT_COLUMN,
    EXPOSURE_COLUMN,
    "zeroExposure",
    "intervalAvailable",
    "shrinkage",
    "relativeRisk",
    "exceedanceProbability",
)
MANIFEST_COLUMNS = (AREA_COLUMN, "status", "reason")


def observations_from_frame(frame: pd.DataFrame) -> Iterator[AreaObservation]:
    """Yield one `AreaObservation` per row without validating the counts.

    Row-level problems are left for the sanitizer so they land in the run
    manifest; only a table missing required columns is rejected here.
    """
    missing = [column for column in INPUT_COLUMNS if column not in frame.columns]
    if missing:
        raise DataError(f"Observation table is missing columns: {', '.join(missing)}.")

    for area_id, events, exposure in frame[list(INPUT_COLUMNS)].itertuples(index=False, name=None):
        yield AreaObservation(
            area_id=_none_if_missing(area_id),
            event_count=_none_if_missing(events),
            exposure_count=_none_if_missing(exposure),
        )


def estimates_to_frame(run: EstimationRun, scale_factor: float = DEFAULT_SCALE_FACTOR) -> pd.DataFrame:
    """Flatten a run into the output table, rates multiplied by `scale_factor`.

    Unavailable bounds are nullable (`pd.NA`) rather than NaN.
    """
    rows: List[dict[str, Any]] = []
    for estimate in run.estimates:
        rows.append(
            {
                AREA_COLUMN: estimate.area_id,
                "mean": estimate.mean * scale_factor,
                "lowerBound": _scaled(estimate.lower_bound, scale_factor),
                "upperBound": _scaled(estimate.upper_bound, scale_factor),
                EVENT_COLUMN: estimate.event_count,
                EXPOSURE_COLUMN: estimate.exposure_count,
                "zeroExposure": estimate.zero_exposure,
                "intervalAvailable": estimate.interval_available,
                "shrinkage": estimate.shrinkage,
                "relativeRisk": estimate.relative_risk,
                "exceedanceProbability": estimate.exceedance_probability,
            }
        )

    frame = pd.DataFrame(rows, columns=list(OUTPUT_COLUMNS))
    for column in ("lowerBound", "upperBound", "exceedanceProbability"):
        frame[column] = pd.array(frame[column].tolist(), dtype="Float64")
    frame[EVENT_COLUMN] = frame[EVENT_COLUMN].astype("int64")
    frame[EXPOSURE_COLUMN] = frame[EXPOSURE_COLUMN].astype("int64")
    return frame


def manifest_to_frame(run: EstimationRun) -> pd.DataFrame:
    """Rejected and degraded areas with their reasons."""
    rows = [
        {AREA_COLUMN: entry.area_id, "status": entry.status, "reason": entry.reason}
        for entry in run.manifest
    ]
    return pd.DataFrame(rows, columns=list(MANIFEST_COLUMNS))


def _scaled(value: Any, scale_factor: float) -> Any:
    return None if value is None else value * scale_factor


def _none_if_missing(value: Any) -> Any:
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        return value
    return value


__all__ = [
    "MANIFEST_COLUMNS",
    "OUTPUT_COLUMNS",
    "estimates_to_frame",
    "manifest_to_frame",
    "observations_from_frame",
]
