"""Batch pipeline over many areas sharing a single prior."""

from .batch import EstimationRun, estimate_area, estimate_areas, run_estimation, sanitize_batch

__all__ = [
    "EstimationRun",
    "estimate_area",
    "estimate_areas",
    "run_estimation",
    "sanitize_batch",
]
