"""Error taxonomy shared by the estimation pipeline."""

from __future__ import annotations


class EstimationError(Exception):
    """Base class for every error raised by `arearisk`."""


class DataError(EstimationError, ValueError):
    """An observation row is structurally invalid and cannot be estimated."""

    def __init__(self, message: str, area_id: object = None) -> None:
        super().__init__(message)
        self.area_id = area_id


class ConfigError(EstimationError, ValueError):
    """Aggregate reference values cannot produce a usable prior."""


class NumericalError(EstimationError, ArithmeticError):
    """The Beta quantile could not be resolved for a single area."""

    def __init__(self, message: str, area_id: object = None) -> None:
        super().__init__(message)
        self.area_id = area_id


__all__ = ["ConfigError", "DataError", "EstimationError", "NumericalError"]
