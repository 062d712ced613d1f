"""Deterministic selection of extreme and representative area estimates."""

from __future__ import annotations

import numbers
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from ..estimation.records import AreaId, PosteriorEstimate


class RankingReporter:
    """Ranks posterior estimates by mean, breaking ties on area id."""

    def __init__(self, estimates: Iterable[PosteriorEstimate]) -> None:
        self._estimates: Tuple[PosteriorEstimate, ...] = tuple(estimates)

    def __len__(self) -> int:
        return len(self._estimates)

    def top_n(self, k: int) -> List[PosteriorEstimate]:
        """Highest `k` posterior means."""
        _check_k(k)
        ordered = sorted(self._estimates, key=lambda est: (-est.mean, _area_sort_key(est.area_id)))
        return ordered[:k]

    def bottom_n(self, k: int) -> List[PosteriorEstimate]:
        """Lowest `k` posterior means."""
        _check_k(k)
        ordered = sorted(self._estimates, key=lambda est: (est.mean, _area_sort_key(est.area_id)))
        return ordered[:k]

    def representative_n(self, k: int) -> List[PosteriorEstimate]:
        """The `k` estimates whose means sit closest to the median mean."""
        _check_k(k)
        if not self._estimates:
            return []
        median = float(np.median([est.mean for est in self._estimates]))
        ordered = sorted(
            self._estimates,
            key=lambda est: (abs(est.mean - median), _area_sort_key(est.area_id)),
        )
        return ordered[:k]

    @property
    def estimates(self) -> Sequence[PosteriorEstimate]:
        return self._estimates


def _check_k(k: int) -> None:
    if k < 0:
        raise ValueError(f"k must be non-negative, got {k}.")


def _area_sort_key(area_id: AreaId) -> Tuple[int, object]:
    # Numeric ids order numerically and ahead of everything else.
    if isinstance(area_id, numbers.Real) and not isinstance(area_id, bool):
        return (0, float(area_id))
    return (1, str(area_id))


__all__ = ["RankingReporter"]
