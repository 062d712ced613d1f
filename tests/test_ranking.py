"""Tests for the ranking reporter."""

from __future__ import annotations

from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from arearisk.estimation.records import PosteriorEstimate
from arearisk.reporting.ranking import RankingReporter


def _estimate(area_id: object, mean: float) -> PosteriorEstimate:
    return PosteriorEstimate(
        area_id=area_id,
        alpha=mean * 100,
        beta=(1 - mean) * 100,
        mean=mean,
        event_count=0,
        exposure_count=0,
        zero_exposure=True,
        shrinkage=1.0,
        raw_rate=None,
        relative_risk=1.0,
    )


def _reporter() -> RankingReporter:
    return RankingReporter(
        [
            _estimate("c", 0.004),
            _estimate("a", 0.010),
            _estimate("d", 0.001),
            _estimate("b", 0.010),
            _estimate("e", 0.004),
        ]
    )


def test_top_n_orders_by_mean_then_area_id() -> None:
    top = _reporter().top_n(3)
    assert [est.area_id for est in top] == ["a", "b", "c"]


def test_bottom_n_orders_by_mean_then_area_id() -> None:
    bottom = _reporter().bottom_n(3)
    assert [est.area_id for est in bottom] == ["d", "c", "e"]


def test_k_larger_than_collection_returns_everything() -> None:
    reporter = _reporter()
    assert len(reporter.top_n(50)) == len(reporter) == 5
    assert reporter.bottom_n(0) == []


def test_negative_k_is_rejected() -> None:
    with pytest.raises(ValueError):
        _reporter().top_n(-1)
    with pytest.raises(ValueError):
        _reporter().representative_n(-2)


def test_ranking_is_independent_of_input_order() -> None:
    reporter = _reporter()
    reversed_reporter = RankingReporter(reversed(list(reporter.estimates)))
    assert reporter.top_n(5) == reversed_reporter.top_n(5)
    assert reporter.bottom_n(5) == reversed_reporter.bottom_n(5)


def test_numeric_area_ids_sort_numerically() -> None:
    reporter = RankingReporter([_estimate(10, 0.5), _estimate(2, 0.5), _estimate(33, 0.5)])
    assert [est.area_id for est in reporter.top_n(3)] == [2, 10, 33]


def test_representative_n_picks_estimates_near_median() -> None:
    picked = _reporter().representative_n(2)
    assert [est.area_id for est in picked] == ["c", "e"]
    assert RankingReporter([]).representative_n(3) == []
