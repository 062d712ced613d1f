"""Tests for sanitization, prior derivation and the conjugate update."""

from __future__ import annotations

from pathlib import Path
import sys

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from arearisk.errors import ConfigError, DataError
from arearisk.estimation.posterior import update_area
from arearisk.estimation.priors import (
    derive_prior,
    fit_prior_from_areas,
    median_reference_exposure,
    prior_from_moments,
)
from arearisk.estimation.records import AreaObservation, PriorHyperparameters, SanitizedObservation
from arearisk.estimation.sanitize import sanitize_observation


def _sanitized(area_id: str, events: int, exposure: int) -> SanitizedObservation:
    return sanitize_observation(AreaObservation(area_id, events, exposure))


# ---------------------------------------------------------------------------
# Denominator sanitizer tests


def test_sanitize_passes_positive_exposure_through() -> None:
    result = _sanitized("01001", 3, 250)
    assert result.area_id == "01001"
    assert result.event_count == 3
    assert result.exposure_count == 250
    assert result.zero_exposure is False


def test_sanitize_flags_zero_exposure_without_rate() -> None:
    result = _sanitized("01003", 0, 0)
    assert result.zero_exposure is True
    assert result.exposure_count == 0


def test_sanitize_keeps_events_on_zero_exposure_proxy() -> None:
    result = _sanitized("01005", 2, 0)
    assert result.zero_exposure is True
    assert result.event_count == 2


def test_sanitize_rejects_events_above_exposure() -> None:
    with pytest.raises(DataError) as excinfo:
        _sanitized("bad", 5, 3)
    assert excinfo.value.area_id == "bad"


@pytest.mark.parametrize("events, exposure", [(-1, 10), (0, -4)])
def test_sanitize_rejects_negative_counts(events: int, exposure: int) -> None:
    with pytest.raises(DataError):
        _sanitized("neg", events, exposure)


@pytest.mark.parametrize("value", [2.5, float("nan"), None, "3"])
def test_sanitize_rejects_non_integral_or_missing_counts(value: object) -> None:
    with pytest.raises(DataError):
        sanitize_observation(AreaObservation("x", value, 10))  # type: ignore[arg-type]


def test_sanitize_accepts_integral_floats_and_numpy_ints() -> None:
    result = sanitize_observation(AreaObservation("y", 3.0, np.int64(40)))  # type: ignore[arg-type]
    assert result.event_count == 3
    assert isinstance(result.event_count, int)
    assert result.exposure_count == 40


def test_sanitize_rejects_missing_area_id() -> None:
    with pytest.raises(DataError):
        sanitize_observation(AreaObservation(None, 1, 10))


# ---------------------------------------------------------------------------
# Hyperparameter tests


def test_derive_prior_preserves_global_rate() -> None:
    prior = derive_prior(0.000886, 3_000_000, 1000)
    assert prior.mean == pytest.approx(0.000886, rel=1e-12)
    assert prior.effective_sample_size == pytest.approx(1000.0)
    assert prior.alpha0 == pytest.approx(0.886)
    assert prior.beta0 == pytest.approx(999.114)


def test_derive_prior_is_invariant_to_aggregate_size() -> None:
    small = derive_prior(0.0042, 1_000_000, 500)
    large = derive_prior(0.0042, 70_000_000, 500)
    assert small.mean == pytest.approx(large.mean, rel=1e-12)
    assert small.alpha0 == pytest.approx(large.alpha0)
    assert small.beta0 == pytest.approx(large.beta0)


def test_reference_scale_controls_prior_strength() -> None:
    weak = derive_prior(0.001, 2_000_000, 100)
    strong = derive_prior(0.001, 2_000_000, 10_000)
    assert weak.mean == pytest.approx(strong.mean)
    assert strong.effective_sample_size == pytest.approx(100 * weak.effective_sample_size)


@pytest.mark.parametrize(
    "rate, total, scale",
    [
        (0.0, 1000, 10),
        (1.0, 1000, 10),
        (1.5, 1000, 10),
        (0.01, 0, 10),
        (0.01, -5, 10),
        (0.01, 1000, 0),
        (float("nan"), 1000, 10),
    ],
)
def test_derive_prior_rejects_invalid_aggregates(rate: float, total: float, scale: float) -> None:
    with pytest.raises(ConfigError):
        derive_prior(rate, total, scale)


def test_prior_from_moments_collapses_alpha_when_mean_equals_stddev() -> None:
    for mean in (0.01, 0.2, 0.5):
        prior = prior_from_moments(mean, mean)
        assert prior.alpha0 == pytest.approx(1.0)
    prior = prior_from_moments(0.01, 0.01)
    assert prior.beta0 == pytest.approx(99.0)


def test_prior_from_moments_validates_inputs() -> None:
    with pytest.raises(ConfigError):
        prior_from_moments(0.0, 0.1)
    with pytest.raises(ConfigError):
        prior_from_moments(0.1, 0.0)


def test_prior_hyperparameters_must_be_positive() -> None:
    with pytest.raises(ConfigError):
        PriorHyperparameters(alpha0=0.0, beta0=10.0)
    with pytest.raises(ConfigError):
        PriorHyperparameters(alpha0=1.0, beta0=float("inf"))


def test_fit_prior_from_areas_matches_moments() -> None:
    observations = [_sanitized(f"a{k}", k, 100) for k in (1, 2, 3, 4)]
    observations.append(_sanitized("empty", 0, 0))
    prior = fit_prior_from_areas(observations)
    assert prior.mean == pytest.approx(0.025)
    assert prior.effective_sample_size == pytest.approx(145.25)


@pytest.mark.parametrize(
    "counts",
    [
        [(1, 100)],
        [(0, 100), (0, 50)],
        [(2, 100), (4, 200)],
    ],
)
def test_fit_prior_from_areas_rejects_degenerate_rates(counts: list[tuple[int, int]]) -> None:
    observations = [_sanitized(f"a{idx}", events, exposure) for idx, (events, exposure) in enumerate(counts)]
    with pytest.raises(ConfigError):
        fit_prior_from_areas(observations)


def test_median_reference_exposure_ignores_zero_exposure() -> None:
    observations = [_sanitized("a", 0, 10), _sanitized("b", 0, 0), _sanitized("c", 1, 30), _sanitized("d", 0, 20)]
    assert median_reference_exposure(observations) == pytest.approx(20.0)


def test_median_reference_exposure_requires_positive_exposure() -> None:
    with pytest.raises(ConfigError):
        median_reference_exposure([_sanitized("a", 0, 0)])


# ---------------------------------------------------------------------------
# Conjugate update tests


def test_zero_exposure_returns_prior_mean_exactly() -> None:
    prior = PriorHyperparameters(alpha0=0.189, beta0=213.0)
    for events in (0, 3):
        estimate = update_area(_sanitized("z", events, 0), prior)
        assert estimate.event_count == events
        assert estimate.mean == prior.mean
        assert estimate.alpha == prior.alpha0
        assert estimate.beta == prior.beta0
        assert estimate.raw_rate is None
        assert estimate.shrinkage == pytest.approx(1.0)
        assert estimate.relative_risk == pytest.approx(1.0)


def test_scenario_a_zero_events_in_large_area() -> None:
    prior = PriorHyperparameters(alpha0=1.0, beta0=1132.0)
    estimate = update_area(_sanitized("A", 0, 1011), prior)
    assert estimate.alpha == pytest.approx(1.0)
    assert estimate.beta == pytest.approx(2143.0)
    assert estimate.mean == pytest.approx(1 / 2144)
    assert estimate.mean * 100_000 == pytest.approx(46.6, abs=0.1)
    assert estimate.raw_rate == 0.0


def test_scenario_b_five_events() -> None:
    prior = PriorHyperparameters(alpha0=0.189, beta0=213.0)
    estimate = update_area(_sanitized("B", 5, 1000), prior)
    assert estimate.alpha == pytest.approx(5.189)
    assert estimate.beta == pytest.approx(1208.0)
    assert estimate.mean == pytest.approx(5.189 / 1213.189)
    assert estimate.mean * 100_000 == pytest.approx(428, abs=1)
    assert estimate.alpha > prior.alpha0
    assert estimate.beta >= prior.beta0


def test_scenario_c_prior_dominates_tiny_area() -> None:
    prior = PriorHyperparameters(alpha0=0.189, beta0=213.0)
    estimate = update_area(_sanitized("C", 0, 10), prior)
    assert estimate.alpha == pytest.approx(0.189)
    assert estimate.beta == pytest.approx(223.0)
    assert estimate.mean == pytest.approx(0.189 / 223.189)
    assert estimate.mean * 100_000 == pytest.approx(84.7, abs=0.1)
    assert estimate.mean == pytest.approx(prior.mean, rel=0.05)
    assert estimate.shrinkage > 0.95


def test_mean_non_decreasing_in_events() -> None:
    prior = PriorHyperparameters(alpha0=0.189, beta0=213.0)
    means = [update_area(_sanitized("m", events, 1000), prior).mean for events in range(0, 25)]
    assert all(later >= earlier for earlier, later in zip(means, means[1:]))


def test_mean_non_increasing_in_exposure_below_prior_rate() -> None:
    prior = PriorHyperparameters(alpha0=0.189, beta0=213.0)
    exposures = [2000, 5000, 10_000, 50_000, 200_000]
    means = [update_area(_sanitized("m", 1, exposure), prior).mean for exposure in exposures]
    assert all(later <= earlier for earlier, later in zip(means, means[1:]))


def test_mean_converges_to_raw_ratio_with_exposure() -> None:
    prior = PriorHyperparameters(alpha0=0.189, beta0=213.0)
    ratio = 0.01
    gaps = []
    for exposure in (1_000, 100_000, 10_000_000):
        estimate = update_area(_sanitized("big", int(ratio * exposure), exposure), prior)
        gaps.append(abs(estimate.mean - ratio))
    assert gaps[0] > gaps[1] > gaps[2]
    assert gaps[2] == pytest.approx(0.0, abs=1e-6)


def test_shrinkage_and_relative_risk() -> None:
    prior = PriorHyperparameters(alpha0=1.0, beta0=999.0)
    estimate = update_area(_sanitized("rr", 30, 1000), prior)
    assert estimate.shrinkage == pytest.approx(0.5)
    assert estimate.raw_rate == pytest.approx(0.03)
    assert estimate.mean == pytest.approx(0.5 * 0.03 + 0.5 * prior.mean)
    assert estimate.relative_risk == pytest.approx(estimate.mean / prior.mean)
