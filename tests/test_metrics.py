"""Tests for physical swing metrics computed from a detection window."""

from __future__ import annotations

import math

import numpy as np
import pytest
from builders import GRAVITY, make_window

from swingsense.processing.metrics import (
    MetricsParams,
    compute_swing_metrics,
    derived_speed_out,
    elevated_duration_ms,
    passes_quality_gates,
    standardized_force,
)
from swingsense.processing.validator import ValidationResult

PARAMS = MetricsParams(sensor_radius_m=0.39, mass_kg=0.15, swing_mass_kg=0.10)
ACCEPTED = ValidationResult(accepted=True, ratio=80.0, threshold=35.0)
REJECTED = ValidationResult(accepted=False, ratio=2.0, threshold=35.0)


def _impact_window(*, gyro_peak_dps: float = 180.0, jump: float = 3.0):
    accel = np.full(100, GRAVITY)
    accel[50] += jump
    gyro = np.zeros(100)
    gyro[45:56] = np.linspace(0.0, gyro_peak_dps, 11)
    acoustic = np.ones(100)
    return make_window(accel=accel, gyro=gyro, acoustic=acoustic)


class TestComputeSwingMetrics:
    def test_tip_speed_is_angular_speed_times_radius(self) -> None:
        event = compute_swing_metrics(_impact_window(), ACCEPTED, PARAMS)
        assert event.max_angular_speed == pytest.approx(math.pi)
        assert event.max_tip_speed == pytest.approx(event.max_angular_speed * 0.39)

    def test_force_and_severity(self) -> None:
        event = compute_swing_metrics(_impact_window(), ACCEPTED, PARAMS)
        assert event.peak_acceleration == pytest.approx(GRAVITY + 3.0)
        assert event.estimated_force_n == pytest.approx(0.15 * (GRAVITY + 3.0))
        # Dynamic component excludes gravity: 3.0 minus its share of the mean.
        assert event.impact_severity == pytest.approx(0.10 * 3.0 * 0.99)

    def test_duration_within_window(self) -> None:
        event = compute_swing_metrics(_impact_window(), ACCEPTED, PARAMS)
        assert event.duration_ms == 20
        assert 0 < event.duration_ms <= 1000

    def test_duration_short_on_noisy_baseline(self) -> None:
        rng = np.random.default_rng(7)
        accel = GRAVITY + rng.normal(0.0, 0.02, 100)
        accel[50] += 0.1
        window = make_window(accel=accel, gyro=np.zeros(100), acoustic=np.ones(100))
        d = np.abs(np.diff(accel))
        elevated = np.flatnonzero(d > d.mean() + d.std())
        # Noise crosses the threshold well away from the impact.
        assert elevated[-1] - elevated[0] > 10

        event = compute_swing_metrics(window, ACCEPTED, PARAMS)
        assert 0 < event.duration_ms <= 100

    def test_duration_found_when_impact_is_off_center(self) -> None:
        accel = np.full(100, GRAVITY)
        accel[40] += 3.0
        window = make_window(accel=accel, gyro=np.zeros(100), acoustic=np.ones(100))
        assert compute_swing_metrics(window, ACCEPTED, PARAMS).duration_ms == 20

    def test_event_carries_timestamp_and_ratio(self) -> None:
        window = _impact_window()
        event = compute_swing_metrics(window, ACCEPTED, PARAMS)
        assert event.timestamp == window.center_timestamp
        assert event.power_ratio == 80.0

    def test_derived_quantities(self) -> None:
        event = compute_swing_metrics(_impact_window(), ACCEPTED, PARAMS)
        assert event.derived_speed_out == pytest.approx(event.max_tip_speed * 1.5)
        assert event.standardized_force == pytest.approx(
            0.0053 * (event.derived_speed_out + 15.0) / 0.002
        )

    def test_quality_passed_for_plausible_swing(self) -> None:
        assert compute_swing_metrics(_impact_window(), ACCEPTED, PARAMS).quality_passed is True

    def test_quality_failed_when_not_validated(self) -> None:
        assert compute_swing_metrics(_impact_window(), REJECTED, PARAMS).quality_passed is False

    def test_quality_failed_for_implausible_tip_speed(self) -> None:
        event = compute_swing_metrics(_impact_window(gyro_peak_dps=10_000.0), ACCEPTED, PARAMS)
        assert event.max_tip_speed > 50.0
        assert event.quality_passed is False

    def test_rad_per_second_units(self) -> None:
        params = MetricsParams(
            sensor_radius_m=0.39, mass_kg=0.15, swing_mass_kg=0.10, gyro_units="rad/s"
        )
        event = compute_swing_metrics(_impact_window(gyro_peak_dps=2.0), ACCEPTED, params)
        assert event.max_angular_speed == pytest.approx(2.0)


class TestHelpers:
    def test_elevated_duration_of_flat_window(self) -> None:
        assert elevated_duration_ms(np.full(100, GRAVITY), 100.0, 1.0) == 0

    def test_elevated_duration_ignores_unconnected_bursts(self) -> None:
        accel = np.full(100, GRAVITY)
        accel[50] += 3.0
        accel[80] += 3.0
        assert elevated_duration_ms(accel, 100.0, 1.0, center_offset=50, search_radius=5) == 20
        assert elevated_duration_ms(accel, 100.0, 1.0) == 20

    def test_elevated_duration_zero_when_peak_outside_search_radius(self) -> None:
        accel = np.full(100, GRAVITY)
        accel[10] += 3.0
        assert elevated_duration_ms(accel, 100.0, 1.0, center_offset=50, search_radius=15) == 0

    def test_elevated_duration_bridges_single_quiet_sample(self) -> None:
        accel = np.full(100, GRAVITY)
        accel[50] += 3.0
        accel[52] += 3.0
        # d[53] is the only quiet sample between the second and third jumps.
        accel[55] += 3.0
        assert elevated_duration_ms(accel, 100.0, 1.0, center_offset=50, search_radius=2) == 70

    def test_derived_speed_requires_positive_tip_speed(self) -> None:
        assert derived_speed_out(0.0) is None
        assert derived_speed_out(10.0) == pytest.approx(15.0)

    def test_standardized_force(self) -> None:
        assert standardized_force(None) is None
        assert standardized_force(15.0) == pytest.approx(79.5)

    def test_quality_gates_reject_non_finite(self) -> None:
        assert (
            passes_quality_gates(
                max_angular_speed=float("nan"),
                max_tip_speed=1.0,
                peak_acceleration=10.0,
                estimated_force_n=1.5,
                impact_severity=0.3,
                duration_ms=20,
            )
            is False
        )

    def test_quality_gates_reject_long_duration(self) -> None:
        assert (
            passes_quality_gates(
                max_angular_speed=3.0,
                max_tip_speed=1.0,
                peak_acceleration=10.0,
                estimated_force_n=1.5,
                impact_severity=0.3,
                duration_ms=1501,
            )
            is False
        )
