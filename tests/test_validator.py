"""Tests for the acoustic/gyro power-ratio validator."""

from __future__ import annotations

import pytest
from builders import make_window, swing_window

from swingsense.constants import DEG_TO_RAD
from swingsense.processing.validator import SpectralValidator


class TestStaticThreshold:
    def test_swing_window_accepted(self) -> None:
        result = SpectralValidator(35.0).evaluate(swing_window())
        assert result.accepted is True
        assert result.ratio > 35.0
        assert result.threshold == 35.0

    def test_silent_window_rejected(self) -> None:
        result = SpectralValidator(35.0).evaluate(swing_window(acoustic_peak=0.0))
        assert result.accepted is False
        assert result.ratio < 1.0

    def test_ratio_equal_to_threshold_rejected(self) -> None:
        window = swing_window()
        ratio = SpectralValidator(35.0).evaluate(window).ratio
        assert SpectralValidator(ratio).evaluate(window).accepted is False

    def test_rad_per_second_input_scaled_to_degrees(self) -> None:
        window = swing_window()
        rad_window = make_window(
            accel=window.accel,
            gyro=window.gyro * DEG_TO_RAD,
            acoustic=window.acoustic,
        )
        deg_ratio = SpectralValidator(35.0).evaluate(window).ratio
        rad_ratio = SpectralValidator(35.0, gyro_units="rad/s").evaluate(rad_window).ratio
        assert rad_ratio == pytest.approx(deg_ratio, rel=1e-9)


class TestAdaptiveThreshold:
    def test_static_until_min_history(self) -> None:
        validator = SpectralValidator(35.0, adaptive=True)
        window = swing_window()
        thresholds = [validator.evaluate(window).threshold for _ in range(10)]
        assert thresholds[:9] == [35.0] * 9
        assert thresholds[9] != 35.0

    def test_clamped_to_upper_bound(self) -> None:
        validator = SpectralValidator(35.0, adaptive=True)
        window = swing_window()
        for _ in range(10):
            result = validator.evaluate(window)
        assert result.ratio * 1.5 > 50.0
        assert result.threshold == 50.0
        assert validator.current_threshold() == 50.0

    def test_clamped_to_lower_bound(self) -> None:
        validator = SpectralValidator(35.0, adaptive=True)
        window = swing_window(acoustic_peak=0.0)
        for _ in range(10):
            validator.evaluate(window)
        assert validator.current_threshold() == 25.0

    def test_static_mode_ignores_history(self) -> None:
        validator = SpectralValidator(35.0)
        window = swing_window(acoustic_peak=0.0)
        for _ in range(20):
            validator.evaluate(window)
        assert validator.current_threshold() == 35.0

    def test_history_bounded(self) -> None:
        validator = SpectralValidator(35.0, adaptive=True, history_size=3, min_history=2)
        for _ in range(5):
            validator.evaluate(swing_window())
        assert len(validator.recent_ratios) == 3

    def test_reset_clears_history(self) -> None:
        validator = SpectralValidator(35.0, adaptive=True)
        for _ in range(12):
            validator.evaluate(swing_window())
        validator.reset()
        assert validator.recent_ratios == []
        assert validator.current_threshold() == 35.0
