"""Tests for fixed-length detection window extraction."""

from __future__ import annotations

import numpy as np
import pytest

from swingsense.processing.buffers import ChannelSnapshot
from swingsense.processing.windows import WindowStatus, extract_window, window_bounds

FS = 100.0


def _snapshot(n: int = 200, first_absolute_index: int = 0) -> ChannelSnapshot:
    idx = np.arange(n, dtype=np.float64)
    return ChannelSnapshot(
        timestamps=idx / FS,
        accel=9.81 + idx,
        gyro=2.0 * idx,
        acoustic=3.0 * idx,
        first_absolute_index=first_absolute_index,
    )


class TestWindowBounds:
    def test_half_open_symmetric(self) -> None:
        assert window_bounds(100, FS, 0.5, 0.5) == (50, 150)

    def test_rounds_to_nearest_sample(self) -> None:
        assert window_bounds(100, 50.0, 0.25, 0.25) == (88, 112)


class TestExtractWindow:
    def test_ok_window(self) -> None:
        status, window = extract_window(
            _snapshot(), 100, FS, pre_time_sec=0.5, post_time_sec=0.5
        )
        assert status is WindowStatus.OK
        assert window is not None
        assert len(window) == 100
        assert window.center_offset == 50
        assert window.center_timestamp == pytest.approx(1.0)
        assert window.sample_rate_hz == FS
        np.testing.assert_array_equal(window.gyro, 2.0 * np.arange(50, 150))
        np.testing.assert_array_equal(window.acoustic, 3.0 * np.arange(50, 150))

    def test_window_ending_at_snapshot_end_is_complete(self) -> None:
        status, window = extract_window(
            _snapshot(), 150, FS, pre_time_sec=0.5, post_time_sec=0.5
        )
        assert status is WindowStatus.OK
        assert window is not None and window.end_index == 200

    def test_pending_when_post_samples_missing(self) -> None:
        status, window = extract_window(
            _snapshot(), 170, FS, pre_time_sec=0.5, post_time_sec=0.5
        )
        assert status is WindowStatus.PENDING
        assert window is None

    def test_expired_when_pre_samples_evicted(self) -> None:
        status, window = extract_window(
            _snapshot(), 30, FS, pre_time_sec=0.5, post_time_sec=0.5
        )
        assert status is WindowStatus.EXPIRED
        assert window is None
