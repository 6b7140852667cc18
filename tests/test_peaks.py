"""Tests for impact-candidate detection on the acceleration derivative."""

from __future__ import annotations

import numpy as np
import pytest

from swingsense.processing.peaks import (
    CandidatePeak,
    abs_derivative,
    adaptive_derivative_threshold,
    find_candidate_peaks,
    refine_with_gyro,
)

FS = 100.0


def _accel_with_spikes(n: int, *spikes: int, jump: float = 3.0) -> np.ndarray:
    accel = np.full(n, 9.81)
    for idx in spikes:
        accel[idx] += jump
    return accel


class TestDerivativeHelpers:
    def test_abs_derivative(self) -> None:
        np.testing.assert_allclose(abs_derivative(np.array([1.0, 3.0, 2.0])), [2.0, 1.0])

    def test_abs_derivative_short(self) -> None:
        assert abs_derivative(np.array([1.0])).size == 0

    def test_threshold_is_mean_plus_k_std(self) -> None:
        d = np.array([0.0, 0.0, 0.0, 4.0])
        assert adaptive_derivative_threshold(d, 1.0) == pytest.approx(1.0 + np.std(d))
        assert adaptive_derivative_threshold(d, 0.0) == pytest.approx(1.0)

    def test_threshold_of_empty_never_triggers(self) -> None:
        assert adaptive_derivative_threshold(np.empty(0), 1.0) == float("inf")


class TestFindCandidatePeaks:
    def test_too_few_samples(self) -> None:
        accel = _accel_with_spikes(50, 25)
        assert find_candidate_peaks(accel, FS, min_sep_seconds=0.5) == []

    def test_single_spike(self) -> None:
        peaks = find_candidate_peaks(_accel_with_spikes(300, 150), FS, min_sep_seconds=0.5)
        assert [p.center_index for p in peaks] == [150]
        assert peaks[0].trigger_magnitude == pytest.approx(3.0)

    def test_first_of_close_cluster_wins(self) -> None:
        peaks = find_candidate_peaks(_accel_with_spikes(300, 150, 170), FS, min_sep_seconds=0.5)
        assert [p.center_index for p in peaks] == [150]

    def test_separated_spikes_both_reported(self) -> None:
        peaks = find_candidate_peaks(_accel_with_spikes(300, 150, 230), FS, min_sep_seconds=0.5)
        assert [p.center_index for p in peaks] == [150, 230]

    def test_fixed_threshold_overrides_adaptive(self) -> None:
        accel = _accel_with_spikes(300, 150)
        assert find_candidate_peaks(accel, FS, min_sep_seconds=0.5, threshold=5.0) == []
        assert len(find_candidate_peaks(accel, FS, min_sep_seconds=0.5, threshold=1.0)) == 1

    def test_flat_signal_has_no_candidates(self) -> None:
        assert find_candidate_peaks(np.full(300, 9.81), FS, min_sep_seconds=0.5) == []


class TestRefineWithGyro:
    def test_moves_to_gyro_peak_within_radius(self) -> None:
        gyro = np.zeros(300)
        gyro[110] = 5.0
        refined = refine_with_gyro([CandidatePeak(100, 1.0)], gyro, FS, 0.15)
        assert refined == [CandidatePeak(110, 1.0)]

    def test_collapsed_candidates_deduplicated(self) -> None:
        gyro = np.zeros(300)
        gyro[110] = 5.0
        refined = refine_with_gyro(
            [CandidatePeak(100, 1.0), CandidatePeak(105, 2.0)], gyro, FS, 0.15
        )
        assert [c.center_index for c in refined] == [110]

    def test_zero_radius_is_identity(self) -> None:
        cands = [CandidatePeak(10, 1.0)]
        assert refine_with_gyro(cands, np.ones(50), FS, 0.0) == cands

    def test_search_clamped_to_buffer_edges(self) -> None:
        gyro = np.zeros(20)
        gyro[19] = 1.0
        refined = refine_with_gyro([CandidatePeak(15, 1.0)], gyro, FS, 0.15)
        assert refined[0].center_index == 19
