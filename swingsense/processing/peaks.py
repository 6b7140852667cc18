"""Impact candidate detection on the acceleration-derivative magnitude.

All functions are pure: they take arrays and scalar parameters and return
new values without touching analyzer state.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, slots=True)
class CandidatePeak:
    center_index: int
    trigger_magnitude: float


def abs_derivative(values: np.ndarray) -> np.ndarray:
    """``|x[i+1] - x[i]|``; one element shorter than *values*."""
    if values.shape[0] < 2:
        return np.empty(0, dtype=np.float64)
    return np.abs(np.diff(values.astype(np.float64, copy=False)))


def adaptive_derivative_threshold(abs_diff: np.ndarray, std_mult: float) -> float:
    """``mean + std_mult * std`` of the derivative magnitude (population std)."""
    if abs_diff.size == 0:
        return float("inf")
    return float(np.mean(abs_diff) + std_mult * np.std(abs_diff))


def min_separation_samples(min_sep_seconds: float, sample_rate_hz: float) -> int:
    return max(0, int(round(min_sep_seconds * sample_rate_hz)))


def find_candidate_peaks(
    accel_magnitude: np.ndarray,
    sample_rate_hz: float,
    *,
    min_sep_seconds: float,
    threshold: float | None = None,
    threshold_std_mult: float = 1.0,
    min_samples: int = 100,
) -> list[CandidatePeak]:
    """Return impact candidates in *accel_magnitude*, oldest first.

    A candidate is a local maximum of the derivative magnitude that exceeds
    *threshold* (or, when ``None``, the mean + *threshold_std_mult* × std of
    the whole series).  Candidates closer than *min_sep_seconds* to the
    previously kept one are dropped, so the first of a cluster wins.

    ``center_index`` refers to the sample at which the jump arrives, i.e.
    derivative index ``i`` maps to sample ``i + 1``.
    """
    if accel_magnitude.shape[0] < max(3, min_samples):
        return []
    d = abs_derivative(accel_magnitude)
    limit = threshold if threshold is not None else adaptive_derivative_threshold(
        d, threshold_std_mult
    )
    min_sep = min_separation_samples(min_sep_seconds, sample_rate_hz)

    inner = d[1:-1]
    is_peak = (inner > limit) & (inner >= d[:-2]) & (inner >= d[2:])
    peaks: list[CandidatePeak] = []
    last_idx: int | None = None
    for rel in np.flatnonzero(is_peak):
        idx = int(rel) + 1
        if last_idx is not None and idx - last_idx < min_sep:
            continue
        peaks.append(CandidatePeak(center_index=idx + 1, trigger_magnitude=float(d[idx])))
        last_idx = idx
    return peaks


def refine_with_gyro(
    candidates: list[CandidatePeak],
    gyro_magnitude: np.ndarray,
    sample_rate_hz: float,
    search_radius_sec: float,
) -> list[CandidatePeak]:
    """Move each candidate onto the strongest gyro sample within the search radius.

    Candidates that collapse onto an already-kept center are dropped.
    """
    radius = int(round(search_radius_sec * sample_rate_hz))
    n = gyro_magnitude.shape[0]
    if radius <= 0 or n == 0:
        return list(candidates)
    refined: list[CandidatePeak] = []
    seen: set[int] = set()
    for cand in candidates:
        s0 = max(0, cand.center_index - radius)
        s1 = min(n - 1, cand.center_index + radius)
        if s1 <= s0:
            continue
        center = s0 + int(np.argmax(np.abs(gyro_magnitude[s0 : s1 + 1])))
        if center in seen:
            continue
        seen.add(center)
        refined.append(CandidatePeak(center_index=center, trigger_magnitude=cand.trigger_magnitude))
    return refined
