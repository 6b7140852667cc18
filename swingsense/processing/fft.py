"""Pure spectral-analysis functions used by the swing validator.

All functions in this module are stateless: they take arrays (and scalar
parameters) and return results without touching any shared mutable state.
The processing chain matches offline analysis: remove the mean, apply a
Hann window, ``numpy.fft.rfft``, and sum ``|X|²`` over all bins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache

import numpy as np

from ..constants import MIN_SPECTRUM_SAMPLES, POWER_RATIO_EPSILON

LOGGER = logging.getLogger(__name__)

_WINDOW_CACHE_MAXSIZE = 16


@dataclass(slots=True)
class SpectralResult:
    frequencies: np.ndarray
    magnitudes: np.ndarray
    power: np.ndarray
    total_power: float

    @property
    def peak_frequency_hz(self) -> float:
        if self.power.size == 0:
            return 0.0
        return float(self.frequencies[int(np.argmax(self.power))])


@lru_cache(maxsize=_WINDOW_CACHE_MAXSIZE)
def hann_window(n: int) -> np.ndarray:
    """Symmetric Hann window of length *n* (``numpy.hanning``), read-only."""
    window = np.hanning(n)
    window.setflags(write=False)
    return window


def is_degenerate(values: np.ndarray) -> bool:
    """True for slices with no usable variation (constant or non-finite)."""
    if values.size < MIN_SPECTRUM_SAMPLES:
        return True
    if not np.all(np.isfinite(values)):
        return True
    return float(np.ptp(values)) <= 0.0


def compute_spectrum(values: np.ndarray, sample_rate_hz: float) -> SpectralResult | None:
    """One-sided power spectrum of *values* sampled at *sample_rate_hz*.

    Returns ``None`` for slices too short to analyse.  Power is left
    unnormalised; only ratios of powers computed on equal-length slices are
    meaningful.
    """
    n = int(values.shape[0])
    if n < MIN_SPECTRUM_SAMPLES or sample_rate_hz <= 0:
        return None
    sig = values.astype(np.float64, copy=False)
    sig = sig - np.mean(sig)
    spec = np.fft.rfft(sig * hann_window(n))
    magnitudes = np.abs(spec)
    power = np.square(magnitudes)
    frequencies = np.fft.rfftfreq(n, d=1.0 / sample_rate_hz)
    return SpectralResult(
        frequencies=frequencies,
        magnitudes=magnitudes,
        power=power,
        total_power=float(np.sum(power)),
    )


def power_ratio(
    acoustic: np.ndarray,
    gyro: np.ndarray,
    sample_rate_hz: float,
) -> float:
    """Acoustic-to-gyro total spectral power ratio.

    Degenerate slices (too short, constant, or non-finite) yield ``0.0`` so
    the window is rejected instead of producing a division blow-up.
    """
    if is_degenerate(acoustic) or is_degenerate(gyro):
        LOGGER.debug("Degenerate window (n=%d); power ratio forced to 0", acoustic.size)
        return 0.0
    acoustic_spec = compute_spectrum(acoustic, sample_rate_hz)
    gyro_spec = compute_spectrum(gyro, sample_rate_hz)
    if acoustic_spec is None or gyro_spec is None:
        return 0.0
    ratio = acoustic_spec.total_power / (gyro_spec.total_power + POWER_RATIO_EPSILON)
    if not np.isfinite(ratio):
        return 0.0
    return float(ratio)
