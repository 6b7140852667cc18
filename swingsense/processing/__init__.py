"""Swing detection pipeline.

- :mod:`~swingsense.processing.buffers` — bounded circular sample storage.
- :mod:`~swingsense.processing.sampling_rate` — cached sampling-rate estimate.
- :mod:`~swingsense.processing.peaks` — impact candidates on the accel derivative.
- :mod:`~swingsense.processing.windows` — fixed-length detection windows.
- :mod:`~swingsense.processing.fft` — pure spectral-analysis functions.
- :mod:`~swingsense.processing.validator` — acoustic/gyro power-ratio classifier.
- :mod:`~swingsense.processing.metrics` — physical swing metrics.
- :mod:`~swingsense.processing.dedup` — duplicate-detection suppression.
- :mod:`~swingsense.processing.analyzer` — the stateful :class:`SwingAnalyzer`
  coordinator that ties everything together.
"""

from .analyzer import SwingAnalyzer
from .buffers import ChannelSnapshot, SampleBuffer
from .dedup import DedupDecision, Deduplicator
from .fft import SpectralResult, compute_spectrum, power_ratio
from .peaks import CandidatePeak, find_candidate_peaks
from .sampling_rate import SamplingRateEstimator
from .validator import SpectralValidator, ValidationResult
from .windows import DetectionWindow, WindowStatus, extract_window

__all__ = [
    "CandidatePeak",
    "ChannelSnapshot",
    "DedupDecision",
    "Deduplicator",
    "DetectionWindow",
    "SampleBuffer",
    "SamplingRateEstimator",
    "SpectralResult",
    "SpectralValidator",
    "SwingAnalyzer",
    "ValidationResult",
    "WindowStatus",
    "compute_spectrum",
    "extract_window",
    "find_candidate_peaks",
    "power_ratio",
]
