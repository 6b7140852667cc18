"""Power-ratio classification of detection windows."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from statistics import median_high

from ..constants import (
    ADAPTIVE_HISTORY_MAX,
    ADAPTIVE_HISTORY_MIN,
    ADAPTIVE_MEDIAN_FACTOR,
    ADAPTIVE_THRESHOLD_BOUNDS,
    RAD_TO_DEG,
)
from .fft import power_ratio
from .windows import DetectionWindow

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ValidationResult:
    accepted: bool
    ratio: float
    threshold: float


class SpectralValidator:
    """Accept a window iff its acoustic/gyro power ratio exceeds the threshold.

    In adaptive mode the threshold follows ``median(recent ratios) × 1.5``,
    clamped to :data:`~swingsense.constants.ADAPTIVE_THRESHOLD_BOUNDS`, once
    enough history exists; otherwise the static threshold applies.
    """

    def __init__(
        self,
        static_threshold: float,
        *,
        adaptive: bool = False,
        history_size: int = ADAPTIVE_HISTORY_MAX,
        min_history: int = ADAPTIVE_HISTORY_MIN,
        gyro_units: str = "deg/s",
    ) -> None:
        self.static_threshold = float(static_threshold)
        self.adaptive = adaptive
        self.min_history = int(min_history)
        # The ratio threshold was calibrated on deg/s gyro input.
        self._gyro_scale = RAD_TO_DEG if gyro_units == "rad/s" else 1.0
        self._recent_ratios: deque[float] = deque(maxlen=int(history_size))

    @property
    def recent_ratios(self) -> list[float]:
        return list(self._recent_ratios)

    def reset(self) -> None:
        self._recent_ratios.clear()

    def current_threshold(self) -> float:
        if not self.adaptive or len(self._recent_ratios) < self.min_history:
            return self.static_threshold
        lower, upper = ADAPTIVE_THRESHOLD_BOUNDS
        adaptive = median_high(self._recent_ratios) * ADAPTIVE_MEDIAN_FACTOR
        return min(max(adaptive, lower), upper)

    def evaluate(self, window: DetectionWindow) -> ValidationResult:
        ratio = power_ratio(window.acoustic, window.gyro * self._gyro_scale, window.sample_rate_hz)
        self._recent_ratios.append(ratio)
        threshold = self.current_threshold()
        accepted = ratio > threshold
        LOGGER.debug(
            "Window t=%.3f ratio=%.2f threshold=%.2f -> %s",
            window.center_timestamp,
            ratio,
            threshold,
            "accepted" if accepted else "rejected",
        )
        return ValidationResult(accepted=accepted, ratio=ratio, threshold=threshold)
