"""Effective sampling-rate estimation from buffered timestamps."""

from __future__ import annotations

import logging
import math

import numpy as np

LOGGER = logging.getLogger(__name__)


class SamplingRateEstimator:
    """Cache ``(count - 1) / (t_last - t_first)`` and refresh it sparingly.

    The estimate is (re)computed once at least *min_samples* timestamps are
    available and then only after *recompute_interval* further samples have
    been ingested.  Until the first valid estimate exists the configured
    default is reported.
    """

    def __init__(
        self,
        default_rate_hz: float,
        *,
        min_samples: int = 100,
        recompute_interval: int = 100,
    ) -> None:
        self.default_rate_hz = float(default_rate_hz)
        self.min_samples = int(min_samples)
        self.recompute_interval = int(recompute_interval)
        self._cached_rate_hz: float | None = None
        self._computed_at_total: int | None = None

    @property
    def rate_hz(self) -> float:
        return self._cached_rate_hz if self._cached_rate_hz is not None else self.default_rate_hz

    @property
    def has_estimate(self) -> bool:
        return self._cached_rate_hz is not None

    def reset(self) -> None:
        self._cached_rate_hz = None
        self._computed_at_total = None

    def due(self, total_ingested: int, buffered: int) -> bool:
        """Whether :meth:`update` would recompute for this buffer state."""
        if buffered < self.min_samples:
            return False
        if self._computed_at_total is None:
            return True
        return total_ingested - self._computed_at_total >= self.recompute_interval

    def update(self, timestamps: np.ndarray, total_ingested: int) -> float:
        """Refresh the cached rate from *timestamps* when due; return the current rate.

        *total_ingested* is the running count of samples ever pushed, used to
        decide when the recompute interval has elapsed.  Non-monotonic or
        degenerate timestamps keep the previous value.
        """
        if not self.due(total_ingested, int(timestamps.shape[0])):
            return self.rate_hz
        # Mark the attempt even when it fails so a stuck clock is not
        # re-examined on every sample.
        self._computed_at_total = total_ingested
        duration = float(timestamps[-1] - timestamps[0])
        if not math.isfinite(duration) or duration <= 0.0:
            LOGGER.warning(
                "Skipping sampling-rate update: degenerate timestamp span %.6fs over %d samples; "
                "keeping %.2f Hz",
                duration,
                timestamps.shape[0],
                self.rate_hz,
            )
            return self.rate_hz
        rate = (timestamps.shape[0] - 1) / duration
        if not math.isfinite(rate) or rate <= 0.0:
            LOGGER.warning("Skipping non-finite sampling-rate estimate %r", rate)
            return self.rate_hz
        if self._cached_rate_hz is None or abs(rate - self._cached_rate_hz) > 0.5:
            LOGGER.info("Estimated sampling rate: %.1f Hz", rate)
        self._cached_rate_hz = float(rate)
        return self._cached_rate_hz
