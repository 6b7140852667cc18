"""Swing analyzer: buffer management, detection passes and event emission.

``SwingAnalyzer`` is the stateful coordinator that owns the sample buffer,
the cached sampling rate, the validator's ratio history, and the
deduplicator, and runs the pure detection stages in
:mod:`~swingsense.processing.peaks`, :mod:`~swingsense.processing.windows`,
:mod:`~swingsense.processing.fft` and :mod:`~swingsense.processing.metrics`
in order.

Thread-safety is maintained through an internal :class:`threading.RLock`;
the ``@_synchronized`` decorator is applied to methods that read or mutate
analyzer state, so a detection pass never overlaps with another one.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from collections.abc import Iterable, Iterator
from functools import wraps
from pathlib import Path
from threading import RLock
from typing import Any

from ..config import AnalyzerConfig, AppConfig
from ..models import Sample, SwingEvent
from ..recording import SampleRecorder
from .buffers import SampleBuffer
from .dedup import Deduplicator
from .metrics import MetricsParams, compute_swing_metrics
from .peaks import find_candidate_peaks, min_separation_samples, refine_with_gyro
from .sampling_rate import SamplingRateEstimator
from .validator import SpectralValidator
from .windows import WindowStatus, extract_window

LOGGER = logging.getLogger(__name__)


def _synchronized(method):
    @wraps(method)
    def _wrapped(self: SwingAnalyzer, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)

    return _wrapped


class SwingAnalyzer:
    def __init__(
        self,
        config: AnalyzerConfig | None = None,
        *,
        recorder: SampleRecorder | None = None,
    ) -> None:
        self.config = config if config is not None else AnalyzerConfig()
        cfg = self.config
        self._lock = RLock()
        self._buffer = SampleBuffer(capacity=cfg.buffer_capacity)
        self._rate = SamplingRateEstimator(
            cfg.default_sampling_rate_hz,
            min_samples=cfg.min_samples_for_detection,
            recompute_interval=cfg.rate_recompute_interval,
        )
        self._validator = SpectralValidator(
            cfg.power_ratio_threshold,
            adaptive=cfg.use_adaptive_threshold,
            history_size=cfg.adaptive_history_size,
            min_history=cfg.adaptive_min_history,
            gyro_units=cfg.gyro_units,
        )
        self._dedup = Deduplicator(cfg.min_sep_seconds, cfg.duplicate_tolerance)
        self._metrics_params = MetricsParams(
            sensor_radius_m=cfg.sensor_radius_m,
            mass_kg=cfg.mass_kg,
            swing_mass_kg=cfg.swing_mass_kg,
            gyro_units=cfg.gyro_units,
            threshold_std_mult=cfg.threshold_std_mult,
            search_radius_sec=cfg.search_radius_sec,
        )
        self._recorder = recorder if recorder is not None else SampleRecorder()
        self._disposed = False
        self._init_run_state()

    @classmethod
    def from_app_config(cls, app_config: AppConfig) -> SwingAnalyzer:
        """Build an analyzer, with recording started when the config enables it."""
        recorder = SampleRecorder(max_samples=app_config.recording.max_samples)
        analyzer = cls(app_config.analyzer, recorder=recorder)
        if app_config.recording.enabled:
            analyzer.start_recording()
        return analyzer

    def _init_run_state(self) -> None:
        self._samples_since_pass = 0
        # Absolute sample numbers of candidate centers already evaluated.
        self._evaluated: deque[int] = deque()
        self._pending: deque[SwingEvent] = deque()
        self._hit_count = 0
        self._total_passes = 0
        self._total_rejected = 0
        self._total_suppressed = 0
        self._total_dropped_samples = 0
        self._last_pass_duration_s = 0.0

    # -- Ingestion ------------------------------------------------------------

    @_synchronized
    def push(self, sample: Sample) -> SwingEvent | None:
        """Ingest one sample; return at most one newly detected swing.

        Never raises for signal-quality problems: degenerate input is logged
        and absorbed so data collection continues uninterrupted.
        """
        if self._disposed:
            return None
        # Captures keep malformed samples so offline replays see the same input.
        self._recorder.record(sample)
        if not sample.is_finite():
            self._total_dropped_samples += 1
            LOGGER.warning("Dropping non-finite sample at t=%r", sample.timestamp)
            return self._pop_pending()

        self._buffer.push(sample)
        self._samples_since_pass += 1
        if self._rate.due(self._buffer.total_pushed, len(self._buffer)):
            self._rate.update(self._buffer.timestamps(), self._buffer.total_pushed)

        if (
            len(self._buffer) >= self.config.min_samples_for_detection
            and self._samples_since_pass >= self.config.min_new_samples_per_pass
        ):
            try:
                self._run_pass()
            except Exception:
                LOGGER.warning("Detection pass failed; skipping.", exc_info=True)
        return self._pop_pending()

    def iter_events(self, samples: Iterable[Sample]) -> Iterator[SwingEvent]:
        """Push every sample and yield emitted events as they occur."""
        for sample in samples:
            event = self.push(sample)
            if event is not None:
                yield event

    def _pop_pending(self) -> SwingEvent | None:
        return self._pending.popleft() if self._pending else None

    # -- Detection pass -------------------------------------------------------

    def _run_pass(self) -> None:
        t0 = time.monotonic()
        cfg = self.config
        self._samples_since_pass = 0
        self._total_passes += 1

        snapshot = self._buffer.snapshot()
        fs = self._rate.rate_hz
        candidates = find_candidate_peaks(
            snapshot.accel,
            fs,
            min_sep_seconds=cfg.min_sep_seconds,
            threshold=cfg.derivative_threshold,
            threshold_std_mult=cfg.threshold_std_mult,
            min_samples=cfg.min_samples_for_detection,
        )
        candidates = refine_with_gyro(candidates, snapshot.gyro, fs, cfg.search_radius_sec)

        min_sep = max(1, min_separation_samples(cfg.min_sep_seconds, fs))
        self._prune_evaluated(snapshot.first_absolute_index - min_sep)

        for cand in candidates:
            abs_center = snapshot.absolute_index(cand.center_index)
            if self._already_evaluated(abs_center, min_sep):
                continue
            status, window = extract_window(
                snapshot,
                cand.center_index,
                fs,
                pre_time_sec=cfg.pre_time_sec,
                post_time_sec=cfg.post_time_sec,
            )
            if status is WindowStatus.PENDING:
                LOGGER.debug("Deferring candidate #%d: window not complete yet", abs_center)
                continue
            self._evaluated.append(abs_center)
            if window is None:
                LOGGER.debug("Dropping candidate #%d: window start already evicted", abs_center)
                continue

            result = self._validator.evaluate(window)
            if not result.accepted:
                self._total_rejected += 1
                LOGGER.debug(
                    "Rejected candidate t=%.3fs ratio=%.2f (threshold=%.2f)",
                    window.center_timestamp,
                    result.ratio,
                    result.threshold,
                )
                continue

            event = compute_swing_metrics(window, result, self._metrics_params)
            if not self._dedup.offer(event).emitted:
                self._total_suppressed += 1
                continue
            self._hit_count += 1
            LOGGER.info(
                "Swing #%d detected t=%.3fs ratio=%.2f v_tip=%.1f km/h a_max=%.1f m/s² F=%.1f N",
                self._hit_count,
                event.timestamp,
                event.power_ratio,
                event.max_tip_speed_kmh,
                event.peak_acceleration,
                event.estimated_force_n,
            )
            self._pending.append(event)
        self._last_pass_duration_s = time.monotonic() - t0

    def _already_evaluated(self, abs_center: int, min_sep: int) -> bool:
        return any(abs(abs_center - seen) < min_sep for seen in self._evaluated)

    def _prune_evaluated(self, cutoff: int) -> None:
        if self._evaluated and min(self._evaluated) < cutoff:
            self._evaluated = deque(seen for seen in self._evaluated if seen >= cutoff)

    # -- Lifecycle ------------------------------------------------------------

    @_synchronized
    def reset(self) -> None:
        """Return to the initial state (session boundary).

        The recorder is left untouched so a finished session can still be
        exported.
        """
        self._buffer.clear()
        self._rate.reset()
        self._validator.reset()
        self._dedup.reset()
        self._init_run_state()
        LOGGER.info("Swing analyzer reset")

    @_synchronized
    def dispose(self) -> None:
        """Release held buffers; later pushes are ignored."""
        self._buffer.clear()
        self._pending.clear()
        self._evaluated.clear()
        self._recorder.clear()
        self._disposed = True

    # -- Recording ------------------------------------------------------------

    @_synchronized
    def start_recording(self) -> None:
        self._recorder.start()

    @_synchronized
    def stop_recording(self) -> None:
        self._recorder.stop()

    @_synchronized
    def export_recording_csv(self, path: Path | None = None) -> str:
        return self._recorder.export_csv(path)

    # -- Introspection --------------------------------------------------------

    @property
    def sampling_rate_hz(self) -> float:
        return self._rate.rate_hz

    @property
    def last_accepted_event(self) -> SwingEvent | None:
        return self._dedup.last_event

    @property
    def buffer_size(self) -> int:
        return len(self._buffer)

    @_synchronized
    def buffered_samples(self) -> list[Sample]:
        """Copy of the retained samples, oldest first."""
        return self._buffer.samples()

    @_synchronized
    def stats(self) -> dict[str, Any]:
        return {
            "hit_count": self._hit_count,
            "buffer_size": len(self._buffer),
            "total_ingested": self._buffer.total_pushed,
            "total_passes": self._total_passes,
            "total_detections": self._hit_count,
            "total_rejected": self._total_rejected,
            "total_suppressed": self._total_suppressed,
            "total_dropped_samples": self._total_dropped_samples,
            "pending_events": len(self._pending),
            "sampling_rate_hz": self._rate.rate_hz,
            "adaptive_threshold": self._validator.current_threshold(),
            "last_pass_duration_s": self._last_pass_duration_s,
            "recording": self._recorder.enabled,
            "recorded_samples": len(self._recorder),
        }
