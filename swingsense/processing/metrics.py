"""Physical swing metrics from a time-domain detection window."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from ..constants import (
    CONTACT_MS,
    DEG_TO_RAD,
    DURATION_MAX_GAP_SAMPLES,
    INCOMING_SPEED_STD_MPS,
    MAX_PLAUSIBLE_DURATION_MS,
    MAX_PLAUSIBLE_FORCE_N,
    MAX_PLAUSIBLE_TIP_SPEED_MPS,
    SEARCH_RADIUS_SEC,
    SHUTTLE_MASS_KG,
    SHUTTLE_VS_TIP_RATIO,
)
from ..models import SwingEvent
from .peaks import abs_derivative, adaptive_derivative_threshold
from .validator import ValidationResult
from .windows import DetectionWindow


@dataclass(frozen=True, slots=True)
class MetricsParams:
    sensor_radius_m: float
    mass_kg: float
    swing_mass_kg: float
    gyro_units: str = "deg/s"
    threshold_std_mult: float = 1.0
    search_radius_sec: float = SEARCH_RADIUS_SEC


def _run_edge(elevated: np.ndarray, start: int, step: int, max_gap: int) -> int:
    """Last elevated index reached from *start* moving by *step*, tolerating short gaps."""
    edge = start
    gap = 0
    i = start + step
    while 0 <= i < elevated.size:
        if elevated[i]:
            edge = i
            gap = 0
        else:
            gap += 1
            if gap > max_gap:
                break
        i += step
    return edge


def elevated_duration_ms(
    accel: np.ndarray,
    sample_rate_hz: float,
    std_mult: float,
    *,
    center_offset: int | None = None,
    search_radius: int = 0,
    max_gap: int = DURATION_MAX_GAP_SAMPLES,
) -> int:
    """Length of the elevated-derivative run around the impact peak, in ms.

    The peak is the largest ``|d|`` within *search_radius* samples of
    *center_offset* (the whole window when ``None``).  The run grows in both
    directions while derivative samples stay above the window's
    mean + *std_mult* × std, bridging at most *max_gap* quiet samples, so
    isolated noise elsewhere in the window does not stretch it.
    """
    d = abs_derivative(accel)
    if d.size == 0 or sample_rate_hz <= 0:
        return 0
    limit = adaptive_derivative_threshold(d, std_mult)
    if center_offset is None:
        lo, hi = 0, d.size
    else:
        # Sample c sits between derivative entries c-1 and c.
        lo = max(0, center_offset - 1 - search_radius)
        hi = min(d.size, center_offset + search_radius + 1)
        if hi <= lo:
            return 0
    peak = lo + int(np.argmax(d[lo:hi]))
    if not d[peak] > limit:
        return 0
    elevated = d > limit
    first = _run_edge(elevated, peak, -1, max_gap)
    last = _run_edge(elevated, peak, 1, max_gap)
    return int(round((last - first + 1) / sample_rate_hz * 1000.0))


def derived_speed_out(max_tip_speed: float) -> float | None:
    """Estimated outgoing shuttle speed; ``None`` without a positive tip speed."""
    if not math.isfinite(max_tip_speed) or max_tip_speed <= 0:
        return None
    return max_tip_speed * SHUTTLE_VS_TIP_RATIO


def standardized_force(speed_out: float | None) -> float | None:
    """Rally force assuming a standard incoming shuttle speed."""
    if speed_out is None:
        return None
    return (SHUTTLE_MASS_KG * (speed_out + INCOMING_SPEED_STD_MPS)) / (CONTACT_MS / 1000.0)


def passes_quality_gates(
    *,
    max_angular_speed: float,
    max_tip_speed: float,
    peak_acceleration: float,
    estimated_force_n: float,
    impact_severity: float,
    duration_ms: int,
) -> bool:
    values = (
        max_angular_speed,
        max_tip_speed,
        peak_acceleration,
        estimated_force_n,
        impact_severity,
        float(duration_ms),
    )
    if not all(math.isfinite(v) and v >= 0 for v in values):
        return False
    return (
        max_tip_speed < MAX_PLAUSIBLE_TIP_SPEED_MPS
        and estimated_force_n < MAX_PLAUSIBLE_FORCE_N
        and duration_ms <= MAX_PLAUSIBLE_DURATION_MS
    )


def compute_swing_metrics(
    window: DetectionWindow,
    validation: ValidationResult,
    params: MetricsParams,
) -> SwingEvent:
    gyro_rad = window.gyro * DEG_TO_RAD if params.gyro_units == "deg/s" else window.gyro
    max_angular_speed = float(np.max(np.abs(gyro_rad))) if gyro_rad.size else 0.0
    max_tip_speed = max_angular_speed * params.sensor_radius_m

    peak_acceleration = float(np.max(window.accel)) if window.accel.size else 0.0
    estimated_force_n = params.mass_kg * peak_acceleration
    # Dynamic (gravity/DC-free) component drives the swing-side force.
    dynamic_peak = (
        float(np.max(np.abs(window.accel - np.mean(window.accel)))) if window.accel.size else 0.0
    )
    impact_severity = params.swing_mass_kg * dynamic_peak

    duration_ms = elevated_duration_ms(
        window.accel,
        window.sample_rate_hz,
        params.threshold_std_mult,
        center_offset=window.center_offset,
        search_radius=int(round(params.search_radius_sec * window.sample_rate_hz)),
    )
    speed_out = derived_speed_out(max_tip_speed)

    quality = validation.accepted and passes_quality_gates(
        max_angular_speed=max_angular_speed,
        max_tip_speed=max_tip_speed,
        peak_acceleration=peak_acceleration,
        estimated_force_n=estimated_force_n,
        impact_severity=impact_severity,
        duration_ms=duration_ms,
    )
    return SwingEvent(
        timestamp=window.center_timestamp,
        max_angular_speed=max_angular_speed,
        max_tip_speed=max_tip_speed,
        peak_acceleration=peak_acceleration,
        impact_severity=impact_severity,
        estimated_force_n=estimated_force_n,
        duration_ms=duration_ms,
        quality_passed=quality,
        derived_speed_out=speed_out,
        standardized_force=standardized_force(speed_out),
        power_ratio=validation.ratio,
    )
