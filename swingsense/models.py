"""Value types flowing into and out of the swing analyzer.

Both types are immutable.  ``SwingEvent`` keeps the camelCase dict contract
consumed by the session recorder and live UI stable via
:meth:`SwingEvent.to_dict` / :meth:`SwingEvent.from_dict`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from .constants import MPS_TO_KMH

SAMPLE_FIELDS: tuple[str, ...] = (
    "timestamp",
    "ax",
    "ay",
    "az",
    "gx",
    "gy",
    "gz",
    "acoustic_energy",
)


def _as_float_or_none(value: object) -> float | None:
    if value in (None, ""):
        return None
    try:
        out = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if math.isnan(out) or math.isinf(out):
        return None
    return out


@dataclass(frozen=True, slots=True)
class Sample:
    """One IMU reading: acceleration (m/s²), angular velocity, acoustic RMS."""

    timestamp: float
    ax: float
    ay: float
    az: float
    gx: float
    gy: float
    gz: float
    acoustic_energy: float = 0.0

    @property
    def accel_magnitude(self) -> float:
        return math.sqrt(self.ax * self.ax + self.ay * self.ay + self.az * self.az)

    @property
    def gyro_magnitude(self) -> float:
        return math.sqrt(self.gx * self.gx + self.gy * self.gy + self.gz * self.gz)

    def is_finite(self) -> bool:
        return all(math.isfinite(getattr(self, name)) for name in SAMPLE_FIELDS)

    def as_row(self) -> list[float]:
        return [float(getattr(self, name)) for name in SAMPLE_FIELDS]

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Sample:
        """Build a sample from a mapping keyed by :data:`SAMPLE_FIELDS`.

        ``acoustic_energy`` may be absent (sensors without a microphone);
        every other field is required.
        """
        values: dict[str, float] = {}
        for name in SAMPLE_FIELDS:
            raw = payload.get(name)
            if raw in (None, "") and name == "acoustic_energy":
                values[name] = 0.0
                continue
            try:
                values[name] = float(raw)  # type: ignore[arg-type]
            except (TypeError, ValueError):
                raise ValueError(f"Sample field {name!r} has invalid value {raw!r}") from None
        return cls(**values)


@dataclass(frozen=True, slots=True)
class SwingEvent:
    timestamp: float
    max_angular_speed: float  # rad/s
    max_tip_speed: float  # m/s
    peak_acceleration: float  # m/s²
    impact_severity: float  # N
    estimated_force_n: float  # N
    duration_ms: int
    quality_passed: bool
    derived_speed_out: float | None = None  # m/s
    standardized_force: float | None = None  # N
    power_ratio: float = 0.0

    @property
    def max_tip_speed_kmh(self) -> float:
        return self.max_tip_speed * MPS_TO_KMH

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "maxAngularSpeed": self.max_angular_speed,
            "maxTipSpeed": self.max_tip_speed,
            "peakAcceleration": self.peak_acceleration,
            "impactSeverity": self.impact_severity,
            "estimatedForceN": self.estimated_force_n,
            "durationMs": self.duration_ms,
            "qualityPassed": self.quality_passed,
            "derivedSpeedOut": self.derived_speed_out,
            "standardizedForce": self.standardized_force,
            "powerRatio": self.power_ratio,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> SwingEvent:
        required = (
            "timestamp",
            "maxAngularSpeed",
            "maxTipSpeed",
            "peakAcceleration",
            "impactSeverity",
            "estimatedForceN",
        )
        values: dict[str, float] = {}
        for key in required:
            value = _as_float_or_none(payload.get(key))
            if value is None:
                raise ValueError(f"SwingEvent field {key!r} is missing or not finite")
            values[key] = value
        duration = _as_float_or_none(payload.get("durationMs"))
        return cls(
            timestamp=values["timestamp"],
            max_angular_speed=values["maxAngularSpeed"],
            max_tip_speed=values["maxTipSpeed"],
            peak_acceleration=values["peakAcceleration"],
            impact_severity=values["impactSeverity"],
            estimated_force_n=values["estimatedForceN"],
            duration_ms=int(round(duration)) if duration is not None else 0,
            quality_passed=bool(payload.get("qualityPassed", False)),
            derived_speed_out=_as_float_or_none(payload.get("derivedSpeedOut")),
            standardized_force=_as_float_or_none(payload.get("standardizedForce")),
            power_ratio=_as_float_or_none(payload.get("powerRatio")) or 0.0,
        )
