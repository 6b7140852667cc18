from __future__ import annotations

import logging
import math
from copy import deepcopy
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from .constants import (
    ADAPTIVE_HISTORY_MAX,
    ADAPTIVE_HISTORY_MIN,
    DEFAULT_SAMPLING_RATE_HZ,
    DUPLICATE_TOLERANCE,
    EFFECTIVE_TIP_MASS_KG,
    GYRO_UNITS,
    MIC_PER_GYRO_THRESHOLD,
    MIN_SEP_SEC,
    MOUNT_TO_TIP_M,
    POST_TIME_SEC,
    PRE_TIME_SEC,
    RACKET_SENSOR_MASS_KG,
    SEARCH_RADIUS_SEC,
    THRESH_STD_MULT,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG: dict[str, Any] = {
    "analyzer": {
        "buffer_capacity": 1000,
        "min_new_samples_per_pass": 20,
        "min_samples_for_detection": 100,
        "rate_recompute_interval": 100,
        "pre_time_sec": PRE_TIME_SEC,
        "post_time_sec": POST_TIME_SEC,
        "min_sep_seconds": MIN_SEP_SEC,
        "search_radius_sec": SEARCH_RADIUS_SEC,
        "threshold_std_mult": THRESH_STD_MULT,
        "derivative_threshold": None,
        "power_ratio_threshold": MIC_PER_GYRO_THRESHOLD,
        "use_adaptive_threshold": False,
        "adaptive_history_size": ADAPTIVE_HISTORY_MAX,
        "adaptive_min_history": ADAPTIVE_HISTORY_MIN,
        "duplicate_tolerance": DUPLICATE_TOLERANCE,
        "sensor_radius_m": MOUNT_TO_TIP_M,
        "mass_kg": EFFECTIVE_TIP_MASS_KG,
        "swing_mass_kg": RACKET_SENSOR_MASS_KG,
        "default_sampling_rate_hz": DEFAULT_SAMPLING_RATE_HZ,
        "gyro_units": "deg/s",
    },
    "recording": {
        "enabled": False,
        "max_samples": 360_000,
    },
    "logging": {
        "level": "INFO",
    },
}

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _analyzer_default(name: str) -> Any:
    return DEFAULT_CONFIG["analyzer"][name]


@dataclass(slots=True)
class AnalyzerConfig:
    """Construction-time options for :class:`~swingsense.processing.SwingAnalyzer`.

    Invalid values raise :class:`ValueError` immediately; a misconfigured
    analyzer must never start.
    """

    buffer_capacity: int = _analyzer_default("buffer_capacity")
    min_new_samples_per_pass: int = _analyzer_default("min_new_samples_per_pass")
    min_samples_for_detection: int = _analyzer_default("min_samples_for_detection")
    rate_recompute_interval: int = _analyzer_default("rate_recompute_interval")
    pre_time_sec: float = _analyzer_default("pre_time_sec")
    post_time_sec: float = _analyzer_default("post_time_sec")
    min_sep_seconds: float = _analyzer_default("min_sep_seconds")
    search_radius_sec: float = _analyzer_default("search_radius_sec")
    threshold_std_mult: float = _analyzer_default("threshold_std_mult")
    derivative_threshold: float | None = _analyzer_default("derivative_threshold")
    power_ratio_threshold: float = _analyzer_default("power_ratio_threshold")
    use_adaptive_threshold: bool = _analyzer_default("use_adaptive_threshold")
    adaptive_history_size: int = _analyzer_default("adaptive_history_size")
    adaptive_min_history: int = _analyzer_default("adaptive_min_history")
    duplicate_tolerance: float = _analyzer_default("duplicate_tolerance")
    sensor_radius_m: float = _analyzer_default("sensor_radius_m")
    mass_kg: float = _analyzer_default("mass_kg")
    swing_mass_kg: float = _analyzer_default("swing_mass_kg")
    default_sampling_rate_hz: float = _analyzer_default("default_sampling_rate_hz")
    gyro_units: str = _analyzer_default("gyro_units")

    def __post_init__(self) -> None:
        # --- positive-integer guards -----------------------------------------
        for name in (
            "buffer_capacity",
            "min_new_samples_per_pass",
            "min_samples_for_detection",
            "rate_recompute_interval",
            "adaptive_history_size",
            "adaptive_min_history",
        ):
            val = getattr(self, name)
            if isinstance(val, bool) or not isinstance(val, int) or val < 1:
                raise ValueError(f"AnalyzerConfig.{name} must be an integer ≥1, got {val!r}")

        # --- positive-float guards -------------------------------------------
        for name in (
            "pre_time_sec",
            "post_time_sec",
            "power_ratio_threshold",
            "sensor_radius_m",
            "mass_kg",
            "swing_mass_kg",
            "default_sampling_rate_hz",
        ):
            val = getattr(self, name)
            if not _is_number(val) or val <= 0:
                raise ValueError(f"AnalyzerConfig.{name} must be a positive number, got {val!r}")

        for name in (
            "min_sep_seconds",
            "search_radius_sec",
            "threshold_std_mult",
            "duplicate_tolerance",
        ):
            val = getattr(self, name)
            if not _is_number(val) or val < 0:
                raise ValueError(f"AnalyzerConfig.{name} must be ≥0, got {val!r}")

        if self.derivative_threshold is not None and (
            not _is_number(self.derivative_threshold) or self.derivative_threshold <= 0
        ):
            raise ValueError(
                "AnalyzerConfig.derivative_threshold must be positive or None, "
                f"got {self.derivative_threshold!r}"
            )
        if not isinstance(self.use_adaptive_threshold, bool):
            raise ValueError(
                "AnalyzerConfig.use_adaptive_threshold must be a bool, "
                f"got {self.use_adaptive_threshold!r}"
            )
        if self.gyro_units not in GYRO_UNITS:
            raise ValueError(
                f"AnalyzerConfig.gyro_units must be one of {GYRO_UNITS}, got {self.gyro_units!r}"
            )

        # --- cross-field checks ----------------------------------------------
        if self.min_samples_for_detection > self.buffer_capacity:
            raise ValueError(
                f"AnalyzerConfig.min_samples_for_detection={self.min_samples_for_detection} "
                f"exceeds buffer_capacity={self.buffer_capacity}; detection could never run"
            )
        if self.adaptive_min_history > self.adaptive_history_size:
            raise ValueError(
                f"AnalyzerConfig.adaptive_min_history={self.adaptive_min_history} "
                f"exceeds adaptive_history_size={self.adaptive_history_size}"
            )
        window_samples = self.window_samples(self.default_sampling_rate_hz)
        if window_samples > self.buffer_capacity:
            raise ValueError(
                f"Detection window of {window_samples} samples at "
                f"{self.default_sampling_rate_hz} Hz does not fit in "
                f"buffer_capacity={self.buffer_capacity}"
            )

    def window_samples(self, sample_rate_hz: float) -> int:
        """Total pre+post window length in samples at *sample_rate_hz*."""
        pre = int(round(self.pre_time_sec * sample_rate_hz))
        post = int(round(self.post_time_sec * sample_rate_hz))
        return pre + post


def _is_number(value: object) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(float(value))
    )


@dataclass(slots=True)
class RecordingConfig:
    enabled: bool
    max_samples: int

    def __post_init__(self) -> None:
        if not isinstance(self.enabled, bool):
            raise ValueError(f"RecordingConfig.enabled must be true or false, got {self.enabled!r}")
        if isinstance(self.max_samples, bool) or not isinstance(self.max_samples, int):
            raise ValueError(f"RecordingConfig.max_samples must be an integer, got {self.max_samples!r}")
        if self.max_samples < 1:
            raise ValueError(f"RecordingConfig.max_samples must be ≥1, got {self.max_samples!r}")


@dataclass(slots=True)
class AppConfig:
    analyzer: AnalyzerConfig
    recording: RecordingConfig
    log_level: str = "INFO"
    config_path: Path | None = field(default=None)


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path} must contain a YAML object at the top level.")
        return data


def _coerce(name: str, raw: Any, default: Any) -> Any:
    """Coerce a YAML scalar to the type of its default, rejecting garbage."""
    if raw is None:
        return None if default is None else default
    if isinstance(default, bool):
        if not isinstance(raw, bool):
            raise ValueError(f"analyzer.{name} must be true or false, got {raw!r}")
        return raw
    if isinstance(raw, bool):
        raise ValueError(f"analyzer.{name} has invalid value {raw!r}")
    try:
        if isinstance(default, int):
            if isinstance(raw, float) and not raw.is_integer():
                raise ValueError
            return int(raw)
        if isinstance(default, float) or default is None:
            return float(raw)
    except (TypeError, ValueError):
        raise ValueError(f"analyzer.{name} has invalid value {raw!r}") from None
    return str(raw)


def analyzer_config_from_dict(section: dict[str, Any]) -> AnalyzerConfig:
    """Build an :class:`AnalyzerConfig` from a (partial) ``analyzer`` mapping."""
    defaults = DEFAULT_CONFIG["analyzer"]
    known = {f.name for f in fields(AnalyzerConfig)}
    unknown = sorted(set(section) - known)
    if unknown:
        LOGGER.warning("Ignoring unknown analyzer config keys: %s", ", ".join(unknown))
    kwargs = {
        name: _coerce(name, section.get(name, defaults[name]), defaults[name])
        for name in known
    }
    return AnalyzerConfig(**kwargs)


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load an :class:`AppConfig` from YAML, deep-merged over :data:`DEFAULT_CONFIG`.

    Without *config_path* the built-in defaults are returned.
    """
    path = config_path.resolve() if config_path is not None else None
    override = _read_config_file(path) if path is not None else {}
    merged = _deep_merge(deepcopy(DEFAULT_CONFIG), override)

    analyzer_section = merged.get("analyzer")
    if not isinstance(analyzer_section, dict):
        raise ValueError("analyzer must be a YAML mapping.")
    analyzer = analyzer_config_from_dict(analyzer_section)

    recording_cfg = merged.get("recording") or {}
    recording = RecordingConfig(
        enabled=recording_cfg.get("enabled", False),
        max_samples=recording_cfg.get("max_samples", DEFAULT_CONFIG["recording"]["max_samples"]),
    )

    log_level = str((merged.get("logging") or {}).get("level", "INFO")).upper()
    if log_level not in _LOG_LEVELS:
        raise ValueError(f"logging.level must be one of {_LOG_LEVELS}, got {log_level!r}")

    app_config = AppConfig(
        analyzer=analyzer,
        recording=recording,
        log_level=log_level,
        config_path=path,
    )
    LOGGER.info(
        "Loaded config=%s adaptive_threshold=%s buffer_capacity=%d",
        app_config.config_path,
        analyzer.use_adaptive_threshold,
        analyzer.buffer_capacity,
    )
    return app_config
