"""Shared physical and detection constants, single source of truth.

Every numeric literal that appears in more than one module should live here
so that a change only needs to happen in one place.  Values match the
offline analysis the live detector is calibrated against.
"""

from __future__ import annotations

import math
from typing import Final

# ---------------------------------------------------------------------------
# Unit conversion
# ---------------------------------------------------------------------------
DEG_TO_RAD: Final[float] = math.pi / 180.0
"""Multiply degrees-per-second by this to get radians-per-second."""

RAD_TO_DEG: Final[float] = 180.0 / math.pi
"""Multiply radians-per-second by this to get degrees-per-second."""

MPS_TO_KMH: Final[float] = 3.6

GYRO_UNITS: Final[tuple[str, ...]] = ("deg/s", "rad/s")

# ---------------------------------------------------------------------------
# Racket / shuttle physics
# ---------------------------------------------------------------------------
MOUNT_TO_TIP_M: Final[float] = 0.39
"""Distance from the sensor mount to the effective tip of the racket (m)."""

EFFECTIVE_TIP_MASS_KG: Final[float] = 0.15
"""Effective mass at the racket tip used for the impact-force estimate (kg)."""

RACKET_SENSOR_MASS_KG: Final[float] = 0.10
"""Racket (~90 g) plus sensor (~10 g), used for the swing-severity force (kg)."""

SHUTTLE_MASS_KG: Final[float] = 0.0053
SHUTTLE_VS_TIP_RATIO: Final[float] = 1.5
"""Outgoing shuttle speed relative to racket tip speed."""

INCOMING_SPEED_STD_MPS: Final[float] = 15.0
"""Standardised incoming shuttle speed for the rally-force estimate (m/s)."""

CONTACT_MS: Final[float] = 2.0
"""Racket/shuttle contact duration (ms)."""

# ---------------------------------------------------------------------------
# Detection tuning
# ---------------------------------------------------------------------------
DEFAULT_SAMPLING_RATE_HZ: Final[float] = 100.0
THRESH_STD_MULT: Final[float] = 1.0
MIN_SEP_SEC: Final[float] = 0.50
PRE_TIME_SEC: Final[float] = 0.50
POST_TIME_SEC: Final[float] = 0.50
SEARCH_RADIUS_SEC: Final[float] = 0.15
DURATION_MAX_GAP_SAMPLES: Final[int] = 1
"""Quiet derivative samples bridged when measuring the impact duration."""

MIC_PER_GYRO_THRESHOLD: Final[float] = 35.0
"""Static acoustic/gyro power-ratio threshold.  Calibrated on ~100-sample
(1.0 Hz resolution) windows; window-size dependent."""

POWER_RATIO_EPSILON: Final[float] = 1e-9
"""Added to the gyro power to prevent division-by-zero."""

MIN_SPECTRUM_SAMPLES: Final[int] = 5
"""Slices shorter than this produce no spectrum."""

ADAPTIVE_HISTORY_MAX: Final[int] = 50
ADAPTIVE_HISTORY_MIN: Final[int] = 10
ADAPTIVE_MEDIAN_FACTOR: Final[float] = 1.5
ADAPTIVE_THRESHOLD_BOUNDS: Final[tuple[float, float]] = (25.0, 50.0)

DUPLICATE_TOLERANCE: Final[float] = 0.15
"""Relative tip-speed/force difference below which two close events are one."""

# ---------------------------------------------------------------------------
# Quality gates (implausibility ceilings)
# ---------------------------------------------------------------------------
MAX_PLAUSIBLE_TIP_SPEED_MPS: Final[float] = 50.0
MAX_PLAUSIBLE_FORCE_N: Final[float] = 1000.0
MAX_PLAUSIBLE_DURATION_MS: Final[int] = 1500
