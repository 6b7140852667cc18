"""Fixed-length detection windows around impact candidates."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

import numpy as np

from .buffers import ChannelSnapshot


class WindowStatus(StrEnum):
    OK = "ok"
    # Not enough samples after the center yet; retry on a later pass.
    PENDING = "pending"
    # Start already evicted; the window can never be completed.
    EXPIRED = "expired"


@dataclass(slots=True)
class DetectionWindow:
    accel: np.ndarray
    gyro: np.ndarray
    acoustic: np.ndarray
    center_index: int
    center_timestamp: float
    start_index: int
    end_index: int
    sample_rate_hz: float

    @property
    def center_offset(self) -> int:
        return self.center_index - self.start_index

    def __len__(self) -> int:
        return self.end_index - self.start_index


def window_bounds(
    center_index: int,
    sample_rate_hz: float,
    pre_time_sec: float,
    post_time_sec: float,
) -> tuple[int, int]:
    """Half-open ``[start, end)`` sample range around *center_index*."""
    pre = int(round(pre_time_sec * sample_rate_hz))
    post = int(round(post_time_sec * sample_rate_hz))
    return center_index - pre, center_index + post


def extract_window(
    snapshot: ChannelSnapshot,
    center_index: int,
    sample_rate_hz: float,
    *,
    pre_time_sec: float,
    post_time_sec: float,
) -> tuple[WindowStatus, DetectionWindow | None]:
    """Slice all channels around *center_index*.

    Windows reaching outside the snapshot are never truncated: a clipped
    window would bias the spectral estimate.
    """
    start, end = window_bounds(center_index, sample_rate_hz, pre_time_sec, post_time_sec)
    if start < 0:
        return WindowStatus.EXPIRED, None
    if end > len(snapshot):
        return WindowStatus.PENDING, None
    window = DetectionWindow(
        accel=snapshot.accel[start:end],
        gyro=snapshot.gyro[start:end],
        acoustic=snapshot.acoustic[start:end],
        center_index=center_index,
        center_timestamp=float(snapshot.timestamps[center_index]),
        start_index=start,
        end_index=end,
        sample_rate_hz=float(sample_rate_hz),
    )
    return WindowStatus.OK, window
