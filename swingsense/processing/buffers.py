"""Bounded circular sample storage.

``SampleBuffer`` keeps the most recent ``capacity`` samples as rows of a
preallocated numpy array; pushing past capacity overwrites the oldest
sample.  ``ChannelSnapshot`` is an ordered (oldest → newest) copy of the
derived channels that one detection pass works on.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from ..models import SAMPLE_FIELDS, Sample

_ROW_TIMESTAMP = 0
_ROWS_ACCEL = slice(1, 4)
_ROWS_GYRO = slice(4, 7)
_ROW_ACOUSTIC = 7


@dataclass(slots=True)
class ChannelSnapshot:
    timestamps: np.ndarray
    accel: np.ndarray
    gyro: np.ndarray
    acoustic: np.ndarray
    # Absolute sample number of index 0; survives eviction, unlike indices.
    first_absolute_index: int = 0

    def __len__(self) -> int:
        return int(self.timestamps.shape[0])

    def absolute_index(self, index: int) -> int:
        return self.first_absolute_index + index


@dataclass(slots=True)
class SampleBuffer:
    capacity: int
    data: np.ndarray = field(init=False)
    write_idx: int = 0
    count: int = 0
    # Samples pushed since the last clear(); count never exceeds capacity.
    total_pushed: int = 0

    def __post_init__(self) -> None:
        if self.capacity < 1:
            raise ValueError(f"SampleBuffer.capacity must be ≥1, got {self.capacity!r}")
        self.data = np.zeros((len(SAMPLE_FIELDS), self.capacity), dtype=np.float64)

    def __len__(self) -> int:
        return self.count

    def push(self, sample: Sample) -> None:
        """Append *sample*, evicting the oldest one when full.

        Indices into the buffer held across a push are invalidated.
        """
        self.data[:, self.write_idx] = sample.as_row()
        self.write_idx = (self.write_idx + 1) % self.capacity
        self.count = min(self.capacity, self.count + 1)
        self.total_pushed += 1

    def clear(self) -> None:
        self.data[:] = 0.0
        self.write_idx = 0
        self.count = 0
        self.total_pushed = 0

    @property
    def first_absolute_index(self) -> int:
        return self.total_pushed - self.count

    def absolute_index(self, index: int) -> int:
        return self.first_absolute_index + index

    def _ordered(self, rows: slice | int) -> np.ndarray:
        if self.count == 0:
            block = self.data[rows, :0]
            return block.copy()
        start = (self.write_idx - self.count) % self.capacity
        if start + self.count <= self.capacity:
            return self.data[rows, start : start + self.count].copy()
        return np.concatenate(
            (self.data[rows, start:], self.data[rows, : self.write_idx]),
            axis=-1,
        )

    def timestamps(self) -> np.ndarray:
        return self._ordered(_ROW_TIMESTAMP)

    def acoustic(self) -> np.ndarray:
        return self._ordered(_ROW_ACOUSTIC)

    def accel_magnitude(self) -> np.ndarray:
        return np.sqrt(np.sum(np.square(self._ordered(_ROWS_ACCEL)), axis=0))

    def gyro_magnitude(self) -> np.ndarray:
        return np.sqrt(np.sum(np.square(self._ordered(_ROWS_GYRO)), axis=0))

    def sample_at(self, index: int) -> Sample:
        """Return the sample at *index* (0 = oldest retained)."""
        if not 0 <= index < self.count:
            raise IndexError(f"buffer index {index} out of range for {self.count} samples")
        col = (self.write_idx - self.count + index) % self.capacity
        return Sample(*(float(v) for v in self.data[:, col]))

    def samples(self) -> list[Sample]:
        return [self.sample_at(i) for i in range(self.count)]

    def snapshot(self) -> ChannelSnapshot:
        block = self._ordered(slice(None))
        return ChannelSnapshot(
            timestamps=block[_ROW_TIMESTAMP],
            accel=np.sqrt(np.sum(np.square(block[_ROWS_ACCEL]), axis=0)),
            gyro=np.sqrt(np.sum(np.square(block[_ROWS_GYRO]), axis=0)),
            acoustic=block[_ROW_ACOUSTIC],
            first_absolute_index=self.first_absolute_index,
        )
