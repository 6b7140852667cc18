"""In-session sample capture and CSV import/export.

Recording keeps a copy of every pushed sample (up to a bound), non-finite
ones included, so a live session can be exported and replayed offline with
``swingsense-replay``.
"""

from __future__ import annotations

import csv
import io
import logging
from collections import deque
from collections.abc import Iterator
from pathlib import Path

from .models import SAMPLE_FIELDS, Sample

LOGGER = logging.getLogger(__name__)

__all__ = [
    "SampleRecorder",
    "read_samples_csv",
    "write_samples_csv",
]


class SampleRecorder:
    def __init__(self, max_samples: int = 360_000) -> None:
        if max_samples < 1:
            raise ValueError(f"max_samples must be ≥1, got {max_samples!r}")
        self.max_samples = int(max_samples)
        self.enabled = False
        self._samples: deque[Sample] = deque(maxlen=self.max_samples)
        self._overflow_logged = False

    def __len__(self) -> int:
        return len(self._samples)

    @property
    def samples(self) -> list[Sample]:
        return list(self._samples)

    def start(self) -> None:
        """Begin a fresh recording, discarding any previous capture."""
        self._samples.clear()
        self._overflow_logged = False
        self.enabled = True
        LOGGER.info("Started sample recording (max %d samples)", self.max_samples)

    def stop(self) -> None:
        self.enabled = False
        LOGGER.info("Stopped sample recording; %d samples captured", len(self._samples))

    def clear(self) -> None:
        self._samples.clear()
        self._overflow_logged = False

    def record(self, sample: Sample) -> None:
        if not self.enabled:
            return
        if len(self._samples) == self.max_samples and not self._overflow_logged:
            LOGGER.warning(
                "Recording reached %d samples; oldest samples are now being dropped",
                self.max_samples,
            )
            self._overflow_logged = True
        self._samples.append(sample)

    def export_csv(self, path: Path | None = None) -> str:
        """Serialise the capture as CSV; also write it to *path* when given."""
        text = write_samples_csv(self._samples)
        if path is not None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
            LOGGER.info("Exported %d recorded samples to %s", len(self._samples), path)
        return text


def write_samples_csv(samples: deque[Sample] | list[Sample]) -> str:
    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(SAMPLE_FIELDS)
    for sample in samples:
        writer.writerow([repr(v) for v in sample.as_row()])
    return out.getvalue()


def read_samples_csv(path: Path) -> Iterator[Sample]:
    """Yield samples from a CSV with a :data:`~swingsense.models.SAMPLE_FIELDS` header.

    Raises :class:`ValueError` on a missing column or an unparseable row.
    """
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        header = reader.fieldnames or []
        missing = [name for name in SAMPLE_FIELDS if name != "acoustic_energy" and name not in header]
        if missing:
            raise ValueError(f"{path} is missing required columns: {', '.join(missing)}")
        for line_no, row in enumerate(reader, start=2):
            try:
                yield Sample.from_dict(row)
            except ValueError as exc:
                raise ValueError(f"{path}:{line_no}: {exc}") from None
