from __future__ import annotations

import logging
from pathlib import Path

import pytest
from builders import make_sample

from swingsense.recording import SampleRecorder, read_samples_csv, write_samples_csv


class TestSampleRecorder:
    def test_disabled_by_default(self) -> None:
        recorder = SampleRecorder()
        recorder.record(make_sample(0.0))
        assert len(recorder) == 0

    def test_start_discards_previous_capture(self) -> None:
        recorder = SampleRecorder()
        recorder.start()
        recorder.record(make_sample(0.0))
        recorder.start()
        assert len(recorder) == 0

    def test_stop_keeps_capture(self) -> None:
        recorder = SampleRecorder()
        recorder.start()
        recorder.record(make_sample(0.0))
        recorder.stop()
        recorder.record(make_sample(1.0))
        assert [s.timestamp for s in recorder.samples] == [0.0]

    def test_bounded_with_single_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        recorder = SampleRecorder(max_samples=3)
        recorder.start()
        with caplog.at_level(logging.WARNING, logger="swingsense.recording"):
            for i in range(6):
                recorder.record(make_sample(float(i)))
        assert [s.timestamp for s in recorder.samples] == [3.0, 4.0, 5.0]
        assert caplog.text.count("oldest samples are now being dropped") == 1

    def test_rejects_non_positive_bound(self) -> None:
        with pytest.raises(ValueError):
            SampleRecorder(max_samples=0)

    def test_export_writes_file(self, tmp_path: Path) -> None:
        recorder = SampleRecorder()
        recorder.start()
        samples = [make_sample(i * 0.01, gx=0.1 * i, acoustic=1.0 / 3.0) for i in range(5)]
        for sample in samples:
            recorder.record(sample)
        path = tmp_path / "nested" / "rec.csv"
        text = recorder.export_csv(path)
        assert path.read_text(encoding="utf-8") == text
        assert list(read_samples_csv(path)) == samples


class TestCsvFormat:
    def test_header(self) -> None:
        text = write_samples_csv([])
        assert text == "timestamp,ax,ay,az,gx,gy,gz,acoustic_energy\n"

    def test_acoustic_column_optional(self, tmp_path: Path) -> None:
        path = tmp_path / "imu.csv"
        path.write_text("timestamp,ax,ay,az,gx,gy,gz\n0.5,0,0,9.81,1,2,3\n", encoding="utf-8")
        (sample,) = list(read_samples_csv(path))
        assert sample.az == 9.81
        assert sample.acoustic_energy == 0.0

    def test_missing_required_column(self, tmp_path: Path) -> None:
        path = tmp_path / "imu.csv"
        path.write_text("timestamp,ax,ay,az\n0,0,0,9.81\n", encoding="utf-8")
        with pytest.raises(ValueError, match="gx, gy, gz"):
            list(read_samples_csv(path))

    def test_bad_row_reports_line(self, tmp_path: Path) -> None:
        path = tmp_path / "imu.csv"
        path.write_text(
            "timestamp,ax,ay,az,gx,gy,gz\n0,0,0,9.81,0,0,0\n0.01,0,0,oops,0,0,0\n",
            encoding="utf-8",
        )
        with pytest.raises(ValueError, match=r"imu\.csv:3"):
            list(read_samples_csv(path))
