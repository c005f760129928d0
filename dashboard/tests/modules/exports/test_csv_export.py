"""Tests for modules/exports/csv_export.py."""

import csv
import io

import pytest

from modules.exports.csv_export import (
    CsvExporter,
    build_export_filename,
    collect_headers,
    slugify_data_type,
    to_csv,
)
from modules.exports.exceptions import ExportWriteError, NoDataToExportError
from modules.exports.models import FileVariant

# 2025-10-09T08:53:20Z
NOW = 1_760_000_000_000


class TestFilenames:
    def test_slug(self):
        assert slugify_data_type("Attendance  Data") == "attendance-data"
        assert slugify_data_type(" Registrations ") == "registrations"

    @pytest.mark.parametrize("label,slug", [
        ("Attendance/Lesson Data", "attendance-lesson-data"),
        ("../../etc/passwd", "etc-passwd"),
        ("C:\\Reports\\Q1", "c-reports-q1"),
        ("///", "export"),
    ])
    def test_slug_never_names_a_directory(self, label, slug):
        assert slugify_data_type(label) == slug

    def test_plain(self):
        assert build_export_filename("Attendance Data", NOW) == "attendance-data-2025-10-09.csv"

    def test_unmasked(self):
        name = build_export_filename("Attendance Data", NOW, FileVariant.UNMASKED)
        assert name == "attendance-data-2025-10-09-unmasked.csv"

    def test_approved_with_request_id(self):
        name = build_export_filename("Attendance Data", NOW, FileVariant.APPROVED, 17)
        assert name == "attendance-data-2025-10-09-approved-17.csv"


class TestToCsv:
    def test_round_trip_of_special_characters(self):
        """Commas, quotes and newlines must survive emission and parsing."""
        tricky = 'Said "hi", then\nleft'
        text = to_csv([{"note": tricky, "n": 1}])
        rows = list(csv.reader(io.StringIO(text)))
        assert rows == [["note", "n"], [tricky, "1"]]

    def test_header_is_union_of_keys_in_first_seen_order(self):
        records = [{"a": 1, "b": 2}, {"c": 3, "a": 4}]
        assert collect_headers(records) == ["a", "b", "c"]
        assert to_csv(records).splitlines() == ["a,b,c", "1,2,", "4,,3"]

    def test_display_name_overrides(self):
        text = to_csv([{"students_present": 5}], headers={"students_present": "Students Present"})
        assert text.splitlines()[0] == "Students Present"

    def test_none_is_empty(self):
        assert to_csv([{"a": None, "b": 1}]).splitlines()[1] == ",1"


class TestCsvExporter:
    def test_emit_writes_file(self, tmp_path):
        exporter = CsvExporter(tmp_path / "out", clock=lambda: NOW)
        emitted = exporter.emit([{"a": 1}, {"a": 2}], "Attendance Data", FileVariant.UNMASKED)

        assert emitted.row_count == 2
        assert emitted.path == tmp_path / "out" / "attendance-data-2025-10-09-unmasked.csv"
        assert emitted.path.read_text(encoding="utf-8") == "a\n1\n2\n"

    def test_empty_dataset_raises(self, tmp_path):
        exporter = CsvExporter(tmp_path, clock=lambda: NOW)
        with pytest.raises(NoDataToExportError):
            exporter.emit([], "Attendance Data")
        assert list(tmp_path.iterdir()) == []

    def test_label_with_separators_stays_in_output_dir(self, tmp_path):
        out = tmp_path / "out"
        exporter = CsvExporter(out, clock=lambda: NOW)

        emitted = exporter.emit([{"a": 1}], "../Attendance/Lesson Data", FileVariant.APPROVED, 7)

        assert emitted.path.parent == out
        assert emitted.path.name == "attendance-lesson-data-2025-10-09-approved-7.csv"

    def test_write_failure_is_reported(self, tmp_path):
        blocker = tmp_path / "out"
        blocker.write_text("not a directory")
        exporter = CsvExporter(blocker, clock=lambda: NOW)

        with pytest.raises(ExportWriteError) as exc_info:
            exporter.emit([{"a": 1}], "Attendance Data")
        assert exc_info.value.code == "EXPORT_WRITE_FAILED"
