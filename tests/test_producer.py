"""Tests for ReportProducer naming and sink selection."""
import io
from datetime import datetime, timezone

import pytest

from search_index.errors import OutputDirectoryError
from search_index.models import DbState
from storage import (
    BatchedSqlSink,
    CsvReportSink,
    JsonReportSink,
    ReportFormat,
    ReportOutput,
    ReportProducer,
)
from storage.producer import format_timestamp


class TestTimestamp:

    def test_whole_seconds(self, fixed_now):
        assert format_timestamp(fixed_now) == "20240102_030405"

    def test_milliseconds(self):
        value = datetime(2024, 1, 2, 3, 4, 5, 123000, tzinfo=timezone.utc)
        assert format_timestamp(value) == "20240102_030405.123"

    def test_microseconds(self):
        value = datetime(2024, 1, 2, 3, 4, 5, 123456, tzinfo=timezone.utc)
        assert format_timestamp(value) == "20240102_030405.123456"

    def test_without_fraction(self):
        value = datetime(2024, 1, 2, 3, 4, 5, 123456, tzinfo=timezone.utc)
        assert format_timestamp(value, fraction=False) == "20240102_030405"


class TestNaming:

    def test_report_path_clean(self, tmp_path, fixed_now):
        producer = ReportProducer(tmp_path)
        path = producer.report_path("HOST1", "File_Report", fixed_now, "json", DbState.CLEAN_SHUTDOWN)
        assert path == tmp_path / "HOST1_File_Report_20240102_030405.json"

    def test_report_path_dirty(self, tmp_path, fixed_now):
        producer = ReportProducer(tmp_path, ReportFormat.CSV)
        path = producer.report_path("HOST1", "File_Report", fixed_now, "csv", DbState.DIRTY_SHUTDOWN)
        assert path.name == "HOST1_File_Report_20240102_030405_dirty.csv"

    def test_unknown_state_is_not_dirty(self):
        assert ReportProducer.is_db_dirty(None) is False
        assert ReportProducer.is_db_dirty(DbState.CLEAN_SHUTDOWN) is False
        assert ReportProducer.is_db_dirty(DbState.FORCE_DETACH) is True

    def test_table_name(self, fixed_now):
        value = fixed_now.replace(microsecond=500)
        assert ReportProducer.table_name("HOST1", "Internet_History_Report", value) == (
            "HOST1_Internet_History_Report_20240102_030405"
        )


class TestOutputDirectory:

    def test_created_when_missing(self, tmp_path):
        target = tmp_path / "a" / "b"
        ReportProducer(target)
        assert target.is_dir()

    def test_creation_failure(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        with pytest.raises(OutputDirectoryError):
            ReportProducer(blocker / "sub")


class TestNewReport:

    def test_json_file(self, tmp_path, fixed_now):
        path, sink = ReportProducer(tmp_path).new_report("H", "File_Report", None, fixed_now)
        assert isinstance(sink, JsonReportSink)
        assert path == tmp_path / "H_File_Report_20240102_030405.json"
        assert sink.output_path == str(path)

    def test_csv_file(self, tmp_path, fixed_now):
        producer = ReportProducer(tmp_path, ReportFormat.CSV)
        path, sink = producer.new_report("H", "Activity_History_Report", DbState.DIRTY_SHUTDOWN, fixed_now)
        assert isinstance(sink, CsvReportSink)
        assert path.name == "H_Activity_History_Report_20240102_030405_dirty.csv"

    def test_stdout(self, tmp_path, fixed_now):
        stream = io.BytesIO()
        producer = ReportProducer(tmp_path, ReportFormat.CSV, ReportOutput.STDOUT, stdout=stream)
        path, sink = producer.new_report("H", "File_Report", None, fixed_now)
        assert path is None
        assert isinstance(sink, CsvReportSink)
        assert sink.to_stdout

    def test_database(self, tmp_path, fixed_now):
        producer = ReportProducer(tmp_path, report_type=ReportOutput.DATABASE, batch_size=10)
        path, sink = producer.new_report("H", "Internet_History_Report", DbState.DIRTY_SHUTDOWN, fixed_now)
        assert isinstance(sink, BatchedSqlSink)
        assert sink.table_name == "H_Internet_History_Report_20240102_030405"
        assert path == tmp_path / "H_Internet_History_Report_20240102_030405.sqlite3"

    def test_database_unknown_label_rejected(self, tmp_path, fixed_now):
        producer = ReportProducer(tmp_path, report_type=ReportOutput.DATABASE)
        with pytest.raises(ValueError):
            producer.new_report("H", "Something_Else", None, fixed_now)

    def test_unknown_label_file_report(self, tmp_path, fixed_now):
        path, sink = ReportProducer(tmp_path).new_report("H", "Something_Else", None, fixed_now)
        assert sink.category.label == "Unknown"
        assert path.name == "H_Something_Else_20240102_030405.json"

    def test_unsupported_format(self, tmp_path):
        with pytest.raises(ValueError):
            ReportProducer(tmp_path, "xml")
