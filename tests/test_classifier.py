"""Tests for row classification and field projection."""
from typing import Dict, List

import pytest

from classifier.columns import DEFAULT_COLUMN_MAP, ColumnMap, FILE_REPORT_FIELDS
from classifier.records import classify, classify_row, write_record
from search_index.models import ReportCategory
from storage.base import ReportSink, Value
from conftest import u64, utf16


class ListSink(ReportSink):
    """Sink в память: записанные записи лежат в self.records."""

    def __init__(self, category: ReportCategory) -> None:
        super().__init__(category)
        self.records: List[Dict[str, Value]] = []

    @property
    def output_path(self) -> str:
        return "<memory>"

    def start(self) -> None:
        pass

    def _write_record(self, values, is_final):
        self.records.append(dict(values))

    def _finalize(self) -> None:
        pass


@pytest.fixture()
def reports():
    return {
        ReportCategory.FILE_REPORT: ListSink(ReportCategory.FILE_REPORT),
        ReportCategory.INTERNET_HISTORY: ListSink(ReportCategory.INTERNET_HISTORY),
        ReportCategory.ACTIVITY_HISTORY: ListSink(ReportCategory.ACTIVITY_HISTORY),
    }


def _written(reports) -> Dict[ReportCategory, int]:
    return {category: len(sink.records) for category, sink in reports.items()}


class TestClassify:

    def test_bag_without_url_and_type_is_file_record(self, reports):
        bag = {"12-System_ItemPathDisplay": utf16("C:\\a.txt")}
        category = classify_row(bag, 7, reports)

        assert category is ReportCategory.FILE_REPORT
        assert _written(reports) == {
            ReportCategory.FILE_REPORT: 1,
            ReportCategory.INTERNET_HISTORY: 0,
            ReportCategory.ACTIVITY_HISTORY: 0,
        }
        assert reports[ReportCategory.FILE_REPORT].records[0] == {
            "WorkId": 7,
            "System_ItemPathDisplay": "C:\\a.txt",
        }

    def test_iehistory_url_is_internet_history_only(self, reports):
        bag = {"33-System_ItemUrl": utf16("iehistory://example")}
        assert classify_row(bag, 1, reports) is ReportCategory.INTERNET_HISTORY
        assert _written(reports)[ReportCategory.INTERNET_HISTORY] == 1
        assert _written(reports)[ReportCategory.FILE_REPORT] == 0
        assert reports[ReportCategory.INTERNET_HISTORY].records[0]["System_ItemUrl"] == "iehistory://example"

    def test_winrt_edge_profile_is_internet_history(self):
        url = "winrt://{S-1-5-21}/LS/Desktop/Microsoft Edge/stable/Default/https://example.com"
        assert classify({"33-System_ItemUrl": utf16(url)}) is ReportCategory.INTERNET_HISTORY

    def test_winrt_without_edge_profile_is_not_internet_history(self):
        url = "winrt://{S-1-5-21}/LS/Desktop/Other/app"
        assert classify({"33-System_ItemUrl": utf16(url)}) is ReportCategory.FILE_REPORT

    def test_activity_history_item(self, reports):
        bag = {"4450-System_ItemType": utf16("ActivityHistoryItem")}
        assert classify_row(bag, 3, reports) is ReportCategory.ACTIVITY_HISTORY
        assert _written(reports)[ReportCategory.ACTIVITY_HISTORY] == 1

    def test_activity_item_type_is_case_sensitive(self):
        bag = {"4450-System_ItemType": utf16("activityhistoryitem")}
        assert classify(bag) is ReportCategory.FILE_REPORT

    def test_internet_history_wins_over_activity(self, reports):
        bag = {
            "33-System_ItemUrl": utf16("iehistory://example"),
            "4450-System_ItemType": utf16("ActivityHistoryItem"),
        }
        assert classify_row(bag, 5, reports) is ReportCategory.INTERNET_HISTORY
        assert _written(reports)[ReportCategory.ACTIVITY_HISTORY] == 0

    def test_column_map_changes_qualified_keys(self):
        column_map = ColumnMap(item_url="99-System_ItemUrl", item_type="98-System_ItemType")
        bag = {"99-System_ItemUrl": utf16("iehistory://example")}
        assert classify(bag, column_map) is ReportCategory.INTERNET_HISTORY
        assert classify(bag, DEFAULT_COLUMN_MAP) is ReportCategory.FILE_REPORT


class TestProjection:

    def test_fields_normalized_per_kind(self, reports):
        bag = {
            "13-System_Size": u64(4096),
            "15-System_DateModified": u64(0),
            "20-System_ComputerName": utf16("HOST1"),
        }
        classify_row(bag, 11, reports)
        record = reports[ReportCategory.FILE_REPORT].records[0]

        assert record == {
            "WorkId": 11,
            "System_Size": 4096,
            "System_DateModified": "1601-01-01T00:00:00.000000Z",
            "System_ComputerName": "HOST1",
        }

    def test_keys_visited_in_lexicographic_order(self, reports):
        bag = {
            "4450-System_ItemType": utf16(".txt"),
            "12-System_ItemPathDisplay": utf16("C:\\a.txt"),
            "20-System_ComputerName": utf16("HOST1"),
        }
        classify_row(bag, 1, reports)
        record = reports[ReportCategory.FILE_REPORT].records[0]
        assert list(record) == ["WorkId", "System_ItemPathDisplay", "System_ComputerName", "System_ItemType"]

    def test_content_uri_derives_volume_and_object_id(self, reports):
        bag = {
            "4450-System_ItemType": utf16("ActivityHistoryItem"),
            "50-System_Activity_ContentUri": utf16("VolumeId=ABC;ObjectId=XYZ;rest"),
        }
        classify_row(bag, 2, reports)
        record = reports[ReportCategory.ACTIVITY_HISTORY].records[0]

        assert record["VolumeId"] == "ABC"
        assert record["ObjectId"] == "XYZ"
        assert record["System_Activity_ContentUri"] == "VolumeId=ABC;ObjectId=XYZ;rest"
        assert list(record).index("VolumeId") < list(record).index("System_Activity_ContentUri")

    def test_unknown_columns_are_not_projected(self, reports):
        bag = {"77-System_Unrelated": utf16("x")}
        classify_row(bag, 1, reports)
        assert reports[ReportCategory.FILE_REPORT].records == [{"WorkId": 1}]

    def test_bad_value_skipped_rest_of_row_kept(self, reports):
        bag = {
            "15-System_DateModified": u64(2 ** 64 - 1),
            "12-System_ItemPathDisplay": utf16("C:\\a.txt"),
        }
        classify_row(bag, 1, reports)
        record = reports[ReportCategory.FILE_REPORT].records[0]
        assert "System_DateModified" not in record
        assert record["System_ItemPathDisplay"] == "C:\\a.txt"


class TestWriteRecord:

    def test_record_without_values_is_not_flushed(self):
        sink = ListSink(ReportCategory.FILE_REPORT)
        assert write_record(sink, None, {}, FILE_REPORT_FIELDS) is False
        assert sink.records == []

    def test_empty_string_values_are_not_flushed(self):
        sink = ListSink(ReportCategory.FILE_REPORT)
        bag = {"12-System_ItemPathDisplay": b""}
        assert write_record(sink, None, bag, FILE_REPORT_FIELDS) is False
        assert sink.records == []

    def test_work_id_alone_is_a_record(self):
        sink = ListSink(ReportCategory.FILE_REPORT)
        assert write_record(sink, 0, {}, FILE_REPORT_FIELDS) is True
        assert sink.records == [{"WorkId": 0}]
