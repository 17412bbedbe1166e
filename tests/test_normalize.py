"""Tests for raw column value normalization."""
from datetime import datetime, timezone

import pytest

from classifier.normalize import (
    column_string_part,
    filetime_to_datetime,
    filetime_to_iso,
    find_guid,
    format_date_time,
    from_utf16,
    u64_from_bytes,
)
from conftest import filetime, u64, utf16


class TestColumnStringPart:

    def test_strips_numeric_prefix(self):
        assert column_string_part("4450-System_ItemType") == "System_ItemType"

    def test_name_without_prefix_unchanged(self):
        assert column_string_part("WorkID") == "WorkID"

    def test_non_numeric_prefix_unchanged(self):
        assert column_string_part("abc-System_Title") == "abc-System_Title"


class TestDecoding:

    def test_utf16_drops_trailing_nul(self):
        assert from_utf16(utf16("HOST1") + b"\x00\x00") == "HOST1"

    def test_utf16_non_ascii(self):
        assert from_utf16(utf16("Отчёт.docx")) == "Отчёт.docx"

    def test_u64_little_endian(self):
        assert u64_from_bytes(u64(0x0102030405060708)) == 0x0102030405060708

    def test_u64_short_value(self):
        assert u64_from_bytes(b"\x2a\x00\x00\x00") == 42

    def test_u64_ignores_extra_bytes(self):
        assert u64_from_bytes(u64(7) + b"\xff") == 7


class TestFiletime:

    def test_epoch(self):
        assert filetime_to_iso(u64(0)) == "1601-01-01T00:00:00.000000Z"

    def test_round_trip_with_microseconds(self):
        value = datetime(2023, 5, 6, 7, 8, 9, 123456, tzinfo=timezone.utc)
        assert filetime_to_iso(filetime(value)) == "2023-05-06T07:08:09.123456Z"

    def test_out_of_range_raises_value_error(self):
        with pytest.raises(ValueError):
            filetime_to_datetime(2 ** 64 - 1)

    def test_format_date_time_uses_utc(self):
        value = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert format_date_time(value) == "2024-01-02T03:04:05.000000Z"


class TestFindGuid:

    def test_semicolon_delimited(self):
        text = "VolumeId=ABC;ObjectId=XYZ;rest"
        assert find_guid(text, "VolumeId=") == "ABC"
        assert find_guid(text, "ObjectId=") == "XYZ"

    def test_ampersand_delimited(self):
        text = "file:///C:/a.txt?VolumeId={V}&ObjectId={O}&KnownFolderId=Desktop"
        assert find_guid(text, "VolumeId=") == "{V}"
        assert find_guid(text, "ObjectId=") == "{O}"

    def test_marker_at_end(self):
        assert find_guid("x?ObjectId={O}", "ObjectId=") == "{O}"

    def test_missing_marker(self):
        assert find_guid("no ids here", "VolumeId=") == ""
