from datetime import datetime, timedelta, timezone

import pytest

from classifier.normalize import FILETIME_EPOCH

PROPERTY_STORE = "SystemIndex_PropertyStore"


def utf16(text: str) -> bytes:
    return text.encode("utf-16-le")


def u64(value: int) -> bytes:
    return value.to_bytes(8, "little")


def filetime(value: datetime) -> bytes:
    ticks = (value - FILETIME_EPOCH) // timedelta(microseconds=1) * 10
    return u64(ticks)


@pytest.fixture()
def fixed_now() -> datetime:
    """Время в именах отчётов для воспроизводимых путей."""
    return datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture()
def property_store_rows():
    """Четыре строки PropertyStore: файл, история IE, активность, ярлык .url.

    Последняя строка (ярлык) несёт чужое имя машины и при восстановлении
    hostname должна быть пропущена.
    """
    gathered = datetime(2023, 5, 6, 7, 8, 9, tzinfo=timezone.utc)
    return [
        {
            "WorkID": u64(1),
            "12-System_ItemPathDisplay": utf16("C:\\Users\\bob\\report.docx"),
            "13-System_Size": u64(1024),
            "14-System_Search_GatherTime": filetime(gathered),
            "20-System_ComputerName": utf16("HOST1"),
            "4450-System_ItemType": utf16(".docx"),
        },
        {
            "WorkID": u64(2),
            "20-System_ComputerName": utf16("HOST1"),
            "33-System_ItemUrl": utf16("iehistory://{S-1-5-21}/https://example.com/"),
            "40-System_Title": utf16("Example"),
        },
        {
            "WorkID": u64(3),
            "33-System_ItemUrl": utf16("ActivityHistory://{S-1-5-21}/app"),
            "4450-System_ItemType": utf16("ActivityHistoryItem"),
            "50-System_Activity_ContentUri": utf16(
                "file:///C:/a.txt?VolumeId={VOL-1}&ObjectId={OBJ-2}&KnownFolderId=Desktop"
            ),
            "51-System_Activity_AppDisplayName": utf16("Notepad"),
        },
        {
            "WorkID": u64(4),
            "20-System_ComputerName": utf16("OTHER"),
            "4450-System_ItemType": utf16(".URL"),
        },
    ]


@pytest.fixture()
def property_store(property_store_rows):
    return {PROPERTY_STORE: property_store_rows}
