"""
Фиксированные наборы колонок индекса и их нормализация по категориям отчётов.

Схему мы не выводим из базы: список ожидаемых колонок задан здесь,
а квалифицированные ключи для правил классификации передаются снаружи
(ColumnMap, по умолчанию из настроек).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List

from search_index.models import ReportCategory


class FieldKind(Enum):
    """Способ нормализации поля."""

    TEXT = "text"            # UTF-16 -> str
    FILETIME = "filetime"    # FILETIME -> ISO-8601
    SIZE = "size"            # u64 как есть
    CONTENT_URI = "uri"      # UTF-16 + производные VolumeId/ObjectId


WORK_ID_COLUMN = "WorkID"
WORK_ID_FIELD = "WorkId"

COMPUTER_NAME = "System_ComputerName"
ITEM_TYPE = "System_ItemType"
ITEM_URL = "System_ItemUrl"


@dataclass(frozen=True)
class ColumnMap:
    """Квалифицированные ключи колонок, участвующих в классификации."""

    item_url: str = "33-System_ItemUrl"
    item_type: str = "4450-System_ItemType"


DEFAULT_COLUMN_MAP = ColumnMap()


# ---------------------------------------------------------------------------
# Поля отчётов
# ---------------------------------------------------------------------------

FILE_REPORT_FIELDS: Dict[str, FieldKind] = {
    "System_ItemPathDisplay": FieldKind.TEXT,
    "System_DateModified": FieldKind.FILETIME,
    "System_DateCreated": FieldKind.FILETIME,
    "System_DateAccessed": FieldKind.FILETIME,
    "System_Size": FieldKind.SIZE,
    "System_FileOwner": FieldKind.TEXT,
    "System_Search_AutoSummary": FieldKind.TEXT,
    "System_Search_GatherTime": FieldKind.FILETIME,
    ITEM_TYPE: FieldKind.TEXT,
    COMPUTER_NAME: FieldKind.TEXT,
}

INTERNET_HISTORY_FIELDS: Dict[str, FieldKind] = {
    "System_DateModified": FieldKind.FILETIME,
    ITEM_URL: FieldKind.TEXT,
    "System_Link_TargetUrl": FieldKind.TEXT,
    "System_ItemDate": FieldKind.FILETIME,
    "System_Search_GatherTime": FieldKind.FILETIME,
    "System_Title": FieldKind.TEXT,
    "System_Link_DateVisited": FieldKind.FILETIME,
    COMPUTER_NAME: FieldKind.TEXT,
}

ACTIVITY_HISTORY_FIELDS: Dict[str, FieldKind] = {
    "System_ItemNameDisplay": FieldKind.TEXT,
    # TODO: извлекать UserSID из System_ItemUrl
    ITEM_URL: FieldKind.TEXT,
    "System_ActivityHistory_StartTime": FieldKind.FILETIME,
    "System_ActivityHistory_EndTime": FieldKind.FILETIME,
    "System_Activity_AppDisplayName": FieldKind.TEXT,
    "System_ActivityHistory_AppId": FieldKind.TEXT,
    "System_Activity_DisplayText": FieldKind.TEXT,
    "System_Activity_ContentUri": FieldKind.CONTENT_URI,
    COMPUTER_NAME: FieldKind.TEXT,
}

CATEGORY_FIELDS: Dict[ReportCategory, Dict[str, FieldKind]] = {
    ReportCategory.FILE_REPORT: FILE_REPORT_FIELDS,
    ReportCategory.INTERNET_HISTORY: INTERNET_HISTORY_FIELDS,
    ReportCategory.ACTIVITY_HISTORY: ACTIVITY_HISTORY_FIELDS,
}

# Поля, производные от System_Activity_ContentUri
VOLUME_ID_FIELD = "VolumeId"
OBJECT_ID_FIELD = "ObjectId"


# Колонки, которые читаются из таблицы (по смысловой части имени)
SELECTED_COLUMNS: List[str] = [
    COMPUTER_NAME,
    WORK_ID_COLUMN,
    # File Report
    "System_ItemPathDisplay",
    "System_DateModified",
    "System_DateCreated",
    "System_DateAccessed",
    "System_Size",
    "System_FileOwner",
    "System_Search_AutoSummary",
    "System_Search_GatherTime",
    ITEM_TYPE,
    # IE/Edge History Report
    ITEM_URL,
    "System_Link_TargetUrl",
    "System_ItemDate",
    "System_Title",
    "System_Link_DateVisited",
    # Activity History Report
    "System_ItemNameDisplay",
    "System_ActivityHistory_StartTime",
    "System_ActivityHistory_EndTime",
    "System_Activity_AppDisplayName",
    "System_ActivityHistory_AppId",
    "System_Activity_DisplayText",
    "System_Activity_ContentUri",
]
