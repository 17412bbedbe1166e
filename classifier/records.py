"""Классификация строки индекса и проекция её полей в отчёт.

Порядок проверок фиксирован:
  1) история IE/Edge    (System_ItemUrl: iehistory:// или winrt:// + профиль Edge)
  2) история активности (System_ItemType == 'ActivityHistoryItem')
  3) обычный файл       (всё остальное)

Категория 2 проверяется только если не сработала 1: в реальных данных
они не пересекаются, но если пересекутся, запись уйдёт в историю браузера.
"""

from __future__ import annotations

from typing import Mapping, Optional

from search_index.models import ReportCategory
from storage.base import ReportSink
from utils.logger import logger

from .columns import (
    CATEGORY_FIELDS,
    DEFAULT_COLUMN_MAP,
    OBJECT_ID_FIELD,
    VOLUME_ID_FIELD,
    WORK_ID_FIELD,
    ColumnMap,
    FieldKind,
)
from .normalize import column_string_part, filetime_to_iso, find_guid, from_utf16, u64_from_bytes

IE_HISTORY_PREFIX = "iehistory://"
WINRT_PREFIX = "winrt://"
EDGE_PROFILE_PATH = "/LS/Desktop/Microsoft Edge/stable/Default/"
ACTIVITY_HISTORY_ITEM = "ActivityHistoryItem"

ColumnBag = Mapping[str, bytes]


# ---------------------------------------------------------------------------
# Правила классификации
# ---------------------------------------------------------------------------

def is_internet_history(bag: ColumnBag, column_map: ColumnMap = DEFAULT_COLUMN_MAP) -> bool:
    raw = bag.get(column_map.item_url)
    if raw is None:
        return False
    url = from_utf16(raw)
    return url.startswith(IE_HISTORY_PREFIX) or (
        url.startswith(WINRT_PREFIX) and EDGE_PROFILE_PATH in url
    )


def is_activity_history(bag: ColumnBag, column_map: ColumnMap = DEFAULT_COLUMN_MAP) -> bool:
    raw = bag.get(column_map.item_type)
    if raw is None:
        return False
    return from_utf16(raw) == ACTIVITY_HISTORY_ITEM


def classify(bag: ColumnBag, column_map: ColumnMap = DEFAULT_COLUMN_MAP) -> ReportCategory:
    """Категория строки без записи в отчёт."""
    if is_internet_history(bag, column_map):
        return ReportCategory.INTERNET_HISTORY
    if is_activity_history(bag, column_map):
        return ReportCategory.ACTIVITY_HISTORY
    return ReportCategory.FILE_REPORT


# ---------------------------------------------------------------------------
# Проекция полей
# ---------------------------------------------------------------------------

def _insert_field(sink: ReportSink, field: str, kind: FieldKind, raw: bytes) -> None:
    if kind is FieldKind.TEXT:
        sink.insert_text(field, from_utf16(raw))
    elif kind is FieldKind.FILETIME:
        sink.insert_text(field, filetime_to_iso(raw))
    elif kind is FieldKind.SIZE:
        sink.insert_integer(field, u64_from_bytes(raw))
    elif kind is FieldKind.CONTENT_URI:
        uri = from_utf16(raw)
        sink.insert_text(VOLUME_ID_FIELD, find_guid(uri, "VolumeId="))
        sink.insert_text(OBJECT_ID_FIELD, find_guid(uri, "ObjectId="))
        sink.insert_text(field, uri)


def write_record(
    sink: ReportSink,
    work_id: Optional[int],
    bag: ColumnBag,
    fields: Mapping[str, FieldKind],
) -> bool:
    """Переносит известные поля строки в sink и сбрасывает запись.

    Ключи обходятся в лексикографическом порядке: порядок полей в отчёте
    воспроизводим. Поле, которое не удалось нормализовать, пропускается.

    Returns:
        True, если запись была записана (есть хотя бы одно непустое поле)
    """
    if work_id is not None:
        sink.insert_integer(WORK_ID_FIELD, work_id)

    for key in sorted(bag):
        field = column_string_part(key)
        kind = fields.get(field)
        if kind is None:
            continue
        try:
            _insert_field(sink, field, kind, bag[key])
        except ValueError as exc:
            logger.error(f"Can't convert column {key} (WorkId {work_id}): {exc}")

    # Запись без непустых значений не пишется, буфер при этом очищается
    return sink.flush_record()


def classify_row(
    bag: ColumnBag,
    work_id: Optional[int],
    reports: Mapping[ReportCategory, ReportSink],
    column_map: ColumnMap = DEFAULT_COLUMN_MAP,
) -> ReportCategory:
    """Классифицирует строку и пишет её в отчёт соответствующей категории."""
    category = classify(bag, column_map)
    write_record(reports[category], work_id, bag, CATEGORY_FIELDS[category])
    return category
