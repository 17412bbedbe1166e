"""Классификация строк индекса Windows Search и нормализация значений."""
from .columns import ColumnMap, DEFAULT_COLUMN_MAP, FieldKind, SELECTED_COLUMNS, CATEGORY_FIELDS
from .records import classify, classify_row, write_record
from .normalize import column_string_part, filetime_to_iso, find_guid, from_utf16, u64_from_bytes

__all__ = [
    'ColumnMap', 'DEFAULT_COLUMN_MAP', 'FieldKind', 'SELECTED_COLUMNS', 'CATEGORY_FIELDS',
    'classify', 'classify_row', 'write_record',
    'column_string_part', 'filetime_to_iso', 'find_guid', 'from_utf16', 'u64_from_bytes',
]
