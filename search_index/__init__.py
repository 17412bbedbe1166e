"""Модуль доступа к базам индекса Windows Search (Windows.edb / Windows.db).

Генерация отчётов (search_index.reports) импортируется явно:
она зависит от classifier и storage.
"""
from .models import ColumnInfo, DbState, ReportCategory, REPORT_CATEGORIES, is_db_dirty
from .cursor import TableCursor
from .memory import MemoryTableCursor
from .sqlite_reader import SqliteTableCursor
from .ese_reader import EseTableCursor

__all__ = [
    'ColumnInfo', 'DbState', 'ReportCategory', 'REPORT_CATEGORIES', 'is_db_dirty',
    'TableCursor', 'MemoryTableCursor', 'SqliteTableCursor', 'EseTableCursor',
]
