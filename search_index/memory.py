"""Курсор по строкам, уже лежащим в памяти.

Каждая строка: mapping 'квалифицированное имя колонки' -> сырые байты.
Колонки таблицы: объединение ключей всех строк в порядке первого появления.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence

from .cursor import TableCursor
from .errors import DatabaseOpenError
from .models import ColumnInfo, DbState


class MemoryTableCursor(TableCursor):
    """Таблицы из списков строк."""

    property_store_table = "SystemIndex_PropertyStore"

    def __init__(
        self,
        tables: Mapping[str, Sequence[Mapping[str, bytes]]],
        *,
        state: Optional[DbState] = DbState.CLEAN_SHUTDOWN,
    ) -> None:
        super().__init__()
        self._tables = {name: list(rows) for name, rows in tables.items()}
        self._state = state

        self._opened: List[str] = []
        self._columns: Dict[int, List[ColumnInfo]] = {}

    # ------------------------------------------------------------------
    def open_table(self, name: str) -> int:
        if name not in self._tables:
            raise DatabaseOpenError(f"Table not found: {name}")

        table_id = len(self._opened)
        self._opened.append(name)

        names: List[str] = []
        for row in self._tables[name]:
            for key in row:
                if key not in names:
                    names.append(key)
        self._columns[table_id] = [ColumnInfo(id=i, name=n) for i, n in enumerate(names)]
        return table_id

    def get_columns(self, table: int) -> List[ColumnInfo]:
        return list(self._columns[table])

    def get_column(self, table: int, column_id: int) -> Optional[bytes]:
        row = self._tables[self._opened[table]][self.position(table)]
        return row.get(self._columns[table][column_id].name)

    def get_database_state(self) -> Optional[DbState]:
        return self._state

    def _row_count(self, table: int) -> int:
        return len(self._tables[self._opened[table]])
