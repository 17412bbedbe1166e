"""Курсор по Windows.edb (ESE / JET Blue) через dissect.esedb.

Разбор формата целиком делает библиотека. Здесь только:
- выбор таблицы PropertyStore
- позиционирование по уже прочитанному списку записей
- приведение значений обратно к сырым байтам (см. to_raw_bytes)
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from dissect.esedb import EseDB

from utils.logger import logger

from .cursor import TableCursor, to_raw_bytes
from .errors import ColumnReadError, DatabaseOpenError
from .models import ColumnInfo, DbState

# Подсказка для пользователя при проблемах с базой
ESENTUTL_MSG = (
    "Use esentutl for recovery (/r) and repair (/p).\n"
    "Note that esentutl must be run from a version of Windows that is equal to "
    "or newer than the one that generated the database."
)


class EseTableCursor(TableCursor):
    """Таблицы Windows.edb."""

    property_store_table = "SystemIndex_PropertyStore"

    def __init__(self, path: Union[str, Path], table_name: Optional[str] = None) -> None:
        super().__init__()
        self.path = Path(path)
        if table_name:
            self.property_store_table = table_name

        self._fh = None
        try:
            self._fh = self.path.open("rb")
            self._db = EseDB(self._fh)
        except Exception as exc:
            self.close()
            raise DatabaseOpenError(f"Error opening ESE database {self.path}: {exc}\n{ESENTUTL_MSG}") from exc

        self._tables: List[Any] = []
        self._records: Dict[int, List[Any]] = {}
        self._columns: Dict[int, List[ColumnInfo]] = {}

        logger.debug(f"Opened ESE database: {self.path}")

    # ------------------------------------------------------------------
    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    # ------------------------------------------------------------------
    def open_table(self, name: str) -> int:
        try:
            table = self._db.table(name)
        except KeyError as exc:
            raise DatabaseOpenError(f"Table not found in {self.path}: {name}") from exc

        table_id = len(self._tables)
        self._tables.append(table)
        self._columns[table_id] = [ColumnInfo(id=i, name=col.name) for i, col in enumerate(table.columns)]
        # Нужен произвольный доступ (обратный проход за hostname), поэтому список.
        self._records[table_id] = list(table.records())
        return table_id

    def get_columns(self, table: int) -> List[ColumnInfo]:
        return list(self._columns[table])

    def get_column(self, table: int, column_id: int) -> Optional[bytes]:
        column = self._columns[table][column_id]
        record = self._records[table][self.position(table)]
        try:
            return to_raw_bytes(record.get(column.name))
        except Exception as exc:
            raise ColumnReadError(f"{column.name}: {exc}") from exc

    def get_database_state(self) -> Optional[DbState]:
        return DbState.from_value(getattr(self._db.header, "dbstate", None))

    def _row_count(self, table: int) -> int:
        return len(self._records[table])
