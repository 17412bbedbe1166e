"""Курсор по Windows.db (индекс Windows Search в формате SQLite, Windows 11).

Данные хранятся "вертикально":
    SystemIndex_1_PropertyStore          (WorkId, ColumnId, Value)
    SystemIndex_1_PropertyStore_Metadata (Id, UniqueKey, ...)

UniqueKey совпадает с квалифицированным именем колонки ESE
('4450-System_ItemType'), поэтому одна строка курсора = один WorkId,
а колонки = записи таблицы метаданных плюс служебная WorkID.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Dict, List, Optional, Union

from utils.logger import logger

from .cursor import TableCursor, to_raw_bytes
from .errors import ColumnReadError, DatabaseOpenError
from .models import ColumnInfo, DbState

PROPERTY_STORE = "SystemIndex_1_PropertyStore"
PROPERTY_STORE_METADATA = "SystemIndex_1_PropertyStore_Metadata"

# Служебная колонка идентификатора записи (в метаданных её нет)
WORK_ID_COLUMN = ColumnInfo(id=-1, name="WorkID")


class SqliteTableCursor(TableCursor):
    """Windows.db: единственная таблица PropertyStore."""

    property_store_table = PROPERTY_STORE

    def __init__(self, path: Union[str, Path]) -> None:
        super().__init__()
        self.path = Path(path)

        try:
            # Только чтение: это улика, базу не трогаем.
            self._conn = sqlite3.connect(f"{self.path.resolve().as_uri()}?mode=ro", uri=True)
        except sqlite3.Error as exc:
            raise DatabaseOpenError(f"Error opening SQLite database {self.path}: {exc}") from exc

        self._columns: List[ColumnInfo] = []
        self._work_ids: List[int] = []

        # Кэш значений текущей строки: (позиция, {ColumnId: bytes})
        self._row_cache: Optional[tuple] = None

        logger.debug(f"Opened SQLite database: {self.path}")

    # ------------------------------------------------------------------
    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    # ------------------------------------------------------------------
    def open_table(self, name: str) -> int:
        if name != PROPERTY_STORE:
            raise DatabaseOpenError(f"Table not supported for {self.path}: {name}")

        try:
            meta = self._conn.execute(
                f"SELECT Id, UniqueKey FROM {PROPERTY_STORE_METADATA} ORDER BY Id"
            ).fetchall()
            work_ids = self._conn.execute(
                f"SELECT DISTINCT WorkId FROM {PROPERTY_STORE} ORDER BY WorkId"
            ).fetchall()
        except sqlite3.Error as exc:
            raise DatabaseOpenError(f"Can't read {name} from {self.path}: {exc}") from exc

        self._columns = [WORK_ID_COLUMN] + [ColumnInfo(id=int(i), name=str(key)) for i, key in meta]
        self._work_ids = [int(w) for (w,) in work_ids]
        self._row_cache = None
        return 0

    def get_columns(self, table: int) -> List[ColumnInfo]:
        return list(self._columns)

    def get_column(self, table: int, column_id: int) -> Optional[bytes]:
        work_id = self._work_ids[self.position(table)]
        if column_id == WORK_ID_COLUMN.id:
            return work_id.to_bytes(8, "little")
        return self._current_row(table, work_id).get(column_id)

    def get_database_state(self) -> Optional[DbState]:
        # У SQLite нет аналога dirty shutdown в заголовке
        return DbState.CLEAN_SHUTDOWN

    def _row_count(self, table: int) -> int:
        return len(self._work_ids)

    # ------------------------------------------------------------------
    def _current_row(self, table: int, work_id: int) -> Dict[int, bytes]:
        position = self.position(table)
        if self._row_cache is not None and self._row_cache[0] == position:
            return self._row_cache[1]

        try:
            rows = self._conn.execute(
                f"SELECT ColumnId, Value FROM {PROPERTY_STORE} WHERE WorkId = ?",
                (work_id,),
            ).fetchall()
            values = {int(column_id): to_raw_bytes(value) for column_id, value in rows}
        except (sqlite3.Error, TypeError) as exc:
            raise ColumnReadError(f"WorkId {work_id}: {exc}") from exc

        self._row_cache = (position, values)
        return values
