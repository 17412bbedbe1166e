"""Запись отчёта в реляционную БД пачками multi-row INSERT.

Логика:
- Для каждой категории фиксированы имя/тип колонок (CATEGORY_COLUMNS).
- flush_record() раскладывает поля записи по этим колонкам (нет значения ->
  NULL) и добавляет кортеж значений в текущую пачку.
- Когда в пачке BATCH_SIZE (25) строк, выполняется один
  INSERT INTO [table] (...) VALUES (...), (...), ...
- close() досылает неполную пачку и делает ОДИН commit на весь отчёт.

Соединение одно на sink и принадлежит только ему: его создаёт сам sink
через переданную фабрику connect (DB-API 2.0, по умолчанию sqlite3).
Блокировки нет: к sink'у обращается только поток, который его создал.

Значения вставляются литералами (а не параметрами): так одна пачка
уходит одним оператором. Строки в одинарных кавычках, кавычки удваиваются.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from search_index.errors import SinkOpenError, SinkWriteError
from search_index.models import ReportCategory
from utils.logger import logger

from .base import ReportSink, Value, is_empty_value

BATCH_SIZE = 25

# (имя колонки, SQL-тип)
ColumnSpec = Tuple[str, str]

CATEGORY_COLUMNS: Dict[ReportCategory, List[ColumnSpec]] = {
    ReportCategory.FILE_REPORT: [
        ("WorkId", "BIGINT"),
        ("System_ComputerName", "TEXT"),
        ("System_ItemPathDisplay", "TEXT"),
        ("System_DateModified", "DATETIME"),
        ("System_DateCreated", "DATETIME"),
        ("System_DateAccessed", "DATETIME"),
        ("System_Size", "BIGINT"),
        ("System_FileOwner", "TEXT"),
        ("System_Search_AutoSummary", "TEXT"),
        ("System_Search_GatherTime", "DATETIME"),
        ("System_ItemType", "TEXT"),
    ],
    ReportCategory.ACTIVITY_HISTORY: [
        ("WorkId", "BIGINT"),
        ("System_ComputerName", "TEXT"),
        ("System_ItemNameDisplay", "TEXT"),
        ("System_ItemUrl", "TEXT"),
        ("System_ActivityHistory_StartTime", "DATETIME"),
        ("System_ActivityHistory_EndTime", "DATETIME"),
        ("System_Activity_AppDisplayName", "TEXT"),
        ("System_ActivityHistory_AppId", "TEXT"),
        ("System_Activity_DisplayText", "TEXT"),
        ("VolumeId", "TEXT"),
        ("ObjectId", "TEXT"),
        ("System_Activity_ContentUri", "TEXT"),
    ],
    ReportCategory.INTERNET_HISTORY: [
        ("WorkId", "BIGINT"),
        ("System_ComputerName", "TEXT"),
        ("System_ItemUrl", "TEXT"),
        ("System_ItemDate", "DATETIME"),
        ("System_Link_TargetUrl", "TEXT"),
        ("System_DateModified", "DATETIME"),
        ("System_Search_GatherTime", "DATETIME"),
        ("System_Title", "TEXT"),
        ("System_Link_DateVisited", "DATETIME"),
    ],
}


def sql_literal(value: Value) -> str:
    if is_empty_value(value):
        return "NULL"
    if isinstance(value, int):
        return str(value)
    return "'" + value.replace("'", "''") + "'"


def quote_identifier(name: str) -> str:
    return "[" + name.replace("]", "]]") + "]"


class BatchedSqlSink(ReportSink):
    """Отчёт в таблицу БД. Одна таблица и одно соединение на экземпляр."""

    def __init__(
        self,
        category: ReportCategory,
        table_name: str,
        connect: Callable[[], Any],
        *,
        batch_size: int = BATCH_SIZE,
        location: str = "",
    ) -> None:
        super().__init__(category)
        if category not in CATEGORY_COLUMNS:
            raise SinkOpenError(f"Invalid report category for SQL output: {category.name}")
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")

        self._table_name = table_name
        self._columns = CATEGORY_COLUMNS[category]
        self._column_names = {name for name, _ in self._columns}
        self._connect = connect
        self._batch_size = batch_size
        self._location = location

        self._conn: Optional[Any] = None
        self._table_ready = False

        # Текущая пачка: уже отформатированные кортежи значений
        self._batch: List[str] = []
        self._ignored_fields: Set[str] = set()

        self.statements_executed = 0

    # ------------------------------------------------------------------
    @property
    def output_path(self) -> str:
        if self._location:
            return f"{self._location}:{self._table_name}"
        return self._table_name

    @property
    def table_name(self) -> str:
        return self._table_name

    @property
    def pending_rows(self) -> int:
        return len(self._batch)

    # ------------------------------------------------------------------
    def start(self) -> None:
        try:
            self._conn = self._connect()
        except Exception as exc:
            raise SinkOpenError(f"Failed to connect to database {self._location}: {exc}") from exc

        self._ensure_table()
        logger.info(f"SQL output -> {self.output_path}")

    # ------------------------------------------------------------------
    def _write_record(self, values: Dict[str, Value], is_final: bool) -> bool:
        if self._conn is None:
            raise SinkWriteError("BatchedSqlSink is not started")

        for field in values:
            if field not in self._column_names and field not in self._ignored_fields:
                self._ignored_fields.add(field)
                logger.debug(f"{self.output_path}: no column for field '{field}', ignored")

        if all(is_empty_value(values.get(name)) for name, _ in self._columns):
            return False

        row = ", ".join(sql_literal(values.get(name)) for name, _ in self._columns)
        self._batch.append(f"({row})")

        if len(self._batch) >= self._batch_size:
            self._execute_batch()
        return True

    # ------------------------------------------------------------------
    def _finalize(self) -> None:
        if self._conn is None:
            return

        try:
            self._ensure_table()
            if self._batch:
                self._execute_batch()
            try:
                self._conn.commit()
            except Exception as exc:
                raise SinkWriteError(f"Failed to commit {self.output_path}: {exc}") from exc
            logger.info(f"Transaction committed: {self.output_path} ({self.records_written} records)")
        finally:
            self._conn.close()
            self._conn = None

    # ------------------------------------------------------------------
    def _ensure_table(self) -> None:
        if self._table_ready:
            return

        columns = ", ".join(f"{quote_identifier(name)} {sql_type} NULL" for name, sql_type in self._columns)
        query = f"CREATE TABLE IF NOT EXISTS {quote_identifier(self._table_name)} ({columns})"
        try:
            self._conn.cursor().execute(query)
        except Exception as exc:
            raise SinkOpenError(f"Failed to create table {self.output_path}: {exc}") from exc

        self._table_ready = True
        logger.debug(f"Executed SQL: {query}")

    def _execute_batch(self) -> None:
        columns = ", ".join(quote_identifier(name) for name, _ in self._columns)
        query = (
            f"INSERT INTO {quote_identifier(self._table_name)} ({columns}) "
            f"VALUES {', '.join(self._batch)};"
        )
        try:
            self._conn.cursor().execute(query)
        except Exception as exc:
            raise SinkWriteError(f"Failed to insert into {self.output_path}: {exc}") from exc

        self.statements_executed += 1
        self._batch = []
