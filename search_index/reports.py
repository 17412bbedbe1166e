"""Генерация отчётов по одной базе индекса Windows Search.

Этапы:
  1) Состояние базы (dirty / clean) и открытие PropertyStore
  2) Выбор нужных колонок по смысловой части имени
  3) Восстановление hostname: обратный проход от последней строки
  4) Три отчёта (File / Internet History / Activity History)
  5) Проход по строкам: column bag -> классификатор -> sink

Грязная база в режиме stdout: DirtyDatabaseError ДО создания отчётов,
чтобы в stdout не попало ни байта. В файловом режиме и режиме БД только
предупреждение; грязь влияет на имена файлов, но не на содержимое записей.
"""

from __future__ import annotations

import sys
from contextlib import ExitStack
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from tqdm import tqdm

from classifier.columns import (
    COMPUTER_NAME,
    DEFAULT_COLUMN_MAP,
    ITEM_TYPE,
    SELECTED_COLUMNS,
    WORK_ID_COLUMN,
    ColumnMap,
)
from classifier.normalize import column_string_part, from_utf16, u64_from_bytes
from classifier.records import classify_row
from storage.base import ReportSink
from storage.producer import ReportOutput, ReportProducer
from utils.logger import logger

from .cursor import TableCursor
from .ese_reader import ESENTUTL_MSG
from .errors import ColumnReadError, DirtyDatabaseError, EmptyTableError, HostnameNotFound
from .models import REPORT_CATEGORIES, ColumnInfo, DbState, ReportCategory, is_db_dirty

UNKNOWN_HOSTNAME = "Unknown"
URL_ITEM_TYPE = ".url"


@dataclass
class ReportSummary:
    """Итог обработки одной базы."""

    db_path: str
    hostname: str
    db_state: Optional[DbState]
    rows: int = 0
    records: Dict[ReportCategory, int] = field(default_factory=dict)
    outputs: Dict[ReportCategory, Optional[Path]] = field(default_factory=dict)

    @property
    def dirty(self) -> bool:
        return is_db_dirty(self.db_state)


# ---------------------------------------------------------------------------
# Колонки и hostname
# ---------------------------------------------------------------------------

def prepare_selected_columns(
    columns: Sequence[ColumnInfo],
    wanted: Sequence[str] = SELECTED_COLUMNS,
) -> List[ColumnInfo]:
    """Колонки таблицы, чья смысловая часть имени есть в wanted.

    Порядок: как в таблице. Каждая отсутствующая в таблице колонка
    сообщается предупреждением.
    """
    wanted_set = set(wanted)
    selected = [c for c in columns if column_string_part(c.name) in wanted_set]

    found = {column_string_part(c.name) for c in selected}
    for name in wanted:
        if name not in found:
            logger.warning(f"Requested column {name} not found in table columns")

    return selected


def _find_column(columns: Sequence[ColumnInfo], name: str) -> ColumnInfo:
    for column in columns:
        if column_string_part(column.name) == name:
            return column
    raise HostnameNotFound(f"Can't find field '{name}'")


def recover_hostname(cursor: TableCursor, table: int, columns: Sequence[ColumnInfo]) -> str:
    """System_ComputerName с конца таблицы.

    Строки, у которых System_ItemType == '.url' (без учёта регистра),
    пропускаются: у ярлыков в этом поле бывает чужое имя машины.
    Строка, колонку которой не удалось прочитать, тоже пропускается.
    После поиска курсор всегда возвращается на первую строку.

    Raises:
        EmptyTableError: в таблице нет строк
        HostnameNotFound: колонки нет или ни одна строка не подошла
    """
    if not cursor.move_last(table):
        raise EmptyTableError(f"Empty table {table}")

    try:
        computer_name = _find_column(columns, COMPUTER_NAME)
        item_type = _find_column(columns, ITEM_TYPE)

        while True:
            try:
                raw_name = cursor.get_column(table, computer_name.id)
                raw_type = cursor.get_column(table, item_type.id) if raw_name is not None else None
            except ColumnReadError as exc:
                logger.error(f"Error while getting hostname columns: {exc}")
                raw_name = None

            if raw_name is not None:
                if raw_type is None or from_utf16(raw_type).lower() != URL_ITEM_TYPE:
                    return from_utf16(raw_name)

            if not cursor.move_previous(table):
                break
    finally:
        cursor.move_first(table)

    raise HostnameNotFound("Empty field System_ComputerName")


# ---------------------------------------------------------------------------
# Проход по строкам
# ---------------------------------------------------------------------------

def _read_row(
    cursor: TableCursor,
    table: int,
    columns: Sequence[ColumnInfo],
    bag: Dict[str, bytes],
) -> Optional[int]:
    """Заполняет bag значениями текущей строки, возвращает WorkID."""
    work_id: Optional[int] = None
    for column in columns:
        try:
            raw = cursor.get_column(table, column.id)
        except ColumnReadError as exc:
            logger.error(f"Error while getting column {column.name}: {exc}")
            continue

        if raw is None:
            continue
        if column.name == WORK_ID_COLUMN:
            work_id = u64_from_bytes(raw)
        else:
            bag[column.name] = raw
    return work_id


def generate_reports(
    db_path: Union[str, Path],
    cursor: TableCursor,
    producer: ReportProducer,
    column_map: ColumnMap = DEFAULT_COLUMN_MAP,
    *,
    show_progress: bool = False,
    now: Optional[datetime] = None,
) -> ReportSummary:
    """Все отчёты по одной базе.

    Args:
        db_path: Путь к базе (для логов и сообщений об ошибках)
        cursor: Открытый курсор по базе
        producer: Фабрика отчётов запуска
        column_map: Квалифицированные ключи для правил классификации
        show_progress: Прогресс-бар tqdm по строкам (в stderr)
        now: Время в именах отчётов (одно на все три отчёта)

    Raises:
        DirtyDatabaseError: база грязная, а вывод идёт в stdout
        EmptyTableError: в PropertyStore нет строк
    """
    db_path = str(db_path)
    logger.info(f"Processing database: {db_path}")

    db_state = cursor.get_database_state()
    dirty = is_db_dirty(db_state)
    if dirty and producer.report_type is ReportOutput.STDOUT:
        raise DirtyDatabaseError(db_path)

    table_name = cursor.property_store_table
    table = cursor.open_table(table_name)
    if not cursor.move_first(table):
        raise EmptyTableError(f"Empty table {table_name}")

    columns = prepare_selected_columns(cursor.get_columns(table))

    try:
        hostname = recover_hostname(cursor, table, columns)
    except HostnameNotFound as exc:
        logger.warning(f"Hostname recovery failed: {exc}. Will use '{UNKNOWN_HOSTNAME}' as a hostname.")
        hostname = UNKNOWN_HOSTNAME

    summary = ReportSummary(db_path=db_path, hostname=hostname, db_state=db_state)
    now = now or datetime.now(timezone.utc)

    with ExitStack() as stack:
        reports: Dict[ReportCategory, ReportSink] = {}
        for category in REPORT_CATEGORIES:
            path, sink = producer.new_report(hostname, category.label, db_state, now)
            reports[category] = stack.enter_context(sink)
            summary.outputs[category] = path
            summary.records[category] = 0

        bag: Dict[str, bytes] = {}
        with tqdm(desc="Processing rows", unit="row", file=sys.stderr, disable=not show_progress) as pbar:
            while True:
                work_id = _read_row(cursor, table, columns, bag)
                classify_row(bag, work_id, reports, column_map)
                summary.rows += 1
                bag.clear()
                pbar.update(1)

                if not cursor.move_next(table):
                    break

    for category, sink in reports.items():
        summary.records[category] = sink.records_written

    if dirty:
        logger.warning("The database state is not clean.")
        logger.warning("Processing a dirty database may generate inaccurate and/or incomplete results.")
        logger.warning(ESENTUTL_MSG)

    logger.info(
        f"Done: {db_path} (host {hostname}, {summary.rows} rows, "
        + ", ".join(f"{c.message}={n}" for c, n in summary.records.items())
        + ")"
    )
    return summary
