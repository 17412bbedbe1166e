"""Главный скрипт: отчёты по индексу Windows Search (Windows.edb / Windows.db).

Этапы:
  1) Настройки из .env / окружения, поверх них аргументы командной строки
  2) Поиск баз: файл или рекурсивный обход каталога
  3) По каждой базе: курсор -> generate_reports() -> три отчёта
     (File Report, Internet History, Activity History)

Вывод отчёта: файлы JSON/CSV, stdout или таблицы SQLite. Лог и прогресс-бар
пишутся в stderr, stdout занят только отчётом.

Коды возврата:
  0  - успех (или прервано пользователем)
  1  - ошибка настроек / ввода-вывода
  65 - грязная база при выводе в stdout (EX_DATAERR)
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from config.settings import OUTPUT_FORMATS, REPORT_TYPES, settings
from utils.logger import logger, set_verbose
from utils.timer import timer
from classifier.columns import ColumnMap
from search_index import EseTableCursor, SqliteTableCursor, TableCursor
from search_index.errors import DatabaseOpenError, DirtyDatabaseError, EmptyTableError, ReportError
from search_index.reports import generate_reports
from storage import ReportFormat, ReportOutput, ReportProducer

EX_DATAERR = 65

ESE_DB_NAME = "Windows.edb"
SQLITE_DB_NAME = "Windows.db"


# ---------------------------------------------------------------------------
# Аргументы
# ---------------------------------------------------------------------------

def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="sidr",
        description="Windows Search index (Windows.edb / Windows.db) report generator",
    )
    parser.add_argument(
        "input",
        nargs="?",
        help="Path to Windows.edb / Windows.db or a directory to scan recursively (INPUT_PATH)",
    )
    parser.add_argument("-f", "--format", choices=OUTPUT_FORMATS, help="Output format (OUTPUT_FORMAT)")
    parser.add_argument("-r", "--report-type", choices=REPORT_TYPES, help="Output destination (REPORT_TYPE)")
    parser.add_argument("-o", "--outdir", help="Output directory (OUTPUT_DIR)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def _apply_overrides(args: argparse.Namespace) -> None:
    if args.input:
        settings.INPUT_PATH = args.input
    if args.format:
        settings.OUTPUT_FORMAT = args.format
    if args.report_type:
        settings.REPORT_TYPE = args.report_type
    if args.outdir:
        settings.OUTPUT_DIR = args.outdir
    if args.verbose:
        settings.VERBOSE = True


# ---------------------------------------------------------------------------
# Поиск баз
# ---------------------------------------------------------------------------

def discover_databases(input_path: Path) -> List[Path]:
    """Windows.edb / Windows.db: сам файл или все такие файлы в каталоге."""
    if input_path.is_file():
        return [input_path]

    found = [
        p for p in input_path.rglob("*")
        if p.is_file() and p.name.lower() in (ESE_DB_NAME.lower(), SQLITE_DB_NAME.lower())
    ]
    return sorted(found)


def open_cursor(db_path: Path) -> TableCursor:
    """Курсор по расширению файла: .edb -> ESE, .db -> SQLite."""
    suffix = db_path.suffix.lower()
    if suffix == ".edb":
        return EseTableCursor(db_path, settings.ESE_TABLE_NAME)
    if suffix == ".db":
        return SqliteTableCursor(db_path)
    raise DatabaseOpenError(f"Unsupported database file: {db_path}")


# ---------------------------------------------------------------------------
# Запуск
# ---------------------------------------------------------------------------

def run(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    _apply_overrides(args)
    set_verbose(settings.VERBOSE)
    timer.show_metrics = settings.SHOW_PERFORMANCE_METRICS

    try:
        settings.validate()
    except ValueError as exc:
        logger.error(f"Configuration error: {exc}")
        return 1
    settings.display()

    input_path = Path(settings.INPUT_PATH)
    if not input_path.exists():
        logger.error(f"Input path does not exist: {input_path}")
        return 1

    databases = discover_databases(input_path)
    if not databases:
        logger.warning(f"No {ESE_DB_NAME} / {SQLITE_DB_NAME} found in {input_path}")
        return 0

    producer = ReportProducer(
        settings.OUTPUT_DIR,
        ReportFormat(settings.OUTPUT_FORMAT),
        ReportOutput(settings.REPORT_TYPE),
        batch_size=settings.SQL_BATCH_SIZE,
    )
    column_map = ColumnMap(item_url=settings.COLUMN_ITEM_URL, item_type=settings.COLUMN_ITEM_TYPE)

    processed = 0
    for db_path in databases:
        with timer.measure(str(db_path)):
            try:
                with open_cursor(db_path) as cursor:
                    generate_reports(
                        db_path,
                        cursor,
                        producer,
                        column_map,
                        show_progress=settings.SHOW_PROGRESS_BAR,
                    )
            except EmptyTableError as exc:
                logger.error(f"{db_path}: {exc}, skipped")
                continue
        processed += 1

    logger.info("=" * 60)
    logger.info("PROCESSING COMPLETE")
    logger.info(f"  Databases found      : {len(databases)}")
    logger.info(f"  Databases processed  : {processed}")
    if producer.report_type is not ReportOutput.STDOUT:
        logger.info(f"  Output directory     : {producer.output_dir}")
    if settings.SHOW_PERFORMANCE_METRICS:
        logger.info(f"  Total time           : {timer.total:.4f} ms")
    logger.info("=" * 60)
    return 0


def main() -> None:
    try:
        code = run()
    except DirtyDatabaseError as exc:
        logger.error(str(exc))
        sys.exit(EX_DATAERR)
    except ReportError as exc:
        logger.error(str(exc))
        sys.exit(1)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        sys.exit(0)
    sys.exit(code)


if __name__ == "__main__":
    main()
