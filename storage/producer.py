"""Фабрика отчётов.

Решает, КУДА и В КАКОМ формате пишется отчёт, и даёт ему имя:

    файл:  <hostname>_<label>_<YYYYmmdd_HHMMSS[.fraction]>[_dirty].<ext>
    БД:    таблица <hostname>_<label>_<YYYYmmdd_HHMMSS>

Суффикс _dirty есть только у файлов: для БД "грязная" база сообщается
предупреждением в лог, а не в имени таблицы.
"""

from __future__ import annotations

import sqlite3
import sys
from datetime import datetime, timezone
from enum import Enum
from functools import partial
from pathlib import Path
from typing import Any, BinaryIO, Callable, Optional, Tuple, Union

from search_index.errors import OutputDirectoryError
from search_index.models import DbState, ReportCategory, is_db_dirty
from utils.logger import logger

from .base import ReportSink
from .csv_stream import CsvReportSink
from .json_stream import JsonReportSink
from .sql_batch import BATCH_SIZE, BatchedSqlSink


class ReportFormat(str, Enum):
    JSON = "json"
    CSV = "csv"


class ReportOutput(str, Enum):
    FILE = "file"
    STDOUT = "stdout"
    DATABASE = "database"


def format_timestamp(value: datetime, *, fraction: bool = True) -> str:
    """YYYYmmdd_HHMMSS и, если есть, доли секунды: 3 знака для целых
    миллисекунд, иначе 6."""
    text = value.strftime("%Y%m%d_%H%M%S")
    if not fraction or value.microsecond == 0:
        return text
    if value.microsecond % 1000 == 0:
        return f"{text}.{value.microsecond // 1000:03d}"
    return f"{text}.{value.microsecond:06d}"


class ReportProducer:
    """Создаёт sink'и отчётов для одного запуска.

    Args:
        output_dir: Каталог отчётов (создаётся при необходимости)
        fmt: Формат файлов (для REPORT_TYPE=database не используется)
        report_type: Файл / stdout / БД
        batch_size: Размер пачки INSERT для БД
        connect: Фабрика DB-API соединения, получает путь к файлу БД
        stdout: Бинарный поток для режима stdout (по умолчанию sys.stdout.buffer)
    """

    def __init__(
        self,
        output_dir: Union[str, Path],
        fmt: ReportFormat = ReportFormat.JSON,
        report_type: ReportOutput = ReportOutput.FILE,
        *,
        batch_size: int = BATCH_SIZE,
        connect: Callable[[str], Any] = sqlite3.connect,
        stdout: Optional[BinaryIO] = None,
    ) -> None:
        self._dir = Path(output_dir)
        self.format = ReportFormat(fmt)
        self.report_type = ReportOutput(report_type)
        self._batch_size = batch_size
        self._connect = connect
        self._stdout = stdout

        if not self._dir.exists():
            try:
                self._dir.mkdir(parents=True)
            except OSError as exc:
                raise OutputDirectoryError(f"Can't create directory \"{self._dir}\": {exc}") from exc
            logger.info(f"Created output directory: {self._dir}")

    # ------------------------------------------------------------------
    @property
    def output_dir(self) -> Path:
        return self._dir

    @staticmethod
    def is_db_dirty(db_state: Optional[DbState]) -> bool:
        return is_db_dirty(db_state)

    def report_path(
        self,
        hostname: str,
        label: str,
        now: datetime,
        ext: str,
        db_state: Optional[DbState],
    ) -> Path:
        status = "_dirty" if self.is_db_dirty(db_state) else ""
        return self._dir / f"{hostname}_{label}_{format_timestamp(now)}{status}.{ext}"

    @staticmethod
    def table_name(hostname: str, label: str, now: datetime) -> str:
        return f"{hostname}_{label}_{format_timestamp(now, fraction=False)}"

    # ------------------------------------------------------------------
    def new_report(
        self,
        hostname: str,
        label: str,
        db_state: Optional[DbState],
        now: Optional[datetime] = None,
    ) -> Tuple[Optional[Path], ReportSink]:
        """Создать (но не открыть) sink отчёта.

        Returns:
            (путь к файлу отчёта / файлу БД или None для stdout, sink)
        """
        now = now or datetime.now(timezone.utc)
        category = ReportCategory.from_label(label)

        if self.report_type is ReportOutput.DATABASE:
            table = self.table_name(hostname, label, now)
            db_path = self._dir / f"{table}.sqlite3"
            sink = BatchedSqlSink(
                category,
                table,
                partial(self._connect, str(db_path)),
                batch_size=self._batch_size,
                location=str(db_path),
            )
            return db_path, sink

        sink_cls = JsonReportSink if self.format is ReportFormat.JSON else CsvReportSink

        if self.report_type is ReportOutput.STDOUT:
            stream = self._stdout if self._stdout is not None else sys.stdout.buffer
            return None, sink_cls(category, stream=stream)

        path = self.report_path(hostname, label, now, self.format.value, db_state)
        return path, sink_cls(category, path=path)
