"""Потоковая запись отчёта в CSV.

- Заголовок: имена полей ПЕРВОЙ записанной записи в порядке вставки.
  Пишется один раз, при первой непустой записи.
- Каждая следующая запись пишется в том же порядке колонок; поле,
  отсутствующее в записи, даёт пустую ячейку.
- Строки в двойных кавычках, кавычки внутри удваиваются, переводы строк
  заменяются на два символа '\\n' / '\\r'. Целые пишутся как есть.
- Строки разделяются '\\n', завершающего перевода строки нет.

Колонку после фиксации заголовка добавить нельзя: значение поля, которого
нет в заголовке, отбрасывается (с предупреждением в лог, один раз на поле).
Запись, у которой непустые значения только в таких полях, не пишется.

В режиме stdout перед заголовком добавляется колонка ReportSuffix,
а в каждую строку: категория отчёта.
"""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Set

import orjson

from search_index.errors import SinkOpenError, SinkWriteError
from search_index.models import ReportCategory
from utils.logger import logger

from .base import ReportSink, Value, is_empty_value

REPORT_SUFFIX_COLUMN = "ReportSuffix"


def escape_csv(value: str) -> str:
    return value.replace('"', '""').replace("\n", "\\n").replace("\r", "\\r")


def format_csv_value(value: Value) -> str:
    if is_empty_value(value):
        return ""
    if isinstance(value, int):
        return str(value)
    return f'"{escape_csv(value)}"'


class CsvReportSink(ReportSink):
    """CSV-отчёт в файл (path) или в открытый бинарный поток (stream = stdout)."""

    def __init__(
        self,
        category: ReportCategory,
        *,
        path: Optional[Path] = None,
        stream: Optional[BinaryIO] = None,
    ) -> None:
        super().__init__(category)
        if (path is None) == (stream is None):
            raise ValueError("CsvReportSink needs exactly one of path or stream")

        self._filepath = Path(path) if path is not None else None
        self._stream = stream
        self._fh: Optional[BinaryIO] = None

        self._header: Optional[List[str]] = None
        self._dropped_fields: Set[str] = set()

    # ------------------------------------------------------------------
    @property
    def output_path(self) -> str:
        return str(self._filepath) if self._filepath is not None else "<stdout>"

    @property
    def to_stdout(self) -> bool:
        return self._stream is not None

    @property
    def header(self) -> Optional[List[str]]:
        return list(self._header) if self._header is not None else None

    # ------------------------------------------------------------------
    def start(self) -> None:
        if self._filepath is not None:
            try:
                self._fh = self._filepath.open("wb")
            except OSError as exc:
                raise SinkOpenError(f"Can't create report {self._filepath}: {exc}") from exc
        else:
            self._fh = self._stream

        logger.info(f"Streaming {self.category.label} -> {self.output_path}")

    # ------------------------------------------------------------------
    def _write_record(self, values: Dict[str, Value], is_final: bool) -> bool:
        if self._fh is None:
            raise SinkWriteError("CsvReportSink is not started")

        if self._header is None:
            self._header = list(values.keys())
            self._write_header()

        for field, value in values.items():
            if field not in self._header and not is_empty_value(value):
                if field not in self._dropped_fields:
                    self._dropped_fields.add(field)
                    logger.warning(
                        f"{self.output_path}: field '{field}' is not in the CSV header, values dropped"
                    )

        cells = [format_csv_value(values.get(field)) for field in self._header]
        if not any(cells):
            return False
        if self.to_stdout:
            cells.insert(0, orjson.dumps(self.category.message).decode("utf-8"))

        self._write(("\n" + ",".join(cells)).encode("utf-8"))
        return True

    def _write_header(self) -> None:
        line = ",".join(self._header)
        if self.to_stdout:
            line = f"\n{REPORT_SUFFIX_COLUMN},{line}"
        self._write(line.encode("utf-8"))

    # ------------------------------------------------------------------
    def _finalize(self) -> None:
        if self._fh is None:
            return

        if self._filepath is not None:
            self._fh.close()
            logger.info(f"Report closed: {self._filepath} ({self.records_written} records)")
        else:
            self._fh.flush()
        self._fh = None

    # ------------------------------------------------------------------
    def _write(self, data: bytes) -> None:
        try:
            self._fh.write(data)
            self._fh.flush()
        except OSError as exc:
            raise SinkWriteError(f"Can't write report {self.output_path}: {exc}") from exc
