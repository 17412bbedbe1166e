"""Потоковая запись отчёта в JSON-массив.

Формат:
    [
    {"WorkId":1,"System_ItemPathDisplay":"C:\\a.txt"},
    {"WorkId":2}
    ]

- одна запись = один компактный объект на строке
- после каждой записи, кроме последней, ставится ",\\n"
- строки экранируются по правилам JSON, целые пишутся как есть
- вставленная пустая строка пишется как "", None не пишется

Запись сбрасывается на диск после каждого объекта: при прерывании
файл содержит всё, что успели обработать.

В режиме stdout в начало каждого объекта добавляется поле
"report_suffix" с категорией отчёта (все три отчёта пишутся в один поток).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, BinaryIO, Dict, Optional

import orjson

from search_index.errors import SinkOpenError, SinkWriteError
from search_index.models import ReportCategory
from utils.logger import logger

from .base import ReportSink, Value

REPORT_SUFFIX_FIELD = "report_suffix"


def _dumps(obj: Any) -> bytes:
    # Компактный JSON: без пробелов, ключи в порядке вставки
    return orjson.dumps(obj)


class JsonReportSink(ReportSink):
    """JSON-отчёт в файл (path) или в открытый бинарный поток (stream = stdout)."""

    def __init__(
        self,
        category: ReportCategory,
        *,
        path: Optional[Path] = None,
        stream: Optional[BinaryIO] = None,
    ) -> None:
        super().__init__(category)
        if (path is None) == (stream is None):
            raise ValueError("JsonReportSink needs exactly one of path or stream")

        self._filepath = Path(path) if path is not None else None
        self._stream = stream
        self._fh: Optional[BinaryIO] = None

        self._first_record = True
        self._terminated = False

    # ------------------------------------------------------------------
    @property
    def output_path(self) -> str:
        return str(self._filepath) if self._filepath is not None else "<stdout>"

    @property
    def to_stdout(self) -> bool:
        return self._stream is not None

    # ------------------------------------------------------------------
    def start(self) -> None:
        if self._filepath is not None:
            try:
                self._fh = self._filepath.open("wb")
            except OSError as exc:
                raise SinkOpenError(f"Can't create report {self._filepath}: {exc}") from exc
        else:
            self._fh = self._stream

        self._write(b"[\n")
        logger.info(f"Streaming {self.category.label} -> {self.output_path}")

    # ------------------------------------------------------------------
    def _write_record(self, values: Dict[str, Value], is_final: bool) -> None:
        if self._fh is None:
            raise SinkWriteError("JsonReportSink is not started")
        if self._terminated:
            raise SinkWriteError(f"Record after the final record in {self.output_path}")

        obj: Dict[str, Value] = {}
        if self.to_stdout:
            obj[REPORT_SUFFIX_FIELD] = self.category.message
        for field, value in values.items():
            if value is not None:
                obj[field] = value

        data = _dumps(obj)
        if not self._first_record:
            data = b",\n" + data
        if is_final:
            data += b"\n"
            self._terminated = True
        self._write(data)
        self._first_record = False

    # ------------------------------------------------------------------
    def _finalize(self) -> None:
        if self._fh is None:
            return

        # Последняя запись уже закрыта "\n", если была сброшена с is_final
        self._write(b"]" if self._first_record or self._terminated else b"\n]")

        if self._filepath is not None:
            self._fh.close()
            logger.info(f"Report closed: {self._filepath} ({self.records_written} records)")
        self._fh = None

    # ------------------------------------------------------------------
    def _write(self, data: bytes) -> None:
        try:
            self._fh.write(data)
            self._fh.flush()
        except OSError as exc:
            raise SinkWriteError(f"Can't write report {self.output_path}: {exc}") from exc
