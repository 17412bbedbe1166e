"""Базовый интерфейс отчёта (sink).

Классификатор ничего не знает о формате вывода. Он вставляет значения
полей текущей записи и просит sink сбросить запись:

    with JsonReportSink(category, path=path) as sink:   # start()
        sink.insert_integer("WorkId", 42)
        sink.insert_text("System_ItemPathDisplay", "C:\\file.txt")
        if sink.has_buffered_value():
            sink.flush_record()
    # close(): последняя запись, завершающий токен, commit

Реализации: JsonReportSink, CsvReportSink, BatchedSqlSink. Выбор делает
ReportProducer один раз при создании отчёта.

Инварианты:
- буфер пуст до первой вставки и сразу после успешного flush_record()
- запись без непустых полей не пишется никогда
- close() вызывается ровно один раз (повторные вызовы ничего не делают)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Optional, Union

from search_index.models import ReportCategory

Value = Optional[Union[str, int]]


def is_empty_value(value: Value) -> bool:
    return value is None or value == ""


class ReportSink(ABC):
    """Отчёт одной категории для одной базы индекса."""

    def __init__(self, category: ReportCategory) -> None:
        self.category = category
        # Поля текущей записи в порядке первой вставки
        self._values: Dict[str, Value] = {}
        self._closed = False
        self.records_written = 0

    # ------------------------------------------------------------------
    def __enter__(self) -> "ReportSink":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    # ------------------------------------------------------------------
    @property
    @abstractmethod
    def output_path(self) -> str:
        """Путь к файлу / идентификатор таблицы (для логов)."""

    @abstractmethod
    def start(self) -> None:
        """Открыть ресурс (файл, stdout, соединение + таблица)."""

    @abstractmethod
    def _write_record(self, values: Dict[str, Value], is_final: bool) -> Optional[bool]:
        """Записать одну запись в формате конкретного backend'а.

        Returns:
            False, если backend отбросил запись (ему нечего выводить)
        """

    @abstractmethod
    def _finalize(self) -> None:
        """Завершающий токен / commit и освобождение ресурса."""

    # ------------------------------------------------------------------
    def insert_text(self, field: str, value: str) -> None:
        # Повторная вставка перезаписывает значение, позиция поля сохраняется
        self._values[field] = value

    def insert_integer(self, field: str, value: int) -> None:
        self._values[field] = int(value)

    def has_buffered_value(self) -> bool:
        return any(not is_empty_value(v) for v in self._values.values())

    def flush_record(self, is_final: bool = False) -> bool:
        """Сбросить текущую запись.

        is_final: это последняя запись отчёта (JSON не ставит после неё
        разделитель).

        Returns:
            True, если запись была записана; False, если буфер был пуст
            или backend запись отбросил.
        """
        if not self.has_buffered_value():
            self._values.clear()
            return False

        written = self._write_record(self._values, is_final) is not False
        self._values = {}
        if written:
            self.records_written += 1
        return written

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            # Footer: незаписанная последняя запись
            self.flush_record(is_final=True)
        finally:
            self._finalize()

    @property
    def closed(self) -> bool:
        return self._closed
