"""Интерфейс курсора по таблице индекса.

Генерация отчётов ничего не знает о формате хранения: ей нужен курсор,
который умеет открыть таблицу, перемещаться по строкам и отдавать сырые
байты колонок текущей строки. Реализации:

- EseTableCursor:    Windows.edb (ESE), через dissect.esedb
- SqliteTableCursor: Windows.db (SQLite, Windows 11)
- MemoryTableCursor: строки в памяти (тесты, заранее извлечённые данные)

Позиционирование общее для всех реализаций: провайдер сообщает число строк,
курсор хранит текущую позицию для каждой открытой таблицы.
"""

from __future__ import annotations

import struct
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from .models import ColumnInfo, DbState


class TableCursor(ABC):
    """Курсор по таблицам одной базы индекса."""

    # Таблица с данными индекса для этого формата
    property_store_table: str = ""

    def __init__(self) -> None:
        self._positions: Dict[int, int] = {}

    # ------------------------------------------------------------------
    def __enter__(self) -> "TableCursor":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self) -> None:
        """Освобождение ресурсов провайдера."""

    # ------------------------------------------------------------------
    @abstractmethod
    def open_table(self, name: str) -> int:
        """Открыть таблицу, вернуть её идентификатор. Позиция: до первой строки."""

    @abstractmethod
    def get_columns(self, table: int) -> List[ColumnInfo]:
        """Схема таблицы."""

    @abstractmethod
    def get_column(self, table: int, column_id: int) -> Optional[bytes]:
        """Сырые байты колонки текущей строки или None, если значения нет.

        Ошибки чтения провайдер оборачивает в ColumnReadError.
        """

    @abstractmethod
    def get_database_state(self) -> Optional[DbState]:
        """Состояние базы из заголовка (None, если неизвестно)."""

    @abstractmethod
    def _row_count(self, table: int) -> int:
        """Число строк в открытой таблице."""

    # ------------------------------------------------------------------
    def move_first(self, table: int) -> bool:
        return self._move_to(table, 0)

    def move_last(self, table: int) -> bool:
        return self._move_to(table, self._row_count(table) - 1)

    def move_next(self, table: int) -> bool:
        return self._move_to(table, self.position(table) + 1)

    def move_previous(self, table: int) -> bool:
        return self._move_to(table, self.position(table) - 1)

    def position(self, table: int) -> int:
        """Индекс текущей строки (-1, если курсор ещё не позиционирован)."""
        return self._positions.get(table, -1)

    def _move_to(self, table: int, index: int) -> bool:
        # За пределами таблицы позиция не меняется
        if 0 <= index < self._row_count(table):
            self._positions[table] = index
            return True
        return False


def to_raw_bytes(value: object) -> Optional[bytes]:
    """Приводит уже декодированное библиотекой значение к сырому виду.

    Классификатор работает только с байтами, поэтому провайдеры, чьи
    библиотеки возвращают str/int, кодируют их обратно так же, как они
    лежат в индексе: строки в UTF-16LE, целые в little-endian.
    """
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-16-le")
    if isinstance(value, bool):
        return bytes([int(value)])
    if isinstance(value, int):
        return value.to_bytes(8, "little", signed=value < 0)
    if isinstance(value, float):
        return struct.pack("<d", value)
    raise TypeError(f"Unsupported column value type: {type(value).__name__}")
