"""
Исключения генерации отчётов.

Ядро (sink'и, классификатор, pipeline) только бросает исключения;
решение о завершении процесса и коде возврата принимает main.py.
"""


class ReportError(Exception):
    """Базовое исключение. Всё, что не перехвачено ниже по стеку, фатально."""


class OutputDirectoryError(ReportError):
    """Не удалось создать каталог для отчётов."""


class DatabaseOpenError(ReportError):
    """Не удалось открыть базу индекса или её таблицу."""


class EmptyTableError(ReportError):
    """Таблица PropertyStore не содержит записей."""


class ColumnReadError(ReportError):
    """Ошибка чтения одной колонки текущей строки (восстанавливаемая)."""


class HostnameNotFound(ReportError):
    """В таблице нет пригодного значения System_ComputerName (восстанавливаемая)."""


class SinkOpenError(ReportError):
    """Не удалось открыть файл отчёта, подключиться к БД или создать таблицу."""


class SinkWriteError(ReportError):
    """Ошибка записи, сброса или фиксации (commit) отчёта."""


class DirtyDatabaseError(ReportError):
    """База закрыта некорректно, а отчёт выводится в stdout."""

    def __init__(self, db_path: str) -> None:
        super().__init__(f"The database state is not clean: {db_path}")
        self.db_path = db_path
