"""
Модели данных индекса Windows Search и категорий отчётов.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Optional


# ---------------------------------------------------------------------------
# Состояние базы (заголовок ESE)
# ---------------------------------------------------------------------------

class DbState(IntEnum):
    """Состояние завершения работы базы из заголовка ESE (dbstate)."""

    JUST_CREATED = 1
    DIRTY_SHUTDOWN = 2
    CLEAN_SHUTDOWN = 3
    BEING_CONVERTED = 4
    FORCE_DETACH = 5

    @classmethod
    def from_value(cls, value: Any) -> Optional['DbState']:
        """Неизвестное или отсутствующее значение -> None."""
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            return None


def is_db_dirty(state: Optional[DbState]) -> bool:
    """База "грязная", если состояние известно и это не CleanShutdown."""
    if state is None:
        return False
    return state != DbState.CLEAN_SHUTDOWN


# ---------------------------------------------------------------------------
# Колонка таблицы
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ColumnInfo:
    """Колонка таблицы PropertyStore.

    name: квалифицированное имя вида '4450-System_ItemType'
    (или служебное 'WorkID' без префикса).
    """

    id: int
    name: str


# ---------------------------------------------------------------------------
# Категория отчёта
# ---------------------------------------------------------------------------

class ReportCategory(Enum):
    """Категория отчёта: (label для имён файлов/таблиц, message для stdout)."""

    FILE_REPORT = ("File_Report", "file_report")
    ACTIVITY_HISTORY = ("Activity_History_Report", "activity_history")
    INTERNET_HISTORY = ("Internet_History_Report", "internet_history")
    UNKNOWN = ("Unknown", "")

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def message(self) -> str:
        return self.value[1]

    @classmethod
    def from_label(cls, label: str) -> 'ReportCategory':
        for category in cls:
            if category is not cls.UNKNOWN and category.label == label:
                return category
        return cls.UNKNOWN


# Категории, для которых создаются отчёты (порядок = порядок создания sink'ов)
REPORT_CATEGORIES = (
    ReportCategory.FILE_REPORT,
    ReportCategory.INTERNET_HISTORY,
    ReportCategory.ACTIVITY_HISTORY,
)
