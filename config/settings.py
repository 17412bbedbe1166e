"""
Модуль настроек приложения.
Загружает и валидирует переменные окружения из .env файла.

Аргументы командной строки (см. main.py) применяются поверх этих значений.
"""

import os
import re
from pathlib import Path
from typing import List
from dotenv import load_dotenv


# Загружаем переменные из .env файла (ищем рядом с корнем проекта)
_env_path = Path(__file__).parent.parent / '.env'
load_dotenv(_env_path)


OUTPUT_FORMATS = ('json', 'csv')
REPORT_TYPES = ('file', 'stdout', 'database')


def _get_bool(key: str, default: str = 'false') -> bool:
    """Безопасное чтение булевой переменной окружения."""
    return os.getenv(key, default).strip().lower() == 'true'


def _get_int(key: str, default: str = '0') -> int:
    """Безопасное чтение целочисленной переменной окружения."""
    return int(os.getenv(key, default).strip())


def _is_qualified_key(value: str) -> bool:
    """Проверяет формат квалифицированного имени колонки: '<число>-<имя>'."""
    return re.match(r"^\d+-[A-Za-z_][A-Za-z0-9_]*$", (value or "").strip()) is not None


class Settings:
    """
    Класс для хранения и валидации настроек приложения.

    Все значения вычисляются в __init__, чтобы тесты могли создать
    свежий экземпляр после изменения окружения.
    """

    def __init__(self):
        # --- Input ---
        # Файл Windows.edb / Windows.db или каталог, который сканируется рекурсивно.
        self.INPUT_PATH: str = os.getenv('INPUT_PATH', '').strip()

        # Таблица ESE с данными индекса. Для Windows.db имя таблицы фиксировано.
        self.ESE_TABLE_NAME: str = os.getenv('ESE_TABLE_NAME', 'SystemIndex_PropertyStore').strip()

        # Квалифицированные ключи колонок, по которым классифицируются записи.
        # Числовой префикс зависит от схемы конкретной версии Windows.
        self.COLUMN_ITEM_URL: str = os.getenv('COLUMN_ITEM_URL', '33-System_ItemUrl').strip()
        self.COLUMN_ITEM_TYPE: str = os.getenv('COLUMN_ITEM_TYPE', '4450-System_ItemType').strip()

        # --- Output ---
        self.OUTPUT_DIR: str = os.getenv('OUTPUT_DIR', 'output').strip()
        self.OUTPUT_FORMAT: str = os.getenv('OUTPUT_FORMAT', 'json').strip().lower()
        self.REPORT_TYPE: str = os.getenv('REPORT_TYPE', 'file').strip().lower()

        # Для REPORT_TYPE=database: размер пачки multi-row INSERT.
        # Каждый отчёт пишется в свой файл SQLite в OUTPUT_DIR (<таблица>.sqlite3).
        self.SQL_BATCH_SIZE: int = _get_int('SQL_BATCH_SIZE', '25')

        # --- Performance & logging ---
        self.SHOW_PROGRESS_BAR: bool = _get_bool('SHOW_PROGRESS_BAR', 'false')
        self.SHOW_PERFORMANCE_METRICS: bool = _get_bool('SHOW_PERFORMANCE_METRICS', 'false')
        self.VERBOSE: bool = _get_bool('VERBOSE', 'false')

    # ------------------------------------------------------------------
    def validate(self) -> None:
        """Валидация настроек приложения. Бросает ValueError при ошибках."""
        errors: List[str] = []

        if not self.INPUT_PATH:
            errors.append("INPUT_PATH must be set")

        if not self.ESE_TABLE_NAME:
            errors.append("ESE_TABLE_NAME must be set")

        if not _is_qualified_key(self.COLUMN_ITEM_URL):
            errors.append("COLUMN_ITEM_URL must look like '<number>-<column name>'")

        if not _is_qualified_key(self.COLUMN_ITEM_TYPE):
            errors.append("COLUMN_ITEM_TYPE must look like '<number>-<column name>'")

        if not self.OUTPUT_DIR:
            errors.append("OUTPUT_DIR must be set")

        if self.OUTPUT_FORMAT not in OUTPUT_FORMATS:
            errors.append("OUTPUT_FORMAT must be 'json' or 'csv'")

        if self.REPORT_TYPE not in REPORT_TYPES:
            errors.append("REPORT_TYPE must be 'file', 'stdout' or 'database'")

        if self.REPORT_TYPE == 'database' and self.SQL_BATCH_SIZE <= 0:
            errors.append("SQL_BATCH_SIZE must be positive")

        if errors:
            raise ValueError("Configuration errors:\n" + "\n".join(f"  - {e}" for e in errors))

    # ------------------------------------------------------------------
    def display(self) -> None:
        """Вывод текущих настроек в читаемом виде (в stderr, stdout может быть отчётом)."""
        from utils.logger import logger

        logger.info("=" * 60)
        logger.info("CONFIGURATION SETTINGS")
        logger.info("=" * 60)
        logger.info(f"  Input path           : {self.INPUT_PATH}")
        logger.info(f"  ESE table            : {self.ESE_TABLE_NAME}")
        logger.info(f"  Item URL column      : {self.COLUMN_ITEM_URL}")
        logger.info(f"  Item type column     : {self.COLUMN_ITEM_TYPE}")
        logger.info(f"  Output directory     : {self.OUTPUT_DIR}")
        logger.info(f"  Output format        : {self.OUTPUT_FORMAT}")
        logger.info(f"  Report type          : {self.REPORT_TYPE}")
        if self.REPORT_TYPE == 'database':
            logger.info(f"  SQL batch size       : {self.SQL_BATCH_SIZE}")
        logger.info(f"  Show progress bar    : {self.SHOW_PROGRESS_BAR}")
        logger.info(f"  Performance metrics  : {self.SHOW_PERFORMANCE_METRICS}")
        logger.info("=" * 60)


# Единственный экземпляр настроек для использования во всех модулях
settings = Settings()
