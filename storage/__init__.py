"""Модуль записи отчётов.

Классификатор (classifier) ничего не знает про формат вывода: он вставляет
поля записи в ReportSink и просит сбросить запись. Формат и место вывода
выбирает ReportProducer один раз на отчёт.

Реализации:
- JsonReportSink: JSON-массив, одна запись на строке (файл или stdout)
- CsvReportSink:  CSV с заголовком по первой записи (файл или stdout)
- BatchedSqlSink: таблица БД, multi-row INSERT пачками по 25, один commit
"""

from .base import ReportSink
from .json_stream import JsonReportSink
from .csv_stream import CsvReportSink
from .sql_batch import BatchedSqlSink, BATCH_SIZE
from .producer import ReportFormat, ReportOutput, ReportProducer

__all__ = [
    "ReportSink",
    "JsonReportSink",
    "CsvReportSink",
    "BatchedSqlSink",
    "BATCH_SIZE",
    "ReportFormat",
    "ReportOutput",
    "ReportProducer",
]
