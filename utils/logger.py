"""
Логгер приложения.

Все сообщения идут в stderr: stdout может быть занят самим отчётом
(REPORT_TYPE=stdout), а прогресс-бар tqdm тоже пишет в stderr.
"""

import logging
import sys


def _setup_logger(name: str = "sidr") -> logging.Logger:
    """
    Настройка и возврат логгера.

    Повторный вызов (например, при переимпорте в тестах) не добавляет
    второй handler.
    """
    log = logging.getLogger(name)

    if log.handlers:
        return log

    log.setLevel(logging.DEBUG)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.INFO)

    formatter = logging.Formatter(
        fmt="[%(asctime)s] [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)
    log.addHandler(handler)

    return log


def set_verbose(verbose: bool) -> None:
    """Включает DEBUG-сообщения на всех handler'ах логгера."""
    level = logging.DEBUG if verbose else logging.INFO
    for handler in logger.handlers:
        handler.setLevel(level)


# Глобальный экземпляр логгера
logger = _setup_logger()
