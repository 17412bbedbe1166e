"""
Замер времени обработки баз индекса.

    from utils.timer import timer

    with timer.measure(str(db_path)):
        generate_reports(...)

    timer.results   # {метка: миллисекунды} по всем завершённым замерам

Строка в лог пишется при выходе из каждого замера, но только при
SHOW_PERFORMANCE_METRICS=true. Итоги (results) копятся всегда.
"""

import time
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from utils.logger import logger


class PerformanceTimer:
    """
    Замеры по меткам в миллисекундах.

    Args:
        show_metrics: Писать ли каждый замер в лог
    """

    def __init__(self, show_metrics: bool = False):
        self.show_metrics = show_metrics
        self._started: Dict[str, float] = {}
        self.results: Dict[str, float] = {}

    def start(self, label: str) -> None:
        self._started[label] = time.perf_counter()

    def end(self, label: str) -> Optional[float]:
        """Завершить замер и сохранить результат в results.

        Returns:
            Миллисекунды или None, если замер с такой меткой не начинался
        """
        started = self._started.pop(label, None)
        if started is None:
            return None

        elapsed = (time.perf_counter() - started) * 1000
        self.results[label] = elapsed
        if self.show_metrics:
            logger.info(f"[{label}] completed in {elapsed:.4f} ms")
        return elapsed

    @contextmanager
    def measure(self, label: str) -> Iterator[None]:
        self.start(label)
        try:
            yield
        finally:
            self.end(label)

    @property
    def total(self) -> float:
        return sum(self.results.values())


def _create_timer() -> PerformanceTimer:
    # settings импортируется здесь: logger не должен тянуть настройки
    from config.settings import settings
    return PerformanceTimer(show_metrics=settings.SHOW_PERFORMANCE_METRICS)


timer = _create_timer()
