"""Tests for PerformanceTimer."""
import logging

from utils.timer import PerformanceTimer


def test_measure_records_result():
    timer = PerformanceTimer()
    with timer.measure("C:\\Windows.edb"):
        pass
    assert set(timer.results) == {"C:\\Windows.edb"}
    assert timer.results["C:\\Windows.edb"] >= 0
    assert timer.total == timer.results["C:\\Windows.edb"]


def test_end_without_start():
    assert PerformanceTimer().end("never") is None


def test_logs_only_when_enabled(caplog):
    with caplog.at_level(logging.INFO, logger="sidr"):
        quiet = PerformanceTimer(show_metrics=False)
        with quiet.measure("quiet"):
            pass
        loud = PerformanceTimer(show_metrics=True)
        with loud.measure("loud"):
            pass

    messages = [r.getMessage() for r in caplog.records]
    assert any("[loud] completed" in m for m in messages)
    assert not any("[quiet]" in m for m in messages)
