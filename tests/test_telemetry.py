"""
Tests for the telemetry port.
"""

import json
import logging

import pytest

from orders_overlay.telemetry import OverlayTelemetry


@pytest.fixture
def telemetry():
    return OverlayTelemetry(session_id="session_test")


class TestLogging:
    """Entries are buffered and forwarded to the logger."""

    def test_levels_recorded(self, telemetry):
        telemetry.log_error("Registry", "failed", RuntimeError("bad file"))
        telemetry.log_warning("Analyzer", "odd input")
        telemetry.log_info("Registry", "loaded", count=14)
        telemetry.log_debug("Generator", "cache hit")

        logs = telemetry.get_session_logs()
        assert [entry.level for entry in logs] == ["error", "warning", "info", "debug"]
        assert logs[0].error == "RuntimeError: bad file"
        assert logs[2].data == {"count": 14}
        assert all(entry.session_id == "session_test" for entry in logs)

    def test_forwards_to_logger(self, caplog):
        telemetry = OverlayTelemetry(logger=logging.getLogger("overlay.test"))
        with caplog.at_level(logging.INFO, logger="overlay.test"):
            telemetry.log_info("Registry", "Initialized with 14 commands")
        assert "[Registry] Initialized with 14 commands" in caplog.text

    def test_buffer_is_bounded(self):
        telemetry = OverlayTelemetry(max_buffer_size=3)
        for n in range(5):
            telemetry.log_info("Svc", f"message {n}")
        assert [entry.message for entry in telemetry.get_session_logs()] == [
            "message 2", "message 3", "message 4"
        ]

    def test_broken_logger_never_raises(self):
        class BrokenLogger:
            def log(self, *args, **kwargs):
                raise RuntimeError("handler down")

        telemetry = OverlayTelemetry(logger=BrokenLogger())
        telemetry.log_error("Svc", "still recorded")
        assert len(telemetry.get_session_logs()) == 1


class TestPerformance:
    """log_performance picks the level from the threshold."""

    def test_slow_operation_is_warning(self, telemetry):
        telemetry.log_performance("Generator", "generate_all_commands_content", 75.0, 50)
        entry = telemetry.get_session_logs()[-1]
        assert entry.level == "warning"
        assert entry.data["duration_ms"] == 75.0

    def test_fast_operation_is_debug(self, telemetry):
        telemetry.log_performance("Generator", "generate_command_content", 3.2, 25)
        assert telemetry.get_session_logs()[-1].level == "debug"


class TestInspection:
    """Filtering, export and stats."""

    def test_filters(self, telemetry):
        telemetry.log_info("Registry", "a")
        telemetry.log_warning("Analyzer", "b")
        telemetry.log_info("Analyzer", "c")

        assert [e.message for e in telemetry.get_service_logs("Analyzer")] == ["b", "c"]
        assert [e.message for e in telemetry.get_logs_by_level("info")] == ["a", "c"]

    def test_export_is_json(self, telemetry):
        telemetry.log_warning("Analyzer", "odd input")
        exported = json.loads(telemetry.export_logs())
        assert exported["session_id"] == "session_test"
        assert exported["logs"][0]["message"] == "odd input"

    def test_stats_and_clear(self, telemetry):
        telemetry.log_error("Registry", "x")
        telemetry.log_info("Generator", "y")

        stats = telemetry.get_session_stats()
        assert stats["total_logs"] == 2
        assert stats["error_count"] == 1
        assert stats["info_count"] == 1
        assert stats["services"] == ["Generator", "Registry"]

        telemetry.clear_logs()
        assert telemetry.get_session_stats()["total_logs"] == 0

    def test_generated_session_ids_differ(self):
        assert OverlayTelemetry().session_id != OverlayTelemetry().session_id
