"""Tests for structured logging and run context."""

import json
import logging
import sys
import time
from decimal import Decimal

import pytest

from src.errors.exceptions import NoDataForRangeError, ValidationError
from src.logging_config.config import LogFormat, LoggingConfig, LogLevel
from src.logging_config.context import (
    RunContext,
    generate_run_id,
    get_context_dict,
    get_job,
    get_run_id,
    get_symbol,
)
from src.logging_config.performance import PerformanceTimer, _summarize_args, log_performance
from src.logging_config.setup import (
    ConsoleFormatter,
    StructuredFormatter,
    configure_logging,
    get_logger,
)


def _record(msg="test", level=logging.INFO, name="test", lineno=1, exc_info=None):
    return logging.LogRecord(
        name=name, level=level, pathname="test.py",
        lineno=lineno, msg=msg, args=(), exc_info=exc_info,
    )


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestLoggingConfig:
    """Tests for logging configuration dataclasses."""

    def test_default_config_values(self):
        config = LoggingConfig()
        assert config.level == LogLevel.INFO
        assert config.format == LogFormat.JSON
        assert config.include_caller is True
        assert config.slow_threshold_ms == 1000.0
        assert config.service_name == "stockwatch"

    def test_custom_config(self):
        config = LoggingConfig(
            level=LogLevel.DEBUG,
            format=LogFormat.CONSOLE,
            slow_threshold_ms=500.0,
            service_name="test",
        )
        assert config.level == LogLevel.DEBUG
        assert config.format == LogFormat.CONSOLE
        assert config.slow_threshold_ms == 500.0

    def test_log_format_enum_values(self):
        assert LogFormat.JSON.value == "json"
        assert LogFormat.CONSOLE.value == "console"


class TestRunContext:
    """Tests for run context management."""

    def test_generate_run_id_unique(self):
        ids = {generate_run_id() for _ in range(100)}
        assert len(ids) == 100

    def test_run_id_is_uuid_format(self):
        assert len(generate_run_id().split("-")) == 5

    def test_context_sets_run_id_and_job(self):
        with RunContext(run_id="run-1", job="anomaly_sweep"):
            assert get_run_id() == "run-1"
            assert get_job() == "anomaly_sweep"
        assert get_run_id() == ""
        assert get_job() == ""

    def test_auto_generates_run_id(self):
        with RunContext() as ctx:
            assert ctx.run_id != ""
            assert get_run_id() == ctx.run_id

    def test_for_symbol(self):
        with RunContext(job="anomaly_sweep") as ctx:
            with ctx.for_symbol("AAA"):
                assert get_symbol() == "AAA"
                assert get_context_dict()["symbol"] == "AAA"
            assert get_symbol() == ""

    def test_get_context_dict(self):
        with RunContext(run_id="r1", job="simulate"):
            ctx = get_context_dict()
            assert ctx == {"run_id": "r1", "job": "simulate"}

    def test_context_dict_empty_outside(self):
        assert get_context_dict() == {}

    def test_bind_extra_context(self):
        with RunContext(run_id="r1") as ctx:
            ctx.bind(window=20, threshold=3.0)
            d = get_context_dict()
            assert d["window"] == 20
            assert d["threshold"] == 3.0
        assert get_context_dict() == {}

    def test_elapsed_ms(self):
        with RunContext() as ctx:
            time.sleep(0.01)
            assert ctx.elapsed_ms >= 10

    def test_nested_contexts_restore_outer(self):
        with RunContext(run_id="outer"):
            with RunContext(run_id="inner"):
                assert get_run_id() == "inner"
            assert get_run_id() == "outer"


class TestStructuredFormatter:
    """Tests for JSON structured log formatting."""

    def test_formats_as_json(self):
        parsed = json.loads(StructuredFormatter().format(_record("hello world")))
        assert parsed["message"] == "hello world"
        assert parsed["level"] == "INFO"
        assert parsed["logger"] == "test"
        assert parsed["service"] == "stockwatch"
        assert "timestamp" in parsed

    def test_includes_caller_info(self):
        parsed = json.loads(StructuredFormatter(include_caller=True).format(_record(lineno=42)))
        assert parsed["line"] == 42
        assert "function" in parsed

    def test_excludes_caller_when_disabled(self):
        parsed = json.loads(StructuredFormatter(include_caller=False).format(_record()))
        assert "line" not in parsed

    def test_includes_run_context(self):
        with RunContext(run_id="ctx-test", job="anomaly_sweep") as ctx:
            with ctx.for_symbol("CCC"):
                parsed = json.loads(StructuredFormatter().format(_record()))
        assert parsed["run_id"] == "ctx-test"
        assert parsed["job"] == "anomaly_sweep"
        assert parsed["symbol"] == "CCC"

    def test_formats_exception(self):
        try:
            raise ValueError("test error")
        except ValueError:
            record = _record("failed", level=logging.ERROR, exc_info=sys.exc_info())
        parsed = json.loads(StructuredFormatter().format(record))
        assert parsed["exception"]["type"] == "ValueError"
        assert "test error" in parsed["exception"]["message"]

    def test_includes_extra_fields(self):
        record = _record()
        record.duration_ms = 42.5
        record.alerts_created = 2
        record.z_score = Decimal("3.5000")
        parsed = json.loads(StructuredFormatter().format(record))
        assert parsed["duration_ms"] == 42.5
        assert parsed["alerts_created"] == 2
        assert parsed["z_score"] == "3.5000"


class TestConsoleFormatter:
    """Tests for colored console log formatting."""

    def test_formats_readable_output(self):
        output = ConsoleFormatter().format(_record("hello", name="test.module"))
        assert "test.module" in output
        assert "hello" in output

    def test_includes_context_info(self):
        with RunContext(run_id="abc"):
            output = ConsoleFormatter().format(_record())
        assert "run_id=abc" in output

    def test_has_color_codes(self):
        output = ConsoleFormatter().format(_record(level=logging.ERROR))
        assert "\033[31m" in output


class TestConfigureLogging:
    """Tests for the configure_logging setup function."""

    def test_json_format(self, restore_root_logger):
        configure_logging(LoggingConfig(format=LogFormat.JSON))
        assert len(restore_root_logger.handlers) == 1
        assert isinstance(restore_root_logger.handlers[0].formatter, StructuredFormatter)

    def test_console_format(self, restore_root_logger):
        configure_logging(LoggingConfig(format=LogFormat.CONSOLE))
        assert isinstance(restore_root_logger.handlers[0].formatter, ConsoleFormatter)

    def test_sets_log_level(self, restore_root_logger):
        configure_logging(LoggingConfig(level=LogLevel.DEBUG))
        assert restore_root_logger.level == logging.DEBUG

    def test_get_logger_returns_logger(self):
        logger = get_logger("test.module")
        assert logger.name == "test.module"

    def test_quiets_noisy_loggers(self, restore_root_logger):
        configure_logging()
        assert logging.getLogger("sqlalchemy.engine").level >= logging.WARNING

    def test_env_var_override_level(self, monkeypatch, restore_root_logger):
        monkeypatch.setenv("STOCKWATCH_LOG_LEVEL", "debug")
        effective = configure_logging(LoggingConfig(level=LogLevel.ERROR))
        assert effective.level == LogLevel.DEBUG
        assert restore_root_logger.level == logging.DEBUG

    def test_env_var_override_format(self, monkeypatch, restore_root_logger):
        monkeypatch.setenv("STOCKWATCH_LOG_FORMAT", "CONSOLE")
        configure_logging(LoggingConfig(format=LogFormat.JSON))
        assert isinstance(restore_root_logger.handlers[0].formatter, ConsoleFormatter)

    def test_invalid_env_value_ignored(self, monkeypatch, restore_root_logger):
        monkeypatch.setenv("STOCKWATCH_LOG_LEVEL", "LOUD")
        effective = configure_logging(LoggingConfig(level=LogLevel.ERROR))
        assert effective.level == LogLevel.ERROR


class TestPerformanceLogging:
    """Tests for performance timing decorator and context manager."""

    def test_log_performance(self):
        @log_performance(threshold_ms=10000)
        def fast_func():
            return 42

        assert fast_func() == 42

    def test_log_performance_preserves_name(self):
        @log_performance()
        def my_function():
            """My docstring."""

        assert my_function.__name__ == "my_function"
        assert my_function.__doc__ == "My docstring."

    def test_log_performance_with_exception(self):
        @log_performance(threshold_ms=10000)
        def failing_func():
            raise ValueError("test error")

        with pytest.raises(ValueError, match="test error"):
            failing_func()

    def test_slow_call_logged_as_warning(self, caplog):
        @log_performance(threshold_ms=0)
        def slow():
            return 1

        with caplog.at_level(logging.DEBUG):
            slow()
        assert any(r.levelno == logging.WARNING and "Slow operation" in r.getMessage() for r in caplog.records)

    def test_domain_error_logged_as_warning(self, caplog):
        @log_performance(threshold_ms=10000)
        def no_data():
            raise NoDataForRangeError("EEE")

        with caplog.at_level(logging.DEBUG):
            with pytest.raises(NoDataForRangeError):
                no_data()
        failures = [r for r in caplog.records if "failed after" in r.getMessage()]
        assert [r.levelno for r in failures] == [logging.WARNING]

    def test_unexpected_error_logged_as_error(self, caplog):
        @log_performance(threshold_ms=10000)
        def broken():
            raise RuntimeError("boom")

        with caplog.at_level(logging.DEBUG):
            with pytest.raises(RuntimeError):
                broken()
        failures = [r for r in caplog.records if "failed after" in r.getMessage()]
        assert [r.levelno for r in failures] == [logging.ERROR]

    def test_timer_domain_error_logged_as_warning(self, caplog):
        with caplog.at_level(logging.DEBUG):
            with pytest.raises(ValidationError):
                with PerformanceTimer("simulate"):
                    raise ValidationError("bad amount")
        failures = [r for r in caplog.records if "failed after" in r.getMessage()]
        assert [r.levelno for r in failures] == [logging.WARNING]

    def test_summarize_args(self):
        summary = _summarize_args((1, "x" * 200, 3, 4), {"amount": 5})
        assert "..." in summary
        assert "+1 more args" in summary
        assert "amount=5" in summary

    def test_performance_timer(self):
        with PerformanceTimer("test_op") as timer:
            time.sleep(0.01)
        assert timer.duration_ms >= 10

    def test_performance_timer_with_exception(self):
        with pytest.raises(ValueError):
            with PerformanceTimer("failing_op") as timer:
                raise ValueError("oops")
        assert timer.duration_ms >= 0

    def test_default_threshold(self):
        assert PerformanceTimer("op").threshold_ms == 1000.0
        assert PerformanceTimer("op", threshold_ms=500.0).threshold_ms == 500.0
