"""Structured Logging & Run Tracing.

Provides structured JSON logging, run/symbol context propagation,
and performance timing for the StockWatch analytics jobs.
"""

from src.logging_config.config import LogFormat, LoggingConfig, LogLevel
from src.logging_config.context import RunContext, generate_run_id
from src.logging_config.performance import PerformanceTimer, log_performance
from src.logging_config.setup import configure_logging, get_logger

__all__ = [
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "PerformanceTimer",
    "RunContext",
    "configure_logging",
    "generate_run_id",
    "get_logger",
    "log_performance",
]
