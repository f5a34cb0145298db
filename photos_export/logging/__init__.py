"""Logging package: run log sinks and Rich console output."""

from .run_log import RunLog, NullRunLog, ErrorLedger, iso_timestamp
from .console import ConsoleReporter, QuietReporter, setup_logging

__all__ = [
    "RunLog",
    "NullRunLog",
    "ErrorLedger",
    "iso_timestamp",
    "ConsoleReporter",
    "QuietReporter",
    "setup_logging",
]
