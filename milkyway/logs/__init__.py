"""Structured logging package."""

from milkyway.logs.logger import (
    LedgerEventLogger,
    LedgerEventType,
    LedgerSeverity,
    configure_logging,
)

__all__ = [
    "LedgerEventLogger",
    "LedgerEventType",
    "LedgerSeverity",
    "configure_logging",
]
