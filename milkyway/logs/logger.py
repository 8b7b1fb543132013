"""
Ledger Event Logger

Every ledger mutation and every soft failure emits one structured event.
This provides:
1. Traceability while debugging a household's ledger
2. Visibility into fail-soft paths (corrupt storage, skipped records)
3. A record of remote insight failures that the user only sees as an apology

Events go to the local structured log only. Nothing is persisted;
the ledger keeps no history of its own.
"""

import logging
from enum import Enum
from typing import Any, Optional

import structlog


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through the stdlib root logger at `level`."""
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    logging.basicConfig(format="%(message)s", level=numeric_level)
    logging.getLogger().setLevel(numeric_level)


class LedgerEventType(str, Enum):
    """Types of events the ledger logs."""
    # Mutations
    RECORD_SAVED = "record_saved"
    RECORD_DELETED = "record_deleted"
    RANGE_FILLED = "range_filled"
    RANGE_SETTLED = "range_settled"
    SETTINGS_SAVED = "settings_saved"
    EXPORT_GENERATED = "export_generated"
    
    # Soft failures
    STORAGE_UNAVAILABLE = "storage_unavailable"
    MALFORMED_RECORD_SKIPPED = "malformed_record_skipped"
    INSIGHT_FAILED = "insight_failed"


class LedgerSeverity(str, Enum):
    """Severity level for ledger events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LedgerEventLogger:
    """
    Central structured logging for ledger events.
    
    One instance is shared by the store, the range operations and
    the insight agent.
    """
    
    def __init__(self, name: str = "milkyway"):
        self._logger = structlog.get_logger(name)
    
    def log(
        self,
        event_type: LedgerEventType,
        severity: LedgerSeverity = LedgerSeverity.INFO,
        **details: Any,
    ) -> None:
        """Log an event with its details as structured fields."""
        if severity == LedgerSeverity.ERROR:
            self._logger.error(event_type.value, **details)
        elif severity == LedgerSeverity.WARNING:
            self._logger.warning(event_type.value, **details)
        elif severity == LedgerSeverity.DEBUG:
            self._logger.debug(event_type.value, **details)
        else:
            self._logger.info(event_type.value, **details)
    
    def log_record_saved(self, date_key: str, status: str, record_count: int) -> None:
        self.log(
            LedgerEventType.RECORD_SAVED,
            date=date_key,
            status=status,
            record_count=record_count,
        )
    
    def log_record_deleted(self, date_key: str, existed: bool, record_count: int) -> None:
        self.log(
            LedgerEventType.RECORD_DELETED,
            date=date_key,
            existed=existed,
            record_count=record_count,
        )
    
    def log_range_filled(
        self,
        start: str,
        end: str,
        days: int,
        payments_carried: int,
    ) -> None:
        """Log a bulk-fill. payments_carried counts days that kept a payment."""
        self.log(
            LedgerEventType.RANGE_FILLED,
            start=start,
            end=end,
            days=days,
            payments_carried=payments_carried,
        )
    
    def log_range_settled(
        self,
        start: str,
        end: str,
        settled: int,
        payment_only_zeroed: int,
    ) -> None:
        """Log a bulk-settle, flagging payment-only days whose payment was zeroed."""
        severity = LedgerSeverity.WARNING if payment_only_zeroed else LedgerSeverity.INFO
        self.log(
            LedgerEventType.RANGE_SETTLED,
            severity,
            start=start,
            end=end,
            settled=settled,
            payment_only_zeroed=payment_only_zeroed,
        )
    
    def log_settings_saved(self, details: dict) -> None:
        self.log(LedgerEventType.SETTINGS_SAVED, **details)
    
    def log_export_generated(self, rows: int) -> None:
        self.log(LedgerEventType.EXPORT_GENERATED, rows=rows)
    
    def log_storage_unavailable(self, key: str, error: str) -> None:
        self.log(
            LedgerEventType.STORAGE_UNAVAILABLE,
            LedgerSeverity.WARNING,
            key=key,
            error=error,
        )
    
    def log_malformed_record(self, error: str, raw: Optional[object] = None) -> None:
        self.log(
            LedgerEventType.MALFORMED_RECORD_SKIPPED,
            LedgerSeverity.WARNING,
            error=error,
            raw=repr(raw)[:200] if raw is not None else None,
        )
    
    def log_insight_failed(self, error_type: str, error_message: str) -> None:
        self.log(
            LedgerEventType.INSIGHT_FAILED,
            LedgerSeverity.ERROR,
            error_type=error_type,
            error_message=error_message,
        )
