"""Structured log events for the delivery ingestion pipeline.

Usage
-----
>>> event_logger = IngestionEventLogger()
>>> event_logger.log_persisted(match_id=42, event_id="0f6c...")

"""

from __future__ import annotations

import enum

from crease.logging import get_logger, log_error, log_info, log_warning

logger = get_logger(__name__)


class IngestionEventType(enum.StrEnum):
    """Structured log event types for delivery ingestion."""

    READ_FAILED = "delivery.read.failed"
    DECODE_FAILED = "delivery.decode.failed"
    VALIDATION_FAILED = "delivery.validation.failed"
    VALIDATION_REJECTED = "delivery.validation.rejected"
    PERSIST_FAILED = "delivery.persist.failed"
    PERSISTED = "delivery.persisted"
    NEXT_EVENT_REQUESTED = "delivery.next_event.requested"
    NEXT_EVENT_FAILED = "delivery.next_event.failed"


class IngestionEventLogger:
    """Emit one femtologging message per pipeline stage outcome."""

    def log_read_failed(self, *, error: BaseException) -> None:
        """Log a request body that could not be read."""
        log_error(logger, "[%s] error=%s", IngestionEventType.READ_FAILED, error)

    def log_decode_failed(self, *, error: BaseException) -> None:
        """Log a payload that is not a delivery event."""
        log_error(logger, "[%s] error=%s", IngestionEventType.DECODE_FAILED, error)

    def log_validation_failed(self, *, match_id: int, error: BaseException) -> None:
        """Log a delivery that failed a field-level check."""
        log_warning(
            logger,
            "[%s] match_id=%d error=%s",
            IngestionEventType.VALIDATION_FAILED,
            match_id,
            error,
        )

    def log_validation_rejected(self, *, match_id: int, reason: str) -> None:
        """Log a well-formed but inconsistent delivery."""
        log_warning(
            logger,
            "[%s] match_id=%d reason=%s",
            IngestionEventType.VALIDATION_REJECTED,
            match_id,
            reason,
        )

    def log_persist_failed(self, *, match_id: int, error: str) -> None:
        """Log a failed or silently dropped event store write.

        Parameters
        ----------
        match_id
            Match the delivery belongs to.
        error
            Store error text, or a description of the empty identifier.

        """
        log_error(
            logger,
            "[%s] match_id=%d error=%s",
            IngestionEventType.PERSIST_FAILED,
            match_id,
            error,
        )

    def log_persisted(self, *, match_id: int, event_id: str) -> None:
        """Log a delivery durably appended to the event store."""
        log_info(
            logger,
            "[%s] match_id=%d event_id=%s",
            IngestionEventType.PERSISTED,
            match_id,
            event_id,
        )

    def log_next_event_requested(self, *, match_id: int) -> None:
        """Log the start of the enrichment stage."""
        log_info(
            logger,
            "[%s] match_id=%d",
            IngestionEventType.NEXT_EVENT_REQUESTED,
            match_id,
        )

    def log_next_event_failed(self, *, match_id: int, error: BaseException) -> None:
        """Log a prediction service failure after a durable write."""
        log_error(
            logger,
            "[%s] match_id=%d error=%s",
            IngestionEventType.NEXT_EVENT_FAILED,
            match_id,
            error,
        )
