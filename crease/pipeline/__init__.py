"""Delivery ingestion pipeline: validate, persist, enrich."""

from __future__ import annotations

from .observability import IngestionEventLogger, IngestionEventType
from .service import (
    BodyReader,
    DeliveryPipeline,
    DeliveryPipelineDependencies,
    PipelineResult,
    wants_next_event,
)

__all__ = [
    "BodyReader",
    "DeliveryPipeline",
    "DeliveryPipelineDependencies",
    "IngestionEventLogger",
    "IngestionEventType",
    "PipelineResult",
    "wants_next_event",
]
