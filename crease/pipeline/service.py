"""Validate, persist and enrich a single delivery submission.

``DeliveryPipeline.process`` runs the stages below strictly in order and
stops at the first failure. Each outcome maps to exactly one HTTP status
and plain-text body:

=========  ===========================================  ======
Stage      Outcome                                      Status
=========  ===========================================  ======
read       I/O error                                    400
decode     not a delivery payload                       500
validate   ``ValidationFailed`` / ``Invalid``           400
persist    ``EventStoreError`` / empty identifier       500
enrich     ``PredictionTransportError``                 500
enrich     non-empty hint (body is the hint)            201
done       stored, no hint                              201
=========  ===========================================  ======

Enrichment runs after the write, so a failed prediction call leaves the
delivery stored even though the caller receives a 500.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import typing as typ
from http import HTTPStatus

import msgspec

from crease.deliveries.models import decode_delivery
from crease.deliveries.validation import Invalid, Valid, ValidationFailed
from crease.eventstore.errors import EventStoreError
from crease.pipeline.observability import IngestionEventLogger
from crease.prediction.errors import PredictionTransportError

if typ.TYPE_CHECKING:
    from crease.deliveries.models import DeliveryEvent
    from crease.deliveries.validation import Validator
    from crease.eventstore.protocol import EventStoreClient
    from crease.prediction.client import PredictionClient

__all__ = [
    "BodyReader",
    "DeliveryPipeline",
    "DeliveryPipelineDependencies",
    "PipelineResult",
    "wants_next_event",
]

BodyReader: typ.TypeAlias = cabc.Callable[[], cabc.Awaitable[bytes]]

NEXT_EVENT_PARAM = "nextEvent"

_READ_FAILED_BODY = "Unable to read event"
_INVALID_DELIVERY_BODY = "Invalid delivery received"
_INTERNAL_ERROR_BODY = "Internal server error"


@dc.dataclass(frozen=True, slots=True)
class PipelineResult:
    """Status and body to write back to the caller."""

    status: HTTPStatus
    body: bytes = b""

    @classmethod
    def text(cls, status: HTTPStatus, message: str) -> PipelineResult:
        """Build a result with a UTF-8 encoded diagnostic body."""
        return cls(status, message.encode("utf-8"))


class _StageFailedError(Exception):
    """Carries the terminal result of a failed stage."""

    def __init__(self, result: PipelineResult) -> None:
        self.result = result
        super().__init__(result.status.phrase)


@dc.dataclass(frozen=True, slots=True)
class DeliveryPipelineDependencies:
    """Collaborators shared by every pipeline run.

    Attributes
    ----------
    validator
        Domain validator for decoded deliveries.
    event_store
        Long-lived, concurrency-safe event store handle.
    prediction_client
        Client for the next-ball prediction service.

    """

    validator: Validator
    event_store: EventStoreClient
    prediction_client: PredictionClient


def wants_next_event(params: cabc.Mapping[str, object]) -> bool:
    """Return ``False`` only when ``nextEvent`` is literally ``"false"``.

    Repeated parameters are judged by their first value.
    """
    value = params.get(NEXT_EVENT_PARAM)
    if isinstance(value, list | tuple):
        value = value[0] if value else None
    return value != "false"


class DeliveryPipeline:
    """Stateless orchestrator for one delivery submission at a time.

    A single instance is shared by all requests; it keeps no per-request
    state, so concurrent ``process`` calls are independent.
    """

    def __init__(
        self,
        dependencies: DeliveryPipelineDependencies,
        *,
        event_logger: IngestionEventLogger | None = None,
    ) -> None:
        """Store collaborators for later runs."""
        self._validator = dependencies.validator
        self._event_store = dependencies.event_store
        self._prediction_client = dependencies.prediction_client
        self._events = event_logger or IngestionEventLogger()

    async def process(
        self,
        read_body: BodyReader,
        params: cabc.Mapping[str, object],
    ) -> PipelineResult:
        """Run every stage for one submission.

        Parameters
        ----------
        read_body
            Coroutine function returning the full request body.
        params
            Query parameters of the request.

        Returns
        -------
        PipelineResult
            Status and body determined by the first failing stage, or the
            success response.

        """
        try:
            payload = await self._read(read_body)
            event = self._decode(payload)
            self._validate(event)
            await self._persist(event)
            hint = b""
            if wants_next_event(params):
                hint = await self._enrich(event)
        except _StageFailedError as failure:
            return failure.result

        return PipelineResult(HTTPStatus.CREATED, hint)

    async def _read(self, read_body: BodyReader) -> bytes:
        try:
            return await read_body()
        except (OSError, EOFError) as exc:
            self._events.log_read_failed(error=exc)
            raise _StageFailedError(
                PipelineResult.text(HTTPStatus.BAD_REQUEST, _READ_FAILED_BODY)
            ) from exc

    def _decode(self, payload: bytes) -> DeliveryEvent:
        try:
            return decode_delivery(payload)
        except msgspec.DecodeError as exc:
            self._events.log_decode_failed(error=exc)
            raise _StageFailedError(
                PipelineResult.text(
                    HTTPStatus.INTERNAL_SERVER_ERROR,
                    f"Failed to unmarshal event {exc}",
                )
            ) from exc

    def _validate(self, event: DeliveryEvent) -> None:
        match self._validator.validate(event):
            case Valid():
                return
            case ValidationFailed(error=error):
                self._events.log_validation_failed(match_id=event.match_id, error=error)
                raise _StageFailedError(
                    PipelineResult.text(
                        HTTPStatus.BAD_REQUEST, f"Invalid event passed - {error}"
                    )
                )
            case Invalid(reason=reason):
                self._events.log_validation_rejected(
                    match_id=event.match_id, reason=reason
                )
                raise _StageFailedError(
                    PipelineResult.text(HTTPStatus.BAD_REQUEST, _INVALID_DELIVERY_BODY)
                )

    async def _persist(self, event: DeliveryEvent) -> str:
        try:
            event_id = await self._event_store.push_event(event, validate=False)
        except EventStoreError as exc:
            self._events.log_persist_failed(match_id=event.match_id, error=str(exc))
            raise _StageFailedError(
                PipelineResult.text(
                    HTTPStatus.INTERNAL_SERVER_ERROR, f"Failed to push event {exc}"
                )
            ) from exc

        if not event_id:
            self._events.log_persist_failed(
                match_id=event.match_id, error="store returned an empty identifier"
            )
            raise _StageFailedError(
                PipelineResult.text(
                    HTTPStatus.INTERNAL_SERVER_ERROR, _INTERNAL_ERROR_BODY
                )
            )

        self._events.log_persisted(match_id=event.match_id, event_id=event_id)
        return event_id

    async def _enrich(self, event: DeliveryEvent) -> bytes:
        self._events.log_next_event_requested(match_id=event.match_id)
        try:
            return await self._prediction_client.next_event(event.match_id)
        except PredictionTransportError as exc:
            self._events.log_next_event_failed(match_id=event.match_id, error=exc)
            raise _StageFailedError(
                PipelineResult.text(
                    HTTPStatus.INTERNAL_SERVER_ERROR,
                    f"Error from next ball processor - {exc}",
                )
            ) from exc
