"""Unit tests for the delivery ingestion pipeline."""

from __future__ import annotations

from http import HTTPStatus
from unittest import mock

import pytest

from crease.deliveries import DeliveryValidationError, Invalid, ValidationFailed
from crease.eventstore import EventStoreError
from crease.pipeline import (
    DeliveryPipeline,
    DeliveryPipelineDependencies,
    IngestionEventLogger,
    PipelineResult,
    wants_next_event,
)
from crease.prediction import PredictionTransportError
from tests.helpers.delivery_fakes import (
    FakeEventStore,
    FakePredictionClient,
    StaticValidator,
    delivery_body,
)


def _reader(body: bytes):  # noqa: ANN202
    async def read() -> bytes:
        return body

    return read


async def _broken_reader() -> bytes:
    raise ConnectionResetError("peer went away")


class _Harness:
    """Pipeline wired to fakes, exposing each collaborator."""

    def __init__(
        self,
        *,
        validator: StaticValidator | None = None,
        event_store: FakeEventStore | None = None,
        prediction_client: FakePredictionClient | None = None,
    ) -> None:
        self.validator = validator or StaticValidator()
        self.event_store = event_store or FakeEventStore()
        self.prediction_client = prediction_client or FakePredictionClient()
        self.events = mock.MagicMock(spec=IngestionEventLogger)
        self.pipeline = DeliveryPipeline(
            DeliveryPipelineDependencies(
                validator=self.validator,
                event_store=self.event_store,
                prediction_client=self.prediction_client,
            ),
            event_logger=self.events,
        )

    async def submit(
        self,
        body: bytes | None = None,
        params: dict[str, object] | None = None,
    ) -> PipelineResult:
        payload = delivery_body() if body is None else body
        return await self.pipeline.process(_reader(payload), params or {})


class TestSuccessfulSubmission:
    """Tests for deliveries that pass every stage."""

    async def test_returns_created_with_hint(self) -> None:
        """A stored delivery returns 201 and the next-event hint."""
        hint = b'{"eventType":"delivery","probability":0.82}'
        harness = _Harness(prediction_client=FakePredictionClient(hint=hint))

        result = await harness.submit()

        assert result == PipelineResult(HTTPStatus.CREATED, hint)
        assert harness.prediction_client.calls == [42], "hint requested for match"
        harness.events.log_persisted.assert_called_once_with(
            match_id=42, event_id="evt-0001"
        )
        harness.events.log_next_event_requested.assert_called_once_with(match_id=42)

    async def test_empty_hint_gives_empty_body(self) -> None:
        """An empty hint still yields 201 with no body."""
        harness = _Harness()

        result = await harness.submit()

        assert result.status is HTTPStatus.CREATED
        assert result.body == b""

    async def test_event_is_pushed_without_store_validation(self) -> None:
        """The pipeline validates itself and pushes with validate=False."""
        harness = _Harness()

        await harness.submit()

        assert len(harness.event_store.pushed) == 1
        event, validate = harness.event_store.pushed[0]
        assert event.match_id == 42
        assert validate is False

    async def test_next_event_false_skips_enrichment(self) -> None:
        """nextEvent=false returns 201 without calling the prediction service."""
        harness = _Harness(prediction_client=FakePredictionClient(hint=b"ignored"))

        result = await harness.submit(params={"nextEvent": "false"})

        assert result == PipelineResult(HTTPStatus.CREATED, b"")
        assert harness.prediction_client.calls == [], "enrichment should be skipped"
        assert len(harness.event_store.pushed) == 1, "delivery still stored"

    @pytest.mark.parametrize("value", ["true", "False", "0", "", "no"], ids=repr)
    async def test_other_next_event_values_enrich(self, value: str) -> None:
        """Only the exact lowercase string ``false`` disables enrichment."""
        harness = _Harness(prediction_client=FakePredictionClient(hint=b"{}"))

        result = await harness.submit(params={"nextEvent": value})

        assert result.body == b"{}"
        assert harness.prediction_client.calls == [42]


class TestStageFailures:
    """Tests for each stage's failure mapping."""

    async def test_read_failure_is_bad_request(self) -> None:
        """An unreadable body returns 400 and touches nothing else."""
        harness = _Harness()

        result = await harness.pipeline.process(_broken_reader, {})

        assert result.status is HTTPStatus.BAD_REQUEST
        assert harness.validator.calls == [], "validator must not run"
        assert harness.event_store.pushed == [], "store must not be written"
        harness.events.log_read_failed.assert_called_once()

    @pytest.mark.parametrize(
        "body",
        [b"", b"not json", b'{"ball": {}}', b'{"match": "abc"}'],
        ids=["empty", "text", "missing-match", "string-match"],
    )
    async def test_decode_failure_is_server_error(self, body: bytes) -> None:
        """Undecodable bodies return 500 and are never stored."""
        harness = _Harness()

        result = await harness.submit(body=body)

        assert result.status is HTTPStatus.INTERNAL_SERVER_ERROR
        assert result.body.startswith(b"Failed to unmarshal event")
        assert harness.validator.calls == [], "validator must not run"
        assert harness.event_store.pushed == [], "store must not be written"
        harness.events.log_decode_failed.assert_called_once()

    async def test_validation_failed_is_bad_request_with_diagnostic(self) -> None:
        """ValidationFailed returns 400 quoting the error."""
        error = DeliveryValidationError.missing("bowler")
        harness = _Harness(validator=StaticValidator(ValidationFailed(error)))

        result = await harness.submit()

        assert result == PipelineResult(
            HTTPStatus.BAD_REQUEST, b"Invalid event passed - bowler is required"
        )
        assert harness.event_store.pushed == [], "invalid deliveries are not stored"
        assert harness.prediction_client.calls == []
        harness.events.log_validation_failed.assert_called_once_with(
            match_id=42, error=error
        )

    async def test_invalid_is_bad_request(self) -> None:
        """Invalid returns 400 with a generic body."""
        harness = _Harness(
            validator=StaticValidator(Invalid("bowler 11 is also batting"))
        )

        result = await harness.submit()

        assert result == PipelineResult(
            HTTPStatus.BAD_REQUEST, b"Invalid delivery received"
        )
        assert harness.event_store.pushed == []
        harness.events.log_validation_rejected.assert_called_once_with(
            match_id=42, reason="bowler 11 is also batting"
        )

    async def test_store_error_is_server_error(self) -> None:
        """An event store failure returns 500 and skips enrichment."""
        error = EventStoreError.write_failed("disk full")
        harness = _Harness(event_store=FakeEventStore(error=error))

        result = await harness.submit()

        assert result.status is HTTPStatus.INTERNAL_SERVER_ERROR
        assert result.body == f"Failed to push event {error}".encode()
        assert harness.prediction_client.calls == [], "no hint after failed write"
        harness.events.log_persisted.assert_not_called()

    async def test_empty_identifier_is_server_error(self) -> None:
        """A push that returns no identifier counts as a failed write."""
        harness = _Harness(event_store=FakeEventStore(event_id=""))

        result = await harness.submit()

        assert result == PipelineResult(
            HTTPStatus.INTERNAL_SERVER_ERROR, b"Internal server error"
        )
        assert harness.prediction_client.calls == []
        harness.events.log_persist_failed.assert_called_once()

    async def test_prediction_failure_keeps_stored_event(self) -> None:
        """A prediction failure returns 500 after the delivery is stored."""
        error = PredictionTransportError.unreachable("http://nb:3004/", "refused")
        harness = _Harness(prediction_client=FakePredictionClient(error=error))

        result = await harness.submit()

        assert result.status is HTTPStatus.INTERNAL_SERVER_ERROR
        assert result.body == f"Error from next ball processor - {error}".encode()
        assert len(harness.event_store.pushed) == 1, "write is not rolled back"
        harness.events.log_persisted.assert_called_once()
        harness.events.log_next_event_failed.assert_called_once_with(
            match_id=42, error=error
        )


class TestWantsNextEvent:
    """Tests for the nextEvent query flag."""

    @pytest.mark.parametrize(
        ("params", "expected"),
        [
            ({}, True),
            ({"nextEvent": "true"}, True),
            ({"nextEvent": "false"}, False),
            ({"nextEvent": "FALSE"}, True),
            ({"nextEvent": ["false", "true"]}, False),
            ({"nextEvent": ["true", "false"]}, True),
            ({"nextEvent": []}, True),
        ],
        ids=[
            "absent",
            "true",
            "false",
            "uppercase",
            "repeated-false-first",
            "repeated-true-first",
            "empty-list",
        ],
    )
    def test_flag(self, params: dict[str, object], *, expected: bool) -> None:
        """Only a first value of exactly ``false`` disables the hint."""
        assert wants_next_event(params) is expected
