"""Behavioural coverage for POST /event delivery ingestion."""

from __future__ import annotations

import typing as typ

import falcon.testing
import httpx
import pytest
from pytest_bdd import given, parsers, scenario, then, when

from crease.api.app import EVENT_ROUTE, AppDependencies, create_app
from crease.deliveries import DeliveryValidator
from crease.prediction import GatewayConfig, NextBallClient
from tests.helpers.delivery_fakes import FakeEventStore, delivery_body

if typ.TYPE_CHECKING:
    from falcon.testing.client import Result

_HINT = b'{"eventType":"delivery","probability":0.81}'


class IngestionContext(typ.TypedDict, total=False):
    """Shared mutable scenario state."""

    client: falcon.testing.TestClient
    event_store: FakeEventStore
    next_ball_requests: list[httpx.Request]
    response: Result


@scenario(
    "../delivery_ingestion.feature",
    "Store a delivery without asking for the next event",
)
def test_store_delivery_without_next_event() -> None:
    """Wrap the pytest-bdd scenario for nextEvent=false submissions."""


@scenario(
    "../delivery_ingestion.feature",
    "Reject a body that is not a delivery",
)
def test_reject_undecodable_body() -> None:
    """Wrap the pytest-bdd scenario for malformed payloads."""


@scenario(
    "../delivery_ingestion.feature",
    "Keep the delivery when the next ball service is down",
)
def test_keep_delivery_when_next_ball_down() -> None:
    """Wrap the pytest-bdd scenario for enrichment failures."""


@pytest.fixture
def ingestion_context() -> IngestionContext:
    """Provision empty scenario state."""
    return {"next_ball_requests": []}


def _build_client(
    context: IngestionContext,
    handler: typ.Callable[[httpx.Request], httpx.Response],
) -> None:
    def recording_handler(request: httpx.Request) -> httpx.Response:
        context["next_ball_requests"].append(request)
        return handler(request)

    event_store = FakeEventStore()
    next_ball = NextBallClient(
        GatewayConfig(next_ball_host="next-ball.test"),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(recording_handler)),
    )
    deps = AppDependencies(
        validator=DeliveryValidator(),
        event_store=event_store,
        prediction_client=next_ball,
    )
    context["event_store"] = event_store
    context["client"] = falcon.testing.TestClient(create_app(deps))


@given("a gateway whose next ball service answers with a hint")
def given_next_ball_answers(ingestion_context: IngestionContext) -> None:
    """Wire the gateway to a prediction service returning a hint."""
    _build_client(ingestion_context, lambda request: httpx.Response(200, content=_HINT))


@given("a gateway whose next ball service is unreachable")
def given_next_ball_unreachable(ingestion_context: IngestionContext) -> None:
    """Wire the gateway to a prediction service refusing connections."""

    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    _build_client(ingestion_context, refuse)


@when(
    parsers.parse(
        "I submit a valid delivery for match {match_id:d} with nextEvent=false"
    )
)
def when_submit_without_next_event(
    ingestion_context: IngestionContext, match_id: int
) -> None:
    """POST a valid delivery opting out of enrichment."""
    client = ingestion_context["client"]
    ingestion_context["response"] = client.simulate_post(
        EVENT_ROUTE,
        body=delivery_body(match=match_id),
        params={"nextEvent": "false"},
    )


@when(parsers.re(r"I submit a valid delivery for match (?P<match_id>\d+)$"))
def when_submit_delivery(ingestion_context: IngestionContext, match_id: str) -> None:
    """POST a valid delivery with the default enrichment."""
    client = ingestion_context["client"]
    ingestion_context["response"] = client.simulate_post(
        EVENT_ROUTE, body=delivery_body(match=int(match_id))
    )


@when(parsers.parse('I submit the body "{body}"'))
def when_submit_body(ingestion_context: IngestionContext, body: str) -> None:
    """POST an arbitrary request body."""
    client = ingestion_context["client"]
    ingestion_context["response"] = client.simulate_post(
        EVENT_ROUTE, body=body.encode("utf-8")
    )


@then(parsers.parse("the response status is {status:d}"))
def then_response_status(ingestion_context: IngestionContext, status: int) -> None:
    """Assert the HTTP response status code."""
    response = ingestion_context["response"]
    assert response.status_code == status, (
        f"expected status {status}, got {response.status_code}: {response.text}"
    )


@then("the response body is empty")
def then_response_body_empty(ingestion_context: IngestionContext) -> None:
    """Assert the response carries no body."""
    assert ingestion_context["response"].content == b""


@then(parsers.parse('the response body contains "{fragment}"'))
def then_response_body_contains(
    ingestion_context: IngestionContext, fragment: str
) -> None:
    """Assert the diagnostic body mentions ``fragment``."""
    text = ingestion_context["response"].text
    assert fragment in text, f"expected {fragment!r} in {text!r}"


@then(
    parsers.re(
        r"the event store holds (?P<count>\d+) deliver(?:y|ies) "
        r"for match (?P<match_id>\d+)"
    )
)
def then_event_store_holds(
    ingestion_context: IngestionContext, count: str, match_id: str
) -> None:
    """Assert how many deliveries were written for the match."""
    stored = [
        event
        for event, _ in ingestion_context["event_store"].pushed
        if event.match_id == int(match_id)
    ]
    assert len(stored) == int(count), f"expected {count} stored, got {len(stored)}"


@then(parsers.parse("the next ball service was called {count:d} times"))
def then_next_ball_called(ingestion_context: IngestionContext, count: int) -> None:
    """Assert how many prediction lookups were made."""
    requests = ingestion_context["next_ball_requests"]
    assert len(requests) == count, f"expected {count} calls, got {len(requests)}"
