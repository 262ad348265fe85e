"""Application factory for the Crease Falcon ASGI application.

This module provides ``create_app()`` which wires the delivery pipeline
into a Falcon ASGI application with the ``/event`` route, health probes,
CORS headers, and startup/shutdown handling for the shared clients.

Usage
-----
Create an app from already-built collaborators::

    from crease.api.app import AppDependencies, create_app

    deps = AppDependencies(
        validator=DeliveryValidator(),
        event_store=event_store,
        prediction_client=next_ball_client,
        shutdown_hooks=(next_ball_client.aclose, event_store.close),
    )
    app = create_app(deps)

"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import typing as typ

import falcon
import falcon.asgi

from crease.api.errors import handle_method_not_allowed
from crease.api.events.resources import DeliveryEventResource
from crease.api.health.resources import HealthResource, ReadyResource
from crease.api.middleware import CORSHeadersMiddleware, ServiceLifespanMiddleware
from crease.pipeline.service import DeliveryPipeline, DeliveryPipelineDependencies

if typ.TYPE_CHECKING:
    from crease.deliveries.validation import Validator
    from crease.eventstore.protocol import EventStoreClient
    from crease.pipeline.observability import IngestionEventLogger
    from crease.prediction.client import PredictionClient

__all__ = ["EVENT_ROUTE", "AppDependencies", "create_app"]

EVENT_ROUTE = "/event"

ShutdownHook: typ.TypeAlias = cabc.Callable[[], cabc.Awaitable[None]]


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Collaborators injected into the Falcon application.

    Attributes
    ----------
    validator
        Domain validator for decoded deliveries.
    event_store
        Shared event store handle; connected on ASGI startup.
    prediction_client
        Client for the next-ball prediction service.
    shutdown_hooks
        Coroutine functions awaited on ASGI shutdown.
    event_logger
        Optional observability logger for the pipeline.

    """

    validator: Validator
    event_store: EventStoreClient
    prediction_client: PredictionClient
    shutdown_hooks: tuple[ShutdownHook, ...] = ()
    event_logger: IngestionEventLogger | None = None


def create_app(dependencies: AppDependencies) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Parameters
    ----------
    dependencies
        Collaborators shared by every request.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    pipeline = DeliveryPipeline(
        DeliveryPipelineDependencies(
            validator=dependencies.validator,
            event_store=dependencies.event_store,
            prediction_client=dependencies.prediction_client,
        ),
        event_logger=dependencies.event_logger,
    )

    middleware: list[object] = [
        CORSHeadersMiddleware(),
        ServiceLifespanMiddleware(
            dependencies.event_store,
            shutdown_hooks=dependencies.shutdown_hooks,
        ),
    ]
    app = falcon.asgi.App(middleware=middleware)  # type: ignore[no-matching-overload]  # Falcon stubs

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(dependencies.event_store))
    app.add_route(EVENT_ROUTE, DeliveryEventResource(pipeline))

    app.add_error_handler(falcon.HTTPMethodNotAllowed, handle_method_not_allowed)

    return app
