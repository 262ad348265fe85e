"""Health probe resources for liveness and readiness checks.

Usage
-----
Register health endpoints on the Falcon app::

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(event_store))

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from crease.eventstore.protocol import EventStoreClient

__all__ = ["HealthResource", "ReadyResource"]


class HealthResource:
    """Liveness probe returning ``{"status": "ok"}`` while the process runs."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health requests."""
        resp.media = {"status": "ok"}
        resp.status = HTTPStatus.OK


class ReadyResource:
    """Readiness probe gated on the event store connection.

    Responds 200 ``{"status": "ready"}`` once the store is connected and
    503 ``{"status": "unavailable"}`` before then.

    """

    def __init__(self, event_store: EventStoreClient) -> None:
        """Keep the shared event store handle for status checks."""
        self._event_store = event_store

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /ready requests.

        Parameters
        ----------
        _req
            Falcon request (unused).
        resp
            Falcon response populated with readiness status.

        """
        if self._event_store.connected:
            resp.media = {"status": "ready"}
            resp.status = HTTPStatus.OK
            return
        resp.media = {"status": "unavailable"}
        resp.status = HTTPStatus.SERVICE_UNAVAILABLE
