"""Falcon middleware for CORS headers and service lifespan.

Usage
-----
Register the middleware when creating the Falcon app::

    app = falcon.asgi.App(
        middleware=[
            CORSHeadersMiddleware(),
            ServiceLifespanMiddleware(event_store, shutdown_hooks=(client.aclose,)),
        ]
    )

"""

from __future__ import annotations

import contextlib
import typing as typ

from crease.eventstore.errors import EventStoreError
from crease.logging import get_logger, log_error, log_info

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from falcon.asgi import Request, Response

    from crease.eventstore.protocol import EventStoreClient

__all__ = [
    "CORS_HEADERS",
    "JSON_CONTENT_TYPE",
    "CORSHeadersMiddleware",
    "ServiceLifespanMiddleware",
]

logger = get_logger(__name__)

JSON_CONTENT_TYPE = "application/json; charset=UTF-8"

CORS_HEADERS: typ.Final[dict[str, str]] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": (
        "Accept, Content-Type, Content-Length, Accept-Encoding, Authorization"
    ),
}


class CORSHeadersMiddleware:
    """Stamp the content type and CORS headers on every response.

    Runs in ``process_response`` so responses produced by error handlers,
    including 405 rejections, carry the same headers as successful ones.
    """

    async def process_response(
        self,
        _req: Request,
        resp: Response,
        _resource: object,
        _req_succeeded: bool,  # noqa: FBT001 -- Falcon middleware signature requires positional bool
    ) -> None:
        """Apply the fixed header set to ``resp``."""
        resp.content_type = JSON_CONTENT_TYPE
        resp.set_headers(CORS_HEADERS)


class ServiceLifespanMiddleware:
    """Connect the event store on startup and release clients on shutdown.

    Parameters
    ----------
    event_store
        Shared event store handle to connect before serving.
    shutdown_hooks
        Coroutine functions awaited in order on ASGI shutdown.

    """

    def __init__(
        self,
        event_store: EventStoreClient,
        *,
        shutdown_hooks: cabc.Sequence[cabc.Callable[[], cabc.Awaitable[None]]] = (),
    ) -> None:
        """Store the lifecycle collaborators."""
        self._event_store = event_store
        self._shutdown_hooks = tuple(shutdown_hooks)

    async def process_startup(self, _scope: object, _event: object) -> None:
        """Connect the event store, aborting startup when it is unreachable.

        Raises
        ------
        EventStoreError
            If ``connect()`` reports failure.

        """
        if not await self._event_store.connect():
            log_error(logger, "Unable to connect to event store, aborting startup")
            raise EventStoreError.connect_failed()
        log_info(logger, "Event store connected, accepting deliveries")

    async def process_shutdown(self, _scope: object, _event: object) -> None:
        """Await every shutdown hook in order.

        Later hooks still run when an earlier one raises; the failure is
        re-raised once every hook has been awaited.
        """
        async with contextlib.AsyncExitStack() as stack:
            for hook in reversed(self._shutdown_hooks):
                stack.push_async_callback(hook)
