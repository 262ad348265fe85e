"""Resource for ``/event`` delivery submissions.

``POST /event`` hands the request body and query string to the
:class:`~crease.pipeline.service.DeliveryPipeline` and writes back its
result verbatim. ``OPTIONS /event`` answers CORS preflight without touching
the pipeline. Other methods fall through to Falcon's 405 handling.

Usage
-----
Register the resource on the Falcon app::

    app.add_route("/event", DeliveryEventResource(pipeline))

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from crease.pipeline.service import DeliveryPipeline

__all__ = ["DeliveryEventResource"]


class DeliveryEventResource:
    """Accept delivery events for ingestion."""

    def __init__(self, pipeline: DeliveryPipeline) -> None:
        """Configure the resource with the shared pipeline.

        Parameters
        ----------
        pipeline
            Stateless pipeline shared across requests.

        """
        self._pipeline = pipeline

    async def on_options(self, _req: Request, resp: Response) -> None:
        """Handle CORS preflight with an empty 200."""
        resp.status = HTTPStatus.OK
        resp.data = b""

    async def on_post(self, req: Request, resp: Response) -> None:
        """Handle POST /event by running the ingestion pipeline.

        Parameters
        ----------
        req
            Falcon request carrying the delivery payload.
        resp
            Falcon response receiving the pipeline status and body.

        """
        result = await self._pipeline.process(req.stream.read, req.params)
        resp.status = result.status
        resp.data = result.body
