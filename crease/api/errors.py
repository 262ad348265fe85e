"""Falcon error handlers for the gateway.

Usage
-----
Register the handler on the Falcon app::

    app.add_error_handler(falcon.HTTPMethodNotAllowed, handle_method_not_allowed)

"""

from __future__ import annotations

import typing as typ

import falcon

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = ["handle_method_not_allowed"]


async def handle_method_not_allowed(
    _req: Request,
    resp: Response,
    ex: falcon.HTTPMethodNotAllowed,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``HTTPMethodNotAllowed`` to a bare HTTP 405 with no body.

    Parameters
    ----------
    _req
        Falcon request (unused).
    resp
        Falcon response whose status and body are set.
    ex
        The raised error; its ``Allow`` header is preserved.
    _params
        URI template parameters (unused).

    """
    resp.status = falcon.HTTP_405
    if ex.headers:
        resp.set_headers(ex.headers)
    resp.data = b""
