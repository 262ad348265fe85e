"""HTTP client for the downstream next-ball prediction service."""

from __future__ import annotations

import typing as typ

import httpx

from crease.logging import get_logger, log_debug
from crease.prediction.errors import PredictionTransportError

if typ.TYPE_CHECKING:
    from crease.prediction.config import GatewayConfig

logger = get_logger(__name__)


@typ.runtime_checkable
class PredictionClient(typ.Protocol):
    """Fetches the next expected event for a match."""

    async def next_event(self, match_id: int) -> bytes:
        """Return the raw next-event hint for ``match_id``."""
        ...


class NextBallClient:
    """Ask the next-ball service for the next expected event of a match.

    The response body is returned verbatim. The downstream status code is
    not inspected, so any response that can be read in full counts as a
    hint.

    Parameters
    ----------
    config
        Resolved prediction service location.
    http_client
        Optional ``httpx.AsyncClient`` for testing. When omitted the
        instance creates and owns its own client.

    Examples
    --------
    >>> import asyncio
    >>> client = NextBallClient(GatewayConfig())
    >>> # hint = asyncio.run(client.next_event(42))
    >>> asyncio.run(client.aclose())

    """

    def __init__(
        self,
        config: GatewayConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with configuration."""
        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout_s)

    @property
    def config(self) -> GatewayConfig:
        """Read-only access to the resolved configuration."""
        return self._config

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def next_event(self, match_id: int) -> bytes:
        """Return the next-event hint for ``match_id``.

        Parameters
        ----------
        match_id
            Identifier of the match the delivery belongs to.

        Returns
        -------
        bytes
            Full response body, possibly empty.

        Raises
        ------
        PredictionTransportError
            If no response is received or its body cannot be read.

        """
        url = self._config.next_ball_url
        request = self._client.build_request("GET", url, params={"match": match_id})
        try:
            response = await self._client.send(request, stream=True)
        except httpx.RequestError as exc:
            raise PredictionTransportError.unreachable(url, str(exc)) from exc

        try:
            body = await response.aread()
        except httpx.RequestError as exc:
            raise PredictionTransportError.incomplete_body(url, str(exc)) from exc
        finally:
            await response.aclose()

        log_debug(
            logger,
            "Next ball service answered HTTP %d with %d bytes for match %d",
            response.status_code,
            len(body),
            match_id,
        )
        return body
