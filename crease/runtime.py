"""Crease runtime entrypoint.

This module provides the ASGI application factory used by Granian
(``crease.runtime:create_app``). It resolves configuration from the
environment once, builds the shared collaborators, and delegates app
construction to :func:`crease.api.app.create_app`. The event store is
connected during ASGI startup; a failed connection aborts the server.

Configuration is driven by environment variables:

- ``CREASE_HOST``: Bind address (default ``0.0.0.0``)
- ``CREASE_PORT``: Listen port (default ``4567``)
- ``CREASE_LOG_LEVEL``: Log level (default ``INFO``)
- ``CREASE_DATABASE_URL``: Event store URL (default local SQLite file)
- ``NEXT_BALL_IP``: Prediction service host (default ``localhost``)
- ``NEXT_BALL_PORT``: Prediction service port (default ``3004``)
- ``NEXT_BALL_TIMEOUT_S``: Optional prediction request timeout

Run the service directly with ``python -m crease.runtime``.
"""

from __future__ import annotations

import os
import typing as typ

from crease.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)

if typ.TYPE_CHECKING:
    import falcon.asgi

__all__ = ["create_app", "main"]

logger = get_logger(__name__)

_DEFAULT_PORT = "4567"

# TCP port number range limits
_MIN_PORT = 1
_MAX_PORT = 65535


def _parse_port(port_str: str) -> int:
    """Parse and validate a port number string.

    Raises
    ------
    SystemExit
        If port_str is not a valid integer in range 1-65535.

    """
    try:
        port = int(port_str)
        if not (_MIN_PORT <= port <= _MAX_PORT):
            msg = f"port {port} outside valid range {_MIN_PORT}-{_MAX_PORT}"
            raise ValueError(msg)  # noqa: TRY301 - unify conversion and range errors
    except ValueError as exc:
        log_error(
            logger,
            "Invalid CREASE_PORT value: %r (must be %d-%d): %s",
            port_str,
            _MIN_PORT,
            _MAX_PORT,
            exc,
        )
        raise SystemExit(1) from exc
    return port


def create_app() -> falcon.asgi.App:
    """Create the Falcon ASGI application from environment configuration.

    Returns
    -------
    falcon.asgi.App
        Application serving ``/event``, ``/health`` and ``/ready``.

    Raises
    ------
    GatewayConfigError
        If the prediction service settings are invalid.

    """
    from crease.api.app import AppDependencies
    from crease.api.app import create_app as _create_api_app
    from crease.deliveries.validation import DeliveryValidator
    from crease.eventstore import EventStoreConfig, SQLAlchemyEventStore
    from crease.prediction import GatewayConfig, NextBallClient

    gateway_config = GatewayConfig.from_env()
    validator = DeliveryValidator()
    event_store = SQLAlchemyEventStore.from_config(EventStoreConfig.from_env())
    next_ball_client = NextBallClient(gateway_config)

    log_info(
        logger,
        "Forwarding next event lookups to %s",
        gateway_config.next_ball_url,
    )

    deps = AppDependencies(
        validator=validator,
        event_store=event_store,
        prediction_client=next_ball_client,
        shutdown_hooks=(next_ball_client.aclose, event_store.close),
    )
    return _create_api_app(deps)


def main() -> None:
    """Start the Crease runtime server using Granian.

    Reads ``CREASE_HOST``, ``CREASE_PORT``, and ``CREASE_LOG_LEVEL`` from
    the environment and starts the ASGI server.
    """
    from granian import Granian
    from granian.constants import Interfaces

    host = os.environ.get("CREASE_HOST", "0.0.0.0")  # noqa: S104 - bind all interfaces for container
    port = _parse_port(os.environ.get("CREASE_PORT", _DEFAULT_PORT))
    log_level_str = os.environ.get("CREASE_LOG_LEVEL", "INFO")

    normalized_level, invalid_level = configure_logging(log_level_str)
    if invalid_level:
        log_warning(
            logger,
            "Invalid CREASE_LOG_LEVEL %r, falling back to %s",
            log_level_str,
            normalized_level,
        )

    log_info(
        logger,
        "Starting Crease runtime on %s:%d (log_level=%s)",
        host,
        port,
        normalized_level,
    )

    server = Granian(
        "crease.runtime:create_app",
        address=host,
        port=port,
        interface=Interfaces.ASGI,
        factory=True,
    )
    server.serve()


if __name__ == "__main__":
    main()
