"""Configuration for the downstream next-ball prediction service."""

from __future__ import annotations

import dataclasses
import os

from crease.logging import get_logger, log_info
from crease.prediction.errors import GatewayConfigError

logger = get_logger(__name__)

_DEFAULT_HOST = "localhost"
_DEFAULT_PORT = 3004

# TCP port number range limits
_MIN_PORT = 1
_MAX_PORT = 65535


@dataclasses.dataclass(frozen=True, slots=True)
class GatewayConfig:
    """Resolved location of the next-ball prediction service.

    Built once at process start and shared read-only by every request.

    Attributes
    ----------
    next_ball_host
        Host name or address of the prediction service.
    next_ball_port
        TCP port of the prediction service.
    timeout_s
        Optional request timeout in seconds. ``None`` waits indefinitely.

    """

    next_ball_host: str = _DEFAULT_HOST
    next_ball_port: int = _DEFAULT_PORT
    timeout_s: float | None = None

    @property
    def next_ball_url(self) -> str:
        """Return the base URL of the prediction service."""
        return f"http://{self.next_ball_host}:{self.next_ball_port}/"

    @staticmethod
    def _read_env(name: str, default: str) -> str:
        """Return a non-blank env value, logging when the default is used."""
        value = os.environ.get(name, "").strip()
        if value:
            return value
        log_info(logger, "Unable to find env var %s, using default `%s`", name, default)
        return default

    @staticmethod
    def _parse_port(raw_port: str) -> int:
        try:
            port = int(raw_port)
        except ValueError as exc:
            raise GatewayConfigError.invalid_port(raw_port) from exc
        if not _MIN_PORT <= port <= _MAX_PORT:
            raise GatewayConfigError.invalid_port(raw_port)
        return port

    @staticmethod
    def _parse_timeout_from_env() -> float | None:
        raw_timeout = os.environ.get("NEXT_BALL_TIMEOUT_S", "").strip()
        if not raw_timeout:
            return None
        try:
            timeout = float(raw_timeout)
        except ValueError as exc:
            raise GatewayConfigError.invalid_timeout(raw_timeout) from exc
        if timeout <= 0:
            raise GatewayConfigError.invalid_timeout(raw_timeout)
        return timeout

    @classmethod
    def from_env(cls) -> GatewayConfig:
        """Build configuration from environment variables.

        Reads the following environment variables:

        - ``NEXT_BALL_IP``: prediction service host (default ``localhost``)
        - ``NEXT_BALL_PORT``: prediction service port (default ``3004``)
        - ``NEXT_BALL_TIMEOUT_S``: optional positive request timeout

        Raises
        ------
        GatewayConfigError
            If the port or timeout is invalid.

        """
        host = cls._read_env("NEXT_BALL_IP", _DEFAULT_HOST)
        port = cls._parse_port(cls._read_env("NEXT_BALL_PORT", str(_DEFAULT_PORT)))
        return cls(
            next_ball_host=host,
            next_ball_port=port,
            timeout_s=cls._parse_timeout_from_env(),
        )
