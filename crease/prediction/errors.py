"""Errors raised by the next-ball prediction client and its configuration."""

from __future__ import annotations


class PredictionTransportError(RuntimeError):
    """Raised when the prediction service cannot be reached or read."""

    @classmethod
    def unreachable(cls, url: str, detail: str) -> PredictionTransportError:
        """Return an error for a request that never got a response."""
        return cls(f"unable to reach next ball service at {url}: {detail}")

    @classmethod
    def incomplete_body(cls, url: str, detail: str) -> PredictionTransportError:
        """Return an error for a response body that could not be read."""
        return cls(f"unable to read next ball response from {url}: {detail}")


class GatewayConfigError(ValueError):
    """Raised when prediction service settings are invalid."""

    @classmethod
    def invalid_port(cls, value: str) -> GatewayConfigError:
        """Return an error for a port outside 1-65535."""
        return cls(f"Invalid NEXT_BALL_PORT '{value}'. Must be an integer 1-65535")

    @classmethod
    def invalid_timeout(cls, value: str) -> GatewayConfigError:
        """Return an error for a non-positive or non-numeric timeout."""
        return cls(
            f"Invalid NEXT_BALL_TIMEOUT_S '{value}'. Must be a positive number"
        )
