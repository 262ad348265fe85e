"""Client and configuration for the next-ball prediction service."""

from __future__ import annotations

from .client import NextBallClient, PredictionClient
from .config import GatewayConfig
from .errors import GatewayConfigError, PredictionTransportError

__all__ = [
    "GatewayConfig",
    "GatewayConfigError",
    "NextBallClient",
    "PredictionClient",
    "PredictionTransportError",
]
