"""Delivery event schema and domain validation."""

from __future__ import annotations

from .models import (
    Ball,
    Batsmen,
    DeliveryEvent,
    DeliveryEventType,
    Player,
    Team,
    decode_delivery,
    delivery_to_payload,
    encode_delivery,
)
from .validation import (
    DeliveryValidationError,
    DeliveryValidator,
    Invalid,
    Valid,
    ValidationFailed,
    ValidationOutcome,
    Validator,
)

__all__ = [
    "Ball",
    "Batsmen",
    "DeliveryEvent",
    "DeliveryEventType",
    "DeliveryValidationError",
    "DeliveryValidator",
    "Invalid",
    "Player",
    "Team",
    "Valid",
    "ValidationFailed",
    "ValidationOutcome",
    "Validator",
    "decode_delivery",
    "delivery_to_payload",
    "encode_delivery",
]
