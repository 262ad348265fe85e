"""msgspec models for the cricd delivery event schema.

Only the match identifier is mandatory at decode time. Every other field
decodes to ``None`` when absent so that missing data is judged by the
validator (HTTP 400) rather than rejected as a malformed payload (HTTP 500).
"""

from __future__ import annotations

import enum

import msgspec


class DeliveryEventType(enum.StrEnum):
    """Event types recognised by the cricd delivery schema."""

    DELIVERY = "delivery"
    NO_BALL = "noBall"
    WIDE = "wide"
    BYE = "bye"
    LEG_BYE = "legBye"
    BOWLED = "bowled"
    TIMED_OUT = "timedOut"
    CAUGHT = "caught"
    HANDLED_BALL = "handledBall"
    DOUBLE_HIT = "doubleHit"
    HIT_WICKET = "hitWicket"
    LBW = "lbw"
    OBSTRUCTION = "obstruction"
    RUN_OUT = "runOut"
    STUMPED = "stumped"


# Dismissals that credit a fielder.
FIELDER_DISMISSALS = frozenset(
    {DeliveryEventType.CAUGHT, DeliveryEventType.RUN_OUT, DeliveryEventType.STUMPED}
)

# Dismissals where either batsman may be out, so the record names them.
EITHER_BATSMAN_DISMISSALS = frozenset(
    {DeliveryEventType.RUN_OUT, DeliveryEventType.OBSTRUCTION}
)


class Team(msgspec.Struct, kw_only=True):
    """A team reference."""

    id: int
    name: str = ""


class Player(msgspec.Struct, kw_only=True):
    """A player reference."""

    id: int
    name: str = ""


class Ball(msgspec.Struct, kw_only=True, rename="camel"):
    """Position of the delivery within the match."""

    batting_team: Team | None = None
    fielding_team: Team | None = None
    innings: int = 0
    over: int = 0
    ball: int = 0


class Batsmen(msgspec.Struct, kw_only=True, rename="camel"):
    """Batsmen at the crease when the ball was bowled."""

    striker: Player | None = None
    non_striker: Player | None = None


class DeliveryEvent(
    msgspec.Struct,
    kw_only=True,
    rename={"match_id": "match", "event_type": "eventType"},
):
    """One ball bowled in a cricket match.

    Attributes
    ----------
    match_id
        Identifier of the match, serialised as ``match``.
    event_type
        Outcome of the ball, one of :class:`DeliveryEventType`.
    timestamp
        ISO-8601 time the ball was bowled.
    batsman
        The dismissed batsman for run outs and obstruction.

    """

    match_id: int
    event_type: str | None = None
    timestamp: str | None = None
    ball: Ball | None = None
    runs: int = 0
    batsmen: Batsmen | None = None
    bowler: Player | None = None
    fielder: Player | None = None
    batsman: Player | None = None


_decoder = msgspec.json.Decoder(DeliveryEvent)


def decode_delivery(payload: bytes) -> DeliveryEvent:
    """Decode a JSON payload into a :class:`DeliveryEvent`.

    Raises
    ------
    msgspec.DecodeError
        If the payload is not JSON or does not match the schema.
        ``msgspec.ValidationError`` is a subclass raised for type mismatches
        and a missing ``match`` field.

    """
    return _decoder.decode(payload)


def encode_delivery(event: DeliveryEvent) -> bytes:
    """Encode a delivery back to its wire form."""
    return msgspec.json.encode(event)


def delivery_to_payload(event: DeliveryEvent) -> dict[str, object]:
    """Return the JSON-compatible mapping persisted by the event store."""
    return msgspec.to_builtins(event)
