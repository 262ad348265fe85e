"""Domain validation for decoded delivery events.

Validation returns a tagged :data:`ValidationOutcome` instead of raising so
callers handle the three cases explicitly:

``Valid``
    The delivery may be persisted.
``Invalid``
    The record is well-formed but internally inconsistent. ``reason`` is
    for logs only; callers report a generic rejection.
``ValidationFailed``
    A field is missing or out of range. ``error`` is a diagnostic that may
    be echoed back to the client.

Usage
-----
>>> outcome = DeliveryValidator().validate(event)
>>> match outcome:
...     case Valid():
...         ...
...     case Invalid(reason=reason):
...         ...
...     case ValidationFailed(error=error):
...         ...

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from crease.common.time import parse_timestamp
from crease.deliveries.models import (
    EITHER_BATSMAN_DISMISSALS,
    FIELDER_DISMISSALS,
    DeliveryEventType,
)

if typ.TYPE_CHECKING:
    from crease.deliveries.models import Ball, Batsmen, DeliveryEvent, Player, Team

__all__ = [
    "DeliveryValidationError",
    "DeliveryValidator",
    "Invalid",
    "Valid",
    "ValidationFailed",
    "ValidationOutcome",
    "Validator",
]


class DeliveryValidationError(ValueError):
    """Describes why a delivery failed a field-level check."""

    @classmethod
    def missing(cls, field: str) -> DeliveryValidationError:
        """Return an error for a required field that is absent."""
        return cls(f"{field} is required")

    @classmethod
    def out_of_range(cls, field: str, value: object) -> DeliveryValidationError:
        """Return an error for a numeric field outside its allowed range."""
        return cls(f"{field} has invalid value {value!r}")

    @classmethod
    def unknown_event_type(cls, value: str) -> DeliveryValidationError:
        """Return an error for an unrecognised ``eventType``."""
        return cls(f"eventType {value!r} is not a known delivery event type")

    @classmethod
    def invalid_timestamp(cls, value: str) -> DeliveryValidationError:
        """Return an error for a timestamp that is not ISO-8601."""
        return cls(f"timestamp {value!r} is not a valid ISO-8601 timestamp")


@dc.dataclass(frozen=True, slots=True)
class Valid:
    """The delivery passed every check."""


@dc.dataclass(frozen=True, slots=True)
class Invalid:
    """The delivery is semantically inconsistent."""

    reason: str


@dc.dataclass(frozen=True, slots=True)
class ValidationFailed:
    """A field-level check failed with a client-facing diagnostic."""

    error: DeliveryValidationError


ValidationOutcome: typ.TypeAlias = Valid | Invalid | ValidationFailed


@typ.runtime_checkable
class Validator(typ.Protocol):
    """Judges the domain correctness of a decoded delivery."""

    def validate(self, event: DeliveryEvent) -> ValidationOutcome:
        """Return the validation outcome for ``event``."""
        ...


def _check_non_negative(field: str, value: int) -> None:
    if value < 0:
        raise DeliveryValidationError.out_of_range(field, value)


def _check_positive(field: str, value: int) -> None:
    if value < 1:
        raise DeliveryValidationError.out_of_range(field, value)


def _require_team(field: str, team: Team | None) -> Team:
    if team is None:
        raise DeliveryValidationError.missing(field)
    _check_positive(f"{field}.id", team.id)
    return team


def _require_player(field: str, player: Player | None) -> Player:
    if player is None:
        raise DeliveryValidationError.missing(field)
    _check_positive(f"{field}.id", player.id)
    return player


def _check_event_type(value: str | None) -> DeliveryEventType:
    if not value:
        raise DeliveryValidationError.missing("eventType")
    try:
        return DeliveryEventType(value)
    except ValueError as exc:
        raise DeliveryValidationError.unknown_event_type(value) from exc


def _check_timestamp(value: str | None) -> None:
    if not value:
        raise DeliveryValidationError.missing("timestamp")
    try:
        parse_timestamp(value)
    except ValueError as exc:
        raise DeliveryValidationError.invalid_timestamp(value) from exc


def _check_ball(ball: Ball | None) -> Ball:
    if ball is None:
        raise DeliveryValidationError.missing("ball")
    _require_team("ball.battingTeam", ball.batting_team)
    _require_team("ball.fieldingTeam", ball.fielding_team)
    _check_positive("ball.innings", ball.innings)
    _check_non_negative("ball.over", ball.over)
    _check_positive("ball.ball", ball.ball)
    return ball


def _check_fields(event: DeliveryEvent) -> DeliveryEventType:
    """Run field-level checks, raising on the first failure."""
    _check_non_negative("match", event.match_id)
    event_type = _check_event_type(event.event_type)
    _check_timestamp(event.timestamp)
    _check_ball(event.ball)
    _check_non_negative("runs", event.runs)

    if event.batsmen is None:
        raise DeliveryValidationError.missing("batsmen")
    _require_player("batsmen.striker", event.batsmen.striker)
    if event.batsmen.non_striker is not None:
        _require_player("batsmen.nonStriker", event.batsmen.non_striker)
    _require_player("bowler", event.bowler)

    if event_type in FIELDER_DISMISSALS:
        _require_player("fielder", event.fielder)
    if event_type in EITHER_BATSMAN_DISMISSALS:
        _require_player("batsman", event.batsman)
    return event_type


def _find_inconsistency(
    event: DeliveryEvent, event_type: DeliveryEventType
) -> str | None:
    """Return a reason when cross-field invariants do not hold."""
    # _check_fields guarantees these are populated.
    ball = typ.cast("Ball", event.ball)
    batsmen = typ.cast("Batsmen", event.batsmen)
    bowler = typ.cast("Player", event.bowler)
    striker = typ.cast("Player", batsmen.striker)
    non_striker = batsmen.non_striker
    batting = typ.cast("Team", ball.batting_team)
    fielding = typ.cast("Team", ball.fielding_team)

    if batting.id == fielding.id:
        return f"team {batting.id} cannot bat and field"
    if non_striker is not None and striker.id == non_striker.id:
        return f"player {striker.id} cannot be both striker and non-striker"

    at_crease = {striker.id} | ({non_striker.id} if non_striker else set())
    if bowler.id in at_crease:
        return f"bowler {bowler.id} is also batting"

    if event_type in EITHER_BATSMAN_DISMISSALS:
        dismissed = typ.cast("Player", event.batsman)
        if dismissed.id not in at_crease:
            return f"dismissed batsman {dismissed.id} is not at the crease"
    return None


class DeliveryValidator:
    """Validator for cricd delivery events.

    Stateless and safe to share between concurrent requests.
    """

    def validate(self, event: DeliveryEvent) -> ValidationOutcome:
        """Check ``event`` and return a tagged outcome."""
        try:
            event_type = _check_fields(event)
        except DeliveryValidationError as exc:
            return ValidationFailed(exc)

        reason = _find_inconsistency(event, event_type)
        if reason is not None:
            return Invalid(reason)
        return Valid()
