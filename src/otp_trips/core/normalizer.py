"""Normalization of OTP plan responses into itinerary and leg records.

The plan is walked explicitly, one function per node kind:

    plan -> itinerary -> leg list -> leg -> field

Each leg is flattened (nested ``from``/``to`` objects become ``fromName``,
``toStopId`` and so on), its keys are cleaned to lower camel case, epoch
fields are converted to zoned date-times and durations to minutes. The
result is a :class:`Leg`, which keeps only the canonical columns.
"""

import logging
import re
from datetime import datetime
from typing import Any

from ..utils.epoch import from_epoch, time_zone_name
from .models import Itinerary, Leg

logger = logging.getLogger(__name__)

EPOCH_FIELDS = frozenset({"startTime", "endTime", "fromDeparture", "fromArrival"})

# OTP reports car and bicycle time in walkTime
WALK_TIME_COLUMNS = {"CAR": "driveTime", "BICYCLE": "cycleTime"}

_WORD_PATTERN = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|\d+")


def to_minutes(seconds: float | None) -> float | None:
    """Convert seconds to minutes, rounded to 2 decimal places."""
    if seconds is None:
        return None
    return round(seconds / 60, 2)


def clean_key(key: str) -> str:
    """Clean a column name to lower camel case.

    Separators are dropped and case is normalized, e.g. ``from.stopId`` ->
    ``fromStopId``, ``agency_URL`` -> ``agencyUrl``.
    """
    words = _WORD_PATTERN.findall(key)
    if not words:
        return key
    return words[0].lower() + "".join(word.capitalize() for word in words[1:])


def flatten_record(record: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten nested objects into dotted keys. Lists are kept as values."""
    flat: dict[str, Any] = {}
    for key, value in record.items():
        name = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            flat.update(flatten_record(value, name))
        else:
            flat[name] = value
    return flat


def walk_time_column(mode: str) -> str:
    """Output name of the walkTime column for a request mode."""
    return WALK_TIME_COLUMNS.get(mode, "walkTime")


def _convert_field(name: str, value: Any, tz: str | None) -> Any:
    """Apply the conversion rule for a single leg field."""
    if name in EPOCH_FIELDS:
        return from_epoch(value, tz)
    if name == "duration":
        return to_minutes(value)
    return value


def _departure_wait(record: dict[str, Any], single_leg: bool) -> float:
    """Minutes between arriving at a leg's origin and departing from it.

    Zero for single-leg itineraries and whenever either time is missing,
    which is always the case for the first leg of a trip.
    """
    if single_leg:
        return 0
    arrival: datetime | None = record.get("fromArrival")
    departure: datetime | None = record.get("fromDeparture")
    if arrival is None or departure is None:
        return 0
    # absolute difference; a negative wait is reported as positive
    return round(abs((arrival - departure).total_seconds()) / 60, 2)


def normalize_leg(raw_leg: dict[str, Any], tz: str | None, single_leg: bool = False) -> Leg:
    """Normalize one raw leg object.

    Args:
        raw_leg: Leg object as found in the response
        tz: Time zone for converted times; local zone when empty
        single_leg: Whether the leg is the only one in its itinerary

    Returns:
        Leg holding the canonical columns that were present
    """
    record = {
        clean_key(key): value for key, value in flatten_record(raw_leg).items()
    }
    record = {name: _convert_field(name, value, tz) for name, value in record.items()}
    record["departureWait"] = _departure_wait(record, single_leg)

    start_time = record.get("startTime")
    if isinstance(start_time, datetime):
        record["timeZone"] = time_zone_name(start_time)
    else:
        record["timeZone"] = tz

    return Leg.model_validate(record)


def normalize_legs(raw_legs: list[dict[str, Any]] | None, tz: str | None) -> list[Leg]:
    """Normalize all legs of one itinerary."""
    if not raw_legs:
        return []
    single_leg = len(raw_legs) == 1
    return [normalize_leg(raw_leg, tz, single_leg) for raw_leg in raw_legs]


def _normalize_itinerary(
    raw: dict[str, Any], mode: str, tz: str | None, include_legs: bool
) -> Itinerary:
    start = from_epoch(raw["startTime"], tz)
    end = from_epoch(raw["endTime"], tz)
    return Itinerary(
        start=start,
        end=end,
        time_zone=time_zone_name(start),
        duration=to_minutes(raw["duration"]),
        walk_time=to_minutes(raw.get("walkTime", 0)),
        transit_time=to_minutes(raw.get("transitTime", 0)),
        waiting_time=to_minutes(raw.get("waitingTime", 0)),
        transfers=raw.get("transfers", 0),
        legs=normalize_legs(raw.get("legs"), tz) if include_legs else None,
        walk_time_column=walk_time_column(mode),
    )


def extract_itineraries(
    plan: dict[str, Any],
    max_itineraries: int,
    mode: str,
    tz: str | None = None,
    include_legs: bool = False,
) -> list[Itinerary]:
    """Extract up to ``max_itineraries`` itineraries from a plan.

    Itineraries keep the order the server returned them in.

    Args:
        plan: The ``plan`` node of the response
        max_itineraries: Maximum number of itineraries to keep
        mode: Validated request mode, used to name the walkTime column
        tz: Time zone for converted times; local zone when empty
        include_legs: Whether to normalize the legs of each itinerary

    Returns:
        List of Itinerary objects
    """
    itineraries = plan.get("itineraries") or []
    count = min(max_itineraries, len(itineraries))
    logger.debug(f"Keeping {count} of {len(itineraries)} itineraries")
    return [
        _normalize_itinerary(raw, mode, tz, include_legs)
        for raw in itineraries[:count]
    ]


def extract_duration(plan: dict[str, Any]) -> float:
    """Duration in minutes of the top itinerary of a plan."""
    return to_minutes(plan["itineraries"][0]["duration"])
