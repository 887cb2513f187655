"""Epoch timestamp and time zone utilities."""

from collections.abc import Sequence
from datetime import datetime, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def resolve_time_zone(tz: str | None) -> tzinfo | None:
    """Return the zone for an IANA identifier.

    ``None`` (or an empty string) means the local system zone in effect at
    conversion time, which ``datetime.astimezone`` picks up when given no
    argument.

    Raises:
        ValueError: If the identifier is not in the time zone database
    """
    if not tz:
        return None
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown time zone: {tz}") from e


def is_valid_time_zone(tz: str) -> bool:
    """Check whether ``tz`` names a zone in the time zone database."""
    try:
        resolve_time_zone(tz)
    except ValueError:
        return False
    return True


def _convert(value: int | float | None, zone: tzinfo | None) -> datetime | None:
    if value is None:
        return None
    # whole seconds are truncated, the millisecond remainder is kept
    seconds, millis = divmod(int(value), 1000)
    utc = EPOCH + timedelta(seconds=seconds, milliseconds=millis)
    return utc.astimezone(zone)


def from_epoch(
    value: int | float | None | Sequence[int | float | None], tz: str | None = None
) -> datetime | None | list[datetime | None]:
    """Convert millisecond epoch timestamp(s) to zoned date-times.

    Args:
        value: Milliseconds since the UNIX epoch, or a sequence of them
        tz: IANA time zone identifier; local system zone when empty

    Returns:
        A zoned datetime, or a list of them when a sequence was given.
        ``None`` entries are passed through unchanged.
    """
    zone = resolve_time_zone(tz)
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        return [_convert(v, zone) for v in value]
    return _convert(value, zone)


def to_epoch(dt: datetime) -> int:
    """Convert an aware datetime back to integer milliseconds since the epoch."""
    delta = dt - EPOCH
    return delta.days * 86_400_000 + delta.seconds * 1000 + delta.microseconds // 1000


def time_zone_name(dt: datetime) -> str | None:
    """Name of the zone a converted datetime is expressed in.

    The IANA key when the zone came from the database, otherwise the local
    zone abbreviation (e.g. ``CET``).
    """
    key = getattr(dt.tzinfo, "key", None)
    return key or dt.tzname()
