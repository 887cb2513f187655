"""Utility modules for otp-trips."""

from .epoch import (
    from_epoch,
    is_valid_time_zone,
    resolve_time_zone,
    time_zone_name,
    to_epoch,
)

__all__ = [
    "from_epoch",
    "is_valid_time_zone",
    "resolve_time_zone",
    "time_zone_name",
    "to_epoch",
]
