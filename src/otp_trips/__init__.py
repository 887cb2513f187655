"""OTP Trips Package

A Python package for querying OpenTripPlanner for travel times and
itineraries, returned as flat, typed records.
"""

__version__ = "0.1.0"

from .core.client import OtpClient, get_times
from .core.models import ApiVersion, Itinerary, Leg, OtpConnection, TripResult

__all__ = [
    "ApiVersion",
    "Itinerary",
    "Leg",
    "OtpClient",
    "OtpConnection",
    "TripResult",
    "get_times",
]
