"""Core trip planner query functionality."""

from .client import OtpClient, get_times
from .exceptions import (
    NO_ITINERARY_ERROR_ID,
    VALIDATION_ERROR_ID,
    InvalidModeError,
    InvalidParameterError,
    NetworkError,
    NoItineraryError,
    OtpError,
    RequestValidationError,
    ResponseFormatError,
    UncheckedParameterWarning,
    UpstreamApiError,
)
from .models import (
    LEG_COLUMNS,
    ApiVersion,
    Itinerary,
    Leg,
    OtpConnection,
    TripRequest,
    TripResult,
)
from .validation import validate_mode

__all__ = [
    "ApiVersion",
    "Itinerary",
    "LEG_COLUMNS",
    "Leg",
    "OtpClient",
    "OtpConnection",
    "TripRequest",
    "TripResult",
    "get_times",
    "validate_mode",
    "NO_ITINERARY_ERROR_ID",
    "VALIDATION_ERROR_ID",
    "OtpError",
    "RequestValidationError",
    "InvalidModeError",
    "InvalidParameterError",
    "UpstreamApiError",
    "NoItineraryError",
    "NetworkError",
    "ResponseFormatError",
    "UncheckedParameterWarning",
]
