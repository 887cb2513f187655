"""Custom exceptions for OpenTripPlanner queries."""

NO_ITINERARY_ERROR_ID = -9999
VALIDATION_ERROR_ID = -9998

NO_ITINERARY_MESSAGE = (
    "No itinerary returned. If using OTPv2 the maxWalkDistance parameter "
    "(default 800m) might be too restrictive. It is applied by OTPv2 to "
    "BICYCLE and CAR modes in addition to WALK"
)


class OtpError(Exception):
    """Base exception for trip planner errors."""

    pass


class RequestValidationError(OtpError):
    """Raised when caller input fails validation before any request is made."""

    def __init__(self, violations: list[str], query: str | None = None):
        self.violations = list(violations)
        self.query = query
        super().__init__("Invalid request: " + "; ".join(self.violations))


class InvalidModeError(RequestValidationError):
    """Raised when the travel mode is not a supported mode or combination."""

    pass


class InvalidParameterError(RequestValidationError):
    """Raised when one or more query parameters are out of range or malformed."""

    pass


class UpstreamApiError(OtpError):
    """Raised when the API response carries an error node."""

    def __init__(self, error_id: int | str, message: str, query: str | None = None):
        self.error_id = error_id
        self.message = message
        self.query = query
        super().__init__(f"OTP error {error_id}: {message}")


class NoItineraryError(OtpError):
    """Raised when the API responds without error but with no itineraries."""

    error_id = NO_ITINERARY_ERROR_ID

    def __init__(self, query: str | None = None):
        self.message = NO_ITINERARY_MESSAGE
        self.query = query
        super().__init__(self.message)


class NetworkError(OtpError):
    """Raised when there's a network-related error or an unreadable response."""

    pass


class ResponseFormatError(OtpError):
    """Raised when a response does not have the expected plan structure."""

    pass


class UncheckedParameterWarning(UserWarning):
    """Issued when extra parameters are passed to the API without checks."""

    pass
