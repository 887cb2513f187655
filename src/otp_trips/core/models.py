"""Data models for OpenTripPlanner trip queries."""

import os
import re
from collections.abc import Mapping
from datetime import datetime
from enum import IntEnum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    StrictBool,
    ValidationError,
    field_validator,
)

from ..utils.epoch import is_valid_time_zone
from .exceptions import (
    NO_ITINERARY_ERROR_ID,
    VALIDATION_ERROR_ID,
    InvalidModeError,
    InvalidParameterError,
    NoItineraryError,
    OtpError,
    RequestValidationError,
    UpstreamApiError,
)
from .validation import validate_mode

# Request attributes sent to the plan endpoint, in query order
QUERY_PARAMETERS = {
    "from_place": "fromPlace",
    "to_place": "toPlace",
    "mode": "mode",
    "date": "date",
    "time": "time",
    "max_walk_distance": "maxWalkDistance",
    "walk_reluctance": "walkReluctance",
    "wait_reluctance": "waitReluctance",
    "arrive_by": "arriveBy",
    "transfer_penalty": "transferPenalty",
    "min_transfer_time": "minTransferTime",
}

_DATE_PATTERN = re.compile(r"\d{2}-\d{2}-\d{4}")
_TIME_PATTERN = re.compile(r"\d{2}:\d{2}:\d{2}")


class ApiVersion(IntEnum):
    """Major version of the OTP API; selects the error message field."""

    V1 = 1
    V2 = 2


class OtpConnection(BaseModel):
    """Connection details for an OTP server. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    hostname: str = Field("localhost", description="OTP server host name")
    router: str = Field("default", description="Router id")
    port: int = Field(8080, ge=1, le=65535, description="OTP server port")
    ssl: bool = Field(False, description="Use https instead of http")
    version: ApiVersion = Field(ApiVersion.V1, description="OTP API major version")
    tz: str | None = Field(
        None, description="IANA time zone for returned times; local zone if unset"
    )
    timeout: float = Field(30, gt=0, description="Request timeout in seconds")

    @field_validator("tz")
    @classmethod
    def _check_tz(cls, value: str | None) -> str | None:
        if value and not is_valid_time_zone(value):
            raise ValueError(f"'{value}' is not a valid IANA time zone")
        return value or None

    @classmethod
    def from_env(cls, **overrides: Any) -> "OtpConnection":
        """Build a connection from ``OTP_*`` environment variables.

        Keyword arguments take precedence over the environment.
        """
        env = {
            "hostname": os.getenv("OTP_HOSTNAME"),
            "router": os.getenv("OTP_ROUTER"),
            "port": os.getenv("OTP_PORT"),
            "ssl": os.getenv("OTP_SSL"),
            "version": os.getenv("OTP_VERSION"),
            "tz": os.getenv("OTP_TZ"),
        }
        values: dict[str, Any] = {
            key: value for key, value in env.items() if value is not None
        }
        if "version" in values:
            values["version"] = int(values["version"])
        values.update(overrides)
        return cls.model_validate(values)

    @property
    def base_url(self) -> str:
        scheme = "https" if self.ssl else "http"
        return f"{scheme}://{self.hostname}:{self.port}/otp"

    @property
    def router_url(self) -> str:
        return f"{self.base_url}/routers/{self.router}"

    @property
    def plan_url(self) -> str:
        return f"{self.router_url}/plan"

    def __str__(self) -> str:
        return f"OTPv{int(self.version)} router '{self.router}' at {self.base_url}"


def _format_value(value: Any) -> Any:
    """Render a parameter value the way the API expects it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, (list, tuple)):
        return ",".join(str(_format_value(v)) for v in value)
    return value


def build_query(
    params: Mapping[str, Any], extra_params: Mapping[str, Any] | None = None
) -> dict[str, Any]:
    """Build the plan endpoint query from request attributes.

    ``None`` values are left out so the server default applies. Extra
    parameters are appended last without any checks.
    """
    query: dict[str, Any] = {}
    for name, api_name in QUERY_PARAMETERS.items():
        value = params.get(name)
        if value is not None:
            query[api_name] = _format_value(value)
    for name, value in (extra_params or {}).items():
        if value is not None:
            query[name] = _format_value(value)
    return query


class TripRequest(BaseModel):
    """Validated parameters for a single trip query."""

    from_place: tuple[float, float] = Field(
        ..., description="Origin as a (latitude, longitude) pair"
    )
    to_place: tuple[float, float] = Field(
        ..., description="Destination as a (latitude, longitude) pair"
    )
    mode: str = Field("CAR", description="Comma-joined OTP mode string")
    date: str = Field(
        default_factory=lambda: datetime.now().strftime("%m-%d-%Y"),
        description="Travel date (MM-DD-YYYY)",
    )
    time: str = Field(
        default_factory=lambda: datetime.now().strftime("%H:%M:%S"),
        description="Departure (or arrival) time (HH:MM:SS)",
    )
    max_walk_distance: float | None = Field(
        None, ge=0, description="Maximum walk distance in meters"
    )
    walk_reluctance: float = Field(2, ge=0)
    wait_reluctance: float = Field(1, ge=0)
    arrive_by: StrictBool = False
    transfer_penalty: int = Field(0, ge=0)
    min_transfer_time: int = Field(0, ge=0, description="Seconds")
    max_itineraries: int = Field(
        1, ge=1, description="Itineraries to keep; client side only"
    )
    detail: StrictBool = False
    include_legs: StrictBool = False
    extra_params: dict[str, str | int | float | bool | None] = Field(
        default_factory=dict, description="Passed to the API without checks"
    )

    @field_validator("from_place", "to_place")
    @classmethod
    def _check_coordinates(cls, value: tuple[float, float]) -> tuple[float, float]:
        lat, lon = value
        if not -90 <= lat <= 90:
            raise ValueError(f"latitude {lat} is outside [-90, 90]")
        if not -180 <= lon <= 180:
            raise ValueError(f"longitude {lon} is outside [-180, 180]")
        return value

    @field_validator("mode", mode="before")
    @classmethod
    def _check_mode(cls, value: Any) -> str:
        try:
            return validate_mode(value)
        except InvalidModeError as e:
            raise ValueError("; ".join(e.violations)) from e

    @field_validator(
        "max_walk_distance",
        "walk_reluctance",
        "wait_reluctance",
        "transfer_penalty",
        "min_transfer_time",
        "max_itineraries",
        mode="before",
    )
    @classmethod
    def _check_numeric(cls, value: Any) -> Any:
        # bool is an int subclass; strings would otherwise be coerced
        if value is None:
            return value
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"must be a number, got {type(value).__name__}")
        return value

    @field_validator("date")
    @classmethod
    def _check_date(cls, value: str) -> str:
        try:
            if not _DATE_PATTERN.fullmatch(value):
                raise ValueError(value)
            datetime.strptime(value, "%m-%d-%Y")
        except ValueError as e:
            raise ValueError(f"date '{value}' must be a valid MM-DD-YYYY date") from e
        return value

    @field_validator("time")
    @classmethod
    def _check_time(cls, value: str) -> str:
        try:
            if not _TIME_PATTERN.fullmatch(value):
                raise ValueError(value)
            datetime.strptime(value, "%H:%M:%S")
        except ValueError as e:
            raise ValueError(f"time '{value}' must be in HH:MM:SS format") from e
        return value

    @classmethod
    def validated(cls, **params: Any) -> "TripRequest":
        """Validate raw parameters, reporting every violation at once.

        Raises:
            InvalidModeError: If the mode is the only problem
            InvalidParameterError: If any other parameter is invalid
        """
        try:
            return cls(**params)
        except ValidationError as e:
            violations = []
            fields = set()
            for error in e.errors():
                location = ".".join(str(part) for part in error["loc"])
                fields.add(str(error["loc"][0]) if error["loc"] else "")
                violations.append(f"{location}: {error['msg']}")
            if fields == {"mode"}:
                raise InvalidModeError(violations) from e
            raise InvalidParameterError(violations) from e

    def to_query(self) -> dict[str, Any]:
        """Query parameters for the plan endpoint."""
        return build_query(
            {name: getattr(self, name) for name in QUERY_PARAMETERS},
            self.extra_params,
        )


class Leg(BaseModel):
    """A single-mode segment of an itinerary.

    Transit attributes are missing from the response for WALK, BICYCLE and
    CAR legs, so every field is optional. Only the fields that were actually
    supplied are reported by ``to_record``.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    start_time: datetime | None = Field(None, alias="startTime")
    end_time: datetime | None = Field(None, alias="endTime")
    time_zone: str | None = Field(None, alias="timeZone")
    mode: str | None = Field(None, alias="mode")
    departure_wait: float | None = Field(
        None, alias="departureWait", description="Minutes waited before departure"
    )
    duration: float | None = Field(None, alias="duration", description="Minutes")
    distance: float | None = Field(None, alias="distance", description="Meters")
    route_type: int | None = Field(None, alias="routeType")
    route_id: str | int | None = Field(None, alias="routeId")
    route_short_name: str | None = Field(None, alias="routeShortName")
    route_long_name: str | None = Field(None, alias="routeLongName")
    headsign: str | None = Field(None, alias="headsign")
    agency_name: str | None = Field(None, alias="agencyName")
    agency_url: str | None = Field(None, alias="agencyUrl")
    agency_id: str | int | None = Field(None, alias="agencyId")
    from_name: str | None = Field(None, alias="fromName")
    from_lon: float | None = Field(None, alias="fromLon")
    from_lat: float | None = Field(None, alias="fromLat")
    from_stop_id: str | int | None = Field(None, alias="fromStopId")
    from_stop_code: str | int | None = Field(None, alias="fromStopCode")
    to_name: str | None = Field(None, alias="toName")
    to_lon: float | None = Field(None, alias="toLon")
    to_lat: float | None = Field(None, alias="toLat")
    to_stop_id: str | int | None = Field(None, alias="toStopId")
    to_stop_code: str | int | None = Field(None, alias="toStopCode")

    def to_record(self) -> dict[str, Any]:
        """Present columns, in canonical order, keyed by their API names."""
        present = self.model_fields_set
        return {
            field.alias or name: getattr(self, name)
            for name, field in type(self).model_fields.items()
            if name in present
        }

    def __str__(self) -> str:
        origin = self.from_name or "?"
        destination = self.to_name or "?"
        return f"{origin} → {destination} ({self.mode})"


LEG_COLUMNS = [field.alias for field in Leg.model_fields.values()]


class Itinerary(BaseModel):
    """One planned trip option. Durations are in minutes."""

    start: datetime = Field(..., description="Departure time")
    end: datetime = Field(..., description="Arrival time")
    time_zone: str | None = Field(None, description="Zone of start and end")
    duration: float = Field(..., description="Total duration in minutes")
    walk_time: float = Field(
        ..., description="Minutes walking, or driving/cycling for CAR/BICYCLE"
    )
    transit_time: float = Field(..., description="Minutes on transit vehicles")
    waiting_time: float = Field(..., description="Minutes waiting")
    transfers: int = Field(0, description="Number of transfers")
    legs: list[Leg] | None = Field(None, description="Journey legs, if requested")
    walk_time_column: str = Field(
        "walkTime", exclude=True, description="Output name of walk_time"
    )

    def to_record(self) -> dict[str, Any]:
        """Tabular form of the itinerary with mode-specific column names."""
        record: dict[str, Any] = {
            "start": self.start,
            "end": self.end,
            "timeZone": self.time_zone,
            "duration": self.duration,
            self.walk_time_column: self.walk_time,
            "transitTime": self.transit_time,
            "waitingTime": self.waiting_time,
            "transfers": self.transfers,
        }
        if self.legs is not None:
            record["legs"] = [leg.to_record() for leg in self.legs]
        return record

    def __str__(self) -> str:
        return (
            f"{self.start:%H:%M} → {self.end:%H:%M} "
            f"({self.duration} min, {self.transfers} transfers)"
        )


class TripResult(BaseModel):
    """Uniform result envelope of a trip query."""

    error_id: int | str = Field("OK", description="'OK' or the error code")
    error_message: str | None = Field(None, description="Set when not OK")
    duration: float | None = Field(
        None, description="Top itinerary minutes when detail was not requested"
    )
    itineraries: list[Itinerary] | None = Field(
        None, description="Itineraries when detail was requested"
    )
    query: str = Field(..., description="Decoded URL submitted to the API")

    _error: OtpError | None = PrivateAttr(None)

    @classmethod
    def from_error(cls, error: OtpError, query: str) -> "TripResult":
        """Wrap a request, upstream or no-itinerary error as a result."""
        if isinstance(error, RequestValidationError):
            result = cls(
                error_id=VALIDATION_ERROR_ID,
                error_message=str(error),
                query=query,
            )
        elif isinstance(error, UpstreamApiError):
            result = cls(error_id=error.error_id, error_message=error.message, query=query)
        elif isinstance(error, NoItineraryError):
            result = cls(
                error_id=NO_ITINERARY_ERROR_ID, error_message=error.message, query=query
            )
        else:
            raise TypeError(f"Cannot build a result from {type(error).__name__}")
        result._error = error
        return result

    @property
    def ok(self) -> bool:
        return self.error_id == "OK"

    def raise_for_error(self) -> None:
        """Raise the error this result carries, if any."""
        if self.ok:
            return
        if self._error is not None:
            raise self._error
        if self.error_id == NO_ITINERARY_ERROR_ID:
            raise NoItineraryError(self.query)
        raise UpstreamApiError(self.error_id, self.error_message or "", self.query)

    def to_dict(self) -> dict[str, Any]:
        """The result as a plain ``errorId``/payload/``query`` mapping."""
        if not self.ok:
            return {
                "errorId": self.error_id,
                "errorMessage": self.error_message,
                "query": self.query,
            }
        if self.itineraries is not None:
            return {
                "errorId": self.error_id,
                "itineraries": [itinerary.to_record() for itinerary in self.itineraries],
                "query": self.query,
            }
        return {"errorId": self.error_id, "duration": self.duration, "query": self.query}
