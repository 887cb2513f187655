"""OpenTripPlanner plan endpoint client."""

import logging
import warnings
from collections.abc import Sequence
from typing import Any
from urllib.parse import unquote

import requests
from pydantic import ValidationError

from .exceptions import (
    NetworkError,
    NoItineraryError,
    RequestValidationError,
    ResponseFormatError,
    UncheckedParameterWarning,
    UpstreamApiError,
)
from .models import ApiVersion, OtpConnection, TripRequest, TripResult, build_query
from .normalizer import extract_duration, extract_itineraries

logger = logging.getLogger(__name__)


class OtpClient:
    """Client for the OTP trip planner ``plan`` resource."""

    def __init__(
        self,
        connection: OtpConnection | None = None,
        session: requests.Session | None = None,
    ):
        """Initialize the client.

        Args:
            connection: OTP server connection; defaults to localhost:8080
            session: Optional requests session to reuse
        """
        self.connection = connection or OtpConnection()
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def __enter__(self) -> "OtpClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def get_times(
        self,
        from_place: Sequence[float],
        to_place: Sequence[float],
        mode: str | Sequence[str] = "CAR",
        date: str | None = None,
        time: str | None = None,
        max_walk_distance: float | None = None,
        walk_reluctance: float = 2,
        wait_reluctance: float = 1,
        arrive_by: bool = False,
        transfer_penalty: int = 0,
        min_transfer_time: int = 0,
        max_itineraries: int = 1,
        detail: bool = False,
        include_legs: bool = False,
        extra_params: dict[str, Any] | None = None,
    ) -> TripResult:
        """Get the travel time or detailed itineraries between two places.

        Without ``detail`` the result holds the duration in minutes of the
        top itinerary. With ``detail`` it holds up to ``max_itineraries``
        itineraries in the order OTP ranked them, each with the legs of the
        journey when ``include_legs`` is also set.

        Args:
            from_place: Origin (latitude, longitude)
            to_place: Destination (latitude, longitude)
            mode: WALK, BICYCLE, CAR, TRANSIT, BUS, RAIL, TRAM, SUBWAY or
                ["TRANSIT", "BICYCLE"]. OTP adds WALK to transit modes itself.
            date: Travel date (MM-DD-YYYY), defaults to today
            time: Departure time (HH:MM:SS), or arrival time when
                ``arrive_by`` is set. Defaults to now.
            max_walk_distance: Maximum walk in meters; OTP default if None
            walk_reluctance: How much worse walking is than riding transit
            wait_reluctance: How much worse waiting is than riding transit
            arrive_by: Whether ``time`` is the arrival time
            transfer_penalty: Extra cost added to each boarding after the first
            min_transfer_time: Minimum seconds between transit trips
            max_itineraries: Number of itineraries to return with ``detail``
            detail: Return itineraries instead of a single duration
            include_legs: Include journey legs with each itinerary
            extra_params: Other plan parameters, sent without any checks

        Returns:
            TripResult with ``error_id`` "OK", or the error code and message
            for invalid requests, OTP errors and empty plans

        Raises:
            NetworkError: If the request fails or the response is not JSON
            ResponseFormatError: If the response plan cannot be read
        """
        params: dict[str, Any] = {
            "from_place": from_place,
            "to_place": to_place,
            "mode": mode,
            "max_walk_distance": max_walk_distance,
            "walk_reluctance": walk_reluctance,
            "wait_reluctance": wait_reluctance,
            "arrive_by": arrive_by,
            "transfer_penalty": transfer_penalty,
            "min_transfer_time": min_transfer_time,
            "max_itineraries": max_itineraries,
            "detail": detail,
            "include_legs": include_legs,
            "extra_params": extra_params or {},
        }
        if date is not None:
            params["date"] = date
        if time is not None:
            params["time"] = time

        try:
            request = TripRequest.validated(**params)
        except RequestValidationError as e:
            extras = extra_params if isinstance(extra_params, dict) else None
            e.query = self._build_url(build_query(params, extras))
            logger.warning(f"Request not sent: {e}")
            return TripResult.from_error(e, e.query)

        if request.extra_params:
            names = ", ".join(request.extra_params)
            message = f"Unknown parameters were passed to the OTP API without checks: {names}"
            warnings.warn(message, UncheckedParameterWarning, stacklevel=2)
            logger.warning(message)

        data, url = self._fetch_plan(request.to_query())
        try:
            result = self._parse_plan(data, request, url)
        except (UpstreamApiError, NoItineraryError) as e:
            logger.warning(f"No trip for {url}: {e}")
            return TripResult.from_error(e, url)

        logger.info(f"Trip query succeeded: {url}")
        return result

    def _build_url(self, query: dict[str, Any]) -> str:
        """Decoded URL a query would be submitted to."""
        prepared = requests.Request("GET", self.connection.plan_url, params=query).prepare()
        return unquote(prepared.url or self.connection.plan_url)

    def _fetch_plan(self, query: dict[str, Any]) -> tuple[dict[str, Any], str]:
        """Submit a plan query.

        Returns:
            Parsed JSON body and the decoded request URL

        Raises:
            NetworkError: If the request fails or the body is not JSON
        """
        try:
            response = self.session.get(
                self.connection.plan_url,
                params=query,
                timeout=self.connection.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Plan request to {self.connection.plan_url} failed: {e}")
            raise NetworkError(f"Failed to fetch plan: {str(e)}") from e

        url = unquote(response.url)
        logger.debug(f"Submitted {url} (HTTP {response.status_code})")
        try:
            data = response.json()
        except ValueError as e:
            raise NetworkError(
                f"Response from {url} is not valid JSON (HTTP {response.status_code})"
            ) from e
        if not isinstance(data, dict):
            raise ResponseFormatError(f"Unexpected response from {url}")
        return data, url

    def _error_message(self, error: dict[str, Any]) -> str:
        # OTPv1 reports the message in 'msg', OTPv2 in 'message'
        if self.connection.version == ApiVersion.V1:
            message = error.get("msg")
        else:
            message = error.get("message")
        return "" if message is None else str(message)

    def _parse_plan(
        self, data: dict[str, Any], request: TripRequest, url: str
    ) -> TripResult:
        """Turn a plan response into a result.

        Raises:
            UpstreamApiError: If the response carries an error node
            NoItineraryError: If the plan has no itineraries
            ResponseFormatError: If the plan, itineraries or legs cannot be read
        """
        error = data.get("error")
        if isinstance(error, dict) and error.get("id") is not None:
            raise UpstreamApiError(error["id"], self._error_message(error), url)

        # OTPv2 does not report an error when no itinerary was found
        plan = data.get("plan") or {}
        if not isinstance(plan, dict):
            raise ResponseFormatError(f"Unexpected plan in response from {url}")
        if not plan.get("itineraries"):
            raise NoItineraryError(url)

        try:
            if not request.detail:
                return TripResult(duration=extract_duration(plan), query=url)
            itineraries = extract_itineraries(
                plan,
                request.max_itineraries,
                request.mode,
                tz=self.connection.tz,
                include_legs=request.include_legs,
            )
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            raise ResponseFormatError(f"Could not read plan from {url}: {e}") from e

        return TripResult(itineraries=itineraries, query=url)


def get_times(
    connection: OtpConnection,
    from_place: Sequence[float],
    to_place: Sequence[float],
    **params: Any,
) -> TripResult:
    """Run a single trip query with a short-lived client.

    See :meth:`OtpClient.get_times` for the parameters.
    """
    with OtpClient(connection) as client:
        return client.get_times(from_place, to_place, **params)
