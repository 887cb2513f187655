"""Test configuration and fixtures."""

import pytest

from otp_trips.core.models import ApiVersion, OtpConnection


# 2019-03-26 07:00:00 UTC, which is also 07:00 in Europe/London (GMT)
T0 = 1553583600000


@pytest.fixture
def connection():
    """Connection with a fixed time zone so converted times are predictable."""
    return OtpConnection(tz="Europe/London")


@pytest.fixture
def connection_v2():
    """OTPv2 connection."""
    return OtpConnection(tz="Europe/London", version=ApiVersion.V2)


@pytest.fixture
def transit_legs():
    """Walk, bus, bus legs as returned by OTP."""
    return [
        {
            "startTime": T0,
            "endTime": T0 + 300_000,
            "mode": "WALK",
            "duration": 300.0,
            "distance": 350.2,
            "transitLeg": False,
            "from": {
                "name": "Origin",
                "lon": -2.24258,
                "lat": 53.48805,
                "departure": T0,
                "vertexType": "NORMAL",
            },
            "to": {
                "name": "Piccadilly Gardens",
                "stopId": "1:1800SB05041",
                "stopCode": "MANADWGM",
                "lon": -2.2374,
                "lat": 53.4809,
                "arrival": T0 + 300_000,
                "departure": T0 + 540_000,
                "vertexType": "TRANSIT",
            },
            "legGeometry": {"points": "_p~iF~ps|U_ulLnnqC", "length": 12},
            "steps": [{"distance": 350.2, "relativeDirection": "DEPART"}],
        },
        {
            "startTime": T0 + 540_000,
            "endTime": T0 + 1_740_000,
            "mode": "BUS",
            "duration": 1200.0,
            "distance": 8342.5,
            "routeType": 3,
            "routeId": "1:MAN:43",
            "routeShortName": "43",
            "routeLongName": "Manchester - Airport",
            "headsign": "Airport",
            "agencyName": "Stagecoach",
            "agencyUrl": "https://www.stagecoachbus.com",
            "agencyId": "SCMN",
            "transitLeg": True,
            "from": {
                "name": "Piccadilly Gardens",
                "stopId": "1:1800SB05041",
                "stopCode": "MANADWGM",
                "lon": -2.2374,
                "lat": 53.4809,
                "arrival": T0 + 300_000,
                "departure": T0 + 540_000,
            },
            "to": {
                "name": "Wythenshawe Interchange",
                "stopId": "1:1800WA12481",
                "stopCode": "MANDPWJA",
                "lon": -2.2642,
                "lat": 53.3779,
                "arrival": T0 + 1_740_000,
                "departure": T0 + 1_740_000,
            },
        },
        {
            "startTime": T0 + 1_906_000,
            "endTime": T0 + 2_741_000,
            "mode": "BUS",
            "duration": 835.0,
            "distance": 2210.0,
            "routeType": 3,
            "routeId": "1:MAN:19",
            "routeShortName": "19",
            "headsign": "Sale",
            "agencyName": "Stagecoach",
            "agencyUrl": "https://www.stagecoachbus.com",
            "agencyId": "SCMN",
            "transitLeg": True,
            "from": {
                "name": "Wythenshawe Interchange",
                "stopId": "1:1800WA12481",
                "lon": -2.2642,
                "lat": 53.3779,
                "arrival": T0 + 1_740_000,
                "departure": T0 + 1_906_000,
            },
            "to": {
                "name": "Destination",
                "lon": -2.27108,
                "lat": 53.36484,
                "arrival": T0 + 2_741_000,
            },
        },
    ]


@pytest.fixture
def transit_plan(transit_legs):
    """OTP plan response with three transit itineraries."""
    return {
        "requestParameters": {"mode": "TRANSIT"},
        "plan": {
            "date": T0,
            "from": {"name": "Origin", "lon": -2.24258, "lat": 53.48805},
            "to": {"name": "Destination", "lon": -2.27108, "lat": 53.36484},
            "itineraries": [
                {
                    "duration": 2741,
                    "startTime": T0,
                    "endTime": T0 + 2_741_000,
                    "walkTime": 475,
                    "transitTime": 1860,
                    "waitingTime": 406,
                    "walkDistance": 512.3,
                    "transfers": 1,
                    "legs": transit_legs,
                },
                {
                    "duration": 3000,
                    "startTime": T0 + 600_000,
                    "endTime": T0 + 3_600_000,
                    "walkTime": 600,
                    "transitTime": 2100,
                    "waitingTime": 300,
                    "transfers": 0,
                    "legs": transit_legs[:2],
                },
                {
                    "duration": 3300,
                    "startTime": T0 + 1_200_000,
                    "endTime": T0 + 4_500_000,
                    "walkTime": 900,
                    "transitTime": 2100,
                    "waitingTime": 300,
                    "transfers": 2,
                    "legs": transit_legs[:1],
                },
            ],
        },
    }


@pytest.fixture
def car_leg():
    """A single CAR leg; the from node carries unrelated arrival/departure times."""
    return {
        "startTime": T0,
        "endTime": T0 + 1_200_000,
        "mode": "CAR",
        "duration": 1200.0,
        "distance": 15400.8,
        "from": {
            "name": "Origin",
            "lon": -2.24258,
            "lat": 53.48805,
            "arrival": T0 - 600_000,
            "departure": T0,
        },
        "to": {
            "name": "Destination",
            "lon": -2.27108,
            "lat": 53.36484,
            "arrival": T0 + 1_200_000,
        },
    }


@pytest.fixture
def car_plan(car_leg):
    """OTP plan response with a single CAR itinerary."""
    return {
        "plan": {
            "itineraries": [
                {
                    "duration": 1200,
                    "startTime": T0,
                    "endTime": T0 + 1_200_000,
                    "walkTime": 1200,
                    "transitTime": 0,
                    "waitingTime": 0,
                    "transfers": 0,
                    "legs": [car_leg],
                }
            ]
        }
    }


@pytest.fixture
def error_response():
    """OTP error node; v1 reads 'msg', v2 reads 'message'."""
    return {
        "requestParameters": {"mode": "WALK"},
        "error": {
            "id": 404,
            "msg": "No trip found. There may be no transit service within the maximum specified distance or at the specified time, or your start or end point might not be safely accessible.",
            "message": "PATH_NOT_FOUND",
            "noPath": True,
        },
    }


@pytest.fixture
def empty_plan():
    """OTPv2 response without an error node and without itineraries."""
    return {"plan": {"date": T0, "itineraries": []}}
