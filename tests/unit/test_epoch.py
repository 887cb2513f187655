"""Tests for epoch and time zone utilities."""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from otp_trips.utils.epoch import (
    from_epoch,
    is_valid_time_zone,
    resolve_time_zone,
    time_zone_name,
    to_epoch,
)

T0 = 1553583600000  # 2019-03-26 07:00:00 UTC


class TestFromEpoch:
    """Test epoch to zoned date-time conversion."""

    def test_explicit_zone(self):
        """Test conversion into an IANA zone."""
        dt = from_epoch(T0, "Europe/London")
        assert dt == datetime(2019, 3, 26, 7, 0, tzinfo=ZoneInfo("Europe/London"))
        assert dt.utcoffset() == timedelta(0)
        assert dt.tzinfo.key == "Europe/London"

    def test_zone_offset_applied(self):
        """Test the local wall time follows the zone's offset rules."""
        dt = from_epoch(T0, "America/New_York")
        assert dt.hour == 3
        assert dt.utcoffset() == timedelta(hours=-4)

    def test_milliseconds_kept(self):
        """Test sub-second precision survives conversion."""
        dt = from_epoch(T0 + 123, "UTC")
        assert dt.second == 0
        assert dt.microsecond == 123000

    def test_fractional_input_truncated(self):
        """Test fractional milliseconds are truncated, not rounded."""
        dt = from_epoch(T0 + 999.9, "UTC")
        assert dt.second == 0
        assert dt.microsecond == 999000

    def test_sequence_input(self):
        """Test a sequence converts element-wise."""
        result = from_epoch([T0, T0 + 60_000, None], "Europe/London")
        assert isinstance(result, list)
        assert result[0].minute == 0
        assert result[1].minute == 1
        assert result[2] is None

    def test_none_passthrough(self):
        """Test missing values stay missing."""
        assert from_epoch(None, "UTC") is None

    def test_local_zone_when_unset(self):
        """Test the local system zone is used without an explicit zone."""
        dt = from_epoch(T0)
        assert dt.tzinfo is not None
        expected = datetime.fromtimestamp(T0 / 1000).astimezone()
        assert dt.utcoffset() == expected.utcoffset()

    def test_empty_zone_is_local(self):
        """Test an empty zone id behaves like no zone."""
        assert from_epoch(T0, "").utcoffset() == from_epoch(T0).utcoffset()

    def test_invalid_zone(self):
        """Test an unknown zone is rejected."""
        with pytest.raises(ValueError, match="Unknown time zone"):
            from_epoch(T0, "Mars/Olympus_Mons")


class TestRoundTrip:
    """Test converting back to epoch milliseconds."""

    @pytest.mark.parametrize(
        "value", [0, T0, T0 + 1, T0 + 999, 1700000000123, -1500]
    )
    @pytest.mark.parametrize("tz", ["UTC", "Europe/London", "Asia/Kolkata", None])
    def test_round_trip(self, value, tz):
        """Test epoch -> zoned time -> epoch reproduces the value."""
        assert to_epoch(from_epoch(value, tz)) == value

    def test_to_epoch_naive_utc_equivalent(self):
        """Test to_epoch on a datetime built directly."""
        dt = datetime(2019, 3, 26, 7, 0, tzinfo=timezone.utc)
        assert to_epoch(dt) == T0


class TestTimeZones:
    """Test time zone resolution and naming."""

    def test_resolve_known_zone(self):
        """Test known zones resolve to ZoneInfo."""
        assert resolve_time_zone("Europe/Berlin") == ZoneInfo("Europe/Berlin")

    def test_resolve_unset(self):
        """Test unset zones resolve to None (local)."""
        assert resolve_time_zone(None) is None
        assert resolve_time_zone("") is None

    def test_is_valid_time_zone(self):
        """Test zone id validation."""
        assert is_valid_time_zone("Europe/London")
        assert not is_valid_time_zone("Not/AZone")
        assert not is_valid_time_zone("../etc/passwd")

    def test_time_zone_name_iana(self):
        """Test IANA zones are named by their key."""
        assert time_zone_name(from_epoch(T0, "Europe/London")) == "Europe/London"

    def test_time_zone_name_local(self):
        """Test local zones are named by their abbreviation."""
        dt = from_epoch(T0)
        assert time_zone_name(dt) == dt.tzname()
