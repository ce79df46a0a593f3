"""
Tests for frame validation and correction.
"""

import datetime
import logging

import pytest

from ltcsync import CenturyPolicy, Timecode, ValidationPolicy, validate


FALLBACK_DATE = datetime.date(2024, 1, 2)


def _user_bits(digits: str):
    """User-bit groups (group 1 first) for a YYMMDDXX string."""
    return tuple(int(ch, 16) for ch in reversed(digits))


@pytest.fixture
def policy():
    return ValidationPolicy(today=lambda: FALLBACK_DATE)


class TestDate:
    """Test recording date from user bits."""

    def test_valid_date(self, policy):
        tc = Timecode(1, 2, 3, 4, user_bits=_user_bits("25091300"))

        frame = validate(tc, policy)

        assert frame.date == datetime.date(2025, 9, 13)
        assert frame.corrections == []
        assert frame.timecode == tc

    @pytest.mark.parametrize("digits", [
        "00000000",  # month 0
        "25130100",  # month 13
        "25093200",  # day 32
        "25023000",  # 30 February
        "2509130a",  # hex digit in a group
    ])
    def test_invalid_date_falls_back(self, policy, digits):
        tc = Timecode(1, 2, 3, 4, user_bits=_user_bits(digits))

        frame = validate(tc, policy)

        assert frame.date == FALLBACK_DATE
        assert [c.field for c in frame.corrections] == ["date"]
        assert frame.corrections[0].corrected == FALLBACK_DATE

    def test_prefix_20(self, policy):
        tc = Timecode(0, 0, 0, 0, user_bits=_user_bits("75010100"))
        assert validate(tc, policy).date == datetime.date(2075, 1, 1)

    def test_pivot_50(self):
        policy = ValidationPolicy(century=CenturyPolicy.PIVOT_50, today=lambda: FALLBACK_DATE)
        old = Timecode(0, 0, 0, 0, user_bits=_user_bits("75010100"))
        new = Timecode(0, 0, 0, 0, user_bits=_user_bits("49010100"))

        assert validate(old, policy).date == datetime.date(1975, 1, 1)
        assert validate(new, policy).date == datetime.date(2049, 1, 1)

    def test_default_policy_uses_system_date(self):
        assert ValidationPolicy().today() == datetime.date.today()


class TestClockFields:
    """Test hour, minute and second correction."""

    DATE = _user_bits("25091300")

    def test_hours_wrap(self, policy):
        frame = validate(Timecode(25, 0, 0, 0, user_bits=self.DATE), policy)

        assert frame.timecode.hours == 1
        assert frame.corrections[0].field == "hours"
        assert frame.corrections[0].original == 25
        assert frame.corrections[0].corrected == 1

    def test_minutes_and_seconds_wrap(self, policy):
        frame = validate(Timecode(1, 61, 75, 0, user_bits=self.DATE), policy)

        assert (frame.timecode.minutes, frame.timecode.seconds) == (1, 15)
        assert [c.field for c in frame.corrections] == ["minutes", "seconds"]

    def test_raw_minutes_seconds_flagged(self):
        policy = ValidationPolicy(wrap_minutes_seconds=False, today=lambda: FALLBACK_DATE)

        frame = validate(Timecode(1, 61, 0, 0, user_bits=self.DATE), policy)

        assert frame.timecode.minutes == 61
        assert frame.corrections[0].field == "minutes"
        assert frame.corrections[0].corrected is None

    def test_other_fields_untouched(self, policy):
        tc = Timecode(24, 0, 0, 7, drop_frame=True, color_frame=True, user_bits=self.DATE)

        frame = validate(tc, policy)

        assert frame.timecode.hours == 0
        assert frame.timecode.frames == 7
        assert frame.timecode.drop_frame is True
        assert frame.timecode.color_frame is True
        assert frame.timecode.user_bits == self.DATE

    def test_corrections_logged(self, policy, caplog):
        with caplog.at_level(logging.WARNING, logger="ltcsync.validate"):
            validate(Timecode(30, 0, 0, 0), policy)

        messages = [record.getMessage() for record in caplog.records]
        assert any("Invalid date" in message for message in messages)
        assert any("Invalid hour 30" in message for message in messages)
