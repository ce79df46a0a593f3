"""
Range checks and corrections for decoded timecode frames.

Applies equally to frames decoded from audio and to text frames parsed from
ltcdump output. Nothing here raises: every problem becomes a Correction and
processing continues with best-effort values.
"""

import datetime
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, List, NamedTuple, Optional

from .timecode import Timecode

_logger = logging.getLogger(__name__)


class CenturyPolicy(str, Enum):
    """How a two-digit user-bits year becomes a four-digit year."""

    PREFIX_20 = "prefix-20"  # always 20yy
    PIVOT_50 = "pivot-50"  # 00-49 -> 20yy, 50-99 -> 19yy

    def expand(self, yy: int) -> int:
        if self is CenturyPolicy.PIVOT_50 and yy >= 50:
            return 1900 + yy
        return 2000 + yy


class Correction(NamedTuple):
    """
    A field found out of range.

    corrected is None when the value was flagged but left as decoded.
    """

    field: str
    original: object
    corrected: Optional[object]
    message: str


@dataclass
class ValidationPolicy:
    """
    Args:
        century: Two-digit year expansion
        wrap_minutes_seconds: Wrap minute/second >= 60 modulo 60; when False
            they are only flagged and keep their decoded value
        today: Provides the fallback date for invalid user-bits dates
    """

    century: CenturyPolicy = CenturyPolicy.PREFIX_20
    wrap_minutes_seconds: bool = True
    today: Callable[[], datetime.date] = field(default=datetime.date.today)


class ValidatedFrame(NamedTuple):
    timecode: Timecode
    date: datetime.date
    corrections: List[Correction]


def _date_from_user_bits(tc: Timecode, century: CenturyPolicy) -> Optional[datetime.date]:
    digits = tc.date_digits
    if digits is None:
        return None

    yy, month, day, _extra = digits
    if not 1 <= month <= 12 or not 1 <= day <= 31:
        return None

    try:
        return datetime.date(century.expand(yy), month, day)
    except ValueError:
        # In range but not on the calendar, e.g. 30 February
        return None


def validate(tc: Timecode, policy: Optional[ValidationPolicy] = None) -> ValidatedFrame:
    """
    Range-check a decoded frame and correct what has a correction policy.

    Returns:
        ValidatedFrame with the corrected timecode, the recording date and
        every correction made or flagged
    """
    if policy is None:
        policy = ValidationPolicy()

    corrections: List[Correction] = []

    def report(name, original, corrected, message):
        _logger.warning(message)
        corrections.append(Correction(name, original, corrected, message))

    date = _date_from_user_bits(tc, policy.century)
    if date is None:
        date = policy.today()
        report(
            "date",
            tc.user_bits_string,
            date,
            f"Invalid date in user bits {tc.user_bits_string}, using current date {date.isoformat()}",
        )

    hours = tc.hours
    if hours >= 24:
        hours = tc.hours % 24
        report("hours", tc.hours, hours, f"Invalid hour {tc.hours} in timecode, correcting to {hours}")

    values = {"minutes": tc.minutes, "seconds": tc.seconds}
    for name, value in list(values.items()):
        if value < 60:
            continue
        label = name[:-1]
        if policy.wrap_minutes_seconds:
            values[name] = value % 60
            report(name, value, values[name], f"Invalid {label} {value} in timecode, correcting to {values[name]}")
        else:
            report(name, value, None, f"Invalid {label} {value} in timecode, leaving as decoded")

    corrected = replace(tc, hours=hours, minutes=values["minutes"], seconds=values["seconds"])
    return ValidatedFrame(corrected, date, corrections)
