"""
Timecode to Broadcast WAV metadata.

TimeReference is the sample count since midnight at the target sample rate;
OriginationTime and OriginationDate come straight from the frame.
"""

import datetime
import logging
import math
from typing import NamedTuple, Optional

from . import DEFAULT_SAMPLE_RATE
from .timecode import Timecode
from .validate import ValidatedFrame

_logger = logging.getLogger(__name__)

DROP_FRAME_RATE = 29.97
NON_DROP_FRAME_RATE = 30.0


class Metadata(NamedTuple):
    time_reference: int
    origination_time: str  # HH:MM:SS
    origination_date: str  # YYYY-MM-DD
    frame_rate: float


def frame_rate_for(tc: Timecode, override: Optional[float] = None) -> float:
    """Frame rate to assume: override if given, else 29.97 for drop-frame, else 30."""
    if override is not None:
        return override
    return DROP_FRAME_RATE if tc.drop_frame else NON_DROP_FRAME_RATE


def total_frames(tc: Timecode, frame_rate: float) -> float:
    return (tc.hours * 3600 + tc.minutes * 60 + tc.seconds) * frame_rate + tc.frames


def time_reference(tc: Timecode, frame_rate: float, sample_rate: int = DEFAULT_SAMPLE_RATE) -> int:
    """Timecode as a sample count, rounded half up."""
    samples = total_frames(tc, frame_rate) * sample_rate / frame_rate
    return int(math.floor(samples + 0.5))


def origination_time(tc: Timecode) -> str:
    return f"{tc.hours:02d}:{tc.minutes:02d}:{tc.seconds:02d}"


def origination_date(date: datetime.date) -> str:
    return f"{date.year:04d}-{date.month:02d}-{date.day:02d}"


def derive_metadata(
    frame: ValidatedFrame,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
    frame_rate: Optional[float] = None,
) -> Metadata:
    """
    Derive BWF metadata from a validated frame.

    Args:
        frame: Output of validate()
        sample_rate: Rate TimeReference is counted at
        frame_rate: Frame rate override (default: inferred from drop-frame flag)
    """
    tc = frame.timecode
    fps = frame_rate_for(tc, frame_rate)
    samples = time_reference(tc, fps, sample_rate)

    _logger.info(f"Calculated time reference: {samples} samples ({fps}fps)")

    return Metadata(
        time_reference=samples,
        origination_time=origination_time(tc),
        origination_date=origination_date(frame.date),
        frame_rate=fps,
    )
