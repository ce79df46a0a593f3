"""
LTC reader - finds and decodes the first valid frame in a polarity trace.

Two decode modes share one bit recoverer:
- free scan: overlapping windows, slow clock smoothing, strict sync (15/16)
- position-anchored: starts at a known bit boundary, fast smoothing,
  exactly 80 bits, looser sync (14/16)
"""

import logging
from typing import NamedTuple, Optional

import numpy as np

from . import (
    FRAME_BITS,
    DEFAULT_MAX_SECONDS,
    FREE_SCAN_MAX_BITS,
    FREE_SCAN_SMOOTHING,
    ANCHORED_SMOOTHING,
    FREE_SCAN_SYNC_THRESHOLD,
    ANCHORED_SYNC_THRESHOLD,
)
from .biphase import BitClock, recover_bits
from .digitizer import digitize
from .errors import DecodeStatus
from .samples import SampleBuffer
from .sync import find_sync
from .timecode import Timecode, format_timecode

_logger = logging.getLogger(__name__)

WINDOW_FRAMES = 4  # frames of audio per free-scan window
WINDOW_STEP_BITS = 10  # free-scan window advance, in bit periods


class FrameResult(NamedTuple):
    """
    Outcome of a decode attempt.

    sample_position is the trace index where the frame's first bit starts.
    confirmed is set by read_first_frame: whether a position-anchored
    decode at sample_position agreed with the free scan.
    """

    status: DecodeStatus
    timecode: Optional[Timecode] = None
    sample_position: Optional[int] = None
    bit_offset: Optional[int] = None
    confirmed: Optional[bool] = None

    @property
    def found(self) -> bool:
        return self.status is DecodeStatus.OK


class LTCReader:
    """
    Locates LTC frames in a polarity trace.

    Every window is decoded from a fresh nominal bit clock, so windows are
    independent and a scan can be stopped at any point.
    """

    def __init__(
        self,
        sample_rate: int,
        max_bits: int = FREE_SCAN_MAX_BITS,
        free_smoothing: float = FREE_SCAN_SMOOTHING,
        anchored_smoothing: float = ANCHORED_SMOOTHING,
        free_threshold: int = FREE_SCAN_SYNC_THRESHOLD,
        anchored_threshold: int = ANCHORED_SYNC_THRESHOLD,
    ):
        """
        Initialize reader.

        Args:
            sample_rate: Sample rate of the trace (Hz)
            max_bits: Bit budget per free-scan window
            free_smoothing: Bit-period smoothing for free scans
            anchored_smoothing: Bit-period smoothing for anchored decodes
            free_threshold: Sync bits (of 16) needed in a free scan
            anchored_threshold: Sync bits (of 16) needed to decode a frame
        """
        self.sample_rate = sample_rate
        self.max_bits = max_bits
        self.free_smoothing = free_smoothing
        self.anchored_smoothing = anchored_smoothing
        self.free_threshold = free_threshold
        self.anchored_threshold = anchored_threshold

        self.clock = BitClock.nominal(sample_rate)
        frame_samples = int(round(self.clock.samples_per_bit * FRAME_BITS))
        self.window_size = frame_samples * WINDOW_FRAMES
        self.window_step = max(1, int(round(self.clock.samples_per_bit * WINDOW_STEP_BITS)))

    def find_first_frame(self, trace: np.ndarray) -> FrameResult:
        """
        Scan the trace window by window for the first valid frame.

        Returns:
            FrameResult with status OK, or NO_SYNC_FOUND / INSUFFICIENT_BITS
            when no window produced a frame
        """
        _logger.debug(
            f"Scanning for first valid LTC frame "
            f"(window {self.window_size} samples, step {self.window_step})"
        )

        saw_full_window = False
        last_start = max(len(trace) - self.window_size, 1)

        for start in range(0, last_start, self.window_step):
            window = trace[start:start + self.window_size]
            recovery = recover_bits(window, self.clock, self.max_bits, self.free_smoothing)

            if len(recovery.bits) < FRAME_BITS:
                continue
            saw_full_window = True

            match = find_sync(recovery.bits, self.free_threshold)
            if match is None:
                continue

            tc = Timecode.decode_80bit(match.bits, self.anchored_threshold)
            if tc is None:
                continue

            position = start + recovery.positions[match.offset]
            _logger.debug(f"Found valid LTC frame {format_timecode(tc)} at sample position {position}")
            return FrameResult(DecodeStatus.OK, tc, position, match.offset)

        status = DecodeStatus.NO_SYNC_FOUND if saw_full_window else DecodeStatus.INSUFFICIENT_BITS
        _logger.warning(f"No valid LTC frame found ({status.value})")
        return FrameResult(status)

    def decode_at(self, trace: np.ndarray, start_sample: int) -> FrameResult:
        """
        Decode exactly one frame whose first bit starts at start_sample.

        Returns:
            FrameResult with status OK, INSUFFICIENT_BITS when fewer than 80
            bits could be recovered, or NO_SYNC_FOUND when the sync word
            does not match
        """
        recovery = recover_bits(
            trace[start_sample:],
            self.clock,
            FRAME_BITS,
            self.anchored_smoothing,
        )
        _logger.debug(f"Extracted {len(recovery.bits)} bits from sample position {start_sample}")

        if len(recovery.bits) < FRAME_BITS:
            return FrameResult(DecodeStatus.INSUFFICIENT_BITS, sample_position=start_sample)

        tc = Timecode.decode_80bit(recovery.bits, self.anchored_threshold)
        if tc is None:
            return FrameResult(DecodeStatus.NO_SYNC_FOUND, sample_position=start_sample)

        return FrameResult(DecodeStatus.OK, tc, start_sample, 0)


def _same_frame(a: Timecode, b: Timecode) -> bool:
    return (
        (a.hours, a.minutes, a.seconds, a.frames, a.drop_frame, a.color_frame, a.user_bits)
        == (b.hours, b.minutes, b.seconds, b.frames, b.drop_frame, b.color_frame, b.user_bits)
    )


def read_first_frame(
    buffer: SampleBuffer,
    channel: int = 0,
    max_seconds: float = DEFAULT_MAX_SECONDS,
    reader: Optional[LTCReader] = None,
) -> FrameResult:
    """
    Digitize a sample buffer and return its first LTC frame.

    The free-scan result is re-decoded with a position-anchored decode at
    the same sample; `confirmed` reports whether both agree.

    Raises:
        FormatError: if the buffer's encoding or channel is unsupported
    """
    trace = digitize(buffer, channel, int(buffer.sample_rate * max_seconds))
    if reader is None:
        reader = LTCReader(buffer.sample_rate)

    result = reader.find_first_frame(trace)
    if not result.found:
        return result

    anchored = reader.decode_at(trace, result.sample_position)
    confirmed = anchored.found and _same_frame(anchored.timecode, result.timecode)
    if not confirmed:
        _logger.debug(f"Position-anchored decode disagrees ({anchored.status.value})")

    return result._replace(confirmed=confirmed)
