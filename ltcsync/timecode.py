"""
SMPTE/LTC 80-bit frame layout and the Timecode value decoded from it.

Frame layout (bit indices, BCD digits LSB first):

    0-3    frame units          4-7    user bits group 1
    8-9    frame tens           10     drop-frame flag
    11     color-frame flag     12-15  user bits group 2
    16-19  second units         20-23  user bits group 3
    24-26  second tens          28-31  user bits group 4
    32-35  minute units         36-39  user bits group 5
    40-42  minute tens          44-47  user bits group 6
    48-51  hour units           52-55  user bits group 7
    56-57  hour tens            60-63  user bits group 8
    64-79  sync word 0011111111111101
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from . import FRAME_BITS, SYNC_WORD, SYNC_OFFSET, ANCHORED_SYNC_THRESHOLD
from .sync import sync_matches

_logger = logging.getLogger(__name__)

# field -> (units start, tens start, tens width); units are always 4 bits
BCD_FIELDS = {
    "frames": (0, 8, 2),
    "seconds": (16, 24, 3),
    "minutes": (32, 40, 3),
    "hours": (48, 56, 2),
}

DROP_FRAME_BIT = 10
COLOR_FRAME_BIT = 11

USER_BIT_GROUPS = (4, 12, 20, 28, 36, 44, 52, 60)


def _read_lsb_first(bits: List[int], start: int, width: int) -> int:
    value = 0
    for i in range(width):
        value |= bits[start + i] << i
    return value


def _write_lsb_first(bits: List[int], start: int, width: int, value: int):
    for i in range(width):
        bits[start + i] = (value >> i) & 1


@dataclass(frozen=True)
class Timecode:
    """
    One decoded LTC frame.

    user_bits holds the eight 4-bit groups in frame order (group 1 first).
    sync_matches is how many of the 16 sync bits matched when decoded.
    """

    hours: int
    minutes: int
    seconds: int
    frames: int
    drop_frame: bool = False
    color_frame: bool = False
    user_bits: Tuple[int, ...] = (0,) * 8
    sync_matches: int = 16

    @property
    def user_bits_string(self) -> str:
        """Groups 8 down to 1 as decimal digits (YYMMDDXX when carrying a date)."""
        return "".join(str(group) for group in reversed(self.user_bits))

    @property
    def user_bits_hex(self) -> str:
        """Groups 8 down to 1 as hex digits, as printed by ltcdump."""
        return "".join(f"{group:x}" for group in reversed(self.user_bits))

    @property
    def date_digits(self) -> Optional[Tuple[int, int, int, str]]:
        """
        User bits read as YYMMDDXX.

        Returns:
            (yy, mm, dd, extra), or None if any group is not a decimal digit
        """
        if len(self.user_bits) != 8 or any(group > 9 for group in self.user_bits):
            return None
        digits = self.user_bits_string
        return int(digits[0:2]), int(digits[2:4]), int(digits[4:6]), digits[6:8]

    def encode_80bit(self) -> List[int]:
        """
        Encode to an 80-bit LTC frame (with a clean sync word).

        Raises:
            ValueError: if a field does not fit its BCD width
        """
        bits = [0] * FRAME_BITS

        for name, (units_start, tens_start, tens_width) in BCD_FIELDS.items():
            value = getattr(self, name)
            tens, units = divmod(value, 10)
            if value < 0 or tens >= (1 << tens_width):
                raise ValueError(f"{name} value {value} does not fit the LTC frame")
            _write_lsb_first(bits, units_start, 4, units)
            _write_lsb_first(bits, tens_start, tens_width, tens)

        bits[DROP_FRAME_BIT] = 1 if self.drop_frame else 0
        bits[COLOR_FRAME_BIT] = 1 if self.color_frame else 0

        if len(self.user_bits) != 8:
            raise ValueError(f"user_bits must have 8 groups, got {len(self.user_bits)}")
        for start, group in zip(USER_BIT_GROUPS, self.user_bits):
            if not 0 <= group <= 0xF:
                raise ValueError(f"user bit group {group} must be 4-bit unsigned")
            _write_lsb_first(bits, start, 4, group)

        bits[SYNC_OFFSET:FRAME_BITS] = SYNC_WORD
        return bits

    @classmethod
    def decode_80bit(
        cls,
        bits: List[int],
        sync_threshold: int = ANCHORED_SYNC_THRESHOLD,
    ) -> Optional["Timecode"]:
        """
        Decode an 80-bit LTC frame.

        Args:
            bits: Frame bits, bit 0 first
            sync_threshold: Minimum matching sync bits (of 16)

        Returns:
            Timecode, or None if the window is short or the sync word
            does not match well enough
        """
        if len(bits) < FRAME_BITS:
            return None

        matches = sync_matches(bits)
        if matches < sync_threshold:
            _logger.debug(f"Sync word mismatch: {''.join(map(str, bits[64:80]))}, matches: {matches}/16")
            return None

        fields = {}
        for name, (units_start, tens_start, tens_width) in BCD_FIELDS.items():
            units = _read_lsb_first(bits, units_start, 4)
            tens = _read_lsb_first(bits, tens_start, tens_width)
            fields[name] = tens * 10 + units

        user_bits = tuple(_read_lsb_first(bits, start, 4) for start in USER_BIT_GROUPS)

        return cls(
            hours=fields["hours"],
            minutes=fields["minutes"],
            seconds=fields["seconds"],
            frames=fields["frames"],
            drop_frame=bits[DROP_FRAME_BIT] == 1,
            color_frame=bits[COLOR_FRAME_BIT] == 1,
            user_bits=user_bits,
            sync_matches=matches,
        )


def format_timecode(tc: Optional[Timecode]) -> str:
    """Format timecode for display (with ; separator for drop-frame)."""
    if tc is None:
        return "--:--:--:--"

    separator = ";" if tc.drop_frame else ":"
    return f"{tc.hours:02d}:{tc.minutes:02d}:{tc.seconds:02d}{separator}{tc.frames:02d}"
