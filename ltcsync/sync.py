"""
Frame synchronizer - finds 80-bit LTC frame boundaries in a bit stream.
"""

import logging
from typing import List, NamedTuple, Optional

from . import FRAME_BITS, SYNC_WORD, SYNC_OFFSET, FREE_SCAN_SYNC_THRESHOLD

_logger = logging.getLogger(__name__)


class SyncMatch(NamedTuple):
    bits: List[int]  # the 80-bit frame window
    offset: int  # bit index of the window in the searched sequence
    matches: int  # sync bits matching, out of 16


def sync_matches(bits: List[int], offset: int = 0) -> int:
    """Count sync-word bits matching at bits[offset+64:offset+80]."""
    window = bits[offset + SYNC_OFFSET:offset + FRAME_BITS]
    return sum(1 for a, b in zip(window, SYNC_WORD) if a == b)


def sync_word_value(bits: List[int], offset: int = 0) -> int:
    """Sync bits as a 16-bit integer, first bit most significant (0x3FFD when clean)."""
    value = 0
    for bit in bits[offset + SYNC_OFFSET:offset + FRAME_BITS]:
        value = (value << 1) | bit
    return value


def find_sync(
    bits: List[int],
    threshold: int = FREE_SCAN_SYNC_THRESHOLD,
) -> Optional[SyncMatch]:
    """
    Slide an 80-bit window over the sequence and return the first offset
    whose sync word matches at least `threshold` of 16 bits.

    Returns:
        SyncMatch, or None if no offset qualifies
    """
    for offset in range(len(bits) - FRAME_BITS + 1):
        matches = sync_matches(bits, offset)
        if matches >= threshold:
            _logger.debug(
                f"Found LTC frame at bit position {offset}, sync matches: {matches}/16 "
                f"(0x{sync_word_value(bits, offset):04X})"
            )
            return SyncMatch(bits[offset:offset + FRAME_BITS], offset, matches)

    return None
