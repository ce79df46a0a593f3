"""
Error taxonomy for LTC decoding.

Only FormatError is raised. Everything else a decode can run into is an
ordinary result value the caller inspects.
"""

from enum import Enum


class LTCError(Exception):
    """Base class for ltcsync errors."""


class FormatError(LTCError, ValueError):
    """Sample encoding the digitizer cannot read (fatal for the decode)."""


class DecodeStatus(str, Enum):
    """Outcome of a frame search or a position-anchored decode."""

    OK = "ok"
    NO_SYNC_FOUND = "no_sync_found"
    INSUFFICIENT_BITS = "insufficient_bits"
