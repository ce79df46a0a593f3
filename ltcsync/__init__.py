"""
ltcsync - LTC timecode extraction for Broadcast WAV metadata.
Finds the first SMPTE/LTC frame in a recording and derives TimeReference,
OriginationTime and OriginationDate from it.
"""

__version__ = "0.1.0"

# Protocol constants
LTC_BIT_RATE = 2400  # bits per second at 30 fps (80 bits x 30 frames)
FRAME_BITS = 80
DEFAULT_SAMPLE_RATE = 48000  # Hz, BWF TimeReference is counted at this rate
DEFAULT_MAX_SECONDS = 10.0  # seconds of audio digitized per decode attempt

# Sync word occupies bits 64-79 (0x3FFD)
SYNC_WORD = [0, 0, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 0, 1]
SYNC_OFFSET = 64

# Decoder tuning
FREE_SCAN_MAX_BITS = 1000
FREE_SCAN_SMOOTHING = 0.01
ANCHORED_SMOOTHING = 0.05
FREE_SCAN_SYNC_THRESHOLD = 15  # of 16
ANCHORED_SYNC_THRESHOLD = 14  # of 16

from .errors import LTCError, FormatError, DecodeStatus
from .samples import SampleBuffer
from .digitizer import digitize
from .biphase import BitClock, BitRecovery, recover_bits, BiphaseMEncoder
from .sync import SyncMatch, find_sync, sync_matches
from .timecode import Timecode, format_timecode
from .validate import CenturyPolicy, Correction, ValidationPolicy, ValidatedFrame, validate
from .metadata import Metadata, derive_metadata, frame_rate_for, time_reference
from .reader import FrameResult, LTCReader, read_first_frame
from .encoder import LTCEncoder

__all__ = [
    "LTCError",
    "FormatError",
    "DecodeStatus",
    "SampleBuffer",
    "digitize",
    "BitClock",
    "BitRecovery",
    "recover_bits",
    "BiphaseMEncoder",
    "SyncMatch",
    "find_sync",
    "sync_matches",
    "Timecode",
    "format_timecode",
    "CenturyPolicy",
    "Correction",
    "ValidationPolicy",
    "ValidatedFrame",
    "validate",
    "Metadata",
    "derive_metadata",
    "frame_rate_for",
    "time_reference",
    "FrameResult",
    "LTCReader",
    "read_first_frame",
    "LTCEncoder",
]
