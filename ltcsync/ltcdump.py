"""
Parser for text frames printed by libltc's `ltcdump -vv`.

Line format:

    ce410081   30:04:00.16 |  2660708  2662667 R

user bits (groups 8..1 as hex), timecode ('.' or ';' before the frame field
marks drop-frame), then the first and last sample of the frame and an
optional direction flag.
"""

import logging
import re
import subprocess
from typing import List, NamedTuple, Optional

from .timecode import Timecode

_logger = logging.getLogger(__name__)

TIMECODE_RE = re.compile(r"(\d{2}):(\d{2}):(\d{2})([.:;])(\d{2})")
USER_BITS_RE = re.compile(r"^[0-9a-fA-F]{8}$")


class DumpFrame(NamedTuple):
    timecode: Timecode
    start_sample: int
    end_sample: Optional[int]
    reverse: bool


def parse_ltcdump_line(line: str) -> Optional[DumpFrame]:
    """
    Parse one ltcdump line.

    Returns:
        DumpFrame, or None for comments, blank lines, discontinuity markers
        and anything that does not parse
    """
    line = line.strip()
    if not line or line.startswith("#") or "DISCONTINUITY" in line:
        return None

    parts = line.split("|")
    if len(parts) != 2:
        return None

    left = parts[0].split()
    if len(left) < 2 or not USER_BITS_RE.match(left[0]):
        _logger.debug(f"Failed to parse LTC frame: {line}")
        return None

    match = TIMECODE_RE.search(" ".join(left[1:]))
    if match is None:
        _logger.debug(f"Failed to parse LTC frame: {line}")
        return None

    hours, minutes, seconds, separator, frames = match.groups()
    user_bits = tuple(int(ch, 16) for ch in reversed(left[0]))

    right = parts[1].split()
    try:
        start_sample = int(right[0]) if right else 0
        end_sample = int(right[1]) if len(right) > 1 else None
    except ValueError:
        _logger.debug(f"Failed to parse LTC frame positions: {line}")
        return None
    reverse = len(right) > 2 and right[2].upper() == "R"

    tc = Timecode(
        hours=int(hours),
        minutes=int(minutes),
        seconds=int(seconds),
        frames=int(frames),
        drop_frame=separator in ".;",
        user_bits=user_bits,
    )
    return DumpFrame(tc, start_sample, end_sample, reverse)


def parse_ltcdump_output(text: str) -> List[DumpFrame]:
    """Parse every frame line of an ltcdump run."""
    frames = []
    for line in text.splitlines():
        frame = parse_ltcdump_line(line)
        if frame is not None:
            frames.append(frame)
    _logger.debug(f"Parsed {len(frames)} LTC frames from ltcdump output")
    return frames


def run_ltcdump(path: str, executable: str = "ltcdump") -> List[DumpFrame]:
    """
    Decode a file with the external ltcdump tool.

    Raises:
        FileNotFoundError: if ltcdump is not installed
        subprocess.CalledProcessError: if ltcdump fails
    """
    _logger.info(f"Extracting LTC timecode with {executable}: {path}")
    completed = subprocess.run(
        [executable, str(path), "-vv"],
        check=True,
        capture_output=True,
        text=True,
    )
    return parse_ltcdump_output(completed.stdout)
