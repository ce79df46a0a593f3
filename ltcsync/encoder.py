"""
LTC Encoder - generates SMPTE/LTC audio for testing and calibration.
"""

import datetime
from dataclasses import replace
from pathlib import Path
from typing import List, Tuple, Union

import numpy as np
import soundfile as sf

from . import DEFAULT_SAMPLE_RATE
from .biphase import BiphaseMEncoder, WaveformType
from .timecode import Timecode


def date_user_bits(date: datetime.date, extra: int = 0) -> Tuple[int, ...]:
    """User-bit groups (group 1 first) carrying a date as YYMMDDXX."""
    if not 0 <= extra <= 99:
        raise ValueError("extra must be two decimal digits")
    digits = f"{date.year % 100:02d}{date.month:02d}{date.day:02d}{extra:02d}"
    return tuple(int(digit) for digit in reversed(digits))


def next_timecode(tc: Timecode, frame_rate: float) -> Timecode:
    """
    Advance a timecode by one frame.

    Drop-frame timecodes skip frames 0 and 1 at the start of every minute
    except minutes divisible by ten.
    """
    nominal = int(round(frame_rate))
    frames, seconds, minutes, hours = tc.frames + 1, tc.seconds, tc.minutes, tc.hours

    if frames >= nominal:
        frames = 0
        seconds += 1
    if seconds >= 60:
        seconds = 0
        minutes += 1
    if minutes >= 60:
        minutes = 0
        hours = (hours + 1) % 24

    if tc.drop_frame and seconds == 0 and frames < 2 and minutes % 10 != 0:
        frames = 2

    return replace(tc, hours=hours, minutes=minutes, seconds=seconds, frames=frames)


class LTCEncoder:
    """
    Renders consecutive LTC frames as audio.
    """

    def __init__(
        self,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        frame_rate: float = 30.0,
        waveform: WaveformType = "square",
    ):
        """
        Initialize encoder.

        Args:
            sample_rate: Output audio sample rate (Hz)
            frame_rate: Frames per second (29.97 for drop-frame)
            waveform: "square" or "sine"
        """
        self.sample_rate = sample_rate
        self.frame_rate = frame_rate
        self.waveform = waveform

    def frames(self, start: Timecode, frame_count: int) -> List[Timecode]:
        """Consecutive timecodes beginning at start."""
        result = []
        tc = start
        for _ in range(frame_count):
            result.append(tc)
            tc = next_timecode(tc, self.frame_rate)
        return result

    def generate(
        self,
        start: Timecode,
        frame_count: int,
        amplitude: float = 0.7,
    ) -> tuple[np.ndarray, int]:
        """
        Generate LTC audio.

        Args:
            start: Timecode of the first frame
            frame_count: Number of frames to render
            amplitude: Output amplitude (0.0 to 1.0)

        Returns:
            Tuple of (audio_samples, sample_rate)
        """
        biphase = BiphaseMEncoder(self.sample_rate, self.frame_rate, self.waveform)
        bits = [tc.encode_80bit() for tc in self.frames(start, frame_count)]
        samples = biphase.encode_frames(bits) * amplitude
        return samples, self.sample_rate

    def generate_to_file(
        self,
        output_path: Union[str, Path],
        start: Timecode,
        frame_count: int,
        amplitude: float = 0.7,
    ):
        """
        Generate and save LTC audio as 16-bit PCM.
        """
        samples, sample_rate = self.generate(start, frame_count, amplitude)

        sf.write(
            str(output_path),
            samples,
            sample_rate,
            subtype='PCM_16'
        )
