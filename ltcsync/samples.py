"""
Sample buffer abstraction.

Holds normalized float samples (-1.0 to 1.0) for every channel together with
the sample rate and the bit depth of the source encoding.
"""

import logging
from pathlib import Path
from typing import Union

import numpy as np
import soundfile as sf

from .errors import FormatError

_logger = logging.getLogger(__name__)

SUPPORTED_BIT_DEPTHS = (8, 16, 32)

# soundfile subtype -> bit depth (32 is IEEE float)
_SUBTYPE_BIT_DEPTHS = {
    "PCM_U8": 8,
    "PCM_S8": 8,
    "PCM_16": 16,
    "FLOAT": 32,
}


class SampleBuffer:
    """
    Decoded PCM samples.

    Args:
        samples: Normalized samples, shape (frames,) or (frames, channels)
        sample_rate: Sample rate (Hz)
        bit_depth: Bit depth of the source encoding (8, 16 or 32-float)
    """

    def __init__(self, samples: np.ndarray, sample_rate: int, bit_depth: int = 16):
        samples = np.asarray(samples, dtype=np.float64)
        if samples.ndim == 1:
            samples = samples[:, np.newaxis]
        if samples.ndim != 2:
            raise ValueError(f"samples must be 1-D or 2-D, got shape {samples.shape}")
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")

        self.samples = samples
        self.sample_rate = int(sample_rate)
        self.bit_depth = bit_depth

    @property
    def channels(self) -> int:
        return self.samples.shape[1]

    @property
    def frames(self) -> int:
        return self.samples.shape[0]

    @property
    def duration(self) -> float:
        """Length in seconds."""
        return self.frames / self.sample_rate

    def sample(self, n: int, channel: int = 0) -> float:
        """Return the Nth sample of a channel as a normalized signed value."""
        return float(self.samples[n, channel])

    def channel(self, channel: int = 0) -> np.ndarray:
        """Return one channel as a 1-D array."""
        if not 0 <= channel < self.channels:
            raise FormatError(f"Channel {channel} out of range ({self.channels} channels)")
        return self.samples[:, channel]

    @classmethod
    def from_pcm_bytes(
        cls,
        raw: bytes,
        sample_rate: int,
        bit_depth: int,
        channels: int = 1,
    ) -> "SampleBuffer":
        """
        Build a buffer from interleaved little-endian PCM data.

        8-bit data is unsigned (128 = silence), 16-bit is signed and 32-bit
        is IEEE float.
        """
        if bit_depth == 8:
            data = (np.frombuffer(raw, dtype=np.uint8).astype(np.float64) - 128.0) / 128.0
        elif bit_depth == 16:
            data = np.frombuffer(raw, dtype="<i2").astype(np.float64) / 32768.0
        elif bit_depth == 32:
            data = np.frombuffer(raw, dtype="<f4").astype(np.float64)
        else:
            raise FormatError(f"Unsupported bit depth: {bit_depth}")

        usable = len(data) - (len(data) % channels)
        if usable != len(data):
            _logger.debug(f"Dropping {len(data) - usable} trailing samples (partial frame)")
        data = data[:usable].reshape(-1, channels)
        return cls(data, sample_rate, bit_depth)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "SampleBuffer":
        """
        Read an audio file with soundfile.

        Raises:
            FormatError: if the file's sample encoding is not 8/16-bit PCM
                or 32-bit float
        """
        info = sf.info(str(path))
        bit_depth = _SUBTYPE_BIT_DEPTHS.get(info.subtype)
        if bit_depth is None:
            raise FormatError(f"Unsupported sample encoding: {info.subtype} ({path})")

        data, sr = sf.read(str(path), dtype="float64", always_2d=True)
        _logger.debug(
            f"Loaded {path}: {info.frames} frames, {sr} Hz, "
            f"{info.channels} channel(s), {info.subtype}"
        )
        return cls(data, sr, bit_depth)
