"""
Shared fixtures: synthetic LTC signals rendered by the package's own encoder.
"""

import numpy as np
import pytest

from ltcsync import LTCEncoder, Timecode


@pytest.fixture
def make_ltc():
    """
    Factory for LTC audio.

    make_ltc(start, frame_count, sample_rate=48000, frame_rate=30.0,
             lead_in=0, waveform="square") -> np.ndarray

    lead_in is a number of silent (zero) samples before the first frame.
    """

    def _make(
        start: Timecode,
        frame_count: int = 10,
        sample_rate: int = 48000,
        frame_rate: float = 30.0,
        lead_in: int = 0,
        waveform: str = "square",
    ) -> np.ndarray:
        encoder = LTCEncoder(sample_rate=sample_rate, frame_rate=frame_rate, waveform=waveform)
        samples, _ = encoder.generate(start, frame_count)
        if lead_in:
            samples = np.concatenate([np.zeros(lead_in, dtype=samples.dtype), samples])
        return samples

    return _make


def trace_from_runs(runs, first_level=True) -> np.ndarray:
    """Polarity trace made of alternating runs of the given lengths."""
    level = first_level
    parts = []
    for length in runs:
        parts.append(np.full(length, level, dtype=bool))
        level = not level
    return np.concatenate(parts)


@pytest.fixture
def runs():
    return trace_from_runs
