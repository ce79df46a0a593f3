"""
Digitizer - turns PCM samples into a polarity trace.
"""

import logging
from typing import Optional

import numpy as np

from . import DEFAULT_MAX_SECONDS
from .errors import FormatError
from .samples import SampleBuffer, SUPPORTED_BIT_DEPTHS

_logger = logging.getLogger(__name__)


def digitize(
    buffer: SampleBuffer,
    channel: int = 0,
    max_samples: Optional[int] = None,
) -> np.ndarray:
    """
    Convert one channel of a sample buffer to a polarity trace.

    A sample is True iff it is strictly greater than zero. No hysteresis,
    no DC-offset correction.

    Args:
        buffer: Decoded samples
        channel: Channel carrying LTC
        max_samples: Cap on the samples analyzed (default: 10 seconds);
            a negative cap analyzes nothing

    Returns:
        Boolean array of length min(available, max_samples)
    """
    if buffer.bit_depth not in SUPPORTED_BIT_DEPTHS:
        raise FormatError(f"Unsupported bit depth: {buffer.bit_depth}")

    if max_samples is None:
        max_samples = int(buffer.sample_rate * DEFAULT_MAX_SECONDS)

    samples = buffer.channel(channel)
    num_samples = max(0, min(len(samples), max_samples))
    _logger.debug(f"Processing {num_samples} samples from {len(samples)} available")

    return samples[:num_samples] > 0
