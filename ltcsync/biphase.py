"""
Biphase-M (Manchester) encoding/decoding for SMPTE/LTC.

Biphase-M encoding rules:
1. There's always a transition at the START of each bit cell
2. Logic 1: Additional transition in middle of cell
3. Logic 0: No transition in middle

Reference: EBU Tech 3185 / SMPTE 12M

Waveform Types:
- "square": Instantaneous transitions (fast rise/fall time, ~1μs equivalent)
- "sine": Smooth sinusoidal transitions (slower rise/fall time, ~25μs equivalent)
"""

import bisect
import logging
from typing import List, Literal, NamedTuple

import numpy as np
from scipy import signal

from . import LTC_BIT_RATE, FRAME_BITS, FREE_SCAN_MAX_BITS, FREE_SCAN_SMOOTHING

_logger = logging.getLogger(__name__)

WaveformType = Literal["square", "sine"]

# Interval classification, in units of the running bit period
HALF_BIT_LIMIT = 0.5 * 1.5
FULL_BIT_LIMIT = 1.5


def _square_to_sine(samples: np.ndarray, cutoff_ratio: float = 0.4) -> np.ndarray:
    """
    Convert square wave to sine-like waveform using filtering.

    This preserves the zero-crossing timing while smoothing the edges
    to create a more broadcast-friendly signal.

    Args:
        samples: Square wave samples
        cutoff_ratio: Lowpass filter cutoff relative to Nyquist (default 0.4)

    Returns:
        Smoothed sine-like waveform
    """
    nyquist = 0.5
    cutoff = cutoff_ratio * nyquist
    b, a = signal.butter(4, cutoff, btype='low')

    smoothed = signal.filtfilt(b, a, samples)

    # Normalize to maintain original amplitude
    max_orig = np.max(np.abs(samples))
    max_smoothed = np.max(np.abs(smoothed))
    if max_smoothed > 0:
        smoothed = smoothed * (max_orig / max_smoothed)

    return smoothed.astype(np.float32)


class BitClock(NamedTuple):
    """Running bit-period estimate (samples per bit)."""

    samples_per_bit: float

    @classmethod
    def nominal(cls, sample_rate: int) -> "BitClock":
        return cls(sample_rate / LTC_BIT_RATE)


class BitRecovery(NamedTuple):
    """
    Output of one bit-recovery pass.

    positions[i] is the trace index of the transition that starts bits[i].
    clock is the bit-period estimate after the pass.
    """

    bits: List[int]
    positions: List[int]
    clock: BitClock


def _realign_run(positions: List[int], run_start: int, edges: List[int]):
    """
    Move a run of mis-paired "1"s back by half a cell.

    A half-bit still pending when a full cell arrives means the run started
    on the second half of a cell, so every "1" since run_start was stamped
    at its mid-cell transition. Each moves to the transition before it.
    """
    floor = positions[run_start - 1] if run_start > 0 else -1
    for i in range(run_start, len(positions)):
        index = bisect.bisect_left(edges, positions[i])
        if index > 0 and edges[index - 1] > floor:
            positions[i] = edges[index - 1]


def recover_bits(
    trace: np.ndarray,
    clock: BitClock,
    max_bits: int = FREE_SCAN_MAX_BITS,
    smoothing: float = FREE_SCAN_SMOOTHING,
) -> BitRecovery:
    """
    Decode a polarity trace into channel bits.

    Each polarity change closes an interval measured from the previous one:
    - short (< 0.75 bit): half of a "1"; two in a row emit the "1"
    - medium (< 1.5 bits): a "0", closing any pending half-bit as "1"
      and nudging the bit period toward the interval
    - long: spurious, closes a pending half-bit as "1"

    Args:
        trace: Boolean polarity trace
        clock: Starting bit-period estimate
        max_bits: Stop once this many bits are collected
        smoothing: Exponential smoothing factor for the bit period

    Returns:
        BitRecovery with at most max_bits bits. A short result is the
        only failure signal.
    """
    trace = np.asarray(trace, dtype=bool)
    bits: List[int] = []
    positions: List[int] = []
    samples_per_bit = clock.samples_per_bit

    if len(trace) < 2 or max_bits <= 0:
        return BitRecovery(bits, positions, clock)

    edges = (np.flatnonzero(trace[1:] != trace[:-1]) + 1).tolist()

    last_edge = 0
    pending_start = None  # start of a half "1" waiting for its second half
    run_start = 0  # index of the first bit after the last "0" or dropout

    for edge in edges:
        if len(bits) >= max_bits:
            break

        elapsed = edge - last_edge

        if elapsed < samples_per_bit * HALF_BIT_LIMIT:
            if pending_start is None:
                pending_start = last_edge
            else:
                bits.append(1)
                positions.append(pending_start)
                pending_start = None
        elif elapsed < samples_per_bit * FULL_BIT_LIMIT:
            if pending_start is not None:
                bits.append(1)
                positions.append(pending_start)
                _realign_run(positions, run_start, edges)
            bits.append(0)
            positions.append(last_edge)
            pending_start = None
            run_start = len(bits)
            samples_per_bit = samples_per_bit * (1 - smoothing) + elapsed * smoothing
        else:
            if pending_start is not None:
                bits.append(1)
                positions.append(pending_start)
                pending_start = None
            run_start = len(bits)

        last_edge = edge

    if pending_start is not None and len(bits) < max_bits:
        bits.append(1)
        positions.append(pending_start)

    _logger.debug(
        f"Recovered {min(len(bits), max_bits)} bits from {len(edges)} transitions "
        f"(samples per bit {clock.samples_per_bit:.3f} -> {samples_per_bit:.3f})"
    )

    return BitRecovery(bits[:max_bits], positions[:max_bits], BitClock(samples_per_bit))


class BiphaseMEncoder:
    """
    Biphase-M (Manchester) encoder for SMPTE/LTC.

    Supports two waveform types:
    - square: Instant transitions (traditional for hardware LTC)
    - sine: Smooth sinusoidal transitions (broadcast-friendly, reduces harmonics)
    """

    def __init__(
        self,
        sample_rate: int = 48000,
        frame_rate: float = 30.0,
        waveform: WaveformType = "square",
    ):
        self.sample_rate = sample_rate
        self.frame_rate = frame_rate
        self.waveform = waveform
        self.bit_rate = FRAME_BITS * frame_rate
        # Float so 29.97 fps keeps its timing:
        # 48000 / (80 * 29.97) ≈ 20.02 samples per bit
        self.samples_per_bit = sample_rate / self.bit_rate
        self.last_level = -1  # Start low
        self.sample_accumulator = 0.0  # For handling fractional samples

    def reset(self):
        """Reset encoder state."""
        self.last_level = -1
        self.sample_accumulator = 0.0

    def encode_bit(self, bit: int) -> np.ndarray:
        """Encode a single bit to audio samples using Biphase-M."""
        # Always transition at start
        first_half_level = -self.last_level

        if bit == 0:
            second_half_level = first_half_level
        else:
            second_half_level = -first_half_level

        self.last_level = second_half_level

        self.sample_accumulator += self.samples_per_bit
        total_samples = int(self.sample_accumulator)
        self.sample_accumulator -= total_samples

        half_samples = total_samples // 2
        other_half = total_samples - half_samples

        first_half = np.full(half_samples, first_half_level, dtype=np.float32)
        second_half = np.full(other_half, second_half_level, dtype=np.float32)
        return np.concatenate([first_half, second_half])

    def encode_frame(self, bits: List[int]) -> np.ndarray:
        """Encode an 80-bit frame to square-wave samples."""
        if len(bits) != FRAME_BITS:
            raise ValueError(f"Frame must be {FRAME_BITS} bits, got {len(bits)}")

        return np.concatenate([self.encode_bit(bit) for bit in bits])

    def encode_frames(self, frames: List[List[int]]) -> np.ndarray:
        """Encode consecutive frames, smoothing the whole run for "sine"."""
        if not frames:
            return np.zeros(0, dtype=np.float32)

        result = np.concatenate([self.encode_frame(bits) for bits in frames])

        if self.waveform == "sine":
            result = _square_to_sine(result)

        return result
