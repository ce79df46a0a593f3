"""
Tests for frame synchronization.
"""

from ltcsync import SYNC_WORD, Timecode, find_sync, sync_matches
from ltcsync.sync import sync_word_value


def test_clean_sync_word():
    bits = Timecode(1, 2, 3, 4).encode_80bit()
    assert sync_matches(bits) == 16
    assert sync_word_value(bits) == 0x3FFD


def test_sync_at_offset():
    bits = [0] * 37 + Timecode(1, 2, 3, 4).encode_80bit()

    match = find_sync(bits)

    assert match is not None
    assert match.offset == 37
    assert match.matches == 16
    assert match.bits == bits[37:117]


def test_offset_one_bit_early_is_rejected():
    bits = [0] * 37 + Timecode(1, 2, 3, 4).encode_80bit()
    assert sync_matches(bits, 36) == 13


def test_first_qualifying_offset_wins():
    first = Timecode(1, 2, 3, 4).encode_80bit()
    second = Timecode(1, 2, 3, 5).encode_80bit()

    match = find_sync(first + second)

    assert match.offset == 0


def test_threshold():
    bits = Timecode(1, 2, 3, 4).encode_80bit()
    bits[70] ^= 1

    assert find_sync(bits).matches == 15
    assert find_sync(bits, threshold=16) is None


def test_too_few_bits():
    assert find_sync(SYNC_WORD) is None
    assert find_sync([]) is None


def test_no_sync_in_zeros():
    assert find_sync([0] * 500) is None


def test_three_corrupted_sync_bits():
    bits = Timecode(1, 2, 3, 4).encode_80bit()
    for i in (64, 70, 79):
        bits[i] ^= 1

    assert sync_matches(bits) == 13
    assert find_sync(bits) is None
