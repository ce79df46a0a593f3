"""
Tests for finding and decoding the first LTC frame.
"""

import numpy as np
import pytest

from ltcsync import (
    DecodeStatus,
    FormatError,
    LTCEncoder,
    LTCReader,
    SampleBuffer,
    Timecode,
    read_first_frame,
)


DATED = (0, 0, 3, 1, 9, 0, 5, 2)  # 2025-09-13


class TestReadFirstFrame:
    """Test the full digitize, scan and confirm path."""

    def test_30fps(self, make_ltc):
        start = Timecode(1, 2, 3, 4, user_bits=DATED)
        buffer = SampleBuffer(make_ltc(start), 48000)

        result = read_first_frame(buffer)

        assert result.status is DecodeStatus.OK
        assert result.found
        assert result.timecode == start
        assert result.sample_position == 0
        assert result.confirmed is True

    def test_drop_frame(self, make_ltc):
        start = Timecode(0, 1, 0, 2, drop_frame=True)
        buffer = SampleBuffer(make_ltc(start, frame_rate=29.97), 48000)

        result = read_first_frame(buffer)

        assert result.found
        assert result.timecode == start
        assert result.timecode.drop_frame is True

    def test_25fps(self, make_ltc):
        start = Timecode(10, 20, 30, 24)
        buffer = SampleBuffer(make_ltc(start, frame_rate=25.0), 48000)

        result = read_first_frame(buffer)

        assert result.found
        assert result.timecode == start

    def test_44100(self, make_ltc):
        start = Timecode(5, 6, 7, 8)
        buffer = SampleBuffer(make_ltc(start, sample_rate=44100), 44100)

        result = read_first_frame(buffer)

        assert result.found
        assert result.timecode == start

    def test_sine_waveform(self, make_ltc):
        start = Timecode(1, 2, 3, 4)
        buffer = SampleBuffer(make_ltc(start, waveform="sine"), 48000)

        result = read_first_frame(buffer)

        assert result.found
        assert (result.timecode.hours, result.timecode.minutes) == (1, 2)

    def test_lead_in(self, make_ltc):
        buffer = SampleBuffer(make_ltc(Timecode(1, 2, 3, 4), lead_in=1000), 48000)

        result = read_first_frame(buffer)

        assert result.found
        assert result.sample_position == 1000
        assert result.timecode.frames == 4

    def test_search_limited_to_max_seconds(self, make_ltc):
        samples = make_ltc(Timecode(1, 2, 3, 4), lead_in=96000)
        buffer = SampleBuffer(samples, 48000)

        too_short = read_first_frame(buffer, max_seconds=1.0)
        long_enough = read_first_frame(buffer, max_seconds=3.0)

        assert too_short.status is DecodeStatus.INSUFFICIENT_BITS
        assert too_short.timecode is None
        assert long_enough.found
        assert long_enough.sample_position == 96000

    def test_silence(self):
        result = read_first_frame(SampleBuffer(np.zeros(48000), 48000))
        assert result.status is DecodeStatus.INSUFFICIENT_BITS
        assert not result.found

    def test_no_sync(self, runs):
        # a clean bit clock carrying nothing but zeros
        trace = runs([20] * 800)
        buffer = SampleBuffer(np.where(trace, 0.5, -0.5), 48000)

        result = read_first_frame(buffer)

        assert result.status is DecodeStatus.NO_SYNC_FOUND

    def test_shorter_than_one_window(self, make_ltc):
        buffer = SampleBuffer(make_ltc(Timecode(1, 2, 3, 4), frame_count=2), 48000)
        assert read_first_frame(buffer).found

    def test_stereo_channel(self, make_ltc):
        ltc = make_ltc(Timecode(1, 2, 3, 4))
        buffer = SampleBuffer(np.column_stack([np.zeros_like(ltc), ltc]), 48000)

        assert read_first_frame(buffer, channel=1).found
        assert read_first_frame(buffer, channel=0).status is DecodeStatus.INSUFFICIENT_BITS

    def test_missing_channel(self, make_ltc):
        buffer = SampleBuffer(make_ltc(Timecode(1, 2, 3, 4)), 48000)
        with pytest.raises(FormatError):
            read_first_frame(buffer, channel=2)

    def test_unsupported_bit_depth(self, make_ltc):
        buffer = SampleBuffer(make_ltc(Timecode(1, 2, 3, 4)), 48000, bit_depth=24)
        with pytest.raises(FormatError):
            read_first_frame(buffer)


class TestSamplePosition:
    """Test the reported position when the audio starts mid-frame."""

    @pytest.mark.parametrize("start, frame_rate", [
        (Timecode(1, 2, 3, 4, user_bits=(1,) * 8), 30.0),
        (Timecode(1, 2, 3, 4, user_bits=(1,) * 8), 25.0),
        (Timecode(0, 1, 0, 2, drop_frame=True, user_bits=(1,) * 8), 29.97),
    ])
    def test_cut_at_any_offset(self, start, frame_rate):
        encoder = LTCEncoder(48000, frame_rate)
        samples, _ = encoder.generate(start, 6)
        first_frame = len(encoder.generate(start, 1)[0])

        # cut past the first two cells so the first frame cannot decode
        for cut in range(41, first_frame, 5):
            result = read_first_frame(SampleBuffer(samples[cut:], 48000))

            assert result.found, cut
            assert result.timecode.frames == start.frames + 1, cut
            assert result.sample_position == first_frame - cut, cut
            assert result.confirmed is True, cut


class TestLTCReader:

    def test_window_geometry(self):
        reader = LTCReader(48000)
        assert reader.clock.samples_per_bit == 20.0
        assert reader.window_size == 6400
        assert reader.window_step == 200

    def test_window_geometry_44100(self):
        reader = LTCReader(44100)
        assert reader.window_size == 5880
        assert reader.window_step == 184

    def test_decode_at_frame_boundary(self, make_ltc):
        trace = make_ltc(Timecode(1, 2, 3, 4)) > 0

        result = LTCReader(48000).decode_at(trace, 1600)

        assert result.found
        assert result.timecode == Timecode(1, 2, 3, 5)
        assert result.sample_position == 1600

    def test_decode_at_misaligned(self, make_ltc):
        trace = make_ltc(Timecode(1, 2, 3, 4)) > 0

        result = LTCReader(48000).decode_at(trace, 1700)

        assert result.status is DecodeStatus.NO_SYNC_FOUND
        assert result.timecode is None

    def test_decode_at_end_of_trace(self, make_ltc):
        trace = make_ltc(Timecode(1, 2, 3, 4)) > 0

        result = LTCReader(48000).decode_at(trace, 15000)

        assert result.status is DecodeStatus.INSUFFICIENT_BITS

    def test_find_first_frame_reports_bit_offset(self, make_ltc):
        trace = make_ltc(Timecode(1, 2, 3, 4)) > 0

        result = LTCReader(48000).find_first_frame(trace)

        assert result.bit_offset == 0
        assert result.confirmed is None
