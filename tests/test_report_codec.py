"""Tests for bstick.report_codec -- exact report bytes, no I/O."""

import pytest

from bstick.colour import Colour
from bstick.constants import FEATURE_REPORT_SIZE
from bstick.errors import MalformedReport
from bstick.report_codec import (
    FeatureReport,
    FrameTier,
    decode_colour_report,
    decode_info_block,
    decode_mode_report,
    encode_colour,
    encode_frame,
    encode_indexed_colour,
    encode_info_block,
    encode_mode,
    encode_single_colour,
    select_frame_report,
)


# =========================================================================
# Colour reports
# =========================================================================

class TestColourReports:

    def test_single(self):
        report = encode_single_colour(Colour(255, 0, 0))
        assert report == FeatureReport(1, bytes([1, 255, 0, 0]))

    def test_indexed(self):
        report = encode_indexed_colour(1, 2, Colour(255, 0, 0))
        assert report == FeatureReport(5, bytes([5, 1, 2, 255, 0, 0]))

    def test_encode_colour_default_address_uses_single(self):
        assert encode_colour(Colour(1, 2, 3)).report_id == 1

    @pytest.mark.parametrize("channel,index", [(0, 1), (1, 0), (2, 255)])
    def test_encode_colour_other_address_uses_indexed(self, channel, index):
        report = encode_colour(Colour(1, 2, 3), channel, index)
        assert report.data == bytes([5, channel, index, 1, 2, 3])

    def test_decode_round_trip_each_channel(self):
        for v in range(256):
            for c in (Colour(v, 17, 230), Colour(230, v, 17), Colour(17, 230, v)):
                assert decode_colour_report(encode_single_colour(c).data) == c, f"Failed for {c}"

    def test_decode_round_trip_grid(self):
        grid = range(0, 256, 15)
        for r in grid:
            for g in grid:
                for b in grid:
                    c = Colour(r, g, b)
                    assert decode_colour_report(encode_single_colour(c).data) == c

    def test_decode_full_response(self):
        buf = bytes([1, 9, 8, 7]) + bytes(FEATURE_REPORT_SIZE - 4)
        assert decode_colour_report(buf) == Colour(9, 8, 7)

    @pytest.mark.parametrize("buf", [None, b"", b"\x01\x02\x03"])
    def test_decode_short(self, buf):
        with pytest.raises(MalformedReport):
            decode_colour_report(buf)


# =========================================================================
# Mode reports
# =========================================================================

class TestModeReports:

    def test_encode(self):
        assert encode_mode(2) == FeatureReport(4, bytes([4, 2]))

    def test_decode(self):
        assert decode_mode_report(bytes([4, 1]) + bytes(31)) == 1

    @pytest.mark.parametrize("buf", [None, b"", b"\x04"])
    def test_decode_short(self, buf):
        with pytest.raises(MalformedReport):
            decode_mode_report(buf)


# =========================================================================
# Frame reports
# =========================================================================

class TestSelectFrameReport:

    @pytest.mark.parametrize("count,expected", [
        (0, FrameTier(6, 8)),
        (1, FrameTier(6, 8)),
        (7, FrameTier(6, 8)),
        (8, FrameTier(7, 16)),
        (15, FrameTier(7, 16)),
        (16, FrameTier(8, 32)),
        (31, FrameTier(8, 32)),
        (32, FrameTier(9, 64)),
        (64, FrameTier(9, 64)),
    ])
    def test_boundaries(self, count, expected):
        assert select_frame_report(count) == expected

    def test_capacity_covers_count(self):
        for n in range(0, 65):
            assert select_frame_report(n).capacity >= n, f"Failed for n={n}"

    def test_saturates(self):
        assert select_frame_report(65).capacity == 64
        assert select_frame_report(1000) == FrameTier(9, 64)


class TestEncodeFrame:

    def test_grb_order(self):
        tier = FrameTier(6, 8)
        report = encode_frame(0, [Colour(1, 2, 3)], tier)
        assert report.report_id == 6
        assert report.data[:5] == bytes([6, 0, 2, 1, 3])

    def test_zero_pads(self):
        tier = FrameTier(6, 8)
        report = encode_frame(2, [Colour(1, 2, 3)] * 3, tier)
        assert len(report.data) == 2 + 8 * 3
        assert report.data[2 + 9:] == bytes(5 * 3)

    def test_truncates(self):
        tier = FrameTier(6, 8)
        report = encode_frame(1, [Colour(255, 255, 255)] * 20, tier)
        assert len(report.data) == 2 + 8 * 3
        assert report.data[1] == 1

    def test_payload_always_capacity(self):
        for n in (0, 5, 8, 17, 40, 64, 100):
            tier = select_frame_report(n)
            report = encode_frame(0, [Colour(9, 9, 9)] * n, tier)
            assert len(report.data) - 2 == tier.capacity * 3


# =========================================================================
# Info blocks
# =========================================================================

class TestInfoBlock:

    def test_encode_layout(self):
        report = encode_info_block(2, "desk")
        assert report.report_id == 2
        assert len(report.data) == FEATURE_REPORT_SIZE
        assert report.data[0] == 0
        assert report.data[1:5] == b"desk"
        assert report.data[5:] == bytes(28)

    def test_encode_truncates(self):
        report = encode_info_block(3, "x" * 40)
        assert len(report.data) == FEATURE_REPORT_SIZE
        assert report.data[1:] == b"x" * 32

    def test_encode_unencodable_replaced(self):
        report = encode_info_block(2, "a☃b")
        assert report.data[1:4] == b"a?b"

    def test_decode_stops_at_nul(self):
        buf = bytes([2]) + b"kitchen" + bytes(25)
        assert decode_info_block(buf) == "kitchen"

    def test_decode_full_width(self):
        buf = bytes([2]) + b"y" * 32
        assert decode_info_block(buf) == "y" * 32

    def test_round_trip(self):
        report = encode_info_block(2, "hello")
        assert decode_info_block(report.data) == "hello"

    @pytest.mark.parametrize("buf", [None, b""])
    def test_decode_empty(self, buf):
        with pytest.raises(MalformedReport):
            decode_info_block(buf)
