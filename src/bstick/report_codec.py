"""Feature report codec for BlinkStick devices.

Pure translation between logical colour operations and the byte buffers
handed to the transport.  No I/O happens here.

Every encoder returns a ``FeatureReport``: the report id the transport
addresses plus the complete buffer, whose byte 0 is the report-id slot.

Report layouts::

    id 1   [1, R, G, B]                         primary LED colour
    id 4   [4, mode]                            device mode
    id 5   [5, channel, index, R, G, B]         single addressed LED
    id 6-9 [id, channel, G0, R0, B0, G1, ...]   whole-channel frame
    id 2,3 [0, c0, c1, ... c31]                 info-block text (33 bytes)

Responses to colour / mode / info queries are 33-byte buffers whose byte 0
echoes the report id.
"""

from __future__ import annotations

from typing import NamedTuple, Optional, Sequence

from .colour import Colour
from .constants import (
    FEATURE_REPORT_SIZE,
    FRAME_TIERS,
    INFO_BLOCK_TEXT_SIZE,
    REPORT_COLOUR,
    REPORT_INDEXED_COLOUR,
    REPORT_MODE,
)
from .errors import MalformedReport


class FeatureReport(NamedTuple):
    """A feature report ready for the transport."""
    report_id: int
    data: bytes


class FrameTier(NamedTuple):
    """Frame report size bucket supported by the firmware."""
    report_id: int
    capacity: int  # LEDs per channel


# =========================================================================
# Colour reports
# =========================================================================

def encode_single_colour(colour: Colour) -> FeatureReport:
    """Primary-LED colour report (channel 0, index 0)."""
    return FeatureReport(
        REPORT_COLOUR,
        bytes([REPORT_COLOUR, colour.red, colour.green, colour.blue]),
    )


def encode_indexed_colour(channel: int, index: int, colour: Colour) -> FeatureReport:
    """Colour report for one LED addressed by channel and index."""
    return FeatureReport(
        REPORT_INDEXED_COLOUR,
        bytes([
            REPORT_INDEXED_COLOUR, channel, index,
            colour.red, colour.green, colour.blue,
        ]),
    )


def encode_colour(colour: Colour, channel: int = 0, index: int = 0) -> FeatureReport:
    """Pick the single form for the default address, indexed otherwise."""
    if channel == 0 and index == 0:
        return encode_single_colour(colour)
    return encode_indexed_colour(channel, index, colour)


def decode_colour_report(buffer: Optional[bytes]) -> Colour:
    """Read R, G, B from bytes 1-3 of a colour query response.

    Raises:
        MalformedReport: If the buffer is missing or shorter than 4 bytes.
    """
    if buffer is None or len(buffer) < 4:
        got = "nothing" if buffer is None else f"{len(buffer)} bytes"
        raise MalformedReport(f"colour report too short (got {got}, need 4)")
    return Colour(buffer[1], buffer[2], buffer[3])


# =========================================================================
# Mode reports
# =========================================================================

def encode_mode(mode: int) -> FeatureReport:
    return FeatureReport(REPORT_MODE, bytes([REPORT_MODE, mode]))


def decode_mode_report(buffer: Optional[bytes]) -> int:
    """Mode byte from a mode query response (byte 1)."""
    if buffer is None or len(buffer) < 2:
        raise MalformedReport("mode report too short")
    return buffer[1]


# =========================================================================
# Frame reports (whole channel in one transfer)
# =========================================================================

def select_frame_report(led_count: int) -> FrameTier:
    """Choose the smallest frame tier that holds *led_count* LEDs.

    The firmware sizes each tier by payload bytes, so the comparison is on
    ``led_count * 3`` against each tier's byte capacity.  Counts above the
    largest tier saturate at 64 LEDs.
    """
    payload_len = max(0, led_count) * 3
    for report_id, capacity in FRAME_TIERS[:-1]:
        if payload_len < capacity * 3:
            return FrameTier(report_id, capacity)
    return FrameTier(*FRAME_TIERS[-1])


def encode_frame(channel: int, colours: Sequence[Colour], tier: FrameTier) -> FeatureReport:
    """Encode a whole-channel frame.

    Each LED is sent as G, R, B.  LEDs beyond the tier capacity are
    dropped; missing trailing LEDs are sent as off.
    """
    payload = bytearray(tier.capacity * 3)
    for i, colour in enumerate(colours[:tier.capacity]):
        payload[i * 3] = colour.green
        payload[i * 3 + 1] = colour.red
        payload[i * 3 + 2] = colour.blue
    return FeatureReport(tier.report_id, bytes([tier.report_id, channel]) + bytes(payload))


# =========================================================================
# Info blocks (two 32-character labels stored on the device)
# =========================================================================

def encode_info_block(location: int, text: str) -> FeatureReport:
    """33-byte info-block write: byte 0 zero, then up to 32 characters.

    Longer text is truncated; the remainder is zero-filled.
    """
    raw = text[:INFO_BLOCK_TEXT_SIZE].encode('latin-1', errors='replace')
    buf = bytearray(FEATURE_REPORT_SIZE)
    buf[1:1 + len(raw)] = raw
    return FeatureReport(location, bytes(buf))


def decode_info_block(buffer: Optional[bytes]) -> str:
    """Text from bytes 1.. of an info-block response, up to the first NUL."""
    if not buffer:
        raise MalformedReport("info block report is empty")
    raw = bytes(buffer[1:])
    end = raw.find(b'\x00')
    if end >= 0:
        raw = raw[:end]
    return raw.decode('latin-1')
