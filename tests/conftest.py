"""Shared fixtures for bstick tests.  No real USB hardware required."""

from unittest.mock import MagicMock

import pytest

from bstick.conf import Settings
from bstick.constants import STRING_MANUFACTURER, STRING_PRODUCT, STRING_SERIAL
from bstick.transport import FeatureTransport

COLOUR_RESPONSE_SIZE = 33


def make_transport(serial="BS000001-1.0", manufacturer="Agile Innovative Ltd",
                   product="BlinkStick") -> MagicMock:
    """MagicMock satisfying the FeatureTransport interface."""
    t = MagicMock(spec=FeatureTransport)
    t.is_open = True
    strings = {
        STRING_SERIAL: serial,
        STRING_MANUFACTURER: manufacturer,
        STRING_PRODUCT: product,
    }
    t.get_string.side_effect = lambda index: strings[index]
    t.send_feature_report.side_effect = lambda report_id, data: len(data)
    return t


def colour_response(r, g, b, report_id=1) -> bytes:
    """33-byte response to a colour query."""
    buf = bytearray(COLOUR_RESPONSE_SIZE)
    buf[0:4] = bytes([report_id, r, g, b])
    return bytes(buf)


def sent_buffers(transport) -> list:
    """Every data buffer handed to send_feature_report, in order."""
    return [bytes(c.args[1]) for c in transport.send_feature_report.call_args_list]


@pytest.fixture
def settings():
    """Default settings, isolated from the user's config and environment."""
    return Settings()


@pytest.fixture
def transport():
    return make_transport()


@pytest.fixture
def sleeps():
    """Recording sleep: list of requested delays (seconds)."""
    return []


@pytest.fixture
def stick(transport, settings, sleeps):
    from bstick.device import BlinkStick
    return BlinkStick(transport, settings, sleep=sleeps.append)
