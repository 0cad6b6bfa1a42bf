"""Mock tests for the pyusb and hidapi feature transports.

No real USB hardware required: usb.core.find / usb.util and the hidapi
module are patched.
"""

from unittest.mock import MagicMock, patch

import pytest
import usb.core

import bstick.transport as transport_mod
from bstick.constants import BLINKSTICK_PID, BLINKSTICK_VID
from bstick.errors import DeviceNotFound, TransportError
from bstick.transport import (
    CONTROL_TIMEOUT_MS,
    HID_GET_REPORT,
    HID_SET_REPORT,
    REQTYPE_GET_REPORT,
    REQTYPE_SET_REPORT,
    HidApiFeatureTransport,
    PyUsbFeatureTransport,
)


def _usb_device(kernel_active=True):
    dev = MagicMock()
    dev.is_kernel_driver_active.return_value = kernel_active
    return dev


# =========================================================================
# PyUSB
# =========================================================================

class TestPyUsbOpen:

    @patch("bstick.transport.usb.core.find")
    def test_finds_by_vid_pid(self, mock_find):
        dev = _usb_device()
        mock_find.return_value = dev
        t = PyUsbFeatureTransport()
        t.open()
        mock_find.assert_called_once_with(idVendor=BLINKSTICK_VID, idProduct=BLINKSTICK_PID)
        dev.detach_kernel_driver.assert_called_once_with(0)
        assert t.is_open
        assert t.device is dev

    @patch("bstick.transport.usb.core.find")
    def test_finds_by_serial(self, mock_find):
        mock_find.return_value = _usb_device(kernel_active=False)
        PyUsbFeatureTransport(serial="BS000001-1.0").open()
        assert mock_find.call_args.kwargs["serial_number"] == "BS000001-1.0"

    @patch("bstick.transport.usb.core.find", return_value=None)
    def test_not_found(self, mock_find):
        t = PyUsbFeatureTransport()
        with pytest.raises(DeviceNotFound):
            t.open()
        assert not t.is_open

    @patch("bstick.transport.usb.core.find")
    def test_given_device_skips_find(self, mock_find):
        dev = _usb_device(kernel_active=False)
        t = PyUsbFeatureTransport(device=dev)
        t.open()
        mock_find.assert_not_called()
        dev.detach_kernel_driver.assert_not_called()

    def test_detach_error_tolerated(self):
        dev = _usb_device()
        dev.detach_kernel_driver.side_effect = usb.core.USBError("busy")
        t = PyUsbFeatureTransport(device=dev)
        t.open()
        assert t.is_open


class TestPyUsbIO:

    @pytest.fixture
    def opened(self):
        dev = _usb_device(kernel_active=False)
        t = PyUsbFeatureTransport(device=dev)
        t.open()
        return t, dev

    def test_send_control_transfer(self, opened):
        t, dev = opened
        dev.ctrl_transfer.return_value = 4
        assert t.send_feature_report(1, b"\x01\xff\x00\x00") == 4
        dev.ctrl_transfer.assert_called_once_with(
            REQTYPE_SET_REPORT, HID_SET_REPORT, 1, 0, b"\x01\xff\x00\x00",
            timeout=CONTROL_TIMEOUT_MS,
        )

    def test_get_control_transfer(self, opened):
        t, dev = opened
        dev.ctrl_transfer.return_value = bytearray([1, 2, 3, 4])
        assert t.get_feature_report(1, 33) == b"\x01\x02\x03\x04"
        dev.ctrl_transfer.assert_called_once_with(
            REQTYPE_GET_REPORT, HID_GET_REPORT, 1, 0, 33,
            timeout=CONTROL_TIMEOUT_MS,
        )

    def test_usb_error_wrapped(self, opened):
        t, dev = opened
        dev.ctrl_transfer.side_effect = usb.core.USBError("pipe")
        with pytest.raises(TransportError):
            t.send_feature_report(1, b"\x01")
        with pytest.raises(TransportError):
            t.get_feature_report(1, 33)

    @patch("bstick.transport.usb.util.get_string", return_value="BS000001-1.0")
    def test_get_string(self, mock_get_string, opened):
        t, dev = opened
        assert t.get_string(3) == "BS000001-1.0"
        mock_get_string.assert_called_once_with(dev, 3)

    @patch("bstick.transport.usb.util.get_string", side_effect=ValueError("langid"))
    def test_get_string_error(self, mock_get_string, opened):
        t, _ = opened
        with pytest.raises(TransportError):
            t.get_string(3)

    def test_not_open(self):
        t = PyUsbFeatureTransport(device=_usb_device())
        with pytest.raises(TransportError):
            t.send_feature_report(1, b"\x01")

    @patch("bstick.transport.usb.util.dispose_resources")
    def test_close(self, mock_dispose, opened):
        t, dev = opened
        t.close()
        mock_dispose.assert_called_once_with(dev)
        assert not t.is_open
        t.close()
        mock_dispose.assert_called_once()

    @patch("bstick.transport.usb.util.dispose_resources", side_effect=usb.core.USBError("x"))
    def test_close_error(self, mock_dispose, opened):
        t, _ = opened
        with pytest.raises(TransportError):
            t.close()
        assert not t.is_open

    @patch("bstick.transport.usb.util.dispose_resources")
    def test_context_manager(self, mock_dispose):
        dev = _usb_device(kernel_active=False)
        with PyUsbFeatureTransport(device=dev) as t:
            assert t.is_open
        assert not t.is_open


# =========================================================================
# HIDAPI
# =========================================================================

@pytest.fixture
def hid_handle():
    """Patch the hidapi module with a fake whose device() returns a mock."""
    handle = MagicMock()
    fake_hid = MagicMock()
    fake_hid.device.return_value = handle
    with patch.object(transport_mod, "HIDAPI_AVAILABLE", True), \
            patch.object(transport_mod, "hidapi", fake_hid, create=True):
        yield handle


class TestHidApi:

    def test_unavailable(self):
        with patch.object(transport_mod, "HIDAPI_AVAILABLE", False):
            with pytest.raises(ImportError):
                HidApiFeatureTransport()

    def test_open(self, hid_handle):
        t = HidApiFeatureTransport(serial="BS1")
        t.open()
        hid_handle.open.assert_called_once_with(BLINKSTICK_VID, BLINKSTICK_PID, "BS1")
        assert t.is_open

    def test_open_not_found(self, hid_handle):
        hid_handle.open.side_effect = OSError("open failed")
        t = HidApiFeatureTransport()
        with pytest.raises(DeviceNotFound):
            t.open()
        assert not t.is_open

    def test_send_replaces_byte_zero(self, hid_handle):
        hid_handle.send_feature_report.return_value = 33
        t = HidApiFeatureTransport()
        t.open()
        t.send_feature_report(2, bytes([0]) + b"abc")
        hid_handle.send_feature_report.assert_called_once_with(bytes([2]) + b"abc")

    def test_send_negative_is_error(self, hid_handle):
        hid_handle.send_feature_report.return_value = -1
        t = HidApiFeatureTransport()
        t.open()
        with pytest.raises(TransportError):
            t.send_feature_report(1, b"\x01\x00\x00\x00")

    def test_get(self, hid_handle):
        hid_handle.get_feature_report.return_value = [1, 2, 3, 4]
        t = HidApiFeatureTransport()
        t.open()
        assert t.get_feature_report(1, 33) == b"\x01\x02\x03\x04"
        hid_handle.get_feature_report.assert_called_once_with(1, 33)

    def test_get_error(self, hid_handle):
        hid_handle.get_feature_report.side_effect = OSError("read error")
        t = HidApiFeatureTransport()
        t.open()
        with pytest.raises(TransportError):
            t.get_feature_report(1, 33)

    def test_strings(self, hid_handle):
        hid_handle.get_manufacturer_string.return_value = "Agile Innovative Ltd"
        hid_handle.get_product_string.return_value = "BlinkStick"
        hid_handle.get_serial_number_string.return_value = "BS000001-1.0"
        t = HidApiFeatureTransport()
        t.open()
        assert t.get_string(1) == "Agile Innovative Ltd"
        assert t.get_string(2) == "BlinkStick"
        assert t.get_string(3) == "BS000001-1.0"
        with pytest.raises(TransportError):
            t.get_string(4)

    def test_close(self, hid_handle):
        t = HidApiFeatureTransport()
        t.open()
        t.close()
        hid_handle.close.assert_called_once()
        assert not t.is_open
