"""Feature report transports for BlinkStick devices.

The ``FeatureTransport`` ABC abstracts the raw HID I/O so that:
  • Tests can inject a mock transport (no real hardware needed).
  • ``PyUsbFeatureTransport`` provides real USB via pyusb (libusb backend),
    using HID class control transfers on endpoint 0.
  • ``HidApiFeatureTransport`` provides an alternative via HIDAPI.

A transport moves exactly one report per call and never retries; the retry
policy lives in ``bstick.retry``.

Linux dependencies:
  • pyusb:  ``pip install pyusb``  (needs libusb1: ``apt install libusb-1.0-0``)
  • hidapi: ``pip install hidapi`` (optional, ``apt install libhidapi-dev``)
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import usb.core
import usb.util

from .constants import (
    BLINKSTICK_PID,
    BLINKSTICK_VID,
    STRING_MANUFACTURER,
    STRING_PRODUCT,
    STRING_SERIAL,
)
from .errors import DeviceNotFound, TransportError

# hidapi is optional ([hid] extra)
try:
    import hid as hidapi
    HIDAPI_AVAILABLE = True
except ImportError:
    HIDAPI_AVAILABLE = False

log = logging.getLogger(__name__)


# =========================================================================
# HID class request constants (HID 1.11, section 7.2)
# =========================================================================

REQTYPE_SET_REPORT = 0x20   # host→device | class | device
REQTYPE_GET_REPORT = 0xA0   # device→host | class | device
HID_GET_REPORT = 0x01
HID_SET_REPORT = 0x09

# Kernel HID driver sits on interface 0
USB_INTERFACE = 0

# Control transfer timeout (ms)
CONTROL_TIMEOUT_MS = 1000


# =========================================================================
# Abstract feature-report transport
# =========================================================================

class FeatureTransport(ABC):
    """Abstract HID feature-report transport, mockable for testing."""

    @abstractmethod
    def open(self) -> None:
        """Open the device.

        Raises:
            DeviceNotFound: If no matching device is attached.
        """

    @abstractmethod
    def close(self) -> None:
        """Release the device handle.

        Raises:
            TransportError: If the release fails.
        """

    @abstractmethod
    def send_feature_report(self, report_id: int, data: bytes) -> int:
        """Send one feature report.  Returns bytes transferred."""

    @abstractmethod
    def get_feature_report(self, report_id: int, length: int) -> bytes:
        """Read one feature report of up to *length* bytes."""

    @abstractmethod
    def get_string(self, index: int) -> str:
        """Read a USB string descriptor by index."""

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """Whether the device is currently open."""

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, *exc):
        self.close()


# =========================================================================
# Real transport: PyUSB  (libusb backend)
# =========================================================================

class PyUsbFeatureTransport(FeatureTransport):
    """Feature reports over USB control transfers via pyusb.

    SET_REPORT / GET_REPORT are issued on endpoint 0 with ``wValue`` set
    to the bare report id, which is what the BlinkStick firmware decodes.

    Requires: ``pip install pyusb`` + ``apt install libusb-1.0-0``
    """

    def __init__(
        self,
        vid: int = BLINKSTICK_VID,
        pid: int = BLINKSTICK_PID,
        serial: Optional[str] = None,
        device: Any = None,
    ):
        self._vid = vid
        self._pid = pid
        self._serial = serial
        self._device = device
        self._is_open = False

    def open(self) -> None:
        """Find the USB device (unless one was handed in) and detach the kernel driver."""
        if self._device is None:
            kwargs: dict[str, Any] = {'idVendor': self._vid, 'idProduct': self._pid}
            if self._serial:
                kwargs['serial_number'] = self._serial
            self._device = usb.core.find(**kwargs)
        if self._device is None:
            raise DeviceNotFound(
                f"USB device not found: VID={self._vid:#06x} PID={self._pid:#06x}"
                + (f" serial={self._serial}" if self._serial else "")
            )

        # Linux binds usbhid to interface 0; control transfers still need it detached
        try:
            if self._device.is_kernel_driver_active(USB_INTERFACE):
                self._device.detach_kernel_driver(USB_INTERFACE)
                log.debug("Detached kernel driver from interface %d", USB_INTERFACE)
        except (usb.core.USBError, NotImplementedError) as e:
            log.debug("Kernel driver detach: %s", e)

        self._is_open = True

    def close(self) -> None:
        """Dispose libusb resources for the device."""
        device, self._device = self._device, None
        self._is_open = False
        if device is None:
            return
        try:
            usb.util.dispose_resources(device)
        except usb.core.USBError as e:
            raise TransportError(f"failed to release USB device: {e}") from e

    def _require_open(self):
        if not self._is_open or self._device is None:
            raise TransportError("Transport not open")
        return self._device

    def send_feature_report(self, report_id: int, data: bytes) -> int:
        device = self._require_open()
        try:
            return device.ctrl_transfer(
                REQTYPE_SET_REPORT, HID_SET_REPORT, report_id, 0, data,
                timeout=CONTROL_TIMEOUT_MS,
            )
        except usb.core.USBError as e:
            raise TransportError(f"SET_REPORT {report_id} failed: {e}") from e

    def get_feature_report(self, report_id: int, length: int) -> bytes:
        device = self._require_open()
        try:
            data = device.ctrl_transfer(
                REQTYPE_GET_REPORT, HID_GET_REPORT, report_id, 0, length,
                timeout=CONTROL_TIMEOUT_MS,
            )
        except usb.core.USBError as e:
            raise TransportError(f"GET_REPORT {report_id} failed: {e}") from e
        return bytes(data)

    def get_string(self, index: int) -> str:
        device = self._require_open()
        try:
            return usb.util.get_string(device, index) or ""
        except (usb.core.USBError, ValueError) as e:
            raise TransportError(f"string descriptor {index} unreadable: {e}") from e

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def device(self) -> Any:
        """Raw pyusb device handle (for diagnostics)."""
        return self._device


# =========================================================================
# Real transport: HIDAPI
# =========================================================================
# Goes through the OS HID driver, so it may work without udev rules or
# root on some distros.

class HidApiFeatureTransport(FeatureTransport):
    """Feature reports via HIDAPI (cython-hidapi ``hid.device``).

    HIDAPI expects the report id in byte 0 of every buffer, so the id
    replaces whatever the codec left in that slot.

    Requires: ``pip install hidapi`` + ``apt install libhidapi-dev``
    """

    _STRING_GETTERS = {
        STRING_MANUFACTURER: 'get_manufacturer_string',
        STRING_PRODUCT: 'get_product_string',
        STRING_SERIAL: 'get_serial_number_string',
    }

    def __init__(
        self,
        vid: int = BLINKSTICK_VID,
        pid: int = BLINKSTICK_PID,
        serial: Optional[str] = None,
    ):
        if not HIDAPI_AVAILABLE:
            raise ImportError(
                "hidapi is not installed. Install with: pip install hidapi\n"
                "Also need libhidapi: apt install libhidapi-dev (Debian/Ubuntu) "
                "or dnf install hidapi-devel (Fedora)"
            )
        self._vid = vid
        self._pid = pid
        self._serial = serial
        self._device = None
        self._is_open = False

    def open(self) -> None:
        device = hidapi.device()
        try:
            device.open(self._vid, self._pid, self._serial)
        except OSError as e:
            raise DeviceNotFound(
                f"HID device not found: VID={self._vid:#06x} PID={self._pid:#06x}: {e}"
            ) from e
        self._device = device
        self._is_open = True

    def close(self) -> None:
        device, self._device = self._device, None
        self._is_open = False
        if device is None:
            return
        try:
            device.close()
        except OSError as e:
            raise TransportError(f"failed to close HID device: {e}") from e

    def _require_open(self):
        if not self._is_open or self._device is None:
            raise TransportError("Transport not open")
        return self._device

    def send_feature_report(self, report_id: int, data: bytes) -> int:
        device = self._require_open()
        report = bytes([report_id]) + bytes(data[1:])
        try:
            written = device.send_feature_report(report)
        except (OSError, ValueError) as e:
            raise TransportError(f"send_feature_report {report_id} failed: {e}") from e
        if written < 0:
            raise TransportError(f"send_feature_report {report_id} returned {written}")
        return written

    def get_feature_report(self, report_id: int, length: int) -> bytes:
        device = self._require_open()
        try:
            data = device.get_feature_report(report_id, length)
        except (OSError, ValueError) as e:
            raise TransportError(f"get_feature_report {report_id} failed: {e}") from e
        return bytes(data) if data else b''

    def get_string(self, index: int) -> str:
        device = self._require_open()
        getter = self._STRING_GETTERS.get(index)
        if getter is None:
            raise TransportError(f"hidapi cannot read string descriptor {index}")
        try:
            return getattr(device, getter)() or ""
        except OSError as e:
            raise TransportError(f"string descriptor {index} unreadable: {e}") from e

    @property
    def is_open(self) -> bool:
        return self._is_open
