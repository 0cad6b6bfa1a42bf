"""Find attached BlinkStick devices.

Enumeration sits outside the device session: it matches VID/PID (plus an
optional predicate), opens a transport per match, and hands each one to an
independent ``BlinkStick`` session.

Usage:
    from bstick.device_detector import find_first, find_by_serial

    stick = find_first()
    stick = find_by_serial("BS000001-1.0")
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

import usb.core
import usb.util

from .conf import Settings, settings as default_settings
from .constants import BLINKSTICK_PID, BLINKSTICK_VID, STRING_SERIAL
from .device import BlinkStick
from .errors import BlinkStickError, DeviceNotFound
from .transport import (
    HIDAPI_AVAILABLE,
    FeatureTransport,
    HidApiFeatureTransport,
    PyUsbFeatureTransport,
)

log = logging.getLogger(__name__)

DevicePredicate = Callable[[Any], bool]


def _usb_serial(dev: Any) -> str:
    """Serial string of a raw pyusb device, or '' if unreadable."""
    try:
        serial_idx = getattr(dev, 'iSerialNumber', 0) or STRING_SERIAL
        return usb.util.get_string(dev, serial_idx) or ""
    except (usb.core.USBError, ValueError) as e:
        log.debug("Serial read failed during enumeration: %s", e)
        return ""


def find_transports(predicate: Optional[DevicePredicate] = None) -> List[PyUsbFeatureTransport]:
    """Open a pyusb transport for every attached BlinkStick.

    Args:
        predicate: Optional filter on the raw pyusb device.
    """
    transports = []
    found = usb.core.find(find_all=True, idVendor=BLINKSTICK_VID, idProduct=BLINKSTICK_PID)
    for dev in found or []:
        if predicate is not None and not predicate(dev):
            continue
        transport = PyUsbFeatureTransport(device=dev)
        try:
            transport.open()
        except BlinkStickError as e:
            log.warning("Skipping BlinkStick on bus %s: %s", getattr(dev, 'bus', '?'), e)
            continue
        transports.append(transport)
    return transports


def find_all(
    predicate: Optional[DevicePredicate] = None,
    settings: Optional[Settings] = None,
) -> List[BlinkStick]:
    """Sessions for all attached BlinkSticks (empty list if none)."""
    return [BlinkStick(t, settings) for t in find_transports(predicate)]


def find_first(settings: Optional[Settings] = None) -> Optional[BlinkStick]:
    """Session for the first attached BlinkStick, or None."""
    transports = find_transports()
    if not transports:
        return None
    for extra in transports[1:]:
        extra.close()
    return BlinkStick(transports[0], settings)


def find_by_serial(serial: str, settings: Optional[Settings] = None) -> Optional[BlinkStick]:
    """Session for the BlinkStick with *serial*, or None."""
    transports = find_transports(lambda dev: _usb_serial(dev) == serial)
    if not transports:
        return None
    for extra in transports[1:]:
        extra.close()
    return BlinkStick(transports[0], settings)


def find_all_serials() -> List[str]:
    """Serial numbers of all attached BlinkSticks."""
    found = usb.core.find(find_all=True, idVendor=BLINKSTICK_VID, idProduct=BLINKSTICK_PID)
    return [_usb_serial(dev) for dev in found or []]


def open_transport(serial: Optional[str] = None, backend: Optional[str] = None) -> FeatureTransport:
    """Open one transport on the configured backend.

    Raises:
        DeviceNotFound: If nothing matches.
    """
    backend = backend or default_settings.backend
    if backend == 'hidapi':
        if not HIDAPI_AVAILABLE:
            raise DeviceNotFound("hidapi backend requested but hidapi is not installed")
        transport: FeatureTransport = HidApiFeatureTransport(serial=serial)
    else:
        transport = PyUsbFeatureTransport(serial=serial)
    transport.open()
    return transport


def open_device(
    serial: Optional[str] = None,
    backend: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> BlinkStick:
    """Open a session on the first (or the named) BlinkStick.

    Raises:
        DeviceNotFound: If nothing matches.
    """
    return BlinkStick(open_transport(serial, backend), settings)
