"""
bstick - BlinkStick USB RGB LED control

Drives BlinkStick devices (VID 0x20A0, PID 0x41E5) through HID feature
reports: solid colours, indexed LEDs, whole-channel frames, device mode
and the two on-device info blocks, plus blink / morph / pulse animations.

Usage:
    # As a library
    from bstick import find_first, Colour, Animator
    stick = find_first()
    stick.set_colour(Colour(255, 0, 0))
    Animator(stick).pulse(Colour(0, 0, 255))

    # Command line
    bstick list              # List attached devices
    bstick color red         # Set the LED colour
    bstick info              # Show serial, firmware and mode
"""

from bstick.__version__ import __version__

# Core exports
from bstick.colour import (
    BLACK,
    Colour,
    from_hex,
    from_keyword,
    from_rgb,
    random_colour,
)
from bstick.device import BlinkStick, DeviceIdentity
from bstick.animation import AnimationResult, Animator
from bstick.device_detector import find_all, find_by_serial, find_first, open_device
from bstick.errors import (
    BlinkStickError,
    CloseError,
    DeviceNotFound,
    DeviceUnavailable,
    InvalidArgument,
    MalformedReport,
    TransportClosed,
    TransportError,
    TransportExhausted,
    WriteAborted,
)
from bstick.transport import (
    HIDAPI_AVAILABLE,
    FeatureTransport,
    HidApiFeatureTransport,
    PyUsbFeatureTransport,
)

__all__ = [
    # Version
    "__version__",
    # Colours
    "BLACK",
    "Colour",
    "from_hex",
    "from_keyword",
    "from_rgb",
    "random_colour",
    # Devices
    "BlinkStick",
    "DeviceIdentity",
    "find_all",
    "find_by_serial",
    "find_first",
    "open_device",
    # Animation
    "AnimationResult",
    "Animator",
    # Transports
    "FeatureTransport",
    "PyUsbFeatureTransport",
    "HidApiFeatureTransport",
    "HIDAPI_AVAILABLE",
    # Errors
    "BlinkStickError",
    "CloseError",
    "DeviceNotFound",
    "DeviceUnavailable",
    "InvalidArgument",
    "MalformedReport",
    "TransportClosed",
    "TransportError",
    "TransportExhausted",
    "WriteAborted",
]
