"""BlinkStick device session.

One ``BlinkStick`` owns one open ``FeatureTransport`` and holds the
per-device state: identity (read once), capability flags, the inverse
flag, and the stop flag animations watch.  Every colour, mode and
info-block operation goes through ``bstick.report_codec`` for the bytes
and ``bstick.retry.ReportChannel`` for delivery.

Serial number grammar::

    BSnnnnnn-1.0
    ||  |    | |- firmware minor version
    ||  |    |--- firmware major version
    ||  |-------- sequential number
    ||----------- BlinkStick device

Usage:
    from bstick.device import BlinkStick
    from bstick.colour import Colour

    with BlinkStick(transport) as stick:
        stick.set_colour(Colour(255, 0, 0))
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from .colour import Colour
from .conf import Settings, settings as default_settings
from .constants import (
    COLOR_PATCH_MAJOR,
    COLOR_PATCH_MINORS,
    FEATURE_REPORT_SIZE,
    INFO_BLOCK_LOCATIONS,
    MODE_NORMAL,
    REPORT_COLOUR,
    REPORT_MODE,
    STRING_MANUFACTURER,
    STRING_PRODUCT,
    STRING_SERIAL,
    VALID_CHANNELS,
    VALID_MODES,
)
from .errors import (
    BlinkStickError,
    CloseError,
    DeviceUnavailable,
    InvalidArgument,
    TransportError,
)
from .report_codec import (
    decode_colour_report,
    decode_info_block,
    decode_mode_report,
    encode_colour,
    encode_frame,
    encode_info_block,
    encode_mode,
    select_frame_report,
)
from .retry import ReportChannel
from .transport import FeatureTransport

log = logging.getLogger(__name__)


def _version_digit(serial: str, offset_from_end: int) -> Optional[int]:
    pos = len(serial) - offset_from_end
    if pos < 0 or not serial[pos].isdigit():
        return None
    return int(serial[pos])


@dataclass(frozen=True)
class DeviceIdentity:
    """Identity strings read once at session start.

    ``version_major`` / ``version_minor`` come from fixed offsets at the
    end of the serial (``serial[-3]`` and ``serial[-1]``); they are None if
    those characters are not digits.
    """
    serial: str
    manufacturer: str = ""
    product: str = ""
    version_major: Optional[int] = field(init=False)
    version_minor: Optional[int] = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, 'version_major', _version_digit(self.serial, 3))
        object.__setattr__(self, 'version_minor', _version_digit(self.serial, 1))

    @property
    def requires_software_color_patch(self) -> bool:
        """Firmware 1.1 - 1.3 needs the host-side colour patch."""
        return (self.version_major == COLOR_PATCH_MAJOR
                and self.version_minor in COLOR_PATCH_MINORS)


def _check_channel(channel: int) -> None:
    if channel not in VALID_CHANNELS:
        raise InvalidArgument(f"channel must be one of {VALID_CHANNELS}, got {channel!r}")


def _check_index(index: int) -> None:
    if not isinstance(index, int) or index < 0 or index > 255:
        raise InvalidArgument(f"index must be 0-255, got {index!r}")


def check_address(channel: int, index: int) -> None:
    """Raise InvalidArgument unless (channel, index) addresses a real LED."""
    _check_channel(channel)
    _check_index(index)


class BlinkStick:
    """Session for one BlinkStick device.

    Args:
        transport: Already-open feature transport; the session owns it.
        settings: Retry / animation tunables.
        sleep: Delay primitive for write backoff (seconds).
    """

    def __init__(
        self,
        transport: FeatureTransport,
        settings: Optional[Settings] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.transport = transport
        self.settings = settings or default_settings
        self.channel = ReportChannel(transport, self.settings, sleep=sleep or time.sleep)

        self.inverse = False
        self.stop_event = threading.Event()
        self._identity: Optional[DeviceIdentity] = None
        self._requires_patch: Optional[bool] = None

        try:
            identity = self.get_serial()
        except DeviceUnavailable as e:
            log.warning("Could not read BlinkStick identity: %s", e)
        else:
            log.debug("Opened %s (%s %s)", identity.serial,
                      identity.manufacturer, identity.product)

    def __repr__(self) -> str:
        serial = self._identity.serial if self._identity else "?"
        return f"<BlinkStick serial={serial}>"

    # -- Identity ---------------------------------------------------------

    def get_serial(self) -> DeviceIdentity:
        """Read (once) and return the device identity.

        Raises:
            DeviceUnavailable: If the serial descriptor cannot be read.
        """
        if self._identity is not None:
            return self._identity

        try:
            serial = self.transport.get_string(STRING_SERIAL)
        except (TransportError, OSError) as e:
            raise DeviceUnavailable(f"serial number unreadable: {e}") from e
        if not serial:
            raise DeviceUnavailable("device returned an empty serial number")

        identity = DeviceIdentity(
            serial=serial,
            manufacturer=self._read_string(STRING_MANUFACTURER),
            product=self._read_string(STRING_PRODUCT),
        )
        self._identity = identity
        self._requires_patch = identity.requires_software_color_patch
        return identity

    def _read_string(self, index: int) -> str:
        try:
            return self.transport.get_string(index)
        except (TransportError, OSError) as e:
            log.debug("String descriptor %d unreadable: %s", index, e)
            return ""

    @property
    def identity(self) -> Optional[DeviceIdentity]:
        return self._identity

    @property
    def serial(self) -> Optional[str]:
        return self._identity.serial if self._identity else None

    @property
    def version_major(self) -> Optional[int]:
        return self._identity.version_major if self._identity else None

    @property
    def version_minor(self) -> Optional[int]:
        return self._identity.version_minor if self._identity else None

    @property
    def requires_software_color_patch(self) -> Optional[bool]:
        """None until the identity has been read."""
        return self._requires_patch

    def get_manufacturer(self) -> str:
        return self.get_serial().manufacturer

    def get_description(self) -> str:
        return self.get_serial().product

    # -- Inverse flag -----------------------------------------------------

    def set_inverse(self, inverse: bool) -> None:
        """Complement every outgoing colour (IKEA DIODER wiring on v1.0)."""
        self.inverse = bool(inverse)

    def get_inverse(self) -> bool:
        return self.inverse

    def _outgoing(self, colour: Colour) -> Colour:
        return colour.inverted() if self.inverse else colour

    # -- Colour -----------------------------------------------------------

    def get_colour(self, index: int = 0) -> Colour:
        """Current colour as reported by the device.

        The firmware only reports the primary LED, so *index* is accepted
        for symmetry with ``set_colour`` but does not change the query.

        Raises:
            TransportExhausted: If every read attempt failed.
            MalformedReport: If the response is too short to decode.
        """
        _check_index(index)
        buffer = self.channel.receive_report(REPORT_COLOUR, FEATURE_REPORT_SIZE)
        colour = decode_colour_report(buffer)
        return colour.inverted() if self.inverse else colour

    def get_colour_string(self, index: int = 0) -> str:
        return self.get_colour(index).to_hex()

    def set_colour(self, colour: Colour, channel: int = 0, index: int = 0) -> None:
        """Set one LED; the default address uses the short report."""
        check_address(channel, index)
        report = encode_colour(self._outgoing(colour), channel, index)
        log.debug("set_colour %s ch=%d idx=%d -> %s", colour, channel, index,
                  report.data.hex())
        self.channel.send_report(report)

    def set_colours(self, channel: int, frame: Sequence[Colour]) -> None:
        """Overwrite every LED on *channel* with one frame report."""
        _check_channel(channel)
        tier = select_frame_report(len(frame))
        if len(frame) > tier.capacity:
            log.debug("Frame of %d LEDs truncated to %d", len(frame), tier.capacity)
        report = encode_frame(channel, [self._outgoing(c) for c in frame], tier)
        self.channel.send_report(report)

    # -- Mode -------------------------------------------------------------

    def get_mode(self) -> int:
        """Device mode (0 normal, 1 inverse, 2 WS2812).

        A failed read returns 0 instead of raising.
        """
        try:
            buffer = self.channel.receive_report(REPORT_MODE, FEATURE_REPORT_SIZE)
            return decode_mode_report(buffer)
        except BlinkStickError as e:
            log.warning("Mode read failed, assuming mode %d: %s", MODE_NORMAL, e)
            return MODE_NORMAL

    def set_mode(self, mode: int) -> None:
        if mode not in VALID_MODES:
            raise InvalidArgument(f"mode must be one of {VALID_MODES}, got {mode!r}")
        self.channel.send_report(encode_mode(mode))

    # -- Info blocks ------------------------------------------------------

    @staticmethod
    def _info_location(slot: int) -> int:
        location = INFO_BLOCK_LOCATIONS.get(slot)
        if location is None:
            raise InvalidArgument(
                f"info block slot must be one of {tuple(INFO_BLOCK_LOCATIONS)}, got {slot!r}"
            )
        return location

    def get_info_block(self, slot: int) -> str:
        """Read a 32-character label stored on the device."""
        location = self._info_location(slot)
        buffer = self.channel.receive_report(location, FEATURE_REPORT_SIZE)
        return decode_info_block(buffer)

    def set_info_block(self, slot: int, text: str) -> None:
        """Store a label; longer than 32 characters is truncated."""
        location = self._info_location(slot)
        self.channel.send_report(encode_info_block(location, text))

    # -- Stop flag / lifecycle --------------------------------------------

    @property
    def animations_enabled(self) -> bool:
        return not self.stop_event.is_set()

    def stop(self) -> None:
        """Ask running animations to end at their next iteration."""
        self.stop_event.set()

    def resume(self) -> None:
        """Allow animations again after ``stop()``."""
        self.stop_event.clear()

    def close(self) -> None:
        """Stop animations, then release the transport.

        The device keeps whatever colour it last showed.

        Raises:
            CloseError: If the transport release fails (the stop flag is
                set regardless).
        """
        self.stop()
        try:
            self.transport.close()
        except (TransportError, OSError) as e:
            raise CloseError(f"failed to close {self!r}: {e}") from e

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.close()
            return
        # keep the body's error; a failed release is only logged
        try:
            self.close()
        except CloseError as e:
            log.warning("%s", e)
