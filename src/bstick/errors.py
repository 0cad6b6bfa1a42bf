"""Exception hierarchy for bstick.

Every error raised by the library derives from ``BlinkStickError`` so
callers can catch all device problems in one place.

    BlinkStickError
    ├── DeviceNotFound       no matching hardware (not retried)
    ├── DeviceUnavailable    identity could not be read
    ├── TransportError       one failed I/O attempt
    │   ├── TransportExhausted   every read attempt failed
    │   ├── TransportClosed      transport released under a pending write
    │   └── WriteAborted         write retry loop aborted by the owner
    ├── MalformedReport      response has the wrong shape (not retried)
    ├── InvalidArgument      caller value outside the documented domain
    └── CloseError           releasing the transport failed
"""

from typing import Optional


class BlinkStickError(Exception):
    """Base exception for all bstick errors."""


class DeviceNotFound(BlinkStickError):
    """No BlinkStick matched the requested VID/PID/serial."""


class DeviceUnavailable(BlinkStickError):
    """The device identity (serial descriptor) could not be read."""


class TransportError(BlinkStickError):
    """A single feature-report transfer failed."""


class TransportExhausted(TransportError):
    """All read attempts failed.

    Attributes:
        first_error: The first failure observed; later failures are
            usually the same fault repeating.
        attempts: Number of attempts made.
    """

    def __init__(self, first_error: Optional[BaseException], attempts: int = 0):
        self.first_error = first_error
        self.attempts = attempts
        super().__init__(
            f"feature report read failed after {attempts} attempts: {first_error}"
        )


class TransportClosed(TransportError):
    """The transport was closed while a report was still pending."""


class WriteAborted(TransportError):
    """The write retry loop was aborted before the report was delivered."""


class MalformedReport(BlinkStickError):
    """A feature report response does not have the expected layout."""


class InvalidArgument(BlinkStickError, ValueError):
    """A caller-supplied value is outside its documented domain."""


class CloseError(BlinkStickError):
    """Releasing the transport handle failed."""
