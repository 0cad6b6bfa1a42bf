"""Retry discipline for feature-report I/O.

Writes and reads fail differently, so they get different policies:

  • Write (``send_report``): colour writes are idempotent, so a failed
    send is retried with exponential backoff and no attempt limit.  The
    loop only gives up when the transport is closed underneath it or the
    owner calls ``abort()``.
  • Read (``receive_report``): the caller is blocked waiting for a value,
    so a failed read is retried immediately a small fixed number of times
    (5 by default).  Only the first failure is kept for the error.

A short transfer counts as a failure on both paths.
"""

import logging
import threading
import time
from typing import Callable, Optional

from .conf import Settings, settings as default_settings
from .errors import TransportClosed, TransportError, TransportExhausted, WriteAborted
from .report_codec import FeatureReport
from .transport import FeatureTransport

log = logging.getLogger(__name__)

# Failures a single attempt may raise; anything else is a programming error
RETRYABLE_ERRORS = (TransportError, OSError, ValueError)


class ReportChannel:
    """Serialises feature reports to one transport with retry.

    Args:
        transport: Open feature transport (exclusively owned).
        settings: Backoff / attempt tunables.
        sleep: Delay primitive, in seconds (injectable for tests).
    """

    def __init__(
        self,
        transport: FeatureTransport,
        settings: Optional[Settings] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.transport = transport
        self.settings = settings or default_settings
        self._sleep = sleep
        self._abort = threading.Event()

    # -- Write path -------------------------------------------------------

    def send_report(self, report: FeatureReport) -> None:
        """Deliver *report*, retrying with exponential backoff until it lands.

        Raises:
            TransportClosed: If the transport is no longer open.
            WriteAborted: If ``abort()`` was called while retrying.
        """
        delay = self.settings.write_backoff_initial_s
        attempt = 0
        while True:
            attempt += 1
            try:
                written = self.transport.send_feature_report(report.report_id, report.data)
                if isinstance(written, int) and written < len(report.data):
                    raise TransportError(
                        f"short write: {written}/{len(report.data)} bytes"
                    )
                if attempt > 1:
                    log.info("Report %d delivered after %d attempts",
                             report.report_id, attempt)
                return
            except RETRYABLE_ERRORS as e:
                if not self.transport.is_open:
                    raise TransportClosed(
                        f"transport closed while sending report {report.report_id}"
                    ) from e
                if self._abort.is_set():
                    raise WriteAborted(
                        f"send of report {report.report_id} aborted after {attempt} attempts"
                    ) from e
                log.warning("Failed to send report %d (attempt %d): %s; retrying in %.3fs",
                            report.report_id, attempt, e, delay)

            self._sleep(delay)
            delay = min(delay * self.settings.write_backoff_factor,
                        self.settings.write_backoff_max_s)

    def abort(self) -> None:
        """Make a pending ``send_report`` give up at its next failure."""
        self._abort.set()

    def reset_abort(self) -> None:
        self._abort.clear()

    # -- Read path --------------------------------------------------------

    def receive_report(self, report_id: int, length: int) -> bytes:
        """Read a feature report of exactly *length* bytes.

        Raises:
            TransportExhausted: After ``settings.read_attempts`` failures,
                carrying the first error observed.
        """
        attempts = self.settings.read_attempts
        first_error: Optional[BaseException] = None

        for attempt in range(1, attempts + 1):
            try:
                data = self.transport.get_feature_report(report_id, length)
                if data is None or len(data) < length:
                    got = 0 if data is None else len(data)
                    raise TransportError(
                        f"short read of report {report_id}: {got}/{length} bytes"
                    )
                return bytes(data)
            except RETRYABLE_ERRORS as e:
                if first_error is None:
                    first_error = e
                log.debug("Read of report %d failed (attempt %d/%d): %s",
                          report_id, attempt, attempts, e)

        log.warning("Read of report %d failed after %d attempts: %s",
                    report_id, attempts, first_error)
        raise TransportExhausted(first_error, attempts)
