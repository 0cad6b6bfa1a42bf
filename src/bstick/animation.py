"""Timed colour animations on top of a BlinkStick session.

Each animation is a plain loop of ``set_colour`` calls separated by
delays.  Nothing survives the call: there is no background thread and no
scheduler.  The session's stop flag is checked at the top of every
iteration; once set, the animation returns ``AnimationResult.CANCELLED``
without touching the device again.  A report already in flight always
finishes first.

Delays are in milliseconds; the injected ``sleep`` takes seconds.
"""

from __future__ import annotations

import logging
import random
import threading
import time
from enum import Enum
from typing import Callable, Optional

from .colour import BLACK, Colour, random_colour
from .conf import Settings
from .device import BlinkStick, check_address
from .errors import InvalidArgument

log = logging.getLogger(__name__)

# pulse() default step count is min(duration_ms, PULSE_MAX_STEPS)
PULSE_MAX_STEPS = 255


class AnimationResult(Enum):
    """How an animation ended (failures raise instead)."""
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def morph_steps(start: Colour, target: Colour, steps: int) -> list[Colour]:
    """Linear ramp from *start* toward *target*, excluding the target.

    Step ``i`` is ``start + (target - start) * i / steps`` per channel,
    truncated toward zero.
    """
    def channel(a: int, b: int, i: int) -> int:
        return int(a + (b - a) * i / steps)

    return [
        Colour(
            channel(start.red, target.red, i),
            channel(start.green, target.green, i),
            channel(start.blue, target.blue, i),
        )
        for i in range(steps)
    ]


class Animator:
    """Runs blink / morph / pulse sequences against one session.

    Args:
        stick: Device session to drive.
        sleep: Delay primitive in seconds (``time.sleep`` by default).
        rng: Source for ``set_random_colour`` (``random`` by default).
        stop_event: Cancellation flag; defaults to ``stick.stop_event``.
        settings: Default morph duration / steps; defaults to the session's.
    """

    def __init__(
        self,
        stick: BlinkStick,
        sleep: Callable[[float], None] = time.sleep,
        rng=random,
        stop_event: Optional[threading.Event] = None,
        settings: Optional[Settings] = None,
    ):
        self.stick = stick
        self._sleep = sleep
        self._rng = rng
        self.stop_event = stop_event if stop_event is not None else stick.stop_event
        self.settings = settings or stick.settings

    # -- Helpers ----------------------------------------------------------

    @property
    def cancelled(self) -> bool:
        return self.stop_event.is_set()

    def _delay(self, ms: int) -> None:
        if ms > 0:
            self._sleep(ms / 1000.0)

    # -- Animations -------------------------------------------------------

    def blink(
        self,
        colour: Colour,
        channel: int = 0,
        index: int = 0,
        repeats: int = 1,
        delay_ms: int = 0,
    ) -> AnimationResult:
        """Flash *colour* on and off *repeats* times.

        Every state (on and off) is held for *delay_ms*.
        """
        if delay_ms < 0:
            raise InvalidArgument(f"delay must be >= 0, got {delay_ms!r}")
        check_address(channel, index)

        for i in range(repeats):
            if self.cancelled:
                log.debug("blink cancelled after %d/%d repeats", i, repeats)
                return AnimationResult.CANCELLED
            self.stick.set_colour(colour, channel, index)
            self._delay(delay_ms)
            self.stick.set_colour(BLACK, channel, index)
            self._delay(delay_ms)
        return AnimationResult.COMPLETED

    def morph(
        self,
        target: Colour,
        channel: int = 0,
        index: int = 0,
        duration_ms: Optional[int] = None,
        steps: Optional[int] = None,
    ) -> AnimationResult:
        """Fade from the current colour toward *target*.

        Writes *steps* colours, ``duration_ms // steps`` apart.  The last
        write is one step short of *target*.

        Raises:
            InvalidArgument: If steps <= 0 or duration is negative,
                or the LED address is out of range.
        """
        duration_ms = self.settings.morph_duration_ms if duration_ms is None else duration_ms
        steps = self.settings.morph_steps if steps is None else steps
        self._check_morph_args(duration_ms, steps, channel, index)

        start = self.stick.get_colour(index)
        step_delay = int(duration_ms / steps)
        log.debug("morph %s -> %s in %d steps of %dms", start, target, steps, step_delay)

        for i, colour in enumerate(morph_steps(start, target, steps)):
            if self.cancelled:
                log.debug("morph cancelled at step %d/%d", i, steps)
                return AnimationResult.CANCELLED
            self.stick.set_colour(colour, channel, index)
            self._delay(step_delay)
        return AnimationResult.COMPLETED

    def pulse(
        self,
        target: Colour,
        channel: int = 0,
        index: int = 0,
        duration_ms: Optional[int] = None,
        steps: Optional[int] = None,
    ) -> AnimationResult:
        """Morph toward *target*; on failure, try to fade back to off.

        The recovery fade uses default duration/steps and its own errors
        are logged and dropped.  The original error is always re-raised.
        """
        duration_ms = self.settings.morph_duration_ms if duration_ms is None else duration_ms
        if steps is None:
            steps = max(1, min(duration_ms, PULSE_MAX_STEPS))
        self._check_morph_args(duration_ms, steps, channel, index)

        try:
            return self.morph(target, channel, index, duration_ms, steps)
        except Exception:
            log.warning("pulse toward %s failed; fading to off", target)
            try:
                self.morph(BLACK, channel, index)
            except Exception as recovery_err:
                log.warning("Recovery fade to off failed: %s", recovery_err)
            raise

    def set_random_colour(self, channel: int = 0, index: int = 0) -> Colour:
        """Show a random colour and return it."""
        colour = random_colour(self._rng)
        self.stick.set_colour(colour, channel, index)
        return colour

    def turn_off(self, channel: int = 0, index: int = 0) -> None:
        self.stick.set_colour(BLACK, channel, index)

    @staticmethod
    def _check_morph_args(duration_ms: int, steps: int, channel: int, index: int) -> None:
        check_address(channel, index)
        if not isinstance(steps, int) or steps <= 0:
            raise InvalidArgument(f"steps must be a positive integer, got {steps!r}")
        if duration_ms < 0:
            raise InvalidArgument(f"duration must be >= 0, got {duration_ms!r}")
