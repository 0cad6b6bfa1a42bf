"""Colour value type and constructors.

Each input kind has its own constructor; nothing guesses the kind at
runtime except ``parse_colour``, which is only meant for command-line
text.

Usage:
    from bstick.colour import Colour, from_hex, from_keyword

    red = Colour(255, 0, 0)
    teal = from_hex("#008080")
    warm = from_keyword("warmwhite")
"""

from __future__ import annotations

import random
import re
from dataclasses import dataclass
from typing import Tuple

from .constants import COLOR_KEYWORDS
from .errors import InvalidArgument

_HEX_RE = re.compile(r'^#?([0-9A-Fa-f]{6})$')


def _clamp(value: int) -> int:
    return max(0, min(255, int(value)))


@dataclass(frozen=True)
class Colour:
    """Immutable RGB colour, each channel clamped to 0-255."""
    red: int = 0
    green: int = 0
    blue: int = 0

    def __post_init__(self):
        object.__setattr__(self, 'red', _clamp(self.red))
        object.__setattr__(self, 'green', _clamp(self.green))
        object.__setattr__(self, 'blue', _clamp(self.blue))

    def inverted(self) -> Colour:
        """Per-channel complement (255 - value)."""
        return Colour(255 - self.red, 255 - self.green, 255 - self.blue)

    def to_hex(self) -> str:
        """Format as ``#rrggbb``."""
        return f"#{self.red:02x}{self.green:02x}{self.blue:02x}"

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.red, self.green, self.blue)

    def __str__(self) -> str:
        return self.to_hex()


BLACK = Colour(0, 0, 0)


def from_rgb(red: int, green: int, blue: int) -> Colour:
    """Build a colour from channel intensities (clamped to 0-255)."""
    return Colour(red, green, blue)


def from_hex(text: str) -> Colour:
    """Parse ``#rrggbb`` (or bare ``rrggbb``).

    Raises:
        InvalidArgument: If the text is not six hex digits.
    """
    m = _HEX_RE.match(text.strip()) if isinstance(text, str) else None
    if m is None:
        raise InvalidArgument(f"not a hex colour: {text!r}")
    digits = m.group(1)
    return Colour(
        int(digits[0:2], 16),
        int(digits[2:4], 16),
        int(digits[4:6], 16),
    )


def from_keyword(name: str) -> Colour:
    """Look up a CSS colour keyword (case-insensitive).

    Raises:
        InvalidArgument: If the keyword is unknown.
    """
    hex_value = COLOR_KEYWORDS.get(name.strip().lower())
    if hex_value is None:
        raise InvalidArgument(f"unknown colour keyword: {name!r}")
    return from_hex(hex_value)


def random_colour(rng=random) -> Colour:
    """Three independent uniform draws in [0, 255]."""
    return Colour(rng.randint(0, 255), rng.randint(0, 255), rng.randint(0, 255))


def parse_colour(text: str, rng=random) -> Colour:
    """Parse command-line colour text.

    Accepted forms: ``random``, ``#rrggbb`` / ``rrggbb``, ``r,g,b`` and
    CSS keywords.
    """
    text = text.strip()
    if text.lower() == 'random':
        return random_colour(rng)
    if ',' in text:
        parts = [p.strip() for p in text.split(',')]
        if len(parts) != 3:
            raise InvalidArgument(f"expected r,g,b: {text!r}")
        try:
            return from_rgb(*(int(p) for p in parts))
        except ValueError:
            raise InvalidArgument(f"expected integer r,g,b: {text!r}") from None
    if _HEX_RE.match(text):
        return from_hex(text)
    return from_keyword(text)
