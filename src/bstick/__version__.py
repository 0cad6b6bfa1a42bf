"""bstick version information."""

__version__ = "0.3.1"
__version_info__ = tuple(int(x) for x in __version__.split("."))

# Version history:
# 0.1.0 - Initial release: single LED colour, pyusb control transfers
# 0.2.0 - Indexed LEDs, whole-channel frames, mode and info-block reports,
#         hidapi backend, morph/pulse/blink animations
# 0.2.1 - Fix frame tier selection for exactly 8/16/32 LEDs, inverse mode
#         applied to frames and undone on colour read
# 0.3.0 - Retry split: unbounded write backoff, bounded read attempts keeping
#         the first error; read-only config.json + BSTICK_* env overrides
# 0.3.1 - Stop flag checked between animation steps, pulse fades to off on
#         failure, CloseError on failed release
