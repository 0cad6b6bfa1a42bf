#!/usr/bin/env python3
"""
bstick - Command Line Interface

Entry point for the bstick package.
"""

import argparse
import logging
import sys

from bstick.__version__ import __version__

log = logging.getLogger(__name__)


def _setup_logging(verbose=0):
    """Configure root logging from -v count."""
    if verbose >= 2:
        logging.basicConfig(level=logging.DEBUG, format='[%(levelname)s] %(name)s: %(message)s')
    elif verbose == 1:
        logging.basicConfig(level=logging.INFO, format='[%(levelname)s] %(message)s')
    else:
        logging.basicConfig(level=logging.WARNING, format='[%(levelname)s] %(message)s')
    # libusb backend chatter
    logging.getLogger('usb').setLevel(logging.WARNING)


def _parse_colour_arg(text):
    from bstick.colour import parse_colour
    return parse_colour(text)


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="bstick",
        description="Control BlinkStick RGB LED devices",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    bstick list                       List attached devices
    bstick info                       Show serial, version and mode
    bstick color red                  Set the LED to red
    bstick color ff8000 --index 3     Set LED 3 on channel 0
    bstick blink blue --repeats 5 --delay 200
    bstick morph "#00ff00" --duration 2000
    bstick pulse random
    bstick infoblock 1 "desk lamp"    Store a name on the device
        """
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v, -vv)"
    )
    parser.add_argument("--serial", "-s", help="Serial number of the device to use")
    parser.add_argument(
        "--backend",
        choices=["pyusb", "hidapi"],
        help="USB backend (default from config, else pyusb)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("list", help="List attached BlinkSticks")
    subparsers.add_parser("info", help="Show device identity, mode and colour")

    def add_address_args(p, with_inverse=True):
        p.add_argument("--channel", "-c", type=int, default=0, help="Channel 0=R, 1=G, 2=B")
        p.add_argument("--index", "-i", type=int, default=0, help="LED index within channel")
        if with_inverse:
            p.add_argument("--inverse", action="store_true", help="Complement colours (IKEA DIODER)")

    color_parser = subparsers.add_parser("color", help="Set a solid colour")
    color_parser.add_argument("colour", help="Keyword, #rrggbb, r,g,b or 'random'")
    add_address_args(color_parser)

    off_parser = subparsers.add_parser("off", help="Turn the LED off")
    add_address_args(off_parser)

    random_parser = subparsers.add_parser("random", help="Set a random colour")
    add_address_args(random_parser)

    blink_parser = subparsers.add_parser("blink", help="Blink a colour")
    blink_parser.add_argument("colour")
    blink_parser.add_argument("--repeats", "-r", type=int, default=1)
    blink_parser.add_argument("--delay", "-d", type=int, default=500, help="Delay per state (ms)")
    add_address_args(blink_parser)

    morph_parser = subparsers.add_parser("morph", help="Fade to a colour")
    morph_parser.add_argument("colour")
    morph_parser.add_argument("--duration", type=int, default=None, help="Duration (ms)")
    morph_parser.add_argument("--steps", type=int, default=None, help="Number of steps")
    add_address_args(morph_parser)

    pulse_parser = subparsers.add_parser("pulse", help="Pulse toward a colour")
    pulse_parser.add_argument("colour")
    pulse_parser.add_argument("--duration", type=int, default=None, help="Duration (ms)")
    pulse_parser.add_argument("--steps", type=int, default=None, help="Number of steps")
    add_address_args(pulse_parser)

    mode_parser = subparsers.add_parser("mode", help="Get or set mode (0 normal, 1 inverse, 2 WS2812)")
    mode_parser.add_argument("mode", nargs="?", type=int, choices=[0, 1, 2])

    info_parser = subparsers.add_parser("infoblock", help="Read or write a 32-character label")
    info_parser.add_argument("slot", type=int, choices=[1, 2])
    info_parser.add_argument("text", nargs="?")

    frame_parser = subparsers.add_parser("frame", help="Set every LED on a channel")
    frame_parser.add_argument("channel", type=int, choices=[0, 1, 2])
    frame_parser.add_argument("colours", nargs="+", help="One colour per LED")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    _setup_logging(args.verbose)

    if args.command == "list":
        return list_devices()

    opts = {'serial': args.serial, 'backend': args.backend}
    if args.command == "info":
        return show_info(**opts)
    elif args.command == "color":
        return set_colour(args.colour, args.channel, args.index, args.inverse, **opts)
    elif args.command == "off":
        return turn_off(args.channel, args.index, args.inverse, **opts)
    elif args.command == "random":
        return set_random(args.channel, args.index, args.inverse, **opts)
    elif args.command == "blink":
        return blink(args.colour, args.repeats, args.delay,
                     args.channel, args.index, args.inverse, **opts)
    elif args.command in ("morph", "pulse"):
        return morph(args.colour, args.duration, args.steps, args.channel, args.index,
                     args.inverse, pulse=args.command == "pulse", **opts)
    elif args.command == "mode":
        return mode(args.mode, **opts)
    elif args.command == "infoblock":
        return info_block(args.slot, args.text, **opts)
    elif args.command == "frame":
        return set_frame(args.channel, args.colours, **opts)

    return 0


def _open(serial=None, backend=None):
    """Open a session, printing a message if no device is attached."""
    from bstick.device_detector import open_device
    from bstick.errors import DeviceNotFound

    try:
        return open_device(serial=serial, backend=backend)
    except DeviceNotFound as e:
        print(f"No BlinkStick found: {e}", file=sys.stderr)
        return None


def _run(action, serial=None, backend=None, inverse=False):
    """Open a session, run *action(stick)*, close.  Returns an exit code."""
    from bstick.errors import BlinkStickError

    stick = _open(serial, backend)
    if stick is None:
        return 1
    stick.set_inverse(inverse)
    try:
        result = action(stick)
        return 0 if result is None else result
    except KeyboardInterrupt:
        stick.stop()
        print("Interrupted")
        return 1
    except BlinkStickError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        try:
            stick.close()
        except BlinkStickError as e:
            log.warning("%s", e)


def list_devices():
    """List attached BlinkSticks."""
    from bstick.device_detector import find_all

    sticks = find_all()
    if not sticks:
        print("No BlinkStick devices found.")
        return 1
    for i, stick in enumerate(sticks, 1):
        ident = stick.identity
        if ident is None:
            print(f"[{i}] <serial unreadable>")
        else:
            print(f"[{i}] {ident.serial}  {ident.manufacturer} {ident.product}".rstrip())
        stick.close()
    return 0


def show_info(serial=None, backend=None):
    """Print identity, firmware version, mode and colour."""
    def action(stick):
        ident = stick.get_serial()
        print(f"Serial:        {ident.serial}")
        print(f"Manufacturer:  {ident.manufacturer}")
        print(f"Product:       {ident.product}")
        print(f"Firmware:      {ident.version_major}.{ident.version_minor}")
        print(f"Colour patch:  {'yes' if stick.requires_software_color_patch else 'no'}")
        print(f"Mode:          {stick.get_mode()}")
        print(f"Colour:        {stick.get_colour_string()}")
        for slot in (1, 2):
            print(f"Info block {slot}:  {stick.get_info_block(slot)}")
    return _run(action, serial, backend)


def set_colour(text, channel=0, index=0, inverse=False, serial=None, backend=None):
    """Set one LED to a colour given as text."""
    def action(stick):
        stick.set_colour(_parse_colour_arg(text), channel, index)
    return _run(action, serial, backend, inverse)


def turn_off(channel=0, index=0, inverse=False, serial=None, backend=None):
    from bstick.animation import Animator
    return _run(lambda stick: Animator(stick).turn_off(channel, index),
                serial, backend, inverse)


def set_random(channel=0, index=0, inverse=False, serial=None, backend=None):
    from bstick.animation import Animator

    def action(stick):
        colour = Animator(stick).set_random_colour(channel, index)
        print(colour.to_hex())
    return _run(action, serial, backend, inverse)


def blink(text, repeats=1, delay=500, channel=0, index=0, inverse=False,
          serial=None, backend=None):
    from bstick.animation import Animator

    def action(stick):
        Animator(stick).blink(_parse_colour_arg(text), channel, index, repeats, delay)
    return _run(action, serial, backend, inverse)


def morph(text, duration=None, steps=None, channel=0, index=0, inverse=False,
          pulse=False, serial=None, backend=None):
    """Morph (or pulse) toward a colour."""
    from bstick.animation import Animator

    def action(stick):
        animator = Animator(stick)
        run = animator.pulse if pulse else animator.morph
        run(_parse_colour_arg(text), channel, index, duration, steps)
    return _run(action, serial, backend, inverse)


def mode(value=None, serial=None, backend=None):
    """Print the mode, or set it when *value* is given."""
    def action(stick):
        if value is None:
            print(stick.get_mode())
        else:
            stick.set_mode(value)
    return _run(action, serial, backend)


def info_block(slot, text=None, serial=None, backend=None):
    """Print an info block, or write it when *text* is given."""
    def action(stick):
        if text is None:
            print(stick.get_info_block(slot))
        else:
            stick.set_info_block(slot, text)
    return _run(action, serial, backend)


def set_frame(channel, colour_texts, serial=None, backend=None):
    """Send one frame with a colour per LED."""
    def action(stick):
        stick.set_colours(channel, [_parse_colour_arg(t) for t in colour_texts])
    return _run(action, serial, backend)


if __name__ == "__main__":
    sys.exit(main())
