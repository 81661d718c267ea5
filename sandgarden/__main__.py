"""CLI entry point for Sandgarden."""

import argparse
import logging
import math
from pathlib import Path

import structlog

from . import new_garden

FRAME_MS = 16.0


def configure_logging(level):
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.WARNING)),
    )


def rake_lines(garden, count=3):
    """Rake evenly spaced horizontal passes across the garden."""
    w, h = garden.width, garden.height
    step = max(2.0, garden.config.tine_radius * 0.5)
    for i in range(count):
        y = h * (i + 1) / (count + 1)
        garden.begin_stroke(w * 0.05, y)
        x = w * 0.05
        while x < w * 0.95:
            x += step
            garden.stroke_to(x, y)
        garden.end_stroke()


def dig_spiral(garden, turns=4):
    """Dig a spiral outward from the centre."""
    cx, cy = garden.width / 2, garden.height / 2
    max_r = min(cx, cy) * 0.9
    samples = int(turns * 90)
    garden.begin_stroke(cx, cy)
    for i in range(1, samples + 1):
        t = i / samples
        angle = t * turns * 2 * math.pi
        garden.stroke_to(cx + math.cos(angle) * max_r * t,
                         cy + math.sin(angle) * max_r * t)
    garden.end_stroke()


def main():
    parser = argparse.ArgumentParser(
        description="Rake a sand garden and save it as an image"
    )
    parser.add_argument(
        "--size", "-S", nargs=2, type=int, default=(640, 360),
        metavar=("W", "H"),
        help="Garden size in pixels (default: 640 360)"
    )
    parser.add_argument(
        "--seed", "-s", type=int, default=None,
        help="Random seed for reproducible sand"
    )
    parser.add_argument(
        "--output", "-o", default="garden.png",
        help="Output file path (default: garden.png)"
    )
    parser.add_argument(
        "--tines", type=int, default=None,
        help="Number of rake tines (default: 5)"
    )
    parser.add_argument(
        "--radius", type=int, default=None,
        help="Tine radius in pixels (default: 8)"
    )
    parser.add_argument(
        "--mirror", default="",
        help="Mirror axes to enable, any of 'v', 'h', 'd' (e.g. --mirror vh)"
    )
    parser.add_argument(
        "--lines", type=int, default=3,
        help="Number of straight raked passes (default: 3)"
    )
    parser.add_argument(
        "--no-intro", action="store_true",
        help="Skip the opening S-curve stroke"
    )
    parser.add_argument(
        "--dig", action="store_true",
        help="Switch to digging mode and dig a spiral"
    )
    parser.add_argument(
        "--log-level", default="warning",
        help="Log level (default: warning)"
    )

    args = parser.parse_args()
    configure_logging(args.log_level)

    kwargs = {
        "mirror_v": "v" in args.mirror,
        "mirror_h": "h" in args.mirror,
        "mirror_d": "d" in args.mirror,
    }
    if args.tines is not None:
        kwargs["tine_count"] = args.tines
    if args.radius is not None:
        kwargs["tine_radius"] = args.radius

    width, height = args.size
    garden = new_garden(width, height, seed=args.seed, **kwargs)

    if not args.no_intro:
        garden.play_intro()
        now = 0.0
        while garden.intro is not None:
            garden.frame(now)
            now += FRAME_MS

    if args.dig:
        garden.toggle_digging()
        dig_spiral(garden)
    else:
        rake_lines(garden, args.lines)

    image = garden.to_image()
    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    image.save(str(output))
    print(f"Saved garden ({image.size[0]}x{image.size[1]}) to {output}")


if __name__ == "__main__":
    main()
