"""Rake geometry and stroke stepping."""

import math
from functools import lru_cache

ROTATE_STEP = math.pi / 8

# Radius above which many-tine rakes step further per carve.
STEP_RADIUS_MID = 12
STEP_RADIUS_MAX = 20
STEP_FRACTION_MAX = 0.55


@lru_cache(maxsize=16)
def tine_offsets(count, gap_mul, radius):
    """Signed distances of each tine from the rake centre."""
    spacing = gap_mul * radius
    return tuple((i - (count - 1) / 2) * spacing for i in range(count))


def rake_perp(angle):
    """Unit vector along the rake bar for a rotation angle."""
    return math.cos(angle), math.sin(angle)


def rotate(angle, direction):
    """Turn the rake one notch; the result is snapped to the notch grid."""
    angle += (1 if direction > 0 else -1) * ROTATE_STEP
    return round(angle / ROTATE_STEP) * ROTATE_STEP


def step_fraction(config):
    """Fraction of the tine radius to advance between carves.

    Large many-tine rakes step further apart to keep up with the pointer.
    """
    frac = config.step
    if config.tine_radius > STEP_RADIUS_MID and config.tine_count > 4:
        t = (config.tine_radius - STEP_RADIUS_MID) / (STEP_RADIUS_MAX - STEP_RADIUS_MID)
        frac = config.step + (STEP_FRACTION_MAX - config.step) * t
    return frac


def stroke_samples(x0, y0, x1, y1, radius, frac):
    """Points from (x0, y0) to (x1, y1) inclusive, spaced to avoid gaps.

    Returns an empty list for moves shorter than one pixel.
    """
    dx = x1 - x0
    dy = y1 - y0
    dist = math.sqrt(dx * dx + dy * dy)
    if not dist >= 1:
        return []
    steps = max(1, int(dist // max(1.0, radius * frac)))
    return [(x0 + dx * i / steps, y0 + dy * i / steps) for i in range(steps + 1)]


class AxisLock:
    """Constrains a stroke to the horizontal or vertical line through its anchor."""

    THRESHOLD = 3

    def __init__(self, x, y):
        self.anchor = (x, y)
        self.axis = None

    def apply(self, x, y):
        ax, ay = self.anchor
        if self.axis is None:
            adx, ady = abs(x - ax), abs(y - ay)
            if adx < self.THRESHOLD and ady < self.THRESHOLD:
                return ax, ay
            self.axis = 'x' if adx >= ady else 'y'
        return (x, ay) if self.axis == 'x' else (ax, y)
