"""Radial groove profile for a single rake tine."""

import numpy as np
import structlog

logger = structlog.get_logger()

OUTSIDE = -1.0  # sentinel for offsets beyond the tine radius

CHANNEL_END = 0.6
RIM_PEAK = 0.85


def build_profile(radius, depth, rim):
    """Target height for every offset in a (2r+1) x (2r+1) square.

    The groove falls off with a cubic ease toward the centre, then rises
    to a lip of height ``1 + rim`` at 0.85 r before falling back to 1.0 at
    the edge. Offsets beyond the radius hold OUTSIDE.

    A radius below 1 gives a 1x1 all-OUTSIDE profile, i.e. carving with it
    touches nothing.
    """
    r = int(radius)
    if r < 1:
        return np.full((1, 1), OUTSIDE, dtype=np.float32)

    offsets = np.arange(-r, r + 1, dtype=np.float64)
    dy, dx = np.meshgrid(offsets, offsets, indexing='ij')
    dist2 = dx * dx + dy * dy
    t = np.sqrt(dist2) / r

    # Channel
    u = t / CHANNEL_END
    channel = 1.0 - depth * (1.0 - u * u * u)
    # Rising rim
    u = (t - CHANNEL_END) / (RIM_PEAK - CHANNEL_END)
    rising = 1.0 + u * rim
    # Falling rim
    u = (t - RIM_PEAK) / (1.0 - RIM_PEAK)
    falling = (1.0 + rim) - u * rim

    profile = np.where(t < CHANNEL_END, channel,
                       np.where(t < RIM_PEAK, rising, falling))
    profile[dist2 > r * r] = OUTSIDE
    return profile.astype(np.float32)


class ProfileCache:
    """Holds the profile for the last (radius, depth, rim) it was asked for."""

    def __init__(self):
        self.key = None
        self.profile = None

    def get(self, radius, depth, rim):
        key = (int(radius), float(depth), float(rim))
        if key != self.key:
            self.profile = build_profile(*key)
            self.key = key
            logger.debug("profile_rebuilt", radius=key[0], depth=key[1], rim=key[2])
        return self.profile
