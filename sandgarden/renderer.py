"""Shading of the sand height field into RGBA pixels.

Only the dirty rectangle is recomputed, grown by the normal sampling
distance so that cells whose neighbours changed get relit too.
"""

from collections import namedtuple

import numpy as np
from PIL import Image

from .layers import dig_depth

LIGHT_X = -0.7
LIGHT_Y = -0.7

REVEAL_START = 0.85
REVEAL_COLOR = (232, 213, 183)

Flush = namedtuple("Flush", ["rect", "pixels"])


class Renderer:
    """Owns the RGBA pixel buffer and refreshes it from the grid."""

    def __init__(self, width, height):
        self.pixels = np.zeros((height, width, 4), dtype=np.uint8)
        self.pixels[:, :, 3] = 255

    def render(self, grid, tracker, config, reveal_mask=None, digging=False):
        """Reshade the dirty region and reset the tracker.

        Returns:
            Flush(rect, pixels) where rect is the inclusive region that
            changed, or None when nothing was dirty.
        """
        rect = tracker.padded(config.norm_d + 1)
        tracker.reset()
        if rect is None:
            return None

        x0, y0, x1, y1 = rect
        w, h = grid.width, grid.height_px
        n = config.norm_d
        heights = grid.view(grid.height)

        ys = np.arange(y0, y1 + 1)
        xs = np.arange(x0, x1 + 1)
        region = np.s_[y0:y1 + 1, x0:x1 + 1]
        height = heights[region].astype(np.float64)

        # Central differences; cells closer than n to an edge are lit flat.
        xp = np.clip(xs + n, 0, w - 1)
        xm = np.clip(xs - n, 0, w - 1)
        yp = np.clip(ys + n, 0, h - 1)
        ym = np.clip(ys - n, 0, h - 1)
        dhdx = (heights[np.ix_(ys, xp)] - heights[np.ix_(ys, xm)]) / (2.0 * n)
        dhdy = (heights[np.ix_(yp, xs)] - heights[np.ix_(ym, xs)]) / (2.0 * n)
        interior = (((xs >= n) & (xs < w - n))[None, :]
                    & ((ys >= n) & (ys < h - n))[:, None])
        lighting = np.where(
            interior, 1.0 - (dhdx * LIGHT_X + dhdy * LIGHT_Y) * config.light, 1.0)

        shade = lighting * (0.82 + 0.18 * np.clip(height, 0.0, 2.0))
        noise = grid.view(grid.noise)[region] * shade * config.noise

        rgb = np.stack([grid.view(c)[region] for c in (grid.r, grid.g, grid.b)],
                       axis=-1).astype(np.float64)
        rgb *= shade[:, :, None]

        if digging and reveal_mask is not None:
            depth = dig_depth(height)
            marked = grid.view(reveal_mask)[region]
            qt = np.where(marked & (depth > REVEAL_START),
                          (depth - REVEAL_START) / (1.0 - REVEAL_START), 0.0)
            rgb = (rgb * (1.0 - qt)[:, :, None]
                   + np.multiply.outer(qt, np.asarray(REVEAL_COLOR, dtype=np.float64)))

        rgb += noise[:, :, None]
        self.pixels[y0:y1 + 1, x0:x1 + 1, :3] = np.clip(np.rint(rgb), 0, 255)
        return Flush(rect, self.pixels)

    def to_image(self):
        """Current pixel buffer as a PIL Image in RGBA mode."""
        return Image.fromarray(self.pixels.copy(), 'RGBA')
