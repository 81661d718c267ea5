"""Bounding rectangle of cells touched since the last render."""

import math
from collections import namedtuple

# Inclusive cell bounds.
Rect = namedtuple("Rect", ["x0", "y0", "x1", "y1"])


class DirtyRegionTracker:
    """Union-only dirty rectangle, clamped to the grid.

    The rectangle may over-cover what actually changed but never
    under-covers it.
    """

    def __init__(self, width, height):
        self.width = width
        self.height = height
        self.empty = True
        self.x0 = self.y0 = self.x1 = self.y1 = 0

    def mark(self, x, y, radius):
        """Add the square of half-size ``radius`` around (x, y)."""
        if not (math.isfinite(x) and math.isfinite(y)):
            return
        r = math.ceil(radius)
        x0 = max(0, math.floor(x) - r)
        y0 = max(0, math.floor(y) - r)
        x1 = min(self.width - 1, math.ceil(x) + r)
        y1 = min(self.height - 1, math.ceil(y) + r)
        if x0 > x1 or y0 > y1:
            return
        if self.empty:
            self.x0, self.y0, self.x1, self.y1 = x0, y0, x1, y1
            self.empty = False
        else:
            self.x0 = min(self.x0, x0)
            self.y0 = min(self.y0, y0)
            self.x1 = max(self.x1, x1)
            self.y1 = max(self.y1, y1)

    def mark_all(self):
        self.x0, self.y0 = 0, 0
        self.x1, self.y1 = self.width - 1, self.height - 1
        self.empty = False

    def reset(self):
        self.empty = True

    @property
    def rect(self):
        """Current rectangle, or None when nothing is dirty."""
        if self.empty:
            return None
        return Rect(self.x0, self.y0, self.x1, self.y1)

    def padded(self, pad):
        """Current rectangle grown by ``pad`` cells and clamped to the grid."""
        if self.empty:
            return None
        return Rect(max(0, self.x0 - pad), max(0, self.y0 - pad),
                    min(self.width - 1, self.x1 + pad),
                    min(self.height - 1, self.y1 + pad))
