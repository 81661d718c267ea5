"""Mirror symmetry: one rake placement in, up to eight out."""

import math
from collections import namedtuple

StrokePoint = namedtuple("StrokePoint",
                         ["x", "y", "dir_x", "dir_y", "perp_x", "perp_y"])

# Candidates closer than this (squared pixels) to a kept point are dropped.
DEDUP_DIST2 = 1.0


def _rescale(vx, vy, orig_x, orig_y):
    """Scale (vx, vy) to the length of (orig_x, orig_y)."""
    length = math.sqrt(vx * vx + vy * vy)
    if length <= 0.0001:
        return vx, vy
    orig = math.sqrt(orig_x * orig_x + orig_y * orig_y)
    return vx / length * orig, vy / length * orig


class SymmetryTransform:
    """Expands a rake placement across the active mirror axes.

    ``mirror_v`` reflects left/right, ``mirror_h`` top/bottom, and
    ``mirror_d`` swaps the axes in canvas-normalized coordinates, which on
    a non-square canvas is not an orthogonal reflection. Each axis is
    applied to every point produced so far.
    """

    def __init__(self, width, height, mirror_v=False, mirror_h=False,
                 mirror_d=False, align_center=False):
        self.width = width
        self.height = height
        self.mirror_v = mirror_v
        self.mirror_h = mirror_h
        self.mirror_d = mirror_d
        self.align_center = align_center

    @classmethod
    def from_config(cls, width, height, config):
        return cls(width, height, config.mirror_v, config.mirror_h,
                   config.mirror_d, config.align_center)

    def perp_at(self, x, y, perp_x, perp_y):
        """Rake axis at (x, y): radial from the centre when aligning."""
        if not self.align_center:
            return perp_x, perp_y
        dx = x - self.width / 2
        dy = y - self.height / 2
        length = math.sqrt(dx * dx + dy * dy)
        if length > 0.001:
            return dx / length, dy / length
        return 1.0, 0.0

    def expand(self, x, y, dir_x, dir_y, perp_x, perp_y):
        perp_x, perp_y = self.perp_at(x, y, perp_x, perp_y)
        points = [StrokePoint(x, y, dir_x, dir_y, perp_x, perp_y)]
        if self.mirror_v:
            points += [self._flip_x(p) for p in points]
        if self.mirror_h:
            points += [self._flip_y(p) for p in points]
        if self.mirror_d:
            points += [self._swap_axes(p) for p in points]
        return _dedup(points)

    def _flip_x(self, p):
        return StrokePoint((self.width - 1) - p.x, p.y,
                           -p.dir_x, p.dir_y, -p.perp_x, p.perp_y)

    def _flip_y(self, p):
        return StrokePoint(p.x, (self.height - 1) - p.y,
                           p.dir_x, -p.dir_y, p.perp_x, -p.perp_y)

    def _swap_axes(self, p):
        hw, hh = self.width / 2, self.height / 2
        nx = (p.x - hw) / hw
        ny = (p.y - hh) / hh
        ar = self.width / self.height
        iar = self.height / self.width

        dir_x, dir_y = _rescale(p.dir_y * ar, p.dir_x * iar, p.dir_x, p.dir_y)
        perp_x, perp_y = _rescale(p.perp_y * ar, p.perp_x * iar,
                                  p.perp_x, p.perp_y)
        return StrokePoint(ny * hw + hw, nx * hh + hh,
                           dir_x, dir_y, perp_x, perp_y)


def _dedup(points):
    kept = [points[0]]
    for p in points[1:]:
        if all((p.x - k.x) ** 2 + (p.y - k.y) ** 2 >= DEDUP_DIST2 for k in kept):
            kept.append(p)
    return kept
