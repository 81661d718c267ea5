"""Tine carving: groove removal and redeposit of displaced sand.

A carve is two passes. Pass 1 lowers every cell under the tine toward the
groove profile and records how much sand came out of it. Pass 2 spreads
that sand over three gaussian footprints: one ahead of the stroke and one
to either side. Digging swaps in a strategy that removes harder the
shallower it is and skips pass 2 entirely.
"""

import math
from dataclasses import dataclass

import numpy as np
import structlog

from .grid import MIN_HEIGHT, MAX_HEIGHT, MAX_DIG_HEIGHT
from .kernel import KernelCache
from .layers import SIMPLE_LAYERS, layer_color
from .profile import ProfileCache

logger = structlog.get_logger()

FORWARD_SHARE = 0.70
SIDE_SHARE = 0.15

# Below this in-bounds kernel weight, a boundary deposit is dropped.
MIN_CLIPPED_WEIGHT = 0.001
# Smallest added height that still tints the receiving cell.
MIN_TINT_HEIGHT = 0.0001

# Push direction for stationary carves when the caller gives no axis.
DEFAULT_AXIS = (1.0, 0.0)


@dataclass
class CarveResult:
    """Sand taken out of the grid by one tine.

    ``index``, ``amount`` and ``color`` are parallel: flat cell index, height
    removed from it, and its colour (N x 3) at the time of removal.
    """
    index: np.ndarray
    amount: np.ndarray
    color: np.ndarray
    direction: tuple = (0.0, 0.0)

    def __len__(self):
        return len(self.index)

    @classmethod
    def empty(cls):
        return cls(np.zeros(0, dtype=np.int64), np.zeros(0),
                   np.zeros((0, 3)))


def _push_axis(ndx, ndy, axis):
    """Direction displaced sand is pushed: the stroke, else the unit ``axis``."""
    if ndx != 0.0 or ndy != 0.0:
        return ndx, ndy
    ax, ay = axis
    length = math.hypot(ax, ay)
    if not (math.isfinite(length) and length > 1e-6):
        return DEFAULT_AXIS
    return ax / length, ay / length


def round_half_up(v):
    """Round to the nearest integer, halves toward +inf."""
    return np.floor(np.asarray(v, dtype=np.float64) + 0.5).astype(np.int64)


class NormalCarve:
    """Blend toward the groove profile; removed sand gets redeposited."""

    upper = MAX_HEIGHT
    redistributes = True

    def remove(self, grid, idx, target, blend):
        cur = grid.height[idx].astype(np.float64)
        blended = cur * (1.0 - blend) + target * blend
        new = np.maximum(blended, MIN_HEIGHT)

        # Cells already at or below the groove are left alone.
        moved = cur > new
        idx = idx[moved]
        color = np.stack([grid.r[idx], grid.g[idx], grid.b[idx]],
                         axis=-1).astype(np.float64)
        grid.height[idx] = new[moved]
        amount = cur[moved] - grid.height[idx]
        return idx, amount, color


class DigCarve:
    """Subtractive digging through progressively harder layers."""

    upper = MAX_DIG_HEIGHT
    redistributes = False

    def __init__(self, layers=SIMPLE_LAYERS):
        self.layers = layers

    def remove(self, grid, idx, target, blend):
        # Digging never builds rims.
        channel = target < 1.0
        idx, target = idx[channel], target[channel]

        cur = grid.height[idx].astype(np.float64)
        hardness = 1.0 + 3.0 * np.clip((MAX_DIG_HEIGHT - cur) / 1.9, 0.0, 1.0)
        new = np.maximum(MIN_HEIGHT, cur - (1.0 - target) * blend / hardness)

        color = layer_color(new, self.layers)
        grid.height[idx] = new
        grid.r[idx] = color[:, 0]
        grid.g[idx] = color[:, 1]
        grid.b[idx] = color[:, 2]

        moved = cur > new
        idx = idx[moved]
        return idx, cur[moved] - grid.height[idx], color[moved]


class CarveEngine:
    """Applies tine carves to a grid using the current config and mode.

    The profile and kernel caches are keyed on the config values they
    depend on, so changing depth, rim or spread on ``config`` takes effect
    on the next carve.
    """

    def __init__(self, grid, config, tracker, mode=None):
        self.grid = grid
        self.config = config
        self.tracker = tracker
        self.mode = mode if mode is not None else NormalCarve()
        self.profiles = ProfileCache()
        self.kernels = KernelCache()

    def carve_tine(self, x, y, radius, dir_x, dir_y, axis=DEFAULT_AXIS):
        """Carve one tine centred on (x, y), moving along (dir_x, dir_y).

        A zero-length direction pushes the displaced sand along ``axis``
        instead, so nothing is redeposited onto its own source cells.

        Returns a CarveResult describing the sand removed by pass 1. Its
        ``direction`` is the normalized stroke direction, (0, 0) for a
        stationary carve.
        """
        if not (math.isfinite(x) and math.isfinite(y) and math.isfinite(radius)):
            logger.debug("carve_skipped", reason="non-finite input")
            return CarveResult.empty()
        r = int(math.floor(radius))
        if r < 1:
            return CarveResult.empty()

        cfg = self.config
        grid = self.grid
        profile = self.profiles.get(r, cfg.depth, cfg.rim)
        ix = int(round_half_up(x))
        iy = int(round_half_up(y))

        ndx, ndy = 0.0, 0.0
        if math.isfinite(dir_x) and math.isfinite(dir_y):
            length_sq = dir_x * dir_x + dir_y * dir_y
            if length_sq > 1e-6:
                length = math.sqrt(length_sq)
                ndx, ndy = dir_x / length, dir_y / length

        # Tine footprint clipped to the grid
        x0, x1 = max(0, ix - r), min(grid.width - 1, ix + r)
        y0, y1 = max(0, iy - r), min(grid.height_px - 1, iy + r)
        if x0 > x1 or y0 > y1:
            return CarveResult.empty()

        target = profile[y0 - (iy - r):y1 - (iy - r) + 1,
                         x0 - (ix - r):x1 - (ix - r) + 1].ravel()
        ys, xs = np.mgrid[y0:y1 + 1, x0:x1 + 1]
        idx = grid.index(xs.ravel(), ys.ravel())
        inside = target >= 0
        idx, target = idx[inside], target[inside].astype(np.float64)

        idx, amount, color = self.mode.remove(grid, idx, target, cfg.blend)
        result = CarveResult(idx, amount, color, direction=(ndx, ndy))

        self.tracker.mark(ix, iy, r + 2)

        if self.mode.redistributes and len(result):
            self._redistribute(result, r, _push_axis(ndx, ndy, axis))
        return result

    def _redistribute(self, result, r, push):
        """Deposit the removed sand ahead of and beside each source cell."""
        cfg = self.config
        grid = self.grid
        kernel = self.kernels.get(cfg.spread)
        ndx, ndy = push
        perp_x, perp_y = -ndy, ndx
        fwd = r * cfg.fwd_d
        side = r * cfg.side_d

        src_x = result.index % grid.width
        src_y = result.index // grid.width
        centers = [
            (src_x + ndx * fwd, src_y + ndy * fwd, FORWARD_SHARE),
            (src_x + perp_x * side, src_y + perp_y * side, SIDE_SHARE),
            (src_x - perp_x * side, src_y - perp_y * side, SIDE_SHARE),
        ]

        cells, amounts, sources = [], [], []
        mark_r = kernel.radius + 2
        for cx, cy, share in centers:
            cx = round_half_up(cx)
            cy = round_half_up(cy)
            kx = cx[:, None] + kernel.dx[None, :]
            ky = cy[:, None] + kernel.dy[None, :]
            inside = grid.in_bounds(kx, ky)
            weights = np.where(inside, kernel.weights[None, :], 0.0)

            # Near an edge, renormalize over the in-bounds part of the
            # footprint; if almost nothing is in bounds, drop the deposit.
            clipped = weights.sum(axis=1)
            full = inside.all(axis=1)
            usable = full | (clipped >= MIN_CLIPPED_WEIGHT)
            scale = np.where(full, 1.0,
                             1.0 / np.maximum(clipped, MIN_CLIPPED_WEIGHT))
            per_cell = (result.amount * share * scale)[:, None] * weights

            take = inside & usable[:, None]
            cells.append(grid.index(kx[take], ky[take]))
            amounts.append(per_cell[take])
            sources.append(np.nonzero(take)[0])

            if usable.any():
                # Marking opposite corners covers every centre in between.
                self.tracker.mark(int(cx[usable].min()), int(cy[usable].min()), mark_r)
                self.tracker.mark(int(cx[usable].max()), int(cy[usable].max()), mark_r)

        cells = np.concatenate(cells)
        if cells.size == 0:
            return
        amounts = np.concatenate(amounts)
        sources = np.concatenate(sources)

        receivers, slot = np.unique(cells, return_inverse=True)
        slot = slot.ravel()
        incoming = np.bincount(slot, weights=amounts)
        dest_h = grid.height[receivers].astype(np.float64)
        total_h = np.minimum(dest_h + incoming, self.mode.upper)
        added = total_h - dest_h

        # Clamped cells keep the same share of every contributor's colour.
        kept = np.divide(added, incoming, out=np.zeros_like(added),
                         where=incoming > 0)
        tint = (added > MIN_TINT_HEIGHT) & (total_h > 0.001)
        for channel, arr in enumerate((grid.r, grid.g, grid.b)):
            carried = np.bincount(slot, weights=amounts * result.color[sources, channel])
            old = arr[receivers].astype(np.float64)
            mixed = np.divide(old * dest_h + carried * kept, total_h,
                              out=old.copy(), where=tint)
            arr[receivers] = mixed
        grid.height[receivers] = total_h

    def carve_rake(self, x, y, radius, dir_x, dir_y, perp_x, perp_y, offsets):
        """Carve one tine per offset along the rake axis (perp_x, perp_y).

        A stationary rake pushes its sand along the rake axis.
        """
        results = []
        for offset in offsets:
            results.append(self.carve_tine(x + perp_x * offset,
                                           y + perp_y * offset,
                                           radius, dir_x, dir_y,
                                           axis=(perp_x, perp_y)))
        return results
