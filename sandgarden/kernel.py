"""Gaussian footprint used to redeposit displaced sand."""

from dataclasses import dataclass

import numpy as np
import structlog

logger = structlog.get_logger()


@dataclass(frozen=True)
class Kernel:
    """Integer offsets and weights of a disk-truncated gaussian.

    ``dx``, ``dy`` and ``weights`` are parallel arrays; weights sum to 1.
    """
    radius: int
    dx: np.ndarray
    dy: np.ndarray
    weights: np.ndarray

    def __len__(self):
        return len(self.weights)


def build_kernel(radius):
    """Gaussian with sigma = 0.75 * radius, restricted to the disk of radius."""
    r = max(1, int(radius))
    sigma = r * 0.75
    offsets = np.arange(-r, r + 1)
    sy, sx = np.meshgrid(offsets, offsets, indexing='ij')
    d2 = sx * sx + sy * sy
    inside = d2 <= r * r

    weights = np.exp(-d2[inside] / (2.0 * sigma * sigma))
    weights /= weights.sum()
    return Kernel(radius=r, dx=sx[inside].astype(np.int64),
                  dy=sy[inside].astype(np.int64), weights=weights)


class KernelCache:
    """Rebuilds the deposit kernel only when the spread radius changes."""

    def __init__(self):
        self.kernel = None

    def get(self, radius):
        r = max(1, int(radius))
        if self.kernel is None or self.kernel.radius != r:
            self.kernel = build_kernel(r)
            logger.debug("kernel_rebuilt", radius=r, entries=len(self.kernel))
        return self.kernel
