"""Sandgarden - rake patterns into a shaded sand height field."""

from .config import RakeConfig
from .garden import Garden
from .grid import GridState, InvalidRecordError

__version__ = "0.1.0"
__all__ = ["new_garden", "Garden", "GridState", "RakeConfig",
           "InvalidRecordError"]


def new_garden(width, height, seed=None, **kwargs):
    """Create a garden of freshly smoothed sand.

    Args:
        width: Garden width in cells (pixels).
        height: Garden height in cells (pixels).
        seed: Random seed for reproducible grain and surface jitter.
        **kwargs: RakeConfig parameters (tine_radius, tine_count, depth,
            rim, mirror_v, etc.).

    Returns:
        Garden ready to take strokes.
    """
    return Garden(width, height, config=RakeConfig(**kwargs), seed=seed)
