"""Per-cell sand state: height, colour and static grain noise.

All per-cell arrays are flat and addressed as ``index = y * width + x``.
:meth:`GridState.index` is the only place that conversion is written down;
everything that needs a 2D picture goes through :meth:`GridState.view`.
"""

from dataclasses import dataclass

import numpy as np
import structlog

from .noise import grain_noise, surface_jitter

logger = structlog.get_logger()

MIN_HEIGHT = 0.1
MAX_HEIGHT = 1.5        # raking
MAX_DIG_HEIGHT = 2.0    # digging

SAND_COLORS = [
    (210, 190, 160),  # cream (default)
    (185, 110, 70),   # terracotta
    (100, 75, 55),    # dark brown
    (160, 160, 155),  # grey
]

RECORD_ARRAYS = ("heightArray", "colorRArray", "colorGArray", "colorBArray")


class InvalidRecordError(ValueError):
    """A saved garden record is malformed and cannot be loaded."""


@dataclass(frozen=True)
class Snapshot:
    """Read-only copy of height and colour at one instant."""
    height: np.ndarray
    r: np.ndarray
    g: np.ndarray
    b: np.ndarray

    @classmethod
    def capture(cls, grid):
        arrays = []
        for arr in (grid.height, grid.r, grid.g, grid.b):
            copy = arr.copy()
            copy.flags.writeable = False
            arrays.append(copy)
        return cls(*arrays)


class GridState:
    """Dense W x H sand grid."""

    def __init__(self, width, height, rng=None):
        if width <= 0 or height <= 0:
            raise ValueError(f"grid dimensions must be positive: {width}x{height}")
        self.width = int(width)
        self.height_px = int(height)
        self.rng = rng if rng is not None else np.random.RandomState()

        n = self.width * self.height_px
        self.height = np.ones(n, dtype=np.float32)
        self.r = np.zeros(n, dtype=np.float32)
        self.g = np.zeros(n, dtype=np.float32)
        self.b = np.zeros(n, dtype=np.float32)
        self.noise = np.zeros(n, dtype=np.float32)

    @property
    def size(self):
        return self.width * self.height_px

    @property
    def shape(self):
        """(rows, cols) for 2D views."""
        return (self.height_px, self.width)

    def index(self, x, y):
        """Flat index of cell (x, y). Works on scalars and integer arrays."""
        return y * self.width + x

    def in_bounds(self, x, y):
        return (x >= 0) & (x < self.width) & (y >= 0) & (y < self.height_px)

    def view(self, arr):
        """2D (rows, cols) view of one of the flat per-cell arrays."""
        return arr.reshape(self.shape)

    # -- whole-grid writes --------------------------------------------------

    def fill(self, height, color):
        self.height.fill(height)
        self.r.fill(color[0])
        self.g.fill(color[1])
        self.b.fill(color[2])

    def reset_flat(self, color=SAND_COLORS[0], jitter=0.3):
        """Flat sand at height 1.0 with a little random unevenness."""
        self.fill(1.0, color)
        if jitter > 0:
            self.height += surface_jitter(self.size, jitter, rng=self.rng)
            np.clip(self.height, MIN_HEIGHT, MAX_HEIGHT, out=self.height)
        self.regenerate_noise()

    def regenerate_noise(self):
        self.noise[:] = grain_noise(self.size, rng=self.rng)

    def restore(self, snapshot):
        self.height[:] = snapshot.height
        self.r[:] = snapshot.r
        self.g[:] = snapshot.g
        self.b[:] = snapshot.b

    def snapshot(self):
        return Snapshot.capture(self)

    # -- persistence boundary -----------------------------------------------

    def to_record(self, snapshot=None):
        """Plain record for a key/blob store. Arrays are copied, not shared.

        With ``snapshot``, the record holds that snapshot's cells instead of
        the live ones.
        """
        source = snapshot if snapshot is not None else self
        return {
            "width": self.width,
            "height": self.height_px,
            "heightArray": np.array(source.height, dtype=np.float32),
            "colorRArray": np.array(source.r, dtype=np.float32),
            "colorGArray": np.array(source.g, dtype=np.float32),
            "colorBArray": np.array(source.b, dtype=np.float32),
        }

    @classmethod
    def from_record(cls, record, rng=None):
        """Rebuild a grid from a saved record.

        Array entries may be float32 numpy arrays, sequences of numbers, or
        raw float32 bytes. Heights are clipped to the raking range; colours
        are kept as stored. Noise is regenerated; it is never stored.

        Raises:
            InvalidRecordError: if dimensions or array lengths don't agree.
        """
        try:
            width = int(record["width"])
            height = int(record["height"])
            arrays = [_as_float32(record[key]) for key in RECORD_ARRAYS]
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidRecordError(f"malformed garden record: {exc}") from exc

        if width <= 0 or height <= 0:
            raise InvalidRecordError(f"bad garden size {width}x{height}")
        for key, arr in zip(RECORD_ARRAYS, arrays):
            if arr.size != width * height:
                raise InvalidRecordError(
                    f"{key} has {arr.size} cells, expected {width * height}")

        grid = cls(width, height, rng=rng)
        grid.height[:], grid.r[:], grid.g[:], grid.b[:] = arrays
        np.clip(grid.height, MIN_HEIGHT, MAX_HEIGHT, out=grid.height)
        grid.regenerate_noise()
        logger.info("grid_loaded", width=width, height=height)
        return grid


def _as_float32(data):
    if isinstance(data, (bytes, bytearray, memoryview)):
        return np.frombuffer(data, dtype=np.float32)
    return np.asarray(data, dtype=np.float32).ravel()
