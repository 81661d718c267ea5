"""The raked garden: grid, carving, history, digging and rendering together.

Input arrives as pointer samples in grid coordinates. Every sample is
carved synchronously, in arrival order; rendering happens at most once per
call to :meth:`Garden.frame`, however many carves came in between.
"""

import time

import numpy as np
import structlog

from .carve import CarveEngine
from .config import RakeConfig
from .digging import DiggingController
from .dirty import DirtyRegionTracker
from .grid import GridState
from .history import UndoHistory
from .intro import IntroStroke
from .particles import ParticlePool
from .rake import AxisLock, rake_perp, rotate, step_fraction, stroke_samples, tine_offsets
from .renderer import Renderer
from .reveal import rasterize_text
from .symmetry import SymmetryTransform

logger = structlog.get_logger()

MAX_PARTICLE_DT_MS = 50.0


class Garden:
    """A sand garden of ``width`` x ``height`` cells.

    Args:
        width: Grid width in cells.
        height: Grid height in cells.
        config: RakeConfig (defaults used if None). Edited in place by
            callers; the next carve or frame picks up the new values.
        seed: Random seed for noise, jitter and scatter.
        rasterizer: Text rasterizer for the digging reveal.
        layers: Digging layer colouring, "simple" or "strata".
    """

    def __init__(self, width, height, config=None, seed=None,
                 rasterizer=rasterize_text, layers="simple"):
        self.config = config if config is not None else RakeConfig()
        self.rng = np.random.RandomState(seed)
        self.rasterizer = rasterizer
        self.layers = layers

        self.history = UndoHistory()
        self.particles = ParticlePool(rng=self.rng)
        self.rake_angle = 0.0
        self.render_requested = False

        self.drawing = False
        self.intro = None
        self._last = None
        self._lock = None
        self._last_frame_ms = None

        self._attach(GridState(width, height, rng=self.rng))
        self.grid.reset_flat()

    def _attach(self, grid):
        self.grid = grid
        self.tracker = DirtyRegionTracker(grid.width, grid.height_px)
        self.engine = CarveEngine(grid, self.config, self.tracker)
        self.renderer = Renderer(grid.width, grid.height_px)
        self.digging = DiggingController(grid, self.engine, self.history,
                                         self.tracker, self.rasterizer,
                                         self.layers)
        self.tracker.mark_all()
        self.request_render()

    @property
    def width(self):
        return self.grid.width

    @property
    def height(self):
        return self.grid.height_px

    # -- lifecycle ------------------------------------------------------------

    def resize(self, width, height):
        """Reallocate at a new size with fresh flat sand."""
        if self.digging.active:
            self.digging.exit()
        self.abort_intro()
        self.history.clear()
        self._attach(GridState(width, height, rng=self.rng))
        self.grid.reset_flat()
        logger.info("garden_resized", width=width, height=height)

    def clear(self):
        """Rake the garden smooth. Does nothing while digging."""
        if self.digging.active:
            return False
        self.history.push(self.grid.snapshot())
        self.grid.reset_flat()
        self.tracker.mark_all()
        self.request_render()
        logger.info("garden_cleared")
        return True

    def export_record(self):
        """Saveable record of the raked garden.

        While digging, that is the garden set aside on entry; the dig itself
        is never saved.
        """
        if self.digging.active:
            return self.grid.to_record(self.digging.saved)
        return self.grid.to_record()

    def load_record(self, record):
        """Replace the garden with a saved one.

        Raises:
            InvalidRecordError: if the record is malformed. The current
                garden is left untouched in that case.
        """
        grid = GridState.from_record(record, rng=self.rng)
        if self.digging.active:
            self.digging.exit()
        self.abort_intro()
        self.history.clear()
        self._attach(grid)

    # -- strokes --------------------------------------------------------------

    def begin_stroke(self, x, y):
        """Pointer down: snapshot for undo and carve once in place."""
        self.abort_intro()
        self.history.push(self.grid.snapshot())
        self.drawing = True
        self._last = (x, y)
        self._lock = AxisLock(x, y)
        self.carve_rake_symmetric(x, y, 0.0, 0.0)
        self.request_render()

    def stroke_to(self, x, y, axis_lock=False):
        """Pointer move: carve along the path from the previous sample."""
        if not self.drawing or self._last is None:
            return
        if axis_lock and self._lock is not None:
            x, y = self._lock.apply(x, y)
        lx, ly = self._last
        cfg = self.config
        samples = stroke_samples(lx, ly, x, y, cfg.tine_radius, step_fraction(cfg))
        if not samples:
            return
        dx, dy = x - lx, y - ly
        for cx, cy in samples:
            self.carve_rake_symmetric(cx, cy, dx, dy)
        self._last = (x, y)
        self.request_render()

    def end_stroke(self):
        self.drawing = False
        self._lock = None

    def rotate_rake(self, direction):
        self.rake_angle = rotate(self.rake_angle, direction)

    def carve_rake_symmetric(self, x, y, dir_x, dir_y):
        """Carve the rake at (x, y) and at every mirrored placement."""
        cfg = self.config
        symmetry = SymmetryTransform.from_config(self.width, self.height, cfg)
        perp_x, perp_y = rake_perp(self.rake_angle)
        offsets = tine_offsets(cfg.tine_count, cfg.gap_mul, cfg.tine_radius)
        for p in symmetry.expand(x, y, dir_x, dir_y, perp_x, perp_y):
            results = self.engine.carve_rake(p.x, p.y, cfg.tine_radius,
                                             p.dir_x, p.dir_y,
                                             p.perp_x, p.perp_y, offsets)
            for result in results:
                self.particles.spawn(result, self.width, cfg.particles)

    # -- history --------------------------------------------------------------

    def undo(self):
        snapshot = self.history.undo(self.grid.snapshot())
        if snapshot is None:
            return False
        self._restore(snapshot)
        logger.info("undo", remaining=len(self.history.undo_stack))
        return True

    def redo(self):
        snapshot = self.history.redo(self.grid.snapshot())
        if snapshot is None:
            return False
        self._restore(snapshot)
        logger.info("redo", remaining=len(self.history.redo_stack))
        return True

    def _restore(self, snapshot):
        self.abort_intro()
        self.grid.restore(snapshot)
        self.tracker.mark_all()
        self.request_render()

    # -- digging --------------------------------------------------------------

    def toggle_digging(self):
        if self.intro is not None:
            return False
        changed = self.digging.toggle()
        self.request_render()
        return changed

    # -- intro stroke ---------------------------------------------------------

    def play_intro(self):
        self.intro = IntroStroke(self.width, self.height)

    def abort_intro(self):
        if self.intro is None:
            return
        self.intro = None
        self.drawing = False
        logger.debug("intro_aborted")

    def _advance_intro(self, now_ms):
        if not self.intro.started:
            self.history.push(self.grid.snapshot())
            self._last = self.intro.start(now_ms)
            self._lock = None
            self.drawing = True
        (x, y), finished = self.intro.advance(now_ms)
        self.stroke_to(x, y)
        if finished:
            self.intro = None
            self.drawing = False

    # -- rendering ------------------------------------------------------------

    def request_render(self):
        self.render_requested = True

    def frame(self, now_ms=None):
        """One display refresh: advance animations, then render if needed.

        Returns:
            Flush(rect, pixels) for the blitter, or None when nothing
            needed repainting.
        """
        if now_ms is None:
            now_ms = time.monotonic() * 1000.0
        if self.intro is not None:
            self._advance_intro(now_ms)

        if self.particles.active:
            last = self._last_frame_ms if self._last_frame_ms is not None else now_ms
            dt = min(max(now_ms - last, 0.0), MAX_PARTICLE_DT_MS)
            self.particles.update(dt, self.tracker)
            self.request_render()
        self._last_frame_ms = now_ms

        if not self.render_requested:
            return None
        self.render_requested = False
        return self.renderer.render(self.grid, self.tracker, self.config,
                                    reveal_mask=self.digging.reveal_mask,
                                    digging=self.digging.active)

    def to_image(self):
        """Render everything outstanding and return the garden as RGBA."""
        self.tracker.mark_all()
        self.renderer.render(self.grid, self.tracker, self.config,
                             reveal_mask=self.digging.reveal_mask,
                             digging=self.digging.active)
        return self.renderer.to_image()
