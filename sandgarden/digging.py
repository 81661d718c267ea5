"""Digging mode: a deep, one-way excavation layered over the garden.

Entering saves the raked garden and replaces it with a thick slab of
sand; carving then removes material for good, exposing coloured layers
and, near the bottom, the day's quote. Exiting puts the raked garden back
exactly as it was.
"""

import structlog

from .carve import DigCarve, NormalCarve
from .grid import MAX_DIG_HEIGHT, SAND_COLORS
from .layers import LAYER_TABLES
from .reveal import build_reveal_mask, daily_quote, rasterize_text

logger = structlog.get_logger()


class DiggingController:
    """Two-state switch (raking / digging) around a CarveEngine.

    Args:
        grid: GridState to dig in.
        engine: CarveEngine whose mode gets swapped.
        history: UndoHistory, emptied on both transitions.
        tracker: DirtyRegionTracker, fully marked on both transitions.
        rasterizer: callable (text, width, height) -> (height, width) alpha.
        layers: "simple" or "strata" layer colouring.
        quote_source: callable returning the text to hide.
    """

    def __init__(self, grid, engine, history, tracker,
                 rasterizer=rasterize_text, layers="simple",
                 quote_source=daily_quote):
        self.grid = grid
        self.engine = engine
        self.history = history
        self.tracker = tracker
        self.rasterizer = rasterizer
        self.layers = LAYER_TABLES[layers]
        self.quote_source = quote_source

        self.saved = None
        self.reveal_mask = None

    @property
    def active(self):
        return self.saved is not None

    def enter(self):
        if self.active:
            logger.warning("digging_enter_ignored", reason="already digging")
            return False

        self.saved = self.grid.snapshot()
        self.history.clear()

        quote = self.quote_source()
        self.reveal_mask = build_reveal_mask(
            quote, self.grid.width, self.grid.height_px, self.rasterizer)

        self.grid.fill(MAX_DIG_HEIGHT, SAND_COLORS[0])
        self.grid.regenerate_noise()
        self.engine.mode = DigCarve(self.layers)
        self.tracker.mark_all()
        logger.info("digging_entered", quote=quote,
                    reveal_cells=int(self.reveal_mask.sum()))
        return True

    def exit(self):
        if not self.active:
            logger.warning("digging_exit_ignored", reason="not digging")
            return False

        self.grid.restore(self.saved)
        self.saved = None
        self.reveal_mask = None
        self.engine.mode = NormalCarve()
        # Digging edits can't be undone into the restored garden.
        self.history.clear()
        self.tracker.mark_all()
        logger.info("digging_exited")
        return True

    def toggle(self):
        return self.exit() if self.active else self.enter()
