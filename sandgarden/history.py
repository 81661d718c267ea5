"""Bounded undo/redo of grid snapshots."""

from collections import deque

MAX_UNDO = 10


class UndoHistory:

    def __init__(self, max_depth=MAX_UNDO):
        self.undo_stack = deque(maxlen=max_depth)
        self.redo_stack = deque(maxlen=max_depth)

    @property
    def can_undo(self):
        return len(self.undo_stack) > 0

    @property
    def can_redo(self):
        return len(self.redo_stack) > 0

    def push(self, snapshot):
        """Record the state before a new edit; any redo history is lost."""
        self.redo_stack.clear()
        self.undo_stack.append(snapshot)

    def undo(self, current):
        """Step back. ``current`` becomes redoable. None if nothing to undo."""
        if not self.undo_stack:
            return None
        self.redo_stack.append(current)
        return self.undo_stack.pop()

    def redo(self, current):
        if not self.redo_stack:
            return None
        self.undo_stack.append(current)
        return self.redo_stack.pop()

    def clear(self):
        self.undo_stack.clear()
        self.redo_stack.clear()
