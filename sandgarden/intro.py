"""Scripted opening stroke: a single S-curve raked across the garden."""

DURATION_MS = 1400.0


def smoothstep(t):
    return t * t * (3 - 2 * t)


class IntroStroke:
    """Cubic Bezier path sampled against wall-clock milliseconds."""

    def __init__(self, width, height, duration_ms=DURATION_MS):
        self.controls = (
            (width * 0.15, height * 0.20),
            (width * 0.35, height * 0.05),
            (width * 0.65, height * 0.95),
            (width * 0.85, height * 0.80),
        )
        self.duration_ms = duration_ms
        self.start_ms = None

    @property
    def started(self):
        return self.start_ms is not None

    def point(self, t):
        (x0, y0), (x1, y1), (x2, y2), (x3, y3) = self.controls
        u = 1 - t
        a, b, c, d = u * u * u, 3 * u * u * t, 3 * u * t * t, t * t * t
        return (a * x0 + b * x1 + c * x2 + d * x3,
                a * y0 + b * y1 + c * y2 + d * y3)

    def start(self, now_ms):
        self.start_ms = now_ms
        return self.point(0.0)

    def advance(self, now_ms):
        """Position at ``now_ms`` and whether the stroke is finished."""
        raw = min((now_ms - self.start_ms) / self.duration_ms, 1.0)
        return self.point(smoothstep(raw)), raw >= 1.0
