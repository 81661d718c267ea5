"""Rake and rendering configuration."""

import math
from dataclasses import dataclass, asdict, fields

import structlog

logger = structlog.get_logger()


# Legal (min, max) range for each numeric field. Values outside are clamped.
RANGES = {
    "tine_radius": (4, 20),
    "tine_count": (1, 9),
    "gap_mul": (1.0, 5.0),
    "depth": (0.0, 0.9),
    "rim": (0.0, 0.5),
    "light": (0.0, 20.0),
    "blend": (0.01, 1.0),
    "step": (0.05, 1.0),
    "spread": (1, 4),
    "fwd_d": (0.0, 3.0),
    "side_d": (0.0, 3.0),
    "norm_d": (1, 4),
    "noise": (0.0, 2.0),
    "particles": (0, 100),
}

INT_FIELDS = {"tine_radius", "tine_count", "spread", "norm_d", "particles"}


@dataclass
class RakeConfig:
    """Tunable parameters for raking and shading."""

    # Rake geometry
    tine_radius: int = 8
    tine_count: int = 5
    gap_mul: float = 2.5

    # Groove profile
    depth: float = 0.3
    rim: float = 0.1

    # Carving dynamics
    blend: float = 0.35
    step: float = 0.3

    # Displaced sand
    spread: int = 2
    fwd_d: float = 1.2
    side_d: float = 1.1

    # Shading
    light: float = 6.0
    norm_d: int = 2
    noise: float = 0.5

    # Scatter effect
    particles: int = 50

    # Symmetry
    mirror_v: bool = False
    mirror_h: bool = False
    mirror_d: bool = False
    align_center: bool = False

    def __post_init__(self):
        for name, (lo, hi) in RANGES.items():
            value = float(getattr(self, name))
            if not math.isfinite(value):
                value = lo
            value = min(hi, max(lo, value))
            setattr(self, name, int(value) if name in INT_FIELDS else value)
        for name in ("mirror_v", "mirror_h", "mirror_d", "align_center"):
            setattr(self, name, bool(getattr(self, name)))

    def to_dict(self):
        """Settings record suitable for a key/blob store."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        """Build a config from a stored settings record.

        Unknown keys are ignored and malformed values fall back to their
        defaults; both are logged rather than raised.
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            if key not in known:
                logger.warning("settings_unknown_key", key=key)
                continue
            if key in RANGES:
                try:
                    value = float(value)
                except (TypeError, ValueError):
                    value = math.nan
                if not math.isfinite(value):
                    logger.warning("settings_bad_value", key=key)
                    continue
            elif not isinstance(value, bool):
                logger.warning("settings_bad_value", key=key)
                continue
            kwargs[key] = value
        return cls(**kwargs)
