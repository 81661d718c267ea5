"""Depth to colour mapping for dug sand ("geological layers")."""

import numpy as np

SURFACE = 2.0
DEPTH_SPAN = 1.89

# (normalized depth, (r, g, b)) keyframes, linearly interpolated.
SIMPLE_LAYERS = [
    (0.00, (210, 190, 160)),  # sand
    (0.25, (210, 190, 160)),
    (0.50, (190, 100, 50)),   # clay
    (0.75, (80, 55, 40)),     # dark earth
    (1.00, (60, 120, 60)),    # jade bedrock
]

STRATA_LAYERS = [
    (0.0, (210, 190, 160)),   # sand
    (0.2, (185, 105, 60)),    # clay
    (0.4, (110, 80, 55)),     # loam
    (0.6, (200, 195, 175)),   # limestone
    (0.8, (85, 90, 100)),     # slate
    (1.0, (25, 22, 30)),      # obsidian
]

LAYER_TABLES = {"simple": SIMPLE_LAYERS, "strata": STRATA_LAYERS}


def dig_depth(height):
    """Normalized dig depth in [0, 1]: 0 at the surface, 1 at full depth."""
    return np.clip((SURFACE - np.asarray(height, dtype=np.float64)) / DEPTH_SPAN,
                   0.0, 1.0)


def layer_color(height, layers=SIMPLE_LAYERS):
    """Colour of the layer exposed at ``height``.

    Returns an array of shape ``height.shape + (3,)``.
    """
    depth = dig_depth(height)
    stops = np.array([k for k, _ in layers])
    colors = np.array([c for _, c in layers], dtype=np.float64)
    return np.stack([np.interp(depth, stops, colors[:, c]) for c in range(3)],
                    axis=-1)
