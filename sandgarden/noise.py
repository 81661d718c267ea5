"""Static grain noise and surface jitter for freshly reset sand."""

import numpy as np


def grain_noise(count, rng=None):
    """Generate the per-cell grain noise added to shaded pixels.

    Fine uniform grain in [-5, 5] with sparse coarse speckles: about 3% of
    cells get an extra offset in [-8, 8].

    Args:
        count: Number of cells (W * H).
        rng: numpy RandomState for reproducibility.

    Returns:
        Flat float32 array of length count.
    """
    if rng is None:
        rng = np.random.RandomState()

    fine = (rng.random_sample(count) - 0.5) * 10
    speckle = rng.random_sample(count) < 0.03
    coarse = (rng.random_sample(count) - 0.5) * 16
    return (fine + np.where(speckle, coarse, 0.0)).astype(np.float32)


def surface_jitter(count, amplitude=0.3, rng=None):
    """Uniform height jitter in [-amplitude/2, amplitude/2] per cell."""
    if rng is None:
        rng = np.random.RandomState()
    return ((rng.random_sample(count) - 0.5) * amplitude).astype(np.float32)
