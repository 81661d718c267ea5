"""Tests for mirror symmetry expansion."""

import numpy as np
import pytest


def _transform(w=100, h=100, **axes):
    from sandgarden.symmetry import SymmetryTransform
    return SymmetryTransform(w, h, **axes)


def test_no_axes_passes_point_through():
    points = _transform().expand(10, 20, 1, 0, 0, 1)
    assert len(points) == 1
    assert tuple(points[0]) == (10, 20, 1, 0, 0, 1)


def test_vertical_mirror_flips_x():
    points = _transform(mirror_v=True).expand(10, 20, 1, 0.5, 0, 1)
    assert len(points) == 2
    p = points[1]
    assert (p.x, p.y) == (89, 20)
    assert (p.dir_x, p.dir_y) == (-1, 0.5)
    assert (p.perp_x, p.perp_y) == (0, 1)


def test_horizontal_mirror_flips_y():
    points = _transform(mirror_h=True).expand(10, 20, 1, 0.5, 1, 0)
    p = points[1]
    assert (p.x, p.y) == (10, 79)
    assert (p.dir_x, p.dir_y) == (1, -0.5)
    assert (p.perp_x, p.perp_y) == (1, 0)


def test_all_axes_give_eight_points():
    points = _transform(mirror_v=True, mirror_h=True, mirror_d=True).expand(
        10, 30, 1, 0, 0, 1)
    assert len(points) == 8
    coords = {(round(p.x, 6), round(p.y, 6)) for p in points}
    assert len(coords) == 8


def test_centre_point_is_deduplicated():
    points = _transform(mirror_v=True, mirror_h=True, mirror_d=True).expand(
        49.5, 49.5, 1, 0, 0, 1)
    assert len(points) == 1


def test_diagonal_on_square_canvas_swaps_axes():
    points = _transform(mirror_d=True).expand(10, 30, 1, 0, 0, 1)
    p = points[1]
    assert p.x == pytest.approx(30)
    assert p.y == pytest.approx(10)
    assert p.dir_x == pytest.approx(0)
    assert p.dir_y == pytest.approx(1)
    assert p.perp_x == pytest.approx(1)
    assert p.perp_y == pytest.approx(0)


def test_diagonal_on_wide_canvas_is_aspect_corrected():
    points = _transform(200, 100, mirror_d=True).expand(150, 25, 2, 0, 0, 1)
    p = points[1]
    assert p.x == pytest.approx(50)
    assert p.y == pytest.approx(75)
    # Direction keeps its magnitude
    assert p.dir_x == pytest.approx(0)
    assert p.dir_y == pytest.approx(2)


def test_diagonal_fixed_point_is_deduplicated():
    # Normalized (-0.5, -0.5) maps onto itself
    points = _transform(200, 100, mirror_d=True).expand(50, 25, 1, 0, 0, 1)
    assert len(points) == 1


def test_zero_direction_survives_diagonal():
    points = _transform(mirror_d=True).expand(10, 30, 0, 0, 0, 1)
    assert (points[1].dir_x, points[1].dir_y) == (0, 0)


@pytest.mark.parametrize("x, y, expected", [
    (80, 50, (1.0, 0.0)),
    (50, 80, (0.0, 1.0)),
    (20, 50, (-1.0, 0.0)),
    (50, 50, (1.0, 0.0)),
])
def test_align_center_uses_radial_axis(x, y, expected):
    points = _transform(align_center=True).expand(x, y, 1, 0, 0, 1)
    assert points[0].perp_x == pytest.approx(expected[0])
    assert points[0].perp_y == pytest.approx(expected[1])


def test_align_center_applies_before_mirroring():
    points = _transform(mirror_v=True, align_center=True).expand(80, 50, 0, 1, 0, 1)
    assert (points[1].perp_x, points[1].perp_y) == pytest.approx((-1.0, 0.0))


def test_mirrored_carves_are_horizontal_flips():
    from sandgarden.carve import CarveEngine
    from sandgarden.config import RakeConfig
    from sandgarden.dirty import DirtyRegionTracker
    from sandgarden.grid import GridState

    def carve(x, y, dx, dy):
        grid = GridState(100, 80, rng=np.random.RandomState(0))
        grid.fill(1.0, (210, 190, 160))
        engine = CarveEngine(grid, RakeConfig(blend=1.0),
                             DirtyRegionTracker(100, 80))
        engine.carve_tine(x, y, 10, dx, dy)
        return grid

    a = carve(30, 40, 1.0, 0.0)
    b = carve(100 - 1 - 30, 40, -1.0, 0.0)
    np.testing.assert_allclose(a.view(a.height)[:, ::-1], b.view(b.height),
                               atol=1e-6)
    np.testing.assert_allclose(a.view(a.r)[:, ::-1], b.view(b.r), atol=1e-3)


def test_garden_mirror_carves_both_sides():
    from sandgarden import new_garden
    garden = new_garden(100, 60, seed=0, mirror_v=True, tine_count=1,
                        blend=1.0, particles=0)
    garden.grid.fill(1.0, (210, 190, 160))
    garden.begin_stroke(20, 30)
    heights = garden.grid.view(garden.grid.height)
    assert np.count_nonzero(heights[:, :50] != 1.0) > 0
    np.testing.assert_allclose(heights, heights[:, ::-1], atol=1e-6)
