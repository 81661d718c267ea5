"""Tests for strokes, history, persistence and frame scheduling."""

import math

import numpy as np
import pytest


def _garden(w=120, h=80, **kwargs):
    from sandgarden import Garden, RakeConfig
    kwargs.setdefault("particles", 0)
    return Garden(w, h, config=RakeConfig(**kwargs), seed=11)


def _stroke(garden, y=40):
    garden.begin_stroke(10, y)
    for x in range(14, 110, 4):
        garden.stroke_to(x, y)
    garden.end_stroke()


# -- strokes ----------------------------------------------------------------

def test_stroke_samples_fill_gaps():
    from sandgarden.rake import stroke_samples
    pts = stroke_samples(0, 0, 30, 0, radius=10, frac=0.3)
    assert pts[0] == (0, 0)
    assert pts[-1] == (30, 0)
    assert len(pts) == 11
    assert stroke_samples(0, 0, 0.5, 0.5, 10, 0.3) == []
    assert stroke_samples(0, 0, float("nan"), 0, 10, 0.3) == []


def test_step_fraction_grows_for_big_rakes():
    from sandgarden.config import RakeConfig
    from sandgarden.rake import step_fraction
    assert step_fraction(RakeConfig(step=0.3, tine_radius=12, tine_count=9)) == 0.3
    assert step_fraction(RakeConfig(step=0.3, tine_radius=20, tine_count=9)) == pytest.approx(0.55)
    assert step_fraction(RakeConfig(step=0.3, tine_radius=20, tine_count=4)) == 0.3


def test_tine_offsets_are_centred():
    from sandgarden.rake import tine_offsets
    assert tine_offsets(1, 2.5, 8) == (0.0,)
    assert tine_offsets(3, 2.0, 5) == (-10.0, 0.0, 10.0)


def test_rotate_snaps_to_notches():
    from sandgarden.rake import ROTATE_STEP, rotate
    assert rotate(0.0, 1) == pytest.approx(ROTATE_STEP)
    assert rotate(0.05, -1) == pytest.approx(-ROTATE_STEP)
    garden = _garden()
    garden.rotate_rake(1)
    garden.rotate_rake(1)
    assert garden.rake_angle == pytest.approx(math.pi / 4)


def test_axis_lock_picks_dominant_axis():
    from sandgarden.rake import AxisLock
    lock = AxisLock(50, 50)
    assert lock.apply(51, 52) == (50, 50)
    assert lock.apply(60, 52) == (60, 50)
    assert lock.apply(70, 90) == (70, 50)


def test_stroke_requires_pointer_down():
    garden = _garden()
    before = garden.grid.height.copy()
    garden.stroke_to(60, 40)
    np.testing.assert_array_equal(garden.grid.height, before)


def test_tiny_moves_are_ignored():
    garden = _garden()
    garden.begin_stroke(60, 40)
    after_down = garden.grid.height.copy()
    garden.stroke_to(60.5, 40.3)
    np.testing.assert_array_equal(garden.grid.height, after_down)


def test_axis_locked_stroke_stays_on_row():
    garden = _garden(tine_count=1, blend=1.0)
    garden.begin_stroke(20, 40)
    garden.stroke_to(100, 70, axis_lock=True)
    heights = garden.grid.view(garden.grid.height)
    # Groove along y=40, nothing carved down at y=70
    assert heights[40, 60] < 0.8
    assert heights[70, 100] > 0.8


# -- history ----------------------------------------------------------------

def test_undo_and_redo_restore_exact_states():
    garden = _garden()
    start = garden.grid.snapshot()
    _stroke(garden)
    raked = garden.grid.snapshot()

    assert garden.undo()
    np.testing.assert_array_equal(garden.grid.height, start.height)
    assert garden.redo()
    np.testing.assert_array_equal(garden.grid.height, raked.height)
    np.testing.assert_array_equal(garden.grid.r, raked.r)


def test_new_stroke_clears_redo():
    garden = _garden()
    _stroke(garden)
    garden.undo()
    assert garden.history.can_redo
    _stroke(garden, y=20)
    assert not garden.history.can_redo
    assert not garden.redo()


def test_undo_depth_is_bounded():
    garden = _garden()
    for _ in range(12):
        garden.begin_stroke(60, 40)
        garden.end_stroke()
    undone = 0
    while garden.undo():
        undone += 1
    assert undone == 10


def test_snapshots_are_independent_of_grid():
    garden = _garden()
    snap = garden.grid.snapshot()
    _stroke(garden)
    assert not np.array_equal(snap.height, garden.grid.height)
    with pytest.raises(ValueError):
        snap.height[0] = 5.0


def test_clear_is_undoable():
    garden = _garden()
    _stroke(garden)
    raked = garden.grid.height.copy()
    assert garden.clear()
    assert not np.array_equal(garden.grid.height, raked)
    garden.undo()
    np.testing.assert_array_equal(garden.grid.height, raked)


# -- persistence ------------------------------------------------------------

def test_record_round_trip():
    garden = _garden()
    _stroke(garden)
    record = garden.export_record()
    assert record["width"] == 120
    assert record["height"] == 80

    other = _garden(w=30, h=30)
    other.load_record(record)
    assert (other.width, other.height) == (120, 80)
    for ours, theirs in (("height", "heightArray"), ("r", "colorRArray"),
                         ("g", "colorGArray"), ("b", "colorBArray")):
        np.testing.assert_array_equal(getattr(other.grid, ours), record[theirs])
    assert not other.history.can_undo


def test_record_accepts_raw_bytes():
    garden = _garden(w=20, h=10)
    record = {k: (v.tobytes() if isinstance(v, np.ndarray) else v)
              for k, v in garden.export_record().items()}
    other = _garden(w=5, h=5)
    other.load_record(record)
    np.testing.assert_array_equal(other.grid.height, garden.grid.height)


def test_loaded_heights_are_clipped_to_raking_range():
    garden = _garden(w=20, h=10)
    record = garden.export_record()
    record["heightArray"][:] = 2.0
    record["heightArray"][:5] = 0.0
    record["colorRArray"][:] = 300.0
    garden.load_record(record)
    assert garden.grid.height.max() == pytest.approx(1.5)
    assert garden.grid.height.min() == pytest.approx(0.1)
    # Colours are kept as stored
    np.testing.assert_array_equal(garden.grid.r, 300.0)


def test_export_is_a_copy():
    garden = _garden()
    record = garden.export_record()
    _stroke(garden)
    assert not np.array_equal(record["heightArray"], garden.grid.height)


@pytest.mark.parametrize("mutate", [
    lambda r: r.update(width=0),
    lambda r: r.update(heightArray=r["heightArray"][:-1]),
    lambda r: r.pop("colorGArray"),
    lambda r: r.update(colorBArray="not numbers"),
])
def test_bad_records_are_rejected(mutate):
    from sandgarden import InvalidRecordError
    garden = _garden(w=20, h=10)
    record = garden.export_record()
    mutate(record)
    other = _garden(w=8, h=8)
    before = other.grid.height.copy()
    with pytest.raises(InvalidRecordError):
        other.load_record(record)
    assert (other.width, other.height) == (8, 8)
    np.testing.assert_array_equal(other.grid.height, before)


def test_resize_reallocates():
    garden = _garden()
    _stroke(garden)
    garden.resize(50, 30)
    assert garden.grid.height.shape == (1500,)
    assert garden.renderer.pixels.shape == (30, 50, 4)
    assert not garden.history.can_undo


# -- frames -----------------------------------------------------------------

def test_frames_coalesce_carves():
    garden = _garden()
    garden.frame(0)
    assert garden.frame(16) is None

    garden.begin_stroke(30, 40)
    garden.stroke_to(40, 40)
    garden.stroke_to(50, 40)
    flush = garden.frame(32)
    assert flush is not None
    x0, y0, x1, y1 = flush.rect
    assert x0 <= 30 - 8 and x1 >= 50 + 8
    assert garden.frame(48) is None


def test_particles_keep_frames_coming_until_they_settle():
    garden = _garden(particles=100)
    garden.frame(0)
    garden.begin_stroke(60, 40)
    garden.stroke_to(80, 40)
    assert garden.particles.active
    garden.frame(16)
    # Nothing new carved, but the scatter still needs repainting
    assert garden.frame(32) is not None
    now = 32.0
    while garden.particles.active and now < 2000:
        now += 16
        garden.frame(now)
    assert not garden.particles.active


def test_intro_plays_and_finishes():
    garden = _garden()
    before = garden.grid.height.copy()
    garden.play_intro()
    now = 0.0
    while garden.intro is not None:
        garden.frame(now)
        now += 16
        assert now < 5000
    assert now >= 1400
    assert not np.array_equal(garden.grid.height, before)
    assert garden.history.can_undo


def test_pointer_down_aborts_intro():
    garden = _garden()
    garden.play_intro()
    garden.frame(0)
    garden.frame(200)
    garden.begin_stroke(60, 40)
    assert garden.intro is None
    assert garden.drawing
    assert len(garden.history.undo_stack) == 2


# -- particles --------------------------------------------------------------

def test_particle_pool_is_bounded_and_swap_removes():
    from sandgarden.carve import CarveResult
    from sandgarden.dirty import DirtyRegionTracker
    from sandgarden.particles import ParticlePool

    pool = ParticlePool(capacity=4, rng=np.random.RandomState(0))
    n = 500
    result = CarveResult(np.arange(n), np.full(n, 0.2), np.full((n, 3), 100.0),
                         direction=(1.0, 0.0))
    for _ in range(10):
        pool.spawn(result, width=50, intensity=100)
    assert pool.count == 4

    tracker = DirtyRegionTracker(50, 50)
    pool.update(10, tracker)
    assert pool.count == 4
    assert not tracker.empty
    pool.update(1000, tracker)
    assert pool.count == 0


def test_particles_skip_tiny_displacements():
    from sandgarden.carve import CarveResult
    from sandgarden.particles import ParticlePool

    pool = ParticlePool()
    result = CarveResult(np.arange(100), np.full(100, 0.001),
                         np.zeros((100, 3)))
    assert pool.spawn(result, width=10, intensity=50) == 0
    assert pool.spawn(CarveResult.empty(), width=10, intensity=50) == 0


# -- config -----------------------------------------------------------------

def test_config_clamps_and_coerces():
    from sandgarden.config import RakeConfig
    cfg = RakeConfig(tine_radius=99, depth=-1, spread=2.7, blend=float("nan"))
    assert cfg.tine_radius == 20
    assert cfg.depth == 0.0
    assert cfg.spread == 2
    assert cfg.blend == 0.01


def test_config_settings_round_trip():
    from sandgarden.config import RakeConfig
    cfg = RakeConfig(tine_count=7, mirror_d=True, light=3.5)
    assert RakeConfig.from_dict(cfg.to_dict()) == cfg


def test_config_tolerates_bad_settings():
    from sandgarden.config import RakeConfig
    cfg = RakeConfig.from_dict({
        "tine_count": "3",
        "depth": "deep",
        "mirror_v": "yes",
        "guide_opacity": 50,
    })
    assert cfg.tine_count == 3
    assert cfg.depth == RakeConfig().depth
    assert cfg.mirror_v is False


def test_config_changes_apply_on_next_carve():
    garden = _garden(tine_count=1, blend=1.0, depth=0.2)
    garden.grid.fill(1.0, (210, 190, 160))
    garden.begin_stroke(30, 40)
    garden.end_stroke()
    garden.config.depth = 0.6
    garden.begin_stroke(90, 40)
    grid = garden.grid
    assert grid.height[grid.index(90, 40)] < grid.height[grid.index(30, 40)]
