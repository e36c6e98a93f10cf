import numpy as np
import pytest

from shuimo.elements.mountain import Mountain
from shuimo.elements.tree import Tree
from shuimo.render.types import RenderContext
from shuimo.world.chunk import Chunk
from shuimo.world.chunk_manager import ChunkManager
from shuimo.world.landscape import LandscapeGenerator, chunk_rng
from shuimo.world.noise import FBMFastNoise, FBMSimplexNoise, LatticeValueNoise, NoiseConfig, make_noise


# ---------------------------------------------------------------------
# Noise
# ---------------------------------------------------------------------
def test_value_noise_is_deterministic_and_bounded():
    xs = np.linspace(-50, 50, 257)
    a = LatticeValueNoise(42).noise(xs, xs * 0.5)
    b = LatticeValueNoise(42).noise(xs, xs * 0.5)
    np.testing.assert_array_equal(a, b)
    assert a.min() >= 0.0 and a.max() < 1.0


def test_value_noise_depends_on_seed():
    xs = np.linspace(0, 20, 64)
    assert not np.array_equal(LatticeValueNoise(1).noise(xs, xs), LatticeValueNoise(2).noise(xs, xs))


def test_fbm_amplitude_bounds():
    noise = FBMFastNoise(7, NoiseConfig(amplitude=3.0))
    vals = noise.profile(np.linspace(-5000, 5000, 2001))
    assert np.all(np.abs(vals) <= 3.0 + 1e-9)


def test_fbm_value_matches_grid():
    noise = FBMFastNoise(7)
    assert noise.value(123.5, 4.0) == pytest.approx(float(noise.grid(np.array([123.5]), np.array([4.0]))[0]))


def test_simplex_profile_is_deterministic():
    xs = np.array([0.0, 10.0, 250.0])
    np.testing.assert_allclose(FBMSimplexNoise(3).profile(xs), FBMSimplexNoise(3).profile(xs))


def test_make_noise_modes():
    assert isinstance(make_noise(1, mode="fast"), FBMFastNoise)
    assert isinstance(make_noise(1, mode="simplex"), FBMSimplexNoise)
    with pytest.raises(ValueError):
        make_noise(1, mode="perlin")


# ---------------------------------------------------------------------
# Elements
# ---------------------------------------------------------------------
def test_mountain_bounds_cover_ridges():
    m = Mountain("m", 512, 512, 600, 300, FBMFastNoise(1), layers=3)
    b = m.get_bounds()
    assert b.x == 512 and b.width == 512
    assert b.y + b.height == pytest.approx(600)
    for ridge in m.ridges:
        assert ridge[0, 0] == pytest.approx(512)
        assert ridge[-1, 0] == pytest.approx(1024)
        assert np.all(ridge[:, 1] >= b.y - 1e-9)


def test_neighbouring_mountains_share_edge_height():
    noise = FBMFastNoise(11)
    left = Mountain("l", 0, 512, 600, 300, noise, layers=2)
    right = Mountain("r", 512, 512, 600, 300, noise, layers=2)
    for a, b in zip(left.ridges, right.ridges):
        assert a[-1, 1] == pytest.approx(b[0, 1])


def test_mountain_render_draws_each_layer(recording_renderer):
    Mountain("m", 0, 256, 400, 200, FBMFastNoise(1), layers=3).render(RenderContext(recording_renderer))
    names = recording_renderer.names()
    assert names.count("polygon") == 3
    assert names.count("path") == 3


def test_tree_is_reproducible_from_generator_state():
    t1 = Tree("t", 100, 700, 150, np.random.default_rng(5))
    t2 = Tree("t", 100, 700, 150, np.random.default_rng(5))
    assert t1.branches == t2.branches
    assert t1.leaves == t2.leaves
    assert t1.branches[0].start == (100.0, 700.0)
    b = t1.get_bounds()
    assert b.y < 700.0 <= b.y + b.height + 1e-9


def test_tree_clone_is_independent():
    tree = Tree("t", 0, 100, 80, np.random.default_rng(1))
    twin = tree.clone()
    assert twin is not tree
    assert twin.id == tree.id and twin.get_bounds() == tree.get_bounds()
    twin.leaves.clear()
    assert tree.leaves


def test_tree_render_strokes_branches(recording_renderer):
    tree = Tree("t", 0, 100, 80, np.random.default_rng(1), max_depth=2)
    tree.render(RenderContext(recording_renderer))
    names = recording_renderer.names()
    assert names.count("path") == len(tree.branches)
    assert names.count("circle") == len(tree.leaves)


# ---------------------------------------------------------------------
# Landscape generator
# ---------------------------------------------------------------------
def test_chunk_rng_accepts_negative_seeds():
    a = chunk_rng(-3).integers(0, 1 << 30, 4)
    b = chunk_rng(3).integers(0, 1 << 30, 4)
    assert not np.array_equal(a, b)
    np.testing.assert_array_equal(a, chunk_rng(-3).integers(0, 1 << 30, 4))


def test_landscape_is_deterministic_per_chunk():
    gen = LandscapeGenerator(scene_seed=12345, chunk_width=512, viewport_height=800)
    a = gen(1024, 12347)
    b = LandscapeGenerator(scene_seed=12345, chunk_width=512, viewport_height=800)(1024, 12347)
    assert [e.id for e in a] == [e.id for e in b]
    assert [e.get_bounds() for e in a] == [e.get_bounds() for e in b]


def test_landscape_elements_stay_in_chunk_columns():
    gen = LandscapeGenerator(scene_seed=1, chunk_width=512, viewport_height=800)
    for el in gen(-512, -1):
        if isinstance(el, Tree):
            assert -512 <= el.x <= 0
        else:
            assert el.get_bounds().x == -512


def test_landscape_through_manager_sorts_depth():
    gen = LandscapeGenerator(scene_seed=9, chunk_width=256, viewport_height=400)
    manager = ChunkManager(gen, 256, 400, 4, base_seed=9)
    chunk = manager.get_chunk(-3)
    assert isinstance(chunk, Chunk)
    ys = [e.get_bounds().y for e in chunk.elements]
    assert ys == sorted(ys)
    assert sum(isinstance(e, Mountain) for e in chunk.elements) == 2


def test_value_noise_tiles_every_lattice_period():
    noise = LatticeValueNoise(8)
    xs = np.linspace(-300.5, 40.25, 97)
    ys = np.linspace(-12.0, 3.75, 97)
    period = LatticeValueNoise.SIZE
    np.testing.assert_allclose(noise.noise(xs + period, ys), noise.noise(xs, ys))
    np.testing.assert_allclose(noise.noise(xs, ys - period), noise.noise(xs, ys))
