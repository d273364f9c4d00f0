# tests/test_noise.py
import numpy as np
import pytest

from gridgen import NoiseEngine
from gridgen.noise import FIXED_PERMUTATION, build_tables, clamp_scale, normalize, resolve_kernel

OFFSETS = [(0.25, 0.5), (1.5, 2.25), (10.1, -3.3)]


@pytest.fixture(scope="module")
def engine():
    return NoiseEngine.from_seed("perlin")


def test_tables(engine):
    assert FIXED_PERMUTATION.shape == (512,)
    assert sorted(FIXED_PERMUTATION[:256]) == list(range(256))
    np.testing.assert_array_equal(FIXED_PERMUTATION[:256], FIXED_PERMUTATION[256:])

    perm = engine.permutation
    assert sorted(perm[:256]) == list(range(256))
    np.testing.assert_array_equal(perm[:256], perm[256:])

    lengths = np.hypot(engine.gradient_x[:256], engine.gradient_y[:256])
    assert np.all((np.abs(lengths - 1.0) < 1e-9) | (lengths == 0.0))
    np.testing.assert_array_equal(engine.gradients[:256], engine.gradients[256:])


def test_tables_are_read_only(engine):
    with pytest.raises(ValueError):
        engine.permutation[0] = 1
    with pytest.raises(ValueError):
        FIXED_PERMUTATION[0] = 1


def test_same_seed_same_tables():
    a_perm, a_grad = build_tables(np.random.default_rng(9))
    b_perm, b_grad = build_tables(np.random.default_rng(9))
    np.testing.assert_array_equal(a_perm, b_perm)
    np.testing.assert_array_equal(a_grad, b_grad)

    a = NoiseEngine.from_seed("x")
    b = NoiseEngine.from_seed("y")
    assert not np.array_equal(a.permutation, b.permutation)


def test_known_values(engine):
    # reference permutation, fixed gradients: independent of the seed
    assert engine.noise2d(2.5, 3.5, "quintic") == pytest.approx(0.375)
    assert engine.noise2d(0.3, 0.7, "quintic") == pytest.approx(0.3564732975, abs=1e-9)
    assert engine.noise2d(-1.25, 0.75, "cubic") == pytest.approx(0.6475830078, abs=1e-9)


def test_octave_regression():
    engine = NoiseEngine.from_seed("regression")
    quintic = engine.noise_with_octaves(0.3, 0.7, 3, 2.0, 0.5, OFFSETS, "quintic")
    cubic = engine.noise_with_octaves(0.3, 0.7, 3, 2.0, 0.5, OFFSETS, "cubic")
    assert quintic == pytest.approx(-0.0717059737, abs=1e-5)
    assert cubic == pytest.approx(-0.0212055000, abs=1e-5)


@pytest.mark.parametrize("fixed", [True, False])
@pytest.mark.parametrize("kernel", ["cubic", "quintic"])
def test_lattice_points_are_half(engine, fixed, kernel):
    for x, y in [(0, 0), (3, 7), (-4, 12), (255, 256), (1000, -1000)]:
        assert engine.noise2d(x, y, kernel, fixed) == 0.5


@pytest.mark.parametrize("fixed", [True, False])
def test_range(engine, fixed):
    rng = np.random.default_rng(2)
    for x, y in rng.uniform(-300.0, 300.0, size=(2000, 2)):
        value = engine.noise2d(x, y, "quintic", fixed)
        assert 0.0 <= value <= 1.0


@pytest.mark.parametrize("fixed", [True, False])
@pytest.mark.parametrize("kernel", ["cubic", "quintic"])
def test_continuous_across_cell_edges(engine, fixed, kernel):
    eps = 1e-7
    for x, y in [(3.0, 0.4), (0.6, 5.0), (-2.0, -7.0), (17.0, 2.5)]:
        below = engine.noise2d(x - eps, y - eps, kernel, fixed)
        above = engine.noise2d(x + eps, y + eps, kernel, fixed)
        assert abs(above - below) < 1e-5


@pytest.mark.parametrize("fixed", [True, False])
def test_single_octave_is_remapped_noise(engine, fixed):
    for x, y in [(0.3, 0.7), (12.25, -3.5), (-40.1, 8.8)]:
        direct = engine.noise2d(x + 1.5, y - 2.0, "quintic", fixed) * 2.0 - 1.0
        layered = engine.noise_with_octaves(
            x, y, 1, 2.0, 0.5, [(1.5, -2.0)], "quintic", fixed
        )
        assert layered == pytest.approx(direct, abs=1e-12)


def test_integer_samples_sum_to_zero(engine):
    value = engine.noise_with_octaves(3, 4, 4, 2.0, 0.5, [(1, 2)] * 4)
    assert value == 0.0


def test_noise_map_matches_point_evaluation(engine):
    offsets = [(10.0, 20.0), (-5.0, 3.0)]
    grid = engine.noise_map(6, 4, 3.0, 2, 2.0, 0.5, offsets, "cubic", False)
    assert grid.shape == (6, 4)
    for x, y in [(0, 0), (5, 3), (2, 1)]:
        expected = engine.noise_with_octaves(
            (x - 3.0) / 3.0, (y - 2.0) / 3.0, 2, 2.0, 0.5, offsets, "cubic", False
        )
        assert grid[x, y] == pytest.approx(expected, abs=1e-12)


def test_noise_map_clamps_scale(engine):
    a = engine.noise_map(4, 4, 0.0, 1, 2.0, 0.5)
    b = engine.noise_map(4, 4, -3.0, 1, 2.0, 0.5)
    c = engine.noise_map(4, 4, 0.001, 1, 2.0, 0.5)
    assert np.isfinite(a).all()
    np.testing.assert_array_equal(a, b)
    np.testing.assert_array_equal(a, c)
    assert clamp_scale(5.0) == 5.0


def test_normalize():
    values = np.array([[2.0, 4.0], [3.0, 6.0]])
    out = normalize(values)
    assert out.min() == 0.0 and out.max() == 1.0
    assert out[1, 0] == pytest.approx(0.25)

    flat = normalize(np.full((3, 3), 0.7))
    np.testing.assert_array_equal(flat, np.zeros((3, 3)))


def test_bad_arguments(engine):
    with pytest.raises(ValueError):
        resolve_kernel("linear")
    with pytest.raises(ValueError):
        engine.noise_with_octaves(0.0, 0.0, 0, 2.0, 0.5)
    with pytest.raises(ValueError):
        engine.noise_with_octaves(0.0, 0.0, 3, 2.0, 0.5, [(0.0, 0.0)])
    assert resolve_kernel("Cubic") == 0
    assert resolve_kernel(1) == 1
