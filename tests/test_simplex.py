"""Tests for the simplex noise evaluator."""

import math
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from simplexfield import Simplex
from simplexfield.gradient import GRADIENTS_2D, GRADIENTS_3D, GRADIENTS_4D
from simplexfield.simplex import corner_offsets, evaluate, normalization, skew_factor, unskew_factor

SEED_GRID = [(x * 0.37, y * 0.53) for x in range(-20, 20) for y in range(-20, 20)]


def random_points(dims: int, count: int = 4000, spread: float = 40.0) -> np.ndarray:
    rng = np.random.RandomState(1234 + dims)
    return rng.uniform(-spread, spread, size=(count, dims))


def surflet_sum(distance, unskew, offsets, gradients) -> float:
    """Reference sum of corner contributions for explicitly listed corners."""
    total = 0.0
    for k, (offset, gradient) in enumerate(zip(offsets, gradients)):
        corner = np.asarray(distance, dtype=float) - np.asarray(offset, dtype=float) + k * unskew
        t = 0.5 - float(np.sum(corner * corner))
        if t < 0.0:
            continue
        t *= t
        total += t * t * float(np.dot(gradient, corner))
    return total


# ----------------------------------------------------------------------
# Construction and seeding
# ----------------------------------------------------------------------

def test_default_seed_is_zero():
    assert Simplex().seed == 0
    assert Simplex.DEFAULT_SEED == 0
    assert Simplex() == Simplex(0)


def test_set_seed_with_same_seed_returns_same_instance():
    noise = Simplex(17)
    reseeded = noise.set_seed(17)
    assert reseeded is noise
    for point in [(0.3, 0.7), (1.1, -2.2, 3.3), (0.1, 0.2, 0.3, 0.4)]:
        assert reseeded.get(point) == noise.get(point)


def test_set_seed_returns_new_instance_and_leaves_original_untouched():
    noise = Simplex(1)
    before = noise.get((0.25, 0.75))
    other = noise.set_seed(2)
    assert other is not noise
    assert other.seed == 2
    assert noise.seed == 1
    assert noise.get((0.25, 0.75)) == before


@pytest.mark.parametrize("seed", [-1, 2 ** 32])
def test_out_of_range_seed_rejected(seed):
    with pytest.raises(ValueError):
        Simplex(seed)


@pytest.mark.parametrize("seed", [1.5, "3", True])
def test_non_integer_seed_rejected(seed):
    with pytest.raises(TypeError):
        Simplex(seed)


def test_max_seed_accepted():
    assert Simplex(2 ** 32 - 1).seed == 2 ** 32 - 1


# ----------------------------------------------------------------------
# Determinism and seed sensitivity
# ----------------------------------------------------------------------

@pytest.mark.parametrize("point", [(0.3, -1.7), (12.5, 3.25, -7.0), (0.1, 0.9, -4.4, 2.2)])
def test_repeated_calls_are_bit_identical(point):
    noise = Simplex(42)
    first = noise.get(point)
    assert all(noise.get(point) == first for _ in range(5))


@pytest.mark.parametrize("dims", [2, 3, 4])
def test_same_seed_instances_agree(dims):
    points = random_points(dims, count=500)
    np.testing.assert_array_equal(Simplex(99).get_many(points), Simplex(99).get_many(points))


@pytest.mark.parametrize("dims", [2, 3, 4])
def test_different_seeds_differ_somewhere(dims):
    points = random_points(dims, count=500)
    assert np.any(Simplex(0).get_many(points) != Simplex(1).get_many(points))


def test_concurrent_evaluation_matches_serial():
    noise = Simplex(5)
    expected = [noise.get(p) for p in SEED_GRID]
    with ThreadPoolExecutor(max_workers=4) as pool:
        actual = list(pool.map(noise.get, SEED_GRID))
    assert actual == expected


# ----------------------------------------------------------------------
# Field properties
# ----------------------------------------------------------------------

@pytest.mark.parametrize("dims", [2, 3, 4])
def test_values_stay_in_bounded_range(dims):
    values = Simplex().get_many(random_points(dims))
    assert np.all(np.isfinite(values))
    assert np.max(np.abs(values)) <= 1.2
    assert np.std(values) > 0.01


@pytest.mark.parametrize("dims", [2, 3, 4])
def test_field_is_continuous(dims):
    noise = Simplex(3)
    rng = np.random.RandomState(7)
    for point in random_points(dims, count=300):
        step = rng.normal(size=dims)
        step *= 1e-6 / np.linalg.norm(step)
        assert abs(noise.get(point) - noise.get(point + step)) < 1e-3


def test_nan_propagates():
    assert math.isnan(Simplex().get((float("nan"), 0.5)))
    assert math.isnan(Simplex().get((0.5, 0.5, float("nan"))))


# ----------------------------------------------------------------------
# Golden values
# ----------------------------------------------------------------------

# Field of the default seed at (0.5, 0.5); only the lattice corner (1, 1)
# contributes, through the (+1, +1) / sqrt(2) gradient.
GOLDEN_2D_HALF_POINT = -0.4343849073428462


def reference_gradient(perm, lattice, table):
    """Gradient for a lattice point, folded independently of the library hash."""
    h = 0
    for c in lattice:
        h = int(perm[(h ^ int(c)) & 255])
    return table[h & (len(table) - 1)]


def reference_perm(seed=0):
    return np.random.RandomState(seed).permutation(256)


def test_default_table_matches_random_state_stream():
    np.testing.assert_array_equal(Simplex().permutation_table.values, reference_perm())


def test_lattice_points_are_zero():
    noise = Simplex()
    assert noise.get((0.0, 0.0)) == 0.0
    assert noise.get((0.0, 0.0, 0.0)) == 0.0


def test_2d_half_point_golden_value():
    noise = Simplex()
    assert noise.get((0.5, 0.5)) == pytest.approx(GOLDEN_2D_HALF_POINT, rel=1e-12)
    assert noise.permutation_table.lookup_2((1, 1)) == 4

    unskew = (1.0 - 1.0 / math.sqrt(3.0)) / 2.0
    offsets = [(0, 0), (0, 1), (1, 1)]
    gradients = [reference_gradient(reference_perm(), o, GRADIENTS_2D) for o in offsets]
    expected = 70.0 * surflet_sum((0.5, 0.5), unskew, offsets, gradients)
    assert expected == pytest.approx(GOLDEN_2D_HALF_POINT, rel=1e-12)

    # Only the far corner lies within the kernel radius
    c = 0.5 - 1.0 + 2.0 * unskew
    t = 0.5 - 2.0 * c * c
    assert expected == pytest.approx(70.0 * t ** 4 * c * math.sqrt(2.0), rel=1e-12)


def test_3d_off_lattice_point_matches_closed_form():
    noise = Simplex()
    unskew = 1.0 / 6.0
    point = (0.3, 0.2, 0.1)
    # Inside the origin cell; x >= y >= z walks x, then y, then z
    offsets = [(0, 0, 0), (1, 0, 0), (1, 1, 0), (1, 1, 1)]
    gradients = [reference_gradient(reference_perm(), o, GRADIENTS_3D) for o in offsets]

    expected = 32.0 * surflet_sum(point, unskew, offsets, gradients)

    assert noise.get(point) == pytest.approx(expected, rel=1e-12, abs=1e-15)
    assert expected != 0.0


def test_4d_unit_point_matches_closed_form():
    noise = Simplex()
    unskew = (1.0 - 1.0 / math.sqrt(5.0)) / 4.0
    d = 1.0 - (2.0 - 8.0 * unskew)
    offsets = [(0, 0, 0, 0), (0, 0, 0, 1), (0, 0, 1, 1), (0, 1, 1, 1), (1, 1, 1, 1)]
    gradients = [
        reference_gradient(reference_perm(), tuple(2 + c for c in o), GRADIENTS_4D)
        for o in offsets
    ]

    expected = 27.0 * surflet_sum((d, d, d, d), unskew, offsets, gradients)

    assert noise.get((1.0, 1.0, 1.0, 1.0)) == pytest.approx(expected, rel=1e-12, abs=1e-15)
    assert expected != 0.0


# ----------------------------------------------------------------------
# Kernel with stub collaborators
# ----------------------------------------------------------------------

STUB_PERM = np.zeros(256, dtype=np.int64)

STUB_CASES = [
    # point, unit gradient, corner offsets for that point, constant
    ((0.1, 0.2), (0.6, 0.8), [(0, 0), (0, 1), (1, 1)], 70.0),
    ((0.1, 0.2, 0.3), (0.0, 0.6, 0.8), [(0, 0, 0), (0, 0, 1), (0, 1, 1), (1, 1, 1)], 32.0),
    (
        (0.1, 0.2, 0.3, 0.05),
        (0.5, 0.5, 0.5, 0.5),
        [(0, 0, 0, 0), (0, 0, 1, 0), (0, 1, 1, 0), (1, 1, 1, 0), (1, 1, 1, 1)],
        27.0,
    ),
]


@pytest.mark.parametrize("point, gradient, offsets, constant", STUB_CASES)
def test_normalization_constant_applied_per_dimension(point, gradient, offsets, constant):
    dims = len(point)
    gradients = np.array([gradient], dtype=np.float64)
    # The point lies in the origin cell, so the local displacement is the point itself
    raw = surflet_sum(point, unskew_factor(dims), offsets, [gradients[0]] * (dims + 1))

    result = evaluate(np.array(point, dtype=np.float64), STUB_PERM, gradients)

    assert raw != 0.0
    assert normalization(dims) == constant
    assert result == pytest.approx(raw * constant, rel=1e-12)


def test_out_of_range_gradient_index_fails_fast():
    perm = np.full(256, 255, dtype=np.int64)
    gradients = np.array([[1.0, 0.0]], dtype=np.float64)
    with pytest.raises(IndexError):
        evaluate(np.array([0.3, 0.4]), perm, gradients)


# ----------------------------------------------------------------------
# Constants and corner ranking
# ----------------------------------------------------------------------

@pytest.mark.parametrize("n", [2, 3, 4])
def test_skew_constants(n):
    assert skew_factor(n) == pytest.approx((math.sqrt(n + 1) - 1) / n)
    assert unskew_factor(n) == pytest.approx((1 - 1 / math.sqrt(n + 1)) / n)


def test_known_skew_values():
    assert skew_factor(2) == pytest.approx(0.5 * (math.sqrt(3.0) - 1.0))
    assert unskew_factor(2) == pytest.approx((3.0 - math.sqrt(3.0)) / 6.0)
    assert skew_factor(3) == pytest.approx(1.0 / 3.0)
    assert unskew_factor(3) == pytest.approx(1.0 / 6.0)


def _assert_valid_path(offsets: np.ndarray, dims: int) -> None:
    assert offsets.shape == (dims + 1, dims)
    assert np.all(offsets[0] == 0)
    assert np.all(offsets[-1] == 1)
    steps = np.diff(offsets, axis=0)
    assert np.all((steps == 0) | (steps == 1))
    assert np.all(steps.sum(axis=1) == 1)


@pytest.mark.parametrize("dims", [2, 3, 4])
def test_corner_offsets_form_a_simplex_path(dims):
    rng = np.random.RandomState(dims)
    for distance in rng.uniform(-0.5, 1.5, size=(500, dims)):
        _assert_valid_path(corner_offsets(distance), dims)
    _assert_valid_path(corner_offsets(np.full(dims, 0.25)), dims)


@pytest.mark.parametrize("dims", [2, 3, 4])
def test_corner_offsets_follow_descending_components(dims):
    rng = np.random.RandomState(10 + dims)
    for distance in rng.uniform(0.0, 1.0, size=(200, dims)):
        offsets = corner_offsets(distance)
        order = [int(np.argmax(offsets[k + 1] - offsets[k])) for k in range(dims)]
        assert order == list(np.argsort(-distance, kind="stable"))


def test_2d_tie_goes_to_second_axis():
    np.testing.assert_array_equal(corner_offsets(np.array([0.5, 0.5]))[1], [0, 1])
    np.testing.assert_array_equal(corner_offsets(np.array([0.6, 0.5]))[1], [1, 0])


def test_4d_ties_rank_later_axes_first():
    offsets = corner_offsets(np.full(4, 0.1))
    np.testing.assert_array_equal(offsets[1], [0, 0, 0, 1])
    np.testing.assert_array_equal(offsets[2], [0, 0, 1, 1])
    np.testing.assert_array_equal(offsets[3], [0, 1, 1, 1])


# ----------------------------------------------------------------------
# Array API
# ----------------------------------------------------------------------

@pytest.mark.parametrize("dims", [2, 3, 4])
def test_get_many_matches_get(dims):
    noise = Simplex(11)
    points = random_points(dims, count=50)
    values = noise.get_many(points)
    assert values.shape == (50,)
    assert list(values) == [noise.get(p) for p in points]


def test_get_many_keeps_leading_shape():
    noise = Simplex()
    grid = random_points(3, count=24).reshape(2, 3, 4, 3)
    assert noise.get_many(grid).shape == (2, 3, 4)


def test_noise_helpers_accept_scalars_and_grids():
    noise = Simplex(8)
    assert noise.noise_2d(0.3, 0.4) == noise.get((0.3, 0.4))
    assert noise.noise_3d(0.3, 0.4, 0.5) == noise.get((0.3, 0.4, 0.5))
    assert noise.noise_4d(0.3, 0.4, 0.5, 0.6) == noise.get((0.3, 0.4, 0.5, 0.6))

    xx, yy = np.meshgrid(np.linspace(0, 3, 5), np.linspace(0, 2, 4))
    grid = noise.noise_2d(xx, yy)
    assert grid.shape == (4, 5)
    assert grid[2, 3] == noise.get((xx[2, 3], yy[2, 3]))

    volume = noise.noise_3d(xx, yy, 1.5)
    assert volume.shape == (4, 5)


@pytest.mark.parametrize("point", [(1.0,), (1.0, 2.0, 3.0, 4.0, 5.0), ()])
def test_wrong_arity_rejected(point):
    with pytest.raises(ValueError):
        Simplex().get(point)


def test_wrong_arity_rejected_for_arrays():
    with pytest.raises(ValueError):
        Simplex().get_many(np.zeros((10, 5)))
