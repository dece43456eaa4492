import math

import numpy as np
import pytest

from pointsift.descriptors.histogram import trilinear_interpolation

GRID = 4
BINS = 8
BIN_WIDTH = 2 * math.pi / BINS


def index(row, col, k):
    return (row * GRID + col) * BINS + k


def empty():
    return np.zeros(GRID * GRID * BINS)


def test_sample_on_cell_and_bin_centre_hits_one_element():
    desc = empty()
    trilinear_interpolation(desc, 2.0, 1.0, 2.0, 3 * BIN_WIDTH, GRID, BINS)

    expected = empty()
    expected[index(2, 1, 3)] = 2.0
    np.testing.assert_allclose(desc, expected, atol=1e-12)


def test_half_way_between_columns_splits_evenly():
    desc = empty()
    trilinear_interpolation(desc, 1.0, 1.5, 0.0, 0.0, GRID, BINS)

    assert desc[index(0, 1, 0)] == pytest.approx(0.5)
    assert desc[index(0, 2, 0)] == pytest.approx(0.5)
    assert np.sum(desc) == pytest.approx(1.0)


def test_orientation_wraps_between_last_and_first_bin():
    desc = empty()
    trilinear_interpolation(desc, 1.0, 0.0, 0.0, 7.5 * BIN_WIDTH, GRID, BINS)

    assert desc[index(0, 0, 7)] == pytest.approx(0.5)
    assert desc[index(0, 0, 0)] == pytest.approx(0.5)
    assert np.count_nonzero(desc) == 2


def test_weights_are_products_of_tents():
    desc = empty()
    sub_x, sub_y, angle = 2.25, 0.75, 1.25 * BIN_WIDTH
    trilinear_interpolation(desc, 3.0, sub_x, sub_y, angle, GRID, BINS)

    for row, wr in ((0, 0.25), (1, 0.75)):
        for col, wc in ((2, 0.75), (3, 0.25)):
            for k, wk in ((1, 0.75), (2, 0.25)):
                assert desc[index(row, col, k)] == pytest.approx(3.0 * wr * wc * wk)
    assert np.count_nonzero(desc) == 8


def test_mass_is_conserved_inside_the_grid():
    rng = np.random.default_rng(7)
    desc = empty()
    total = 0.0
    for _ in range(200):
        w = rng.random()
        total += w
        trilinear_interpolation(desc, w, rng.uniform(0, GRID - 1),
                                rng.uniform(0, GRID - 1),
                                rng.uniform(0, 2 * math.pi), GRID, BINS)
    assert np.sum(desc) == pytest.approx(total)
    assert np.all(desc >= 0)


def test_samples_past_the_last_cell_lose_their_outer_share():
    desc = empty()
    trilinear_interpolation(desc, 1.0, 3.75, 0.0, 0.0, GRID, BINS)
    assert desc[index(0, 3, 0)] == pytest.approx(0.25)
    assert np.sum(desc) == pytest.approx(0.25)


def test_accumulation_is_additive():
    desc = empty()
    trilinear_interpolation(desc, 1.0, 1.0, 1.0, 0.0, GRID, BINS)
    trilinear_interpolation(desc, 2.0, 1.0, 1.0, 0.0, GRID, BINS)
    assert desc[index(1, 1, 0)] == pytest.approx(3.0)


def test_single_bin_histogram():
    desc = np.zeros(GRID * GRID)
    trilinear_interpolation(desc, 1.0, 0.0, 0.0, 0.0, GRID, 1)
    trilinear_interpolation(desc, 1.0, 1.0, 0.0, math.pi, GRID, 1)
    assert desc[0] == pytest.approx(1.0)
    assert desc[1] == pytest.approx(0.5)
