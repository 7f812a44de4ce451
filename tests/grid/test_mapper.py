"""Test GridMapper affine cell mapping."""

import numpy as np
import pytest

from lagmap.contracts import PreconditionViolation
from lagmap.grid.mapper import GridMapper, map_to_cells, OUT_OF_GRID

pytestmark = pytest.mark.unit


def test_default_mapping_matches_affine_formula(internal_config):
    """row = floor(70 x0 + 50), col = floor(15 x1 + 50) with defaults."""
    mapper = GridMapper(internal_config)
    x0 = np.array([0.0, 0.01, -0.2, 0.7])
    x1 = np.array([0.0, 1.0, -3.4, 3.3])

    row, col = mapper.map(x0, x1)

    np.testing.assert_array_equal(row, np.floor(70 * x0 + 50).astype(int))
    np.testing.assert_array_equal(col, np.floor(15 * x1 + 50).astype(int))
    assert row.dtype == np.int64 and col.dtype == np.int64


def test_integer_results_have_no_off_by_one():
    """When scale*x+offset is already an integer, floor returns it exactly."""
    x0 = np.arange(-5, 6, dtype=float)
    x1 = np.arange(-5, 6, dtype=float) * 2

    row, col = map_to_cells(x0, x1, 3.0, 7.0, 0.5, 1.0)

    np.testing.assert_array_equal(row, (3 * np.arange(-5, 6) + 7))
    np.testing.assert_array_equal(col, (np.arange(-5, 6) + 1))


def test_negative_values_floor_downwards():
    """floor, not truncation: -0.5 maps to -1."""
    row, col = map_to_cells([-0.5], [-0.01], 1.0, 0.0, 1.0, 0.0)
    assert row[0] == -1
    assert col[0] == -1


def test_no_clamping(internal_config):
    """Out-of-range indices are returned as-is."""
    mapper = GridMapper(internal_config)
    row, col = mapper.map([10.0], [-10.0])

    assert row[0] == 750
    assert col[0] == -100
    assert not mapper.in_bounds(row, col)[0]


def test_non_finite_coordinates_are_out_of_grid(internal_config):
    mapper = GridMapper(internal_config)
    row, col = mapper.map([np.nan, 0.0, np.inf], [0.0, -np.inf, 0.0])

    assert row[0] == OUT_OF_GRID
    assert col[1] == OUT_OF_GRID
    assert row[2] == OUT_OF_GRID
    assert not mapper.in_bounds(row, col).any()


def test_misaligned_coordinates_raise():
    with pytest.raises(PreconditionViolation, match="equal length"):
        map_to_cells([0.0, 1.0], [0.0], 1.0, 0.0, 1.0, 0.0)


def test_cell_index_and_bounds(unit_grid_config):
    mapper = GridMapper(unit_grid_config)
    row = np.array([0, 3, 1, 4, -1])
    col = np.array([0, 3, 2, 0, 0])

    inside = mapper.in_bounds(row, col)

    np.testing.assert_array_equal(inside, [True, True, True, False, False])
    np.testing.assert_array_equal(mapper.cell_index(row[inside], col[inside]), [0, 15, 6])
    assert mapper.n_cells == 16


def test_cell_coords_invert_mapping(internal_config):
    mapper = GridMapper(internal_config)
    rows, cols = mapper.cell_coords()

    row, col = mapper.map(rows, cols)

    np.testing.assert_array_equal(row, np.arange(mapper.nrow))
    np.testing.assert_array_equal(col, np.arange(mapper.ncol))
