"""Test HeatmapEstimator event-rate surface."""

import numpy as np
import pytest

from lagmap.contracts import PreconditionViolation
from lagmap.grid.heatmap import HeatmapEstimator

pytestmark = pytest.mark.unit


@pytest.fixture
def estimator(make_config):
    config = make_config(
        grid={"nrow": 2, "ncol": 2, "row_scale": 1, "row_offset": 0,
              "col_scale": 1, "col_offset": 0},
        min_count=3,
    )
    return HeatmapEstimator(config)


def _observations(cell_counts, event_counts, ncol=2):
    """Build row/col/y arrays with the given per-cell counts and events."""
    rows, cols, ys = [], [], []
    for q, (n, k) in enumerate(zip(cell_counts, event_counts)):
        rows += [q // ncol] * n
        cols += [q % ncol] * n
        ys += [1] * k + [0] * (n - k)
    return np.array(rows), np.array(cols), np.array(ys, dtype=float)


def test_rate_is_power_transformed(estimator):
    row, col, y = _observations([10, 4, 0, 0], [5, 1, 0, 0])

    result = estimator.estimate(row, col, y)

    assert result.rate[0] == pytest.approx(0.5 ** 0.1)
    assert result.rate[1] == pytest.approx(0.25 ** 0.1)
    np.testing.assert_array_equal(result.denom, [10, 4, 0, 0])


def test_threshold_is_strict(estimator):
    """A cell with exactly min_count observations gets the sentinel."""
    row, col, y = _observations([3, 4, 0, 2], [3, 4, 0, 2])

    result = estimator.estimate(row, col, y)

    assert result.rate[0] == -1
    assert result.rate[1] == pytest.approx(1.0)
    assert result.rate[2] == -1
    assert result.rate[3] == -1
    np.testing.assert_array_equal(result.insufficient(), [True, False, True, True])


def test_zero_event_rate_is_zero(estimator):
    row, col, y = _observations([5, 0, 0, 0], [0, 0, 0, 0])
    assert estimator.estimate(row, col, y).rate[0] == 0.0


def test_hit_and_missed(estimator):
    row = np.array([0, 1, 2, -1, 0])
    col = np.array([0, 1, 0, 0, 5])
    y = np.array([1, 0, 1, 1, 1])

    result = estimator.estimate(row, col, y)

    assert result.hit == 2
    assert result.missed == 3
    assert result.denom.sum() == result.hit


def test_only_exact_ones_are_events(estimator):
    row, col, _ = _observations([4, 0, 0, 0], [0, 0, 0, 0])
    y = np.array([1.0, 2.0, 0.5, 1.0])

    result = estimator.estimate(row, col, y)

    assert result.rate[0] == pytest.approx(0.5 ** 0.1)


def test_merged_counts_match_single_pass(estimator):
    row, col, y = _observations([10, 6, 4, 8], [2, 6, 1, 0])

    whole = estimator.estimate(row, col, y)
    parts = estimator.count(row[:9], col[:9], y[:9]).merge(estimator.count(row[9:], col[9:], y[9:]))
    merged = estimator.rates(parts)

    np.testing.assert_array_equal(merged.rate, whole.rate)
    np.testing.assert_array_equal(merged.denom, whole.denom)
    assert merged.hit == whole.hit


def test_power_and_sentinel_are_configurable(make_config):
    config = make_config(
        grid={"nrow": 1, "ncol": 2, "row_scale": 1, "row_offset": 0,
              "col_scale": 1, "col_offset": 0},
        heatmap={"min_count": 1, "power": 1.0, "sentinel": -99.0},
    )
    estimator = HeatmapEstimator(config)

    result = estimator.estimate([0, 0, 0, 0], [0, 0, 0, 0], [1, 0, 0, 0])

    assert result.rate[0] == pytest.approx(0.25)
    assert result.rate[1] == -99.0


def test_misaligned_inputs_raise(estimator):
    with pytest.raises(PreconditionViolation):
        estimator.count([0, 1], [0, 1], [1])


def test_to_dataarray_layout(estimator):
    row, col, y = _observations([10, 4, 0, 5], [5, 1, 0, 5])

    da = estimator.estimate(row, col, y).to_dataarray()

    assert da.dims == ("row", "col")
    assert da.shape == (2, 2)
    assert da.sel(row=1, col=1).item() == pytest.approx(1.0)
    assert da.sel(row=1, col=0).item() == -1
    assert da.attrs["sentinel"] == -1
