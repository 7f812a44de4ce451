import numpy as np
import pandas as pd
import pytest


COLUMNS = ["Trip", "Speed[0]", "Speed[-1]", "FcwRange[0]", "FcwValidTarget",
           "dr0", "dr1", "dr2", "Brake"]


@pytest.fixture
def pipeline_config(make_config):
    """4x4 identity grid, short lags and a one-row probability window."""
    return make_config(
        grid={"nrow": 4, "ncol": 4, "row_scale": 1, "row_offset": 0,
              "col_scale": 1, "col_offset": 0},
        features={"lags": {"Speed": 1, "FcwRange": 0}, "count_feature": "Speed[0]"},
        min_count=0,
        half_window=1,
    )


@pytest.fixture
def small_frame():
    """Eight rows; five survive the default filters.

    Row 2 continues the brake event of row 1, row 3 is too slow and row 4
    has no valid target. Row 6 falls outside the grid.
    """
    rows = [
        # Trip Speed0 Speed-1 Fcw0 Valid dr0  dr1  dr2  Brake
        [1,    10,    9,      20,  1,    0.1, 0.5, 0.5, 0],
        [1,    12,    10,     22,  1,    0.2, 0.5, 1.5, 1],
        [1,    12,    12,     22,  1,    0.3, 0.5, 1.5, 1],
        [1,    5,     6,      20,  1,    0.4, 1.5, 0.5, 0],
        [1,    11,    10,     30,  0,    0.5, 1.5, 0.5, 0],
        [2,    8,     8,      25,  1,    0.6, 1.5, 0.5, 1],
        [2,    9,     8,      25,  1,    0.7, 9.0, 0.5, 0],
        [2,    10,    9,      26,  1,    0.8, 0.5, 0.5, 0],
    ]
    return pd.DataFrame(np.array(rows, dtype=float), columns=COLUMNS)


@pytest.fixture
def make_frame():
    """Factory for random frames with the pipeline column layout."""
    def _make(n=400, seed=0):
        rng = np.random.default_rng(seed)
        speed = rng.uniform(0, 20, n)
        return pd.DataFrame({
            "Trip": np.arange(n) // 50,
            "Speed[0]": speed,
            "Speed[-1]": speed + rng.normal(0, 0.5, n),
            "FcwRange[0]": rng.uniform(5, 80, n),
            "FcwValidTarget": (rng.random(n) < 0.8).astype(float),
            "dr0": rng.normal(size=n),
            "dr1": rng.uniform(0, 4, n),
            "dr2": rng.uniform(0, 4, n),
            "Brake": (rng.random(n) < 0.2).astype(float),
        }, columns=COLUMNS)

    return _make
