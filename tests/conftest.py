import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


@pytest.fixture
def heteroscedastic_df():
    """Error spread grows with x."""
    rng = np.random.default_rng(0)
    x = rng.uniform(1, 10, 300)
    y = 2 + 3 * x + rng.normal(0, 0.8 * x)
    return pd.DataFrame({"x": x, "y": y})


@pytest.fixture
def homoscedastic_df():
    rng = np.random.default_rng(1)
    x = rng.uniform(1, 10, 300)
    y = 20 + 3 * x + rng.normal(0, 1, 300)
    return pd.DataFrame({"x": x, "y": y})


@pytest.fixture
def zero_median_df():
    """Covariate with four tied levels; the response is exactly zero at x == 1."""
    rng = np.random.default_rng(6)
    x = np.repeat([1.0, 2.0, 3.0, 4.0], 10)
    y = np.where(x == 1, 0.0, 5 + 2 * x + rng.normal(0, 1, x.size))
    return pd.DataFrame({"x": x, "y": y})
