import operator
import warnings

import numpy as np
import pandas as pd
from statsmodels import robust

SCHEMES = ("uniform", "quantile")
DECILES = np.linspace(0.0, 1.0, 11)


class InvalidInput(ValueError):
    """Predictor/response sample is malformed or mismatched."""


class DegenerateBinning(ValueError):
    """Bin boundaries collapse to fewer than two distinct edges."""


class UndefinedDispersionWarning(RuntimeWarning):
    """A bin's median response is zero, so MAD / median is not finite."""


# =======================================
# Bin boundaries
# =======================================
def sturges_bins(n):
    """Sturges' rule: ceil(log2(n) + 1)."""
    return int(np.ceil(np.log2(n) + 1))


def uniform_edges(x, bins):
    try:
        bins = operator.index(bins)
    except TypeError:
        raise InvalidInput(f"Bin count must be an integer, got {bins!r}.") from None
    if bins < 1:
        raise InvalidInput(f"Bin count must be at least 1, got {bins}.")

    edges = np.linspace(np.min(x), np.max(x), bins + 1)
    if np.unique(edges).size < 2:
        raise DegenerateBinning("Predictor is constant; uniform bins have zero width.")
    return edges


def quantile_edges(x, grid=None):
    grid = DECILES if grid is None else np.asarray(grid, dtype=float)

    if grid.ndim != 1 or grid.size < 2:
        raise InvalidInput("Probability grid needs at least two probabilities.")
    if np.any((grid < 0) | (grid > 1)):
        raise InvalidInput("Probability grid must lie within [0, 1].")
    if np.any(np.diff(grid) < 0):
        raise InvalidInput("Probability grid must be ascending.")

    # tied quantiles collapse adjacent bins
    edges = np.unique(np.quantile(x, grid))
    if edges.size < 2:
        raise DegenerateBinning("Quantile boundaries collapse to a single value.")
    return edges


# =======================================
# Dispersion statistic
# =======================================
def mad_over_median(values):
    """
    Normal-consistent MAD divided by the (unscaled) median.

    Returns inf (or nan when the MAD is also zero) for a zero-median
    sample and emits an UndefinedDispersionWarning.
    """
    values = np.asarray(values, dtype=float)
    center = np.median(values)
    spread = robust.mad(values)

    if center == 0:
        warnings.warn(
            "Median response is zero in this bin; dispersion is undefined.",
            UndefinedDispersionWarning,
            stacklevel=2,
        )
        return np.inf if spread > 0 else np.nan

    return float(spread / center)


# =======================================
# Regressogram
# =======================================
def compute_regressogram(predictor, response, scheme="uniform", probability_grid=None, bins=None):
    """
    Bins the predictor and computes MAD / median of the response per bin.

    Parameters:
    - predictor, response: equal-length finite numeric sequences, N >= 2
    - scheme: "uniform" (equal-width bins) or "quantile" (empirical quantile edges)
    - probability_grid: quantile scheme only, ascending probabilities in [0, 1];
      defaults to deciles
    - bins: uniform scheme only, bin count; defaults to Sturges' rule on len(response)

    Returns:
    - DataFrame with columns midpoint, dispersion, n; one row per non-empty
      bin, ordered by increasing midpoint
    """
    x = np.asarray(predictor, dtype=float).ravel()
    y = np.asarray(response, dtype=float).ravel()

    if x.size != y.size:
        raise InvalidInput(f"Predictor has {x.size} values but response has {y.size}.")
    if y.size < 2:
        raise InvalidInput("At least two observations are required.")
    if not (np.all(np.isfinite(x)) and np.all(np.isfinite(y))):
        raise InvalidInput("Predictor and response must be finite (no NaN or inf).")
    if scheme not in SCHEMES:
        raise InvalidInput(f"Unknown binning scheme {scheme!r}; expected one of {SCHEMES}.")

    order = np.argsort(x, kind="stable")
    x, y = x[order], y[order]

    if scheme == "uniform":
        edges = uniform_edges(x, sturges_bins(y.size) if bins is None else bins)
    else:
        edges = quantile_edges(x, probability_grid)

    n_bins = edges.size - 1
    idx = np.searchsorted(edges, x, side="right") - 1
    idx[x == edges[-1]] = n_bins - 1  # last bin is closed on the right
    inside = (idx >= 0) & (idx < n_bins)

    rows = []
    with warnings.catch_warnings():
        # reported once below, against the caller
        warnings.simplefilter("ignore", category=UndefinedDispersionWarning)
        for b in np.unique(idx[inside]):
            members = y[idx == b]
            rows.append({
                "midpoint": float((edges[b] + edges[b + 1]) / 2),
                "dispersion": mad_over_median(members),
                "n": int(members.size),
            })

    table = pd.DataFrame(rows, columns=["midpoint", "dispersion", "n"])

    undefined = table.loc[~np.isfinite(table["dispersion"].to_numpy(dtype=float)), "midpoint"]
    if not undefined.empty:
        warnings.warn(
            f"Median response is zero in {len(undefined)} bin(s) (midpoints {undefined.tolist()}); "
            "their dispersion is undefined.",
            UndefinedDispersionWarning,
            stacklevel=2,
        )

    return table
