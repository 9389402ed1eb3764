"""
Rootograms for count models

For each count k the observed frequency is compared with the expected
frequency under the posterior predictive distribution, both on the
square-root scale. In the hanging style the observed bar hangs from the
expected curve, so misfit shows up as bars not reaching zero.
"""
import numpy as np
import pandas as pd
from typing import Optional


def compute_rootogram(
    y: np.ndarray,
    y_rep: np.ndarray,
    max_count: Optional[int] = None,
    prob: float = 0.9
) -> pd.DataFrame:
    """
    Observed and expected frequencies per count.

    Args:
        y: Observed counts (N,)
        y_rep: Replicated counts (n_draws, N); negative values are ignored
        max_count: Largest count shown (default: max of y and the 99th
            percentile of y_rep)
        prob: Mass of the interval around the expected frequency

    Returns:
        DataFrame indexed by count with observed, expected, lower, upper,
        sqrt_observed, sqrt_expected and hanging_bottom
    """
    y = np.asarray(y).astype(int)
    y_rep = np.asarray(y_rep)
    if y_rep.ndim != 2 or y_rep.shape[1] != len(y):
        raise ValueError("y_rep must have shape (n_draws, len(y))")
    if (y < 0).any():
        raise ValueError("Observed counts must be non-negative")

    if max_count is None:
        valid = y_rep[y_rep >= 0]
        rep_top = int(np.quantile(valid, 0.99)) if valid.size else 0
        max_count = max(int(y.max()), rep_top)

    counts = np.arange(max_count + 1)
    observed = np.bincount(np.clip(y, 0, None), minlength=max_count + 1)[:max_count + 1]

    # Frequency of each count within every replicated dataset
    rep_freq = (y_rep[:, :, None] == counts[None, None, :]).sum(axis=1)
    lower_q = (1 - prob) / 2

    out = pd.DataFrame({
        'count': counts,
        'observed': observed.astype(float),
        'expected': rep_freq.mean(axis=0),
        'lower': np.quantile(rep_freq, lower_q, axis=0),
        'upper': np.quantile(rep_freq, 1 - lower_q, axis=0),
    }).set_index('count')

    out['sqrt_observed'] = np.sqrt(out['observed'])
    out['sqrt_expected'] = np.sqrt(out['expected'])
    out['hanging_bottom'] = out['sqrt_expected'] - out['sqrt_observed']
    return out


def rootogram_misfit(rootogram: pd.DataFrame) -> float:
    """Sum of squared hanging gaps; zero for a perfect fit."""
    return float((rootogram['hanging_bottom'] ** 2).sum())
