"""
Posterior Predictive Checks

Compares complaints replicated from a fitted model (`y_rep`) against the
observed complaints:
- test statistics with posterior predictive p-values
- central predictive interval coverage
- per-observation intervals (for plotting against traps)
- statistics per group (e.g. per building)
"""
import numpy as np
import pandas as pd
from typing import Callable, Dict, Optional, Sequence, Union


def _prop_zero(x: np.ndarray, axis=None) -> np.ndarray:
    return np.mean(x == 0, axis=axis)


def _sd(x: np.ndarray, axis=None) -> np.ndarray:
    return np.std(x, axis=axis, ddof=1)


def _q90(x: np.ndarray, axis=None) -> np.ndarray:
    return np.quantile(x, 0.9, axis=axis)


TEST_STATISTICS: Dict[str, Callable] = {
    'mean': np.mean,
    'sd': _sd,
    'prop_zero': _prop_zero,
    'max': np.max,
    'q90': _q90,
}

StatLike = Union[str, Callable]


def _resolve_stat(stat: StatLike) -> Callable:
    if callable(stat):
        return stat
    if stat not in TEST_STATISTICS:
        raise ValueError(
            f"Unknown test statistic '{stat}'. Choose from: {', '.join(TEST_STATISTICS)}"
        )
    return TEST_STATISTICS[stat]


def _check_shapes(y: np.ndarray, y_rep: np.ndarray) -> None:
    if y_rep.ndim != 2:
        raise ValueError(f"y_rep must be 2-D (n_draws, N), got shape {y_rep.shape}")
    if y_rep.shape[1] != len(y):
        raise ValueError(
            f"y_rep has {y_rep.shape[1]} observations but y has {len(y)}"
        )


def valid_draws(y_rep: np.ndarray) -> np.ndarray:
    """
    Drop draws flagged as overflow by the Stan programs (any value < 0).

    Returns:
        y_rep restricted to valid draws
    """
    y_rep = np.asarray(y_rep)
    keep = (y_rep >= 0).all(axis=1)
    if not keep.any():
        raise ValueError("All posterior predictive draws contain overflow values")
    return y_rep[keep]


def ppc_test_statistics(
    y: np.ndarray,
    y_rep: np.ndarray,
    stats: Sequence[StatLike] = ('mean', 'sd', 'prop_zero', 'max')
) -> pd.DataFrame:
    """
    Posterior predictive test statistics.

    Args:
        y: Observed counts (N,)
        y_rep: Replicated counts (n_draws, N)
        stats: Names from TEST_STATISTICS or callables taking (x, axis)

    Returns:
        DataFrame indexed by statistic with observed value, mean/5%/95% of the
        replicated statistic and p_value = P(T(y_rep) >= T(y))
    """
    y = np.asarray(y)
    y_rep = np.asarray(y_rep)
    _check_shapes(y, y_rep)

    rows = []
    for stat in stats:
        fn = _resolve_stat(stat)
        name = stat if isinstance(stat, str) else getattr(stat, '__name__', 'stat')
        t_obs = float(fn(y))
        t_rep = np.asarray(fn(y_rep, axis=1), dtype=float)
        rows.append({
            'statistic': name,
            'observed': t_obs,
            'rep_mean': float(np.mean(t_rep)),
            'rep_q05': float(np.quantile(t_rep, 0.05)),
            'rep_q95': float(np.quantile(t_rep, 0.95)),
            'p_value': float(np.mean(t_rep >= t_obs)),
        })
    return pd.DataFrame(rows).set_index('statistic')


def ppc_statistic_draws(y_rep: np.ndarray, stat: StatLike) -> np.ndarray:
    """Statistic evaluated on each replicated dataset, shape (n_draws,)."""
    return np.asarray(_resolve_stat(stat)(np.asarray(y_rep), axis=1), dtype=float)


def ppc_intervals(
    y: np.ndarray,
    y_rep: np.ndarray,
    x: Optional[np.ndarray] = None,
    prob: float = 0.9
) -> pd.DataFrame:
    """
    Per-observation predictive median and central interval.

    Args:
        y: Observed counts
        y_rep: Replicated counts (n_draws, N)
        x: Optional covariate to carry along (e.g. traps)
        prob: Interval mass

    Returns:
        DataFrame with y, median, lower, upper, inside (and x if given)
    """
    y = np.asarray(y)
    y_rep = np.asarray(y_rep)
    _check_shapes(y, y_rep)

    lower_q = (1 - prob) / 2
    lower = np.quantile(y_rep, lower_q, axis=0)
    upper = np.quantile(y_rep, 1 - lower_q, axis=0)

    out = pd.DataFrame({
        'y': y,
        'median': np.median(y_rep, axis=0),
        'lower': lower,
        'upper': upper,
    })
    out['inside'] = (out['y'] >= out['lower']) & (out['y'] <= out['upper'])
    if x is not None:
        out.insert(0, 'x', np.asarray(x))
    return out


def ppc_interval_coverage(y: np.ndarray, y_rep: np.ndarray, prob: float = 0.9) -> float:
    """Fraction of observations inside their central `prob` predictive interval."""
    return float(ppc_intervals(y, y_rep, prob=prob)['inside'].mean())


def ppc_grouped_statistic(
    y: np.ndarray,
    y_rep: np.ndarray,
    groups: Sequence,
    stat: StatLike = 'mean'
) -> pd.DataFrame:
    """
    Observed vs replicated statistic within each group.

    Args:
        y: Observed counts (N,)
        y_rep: Replicated counts (n_draws, N)
        groups: Group label per observation (N,)
        stat: Statistic to compute within groups

    Returns:
        DataFrame indexed by group with observed, rep_mean, rep_q05, rep_q95,
        p_value
    """
    y = np.asarray(y)
    y_rep = np.asarray(y_rep)
    groups = np.asarray(groups)
    _check_shapes(y, y_rep)
    if len(groups) != len(y):
        raise ValueError("groups must have one label per observation")

    fn = _resolve_stat(stat)
    rows = []
    for group in pd.unique(groups):
        mask = groups == group
        t_obs = float(fn(y[mask]))
        t_rep = np.asarray(fn(y_rep[:, mask], axis=1), dtype=float)
        rows.append({
            'group': group,
            'observed': t_obs,
            'rep_mean': float(np.mean(t_rep)),
            'rep_q05': float(np.quantile(t_rep, 0.05)),
            'rep_q95': float(np.quantile(t_rep, 0.95)),
            'p_value': float(np.mean(t_rep >= t_obs)),
        })
    return pd.DataFrame(rows).set_index('group')
