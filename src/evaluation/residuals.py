"""Standardized residuals from posterior predictive draws."""
import numpy as np
import pandas as pd
from typing import Dict


def standardized_residuals(y: np.ndarray, y_rep: np.ndarray) -> pd.DataFrame:
    """
    (y - E[y_rep]) / sd(y_rep) per observation.

    Observations whose replicates have zero spread get a NaN residual.
    """
    y = np.asarray(y, dtype=float)
    y_rep = np.asarray(y_rep, dtype=float)
    if y_rep.ndim != 2 or y_rep.shape[1] != len(y):
        raise ValueError("y_rep must have shape (n_draws, len(y))")

    mean_rep = y_rep.mean(axis=0)
    sd_rep = y_rep.std(axis=0, ddof=1) if y_rep.shape[0] > 1 else np.zeros_like(mean_rep)
    with np.errstate(divide='ignore', invalid='ignore'):
        resid = np.where(sd_rep > 0, (y - mean_rep) / sd_rep, np.nan)

    return pd.DataFrame({
        'y': y,
        'pred_mean': mean_rep,
        'pred_sd': sd_rep,
        'residual': resid,
    })


def summarize_residuals(residuals: pd.DataFrame) -> Dict[str, float]:
    """Mean, sd and share of |residual| > 2."""
    r = residuals['residual'].dropna().to_numpy()
    if len(r) == 0:
        return {'mean': np.nan, 'sd': np.nan, 'frac_abs_gt_2': np.nan}
    return {
        'mean': float(r.mean()),
        'sd': float(r.std(ddof=1)) if len(r) > 1 else 0.0,
        'frac_abs_gt_2': float(np.mean(np.abs(r) > 2)),
    }
