"""
Parameter recovery on simulated data

After fitting a model to fake data drawn from its DGP program, every
simulated parameter should sit inside its posterior credible interval.
"""
import numpy as np
import pandas as pd
from typing import Dict, Mapping


def flatten_draws(draws: Mapping[str, np.ndarray]) -> Dict[str, np.ndarray]:
    """
    Expand vector parameters into one entry per element.

    Args:
        draws: {name: array (n_draws,) or (n_draws, K)}

    Returns:
        {name or name[k] (1-based): array (n_draws,)}
    """
    flat = {}
    for name, values in draws.items():
        values = np.asarray(values)
        if values.ndim == 1:
            flat[name] = values
        elif values.ndim == 2:
            for k in range(values.shape[1]):
                flat[f"{name}[{k + 1}]"] = values[:, k]
        else:
            raise ValueError(f"Parameter '{name}' has unsupported shape {values.shape}")
    return flat


def check_parameter_recovery(
    true_params: Mapping[str, float],
    draws: Mapping[str, np.ndarray],
    prob: float = 0.9
) -> pd.DataFrame:
    """
    Compare simulated parameter values against their posteriors.

    Args:
        true_params: Values used to simulate the data
        draws: Posterior draws keyed like true_params (vectors allowed)
        prob: Central interval mass

    Returns:
        DataFrame indexed by parameter with columns true, mean, lower, upper,
        covered and rank_quantile (share of draws below the true value)
    """
    if not 0 < prob < 1:
        raise ValueError("prob must be in (0, 1)")

    flat = flatten_draws(draws)
    lower_q = (1 - prob) / 2

    rows = []
    for name, true_value in true_params.items():
        if name not in flat:
            raise ValueError(f"No posterior draws for parameter '{name}'")
        values = flat[name]
        lower = float(np.quantile(values, lower_q))
        upper = float(np.quantile(values, 1 - lower_q))
        rows.append({
            'parameter': name,
            'true': float(true_value),
            'mean': float(np.mean(values)),
            'lower': lower,
            'upper': upper,
            'covered': bool(lower <= true_value <= upper),
            'rank_quantile': float(np.mean(values < true_value)),
        })

    return pd.DataFrame(rows).set_index('parameter')


def recovery_passed(table: pd.DataFrame) -> bool:
    """True when every parameter's interval covers its simulated value."""
    return bool(len(table) > 0 and table['covered'].all())
