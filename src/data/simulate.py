"""
Synthetic pest control dataset

Generates a building-month table with the same columns as the real pest
data, drawn from a hierarchical negative binomial process:

    mu_b          = alpha + x_b' zeta + sigma_mu * z_b
    complaints_bt ~ NegBinomial2(exp(mu_b + beta * traps_bt + log_sq_foot_b), phi)

Used as a stand-in input when the real CSV is not available, and by tests.
"""
import numpy as np
import pandas as pd
from scipy import stats
from typing import Dict, Optional


DEFAULT_TRUE_PARAMS = {
    'alpha': 1.6,
    'beta': -0.2,
    'zeta_live_in_super': -0.4,
    'zeta_age_of_building': 0.1,
    'zeta_average_tenant_age': -0.05,
    'zeta_monthly_average_rent': -0.3,
    'sigma_mu': 0.3,
    'phi': 6.0,
}


def _nb2_rvs(mean: np.ndarray, phi: float, rng: np.random.Generator) -> np.ndarray:
    """Draw NB2 counts parameterised by mean and precision phi."""
    p = phi / (phi + mean)
    return stats.nbinom.rvs(n=phi, p=p, random_state=rng)


def simulate_buildings(n_buildings: int, rng: np.random.Generator) -> pd.DataFrame:
    """Draw building-level covariates, one row per building."""
    building_id = np.sort(rng.choice(np.arange(1, 150), size=n_buildings, replace=False))
    floors = rng.integers(4, 13, size=n_buildings)
    sq_footage_p_floor = np.round(rng.normal(4500, 700, size=n_buildings)).clip(2500, None)

    return pd.DataFrame({
        'building_id': building_id,
        'live_in_super': rng.binomial(1, 0.4, size=n_buildings),
        'age_of_building': rng.integers(30, 70, size=n_buildings),
        'average_tenant_age': np.round(rng.normal(50, 7, size=n_buildings), 1),
        'monthly_average_rent': np.round(rng.normal(3000, 400, size=n_buildings), 2),
        'floors': floors,
        'sq_footage_p_floor': sq_footage_p_floor,
        'total_sq_foot': floors * sq_footage_p_floor,
    })


def simulate_pest_data(
    n_buildings: int = 10,
    n_months: int = 12,
    seed: Optional[int] = None,
    true_params: Optional[Dict[str, float]] = None,
    start_date: str = '2017-01-01',
    sq_foot_scale: float = 1e4
) -> pd.DataFrame:
    """
    Simulate a full building-month pest control table.

    Args:
        n_buildings: Number of buildings
        n_months: Months observed per building
        seed: Random seed (deterministic output for a fixed seed)
        true_params: Override entries of DEFAULT_TRUE_PARAMS
        start_date: Date of the first month
        sq_foot_scale: Divisor inside the log exposure offset

    Returns:
        DataFrame with columns building_id, date, month, traps, complaints and
        the building covariates
    """
    if n_buildings < 1 or n_months < 1:
        raise ValueError("n_buildings and n_months must be positive")

    params = dict(DEFAULT_TRUE_PARAMS)
    params.update(true_params or {})
    rng = np.random.default_rng(seed)

    buildings = simulate_buildings(n_buildings, rng)

    # Same scaling as the hierarchical model inputs
    x = np.column_stack([
        buildings['live_in_super'].to_numpy(dtype=float),
        buildings['age_of_building'].to_numpy() / 10.0,
        buildings['average_tenant_age'].to_numpy() / 10.0,
        buildings['monthly_average_rent'].to_numpy() / 1000.0,
    ])
    zeta = np.array([
        params['zeta_live_in_super'],
        params['zeta_age_of_building'],
        params['zeta_average_tenant_age'],
        params['zeta_monthly_average_rent'],
    ])
    # Centre covariates so alpha stays interpretable as a typical building
    mu = params['alpha'] + (x - x.mean(axis=0)) @ zeta
    mu = mu + params['sigma_mu'] * rng.standard_normal(n_buildings)

    dates = pd.date_range(start_date, periods=n_months, freq='MS')
    mean_traps = rng.uniform(2, 12, size=n_buildings)

    rows = []
    for b in range(n_buildings):
        traps = rng.poisson(mean_traps[b], size=n_months)
        log_sq_foot = np.log(buildings['total_sq_foot'].iloc[b] / sq_foot_scale)
        eta = mu[b] + params['beta'] * traps + log_sq_foot
        complaints = _nb2_rvs(np.exp(eta), params['phi'], rng)
        for t in range(n_months):
            rows.append({
                'building_id': buildings['building_id'].iloc[b],
                'date': dates[t].strftime('%Y-%m-%d'),
                'month': t + 1,
                'traps': int(traps[t]),
                'complaints': int(complaints[t]),
            })

    df = pd.DataFrame(rows).merge(buildings, on='building_id', how='left')
    return df.sort_values(['building_id', 'month']).reset_index(drop=True)
