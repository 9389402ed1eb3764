"""
Data Loader for the cockroach complaints workflow

This module handles:
1. Loading the building-month pest control table
2. Validating basic tabular consistency (one row per building-month)
3. Deriving model inputs (exposure offset, building index, building design matrix)
"""
import numpy as np
import pandas as pd
from pathlib import Path
from typing import Dict, List, Optional, Sequence


REQUIRED_COLUMNS = ['building_id', 'traps', 'complaints']

BUILDING_LEVEL_COLUMNS = [
    'live_in_super',
    'age_of_building',
    'average_tenant_age',
    'monthly_average_rent',
    'total_sq_foot',
    'floors',
    'sq_footage_p_floor',
]


def load_pest_data(path: str, parse_dates: bool = True) -> pd.DataFrame:
    """
    Load the pest control CSV.

    Args:
        path: Path to pest_data.csv
        parse_dates: If True and a `date` column exists, parse it as datetime

    Returns:
        Raw DataFrame, one row per building-month
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(
            f"Pest data not found: {path}. "
            "Run scripts/make_pest_data.py to create a synthetic stand-in."
        )

    df = pd.read_csv(path)

    if parse_dates and 'date' in df.columns:
        df['date'] = pd.to_datetime(df['date'], errors='coerce')

    return df


def add_month_index(df: pd.DataFrame) -> pd.DataFrame:
    """
    Ensure a 1-based `month` column exists.

    If only `date` is present, months are numbered in calendar order across
    the whole study period.
    """
    df = df.copy()
    if 'month' in df.columns:
        return df
    if 'date' not in df.columns:
        raise ValueError("Need either a 'month' or a 'date' column")

    dates = pd.to_datetime(df['date'], errors='coerce')
    if dates.isna().any():
        raise ValueError("Column 'date' has unparseable values")
    periods = dates.dt.to_period('M')
    codes = pd.Categorical(periods, categories=sorted(periods.unique()))
    df['month'] = codes.codes + 1
    return df


def _is_integer_valued(values: pd.Series) -> bool:
    arr = values.to_numpy(dtype=float)
    return bool(np.all(np.isfinite(arr)) and np.all(arr == np.round(arr)))


def validate_pest_data(
    df: pd.DataFrame,
    building_covariates: Optional[Sequence[str]] = None
) -> None:
    """
    Check the invariants the models rely on.

    Args:
        df: Building-month table (must already have a `month` column)
        building_covariates: Columns that must be constant within a building

    Raises:
        ValueError: on the first violated invariant
    """
    missing = [c for c in REQUIRED_COLUMNS + ['month'] if c not in df.columns]
    if missing:
        raise ValueError(f"Pest data missing required columns: {missing}")

    if len(df) == 0:
        raise ValueError("Pest data is empty")

    dupes = df.duplicated(subset=['building_id', 'month'], keep=False)
    if dupes.any():
        n_dupes = int(dupes.sum())
        raise ValueError(f"Expected one row per building-month, found {n_dupes} duplicated rows")

    for col in ['traps', 'complaints']:
        if df[col].isna().any():
            raise ValueError(f"Column '{col}' has missing values")
        if not _is_integer_valued(df[col]):
            raise ValueError(f"Column '{col}' must be integer valued")
        if (df[col] < 0).any():
            raise ValueError(f"Column '{col}' must be non-negative")

    if 'live_in_super' in df.columns:
        if df['live_in_super'].isna().any():
            raise ValueError("Column 'live_in_super' has missing values")
        if not set(df['live_in_super'].unique()) <= {0, 1}:
            raise ValueError("Column 'live_in_super' must be 0/1")

    if 'total_sq_foot' in df.columns:
        if df['total_sq_foot'].isna().any():
            raise ValueError("Column 'total_sq_foot' has missing values")
        if (df['total_sq_foot'] <= 0).any():
            raise ValueError("Column 'total_sq_foot' must be positive")

    if building_covariates:
        for col in building_covariates:
            if col not in df.columns:
                continue
            n_values = df.groupby('building_id')[col].nunique(dropna=False)
            varying = n_values[n_values > 1].index.tolist()
            if varying:
                raise ValueError(
                    f"Building covariate '{col}' varies within buildings: {varying}"
                )


def prepare_pest_data(
    df: pd.DataFrame,
    sq_foot_scale: float = 1e4,
    building_covariates: Optional[Sequence[str]] = None
) -> pd.DataFrame:
    """
    Validate the table and add derived model inputs.

    Adds:
        building_idx: 1-based dense building index (sorted by building_id)
        log_sq_foot: log(total_sq_foot / sq_foot_scale), the exposure offset

    Args:
        df: Raw building-month table
        sq_foot_scale: Divisor applied to total_sq_foot before the log
        building_covariates: Columns checked for within-building constancy

    Returns:
        New DataFrame sorted by building and month
    """
    df = add_month_index(df)
    validate_pest_data(df, building_covariates or BUILDING_LEVEL_COLUMNS)

    df = df.sort_values(['building_id', 'month']).reset_index(drop=True)
    df['traps'] = df['traps'].astype(int)
    df['complaints'] = df['complaints'].astype(int)

    building_ids = np.sort(df['building_id'].unique())
    idx_map = {b: i + 1 for i, b in enumerate(building_ids)}
    df['building_idx'] = df['building_id'].map(idx_map).astype(int)

    if 'total_sq_foot' in df.columns:
        df['log_sq_foot'] = np.log(df['total_sq_foot'] / sq_foot_scale)

    return df


def building_design_matrix(
    df: pd.DataFrame,
    covariates: Sequence[str],
    scales: Optional[Dict[str, float]] = None
) -> pd.DataFrame:
    """
    Build the building-level covariate matrix for hierarchical models.

    Args:
        df: Prepared building-month table (needs `building_idx`)
        covariates: Building-level columns to include, in order
        scales: Optional divisor per covariate (e.g. rent / 1000)

    Returns:
        DataFrame indexed by building_idx (1..J), one column per covariate
    """
    if 'building_idx' not in df.columns:
        raise ValueError("Call prepare_pest_data() before building_design_matrix()")

    missing = [c for c in covariates if c not in df.columns]
    if missing:
        raise ValueError(f"Building covariates not in data: {missing}")

    scales = scales or {}
    building_df = (
        df[['building_idx'] + list(covariates)]
        .drop_duplicates(subset=['building_idx'])
        .sort_values('building_idx')
        .set_index('building_idx')
        .astype(float)
    )
    for col, scale in scales.items():
        if col in building_df.columns:
            building_df[col] = building_df[col] / float(scale)

    return building_df


def summarize_pest_data(df: pd.DataFrame) -> Dict[str, float]:
    """Quick descriptive summary used by the sanity check."""
    complaints = df['complaints'].to_numpy()
    summary = {
        'n_rows': int(len(df)),
        'n_buildings': int(df['building_id'].nunique()),
        'n_months': int(df['month'].nunique()) if 'month' in df.columns else 0,
        'complaints_mean': float(complaints.mean()),
        'complaints_var': float(complaints.var(ddof=1)) if len(complaints) > 1 else 0.0,
        'prop_zero': float(np.mean(complaints == 0)),
        'traps_mean': float(df['traps'].mean()),
    }
    # Variance well above the mean hints at overdispersion
    summary['dispersion_ratio'] = (
        summary['complaints_var'] / summary['complaints_mean']
        if summary['complaints_mean'] > 0 else np.nan
    )
    return summary


def load_and_prepare(cfg: Dict, path: Optional[str] = None) -> pd.DataFrame:
    """
    Load and prepare the pest data using config settings.

    Args:
        cfg: Loaded configuration
        path: Optional explicit CSV path (overrides cfg['data']['raw']['pest_data'])
    """
    from src.config import get_data_path

    data_cfg = cfg.get('data', {})
    csv_path = Path(path) if path else get_data_path(data_cfg['raw']['pest_data'])
    df = load_pest_data(str(csv_path))
    return prepare_pest_data(
        df,
        sq_foot_scale=data_cfg.get('sq_foot_scale', 1e4),
    )


def covariate_columns(cfg: Dict) -> List[str]:
    """Building covariates listed in config."""
    return list(cfg.get('data', {}).get('building_covariates', []))
