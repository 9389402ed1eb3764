"""
Model comparison across the workflow

Each fitted model is reduced to a flat summary (sampler health, PPC
p-values, interval coverage, rootogram misfit, residual spread). Summaries
are saved as JSON by the fitting experiment and stacked here.
"""
import json
import numpy as np
import pandas as pd
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

from src.evaluation.ppc import ppc_interval_coverage, ppc_test_statistics, valid_draws
from src.evaluation.residuals import standardized_residuals, summarize_residuals
from src.evaluation.rootogram import compute_rootogram, rootogram_misfit


SUMMARY_FILENAME = 'summary.json'


def build_model_summary(
    model_name: str,
    y: np.ndarray,
    y_rep: np.ndarray,
    diagnostics: Optional[Dict[str, Any]] = None,
    stats: Sequence[str] = ('mean', 'sd', 'prop_zero', 'max'),
    interval_prob: float = 0.9,
    max_count: Optional[int] = None
) -> Dict[str, Any]:
    """
    Reduce one fit to a JSON-serialisable summary.

    Args:
        model_name: Registry name of the model
        y: Observed complaints
        y_rep: Posterior predictive draws (overflow draws are dropped)
        diagnostics: Output of StanCountRegression.get_diagnostics()
        stats: PPC test statistics to record
        interval_prob: Interval mass for coverage
        max_count: Rootogram range

    Returns:
        Nested dict (see module docstring)
    """
    n_total = int(np.asarray(y_rep).shape[0])
    y_rep = valid_draws(y_rep)

    test_stats = ppc_test_statistics(y, y_rep, stats=stats)
    residuals = standardized_residuals(y, y_rep)
    rootogram = compute_rootogram(y, y_rep, max_count=max_count)

    summary = {
        'model': model_name,
        'n_draws': int(y_rep.shape[0]),
        'n_overflow_draws': n_total - int(y_rep.shape[0]),
        'ppc': test_stats.to_dict(orient='index'),
        'interval_prob': interval_prob,
        'coverage': ppc_interval_coverage(y, y_rep, prob=interval_prob),
        'rootogram_misfit': rootogram_misfit(rootogram),
        'residuals': summarize_residuals(residuals),
    }
    if diagnostics is not None:
        summary['diagnostics'] = {
            k: v for k, v in diagnostics.items() if k != 'parameter_summary'
        }
    return summary


def save_model_summary(summary: Dict[str, Any], out_dir: Path) -> Path:
    """Write a summary to <out_dir>/summary.json."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / SUMMARY_FILENAME
    with open(path, 'w') as f:
        json.dump(summary, f, indent=2, default=float)
    return path


def load_model_summaries(results_dir: Path, model_names: Sequence[str]) -> Dict[str, Dict]:
    """Load saved summaries; models without a summary file are skipped."""
    summaries = {}
    for name in model_names:
        path = Path(results_dir) / name / SUMMARY_FILENAME
        if path.exists():
            with open(path, 'r') as f:
                summaries[name] = json.load(f)
    return summaries


def compare_models(
    summaries: Mapping[str, Dict[str, Any]],
    order: Optional[Sequence[str]] = None
) -> pd.DataFrame:
    """
    Stack model summaries into one comparison table.

    Args:
        summaries: {model_name: summary dict}
        order: Row order (default: workflow order of the input mapping)

    Returns:
        DataFrame indexed by model
    """
    order = list(order) if order is not None else list(summaries.keys())
    rows = []
    for name in order:
        if name not in summaries:
            continue
        s = summaries[name]
        row = {
            'model': name,
            'coverage': s.get('coverage'),
            'rootogram_misfit': s.get('rootogram_misfit'),
            'resid_sd': s.get('residuals', {}).get('sd'),
            'resid_frac_gt_2': s.get('residuals', {}).get('frac_abs_gt_2'),
        }
        for stat, vals in s.get('ppc', {}).items():
            row[f'p_{stat}'] = vals.get('p_value')
        diag = s.get('diagnostics', {})
        row['divergences'] = diag.get('n_divergences')
        row['max_rhat'] = diag.get('max_rhat')
        row['min_ess_bulk'] = diag.get('min_ess_bulk')
        rows.append(row)

    if not rows:
        return pd.DataFrame()
    return pd.DataFrame(rows).set_index('model')
