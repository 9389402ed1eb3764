"""
Plotting utilities for the complaints workflow

Exploratory plots of the pest data and the graphical posterior predictive
checks: density overlays, test-statistic histograms, intervals against
traps, per-building statistics, hanging rootograms, residuals and
parameter recovery. Every function saves a PNG and returns its path.
"""
import os
import tempfile
from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd
from scipy import stats

# Matplotlib must be configured before importing pyplot.
_mpl_cache_dir = Path(tempfile.gettempdir()) / "matplotlib"
_mpl_cache_dir.mkdir(parents=True, exist_ok=True)
os.environ.setdefault("MPLCONFIGDIR", str(_mpl_cache_dir))

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt


plt.style.use('seaborn-v0_8-darkgrid')
FIGSIZE = (10, 6)
DPI = 150

OBSERVED_COLOR = '#08306b'
REP_COLOR = '#6baed6'


def _save(fig, output_path: Path) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(output_path, dpi=DPI, bbox_inches='tight')
    plt.close(fig)
    print(f"    ✓ Saved: {output_path.name}")
    return output_path


def _kde_curve(values: np.ndarray, grid: np.ndarray) -> Optional[np.ndarray]:
    """Gaussian KDE on `grid`, or None when the values have no spread."""
    values = np.asarray(values, dtype=float)
    if len(values) < 2 or np.ptp(values) == 0:
        return None
    return stats.gaussian_kde(values)(grid)


# =============================================================================
# EXPLORATORY
# =============================================================================

def plot_complaints_histogram(df: pd.DataFrame, output_path: Path) -> Path:
    """Histogram of monthly complaints."""
    fig, ax = plt.subplots(figsize=FIGSIZE)
    max_count = int(df['complaints'].max())
    ax.hist(df['complaints'], bins=np.arange(max_count + 2) - 0.5,
            color=OBSERVED_COLOR, alpha=0.8, edgecolor='white')
    ax.set_xlabel('Complaints per building-month', fontsize=12, fontweight='bold')
    ax.set_ylabel('Frequency', fontsize=12, fontweight='bold')
    ax.set_title('Distribution of Monthly Complaints', fontsize=14, fontweight='bold')
    return _save(fig, output_path)


def plot_complaints_vs_traps(df: pd.DataFrame, output_path: Path) -> Path:
    """Complaints against traps, coloured by live-in super when available."""
    fig, ax = plt.subplots(figsize=FIGSIZE)
    jitter = np.random.default_rng(0).uniform(-0.15, 0.15, size=len(df))

    if 'live_in_super' in df.columns:
        for value, label, color in [(0, 'No live-in super', '#fd8d3c'), (1, 'Live-in super', '#3182bd')]:
            sub = df['live_in_super'] == value
            ax.scatter(df.loc[sub, 'traps'] + jitter[sub.to_numpy()], df.loc[sub, 'complaints'],
                       alpha=0.7, color=color, label=label)
        ax.legend(loc='upper right', framealpha=0.95)
    else:
        ax.scatter(df['traps'] + jitter, df['complaints'], alpha=0.7, color=OBSERVED_COLOR)

    ax.set_xlabel('Bait traps', fontsize=12, fontweight='bold')
    ax.set_ylabel('Complaints', fontsize=12, fontweight='bold')
    ax.set_title('Complaints vs Traps', fontsize=14, fontweight='bold')
    return _save(fig, output_path)


# =============================================================================
# POSTERIOR PREDICTIVE CHECKS
# =============================================================================

def plot_ppc_dens_overlay(
    y: np.ndarray,
    y_rep: np.ndarray,
    output_path: Path,
    n_draws: int = 200,
    title: str = 'Posterior Predictive Density Overlay',
    seed: int = 0
) -> Path:
    """Density of y against densities of a random subset of replicated datasets."""
    y = np.asarray(y)
    y_rep = np.asarray(y_rep)
    rng = np.random.default_rng(seed)
    idx = rng.choice(y_rep.shape[0], size=min(n_draws, y_rep.shape[0]), replace=False)

    upper = max(float(y.max()), float(np.quantile(y_rep[idx], 0.99)))
    grid = np.linspace(0, upper + 1, 200)

    fig, ax = plt.subplots(figsize=FIGSIZE)
    for i, draw in enumerate(idx):
        curve = _kde_curve(y_rep[draw], grid)
        if curve is not None:
            ax.plot(grid, curve, color=REP_COLOR, alpha=0.2, linewidth=0.8,
                    label='y_rep' if i == 0 else None)
    curve = _kde_curve(y, grid)
    if curve is not None:
        ax.plot(grid, curve, color=OBSERVED_COLOR, linewidth=2.5, label='y')

    ax.set_xlabel('Complaints', fontsize=12, fontweight='bold')
    ax.set_ylabel('Density', fontsize=12, fontweight='bold')
    ax.set_title(title, fontsize=14, fontweight='bold')
    ax.legend(loc='upper right', framealpha=0.95)
    return _save(fig, output_path)


def plot_ppc_stat(
    t_obs: float,
    t_rep: np.ndarray,
    output_path: Path,
    stat_name: str = 'statistic'
) -> Path:
    """Histogram of T(y_rep) with T(y) marked."""
    t_rep = np.asarray(t_rep, dtype=float)
    p_value = float(np.mean(t_rep >= t_obs))

    fig, ax = plt.subplots(figsize=FIGSIZE)
    ax.hist(t_rep, bins=30, color=REP_COLOR, alpha=0.8, edgecolor='white', label='T(y_rep)')
    ax.axvline(t_obs, color=OBSERVED_COLOR, linewidth=2.5, label=f'T(y) = {t_obs:.3g}')
    ax.set_xlabel(stat_name, fontsize=12, fontweight='bold')
    ax.set_ylabel('Frequency', fontsize=12, fontweight='bold')
    ax.set_title(f'PPC: {stat_name} (p = {p_value:.2f})', fontsize=14, fontweight='bold')
    ax.legend(loc='upper right', framealpha=0.95)
    return _save(fig, output_path)


def plot_ppc_intervals(intervals: pd.DataFrame, output_path: Path, x_label: str = 'Traps') -> Path:
    """Predictive intervals and observed counts against a covariate (output of ppc_intervals)."""
    if 'x' not in intervals.columns:
        raise ValueError("intervals must carry an 'x' column; pass x to ppc_intervals()")
    plot_df = intervals.sort_values('x')

    fig, ax = plt.subplots(figsize=FIGSIZE)
    ax.vlines(plot_df['x'], plot_df['lower'], plot_df['upper'],
              color=REP_COLOR, alpha=0.6, linewidth=2, label='Predictive interval')
    ax.scatter(plot_df['x'], plot_df['median'], color=REP_COLOR, s=20, zorder=3, label='Predictive median')
    ax.scatter(plot_df['x'], plot_df['y'], color=OBSERVED_COLOR, s=25, zorder=4, label='Observed')
    ax.set_xlabel(x_label, fontsize=12, fontweight='bold')
    ax.set_ylabel('Complaints', fontsize=12, fontweight='bold')
    ax.set_title('Posterior Predictive Intervals', fontsize=14, fontweight='bold')
    ax.legend(loc='upper right', framealpha=0.95)
    return _save(fig, output_path)


def plot_grouped_statistic(grouped: pd.DataFrame, output_path: Path, stat_name: str = 'mean') -> Path:
    """Observed vs replicated statistic per group (output of ppc_grouped_statistic)."""
    positions = np.arange(len(grouped))
    fig, ax = plt.subplots(figsize=FIGSIZE)
    ax.vlines(positions, grouped['rep_q05'], grouped['rep_q95'],
              color=REP_COLOR, linewidth=6, alpha=0.6, label='y_rep 90% interval')
    ax.scatter(positions, grouped['rep_mean'], color=REP_COLOR, s=30, zorder=3, label='y_rep mean')
    ax.scatter(positions, grouped['observed'], color=OBSERVED_COLOR, marker='D', s=40,
               zorder=4, label='Observed')
    ax.set_xticks(positions)
    ax.set_xticklabels([str(g) for g in grouped.index], rotation=45, ha='right')
    ax.set_xlabel('Building', fontsize=12, fontweight='bold')
    ax.set_ylabel(f'{stat_name} complaints', fontsize=12, fontweight='bold')
    ax.set_title(f'PPC by Building: {stat_name}', fontsize=14, fontweight='bold')
    ax.legend(loc='upper right', framealpha=0.95)
    return _save(fig, output_path)


def plot_rootogram(rootogram: pd.DataFrame, output_path: Path, title: str = 'Hanging Rootogram') -> Path:
    """Hanging rootogram from compute_rootogram() output."""
    counts = rootogram.index.to_numpy()

    fig, ax = plt.subplots(figsize=FIGSIZE)
    ax.bar(counts, rootogram['sqrt_observed'], bottom=rootogram['hanging_bottom'],
           width=0.8, color='#bdbdbd', edgecolor='#636363', label='sqrt(Observed)')
    ax.fill_between(counts, np.sqrt(rootogram['lower']), np.sqrt(rootogram['upper']),
                    color=REP_COLOR, alpha=0.3, step='mid', label='sqrt(Expected) interval')
    ax.plot(counts, rootogram['sqrt_expected'], 'o-', color=OBSERVED_COLOR,
            linewidth=2, markersize=4, label='sqrt(Expected)')
    ax.axhline(0, color='red', linestyle='--', linewidth=1)
    ax.set_xlabel('Complaints', fontsize=12, fontweight='bold')
    ax.set_ylabel('sqrt(Frequency)', fontsize=12, fontweight='bold')
    ax.set_title(title, fontsize=14, fontweight='bold')
    ax.legend(loc='upper right', framealpha=0.95)
    return _save(fig, output_path)


def plot_residuals(residuals: pd.DataFrame, output_path: Path) -> Path:
    """Standardized residuals against the predictive mean."""
    fig, ax = plt.subplots(figsize=FIGSIZE)
    ax.scatter(residuals['pred_mean'], residuals['residual'], color=OBSERVED_COLOR, alpha=0.7)
    ax.axhline(0, color='black', linewidth=1)
    for bound in (-2, 2):
        ax.axhline(bound, color='red', linestyle='--', linewidth=1)
    ax.set_xlabel('Predictive mean', fontsize=12, fontweight='bold')
    ax.set_ylabel('Standardized residual', fontsize=12, fontweight='bold')
    ax.set_title('Standardized Residuals', fontsize=14, fontweight='bold')
    return _save(fig, output_path)


def plot_parameter_recovery(recovery: pd.DataFrame, output_path: Path) -> Path:
    """Posterior intervals per parameter with the simulated values marked."""
    positions = np.arange(len(recovery))
    fig, ax = plt.subplots(figsize=(FIGSIZE[0], max(3, 0.6 * len(recovery) + 2)))
    ax.hlines(positions, recovery['lower'], recovery['upper'], color=REP_COLOR,
              linewidth=6, alpha=0.7, label='Posterior interval')
    ax.scatter(recovery['mean'], positions, color=REP_COLOR, s=30, zorder=3, label='Posterior mean')
    ax.scatter(recovery['true'], positions, color='red', marker='x', s=60, zorder=4, label='Simulated value')
    ax.set_yticks(positions)
    ax.set_yticklabels(recovery.index)
    ax.set_xlabel('Value', fontsize=12, fontweight='bold')
    ax.set_title('Parameter Recovery on Fake Data', fontsize=14, fontweight='bold')
    ax.legend(loc='best', framealpha=0.95)
    return _save(fig, output_path)
