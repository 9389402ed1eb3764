#!/usr/bin/env python3
"""
Experiment 02: Fit a Model to the Pest Data and Check It

This script:
1. Loads and validates the pest data
2. Fits one model from the registry (Poisson -> NB -> hierarchical NB)
3. Reports MCMC diagnostics
4. Runs posterior predictive checks:
   - density overlay and test statistics (mean, sd, prop. zeros, max, q90)
   - predictive intervals against traps
   - mean complaints per building
   - hanging rootogram
   - standardized residuals
5. Saves a summary for Experiment 03

Usage:
    python experiments/02_fit_model.py --model simple_poisson
    python experiments/02_fit_model.py --model hier_nb_ncp --n-chains 4
"""
import sys
import argparse
from pathlib import Path


# Add project root to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from src.config import load_config, get_project_root, get_mcmc_config
from src.data.loader import load_and_prepare, covariate_columns
from src.evaluation.compare import build_model_summary, save_model_summary
from src.evaluation.ppc import (
    valid_draws,
    ppc_test_statistics,
    ppc_statistic_draws,
    ppc_intervals,
    ppc_grouped_statistic,
)
from src.evaluation.residuals import standardized_residuals, summarize_residuals
from src.evaluation.rootogram import compute_rootogram
from src.models.bayesian.count_regression import StanCountRegression
from src.models.bayesian.specs import list_models, get_model_spec
from src.visualization import plots


def main():
    parser = argparse.ArgumentParser(description="Fit a complaints model and run posterior predictive checks")
    parser.add_argument("--config", type=str, default=None, help="Path to config file")
    parser.add_argument("--data", type=str, default=None, help="Pest data CSV (overrides config)")
    parser.add_argument("--model", type=str, default="simple_poisson", choices=list_models())
    parser.add_argument("--n-warmup", type=int, default=None, help="MCMC warmup iterations")
    parser.add_argument("--n-samples", type=int, default=None, help="MCMC sampling iterations")
    parser.add_argument("--n-chains", type=int, default=None, help="Number of MCMC chains")
    parser.add_argument("--adapt-delta", type=float, default=None, help="NUTS target acceptance rate")
    args = parser.parse_args()

    cfg = load_config(args.config)
    mcmc = get_mcmc_config(
        cfg,
        n_warmup=args.n_warmup,
        n_samples=args.n_samples,
        n_chains=args.n_chains,
        adapt_delta=args.adapt_delta,
    )
    ppc_cfg = cfg.get('ppc', {})
    prob = ppc_cfg.get('interval_prob', 0.9)
    stats = ppc_cfg.get('stats', ['mean', 'sd', 'prop_zero', 'max'])
    spec = get_model_spec(args.model)

    root = get_project_root()
    results_dir = root / cfg['output']['results_dir'] / args.model
    plots_dir = root / cfg['output']['plots_dir'] / args.model

    print("=" * 60)
    print(f"COCKROACH COMPLAINTS - {args.model.upper()}")
    print("=" * 60)
    print(f"Model: {spec.description}")
    print(f"Likelihood: {spec.family}")
    print(f"MCMC: {mcmc['n_chains']} chains, {mcmc['n_warmup']} warmup, "
          f"{mcmc['n_samples']} samples, adapt_delta={mcmc['adapt_delta']}")

    df = load_and_prepare(cfg, path=args.data)
    print(f"\nLoaded {len(df)} building-months, {df['building_id'].nunique()} buildings")

    # Fit model
    print("\n" + "=" * 60)
    print("FITTING MODEL")
    print("=" * 60)
    model_config = {
        **mcmc,
        'building_covariates': covariate_columns(cfg),
        'covariate_scales': cfg['data'].get('covariate_scales', {}),
    }
    model = StanCountRegression(args.model, config=model_config)
    model.fit(df)

    diagnostics = model.get_diagnostics()
    model.print_diagnostics(
        max_rhat=cfg['diagnostics']['max_rhat'], min_ess=cfg['diagnostics']['min_ess']
    )

    param_summary = model.summarize_parameters(prob=prob)
    print("\nPosterior summary:")
    print(param_summary.round(3).to_string())

    # Posterior predictive checks
    print("\n" + "=" * 60)
    print("POSTERIOR PREDICTIVE CHECKS")
    print("=" * 60)

    y = model.get_observed()
    y_rep_all = model.get_posterior_predictive()
    y_rep = valid_draws(y_rep_all)
    n_dropped = y_rep_all.shape[0] - y_rep.shape[0]
    if n_dropped:
        print(f"NOTE: dropped {n_dropped} draws with overflowing predictions")

    print(f"\nPosterior predictive samples shape: {y_rep.shape}")
    print(f"Observed complaints: min={y.min()}, max={y.max()}, mean={y.mean():.2f}")

    test_stats = ppc_test_statistics(y, y_rep, stats=stats)
    print("\nTest statistics (p = P(T(y_rep) >= T(y))):")
    print(test_stats.round(3).to_string())

    intervals = ppc_intervals(y, y_rep, x=df['traps'].to_numpy(), prob=prob)
    coverage = intervals['inside'].mean()
    print(f"\n{prob:.0%} predictive interval coverage: {coverage:.1%}")

    by_building = ppc_grouped_statistic(y, y_rep, df['building_id'].to_numpy(), stat='mean')
    extreme = by_building[(by_building['p_value'] < 0.05) | (by_building['p_value'] > 0.95)]
    print(f"Buildings with extreme mean-complaint p-values: {len(extreme)} / {len(by_building)}")

    rootogram = compute_rootogram(y, y_rep, max_count=ppc_cfg.get('rootogram_max_count'), prob=prob)
    residuals = standardized_residuals(y, y_rep)
    resid_summary = summarize_residuals(residuals)
    print(f"Standardized residuals: sd={resid_summary['sd']:.2f}, "
          f"|r| > 2: {resid_summary['frac_abs_gt_2']:.1%}")
    if spec.family == 'poisson' and resid_summary['sd'] > 1.5:
        print("NOTE: residual spread well above 1 points to overdispersion.")

    # Plots
    print("\nSaving plots...")
    plots.plot_ppc_dens_overlay(
        y, y_rep, plots_dir / 'ppc_dens_overlay.png',
        n_draws=ppc_cfg.get('n_overlay_draws', 200), title=f'PPC Density Overlay: {args.model}'
    )
    for stat in stats:
        plots.plot_ppc_stat(
            float(test_stats.loc[stat, 'observed']),
            ppc_statistic_draws(y_rep, stat),
            plots_dir / f'ppc_stat_{stat}.png',
            stat_name=stat,
        )
    plots.plot_ppc_intervals(intervals, plots_dir / 'ppc_intervals_traps.png')
    plots.plot_grouped_statistic(by_building, plots_dir / 'ppc_mean_by_building.png')
    plots.plot_rootogram(rootogram, plots_dir / 'rootogram.png', title=f'Hanging Rootogram: {args.model}')
    plots.plot_residuals(residuals, plots_dir / 'residuals.png')

    # Save results
    results_dir.mkdir(parents=True, exist_ok=True)
    param_summary.to_csv(results_dir / 'parameters.csv')
    test_stats.to_csv(results_dir / 'ppc_test_statistics.csv')
    by_building.to_csv(results_dir / 'ppc_mean_by_building.csv')
    rootogram.to_csv(results_dir / 'rootogram.csv')
    residuals.assign(building_id=df['building_id'].to_numpy(), month=df['month'].to_numpy()).to_csv(
        results_dir / 'residuals.csv', index=False
    )
    summary = build_model_summary(
        args.model, y, y_rep_all,
        diagnostics=diagnostics,
        stats=stats,
        interval_prob=prob,
        max_count=ppc_cfg.get('rootogram_max_count'),
    )
    summary_path = save_model_summary(summary, results_dir)

    print("\n" + "=" * 60)
    print(f"{args.model.upper()} COMPLETE")
    print("=" * 60)
    print(f"Summary: {summary_path}")
    print(f"Plots:   {plots_dir}")


if __name__ == "__main__":
    main()
