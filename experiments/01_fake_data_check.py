#!/usr/bin/env python3
"""
Experiment 01: Fake-Data Check

Before fitting real data, check that the model can recover known parameters:
1. Loads the pest data (used as the design template)
2. Simulates one fake dataset from the model's DGP Stan program
3. Fits the regression to the fake data
4. Reports MCMC diagnostics
5. Checks that simulated parameters fall inside their posterior intervals

Usage:
    python experiments/01_fake_data_check.py --model simple_poisson
    python experiments/01_fake_data_check.py --model multiple_poisson --n-chains 2
    python experiments/01_fake_data_check.py --model hier_nb_ncp
"""
import sys
import json
import argparse
from pathlib import Path

# Add project root to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from src.config import load_config, get_project_root, get_mcmc_config
from src.data.loader import load_and_prepare, covariate_columns
from src.evaluation.recovery import check_parameter_recovery, recovery_passed
from src.models.bayesian.count_regression import StanCountRegression
from src.models.bayesian.simulator import FakeDataSimulator
from src.models.bayesian.specs import MODEL_SPECS
from src.visualization.plots import plot_parameter_recovery


def main():
    models_with_dgp = [name for name, spec in MODEL_SPECS.items() if spec.dgp_file]

    parser = argparse.ArgumentParser(description="Simulate fake data and check parameter recovery")
    parser.add_argument("--config", type=str, default=None, help="Path to config file")
    parser.add_argument("--data", type=str, default=None, help="Pest data CSV (overrides config)")
    parser.add_argument("--model", type=str, default="simple_poisson", choices=models_with_dgp)
    parser.add_argument("--n-warmup", type=int, default=None, help="MCMC warmup iterations")
    parser.add_argument("--n-samples", type=int, default=None, help="MCMC sampling iterations")
    parser.add_argument("--n-chains", type=int, default=None, help="Number of MCMC chains")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the fake dataset")
    args = parser.parse_args()

    cfg = load_config(args.config)
    mcmc = get_mcmc_config(
        cfg, n_warmup=args.n_warmup, n_samples=args.n_samples, n_chains=args.n_chains
    )
    seed = args.seed if args.seed is not None else cfg.get('simulation', {}).get('dgp_seed')
    prob = cfg.get('recovery', {}).get('interval_prob', 0.9)

    print("=" * 60)
    print(f"FAKE-DATA CHECK: {args.model}")
    print("=" * 60)
    print(f"MCMC: {mcmc['n_chains']} chains, {mcmc['n_warmup']} warmup, {mcmc['n_samples']} samples")

    # Real data supplies N, mean traps and the non-trap covariates
    df = load_and_prepare(cfg, path=args.data)
    print(f"\nTemplate data: {len(df)} rows, mean traps={df['traps'].mean():.2f}")

    print("\n" + "=" * 60)
    print("SIMULATING FAKE DATA")
    print("=" * 60)
    model_config = {
        **mcmc,
        'building_covariates': covariate_columns(cfg),
        'covariate_scales': cfg['data'].get('covariate_scales', {}),
    }
    simulator = FakeDataSimulator(args.model, config=model_config)
    fake = simulator.simulate(df=df, seed=seed)
    print("Simulated parameters:")
    for name, value in fake.true_params.items():
        print(f"  {name:<12} {value:>8.3f}")
    print(f"Fake complaints: mean={fake.data['complaints'].mean():.2f}, max={fake.data['complaints'].max()}")

    print("\n" + "=" * 60)
    print("FITTING MODEL TO FAKE DATA")
    print("=" * 60)
    model = StanCountRegression(args.model, config=model_config)
    model.fit(fake.data)
    model.print_diagnostics(
        max_rhat=cfg['diagnostics']['max_rhat'], min_ess=cfg['diagnostics']['min_ess']
    )

    print("\n" + "=" * 60)
    print("PARAMETER RECOVERY")
    print("=" * 60)
    draws = model.get_parameter_draws(list(simulator.spec.dgp_params))
    recovery = check_parameter_recovery(fake.true_params, draws, prob=prob)
    print(recovery.round(3).to_string())

    out_dir = get_project_root() / cfg['output']['results_dir'] / args.model / 'fake_data'
    out_dir.mkdir(parents=True, exist_ok=True)
    recovery.to_csv(out_dir / 'recovery.csv')
    with open(out_dir / 'true_params.json', 'w') as f:
        json.dump({'seed': seed, 'params': fake.true_params}, f, indent=2)
    plot_parameter_recovery(
        recovery, get_project_root() / cfg['output']['plots_dir'] / args.model / 'fake_data_recovery.png'
    )

    print("\n" + "=" * 60)
    if recovery_passed(recovery):
        print(f"✓ All simulated parameters inside their {prob:.0%} intervals")
    else:
        missed = recovery.index[~recovery['covered']].tolist()
        print(f"⚠️  Parameters outside their {prob:.0%} intervals: {missed}")
        print("   One miss can happen by chance; repeat with other seeds before worrying.")
    print(f"Results saved to {out_dir}")


if __name__ == "__main__":
    main()
