#!/usr/bin/env python3
"""
Experiment 00: Sanity Check

Quick verification that the project is set up correctly:
1. Config loads
2. Stan programs exist
3. Pest data loads and passes validation
4. Exploratory plots of complaints and traps

Usage:
    python experiments/00_sanity_check.py
    python experiments/00_sanity_check.py --data path/to/pest_data.csv --output-dir results/plots/eda
"""
import sys
import argparse
from pathlib import Path

# Add project root to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))


def check_config(config_path):
    """Test config loading."""
    print("Checking config...", end=" ")
    try:
        from src.config import load_config
        cfg = load_config(config_path)
        assert 'data' in cfg
        assert 'mcmc' in cfg
        print("✓")
        return True
    except (FileNotFoundError, AssertionError) as e:
        print(f"✗ ({e})")
        return False


def check_stan_files():
    """Test that every registered Stan program exists."""
    print("Checking Stan programs...", end=" ")
    from src.models.bayesian.specs import MODEL_SPECS, resolve_stan_file
    try:
        for spec in MODEL_SPECS.values():
            resolve_stan_file(spec.stan_file)
            if spec.dgp_file:
                resolve_stan_file(spec.dgp_file)
        print("✓")
        return True
    except FileNotFoundError as e:
        print(f"✗ ({e})")
        return False


def check_data(cfg, data_path, output_dir):
    """Load, validate and summarize the pest data; draw EDA plots."""
    from src.data.loader import load_and_prepare, summarize_pest_data
    from src.visualization.plots import plot_complaints_histogram, plot_complaints_vs_traps

    print("Checking pest data...", end=" ")
    try:
        df = load_and_prepare(cfg, path=data_path)
    except (FileNotFoundError, ValueError) as e:
        print(f"✗ ({e})")
        return False
    print("✓")

    summary = summarize_pest_data(df)
    print(f"  → {summary['n_rows']} rows, {summary['n_buildings']} buildings, {summary['n_months']} months")
    print(f"  → complaints: mean={summary['complaints_mean']:.2f}, var={summary['complaints_var']:.2f}, "
          f"zeros={summary['prop_zero']:.1%}")
    print(f"  → variance/mean ratio: {summary['dispersion_ratio']:.2f}")
    if summary['dispersion_ratio'] > 1.5:
        print("  NOTE: variance well above the mean; expect Poisson models to be overdispersed.")

    output_dir.mkdir(parents=True, exist_ok=True)
    plot_complaints_histogram(df, output_dir / 'complaints_histogram.png')
    plot_complaints_vs_traps(df, output_dir / 'complaints_vs_traps.png')
    return True


def main():
    parser = argparse.ArgumentParser(description="Sanity check for the complaints workflow")
    parser.add_argument("--config", type=str, default=None, help="Path to config file")
    parser.add_argument("--data", type=str, default=None, help="Pest data CSV (overrides config)")
    parser.add_argument("--output-dir", type=str, default=None, help="Directory for EDA plots")
    args = parser.parse_args()

    from src.config import load_config, get_project_root

    print("=" * 60)
    print("COCKROACH COMPLAINTS WORKFLOW - SANITY CHECK")
    print("=" * 60)

    if not check_config(args.config):
        sys.exit(1)
    cfg = load_config(args.config)
    ok = True
    ok = check_stan_files() and ok

    output_dir = (
        Path(args.output_dir) if args.output_dir
        else get_project_root() / cfg['output']['plots_dir'] / 'eda'
    )
    ok = check_data(cfg, args.data, output_dir) and ok

    print("\n" + "=" * 60)
    if ok:
        print("✓ All checks passed")
    else:
        print("✗ Some checks failed")
        sys.exit(1)


if __name__ == "__main__":
    main()
