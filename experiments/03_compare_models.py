#!/usr/bin/env python3
"""
Experiment 03: Compare the Model Sequence

Stacks the summaries saved by Experiment 02 for each model in
`models.sequence` and prints one table: sampler health, PPC p-values,
interval coverage, rootogram misfit and residual spread.

Optionally fits any model whose summary is missing (--fit-missing).

Usage:
    python experiments/03_compare_models.py
    python experiments/03_compare_models.py --fit-missing --n-chains 2
"""
import sys
import argparse
import subprocess
from pathlib import Path

# Add project root to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from src.config import load_config, get_project_root
from src.evaluation.compare import compare_models, load_model_summaries


def main():
    parser = argparse.ArgumentParser(description="Compare fitted complaint models")
    parser.add_argument("--config", type=str, default=None, help="Path to config file")
    parser.add_argument("--fit-missing", action="store_true",
                        help="Run Experiment 02 for models without a saved summary")
    parser.add_argument("--n-chains", type=int, default=None, help="Passed through when fitting")
    args = parser.parse_args()

    cfg = load_config(args.config)
    sequence = cfg['models']['sequence']
    results_dir = get_project_root() / cfg['output']['results_dir']

    print("=" * 60)
    print("MODEL COMPARISON")
    print("=" * 60)

    summaries = load_model_summaries(results_dir, sequence)
    missing = [name for name in sequence if name not in summaries]

    if missing and args.fit_missing:
        fit_script = project_root / 'experiments' / '02_fit_model.py'
        for name in missing:
            print(f"\nFitting {name}...")
            cmd = [sys.executable, str(fit_script), '--model', name]
            if args.config:
                cmd += ['--config', args.config]
            if args.n_chains:
                cmd += ['--n-chains', str(args.n_chains)]
            subprocess.run(cmd, cwd=project_root, check=True)
        summaries = load_model_summaries(results_dir, sequence)
        missing = [name for name in sequence if name not in summaries]

    if missing:
        print(f"No saved summary for: {', '.join(missing)}")
        print("Run experiments/02_fit_model.py --model <name> (or pass --fit-missing).")

    table = compare_models(summaries, order=sequence)
    if table.empty:
        print("\nNothing to compare yet.")
        return

    print("\n" + table.round(3).to_string())

    out_path = results_dir / 'model_comparison.csv'
    out_path.parent.mkdir(parents=True, exist_ok=True)
    table.to_csv(out_path)
    print(f"\nSaved comparison to {out_path}")


if __name__ == "__main__":
    main()
