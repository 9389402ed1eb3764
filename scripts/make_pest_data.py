#!/usr/bin/env python3
"""Write a synthetic pest control dataset to `data/raw/pest_data.csv`.

The real building-month table is not distributed with the repository. This
script draws a stand-in with the same columns from a hierarchical negative
binomial process (see src/data/simulate.py) so every experiment can run.

Usage:
  python scripts/make_pest_data.py
  python scripts/make_pest_data.py --n-buildings 10 --n-months 12 --seed 2018
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from src.config import get_data_path, load_config  # noqa: E402
from src.data.loader import prepare_pest_data, summarize_pest_data  # noqa: E402
from src.data.simulate import simulate_pest_data  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate a synthetic pest control dataset")
    parser.add_argument("--config", type=str, default=None, help="Path to config file")
    parser.add_argument("--output", type=str, default=None, help="Output CSV (default: config data path)")
    parser.add_argument("--n-buildings", type=int, default=None)
    parser.add_argument("--n-months", type=int, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--force", action="store_true", help="Overwrite an existing file")
    args = parser.parse_args()

    cfg = load_config(args.config)
    sim_cfg = cfg.get("simulation", {})

    out = Path(args.output) if args.output else get_data_path(cfg["data"]["raw"]["pest_data"])
    if out.exists() and not args.force:
        raise SystemExit(f"{out} already exists (use --force to overwrite)")

    df = simulate_pest_data(
        n_buildings=args.n_buildings or sim_cfg.get("n_buildings", 10),
        n_months=args.n_months or sim_cfg.get("n_months", 12),
        seed=args.seed if args.seed is not None else sim_cfg.get("seed"),
        sq_foot_scale=cfg["data"].get("sq_foot_scale", 1e4),
    )

    out.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(out, index=False)

    summary = summarize_pest_data(prepare_pest_data(df))
    print(f"Wrote {len(df)} rows to {out}")
    for key, value in summary.items():
        print(f"  {key}: {value:.3f}" if isinstance(value, float) else f"  {key}: {value}")


if __name__ == "__main__":
    main()
