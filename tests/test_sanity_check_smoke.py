import subprocess
import sys
from pathlib import Path

from src.data.simulate import simulate_pest_data


def test_sanity_check_smoke(tmp_path: Path):
    repo_root = Path(__file__).resolve().parents[1]

    data_csv = tmp_path / "pest_data.csv"
    simulate_pest_data(n_buildings=4, n_months=12, seed=5).to_csv(data_csv, index=False)
    out_dir = tmp_path / "eda"

    cmd = [
        sys.executable,
        str(repo_root / "experiments" / "00_sanity_check.py"),
        "--data",
        str(data_csv),
        "--output-dir",
        str(out_dir),
    ]
    subprocess.run(cmd, cwd=repo_root, check=True)

    assert (out_dir / "complaints_histogram.png").exists()
    assert (out_dir / "complaints_vs_traps.png").exists()


def test_make_pest_data_smoke(tmp_path: Path):
    repo_root = Path(__file__).resolve().parents[1]
    out = tmp_path / "pest.csv"

    cmd = [
        sys.executable,
        str(repo_root / "scripts" / "make_pest_data.py"),
        "--output",
        str(out),
        "--n-buildings",
        "3",
        "--n-months",
        "4",
        "--seed",
        "9",
    ]
    subprocess.run(cmd, cwd=repo_root, check=True)

    text = out.read_text().splitlines()
    assert len(text) == 1 + 12
    assert text[0].startswith("building_id,date,month,traps,complaints")
