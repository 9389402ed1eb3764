from pathlib import Path

import numpy as np
import pytest

from src.evaluation.compare import (
    build_model_summary,
    compare_models,
    load_model_summaries,
    save_model_summary,
)


def _summary(name, rng, overflow_rows=0):
    y = rng.poisson(3, size=30)
    y_rep = rng.poisson(3, size=(200, 30))
    y_rep[:overflow_rows] = -1
    diagnostics = {"n_divergences": 0, "max_rhat": 1.01, "min_ess_bulk": 900.0,
                   "parameter_summary": {"alpha": {"mean": 1.0}}}
    return build_model_summary(name, y, y_rep, diagnostics=diagnostics, stats=["mean", "prop_zero"])


def test_build_summary_contents(rng):
    summary = _summary("simple_poisson", rng, overflow_rows=5)
    assert summary["model"] == "simple_poisson"
    assert summary["n_draws"] == 195
    assert summary["n_overflow_draws"] == 5
    assert set(summary["ppc"]) == {"mean", "prop_zero"}
    assert 0.0 <= summary["coverage"] <= 1.0
    assert summary["rootogram_misfit"] >= 0.0
    # Per-parameter detail stays out of the flat summary
    assert "parameter_summary" not in summary["diagnostics"]


def test_save_load_and_compare(tmp_path: Path, rng):
    for name in ["simple_poisson", "multiple_nb"]:
        save_model_summary(_summary(name, rng), tmp_path / name)

    loaded = load_model_summaries(tmp_path, ["simple_poisson", "multiple_poisson", "multiple_nb"])
    assert list(loaded) == ["simple_poisson", "multiple_nb"]

    table = compare_models(loaded, order=["multiple_nb", "multiple_poisson", "simple_poisson"])
    assert table.index.tolist() == ["multiple_nb", "simple_poisson"]
    for col in ["coverage", "rootogram_misfit", "p_mean", "p_prop_zero", "max_rhat", "divergences"]:
        assert col in table.columns
    assert table.loc["simple_poisson", "max_rhat"] == pytest.approx(1.01)


def test_compare_empty():
    assert compare_models({}).empty
