from pathlib import Path

import pytest

from src.common.paths import find_repo_root
from src.config import get_mcmc_config, get_project_root, load_config


def test_default_config_has_workflow_sections():
    cfg = load_config()
    for section in ["data", "mcmc", "ppc", "diagnostics", "models", "output"]:
        assert section in cfg
    assert cfg["models"]["sequence"][0] == "simple_poisson"


def test_project_root_contains_stan_models():
    root = get_project_root()
    assert (root / "stan_models").is_dir()
    assert (root / "config" / "config_default.yaml").exists()


def test_missing_config_raises(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


def test_mcmc_overrides_ignore_none():
    cfg = {"mcmc": {"n_chains": 2, "n_warmup": 300}}
    mcmc = get_mcmc_config(cfg, n_chains=None, n_samples=50)
    assert mcmc["n_chains"] == 2
    assert mcmc["n_warmup"] == 300
    assert mcmc["n_samples"] == 50
    assert mcmc["adapt_delta"] == 0.8


def test_find_repo_root_walks_upward(tmp_path: Path):
    (tmp_path / "stan_models").mkdir()
    (tmp_path / "config").mkdir()
    nested = tmp_path / "experiments" / "deep"
    nested.mkdir(parents=True)
    assert find_repo_root(nested) == tmp_path.resolve()


def test_find_repo_root_falls_back_to_start(tmp_path: Path):
    assert find_repo_root(tmp_path) == tmp_path.resolve()
