from dataclasses import replace

import numpy as np
import pytest

from conftest import FakeFit, FakeModelFactory
from src.models.bayesian import specs
from src.models.bayesian import simulator
from src.models.bayesian.simulator import FakeDataSimulator
from src.models.bayesian.specs import get_model_spec, list_models


def _make_dgp_fit(data):
    n = data["N"]
    return FakeFit({
        "traps": np.arange(n).reshape(1, n),
        "complaints": np.full((1, n), 2),
        "alpha": np.array([1.3]),
        "beta": np.array([-0.3]),
        "beta_super": np.array([-0.45]),
        "phi": np.array([2.5]),
    })


@pytest.fixture
def fake_dgp(monkeypatch):
    factory = FakeModelFactory(_make_dgp_fit)
    monkeypatch.setattr(simulator, "CmdStanModel", factory)
    return factory


def test_simple_dgp_without_template(fake_dgp):
    sim = FakeDataSimulator("simple_poisson").simulate(n=5, mean_traps=4.0, seed=3)

    assert sim.data["traps"].tolist() == [0, 1, 2, 3, 4]
    assert (sim.data["complaints"] == 2).all()
    assert sim.true_params == {"alpha": 1.3, "beta": -0.3}
    assert sim.seed == 3

    kwargs = fake_dgp.instances[0].sample_kwargs
    assert kwargs["fixed_param"] is True
    assert kwargs["iter_sampling"] == 1
    assert kwargs["data"] == {"N": 5, "mean_traps": 4.0}


def test_multiple_dgp_uses_template_covariates(pest_df, fake_dgp):
    sim = FakeDataSimulator("multiple_poisson").simulate(df=pest_df, seed=1)

    data = fake_dgp.instances[0].sample_kwargs["data"]
    assert data["N"] == len(pest_df)
    assert data["mean_traps"] == pytest.approx(pest_df["traps"].mean())
    np.testing.assert_allclose(data["log_sq_foot"], pest_df["log_sq_foot"].to_numpy())

    # Template columns survive, traps/complaints are replaced
    assert sim.data["building_id"].tolist() == pest_df["building_id"].tolist()
    assert sim.data["traps"].tolist() == list(range(len(pest_df)))
    assert set(sim.true_params) == {"alpha", "beta", "beta_super"}


def test_dgp_compiled_once(pest_df, fake_dgp):
    sim = FakeDataSimulator("simple_poisson")
    sim.simulate(df=pest_df, seed=1)
    sim.simulate(df=pest_df, seed=2)
    assert len(fake_dgp.instances) == 1


def test_model_without_dgp(monkeypatch):
    plain = replace(get_model_spec("multiple_nb"), name="plain_nb", dgp_file=None, dgp_params=())
    monkeypatch.setitem(specs.MODEL_SPECS, "plain_nb", plain)
    with pytest.raises(ValueError, match="no data-generating program"):
        FakeDataSimulator("plain_nb")


def test_dgp_data_validation(pest_df):
    sim = FakeDataSimulator("multiple_poisson")
    with pytest.raises(ValueError):
        sim.build_dgp_data()
    with pytest.raises(ValueError, match="mean_traps"):
        FakeDataSimulator("simple_poisson").build_dgp_data(n=10)
    with pytest.raises(ValueError, match="live_in_super"):
        sim.build_dgp_data(df=pest_df.drop(columns=["live_in_super"]))


def _make_hier_dgp_fit(data):
    n, J, K = data["N"], data["J"], data["K"]
    return FakeFit({
        "traps": np.full((1, n), 3),
        "complaints": np.full((1, n), 4),
        "alpha": np.array([1.4]),
        "beta": np.array([-0.2]),
        "sigma_mu": np.array([0.3]),
        "phi": np.array([1.8]),
        "zeta": np.linspace(-0.1, 0.1, K).reshape(1, K),
        "mu": np.arange(1, J + 1, dtype=float).reshape(1, J),
    })


def test_every_model_has_a_dgp():
    for name in list_models():
        spec = get_model_spec(name)
        assert spec.dgp_file is not None
        assert set(spec.dgp_params) <= set(spec.key_params)


def test_nb_dgp_reports_phi(pest_df, fake_dgp):
    sim = FakeDataSimulator("multiple_nb").simulate(df=pest_df, seed=5)

    assert fake_dgp.instances[0].stan_file.endswith("multiple_NB_regression_dgp.stan")
    data = fake_dgp.instances[0].sample_kwargs["data"]
    assert set(data) == {"N", "mean_traps", "live_in_super", "log_sq_foot"}
    assert sim.true_params == {"alpha": 1.3, "beta": -0.3, "beta_super": -0.45, "phi": 2.5}


@pytest.mark.parametrize("model_name", ["hier_nb", "hier_nb_ncp"])
def test_hierarchical_dgp_uses_template_buildings(pest_df, monkeypatch, model_name):
    factory = FakeModelFactory(_make_hier_dgp_fit)
    monkeypatch.setattr(simulator, "CmdStanModel", factory)

    config = {
        "building_covariates": ["live_in_super", "age_of_building"],
        "covariate_scales": {"age_of_building": 10},
    }
    sim = FakeDataSimulator(model_name, config=config).simulate(df=pest_df, seed=9)

    assert factory.instances[0].stan_file.endswith("hier_NB_regression_ncp_dgp.stan")
    data = factory.instances[0].sample_kwargs["data"]
    n_buildings = pest_df["building_id"].nunique()
    assert data["J"] == n_buildings
    assert data["K"] == 2
    assert data["building_data"].shape == (n_buildings, 2)
    np.testing.assert_array_equal(data["building_idx"], pest_df["building_idx"].to_numpy())
    assert "live_in_super" not in data

    # Vector parameters are flattened to one entry per element
    assert sim.true_params["zeta[1]"] == pytest.approx(-0.1)
    assert sim.true_params["zeta[2]"] == pytest.approx(0.1)
    assert [sim.true_params[f"mu[{j}]"] for j in range(1, n_buildings + 1)] == list(
        range(1, n_buildings + 1)
    )
    assert sim.true_params["sigma_mu"] == 0.3
    assert (sim.data["complaints"] == 4).all()


def test_hierarchical_dgp_needs_template(pest_df):
    sim = FakeDataSimulator("hier_nb_ncp")
    with pytest.raises(ValueError, match="template DataFrame"):
        sim.build_dgp_data(n=10, mean_traps=5.0)
    with pytest.raises(ValueError, match="building_idx"):
        sim.build_dgp_data(df=pest_df.drop(columns=["building_idx"]))
