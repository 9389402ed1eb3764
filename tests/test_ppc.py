import numpy as np
import pytest

from src.evaluation.ppc import (
    ppc_grouped_statistic,
    ppc_interval_coverage,
    ppc_intervals,
    ppc_statistic_draws,
    ppc_test_statistics,
    valid_draws,
)


Y = np.array([0, 1, 2, 3])


def test_replicates_equal_to_data():
    y_rep = np.tile(Y, (3, 1))
    table = ppc_test_statistics(Y, y_rep, stats=["mean", "prop_zero", "max"])

    assert table.loc["mean", "observed"] == pytest.approx(1.5)
    assert table.loc["mean", "rep_mean"] == pytest.approx(1.5)
    # p-value uses >=, so identical replicates give 1
    assert table.loc["mean", "p_value"] == 1.0
    assert table.loc["prop_zero", "observed"] == pytest.approx(0.25)
    assert table.loc["max", "observed"] == 3


def test_shifted_replicates_flag_misfit():
    y_rep = np.tile(Y + 10, (5, 1))
    table = ppc_test_statistics(Y, y_rep, stats=["mean", "prop_zero"])
    assert table.loc["mean", "p_value"] == 1.0
    assert table.loc["prop_zero", "p_value"] == 0.0
    assert ppc_interval_coverage(Y, y_rep) == 0.0


def test_custom_statistic_callable():
    def spread(x, axis=None):
        return np.max(x, axis=axis) - np.min(x, axis=axis)

    table = ppc_test_statistics(Y, np.tile(Y, (2, 1)), stats=[spread])
    assert table.loc["spread", "observed"] == 3


def test_unknown_statistic():
    with pytest.raises(ValueError, match="Unknown test statistic"):
        ppc_test_statistics(Y, np.tile(Y, (2, 1)), stats=["median_abs"])


def test_shape_mismatch():
    with pytest.raises(ValueError):
        ppc_test_statistics(Y, np.zeros((4, 3)))
    with pytest.raises(ValueError):
        ppc_test_statistics(Y, np.zeros(4))


def test_statistic_draws_one_per_replicate(rng):
    y_rep = rng.poisson(3, size=(50, 4))
    t_rep = ppc_statistic_draws(y_rep, "mean")
    assert t_rep.shape == (50,)
    np.testing.assert_allclose(t_rep, y_rep.mean(axis=1))


def test_intervals_carry_covariate(rng):
    y_rep = rng.poisson(Y + 0.5, size=(400, 4))
    traps = np.array([8, 6, 4, 2])
    out = ppc_intervals(Y, y_rep, x=traps, prob=0.9)
    assert out["x"].tolist() == traps.tolist()
    assert (out["lower"] <= out["median"]).all()
    assert (out["median"] <= out["upper"]).all()
    assert out["inside"].dtype == bool


def test_grouped_statistic():
    y_rep = np.array([[0, 2, 4, 4], [2, 2, 2, 2]])
    table = ppc_grouped_statistic(Y, y_rep, groups=["a", "a", "b", "b"], stat="mean")
    assert table.index.tolist() == ["a", "b"]
    assert table.loc["a", "observed"] == 0.5
    assert table.loc["b", "observed"] == 2.5
    assert table.loc["a", "rep_mean"] == pytest.approx(1.5)
    # T(y_rep) for b is [4, 2]; only the first is >= 2.5
    assert table.loc["b", "p_value"] == 0.5


def test_grouped_statistic_length_check():
    with pytest.raises(ValueError, match="one label per observation"):
        ppc_grouped_statistic(Y, np.tile(Y, (2, 1)), groups=["a", "b"])


def test_valid_draws_drops_overflow():
    y_rep = np.array([[0, 1, 2, 3], [0, -1, 2, 3], [1, 1, 1, 1]])
    kept = valid_draws(y_rep)
    assert kept.shape == (2, 4)
    with pytest.raises(ValueError):
        valid_draws(np.full((2, 4), -1))
