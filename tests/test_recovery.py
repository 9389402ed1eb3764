import numpy as np
import pytest

from src.evaluation.recovery import check_parameter_recovery, flatten_draws, recovery_passed


def test_flatten_vector_parameters():
    draws = {"alpha": np.zeros(5), "mu": np.ones((5, 3))}
    flat = flatten_draws(draws)
    assert list(flat) == ["alpha", "mu[1]", "mu[2]", "mu[3]"]
    assert flat["mu[2]"].shape == (5,)


def test_flatten_rejects_matrices():
    with pytest.raises(ValueError):
        flatten_draws({"L": np.zeros((5, 2, 2))})


def test_covered_and_missed(rng):
    draws = {"alpha": rng.normal(0, 1, 4000), "beta": rng.normal(-0.25, 0.05, 4000)}
    table = check_parameter_recovery({"alpha": 0.1, "beta": 1.0}, draws, prob=0.9)

    assert bool(table.loc["alpha", "covered"]) is True
    assert bool(table.loc["beta", "covered"]) is False
    assert table.loc["beta", "rank_quantile"] == 1.0
    assert 0.4 < table.loc["alpha", "rank_quantile"] < 0.65
    assert not recovery_passed(table)


def test_vector_element_recovery(rng):
    draws = {"mu": rng.normal([1.0, 2.0], 0.1, size=(2000, 2))}
    table = check_parameter_recovery({"mu[1]": 1.0, "mu[2]": 2.0}, draws)
    assert recovery_passed(table)


def test_missing_parameter_and_bad_prob(rng):
    draws = {"alpha": rng.normal(size=100)}
    with pytest.raises(ValueError, match="No posterior draws"):
        check_parameter_recovery({"beta": 0.0}, draws)
    with pytest.raises(ValueError):
        check_parameter_recovery({"alpha": 0.0}, draws, prob=1.5)
