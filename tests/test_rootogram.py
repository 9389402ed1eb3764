import numpy as np
import pytest

from src.evaluation.rootogram import compute_rootogram, rootogram_misfit


def test_frequencies_per_count():
    y = np.array([0, 0, 1, 2])
    y_rep = np.array([[0, 1, 1, 2], [0, 0, 2, 2]])
    table = compute_rootogram(y, y_rep, max_count=2)

    assert table.index.tolist() == [0, 1, 2]
    assert table["observed"].tolist() == [2.0, 1.0, 1.0]
    np.testing.assert_allclose(table["expected"], [1.5, 1.0, 1.5])
    np.testing.assert_allclose(table["sqrt_expected"], np.sqrt([1.5, 1.0, 1.5]))
    np.testing.assert_allclose(
        table["hanging_bottom"], np.sqrt([1.5, 1.0, 1.5]) - np.sqrt([2.0, 1.0, 1.0])
    )
    assert (table["lower"] <= table["expected"]).all()
    assert (table["expected"] <= table["upper"]).all()


def test_perfect_fit_has_zero_misfit():
    y = np.array([0, 1, 1, 3])
    table = compute_rootogram(y, np.tile(y, (10, 1)))
    assert rootogram_misfit(table) == pytest.approx(0.0)


def test_default_range_covers_observed_max(rng):
    y = np.array([0, 2, 9])
    y_rep = rng.poisson(2, size=(100, 3))
    table = compute_rootogram(y, y_rep)
    assert table.index.max() >= 9
    assert table["observed"].sum() == 3


def test_overflow_draws_ignored():
    y = np.array([0, 1])
    y_rep = np.array([[0, -1], [0, 1]])
    table = compute_rootogram(y, y_rep, max_count=1)
    np.testing.assert_allclose(table["expected"], [1.0, 0.5])


def test_bad_inputs():
    with pytest.raises(ValueError):
        compute_rootogram(np.array([0, 1]), np.zeros((3, 5)))
    with pytest.raises(ValueError):
        compute_rootogram(np.array([-1, 1]), np.zeros((3, 2)))
