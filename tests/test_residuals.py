import numpy as np
import pytest

from src.evaluation.residuals import standardized_residuals, summarize_residuals


def test_standardized_residuals():
    y = np.array([4, 2])
    y_rep = np.array([[1, 2], [3, 2]])
    out = standardized_residuals(y, y_rep)

    np.testing.assert_allclose(out["pred_mean"], [2.0, 2.0])
    assert out.loc[0, "residual"] == pytest.approx(2.0 / np.sqrt(2.0))
    # Zero predictive spread gives NaN
    assert np.isnan(out.loc[1, "residual"])


def test_summary_ignores_nan():
    y = np.array([4, 2, 0])
    y_rep = np.array([[1, 2, 0], [3, 2, 2]])
    summary = summarize_residuals(standardized_residuals(y, y_rep))
    assert summary["frac_abs_gt_2"] == 0.0
    assert np.isfinite(summary["mean"])


def test_shape_check():
    with pytest.raises(ValueError):
        standardized_residuals(np.array([1, 2, 3]), np.zeros((4, 2)))
