# tests/test_diagnostics.py
import numpy as np
import pandas as pd
import pytest

from seasonfit.analysis.diagnostics import low_variance_months, residual_diagnostics
from seasonfit.fitting import fit, observations_from_pairs
from conftest import MONTHS, sinusoid_values


def test_residual_summary(noisy_obs):
    result = fit(noisy_obs)
    diag = residual_diagnostics(result)

    assert diag.months == tuple(range(1, 13))
    assert abs(diag.residual_mean) < 1e-8
    assert diag.residual_std > 0
    assert 0.0 < diag.shapiro_stat <= 1.0
    assert 0.0 <= diag.shapiro_p <= 1.0
    assert diag.variances is None
    assert np.isnan(diag.variance_corr)


def test_qq_coordinates_are_sorted_residuals(noisy_obs):
    result = fit(noisy_obs)
    diag = residual_diagnostics(result)

    assert len(diag.qq_theoretical) == 12
    assert np.allclose(diag.qq_ordered, np.sort(result.residual_values))
    assert np.all(np.diff(diag.qq_theoretical) > 0)


def test_exact_fit_skips_normality():
    obs = observations_from_pairs((m, 3.0) for m in MONTHS)
    with pytest.warns(RuntimeWarning):
        result = fit(obs)
    diag = residual_diagnostics(result)
    assert np.isnan(diag.shapiro_p)


def test_low_variance_months():
    variances = [1.0] + [10.0] * 11
    assert low_variance_months(range(1, 13), variances) == (1,)
    assert low_variance_months(range(1, 13), [5.0] * 12) == ()
    assert low_variance_months(range(1, 13), [np.nan] * 12) == ()


def test_low_variance_month_is_reported_not_fixed(noisy_obs):
    """A low-variance January is flagged; the fit is unchanged."""
    result = fit(noisy_obs)
    variances = pd.Series([0.5] + [8.0] * 11, index=range(1, 13))

    with pytest.warns(UserWarning, match="variance below"):
        diag = residual_diagnostics(result, variances=variances)

    assert diag.low_variance_months == (1,)
    assert diag.variances[0] == 0.5
    assert np.allclose(diag.residuals, result.residual_values)


def test_variance_tracking_prediction(noisy_obs):
    """Variance proportional to the mean gives a strong positive correlation."""
    result = fit(noisy_obs)
    variances = dict(zip(result.months, 0.5 * result.predicted))

    diag = residual_diagnostics(result, variances=variances)
    assert diag.variance_corr > 0.99
    assert diag.variance_corr_p < 0.01


def test_variances_must_align(noisy_obs):
    result = fit(noisy_obs)
    with pytest.raises(ValueError):
        residual_diagnostics(result, variances=[1.0, 2.0])


def test_variances_for_subset_of_months():
    months = [1, 3, 5, 7, 9, 11]
    obs = observations_from_pairs(zip(months, sinusoid_values(months=months) + [0.1, -0.1] * 3))
    result = fit(obs)
    variances = pd.Series(np.linspace(4.0, 6.0, 12), index=range(1, 13))

    diag = residual_diagnostics(result, variances=variances)
    assert diag.variances == tuple(float(variances[m]) for m in months)
