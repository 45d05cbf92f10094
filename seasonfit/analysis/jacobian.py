# seasonfit/analysis/jacobian.py
from __future__ import annotations
from typing import Callable
import numpy as np

from seasonfit.models.sinusoid import MonthlySinusoid

Array = np.ndarray


def numerical_jacobian(
    curve: Callable[[Array, Array], Array],
    params: Array,
    months: Array,
    step: float = 1e-6,
) -> Array:
    """
    Jacobian of a parametric curve w.r.t. its parameters, evaluated at the
    given months using central differences.

    J[i, j] = d(curve(months, params)_i) / d(params_j)

    Parameters
    ----------
    curve : Callable[[Array, Array], Array]
        Function of (months, params) returning one value per month.
    params : np.ndarray
        Parameter vector at which to evaluate.
    months : np.ndarray
        Months at which the curve is evaluated.
    step : float, optional
        The finite difference step size, scaled by max(1, |p_j|).
        Defaults to 1e-6.

    Returns
    -------
    np.ndarray
        The (n_months x n_params) Jacobian matrix.
    """
    params = np.asarray(params, dtype=float)
    months = np.atleast_1d(np.asarray(months, dtype=float))
    n_params = params.size
    jacobian = np.zeros((months.size, n_params), dtype=float)

    for j in range(n_params):
        h = step * max(1.0, abs(params[j]))
        h_vec = np.zeros(n_params)
        h_vec[j] = h

        f_plus = curve(months, params + h_vec)
        f_minus = curve(months, params - h_vec)
        jacobian[:, j] = (f_plus - f_minus) / (2.0 * h)

    return jacobian


def sinusoid_curve(months: Array, params: Array, period: float = 12.0) -> Array:
    """(months, [a, c, d]) -> a * sin(2πm/period + c) + d"""
    return MonthlySinusoid.from_vector(params, period=period)(months)
