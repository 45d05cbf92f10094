"""
Seasonal curve fitter.

Fits value(m) = a * sin(2πm/12 + c) + d to monthly observations by
Levenberg-Marquardt nonlinear least squares, then derives standard errors,
t-statistics and two-sided p-values for (a, c, d) from the Jacobian at the
solution under the large-sample normal approximation.

Usage:
    from seasonfit.fitting import fit, observations_from_pairs

    obs = observations_from_pairs(zip(range(1, 13), monthly_means))
    result = fit(obs)
    print(result.estimate("amplitude").p_value)
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple
import logging
import warnings
import numpy as np
from scipy import optimize, stats

from seasonfit.analysis.jacobian import numerical_jacobian, sinusoid_curve
from seasonfit.fitting.errors import (
    ConvergenceError,
    DegenerateInputError,
    InsufficientDataError,
)
from seasonfit.fitting.observations import Observation, as_arrays
from seasonfit.fitting.result import FitResult, ParameterEstimate, ResidualRecord
from seasonfit.models.sinusoid import MonthlySinusoid, PARAM_NAMES

logger = logging.getLogger(__name__)

Array = np.ndarray

N_PARAMS = len(PARAM_NAMES)
PERIOD = 12.0

# Relative size below which a Jacobian column is treated as zero.
_IDENTIFIABLE_TOL = 1e-10


@dataclass(frozen=True)
class FitOptions:
    """
    Optimizer settings, passed through to ``scipy.optimize.least_squares``
    with ``method="lm"``.

    Parameters
    ----------
    max_iter : int
        Maximum number of residual evaluations (``max_nfev``).
    rtol : float
        Relative SSE reduction below which the fit is converged (``ftol``).
    xtol : float
        Relative parameter change below which the fit is converged.
    gtol : float
        Gradient orthogonality tolerance.
    jacobian : str
        "analytic" or "numeric" (central differences).
    jacobian_step : float
        Step for the numeric Jacobian.
    """
    max_iter: int = 200
    rtol: float = 1e-10
    xtol: float = 1e-10
    gtol: float = 1e-10
    jacobian: str = "analytic"
    jacobian_step: float = 1e-6

    def __post_init__(self):
        if self.max_iter < 1:
            raise ValueError(f"max_iter must be >= 1, got {self.max_iter}")
        # MINPACK requires tolerances above machine epsilon
        eps = np.finfo(float).eps
        for name in ("rtol", "xtol", "gtol"):
            value = getattr(self, name)
            if not value > eps:
                raise ValueError(f"{name} must exceed machine epsilon, got {value}")
        if self.jacobian not in ("analytic", "numeric"):
            raise ValueError(f"jacobian must be 'analytic' or 'numeric', got {self.jacobian!r}")


def default_initial_guess(observations: Sequence[Observation]) -> Tuple[float, float, float]:
    """
    (a0, c0, d0) = (half the observed range, 0, observed mean).
    """
    _, y = as_arrays(observations)
    if y.size == 0:
        raise InsufficientDataError(0, N_PARAMS)
    _check_finite(y)
    return float((y.max() - y.min()) / 2.0), 0.0, float(y.mean())


def _check_finite(y: Array):
    bad = ~np.isfinite(y)
    if bad.any():
        raise DegenerateInputError(
            f"{int(bad.sum())} observed value(s) are not finite: {y[bad].tolist()}"
        )


def _jacobian(params: Array, months: Array, options: FitOptions) -> Array:
    if options.jacobian == "numeric":
        return numerical_jacobian(sinusoid_curve, params, months, step=options.jacobian_step)
    return MonthlySinusoid.from_vector(params, period=PERIOD).jacobian(months)


def _residuals(params: Array, months: Array, y: Array) -> Array:
    return y - sinusoid_curve(months, params, period=PERIOD)


def _solve(months: Array, y: Array, p0: Array, options: FitOptions):
    """Returns (params, sse, n_eval)."""

    def residual_jacobian(params, months, y):
        # residuals are y - f, so their Jacobian is -J
        return -_jacobian(params, months, options)

    sol = optimize.least_squares(
        _residuals,
        p0,
        jac=residual_jacobian,
        method="lm",
        ftol=options.rtol,
        xtol=options.xtol,
        gtol=options.gtol,
        max_nfev=options.max_iter,
        args=(months, y),
    )
    sse = float(sol.fun @ sol.fun)
    logger.debug("least_squares status %d after %d evaluations: %s", sol.status, sol.nfev, sol.message)

    if sol.status == 0:
        raise ConvergenceError(
            "Levenberg-Marquardt did not converge", n_iter=options.max_iter, sse=sse
        )
    return sol.x, sse, int(sol.nfev)


def _inference(model: MonthlySinusoid, months: Array, sse: float, options: FitOptions):
    """Covariance and Wald statistics at the solution."""
    n = months.size
    dof = n - N_PARAMS
    s2 = sse / dof

    J = _jacobian(model.as_vector(), months, options)
    A = J.T @ J
    col_norms = np.sqrt(np.diag(A))
    identified = col_norms > _IDENTIFIABLE_TOL * max(1.0, float(col_norms.max()))

    cov = np.full((N_PARAMS, N_PARAMS), np.nan)
    idx = np.flatnonzero(identified)
    cov[np.ix_(idx, idx)] = s2 * np.linalg.pinv(A[np.ix_(idx, idx)])

    if not identified.all():
        names = [PARAM_NAMES[i] for i in np.flatnonzero(~identified)]
        warnings.warn(
            f"Parameter(s) {names} not identifiable at the solution "
            f"(zero Jacobian column); reporting infinite standard error.",
            RuntimeWarning,
            stacklevel=3,
        )

    estimates = []
    for i, name in enumerate(PARAM_NAMES):
        est = float(model.as_vector()[i])
        if not identified[i]:
            estimates.append(ParameterEstimate(name, est, np.inf, 0.0, 1.0))
            continue
        se = float(np.sqrt(max(cov[i, i], 0.0)))
        if se > 0:
            t = est / se
        else:
            # exact fit: any nonzero estimate is infinitely significant
            t = np.inf if est != 0 else 0.0
        p = float(2.0 * stats.norm.sf(abs(t)))
        estimates.append(ParameterEstimate(name, est, se, float(t), p))

    return tuple(estimates), cov, s2, dof


def fit(
    observations: Sequence[Observation],
    initial_guess: Optional[Tuple[float, float, float]] = None,
    options: Optional[FitOptions] = None,
) -> FitResult:
    """
    Fit value(m) = a * sin(2πm/12 + c) + d by nonlinear least squares.

    Parameters
    ----------
    observations : sequence of Observation
        At least four (month, value) pairs with distinct months in 1..12.
    initial_guess : (a0, c0, d0), optional
        Starting point. Defaults to (half range, 0, mean).
    options : FitOptions, optional
        Optimizer settings.

    Returns
    -------
    FitResult
        Canonical parameters (amplitude >= 0, phase in [-π, π)), their
        standard errors, t-values and p-values, and per-month residuals.

    Raises
    ------
    InsufficientDataError
        Fewer than four observations.
    DegenerateInputError
        Non-finite observed values or initial guess.
    ConvergenceError
        Evaluation cap reached without convergence.
    ValueError
        Months outside 1..12 or repeated.
    """
    options = options or FitOptions()
    months, y = as_arrays(observations)

    if y.size <= N_PARAMS:
        raise InsufficientDataError(int(y.size), N_PARAMS)
    _check_finite(y)

    if initial_guess is None:
        p0 = np.array(default_initial_guess(observations), dtype=float)
    else:
        p0 = np.asarray(initial_guess, dtype=float)
        if p0.shape != (N_PARAMS,):
            raise ValueError(f"initial_guess must have {N_PARAMS} values, got {p0.shape}")
        if not np.all(np.isfinite(p0)):
            raise DegenerateInputError(f"Initial guess is not finite: {p0.tolist()}")

    params, sse, n_iter = _solve(months.astype(float), y, p0, options)
    model = MonthlySinusoid.from_vector(params, period=PERIOD).canonical()

    predicted = model(months)
    residuals = tuple(
        ResidualRecord(month=int(m), observed=float(o), predicted=float(p), residual=float(o - p))
        for m, o, p in zip(months, y, predicted)
    )
    sse = float(sum(rec.residual ** 2 for rec in residuals))

    estimates, cov, s2, dof = _inference(model, months.astype(float), sse, options)

    result = FitResult(
        model=model,
        estimates=estimates,
        residuals=residuals,
        converged=True,
        n_iter=n_iter,
        sse=sse,
        residual_variance=float(s2),
        dof=dof,
        covariance=cov,
    )
    logger.info(
        "Converged after %d evaluations: a=%.4g c=%.4g d=%.4g (SSE=%.4g)",
        n_iter, model.amplitude, model.phase, model.midline, sse,
    )
    return result
