"""
Assumption checks for a fitted seasonal curve

Verifies that a sinusoidal fit is usable as a regression model:
- Optimizer convergence
- Residuals centred on zero
- Residual normality (Shapiro-Wilk)
- Constant variance (variance vs predicted)
- Seasonal amplitude significance

Usage:
    from seasonfit.fitting import fit
    from seasonfit.validation import FitValidator

    result = fit(observations)
    validator = FitValidator(result, variances=table["variance"])

    # Run all checks
    results = validator.validate_all()

    # Or run individual checks
    validator.check_residual_mean()
    validator.check_normality()
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Any, Optional, List
import logging
import numpy as np

from seasonfit.analysis.diagnostics import ResidualDiagnostics, residual_diagnostics
from seasonfit.fitting.result import FitResult

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result from a single validation check."""
    test_name: str
    passed: bool
    message: str
    details: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        status = "pass" if self.passed else "FAIL"
        return f"[{status}] {self.test_name}: {self.message}"


class FitValidator:
    """
    Validate a seasonal fit against the least-squares assumptions.

    Parameters
    ----------
    result : FitResult
        Converged fit to validate.
    variances : mapping, pd.Series or sequence, optional
        Per-month variance of the aggregated statistic. Required for the
        homoscedasticity check.
    alpha : float
        Significance level for the hypothesis tests (default: 0.05).
    mean_tolerance : float
        Largest acceptable |mean residual| in units of the residual
        standard error (default: 0.25).
    verbose : bool
        Log each result at INFO level (default: True).

    Examples
    --------
    >>> validator = FitValidator(result, verbose=False)
    >>> results = validator.validate_all()
    >>> print(f"Passed: {sum(r.passed for r in results)}/{len(results)}")
    """

    def __init__(
        self,
        result: FitResult,
        variances=None,
        alpha: float = 0.05,
        mean_tolerance: float = 0.25,
        low_variance_ratio: float = 0.5,
        verbose: bool = True,
    ):
        self.result = result
        self.variances = variances
        self.alpha = alpha
        self.mean_tolerance = mean_tolerance
        self.verbose = verbose
        self.diagnostics: ResidualDiagnostics = residual_diagnostics(
            result, variances=variances, low_variance_ratio=low_variance_ratio
        )
        self.results: List[ValidationResult] = []

    def _log(self, message: str):
        if self.verbose:
            logger.info(message)

    def _add_result(self, result: ValidationResult):
        self.results.append(result)
        self._log(str(result))

    def check_convergence(self) -> ValidationResult:
        r = self.result
        return ValidationResult(
            test_name="Convergence",
            passed=bool(r.converged),
            message=f"Converged after {r.n_iter} evaluations (SSE={r.sse:.4g})",
            details={"n_iter": r.n_iter, "sse": r.sse},
        )

    def check_residual_mean(self) -> ValidationResult:
        """Mean residual should be small relative to the residual standard error."""
        d = self.diagnostics
        se = float(np.sqrt(self.result.residual_variance))
        # residuals at round-off level for the data scale
        if se <= 1e-10 * max(1.0, abs(self.result.midline)):
            return ValidationResult(
                test_name="Residual Mean",
                passed=True,
                message="Exact fit: all residuals are zero",
                details={"residual_mean": d.residual_mean, "residual_se": se},
            )
        ratio = abs(d.residual_mean) / se
        passed = ratio <= self.mean_tolerance
        return ValidationResult(
            test_name="Residual Mean",
            passed=passed,
            message=f"Mean residual {d.residual_mean:.4g} is {ratio:.3f} residual SEs from zero",
            details={
                "residual_mean": d.residual_mean,
                "residual_se": se,
                "ratio": ratio,
                "tolerance": self.mean_tolerance,
            },
        )

    def check_normality(self) -> ValidationResult:
        """Shapiro-Wilk test on the residuals; fails if p < alpha."""
        d = self.diagnostics
        if np.isnan(d.shapiro_p):
            return ValidationResult(
                test_name="Residual Normality",
                passed=True,
                message="Residuals are constant; normality test not applicable",
                details={"reason": "constant residuals"},
            )
        passed = d.shapiro_p >= self.alpha
        return ValidationResult(
            test_name="Residual Normality",
            passed=passed,
            message=f"Shapiro-Wilk W={d.shapiro_stat:.4f}, p={d.shapiro_p:.4g} (alpha={self.alpha})",
            details={"W": d.shapiro_stat, "p_value": d.shapiro_p, "alpha": self.alpha},
        )

    def check_homoscedasticity(self) -> ValidationResult:
        """
        Variance should not trend with the predicted value.

        Fails if the Pearson correlation between per-month variance and
        predicted value is significant at ``alpha``. Months with anomalously
        low variance are listed in the details but do not fail the check.
        """
        d = self.diagnostics
        if d.variances is None:
            return ValidationResult(
                test_name="Homoscedasticity",
                passed=False,
                message="No per-month variances supplied",
                details={"reason": "missing variances"},
            )
        details = {
            "correlation": d.variance_corr,
            "p_value": d.variance_corr_p,
            "low_variance_months": list(d.low_variance_months),
        }
        if np.isnan(d.variance_corr_p):
            return ValidationResult(
                test_name="Homoscedasticity",
                passed=True,
                message="Variance or prediction is constant; no trend to test",
                details=details,
            )
        passed = d.variance_corr_p >= self.alpha
        message = f"corr(variance, predicted)={d.variance_corr:.3f}, p={d.variance_corr_p:.4g}"
        if d.low_variance_months:
            message += f"; low-variance months: {list(d.low_variance_months)}"
        return ValidationResult(
            test_name="Homoscedasticity", passed=passed, message=message, details=details
        )

    def check_amplitude_significance(self) -> ValidationResult:
        """Seasonal amplitude should differ from zero at ``alpha``."""
        est = self.result.estimate("amplitude")
        passed = est.p_value < self.alpha
        return ValidationResult(
            test_name="Amplitude Significance",
            passed=passed,
            message=(
                f"amplitude={est.estimate:.4g} ± {est.std_error:.3g} "
                f"(t={est.t_value:.3f}, p={est.p_value:.4g})"
            ),
            details={
                "estimate": est.estimate,
                "std_error": est.std_error,
                "t_value": est.t_value,
                "p_value": est.p_value,
            },
        )

    def validate_all(self) -> List[ValidationResult]:
        """
        Run all validation checks and return list of results.

        The homoscedasticity check only runs when variances were supplied.
        """
        self._log(f"Checking seasonal fit: {self.result.model}")

        self.results = []
        self._add_result(self.check_convergence())
        self._add_result(self.check_residual_mean())
        self._add_result(self.check_normality())
        if self.variances is not None:
            self._add_result(self.check_homoscedasticity())
        self._add_result(self.check_amplitude_significance())

        passed = sum(r.passed for r in self.results)
        self._log(f"{passed}/{len(self.results)} seasonal fit checks passed")
        return self.results

    def summary(self) -> str:
        """One line per check, under a pass count."""
        if not self.results:
            return "No checks run; call validate_all() first."

        passed = sum(r.passed for r in self.results)
        lines = [f"{passed}/{len(self.results)} seasonal fit checks passed"]
        lines.extend(f"  {result}" for result in self.results)
        return "\n".join(lines)


def validate_fit(result: FitResult, variances=None, verbose: bool = True, **kwargs) -> List[ValidationResult]:
    """Quick validation of a fit with default settings."""
    return FitValidator(result, variances=variances, verbose=verbose, **kwargs).validate_all()
