# seasonfit/analysis/diagnostics.py
from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Sequence, Tuple
import warnings
import numpy as np
from scipy import stats

if TYPE_CHECKING:
    from seasonfit.fitting.result import FitResult

Array = np.ndarray


@dataclass(frozen=True)
class ResidualDiagnostics:
    """Summary of how well the residuals meet the regression assumptions."""
    months: Tuple[int, ...]
    predicted: Tuple[float, ...]
    residuals: Tuple[float, ...]
    residual_mean: float
    residual_std: float
    shapiro_stat: float
    shapiro_p: float
    qq_theoretical: Tuple[float, ...]
    qq_ordered: Tuple[float, ...]
    variances: Optional[Tuple[float, ...]] = None
    variance_corr: float = np.nan
    variance_corr_p: float = np.nan
    low_variance_months: Tuple[int, ...] = ()


def _variance_by_month(result: FitResult, variances) -> Array:
    """Align per-month variances (mapping, Series or sequence) with result.months."""
    if hasattr(variances, "get"):
        return np.array([variances.get(m, np.nan) for m in result.months], dtype=float)
    v = np.asarray(variances, dtype=float)
    if v.shape != (result.n_obs,):
        raise ValueError(
            f"Expected {result.n_obs} variances (one per fitted month), got shape {v.shape}"
        )
    return v


def low_variance_months(months: Sequence[int], variances: Sequence[float], ratio: float = 0.5) -> Tuple[int, ...]:
    """
    Months whose variance is below ``ratio`` times the median variance.

    These are reported as anomalies; the fit is not reweighted.
    """
    v = np.asarray(variances, dtype=float)
    ok = np.isfinite(v)
    if not ok.any():
        return ()
    threshold = ratio * np.median(v[ok])
    return tuple(int(m) for m, var in zip(months, v) if np.isfinite(var) and var < threshold)


def residual_diagnostics(
    result: FitResult,
    variances=None,
    low_variance_ratio: float = 0.5,
) -> ResidualDiagnostics:
    """
    Residual checks for a fitted seasonal curve.

    Parameters
    ----------
    result : FitResult
        Output of ``seasonfit.fitting.fit``.
    variances : mapping, pd.Series or sequence, optional
        Per-month sample variance of the aggregated statistic, keyed by
        month (mapping/Series) or ordered like ``result.months``. Enables
        the variance-vs-predicted correlation and the low-variance report.
    low_variance_ratio : float
        Threshold, relative to the median variance, below which a month is
        reported in ``low_variance_months``.

    Returns
    -------
    ResidualDiagnostics
    """
    resid = result.residual_values
    pred = result.predicted

    if np.ptp(resid) > 0 and resid.size >= 3:
        shapiro_stat, shapiro_p = stats.shapiro(resid)
    else:
        # Shapiro-Wilk is undefined for constant samples
        shapiro_stat, shapiro_p = np.nan, np.nan

    (osm, osr), _ = stats.probplot(resid, dist="norm")

    var_tuple = None
    corr, corr_p = np.nan, np.nan
    low = ()
    if variances is not None:
        v = _variance_by_month(result, variances)
        var_tuple = tuple(float(x) for x in v)
        ok = np.isfinite(v)
        if ok.sum() >= 3 and np.ptp(v[ok]) > 0 and np.ptp(pred[ok]) > 0:
            corr, corr_p = stats.pearsonr(pred[ok], v[ok])
        low = low_variance_months(result.months, v, ratio=low_variance_ratio)
        if low:
            warnings.warn(
                f"Months {list(low)} have variance below {low_variance_ratio:g}x the "
                f"median; the fit does not account for this.",
                UserWarning,
                stacklevel=2,
            )

    return ResidualDiagnostics(
        months=tuple(int(m) for m in result.months),
        predicted=tuple(float(p) for p in pred),
        residuals=tuple(float(r) for r in resid),
        residual_mean=float(resid.mean()),
        residual_std=float(resid.std(ddof=1)) if resid.size > 1 else 0.0,
        shapiro_stat=float(shapiro_stat),
        shapiro_p=float(shapiro_p),
        qq_theoretical=tuple(float(x) for x in osm),
        qq_ordered=tuple(float(x) for x in osr),
        variances=var_tuple,
        variance_corr=float(corr),
        variance_corr_p=float(corr_p),
        low_variance_months=low,
    )
