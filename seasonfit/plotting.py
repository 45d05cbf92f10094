# seasonfit/plotting.py
from __future__ import annotations
from typing import TYPE_CHECKING, Optional
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.axes import Axes
from matplotlib.figure import Figure

if TYPE_CHECKING:
    from seasonfit.analysis.diagnostics import ResidualDiagnostics
    from seasonfit.fitting.result import FitResult

Array = np.ndarray

MONTH_LABELS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
                "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def plot_monthly_fit(
    result: FitResult,
    *,
    ax: Optional[Axes] = None,
    title: str = "Monthly Seasonality",
    ylabel: str = "Mean incidents per month",
    n_points: int = 200,
) -> Axes:
    """
    Plots observed monthly values and the fitted sinusoid.

    Parameters
    ----------
    result : FitResult
        Converged fit.
    ax : Optional[Axes], optional
        Matplotlib axes to plot on. If None, a new one is created.
    title : str, optional
        Plot title.
    ylabel : str, optional
        Label for the y-axis.
    n_points : int, optional
        Resolution of the smooth fitted curve.

    Returns
    -------
    Axes
        The axes object containing the plot.
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 4))

    grid = np.linspace(1, 12, n_points)
    ax.plot(result.months, result.observed, "o", c="black", label="Observed")
    ax.plot(grid, result.model(grid), c="tab:red", lw=2,
            label=f"Fit: {result.amplitude:.3g}·sin(2πm/12 + {result.phase:.3g}) + {result.midline:.3g}")
    ax.axhline(result.midline, c="gray", ls="--", lw=1, alpha=0.7)

    ax.set_xticks(range(1, 13))
    ax.set_xticklabels(MONTH_LABELS)
    ax.set_xlabel("Month")
    ax.set_ylabel(ylabel)
    ax.set_title(title)
    ax.legend(fontsize="small")
    ax.grid(True, alpha=0.3)
    return ax


def plot_residuals_vs_predicted(
    result: FitResult,
    *,
    ax: Optional[Axes] = None,
    title: str = "Residuals vs Predicted",
) -> Axes:
    if ax is None:
        fig, ax = plt.subplots(figsize=(6, 4))

    pred = result.predicted
    resid = result.residual_values
    ax.scatter(pred, resid, c="tab:blue")
    for m, x, y in zip(result.months, pred, resid):
        ax.annotate(MONTH_LABELS[m - 1], (x, y), textcoords="offset points",
                    xytext=(3, 3), fontsize=7)
    ax.axhline(0.0, c="gray", ls="--", lw=1)

    ax.set_xlabel("Predicted")
    ax.set_ylabel("Residual")
    ax.set_title(title)
    ax.grid(True, alpha=0.3)
    return ax


def plot_qq(
    diagnostics: ResidualDiagnostics,
    *,
    ax: Optional[Axes] = None,
    title: str = "Normal Q-Q Plot of Residuals",
) -> Axes:
    """
    Quantile-quantile plot of residuals against the standard normal,
    with the line through the first and third quartiles.
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(5, 5))

    osm = np.asarray(diagnostics.qq_theoretical)
    osr = np.asarray(diagnostics.qq_ordered)
    ax.scatter(osm, osr, c="tab:blue")

    q1, q3 = np.percentile(osr, [25, 75])
    t1, t3 = np.percentile(osm, [25, 75])
    if t3 > t1:
        slope = (q3 - q1) / (t3 - t1)
        ax.plot(osm, q1 + slope * (osm - t1), c="tab:red", lw=1.5)

    ax.set_xlabel("Theoretical quantiles")
    ax.set_ylabel("Ordered residuals")
    ax.set_title(title)
    ax.grid(True, alpha=0.3)
    return ax


def plot_variance_vs_predicted(
    diagnostics: ResidualDiagnostics,
    *,
    ax: Optional[Axes] = None,
    title: str = "Variance vs Predicted",
) -> Axes:
    """
    Per-month variance against the predicted value. Months reported as
    low-variance anomalies are highlighted.
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(6, 4))

    if diagnostics.variances is None:
        raise ValueError("Diagnostics were computed without per-month variances")

    pred = np.asarray(diagnostics.predicted)
    var = np.asarray(diagnostics.variances)
    low = set(diagnostics.low_variance_months)
    colors = ["tab:red" if m in low else "tab:blue" for m in diagnostics.months]
    ax.scatter(pred, var, c=colors)
    for m, x, y in zip(diagnostics.months, pred, var):
        ax.annotate(MONTH_LABELS[m - 1], (x, y), textcoords="offset points",
                    xytext=(3, 3), fontsize=7)

    ax.set_xlabel("Predicted")
    ax.set_ylabel("Variance across years")
    ax.set_title(title)
    ax.grid(True, alpha=0.3)
    return ax


def plot_diagnostics(
    result: FitResult,
    diagnostics: ResidualDiagnostics,
    *,
    figsize=(12, 9),
) -> Figure:
    """2x2 grid: fit, residuals vs predicted, Q-Q, variance vs predicted."""
    fig, axes = plt.subplots(2, 2, figsize=figsize)
    plot_monthly_fit(result, ax=axes[0, 0])
    plot_residuals_vs_predicted(result, ax=axes[0, 1])
    plot_qq(diagnostics, ax=axes[1, 0])
    if diagnostics.variances is not None:
        plot_variance_vs_predicted(diagnostics, ax=axes[1, 1])
    else:
        axes[1, 1].set_axis_off()
    fig.tight_layout()
    return fig
