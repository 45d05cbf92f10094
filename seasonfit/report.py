"""
One-call seasonal analysis: aggregate, fit, diagnose, validate, plot.

Usage:
    from seasonfit.report import AnalysisConfig, run_from_config

    config = AnalysisConfig(source="NYPD_Shooting_Incident_Data__Historic_.csv",
                            figure_dir="figures")
    analysis = run_from_config(config)
    print(analysis.fit)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union
import logging
import matplotlib.pyplot as plt
import pandas as pd

from seasonfit.analysis.aggregation import (
    DEFAULT_DATE_COLUMN,
    DEFAULT_DATE_FORMAT,
    aggregate_monthly,
    load_incidents,
)
from seasonfit.analysis.diagnostics import ResidualDiagnostics
from seasonfit.fitting.least_squares import FitOptions, fit
from seasonfit.fitting.observations import observations_from_table
from seasonfit.fitting.result import FitResult
from seasonfit.plotting import plot_diagnostics
from seasonfit.validation.fit_validator import FitValidator, ValidationResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisConfig:
    """
    Settings for a seasonal analysis run.

    Parameters
    ----------
    source : str or Path, optional
        CSV path or URL of the incident data (used by ``run_from_config``).
    date_column : str
        Column holding the incident date.
    date_format : str, optional
        strptime format of ``date_column``; None lets pandas infer it.
    log_transform : bool
        Fit the mean of log(monthly count) instead of the raw count.
    fit_options : FitOptions
        Optimizer settings.
    low_variance_ratio : float
        Months with variance below this fraction of the median are reported.
    alpha : float
        Significance level for the validation checks.
    figure_dir : str or Path, optional
        Where to save the diagnostic figure; nothing is saved if None.
    """
    source: Optional[Union[str, Path]] = None
    date_column: str = DEFAULT_DATE_COLUMN
    date_format: Optional[str] = DEFAULT_DATE_FORMAT
    log_transform: bool = False
    fit_options: FitOptions = field(default_factory=FitOptions)
    low_variance_ratio: float = 0.5
    alpha: float = 0.05
    figure_dir: Optional[Union[str, Path]] = None


@dataclass
class SeasonalAnalysis:
    table: pd.DataFrame
    fit: FitResult
    diagnostics: ResidualDiagnostics
    validation: List[ValidationResult]
    figure_path: Optional[Path] = None

    @property
    def passed(self) -> bool:
        return all(r.passed for r in self.validation)


def run_seasonal_analysis(incidents: pd.DataFrame, config: Optional[AnalysisConfig] = None) -> SeasonalAnalysis:
    """
    Run the full analysis on already-loaded incident records.

    Fitting errors (``InsufficientDataError``, ``ConvergenceError``,
    ``DegenerateInputError``) propagate to the caller.
    """
    config = config or AnalysisConfig()

    table = aggregate_monthly(incidents, date_column=config.date_column, log=config.log_transform)
    result = fit(observations_from_table(table, "mean"), options=config.fit_options)

    validator = FitValidator(
        result,
        variances=table["variance"],
        alpha=config.alpha,
        low_variance_ratio=config.low_variance_ratio,
    )
    checks = validator.validate_all()

    figure_path = None
    if config.figure_dir is not None:
        out_dir = Path(config.figure_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        suffix = "log" if config.log_transform else "count"
        figure_path = out_dir / f"seasonal_fit_{suffix}.png"
        fig = plot_diagnostics(result, validator.diagnostics)
        fig.savefig(figure_path, dpi=150, bbox_inches="tight")
        plt.close(fig)
        logger.info("Saved diagnostic figure to %s", figure_path)

    return SeasonalAnalysis(
        table=table,
        fit=result,
        diagnostics=validator.diagnostics,
        validation=checks,
        figure_path=figure_path,
    )


def run_from_config(config: AnalysisConfig) -> SeasonalAnalysis:
    """Load ``config.source`` and run the analysis on it."""
    if config.source is None:
        raise ValueError("AnalysisConfig.source must be set to load incidents")
    incidents = load_incidents(
        config.source, date_column=config.date_column, date_format=config.date_format
    )
    return run_seasonal_analysis(incidents, config)
