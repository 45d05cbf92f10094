# seasonfit/analysis/__init__.py

from .jacobian import numerical_jacobian, sinusoid_curve
from .aggregation import (
    load_incidents,
    parse_dates,
    monthly_counts,
    aggregate_monthly,
)
from .diagnostics import ResidualDiagnostics, residual_diagnostics, low_variance_months

__all__ = [
    # from jacobian.py
    "numerical_jacobian",
    "sinusoid_curve",

    # from aggregation.py
    "load_incidents",
    "parse_dates",
    "monthly_counts",
    "aggregate_monthly",

    # from diagnostics.py
    "ResidualDiagnostics",
    "residual_diagnostics",
    "low_variance_months",
]
