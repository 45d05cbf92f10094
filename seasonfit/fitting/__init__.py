# seasonfit/fitting/__init__.py

from .errors import (
    SeasonalFitError,
    InsufficientDataError,
    ConvergenceError,
    DegenerateInputError,
)
from .observations import (
    Observation,
    observations_from_pairs,
    observations_from_table,
)
from .result import FitResult, ParameterEstimate, ResidualRecord
from .least_squares import FitOptions, default_initial_guess, fit

__all__ = [
    # from errors.py
    "SeasonalFitError",
    "InsufficientDataError",
    "ConvergenceError",
    "DegenerateInputError",

    # from observations.py
    "Observation",
    "observations_from_pairs",
    "observations_from_table",

    # from result.py
    "FitResult",
    "ParameterEstimate",
    "ResidualRecord",

    # from least_squares.py
    "FitOptions",
    "default_initial_guess",
    "fit",
]
