# seasonfit/__init__.py

from .models.sinusoid import MonthlySinusoid
from .fitting import (
    Observation,
    FitOptions,
    FitResult,
    fit,
    SeasonalFitError,
    InsufficientDataError,
    ConvergenceError,
    DegenerateInputError,
)

__version__ = "0.1.0"

__all__ = [
    "MonthlySinusoid",
    "Observation",
    "FitOptions",
    "FitResult",
    "fit",
    "SeasonalFitError",
    "InsufficientDataError",
    "ConvergenceError",
    "DegenerateInputError",
]
