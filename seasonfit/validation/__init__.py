from .fit_validator import FitValidator, ValidationResult, validate_fit

__all__ = ["FitValidator", "ValidationResult", "validate_fit"]
