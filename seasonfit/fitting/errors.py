"""Exceptions raised by the seasonal curve fitter."""


class SeasonalFitError(Exception):
    """Base class for all fitting failures."""


class InsufficientDataError(SeasonalFitError):
    """Fewer observations than the model can be estimated from."""

    def __init__(self, n_obs: int, n_params: int = 3):
        self.n_obs = n_obs
        self.n_params = n_params
        super().__init__(
            f"Need at least {n_params + 1} observations to fit {n_params} "
            f"parameters, got {n_obs}"
        )


class ConvergenceError(SeasonalFitError):
    """The optimizer did not converge within the iteration cap."""

    def __init__(self, message: str, n_iter: int, sse: float):
        self.n_iter = n_iter
        self.sse = sse
        super().__init__(f"{message} (evaluations={n_iter}, SSE={sse:.6g})")


class DegenerateInputError(SeasonalFitError):
    """Non-finite values make the least-squares objective undefined."""
