from __future__ import annotations
from dataclasses import dataclass, field
from typing import Tuple
import numpy as np
import pandas as pd

from seasonfit.models.sinusoid import MonthlySinusoid, PARAM_NAMES

Array = np.ndarray


@dataclass(frozen=True)
class ParameterEstimate:
    """Point estimate of one model parameter with its Wald statistics."""
    name: str
    estimate: float
    std_error: float
    t_value: float
    p_value: float


@dataclass(frozen=True)
class ResidualRecord:
    month: int
    observed: float
    predicted: float
    residual: float          # observed - predicted


@dataclass(frozen=True)
class FitResult:
    """
    Converged sinusoidal fit.

    Parameters are accessed by name (``result.amplitude``,
    ``result.estimate("phase")``); the model itself is ``result.model``.
    """
    model: MonthlySinusoid
    estimates: Tuple[ParameterEstimate, ...]
    residuals: Tuple[ResidualRecord, ...]
    converged: bool
    n_iter: int
    sse: float
    residual_variance: float
    dof: int
    covariance: Array = field(repr=False, compare=False)

    @property
    def amplitude(self) -> float:
        return self.model.amplitude

    @property
    def phase(self) -> float:
        return self.model.phase

    @property
    def midline(self) -> float:
        return self.model.midline

    @property
    def n_obs(self) -> int:
        return len(self.residuals)

    def estimate(self, name: str) -> ParameterEstimate:
        for est in self.estimates:
            if est.name == name:
                return est
        raise KeyError(f"Unknown parameter '{name}', expected one of {PARAM_NAMES}")

    @property
    def months(self) -> Array:
        return np.array([r.month for r in self.residuals], dtype=int)

    @property
    def observed(self) -> Array:
        return np.array([r.observed for r in self.residuals], dtype=float)

    @property
    def predicted(self) -> Array:
        return np.array([r.predicted for r in self.residuals], dtype=float)

    @property
    def residual_values(self) -> Array:
        return np.array([r.residual for r in self.residuals], dtype=float)

    def r_squared(self) -> float:
        y = self.observed
        ss_tot = float(np.sum((y - y.mean()) ** 2))
        if ss_tot == 0.0:
            return 1.0 if self.sse == 0.0 else 0.0
        return 1.0 - self.sse / ss_tot

    def coefficient_table(self) -> pd.DataFrame:
        """Coefficient table in the usual regression-summary layout."""
        return pd.DataFrame(
            [(e.estimate, e.std_error, e.t_value, e.p_value) for e in self.estimates],
            index=[e.name for e in self.estimates],
            columns=["estimate", "std_error", "t_value", "p_value"],
        )

    def residual_table(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "observed": self.observed,
                "predicted": self.predicted,
                "residual": self.residual_values,
            },
            index=pd.Index(self.months, name="month"),
        )

    def __str__(self) -> str:
        lines = [
            f"value(m) = {self.amplitude:.4f} * sin(2πm/{self.model.period:g} "
            f"+ {self.phase:.4f}) + {self.midline:.4f}",
            f"evaluations={self.n_iter}  SSE={self.sse:.6g}  "
            f"s²={self.residual_variance:.6g}  dof={self.dof}",
        ]
        for e in self.estimates:
            lines.append(
                f"  {e.name:<10} {e.estimate:>12.5g} ± {e.std_error:<10.4g} "
                f"t={e.t_value:<8.3f} p={e.p_value:.4g}"
            )
        return "\n".join(lines)
