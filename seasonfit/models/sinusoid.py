from __future__ import annotations
from dataclasses import dataclass
import math
import numpy as np

Array = np.ndarray

PARAM_NAMES = ("amplitude", "phase", "midline")


@dataclass(frozen=True)
class MonthlySinusoid:
    """
    Sinusoidal seasonal curve over calendar months.

    value(m) = amplitude * sin(2πm / period + phase) + midline

    Parameters
    ----------
    amplitude : float
        Half the peak-to-trough swing of the seasonal cycle.
    phase : float
        Phase shift (radians).
    midline : float
        Vertical offset, the mean level of the curve.
    period : float
        Length of one cycle in months (default: 12).
    """
    amplitude: float
    phase: float = 0.0
    midline: float = 0.0
    period: float = 12.0

    @classmethod
    def from_vector(cls, p, period: float = 12.0) -> "MonthlySinusoid":
        a, c, d = (float(v) for v in p)
        return cls(amplitude=a, phase=c, midline=d, period=period)

    def as_vector(self) -> Array:
        return np.array([self.amplitude, self.phase, self.midline], dtype=float)

    def angle(self, month):
        return 2 * math.pi * np.asarray(month, dtype=float) / self.period + self.phase

    def __call__(self, month):
        """Evaluate at a month (scalar) or an array of months."""
        return self.amplitude * np.sin(self.angle(month)) + self.midline

    def jacobian(self, months) -> Array:
        """
        Analytic derivatives of the curve w.r.t. (amplitude, phase, midline).

        Returns an (n_months x 3) matrix.
        """
        theta = self.angle(np.atleast_1d(months))
        jac = np.empty((theta.size, 3), dtype=float)
        jac[:, 0] = np.sin(theta)
        jac[:, 1] = self.amplitude * np.cos(theta)
        jac[:, 2] = 1.0
        return jac

    def canonical(self) -> "MonthlySinusoid":
        """
        Same curve with amplitude >= 0 and phase wrapped to [-π, π).
        """
        a, c = self.amplitude, self.phase
        if a < 0:
            a, c = -a, c + math.pi
        c = (c + math.pi) % (2 * math.pi) - math.pi
        return MonthlySinusoid(amplitude=a, phase=c, midline=self.midline, period=self.period)

    def peak_month(self) -> float:
        """Month (in (0, period]) at which the curve reaches its maximum."""
        m = self.canonical()
        x = (math.pi / 2 - m.phase) * m.period / (2 * math.pi)
        x = x % m.period
        return x if x > 0 else m.period
