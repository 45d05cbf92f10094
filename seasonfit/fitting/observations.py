from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple
import numpy as np
import pandas as pd

Array = np.ndarray


@dataclass(frozen=True)
class Observation:
    """One (calendar month, value) pair, e.g. the mean monthly count."""
    month: int
    value: float


def as_arrays(observations: Sequence[Observation]) -> Tuple[Array, Array]:
    """
    Validate observations and split them into (months, values) arrays.

    Raises
    ------
    ValueError
        If a month is not an integer in 1..12 or appears more than once.
    """
    months = []
    for obs in observations:
        m = obs.month
        if isinstance(m, (bool, np.bool_)) or int(m) != m:
            raise ValueError(f"Month must be an integer, got {m!r}")
        if not 1 <= int(m) <= 12:
            raise ValueError(f"Month must be in 1..12, got {m}")
        months.append(int(m))

    if len(set(months)) != len(months):
        dupes = sorted({m for m in months if months.count(m) > 1})
        raise ValueError(f"Months must be unique, repeated: {dupes}")

    values = np.array([obs.value for obs in observations], dtype=float)
    return np.array(months, dtype=int), values


def observations_from_pairs(pairs: Iterable[Tuple[int, float]]) -> Tuple[Observation, ...]:
    return tuple(Observation(month=int(m), value=float(v)) for m, v in pairs)


def observations_from_table(table: pd.DataFrame, column: str = "mean") -> Tuple[Observation, ...]:
    """
    Build observations from a monthly table indexed by month.

    Rows are returned in month order.
    """
    if column not in table.columns:
        raise KeyError(f"Column '{column}' not in table (have {list(table.columns)})")
    ordered = table.sort_index()
    return observations_from_pairs(zip(ordered.index, ordered[column]))
