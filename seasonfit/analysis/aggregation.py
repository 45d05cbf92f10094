"""
Monthly aggregation of incident records.

Turns one row per incident into the 12-row table the seasonal fitter
consumes: for each calendar month, the mean and sample variance over years
of the monthly incident count (or of its natural logarithm).
"""

from __future__ import annotations
from typing import Optional, Union
from pathlib import Path
import logging
import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

# NYPD Shooting Incident Data (Historic) layout
DEFAULT_DATE_COLUMN = "OCCUR_DATE"
DEFAULT_DATE_FORMAT = "%m/%d/%Y"

MONTHS = pd.Index(range(1, 13), name="month")


def load_incidents(
    source: Union[str, Path],
    date_column: str = DEFAULT_DATE_COLUMN,
    date_format: Optional[str] = DEFAULT_DATE_FORMAT,
    **read_csv_kwargs,
) -> pd.DataFrame:
    """
    Read incident records from a CSV file path or URL.

    The date column is parsed to datetimes; rows whose date cannot be
    parsed are dropped.

    Raises
    ------
    KeyError
        If ``date_column`` is not present.
    """
    df = pd.read_csv(source, **read_csv_kwargs)
    logger.info("Loaded %d incident rows from %s", len(df), source)
    return parse_dates(df, date_column=date_column, date_format=date_format)


def parse_dates(
    df: pd.DataFrame,
    date_column: str = DEFAULT_DATE_COLUMN,
    date_format: Optional[str] = DEFAULT_DATE_FORMAT,
) -> pd.DataFrame:
    if date_column not in df.columns:
        raise KeyError(f"Date column '{date_column}' not found (have {list(df.columns)})")

    out = df.copy()
    out[date_column] = pd.to_datetime(out[date_column], format=date_format, errors="coerce")
    bad = out[date_column].isna()
    if bad.any():
        logger.warning(
            "Dropping %d of %d rows with unparseable '%s'",
            int(bad.sum()), len(out), date_column,
        )
        out = out.loc[~bad]
    return out


def monthly_counts(incidents: pd.DataFrame, date_column: str = DEFAULT_DATE_COLUMN) -> pd.Series:
    """
    Incident counts per (year, month), zero-filled from the first to the last
    observed month.

    Returns
    -------
    pd.Series
        Indexed by a (year, month) MultiIndex.
    """
    dates = pd.to_datetime(incidents[date_column])
    if dates.empty:
        raise ValueError("No incidents to aggregate")

    # zero-fill only between the first and last observed month
    periods = dates.dt.to_period("M")
    span = pd.period_range(periods.min(), periods.max(), freq="M")
    counts = periods.value_counts().reindex(span, fill_value=0)

    index = pd.MultiIndex.from_arrays(
        [span.year.astype(int), span.month.astype(int)], names=["year", "month"]
    )
    return pd.Series(counts.to_numpy(), index=index, name="count")


def aggregate_monthly(
    incidents: pd.DataFrame,
    date_column: str = DEFAULT_DATE_COLUMN,
    log: bool = False,
) -> pd.DataFrame:
    """
    Per calendar month, the mean and sample variance across years of the
    monthly incident count.

    Parameters
    ----------
    incidents : pd.DataFrame
        One row per incident with a datetime-like ``date_column``.
    date_column : str
        Column holding the incident date.
    log : bool
        Aggregate log(count) instead of the raw count. A month-year with zero
        incidents gives -inf, which the fitter rejects.

    Returns
    -------
    pd.DataFrame
        Indexed by month 1..12 with columns ``mean``, ``variance``, ``n_years``.
    """
    counts = monthly_counts(incidents, date_column=date_column).astype(float)

    if log:
        with np.errstate(divide="ignore"):
            values = np.log(counts)
        n_zero = int((counts == 0).sum())
        if n_zero:
            logger.warning("%d month-year cell(s) have zero incidents; log is -inf", n_zero)
    else:
        values = counts

    grouped = values.groupby(level="month")
    table = pd.DataFrame({
        "mean": grouped.mean(),
        "variance": grouped.var(ddof=1),
        "n_years": grouped.size(),
    }).reindex(MONTHS)
    return table
