# tests/test_aggregation.py
import numpy as np
import pandas as pd
import pytest

from seasonfit.analysis.aggregation import (
    aggregate_monthly,
    load_incidents,
    monthly_counts,
    parse_dates,
)
from seasonfit.fitting import DegenerateInputError, fit, observations_from_table
from conftest import make_incidents


def test_monthly_counts_cover_every_year_and_month(incidents):
    counts = monthly_counts(incidents)
    assert len(counts) == 4 * 12
    assert counts.sum() == len(incidents)
    assert counts.index.names == ["year", "month"]


def test_missing_month_is_zero_filled():
    df = parse_dates(make_incidents(skip=(2019, 6)))
    counts = monthly_counts(df)
    assert counts.loc[(2019, 6)] == 0
    assert len(counts) == 48


def daily_incidents(start, end, per_day=2):
    """``per_day`` incidents on every day from ``start`` to ``end`` inclusive."""
    days = pd.date_range(start, end, freq="D").repeat(per_day)
    return pd.DataFrame({"INCIDENT_KEY": range(len(days)), "OCCUR_DATE": days})


def test_partial_years_are_not_zero_padded():
    """Data from July 2019 to June 2021 covers each calendar month twice."""
    df = daily_incidents("2019-07-01", "2021-06-30")
    counts = monthly_counts(df)

    assert len(counts) == 24
    assert counts.index[0] == (2019, 7)
    assert counts.index[-1] == (2021, 6)
    assert (counts > 0).all()

    table = aggregate_monthly(df)
    assert (table["n_years"] == 2).all()
    assert table.loc[1, "mean"] == 62.0
    # February 2020 (leap year) and February 2021
    assert table.loc[2, "mean"] == 57.0
    assert table.loc[6, "mean"] == 60.0


def test_partial_years_log_aggregation_fits():
    df = daily_incidents("2019-07-01", "2021-06-30")
    table = aggregate_monthly(df, log=True)

    assert np.isfinite(table["mean"]).all()
    result = fit(observations_from_table(table))
    assert result.converged


def test_n_years_per_month_with_partial_first_and_last_year():
    """March 2019 to October 2020: March-October seen twice, the rest once."""
    df = daily_incidents("2019-03-01", "2020-10-31", per_day=1)
    table = aggregate_monthly(df)

    assert len(monthly_counts(df)) == 20
    twice = list(range(3, 11))
    once = [11, 12, 1, 2]
    assert (table.loc[twice, "n_years"] == 2).all()
    assert (table.loc[once, "n_years"] == 1).all()
    # a single year has no sample variance
    assert table.loc[once, "variance"].isna().all()
    assert table.loc[12, "mean"] == 31.0


def test_aggregate_monthly_mean_and_variance(incidents):
    table = aggregate_monthly(incidents)
    counts = monthly_counts(incidents).astype(float)

    assert list(table.index) == list(range(1, 13))
    assert list(table.columns) == ["mean", "variance", "n_years"]
    assert (table["n_years"] == 4).all()

    march = counts.xs(3, level="month")
    assert np.isclose(table.loc[3, "mean"], march.mean())
    assert np.isclose(table.loc[3, "variance"], march.var(ddof=1))


def test_flat_january_has_zero_variance(incidents):
    table = aggregate_monthly(incidents)
    assert table.loc[1, "variance"] == 0.0
    assert (table.loc[2:, "variance"] > 0).all()


def test_log_aggregation(incidents):
    table = aggregate_monthly(incidents, log=True)
    counts = monthly_counts(incidents).astype(float)
    june = np.log(counts.xs(6, level="month"))
    assert np.isclose(table.loc[6, "mean"], june.mean())


def test_log_of_zero_count_is_rejected_by_fitter():
    df = parse_dates(make_incidents(skip=(2020, 2)))
    table = aggregate_monthly(df, log=True)
    assert np.isneginf(table.loc[2, "mean"])
    with pytest.raises(DegenerateInputError):
        fit(observations_from_table(table))


def test_parse_dates_drops_unparseable_rows(raw_incidents):
    df = raw_incidents.copy()
    df.loc[0, "OCCUR_DATE"] = "not a date"
    parsed = parse_dates(df)
    assert len(parsed) == len(df) - 1
    assert pd.api.types.is_datetime64_any_dtype(parsed["OCCUR_DATE"])


def test_parse_dates_missing_column(raw_incidents):
    with pytest.raises(KeyError):
        parse_dates(raw_incidents, date_column="DATE")


def test_load_incidents_from_csv(tmp_path, raw_incidents):
    path = tmp_path / "shootings.csv"
    raw_incidents.to_csv(path, index=False)

    loaded = load_incidents(path)
    assert len(loaded) == len(raw_incidents)
    assert loaded["OCCUR_DATE"].dt.year.min() == 2018


def test_empty_incidents():
    df = pd.DataFrame({"OCCUR_DATE": pd.to_datetime([])})
    with pytest.raises(ValueError):
        monthly_counts(df)


def test_observations_from_table_is_month_ordered(incidents):
    table = aggregate_monthly(incidents).iloc[::-1]
    obs = observations_from_table(table)
    assert [o.month for o in obs] == list(range(1, 13))
    with pytest.raises(KeyError):
        observations_from_table(table, column="median")
