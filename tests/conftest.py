import matplotlib
matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from seasonfit.fitting import observations_from_pairs

MONTHS = np.arange(1, 13)


def sinusoid_values(a=5.0, c=0.3, d=50.0, months=MONTHS):
    return a * np.sin(2 * np.pi * np.asarray(months) / 12 + c) + d


@pytest.fixture
def clean_obs():
    """Noise-free 5*sin(2πm/12 + 0.3) + 50."""
    return observations_from_pairs(zip(MONTHS, sinusoid_values()))


@pytest.fixture
def noisy_obs():
    """Strong seasonal signal with small deterministic noise."""
    noise = 0.2 * (-1.0) ** MONTHS + 0.1 * np.cos(2 * np.pi * MONTHS / 4)
    return observations_from_pairs(zip(MONTHS, sinusoid_values() + noise))


@pytest.fixture
def flat_obs():
    """
    Flat level plus noise orthogonal to the 12-month cycle, so the
    best-fitting amplitude is zero.
    """
    noise = 0.5 * (-1.0) ** MONTHS + 0.3 * np.cos(2 * np.pi * MONTHS / 4)
    return observations_from_pairs(zip(MONTHS, 10.0 + noise))


def make_incidents(years=(2018, 2019, 2020, 2021), flat_january=True, skip=None):
    """
    One row per incident. Monthly counts follow 40 + 10*sin(2πm/12 + 0.3)
    plus a per-year offset; January optionally has the same count every year.
    ``skip`` is a (year, month) cell left without incidents.
    """
    rows = []
    for k, year in enumerate(years):
        for month in range(1, 13):
            if skip == (year, month):
                continue
            n = int(round(40 + 10 * np.sin(2 * np.pi * month / 12 + 0.3)))
            if not (flat_january and month == 1):
                n += 3 * k
            for i in range(n):
                day = 1 + i % 28
                rows.append({"INCIDENT_KEY": len(rows),
                             "OCCUR_DATE": f"{month:02d}/{day:02d}/{year}"})
    return pd.DataFrame(rows)


@pytest.fixture
def raw_incidents():
    return make_incidents()


@pytest.fixture
def incidents(raw_incidents):
    df = raw_incidents.copy()
    df["OCCUR_DATE"] = pd.to_datetime(df["OCCUR_DATE"], format="%m/%d/%Y")
    return df
