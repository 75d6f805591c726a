"""
Code to support our tests

This is here, rather than in our `tests` directory
because of the issues that come
when you turn your tests into a package using `__init__.py` files
(for details, see https://docs.pytest.org/en/7.1.x/explanation/goodpractices.html#choosing-an-import-mode).
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import pandas as pd

from covagg.typing import RecordsDataFrame

RNG = np.random.default_rng()

VALUE_FIELDS = ("new_cases", "new_deaths", "new_vaccinations")


def get_random_records(  # noqa: PLR0913
    locations: Sequence[tuple[str, str | None, float]] = (
        ("Albania", "Europe", 2_877_800.0),
        ("Gibraltar", "Europe", 33_690.0),
        ("Peru", "South America", 33_359_418.0),
    ),
    n_days: int = 30,
    start: str = "2021-01-01",
    null_fraction: float = 0.2,
    shuffle: bool = True,
    rng: np.random.Generator = RNG,
) -> RecordsDataFrame:
    """
    Get random, well-formed records

    Parameters
    ----------
    locations
        Locations to generate, as (location, continent, population)

    n_days
        Number of days for each location

    start
        First day

    null_fraction
        Fraction of values which are null (i.e. not reported)

    shuffle
        Should the rows be shuffled?

        This is useful for checking that results don't depend on input order.

    rng
        Random number generator to use

    Returns
    -------
    :
        Random records. All values are non-negative.
    """
    dates = pd.date_range(start, periods=n_days, freq="D")
    rows = []
    for location, continent, population in locations:
        for date in dates:
            row = {
                "location": location,
                "continent": continent,
                "date": date,
                "population": population,
            }
            for field in VALUE_FIELDS:
                if rng.random() < null_fraction:
                    row[field] = np.nan
                else:
                    row[field] = float(rng.integers(0, 1_000))

            rows.append(row)

    res = pd.DataFrame(rows)
    if shuffle:
        res = res.sample(frac=1.0, random_state=rng).reset_index(drop=True)

    return res


def get_example_records() -> RecordsDataFrame:
    """
    Get a small, fixed set of records

    This includes a pseudo-location ("World", which has no continent)
    and a location which reports more vaccinations than people
    ("Gibraltar"), like the real data.

    Returns
    -------
    :
        Example records
    """
    return pd.DataFrame(
        [
            ("Gibraltar", "Europe", "2021-01-01", 100.0, 2.0, 0.0, 100.0),
            ("Gibraltar", "Europe", "2021-01-02", 100.0, 3.0, 1.0, 82.0),
            ("Gibraltar", "Europe", "2021-01-03", 100.0, np.nan, 0.0, np.nan),
            ("Peru", "South America", "2021-01-01", 1000.0, 10.0, 1.0, np.nan),
            ("Peru", "South America", "2021-01-02", 1000.0, 20.0, 1.0, 5.0),
            ("Peru", "South America", "2021-01-03", 1000.0, 10.0, 2.0, 15.0),
            ("Chile", "South America", "2021-01-01", 500.0, 0.0, 0.0, np.nan),
            ("Chile", "South America", "2021-01-02", 500.0, 5.0, np.nan, np.nan),
            ("Chile", "South America", "2021-01-03", 500.0, np.nan, np.nan, np.nan),
            ("World", None, "2021-01-01", 1600.0, 12.0, 1.0, 100.0),
            ("World", None, "2021-01-02", 1600.0, 28.0, 2.0, 87.0),
            ("World", None, "2021-01-03", 1600.0, 10.0, 2.0, 15.0),
        ],
        columns=[
            "location",
            "continent",
            "date",
            "population",
            "new_cases",
            "new_deaths",
            "new_vaccinations",
        ],
    ).assign(date=lambda df: pd.to_datetime(df["date"]))
