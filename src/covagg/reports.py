"""
Standard reports

These are the analyses that make up the usual pandemic narrative
(death rates, infection rates, vaccination coverage),
expressed in terms of the running total, ratio and grouping functions.
Each takes records and returns a new [pd.DataFrame][pandas.DataFrame].
Rendering the results is up to the caller.

Reports return derived data only.
Data-quality issues (malformed records, clashing location-date pairs)
are surfaced through logging (enable it with `logger.enable("covagg")`).
To inspect them as data, use [compute_running_total][covagg.windowing.]
or [WindowedAggregator][covagg.aggregator.] directly.
"""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np
import pandas as pd
from loguru import logger

from covagg.aggregator import WindowedAggregator
from covagg.filters import exclude_pseudo_locations
from covagg.grouping import aggregate_by_key, compute_extremum
from covagg.ratios import compute_ratio, compute_ratio_series
from covagg.typing import RecordsDataFrame, RowFilter
from covagg.windowing import (
    compute_running_total,
    get_cumulative_column,
    get_ratio_column,
)


def add_running_totals(
    records: RecordsDataFrame,
    value_fields: Iterable[str],
    row_filter: RowFilter | None = None,
    partition_key: str = "location",
    order_key: str = "date",
) -> RecordsDataFrame:
    """
    Add running totals of several fields

    Parameters
    ----------
    records
        Records to process

    value_fields
        Fields to accumulate

    row_filter
        If supplied, only records for which this returns `True` are processed

    partition_key
        Field which defines the partitions

    order_key
        Field which defines the order within each partition

    Returns
    -------
    :
        Records with a `cumulative_<field>` column for each of `value_fields`,
        sorted by `partition_key` then `order_key`.

        Data-quality issues are logged rather than returned.
    """
    res = records
    for i, value_field in enumerate(value_fields):
        res = compute_running_total(
            res,
            value_field=value_field,
            partition_key=partition_key,
            order_key=order_key,
            # Only need to filter once
            row_filter=row_filter if i == 0 else None,
        ).data

    return res


def death_percentage(
    records: RecordsDataFrame,
    row_filter: RowFilter | None = None,
    precision: int = 2,
) -> RecordsDataFrame:
    """
    Running likelihood of dying if you contract the disease, per location

    Parameters
    ----------
    records
        Records to process

    row_filter
        If supplied, only records for which this returns `True` are processed

    precision
        Number of decimal places for the percentage

    Returns
    -------
    :
        Records with running totals of cases and deaths
        and a `death_percentage` column
        (null until the first case is reported)
    """
    res = add_running_totals(
        records, ["new_cases", "new_deaths"], row_filter=row_filter
    )
    res["death_percentage"] = compute_ratio_series(
        res[get_cumulative_column("new_deaths")],
        res[get_cumulative_column("new_cases")],
        precision=precision,
    )

    return res


def percent_population_infected(
    records: RecordsDataFrame,
    row_filter: RowFilter | None = None,
    precision: int = 2,
) -> RecordsDataFrame:
    """
    Running percentage of the population which has been infected, per location

    Parameters
    ----------
    records
        Records to process

    row_filter
        If supplied, only records for which this returns `True` are processed

    precision
        Number of decimal places for the percentage

    Returns
    -------
    :
        Records with `cumulative_new_cases`
        and `new_cases_pct_of_population` columns
    """
    aggregator = WindowedAggregator(
        value_field="new_cases",
        reference_field="population",
        precision=precision,
        row_filter=row_filter,
    )

    return aggregator(records).data


def highest_infection_rate(
    records: RecordsDataFrame,
    row_filter: RowFilter | None = exclude_pseudo_locations,
    precision: int = 2,
) -> pd.DataFrame:
    """
    Locations ranked by the highest share of their population infected

    Parameters
    ----------
    records
        Records to process

    row_filter
        If supplied, only records for which this returns `True` are processed

    precision
        Number of decimal places for the percentage

    Returns
    -------
    :
        One row per location, indexed by location,
        sorted by `percent_population_infected` descending
    """
    infected = percent_population_infected(
        records, row_filter=row_filter, precision=precision
    )
    res = pd.concat(
        [
            aggregate_by_key(infected, "location", "population", op="max"),
            compute_extremum(infected, get_cumulative_column("new_cases")).rename(
                "highest_infection_count"
            ),
            compute_extremum(
                infected, get_ratio_column("new_cases", "population")
            ).rename("percent_population_infected"),
        ],
        axis="columns",
    )

    return res.sort_values(
        "percent_population_infected", ascending=False, na_position="last"
    )


def highest_death_count(
    records: RecordsDataFrame,
    partition_key: str = "location",
    row_filter: RowFilter | None = exclude_pseudo_locations,
) -> pd.Series:
    """
    Highest cumulative death count, per location or per any coarser grouping

    For coarser groupings (e.g. `partition_key="continent"`),
    the result is the sum of the highest death count
    of each location in the group.

    Parameters
    ----------
    records
        Records to process

    partition_key
        Field to group by

    row_filter
        If supplied, only records for which this returns `True` are processed

    Returns
    -------
    :
        Highest death count, sorted descending
    """
    deaths = compute_running_total(records, "new_deaths", row_filter=row_filter).data
    per_location = compute_extremum(
        deaths, get_cumulative_column("new_deaths"), partition_key="location"
    ).rename("total_death_count")

    if partition_key == "location":
        res = per_location

    else:
        location_groups = deaths.groupby("location")[partition_key].first()
        res = aggregate_by_key(
            pd.concat([location_groups, per_location], axis="columns"),
            key=partition_key,
            value_field="total_death_count",
            op="sum",
        )

    return res.sort_values(ascending=False, na_position="last")


def global_numbers(
    records: RecordsDataFrame,
    by_date: bool = True,
    row_filter: RowFilter | None = exclude_pseudo_locations,
    precision: int = 2,
) -> pd.DataFrame:
    """
    Global totals of new cases and new deaths

    Parameters
    ----------
    records
        Records to process

    by_date
        If `True`, report totals for each date.
        Otherwise, report a single total over all dates.

    row_filter
        If supplied, only records for which this returns `True` are processed.
        The default excludes pseudo-locations, which would otherwise double count.

    precision
        Number of decimal places for the death percentage

    Returns
    -------
    :
        Columns `total_cases`, `total_deaths` and `death_percentage`
    """
    if by_date:
        res = pd.concat(
            [
                aggregate_by_key(
                    records, "date", "new_cases", op="sum", row_filter=row_filter
                ).rename("total_cases"),
                aggregate_by_key(
                    records, "date", "new_deaths", op="sum", row_filter=row_filter
                ).rename("total_deaths"),
            ],
            axis="columns",
            sort=True,
        )
        res["death_percentage"] = compute_ratio_series(
            res["total_deaths"], res["total_cases"], precision=precision
        )

        return res

    if row_filter is None:
        filtered = records
    else:
        filtered = records[np.asarray(row_filter(records), dtype=bool)]
    total_cases = pd.to_numeric(filtered["new_cases"], errors="coerce").sum(
        min_count=1
    )
    total_deaths = pd.to_numeric(filtered["new_deaths"], errors="coerce").sum(
        min_count=1
    )

    return pd.DataFrame(
        [
            {
                "total_cases": total_cases,
                "total_deaths": total_deaths,
                "death_percentage": compute_ratio(
                    total_deaths, total_cases, precision=precision
                ),
            }
        ]
    ).astype(float)


def rolling_vaccinations(
    records: RecordsDataFrame,
    row_filter: RowFilter | None = exclude_pseudo_locations,
    precision: int = 2,
) -> RecordsDataFrame:
    """
    Running total of vaccinations and share of the population vaccinated

    Percentages above 100 are reported as they are.
    These come from reporting issues in the source data
    (e.g. counting doses rather than people) and are not corrected here.

    Parameters
    ----------
    records
        Records to process

    row_filter
        If supplied, only records for which this returns `True` are processed

    precision
        Number of decimal places for the percentage

    Returns
    -------
    :
        Records with `cumulative_new_vaccinations`
        and `new_vaccinations_pct_of_population` columns
    """
    aggregator = WindowedAggregator(
        value_field="new_vaccinations",
        reference_field="population",
        precision=precision,
        row_filter=row_filter,
    )
    res = aggregator(records).data

    pct_column = get_ratio_column("new_vaccinations", "population")
    over_100 = (
        res.loc[res[pct_column] > 100, "location"]  # noqa: PLR2004
        .drop_duplicates()
        .tolist()
    )
    if over_100:
        logger.info(
            "{} location(s) report more vaccinations than people: {}",
            len(over_100),
            over_100,
        )

    return res


def count_locations(
    records: RecordsDataFrame,
    key: str = "continent",
    location_field: str = "location",
    row_filter: RowFilter | None = None,
) -> pd.Series:
    """
    Count the distinct locations in each group

    Parameters
    ----------
    records
        Records to process

    key
        Field to group by

    location_field
        Field which holds the location

    row_filter
        If supplied, only records for which this returns `True` are processed

    Returns
    -------
    :
        Number of distinct locations, indexed by `key`
    """
    return aggregate_by_key(
        records, key, location_field, op="count_distinct", row_filter=row_filter
    ).rename("n_locations")
