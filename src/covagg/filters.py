"""
Row filters

A row filter takes records and returns a boolean mask of the rows to keep
(see [RowFilter][covagg.typing.RowFilter]).
"""

from __future__ import annotations

import numpy as np
import pandas as pd

from covagg.typing import RecordsDataFrame, RowFilter


def exclude_pseudo_locations(
    records: RecordsDataFrame, continent_field: str = "continent"
) -> pd.Series:
    """
    Select records which are not aggregate pseudo-locations

    Pseudo-locations (e.g. "World", "Europe", "High income")
    are sums over other rows.
    In the source data, these are exactly the rows without a continent.
    Including them in global totals double counts.

    Parameters
    ----------
    records
        Records to filter

    continent_field
        Field which holds the continent

    Returns
    -------
    :
        `True` for records which have a continent
    """
    return records[continent_field].notna()


def location_contains(
    pattern: str, location_field: str = "location", case: bool = False
) -> RowFilter:
    """
    Get a row filter selecting locations which contain a pattern

    This is the equivalent of SQL's `location LIKE '%pattern%'`.

    Parameters
    ----------
    pattern
        Literal (not regex) pattern to look for

    location_field
        Field which holds the location

    case
        Should the match be case-sensitive?

    Returns
    -------
    :
        Row filter
    """

    def row_filter(records: RecordsDataFrame) -> pd.Series:
        return (
            records[location_field]
            .astype("string")
            .str.contains(pattern, case=case, regex=False)
            .fillna(False)
            .astype(bool)
        )

    return row_filter


def all_of(*row_filters: RowFilter) -> RowFilter:
    """
    Combine row filters so that a record is kept only if every filter keeps it

    Parameters
    ----------
    *row_filters
        Row filters to combine

    Returns
    -------
    :
        Combined row filter
    """

    def row_filter(records: RecordsDataFrame) -> pd.Series:
        keep = np.ones(records.shape[0], dtype=bool)
        for rf in row_filters:
            keep &= np.asarray(rf(records), dtype=bool)

        return pd.Series(keep, index=records.index)

    return row_filter
