"""
Group-and-reduce helpers
"""

from __future__ import annotations

import numpy as np
import pandas as pd

from covagg.assertions import assert_has_columns, assert_is_known_value
from covagg.typing import RecordsDataFrame, RowFilter

EXTREMA = ("max", "min")
"""
Supported extrema
"""

REDUCTIONS = ("sum", "max", "min", "count_distinct")
"""
Supported reductions for [aggregate_by_key][(m).]
"""


def _apply_row_filter(
    records: RecordsDataFrame, row_filter: RowFilter | None
) -> RecordsDataFrame:
    if row_filter is None:
        return records

    return records[np.asarray(row_filter(records), dtype=bool)]


def _as_list(key: str | list[str]) -> list[str]:
    if isinstance(key, str):
        return [key]

    return list(key)


def _group_numeric(
    records: RecordsDataFrame, keys: list[str], value_field: str
) -> pd.core.groupby.SeriesGroupBy:
    values = pd.to_numeric(records[value_field], errors="coerce")
    by = [records[k] for k in keys]

    return values.groupby(by if len(by) > 1 else by[0])


def compute_extremum(
    records: RecordsDataFrame,
    value_field: str,
    partition_key: str | list[str] = "location",
    which: str = "max",
    row_filter: RowFilter | None = None,
) -> pd.Series:
    """
    Compute the maximum or minimum of a field within each partition

    Nulls are ignored.
    A partition in which every value is null gets a null (NaN) extremum.
    Records with a null partition key are not assigned to any partition.

    Parameters
    ----------
    records
        Records to process

    value_field
        Field of which to find the extremum

    partition_key
        Field(s) which define the partitions

    which
        `"max"` or `"min"`

    row_filter
        If supplied, only records for which this returns `True` are considered

    Returns
    -------
    :
        Extremum of `value_field`, indexed by partition

    Raises
    ------
    UnrecognisedValueError
        `which` is not supported

    Examples
    --------
    >>> records = pd.DataFrame(
    ...     {
    ...         "location": ["A", "A", "B"],
    ...         "new_cases": [3.0, 5.0, np.nan],
    ...     }
    ... )
    >>> compute_extremum(records, "new_cases")
    location
    A    5.0
    B    NaN
    Name: new_cases, dtype: float64
    """
    assert_is_known_value(which, "which", EXTREMA)
    partition_keys = _as_list(partition_key)
    assert_has_columns(records, [*partition_keys, value_field])

    to_group = _apply_row_filter(records, row_filter)
    grouped = _group_numeric(to_group, partition_keys, value_field)

    if which == "max":
        res = grouped.max()
    else:
        res = grouped.min()

    return res.rename(value_field)


def aggregate_by_key(
    records: RecordsDataFrame,
    key: str | list[str],
    value_field: str,
    op: str,
    row_filter: RowFilter | None = None,
) -> pd.Series:
    """
    Group records and reduce a field within each group

    Parameters
    ----------
    records
        Records to process

    key
        Field(s) to group by

    value_field
        Field to reduce

    op
        Reduction to apply. One of:

        - `"sum"`: sum of the non-null values, null if every value is null
        - `"max"`: maximum of the non-null values, null if every value is null
        - `"min"`: minimum of the non-null values, null if every value is null
        - `"count_distinct"`: number of distinct non-null values.
          This works on any field, not only numeric ones,
          e.g. counting the distinct locations on each continent.

    row_filter
        If supplied, only records for which this returns `True` are considered

    Returns
    -------
    :
        Reduced values, indexed by `key`

    Raises
    ------
    UnrecognisedValueError
        `op` is not supported
    """
    assert_is_known_value(op, "op", REDUCTIONS)
    keys = _as_list(key)
    assert_has_columns(records, [*keys, value_field])

    to_group = _apply_row_filter(records, row_filter)
    if op == "count_distinct":
        by = keys if len(keys) > 1 else keys[0]
        res = to_group.groupby(by)[value_field].nunique(dropna=True)

    else:
        grouped_numeric = _group_numeric(to_group, keys, value_field)
        if op == "sum":
            res = grouped_numeric.sum(min_count=1)
        elif op == "max":
            res = grouped_numeric.max()
        else:
            res = grouped_numeric.min()

    return res.rename(value_field)
