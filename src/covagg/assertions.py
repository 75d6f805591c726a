"""
Useful assertions
"""

from __future__ import annotations

from collections.abc import Collection

import pandas as pd

from covagg.exceptions import MissingColumnsError, UnrecognisedValueError


def assert_has_columns(indf: pd.DataFrame, columns: Collection[str]) -> None:
    """
    Assert that a [pd.DataFrame][pandas.DataFrame] has the given columns

    Parameters
    ----------
    indf
        Data to verify

    columns
        Columns that must be present

    Raises
    ------
    MissingColumnsError
        `indf` is missing one or more of `columns`
    """
    missing = [c for c in columns if c not in indf.columns]
    if missing:
        raise MissingColumnsError(missing, available=indf.columns.tolist())


def assert_is_known_value(
    value: object, name: str, known_values: Collection[object]
) -> None:
    """
    Assert that a value is one of a set of known values

    Parameters
    ----------
    value
        Value to verify

    name
        Name of the parameter, used in the error message

    known_values
        Allowed values

    Raises
    ------
    UnrecognisedValueError
        `value` is not in `known_values`
    """
    if value not in known_values:
        raise UnrecognisedValueError(value, name=name, known_values=known_values)


def assert_non_decreasing_within_partitions(
    indf: pd.DataFrame, column: str, partition_key: str
) -> None:
    """
    Assert that a column never decreases within each partition

    The rows are checked in the order they appear in `indf`.

    Parameters
    ----------
    indf
        Data to verify

    column
        Column to check

    partition_key
        Column which defines the partitions

    Raises
    ------
    AssertionError
        `column` decreases somewhere within a partition
    """
    diffs = indf.groupby(partition_key, sort=False)[column].diff()
    decreasing = indf[diffs < 0]
    if not decreasing.empty:
        msg = f"{column} decreases within a partition at:\n{decreasing}"
        raise AssertionError(msg)
