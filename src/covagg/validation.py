"""
Data-quality checks on records

These checks don't raise.
They return the offending records so that callers can decide what to do
(report them, drop them or, in strict mode, raise).
"""

from __future__ import annotations

from collections.abc import Iterable

import pandas as pd


def get_malformed_reasons(
    records: pd.DataFrame,
    required_fields: Iterable[str],
    numeric_fields: Iterable[str] = (),
) -> pd.Series:
    """
    Get the reason each malformed record is malformed

    A record is malformed if any of `required_fields` is null
    or any of `numeric_fields` holds a value that cannot be interpreted as a number.
    Null values in `numeric_fields` are fine (they mean "not reported").

    Parameters
    ----------
    records
        Records to check

    required_fields
        Fields which must not be null

    numeric_fields
        Fields which must be numeric (or null)

    Returns
    -------
    :
        Reasons, indexed like `records` but only for the malformed records.
        Multiple reasons for a single record are separated by `"; "`.

    Examples
    --------
    >>> records = pd.DataFrame(
    ...     {
    ...         "location": ["A", None, "B"],
    ...         "population": [10.0, 20.0, "lots"],
    ...     }
    ... )
    >>> get_malformed_reasons(
    ...     records, required_fields=["location"], numeric_fields=["population"]
    ... )
    1          missing location
    2    non-numeric population
    dtype: object
    """
    checks = {}
    for field in required_fields:
        checks[f"missing {field}"] = records[field].isna()

    for field in numeric_fields:
        as_numeric = pd.to_numeric(records[field], errors="coerce")
        checks[f"non-numeric {field}"] = as_numeric.isna() & records[field].notna()

    checks_df = pd.DataFrame(checks, index=records.index)
    is_malformed = checks_df.any(axis="columns")
    if not is_malformed.any():
        return pd.Series([], index=records.index[:0], dtype=object)

    failing = checks_df[is_malformed]
    reasons = pd.Series(
        ["; ".join(failing.columns[row]) for row in failing.to_numpy()],
        index=failing.index,
        dtype=object,
    )

    return reasons


def get_duplicate_order_keys(
    records: pd.DataFrame, partition_key: str, order_key: str
) -> pd.DataFrame:
    """
    Get all records which share a partition key and order key with another record

    Parameters
    ----------
    records
        Records to check

    partition_key
        Column which defines the partitions

    order_key
        Column which defines the order within each partition

    Returns
    -------
    :
        Every record involved in a clash (not just the second and later ones),
        in input order
    """
    clashing = records.duplicated([partition_key, order_key], keep=False)

    return records[clashing]
