"""
Loading of records from delimited text

The computations never load data themselves.
This is a convenience for turning the usual CSV exports
(one table of cases and deaths, one of vaccinations)
into records of the expected shape.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import IO, Any

import numpy as np
import pandas as pd
from loguru import logger

from covagg.assertions import assert_has_columns
from covagg.typing import RecordsDataFrame

NUMERIC_FIELDS: tuple[str, ...] = (
    "population",
    "new_cases",
    "new_deaths",
    "new_vaccinations",
)
"""
Fields which are coerced to numbers when loading, if present
"""


def load_records_csv(
    path_or_buffer: Path | str | IO[str],
    date_field: str = "date",
    numeric_fields: Iterable[str] = NUMERIC_FIELDS,
    **kwargs: Any,
) -> RecordsDataFrame:
    """
    Load records from a CSV file

    Parameters
    ----------
    path_or_buffer
        Where to load from

    date_field
        Field which holds the date.
        This is converted to datetimes, day granularity.

    numeric_fields
        Fields to convert to numbers.
        Empty strings and anything which isn't a number become null.
        Fields which aren't in the file are skipped.

    **kwargs
        Passed to [pd.read_csv][pandas.read_csv]

    Returns
    -------
    :
        Loaded records
    """
    res = pd.read_csv(path_or_buffer, **kwargs)
    assert_has_columns(res, [date_field])

    res[date_field] = pd.to_datetime(res[date_field], errors="coerce").dt.normalize()
    for field in numeric_fields:
        if field not in res.columns:
            continue

        res[field] = pd.to_numeric(res[field], errors="coerce")

    # Empty strings in text columns mean "not reported"
    text_columns = res.select_dtypes(include=["object", "string"]).columns
    if not text_columns.empty:
        res[text_columns] = res[text_columns].replace(r"^\s*$", np.nan, regex=True)

    logger.debug("Loaded {} records from {}", res.shape[0], path_or_buffer)

    return res


def merge_record_tables(
    deaths: RecordsDataFrame,
    vaccinations: RecordsDataFrame,
    on: tuple[str, ...] = ("location", "date"),
) -> RecordsDataFrame:
    """
    Join a table of cases and deaths with a table of vaccinations

    Every row of `deaths` is kept.
    Columns which appear in both tables (other than `on`)
    are taken from `deaths`.

    Parameters
    ----------
    deaths
        Table of cases and deaths

    vaccinations
        Table of vaccinations

    on
        Fields to join on

    Returns
    -------
    :
        Joined records

    Raises
    ------
    pandas.errors.MergeError
        `vaccinations` has more than one row for the same `on` values
    """
    assert_has_columns(deaths, on)
    assert_has_columns(vaccinations, on)

    vaccinations_only = vaccinations[
        [*on, *vaccinations.columns.difference([*deaths.columns], sort=False)]
    ]
    res = deaths.merge(vaccinations_only, on=list(on), how="left", validate="m:1")

    return res
