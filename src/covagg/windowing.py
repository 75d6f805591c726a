"""
Windowed running totals

The running total is the equivalent of the SQL window
`SUM(value) OVER (PARTITION BY partition_key ORDER BY order_key)`,
computed explicitly: group, sort within each group, then accumulate.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
from attrs import define
from loguru import logger
from pandas_openscm.parallelisation import ParallelOpConfig, apply_op_parallel_progress

from covagg.assertions import assert_has_columns, assert_is_known_value
from covagg.exceptions import DuplicateOrderKeyError, MalformedRecordError
from covagg.ratios import ROUNDING_MODES, compute_ratio_series
from covagg.typing import RecordsDataFrame, RowFilter
from covagg.validation import get_duplicate_order_keys, get_malformed_reasons

POSITION_LEVEL = "__covagg_input_position"
"""
Name given to the input position while sorting

The input position is the tie-break for records with clashing order keys.
"""


def get_cumulative_column(value_field: str) -> str:
    """
    Get the name of the column which holds the running total of a field
    """
    return f"cumulative_{value_field}"


def get_ratio_column(value_field: str, reference_field: str) -> str:
    """
    Get the name of the column which holds a running total as a percentage
    """
    return f"{value_field}_pct_of_{reference_field}"


@define
class RunningTotalResult:
    """
    Result of [compute_running_total][(m).]
    """

    data: RecordsDataFrame
    """
    Derived records

    One row per well-formed input record,
    sorted by partition key then order key,
    with a fresh [pd.RangeIndex][pandas.RangeIndex].
    """

    duplicate_order_keys: RecordsDataFrame
    """
    Input records which share a partition key and order key with another record

    The index is the index of the records that were passed in.
    """

    malformed_records: RecordsDataFrame
    """
    Input records which were excluded because they are malformed

    The `reason` column explains what is wrong with each record.
    The index is the index of the records that were passed in.
    """

    @property
    def deterministic_input(self) -> bool:
        """
        Whether the input defined a unique order within every partition

        If `False`, records with clashing order keys
        were ordered by their position in the input.
        """
        return self.duplicate_order_keys.empty


def add_running_total(
    partition: pd.DataFrame, value_field: str, cumulative_column: str
) -> pd.DataFrame:
    """
    Add the running total of a field to a single, already sorted, partition

    Nulls count as zero in the total
    but are left untouched in `value_field` itself.

    Parameters
    ----------
    partition
        Partition to process

    value_field
        Field to accumulate

    cumulative_column
        Name of the column in which to store the running total

    Returns
    -------
    :
        Copy of `partition` with the running total added
    """
    res = partition.copy()
    values = pd.to_numeric(partition[value_field], errors="coerce")
    res[cumulative_column] = values.fillna(0).cumsum()

    return res


def compute_running_total(  # noqa: PLR0913
    records: RecordsDataFrame,
    value_field: str,
    partition_key: str = "location",
    order_key: str = "date",
    reference_field: str | None = None,
    precision: int = 2,
    rounding_mode: str = "half_up",
    row_filter: RowFilter | None = None,
    strict: bool = False,
    n_processes: int | None = None,
    progress: bool = False,
) -> RunningTotalResult:
    """
    Compute the running total of a field within each partition

    Note: the output is re-ordered.
    It is sorted by `partition_key` then `order_key`, both ascending,
    whatever the order of the input.

    Parameters
    ----------
    records
        Records to process. These are not modified.

    value_field
        Field to accumulate

    partition_key
        Field which defines the partitions

    order_key
        Field which defines the order within each partition

    reference_field
        If supplied, the running total is also expressed
        as a percentage of this field
        (see [compute_ratio][covagg.ratios.compute_ratio]).

    precision
        Number of decimal places for the percentage

    rounding_mode
        Rounding mode for the percentage,
        see [ROUNDING_MODES][covagg.ratios.ROUNDING_MODES]

    row_filter
        If supplied, only records for which this returns `True` are processed

    strict
        If `True`, raise on malformed records or clashing order keys
        rather than reporting them in the result

    n_processes
        Number of processes to use for processing partitions.

        Set to `None` to process in serial.

    progress
        Should a progress bar be shown while processing partitions?

    Returns
    -------
    :
        Derived records and any data-quality issues found

    Raises
    ------
    MissingColumnsError
        `records` is missing any of the fields we need

    MalformedRecordError
        `strict` is `True` and there are malformed records

    DuplicateOrderKeyError
        `strict` is `True` and records share a partition key and order key
    """
    assert_is_known_value(rounding_mode, "rounding_mode", ROUNDING_MODES)
    numeric_fields = [value_field]
    if reference_field is not None:
        numeric_fields.append(reference_field)

    assert_has_columns(records, [partition_key, order_key, *numeric_fields])

    if row_filter is not None:
        keep = row_filter(records)
        records = records[np.asarray(keep, dtype=bool)]

    # Work by position so that non-unique input indexes are not a problem
    positional = records.reset_index(drop=True).rename_axis(POSITION_LEVEL)

    malformed_reasons = get_malformed_reasons(
        positional,
        required_fields=[partition_key, order_key],
        numeric_fields=numeric_fields,
    )
    malformed = records.iloc[malformed_reasons.index].assign(
        reason=malformed_reasons.to_numpy()
    )
    if not malformed.empty:
        if strict:
            raise MalformedRecordError(malformed)

        logger.warning("Excluding {} malformed record(s)", malformed.shape[0])

    well_formed = positional.drop(index=malformed_reasons.index)

    duplicate_positions = get_duplicate_order_keys(
        well_formed, partition_key=partition_key, order_key=order_key
    )
    duplicate_order_keys = records.iloc[duplicate_positions.index]
    if not duplicate_order_keys.empty:
        if strict:
            raise DuplicateOrderKeyError(
                duplicate_order_keys,
                partition_key=partition_key,
                order_key=order_key,
            )

        logger.warning(
            "{} record(s) share a ({}, {}) pair with another record, "
            "using input order to break the ties:\n{}",
            duplicate_order_keys.shape[0],
            partition_key,
            order_key,
            duplicate_order_keys,
        )

    ordered = well_formed.sort_values([partition_key, order_key, POSITION_LEVEL])

    cumulative_column = get_cumulative_column(value_field)
    if ordered.empty:
        res = ordered.assign(**{cumulative_column: pd.Series(dtype=float)})

    else:
        partitions = ordered.groupby(partition_key, sort=False)
        logger.debug(
            "Computing running total of {} over {} partition(s)",
            value_field,
            partitions.ngroups,
        )
        res = pd.concat(
            apply_op_parallel_progress(
                func_to_call=add_running_total,
                iterable_input=(gdf for _, gdf in partitions),
                parallel_op_config=ParallelOpConfig.from_user_facing(
                    progress=progress,
                    max_workers=n_processes,
                    progress_results_kwargs=dict(desc="Partitions"),
                ),
                value_field=value_field,
                cumulative_column=cumulative_column,
            )
        )
        # Parallel execution may return partitions in completion order
        res = res.sort_values([partition_key, order_key, POSITION_LEVEL])

    if reference_field is not None:
        res[get_ratio_column(value_field, reference_field)] = compute_ratio_series(
            res[cumulative_column],
            res[reference_field],
            precision=precision,
            rounding_mode=rounding_mode,
        )

    return RunningTotalResult(
        data=res.reset_index(drop=True),
        duplicate_order_keys=duplicate_order_keys,
        malformed_records=malformed,
    )
