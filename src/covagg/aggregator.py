"""
Configurable windowed aggregator
"""

from __future__ import annotations

from typing import Any

import attr
from attrs import define, field

from covagg.assertions import assert_has_columns, assert_is_known_value
from covagg.ratios import ROUNDING_MODES
from covagg.typing import RecordsDataFrame, RowFilter
from covagg.windowing import RunningTotalResult, compute_running_total

__all__ = ["RunningTotalResult", "WindowedAggregator"]


@define
class WindowedAggregator:
    """
    Aggregator that computes running totals of one field within each partition

    This bundles up the configuration of [compute_running_total][covagg.windowing.]
    so that the same analysis can be applied to different sets of records.
    """

    value_field: str
    """
    Field to accumulate
    """

    partition_key: str = "location"
    """
    Field which defines the partitions
    """

    order_key: str = "date"
    """
    Field which defines the order within each partition
    """

    reference_field: str | None = None
    """
    Field to express the running total as a percentage of

    If `None`, no percentage is computed.
    """

    precision: int = field(default=2)
    """
    Number of decimal places for the percentage
    """

    rounding_mode: str = field(default="half_up")
    """
    Rounding mode for the percentage

    See [ROUNDING_MODES][covagg.ratios.ROUNDING_MODES].
    """

    row_filter: RowFilter | None = None
    """
    Predicate selecting the records to process

    Typically [exclude_pseudo_locations][covagg.filters.exclude_pseudo_locations],
    so that aggregate rows like "World" don't double count.
    """

    strict: bool = False
    """
    If `True`, raise on data-quality issues rather than reporting them
    """

    n_processes: int | None = None
    """
    Number of processes to use for processing partitions.

    Set to `None` to process in serial.
    """

    progress: bool = False
    """
    Should progress bars be shown while processing partitions?
    """

    @precision.validator
    def validate_precision(self, attribute: attr.Attribute[Any], value: int) -> None:
        """
        Validate the precision value
        """
        if value < 0:
            msg = f"{attribute.name} must be non-negative. Received: {value!r}"
            raise ValueError(msg)

    @rounding_mode.validator
    def validate_rounding_mode(
        self, attribute: attr.Attribute[Any], value: str
    ) -> None:
        """
        Validate the rounding mode value
        """
        assert_is_known_value(value, attribute.name, ROUNDING_MODES)

    @property
    def required_fields(self) -> tuple[str, ...]:
        """
        Fields the records must have for this aggregator to run
        """
        res = (self.partition_key, self.order_key, self.value_field)
        if self.reference_field is not None:
            res = (*res, self.reference_field)

        return res

    def __call__(self, records: RecordsDataFrame) -> RunningTotalResult:
        """
        Compute running totals

        Parameters
        ----------
        records
            Records to process

        Returns
        -------
        :
            Derived records and any data-quality issues found
        """
        assert_has_columns(records, self.required_fields)

        return compute_running_total(
            records,
            value_field=self.value_field,
            partition_key=self.partition_key,
            order_key=self.order_key,
            reference_field=self.reference_field,
            precision=self.precision,
            rounding_mode=self.rounding_mode,
            row_filter=self.row_filter,
            strict=self.strict,
            n_processes=self.n_processes,
            progress=self.progress,
        )
