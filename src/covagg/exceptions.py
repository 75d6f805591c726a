"""
Exceptions that are used throughout
"""

from __future__ import annotations

from collections.abc import Collection
from typing import Any

import pandas as pd


class UnrecognisedValueError(ValueError):
    """
    Raised when a value is not one of the values we know how to handle
    """

    def __init__(
        self,
        unrecognised_value: Any,
        name: str,
        known_values: Collection[Any],
    ) -> None:
        """
        Initialise the error

        Parameters
        ----------
        unrecognised_value
            The value we don't recognise

        name
            Name of the parameter (or similar) that received the value

        known_values
            Values which we do recognise
        """
        error_msg = (
            f"{unrecognised_value!r} is not a recognised value for {name}. "
            f"Known values: {sorted(known_values)}"
        )
        super().__init__(error_msg)


class MissingColumnsError(KeyError):
    """
    Raised when the records are missing columns we need
    """

    def __init__(self, missing: Collection[str], available: Collection[str]) -> None:
        error_msg = (
            f"The records are missing the following required columns: {list(missing)}. "
            f"Available columns: {list(available)}"
        )
        super().__init__(error_msg)


class MalformedRecordError(ValueError):
    """
    Raised when records have absent or wrongly typed values in strict mode
    """

    def __init__(self, malformed: pd.DataFrame) -> None:
        """
        Initialise the error

        Parameters
        ----------
        malformed
            The malformed records,
            with a `reason` column explaining what is wrong with each
        """
        error_msg = f"{malformed.shape[0]} malformed record(s) found:\n{malformed}"
        super().__init__(error_msg)


class DuplicateOrderKeyError(ValueError):
    """
    Raised when records share a partition and order key in strict mode
    """

    def __init__(
        self, duplicates: pd.DataFrame, partition_key: str, order_key: str
    ) -> None:
        """
        Initialise the error

        Parameters
        ----------
        duplicates
            All records involved in a clash

        partition_key
            Column used for partitioning

        order_key
            Column used for ordering within a partition
        """
        error_msg = (
            f"Records are not unique on ({partition_key!r}, {order_key!r}). "
            f"Clashing records:\n{duplicates}"
        )
        super().__init__(error_msg)
