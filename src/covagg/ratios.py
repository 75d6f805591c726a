"""
Percentage ratios

Ratios are expressed as percentages of a reference value
(e.g. cumulative vaccinations as a percentage of population).
They are never clamped: reporting errors in the source data
can push ratios above 100 and we pass these through unchanged.
"""

from __future__ import annotations

import decimal
import math
from typing import Any

import pandas as pd

from covagg.assertions import assert_is_known_value
from covagg.typing import NUMERIC_DATA

ROUNDING_MODES: dict[str, str] = {
    "half_up": decimal.ROUND_HALF_UP,
    "half_even": decimal.ROUND_HALF_EVEN,
}
"""
Supported rounding modes and the [decimal][] rounding they map to
"""


def _to_float(value: Any) -> float | None:
    if value is None or value is pd.NA or value is pd.NaT:
        return None

    try:
        res = float(value)
    except (TypeError, ValueError):
        return None

    if math.isnan(res):
        return None

    return res


def round_value(
    value: NUMERIC_DATA, precision: int, rounding_mode: str = "half_up"
) -> float:
    """
    Round a value to a given number of decimal places

    The rounding is done in decimal arithmetic
    on the shortest representation of `value`,
    so e.g. `round_value(2.675, 2)` gives `2.68`
    (binary floating point rounding would give `2.67`).
    This works for any magnitude of `value` and any `precision`.

    Parameters
    ----------
    value
        Value to round

    precision
        Number of decimal places to keep

    rounding_mode
        One of the keys of [ROUNDING_MODES][(m).]

    Returns
    -------
    :
        Rounded value

    Raises
    ------
    UnrecognisedValueError
        `rounding_mode` is not supported
    """
    assert_is_known_value(rounding_mode, "rounding_mode", ROUNDING_MODES)
    if not math.isfinite(value):
        return value

    exact = decimal.Decimal(repr(float(value)))
    quantum = decimal.Decimal(1).scaleb(-precision)
    with decimal.localcontext() as ctx:
        # Room for every digit before the point plus `precision` after it
        ctx.prec = max(ctx.prec, exact.adjusted() + precision + 2)
        res = exact.quantize(quantum, rounding=ROUNDING_MODES[rounding_mode])

    return float(res)


def compute_ratio(
    value: Any,
    reference: Any,
    precision: int = 2,
    rounding_mode: str = "half_up",
) -> float | None:
    """
    Compute `value` as a percentage of `reference`

    Parameters
    ----------
    value
        Numerator

    reference
        Denominator (e.g. population)

    precision
        Number of decimal places in the result

    rounding_mode
        Rounding mode, see [ROUNDING_MODES][(m).]

    Returns
    -------
    :
        `value / reference * 100`, rounded.

        `None` if `reference` is missing, non-numeric, zero or negative,
        or if `value` is missing or non-numeric.

    Examples
    --------
    >>> compute_ratio(182, 100)
    182.0
    >>> compute_ratio(1, 3, precision=3)
    33.333
    >>> compute_ratio(10, 0) is None
    True
    """
    assert_is_known_value(rounding_mode, "rounding_mode", ROUNDING_MODES)

    value_f = _to_float(value)
    reference_f = _to_float(reference)
    if value_f is None or reference_f is None or reference_f <= 0:
        return None

    return round_value(
        value_f / reference_f * 100, precision=precision, rounding_mode=rounding_mode
    )


def compute_ratio_series(
    values: pd.Series,
    references: pd.Series,
    precision: int = 2,
    rounding_mode: str = "half_up",
) -> pd.Series:
    """
    Compute element-wise percentage ratios

    This is the vectorised equivalent of [compute_ratio][(m).].

    Parameters
    ----------
    values
        Numerators

    references
        Denominators, aligned with `values` on the index

    precision
        Number of decimal places in the result

    rounding_mode
        Rounding mode, see [ROUNDING_MODES][(m).]

    Returns
    -------
    :
        Ratios, with NaN wherever [compute_ratio][(m).] would return `None`
    """
    assert_is_known_value(rounding_mode, "rounding_mode", ROUNDING_MODES)

    values_num = pd.to_numeric(values, errors="coerce").astype(float)
    references_num = pd.to_numeric(references, errors="coerce").astype(float)
    references_num = references_num.where(references_num > 0)

    raw = values_num / references_num * 100
    res = raw.map(
        lambda v: v
        if math.isnan(v)
        else round_value(v, precision=precision, rounding_mode=rounding_mode)
    )

    return res.astype(float)
