"""
Tests of `covagg.ratios`
"""

from __future__ import annotations

import re

import numpy as np
import pandas as pd
import pytest

from covagg.exceptions import UnrecognisedValueError
from covagg.ratios import compute_ratio, compute_ratio_series, round_value


@pytest.mark.parametrize(
    "value, reference, precision, exp",
    (
        pytest.param(182, 100, 2, 182.0, id="over-100-not-clamped"),
        pytest.param(1.82 * 33_690, 33_690, 2, 182.0, id="over-100-real-population"),
        pytest.param(1, 3, 2, 33.33, id="one-third"),
        pytest.param(2, 3, 2, 66.67, id="two-thirds"),
        pytest.param(1, 3, 0, 33.0, id="zero-precision"),
        pytest.param(1, 3, 4, 33.3333, id="four-precision"),
        pytest.param(0, 10, 2, 0.0, id="zero-value"),
        pytest.param(np.int64(5), np.float64(20.0), 2, 25.0, id="numpy-scalars"),
    ),
)
def test_compute_ratio(value, reference, precision, exp):
    assert compute_ratio(value, reference, precision=precision) == exp


@pytest.mark.parametrize(
    "value, reference",
    (
        pytest.param(10, 0, id="zero-reference"),
        pytest.param(10, -5, id="negative-reference"),
        pytest.param(10, None, id="none-reference"),
        pytest.param(10, np.nan, id="nan-reference"),
        pytest.param(10, pd.NA, id="na-reference"),
        pytest.param(10, "lots", id="non-numeric-reference"),
        pytest.param(None, 100, id="none-value"),
        pytest.param(np.nan, 100, id="nan-value"),
    ),
)
def test_compute_ratio_null(value, reference):
    assert compute_ratio(value, reference) is None


@pytest.mark.parametrize(
    "value, rounding_mode, exp",
    (
        pytest.param(0.125, "half_up", 0.13, id="half-up"),
        pytest.param(0.125, "half_even", 0.12, id="half-even"),
        pytest.param(0.135, "half_even", 0.14, id="half-even-odd"),
        # Binary floating point rounding would give 2.67 here
        pytest.param(2.675, "half_up", 2.68, id="decimal-not-binary"),
        pytest.param(-0.125, "half_up", -0.13, id="negative-half-up"),
    ),
)
def test_round_value(value, rounding_mode, exp):
    assert round_value(value, precision=2, rounding_mode=rounding_mode) == exp


@pytest.mark.parametrize(
    "value, precision",
    (
        pytest.param(1e29, 2, id="huge-value"),
        pytest.param(5e32, 2, id="beyond-default-decimal-digits"),
        pytest.param(1 / 3 * 100, 30, id="high-precision"),
        pytest.param(123.456, 60, id="very-high-precision"),
        pytest.param(1e-40, 2, id="tiny-value"),
    ),
)
def test_round_value_extreme(value, precision):
    # Changes by at most the rounding step
    assert round_value(value, precision=precision) == pytest.approx(
        value, rel=0, abs=10**-precision
    )


def test_round_value_huge_value_rounds():
    assert round_value(1.5e30, precision=0) == 1.5e30  # noqa: PLR2004

    exp = 12_345_678_901_235.0

    assert round_value(12_345_678_901_234.5, precision=0) == exp


@pytest.mark.parametrize(
    "value, reference, precision",
    (
        pytest.param(1e27, 1, 2, id="huge-ratio"),
        pytest.param(5, 1e-30, 2, id="tiny-reference"),
        pytest.param(1, 3, 30, id="high-precision"),
        pytest.param(2, 7, 50, id="very-high-precision"),
    ),
)
def test_compute_ratio_extreme(value, reference, precision):
    res = compute_ratio(value, reference, precision=precision)

    assert res == value / reference * 100


def test_compute_ratio_series_extreme():
    values = pd.Series([1e27, 5.0, 1.0])
    references = pd.Series([1.0, 1e-30, 3.0])

    res = compute_ratio_series(values, references, precision=30)

    pd.testing.assert_series_equal(res, values / references * 100)


def test_round_value_inf():
    assert round_value(np.inf, precision=2) == np.inf


def test_unknown_rounding_mode():
    with pytest.raises(
        UnrecognisedValueError,
        match=re.escape("'ceiling' is not a recognised value for rounding_mode"),
    ):
        compute_ratio(1, 2, rounding_mode="ceiling")


def test_compute_ratio_series():
    values = pd.Series([182.0, 1.0, 10.0, 10.0, np.nan, 1.0])
    references = pd.Series([100.0, 3.0, 0.0, np.nan, 100.0, 8.0])

    res = compute_ratio_series(values, references, precision=2)

    exp = pd.Series([182.0, 33.33, np.nan, np.nan, np.nan, 12.5])
    pd.testing.assert_series_equal(res, exp)


def test_compute_ratio_series_matches_scalar():
    values = pd.Series([3.0, 7.0, 11.0, 0.0])
    references = pd.Series([7.0, 3.0, 13.0, 1.0])

    res = compute_ratio_series(values, references, precision=3)

    exp = [compute_ratio(v, r, precision=3) for v, r in zip(values, references)]
    assert res.tolist() == exp


def test_compute_ratio_series_aligns_on_index():
    values = pd.Series([1.0, 2.0], index=["a", "b"])
    references = pd.Series([4.0, 1.0], index=["b", "a"])

    res = compute_ratio_series(values, references)

    pd.testing.assert_series_equal(res, pd.Series([100.0, 50.0], index=["a", "b"]))


def test_compute_ratio_series_non_numeric_reference():
    values = pd.Series([1.0, 2.0])
    references = pd.Series([4.0, "lots"], dtype=object)

    res = compute_ratio_series(values, references)

    pd.testing.assert_series_equal(res, pd.Series([25.0, np.nan]))
