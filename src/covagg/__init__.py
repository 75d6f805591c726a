"""
Windowed aggregates over per-location, per-date pandemic records.

Running totals, percentage-of-reference metrics and grouped extrema,
computed in memory on [pd.DataFrame][pandas.DataFrame]'s.
"""

import importlib.metadata

from loguru import logger

from covagg.aggregator import RunningTotalResult, WindowedAggregator
from covagg.grouping import aggregate_by_key, compute_extremum
from covagg.ratios import compute_ratio, compute_ratio_series
from covagg.windowing import compute_running_total

__version__ = importlib.metadata.version("covagg")

logger.disable("covagg")

__all__ = [
    "RunningTotalResult",
    "WindowedAggregator",
    "aggregate_by_key",
    "compute_extremum",
    "compute_ratio",
    "compute_ratio_series",
    "compute_running_total",
]
