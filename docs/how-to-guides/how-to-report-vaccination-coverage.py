# ---
# jupyter:
#   jupytext:
#     text_representation:
#       extension: .py
#       format_name: percent
#       format_version: '1.3'
#       jupytext_version: 1.16.6
#   kernelspec:
#     display_name: Python 3 (ipykernel)
#     language: python
#     name: python3
# ---

# %% [markdown]
# # How to report vaccination coverage
#
# Here we demonstrate how to go from daily reports
# to running totals and percentages of population.
# The same steps work for cases and deaths.

# %% [markdown]
# ## Imports

# %%
from loguru import logger

from covagg import WindowedAggregator, compute_extremum
from covagg.filters import exclude_pseudo_locations
from covagg.reports import global_numbers, highest_death_count, rolling_vaccinations
from covagg.testing import get_example_records

# %%
# See the data-quality messages
logger.enable("covagg")

# %% [markdown]
# ## Starting point
#
# The starting point is a table of records,
# one row per location per day.
# Normally you would load this with `covagg.loading.load_records_csv`
# (and join cases/deaths with vaccinations using
# `covagg.loading.merge_record_tables`).
# Here we use a small, fixed example.
#
# Note that "World" is a pseudo-location:
# it is the sum of the other rows, so it has no continent.

# %%
records = get_example_records()
records

# %% [markdown]
# ## Running totals
#
# The aggregator is configured once, then applied.
# We exclude pseudo-locations so that nothing is double counted.

# %%
aggregator = WindowedAggregator(
    value_field="new_vaccinations",
    reference_field="population",
    row_filter=exclude_pseudo_locations,
)
result = aggregator(records)
result.data

# %% [markdown]
# The output is sorted by location, then date.
# Days with no report (null `new_vaccinations`)
# add nothing to the running total but stay null themselves.
#
# Gibraltar reports more vaccinations than people.
# This is a known issue with the source data
# (e.g. counting doses, or vaccinating non-residents)
# so it is reported as is, not capped at 100%.

# %%
compute_extremum(result.data, "new_vaccinations_pct_of_population")

# %% [markdown]
# ## Data quality
#
# Records with clashing (location, date) pairs or malformed values
# don't stop the computation.
# They are reported on the result.

# %%
result.deterministic_input, result.malformed_records

# %% [markdown]
# ## Ready-made reports

# %%
rolling_vaccinations(records)

# %%
highest_death_count(records, partition_key="continent")

# %%
global_numbers(records)
