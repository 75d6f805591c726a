"""
Integration tests of `covagg.reports`
"""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest
from loguru import logger

from covagg.filters import location_contains
from covagg.loading import load_records_csv, merge_record_tables
from covagg.reports import (
    count_locations,
    death_percentage,
    global_numbers,
    highest_death_count,
    highest_infection_rate,
    percent_population_infected,
    rolling_vaccinations,
)


def test_death_percentage(example_records):
    res = death_percentage(example_records)

    peru = res[res["location"] == "Peru"]
    assert peru["cumulative_new_cases"].tolist() == [10.0, 30.0, 40.0]
    assert peru["cumulative_new_deaths"].tolist() == [1.0, 2.0, 4.0]
    assert peru["death_percentage"].tolist() == [10.0, 6.67, 10.0]

    chile = res[res["location"] == "Chile"]
    # No cases yet, so no death percentage yet
    assert np.isnan(chile["death_percentage"].iloc[0])
    assert chile["death_percentage"].iloc[1:].tolist() == [0.0, 0.0]


def test_death_percentage_single_location(example_records):
    res = death_percentage(example_records, row_filter=location_contains("per"))

    assert res["location"].unique().tolist() == ["Peru"]


def test_death_percentage_logs_clashing_records(example_records):
    records = pd.concat([example_records, example_records.iloc[[0]]])
    messages = []

    logger.enable("covagg")
    handler_id = logger.add(messages.append, level="WARNING", format="{message}")
    try:
        res = death_percentage(records)
    finally:
        logger.remove(handler_id)
        logger.disable("covagg")

    assert any("share a (location, date) pair" in m for m in messages)
    # The clashing records are still used
    assert res.shape[0] == records.shape[0]


def test_percent_population_infected(example_records):
    res = percent_population_infected(example_records)

    gibraltar = res[res["location"] == "Gibraltar"]
    assert gibraltar["new_cases_pct_of_population"].tolist() == [2.0, 5.0, 5.0]


def test_highest_infection_rate(example_records):
    res = highest_infection_rate(example_records)

    exp = pd.DataFrame(
        {
            "population": [100.0, 1000.0, 500.0],
            "highest_infection_count": [5.0, 40.0, 5.0],
            "percent_population_infected": [5.0, 4.0, 1.0],
        },
        index=pd.Index(["Gibraltar", "Peru", "Chile"], name="location"),
    )
    pd.testing.assert_frame_equal(res, exp, check_index_type=False)


@pytest.mark.parametrize(
    "partition_key, exp",
    (
        pytest.param(
            "location",
            pd.Series(
                [4.0, 1.0, 0.0],
                index=pd.Index(["Peru", "Gibraltar", "Chile"], name="location"),
                name="total_death_count",
            ),
            id="location",
        ),
        pytest.param(
            "continent",
            pd.Series(
                [4.0, 1.0],
                index=pd.Index(["South America", "Europe"], name="continent"),
                name="total_death_count",
            ),
            id="continent",
        ),
    ),
)
def test_highest_death_count(example_records, partition_key, exp):
    res = highest_death_count(example_records, partition_key=partition_key)

    pd.testing.assert_series_equal(res, exp, check_index_type=False)


def test_global_numbers_by_date(example_records):
    res = global_numbers(example_records)

    exp = pd.DataFrame(
        {
            "total_cases": [12.0, 28.0, 10.0],
            "total_deaths": [1.0, 2.0, 2.0],
            "death_percentage": [8.33, 7.14, 20.0],
        },
        index=pd.Index(
            pd.to_datetime(["2021-01-01", "2021-01-02", "2021-01-03"]), name="date"
        ),
    )
    pd.testing.assert_frame_equal(res, exp, check_index_type=False)

    # The sum over real locations matches the World pseudo-location
    world = example_records[example_records["location"] == "World"].set_index("date")
    np.testing.assert_array_equal(res["total_cases"], world["new_cases"])
    np.testing.assert_array_equal(res["total_deaths"], world["new_deaths"])


def test_global_numbers_by_date_shuffled_input(example_records):
    shuffled = example_records.sample(frac=1.0, random_state=0)

    res = global_numbers(shuffled)

    assert res.index.is_monotonic_increasing
    pd.testing.assert_frame_equal(res, global_numbers(example_records))


def test_global_numbers_overall(example_records):
    res = global_numbers(example_records, by_date=False)

    pd.testing.assert_frame_equal(
        res,
        pd.DataFrame(
            {
                "total_cases": [50.0],
                "total_deaths": [5.0],
                "death_percentage": [10.0],
            }
        ),
    )


def test_global_numbers_pseudo_locations_double_count(example_records):
    res = global_numbers(example_records, by_date=False, row_filter=None)

    assert res["total_cases"].iloc[0] == 100.0  # noqa: PLR2004


def test_rolling_vaccinations(example_records):
    res = rolling_vaccinations(example_records)

    assert "World" not in res["location"].tolist()

    pct = res.groupby("location")["new_vaccinations_pct_of_population"].apply(list)
    assert pct.to_dict() == {
        "Chile": [0.0, 0.0, 0.0],
        "Gibraltar": [100.0, 182.0, 182.0],
        "Peru": [0.0, 0.5, 2.0],
    }


def test_count_locations(example_records):
    res = count_locations(example_records)

    assert res.name == "n_locations"
    assert res.to_dict() == {"Europe": 1, "South America": 2}


def test_from_csv(tmp_path):
    deaths_file = tmp_path / "deaths.csv"
    deaths_file.write_text(
        "location,continent,date,population,new_cases,new_deaths\n"
        "Gibraltar,Europe,2021-03-02,33690,3,0\n"
        "Gibraltar,Europe,2021-03-01,33690,5,1\n"
        "Gibraltar,Europe,2021-03-03,33690,,0\n"
        "Europe,,2021-03-01,747636045,100000,2000\n"
    )
    vaccinations_file = tmp_path / "vaccinations.csv"
    vaccinations_file.write_text(
        "location,continent,date,new_vaccinations\n"
        "Gibraltar,Europe,2021-03-01,33690\n"
        "Gibraltar,Europe,2021-03-02,\n"
        "Gibraltar,Europe,2021-03-03,27625.8\n"
        "Europe,,2021-03-01,5000000\n"
    )

    records = merge_record_tables(
        load_records_csv(deaths_file), load_records_csv(vaccinations_file)
    )
    res = rolling_vaccinations(records)

    assert res["location"].unique().tolist() == ["Gibraltar"]
    assert res["date"].tolist() == list(
        pd.to_datetime(["2021-03-01", "2021-03-02", "2021-03-03"])
    )
    assert res["new_vaccinations_pct_of_population"].tolist() == [100.0, 100.0, 182.0]
