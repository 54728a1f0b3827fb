import pandas as pd

from salesdash.aggregations import (
    MODEL_STATS_COLUMNS,
    TRANSMISSION_FUEL_COLUMNS,
    aggregate_model_stats,
    aggregate_transmission_fuel,
    aggregate_year_region_totals,
)

from conftest import make_frame, make_row


def _as_mapping(df, keys, value):
    return df.set_index(keys)[value].to_dict()


def test_year_region_totals_scenario():
    rows = make_frame([
        make_row(year=2015, region="Asia", volume=100),
        make_row(year=2015, region="Europe", volume=50),
    ])
    totals = aggregate_year_region_totals(rows, [2015], ["Asia", "Europe"])
    assert _as_mapping(totals, ["year", "region"], "sales_volume") == {
        (2015, "Asia"): 100,
        (2015, "Europe"): 50,
    }


def test_year_region_totals_are_dense_and_zero_filled(sales_frame):
    years = [2015, 2016, 2017]
    regions = ["Africa", "Asia", "Europe", "Middle East"]
    totals = aggregate_year_region_totals(sales_frame, years, regions)

    assert len(totals) == len(years) * len(regions)
    assert (totals["sales_volume"] >= 0).all()
    mapping = _as_mapping(totals, ["year", "region"], "sales_volume")
    assert mapping[(2016, "Europe")] == 0
    assert mapping[(2015, "Middle East")] == 0
    assert totals["year"].tolist()[:4] == [2015] * 4


def test_year_region_totals_sum_matches_rows_per_year(sales_frame):
    totals = aggregate_year_region_totals(sales_frame, [2015, 2016, 2017], ["Africa", "Asia", "Europe"])
    per_year = totals.groupby("year")["sales_volume"].sum()
    expected = sales_frame.groupby("year")["sales_volume"].sum()
    pd.testing.assert_series_equal(per_year, expected, check_names=False, check_index_type=False)


def test_year_region_totals_with_no_rows():
    empty = make_frame([])
    totals = aggregate_year_region_totals(empty, [2020, 2021], ["Asia", "Europe", "Africa"])
    assert len(totals) == 6
    assert totals["sales_volume"].sum() == 0


def test_year_region_totals_without_regions():
    totals = aggregate_year_region_totals(make_frame([make_row()]), [2015], [])
    assert totals.empty
    assert list(totals.columns) == ["year", "region", "sales_volume"]


def test_model_stats_means_and_counts(sales_frame):
    subset = sales_frame[sales_frame["year"] == 2015]
    stats = aggregate_model_stats(subset).set_index("model")

    assert list(stats.index) == ["3 Series", "X5"]
    assert stats.loc["X5", "total_sales"] == 150
    assert stats.loc["X5", "avg_price"] == 55000
    assert stats.loc["X5", "avg_engine_size"] == 2.5
    assert stats.loc["X5", "sample_count"] == 2
    assert stats.loc["3 Series", "sample_count"] == 1


def test_model_stats_empty_subset_has_no_nan():
    stats = aggregate_model_stats(make_frame([]))
    assert stats.empty
    assert list(stats.columns) == MODEL_STATS_COLUMNS
    assert not stats.isna().any().any()


def test_model_stats_zero_values_do_not_produce_nan():
    stats = aggregate_model_stats(make_frame([make_row(price=0, engine=0, volume=0)]))
    assert not stats.isna().any().any()
    assert stats.iloc[0]["avg_price"] == 0


def test_transmission_fuel_fills_cross_product(sales_frame):
    subset = sales_frame[sales_frame["year"] == 2015]
    totals = aggregate_transmission_fuel(subset)

    assert len(totals) == 4
    assert totals["transmission"].tolist() == ["Automatic", "Automatic", "Manual", "Manual"]
    assert totals["fuel_type"].tolist() == ["Petrol", "Diesel", "Petrol", "Diesel"]
    assert _as_mapping(totals, ["transmission", "fuel_type"], "sales_volume") == {
        ("Automatic", "Petrol"): 130,
        ("Automatic", "Diesel"): 0,
        ("Manual", "Petrol"): 0,
        ("Manual", "Diesel"): 50,
    }


def test_transmission_fuel_dimensions_come_from_subset(sales_frame):
    subset = sales_frame[sales_frame["year"] == 2017]
    totals = aggregate_transmission_fuel(subset)
    assert set(totals["transmission"]) == {"Automatic"}
    assert set(totals["fuel_type"]) == {"Electric", "Hybrid"}


def test_transmission_fuel_empty_subset():
    totals = aggregate_transmission_fuel(make_frame([]))
    assert totals.empty
    assert list(totals.columns) == TRANSMISSION_FUEL_COLUMNS


def test_aggregations_are_deterministic(sales_frame):
    for _ in range(2):
        pd.testing.assert_frame_equal(
            aggregate_model_stats(sales_frame), aggregate_model_stats(sales_frame.copy())
        )
        pd.testing.assert_frame_equal(
            aggregate_transmission_fuel(sales_frame), aggregate_transmission_fuel(sales_frame.copy())
        )
        pd.testing.assert_frame_equal(
            aggregate_year_region_totals(sales_frame, [2015, 2016, 2017], ["Asia", "Europe"]),
            aggregate_year_region_totals(sales_frame.copy(), [2015, 2016, 2017], ["Asia", "Europe"]),
        )
