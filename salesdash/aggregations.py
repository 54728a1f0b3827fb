from __future__ import annotations

from typing import Iterable, List

import pandas as pd


YEAR_REGION_COLUMNS = ["year", "region", "sales_volume"]
MODEL_STATS_COLUMNS = ["model", "total_sales", "avg_price", "avg_engine_size", "sample_count"]
TRANSMISSION_FUEL_COLUMNS = ["transmission", "fuel_type", "sales_volume"]

KEY_COLUMNS = {"region", "model", "transmission", "fuel_type"}


def _empty(columns: List[str]) -> pd.DataFrame:
    return pd.DataFrame({c: pd.Series(dtype=object if c in KEY_COLUMNS else float) for c in columns})


def _first_seen(values: pd.Series) -> List[str]:
    return [str(v) for v in pd.unique(values)]


def aggregate_year_region_totals(rows: pd.DataFrame, years: Iterable[int], regions: Iterable[str]) -> pd.DataFrame:
    """Sum sales volume per (year, region), zero-filled over the full years x regions grid.

    Years come out chronological, regions in the order given.
    """
    years = sorted(int(y) for y in years)
    regions = list(regions)
    if not years or not regions:
        return _empty(YEAR_REGION_COLUMNS)
    grid = pd.MultiIndex.from_product([years, regions], names=["year", "region"])
    if rows.empty:
        sums = pd.Series(0.0, index=grid)
    else:
        sums = rows.groupby(["year", "region"])["sales_volume"].sum().reindex(grid, fill_value=0.0)
    out = sums.rename("sales_volume").reset_index()
    out["year"] = out["year"].astype(int)
    out["sales_volume"] = out["sales_volume"].astype(float)
    return out


def aggregate_model_stats(rows: pd.DataFrame) -> pd.DataFrame:
    """Per-model totals and means; models are ordered alphabetically.

    Only models with at least one row appear, so means never divide by zero.
    """
    if rows.empty:
        return _empty(MODEL_STATS_COLUMNS)
    grouped = rows.groupby("model", sort=True)
    out = pd.DataFrame(
        {
            "total_sales": grouped["sales_volume"].sum(),
            "avg_price": grouped["price_usd"].mean(),
            "avg_engine_size": grouped["engine_size_l"].mean(),
            "sample_count": grouped.size(),
        }
    ).reset_index()
    out[["avg_price", "avg_engine_size"]] = out[["avg_price", "avg_engine_size"]].fillna(0.0)
    out["sample_count"] = out["sample_count"].astype(int)
    return out[MODEL_STATS_COLUMNS]


def aggregate_transmission_fuel(rows: pd.DataFrame) -> pd.DataFrame:
    """Sum sales volume per (transmission, fuel type) over the cross product seen in ``rows``.

    Both dimensions keep first-seen order; absent combinations are 0.
    """
    if rows.empty:
        return _empty(TRANSMISSION_FUEL_COLUMNS)
    transmissions = _first_seen(rows["transmission"])
    fuels = _first_seen(rows["fuel_type"])
    grid = pd.MultiIndex.from_product([transmissions, fuels], names=["transmission", "fuel_type"])
    sums = rows.groupby(["transmission", "fuel_type"])["sales_volume"].sum().reindex(grid, fill_value=0.0)
    out = sums.rename("sales_volume").reset_index()
    out["sales_volume"] = out["sales_volume"].astype(float)
    return out
