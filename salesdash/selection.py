from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import FrozenSet, Iterable, List, Optional, Sequence

import pandas as pd

from salesdash.aggregations import (
    aggregate_model_stats,
    aggregate_transmission_fuel,
    aggregate_year_region_totals,
)
from salesdash.errors import InvalidRangeError, OutOfRangeError


logger = logging.getLogger(__name__)

ALL_MODELS = "__ALL__"
ALL_MODELS_LABEL = "All models"


def normalize_model(value: Optional[str]) -> str:
    if value is None:
        return ALL_MODELS
    text = str(value).strip()
    if not text or text in {ALL_MODELS, ALL_MODELS_LABEL}:
        return ALL_MODELS
    return text


@dataclass(frozen=True)
class DerivedViews:
    filtered: pd.DataFrame
    year_region_totals: pd.DataFrame
    model_stats: pd.DataFrame
    transmission_fuel: pd.DataFrame


class SelectionState:
    """Filter and playback state for one dashboard session.

    All mutations go through the methods below; each one rebuilds the affected
    derived views and swaps them in as a single ``DerivedViews`` object.
    """

    def __init__(self, data: pd.DataFrame, *, years: Optional[Sequence[int]] = None, regions: Optional[Sequence[str]] = None):
        self._data = data
        self.year_domain: List[int] = sorted(int(y) for y in (years if years is not None else data["year"].unique()))
        self.all_regions: List[str] = list(regions) if regions is not None else sorted(data["region"].unique())
        if not self.year_domain:
            raise InvalidRangeError(0, 0, "dataset has no years")
        self.year_range_start = self.year_domain[0]
        self.year_range_end = self.year_domain[-1]
        self.active_regions: FrozenSet[str] = frozenset(self.all_regions)
        self.selected_model = ALL_MODELS
        self.current_year = self.year_range_start
        self.is_playing = False
        self.views = self._compute_views()

    # ----- derived state -----
    @property
    def range_years(self) -> List[int]:
        return list(range(self.year_range_start, self.year_range_end + 1))

    def _filter_by_range(self) -> pd.DataFrame:
        df = self._data
        return df[(df["year"] >= self.year_range_start) & (df["year"] <= self.year_range_end)]

    def year_subset(self, filtered: Optional[pd.DataFrame] = None) -> pd.DataFrame:
        df = self.views.filtered if filtered is None else filtered
        mask = (df["year"] == self.current_year) & df["region"].isin(self.active_regions)
        if self.selected_model != ALL_MODELS:
            mask &= df["model"] == self.selected_model
        return df[mask]

    def _compute_views(self) -> DerivedViews:
        filtered = self._filter_by_range()
        subset = self.year_subset(filtered)
        return DerivedViews(
            filtered=filtered,
            year_region_totals=aggregate_year_region_totals(filtered, self.range_years, self.all_regions),
            model_stats=aggregate_model_stats(subset),
            transmission_fuel=aggregate_transmission_fuel(subset),
        )

    def _recompute_year_views(self) -> None:
        subset = self.year_subset()
        self.views = replace(
            self.views,
            model_stats=aggregate_model_stats(subset),
            transmission_fuel=aggregate_transmission_fuel(subset),
        )

    # ----- operations -----
    def set_year_range(self, start: int, end: int) -> None:
        start, end = int(start), int(end)
        if start > end:
            raise InvalidRangeError(start, end)
        lo, hi = self.year_domain[0], self.year_domain[-1]
        if start < lo or end > hi:
            raise InvalidRangeError(start, end, f"bounds must lie within {lo}-{hi}")
        self.year_range_start = start
        self.year_range_end = end
        if not start <= self.current_year <= end:
            self.current_year = start
        self.views = self._compute_views()
        logger.debug("Year range set to %d-%d (current %d)", start, end, self.current_year)

    def set_current_year(self, year: int) -> None:
        year = int(year)
        if not self.year_range_start <= year <= self.year_range_end:
            raise OutOfRangeError(year, self.year_range_start, self.year_range_end)
        self.current_year = year
        self._recompute_year_views()

    def set_active_regions(self, regions: Iterable[str]) -> None:
        requested = set(regions)
        unknown = requested.difference(self.all_regions)
        if unknown:
            logger.warning("Ignoring unknown region(s): %s", ", ".join(sorted(unknown)))
        self.active_regions = frozenset(requested.intersection(self.all_regions))
        self._recompute_year_views()

    def toggle_region(self, region: str) -> None:
        if region not in self.all_regions:
            logger.warning("Ignoring toggle of unknown region %r", region)
            return
        self.set_active_regions(self.active_regions.symmetric_difference({region}))

    def set_selected_model(self, model: Optional[str]) -> None:
        self.selected_model = normalize_model(model)
        self._recompute_year_views()

    def summary(self) -> List[str]:
        years = f"Years: {self.year_range_start}–{self.year_range_end}"
        if self.active_regions == frozenset(self.all_regions):
            regions = "Regions: All"
        elif not self.active_regions:
            regions = "Regions: None"
        else:
            regions = f"Regions: {', '.join(r for r in self.all_regions if r in self.active_regions)}"
        model = "Model: All" if self.selected_model == ALL_MODELS else f"Model: {self.selected_model}"
        return [years, regions, model]
