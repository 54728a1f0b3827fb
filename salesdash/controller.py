from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from salesdash.charts import BarChart, ChartRenderer, ScatterChart, TrendChart
from salesdash.config import DashboardSettings
from salesdash.data import SalesDataset, SourceLike, load_dataset
from salesdash.errors import DashboardError, InvalidRangeError, OutOfRangeError
from salesdash.playback import CooperativeScheduler, PlaybackController, PlaybackState
from salesdash.presenter import enlarge
from salesdash.selection import SelectionState


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notice:
    level: str
    message: str


class DashboardController:
    """Routes user events to the selection state and redraws the affected charts.

    Validation errors are caught here: the mutation is rejected, the previous state
    stays in place, and a ``Notice`` is queued for the UI.
    """

    def __init__(
        self,
        dataset: SalesDataset,
        settings: Optional[DashboardSettings] = None,
        scheduler: Optional[CooperativeScheduler] = None,
    ):
        self.dataset = dataset
        self.settings = settings or DashboardSettings()
        self.selection = SelectionState(dataset.frame, years=dataset.years, regions=dataset.regions)
        self.trend = TrendChart(self.settings.trend.to_scales_config())
        self.scatter = ScatterChart(self.settings.scatter.to_scales_config())
        self.bar = BarChart(self.settings.bar.to_scales_config())
        self.scheduler = scheduler or CooperativeScheduler()
        self.playback = PlaybackController(
            self.selection,
            self.scheduler,
            interval=self.settings.tick_interval_s,
            on_tick=self._on_tick,
        )
        self._notices: List[Notice] = []
        self.render_all()

    @classmethod
    def from_source(
        cls,
        source: SourceLike,
        settings: Optional[DashboardSettings] = None,
        scheduler: Optional[CooperativeScheduler] = None,
    ) -> "DashboardController":
        return cls(load_dataset(source), settings, scheduler)

    @property
    def renderers(self) -> Dict[str, ChartRenderer]:
        return {"trend": self.trend, "scatter": self.scatter, "bar": self.bar}

    # ----- drawing -----
    def render_all(self) -> None:
        views = self.selection.views
        self.trend.render(
            views.year_region_totals,
            active_regions=self.selection.active_regions,
            current_year=self.selection.current_year,
        )
        self.scatter.render(views.model_stats)
        self.bar.render(views.transmission_fuel)

    def refresh_year_views(self) -> None:
        views = self.selection.views
        self.trend.update(
            views.year_region_totals,
            active_regions=self.selection.active_regions,
            current_year=self.selection.current_year,
        )
        self.scatter.update(views.model_stats)
        self.bar.update(views.transmission_fuel)

    # ----- events -----
    def apply_year_range(self, start: int, end: int) -> bool:
        try:
            self.selection.set_year_range(start, end)
        except InvalidRangeError as exc:
            logger.warning("Rejected year range: %s", exc)
            self._notify("warning", str(exc))
            return False
        self.render_all()
        self._notify("info", f"Year range updated: {start} - {end}")
        return True

    def scrub(self, year: int) -> bool:
        try:
            self.selection.set_current_year(year)
        except OutOfRangeError as exc:
            logger.warning("Rejected scrub: %s", exc)
            self._notify("warning", str(exc))
            return False
        self.refresh_year_views()
        return True

    def set_regions(self, regions: Iterable[str]) -> None:
        self.selection.set_active_regions(regions)
        self.refresh_year_views()

    def toggle_region(self, region: str) -> None:
        self.selection.toggle_region(region)
        self.refresh_year_views()

    def select_model(self, model: Optional[str]) -> None:
        self.selection.set_selected_model(model)
        self.refresh_year_views()

    def toggle_playback(self) -> PlaybackState:
        return self.playback.toggle()

    def _on_tick(self, year: int) -> None:
        self.refresh_year_views()

    # ----- presentation -----
    def enlarged_output(self, name: str) -> Dict:
        renderer = self.renderers[name]
        if renderer.output is None:
            raise DashboardError(f"{name} chart has not been rendered")
        return enlarge(renderer.output, self.settings.modal_scale)

    def export_filtered_csv(self) -> bytes:
        return self.selection.views.filtered.to_csv(index=False).encode("utf-8")

    def _notify(self, level: str, message: str) -> None:
        self._notices.append(Notice(level, message))

    def pop_notices(self) -> List[Notice]:
        notices, self._notices = self._notices, []
        return notices

    def teardown(self) -> None:
        self.playback.teardown()
