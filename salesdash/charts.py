from __future__ import annotations

from typing import Any, Dict, FrozenSet, Iterable, List, Optional

import altair as alt
import numpy as np
import pandas as pd

from salesdash.scales import (
    FUEL_COLORS,
    MODEL_COLORS,
    LinearScale,
    ScalesConfig,
    cycle_colors,
    region_color,
)

alt.data_transformers.disable_max_rows()

AXIS_LABEL_COLOR = "#94a3b8"
MARKER_COLOR = "#3b82f6"


def to_vega_spec(chart: alt.TopLevelMixin) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def _ordered(values: pd.Series) -> List[str]:
    return [str(v) for v in pd.unique(values)]


def _axis(fmt: str = ",", **kwargs) -> alt.Axis:
    return alt.Axis(format=fmt, labelColor=AXIS_LABEL_COLOR, titleColor=AXIS_LABEL_COLOR, **kwargs)


class ChartRenderer:
    """Builds one chart surface from an aggregation result.

    ``render`` rebuilds scales and marks from scratch; ``update`` keeps the scale
    objects and only re-fits their domains before replacing the marks.
    """

    title = ""

    def __init__(self, config: Optional[ScalesConfig] = None):
        self.config = config or ScalesConfig()
        self.scales: Dict[str, LinearScale] = {}
        self.chart: Optional[alt.TopLevelMixin] = None
        self.output: Optional[Dict[str, Any]] = None

    def render(self, result: pd.DataFrame, scales_config: Optional[ScalesConfig] = None) -> None:
        if scales_config is not None:
            self.config = scales_config
        self.scales = self.build_scales(result)
        self._draw(result)

    def update(self, result: pd.DataFrame) -> None:
        if not self.scales:
            self.render(result)
            return
        self.refit_scales(result)
        self._draw(result)

    def build_scales(self, result: pd.DataFrame) -> Dict[str, LinearScale]:
        raise NotImplementedError

    def refit_scales(self, result: pd.DataFrame) -> None:
        pass

    def build_chart(self, result: pd.DataFrame) -> alt.TopLevelMixin:
        raise NotImplementedError

    def _draw(self, result: pd.DataFrame) -> None:
        chart = self.build_chart(result).properties(
            width=self.config.width,
            height=self.config.height,
            title=self.title,
        )
        self.chart = chart
        self.output = to_vega_spec(chart)


class TrendChart(ChartRenderer):
    """Sales volume per region across the selected years, with a current-year marker."""

    title = "Sales Trend by Year"

    def __init__(self, config: Optional[ScalesConfig] = None):
        super().__init__(config)
        self.active_regions: Optional[FrozenSet[str]] = None
        self.current_year: Optional[int] = None

    def render(
        self,
        result: pd.DataFrame,
        scales_config: Optional[ScalesConfig] = None,
        *,
        active_regions: Optional[Iterable[str]] = None,
        current_year: Optional[int] = None,
    ) -> None:
        self._set_highlight(active_regions, current_year)
        super().render(result, scales_config)

    def update(
        self,
        result: pd.DataFrame,
        *,
        active_regions: Optional[Iterable[str]] = None,
        current_year: Optional[int] = None,
    ) -> None:
        self._set_highlight(active_regions, current_year)
        super().update(result)

    def _set_highlight(self, active_regions: Optional[Iterable[str]], current_year: Optional[int]) -> None:
        if active_regions is not None:
            self.active_regions = frozenset(active_regions)
        if current_year is not None:
            self.current_year = int(current_year)

    def build_scales(self, result: pd.DataFrame) -> Dict[str, LinearScale]:
        years = result["year"] if not result.empty else pd.Series([self.current_year or 0])
        x = LinearScale((years.min(), years.max()), (0, self.config.width))
        y = LinearScale.from_max(result["sales_volume"], (self.config.height, 0))
        return {"x": x, "y": y}

    def build_chart(self, result: pd.DataFrame) -> alt.TopLevelMixin:
        data = result.copy()
        regions = _ordered(data["region"])
        active = self.active_regions if self.active_regions is not None else frozenset(regions)
        data["status"] = np.where(data["region"].isin(active), "active", "inactive")
        x_scale = self.scales["x"].to_altair()
        year_count = int(data["year"].nunique()) if not data.empty else 1

        lines = (
            alt.Chart(data)
            .mark_line(interpolate="monotone")
            .encode(
                x=alt.X("year:Q", title="Year", scale=x_scale, axis=_axis("d", tickCount=year_count)),
                y=alt.Y("sales_volume:Q", title="Sales Volume", scale=self.scales["y"].to_altair(), axis=_axis()),
                color=alt.Color(
                    "region:N",
                    title="Region",
                    scale=alt.Scale(domain=regions, range=[region_color(r) for r in regions]),
                ),
                opacity=alt.Opacity(
                    "status:N", scale=alt.Scale(domain=["active", "inactive"], range=[0.9, 0.1]), legend=None
                ),
                strokeWidth=alt.StrokeWidth(
                    "status:N", scale=alt.Scale(domain=["active", "inactive"], range=[3, 1.5]), legend=None
                ),
                tooltip=[
                    alt.Tooltip("region:N", title="Region"),
                    alt.Tooltip("year:Q", title="Year", format="d"),
                    alt.Tooltip("sales_volume:Q", title="Sales", format=","),
                ],
            )
        )
        if self.current_year is None:
            return alt.layer(lines)
        marker = (
            alt.Chart(pd.DataFrame({"year": [self.current_year]}))
            .mark_rule(color=MARKER_COLOR, strokeDash=[4, 4], strokeWidth=2, opacity=0.9)
            .encode(x=alt.X("year:Q", scale=x_scale))
        )
        return alt.layer(lines, marker)


class ScatterChart(ChartRenderer):
    """Average price vs total sales per model for the current year."""

    title = "Price vs Sales"

    def build_scales(self, result: pd.DataFrame) -> Dict[str, LinearScale]:
        return {
            "x": LinearScale.from_max(result["avg_price"], (0, self.config.width)),
            "y": LinearScale.from_max(result["total_sales"], (self.config.height, 0)),
        }

    def refit_scales(self, result: pd.DataFrame) -> None:
        self.scales["x"].rescale(result["avg_price"])
        self.scales["y"].rescale(result["total_sales"])

    def build_chart(self, result: pd.DataFrame) -> alt.TopLevelMixin:
        models = _ordered(result["model"])
        y_domain = list(self.scales["y"].domain)
        return (
            alt.Chart(result)
            .mark_circle(opacity=0.85, stroke="#fff", strokeWidth=2)
            .encode(
                x=alt.X("avg_price:Q", title="Price (USD)", scale=self.scales["x"].to_altair(), axis=_axis(tickCount=6)),
                y=alt.Y("total_sales:Q", title="Sales Volume", scale=self.scales["y"].to_altair(), axis=_axis(tickCount=6)),
                size=alt.Size("total_sales:Q", scale=alt.Scale(type="sqrt", domain=y_domain, range=[25, 900]), legend=None),
                color=alt.Color(
                    "model:N",
                    title="Models",
                    scale=alt.Scale(domain=models, range=cycle_colors(models, MODEL_COLORS)),
                ),
                tooltip=[
                    alt.Tooltip("model:N", title="Model"),
                    alt.Tooltip("total_sales:Q", title="Sales", format=","),
                    alt.Tooltip("avg_price:Q", title="Avg Price", format="$,.0f"),
                    alt.Tooltip("avg_engine_size:Q", title="Engine (L)", format=".1f"),
                    alt.Tooltip("sample_count:Q", title="Records"),
                ],
            )
        )


class BarChart(ChartRenderer):
    """Sales volume per transmission, one bar per fuel type."""

    title = "Specification Distribution"

    def build_scales(self, result: pd.DataFrame) -> Dict[str, LinearScale]:
        return {"y": LinearScale.from_max(result["sales_volume"], (self.config.height, 0))}

    def refit_scales(self, result: pd.DataFrame) -> None:
        self.scales["y"].rescale(result["sales_volume"])

    def build_chart(self, result: pd.DataFrame) -> alt.TopLevelMixin:
        transmissions = _ordered(result["transmission"])
        fuels = _ordered(result["fuel_type"])
        return (
            alt.Chart(result)
            .mark_bar(cornerRadiusTopLeft=4, cornerRadiusTopRight=4)
            .encode(
                x=alt.X(
                    "transmission:N",
                    title="Transmission",
                    sort=transmissions or None,
                    scale=alt.Scale(paddingInner=0.25),
                    axis=alt.Axis(labelColor=AXIS_LABEL_COLOR, titleColor=AXIS_LABEL_COLOR, labelAngle=0),
                ),
                xOffset=alt.XOffset("fuel_type:N", sort=fuels or None, scale=alt.Scale(paddingInner=0.05)),
                y=alt.Y("sales_volume:Q", title="Sales Volume", scale=self.scales["y"].to_altair(), axis=_axis(tickCount=6)),
                color=alt.Color(
                    "fuel_type:N",
                    title="Fuel Type",
                    scale=alt.Scale(domain=fuels, range=cycle_colors(fuels, FUEL_COLORS)),
                ),
                tooltip=[
                    alt.Tooltip("transmission:N", title="Transmission"),
                    alt.Tooltip("fuel_type:N", title="Fuel"),
                    alt.Tooltip("sales_volume:Q", title="Value", format=","),
                ],
            )
        )
