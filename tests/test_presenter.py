import json

import pytest

from salesdash.charts import BarChart, TrendChart
from salesdash.errors import DashboardError
from salesdash.presenter import enlarge, to_html, to_json
from salesdash.scales import ScalesConfig
from salesdash.selection import SelectionState


@pytest.fixture
def selection(sales_frame):
    return SelectionState(sales_frame)


def test_enlarge_scales_layered_chart_without_mutating_source(selection):
    trend = TrendChart(ScalesConfig(width=400, height=200))
    trend.render(selection.views.year_region_totals, current_year=2015)
    original = trend.output

    enlarged = enlarge(original, 1.5)

    assert enlarged["width"] == 600
    assert enlarged["height"] == 300
    assert original["width"] == 400
    assert enlarged["layer"] == original["layer"]
    assert enlarged["datasets"] == original["datasets"]


def test_enlarge_scales_nested_sizes():
    spec = {"hconcat": [{"width": 100, "height": 50}, {"width": 10}], "width": "container"}
    enlarged = enlarge(spec, 2)
    assert enlarged["hconcat"] == [{"width": 200, "height": 100}, {"width": 20}]
    assert enlarged["width"] == "container"


def test_enlarge_requires_rendered_chart():
    with pytest.raises(DashboardError):
        enlarge({})
    with pytest.raises(ValueError):
        enlarge({"width": 10}, 0)


def test_json_export_round_trips(selection):
    bar = BarChart()
    bar.render(selection.views.transmission_fuel)
    assert json.loads(to_json(bar.output)) == bar.output


def test_html_export_embeds_spec(selection):
    bar = BarChart()
    bar.render(selection.views.transmission_fuel)
    html = to_html(bar.output, title="Specification Distribution")
    assert "vega-embed" in html
    assert "Specification Distribution" in html
