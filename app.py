import logging
from contextlib import contextmanager
from typing import List, Optional

import streamlit as st

from salesdash import presenter
from salesdash.config import configure_logging, load_settings
from salesdash.controller import DashboardController
from salesdash.errors import DataLoadError
from salesdash.selection import ALL_MODELS, ALL_MODELS_LABEL

logger = logging.getLogger(__name__)

CHART_CARDS = {
    "trend": "Sales Trend by Year",
    "scatter": "Price vs Sales",
    "bar": "Specification Distribution",
}


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #334155;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #94a3b8;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;}
        .card-title {font-weight: 600;font-size: 1.0rem;margin-bottom: 6px;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #1e293b;border: 1px solid #334155;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #e2e8f0;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container(border=True)
    container.markdown(f"<div class='card-title'>{title}</div>", unsafe_allow_html=True)
    with container:
        yield container


def format_filter_summary(chips: List[str]) -> str:
    return "".join([f"<span class='chip'>{txt}</span>" for txt in chips])


def render_page_header(title: str, breadcrumb: str, filter_summary_html: str, export_csv: Optional[bytes] = None, export_name: str = "export.csv"):
    inject_base_styles()
    c1, c2 = st.columns([8, 2])
    with c1:
        st.markdown(
            f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
            unsafe_allow_html=True,
        )
    with c2:
        if export_csv:
            st.download_button("Export CSV", data=export_csv, file_name=export_name, mime="text/csv")
    st.markdown(f"<div class='chip-row'>{filter_summary_html}</div>", unsafe_allow_html=True)


def show_notices(ctrl: DashboardController):
    for notice in ctrl.pop_notices():
        if notice.level == "info":
            st.toast(notice.message)
        else:
            st.warning(notice.message)


def get_controller(source_key: str, source) -> DashboardController:
    if st.session_state.get("controller_key") == source_key:
        return st.session_state["controller"]
    previous = st.session_state.pop("controller", None)
    if previous is not None:
        previous.teardown()
    try:
        ctrl = DashboardController.from_source(source, settings)
    except DataLoadError as exc:
        logger.error("Dataset load failed: %s", exc)
        st.session_state.pop("controller_key", None)
        st.error(f"Could not load the sales dataset. {exc}")
        st.stop()
    st.session_state["controller"] = ctrl
    st.session_state["controller_key"] = source_key
    return ctrl


# ---------- UI setup ----------
settings = load_settings()
configure_logging(settings.log_level)
st.set_page_config(page_title="Vehicle Sales Dashboard", layout="wide")
inject_base_styles()
st.title("Vehicle Sales Dashboard")
st.caption("Sales trend, price vs volume and specification mix, filtered by year, region and model.")

with st.sidebar:
    st.markdown("### Data")
    uploaded = st.file_uploader("Sales CSV (optional)", type=["csv"])
    if st.button("Reload data"):
        old = st.session_state.pop("controller", None)
        if old is not None:
            old.teardown()
        st.session_state.pop("controller_key", None)
        st.rerun()

if uploaded is not None:
    controller = get_controller(f"upload:{uploaded.name}:{uploaded.size}", uploaded)
else:
    controller = get_controller(f"path:{settings.data_path}", settings.data_path)
selection = controller.selection
dataset = controller.dataset


# ----- Sidebar: filters -----
def _on_model_change():
    label = st.session_state["model_select"]
    controller.select_model(ALL_MODELS if label == ALL_MODELS_LABEL else label)


def _on_region_change(region: str):
    controller.toggle_region(region)


with st.sidebar:
    st.markdown("---")
    st.markdown("### Filters")
    model_options = [ALL_MODELS_LABEL] + dataset.models
    st.session_state["model_select"] = ALL_MODELS_LABEL if selection.selected_model == ALL_MODELS else selection.selected_model
    st.selectbox("Model", options=model_options, key="model_select", on_change=_on_model_change)

    st.markdown("**Regions**")
    for region in dataset.regions:
        key = f"region::{region}"
        st.session_state[key] = region in selection.active_regions
        st.checkbox(region, key=key, on_change=_on_region_change, args=(region,))

    st.markdown("**Year range**")
    yc1, yc2 = st.columns(2)
    year_start = yc1.selectbox("Start", options=dataset.years, index=dataset.years.index(selection.year_range_start))
    year_end = yc2.selectbox("End", options=dataset.years, index=dataset.years.index(selection.year_range_end))
    if st.button("Apply year range"):
        controller.apply_year_range(year_start, year_end)

render_page_header(
    "Sales Overview",
    "Dashboard / Sales",
    format_filter_summary(selection.summary()),
    export_csv=controller.export_filtered_csv(),
    export_name="filtered_sales.csv",
)
show_notices(controller)


@st.dialog("Chart detail", width="large")
def show_enlarged(name: str):
    title = CHART_CARDS[name]
    spec = controller.enlarged_output(name)
    st.markdown(f"**{title}**")
    st.vega_lite_chart(spec=spec, use_container_width=False, theme=None)
    d1, d2 = st.columns(2)
    d1.download_button("Download JSON", data=presenter.to_json(spec), file_name=f"{name}.json", mime="application/json")
    d2.download_button("Download HTML", data=presenter.to_html(spec, title), file_name=f"{name}.html", mime="text/html")


def render_chart_card(name: str):
    renderer = controller.renderers[name]
    with card(CHART_CARDS[name]):
        if renderer.output is None:
            st.info("Nothing to display for the current filters.")
            return
        st.vega_lite_chart(spec=renderer.output, use_container_width=False, theme=None)
        if st.button("Enlarge", key=f"enlarge::{name}"):
            show_enlarged(name)


def _on_scrub():
    controller.scrub(st.session_state["year_scrubber"])


refresh_every = max(0.1, settings.tick_interval_s / 3) if controller.playback.is_playing else None


@st.fragment(run_every=refresh_every)
def render_dashboard_body():
    controller.scheduler.run_pending()

    pc1, pc2 = st.columns([1, 6])
    label = "|| Pause" if controller.playback.is_playing else "▶ Play"
    if pc1.button(label, key="play_toggle"):
        controller.toggle_playback()
        st.rerun()
    with pc2:
        if selection.year_range_start < selection.year_range_end:
            st.session_state["year_scrubber"] = selection.current_year
            st.slider(
                "Year",
                min_value=selection.year_range_start,
                max_value=selection.year_range_end,
                step=1,
                key="year_scrubber",
                on_change=_on_scrub,
            )
        else:
            st.markdown(f"**Year:** {selection.current_year}")

    render_chart_card("trend")
    sc1, sc2 = st.columns(2)
    with sc1:
        render_chart_card("scatter")
    with sc2:
        render_chart_card("bar")


try:
    render_dashboard_body()
except Exception:
    logger.exception("Dashboard render failed")
    controller.teardown()
    st.error("Something went wrong while drawing the dashboard. Playback has been stopped.")
