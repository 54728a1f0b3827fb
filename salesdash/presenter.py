from __future__ import annotations

import copy
import json
from typing import Any, Dict

import altair as alt
from altair.utils.html import spec_to_html

from salesdash.errors import DashboardError


DEFAULT_SCALE_FACTOR = 1.5


def _scale_sizes(node: Any, factor: float) -> None:
    if isinstance(node, dict):
        for key in ("width", "height"):
            if isinstance(node.get(key), (int, float)) and not isinstance(node.get(key), bool):
                node[key] = round(node[key] * factor, 2)
        for key in ("layer", "hconcat", "vconcat", "concat"):
            for child in node.get(key, []) or []:
                _scale_sizes(child, factor)


def enlarge(spec: Dict[str, Any], factor: float = DEFAULT_SCALE_FACTOR) -> Dict[str, Any]:
    """Return a copy of a rendered chart spec drawn ``factor`` times larger."""
    if not spec:
        raise DashboardError("Chart has not been rendered yet")
    if factor <= 0:
        raise ValueError("factor must be positive")
    out = copy.deepcopy(spec)
    _scale_sizes(out, factor)
    return out


def to_json(spec: Dict[str, Any]) -> str:
    return json.dumps(spec, indent=2)


def to_html(spec: Dict[str, Any], title: str = "") -> str:
    html = spec_to_html(
        spec,
        mode="vega-lite",
        vega_version=alt.VEGA_VERSION,
        vegaembed_version=alt.VEGAEMBED_VERSION,
        vegalite_version=alt.VEGALITE_VERSION,
    )
    if title:
        html = html.replace("<head>", f"<head>\n  <title>{title}</title>", 1)
    return html
