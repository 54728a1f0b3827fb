from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple

import altair as alt


REGION_COLORS: Dict[str, str] = {
    "Africa": "#ff6b6b",
    "Asia": "#4ecdc4",
    "Europe": "#45b7d1",
    "Middle East": "#96ceb4",
    "North America": "#ffeead",
    "South America": "#f38181",
}
FALLBACK_COLOR = "#888888"

MODEL_COLORS: List[str] = [
    "#3b82f6", "#8b5cf6", "#ec4899", "#10b981",
    "#f59e0b", "#ef4444", "#06b6d4", "#84cc16",
    "#a855f7", "#14b8a6", "#f97316", "#22c55e",
]

FUEL_COLORS: List[str] = ["#10b981", "#3b82f6", "#f59e0b", "#ec4899"]


@dataclass(frozen=True)
class ScalesConfig:
    width: int = 600
    height: int = 300


def region_color(region: str) -> str:
    return REGION_COLORS.get(region, FALLBACK_COLOR)


def cycle_colors(keys: Sequence[str], palette: Sequence[str]) -> List[str]:
    return [palette[i % len(palette)] for i in range(len(keys))]


def tick_step(start: float, stop: float, count: int = 10) -> float:
    """Step between ticks using the 1/2/5 x 10^k ladder (same as d3.tickStep)."""
    step0 = abs(stop - start) / max(count, 1)
    if step0 == 0:
        return 0.0
    power = math.floor(math.log10(step0))
    error = step0 / 10 ** power
    if error >= math.sqrt(50):
        factor = 10
    elif error >= math.sqrt(10):
        factor = 5
    elif error >= math.sqrt(2):
        factor = 2
    else:
        factor = 1
    return factor * 10 ** power


class LinearScale:
    def __init__(self, domain: Tuple[float, float], range_: Tuple[float, float] = (0.0, 1.0)):
        self.domain = (float(domain[0]), float(domain[1]))
        self.range = (float(range_[0]), float(range_[1]))

    @classmethod
    def from_max(cls, values: Iterable[float], range_: Tuple[float, float]) -> "LinearScale":
        scale = cls((0.0, 0.0), range_)
        return scale.rescale(values)

    def rescale(self, values: Iterable[float]) -> "LinearScale":
        # [0, max || 1], then niced
        top = max((float(v) for v in values), default=0.0)
        if not top or not math.isfinite(top):
            top = 1.0
        self.domain = (0.0, top)
        return self.nice()

    def nice(self, count: int = 10) -> "LinearScale":
        lo, hi = self.domain
        step = tick_step(lo, hi, count)
        if step > 0:
            self.domain = (float(math.floor(lo / step) * step), float(math.ceil(hi / step) * step))
        return self

    def to_altair(self) -> alt.Scale:
        return alt.Scale(domain=list(self.domain), nice=False, zero=False)

    def __repr__(self) -> str:
        return f"LinearScale(domain={self.domain}, range={self.range})"
