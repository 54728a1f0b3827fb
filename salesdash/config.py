from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from salesdash.scales import ScalesConfig


BASE_DIR = Path(__file__).resolve().parents[1]
DEFAULT_DATA_PATH = BASE_DIR / "data" / "BMW_sales_data.csv"

ENV_OVERRIDES = {
    "SALESDASH_DATA_PATH": "data_path",
    "SALESDASH_TICK_INTERVAL": "tick_interval_s",
    "SALESDASH_MODAL_SCALE": "modal_scale",
    "SALESDASH_LOG_LEVEL": "log_level",
}

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class ChartSizeModel(BaseModel):
    width: int = Field(gt=0)
    height: int = Field(gt=0)

    def to_scales_config(self) -> ScalesConfig:
        return ScalesConfig(width=self.width, height=self.height)


class DashboardSettings(BaseModel):
    data_path: Path = DEFAULT_DATA_PATH
    tick_interval_s: float = Field(default=0.9, gt=0)
    modal_scale: float = Field(default=1.5, gt=0)
    log_level: str = "INFO"
    trend: ChartSizeModel = Field(default_factory=lambda: ChartSizeModel(width=670, height=270))
    scatter: ChartSizeModel = Field(default_factory=lambda: ChartSizeModel(width=510, height=280))
    bar: ChartSizeModel = Field(default_factory=lambda: ChartSizeModel(width=930, height=180))

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {value}")
        return level


def load_settings(environ: Optional[Mapping[str, str]] = None) -> DashboardSettings:
    env = os.environ if environ is None else environ
    raw = {field: env[name] for name, field in ENV_OVERRIDES.items() if env.get(name)}
    return DashboardSettings.model_validate(raw)


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    root.setLevel(level)
