from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import IO, Iterable, List, Tuple, Union

import numpy as np
import pandas as pd

from salesdash.errors import DataLoadError


logger = logging.getLogger(__name__)

SALES_COLUMNS = {
    "Model": "model",
    "Year": "year",
    "Region": "region",
    "Color": "color",
    "Fuel_Type": "fuel_type",
    "Transmission": "transmission",
    "Engine_Size_L": "engine_size_l",
    "Mileage_KM": "mileage_km",
    "Price_USD": "price_usd",
    "Sales_Volume": "sales_volume",
    "Sales_Classification": "classification",
}

TEXT_COLUMNS = ["model", "region", "color", "fuel_type", "transmission", "classification"]
NUMERIC_COLUMNS = ["engine_size_l", "mileage_km", "price_usd", "sales_volume"]

SourceLike = Union[str, Path, IO]


@dataclass(frozen=True)
class SalesDataset:
    frame: pd.DataFrame
    years: List[int]
    regions: List[str]
    models: List[str]
    source: str = ""

    @property
    def year_domain(self) -> Tuple[int, int]:
        return self.years[0], self.years[-1]


def file_signature(path: Path) -> Tuple[str, float]:
    return str(path.resolve()), path.stat().st_mtime


def coerce_str_safe(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    for col in cols:
        if col in df.columns:
            series = df[col].astype("string").str.strip()
            df[col] = series.fillna("").astype(str)
    return df


def numericize(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    """Coerce to float; unparsable, missing or non-finite values become 0 and negatives are clamped to 0."""
    for col in cols:
        if col in df.columns:
            values = pd.to_numeric(df[col], errors="coerce").replace([np.inf, -np.inf], np.nan)
            bad = int(values.isna().sum() + (values < 0).sum())
            if bad:
                logger.info("Coerced %d value(s) in %s to 0", bad, col)
            df[col] = values.fillna(0.0).clip(lower=0.0).astype(float)
    return df


def clean_sales_frame(raw: pd.DataFrame) -> pd.DataFrame:
    missing = [c for c in SALES_COLUMNS if c not in raw.columns]
    if missing:
        raise DataLoadError(f"Missing required column(s): {', '.join(missing)}")
    df = raw.rename(columns=SALES_COLUMNS)[list(SALES_COLUMNS.values())].copy()
    df = coerce_str_safe(df, TEXT_COLUMNS)
    df = numericize(df, NUMERIC_COLUMNS)

    years = pd.to_numeric(df["year"], errors="coerce").astype(float)
    # non-finite and fractional years are as unusable as missing ones
    invalid = ~np.isfinite(years) | (years % 1 != 0)
    if invalid.any():
        logger.warning("Dropping %d row(s) without a valid whole-number year", int(invalid.sum()))
    df = df[~invalid].copy()
    df["year"] = years[~invalid].astype(int)
    return df.reset_index(drop=True)


def read_sales_csv(source: SourceLike) -> pd.DataFrame:
    if isinstance(source, (str, Path)) and not Path(source).is_file():
        raise DataLoadError(f"Dataset not found: {source}")
    try:
        raw = pd.read_csv(source, dtype=str, keep_default_na=True, skipinitialspace=True)
    except pd.errors.EmptyDataError as exc:
        raise DataLoadError("Dataset is empty") from exc
    except (pd.errors.ParserError, UnicodeDecodeError, OSError) as exc:
        raise DataLoadError(f"Could not read dataset: {exc}") from exc
    raw.columns = [str(c).strip() for c in raw.columns]
    return clean_sales_frame(raw)


def build_dataset(frame: pd.DataFrame, source: str = "") -> SalesDataset:
    if frame.empty:
        raise DataLoadError("Dataset contains no usable rows")
    years = sorted(int(y) for y in frame["year"].unique())
    regions = sorted(r for r in frame["region"].unique() if r)
    models = sorted(m for m in frame["model"].unique() if m)
    logger.info("Loaded %d sales rows from %s (%d-%d, %d regions, %d models)",
                len(frame), source or "<buffer>", years[0], years[-1], len(regions), len(models))
    return SalesDataset(frame=frame, years=years, regions=regions, models=models, source=source)


@lru_cache(maxsize=4)
def _load_dataset_cached(signature: Tuple[str, float]) -> SalesDataset:
    path, _ = signature
    return build_dataset(read_sales_csv(Path(path)), source=path)


def load_dataset(source: SourceLike) -> SalesDataset:
    if isinstance(source, (str, Path)):
        path = Path(source)
        if not path.is_file():
            raise DataLoadError(f"Dataset not found: {path}")
        return _load_dataset_cached(file_signature(path))
    name = getattr(source, "name", "") or ""
    return build_dataset(read_sales_csv(source), source=str(name))
