import pandas as pd
import pytest

from salesdash.data import SALES_COLUMNS, build_dataset, clean_sales_frame

HEADER = list(SALES_COLUMNS)


def make_row(model="X5", year=2015, region="Asia", fuel="Petrol", transmission="Automatic",
             price=50000, volume=100, engine=3.0, color="Black", mileage=1000, classification="Low"):
    return {
        "Model": model,
        "Year": year,
        "Region": region,
        "Color": color,
        "Fuel_Type": fuel,
        "Transmission": transmission,
        "Engine_Size_L": engine,
        "Mileage_KM": mileage,
        "Price_USD": price,
        "Sales_Volume": volume,
        "Sales_Classification": classification,
    }


def make_frame(rows):
    return clean_sales_frame(pd.DataFrame(rows, columns=HEADER))


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def sales_rows():
    return [
        make_row("X5", 2015, "Asia", "Petrol", "Automatic", price=50000, volume=100, engine=3.0),
        make_row("X5", 2015, "Europe", "Diesel", "Manual", price=60000, volume=50, engine=2.0),
        make_row("3 Series", 2015, "Europe", "Petrol", "Automatic", price=40000, volume=30, engine=2.0),
        make_row("3 Series", 2016, "Asia", "Diesel", "Automatic", price=42000, volume=70, engine=2.0),
        make_row("X5", 2017, "Africa", "Electric", "Automatic", price=80000, volume=20, engine=0.0),
        make_row("i8", 2017, "Asia", "Hybrid", "Automatic", price=140000, volume=10, engine=1.5),
    ]


@pytest.fixture
def sales_frame(sales_rows):
    return make_frame(sales_rows)


@pytest.fixture
def dataset(sales_frame):
    return build_dataset(sales_frame, source="fixture")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def write_csv(tmp_path):
    def _write(text, name="sales.csv"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write
