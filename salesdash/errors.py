from __future__ import annotations


class DashboardError(Exception):
    """Base class for errors raised by the dashboard core."""


class DataLoadError(DashboardError):
    """The dataset could not be read or contains no usable rows."""


class InvalidRangeError(DashboardError):
    def __init__(self, start: int, end: int, reason: str = "start year must not be after end year"):
        self.start = start
        self.end = end
        super().__init__(f"Invalid year range {start}-{end}: {reason}")


class OutOfRangeError(DashboardError):
    def __init__(self, year: int, start: int, end: int):
        self.year = year
        self.start = start
        self.end = end
        super().__init__(f"Year {year} is outside the selected range {start}-{end}")
