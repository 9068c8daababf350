from __future__ import annotations

from typing import Iterable, List


class DashboardError(Exception):
    """Base class for failures scoped to a single view or computation."""


class ParseError(DashboardError):
    """A field failed type coercion. Callers drop the offending record."""

    def __init__(self, field: str, value: object, reason: str = "") -> None:
        self.field = field
        self.value = value
        detail = f": {reason}" if reason else ""
        super().__init__(f"cannot parse {field}={value!r}{detail}")


class EmptyInputError(DashboardError):
    """An aggregate was requested over zero values."""


class ZeroMeanError(EmptyInputError):
    """Percent deviation is undefined when the mean is zero."""


class NoDataForYearError(DashboardError):
    def __init__(self, year: int, available_years: Iterable[int] = ()) -> None:
        self.year = int(year)
        self.available_years: List[int] = sorted({int(y) for y in available_years})
        super().__init__(self.user_message())

    def user_message(self) -> str:
        years = ", ".join(str(y) for y in self.available_years) or "none"
        return f"No data available for year {self.year}. Available years: {years}"


class ResourceLoadError(DashboardError):
    """A source table or chart resource could not be loaded."""

    def __init__(self, resource: str, reason: str) -> None:
        self.resource = resource
        self.reason = reason
        super().__init__(f"failed to load {resource}: {reason}")
