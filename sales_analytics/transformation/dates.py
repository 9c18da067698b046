"""
Calendar arithmetic

Month and year differences count calendar boundaries crossed, not elapsed
time: Jan 31 -> Feb 1 is one month, Dec 31 -> Jan 1 is one year.
"""

from datetime import date
from typing import Optional, Union

import polars as pl

IntoDate = Union[pl.Expr, date, str]

_TRUNCATE_EVERY = {
    "year": "1y",
    "month": "1mo",
}


def _as_expr(value: IntoDate) -> pl.Expr:
    if isinstance(value, pl.Expr):
        return value
    if isinstance(value, str):
        return pl.col(value)
    return pl.lit(value, dtype=pl.Date)


def months_between(start: IntoDate, end: IntoDate) -> pl.Expr:
    """Number of month boundaries between start and end (negative if end is earlier)"""
    start, end = _as_expr(start), _as_expr(end)
    return (
        (end.dt.year().cast(pl.Int64) - start.dt.year().cast(pl.Int64)) * 12
        + (end.dt.month().cast(pl.Int64) - start.dt.month().cast(pl.Int64))
    )


def years_between(start: IntoDate, end: IntoDate) -> pl.Expr:
    """Number of year boundaries between start and end"""
    start, end = _as_expr(start), _as_expr(end)
    return end.dt.year().cast(pl.Int64) - start.dt.year().cast(pl.Int64)


def month_diff(start: Optional[date], end: Optional[date]) -> Optional[int]:
    """Scalar counterpart of months_between"""
    if start is None or end is None:
        return None
    return (end.year - start.year) * 12 + (end.month - start.month)


def year_diff(start: Optional[date], end: Optional[date]) -> Optional[int]:
    """Scalar counterpart of years_between"""
    if start is None or end is None:
        return None
    return end.year - start.year


def truncate_to(value: IntoDate, period: str) -> pl.Expr:
    """Truncate a date to the first day of its year or month"""
    try:
        every = _TRUNCATE_EVERY[period]
    except KeyError:
        raise ValueError(f"Unsupported period: {period}. Use one of {list(_TRUNCATE_EVERY)}")
    return _as_expr(value).dt.truncate(every)
