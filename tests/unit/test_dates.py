"""
Unit Tests - Calendar Arithmetic
"""
from datetime import date

import pytest
import polars as pl

from sales_analytics.transformation.dates import (
    month_diff,
    months_between,
    truncate_to,
    year_diff,
    years_between,
)


class TestMonthsBetween:
    """Tests for month-boundary counting"""

    def test_counts_boundaries_not_days(self):
        """Jan 31 -> Feb 1 crosses one month boundary"""
        df = pl.DataFrame({
            "start": [date(2024, 1, 31), date(2024, 1, 1), date(2023, 12, 31)],
            "end": [date(2024, 2, 1), date(2024, 1, 31), date(2024, 1, 1)],
        })

        result = df.select(months_between("start", "end").alias("months"))

        assert result["months"].to_list() == [1, 0, 1]

    def test_spans_years(self):
        df = pl.DataFrame({"start": [date(2022, 1, 15)], "end": [date(2023, 3, 10)]})

        result = df.select(months_between("start", "end").alias("months"))

        assert result["months"][0] == 14

    def test_negative_when_end_precedes_start(self):
        df = pl.DataFrame({"start": [date(2024, 5, 1)]})

        result = df.select(months_between("start", date(2024, 2, 1)).alias("months"))

        assert result["months"][0] == -3

    def test_null_dates_give_null(self):
        df = pl.DataFrame({"start": [None], "end": [date(2024, 1, 1)]}, schema={"start": pl.Date, "end": pl.Date})

        result = df.select(months_between("start", "end").alias("months"))

        assert result["months"][0] is None


class TestYearsBetween:
    """Tests for year-boundary counting"""

    def test_counts_year_boundaries(self):
        """Dec 31 -> Jan 1 is one year; birthdays are not considered"""
        df = pl.DataFrame({
            "birthdate": [date(2000, 12, 31), date(1971, 10, 6)],
        })

        result = df.select(years_between("birthdate", date(2025, 1, 1)).alias("age"))

        assert result["age"].to_list() == [25, 54]


class TestScalarDiffs:
    """Tests for the scalar helpers"""

    def test_month_diff(self):
        assert month_diff(date(2022, 1, 15), date(2024, 2, 20)) == 25
        assert month_diff(date(2024, 1, 31), date(2024, 2, 1)) == 1

    def test_year_diff(self):
        assert year_diff(date(2024, 12, 31), date(2025, 1, 1)) == 1

    def test_none_propagates(self):
        assert month_diff(None, date(2024, 1, 1)) is None
        assert year_diff(date(2024, 1, 1), None) is None


class TestTruncateTo:
    """Tests for bucket truncation"""

    def test_month_and_year(self):
        df = pl.DataFrame({"order_date": [date(2023, 6, 17)]})

        result = df.select([
            truncate_to("order_date", "month").alias("month"),
            truncate_to("order_date", "year").alias("year"),
        ])

        assert result["month"][0] == date(2023, 6, 1)
        assert result["year"][0] == date(2023, 1, 1)

    def test_unknown_period(self):
        with pytest.raises(ValueError):
            truncate_to("order_date", "week")
