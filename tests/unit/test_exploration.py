"""
Unit Tests - Exploration and Segment Distributions
"""
from datetime import date

import polars as pl
import pytest

from sales_analytics.ingestion.schemas import SalesSnapshot
from sales_analytics.reports.exploration import (
    customer_countries,
    date_range_overview,
    measures_overview,
    product_hierarchy,
)
from sales_analytics.reports.segmentation import customer_segment_counts, product_cost_ranges


class TestMeasuresOverview:
    """Tests for headline measures"""

    def test_values(self, sample_snapshot):
        result = measures_overview(sample_snapshot)
        measures = dict(zip(result["measure_name"].to_list(), result["measure_value"].to_list()))

        assert measures["Total Sales"] == 72650.0
        assert measures["Total Quantity Sold"] == 30.0
        assert measures["Average Item Price"] == pytest.approx(10600 / 7)
        assert measures["Total Unique Orders"] == 6.0
        assert measures["Total Unique Products"] == 5.0
        assert measures["Total Customers"] == 3.0
        assert measures["Total Active Customers"] == 3.0

    def test_empty_snapshot(self, empty_snapshot):
        result = measures_overview(empty_snapshot)
        measures = dict(zip(result["measure_name"].to_list(), result["measure_value"].to_list()))

        assert measures["Total Unique Orders"] == 0.0
        assert measures["Average Item Price"] is None


class TestDateRangeOverview:
    """Tests for order and birthdate coverage"""

    def test_ranges(self, sample_snapshot, as_of):
        result = date_range_overview(sample_snapshot, as_of=as_of)

        assert result["first_order_date"] == date(2022, 1, 15)
        assert result["last_order_date"] == date(2024, 2, 20)
        assert result["order_range_months"] == 25
        assert result["oldest_customer_birthdate"] == date(1971, 10, 6)
        assert result["oldest_customer_age"] == 54
        assert result["youngest_customer_birthdate"] == date(2008, 5, 14)
        assert result["youngest_customer_age"] == 17

    def test_empty_snapshot(self, empty_snapshot, as_of):
        result = date_range_overview(empty_snapshot, as_of=as_of)

        assert result["first_order_date"] is None
        assert result["order_range_months"] is None


class TestDimensionListings:
    """Tests for distinct dimension values"""

    def test_countries(self, sample_snapshot):
        assert customer_countries(sample_snapshot) == ["Australia", "Germany", "United States"]

    def test_product_hierarchy(self, sample_snapshot):
        result = product_hierarchy(sample_snapshot)

        assert result.columns == ["category", "subcategory", "product_name"]
        assert result.height == 5
        assert result["category"].to_list()[0] == "Accessories"


class TestSegmentDistributions:
    """Tests for segment counts"""

    def test_cost_ranges(self, sample_snapshot, thresholds):
        result = product_cost_ranges(sample_snapshot, thresholds)

        assert result["cost_range"].to_list() == [
            "Standard ($100-$500)",
            "Budget (<$100)",
            "Luxury (>$1000)",
            "Premium ($500-$1000)",
        ]
        assert result["total_products"].to_list() == [2, 1, 1, 1]

    def test_customer_segments(self, sample_snapshot, thresholds):
        result = customer_segment_counts(sample_snapshot, thresholds)

        assert result["customer_segment"].to_list() == ["New", "VIP"]
        assert result["total_customers"].to_list() == [2, 1]

    def test_customer_with_only_undated_orders_is_new(self, thresholds):
        snapshot = SalesSnapshot.from_frames(
            sales=pl.DataFrame({
                "order_number": ["SO1", "SO2", "SO3"],
                "product_key": [1, 1, 1],
                "customer_key": [10, 10, 11],
                "order_date": [date(2022, 1, 15), date(2023, 3, 10), None],
                "sales_amount": [4000, 3000, 9000],
                "quantity": [1, 1, 1],
                "price": [4000, 3000, 9000],
            }),
            customers=pl.DataFrame({
                "customer_key": [10, 11],
                "first_name": ["Jon", "Eugene"],
                "last_name": ["Yang", "Huang"],
                "birthdate": [date(1971, 10, 6), date(1976, 5, 10)],
            }),
        )

        result = customer_segment_counts(snapshot, thresholds)

        assert result["total_customers"].sum() == 2
        assert dict(zip(result["customer_segment"], result["total_customers"])) == {"New": 1, "VIP": 1}

    def test_orphan_customer_keys_not_counted(self, sample_snapshot, thresholds):
        orphan = sample_snapshot.sales.head(1).with_columns(pl.lit(999).cast(pl.Int64).alias("customer_key"))
        snapshot = SalesSnapshot(
            sales=pl.concat([sample_snapshot.sales, orphan]),
            products=sample_snapshot.products,
            customers=sample_snapshot.customers,
        )

        result = customer_segment_counts(snapshot, thresholds)

        assert result["total_customers"].sum() == 3
