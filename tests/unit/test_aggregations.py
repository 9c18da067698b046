"""
Unit Tests - Aggregation Engine
"""
import pytest
import polars as pl

from sales_analytics.transformation.aggregations import (
    AggKind,
    Measure,
    aggregate,
    aggregate_all,
    average_ratio,
    carry,
    count_distinct,
    earliest,
    latest,
    total,
)


@pytest.fixture
def lines() -> pl.DataFrame:
    return pl.DataFrame({
        "product_key": [1, 1, 1, 2],
        "order_number": ["SO1", "SO1", "SO2", "SO3"],
        "customer_key": [10, 10, None, 11],
        "sales_amount": [100, 50, 30, 40],
        "quantity": [2, 0, 3, 4],
        "product_name": ["A", "A", "A", "B"],
    })


class TestMeasures:
    """Tests for individual accumulators"""

    def test_sum_and_count_distinct(self, lines):
        result = aggregate(lines, "product_key", [
            total("sales_amount", "total_sales"),
            count_distinct("order_number", "total_orders"),
        ]).sort("product_key")

        assert result["total_sales"].to_list() == [180, 40]
        assert result["total_orders"].to_list() == [2, 1]

    def test_count_distinct_ignores_nulls(self, lines):
        result = aggregate(lines, "product_key", [count_distinct("customer_key", "total_customers")]).sort("product_key")

        assert result["total_customers"].to_list() == [1, 1]

    def test_mean_ratio_averages_row_ratios(self, lines):
        """Zero-quantity rows contribute no term: mean(100/2, 30/3) = 30"""
        result = aggregate(lines, "product_key", [
            average_ratio("sales_amount", "quantity", "avg_selling_price"),
        ]).sort("product_key")

        assert result["avg_selling_price"].to_list() == [30.0, 10.0]

    def test_mean_ratio_all_zero_denominators(self):
        df = pl.DataFrame({"k": [1], "sales_amount": [10], "quantity": [0]})

        result = aggregate(df, "k", [average_ratio("sales_amount", "quantity", "avg_price")])

        assert result["avg_price"][0] is None

    def test_min_max_first(self, lines):
        result = aggregate(lines, "product_key", [
            earliest("sales_amount", "low"),
            latest("sales_amount", "high"),
            carry("product_name"),
        ]).sort("product_key")

        assert result["low"].to_list() == [30, 40]
        assert result["high"].to_list() == [100, 40]
        assert result["product_name"].to_list() == ["A", "B"]

    def test_count_rows(self, lines):
        result = aggregate(lines, "product_key", [Measure("lines", AggKind.COUNT)]).sort("product_key")

        assert result["lines"].to_list() == [3, 1]


class TestAggregate:
    """Tests for grouping"""

    def test_expression_key(self, lines):
        result = aggregate(
            lines,
            [(pl.col("product_key") * 10).alias("bucket")],
            [total("quantity")],
        ).sort("bucket")

        assert result["bucket"].to_list() == [10, 20]
        assert result["total_quantity"].to_list() == [5, 4]

    def test_maintain_order(self, lines):
        result = aggregate(lines.reverse(), "product_key", [total("quantity")], maintain_order=True)

        assert result["product_key"].to_list() == [2, 1]

    def test_aggregate_all(self, lines):
        result = aggregate_all(lines, [total("sales_amount", "total_sales")])

        assert result.height == 1
        assert result["total_sales"][0] == 220
