"""
Analytical Queries

Ready-made rankings, trends, cumulative series, yearly performance and
category share built from the aggregation engine and window transforms.
"""

from typing import Optional

import polars as pl
import structlog

from sales_analytics.exceptions import UnknownAnalysisError
from sales_analytics.ingestion.schemas import SalesSnapshot
from sales_analytics.transformation.aggregations import (
    aggregate,
    average,
    carry,
    count_distinct,
    total,
)
from sales_analytics.transformation.dates import truncate_to
from sales_analytics.transformation.joins import flatten_sales
from sales_analytics.transformation.windows import (
    part_to_whole,
    performance_vs_average,
    rank_by,
    running_totals,
    year_over_year,
)

logger = structlog.get_logger(__name__)

GRANULARITIES = ("month", "year")


def _check_granularity(granularity: str) -> None:
    if granularity not in GRANULARITIES:
        raise UnknownAnalysisError(f"Unsupported granularity: {granularity}. Use one of {GRANULARITIES}")


# =============================================================================
# RANKING
# =============================================================================

def product_revenue(snapshot: SalesSnapshot) -> pl.DataFrame:
    """Total revenue per product name (all sales lines)"""
    base = flatten_sales(snapshot, include_customers=False)
    return aggregate(base, "product_name", [total("sales_amount", "total_revenue")])


def top_products_by_revenue(
    snapshot: SalesSnapshot,
    top_n: int = 5,
    with_ties: bool = True,
) -> pl.DataFrame:
    """Best-selling products by revenue, ranked"""
    return rank_by(product_revenue(snapshot), "total_revenue", top_n=top_n, with_ties=with_ties)


def bottom_products_by_revenue(
    snapshot: SalesSnapshot,
    top_n: int = 5,
    with_ties: bool = True,
) -> pl.DataFrame:
    """Worst-selling products by revenue, lowest first"""
    return rank_by(
        product_revenue(snapshot), "total_revenue", top_n=top_n, ascending=True, with_ties=with_ties
    )


def _customer_totals(snapshot: SalesSnapshot) -> pl.DataFrame:
    base = flatten_sales(snapshot, include_products=False)
    return aggregate(base, "customer_key", [
        carry("first_name"),
        carry("last_name"),
        total("sales_amount", "total_revenue"),
        count_distinct("order_number", "total_orders"),
    ])


def top_customers_by_revenue(
    snapshot: SalesSnapshot,
    top_n: int = 10,
    with_ties: bool = True,
) -> pl.DataFrame:
    """Highest-spending customers"""
    ranked = rank_by(_customer_totals(snapshot), "total_revenue", top_n=top_n, with_ties=with_ties)
    return ranked.select(["rank", "customer_key", "first_name", "last_name", "total_revenue"])


def customers_with_fewest_orders(
    snapshot: SalesSnapshot,
    top_n: int = 3,
    with_ties: bool = True,
) -> pl.DataFrame:
    """Customers who placed the fewest distinct orders"""
    ranked = rank_by(
        _customer_totals(snapshot), "total_orders", top_n=top_n, ascending=True, with_ties=with_ties
    )
    return ranked.select(["rank", "customer_key", "first_name", "last_name", "total_orders"])


# =============================================================================
# CHANGE OVER TIME
# =============================================================================

def sales_trend(snapshot: SalesSnapshot, granularity: str = "month") -> pl.DataFrame:
    """
    Sales, distinct customers and quantity per month or year.

    Returns one row per bucket in chronological order with the bucket start
    date, its year and month, and a 'YYYY-Mon' label.
    """
    _check_granularity(granularity)
    base = flatten_sales(snapshot, include_products=False, include_customers=False, require_order_date=True)

    trend = aggregate(
        base,
        truncate_to("order_date", granularity).alias("period_start"),
        [
            total("sales_amount", "total_sales"),
            count_distinct("customer_key", "total_customers"),
            total("quantity", "total_quantity"),
        ],
    ).sort("period_start")

    return trend.with_columns([
        pl.col("period_start").dt.year().alias("order_year"),
        pl.col("period_start").dt.month().alias("order_month"),
        pl.col("period_start").dt.strftime("%Y-%b").alias("period_label"),
    ]).select([
        "period_start",
        "order_year",
        "order_month",
        "period_label",
        "total_sales",
        "total_customers",
        "total_quantity",
    ])


# =============================================================================
# CUMULATIVE
# =============================================================================

def cumulative_sales(snapshot: SalesSnapshot, granularity: str = "year") -> pl.DataFrame:
    """
    Running total of sales and moving average of the average price per bucket.

    Both averages are float means; only the report ratios truncate.
    """
    _check_granularity(granularity)
    base = flatten_sales(snapshot, include_products=False, include_customers=False, require_order_date=True)

    buckets = aggregate(
        base,
        truncate_to("order_date", granularity).alias("period_start"),
        [
            total("sales_amount", "total_sales"),
            average("price", "avg_price"),
        ],
    )

    return running_totals(
        buckets,
        order_by="period_start",
        measure="total_sales",
        average_of="avg_price",
        total_column="running_total_sales",
        average_column="moving_average_price",
    )


# =============================================================================
# PERFORMANCE
# =============================================================================

def yearly_product_performance(snapshot: SalesSnapshot) -> pl.DataFrame:
    """
    Yearly sales per product compared with the product's average year and
    with its previous year.
    """
    base = flatten_sales(snapshot, include_customers=False, require_order_date=True)

    yearly = aggregate(
        base,
        [pl.col("order_date").dt.year().alias("order_year"), "product_name"],
        [total("sales_amount", "current_sales")],
    )

    yearly = performance_vs_average(yearly, partition_by="product_name", measure="current_sales")
    yearly = year_over_year(
        yearly,
        partition_by="product_name",
        order_by="order_year",
        measure="current_sales",
        default=0,
        previous_column="previous_year_sales",
    )

    return yearly.rename({"avg_current_sales": "avg_sales_for_product"}).select([
        "order_year",
        "product_name",
        "current_sales",
        "avg_sales_for_product",
        "variance_from_average",
        "performance_vs_average",
        "previous_year_sales",
        "year_over_year_change",
        "year_over_year_trend",
    ])


# =============================================================================
# PART TO WHOLE
# =============================================================================

def category_share(snapshot: SalesSnapshot, dimension: Optional[str] = None) -> pl.DataFrame:
    """Each category's share of total sales, largest first"""
    dimension = dimension or "category"
    base = flatten_sales(snapshot, include_customers=False)
    if dimension not in base.columns:
        raise UnknownAnalysisError(f"Unknown dimension: {dimension}")

    totals = aggregate(base, dimension, [total("sales_amount", "total_sales")])
    return part_to_whole(totals, "total_sales", total_column="overall_sales")
