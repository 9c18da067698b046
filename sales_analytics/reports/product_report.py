"""
Product Report

One row per product with lifetime sales aggregates, a performance segment
and per-order / per-month revenue rates.
"""

from datetime import date
from typing import Optional

import polars as pl
import structlog

from sales_analytics.config.settings import SegmentationSettings, get_settings
from sales_analytics.ingestion.schemas import SalesSnapshot
from sales_analytics.transformation.aggregations import (
    aggregate,
    average_ratio,
    carry,
    count_distinct,
    earliest,
    latest,
    total,
)
from sales_analytics.transformation.dates import months_between
from sales_analytics.transformation.derivations import (
    avg_monthly_revenue,
    avg_revenue_per_order,
    product_segment,
    recency_in_months,
    round_half_away,
)
from sales_analytics.transformation.joins import flatten_sales

logger = structlog.get_logger(__name__)

PRODUCT_REPORT_COLUMNS = [
    "product_key",
    "product_name",
    "category",
    "subcategory",
    "cost",
    "last_sale_date",
    "recency_in_months",
    "product_segment",
    "lifespan_in_months",
    "total_orders",
    "total_sales",
    "total_quantity",
    "total_customers",
    "avg_selling_price",
    "avg_revenue_per_order",
    "avg_monthly_revenue",
]

PRODUCT_MEASURES = [
    carry("product_name"),
    carry("category"),
    carry("subcategory"),
    carry("cost"),
    earliest("order_date", "first_sale_date"),
    latest("order_date", "last_sale_date"),
    count_distinct("order_number", "total_orders"),
    count_distinct("customer_key", "total_customers"),
    total("sales_amount", "total_sales"),
    total("quantity", "total_quantity"),
    average_ratio("sales_amount", "quantity", "avg_selling_price"),
]


def build_product_report(
    snapshot: SalesSnapshot,
    as_of: Optional[date] = None,
    thresholds: Optional[SegmentationSettings] = None,
) -> pl.DataFrame:
    """
    Build the product report from a snapshot.

    Only sales lines with an order_date contribute, since lifespan and
    recency are time based. Lines whose product_key has no dimension row
    still produce a report row, with null product attributes.

    Args:
        snapshot: Source snapshot
        as_of: Reference date for recency_in_months (default: today)
        thresholds: Segmentation thresholds (default: configured values)
    """
    as_of = as_of or get_settings().report.resolve_as_of()
    base = flatten_sales(snapshot, include_customers=False, require_order_date=True)

    products = aggregate(base, "product_key", PRODUCT_MEASURES)

    products = products.with_columns([
        months_between("first_sale_date", "last_sale_date").alias("lifespan_in_months"),
        recency_in_months("last_sale_date", as_of).alias("recency_in_months"),
        product_segment("total_sales", thresholds).alias("product_segment"),
        round_half_away("avg_selling_price", 2).alias("avg_selling_price"),
    ])
    products = products.with_columns([
        avg_revenue_per_order("total_sales", "total_orders").alias("avg_revenue_per_order"),
        avg_monthly_revenue("total_sales", "lifespan_in_months").alias("avg_monthly_revenue"),
    ])

    report = products.select(PRODUCT_REPORT_COLUMNS).sort("product_key", nulls_last=True)
    logger.info("Built product report", rows=report.height, as_of=as_of.isoformat())
    return report
