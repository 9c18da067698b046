"""
Customer Report

One row per customer with lifetime purchase aggregates, age band, value
segment, recency and average order / monthly spend.
"""

from datetime import date
from typing import Optional

import polars as pl
import structlog

from sales_analytics.config.settings import SegmentationSettings, get_settings
from sales_analytics.ingestion.schemas import SalesSnapshot
from sales_analytics.transformation.aggregations import (
    aggregate,
    carry,
    count_distinct,
    earliest,
    latest,
    total,
)
from sales_analytics.transformation.dates import months_between
from sales_analytics.transformation.derivations import (
    age_group,
    age_in_years,
    avg_monthly_revenue,
    avg_revenue_per_order,
    customer_segment,
    recency_in_months,
)
from sales_analytics.transformation.joins import flatten_sales

logger = structlog.get_logger(__name__)

CUSTOMER_REPORT_COLUMNS = [
    "customer_key",
    "customer_number",
    "customer_name",
    "age",
    "age_group",
    "customer_segment",
    "last_order_date",
    "recency_in_months",
    "total_orders",
    "total_sales",
    "total_quantity",
    "total_products",
    "lifespan_in_months",
    "avg_order_value",
    "avg_monthly_spend",
]

CUSTOMER_MEASURES = [
    carry("customer_number"),
    carry("customer_name"),
    carry("birthdate"),
    earliest("order_date", "first_order_date"),
    latest("order_date", "last_order_date"),
    count_distinct("order_number", "total_orders"),
    count_distinct("product_key", "total_products"),
    total("sales_amount", "total_sales"),
    total("quantity", "total_quantity"),
]


def build_customer_report(
    snapshot: SalesSnapshot,
    as_of: Optional[date] = None,
    thresholds: Optional[SegmentationSettings] = None,
) -> pl.DataFrame:
    """
    Build the customer report from a snapshot.

    Age and recency are measured against ``as_of`` (default: today).
    Sales lines without an order_date are excluded.
    """
    as_of = as_of or get_settings().report.resolve_as_of()
    base = flatten_sales(snapshot, include_products=False, require_order_date=True)

    customers = aggregate(base, "customer_key", CUSTOMER_MEASURES)

    customers = customers.with_columns([
        age_in_years("birthdate", as_of).alias("age"),
        months_between("first_order_date", "last_order_date").alias("lifespan_in_months"),
        recency_in_months("last_order_date", as_of).alias("recency_in_months"),
    ])
    customers = customers.with_columns([
        age_group("age").alias("age_group"),
        customer_segment("lifespan_in_months", "total_sales", thresholds).alias("customer_segment"),
        avg_revenue_per_order("total_sales", "total_orders").alias("avg_order_value"),
        avg_monthly_revenue("total_sales", "lifespan_in_months").alias("avg_monthly_spend"),
    ])

    report = customers.select(CUSTOMER_REPORT_COLUMNS).sort("customer_key", nulls_last=True)
    logger.info("Built customer report", rows=report.height, as_of=as_of.isoformat())
    return report
