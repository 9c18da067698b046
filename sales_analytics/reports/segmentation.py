"""
Segment Distributions

Counts of products per cost range and customers per value segment.
"""

from typing import Optional

import polars as pl

from sales_analytics.config.settings import SegmentationSettings
from sales_analytics.ingestion.schemas import SalesSnapshot
from sales_analytics.transformation.aggregations import Measure, AggKind, aggregate, earliest, latest, total
from sales_analytics.transformation.dates import months_between
from sales_analytics.transformation.derivations import cost_range, customer_segment
from sales_analytics.transformation.joins import flatten_sales

CUSTOMER_SPENDING_MEASURES = [
    earliest("order_date", "first_order_date"),
    latest("order_date", "last_order_date"),
    total("sales_amount", "total_sales"),
]


def product_cost_ranges(
    snapshot: SalesSnapshot,
    thresholds: Optional[SegmentationSettings] = None,
) -> pl.DataFrame:
    """Number of catalogue products in each cost range, most populated first"""
    products = snapshot.products.with_columns(cost_range("cost", thresholds).alias("cost_range"))
    counts = aggregate(products, "cost_range", [Measure("total_products", AggKind.COUNT, "product_key")])
    return counts.sort(["total_products", "cost_range"], descending=[True, False])


def customer_spending(snapshot: SalesSnapshot) -> pl.DataFrame:
    """
    Lifetime spending and lifespan per customer over every sales line.

    Undated lines still add to total_sales. A customer whose lines are all
    undated has a null lifespan and therefore lands in the New segment.
    Keys without a customer row are left out.
    """
    base = flatten_sales(snapshot, include_products=False, include_customers=False)
    base = base.join(snapshot.customers.select("customer_key"), on="customer_key", how="semi")
    spending = aggregate(base, "customer_key", CUSTOMER_SPENDING_MEASURES)
    return spending.with_columns(
        months_between("first_order_date", "last_order_date").alias("lifespan_in_months")
    )


def customer_segment_counts(
    snapshot: SalesSnapshot,
    thresholds: Optional[SegmentationSettings] = None,
) -> pl.DataFrame:
    """Number of customers in each value segment, most populated first"""
    segmented = customer_spending(snapshot).with_columns(
        customer_segment("lifespan_in_months", "total_sales", thresholds).alias("customer_segment")
    )
    counts = aggregate(segmented, "customer_segment", [Measure("total_customers", AggKind.COUNT, "customer_key")])
    return counts.sort(["total_customers", "customer_segment"], descending=[True, False])
