"""
Flatten / Join

Combines sales lines with their product and customer attributes into one
flat frame. Joins are left-outer: a sales line whose key has no dimension
row is kept with null dimension attributes.
"""

from typing import Dict

import polars as pl
import structlog

from sales_analytics.ingestion.schemas import SalesSnapshot

logger = structlog.get_logger(__name__)


def customer_name_expr() -> pl.Expr:
    """'first last', null when both parts are missing"""
    return (
        pl.when(pl.col("first_name").is_null() & pl.col("last_name").is_null())
        .then(pl.lit(None, dtype=pl.Utf8))
        .otherwise(pl.concat_str([pl.col("first_name"), pl.col("last_name")], separator=" ", ignore_nulls=True))
        .alias("customer_name")
    )


def flatten_sales(
    snapshot: SalesSnapshot,
    include_products: bool = True,
    include_customers: bool = True,
    require_order_date: bool = False,
) -> pl.DataFrame:
    """
    Join the fact table with its dimensions.

    Args:
        snapshot: Source snapshot
        include_products: Attach product attributes
        include_customers: Attach customer attributes and customer_name
        require_order_date: Drop lines without an order_date. Time-based
            computations (lifespan, trends, cohorts) set this; purely
            additive totals must not.

    Returns:
        One row per sales line, in fact-table order
    """
    df = snapshot.sales

    if require_order_date:
        missing = df["order_date"].null_count()
        if missing:
            logger.info("Excluding sales lines without order_date", rows=missing)
        df = df.filter(pl.col("order_date").is_not_null())

    if include_products:
        df = df.join(snapshot.products, on="product_key", how="left")

    if include_customers:
        df = df.join(snapshot.customers, on="customer_key", how="left")
        df = df.with_columns(customer_name_expr())

    return df


def find_orphan_keys(snapshot: SalesSnapshot) -> Dict[str, int]:
    """
    Count sales lines whose dimension keys have no match.

    Orphans are not an error; they aggregate under null attributes.
    """
    sales = snapshot.sales
    orphan_products = sales.join(snapshot.products, on="product_key", how="anti").filter(
        pl.col("product_key").is_not_null()
    )
    orphan_customers = sales.join(snapshot.customers, on="customer_key", how="anti").filter(
        pl.col("customer_key").is_not_null()
    )

    results = {
        "orphan_product_lines": orphan_products.height,
        "orphan_customer_lines": orphan_customers.height,
        "null_order_date_lines": sales["order_date"].null_count(),
    }

    if results["orphan_product_lines"]:
        logger.warning("Sales lines reference unknown products", rows=results["orphan_product_lines"])
    if results["orphan_customer_lines"]:
        logger.warning("Sales lines reference unknown customers", rows=results["orphan_customer_lines"])

    return results
