"""
Exploratory Summaries

Headline measures, date coverage and dimension value listings for a
snapshot.
"""

from datetime import date
from typing import Any, Dict, Optional

import polars as pl

from sales_analytics.config.settings import get_settings
from sales_analytics.ingestion.schemas import SalesSnapshot
from sales_analytics.transformation.aggregations import (
    aggregate_all,
    average,
    count_distinct,
    earliest,
    latest,
    total,
)
from sales_analytics.transformation.dates import month_diff, year_diff


def measures_overview(snapshot: SalesSnapshot) -> pl.DataFrame:
    """
    Key business measures as (measure_name, measure_value) rows.

    These are additive totals, so sales lines without an order_date are
    included. Average Item Price is a float mean, not truncated to the
    integer price type.
    """
    sales = aggregate_all(snapshot.sales, [
        total("sales_amount", "Total Sales"),
        total("quantity", "Total Quantity Sold"),
        average("price", "Average Item Price"),
        count_distinct("order_number", "Total Unique Orders"),
        count_distinct("customer_key", "Total Active Customers"),
    ]).row(0, named=True)

    products = aggregate_all(snapshot.products, [
        count_distinct("product_name", "Total Unique Products"),
    ]).row(0, named=True)

    measures = {
        "Total Sales": sales["Total Sales"],
        "Total Quantity Sold": sales["Total Quantity Sold"],
        "Average Item Price": sales["Average Item Price"],
        "Total Unique Orders": sales["Total Unique Orders"],
        "Total Unique Products": products["Total Unique Products"],
        "Total Customers": snapshot.customers["customer_key"].count(),
        "Total Active Customers": sales["Total Active Customers"],
    }

    return pl.DataFrame(
        {
            "measure_name": list(measures.keys()),
            "measure_value": [float(v) if v is not None else None for v in measures.values()],
        },
        schema={"measure_name": pl.Utf8, "measure_value": pl.Float64},
    )


def date_range_overview(snapshot: SalesSnapshot, as_of: Optional[date] = None) -> Dict[str, Any]:
    """
    Time span of the order history and the age range of customers.

    Ages count year boundaries up to ``as_of`` (default: today).
    """
    as_of = as_of or get_settings().report.resolve_as_of()

    orders = aggregate_all(snapshot.sales, [
        earliest("order_date", "first_order_date"),
        latest("order_date", "last_order_date"),
    ]).row(0, named=True)

    births = aggregate_all(snapshot.customers, [
        earliest("birthdate", "oldest_customer_birthdate"),
        latest("birthdate", "youngest_customer_birthdate"),
    ]).row(0, named=True)

    return {
        "first_order_date": orders["first_order_date"],
        "last_order_date": orders["last_order_date"],
        "order_range_months": month_diff(orders["first_order_date"], orders["last_order_date"]),
        "oldest_customer_birthdate": births["oldest_customer_birthdate"],
        "oldest_customer_age": year_diff(births["oldest_customer_birthdate"], as_of),
        "youngest_customer_birthdate": births["youngest_customer_birthdate"],
        "youngest_customer_age": year_diff(births["youngest_customer_birthdate"], as_of),
    }


def customer_countries(snapshot: SalesSnapshot) -> list:
    """Distinct customer countries, sorted"""
    return (
        snapshot.customers.select(pl.col("country").unique())
        .sort("country", nulls_last=True)["country"]
        .to_list()
    )


def product_hierarchy(snapshot: SalesSnapshot) -> pl.DataFrame:
    """Distinct category / subcategory / product_name combinations"""
    return (
        snapshot.products.select(["category", "subcategory", "product_name"])
        .unique()
        .sort(["category", "subcategory", "product_name"], nulls_last=True)
    )
