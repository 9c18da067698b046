"""
Derive & Segment

Derived ratios and threshold-based classification for aggregated groups.
Every division is guarded; classification is ordered and first match wins,
with the last label as the catch-all.
"""

from datetime import date
from typing import Optional, Union

import polars as pl

from sales_analytics.config.settings import SegmentationSettings, get_settings
from sales_analytics.transformation.dates import months_between, years_between

IntoExpr = Union[str, pl.Expr]

# Segment labels
HIGH_PERFORMER = "High-Performer"
MID_RANGE = "Mid-Range"
LOW_PERFORMER = "Low-Performer"

VIP = "VIP"
REGULAR = "Regular"
NEW = "New"

AGE_UNDER_20 = "Under 20"
AGE_50_PLUS = "50 and Above"


def _col(value: IntoExpr) -> pl.Expr:
    return pl.col(value) if isinstance(value, str) else value


def truncated_division(numerator: IntoExpr, denominator: IntoExpr) -> pl.Expr:
    """Integer division rounding toward zero"""
    numerator, denominator = _col(numerator), _col(denominator)
    # Zero denominators yield null rather than an error
    quotient = numerator.abs() // pl.when(denominator != 0).then(denominator.abs())
    return (
        pl.when((numerator < 0) != (denominator < 0))
        .then(-quotient)
        .otherwise(quotient)
    )


def safe_ratio(
    numerator: IntoExpr,
    denominator: IntoExpr,
    fallback: Union[IntoExpr, int, float] = 0,
    integer: bool = True,
) -> pl.Expr:
    """
    numerator / denominator, or ``fallback`` when the denominator is 0 or null.

    Integer ratios truncate toward zero like integer division in the
    warehouse engine.
    """
    numerator, denominator = _col(numerator), _col(denominator)
    fallback = _col(fallback) if isinstance(fallback, (str, pl.Expr)) else pl.lit(fallback)
    ratio = truncated_division(numerator, denominator) if integer else numerator / denominator
    return (
        pl.when(denominator.is_null() | (denominator == 0))
        .then(fallback)
        .otherwise(ratio)
    )


def round_half_away(value: IntoExpr, decimals: int = 2) -> pl.Expr:
    """Round half away from zero (2.345 -> 2.35, -2.345 -> -2.35)"""
    value = _col(value).cast(pl.Float64)
    factor = 10 ** decimals
    return value.sign() * (value.abs() * factor + 0.5).floor() / factor


def avg_revenue_per_order(total_sales: IntoExpr = "total_sales", total_orders: IntoExpr = "total_orders") -> pl.Expr:
    return safe_ratio(total_sales, total_orders, fallback=0)


def avg_monthly_revenue(total_sales: IntoExpr = "total_sales", lifespan: IntoExpr = "lifespan_in_months") -> pl.Expr:
    """A single active month means monthly revenue equals total revenue"""
    return safe_ratio(total_sales, lifespan, fallback=total_sales)


def recency_in_months(last_event: IntoExpr, as_of: date) -> pl.Expr:
    """Month boundaries between the last event and the reference date"""
    return months_between(_col(last_event), as_of)


def age_in_years(birthdate: IntoExpr, as_of: date) -> pl.Expr:
    return years_between(_col(birthdate), as_of)


def product_segment(
    total_sales: IntoExpr = "total_sales",
    thresholds: Optional[SegmentationSettings] = None,
) -> pl.Expr:
    """High-Performer above the high bound, Mid-Range from the mid bound up, else Low-Performer"""
    t = thresholds or get_settings().segmentation
    sales = _col(total_sales)
    return (
        pl.when(sales > t.high_performer_min_sales).then(pl.lit(HIGH_PERFORMER))
        .when(sales >= t.mid_range_min_sales).then(pl.lit(MID_RANGE))
        .otherwise(pl.lit(LOW_PERFORMER))
    )


def customer_segment(
    lifespan: IntoExpr = "lifespan_in_months",
    total_sales: IntoExpr = "total_sales",
    thresholds: Optional[SegmentationSettings] = None,
) -> pl.Expr:
    """VIP and Regular need the minimum lifespan; everyone else is New"""
    t = thresholds or get_settings().segmentation
    lifespan, sales = _col(lifespan), _col(total_sales)
    loyal = lifespan >= t.loyal_min_lifespan_months
    return (
        pl.when(loyal & (sales > t.vip_min_sales)).then(pl.lit(VIP))
        .when(loyal & (sales <= t.vip_min_sales)).then(pl.lit(REGULAR))
        .otherwise(pl.lit(NEW))
    )


def age_group(age: IntoExpr = "age") -> pl.Expr:
    """Inclusive ten-year bands from 20 to 49"""
    age = _col(age)
    return (
        pl.when(age < 20).then(pl.lit(AGE_UNDER_20))
        .when(age.is_between(20, 29)).then(pl.lit("20-29"))
        .when(age.is_between(30, 39)).then(pl.lit("30-39"))
        .when(age.is_between(40, 49)).then(pl.lit("40-49"))
        .otherwise(pl.lit(AGE_50_PLUS))
    )


def cost_range(
    cost: IntoExpr = "cost",
    thresholds: Optional[SegmentationSettings] = None,
) -> pl.Expr:
    """Product price tiers by unit cost"""
    t = thresholds or get_settings().segmentation
    cost = _col(cost)
    return (
        pl.when(cost < t.budget_max_cost)
        .then(pl.lit(f"Budget (<${t.budget_max_cost})"))
        .when(cost.is_between(t.budget_max_cost, t.standard_max_cost))
        .then(pl.lit(f"Standard (${t.budget_max_cost}-${t.standard_max_cost})"))
        .when(cost.is_between(t.standard_max_cost, t.premium_max_cost))
        .then(pl.lit(f"Premium (${t.standard_max_cost}-${t.premium_max_cost})"))
        .otherwise(pl.lit(f"Luxury (>${t.premium_max_cost})"))
    )
