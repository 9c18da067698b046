"""
Report Record Models

Pydantic projections of the report and analysis frames, used for JSON
serialization at the API boundary.
"""

from datetime import date
from typing import List, Optional, Type, TypeVar

import polars as pl
from pydantic import BaseModel

ModelT = TypeVar("ModelT", bound=BaseModel)


class ProductReportRecord(BaseModel):
    """One product of the product report"""
    product_key: Optional[int]
    product_name: Optional[str]
    category: Optional[str]
    subcategory: Optional[str]
    cost: Optional[int]
    last_sale_date: date
    recency_in_months: int
    product_segment: str
    lifespan_in_months: int
    total_orders: int
    total_sales: int
    total_quantity: int
    total_customers: int
    avg_selling_price: Optional[float]
    avg_revenue_per_order: int
    avg_monthly_revenue: int


class CustomerReportRecord(BaseModel):
    """One customer of the customer report"""
    customer_key: Optional[int]
    customer_number: Optional[str]
    customer_name: Optional[str]
    age: Optional[int]
    age_group: str
    customer_segment: str
    last_order_date: date
    recency_in_months: int
    total_orders: int
    total_sales: int
    total_quantity: int
    total_products: int
    lifespan_in_months: int
    avg_order_value: int
    avg_monthly_spend: int


class RankedProduct(BaseModel):
    rank: int
    product_name: Optional[str]
    total_revenue: int


class RankedCustomer(BaseModel):
    rank: int
    customer_key: Optional[int]
    first_name: Optional[str]
    last_name: Optional[str]
    total_revenue: Optional[int] = None
    total_orders: Optional[int] = None


class TrendPoint(BaseModel):
    period_start: date
    order_year: int
    order_month: int
    period_label: str
    total_sales: int
    total_customers: int
    total_quantity: int


class CumulativePoint(BaseModel):
    period_start: date
    total_sales: int
    avg_price: Optional[float]
    running_total_sales: int
    moving_average_price: Optional[float]


class ProductYearPerformance(BaseModel):
    order_year: int
    product_name: Optional[str]
    current_sales: int
    avg_sales_for_product: float
    variance_from_average: float
    performance_vs_average: str
    previous_year_sales: int
    year_over_year_change: int
    year_over_year_trend: str


class CategoryShare(BaseModel):
    category: Optional[str]
    total_sales: int
    overall_sales: int
    percentage_of_total: float


class SegmentCount(BaseModel):
    segment: str
    count: int


class MeasureValue(BaseModel):
    measure_name: str
    measure_value: Optional[float]


class DateRangeOverview(BaseModel):
    first_order_date: Optional[date]
    last_order_date: Optional[date]
    order_range_months: Optional[int]
    oldest_customer_birthdate: Optional[date]
    oldest_customer_age: Optional[int]
    youngest_customer_birthdate: Optional[date]
    youngest_customer_age: Optional[int]


def to_records(df: pl.DataFrame, model: Type[ModelT]) -> List[ModelT]:
    """Validate each frame row against ``model``"""
    return [model.model_validate(row) for row in df.iter_rows(named=True)]
