"""
Analysis API Endpoints

Rankings, trends, cumulative series, performance, part-to-whole shares,
segment distributions and headline measures.
"""

from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
import polars as pl
import structlog

from sales_analytics.exceptions import UnknownAnalysisError
from sales_analytics.ingestion.schemas import SalesSnapshot
from sales_analytics.reports import analysis
from sales_analytics.reports.exploration import (
    customer_countries,
    date_range_overview,
    measures_overview,
    product_hierarchy,
)
from sales_analytics.reports.models import (
    CategoryShare,
    CumulativePoint,
    DateRangeOverview,
    MeasureValue,
    ProductYearPerformance,
    RankedCustomer,
    RankedProduct,
    SegmentCount,
    TrendPoint,
    to_records,
)
from sales_analytics.reports.segmentation import customer_segment_counts, product_cost_ranges
from sales_analytics.serving.api.dependencies import get_as_of, get_snapshot

router = APIRouter()
logger = structlog.get_logger(__name__)


def _bad_request(e: UnknownAnalysisError) -> HTTPException:
    logger.warning("Rejected analysis request", error=str(e))
    return HTTPException(status_code=400, detail=str(e))


@router.get("/ranking/products", response_model=List[RankedProduct])
def rank_products(
    order: str = Query("top", pattern="^(top|bottom)$"),
    top_n: int = Query(5, ge=1, le=100),
    with_ties: bool = True,
    snapshot: SalesSnapshot = Depends(get_snapshot),
) -> List[RankedProduct]:
    """Products ranked by revenue, best or worst first"""
    if order == "top":
        df = analysis.top_products_by_revenue(snapshot, top_n=top_n, with_ties=with_ties)
    else:
        df = analysis.bottom_products_by_revenue(snapshot, top_n=top_n, with_ties=with_ties)
    return to_records(df, RankedProduct)


@router.get("/ranking/customers", response_model=List[RankedCustomer])
def rank_customers(
    by: str = Query("revenue", pattern="^(revenue|fewest_orders)$"),
    top_n: int = Query(10, ge=1, le=100),
    with_ties: bool = True,
    snapshot: SalesSnapshot = Depends(get_snapshot),
) -> List[RankedCustomer]:
    """Top customers by revenue, or customers with the fewest orders"""
    if by == "revenue":
        df = analysis.top_customers_by_revenue(snapshot, top_n=top_n, with_ties=with_ties)
    else:
        df = analysis.customers_with_fewest_orders(snapshot, top_n=top_n, with_ties=with_ties)
    return to_records(df, RankedCustomer)


@router.get("/trend", response_model=List[TrendPoint])
def sales_trend(
    granularity: str = "month",
    snapshot: SalesSnapshot = Depends(get_snapshot),
) -> List[TrendPoint]:
    try:
        df = analysis.sales_trend(snapshot, granularity=granularity)
    except UnknownAnalysisError as e:
        raise _bad_request(e)
    return to_records(df, TrendPoint)


@router.get("/cumulative", response_model=List[CumulativePoint])
def cumulative_sales(
    granularity: str = "year",
    snapshot: SalesSnapshot = Depends(get_snapshot),
) -> List[CumulativePoint]:
    try:
        df = analysis.cumulative_sales(snapshot, granularity=granularity)
    except UnknownAnalysisError as e:
        raise _bad_request(e)
    return to_records(df, CumulativePoint)


@router.get("/performance", response_model=List[ProductYearPerformance])
def product_performance(
    product_name: Optional[str] = None,
    snapshot: SalesSnapshot = Depends(get_snapshot),
) -> List[ProductYearPerformance]:
    """Yearly product sales against the product average and the previous year"""
    df = analysis.yearly_product_performance(snapshot)
    if product_name:
        df = df.filter(pl.col("product_name") == product_name)
    return to_records(df, ProductYearPerformance)


@router.get("/part-to-whole", response_model=List[CategoryShare])
def category_share(snapshot: SalesSnapshot = Depends(get_snapshot)) -> List[CategoryShare]:
    return to_records(analysis.category_share(snapshot), CategoryShare)


@router.get("/segments/customers", response_model=List[SegmentCount])
def customer_segments(snapshot: SalesSnapshot = Depends(get_snapshot)) -> List[SegmentCount]:
    df = customer_segment_counts(snapshot).rename(
        {"customer_segment": "segment", "total_customers": "count"}
    )
    return to_records(df, SegmentCount)


@router.get("/segments/cost-ranges", response_model=List[SegmentCount])
def cost_ranges(snapshot: SalesSnapshot = Depends(get_snapshot)) -> List[SegmentCount]:
    df = product_cost_ranges(snapshot).rename({"cost_range": "segment", "total_products": "count"})
    return to_records(df, SegmentCount)


@router.get("/measures", response_model=List[MeasureValue])
def key_measures(snapshot: SalesSnapshot = Depends(get_snapshot)) -> List[MeasureValue]:
    return to_records(measures_overview(snapshot), MeasureValue)


@router.get("/date-range", response_model=DateRangeOverview)
def date_range(
    snapshot: SalesSnapshot = Depends(get_snapshot),
    as_of: date = Depends(get_as_of),
) -> DateRangeOverview:
    return DateRangeOverview(**date_range_overview(snapshot, as_of=as_of))


@router.get("/dimensions/countries", response_model=List[Optional[str]])
def countries(snapshot: SalesSnapshot = Depends(get_snapshot)) -> List[Optional[str]]:
    return customer_countries(snapshot)


@router.get("/dimensions/products")
def products_hierarchy(snapshot: SalesSnapshot = Depends(get_snapshot)) -> List[Dict[str, Any]]:
    return product_hierarchy(snapshot).to_dicts()
