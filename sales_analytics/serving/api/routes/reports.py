"""
Report API Endpoints

Product and customer reports, recomputed from the loaded snapshot on each
request.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
import polars as pl
from pydantic import BaseModel
import structlog

from sales_analytics.ingestion.schemas import SalesSnapshot
from sales_analytics.reports import build_customer_report, build_product_report
from sales_analytics.reports.models import (
    CustomerReportRecord,
    ProductReportRecord,
    to_records,
)
from sales_analytics.serving.api.dependencies import get_as_of, get_snapshot

router = APIRouter()
logger = structlog.get_logger(__name__)


class ProductReportResponse(BaseModel):
    as_of: date
    total: int
    items: List[ProductReportRecord]


class CustomerReportResponse(BaseModel):
    as_of: date
    total: int
    items: List[CustomerReportRecord]


@router.get("/products", response_model=ProductReportResponse)
def get_product_report(
    segment: Optional[str] = Query(None, description="High-Performer, Mid-Range or Low-Performer"),
    category: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1),
    snapshot: SalesSnapshot = Depends(get_snapshot),
    as_of: date = Depends(get_as_of),
) -> ProductReportResponse:
    """Product report, optionally filtered by segment or category"""
    report = build_product_report(snapshot, as_of=as_of)
    if segment:
        report = report.filter(pl.col("product_segment") == segment)
    if category:
        report = report.filter(pl.col("category") == category)
    total = report.height
    if limit:
        report = report.head(limit)

    logger.debug("Product report served", rows=total, segment=segment, category=category)
    return ProductReportResponse(as_of=as_of, total=total, items=to_records(report, ProductReportRecord))


@router.get("/products/{product_key}", response_model=ProductReportRecord)
def get_product(
    product_key: int,
    snapshot: SalesSnapshot = Depends(get_snapshot),
    as_of: date = Depends(get_as_of),
) -> ProductReportRecord:
    report = build_product_report(snapshot, as_of=as_of).filter(pl.col("product_key") == product_key)
    if report.is_empty():
        raise HTTPException(status_code=404, detail=f"No sales for product {product_key}")
    return to_records(report, ProductReportRecord)[0]


@router.get("/customers", response_model=CustomerReportResponse)
def get_customer_report(
    segment: Optional[str] = Query(None, description="VIP, Regular or New"),
    age_group: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1),
    snapshot: SalesSnapshot = Depends(get_snapshot),
    as_of: date = Depends(get_as_of),
) -> CustomerReportResponse:
    """Customer report, optionally filtered by segment or age group"""
    report = build_customer_report(snapshot, as_of=as_of)
    if segment:
        report = report.filter(pl.col("customer_segment") == segment)
    if age_group:
        report = report.filter(pl.col("age_group") == age_group)
    total = report.height
    if limit:
        report = report.head(limit)

    logger.debug("Customer report served", rows=total, segment=segment, age_group=age_group)
    return CustomerReportResponse(as_of=as_of, total=total, items=to_records(report, CustomerReportRecord))


@router.get("/customers/{customer_key}", response_model=CustomerReportRecord)
def get_customer(
    customer_key: int,
    snapshot: SalesSnapshot = Depends(get_snapshot),
    as_of: date = Depends(get_as_of),
) -> CustomerReportRecord:
    report = build_customer_report(snapshot, as_of=as_of).filter(pl.col("customer_key") == customer_key)
    if report.is_empty():
        raise HTTPException(status_code=404, detail=f"No orders for customer {customer_key}")
    return to_records(report, CustomerReportRecord)[0]
