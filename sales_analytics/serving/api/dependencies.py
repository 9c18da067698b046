"""
Shared route dependencies
"""

from datetime import date
from typing import Optional

from fastapi import HTTPException, Query, Request

from sales_analytics.config import get_settings
from sales_analytics.ingestion.schemas import SalesSnapshot


def get_snapshot(request: Request) -> SalesSnapshot:
    """Snapshot loaded at startup; 503 until one is available"""
    snapshot = getattr(request.app.state, "snapshot", None)
    if snapshot is None:
        raise HTTPException(status_code=503, detail="Sales snapshot not loaded")
    return snapshot


def get_as_of(
    as_of: Optional[date] = Query(None, description="Reference date for recency and age"),
) -> date:
    return as_of or get_settings().report.resolve_as_of()
