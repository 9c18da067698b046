"""
Reports Module
"""
from .product_report import build_product_report
from .customer_report import build_customer_report
from .builder import ReportBuilder, ReportRun, ReportType

__all__ = [
    "build_product_report",
    "build_customer_report",
    "ReportBuilder",
    "ReportRun",
    "ReportType",
]
