"""
Snapshot Ingestion Module
"""
from .schemas import SalesSnapshot, SALES_SCHEMA, PRODUCTS_SCHEMA, CUSTOMERS_SCHEMA
from .snapshot_loader import SnapshotLoader, FileFormat, load_snapshot

__all__ = [
    "SalesSnapshot",
    "SALES_SCHEMA",
    "PRODUCTS_SCHEMA",
    "CUSTOMERS_SCHEMA",
    "SnapshotLoader",
    "FileFormat",
    "load_snapshot",
]
