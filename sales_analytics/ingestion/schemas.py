"""
Star Schema Definitions

Polars schemas for the gold layer tables and the in-memory snapshot that
bundles them for report computation.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

import polars as pl

from sales_analytics.exceptions import SnapshotLoadError


SALES_SCHEMA: Dict[str, pl.DataType] = {
    "order_number": pl.Utf8,
    "product_key": pl.Int64,
    "customer_key": pl.Int64,
    "order_date": pl.Date,
    "shipping_date": pl.Date,
    "due_date": pl.Date,
    "sales_amount": pl.Int64,
    "quantity": pl.Int64,
    "price": pl.Int64,
}

PRODUCTS_SCHEMA: Dict[str, pl.DataType] = {
    "product_key": pl.Int64,
    "product_id": pl.Int64,
    "product_number": pl.Utf8,
    "product_name": pl.Utf8,
    "category_id": pl.Utf8,
    "category": pl.Utf8,
    "subcategory": pl.Utf8,
    "maintenance": pl.Utf8,
    "cost": pl.Int64,
    "product_line": pl.Utf8,
    "start_date": pl.Date,
}

CUSTOMERS_SCHEMA: Dict[str, pl.DataType] = {
    "customer_key": pl.Int64,
    "customer_id": pl.Int64,
    "customer_number": pl.Utf8,
    "first_name": pl.Utf8,
    "last_name": pl.Utf8,
    "country": pl.Utf8,
    "marital_status": pl.Utf8,
    "gender": pl.Utf8,
    "birthdate": pl.Date,
    "create_date": pl.Date,
}

# Columns a table cannot be loaded without; the rest are filled with nulls
REQUIRED_COLUMNS: Dict[str, List[str]] = {
    "sales": ["order_number", "product_key", "customer_key", "order_date", "sales_amount", "quantity", "price"],
    "products": ["product_key", "product_name", "category", "cost"],
    "customers": ["customer_key", "first_name", "last_name", "birthdate"],
}

TABLE_SCHEMAS: Dict[str, Dict[str, pl.DataType]] = {
    "sales": SALES_SCHEMA,
    "products": PRODUCTS_SCHEMA,
    "customers": CUSTOMERS_SCHEMA,
}


def conform_to_schema(df: pl.DataFrame, table: str) -> pl.DataFrame:
    """
    Cast a raw table to its declared schema.

    Missing required columns raise SnapshotLoadError; missing optional
    columns are added as nulls. Extra columns are dropped. Date columns
    read as strings are parsed as ISO dates. A value that cannot be cast
    or parsed raises SnapshotLoadError.
    """
    schema = TABLE_SCHEMAS[table]
    missing = [c for c in REQUIRED_COLUMNS[table] if c not in df.columns]
    if missing:
        raise SnapshotLoadError(
            f"Table '{table}' is missing required columns",
            table=table,
            errors=[f"Missing column: {c}" for c in missing],
        )

    columns = []
    for name, dtype in schema.items():
        if name not in df.columns:
            columns.append(pl.lit(None, dtype=dtype).alias(name))
        elif dtype == pl.Date and df[name].dtype == pl.Utf8:
            columns.append(pl.col(name).str.strip_chars().str.to_date("%Y-%m-%d", strict=False).alias(name))
        elif dtype == pl.Date and df[name].dtype == pl.Datetime:
            columns.append(pl.col(name).dt.date().alias(name))
        else:
            columns.append(pl.col(name).cast(dtype, strict=False).alias(name))

    try:
        conformed = df.select(columns)
    except pl.exceptions.PolarsError as e:
        raise SnapshotLoadError(f"Table '{table}' could not be cast to schema", table=table, errors=[str(e)]) from e

    # Values present in the raw column that the cast turned into nulls
    errors = []
    for name in schema:
        if name not in df.columns:
            continue
        unparseable = conformed[name].null_count() - df[name].null_count()
        if unparseable:
            errors.append(f"Column '{name}' has {unparseable} unparseable values")
    if errors:
        raise SnapshotLoadError(f"Table '{table}' has malformed values", table=table, errors=errors)

    return conformed


@dataclass(frozen=True)
class SalesSnapshot:
    """
    Read-only materialization of the star schema.

    All report computations read from one snapshot and never mutate it.
    """
    sales: pl.DataFrame
    products: pl.DataFrame
    customers: pl.DataFrame

    @classmethod
    def from_frames(
        cls,
        sales: pl.DataFrame,
        products: Optional[pl.DataFrame] = None,
        customers: Optional[pl.DataFrame] = None,
    ) -> "SalesSnapshot":
        """Build a snapshot from raw frames, conforming each to its schema"""
        products = products if products is not None else pl.DataFrame(schema=PRODUCTS_SCHEMA)
        customers = customers if customers is not None else pl.DataFrame(schema=CUSTOMERS_SCHEMA)
        return cls(
            sales=conform_to_schema(sales, "sales"),
            products=conform_to_schema(products, "products"),
            customers=conform_to_schema(customers, "customers"),
        )

    @classmethod
    def from_records(
        cls,
        sales: Iterable[Mapping[str, Any]],
        products: Iterable[Mapping[str, Any]] = (),
        customers: Iterable[Mapping[str, Any]] = (),
    ) -> "SalesSnapshot":
        """Build a snapshot from lists of row dictionaries"""
        def frame(rows: Iterable[Mapping[str, Any]], schema: Dict[str, pl.DataType]) -> pl.DataFrame:
            rows = [{name: row.get(name) for name in schema} for row in rows]
            return pl.DataFrame(rows, schema=schema)

        return cls(
            sales=frame(sales, SALES_SCHEMA),
            products=frame(products, PRODUCTS_SCHEMA),
            customers=frame(customers, CUSTOMERS_SCHEMA),
        )

    @property
    def row_counts(self) -> Dict[str, int]:
        return {
            "sales": self.sales.height,
            "products": self.products.height,
            "customers": self.customers.height,
        }
