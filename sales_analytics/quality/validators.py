"""
Snapshot Validation Module

Rule-based quality checks run on the star schema before reports are built.
A snapshot with failing ERROR checks is rejected as malformed; WARNING
checks (null order dates, orphan dimension keys) are logged and tolerated.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import polars as pl
import structlog

logger = structlog.get_logger(__name__)


class ValidationSeverity(str, Enum):
    """Severity levels for validation failures"""
    ERROR = "error"  # Snapshot is rejected
    WARNING = "warning"  # Logged, computation continues


class ValidationStatus(str, Enum):
    """Overall validation status"""
    PASSED = "passed"
    FAILED = "failed"
    PARTIAL = "partial"


@dataclass
class ValidationCheck:
    """Single validation check result"""
    name: str
    passed: bool
    severity: ValidationSeverity
    message: str
    details: Optional[Dict[str, Any]] = None
    failed_rows: int = 0
    total_rows: int = 0


@dataclass
class ValidationResult:
    """Result of all checks run against one table"""
    table: str
    status: ValidationStatus
    checks: List[ValidationCheck] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None

    @property
    def errors(self) -> List[ValidationCheck]:
        return [c for c in self.checks if not c.passed and c.severity == ValidationSeverity.ERROR]

    @property
    def warnings(self) -> List[ValidationCheck]:
        return [c for c in self.checks if not c.passed and c.severity == ValidationSeverity.WARNING]

    @property
    def passed(self) -> bool:
        return self.status != ValidationStatus.FAILED


class TableValidator:
    """
    Chainable validator for a single snapshot table.

    Example:
        validator = TableValidator("products")
        validator.add_unique_check("product_key").add_range_check("cost", min_value=0)
        result = validator.validate(df)
    """

    def __init__(self, table: str):
        self.table = table
        self._checks: List[Callable[[pl.DataFrame], ValidationCheck]] = []

    def _missing_column(self, name: str, column: str, severity: ValidationSeverity) -> ValidationCheck:
        return ValidationCheck(
            name=name,
            passed=False,
            severity=severity,
            message=f"Column '{column}' not found",
        )

    def add_not_null_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "TableValidator":
        """Reject null values in column"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"not_null_{column}"
            if column not in df.columns:
                return self._missing_column(name, column, severity)

            null_count = df[column].null_count()
            return ValidationCheck(
                name=name,
                passed=null_count == 0,
                severity=severity,
                message=f"Column '{column}' has {null_count} null values",
                details={"null_count": null_count},
                failed_rows=null_count,
                total_rows=df.height,
            )

        self._checks.append(check)
        return self

    def add_unique_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "TableValidator":
        """Dimension keys must identify exactly one row"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"unique_{column}"
            if column not in df.columns:
                return self._missing_column(name, column, severity)

            duplicate_count = df.height - df[column].n_unique()
            return ValidationCheck(
                name=name,
                passed=duplicate_count == 0,
                severity=severity,
                message=f"Column '{column}' has {duplicate_count} duplicate values",
                details={"duplicate_count": duplicate_count},
                failed_rows=duplicate_count,
                total_rows=df.height,
            )

        self._checks.append(check)
        return self

    def add_range_check(
        self,
        column: str,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "TableValidator":
        """Values outside [min_value, max_value] fail; nulls are ignored"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"range_{column}"
            if column not in df.columns:
                return self._missing_column(name, column, severity)

            out_of_range = pl.lit(False)
            if min_value is not None:
                out_of_range = out_of_range | (pl.col(column) < min_value)
            if max_value is not None:
                out_of_range = out_of_range | (pl.col(column) > max_value)

            failed = df.filter(out_of_range).height
            return ValidationCheck(
                name=name,
                passed=failed == 0,
                severity=severity,
                message=f"Column '{column}' has {failed} values outside [{min_value}, {max_value}]",
                details={"min": min_value, "max": max_value, "out_of_range_count": failed},
                failed_rows=failed,
                total_rows=df.height,
            )

        self._checks.append(check)
        return self

    def add_referential_integrity_check(
        self,
        column: str,
        reference_df: pl.DataFrame,
        reference_column: str,
        severity: ValidationSeverity = ValidationSeverity.WARNING,
    ) -> "TableValidator":
        """Count fact keys with no dimension row (left-join misses)"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"ref_integrity_{column}"
            if column not in df.columns:
                return self._missing_column(name, column, severity)

            orphans = df.filter(
                ~pl.col(column).is_in(reference_df[reference_column].unique().to_list()) & pl.col(column).is_not_null()
            ).height
            return ValidationCheck(
                name=name,
                passed=orphans == 0,
                severity=severity,
                message=f"Column '{column}' has {orphans} rows without a '{reference_column}' match",
                details={"orphan_count": orphans},
                failed_rows=orphans,
                total_rows=df.height,
            )

        self._checks.append(check)
        return self

    def validate(self, df: pl.DataFrame) -> ValidationResult:
        """Run every registered check against df"""
        started_at = datetime.utcnow()
        results = [check(df) for check in self._checks]

        for result in results:
            if not result.passed:
                logger.warning(
                    f"Validation failed: {result.name}",
                    table=self.table,
                    message=result.message,
                    severity=result.severity.value,
                )

        errors = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.ERROR)
        warnings = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.WARNING)

        if errors:
            status = ValidationStatus.FAILED
        elif warnings:
            status = ValidationStatus.PARTIAL
        else:
            status = ValidationStatus.PASSED

        logger.info(
            f"Validation complete: {status.value}",
            table=self.table,
            checks=len(results),
            errors=errors,
            warnings=warnings,
        )

        return ValidationResult(
            table=self.table,
            status=status,
            checks=results,
            started_at=started_at,
            completed_at=datetime.utcnow(),
        )


def create_sales_validator(
    products_df: Optional[pl.DataFrame] = None,
    customers_df: Optional[pl.DataFrame] = None,
) -> TableValidator:
    """Validator for the sales fact table"""
    validator = (
        TableValidator("sales")
        .add_not_null_check("order_number")
        .add_not_null_check("order_date", severity=ValidationSeverity.WARNING)
        .add_range_check("quantity", min_value=0)
    )
    if products_df is not None:
        validator.add_referential_integrity_check("product_key", products_df, "product_key")
    if customers_df is not None:
        validator.add_referential_integrity_check("customer_key", customers_df, "customer_key")
    return validator


def create_products_validator() -> TableValidator:
    """Validator for the product dimension"""
    return (
        TableValidator("products")
        .add_not_null_check("product_key")
        .add_unique_check("product_key")
        .add_range_check("cost", min_value=0, severity=ValidationSeverity.WARNING)
    )


def create_customers_validator() -> TableValidator:
    """Validator for the customer dimension"""
    return (
        TableValidator("customers")
        .add_not_null_check("customer_key")
        .add_unique_check("customer_key")
    )


def validate_snapshot(snapshot) -> Dict[str, ValidationResult]:
    """Validate all three tables of a SalesSnapshot"""
    return {
        "sales": create_sales_validator(snapshot.products, snapshot.customers).validate(snapshot.sales),
        "products": create_products_validator().validate(snapshot.products),
        "customers": create_customers_validator().validate(snapshot.customers),
    }
