"""
Report Builder

Orchestrates report computation over one snapshot and writes the results
to the curated zone.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional

import polars as pl
import pyarrow.parquet as pq
import structlog

from sales_analytics.config import get_settings
from sales_analytics.config.settings import SegmentationSettings
from sales_analytics.ingestion.schemas import SalesSnapshot
from sales_analytics.reports import analysis
from sales_analytics.reports.customer_report import build_customer_report
from sales_analytics.reports.product_report import build_product_report
from sales_analytics.reports.segmentation import customer_segment_counts, product_cost_ranges
from sales_analytics.transformation.joins import find_orphan_keys

logger = structlog.get_logger(__name__)


class ReportType(str, Enum):
    """Report views the builder can materialize"""
    PRODUCTS = "products"
    CUSTOMERS = "customers"


@dataclass
class ReportRun:
    """Result of building one report"""
    report_type: ReportType
    as_of: date
    rows: int
    started_at: datetime
    completed_at: datetime
    duration_seconds: float
    data: pl.DataFrame = field(repr=False)
    output_path: Optional[str] = None


class ReportBuilder:
    """
    Builds reports and analyses from a single snapshot.

    The snapshot is read-only and shared, so independent reports can be
    computed in parallel threads.

    Example:
        builder = ReportBuilder(snapshot, as_of=date(2025, 1, 1))
        runs = builder.build_all()
        builder.export(runs)
    """

    def __init__(
        self,
        snapshot: SalesSnapshot,
        as_of: Optional[date] = None,
        thresholds: Optional[SegmentationSettings] = None,
        output_path: Optional[str] = None,
    ):
        settings = get_settings()
        self.snapshot = snapshot
        self.as_of = as_of or settings.report.resolve_as_of()
        self.thresholds = thresholds or settings.segmentation
        self.output_path = Path(output_path or settings.data_lake.curated_path)
        self.export_format = settings.report.export_format
        self.top_n = settings.report.top_n
        self._builders: Dict[ReportType, Callable[[], pl.DataFrame]] = {
            ReportType.PRODUCTS: self.product_report,
            ReportType.CUSTOMERS: self.customer_report,
        }

    def product_report(self) -> pl.DataFrame:
        return build_product_report(self.snapshot, as_of=self.as_of, thresholds=self.thresholds)

    def customer_report(self) -> pl.DataFrame:
        return build_customer_report(self.snapshot, as_of=self.as_of, thresholds=self.thresholds)

    def build(self, report_type: ReportType) -> ReportRun:
        """Build a single report and time it"""
        started_at = datetime.utcnow()
        df = self._builders[ReportType(report_type)]()
        completed_at = datetime.utcnow()

        return ReportRun(
            report_type=ReportType(report_type),
            as_of=self.as_of,
            rows=df.height,
            started_at=started_at,
            completed_at=completed_at,
            duration_seconds=(completed_at - started_at).total_seconds(),
            data=df,
        )

    def build_all(self, max_workers: int = 2) -> Dict[ReportType, ReportRun]:
        """Build every report view concurrently"""
        logger.info("Building reports", as_of=self.as_of.isoformat(), **self.snapshot.row_counts)
        find_orphan_keys(self.snapshot)

        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            futures = {report_type: pool.submit(self.build, report_type) for report_type in self._builders}
            runs = {report_type: future.result() for report_type, future in futures.items()}

        logger.info(
            "Reports built",
            **{report_type.value: run.rows for report_type, run in runs.items()},
        )
        return runs

    def analyses(self) -> Dict[str, pl.DataFrame]:
        """Every analytical query over the snapshot, keyed by name"""
        return {
            "top_products": analysis.top_products_by_revenue(self.snapshot, top_n=self.top_n),
            "bottom_products": analysis.bottom_products_by_revenue(self.snapshot, top_n=self.top_n),
            "top_customers": analysis.top_customers_by_revenue(self.snapshot),
            "least_active_customers": analysis.customers_with_fewest_orders(self.snapshot),
            "sales_trend": analysis.sales_trend(self.snapshot, get_settings().report.trend_granularity),
            "cumulative_sales": analysis.cumulative_sales(self.snapshot),
            "product_performance": analysis.yearly_product_performance(self.snapshot),
            "category_share": analysis.category_share(self.snapshot),
            "cost_ranges": product_cost_ranges(self.snapshot, self.thresholds),
            "customer_segments": customer_segment_counts(self.snapshot, self.thresholds),
        }

    def _write_output(self, df: pl.DataFrame, name: str) -> str:
        """Write a frame to the curated zone"""
        self.output_path.mkdir(parents=True, exist_ok=True)
        output_file = self.output_path / f"report_{name}_{self.as_of:%Y%m%d}.{self.export_format}"

        if self.export_format == "csv":
            df.write_csv(output_file)
        else:
            pq.write_table(df.to_arrow(), output_file, compression="snappy")

        logger.info(f"Written {df.height} rows to {output_file}")
        return str(output_file)

    def export(self, runs: Dict[ReportType, ReportRun]) -> List[str]:
        """Persist built reports and record their paths on each run"""
        paths = []
        for report_type, run in runs.items():
            run.output_path = self._write_output(run.data, report_type.value)
            paths.append(run.output_path)
        return paths
