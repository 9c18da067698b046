"""
Prefect Workflow Orchestration - Report Refresh

Scheduled rebuild of the product and customer reports:
- Snapshot load with retries
- Reports built concurrently
- Export to the curated zone
"""

from datetime import date
from typing import Dict, List, Optional

from prefect import flow, get_run_logger, task
from prefect.cache_policies import NONE

from sales_analytics.config import get_settings
from sales_analytics.ingestion import SnapshotLoader
from sales_analytics.ingestion.schemas import SalesSnapshot
from sales_analytics.reports import ReportBuilder, ReportRun, ReportType

settings = get_settings()


# =============================================================================
# TASKS
# =============================================================================

@task(
    name="load_snapshot",
    description="Load the star schema snapshot from the gold zone",
    retries=settings.snapshot.load_retries,
    retry_delay_seconds=settings.snapshot.retry_delay_seconds,
)
async def load_snapshot(source_dir: Optional[str] = None) -> SalesSnapshot:
    logger = get_run_logger()

    loader = SnapshotLoader(source_dir)
    snapshot = await loader.load()

    for warning in loader.last_result.warnings:
        logger.warning(f"Snapshot quality: {warning}")
    logger.info(f"Snapshot loaded: {snapshot.row_counts}")
    return snapshot


@task(
    name="build_report",
    description="Build one report view from the snapshot",
    cache_policy=NONE,
)
def build_report(builder: ReportBuilder, report_type: ReportType) -> ReportRun:
    logger = get_run_logger()

    run = builder.build(report_type)
    logger.info(f"Built {report_type.value} report: {run.rows} rows in {run.duration_seconds:.2f}s")
    return run


@task(
    name="export_reports",
    description="Write built reports to the curated zone",
    cache_policy=NONE,
    retries=2,
    retry_delay_seconds=30,
)
def export_reports(builder: ReportBuilder, runs: Dict[ReportType, ReportRun]) -> List[str]:
    logger = get_run_logger()

    paths = builder.export(runs)
    logger.info(f"Exported {len(paths)} reports")
    return paths


# =============================================================================
# FLOWS
# =============================================================================

@flow(
    name="refresh_reports",
    description="Rebuild product and customer reports from the latest snapshot",
)
async def refresh_reports(
    source_dir: Optional[str] = None,
    as_of: Optional[date] = None,
    output_path: Optional[str] = None,
) -> dict:
    """
    Report refresh pipeline.

    Steps:
    1. Load and validate the snapshot
    2. Build product and customer reports concurrently
    3. Export both reports
    """
    logger = get_run_logger()

    snapshot = await load_snapshot(source_dir)
    builder = ReportBuilder(snapshot, as_of=as_of, output_path=output_path)
    logger.info(f"Refreshing reports as of {builder.as_of}")

    futures = {
        report_type: build_report.submit(builder, report_type)
        for report_type in (ReportType.PRODUCTS, ReportType.CUSTOMERS)
    }
    runs = {report_type: future.result() for report_type, future in futures.items()}

    paths = export_reports(builder, runs)

    return {
        "as_of": builder.as_of.isoformat(),
        "rows": {report_type.value: run.rows for report_type, run in runs.items()},
        "outputs": paths,
        "status": "success",
    }


if __name__ == "__main__":
    import asyncio

    asyncio.run(refresh_reports())
