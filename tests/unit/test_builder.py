"""
Unit Tests - Report Builder
"""
from pathlib import Path

import polars as pl

from sales_analytics.reports import ReportBuilder, ReportType, build_customer_report, build_product_report


class TestReportBuilder:
    """Tests for ReportBuilder"""

    def test_build_all_matches_sequential_build(self, sample_snapshot, as_of, thresholds):
        """Concurrent builds equal the standalone report functions"""
        builder = ReportBuilder(sample_snapshot, as_of=as_of, thresholds=thresholds)

        runs = builder.build_all()

        assert set(runs) == {ReportType.PRODUCTS, ReportType.CUSTOMERS}
        assert runs[ReportType.PRODUCTS].data.equals(
            build_product_report(sample_snapshot, as_of=as_of, thresholds=thresholds)
        )
        assert runs[ReportType.CUSTOMERS].data.equals(
            build_customer_report(sample_snapshot, as_of=as_of, thresholds=thresholds)
        )
        assert runs[ReportType.CUSTOMERS].rows == 3
        assert runs[ReportType.PRODUCTS].as_of == as_of

    def test_snapshot_is_not_modified(self, sample_snapshot, as_of):
        before = sample_snapshot.sales.clone()

        ReportBuilder(sample_snapshot, as_of=as_of).build_all()

        assert sample_snapshot.sales.equals(before)

    def test_export_parquet(self, sample_snapshot, as_of, thresholds, tmp_path):
        builder = ReportBuilder(sample_snapshot, as_of=as_of, thresholds=thresholds, output_path=str(tmp_path))
        builder.export_format = "parquet"
        runs = builder.build_all()

        paths = builder.export(runs)

        assert sorted(Path(p).name for p in paths) == [
            "report_customers_20250101.parquet",
            "report_products_20250101.parquet",
        ]
        exported = pl.read_parquet(runs[ReportType.PRODUCTS].output_path)
        assert exported.equals(runs[ReportType.PRODUCTS].data)

    def test_export_csv(self, sample_snapshot, as_of, tmp_path):
        builder = ReportBuilder(sample_snapshot, as_of=as_of, output_path=str(tmp_path / "curated"))
        builder.export_format = "csv"

        paths = builder.export({ReportType.CUSTOMERS: builder.build(ReportType.CUSTOMERS)})

        assert paths[0].endswith("report_customers_20250101.csv")
        assert pl.read_csv(paths[0]).height == 3

    def test_analyses(self, sample_snapshot, as_of, thresholds):
        builder = ReportBuilder(sample_snapshot, as_of=as_of, thresholds=thresholds)

        results = builder.analyses()

        assert set(results) == {
            "top_products",
            "bottom_products",
            "top_customers",
            "least_active_customers",
            "sales_trend",
            "cumulative_sales",
            "product_performance",
            "category_share",
            "cost_ranges",
            "customer_segments",
        }
        assert all(isinstance(df, pl.DataFrame) for df in results.values())
