"""
Workflow Tests - Report Refresh
"""
from pathlib import Path

import pytest
from prefect.testing.utilities import prefect_test_harness

from workflows.report_refresh import refresh_reports


@pytest.fixture(autouse=True, scope="module")
def prefect_backend():
    with prefect_test_harness():
        yield


@pytest.fixture
def gold_dir(tmp_path, sample_snapshot) -> Path:
    gold = tmp_path / "gold"
    gold.mkdir()
    sample_snapshot.sales.write_csv(gold / "fact_sales.csv")
    sample_snapshot.products.write_csv(gold / "dim_products.csv")
    sample_snapshot.customers.write_csv(gold / "dim_customers.csv")
    return gold


class TestRefreshReports:
    """Tests for the refresh_reports flow"""

    @pytest.mark.asyncio
    async def test_refresh_builds_and_exports_both_reports(self, gold_dir, tmp_path, as_of):
        curated = tmp_path / "curated"

        result = await refresh_reports(source_dir=str(gold_dir), as_of=as_of, output_path=str(curated))

        assert result["status"] == "success"
        assert result["as_of"] == "2025-01-01"
        assert result["rows"] == {"products": 4, "customers": 3}
        assert sorted(Path(p).name for p in result["outputs"]) == [
            "report_customers_20250101.parquet",
            "report_products_20250101.parquet",
        ]
        assert all(Path(p).exists() for p in result["outputs"])
