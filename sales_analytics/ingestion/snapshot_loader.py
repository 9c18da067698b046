"""
Snapshot Loader

Read-only, time-bounded loading of the star schema snapshot (sales fact,
product and customer dimensions) from CSV, JSON or Parquet files.

The snapshot is the only I/O the reporting pipeline performs. A table that
cannot be read, does not conform to its schema, or fails ERROR-level quality
checks aborts the load with SnapshotLoadError; reports are never built from
a partial snapshot. Retries are left to the caller (see workflows/).
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union

import polars as pl
import pyarrow.parquet as pq
import structlog
from pydantic import BaseModel

from sales_analytics.config import get_settings
from sales_analytics.exceptions import SnapshotLoadError
from sales_analytics.ingestion.schemas import SalesSnapshot, conform_to_schema
from sales_analytics.quality.validators import validate_snapshot

logger = structlog.get_logger(__name__)


class FileFormat(str, Enum):
    """Supported file formats"""
    CSV = "csv"
    JSON = "json"
    JSONL = "jsonl"
    PARQUET = "parquet"


@dataclass
class SnapshotFileConfig:
    """Location and parsing options for one snapshot table"""
    file_path: Union[str, Path]
    file_format: FileFormat
    table: str
    delimiter: str = ","
    encoding: str = "utf8"
    null_values: List[str] = field(default_factory=lambda: ["", "NULL", "null", "None", "NA", "N/A"])


class LoadResult(BaseModel):
    """Audit record of a snapshot load"""
    source: str
    status: str
    row_counts: Dict[str, int] = {}
    warnings: List[str] = []
    load_duration_seconds: float = 0
    started_at: datetime
    completed_at: Optional[datetime] = None


class SnapshotLoader:
    """
    Loads a SalesSnapshot from a directory of table files.

    Example:
        loader = SnapshotLoader("data/gold")
        snapshot = await loader.load()
    """

    def __init__(
        self,
        source_dir: Optional[Union[str, Path]] = None,
        file_format: Optional[FileFormat] = None,
        timeout_seconds: Optional[float] = None,
        validate: Optional[bool] = None,
    ):
        settings = get_settings()
        self.source_dir = Path(source_dir or settings.data_lake.gold_path)
        self.file_format = FileFormat(file_format or settings.data_lake.default_format)
        self.timeout_seconds = timeout_seconds or settings.snapshot.load_timeout_seconds
        self.validate = settings.snapshot.validate_on_load if validate is None else validate
        self._file_stems = {
            "sales": settings.data_lake.sales_file,
            "products": settings.data_lake.products_file,
            "customers": settings.data_lake.customers_file,
        }
        self.last_result: Optional[LoadResult] = None
        self._quality_warnings: List[str] = []

    def table_config(self, table: str) -> SnapshotFileConfig:
        """File configuration for one of the three snapshot tables"""
        return SnapshotFileConfig(
            file_path=self.source_dir / f"{self._file_stems[table]}.{self.file_format.value}",
            file_format=self.file_format,
            table=table,
        )

    def _read_csv(self, config: SnapshotFileConfig) -> pl.DataFrame:
        return pl.read_csv(
            config.file_path,
            separator=config.delimiter,
            encoding=config.encoding,
            null_values=config.null_values,
            try_parse_dates=True,
        )

    def _read_json(self, config: SnapshotFileConfig) -> pl.DataFrame:
        return pl.read_json(config.file_path)

    def _read_jsonl(self, config: SnapshotFileConfig) -> pl.DataFrame:
        return pl.read_ndjson(config.file_path)

    def _read_parquet(self, config: SnapshotFileConfig) -> pl.DataFrame:
        return pl.from_arrow(pq.read_table(config.file_path))

    def _read_file(self, config: SnapshotFileConfig) -> pl.DataFrame:
        """Read one table file and conform it to the table schema"""
        readers = {
            FileFormat.CSV: self._read_csv,
            FileFormat.JSON: self._read_json,
            FileFormat.JSONL: self._read_jsonl,
            FileFormat.PARQUET: self._read_parquet,
        }
        path = Path(config.file_path)
        if not path.exists():
            raise SnapshotLoadError(f"Snapshot file not found: {path}", table=config.table)

        try:
            df = readers[config.file_format](config)
        except (OSError, pl.exceptions.PolarsError) as e:
            raise SnapshotLoadError(f"Failed to read {path}", table=config.table, errors=[str(e)]) from e

        # Strip header whitespace before schema matching
        df = df.rename({c: c.strip() for c in df.columns})
        logger.info("Read snapshot table", table=config.table, file=str(path), rows=df.height)
        return conform_to_schema(df, config.table)

    def read_snapshot(self) -> SalesSnapshot:
        """Synchronously read and validate all three tables"""
        frames = {table: self._read_file(self.table_config(table)) for table in self._file_stems}
        snapshot = SalesSnapshot(**frames)

        self._quality_warnings = self._check_quality(snapshot) if self.validate else []

        return snapshot

    def _check_quality(self, snapshot: SalesSnapshot) -> List[str]:
        results = validate_snapshot(snapshot)
        errors = [
            f"{table}: {check.message}"
            for table, result in results.items()
            for check in result.errors
        ]
        if errors:
            raise SnapshotLoadError("Snapshot failed quality checks", errors=errors)
        return [
            f"{table}: {check.message}"
            for table, result in results.items()
            for check in result.warnings
        ]

    async def load(self) -> SalesSnapshot:
        """
        Load the snapshot with an upper time bound.

        The blocking read runs in a worker thread; exceeding the configured
        timeout raises SnapshotLoadError.
        """
        started_at = datetime.utcnow()
        logger.info(
            "Loading snapshot",
            source=str(self.source_dir),
            format=self.file_format.value,
            timeout_seconds=self.timeout_seconds,
        )

        try:
            snapshot = await asyncio.wait_for(
                asyncio.to_thread(self.read_snapshot),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            self._record(started_at, "failed")
            raise SnapshotLoadError(
                f"Snapshot load exceeded {self.timeout_seconds}s",
                errors=[str(self.source_dir)],
            ) from e
        except SnapshotLoadError as e:
            self._record(started_at, "failed", warnings=e.errors)
            logger.error("Snapshot load failed", error=str(e), table=e.table)
            raise

        self._record(
            started_at,
            "completed",
            row_counts=snapshot.row_counts,
            warnings=self._quality_warnings,
        )
        logger.info("Snapshot loaded", **snapshot.row_counts)
        return snapshot

    def _record(
        self,
        started_at: datetime,
        status: str,
        row_counts: Optional[Dict[str, int]] = None,
        warnings: Optional[List[str]] = None,
    ) -> None:
        completed_at = datetime.utcnow()
        self.last_result = LoadResult(
            source=str(self.source_dir),
            status=status,
            row_counts=row_counts or {},
            warnings=warnings or [],
            load_duration_seconds=(completed_at - started_at).total_seconds(),
            started_at=started_at,
            completed_at=completed_at,
        )


def load_snapshot(source_dir: Optional[Union[str, Path]] = None, **kwargs) -> SalesSnapshot:
    """Convenience wrapper running SnapshotLoader.load in a fresh event loop"""
    return asyncio.run(SnapshotLoader(source_dir, **kwargs).load())
