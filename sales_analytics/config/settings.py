"""
Sales Analytics Reporting
Centralized Configuration Management

Pydantic settings with environment variable support for snapshot locations,
segmentation thresholds and the reference instant used by recency metrics.
"""

from datetime import date
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DataLakeSettings(BaseSettings):
    """Snapshot and export locations"""

    model_config = SettingsConfigDict(env_prefix="DATA_")

    lake_path: str = Field(default="./data", description="Data lake root path")
    gold_path: str = Field(default="./data/gold", description="Gold zone holding the star schema snapshot")
    curated_path: str = Field(default="./data/curated", description="Export zone for computed reports")

    default_format: str = Field(default="csv", description="Default snapshot file format")
    sales_file: str = Field(default="fact_sales", description="Fact table file stem")
    products_file: str = Field(default="dim_products", description="Product dimension file stem")
    customers_file: str = Field(default="dim_customers", description="Customer dimension file stem")


class SnapshotSettings(BaseSettings):
    """Snapshot loading behaviour"""

    model_config = SettingsConfigDict(env_prefix="SNAPSHOT_")

    load_timeout_seconds: float = Field(default=30.0, description="Upper bound for a snapshot fetch")
    validate_on_load: bool = Field(default=True, description="Run quality checks before accepting a snapshot")
    load_retries: int = Field(default=3, description="Retries applied by the refresh workflow")
    retry_delay_seconds: int = Field(default=10, description="Delay between load retries")


class SegmentationSettings(BaseSettings):
    """
    Business thresholds for segment classification.

    These change per business cycle, so they live in configuration rather
    than in the classification code.
    """

    model_config = SettingsConfigDict(env_prefix="SEGMENT_")

    # Product performance tiers
    high_performer_min_sales: int = Field(default=50000, description="Sales strictly above this are High-Performer")
    mid_range_min_sales: int = Field(default=10000, description="Sales at or above this are Mid-Range")

    # Customer value tiers
    loyal_min_lifespan_months: int = Field(default=12, description="Lifespan needed for VIP/Regular")
    vip_min_sales: int = Field(default=5000, description="Sales strictly above this are VIP")

    # Product cost ranges
    budget_max_cost: int = Field(default=100, description="Cost strictly below this is Budget")
    standard_max_cost: int = Field(default=500, description="Upper bound of the Standard range")
    premium_max_cost: int = Field(default=1000, description="Upper bound of the Premium range")

    @model_validator(mode="after")
    def validate_ordering(self) -> "SegmentationSettings":
        """Thresholds must be increasing for first-match classification"""
        if self.mid_range_min_sales > self.high_performer_min_sales:
            raise ValueError("mid_range_min_sales must not exceed high_performer_min_sales")
        if not self.budget_max_cost <= self.standard_max_cost <= self.premium_max_cost:
            raise ValueError("cost range bounds must be increasing")
        return self


class ReportSettings(BaseSettings):
    """Report computation parameters"""

    model_config = SettingsConfigDict(env_prefix="REPORT_")

    as_of: Optional[date] = Field(default=None, description="Reference date for recency and age (default: today)")
    top_n: int = Field(default=5, description="Default size of ranking lists")
    trend_granularity: str = Field(default="month", description="Bucket size for change-over-time reports")
    export_format: str = Field(default="parquet", description="Export format: parquet or csv")

    @field_validator("trend_granularity")
    @classmethod
    def validate_granularity(cls, v: str) -> str:
        allowed = ["month", "year"]
        if v.lower() not in allowed:
            raise ValueError(f"Granularity must be one of: {allowed}")
        return v.lower()

    def resolve_as_of(self) -> date:
        """Configured reference date, falling back to the wall clock"""
        return self.as_of or date.today()


class MonitoringSettings(BaseSettings):
    """Logging configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", alias="LOG_FORMAT", description="Log format: json or text")
    log_file: Optional[str] = Field(default=None, alias="LOG_FILE", description="Log file path")


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="sales-analytics", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # API Server
    api_host: str = Field(default="0.0.0.0", alias="API_HOST", description="API host")
    api_port: int = Field(default=8000, alias="API_PORT", description="API port")
    cors_origins: List[str] = Field(default=["*"], alias="CORS_ORIGINS", description="Allowed CORS origins")

    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    data_lake: DataLakeSettings = Field(default_factory=DataLakeSettings)
    snapshot: SnapshotSettings = Field(default_factory=SnapshotSettings)
    segmentation: SegmentationSettings = Field(default_factory=SegmentationSettings)
    report: ReportSettings = Field(default_factory=ReportSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.
    """
    return Settings()
