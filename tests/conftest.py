"""
Test Suite Configuration
"""
from datetime import date

import pytest

from sales_analytics.config import SegmentationSettings, Settings
from sales_analytics.ingestion.schemas import SalesSnapshot


AS_OF = date(2025, 1, 1)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        app_env="testing",
        debug=True,
    )


@pytest.fixture
def thresholds() -> SegmentationSettings:
    """Default segmentation thresholds, independent of the environment"""
    return SegmentationSettings(
        high_performer_min_sales=50000,
        mid_range_min_sales=10000,
        loyal_min_lifespan_months=12,
        vip_min_sales=5000,
        budget_max_cost=100,
        standard_max_cost=500,
        premium_max_cost=1000,
    )


@pytest.fixture
def as_of() -> date:
    return AS_OF


@pytest.fixture
def sample_products() -> list:
    """Product dimension rows; keys 4 and 5 never sell"""
    return [
        {"product_key": 1, "product_name": "Road-150", "category": "Bikes", "subcategory": "Road Bikes", "cost": 2000},
        {"product_key": 2, "product_name": "Mountain-200", "category": "Bikes", "subcategory": "Mountain Bikes", "cost": 1000},
        {"product_key": 3, "product_name": "Sport-100 Helmet", "category": "Accessories", "subcategory": "Helmets", "cost": 13},
        {"product_key": 4, "product_name": "Touring Tire", "category": "Accessories", "subcategory": "Tires", "cost": 100},
        {"product_key": 5, "product_name": "Long-Sleeve Jersey", "category": "Clothing", "subcategory": "Jerseys", "cost": 500},
    ]


@pytest.fixture
def sample_customers() -> list:
    """Customer dimension rows"""
    return [
        {"customer_key": 10, "customer_number": "AW00010", "first_name": "Jon", "last_name": "Yang",
         "country": "Australia", "birthdate": date(1971, 10, 6)},
        {"customer_key": 11, "customer_number": "AW00011", "first_name": "Eugene", "last_name": "Huang",
         "country": "Germany", "birthdate": date(2008, 5, 14)},
        {"customer_key": 12, "customer_number": "AW00012", "first_name": "Ruben", "last_name": None,
         "country": "United States", "birthdate": date(1985, 3, 1)},
    ]


@pytest.fixture
def sample_sales() -> list:
    """
    Sales lines.

    SO5 has no order_date and SO6 references product 99, which is not in
    the product dimension.
    """
    return [
        {"order_number": "SO1", "product_key": 1, "customer_key": 10, "order_date": date(2022, 1, 15),
         "sales_amount": 30000, "quantity": 10, "price": 3000},
        {"order_number": "SO1", "product_key": 3, "customer_key": 10, "order_date": date(2022, 1, 15),
         "sales_amount": 100, "quantity": 2, "price": 50},
        {"order_number": "SO2", "product_key": 1, "customer_key": 10, "order_date": date(2023, 3, 10),
         "sales_amount": 30000, "quantity": 10, "price": 3000},
        {"order_number": "SO3", "product_key": 2, "customer_key": 11, "order_date": date(2023, 6, 1),
         "sales_amount": 8000, "quantity": 4, "price": 2000},
        {"order_number": "SO4", "product_key": 3, "customer_key": 12, "order_date": date(2024, 2, 20),
         "sales_amount": 50, "quantity": 1, "price": 50},
        {"order_number": "SO5", "product_key": 2, "customer_key": 12, "order_date": None,
         "sales_amount": 4000, "quantity": 2, "price": 2000},
        {"order_number": "SO6", "product_key": 99, "customer_key": 11, "order_date": date(2024, 1, 5),
         "sales_amount": 500, "quantity": 1, "price": 500},
    ]


@pytest.fixture
def sample_snapshot(sample_sales, sample_products, sample_customers) -> SalesSnapshot:
    """Small star schema with one orphan product key and one undated line"""
    return SalesSnapshot.from_records(sample_sales, sample_products, sample_customers)


@pytest.fixture
def empty_snapshot() -> SalesSnapshot:
    return SalesSnapshot.from_records([], [], [])
