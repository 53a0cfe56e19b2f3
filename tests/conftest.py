"""Test configuration and fixtures"""

import pytest
from pyspark.sql import SparkSession
from datetime import date, timedelta
import random
import os
import sys
from pathlib import Path

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Keep test runs from writing log files
os.environ["LOG_TO_FILE"] = "false"

from sales_reporting.pipeline.models import OrderLine
from sales_reporting.utils.spark_manager import SparkManager

_spark = None

def get_spark():
    """Get or create Spark session"""
    global _spark
    if _spark is None:
        _spark = SparkSession.builder \
            .appName("test") \
            .master("local[2]") \
            .config("spark.sql.shuffle.partitions", "2") \
            .config("spark.driver.memory", "1g") \
            .config("spark.sql.adaptive.enabled", "false") \
            .config("spark.ui.enabled", "false") \
            .config("spark.sql.session.timeZone", "UTC") \
            .getOrCreate()
    return _spark

@pytest.fixture(scope="session")
def spark():
    """Create Spark session for tests"""
    yield get_spark()

@pytest.fixture(autouse=True)
def shared_spark_session(spark):
    """Make every component reuse the test session"""
    SparkManager._instance = spark
    yield spark
    SparkManager._instance = spark

def make_line(order_id, category, product_name, quantity, unit_price=10.0,
              discount=0.0, order_date=date(2024, 1, 1), user_id=1, review_score=4):
    """Build a single OrderLine with sensible defaults"""
    return OrderLine(
        order_id=order_id,
        user_id=user_id,
        product_name=product_name,
        category=category,
        order_date=order_date,
        ship_date=order_date + timedelta(days=2),
        unit_price=unit_price,
        quantity=quantity,
        discount=discount,
        review_score=review_score,
    )

@pytest.fixture
def line_factory():
    return make_line

@pytest.fixture
def reference_lines():
    """Small hand-checked dataset.

    Category quantities: Beauty=20, Electronics=15, Home=12, Clothing=6.
    Order values before discount: order 1 = 300, order 2 = 200, order 3 = 100.
    """
    return [
        make_line(1, "Beauty", "Lipstick", 10, unit_price=10.0, discount=10.0),
        make_line(1, "Electronics", "Headphones", 5, unit_price=40.0, discount=0.0),
        make_line(2, "Beauty", "Perfume", 10, unit_price=5.0, discount=20.0,
                  order_date=date(2024, 1, 2)),
        make_line(2, "Electronics", "Charger", 10, unit_price=10.0, discount=50.0,
                  order_date=date(2024, 1, 2)),
        make_line(2, "Clothing", "Socks", 5, unit_price=10.0, discount=0.0,
                  order_date=date(2024, 1, 2)),
        make_line(3, "Home", "Table", 6, unit_price=10.0, discount=0.0,
                  order_date=date(2024, 1, 3)),
        make_line(3, "Home", "Chair", 6, unit_price=5.0, discount=10.0,
                  order_date=date(2024, 1, 3)),
        make_line(3, "Clothing", "Hat", 1, unit_price=10.0, discount=0.0,
                  order_date=date(2024, 1, 3)),
    ]

@pytest.fixture
def enriched_data(spark, reference_lines):
    """Enriched DataFrame built from the reference lines"""
    from sales_reporting.pipeline.ingestion import DataIngestion
    from sales_reporting.pipeline.transformations import DataTransformer

    raw = DataIngestion().from_records(reference_lines)
    return DataTransformer().prepare(raw).data

@pytest.fixture
def random_sales_lines():
    """Randomised order lines for property-style checks"""
    rng = random.Random(42)
    categories = ["Beauty", "Books", "Clothing", "Electronics", "Home"]
    lines = []
    for i in range(120):
        category = rng.choice(categories)
        lines.append(make_line(
            order_id=i // 3,
            category=category,
            product_name=f"{category} item {rng.randint(1, 6)}",
            quantity=rng.randint(0, 12),
            unit_price=round(rng.uniform(1.0, 500.0), 2),
            discount=rng.choice([0.0, 5.0, 12.5, 25.0, 33.3, 100.0]),
            order_date=date(2024, 1, 1) + timedelta(days=rng.randint(0, 30)),
            user_id=rng.randint(1, 40),
        ))
    return lines

def pytest_unconfigure(config):
    """Clean up spark session"""
    global _spark
    if _spark:
        _spark.stop()
        _spark = None
