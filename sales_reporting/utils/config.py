"""Configuration management module"""

import os
from pathlib import Path
from typing import List
from pydantic_settings import BaseSettings
from pydantic import field_validator
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

class Settings(BaseSettings):
    """Application settings"""

    # Environment
    env: str = os.getenv("ENV", "development")
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Paths
    project_root: Path = Path(__file__).parent.parent.parent
    data_path_raw: Path = project_root / "data" / "raw"
    data_path_processed: Path = project_root / "data" / "processed"

    # Spark
    spark_app_name: str = "SalesReporting"
    spark_master: str = os.getenv("SPARK_MASTER", "local[*]")
    spark_driver_memory: str = os.getenv("SPARK_DRIVER_MEMORY", "2g")
    spark_shuffle_partitions: int = int(os.getenv("SPARK_SHUFFLE_PARTITIONS", "8"))
    spark_log_level: str = os.getenv("SPARK_LOG_LEVEL", "WARN")

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_to_file: bool = os.getenv("LOG_TO_FILE", "true").lower() == "true"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is uppercase and valid"""
        v = v.upper()
        valid_levels = ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]
        if v not in valid_levels:
            return "INFO"
        return v

    class Config:
        case_sensitive = False


class AnalyticsConfig(BaseSettings):
    """Report and data quality thresholds"""

    # Ranking
    top_n_categories: int = int(os.getenv("TOP_N_CATEGORIES", "3"))
    top_k_products: int = int(os.getenv("TOP_K_PRODUCTS", "2"))

    # Presentation
    display_precision: int = 2

    # Business rules
    max_discount_pct: float = 100.0
    valid_categories: List[str] = [
        "Beauty", "Books", "Clothing", "Electronics", "Home", "Sports", "Toys"
    ]
    review_score_min: int = 1
    review_score_max: int = 5

    # Quality thresholds
    min_rows_threshold: int = int(os.getenv("MIN_ROWS_THRESHOLD", "1"))
    max_duplicate_rate: float = 0.05
    invariant_tolerance: float = 0.01

    @field_validator("top_n_categories", "top_k_products")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Ranking cut-offs must select at least one group"""
        if v < 1:
            raise ValueError("ranking cut-off must be >= 1")
        return v

    class Config:
        case_sensitive = False

# Create global settings instances
settings = Settings()
analytics_config = AnalyticsConfig()
