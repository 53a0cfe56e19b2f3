"""Data ingestion module for the sales_data table"""

from dataclasses import is_dataclass
from datetime import date
from pathlib import Path
from typing import Optional, List, Dict, Any, Iterable, Union
from pyspark.sql import DataFrame
from pyspark.sql import functions as F
from sales_reporting.utils.spark_manager import SparkManager
from sales_reporting.utils.logger import logger
from sales_reporting.utils.config import settings
from sales_reporting.pipeline.models import OrderLine
from sales_reporting.pipeline.schemas import SalesSchema
import time

class DataIngestion:
    """Load sales order lines from files or in-memory records"""

    def __init__(self):
        self.spark = SparkManager.get_session()
        self.schema = SalesSchema()

    def read_sales_data(self, filepath: Optional[Path] = None) -> DataFrame:
        """Read sales data, choosing Parquet or CSV from the path"""
        if filepath is None:
            filepath = settings.data_path_raw
        filepath = Path(filepath)

        if self._is_parquet(filepath):
            return self.read_parquet_data(filepath)
        return self.read_csv_data(filepath)

    def _is_parquet(self, filepath: Path) -> bool:
        if filepath.suffix == ".parquet":
            return True
        # Directory of Parquet parts with no CSV alongside
        return filepath.is_dir() \
            and any(filepath.glob("*.parquet")) \
            and not self._find_csv_files(filepath)

    def read_csv_data(self, filepath: Optional[Path] = None) -> DataFrame:
        """Read sales CSV data; columns are kept as strings until standardized"""
        start_time = time.time()

        if filepath is None:
            filepath = settings.data_path_raw
        filepath = Path(filepath)

        if filepath.is_file():
            main_file = filepath
        else:
            csv_files = self._find_csv_files(filepath)
            if not csv_files:
                raise FileNotFoundError(f"No CSV files found in {filepath}")
            main_file = self._select_main_file(csv_files)

        logger.info(f"Reading sales file: {main_file.name}")

        df = self._read_csv(main_file)
        self._validate_and_log(df, start_time)

        return df

    def _find_csv_files(self, filepath: Path) -> List[Path]:
        """Find all CSV files in directory"""
        if not Path(filepath).exists():
            return []

        csv_files = list(Path(filepath).glob("*.csv"))
        csv_files.extend(Path(filepath).glob("*.csv.gz"))

        logger.info(f"Found {len(csv_files)} CSV files")
        for file in csv_files:
            logger.debug(f"  - {file.name}")

        return sorted(csv_files)

    def _select_main_file(self, csv_files: List[Path]) -> Path:
        """Pick the sales table among candidate files"""
        priority_patterns = [
            'sales_data',
            'sales',
            'orders',
            'data.csv',
        ]

        for pattern in priority_patterns:
            for file in csv_files:
                if pattern in file.name.lower():
                    return file

        # Otherwise the largest file
        return max(csv_files, key=lambda f: f.stat().st_size)

    def _read_csv(self, filepath: Path) -> DataFrame:
        read_options = {
            "header": "true",
            "inferSchema": "false",
            "mode": "PERMISSIVE",
            "encoding": "UTF-8",
            "quote": '"',
            "escape": '"',
            "nullValue": "",
        }

        if filepath.suffix == '.gz':
            read_options["compression"] = "gzip"

        reader = self.spark.read
        for key, value in read_options.items():
            reader = reader.option(key, value)

        return reader.csv(str(filepath))

    def read_parquet_data(self, filepath: Path) -> DataFrame:
        """Read Parquet sales data"""
        logger.info(f"Reading Parquet data from {filepath}")

        df = self.spark.read \
            .option("mergeSchema", "true") \
            .option("recursiveFileLookup", "true") \
            .parquet(str(filepath))

        logger.info(f"Loaded {df.count():,} rows from Parquet")
        return df

    def from_records(self, records: Iterable[Union[OrderLine, Dict[str, Any]]]) -> DataFrame:
        """Build a typed sales DataFrame from OrderLine objects or dicts"""
        rows = [self._to_row(record) for record in records]
        logger.debug(f"Creating DataFrame from {len(rows):,} records")
        return self.spark.createDataFrame(rows, schema=self.schema.sales_schema())

    def _to_row(self, record: Union[OrderLine, Dict[str, Any]]) -> tuple:
        if is_dataclass(record):
            record = record.to_dict()

        row = []
        for field in self.schema.sales_schema().fields:
            value = record.get(field.name)
            # DoubleType rejects python ints
            if value is not None and field.name in ("unit_price", "discount"):
                value = float(value)
            elif isinstance(value, str) and field.name in ("order_date", "ship_date"):
                value = date.fromisoformat(value)
            row.append(value)
        return tuple(row)

    def _validate_and_log(self, df: DataFrame, start_time: float):
        row_count = df.count()
        duration = time.time() - start_time

        logger.info(f"Loaded {row_count:,} rows with {len(df.columns)} columns in {duration:.1f}s")

        if settings.debug:
            logger.debug("Sample data:")
            df.show(5, truncate=False)

        if row_count and "order_id" in df.columns:
            unique_orders = df.select(F.col("order_id")).distinct().count()
            logger.info(f"  - Distinct orders: {unique_orders:,}")
