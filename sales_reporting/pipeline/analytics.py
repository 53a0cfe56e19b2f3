"""Analytics calculations over enriched order lines"""

from pyspark.sql import DataFrame
from pyspark.sql import functions as F
from pyspark.sql.functions import col, when
from sales_reporting.utils.logger import logger
from sales_reporting.utils.config import analytics_config
from sales_reporting.pipeline.schemas import SalesSchema
from typing import Dict, List, Optional
import time

class AnalyticsEngine:
    """Roll enriched order lines up along report dimensions"""

    DIMENSIONS: Dict[str, List[str]] = {
        "category": ["category"],
        "order_date": ["order_date"],
        "order_id": ["order_id"],
        "category_product": ["category", "product_name"],
    }

    def __init__(self):
        self.config = analytics_config

    def aggregate_by_dimension(self, df: DataFrame, dimension: str,
                               weighted: bool = False) -> DataFrame:
        """One summary row per distinct value of the dimension.

        Averages are plain means over the member lines. With ``weighted=True``
        each line counts ``quantity`` times instead.
        """
        key_cols = self.key_columns(dimension)
        start_time = time.time()
        logger.info(f"Aggregating order lines by {dimension}")

        before = col("order_value_before_discount")
        after = col("order_value_after_discount")

        if weighted:
            total_qty = F.sum("quantity")
            avg_before = when(total_qty > 0, F.sum(before * col("quantity")) / total_qty)
            avg_after = when(total_qty > 0, F.sum(after * col("quantity")) / total_qty)
        else:
            avg_before = F.avg(before)
            avg_after = F.avg(after)

        result = df.groupBy(*key_cols).agg(
            F.count(F.lit(1)).alias("line_count"),
            F.sum("quantity").alias("total_quantity"),
            F.sum(before).alias("total_order_value_before_discount"),
            avg_before.alias("avg_order_value_before_discount"),
            F.sum(after).alias("total_order_value_after_discount"),
            avg_after.alias("avg_order_value_after_discount"),
            F.sum("total_discount_value").alias("total_discount_value"),
        )

        duration = time.time() - start_time
        logger.debug(f"Aggregation by {dimension} planned in {duration:.2f}s")

        return result

    def key_columns(self, dimension: str) -> List[str]:
        if dimension not in self.DIMENSIONS:
            raise ValueError(
                f"Unsupported dimension '{dimension}', expected one of {sorted(self.DIMENSIONS)}"
            )
        return list(self.DIMENSIONS[dimension])

    def category_popularity(self, df: DataFrame) -> DataFrame:
        """Items sold per category, most popular first"""
        logger.info("Calculating category popularity")

        return df.groupBy("category") \
            .agg(F.sum("quantity").alias("item_count")) \
            .orderBy(F.desc("item_count"), F.asc("category"))

    def average_order_value(self, df: DataFrame) -> DataFrame:
        """Mean per-order value before and after discount across all orders"""
        logger.info("Calculating average order value")

        per_order = df.groupBy("order_id").agg(
            F.sum("order_value_before_discount").alias("order_value"),
            F.sum("order_value_after_discount").alias("order_value_after_discount"),
        )

        # Global aggregate over an empty frame still yields one row
        return per_order.agg(
            F.count(F.lit(1)).alias("order_count"),
            F.avg("order_value").alias("avg_order_value"),
            F.avg("order_value_after_discount").alias("avg_order_value_after_discount"),
        ).filter(col("order_count") > 0)

    def daily_averages(self, df: DataFrame) -> DataFrame:
        """Per-day line averages, in date order"""
        logger.info("Calculating daily averages")
        return self.aggregate_by_dimension(df, "order_date").orderBy("order_date")

    def category_averages(self, df: DataFrame) -> DataFrame:
        """Per-category line averages, in category order"""
        logger.info("Calculating category averages")
        return self.aggregate_by_dimension(df, "category").orderBy("category")

    def order_summary(self, df: DataFrame) -> DataFrame:
        """Per-order totals"""
        return self.aggregate_by_dimension(df, "order_id").orderBy("order_id")

    def discount_by_category(self, df: DataFrame) -> DataFrame:
        """Discount given away per category and its share of gross value"""
        logger.info("Calculating discount by category")

        return df.groupBy("category") \
            .agg(
                F.sum("order_value_before_discount").alias("total_order_value_before_discount"),
                F.sum("total_discount_value").alias("total_discount_value"),
            ) \
            .withColumn("discount_rate",
                        when(col("total_order_value_before_discount") > 0,
                             col("total_discount_value") / col("total_order_value_before_discount"))
                        .otherwise(0.0)) \
            .orderBy(F.desc("total_discount_value"), F.asc("category"))

    def round_for_display(self, df: DataFrame, digits: Optional[int] = None) -> DataFrame:
        """Round monetary columns for presentation only"""
        if digits is None:
            digits = self.config.display_precision

        monetary = set(SalesSchema.MONETARY_COLUMNS)
        return df.select(*[
            F.round(col(name), digits).alias(name) if name in monetary else col(name)
            for name in df.columns
        ])
