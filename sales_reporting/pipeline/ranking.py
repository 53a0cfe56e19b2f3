"""Ranking helpers: top/bottom-N selection and per-category top-K"""

from typing import List, Optional, Sequence
from pyspark.sql import DataFrame, Window
from pyspark.sql import functions as F
from pyspark.sql.functions import col, lit, when
from sales_reporting.utils.logger import logger
from sales_reporting.utils.config import analytics_config
from sales_reporting.pipeline.analytics import AnalyticsEngine


def _require_column(df: DataFrame, name: str) -> None:
    if name not in df.columns:
        raise ValueError(f"Column '{name}' not found in {df.columns}")


def select_top_bottom_n(df: DataFrame, metric: str, key_columns: Sequence[str],
                        n: int) -> DataFrame:
    """Keep the N highest and N lowest groups by ``metric``.

    Groups are numbered 1..total by metric descending, ties broken by key.
    A group is kept when its position falls in the first or last N, or when
    its metric equals the metric found at either cut-off position, so ties at
    the boundary are never dropped. Adds ``position`` and ``segment``
    ('top' or 'bottom') and returns rows in position order.
    """
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")
    _require_column(df, metric)
    for key in key_columns:
        _require_column(df, key)

    ordering = Window.orderBy(F.desc(metric), *[F.asc(k) for k in key_columns])
    ranked = df.withColumn("position", F.row_number().over(ordering))

    total = ranked.count()
    if total == 0:
        return ranked.withColumn("segment", lit(None).cast("string"))

    top_cut = min(n, total)
    bottom_cut = max(total - n + 1, 1)

    boundary = {
        row["position"]: row[metric]
        for row in ranked.filter(col("position").isin(top_cut, bottom_cut))
                         .select("position", metric).collect()
    }
    top_value = boundary[top_cut]
    bottom_value = boundary[bottom_cut]

    logger.debug(f"Top boundary {metric}={top_value}, bottom boundary {metric}={bottom_value}")

    in_top = (col("position") <= top_cut) | (col(metric) == lit(top_value))
    in_bottom = (col("position") >= bottom_cut) | (col(metric) == lit(bottom_value))

    return ranked \
        .filter(in_top | in_bottom) \
        .withColumn("segment", when(in_top, lit("top")).otherwise(lit("bottom"))) \
        .orderBy("position")


def rank_within(df: DataFrame, partition_columns: List[str], metric: str,
                tie_break: Optional[List[str]] = None) -> DataFrame:
    """Standard RANK() of ``metric`` descending inside each partition"""
    _require_column(df, metric)
    window = Window.partitionBy(*partition_columns).orderBy(F.desc(metric))
    ranked = df.withColumn("rank", F.rank().over(window))
    return ranked.orderBy(*partition_columns, "rank", *(tie_break or []))


def top_k_per_category(df: DataFrame, k: Optional[int] = None,
                       metric: str = "total_quantity") -> DataFrame:
    """Best K products of each category from enriched order lines.

    Products tied on ``metric`` share a rank and the next distinct value
    skips ahead, so more than K rows may come back for a category.
    """
    if k is None:
        k = analytics_config.top_k_products
    if k < 1:
        raise ValueError(f"k must be >= 1, got {k}")

    logger.info(f"Selecting top {k} products per category by {metric}")

    products = AnalyticsEngine().aggregate_by_dimension(df, "category_product")
    ranked = rank_within(products, ["category"], metric, tie_break=["product_name"])
    return ranked.filter(col("rank") <= k)
