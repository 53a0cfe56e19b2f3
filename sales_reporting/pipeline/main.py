"""Sales report orchestrator"""

import argparse
import json
import time
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any
from pyspark.sql import DataFrame

from sales_reporting.utils.spark_manager import SparkManager
from sales_reporting.utils.logger import logger
from sales_reporting.utils.config import settings, analytics_config
from sales_reporting.pipeline.ingestion import DataIngestion
from sales_reporting.pipeline.transformations import DataTransformer, EnrichmentResult
from sales_reporting.pipeline.analytics import AnalyticsEngine
from sales_reporting.pipeline.ranking import select_top_bottom_n, top_k_per_category
from sales_reporting.quality.data_quality import DataQualityChecker

class SalesReportPipeline:
    """Build the discount-aware sales report from a sales_data file"""

    def __init__(self, config_overrides: Optional[Dict[str, Any]] = None,
                 input_path: Optional[Path] = None,
                 output_path: Optional[Path] = None,
                 top_n: Optional[int] = None,
                 top_k: Optional[int] = None):
        self.config = config_overrides or {}
        self.spark = SparkManager.get_session(config_overrides=self.config)
        self.input_path = Path(input_path) if input_path else settings.data_path_raw
        self.output_path = Path(output_path) if output_path else settings.data_path_processed
        self.top_n = top_n if top_n is not None else analytics_config.top_n_categories
        self.top_k = top_k if top_k is not None else analytics_config.top_k_products

        self.ingestion = DataIngestion()
        self.transformer = DataTransformer()
        self.analytics = AnalyticsEngine()
        self.quality_checker = DataQualityChecker()

        self.current_stage = "initialization"
        self.stage_timings = {}

    def run(self) -> Dict[str, Any]:
        """Run ingestion, enrichment, quality checks, report building and saving"""
        pipeline_start = time.time()
        results = {
            "status": "started",
            "start_time": datetime.now().isoformat(),
        }

        logger.info("="*60)
        logger.info("Starting Sales Report Pipeline")
        logger.info("="*60)

        try:
            raw_df = self._execute_stage("ingestion", self.ingestion.read_sales_data,
                                         self.input_path)

            prepared: EnrichmentResult = self._execute_stage("enrichment",
                                                             self.transformer.prepare, raw_df)
            enriched_df = prepared.data.cache()

            quality_passed, quality_results = self._execute_stage(
                "quality_check", self.quality_checker.run_all_checks, enriched_df)

            report = self._execute_stage("analytics", self.build_report, enriched_df)

            self._execute_stage("save_results", self._save_results, report)

            total_duration = time.time() - pipeline_start
            results.update({
                "status": "completed",
                "end_time": datetime.now().isoformat(),
                "total_duration_seconds": total_duration,
                "rows_processed": enriched_df.count(),
                "skipped_rows": prepared.skipped_rows,
                "quality_check_passed": quality_passed,
                "quality_score": quality_results.get("quality_score"),
                "stage_timings": self.stage_timings,
                "tables": sorted(report),
            })

            logger.success(f"Report completed in {total_duration:.1f} seconds")
            self._show_summary(report)
            self._write_summary(results, quality_results)

            return results

        except Exception as e:
            logger.error(f"Pipeline failed at stage '{self.current_stage}': {e}")
            results.update({
                "status": "failed",
                "error": str(e),
                "failed_stage": self.current_stage,
                "error_type": type(e).__name__
            })
            raise
        finally:
            self._cleanup()

    def _execute_stage(self, stage_name: str, func: callable, *args, **kwargs) -> Any:
        """Execute a pipeline stage with timing and error handling"""
        self.current_stage = stage_name
        stage_start = time.time()

        logger.info(f"Starting stage: {stage_name}")

        try:
            result = func(*args, **kwargs)
            stage_duration = time.time() - stage_start
            self.stage_timings[stage_name] = stage_duration
            logger.success(f"Stage '{stage_name}' completed in {stage_duration:.1f}s")
            return result

        except Exception as e:
            stage_duration = time.time() - stage_start
            self.stage_timings[stage_name] = stage_duration
            logger.error(f"Stage '{stage_name}' failed after {stage_duration:.1f}s: {e}")
            raise

    def build_report(self, enriched_df: DataFrame, top_n: Optional[int] = None,
                     top_k: Optional[int] = None) -> Dict[str, DataFrame]:
        """All report tables, unrounded"""
        top_n = top_n if top_n is not None else self.top_n
        top_k = top_k if top_k is not None else self.top_k

        popularity = self.analytics.category_popularity(enriched_df)

        return {
            "enriched_orders": enriched_df,
            "category_popularity": popularity,
            "top_bottom_categories": select_top_bottom_n(
                popularity, "item_count", ["category"], top_n),
            "top_products_per_category": top_k_per_category(enriched_df, top_k),
            "average_order_value": self.analytics.average_order_value(enriched_df),
            "daily_averages": self.analytics.daily_averages(enriched_df),
            "category_averages": self.analytics.category_averages(enriched_df),
            "discount_by_category": self.analytics.discount_by_category(enriched_df),
            "order_summary": self.analytics.order_summary(enriched_df),
        }

    def _save_results(self, report: Dict[str, DataFrame]) -> None:
        """Write each table as a single rounded CSV"""
        self.output_path.mkdir(parents=True, exist_ok=True)

        for name, df in report.items():
            path = self.output_path / name
            logger.info(f"Saving {name} to {path}")
            self.analytics.round_for_display(df) \
                .coalesce(1) \
                .write \
                .mode("overwrite") \
                .option("header", "true") \
                .csv(str(path))

    def _show_summary(self, report: Dict[str, DataFrame]) -> None:
        logger.info("="*60)
        logger.info("REPORT SUMMARY")
        logger.info("="*60)

        for name, df in report.items():
            logger.info(f"  - {name}: {df.count():,} rows")

        aov = report["average_order_value"].collect()
        if aov:
            row = aov[0]
            logger.info(f"Average order value: {row['avg_order_value']:.2f} "
                        f"(after discount {row['avg_order_value_after_discount']:.2f})")

        if settings.debug:
            self.analytics.round_for_display(report["top_bottom_categories"]).show(truncate=False)

    def _write_summary(self, results: Dict[str, Any], quality_results: Dict) -> None:
        summary_path = self.output_path / "summary_report.json"
        summary = dict(results)
        summary["quality_details"] = {
            "total_checks": quality_results.get("total_checks", 0),
            "passed": quality_results.get("passed", 0),
            "failed": quality_results.get("failed", 0),
            "warnings": quality_results.get("warnings", 0),
        }
        with open(summary_path, 'w') as f:
            json.dump(summary, f, indent=2, default=str)

        logger.info(f"Summary report saved to: {summary_path}")

    def _cleanup(self) -> None:
        try:
            self.spark.catalog.clearCache()
            if settings.env == "test":
                SparkManager.stop_session()
        except Exception as e:
            logger.warning(f"Cleanup error: {e}")

def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Discount-aware sales report")
    parser.add_argument("--input", type=Path, help="sales_data CSV or Parquet file or directory")
    parser.add_argument("--output", type=Path, help="Directory for report tables")
    parser.add_argument("--top-n", type=int, help="Categories kept at each end of the ranking")
    parser.add_argument("--top-k", type=int, help="Products kept per category")
    return parser.parse_args(argv)

def main(argv=None):
    """Main entry point"""
    args = parse_args(argv)

    pipeline = SalesReportPipeline(
        input_path=args.input,
        output_path=args.output,
        top_n=args.top_n,
        top_k=args.top_k,
    )
    results = pipeline.run()
    logger.info(f"Processed {results['rows_processed']:,} rows, skipped {results['skipped_rows']:,}")

if __name__ == "__main__":
    main()
