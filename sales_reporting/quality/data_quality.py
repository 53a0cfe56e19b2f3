"""Data quality checks module"""

from pathlib import Path
from pyspark.sql import DataFrame
from pyspark.sql import functions as F
from typing import Dict, List, Tuple, Optional, Any
from dataclasses import dataclass, field
from datetime import datetime
import json
from sales_reporting.utils.logger import logger
from sales_reporting.utils.config import analytics_config
from sales_reporting.pipeline.schemas import SalesSchema

@dataclass
class QualityCheckResult:
    """Result of a quality check"""
    name: str
    status: str  # 'passed', 'failed', 'warning'
    details: Optional[str] = None
    message: Optional[str] = None
    severity: str = 'error'  # 'error', 'warning', 'info'
    metrics: Dict[str, Any] = field(default_factory=dict)

class DataQualityChecker:
    """Quality checks over enriched sales order lines"""

    def __init__(self):
        self.checks_passed: List[QualityCheckResult] = []
        self.checks_failed: List[QualityCheckResult] = []
        self.checks_warning: List[QualityCheckResult] = []
        self.config = analytics_config

    def run_all_checks(self, df: DataFrame) -> Tuple[bool, Dict]:
        """Run all data quality checks with detailed reporting"""
        logger.info("="*60)
        logger.info("Starting data quality checks")
        logger.info(f"Dataset: {len(df.columns)} columns")

        self.checks_passed = []
        self.checks_failed = []
        self.checks_warning = []

        check_groups = [
            ("Basic Checks", [
                lambda: self._check_row_count(df),
                lambda: self._check_schema_compliance(df),
                lambda: self._check_duplicates(df)
            ]),
            ("Data Integrity", [
                lambda: self._check_null_values(df),
                lambda: self._check_enrichment_invariant(df)
            ]),
            ("Business Rules", [
                lambda: self._check_discount_range(df),
                lambda: self._check_category_labels(df),
                lambda: self._check_review_scores(df),
                lambda: self._check_date_consistency(df)
            ])
        ]

        for group_name, checks in check_groups:
            logger.info(f"Running {group_name}")
            for check in checks:
                try:
                    check()
                except Exception as e:
                    logger.error(f"Check in {group_name} failed with error: {e}")
                    self._add_failed(
                        QualityCheckResult(
                            name=f"{group_name} - Error",
                            status="failed",
                            message=str(e),
                            severity="error"
                        )
                    )

        total_checks = len(self.checks_passed) + len(self.checks_failed) + len(self.checks_warning)
        quality_score = (len(self.checks_passed) / total_checks * 100) if total_checks > 0 else 100.0
        has_critical_errors = any(c.severity == 'error' for c in self.checks_failed)

        results = {
            "total_checks": total_checks,
            "passed": len(self.checks_passed),
            "failed": len(self.checks_failed),
            "warnings": len(self.checks_warning),
            "quality_score": quality_score,
            "passed_checks": [self._serialize_check(c) for c in self.checks_passed],
            "failed_checks": [self._serialize_check(c) for c in self.checks_failed],
            "warning_checks": [self._serialize_check(c) for c in self.checks_warning],
            "timestamp": datetime.now().isoformat(),
            "has_critical_errors": has_critical_errors
        }

        self._log_quality_summary(results)

        return not has_critical_errors, results

    def _serialize_check(self, check: QualityCheckResult) -> Dict:
        return {
            "name": check.name,
            "status": check.status,
            "details": check.details,
            "message": check.message,
            "severity": check.severity,
            "metrics": check.metrics
        }

    def _log_quality_summary(self, results: Dict):
        quality_score = results['quality_score']

        if results['has_critical_errors']:
            logger.error(f"Data quality FAILED: Score {quality_score:.1f}%")
            for check in self.checks_failed[:5]:
                logger.error(f"  {check.name}: {check.message}")
        elif results['warnings'] > 0:
            logger.warning(f"Data quality PASSED with warnings: Score {quality_score:.1f}%")
            for check in self.checks_warning[:5]:
                logger.warning(f"  {check.name}: {check.message}")
        else:
            logger.success(f"Data quality EXCELLENT: Score {quality_score:.1f}%")

    def _check_row_count(self, df: DataFrame, min_rows: Optional[int] = None):
        if min_rows is None:
            min_rows = self.config.min_rows_threshold

        row_count = df.count()
        logger.info(f"Checking row count: {row_count:,} (min required: {min_rows:,})")

        if row_count < min_rows:
            self._add_failed(
                QualityCheckResult(
                    name="Row Count Check",
                    status="failed",
                    message=f"Only {row_count:,} rows found (minimum: {min_rows:,})",
                    severity="error",
                    metrics={"row_count": row_count, "min_required": min_rows}
                )
            )
        else:
            self._add_passed(
                QualityCheckResult(
                    name="Row Count Check",
                    status="passed",
                    details=f"Found {row_count:,} rows",
                    metrics={"row_count": row_count}
                )
            )

    def _check_schema_compliance(self, df: DataFrame):
        expected_columns = set(SalesSchema.column_names()) | set(SalesSchema.ENRICHED_COLUMNS)
        missing_columns = expected_columns - set(df.columns)

        if missing_columns:
            self._add_failed(
                QualityCheckResult(
                    name="Schema Compliance",
                    status="failed",
                    message=f"Missing required columns: {sorted(missing_columns)}",
                    severity="error"
                )
            )
        else:
            self._add_passed(
                QualityCheckResult(
                    name="Schema Compliance",
                    status="passed",
                    details="All required columns present"
                )
            )

    def _check_duplicates(self, df: DataFrame):
        """Order lines repeating the same order and product"""
        total_count = df.count()
        key_columns = [c for c in ("order_id", "product_name") if c in df.columns]
        if not key_columns or total_count == 0:
            self._add_passed(
                QualityCheckResult(name="Duplicate Check", status="passed",
                                   details="Nothing to compare")
            )
            return

        key_duplicates = total_count - df.dropDuplicates(key_columns).count()
        dup_rate = key_duplicates / total_count
        dup_metrics = {"total_records": total_count, "key_duplicates": key_duplicates,
                       "key_dup_rate": dup_rate}

        if dup_rate > self.config.max_duplicate_rate:
            self._add_failed(
                QualityCheckResult(
                    name="Duplicate Check",
                    status="failed",
                    message=f"High duplicate rate: {dup_rate:.1%} (threshold: {self.config.max_duplicate_rate:.1%})",
                    severity="error",
                    metrics=dup_metrics
                )
            )
        elif key_duplicates > 0:
            self._add_warning(
                QualityCheckResult(
                    name="Duplicate Check",
                    status="warning",
                    message=f"Found {key_duplicates:,} duplicate order lines ({dup_rate:.1%})",
                    severity="warning",
                    metrics=dup_metrics
                )
            )
        else:
            self._add_passed(
                QualityCheckResult(
                    name="Duplicate Check",
                    status="passed",
                    details="No duplicates found",
                    metrics=dup_metrics
                )
            )

    def _check_null_values(self, df: DataFrame):
        for col in SalesSchema.CRITICAL_COLUMNS:
            if col not in df.columns:
                continue
            null_count = df.filter(F.col(col).isNull()).count()

            if null_count > 0:
                self._add_failed(
                    QualityCheckResult(
                        name=f"Null Check: {col}",
                        status="failed",
                        message=f"{null_count:,} nulls in {col}",
                        severity="error",
                        metrics={"null_count": null_count}
                    )
                )
            else:
                self._add_passed(
                    QualityCheckResult(
                        name=f"Null Check: {col}",
                        status="passed",
                        details=f"No nulls in {col}"
                    )
                )

    def _check_enrichment_invariant(self, df: DataFrame):
        """after-discount value plus discount must give back the gross value"""
        tolerance = self.config.invariant_tolerance
        drift = F.abs(
            F.col("order_value_after_discount") + F.col("total_discount_value")
            - F.col("order_value_before_discount")
        )
        violations = df.filter(drift > tolerance).count()

        if violations:
            self._add_failed(
                QualityCheckResult(
                    name="Enrichment Invariant",
                    status="failed",
                    message=f"{violations:,} rows where after-discount value + discount != gross value",
                    severity="error",
                    metrics={"violations": violations, "tolerance": tolerance}
                )
            )
        else:
            self._add_passed(
                QualityCheckResult(
                    name="Enrichment Invariant",
                    status="passed",
                    details=f"All rows reconcile within {tolerance}"
                )
            )

    def _check_discount_range(self, df: DataFrame):
        max_discount = self.config.max_discount_pct
        out_of_range = df.filter(
            (F.col("discount") < 0) | (F.col("discount") > max_discount)
        ).count()

        if out_of_range:
            self._add_failed(
                QualityCheckResult(
                    name="Discount Range Check",
                    status="failed",
                    message=f"{out_of_range:,} rows with discount outside [0, {max_discount}]",
                    severity="error",
                    metrics={"out_of_range": out_of_range}
                )
            )
        else:
            self._add_passed(
                QualityCheckResult(
                    name="Discount Range Check",
                    status="passed",
                    details=f"All discounts within [0, {max_discount}]"
                )
            )

    def _check_category_labels(self, df: DataFrame):
        unknown = [
            row["category"] for row in
            df.filter(~F.col("category").isin(self.config.valid_categories) | F.col("category").isNull())
              .select("category").distinct().collect()
        ]

        if unknown:
            self._add_warning(
                QualityCheckResult(
                    name="Category Label Check",
                    status="warning",
                    message=f"Unexpected categories: {sorted(unknown, key=str)}",
                    severity="warning",
                    metrics={"unknown_categories": unknown}
                )
            )
        else:
            self._add_passed(
                QualityCheckResult(
                    name="Category Label Check",
                    status="passed",
                    details="All categories recognised"
                )
            )

    def _check_review_scores(self, df: DataFrame):
        low, high = self.config.review_score_min, self.config.review_score_max
        out_of_range = df.filter(
            F.col("review_score").isNotNull() & ~F.col("review_score").between(low, high)
        ).count()

        if out_of_range:
            self._add_warning(
                QualityCheckResult(
                    name="Review Score Check",
                    status="warning",
                    message=f"{out_of_range:,} review scores outside [{low}, {high}]",
                    severity="warning",
                    metrics={"out_of_range": out_of_range}
                )
            )
        else:
            self._add_passed(
                QualityCheckResult(
                    name="Review Score Check",
                    status="passed",
                    details=f"Review scores within [{low}, {high}]"
                )
            )

    def _check_date_consistency(self, df: DataFrame):
        """Shipping before ordering is reported, never enforced"""
        shipped_early = df.filter(F.col("ship_date") < F.col("order_date")).count()

        if shipped_early:
            self._add_warning(
                QualityCheckResult(
                    name="Date Consistency",
                    status="warning",
                    message=f"{shipped_early:,} rows shipped before they were ordered",
                    severity="warning",
                    metrics={"ship_before_order": shipped_early}
                )
            )
        else:
            self._add_passed(
                QualityCheckResult(
                    name="Date Consistency",
                    status="passed",
                    details="ship_date >= order_date for all rows"
                )
            )

    def _add_passed(self, result: QualityCheckResult):
        self.checks_passed.append(result)

    def _add_failed(self, result: QualityCheckResult):
        self.checks_failed.append(result)

    def _add_warning(self, result: QualityCheckResult):
        self.checks_warning.append(result)

    def generate_quality_report(self, results: Dict, output_path: Optional[Path] = None) -> str:
        """Render the check results as text, optionally saving text and JSON"""
        report = []
        report.append("="*60)
        report.append("DATA QUALITY REPORT")
        report.append("="*60)
        report.append(f"Generated: {results['timestamp']}")
        report.append(f"Quality Score: {results['quality_score']:.1f}%")
        report.append("")

        report.append("SUMMARY")
        report.append("-"*30)
        report.append(f"Total Checks: {results['total_checks']}")
        report.append(f"Passed: {results['passed']}")
        report.append(f"Failed: {results['failed']}")
        report.append(f"Warnings: {results['warnings']}")
        report.append("")

        if results['failed_checks']:
            report.append("FAILED CHECKS")
            report.append("-"*30)
            for check in results['failed_checks']:
                report.append(f"[FAIL] {check['name']}")
                report.append(f"   {check['message']}")
                report.append("")

        if results['warning_checks']:
            report.append("WARNINGS")
            report.append("-"*30)
            for check in results['warning_checks']:
                report.append(f"[WARN] {check['name']}")
                report.append(f"   {check['message']}")
                report.append("")

        report_text = "\n".join(report)

        if output_path:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, 'w') as f:
                f.write(report_text)

            with open(output_path.with_suffix('.json'), 'w') as f:
                json.dump(results, f, indent=2, default=str)

        return report_text
