"""Unit tests for data quality module"""

import pytest
from datetime import date
from pyspark.sql import functions as F
from sales_reporting.pipeline.ingestion import DataIngestion
from sales_reporting.pipeline.transformations import DataTransformer
from sales_reporting.quality.data_quality import DataQualityChecker

def _reset(checker):
    checker.checks_passed = []
    checker.checks_failed = []
    checker.checks_warning = []

class TestDataQualityChecker:
    """Test data quality checks"""

    def test_clean_reference_data_passes(self, spark, enriched_data):
        passed, results = DataQualityChecker().run_all_checks(enriched_data)

        assert passed
        assert results["failed"] == 0
        assert results["quality_score"] == pytest.approx(100.0)

    def test_row_count_check(self, spark, enriched_data):
        checker = DataQualityChecker()

        checker._check_row_count(enriched_data, min_rows=5)
        assert len(checker.checks_passed) == 1

        _reset(checker)
        checker._check_row_count(enriched_data, min_rows=100)
        assert len(checker.checks_failed) == 1

    def test_schema_compliance_requires_enriched_columns(self, spark, enriched_data):
        checker = DataQualityChecker()

        checker._check_schema_compliance(enriched_data.drop("total_discount_value"))

        assert len(checker.checks_failed) == 1
        assert "total_discount_value" in checker.checks_failed[0].message

    def test_duplicate_order_lines_warn(self, spark, line_factory):
        checker = DataQualityChecker()
        lines = [line_factory(i, "Home", f"Item {i}", 1) for i in range(40)]
        lines.append(line_factory(0, "Home", "Item 0", 1))
        df = DataIngestion().from_records(lines)

        checker._check_duplicates(df)

        assert len(checker.checks_warning) == 1
        assert checker.checks_warning[0].metrics["key_duplicates"] == 1

    def test_duplicate_rate_above_threshold_fails(self, spark, line_factory):
        checker = DataQualityChecker()
        lines = [line_factory(1, "Home", "Table", 1)] * 4
        df = DataIngestion().from_records(lines)

        checker._check_duplicates(df)

        assert len(checker.checks_failed) == 1

    def test_enrichment_invariant_violation(self, spark, enriched_data):
        checker = DataQualityChecker()
        broken = enriched_data.withColumn(
            "total_discount_value", F.col("total_discount_value") + F.lit(1.0))

        checker._check_enrichment_invariant(broken)

        assert len(checker.checks_failed) == 1
        assert checker.checks_failed[0].metrics["violations"] == 8

    def test_ship_before_order_is_only_a_warning(self, spark, line_factory):
        line = line_factory(1, "Home", "Table", 1)
        early = line.__class__(**{**line.to_dict(), "ship_date": date(2023, 12, 30)})
        enriched = DataTransformer().prepare(DataIngestion().from_records([early])).data

        passed, results = DataQualityChecker().run_all_checks(enriched)

        assert passed
        assert any(c["name"] == "Date Consistency" for c in results["warning_checks"])

    def test_unknown_category_warns(self, spark, line_factory):
        checker = DataQualityChecker()
        df = DataIngestion().from_records([line_factory(1, "Garden", "Hose", 1)])

        checker._check_category_labels(df)

        assert len(checker.checks_warning) == 1
        assert "Garden" in checker.checks_warning[0].message

    def test_review_score_out_of_range_warns(self, spark, line_factory):
        checker = DataQualityChecker()
        df = DataIngestion().from_records([
            line_factory(1, "Home", "Table", 1, review_score=9),
            line_factory(2, "Home", "Chair", 1, review_score=None),
        ])

        checker._check_review_scores(df)

        assert len(checker.checks_warning) == 1
        assert checker.checks_warning[0].metrics["out_of_range"] == 1

    def test_empty_dataset_reported_not_raised(self, spark):
        enriched = DataTransformer().prepare(DataIngestion().from_records([])).data

        passed, results = DataQualityChecker().run_all_checks(enriched)

        assert not passed
        assert any(c["name"] == "Row Count Check" for c in results["failed_checks"])

    def test_generate_quality_report(self, spark, enriched_data, tmp_path):
        checker = DataQualityChecker()
        _, results = checker.run_all_checks(enriched_data)

        text = checker.generate_quality_report(results, tmp_path / "quality.txt")

        assert "DATA QUALITY REPORT" in text
        assert (tmp_path / "quality.txt").exists()
        assert (tmp_path / "quality.json").exists()
