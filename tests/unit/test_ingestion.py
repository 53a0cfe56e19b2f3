"""Unit tests for data ingestion module"""

import pytest
from datetime import date
from sales_reporting.pipeline.ingestion import DataIngestion
from sales_reporting.pipeline.schemas import SalesSchema

CSV_HEADER = "order_id,user_id,product_name,category,order_date,ship_date,unit_price,quantity,discount,review_score\n"

class TestDataIngestion:
    """Test data ingestion functionality"""

    @pytest.fixture
    def ingestion(self, spark):
        return DataIngestion()

    def test_find_csv_files(self, ingestion, tmp_path):
        (tmp_path / "data1.csv").touch()
        (tmp_path / "data2.csv").touch()
        (tmp_path / "data.csv.gz").touch()
        (tmp_path / "not_csv.txt").touch()

        files = ingestion._find_csv_files(tmp_path)

        assert len(files) == 3
        assert all(f.suffix in ['.csv', '.gz'] for f in files)

    def test_find_csv_files_missing_directory(self, ingestion, tmp_path):
        assert ingestion._find_csv_files(tmp_path / "nope") == []

    def test_select_main_file(self, ingestion, tmp_path):
        files = [
            tmp_path / "random_data.csv",
            tmp_path / "sales_data.csv",
            tmp_path / "orders.csv"
        ]
        for f in files:
            f.write_text("test")

        assert ingestion._select_main_file(files).name == "sales_data.csv"

        others = [tmp_path / "small.csv", tmp_path / "big.csv"]
        others[0].write_text("a")
        others[1].write_text("a" * 100)

        assert ingestion._select_main_file(others).name == "big.csv"

    def test_read_csv_from_directory(self, ingestion, tmp_path):
        (tmp_path / "sales_data.csv").write_text(
            CSV_HEADER +
            "1,10,Lamp,Home,2024-01-05,2024-01-07,19.5,2,10,4\n"
            "2,11,Novel,Books,2024-01-06,2024-01-08,8.0,1,0,\n"
        )

        df = ingestion.read_csv_data(tmp_path)

        assert df.count() == 2
        assert "product_name" in df.columns

    def test_read_csv_no_files(self, ingestion, tmp_path):
        with pytest.raises(FileNotFoundError):
            ingestion.read_csv_data(tmp_path)

    def test_from_records_accepts_dicts(self, ingestion):
        df = ingestion.from_records([{
            "order_id": 5, "user_id": 2, "product_name": "Kite", "category": "Toys",
            "order_date": date(2024, 2, 1), "ship_date": date(2024, 2, 3),
            "unit_price": 12, "quantity": 3, "discount": 5, "review_score": 5,
        }])

        assert df.columns == SalesSchema.column_names()
        row = df.first()
        assert row["unit_price"] == pytest.approx(12.0)
        assert row["discount"] == pytest.approx(5.0)

    def test_from_records_empty(self, ingestion):
        df = ingestion.from_records([])

        assert df.count() == 0
        assert df.columns == SalesSchema.column_names()

    def test_from_records_parses_iso_date_strings(self, ingestion):
        df = ingestion.from_records([{
            "order_id": 6, "user_id": 2, "product_name": "Kite", "category": "Toys",
            "order_date": "2024-02-01", "ship_date": "2024-02-03",
            "unit_price": 12.0, "quantity": 1, "discount": 0.0,
        }])

        row = df.first()
        assert row["order_date"] == date(2024, 2, 1)
        assert row["ship_date"] == date(2024, 2, 3)
        assert row["review_score"] is None

    def test_from_records_rejects_bad_date_string(self, ingestion):
        with pytest.raises(ValueError):
            ingestion.from_records([{"order_id": 1, "order_date": "01/02/2024"}])

    def test_read_sales_data_routes_parquet(self, ingestion, tmp_path):
        target = tmp_path / "sales_data.parquet"
        ingestion.from_records([
            {"order_id": 1, "user_id": 10, "product_name": "Lamp", "category": "Home",
             "order_date": "2024-01-05", "unit_price": 19.5, "quantity": 2, "discount": 10},
            {"order_id": 2, "user_id": 11, "product_name": "Novel", "category": "Books",
             "order_date": "2024-01-06", "unit_price": 8.0, "quantity": 1, "discount": 0},
        ]).write.parquet(str(target))

        df = ingestion.read_sales_data(target)

        assert df.count() == 2
        assert set(df.columns) == set(SalesSchema.column_names())
        assert sorted(r["product_name"] for r in df.collect()) == ["Lamp", "Novel"]

    def test_read_sales_data_parquet_directory_without_suffix(self, ingestion, tmp_path):
        target = tmp_path / "raw"
        ingestion.from_records([
            {"order_id": 3, "user_id": 12, "product_name": "Rug", "category": "Home",
             "unit_price": 30.0, "quantity": 1, "discount": 5},
        ]).write.parquet(str(target))

        assert ingestion._is_parquet(target)
        assert ingestion.read_sales_data(target).count() == 1

    def test_read_sales_data_falls_back_to_csv(self, ingestion, tmp_path):
        (tmp_path / "sales_data.csv").write_text(
            CSV_HEADER + "1,10,Lamp,Home,2024-01-05,2024-01-07,19.5,2,10,4\n"
        )

        assert not ingestion._is_parquet(tmp_path)
        assert ingestion.read_sales_data(tmp_path).count() == 1
