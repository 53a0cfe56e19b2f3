"""Data schemas for the sales_data table"""

from pyspark.sql.types import (
    StructType, StructField, IntegerType, StringType, DateType, DoubleType
)

class SalesSchema:
    """Schema definitions for sales order lines"""

    CRITICAL_COLUMNS = ["order_id", "unit_price", "quantity", "discount"]

    ENRICHED_COLUMNS = [
        "order_value_before_discount",
        "discount_per_item",
        "value_per_unit_after_discount",
        "order_value_after_discount",
        "total_discount_value",
    ]

    # Columns rounded at presentation time
    MONETARY_COLUMNS = ENRICHED_COLUMNS + [
        "unit_price",
        "total_order_value_before_discount",
        "avg_order_value_before_discount",
        "total_order_value_after_discount",
        "avg_order_value_after_discount",
        "avg_order_value",
    ]

    @staticmethod
    def sales_schema():
        """Schema for raw order lines"""
        return StructType([
            StructField("order_id", IntegerType(), True),
            StructField("user_id", IntegerType(), True),
            StructField("product_name", StringType(), True),
            StructField("category", StringType(), True),
            StructField("order_date", DateType(), True),
            StructField("ship_date", DateType(), True),
            StructField("unit_price", DoubleType(), True),
            StructField("quantity", IntegerType(), True),
            StructField("discount", DoubleType(), True),
            StructField("review_score", IntegerType(), True),
        ])

    @staticmethod
    def column_names():
        return [field.name for field in SalesSchema.sales_schema().fields]

    @staticmethod
    def standardized_columns():
        """Alternative header spellings mapped to canonical names"""
        return {
            "Order ID": "order_id",
            "OrderID": "order_id",
            "User ID": "user_id",
            "UserID": "user_id",
            "Product Name": "product_name",
            "Product": "product_name",
            "Category": "category",
            "Order Date": "order_date",
            "Ship Date": "ship_date",
            "Unit Price": "unit_price",
            "Price": "unit_price",
            "Quantity": "quantity",
            "Discount": "discount",
            "Review Score": "review_score",
        }
