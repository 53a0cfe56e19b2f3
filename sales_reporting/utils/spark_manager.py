"""Spark session management"""

from pyspark.sql import SparkSession
from pyspark.conf import SparkConf
from sales_reporting.utils.config import settings
from sales_reporting.utils.logger import logger
from typing import Optional, Dict, Any

class SparkManager:
    """Manage Spark session lifecycle"""

    _instance: Optional[SparkSession] = None

    @classmethod
    def get_session(cls, app_name: Optional[str] = None,
                    config_overrides: Optional[Dict[str, Any]] = None) -> SparkSession:
        """Get or create the Spark session"""
        if cls._instance is None:
            logger.info("Creating new Spark session")

            conf = SparkConf()
            base_config = [
                ("spark.app.name", app_name or settings.spark_app_name),
                ("spark.master", settings.spark_master),
                ("spark.driver.memory", settings.spark_driver_memory),

                # Report tables are small; keep shuffles narrow
                ("spark.sql.shuffle.partitions", str(settings.spark_shuffle_partitions)),
                ("spark.sql.adaptive.enabled", "true"),
                ("spark.sql.adaptive.coalescePartitions.enabled", "true"),
                ("spark.ui.enabled", "false"),
                ("spark.sql.session.timeZone", "UTC"),
            ]
            conf.setAll(base_config)

            if config_overrides:
                for key, value in config_overrides.items():
                    conf.set(key, str(value))

            cls._instance = SparkSession.builder.config(conf=conf).getOrCreate()
            cls._instance.sparkContext.setLogLevel(settings.spark_log_level)

            logger.success(f"Spark session created: {conf.get('spark.app.name')}")

        return cls._instance

    @classmethod
    def stop_session(cls):
        """Stop Spark session and cleanup"""
        if cls._instance:
            logger.info("Stopping Spark session")
            try:
                cls._instance.catalog.clearCache()
                cls._instance.stop()
                logger.success("Spark session stopped successfully")
            except Exception as e:
                logger.error(f"Error stopping Spark session: {e}")
            finally:
                cls._instance = None
