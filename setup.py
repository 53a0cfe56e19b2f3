from setuptools import setup, find_namespace_packages

setup(
    name="sales-reporting",
    version="0.1.0",
    author="Khairuddin Nasty",
    description="Discount-aware sales enrichment and aggregation for e-commerce reporting",
    packages=find_namespace_packages(include=["sales_reporting", "sales_reporting.*"]),
    python_requires=">=3.9",
    install_requires=[
        "pyspark>=3.4",
        "loguru>=0.7",
        "pydantic>=2.0",
        "pydantic-settings>=2.0",
        "python-dotenv>=1.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "sales-report=sales_reporting.pipeline.main:main",
        ],
    },
)
