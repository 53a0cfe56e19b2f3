#!/usr/bin/env python3
"""Generate a synthetic sales_data.csv for local report runs"""

import argparse
import csv
import random
import sys
from datetime import date, timedelta
from pathlib import Path
sys.path.append(str(Path(__file__).parent.parent))

from sales_reporting.utils.logger import logger
from sales_reporting.utils.config import settings, analytics_config
from sales_reporting.pipeline.schemas import SalesSchema

PRODUCTS = {
    "Beauty": ["Lipstick", "Perfume", "Face Cream", "Shampoo"],
    "Books": ["Novel", "Cookbook", "Atlas", "Comic"],
    "Clothing": ["T-Shirt", "Jeans", "Jacket", "Socks"],
    "Electronics": ["Headphones", "Charger", "Laptop", "Smartwatch"],
    "Home": ["Table", "Chair", "Sofa", "Lamp"],
    "Sports": ["Yoga Mat", "Dumbbells", "Football", "Tennis Racket"],
    "Toys": ["Puzzle", "Kite", "Board Game", "Doll"],
}

def generate_rows(n_orders: int, seed: int):
    rng = random.Random(seed)
    start = date(2024, 1, 1)
    categories = [c for c in analytics_config.valid_categories if c in PRODUCTS]

    for order_id in range(1, n_orders + 1):
        user_id = rng.randint(1, max(1, n_orders // 3))
        order_date = start + timedelta(days=rng.randint(0, 89))
        ship_date = order_date + timedelta(days=rng.randint(0, 7))

        for _ in range(rng.randint(1, 4)):
            category = rng.choice(categories)
            yield {
                "order_id": order_id,
                "user_id": user_id,
                "product_name": rng.choice(PRODUCTS[category]),
                "category": category,
                "order_date": order_date.isoformat(),
                "ship_date": ship_date.isoformat(),
                "unit_price": round(rng.uniform(5, 1500), 2),
                "quantity": rng.randint(1, 5),
                "discount": rng.choice([0, 0, 5, 10, 15, 20, 25, 30]),
                "review_score": rng.randint(1, 5),
            }

def main():
    parser = argparse.ArgumentParser(description="Generate synthetic sales data")
    parser.add_argument("--orders", type=int, default=500, help="Number of orders")
    parser.add_argument("--seed", type=int, default=7)
    parser.add_argument("--output", type=Path,
                        default=settings.data_path_raw / "sales_data.csv")
    args = parser.parse_args()

    args.output.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with open(args.output, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=SalesSchema.column_names())
        writer.writeheader()
        for row in generate_rows(args.orders, args.seed):
            writer.writerow(row)
            count += 1

    logger.success(f"Wrote {count:,} order lines to {args.output}")

if __name__ == "__main__":
    main()
