"""Order line records and the per-line discount enrichment"""

import math
from dataclasses import dataclass, asdict
from datetime import date
from typing import Any, Dict, Optional


class MalformedOrderLineError(ValueError):
    """Order line cannot be enriched (missing or out-of-range price, quantity or discount)"""


@dataclass(frozen=True)
class OrderLine:
    """One product/quantity entry within a customer order"""
    order_id: int
    user_id: int
    product_name: str
    category: str
    order_date: Optional[date]
    ship_date: Optional[date]
    unit_price: Optional[float]
    quantity: Optional[int]
    discount: Optional[float]
    review_score: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class EnrichedOrderLine:
    """Order line with discount-adjusted values, kept at full precision"""
    line: OrderLine
    order_value_before_discount: float
    discount_per_item: float
    value_per_unit_after_discount: float
    order_value_after_discount: float
    total_discount_value: float

    def to_dict(self) -> Dict[str, Any]:
        row = self.line.to_dict()
        row.update({
            "order_value_before_discount": self.order_value_before_discount,
            "discount_per_item": self.discount_per_item,
            "value_per_unit_after_discount": self.value_per_unit_after_discount,
            "order_value_after_discount": self.order_value_after_discount,
            "total_discount_value": self.total_discount_value,
        })
        return row


def validate_order_line(line: OrderLine, max_discount: float = 100.0) -> None:
    """Raise MalformedOrderLineError if the line cannot be priced"""
    for name in ("unit_price", "quantity", "discount"):
        value = getattr(line, name)
        if value is None:
            raise MalformedOrderLineError(f"order {line.order_id}: {name} is missing")
        if not math.isfinite(value):
            raise MalformedOrderLineError(f"order {line.order_id}: {name} is not a number ({value})")
        if value < 0:
            raise MalformedOrderLineError(f"order {line.order_id}: {name} is negative ({value})")
    if line.discount > max_discount:
        raise MalformedOrderLineError(
            f"order {line.order_id}: discount {line.discount} exceeds {max_discount}"
        )


def enrich_order_line(line: OrderLine) -> EnrichedOrderLine:
    """Derive the discount-adjusted fields of a single order line.

    Same formulas as ``DataTransformer.enrich``; nothing is rounded here.
    """
    validate_order_line(line)

    before = line.unit_price * line.quantity
    discount_per_item = line.unit_price * line.discount / 100
    total_discount = discount_per_item * line.quantity

    return EnrichedOrderLine(
        line=line,
        order_value_before_discount=before,
        discount_per_item=discount_per_item,
        value_per_unit_after_discount=line.unit_price - discount_per_item,
        order_value_after_discount=before - total_discount,
        total_discount_value=total_discount,
    )
