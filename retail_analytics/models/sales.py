"""
Sales Transaction Models
"""
from datetime import datetime
from typing import List, Optional

from pydantic import field_validator

from retail_analytics.models.base import CamelModel, Identifier, Money, Quantity


class SaleLineItem(CamelModel):
    """One product line inside a recorded sale"""

    product_id: Identifier = None
    product_name: Optional[str] = None
    quantity: Quantity = 0
    price: Money = 0.0
    subtotal: Optional[float] = None

    @property
    def line_subtotal(self) -> float:
        """Precomputed subtotal if recorded, otherwise price * quantity"""
        if self.subtotal is not None:
            return self.subtotal
        return self.price * self.quantity


class Sale(CamelModel):
    """Sales transaction, immutable once recorded"""

    id: Identifier = None
    created_at: Optional[datetime] = None
    items: List[SaleLineItem] = []
    total: Money = 0.0
    payment_method: Optional[str] = None

    @field_validator("items", mode="before")
    @classmethod
    def _missing_items(cls, v):
        return [] if v is None else v

    @field_validator("created_at")
    @classmethod
    def _to_local_time(cls, v: Optional[datetime]) -> Optional[datetime]:
        # Day, weekday and hour bucketing all work on naive local time
        if v is not None and v.tzinfo is not None:
            return v.astimezone().replace(tzinfo=None)
        return v

    @property
    def items_sold(self) -> int:
        return sum(item.quantity for item in self.items)

    def __repr__(self) -> str:
        return f"<Sale(id={self.id!r}, created_at={self.created_at}, total={self.total:.2f}, items={len(self.items)})>"
