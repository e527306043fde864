"""
Product Snapshot Model
"""
from typing import Optional

from retail_analytics.models.base import CamelModel, Identifier, Money, Quantity


class Product(CamelModel):
    """Current inventory snapshot of one product, read-only to the engine"""

    id: Identifier = None
    name: Optional[str] = None
    sku: Optional[str] = None
    category: Optional[str] = None
    price: Money = 0.0
    cost: Money = 0.0
    quantity: Quantity = 0  # Units on hand

    @property
    def stock_value(self) -> float:
        """Value of units on hand at selling price"""
        return self.price * self.quantity

    def __repr__(self) -> str:
        return f"<Product(id={self.id!r}, name='{self.name}', quantity={self.quantity})>"
