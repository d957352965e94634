"""
Cart schemas: the read-only snapshot handed over by the cart/draft store.
"""

from pydantic import Field, field_validator
from typing import Optional
from enum import Enum
from datetime import date
from decimal import Decimal

from models.base import BaseSchema


class Currency(str, Enum):
    """Currencies a cart can be priced in."""
    USD = "USD"
    CAD = "CAD"


class OrderType(str, Enum):
    """Order type selected by the buyer."""
    ATS = "ATS"
    PRE_ORDER = "PRE_ORDER"


class SkuInfo(BaseSchema):
    """SKU lookup entry (catalog data synced from the storefront)."""

    sku_variant_id: int = Field(..., description="Numeric variant reference")
    description: str = Field("", description="Display description")
    price_usd: Decimal = Field(Decimal("0"), ge=0, description="Wholesale price in USD")
    price_cad: Decimal = Field(Decimal("0"), ge=0, description="Wholesale price in CAD")
    collection_id: Optional[int] = Field(
        None,
        description="Collection id; None means available to ship now"
    )
    collection_name: Optional[str] = None
    ship_window_start: Optional[date] = None
    ship_window_end: Optional[date] = None

    def price_for(self, currency: Currency) -> Decimal:
        return self.price_cad if currency == Currency.CAD else self.price_usd


class CartItem(BaseSchema):
    """One cart line, ready for shipment partitioning."""

    sku: str = Field(..., min_length=1)
    sku_variant_id: int
    product_id: str = ""
    description: str = ""
    quantity: int = Field(..., gt=0)
    price: Decimal = Field(Decimal("0"), ge=0)
    collection_id: Optional[int] = None
    collection_name: Optional[str] = None
    ship_window_start: Optional[date] = None
    ship_window_end: Optional[date] = None

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    @property
    def is_ats(self) -> bool:
        return self.collection_id is None


class CartSnapshot(BaseSchema):
    """
    Cart contents as stored by the cart/draft layer.

    orders maps product id -> {sku -> quantity}; insertion order is the
    display order and drives first-seen grouping of shipments.
    """

    orders: dict[str, dict[str, int]] = Field(default_factory=dict)
    sku_map: dict[str, SkuInfo] = Field(default_factory=dict)
    currency: Currency = Currency.USD
    order_type: OrderType = OrderType.ATS

    @field_validator("orders")
    @classmethod
    def no_negative_quantities(cls, v: dict[str, dict[str, int]]) -> dict[str, dict[str, int]]:
        """Quantities can be zero (removed line) but never negative."""
        for product_id, skus in v.items():
            for sku, quantity in skus.items():
                if quantity < 0:
                    raise ValueError(f"Negative quantity for {sku} in product {product_id}")
        return v
