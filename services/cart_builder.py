"""
Build cart lines from the cart/draft store.

The store keeps product id -> {sku -> quantity}; catalog data (price,
collection, ship window) comes from the SKU lookup table.
"""

from decimal import Decimal

import structlog

from models.cart import CartItem, CartSnapshot, OrderType

logger = structlog.get_logger(__name__)


def build_cart_items(snapshot: CartSnapshot) -> list[CartItem]:
    """
    Flatten a cart snapshot into priced cart lines.

    Lines with quantity <= 0 are removed lines and are skipped. SKUs
    missing from the lookup table (delisted since the draft was saved)
    are skipped and logged.

    Args:
        snapshot: Cart contents and SKU lookup

    Returns:
        Cart items in cart order
    """
    items: list[CartItem] = []
    unknown_skus: list[str] = []

    for product_id, sku_quantities in snapshot.orders.items():
        for sku, quantity in sku_quantities.items():
            if quantity <= 0:
                continue

            info = snapshot.sku_map.get(sku)
            if info is None:
                unknown_skus.append(sku)
                continue

            items.append(CartItem(
                sku=sku,
                sku_variant_id=info.sku_variant_id,
                product_id=product_id,
                description=info.description,
                quantity=quantity,
                price=info.price_for(snapshot.currency),
                collection_id=info.collection_id,
                collection_name=info.collection_name,
                ship_window_start=info.ship_window_start,
                ship_window_end=info.ship_window_end,
            ))

    if unknown_skus:
        logger.warning(
            "cart_skus_not_in_lookup",
            skus=unknown_skus,
            count=len(unknown_skus)
        )

    return items


def order_total(items: list[CartItem]) -> Decimal:
    """Sum of line totals."""
    return sum((item.line_total for item in items), Decimal("0"))


def items_missing_collection(items: list[CartItem], order_type: OrderType) -> list[str]:
    """
    SKUs that have no collection on a pre-order cart.

    ATS items legitimately have no collection and use default dates,
    so ATS carts never report any.
    """
    if order_type != OrderType.PRE_ORDER:
        return []
    return [item.sku for item in items if item.collection_id is None]
