from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional
from config import config

# "Leve 3, Pague 2": one unit is free once the cart holds this many units
FREE_ITEM_THRESHOLD = 3
MAX_FREE_ITEMS = 1

ZERO = Decimal("0")


@dataclass(frozen=True)
class CartLine:
    unit_price: Decimal
    quantity: int
    team_id: Optional[int] = None
    size: Optional[str] = None


@dataclass(frozen=True)
class PricingResult:
    subtotal: Decimal
    discount: Decimal
    total: Decimal
    total_quantity: int
    number_of_free_items: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subtotal": str(self.subtotal),
            "discount": str(self.discount),
            "total": str(self.total),
            "total_quantity": self.total_quantity,
            "number_of_free_items": self.number_of_free_items,
        }


def to_decimal(value: Any) -> Decimal:
    """
    Coerces a money value from JSON or the database into a Decimal.

    Floats go through their string form so 59.9 stays 59.9 instead of
    picking up binary noise.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def discounted_unit_price(list_price: Any) -> Decimal:
    """
    Applies the flat per-unit discount to a team's list price.

    Args:
        list_price: The catalog price of one jersey.

    Returns:
        The unit price used for cart math, without rounding.
    """
    return to_decimal(list_price) * config.PRICE_FACTOR


def calculate_cart_totals(lines: Iterable[CartLine]) -> PricingResult:
    """
    Prices a cart and applies the bundling promotion.

    Each line stands for `quantity` units at `unit_price`. Once the cart holds
    FREE_ITEM_THRESHOLD units, the cheapest unit in the whole cart is free.
    The benefit is capped at MAX_FREE_ITEMS regardless of cart size.

    Args:
        lines: Cart lines priced at their discounted unit price. Lines with a
            zero or negative quantity contribute nothing.

    Returns:
        A PricingResult with exact Decimal amounts; formatting is left to callers.
    """
    priced = [(to_decimal(line.unit_price), line.quantity) for line in lines if line.quantity > 0]

    subtotal = sum((price * qty for price, qty in priced), ZERO)
    total_quantity = sum(qty for _, qty in priced)

    number_of_free_items = MAX_FREE_ITEMS if total_quantity >= FREE_ITEM_THRESHOLD else 0

    # Walk lines from cheapest up, taking units until the free allowance is spent
    discount = ZERO
    remaining = number_of_free_items
    for price, qty in sorted(priced, key=lambda pair: pair[0]):
        if remaining <= 0:
            break
        taken = min(qty, remaining)
        discount += price * taken
        remaining -= taken

    return PricingResult(
        subtotal=subtotal,
        discount=discount,
        total=subtotal - discount,
        total_quantity=total_quantity,
        number_of_free_items=number_of_free_items,
    )
