import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple
from sqlalchemy.orm import joinedload
from schema import CartItem, Team
from services.catalog import get_stock_quantity
from services.pricing import CartLine, PricingResult, calculate_cart_totals, discounted_unit_price
from config import config

logger = logging.getLogger(__name__)


class CartError(Exception):
    """Raised when a cart change cannot be applied."""


class OutOfStockError(CartError):
    pass


def _get_line(db, profile_id: str, team_id: int, size: str):
    return db.query(CartItem).filter_by(profile_id=profile_id, team_id=team_id, size=size).first()


def get_items(db, profile_id: str) -> List[CartItem]:
    return (
        db.query(CartItem)
        .options(joinedload(CartItem.team).joinedload(Team.league))
        .filter_by(profile_id=profile_id)
        .order_by(CartItem.id)
        .all()
    )


def add_item(db, profile_id: str, team: Team, size: str) -> CartItem:
    """
    Adds one unit of a team's jersey in the given size to the customer's cart.

    A second add of the same (team, size) bumps the existing line instead of
    creating a new one.

    Args:
        db: SQLAlchemy database session.
        profile_id: Owner of the cart.
        team: The product being added.
        size: One of the catalog sizes.

    Returns:
        The created or updated CartItem.

    Raises:
        CartError: The size is not sold, or the line is already at the per-line limit.
        OutOfStockError: The size has no stock.
    """
    if size not in config.SIZES:
        raise CartError(f"Unknown size '{size}'")
    if get_stock_quantity(db, team.id, size) <= 0:
        raise OutOfStockError(f"{team.name} ({size}) is out of stock")

    line = _get_line(db, profile_id, team.id, size)
    if line and line.quantity >= config.MAX_QUANTITY_PER_LINE:
        raise CartError(f"At most {config.MAX_QUANTITY_PER_LINE} units per line")
    if line:
        line.quantity += 1
    else:
        line = CartItem(
            profile_id=profile_id,
            team_id=team.id,
            size=size,
            quantity=1,
            added_at=datetime.now(timezone.utc),
        )
        db.add(line)
    return line


def update_quantity(db, profile_id: str, team_id: int, size: str, quantity: int) -> bool:
    """
    Sets the quantity of an existing cart line; zero or less removes it.

    Raises:
        CartError: The quantity is above the per-line limit.

    Returns:
        False when the line does not exist, True otherwise.
    """
    if quantity > config.MAX_QUANTITY_PER_LINE:
        raise CartError(f"At most {config.MAX_QUANTITY_PER_LINE} units per line")
    line = _get_line(db, profile_id, team_id, size)
    if not line:
        return False
    if quantity <= 0:
        db.delete(line)
    else:
        line.quantity = quantity
    return True


def remove_item(db, profile_id: str, team_id: int, size: str) -> bool:
    line = _get_line(db, profile_id, team_id, size)
    if not line:
        return False
    db.delete(line)
    return True


def clear_cart(db, profile_id: str) -> int:
    removed = db.query(CartItem).filter_by(profile_id=profile_id).delete()
    logger.info(f"Cleared {removed} cart lines for profile {profile_id}")
    return removed


def cart_lines(items: List[CartItem]) -> List[CartLine]:
    return [
        CartLine(
            unit_price=discounted_unit_price(item.team.price),
            quantity=item.quantity,
            team_id=item.team_id,
            size=item.size,
        )
        for item in items
    ]


def checkout_gate(total_quantity: int) -> Tuple[bool, int]:
    """
    Minimum-order policy applied before checkout.

    Returns:
        (allowed, missing_units) where missing_units is how many more units
        the customer needs to reach MIN_ITEMS_FOR_CHECKOUT.
    """
    missing = max(0, config.MIN_ITEMS_FOR_CHECKOUT - total_quantity)
    return missing == 0, missing


def free_items_message(totals: PricingResult) -> str:
    if totals.number_of_free_items <= 0:
        return ""
    noun = "camisa" if totals.number_of_free_items == 1 else "camisas"
    return f"Leve 3, Pague 2! Você ganhou {totals.number_of_free_items} {noun} de graça!"


def summarize(items: List[CartItem]) -> Dict[str, Any]:
    """
    Builds the cart view: lines with their prices, totals and checkout eligibility.
    """
    totals = calculate_cart_totals(cart_lines(items))
    allowed, missing = checkout_gate(totals.total_quantity)

    lines = []
    for item in items:
        unit_price = discounted_unit_price(item.team.price)
        lines.append({
            "team_id": item.team_id,
            "name": item.team.name,
            "league": item.team.league.name if item.team.league else None,
            "image1": item.team.image1,
            "size": item.size,
            "quantity": item.quantity,
            "list_price": str(item.team.price),
            "unit_price": str(unit_price),
            "line_total": str(unit_price * item.quantity),
        })

    return {
        "items": lines,
        "totals": totals.to_dict(),
        "free_items_message": free_items_message(totals),
        "can_checkout": allowed,
        "min_items_for_checkout": config.MIN_ITEMS_FOR_CHECKOUT,
        "missing_items": missing,
    }
