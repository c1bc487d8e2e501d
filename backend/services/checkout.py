import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from schema import Order, Profile
from services.address import is_valid_cep, format_cep
from services.cart import cart_lines, checkout_gate, clear_cart, get_items
from services.pricing import calculate_cart_totals, discounted_unit_price
from config import config

logger = logging.getLogger(__name__)

PAYMENT_METHODS = {
    "pix": True,
    "card": False,  # listed at checkout but not accepted yet
}

REQUIRED_PERSONAL_FIELDS = ("customer_name", "customer_email")
REQUIRED_ADDRESS_FIELDS = ("cep", "street", "number", "neighborhood", "city", "state")
ADDRESS_FIELDS = REQUIRED_ADDRESS_FIELDS + ("complement",)

STATUS_LABELS = {
    "pending_payment": "Aguardando Pagamento",
    "paid": "Pago",
    "shipped": "Enviado",
    "delivered": "Entregue",
}


class CheckoutError(Exception):
    """Raised for checkout requests that cannot become an order."""
    def __init__(self, message: str, status_code: int = 400, **details):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, status)


def validate_checkout(data: Dict[str, Any]) -> Optional[str]:
    """
    Checks the personal, delivery and payment sections of a checkout form.

    Returns:
        An error message for the first problem found, or None when valid.
    """
    for field in REQUIRED_PERSONAL_FIELDS:
        if not str(data.get(field) or "").strip():
            return f"{field} is required"

    address = data.get("delivery_address")
    if not isinstance(address, dict):
        return "delivery_address is required"
    for field in REQUIRED_ADDRESS_FIELDS:
        if not str(address.get(field) or "").strip():
            return f"delivery_address.{field} is required"
    if not is_valid_cep(str(address["cep"])):
        return "delivery_address.cep must have 8 digits"
    if len(str(address["state"]).strip()) != 2:
        return "delivery_address.state must be a 2-letter code"

    method = data.get("payment_method", "pix")
    if not isinstance(method, str):
        return "payment_method must be a string"
    if method not in PAYMENT_METHODS:
        return f"Unknown payment method '{method}'"
    if not PAYMENT_METHODS[method]:
        return f"Payment method '{method}' is unavailable"
    return None


def _clean_address(address: Dict[str, Any]) -> Dict[str, str]:
    cleaned = {field: str(address.get(field) or "").strip() for field in ADDRESS_FIELDS}
    cleaned["cep"] = format_cep(cleaned["cep"])
    cleaned["state"] = cleaned["state"].upper()
    return cleaned


def _item_snapshots(items) -> List[Dict[str, Any]]:
    return [
        {
            "id": item.team_id,
            "name": item.team.name,
            "size": item.size,
            "quantity": item.quantity,
            "price": str(discounted_unit_price(item.team.price)),
        }
        for item in items
    ]


def place_order(db, profile: Profile, data: Dict[str, Any]) -> Order:
    """
    Turns the customer's cart into a pending order and empties the cart.

    The order total comes from the same pricing engine the cart view uses, so
    the customer pays exactly what the cart showed.

    Args:
        db: SQLAlchemy database session; the caller commits.
        profile: The signed-in customer.
        data: Checkout form with personal data, delivery_address and payment_method.

    Returns:
        The new Order (flushed, so it has an id).

    Raises:
        CheckoutError: Empty cart, invalid form, or below the minimum unit count.
    """
    items = get_items(db, profile.id)
    if not items:
        raise CheckoutError("Cart is empty")

    error = validate_checkout(data)
    if error:
        raise CheckoutError(error)

    totals = calculate_cart_totals(cart_lines(items))
    allowed, missing = checkout_gate(totals.total_quantity)
    if not allowed:
        raise CheckoutError(
            "Minimum order quantity not reached",
            status_code=422,
            total_quantity=totals.total_quantity,
            missing_items=missing,
            min_items=config.MIN_ITEMS_FOR_CHECKOUT,
        )

    order = Order(
        profile_id=profile.id,
        created_at=datetime.now(timezone.utc),
        customer_name=str(data["customer_name"]).strip(),
        customer_email=str(data["customer_email"]).strip(),
        customer_phone=str(data.get("customer_phone") or "").strip() or None,
        delivery_address=json.dumps(_clean_address(data["delivery_address"])),
        items=json.dumps(_item_snapshots(items)),
        subtotal=totals.subtotal,
        discount=totals.discount,
        total_amount=totals.total,
        status="pending_payment",
        payment_method=data.get("payment_method", "pix"),
    )
    db.add(order)
    clear_cart(db, profile.id)
    db.flush()

    logger.info(f"Order {order.id} placed by {profile.id}: {totals.total_quantity} units, total {totals.total}")
    return order
