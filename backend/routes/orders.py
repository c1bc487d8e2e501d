from flask import Blueprint, jsonify
from schema import Order
from routes.auth import require_user
from services.checkout import CheckoutError, place_order, status_label
from utils import get_json_object

orders_bp = Blueprint("orders", __name__)


def serialize_order(order: Order):
    data = order.to_dict()
    data["status_label"] = status_label(order.status)
    return data


@orders_bp.route("/orders", methods=["POST"])
@require_user
def create_order(profile, db):
    """
    Finalizes checkout for the signed-in customer's cart.
    ---
    Input (JSON):
        - customer_name (str), customer_email (str), customer_phone (str, optional)
        - delivery_address (obj): cep, street, number, complement, neighborhood, city, state
        - payment_method (str): 'pix'
    Output (201):
        - The stored order with status 'pending_payment'.
    Errors:
        - 400: Empty cart or invalid form
        - 422: Below the minimum number of units
    """
    data = get_json_object()
    if data is None:
        return jsonify({"error": "Request body must be a JSON object"}), 400
    try:
        order = place_order(db, profile, data)
        db.commit()
    except CheckoutError as e:
        db.rollback()
        return jsonify({"error": e.message, **e.details}), e.status_code
    except Exception:
        db.rollback()
        raise

    return jsonify(serialize_order(order)), 201


@orders_bp.route("/orders/mine", methods=["GET"])
@require_user
def my_orders(profile, db):
    orders = (
        db.query(Order)
        .filter_by(profile_id=profile.id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )
    return jsonify({"orders": [serialize_order(o) for o in orders]}), 200
