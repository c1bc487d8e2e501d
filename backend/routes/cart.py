from flask import Blueprint, jsonify
from db import get_db
from schema import Team
from config import config
from routes.auth import require_user
from services import cart as cart_service
from services.cart import CartError, OutOfStockError
from services.pricing import CartLine, calculate_cart_totals, discounted_unit_price
from utils import get_json_object

cart_bp = Blueprint("cart", __name__)

MAX_ID = 2**31 - 1
BODY_NOT_OBJECT = "Request body must be a JSON object"


def _is_int(value, low, high) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and low <= value <= high


def _line_key(data):
    """Reads (team_id, size) from a request body, or returns an error response."""
    if data is None:
        return None, (jsonify({"error": BODY_NOT_OBJECT}), 400)
    team_id = data.get("team_id")
    size = data.get("size")
    if not _is_int(team_id, 1, MAX_ID):
        return None, (jsonify({"error": "team_id must be a positive integer"}), 400)
    if not size or not isinstance(size, str):
        return None, (jsonify({"error": "size is required"}), 400)
    return (team_id, size), None


@cart_bp.route("/cart", methods=["GET"])
@require_user
def get_cart(profile, db):
    items = cart_service.get_items(db, profile.id)
    return jsonify(cart_service.summarize(items)), 200


@cart_bp.route("/cart/items", methods=["POST"])
@require_user
def add_to_cart(profile, db):
    """
    Adds one unit of a (team, size) to the cart.
    ---
    Input (JSON):
        - team_id (int), size (str)
    Output (200):
        - The updated cart view.
    Errors:
        - 400: Missing fields or unknown size
        - 404: Team not found
        - 409: Size out of stock
    """
    key, error = _line_key(get_json_object())
    if error:
        return error
    team_id, size = key

    team = db.query(Team).filter_by(id=team_id).first()
    if not team:
        return jsonify({"error": "Team not found"}), 404

    try:
        cart_service.add_item(db, profile.id, team, size)
        db.commit()
    except OutOfStockError as e:
        db.rollback()
        return jsonify({"error": str(e)}), 409
    except CartError as e:
        db.rollback()
        return jsonify({"error": str(e)}), 400
    except Exception:
        db.rollback()
        raise

    return jsonify(cart_service.summarize(cart_service.get_items(db, profile.id))), 200


@cart_bp.route("/cart/items", methods=["PATCH"])
@require_user
def update_cart_item(profile, db):
    data = get_json_object()
    key, error = _line_key(data)
    if error:
        return error
    quantity = data.get("quantity")
    if not isinstance(quantity, int) or isinstance(quantity, bool):
        return jsonify({"error": "quantity must be an integer"}), 400

    try:
        found = cart_service.update_quantity(db, profile.id, key[0], key[1], quantity)
        if not found:
            return jsonify({"error": "Cart item not found"}), 404
        db.commit()
    except CartError as e:
        db.rollback()
        return jsonify({"error": str(e)}), 400
    except Exception:
        db.rollback()
        raise

    return jsonify(cart_service.summarize(cart_service.get_items(db, profile.id))), 200


@cart_bp.route("/cart/items", methods=["DELETE"])
@require_user
def remove_cart_item(profile, db):
    key, error = _line_key(get_json_object())
    if error:
        return error

    try:
        if not cart_service.remove_item(db, profile.id, *key):
            return jsonify({"error": "Cart item not found"}), 404
        db.commit()
    except Exception:
        db.rollback()
        raise

    return jsonify(cart_service.summarize(cart_service.get_items(db, profile.id))), 200


@cart_bp.route("/cart/quote", methods=["POST"])
def quote():
    """
    Prices an arbitrary set of lines without touching any stored cart.
    ---
    Input (JSON):
        - items (list): [{team_id (int), quantity (int), size (str, optional)}]
    Output (200):
        - subtotal, discount, total (str), total_quantity, number_of_free_items (int)
    Errors:
        - 400: Malformed items
        - 404: Unknown team
    """
    data = get_json_object()
    if data is None:
        return jsonify({"error": BODY_NOT_OBJECT}), 400
    items = data.get("items", [])
    if not isinstance(items, list):
        return jsonify({"error": "items must be a list"}), 400

    db = next(get_db())
    try:
        lines = []
        for entry in items:
            if not isinstance(entry, dict):
                return jsonify({"error": "each item must be an object"}), 400
            team_id = entry.get("team_id")
            quantity = entry.get("quantity", 1)
            if not _is_int(team_id, 1, MAX_ID) or not _is_int(quantity, 0, config.MAX_QUANTITY_PER_LINE):
                limit = config.MAX_QUANTITY_PER_LINE
                return jsonify({"error": f"team_id must be a positive integer and quantity 0 to {limit}"}), 400
            team = db.query(Team).filter_by(id=team_id).first()
            if not team:
                return jsonify({"error": f"Team {team_id} not found"}), 404
            lines.append(CartLine(
                unit_price=discounted_unit_price(team.price),
                quantity=quantity,
                team_id=team_id,
                size=entry.get("size"),
            ))

        return jsonify(calculate_cart_totals(lines).to_dict()), 200
    finally:
        db.close()
