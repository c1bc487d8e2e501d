import logging
from datetime import datetime, timezone
from decimal import Decimal
from flask import Blueprint, jsonify, request
from sqlalchemy import func, desc, cast, String
from schema import Order, Profile
from routes.auth import require_role, create_profile
from routes.orders import serialize_order
from services.pricing import to_decimal
from utils import LIKE_ESCAPE, get_json_object, like_pattern, text_field

logger = logging.getLogger(__name__)

dashboard_bp = Blueprint("dashboard", __name__)

MONTHS_IN_CHART = 6


def _last_months(now: datetime, count: int):
    """Returns 'YYYY-MM' keys for the last `count` months, oldest first."""
    year, month = now.year, now.month
    keys = []
    for _ in range(count):
        keys.append(f"{year:04d}-{month:02d}")
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(keys))


@dashboard_bp.route("/dashboard/overview", methods=["GET"])
@require_role("admin")
def get_overview(profile, db):
    """
    Headline numbers for the admin dashboard.
    ---
    Output (200):
        - orders (int), revenue (str), average_ticket (str), customers (int)
        - balance (str): The signed-in admin's account balance.
        - status_counts (dict): Orders per status.
        - monthly_revenue (list): [{month, revenue}] for the last six months.
    """
    order_count = db.query(func.count(Order.id)).scalar() or 0
    revenue = to_decimal(db.query(func.sum(Order.total_amount)).scalar() or 0)
    customers = db.query(func.count(Profile.id)).scalar() or 0

    status_counts = {
        status: count
        for status, count in db.query(Order.status, func.count(Order.id)).group_by(Order.status).all()
    }

    months = _last_months(datetime.now(timezone.utc), MONTHS_IN_CHART)
    monthly = {key: Decimal("0") for key in months}
    for created_at, total in db.query(Order.created_at, Order.total_amount).all():
        key = created_at.strftime("%Y-%m")
        if key in monthly:
            monthly[key] += to_decimal(total)

    average = (revenue / order_count).quantize(Decimal("0.01")) if order_count else Decimal("0")

    return jsonify({
        "orders": order_count,
        "revenue": str(revenue),
        "average_ticket": str(average),
        "customers": customers,
        "balance": str(to_decimal(profile.balance)),
        "status_counts": status_counts,
        "monthly_revenue": [{"month": key, "revenue": str(monthly[key])} for key in months],
    }), 200


@dashboard_bp.route("/dashboard/orders", methods=["GET"])
@require_role("admin")
def list_orders(profile, db):
    """
    Lists every order, newest first.
    ---
    Input (Query Params):
        - status (str, optional): Only orders in this status.
        - search (str, optional): Matches order id or customer name.
    """
    status = request.args.get("status", "").strip()
    search = request.args.get("search", "").strip()

    query = db.query(Order).order_by(desc(Order.created_at), desc(Order.id))
    if status and status != "all":
        query = query.filter(Order.status == status)
    if search:
        pattern = like_pattern(search)
        query = query.filter(
            Order.customer_name.ilike(pattern, escape=LIKE_ESCAPE)
            | cast(Order.id, String).like(pattern, escape=LIKE_ESCAPE)
        )

    return jsonify({"orders": [serialize_order(o) for o in query.all()]}), 200


def _customer_row(p: Profile, orders: int, spent) -> dict:
    return {
        "id": p.id,
        "name": p.full_name,
        "email": p.email,
        "phone": p.phone,
        "orders": orders,
        "total_spent": str(to_decimal(spent)),
    }


@dashboard_bp.route("/dashboard/customers", methods=["GET"])
@require_role("admin")
def list_customers(profile, db):
    """
    Lists customer profiles with how many orders they placed and how much they spent.
    """
    search = request.args.get("search", "").strip()

    query = (
        db.query(
            Profile,
            func.count(Order.id),
            func.coalesce(func.sum(Order.total_amount), 0),
        )
        .outerjoin(Order, Order.profile_id == Profile.id)
        .group_by(Profile.id)
        .order_by(Profile.full_name)
    )
    if search:
        pattern = like_pattern(search)
        query = query.filter(
            Profile.full_name.ilike(pattern, escape=LIKE_ESCAPE) | Profile.email.ilike(pattern, escape=LIKE_ESCAPE)
        )

    customers = [_customer_row(p, orders, spent) for p, orders, spent in query.all()]
    return jsonify({"customers": customers}), 200


@dashboard_bp.route("/dashboard/customers", methods=["POST"])
@require_role("admin")
def add_customer(profile, db):
    """
    Registers a customer on behalf of the store, without signing them in.
    ---
    Input (JSON):
        - name (str), email (str)
        - phone (str, optional)
    Output (201):
        - The customer row as listed by GET /dashboard/customers.
    Errors:
        - 400: Missing fields
        - 409: Email already registered
    """
    data = get_json_object()
    if data is None:
        return jsonify({"error": "Request body must be a JSON object"}), 400
    name = text_field(data, "name")
    email = text_field(data, "email").lower()
    if not name or not email:
        return jsonify({"error": "name and email are required"}), 400

    if db.query(Profile).filter_by(email=email).first():
        return jsonify({"error": "Email already registered"}), 409

    try:
        customer = create_profile(db, email, name, text_field(data, "phone") or None)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"Admin {profile.id} added customer {customer.id}")
    return jsonify(_customer_row(customer, 0, 0)), 201
