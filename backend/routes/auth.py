import uuid
import logging
from datetime import datetime, timezone
from decimal import Decimal
from functools import wraps
from flask import Blueprint, request, jsonify
from db import get_db
from schema import Profile
from config import config
from utils import get_json_object, text_field

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)

TOKEN_PREFIX = "mock-jwt"


def role_for(email: str) -> str:
    return "admin" if email.lower() in config.ADMIN_EMAILS else "customer"


def issue_token(profile: Profile) -> str:
    return f"{TOKEN_PREFIX}-{role_for(profile.email)}-{profile.id}"


def parse_token(token: str):
    """
    Splits a synthetic token into (role, profile_id).

    Returns:
        The (role, profile_id) tuple, or None when the token is malformed.
    """
    parts = token.split("-", 3)
    if len(parts) != 4 or f"{parts[0]}-{parts[1]}" != TOKEN_PREFIX or not parts[3]:
        return None
    return parts[2], parts[3]


def _name_from_email(email: str) -> str:
    local = email.split("@")[0]
    words = [w for w in local.replace("_", ".").replace("-", ".").split(".") if w]
    return " ".join(w.capitalize() for w in words) or "Cliente"


def _auth_payload(profile: Profile):
    return {
        "user_id": profile.id,
        "role": role_for(profile.email),
        "token": issue_token(profile),
        "profile": profile.to_dict(),
    }


def create_profile(db, email, full_name, phone=None) -> Profile:
    profile = Profile(
        id=str(uuid.uuid4()),
        email=email,
        full_name=full_name,
        phone=phone,
        balance=Decimal("0"),
        created_at=datetime.now(timezone.utc),
    )
    db.add(profile)
    return profile


@auth_bp.route("/auth/signup", methods=["POST"])
def signup():
    """
    Registers a customer profile with the mock identity provider.
    ---
    Input (JSON):
        - email (str), password (str), full_name (str)
        - phone (str, optional)
    Output (201):
        - user_id, role, token, profile
    Errors:
        - 400: Missing fields
        - 409: Email already registered
    """
    data = get_json_object()
    if data is None:
        return jsonify({"error": "Request body must be a JSON object"}), 400
    email = text_field(data, "email").lower()
    password = data.get("password") or ""
    full_name = text_field(data, "full_name")

    if not email or not password or not full_name:
        return jsonify({"error": "email, password and full_name are required"}), 400

    db = next(get_db())
    try:
        if db.query(Profile).filter_by(email=email).first():
            return jsonify({"error": "Email already registered"}), 409

        profile = create_profile(db, email, full_name, text_field(data, "phone") or None)
        db.commit()
        logger.info(f"Profile {profile.id} signed up")
        return jsonify(_auth_payload(profile)), 201
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@auth_bp.route("/auth/signin", methods=["POST"])
def signin():
    """
    Signs a customer in. Any non-empty email/password pair is accepted; a
    profile is created on first sign-in.

    Returns:
        A tuple containing the JSON response and HTTP status code.
    """
    data = get_json_object()
    if data is None:
        return jsonify({"error": "Request body must be a JSON object"}), 400
    email = text_field(data, "email").lower()
    password = data.get("password") or ""

    if not email or not password:
        return jsonify({"error": "email and password are required"}), 400

    db = next(get_db())
    try:
        profile = db.query(Profile).filter_by(email=email).first()
        if not profile:
            profile = create_profile(db, email, _name_from_email(email))
            db.commit()
        return jsonify(_auth_payload(profile)), 200
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@auth_bp.route("/auth/signout", methods=["POST"])
def signout():
    # Tokens are stateless; the client just drops it.
    return jsonify({"message": "Signed out"}), 200


def _resolve_profile(db, role_required=None):
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None, (jsonify({"error": "Missing or invalid Authorization header"}), 401)

    parsed = parse_token(auth_header.split(" ", 1)[1])
    if not parsed:
        return None, (jsonify({"error": "Missing or invalid Authorization header"}), 401)

    role, profile_id = parsed
    if role_required and role != role_required:
        return None, (jsonify({"error": "Insufficient permissions"}), 403)

    profile = db.query(Profile).filter_by(id=profile_id).first()
    if not profile:
        return None, (jsonify({"error": "Profile not found"}), 401)
    if role != role_for(profile.email):
        return None, (jsonify({"error": "Insufficient permissions"}), 403)
    return profile, None


def require_user(f):
    """
    Decorator that resolves the Bearer token to a Profile.

    Passes initialized 'profile' and 'db' objects to the wrapped function.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        db = next(get_db())
        try:
            profile, error = _resolve_profile(db)
            if error:
                return error
            return f(*args, profile=profile, db=db, **kwargs)
        finally:
            db.close()
    return decorated


def require_role(role_required):
    """
    Access control decorator for role-based authorization.

    Args:
        role_required: The role string ('customer' or 'admin') required for access.

    Returns:
        A decorator that injects 'profile' and 'db' like require_user.
    """
    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            db = next(get_db())
            try:
                profile, error = _resolve_profile(db, role_required)
                if error:
                    return error
                return f(*args, profile=profile, db=db, **kwargs)
            finally:
                db.close()
        return decorated
    return decorator


@auth_bp.route("/auth/me", methods=["GET"])
@require_user
def me(profile, db):
    return jsonify({
        "user_id": profile.id,
        "role": role_for(profile.email),
        "profile": profile.to_dict(),
    }), 200
