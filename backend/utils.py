from flask import request
from base import Base
from db import engine

LIKE_ESCAPE = "\\"


def get_json_object():
    """
    Reads the request body as a JSON object.

    Returns:
        The decoded dictionary, an empty dictionary for a missing body, or
        None when the body is JSON of another shape (array, string, number).
    """
    data = request.get_json(silent=True)
    if data is None:
        return {}
    return data if isinstance(data, dict) else None


def like_pattern(term: str) -> str:
    """
    Builds a substring LIKE pattern where '%' and '_' in the term match literally.

    Use with `column.ilike(like_pattern(term), escape=LIKE_ESCAPE)`.
    """
    escaped = (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def clear_database():
    """
    Wipes all storefront data and recreates the schema.

    Used by scripts/reset_db.py to start a demo from an empty store.
    """
    import schema  # Ensure all models are registered with Base
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


def text_field(data, key: str) -> str:
    """Returns the stripped string under `key`, or '' when it is missing or not a string."""
    value = data.get(key)
    return value.strip() if isinstance(value, str) else ""
