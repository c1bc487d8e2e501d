from decimal import Decimal
from datetime import datetime
from sqlalchemy.orm import declarative_base

class DictMixin:
    """
    Mixin providing a JSON-friendly dictionary serialization for SQLAlchemy models.

    Money columns are rendered as strings so no precision is lost on the wire.
    """
    def to_dict(self):
        result = {}
        for c in self.__table__.columns:
            value = getattr(self, c.key)
            if isinstance(value, Decimal):
                value = str(value)
            elif isinstance(value, datetime):
                value = value.isoformat()
            result[c.key] = value
        return result

Base = declarative_base(cls=DictMixin)
