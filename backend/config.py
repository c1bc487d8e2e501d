import os
from dataclasses import dataclass
from decimal import Decimal


def _admin_emails() -> tuple:
    raw = os.environ.get("ADMIN_EMAILS", "admin@malhapro.com.br")
    return tuple(e.strip().lower() for e in raw.split(",") if e.strip())


@dataclass(frozen=True)
class StoreConfig:
    # Storage
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "sqlite:///storefront.db")

    # Pricing: every jersey is sold at 30% of its list price ("70% OFF")
    PRICE_FACTOR: Decimal = Decimal(os.environ.get("PRICE_FACTOR", "0.30"))

    # Checkout gate, enforced by the caller and not by the pricing engine
    MIN_ITEMS_FOR_CHECKOUT: int = int(os.environ.get("MIN_ITEMS_FOR_CHECKOUT", "5"))

    # Largest quantity a single cart or quote line may hold
    MAX_QUANTITY_PER_LINE: int = int(os.environ.get("MAX_QUANTITY_PER_LINE", "99"))

    # Catalog
    TEAMS_PER_PAGE: int = 10
    LOW_STOCK_THRESHOLD: int = 5
    SIZES: tuple = ("P", "M", "G", "GG", "XG")

    # Postal code lookup
    VIACEP_URL: str = os.environ.get("VIACEP_URL", "https://viacep.com.br/ws/{cep}/json/")
    VIACEP_TIMEOUT: float = float(os.environ.get("VIACEP_TIMEOUT", "5"))

    # Mock auth
    ADMIN_EMAILS: tuple = _admin_emails()

config = StoreConfig()
