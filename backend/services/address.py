import re
import logging
from typing import Dict, Optional
import requests
from config import config

logger = logging.getLogger(__name__)

FREE_SHIPPING = {
    "price": "0",
    "label": "Frete Grátis",
    "estimate": "7 a 10 dias úteis",
}


class AddressLookupError(Exception):
    """Raised when the postal code provider cannot be reached or answers garbage."""


def normalize_cep(value: str) -> str:
    return re.sub(r"\D", "", value or "")


def is_valid_cep(value: str) -> bool:
    return len(normalize_cep(value)) == 8


def format_cep(value: str) -> str:
    cep = normalize_cep(value)
    return re.sub(r"^(\d{5})(\d{3})$", r"\1-\2", cep)


def lookup_cep(cep: str) -> Optional[Dict[str, str]]:
    """
    Resolves a Brazilian postal code (CEP) into a street address via ViaCEP.

    Args:
        cep: Postal code, with or without punctuation.

    Returns:
        A dictionary with cep, street, neighborhood, city and state, or None
        when the provider does not know the code.

    Raises:
        ValueError: The value is not an 8-digit CEP.
        AddressLookupError: Network failure or an unreadable response.
    """
    digits = normalize_cep(cep)
    if len(digits) != 8:
        raise ValueError(f"Invalid CEP '{cep}'")

    url = config.VIACEP_URL.format(cep=digits)
    try:
        r = requests.get(url, timeout=config.VIACEP_TIMEOUT)
        r.raise_for_status()
        data = r.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning(f"CEP lookup failed for {digits}: {e}")
        raise AddressLookupError(str(e)) from e

    if data.get("erro"):
        return None

    return {
        "cep": format_cep(digits),
        "street": data.get("logradouro") or "",
        "neighborhood": data.get("bairro") or "",
        "city": data.get("localidade") or "",
        "state": data.get("uf") or "",
    }
