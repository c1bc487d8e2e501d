from flask import Blueprint, jsonify
from services.address import lookup_cep, is_valid_cep, AddressLookupError, FREE_SHIPPING

address_bp = Blueprint("address", __name__)


@address_bp.route("/address/<cep>", methods=["GET"])
def get_address(cep):
    """
    Fills in the delivery address for a postal code and quotes shipping.
    ---
    Output (200):
        - cep, street, neighborhood, city, state
        - shipping (obj): price, label, estimate
    Errors:
        - 400: Malformed CEP
        - 404: Unknown CEP
        - 502: Lookup provider unavailable
    """
    if not is_valid_cep(cep):
        return jsonify({"error": "CEP must have 8 digits"}), 400

    try:
        address = lookup_cep(cep)
    except AddressLookupError:
        return jsonify({"error": "Address lookup unavailable"}), 502

    if address is None:
        return jsonify({"error": "CEP not found"}), 404

    return jsonify({**address, "shipping": FREE_SHIPPING}), 200
