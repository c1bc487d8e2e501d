from flask import Blueprint, request, jsonify
from db import get_db
from services.catalog import CatalogService, serialize_team, stock_by_size

catalog_bp = Blueprint("catalog", __name__)


@catalog_bp.route("/leagues", methods=["GET"])
def list_leagues():
    db = next(get_db())
    try:
        return jsonify(CatalogService(db).list_leagues()), 200
    finally:
        db.close()


@catalog_bp.route("/teams", methods=["GET"])
def list_teams():
    """
    Lists jerseys for the storefront grid.
    ---
    Input (Query Params):
        - league (int|'all', optional): League filter. Defaults to all.
        - search (str, optional): Case-insensitive name filter.
        - page (int, optional): 1-based page number.
    Output (200):
        - teams (list), total (int), page (int), per_page (int), pages (int)
    Errors:
        - 400: Non-numeric league or page
    """
    league = request.args.get("league", "all")
    search = request.args.get("search", "").strip()
    try:
        league_id = None if league == "all" else int(league)
        page = int(request.args.get("page", 1))
    except ValueError:
        return jsonify({"error": "league and page must be integers"}), 400

    db = next(get_db())
    try:
        return jsonify(CatalogService(db).search_teams(league_id, search, page)), 200
    finally:
        db.close()


@catalog_bp.route("/teams/<int:team_id>", methods=["GET"])
def get_team(team_id):
    db = next(get_db())
    try:
        team = CatalogService(db).get_team(team_id)
        if not team:
            return jsonify({"error": "Team not found"}), 404
        return jsonify(serialize_team(team)), 200
    finally:
        db.close()


@catalog_bp.route("/teams/<int:team_id>/stock", methods=["GET"])
def get_team_stock(team_id):
    """
    Returns per-size availability shown in the size picker.
    """
    db = next(get_db())
    try:
        team = CatalogService(db).get_team(team_id)
        if not team:
            return jsonify({"error": "Team not found"}), 404
        return jsonify({"team_id": team.id, "stock": stock_by_size(team)}), 200
    finally:
        db.close()
