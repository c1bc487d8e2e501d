import math
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import joinedload, selectinload
from schema import League, Team, ProductStock
from services.pricing import discounted_unit_price
from config import config
from utils import LIKE_ESCAPE, like_pattern


def stock_status(quantity: int) -> str:
    if quantity <= 0:
        return "out_of_stock"
    if quantity <= config.LOW_STOCK_THRESHOLD:
        return "low"
    return "available"


def stock_by_size(team: Team) -> List[Dict[str, Any]]:
    """
    Lists every sellable size for a team, including sizes with no stock row.

    Args:
        team: Team with its `stock` relationship loaded.

    Returns:
        One entry per size in catalog order with quantity and status.
    """
    quantities = {s.size: s.stock_quantity for s in team.stock}
    result = []
    for size in config.SIZES:
        qty = quantities.get(size, 0)
        result.append({
            "size": size,
            "stock_quantity": qty,
            "status": stock_status(qty),
        })
    return result


def get_stock_quantity(db, team_id: int, size: str) -> int:
    row = db.query(ProductStock).filter_by(team_id=team_id, size=size).first()
    return row.stock_quantity if row else 0


def serialize_team(team: Team) -> Dict[str, Any]:
    return {
        "id": team.id,
        "name": team.name,
        "league_id": team.league_id,
        "league": team.league.name if team.league else None,
        "image1": team.image1,
        "image2": team.image2,
        "price": str(team.price),
        "discounted_price": str(discounted_unit_price(team.price)),
        "stock": stock_by_size(team),
    }


class CatalogService:
    """
    Read-side queries over leagues and teams used by the storefront listing.
    """
    def __init__(self, db):
        self.db = db

    def list_leagues(self) -> List[Dict[str, Any]]:
        leagues = self.db.query(League).order_by(League.name).all()
        return [{"id": l.id, "name": l.name} for l in leagues]

    def get_team(self, team_id: int) -> Optional[Team]:
        return (
            self.db.query(Team)
            .options(joinedload(Team.league), selectinload(Team.stock))
            .filter(Team.id == team_id)
            .first()
        )

    def search_teams(self, league_id: Optional[int] = None, search: str = "", page: int = 1) -> Dict[str, Any]:
        """
        Pages through teams filtered by league and a case-insensitive name match.

        Args:
            league_id: Restrict to one league, or None for all leagues.
            search: Substring of the team name.
            page: 1-based page number; values below 1 are treated as 1.

        Returns:
            A dictionary with the page of teams and pagination counters.
        """
        page = max(1, page)
        per_page = config.TEAMS_PER_PAGE

        query = self.db.query(Team)
        if league_id is not None:
            query = query.filter(Team.league_id == league_id)
        if search:
            query = query.filter(Team.name.ilike(like_pattern(search), escape=LIKE_ESCAPE))

        total = query.count()
        teams = (
            query.options(joinedload(Team.league), selectinload(Team.stock))
            .order_by(Team.name)
            .offset((page - 1) * per_page)
            .limit(per_page)
            .all()
        )

        return {
            "teams": [serialize_team(t) for t in teams],
            "total": total,
            "page": page,
            "per_page": per_page,
            "pages": math.ceil(total / per_page) if total else 0,
        }
