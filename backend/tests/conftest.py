import pytest
from unittest.mock import patch
from flask import Flask
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from base import Base
from routes.auth import auth_bp
from routes.catalog import catalog_bp
from routes.cart import cart_bp
from routes.orders import orders_bp
from routes.address import address_bp
from routes.dashboard import dashboard_bp
import schema

@pytest.fixture
def engine():
    """In-memory SQLite DB for fast testing."""
    _engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(_engine)
    yield _engine
    Base.metadata.drop_all(_engine)

@pytest.fixture
def db_session(engine):
    """Provides a transactional database session."""
    TestSession = sessionmaker(bind=engine)
    s = TestSession()
    try:
        yield s
    finally:
        s.close()

@pytest.fixture
def app(engine):
    """Provides a pre-configured Flask app with all blueprints and mocked db."""
    TestSession = sessionmaker(bind=engine)

    def mock_get_db():
        s = TestSession()
        try:
            yield s
        finally:
            s.close()

    flask_app = Flask(__name__)
    flask_app.register_blueprint(auth_bp, url_prefix="/api/v1")
    flask_app.register_blueprint(catalog_bp, url_prefix="/api/v1")
    flask_app.register_blueprint(cart_bp, url_prefix="/api/v1")
    flask_app.register_blueprint(orders_bp, url_prefix="/api/v1")
    flask_app.register_blueprint(address_bp, url_prefix="/api/v1")
    flask_app.register_blueprint(dashboard_bp, url_prefix="/api/v1")
    flask_app.config["TESTING"] = True

    with patch("routes.auth.get_db", mock_get_db), \
         patch("routes.catalog.get_db", mock_get_db), \
         patch("routes.cart.get_db", mock_get_db), \
         patch("db.SessionLocal", TestSession), \
         patch("db.get_db", mock_get_db):
        yield flask_app

@pytest.fixture
def client(app):
    """Provides a Flask test client."""
    return app.test_client()

@pytest.fixture
def catalog(db_session):
    """
    Two leagues with a few teams. Returns {team name: team id}.

    List prices are round so discounted unit prices are easy to read:
    100.00 -> 30, 200.00 -> 60.
    """
    from helpers import seed_team
    brasil = schema.League(name="Brasileirão")
    europa = schema.League(name="Premier League")
    db_session.add_all([brasil, europa])
    db_session.flush()

    ids = {
        "Flamengo": seed_team(db_session, "Flamengo", brasil.id, "100.00", {"P": 10, "M": 3, "G": 0}).id,
        "Palmeiras": seed_team(db_session, "Palmeiras", brasil.id, "200.00", {"M": 8}).id,
        "Arsenal": seed_team(db_session, "Arsenal", europa.id, "150.00", {}).id,
    }
    db_session.commit()
    return ids
