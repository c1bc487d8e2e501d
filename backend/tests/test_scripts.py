from unittest.mock import patch
from sqlalchemy.orm import sessionmaker
import schema
from scripts import reset_db
from scripts.seed_catalog import DEMO_CATALOG


def run_reset(engine, args, answer="y"):
    with patch("utils.engine", engine), \
         patch("scripts.reset_db.SessionLocal", sessionmaker(bind=engine)), \
         patch("builtins.input", return_value=answer) as prompt:
        code = reset_db.main(args)
    return code, prompt


def test_reset_cancelled_keeps_data(engine, db_session, catalog):
    code, prompt = run_reset(engine, [], answer="n")
    assert code == 1
    prompt.assert_called_once()
    assert db_session.query(schema.Team).count() == 3


def test_reset_wipes_store(engine, db_session, catalog, capsys):
    code, prompt = run_reset(engine, ["--yes"])
    assert code == 0
    prompt.assert_not_called()
    assert db_session.query(schema.Team).count() == 0
    assert db_session.query(schema.League).count() == 0
    out = capsys.readouterr().out
    assert "teams: 3 rows removed" in out
    assert "Seeded" not in out


def test_reset_and_reseed(engine, db_session, catalog, capsys):
    code, _ = run_reset(engine, ["--seed"])
    assert code == 0

    demo_teams = sum(len(teams) for teams in DEMO_CATALOG.values())
    assert db_session.query(schema.Team).count() == demo_teams
    assert db_session.query(schema.League).count() == len(DEMO_CATALOG)
    assert f"Seeded {demo_teams} demo teams." in capsys.readouterr().out
