"""Tests for engine construction and session helpers."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.pool import StaticPool

import src.services as database
from src.services import create_db_engine, session_scope


class TestEngine:
    def test_engine_built_from_database_url(self):
        """DATABASE_URL (set to in-memory SQLite for the test run) selects the engine."""
        assert str(database.engine.url) == "sqlite://"
        assert isinstance(database.engine.pool, StaticPool)

    def test_sqlite_file_shares_one_connection(self, tmp_path):
        engine = create_db_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
        try:
            assert isinstance(engine.pool, StaticPool)
        finally:
            engine.dispose()


class TestSessionScope:
    def test_rolls_back_and_closes_on_error(self, monkeypatch):
        session = MagicMock()
        monkeypatch.setattr(database, "SessionLocal", MagicMock(return_value=session))

        with pytest.raises(RuntimeError):
            with session_scope():
                raise RuntimeError("boom")

        session.rollback.assert_called_once()
        session.close.assert_called_once()

    def test_closes_without_rollback(self, monkeypatch):
        session = MagicMock()
        monkeypatch.setattr(database, "SessionLocal", MagicMock(return_value=session))

        with session_scope() as db:
            assert db is session

        session.rollback.assert_not_called()
        session.close.assert_called_once()
