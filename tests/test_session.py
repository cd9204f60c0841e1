from __future__ import annotations

import pytest

from config import DatabaseConfig, config
from db import DatabaseManager, User


def test_engine_echo_follows_config(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "database", DatabaseConfig(echo=True))
    manager = DatabaseManager(f"sqlite:///{tmp_path / 'echo.db'}")
    try:
        assert manager.engine.echo is True
    finally:
        manager.dispose()


def test_engine_echo_off_by_default(db):
    assert db.engine.echo is False


def test_session_rolls_back_on_error(db):
    with pytest.raises(RuntimeError):
        with db.session() as session:
            session.add(User(email="rollback@example.com", password_hash="x"))
            session.flush()
            raise RuntimeError("boom")

    with db.session() as session:
        assert session.query(User).count() == 0
