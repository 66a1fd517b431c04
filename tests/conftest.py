"""Shared fixtures: a scripted cursor standing in for psycopg2."""

from contextlib import contextmanager
from datetime import date, datetime
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

import main
from models import Player

ADMIN_HEADERS = {"X-Admin-Token": "test-admin-token"}


class FakeCursor:
    """Records executed SQL and replays queued results in order."""

    def __init__(self):
        self.executed = []
        self.fetchone_results = []
        self.fetchall_results = []
        self.rowcount = 1
        self.error = None

    def execute(self, sql, params=None):
        self.executed.append((sql, params))
        if self.error:
            raise self.error

    def fetchone(self):
        return self.fetchone_results.pop(0) if self.fetchone_results else None

    def fetchall(self):
        return self.fetchall_results.pop(0) if self.fetchall_results else []

    def sql_containing(self, fragment):
        return [(sql, params) for sql, params in self.executed if fragment in sql]


@pytest.fixture
def cursor():
    return FakeCursor()


@pytest.fixture
def client(cursor):
    """Test client with the database connection replaced by a FakeCursor."""
    conn = MagicMock()
    conn.cursor.return_value = cursor

    @contextmanager
    def fake_get_db():
        yield conn

    with patch("main.get_db", fake_get_db), patch("main.ADMIN_TOKEN", ADMIN_HEADERS["X-Admin-Token"]):
        yield TestClient(main.app)


@pytest.fixture
def game_row():
    return {
        "id": "6f1c2c4e-0000-4000-8000-000000000001",
        "date": date(2026, 10, 22),
        "time": "22:45",
        "location": "Default Field",
        "status": "scheduled",
        "max_players": 40,
        "notes": None,
        "created_at": datetime(2026, 10, 1, 12, 0),
        "updated_at": datetime(2026, 10, 1, 12, 0),
    }


def make_players(defenders=0, midfielders=0, attackers=0):
    players = []
    for position, count in (("defender", defenders), ("midfielder", midfielders), ("attacker", attackers)):
        for i in range(count):
            players.append(Player(id=f"{position[:3]}-{i}", full_name=f"{position.title()} {i}",
                                  preferred_position=position))
    return players
