"""
Shared fixtures: a temporary SQLite DB per test and a small seeding helper
for tournaments, players, contests and matches.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from pickleball_fantasy.models import Contest, Match, Performance, Player, Tournament
from pickleball_fantasy.persistence.db import get_connection, init_db, set_db_path
from pickleball_fantasy.persistence.repositories import (
    ContestRepository,
    MatchRepository,
    PlayerRepository,
    TournamentRepository,
)
from pickleball_fantasy.roster import RosterSelection

NOW = datetime(2026, 5, 10, 19, 0, tzinfo=timezone.utc)


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "fantasy_test.db"
    set_db_path(path)
    init_db(db_path=path)
    return path


@pytest.fixture
def db_conn(db_path):
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


class Seeder:
    """Creates platform-owned records the engine only reads."""

    def __init__(self, conn) -> None:
        self.conn = conn
        self._players = PlayerRepository()
        self._tournaments = TournamentRepository()
        self._contests = ContestRepository()
        self._matches = MatchRepository()

    def tournament(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
        status: str = "UPCOMING",
    ) -> Tournament:
        start = start or NOW + timedelta(days=1)
        end = end or start + timedelta(days=3)
        return self._tournaments.create(self.conn, "Spring Open", start, end, status=status)

    def running_tournament(self) -> Tournament:
        return self.tournament(start=NOW - timedelta(days=1), end=NOW + timedelta(days=2), status="IN_PROGRESS")

    def players(self, n: int = 7, price: Decimal | None = None, first_rank: int = 1) -> list[Player]:
        return [
            self._players.create(self.conn, f"Player {i}", rank=first_rank + i, price=price)
            for i in range(n)
        ]

    def contest(
        self,
        tournament: Tournament,
        rules: dict[str, Any] | None = None,
        max_entries: int = 10,
        prize_pool: Decimal = Decimal("10000"),
        status: str = "UPCOMING",
    ) -> Contest:
        return self._contests.create(
            self.conn, tournament.id, "Main Draw Contest", max_entries,
            prize_pool=prize_pool, entry_fee=Decimal("100"), rules=rules, status=status,
        )

    def set_contest_status(self, contest: Contest, status: str) -> None:
        self._contests.update_status(self.conn, contest.id, status)

    def completed_match(
        self,
        tournament: Tournament,
        player1: Player,
        player2: Player,
        score1: int,
        score2: int,
        points1: Decimal = Decimal("10"),
        points2: Decimal = Decimal("10"),
        round: str | None = None,
    ) -> tuple[Match, list[Performance]]:
        m = self._matches.create(self.conn, tournament.id, player1.id, player2.id, round=round)
        perfs = [
            Performance(match_id=m.id, player_id=player1.id, points=points1),
            Performance(match_id=m.id, player_id=player2.id, points=points2),
        ]
        self._matches.complete(self.conn, m.id, score1, score2, perfs)
        return self._matches.get(self.conn, m.id), perfs


@pytest.fixture
def seed(db_conn):
    return Seeder(db_conn)


def make_roster(players: list[Player], captain: int = 0, vice: int = 1) -> list[RosterSelection]:
    return [
        RosterSelection(p.id, is_captain=(i == captain), is_vice_captain=(i == vice))
        for i, p in enumerate(players)
    ]


@pytest.fixture
def roster_of():
    return make_roster
