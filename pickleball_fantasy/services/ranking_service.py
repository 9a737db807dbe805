"""
Contest rankings. Full rewrite per pass: every team in the contest gets its rank.
Order: total points desc, then earlier team creation, then team id.
"""
from __future__ import annotations

import logging
import sqlite3
from typing import Any

from pickleball_fantasy.errors import ContestNotFound
from pickleball_fantasy.persistence.db import transaction
from pickleball_fantasy.persistence.repositories import ContestRepository, TeamRepository

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class RankingService:
    def __init__(self) -> None:
        self._contest_repo = ContestRepository()
        self._team_repo = TeamRepository()

    def refresh_ranks(self, conn: sqlite3.Connection, contest_id: str) -> list[tuple[str, int]]:
        """Assign 1-based ranks to every team. Returns (team_id, rank) in rank order."""
        with transaction(conn):
            teams = self._team_repo.list_by_contest(conn, contest_id)
            ranks = []
            for position, team in enumerate(teams, start=1):
                self._team_repo.set_rank(conn, team.id, position)
                ranks.append((team.id, position))
        logger.debug("Ranked %d teams in contest %s", len(ranks), contest_id)
        return ranks

    def leaderboard(
        self, conn: sqlite3.Connection, contest_id: str, page: int = 1, page_size: int = 50
    ) -> dict[str, Any]:
        """Paginated standings in ranking order."""
        if self._contest_repo.get(conn, contest_id) is None:
            raise ContestNotFound(f"Contest not found: {contest_id}", contest_id=contest_id)
        page = max(1, page)
        page_size = max(1, min(page_size, MAX_PAGE_SIZE))
        total = self._team_repo.count_by_contest(conn, contest_id)
        teams = self._team_repo.list_page_by_contest(conn, contest_id, page_size, (page - 1) * page_size)
        return {
            "contest_id": contest_id,
            "page": page,
            "page_size": page_size,
            "total": total,
            "total_pages": (total + page_size - 1) // page_size,
            "entries": [
                {
                    "rank": t.rank,
                    "team_id": t.id,
                    "team_name": t.name,
                    "user_id": t.user_id,
                    "total_points": str(t.total_points),
                }
                for t in teams
            ],
        }
