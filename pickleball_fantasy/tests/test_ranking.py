"""
Tests for contest ranking and the leaderboard.
"""
from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from pickleball_fantasy.errors import ContestNotFound
from pickleball_fantasy.persistence.repositories import TeamRepository
from pickleball_fantasy.services.ranking_service import RankingService
from pickleball_fantasy.services.team_service import TeamService

from conftest import NOW


@pytest.fixture
def four_teams(db_conn, seed, roster_of):
    tournament = seed.tournament()
    players = seed.players(7)
    contest = seed.contest(tournament)
    teams = []
    for i, user in enumerate(["ann", "ben", "cat", "dan"]):
        service = TeamService(clock=lambda i=i: NOW + timedelta(minutes=i))
        teams.append(service.create_team(db_conn, user, contest.id, f"Team {user}", roster_of(players)))
    return contest, teams


def test_rank_by_points_then_creation_time(db_conn, four_teams):
    contest, (ann, ben, cat, dan) = four_teams
    repo = TeamRepository()
    repo.add_points(db_conn, ann.id, Decimal("10"))
    repo.add_points(db_conn, ben.id, Decimal("30"))
    repo.add_points(db_conn, cat.id, Decimal("10"))
    # dan stays on 0

    ranks = RankingService().refresh_ranks(db_conn, contest.id)

    assert ranks == [(ben.id, 1), (ann.id, 2), (cat.id, 3), (dan.id, 4)]
    assert repo.get(db_conn, cat.id).rank == 3


def test_every_team_rewritten(db_conn, four_teams):
    contest, teams = four_teams
    service = RankingService()
    service.refresh_ranks(db_conn, contest.id)
    TeamRepository().add_points(db_conn, teams[3].id, Decimal("0.01"))
    service.refresh_ranks(db_conn, contest.id)
    ranks = {t.id: t.rank for t in TeamRepository().list_by_contest(db_conn, contest.id)}
    assert ranks[teams[3].id] == 1
    assert sorted(ranks.values()) == [1, 2, 3, 4]


def test_add_points_refuses_negative(db_conn, four_teams):
    _, teams = four_teams
    with pytest.raises(ValueError):
        TeamRepository().add_points(db_conn, teams[0].id, Decimal("-1"))


def test_leaderboard_pagination(db_conn, four_teams):
    contest, teams = four_teams
    TeamRepository().add_points(db_conn, teams[2].id, Decimal("5.5"))
    service = RankingService()
    service.refresh_ranks(db_conn, contest.id)

    page1 = service.leaderboard(db_conn, contest.id, page=1, page_size=3)
    page2 = service.leaderboard(db_conn, contest.id, page=2, page_size=3)

    assert page1["total"] == 4
    assert page1["total_pages"] == 2
    assert [e["rank"] for e in page1["entries"]] == [1, 2, 3]
    assert page1["entries"][0]["team_id"] == teams[2].id
    assert page1["entries"][0]["total_points"] == "5.50"
    assert [e["rank"] for e in page2["entries"]] == [4]


def test_leaderboard_unknown_contest(db_conn):
    with pytest.raises(ContestNotFound):
        RankingService().leaderboard(db_conn, "missing")
