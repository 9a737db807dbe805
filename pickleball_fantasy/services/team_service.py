"""
Team lifecycle: create, edit, read.
Roster validation and the edit-window policy are pure; this service loads
their inputs and writes the result inside one transaction.
"""
from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from typing import Callable

from pickleball_fantasy.config import Settings, get_settings
from pickleball_fantasy.edit_window import (
    EditWindowState,
    check_edit_allowed,
    check_name_edit,
    check_roster_edit,
    resolve_edit_window,
)
from pickleball_fantasy.errors import (
    ContestFull,
    ContestNotFound,
    ContestNotOpen,
    DuplicateTeam,
    NotTeamOwner,
    PlayerNotFound,
    TeamNotFound,
    TournamentNotFound,
)
from pickleball_fantasy.models import Contest, ContestStatus, FantasyTeam, Tournament
from pickleball_fantasy.persistence.db import transaction
from pickleball_fantasy.persistence.repositories import (
    ContestRepository,
    PlayerRepository,
    TeamEditRepository,
    TeamRepository,
    TournamentRepository,
)
from pickleball_fantasy.roster import (
    RosterSelection,
    costs_for_players,
    raise_for_result,
    validate_roster,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TeamService:
    """
    Domain logic for fantasy teams: one team per (user, contest), roster rules,
    entry cap, edit window. Persistence is delegated to repositories.
    """

    def __init__(self, settings: Settings | None = None, clock: Callable[[], datetime] | None = None) -> None:
        self._settings = settings or get_settings()
        self._clock = clock or _utcnow
        self._contest_repo = ContestRepository()
        self._tournament_repo = TournamentRepository()
        self._player_repo = PlayerRepository()
        self._team_repo = TeamRepository()
        self._edit_repo = TeamEditRepository()

    # ---------- Lookups ----------

    def _contest(self, conn: sqlite3.Connection, contest_id: str) -> Contest:
        contest = self._contest_repo.get(conn, contest_id)
        if contest is None:
            raise ContestNotFound(f"Contest not found: {contest_id}", contest_id=contest_id)
        return contest

    def _tournament(self, conn: sqlite3.Connection, tournament_id: str) -> Tournament:
        tournament = self._tournament_repo.get(conn, tournament_id)
        if tournament is None:
            raise TournamentNotFound(f"Tournament not found: {tournament_id}", tournament_id=tournament_id)
        return tournament

    def _validate(self, conn: sqlite3.Connection, contest: Contest, roster: list[RosterSelection]) -> None:
        ids = [s.player_id for s in roster]
        players = self._player_repo.get_many(conn, ids)
        missing = sorted({pid for pid in ids if pid not in players})
        if missing:
            raise PlayerNotFound(f"Unknown player(s): {', '.join(missing)}", player_ids=missing)
        result = validate_roster(roster, contest.rules, costs_for_players(players.values(), contest.rules))
        raise_for_result(result)

    # ---------- Create ----------

    def create_team(
        self,
        conn: sqlite3.Connection,
        user_id: str,
        contest_id: str,
        name: str,
        roster: list[RosterSelection],
    ) -> FantasyTeam:
        """
        Validate the roster, take an entry slot and insert team + roster atomically.
        Entry closes when the tournament starts (ContestNotOpen). Raises ContestFull
        when the cap is reached and DuplicateTeam for a second team by the same user.
        """
        contest = self._contest(conn, contest_id)
        if contest.status != ContestStatus.UPCOMING:
            raise ContestNotOpen(
                f"Contest is not accepting teams (current: {contest.status})", contest_id=contest_id
            )
        tournament = self._tournament(conn, contest.tournament_id)
        if resolve_edit_window(self._clock(), tournament, contest) != EditWindowState.OPEN_FULL:
            raise ContestNotOpen(
                "Tournament has already started", contest_id=contest_id, tournament_id=tournament.id
            )
        self._validate(conn, contest, roster)

        with transaction(conn):
            if self._team_repo.get_by_contest_and_user(conn, contest_id, user_id) is not None:
                raise DuplicateTeam("You already have a team in this contest", user_id=user_id, contest_id=contest_id)
            if not self._contest_repo.try_increment_entries(conn, contest_id):
                raise ContestFull("Contest is full", contest_id=contest_id, max_entries=contest.max_entries)
            team = self._team_repo.create(
                conn, user_id, contest_id, name,
                [(s.player_id, s.is_captain, s.is_vice_captain) for s in roster],
                created_at=self._clock(),
            )
        logger.info("Team %s created for user %s in contest %s", team.id, user_id, contest_id)
        return team

    # ---------- Update ----------

    def update_team(
        self,
        conn: sqlite3.Connection,
        team_id: str,
        name: str | None = None,
        roster: list[RosterSelection] | None = None,
        user_id: str | None = None,
    ) -> FantasyTeam:
        """
        Rename and/or replace the roster. A rename alone is allowed until the
        tournament ends; a roster replacement goes through the edit-window policy
        and is logged so frequency limits can count it.
        """
        team = self._team_repo.get(conn, team_id)
        if team is None:
            raise TeamNotFound(f"Team not found: {team_id}", team_id=team_id)
        if user_id is not None and team.user_id != user_id:
            raise NotTeamOwner("You can only edit your own team", team_id=team_id)
        contest = self._contest(conn, team.contest_id)
        tournament = self._tournament(conn, contest.tournament_id)

        if roster is None:
            if name is not None:
                check_name_edit(self._clock(), tournament, contest)
                self._team_repo.update_name(conn, team_id, name)
            return self.get_team(conn, team_id)

        check_edit_allowed(self._clock(), tournament, contest)
        self._validate(conn, contest, roster)
        with transaction(conn):
            now = self._clock()
            current = self._team_repo.get_roster(conn, team_id)
            decision = check_roster_edit(
                now,
                tournament,
                contest,
                [p.player_id for p in current],
                [s.player_id for s in roster],
                self._edit_repo.list_by_team(conn, team_id),
                self._settings.local_timezone,
            )
            self._team_repo.replace_roster(
                conn, team_id, [(s.player_id, s.is_captain, s.is_vice_captain) for s in roster]
            )
            self._edit_repo.record(conn, team_id, now, decision.phase.value, decision.players_changed)
            if name is not None:
                self._team_repo.update_name(conn, team_id, name)
        logger.info(
            "Team %s roster replaced (%s, %d new players)", team_id, decision.state.value, decision.players_changed
        )
        return self.get_team(conn, team_id)

    # ---------- Reads ----------

    def get_team(self, conn: sqlite3.Connection, team_id: str) -> FantasyTeam:
        team = self._team_repo.get(conn, team_id)
        if team is None:
            raise TeamNotFound(f"Team not found: {team_id}", team_id=team_id)
        return team

    def get_user_teams(self, conn: sqlite3.Connection, user_id: str) -> list[FantasyTeam]:
        return self._team_repo.list_by_user(conn, user_id)

    def get_contest_teams(self, conn: sqlite3.Connection, contest_id: str) -> list[FantasyTeam]:
        """Teams in ranking order."""
        self._contest(conn, contest_id)
        return self._team_repo.list_by_contest(conn, contest_id)
