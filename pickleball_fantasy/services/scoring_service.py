"""
Scoring pipeline: completed match -> per-team points -> rankings.

Each team is scored in its own transaction (idempotency check, point records,
atomic increment). A team that fails is logged and reported; its siblings are
still scored. Redelivering the same match is a no-op for teams already scored.
"""
from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, field
from decimal import Decimal

from pickleball_fantasy.config import Settings, get_settings
from pickleball_fantasy.errors import TournamentNotCompleted, TournamentNotFound
from pickleball_fantasy.models import (
    ContestStatus,
    FantasyTeam,
    Match,
    MatchStatus,
    Performance,
    TournamentStatus,
)
from pickleball_fantasy.persistence.db import transaction
from pickleball_fantasy.persistence.repositories import (
    BonusAwardRepository,
    ContestRepository,
    MatchRepository,
    PlayerMatchPointsRepository,
    TeamRepository,
    TournamentRepository,
)
from pickleball_fantasy.scoring import mvp_bonus, score_player
from pickleball_fantasy.services.ranking_service import RankingService

logger = logging.getLogger(__name__)

SCORED = "scored"
ALREADY_SCORED = "already_scored"
FAILED = "failed"

MVP_AWARD = "mvp"


@dataclass
class MatchScoringReport:
    """
    Outcome of one scoring pass. results holds (team_id, outcome) for every
    team that rosters a player from the match.
    """
    match_id: str
    results: list[tuple[str, str]] = field(default_factory=list)
    deltas: dict[str, Decimal] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)
    contests_ranked: list[str] = field(default_factory=list)

    def outcome(self, team_id: str) -> str | None:
        for tid, outcome in self.results:
            if tid == team_id:
                return outcome
        return None

    def to_dict(self) -> dict:
        return {
            "match_id": self.match_id,
            "results": [{"team_id": t, "outcome": o} for t, o in self.results],
            "deltas": {t: str(d) for t, d in self.deltas.items()},
            "errors": self.errors,
            "contests_ranked": self.contests_ranked,
        }


class ScoringService:
    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self._tournament_repo = TournamentRepository()
        self._contest_repo = ContestRepository()
        self._match_repo = MatchRepository()
        self._team_repo = TeamRepository()
        self._points_repo = PlayerMatchPointsRepository()
        self._bonus_repo = BonusAwardRepository()
        self._ranking = RankingService()

    def apply_match_by_id(self, conn: sqlite3.Connection, match_id: str) -> MatchScoringReport:
        """Score a match from its stored performances. Unknown match is a no-op."""
        match = self._match_repo.get(conn, match_id)
        if match is None:
            logger.info("Match %s not found; nothing to score", match_id)
            return MatchScoringReport(match_id=match_id)
        return self.apply_match_result(conn, match, self._match_repo.list_performances(conn, match_id))

    def apply_match_result(
        self, conn: sqlite3.Connection, match: Match, performances: list[Performance]
    ) -> MatchScoringReport:
        report = MatchScoringReport(match_id=match.id)
        if match.status != MatchStatus.COMPLETED:
            logger.info("Match %s is %s; skipping scoring", match.id, match.status)
            return report

        sides = {match.player1_id, match.player2_id}
        by_player = {p.player_id: p for p in performances if p.player_id in sides}
        if not by_player:
            return report

        touched: list[str] = []
        for contest in self._contest_repo.list_by_tournament(conn, match.tournament_id, ContestStatus.IN_PROGRESS):
            contest_scored = False
            for team in self._team_repo.list_by_contest(conn, contest.id):
                if not any(pid in by_player for pid in team.player_ids()):
                    continue
                try:
                    outcome, delta = self._score_team(conn, team, match, by_player)
                except Exception as e:
                    logger.exception("Scoring failed for team %s on match %s", team.id, match.id)
                    report.results.append((team.id, FAILED))
                    report.errors[team.id] = str(e)
                    continue
                report.results.append((team.id, outcome))
                if outcome == SCORED:
                    report.deltas[team.id] = delta
                    contest_scored = True
                else:
                    logger.info("Team %s already scored for match %s; skipped", team.id, match.id)
            if contest_scored:
                touched.append(contest.id)

        for contest_id in touched:
            try:
                self._ranking.refresh_ranks(conn, contest_id)
            except Exception:
                logger.exception("Ranking refresh failed for contest %s", contest_id)
                continue
            report.contests_ranked.append(contest_id)
        return report

    def _score_team(
        self,
        conn: sqlite3.Connection,
        team: FantasyTeam,
        match: Match,
        by_player: dict[str, Performance],
    ) -> tuple[str, Decimal]:
        with transaction(conn):
            if self._points_repo.exists_for_team_match(conn, team.id, match.id):
                return ALREADY_SCORED, Decimal("0")
            delta = Decimal("0")
            for slot in self._team_repo.get_roster(conn, team.id):
                perf = by_player.get(slot.player_id)
                if perf is None:
                    continue
                score = score_player(
                    perf,
                    match,
                    is_captain=slot.is_captain,
                    is_vice_captain=slot.is_vice_captain,
                    schema=self._settings.performance_schema,
                    knockout_multiplier=self._settings.knockout_multiplier,
                )
                self._points_repo.create(conn, team.id, slot.player_id, match.id, score.points, score.breakdown)
                delta += score.points
            self._team_repo.add_points(conn, team.id, delta)
        return SCORED, delta

    # ---------- Tournament MVP ----------

    def award_mvp(self, conn: sqlite3.Connection, tournament_id: str, player_id: str) -> dict[str, Decimal]:
        """
        Award the MVP bonus to every team holding player_id that was created no
        later than tournament start. Once per (team, player). Returns team_id -> points awarded now.
        """
        tournament = self._tournament_repo.get(conn, tournament_id)
        if tournament is None:
            raise TournamentNotFound(f"Tournament not found: {tournament_id}", tournament_id=tournament_id)
        if tournament.status != TournamentStatus.COMPLETED:
            raise TournamentNotCompleted(
                f"MVP can only be awarded once the tournament is completed (current: {tournament.status})",
                tournament_id=tournament_id,
            )

        contests = [
            c for c in self._contest_repo.list_by_tournament(conn, tournament_id)
            if c.status != ContestStatus.CANCELLED
        ]
        awarded: dict[str, Decimal] = {}
        touched: set[str] = set()
        for team in self._team_repo.list_holding_player(conn, [c.id for c in contests], player_id):
            if team.created_at > tournament.start_date:
                continue
            slot = next(p for p in team.players if p.player_id == player_id)
            points = mvp_bonus(slot.is_captain, slot.is_vice_captain)
            with transaction(conn):
                if not self._bonus_repo.insert(conn, team.id, MVP_AWARD, player_id, points):
                    continue
                self._team_repo.add_points(conn, team.id, points)
            awarded[team.id] = points
            touched.add(team.contest_id)

        for contest_id in sorted(touched):
            self._ranking.refresh_ranks(conn, contest_id)
        logger.info("MVP %s awarded to %d team(s) in tournament %s", player_id, len(awarded), tournament_id)
        return awarded
