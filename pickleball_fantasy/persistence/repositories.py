"""
Repository interfaces for fantasy data.
No business logic, only read/write operations.

Repositories never commit: callers wrap multi-record writes in
persistence.db.transaction(). Outside a transaction each statement autocommits.
"""
from __future__ import annotations

import json
import sqlite3
import uuid
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from pickleball_fantasy.errors import DuplicateTeam
from pickleball_fantasy.models import (
    Contest,
    ContestRules,
    FantasyTeam,
    FantasyTeamPlayer,
    Match,
    Performance,
    Player,
    PlayerMatchPoints,
    PrizeDisbursement,
    PrizeRule,
    PrizeScope,
    TeamEdit,
    Tournament,
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_datetime(s: str | None) -> datetime:
    if s is None:
        raise ValueError("expected datetime string")
    dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _iso(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()


def points_to_storage(points: Decimal) -> int:
    """Fantasy points are persisted as integer hundredths."""
    return int((points * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def points_from_storage(value: int) -> Decimal:
    return Decimal(value).scaleb(-2)


# ---------- TournamentRepository ----------


class TournamentRepository:
    """Read access to tournaments. create() exists for seeding and tests; the platform owns tournaments."""

    def create(
        self,
        conn: sqlite3.Connection,
        name: str,
        start_date: datetime,
        end_date: datetime,
        status: str = "UPCOMING",
        id: str | None = None,
    ) -> Tournament:
        tid = id or str(uuid.uuid4())
        conn.execute(
            "INSERT INTO tournaments (id, name, start_date, end_date, status) VALUES (?, ?, ?, ?, ?)",
            (tid, name, _iso(start_date), _iso(end_date), status),
        )
        return Tournament(
            id=tid, name=name,
            start_date=_parse_datetime(_iso(start_date)),
            end_date=_parse_datetime(_iso(end_date)),
            status=status,
        )

    def get(self, conn: sqlite3.Connection, tournament_id: str) -> Tournament | None:
        row = conn.execute(
            "SELECT id, name, start_date, end_date, status FROM tournaments WHERE id = ?",
            (tournament_id,),
        ).fetchone()
        if row is None:
            return None
        return Tournament(
            id=row["id"],
            name=row["name"],
            start_date=_parse_datetime(row["start_date"]),
            end_date=_parse_datetime(row["end_date"]),
            status=row["status"],
        )

    def update_status(self, conn: sqlite3.Connection, tournament_id: str, status: str) -> None:
        conn.execute("UPDATE tournaments SET status = ? WHERE id = ?", (status, tournament_id))


# ---------- PlayerRepository ----------


class PlayerRepository:
    """Read access to real-world players."""

    def create(
        self,
        conn: sqlite3.Connection,
        name: str,
        rank: int | None = None,
        skill_level: str | None = None,
        price: Decimal | None = None,
        id: str | None = None,
    ) -> Player:
        pid = id or str(uuid.uuid4())
        conn.execute(
            "INSERT INTO players (id, name, rank, skill_level, price) VALUES (?, ?, ?, ?, ?)",
            (pid, name, rank, skill_level, str(price) if price is not None else None),
        )
        return Player(id=pid, name=name, rank=rank, skill_level=skill_level, price=price)

    def get(self, conn: sqlite3.Connection, player_id: str) -> Player | None:
        row = conn.execute(
            "SELECT id, name, rank, skill_level, price FROM players WHERE id = ?",
            (player_id,),
        ).fetchone()
        if row is None:
            return None
        return _row_to_player(row)

    def get_many(self, conn: sqlite3.Connection, player_ids: list[str]) -> dict[str, Player]:
        """Players keyed by id; unknown ids are simply absent."""
        if not player_ids:
            return {}
        marks = ", ".join("?" for _ in player_ids)
        rows = conn.execute(
            f"SELECT id, name, rank, skill_level, price FROM players WHERE id IN ({marks})",
            list(player_ids),
        ).fetchall()
        return {r["id"]: _row_to_player(r) for r in rows}


def _row_to_player(row: sqlite3.Row) -> Player:
    return Player(
        id=row["id"],
        name=row["name"],
        rank=row["rank"],
        skill_level=row["skill_level"],
        price=Decimal(row["price"]) if row["price"] is not None else None,
    )


# ---------- MatchRepository ----------


class MatchRepository:
    """Matches and their per-player performance records (platform-owned)."""

    def create(
        self,
        conn: sqlite3.Connection,
        tournament_id: str,
        player1_id: str,
        player2_id: str,
        round: str | None = None,
        id: str | None = None,
    ) -> Match:
        mid = id or str(uuid.uuid4())
        conn.execute(
            "INSERT INTO matches (id, tournament_id, player1_id, player2_id, status, round) VALUES (?, ?, ?, ?, ?, ?)",
            (mid, tournament_id, player1_id, player2_id, "SCHEDULED", round),
        )
        return Match(
            id=mid, tournament_id=tournament_id, player1_id=player1_id, player2_id=player2_id,
            status="SCHEDULED", round=round,
        )

    def get(self, conn: sqlite3.Connection, match_id: str) -> Match | None:
        row = conn.execute(
            "SELECT id, tournament_id, player1_id, player2_id, player1_score, player2_score, status, round "
            "FROM matches WHERE id = ?",
            (match_id,),
        ).fetchone()
        if row is None:
            return None
        return Match(
            id=row["id"],
            tournament_id=row["tournament_id"],
            player1_id=row["player1_id"],
            player2_id=row["player2_id"],
            status=row["status"],
            player1_score=row["player1_score"],
            player2_score=row["player2_score"],
            round=row["round"],
        )

    def complete(
        self,
        conn: sqlite3.Connection,
        match_id: str,
        player1_score: int,
        player2_score: int,
        performances: list[Performance],
    ) -> None:
        """Record final scores and performances. Call inside a transaction."""
        conn.execute(
            "UPDATE matches SET player1_score = ?, player2_score = ?, status = 'COMPLETED' WHERE id = ?",
            (player1_score, player2_score, match_id),
        )
        self.replace_performances(conn, match_id, performances)

    def replace_performances(self, conn: sqlite3.Connection, match_id: str, performances: list[Performance]) -> None:
        conn.execute("DELETE FROM match_performances WHERE match_id = ?", (match_id,))
        for p in performances:
            conn.execute(
                "INSERT INTO match_performances (match_id, player_id, points, aces, faults, winning_shots) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (match_id, p.player_id, str(p.points), p.aces, p.faults, p.winning_shots),
            )

    def list_performances(self, conn: sqlite3.Connection, match_id: str) -> list[Performance]:
        rows = conn.execute(
            "SELECT match_id, player_id, points, aces, faults, winning_shots FROM match_performances "
            "WHERE match_id = ? ORDER BY player_id",
            (match_id,),
        ).fetchall()
        return [
            Performance(
                match_id=r["match_id"],
                player_id=r["player_id"],
                points=Decimal(r["points"]),
                aces=r["aces"],
                faults=r["faults"],
                winning_shots=r["winning_shots"],
            )
            for r in rows
        ]


# ---------- ContestRepository ----------


_CONTEST_COLS = (
    "id, tournament_id, name, status, prize_pool, entry_fee, max_entries, current_entries, "
    "rules, prizes_distributed, created_at"
)


class ContestRepository:
    """CRUD for contests plus the atomic entry counter."""

    def create(
        self,
        conn: sqlite3.Connection,
        tournament_id: str,
        name: str,
        max_entries: int,
        prize_pool: Decimal = Decimal("0"),
        entry_fee: Decimal = Decimal("0"),
        rules: dict[str, Any] | None = None,
        status: str = "UPCOMING",
        id: str | None = None,
    ) -> Contest:
        cid = id or str(uuid.uuid4())
        now = _now_iso()
        conn.execute(
            f"INSERT INTO contests ({_CONTEST_COLS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                cid, tournament_id, name, status, str(prize_pool), str(entry_fee), max_entries, 0,
                json.dumps(rules) if rules is not None else None, 0, now,
            ),
        )
        return Contest(
            id=cid, tournament_id=tournament_id, name=name, status=status,
            prize_pool=prize_pool, entry_fee=entry_fee, max_entries=max_entries, current_entries=0,
            rules=ContestRules.from_blob(rules), created_at=_parse_datetime(now),
        )

    def get(self, conn: sqlite3.Connection, contest_id: str) -> Contest | None:
        row = conn.execute(f"SELECT {_CONTEST_COLS} FROM contests WHERE id = ?", (contest_id,)).fetchone()
        if row is None:
            return None
        return _row_to_contest(row)

    def list_by_tournament(
        self, conn: sqlite3.Connection, tournament_id: str, status: str | None = None
    ) -> list[Contest]:
        sql = f"SELECT {_CONTEST_COLS} FROM contests WHERE tournament_id = ?"
        args: list[Any] = [tournament_id]
        if status is not None:
            sql += " AND status = ?"
            args.append(status)
        rows = conn.execute(sql + " ORDER BY created_at, id", args).fetchall()
        return [_row_to_contest(r) for r in rows]

    def try_increment_entries(self, conn: sqlite3.Connection, contest_id: str) -> bool:
        """
        Atomically take one entry slot. Returns False when the contest is at
        capacity; the check and the increment are one statement.
        """
        cur = conn.execute(
            "UPDATE contests SET current_entries = current_entries + 1 "
            "WHERE id = ? AND current_entries < max_entries",
            (contest_id,),
        )
        return cur.rowcount == 1

    def update_status(self, conn: sqlite3.Connection, contest_id: str, status: str) -> None:
        conn.execute("UPDATE contests SET status = ? WHERE id = ?", (status, contest_id))

    def mark_prizes_distributed(self, conn: sqlite3.Connection, contest_id: str) -> bool:
        """Flip the distributed flag once. False if it was already set."""
        cur = conn.execute(
            "UPDATE contests SET prizes_distributed = 1 WHERE id = ? AND prizes_distributed = 0",
            (contest_id,),
        )
        return cur.rowcount == 1


def _row_to_contest(row: sqlite3.Row) -> Contest:
    return Contest(
        id=row["id"],
        tournament_id=row["tournament_id"],
        name=row["name"],
        status=row["status"],
        prize_pool=Decimal(row["prize_pool"]),
        entry_fee=Decimal(row["entry_fee"]),
        max_entries=row["max_entries"],
        current_entries=row["current_entries"],
        rules=ContestRules.from_blob(row["rules"]),
        created_at=_parse_datetime(row["created_at"]),
        prizes_distributed=bool(row["prizes_distributed"]),
    )


# ---------- TeamRepository ----------


_TEAM_COLS = "id, user_id, contest_id, name, total_points, rank, created_at, updated_at"


class TeamRepository:
    """Fantasy teams and their roster rows."""

    def create(
        self,
        conn: sqlite3.Connection,
        user_id: str,
        contest_id: str,
        name: str,
        roster: list[tuple[str, bool, bool]],  # (player_id, is_captain, is_vice_captain)
        id: str | None = None,
        created_at: datetime | None = None,
    ) -> FantasyTeam:
        """Insert team and roster. Raises DuplicateTeam if the user already entered this contest."""
        tid = id or str(uuid.uuid4())
        now = _iso(created_at) if created_at is not None else _now_iso()
        try:
            conn.execute(
                f"INSERT INTO fantasy_teams ({_TEAM_COLS}) VALUES (?, ?, ?, ?, 0, NULL, ?, ?)",
                (tid, user_id, contest_id, name, now, now),
            )
        except sqlite3.IntegrityError as e:
            if "fantasy_teams.contest_id" in str(e) or "ix_fantasy_teams_contest_user" in str(e):
                raise DuplicateTeam(
                    "You already have a team in this contest", user_id=user_id, contest_id=contest_id
                ) from e
            raise
        self._insert_roster(conn, tid, roster)
        return FantasyTeam(
            id=tid, user_id=user_id, contest_id=contest_id, name=name,
            total_points=points_from_storage(0), rank=None,
            created_at=_parse_datetime(now), updated_at=_parse_datetime(now),
            players=self.get_roster(conn, tid),
        )

    def _insert_roster(self, conn: sqlite3.Connection, team_id: str, roster: list[tuple[str, bool, bool]]) -> None:
        for pos, (pid, is_captain, is_vice) in enumerate(roster, start=1):
            conn.execute(
                "INSERT INTO fantasy_team_players (team_id, player_id, position, is_captain, is_vice_captain) "
                "VALUES (?, ?, ?, ?, ?)",
                (team_id, pid, pos, 1 if is_captain else 0, 1 if is_vice else 0),
            )

    def get(self, conn: sqlite3.Connection, team_id: str) -> FantasyTeam | None:
        row = conn.execute(f"SELECT {_TEAM_COLS} FROM fantasy_teams WHERE id = ?", (team_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_team(conn, row)

    def get_by_contest_and_user(self, conn: sqlite3.Connection, contest_id: str, user_id: str) -> FantasyTeam | None:
        row = conn.execute(
            f"SELECT {_TEAM_COLS} FROM fantasy_teams WHERE contest_id = ? AND user_id = ?",
            (contest_id, user_id),
        ).fetchone()
        if row is None:
            return None
        return self._row_to_team(conn, row)

    def get_roster(self, conn: sqlite3.Connection, team_id: str) -> list[FantasyTeamPlayer]:
        rows = conn.execute(
            "SELECT team_id, player_id, position, is_captain, is_vice_captain FROM fantasy_team_players "
            "WHERE team_id = ? ORDER BY position",
            (team_id,),
        ).fetchall()
        return [
            FantasyTeamPlayer(
                team_id=r["team_id"],
                player_id=r["player_id"],
                position=r["position"],
                is_captain=bool(r["is_captain"]),
                is_vice_captain=bool(r["is_vice_captain"]),
            )
            for r in rows
        ]

    def list_by_user(self, conn: sqlite3.Connection, user_id: str) -> list[FantasyTeam]:
        rows = conn.execute(
            f"SELECT {_TEAM_COLS} FROM fantasy_teams WHERE user_id = ? ORDER BY created_at DESC, id",
            (user_id,),
        ).fetchall()
        return [self._row_to_team(conn, r) for r in rows]

    def list_by_contest(self, conn: sqlite3.Connection, contest_id: str) -> list[FantasyTeam]:
        """Teams in ranking order: points desc, then earlier creation, then id."""
        rows = conn.execute(
            f"SELECT {_TEAM_COLS} FROM fantasy_teams WHERE contest_id = ? "
            "ORDER BY total_points DESC, created_at ASC, id ASC",
            (contest_id,),
        ).fetchall()
        return [self._row_to_team(conn, r) for r in rows]

    def list_page_by_contest(
        self, conn: sqlite3.Connection, contest_id: str, limit: int, offset: int
    ) -> list[FantasyTeam]:
        rows = conn.execute(
            f"SELECT {_TEAM_COLS} FROM fantasy_teams WHERE contest_id = ? "
            "ORDER BY total_points DESC, created_at ASC, id ASC LIMIT ? OFFSET ?",
            (contest_id, limit, offset),
        ).fetchall()
        return [self._row_to_team(conn, r) for r in rows]

    def count_by_contest(self, conn: sqlite3.Connection, contest_id: str) -> int:
        row = conn.execute("SELECT COUNT(*) AS n FROM fantasy_teams WHERE contest_id = ?", (contest_id,)).fetchone()
        return int(row["n"])

    def list_holding_player(
        self, conn: sqlite3.Connection, contest_ids: list[str], player_id: str
    ) -> list[FantasyTeam]:
        if not contest_ids:
            return []
        marks = ", ".join("?" for _ in contest_ids)
        rows = conn.execute(
            f"SELECT {', '.join('t.' + c.strip() for c in _TEAM_COLS.split(','))} FROM fantasy_teams t "
            f"JOIN fantasy_team_players tp ON tp.team_id = t.id "
            f"WHERE t.contest_id IN ({marks}) AND tp.player_id = ? ORDER BY t.created_at, t.id",
            [*contest_ids, player_id],
        ).fetchall()
        return [self._row_to_team(conn, r) for r in rows]

    def replace_roster(
        self, conn: sqlite3.Connection, team_id: str, roster: list[tuple[str, bool, bool]]
    ) -> None:
        """Swap the whole roster. Call inside a transaction."""
        conn.execute("DELETE FROM fantasy_team_players WHERE team_id = ?", (team_id,))
        self._insert_roster(conn, team_id, roster)
        self.touch(conn, team_id)

    def update_name(self, conn: sqlite3.Connection, team_id: str, name: str) -> None:
        conn.execute("UPDATE fantasy_teams SET name = ?, updated_at = ? WHERE id = ?", (name, _now_iso(), team_id))

    def touch(self, conn: sqlite3.Connection, team_id: str) -> None:
        conn.execute("UPDATE fantasy_teams SET updated_at = ? WHERE id = ?", (_now_iso(), team_id))

    def add_points(self, conn: sqlite3.Connection, team_id: str, delta: Decimal) -> None:
        """Atomic increment. Negative deltas are refused: totals never go down."""
        if delta < 0:
            raise ValueError(f"Refusing to decrement team points (delta={delta})")
        conn.execute(
            "UPDATE fantasy_teams SET total_points = total_points + ? WHERE id = ?",
            (points_to_storage(delta), team_id),
        )

    def set_rank(self, conn: sqlite3.Connection, team_id: str, rank: int) -> None:
        conn.execute("UPDATE fantasy_teams SET rank = ? WHERE id = ?", (rank, team_id))

    def _row_to_team(self, conn: sqlite3.Connection, row: sqlite3.Row) -> FantasyTeam:
        return FantasyTeam(
            id=row["id"],
            user_id=row["user_id"],
            contest_id=row["contest_id"],
            name=row["name"],
            total_points=points_from_storage(row["total_points"]),
            rank=row["rank"],
            created_at=_parse_datetime(row["created_at"]),
            updated_at=_parse_datetime(row["updated_at"]),
            players=self.get_roster(conn, row["id"]),
        )


# ---------- TeamEditRepository ----------


class TeamEditRepository:
    """Append-only roster edit log."""

    def record(self, conn: sqlite3.Connection, team_id: str, edited_at: datetime, phase: str, players_changed: int) -> TeamEdit:
        conn.execute(
            "INSERT INTO team_edits (team_id, edited_at, phase, players_changed) VALUES (?, ?, ?, ?)",
            (team_id, _iso(edited_at), phase, players_changed),
        )
        return TeamEdit(team_id=team_id, edited_at=edited_at, phase=phase, players_changed=players_changed)

    def list_by_team(self, conn: sqlite3.Connection, team_id: str, phase: str | None = None) -> list[TeamEdit]:
        sql = "SELECT team_id, edited_at, phase, players_changed FROM team_edits WHERE team_id = ?"
        args: list[Any] = [team_id]
        if phase is not None:
            sql += " AND phase = ?"
            args.append(phase)
        rows = conn.execute(sql + " ORDER BY id", args).fetchall()
        return [
            TeamEdit(
                team_id=r["team_id"],
                edited_at=_parse_datetime(r["edited_at"]),
                phase=r["phase"],
                players_changed=r["players_changed"],
            )
            for r in rows
        ]


# ---------- PlayerMatchPointsRepository ----------


class PlayerMatchPointsRepository:
    """Per-team, per-player, per-match scoring records. Append-only."""

    def exists_for_team_match(self, conn: sqlite3.Connection, team_id: str, match_id: str) -> bool:
        row = conn.execute(
            "SELECT 1 FROM player_match_points WHERE team_id = ? AND match_id = ? LIMIT 1",
            (team_id, match_id),
        ).fetchone()
        return row is not None

    def create(
        self,
        conn: sqlite3.Connection,
        team_id: str,
        player_id: str,
        match_id: str,
        points: Decimal,
        breakdown: dict[str, Any],
    ) -> PlayerMatchPoints:
        now = _now_iso()
        conn.execute(
            "INSERT INTO player_match_points (team_id, player_id, match_id, points, breakdown, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (team_id, player_id, match_id, points_to_storage(points), json.dumps(breakdown), now),
        )
        return PlayerMatchPoints(
            team_id=team_id, player_id=player_id, match_id=match_id,
            points=points, breakdown=breakdown, created_at=_parse_datetime(now),
        )

    def list_by_team(self, conn: sqlite3.Connection, team_id: str, match_id: str | None = None) -> list[PlayerMatchPoints]:
        sql = "SELECT team_id, player_id, match_id, points, breakdown, created_at FROM player_match_points WHERE team_id = ?"
        args: list[Any] = [team_id]
        if match_id is not None:
            sql += " AND match_id = ?"
            args.append(match_id)
        rows = conn.execute(sql + " ORDER BY created_at, player_id", args).fetchall()
        return [
            PlayerMatchPoints(
                team_id=r["team_id"],
                player_id=r["player_id"],
                match_id=r["match_id"],
                points=points_from_storage(r["points"]),
                breakdown=json.loads(r["breakdown"]),
                created_at=_parse_datetime(r["created_at"]),
            )
            for r in rows
        ]


# ---------- BonusAwardRepository ----------


class BonusAwardRepository:
    """One row per (team, kind, player); insert() returns False if already awarded."""

    def insert(self, conn: sqlite3.Connection, team_id: str, kind: str, player_id: str, points: Decimal) -> bool:
        cur = conn.execute(
            "INSERT OR IGNORE INTO bonus_awards (team_id, kind, player_id, points, created_at) VALUES (?, ?, ?, ?, ?)",
            (team_id, kind, player_id, points_to_storage(points), _now_iso()),
        )
        return cur.rowcount == 1


# ---------- PrizeRuleRepository ----------


class PrizeRuleRepository:
    """Prize rules per scope (contest or tournament)."""

    def list(self, conn: sqlite3.Connection, scope: PrizeScope, scope_id: str) -> list[PrizeRule]:
        rows = conn.execute(
            "SELECT rank, percentage, min_players FROM prize_rules WHERE scope_type = ? AND scope_id = ? ORDER BY rank",
            (scope.value, scope_id),
        ).fetchall()
        return [
            PrizeRule(rank=r["rank"], percentage=Decimal(r["percentage"]), min_players=r["min_players"])
            for r in rows
        ]

    def replace(self, conn: sqlite3.Connection, scope: PrizeScope, scope_id: str, rules: list[PrizeRule]) -> None:
        """Delete then insert. Call inside a transaction."""
        conn.execute("DELETE FROM prize_rules WHERE scope_type = ? AND scope_id = ?", (scope.value, scope_id))
        for rule in rules:
            conn.execute(
                "INSERT INTO prize_rules (scope_type, scope_id, rank, percentage, min_players) VALUES (?, ?, ?, ?, ?)",
                (scope.value, scope_id, rule.rank, str(rule.percentage), rule.min_players),
            )


# ---------- PrizeDisbursementRepository ----------


class PrizeDisbursementRepository:
    def create(
        self,
        conn: sqlite3.Connection,
        contest_id: str,
        team_id: str,
        user_id: str,
        rank: int,
        amount: Decimal,
        processing_fee: Decimal,
        net_amount: Decimal,
    ) -> PrizeDisbursement:
        did = str(uuid.uuid4())
        now = _now_iso()
        conn.execute(
            "INSERT INTO prize_disbursements (id, contest_id, team_id, user_id, rank, amount, processing_fee, "
            "net_amount, status, created_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?, 'PENDING', ?)",
            (did, contest_id, team_id, user_id, rank, str(amount), str(processing_fee), str(net_amount), now),
        )
        return PrizeDisbursement(
            id=did, contest_id=contest_id, team_id=team_id, user_id=user_id, rank=rank,
            amount=amount, processing_fee=processing_fee, net_amount=net_amount,
            status="PENDING", created_at=_parse_datetime(now),
        )

    def list_by_contest(self, conn: sqlite3.Connection, contest_id: str) -> list[PrizeDisbursement]:
        rows = conn.execute(
            "SELECT id, contest_id, team_id, user_id, rank, amount, processing_fee, net_amount, status, created_at "
            "FROM prize_disbursements WHERE contest_id = ? ORDER BY rank",
            (contest_id,),
        ).fetchall()
        return [
            PrizeDisbursement(
                id=r["id"],
                contest_id=r["contest_id"],
                team_id=r["team_id"],
                user_id=r["user_id"],
                rank=r["rank"],
                amount=Decimal(r["amount"]),
                processing_fee=Decimal(r["processing_fee"]),
                net_amount=Decimal(r["net_amount"]),
                status=r["status"],
                created_at=_parse_datetime(r["created_at"]),
            )
            for r in rows
        ]
