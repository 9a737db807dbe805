"""
Data models for the fantasy engine.
Domain objects only. No persistence or API logic.

Contest-centric: a tournament hosts contests; users enter one team per contest;
completed matches feed points into every team that rosters the players involved.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

CENT = Decimal("0.01")


# ---------- Statuses ----------
class TournamentStatus(str, Enum):
    UPCOMING = "UPCOMING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class ContestStatus(str, Enum):
    """Contest lifecycle: UPCOMING (accepting teams) → IN_PROGRESS (scoring) → COMPLETED."""
    UPCOMING = "UPCOMING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class MatchStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class ChangeFrequency(str, Enum):
    NONE = "NONE"
    DAILY = "DAILY"
    ONCE = "ONCE"
    ROUNDS = "ROUNDS"


class EditPhase(str, Enum):
    PRE_TOURNAMENT = "pre_tournament"
    IN_PROGRESS = "in_progress"


class PrizeScope(str, Enum):
    CONTEST = "contest"
    TOURNAMENT = "tournament"


# ---------- Contest rules ----------

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

# Older setup forms wrote lowercase values and "matchday" for round-based changes.
_FREQUENCY_ALIASES = {
    "none": ChangeFrequency.NONE,
    "daily": ChangeFrequency.DAILY,
    "once": ChangeFrequency.ONCE,
    "rounds": ChangeFrequency.ROUNDS,
    "matchday": ChangeFrequency.ROUNDS,
}


def _parse_hhmm(value: Any) -> str | None:
    if value in (None, ""):
        return None
    s = str(value).strip()
    if not _HHMM.match(s):
        raise ValueError(f"Invalid time of day {value!r}; expected HH:MM")
    return s


@dataclass(frozen=True)
class PlayerCategory:
    """Skill-level price band from the contest setup form."""
    name: str
    skill_level: str
    price: Decimal


@dataclass(frozen=True)
class ContestRules:
    """
    Roster and edit rules for one contest, resolved once from the contest's
    loosely-typed rules blob. Missing keys take the documented defaults:
    team_size=7, wallet_size=100000, no in-progress changes, DAILY frequency,
    no time-of-day window, max 2 players swapped per edit, no per-day cap.
    """
    team_size: int = 7
    wallet_size: Decimal = Decimal("100000")
    allow_team_changes: bool = False
    change_frequency: ChangeFrequency = ChangeFrequency.DAILY
    change_window_start: str | None = None
    change_window_end: str | None = None
    max_players_to_change: int = 2
    max_changes_per_day: int | None = None
    player_categories: tuple[PlayerCategory, ...] = ()

    @classmethod
    def from_blob(cls, blob: str | dict[str, Any] | None) -> ContestRules:
        """Parse a rules blob (JSON text or dict, camelCase or snake_case keys)."""
        if blob is None or blob == "":
            return cls()
        data = json.loads(blob) if isinstance(blob, str) else dict(blob)

        def pick(*keys: str) -> Any:
            for k in keys:
                if data.get(k) is not None:
                    return data[k]
            return None

        defaults = cls()
        team_size = pick("teamSize", "fantasyTeamSize", "team_size")
        wallet = pick("walletSize", "wallet_size")
        allow = pick("allowTeamChanges", "allow_team_changes")
        freq = pick("changeFrequency", "change_frequency")
        max_change = pick("maxPlayersToChange", "max_players_to_change")
        per_day = pick("maxChangesPerDay", "max_changes_per_day")
        categories_raw = pick("playerCategories", "player_categories") or []

        frequency = defaults.change_frequency
        if freq is not None:
            key = str(freq.value if isinstance(freq, ChangeFrequency) else freq).strip().lower()
            if key not in _FREQUENCY_ALIASES:
                raise ValueError(f"Unknown change frequency {freq!r}")
            frequency = _FREQUENCY_ALIASES[key]

        categories = tuple(
            PlayerCategory(
                name=str(c.get("name", "")),
                skill_level=str(c.get("playerSkillLevel") or c.get("skill_level") or ""),
                price=Decimal(str(c["price"])),
            )
            for c in categories_raw
            if c.get("price") is not None
        )

        rules = cls(
            team_size=int(team_size) if team_size is not None else defaults.team_size,
            wallet_size=Decimal(str(wallet)) if wallet is not None else defaults.wallet_size,
            allow_team_changes=bool(allow) if allow is not None else defaults.allow_team_changes,
            change_frequency=frequency,
            change_window_start=_parse_hhmm(pick("changeWindowStart", "change_window_start")),
            change_window_end=_parse_hhmm(pick("changeWindowEnd", "change_window_end")),
            max_players_to_change=int(max_change) if max_change is not None else defaults.max_players_to_change,
            max_changes_per_day=int(per_day) if per_day is not None else None,
            player_categories=categories,
        )
        if rules.team_size < 1:
            raise ValueError("teamSize must be at least 1")
        return rules

    def to_dict(self) -> dict[str, Any]:
        return {
            "teamSize": self.team_size,
            "walletSize": str(self.wallet_size),
            "allowTeamChanges": self.allow_team_changes,
            "changeFrequency": self.change_frequency.value,
            "changeWindowStart": self.change_window_start,
            "changeWindowEnd": self.change_window_end,
            "maxPlayersToChange": self.max_players_to_change,
            "maxChangesPerDay": self.max_changes_per_day,
            "playerCategories": [
                {"name": c.name, "playerSkillLevel": c.skill_level, "price": str(c.price)}
                for c in self.player_categories
            ],
        }


# ---------- Tournament / players / matches (owned by the platform) ----------
@dataclass
class Tournament:
    id: str
    name: str
    start_date: datetime
    end_date: datetime
    status: str  # TournamentStatus value


@dataclass
class Player:
    """A real-world player. price is an explicit cost override; otherwise cost derives from rank."""
    id: str
    name: str
    rank: int | None = None
    skill_level: str | None = None
    price: Decimal | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "rank": self.rank,
            "skill_level": self.skill_level,
            "price": str(self.price) if self.price is not None else None,
        }


@dataclass
class Match:
    """
    One completed or pending match. player1/player2 are the two sides;
    scores are the final scores recorded for each side.
    """
    id: str
    tournament_id: str
    player1_id: str
    player2_id: str
    status: str  # MatchStatus value
    player1_score: int = 0
    player2_score: int = 0
    round: str | None = None


@dataclass
class Performance:
    """Raw per-player, per-match statistics used as scoring input."""
    match_id: str
    player_id: str
    points: Decimal
    aces: int = 0
    faults: int = 0
    winning_shots: int = 0


# ---------- Contest ----------
@dataclass
class Contest:
    id: str
    tournament_id: str
    name: str
    status: str  # ContestStatus value
    prize_pool: Decimal
    entry_fee: Decimal
    max_entries: int
    current_entries: int
    rules: ContestRules
    created_at: datetime
    prizes_distributed: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "tournament_id": self.tournament_id,
            "name": self.name,
            "status": self.status,
            "prize_pool": str(self.prize_pool),
            "entry_fee": str(self.entry_fee),
            "max_entries": self.max_entries,
            "current_entries": self.current_entries,
            "rules": self.rules.to_dict(),
            "prizes_distributed": self.prizes_distributed,
            "created_at": self.created_at.isoformat(),
        }


# ---------- Fantasy team ----------
@dataclass
class FantasyTeamPlayer:
    """Links a team to a player. At most one captain and one vice-captain per team, never the same player."""
    team_id: str
    player_id: str
    position: int
    is_captain: bool = False
    is_vice_captain: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "player_id": self.player_id,
            "position": self.position,
            "is_captain": self.is_captain,
            "is_vice_captain": self.is_vice_captain,
        }


@dataclass
class FantasyTeam:
    """
    A user's entry in a contest. One per (user, contest).
    total_points only ever grows; rank is None until the first ranking pass.
    """
    id: str
    user_id: str
    contest_id: str
    name: str
    total_points: Decimal
    rank: int | None
    created_at: datetime
    updated_at: datetime
    players: list[FantasyTeamPlayer] = field(default_factory=list)

    def player_ids(self) -> list[str]:
        return [p.player_id for p in self.players]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "contest_id": self.contest_id,
            "name": self.name,
            "total_points": str(self.total_points),
            "rank": self.rank,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "roster": [p.to_dict() for p in self.players],
        }


@dataclass
class TeamEdit:
    """One accepted roster replacement; the edit-frequency rules count these."""
    team_id: str
    edited_at: datetime
    phase: str  # EditPhase value
    players_changed: int


# ---------- Scoring records ----------
@dataclass
class PlayerMatchPoints:
    """Points one rostered player earned for one team in one match. Never updated in place."""
    team_id: str
    player_id: str
    match_id: str
    points: Decimal
    breakdown: dict[str, Any]
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "team_id": self.team_id,
            "player_id": self.player_id,
            "match_id": self.match_id,
            "points": str(self.points),
            "breakdown": self.breakdown,
            "created_at": self.created_at.isoformat(),
        }


# ---------- Prizes ----------
@dataclass(frozen=True)
class PrizeRule:
    rank: int
    percentage: Decimal
    min_players: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"rank": self.rank, "percentage": str(self.percentage), "min_players": self.min_players}


@dataclass(frozen=True)
class PrizeAllocation:
    """Payable amount for one prize rank, net of the payment processing fee."""
    rank: int
    team_id: str
    user_id: str
    percentage: Decimal
    gross_amount: Decimal
    fee: Decimal
    net_amount: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "rank": self.rank,
            "team_id": self.team_id,
            "user_id": self.user_id,
            "percentage": str(self.percentage),
            "gross_amount": str(self.gross_amount),
            "fee": str(self.fee),
            "net_amount": str(self.net_amount),
        }


@dataclass
class PrizeDisbursement:
    id: str
    contest_id: str
    team_id: str
    user_id: str
    rank: int
    amount: Decimal
    processing_fee: Decimal
    net_amount: Decimal
    status: str  # PENDING until the payout collaborator picks it up
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "contest_id": self.contest_id,
            "team_id": self.team_id,
            "user_id": self.user_id,
            "rank": self.rank,
            "amount": str(self.amount),
            "processing_fee": str(self.processing_fee),
            "net_amount": str(self.net_amount),
            "status": self.status,
            "created_at": self.created_at.isoformat(),
        }
