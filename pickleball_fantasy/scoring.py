"""
Fantasy scoring rules for pickleball matches.
Pure functions: one player's performance in one match -> fantasy points + breakdown.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from pickleball_fantasy.models import CENT, Match, Performance

# ---------- Winning-margin bonus ----------
SHUTOUT_BONUS = Decimal("15")  # loser scored 0
MARGIN_BONUS = Decimal("10")
MARGIN_BONUS_THRESHOLD = 5

# ---------- Role multipliers ----------
CAPTAIN_MULTIPLIER = Decimal("2")
VICE_CAPTAIN_MULTIPLIER = Decimal("1.5")
PLAYER_MULTIPLIER = Decimal("1")

# ---------- Tournament bonuses ----------
MVP_BONUS_POINTS = Decimal("50")

PERFORMANCE_SCHEMAS = ("points", "detailed")
_KNOCKOUT_ROUND_MARKERS = ("final", "semi", "quarter")


@dataclass(frozen=True)
class PlayerScore:
    points: Decimal
    breakdown: dict[str, Any]


def base_points(perf: Performance, schema: str = "points") -> Decimal:
    """
    "points": the recorded points field as-is.
    "detailed": points + aces + winning shots - faults.
    """
    if schema == "points":
        return Decimal(perf.points)
    if schema == "detailed":
        return Decimal(perf.points) + perf.aces + perf.winning_shots - perf.faults
    raise ValueError(f"Unknown performance schema {schema!r}; expected one of {PERFORMANCE_SCHEMAS}")


def side_scores(match: Match, player_id: str) -> tuple[int, int]:
    """(own score, opponent score) for the side player_id played on."""
    if player_id == match.player1_id:
        return match.player1_score, match.player2_score
    if player_id == match.player2_id:
        return match.player2_score, match.player1_score
    raise ValueError(f"Player {player_id} did not play in match {match.id}")


def winning_margin_bonus(match: Match, player_id: str) -> tuple[Decimal, str | None]:
    """+15 for a shutout win, else +10 for a win by 5 or more, else 0."""
    own, opp = side_scores(match, player_id)
    if own <= opp:
        return Decimal("0"), None
    if opp == 0:
        return SHUTOUT_BONUS, "shutout"
    if own - opp >= MARGIN_BONUS_THRESHOLD:
        return MARGIN_BONUS, "margin"
    return Decimal("0"), None


def role_multiplier(is_captain: bool, is_vice_captain: bool) -> tuple[Decimal, str]:
    if is_captain:
        return CAPTAIN_MULTIPLIER, "captain"
    if is_vice_captain:
        return VICE_CAPTAIN_MULTIPLIER, "vice_captain"
    return PLAYER_MULTIPLIER, "player"


def is_knockout_round(round_name: str | None) -> bool:
    if not round_name:
        return False
    name = round_name.lower()
    return any(marker in name for marker in _KNOCKOUT_ROUND_MARKERS)


def score_player(
    perf: Performance,
    match: Match,
    is_captain: bool = False,
    is_vice_captain: bool = False,
    schema: str = "points",
    knockout_multiplier: Decimal = Decimal("1"),
) -> PlayerScore:
    """
    Fantasy points for one rostered player in one completed match.
    The role multiplier applies to base + bonus together.
    """
    base = base_points(perf, schema)
    bonus, bonus_kind = winning_margin_bonus(match, perf.player_id)
    multiplier, role = role_multiplier(is_captain, is_vice_captain)
    knockout = knockout_multiplier if is_knockout_round(match.round) else Decimal("1")
    total = ((base + bonus) * multiplier * knockout).quantize(CENT, rounding=ROUND_HALF_UP)
    # Team totals never go down, so a net-negative detailed line scores zero.
    total = max(total, Decimal("0.00"))
    return PlayerScore(
        points=total,
        breakdown={
            "base": str(base),
            "bonus": str(bonus),
            "bonus_kind": bonus_kind,
            "multiplier": str(multiplier),
            "role": role,
            "knockout_multiplier": str(knockout),
            "schema": schema,
            "total": str(total),
        },
    )


def mvp_bonus(is_captain: bool, is_vice_captain: bool) -> Decimal:
    """MVP award for a team holding the tournament MVP, scaled by that player's role."""
    multiplier, _ = role_multiplier(is_captain, is_vice_captain)
    return (MVP_BONUS_POINTS * multiplier).quantize(CENT, rounding=ROUND_HALF_UP)
