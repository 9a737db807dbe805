"""
Roster validation for fantasy teams.
Pure functions: no persistence. Every broken rule is reported, not just the first.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable, Mapping

from pickleball_fantasy.errors import (
    BudgetExceeded,
    CaptainRequired,
    CaptainViceCaptainSame,
    DuplicatePlayerInRoster,
    RosterError,
    RosterSizeInvalid,
    ViceCaptainRequired,
)
from pickleball_fantasy.models import ContestRules, Player

# ---------- Pricing ----------
RANK_PRICE_NUMERATOR = Decimal("1000")
MIN_PLAYER_PRICE = Decimal("500")


def rank_based_price(rank: int | None) -> Decimal:
    """max(1000 / rank, 500); unranked players cost the floor price."""
    if rank is None or rank <= 0:
        return MIN_PLAYER_PRICE
    return max(RANK_PRICE_NUMERATOR / Decimal(rank), MIN_PLAYER_PRICE)


def player_cost(player: Player, rules: ContestRules) -> Decimal:
    """
    Cost of a player in a given contest.
    Explicit player price wins, then the contest's skill-level category price,
    then the rank-derived price.
    """
    if player.price is not None:
        return player.price
    if player.skill_level:
        for category in rules.player_categories:
            if category.skill_level == player.skill_level:
                return category.price
    return rank_based_price(player.rank)


def costs_for_players(players: Iterable[Player], rules: ContestRules) -> dict[str, Decimal]:
    return {p.id: player_cost(p, rules) for p in players}


# ---------- Validation ----------


@dataclass(frozen=True)
class RosterSelection:
    """One pick in a candidate roster."""
    player_id: str
    is_captain: bool = False
    is_vice_captain: bool = False


@dataclass(frozen=True)
class RosterViolation:
    kind: str  # size | single-captain | single-vice-captain | distinct-roles | budget | duplicate-entry
    message: str
    detail: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message, **self.detail}


@dataclass
class ValidationResult:
    violations: list[RosterViolation] = field(default_factory=list)
    total_cost: Decimal = Decimal("0")

    @property
    def ok(self) -> bool:
        return not self.violations

    def kinds(self) -> list[str]:
        return [v.kind for v in self.violations]


def validate_roster(
    selections: list[RosterSelection],
    rules: ContestRules,
    costs: Mapping[str, Decimal],
) -> ValidationResult:
    """
    Check a candidate roster against the contest rules.
    costs maps player id -> price in this contest (see player_cost).
    """
    result = ValidationResult()
    violations = result.violations

    if len(selections) != rules.team_size:
        violations.append(RosterViolation(
            "size",
            f"Team must have exactly {rules.team_size} players",
            {"expected": rules.team_size, "actual": len(selections)},
        ))

    captains = [s.player_id for s in selections if s.is_captain]
    if len(captains) != 1:
        violations.append(RosterViolation(
            "single-captain",
            "Team must have exactly one captain",
            {"captains": len(captains)},
        ))

    vices = [s.player_id for s in selections if s.is_vice_captain]
    if len(vices) != 1:
        violations.append(RosterViolation(
            "single-vice-captain",
            "Team must have exactly one vice-captain",
            {"vice_captains": len(vices)},
        ))

    both = [s.player_id for s in selections if s.is_captain and s.is_vice_captain]
    if both or (len(captains) == 1 and len(vices) == 1 and captains[0] == vices[0]):
        violations.append(RosterViolation(
            "distinct-roles",
            "Captain and vice-captain must be different players",
            {"player_ids": sorted(set(both) or {captains[0]})},
        ))

    seen: set[str] = set()
    duplicates: set[str] = set()
    for s in selections:
        if s.player_id in seen:
            duplicates.add(s.player_id)
        seen.add(s.player_id)
    if duplicates:
        violations.append(RosterViolation(
            "duplicate-entry",
            "A player can only be selected once",
            {"player_ids": sorted(duplicates)},
        ))

    total = sum((costs[pid] for pid in seen if pid in costs), Decimal("0"))
    result.total_cost = total
    if total > rules.wallet_size:
        violations.append(RosterViolation(
            "budget",
            f"Total player cost {total} exceeds wallet size {rules.wallet_size}",
            {"total_cost": str(total), "wallet_size": str(rules.wallet_size)},
        ))

    return result


_VIOLATION_ERRORS: dict[str, type[RosterError]] = {
    "size": RosterSizeInvalid,
    "single-captain": CaptainRequired,
    "single-vice-captain": ViceCaptainRequired,
    "distinct-roles": CaptainViceCaptainSame,
    "duplicate-entry": DuplicatePlayerInRoster,
    "budget": BudgetExceeded,
}


def raise_for_result(result: ValidationResult) -> None:
    """Raise the error for the first violation, carrying all of them."""
    if result.ok:
        return
    first = result.violations[0]
    error_cls = _VIOLATION_ERRORS[first.kind]
    raise error_cls(
        "; ".join(v.message for v in result.violations),
        violations=[v.to_dict() for v in result.violations],
    )
