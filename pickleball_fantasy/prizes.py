"""
Prize math: rule validation and gross/fee/net amounts.
Pure functions over Decimal; persistence lives in services.prize_service.
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Mapping

from pickleball_fantasy.errors import PrizeRulesInvalid
from pickleball_fantasy.models import CENT, FantasyTeam, PrizeAllocation, PrizeRule

HUNDRED = Decimal("100")
SUM_TOLERANCE = Decimal("0.01")


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_prize_rules(raw: Iterable[Mapping[str, Any]]) -> list[PrizeRule]:
    """Build PrizeRule objects from request payloads (camelCase or snake_case)."""
    rules = []
    for item in raw:
        try:
            rules.append(PrizeRule(
                rank=int(item["rank"]),
                percentage=Decimal(str(item["percentage"])),
                min_players=int(item.get("min_players", item.get("minPlayers", 0)) or 0),
            ))
        except (KeyError, TypeError, ValueError, ArithmeticError) as e:
            raise PrizeRulesInvalid(f"Malformed prize rule {dict(item)!r}: {e}") from e
    return rules


def validate_prize_rules(rules: list[PrizeRule]) -> None:
    """Reject, never adjust: ranks >= 1 and unique, each percentage in (0, 100], total 100 +/- 0.01."""
    if not rules:
        raise PrizeRulesInvalid("At least one prize rule is required")
    seen: set[int] = set()
    for rule in rules:
        if rule.rank < 1:
            raise PrizeRulesInvalid(f"Prize rank must be at least 1 (got {rule.rank})", rank=rule.rank)
        if rule.rank in seen:
            raise PrizeRulesInvalid(f"Duplicate prize rank {rule.rank}", rank=rule.rank)
        seen.add(rule.rank)
        if rule.percentage <= 0 or rule.percentage > HUNDRED:
            raise PrizeRulesInvalid(
                f"Prize percentage for rank {rule.rank} must be between 0 and 100",
                rank=rule.rank,
                percentage=str(rule.percentage),
            )
        if rule.min_players < 0:
            raise PrizeRulesInvalid(f"min_players for rank {rule.rank} cannot be negative", rank=rule.rank)
    total = sum((r.percentage for r in rules), Decimal("0"))
    if abs(total - HUNDRED) > SUM_TOLERANCE:
        raise PrizeRulesInvalid(
            f"Prize percentages must sum to 100 (got {total})",
            total_percentage=str(total),
        )


def compute_amounts(prize_pool: Decimal, percentage: Decimal, fee_percentage: Decimal) -> tuple[Decimal, Decimal, Decimal]:
    """(gross, fee, net), each rounded half-up to cents. net = gross - fee exactly."""
    gross = _money(prize_pool * percentage / HUNDRED)
    fee = _money(gross * fee_percentage / HUNDRED)
    return gross, fee, gross - fee


def allocate(
    rules: list[PrizeRule],
    prize_pool: Decimal,
    fee_percentage: Decimal,
    ranked_teams: list[FantasyTeam],
) -> list[PrizeAllocation]:
    """
    One allocation per rule whose tier is unlocked and whose rank has a holder.
    ranked_teams must already carry ranks from the ranking pass.
    """
    participants = len(ranked_teams)
    by_rank = {t.rank: t for t in ranked_teams if t.rank is not None}
    allocations = []
    for rule in sorted(rules, key=lambda r: r.rank):
        if participants < rule.min_players:
            continue
        team = by_rank.get(rule.rank)
        if team is None:
            continue
        gross, fee, net = compute_amounts(prize_pool, rule.percentage, fee_percentage)
        allocations.append(PrizeAllocation(
            rank=rule.rank,
            team_id=team.id,
            user_id=team.user_id,
            percentage=rule.percentage,
            gross_amount=gross,
            fee=fee,
            net_amount=net,
        ))
    return allocations
