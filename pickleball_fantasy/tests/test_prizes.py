"""
Tests for prize rule validation, amount math, resolution and distribution.
"""
from __future__ import annotations

from decimal import Decimal
from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from pickleball_fantasy.errors import (
    ContestNotCompleted,
    PrizeRulesInvalid,
    PrizesAlreadyDistributed,
)
from pickleball_fantasy.models import PrizeRule, PrizeScope
from pickleball_fantasy.persistence.repositories import ContestRepository, TeamRepository
from pickleball_fantasy.prizes import compute_amounts, parse_prize_rules, validate_prize_rules
from pickleball_fantasy.services.prize_service import PrizeService
from pickleball_fantasy.services.team_service import TeamService

from conftest import NOW


def _rules(*pairs) -> list[PrizeRule]:
    return [PrizeRule(rank=r, percentage=Decimal(p)) for r, p in pairs]


# ---------- Pure math ----------


def test_rules_summing_to_99_rejected():
    with pytest.raises(PrizeRulesInvalid) as exc:
        validate_prize_rules(_rules((1, "60"), (2, "39")))
    assert exc.value.detail["total_percentage"] == "99"


def test_rules_within_tolerance_accepted():
    validate_prize_rules(_rules((1, "50"), (2, "30"), (3, "20.01")))
    validate_prize_rules(_rules((1, "33.33"), (2, "33.33"), (3, "33.33")))


def test_duplicate_rank_and_bad_percentage_rejected():
    with pytest.raises(PrizeRulesInvalid):
        validate_prize_rules(_rules((1, "50"), (1, "50")))
    with pytest.raises(PrizeRulesInvalid):
        validate_prize_rules(_rules((1, "110"), (2, "-10")))
    with pytest.raises(PrizeRulesInvalid):
        validate_prize_rules([])


def test_net_amount_after_fee():
    gross, fee, net = compute_amounts(Decimal("10000"), Decimal("50"), Decimal("2.36"))
    assert gross == Decimal("5000.00")
    assert fee == Decimal("118.00")
    assert net == Decimal("4882.00")
    assert str(net) == "4882.00"


def test_amounts_round_half_up_to_cents():
    gross, fee, net = compute_amounts(Decimal("333.33"), Decimal("33.33"), Decimal("2.36"))
    assert gross == Decimal("111.10")  # 111.098889
    assert fee == Decimal("2.62")  # 2.62196
    assert net == Decimal("108.48")


def test_parse_prize_rules_accepts_camel_case():
    rules = parse_prize_rules([{"rank": 1, "percentage": "100", "minPlayers": 3}])
    assert rules == [PrizeRule(rank=1, percentage=Decimal("100"), min_players=3)]
    with pytest.raises(PrizeRulesInvalid):
        parse_prize_rules([{"percentage": "100"}])


# ---------- Service ----------


@pytest.fixture
def finished_contest(db_conn, seed, roster_of):
    """Three teams with distinct totals, ranked; prize pool 10000."""
    tournament = seed.tournament()
    players = seed.players(7)
    contest = seed.contest(tournament, prize_pool=Decimal("10000"))
    teams = [
        TeamService(clock=lambda: NOW).create_team(db_conn, user, contest.id, f"Team {user}", roster_of(players))
        for user in ("ann", "ben", "cat")
    ]
    repo = TeamRepository()
    for team, pts in zip(teams, ("30", "20", "10")):
        repo.add_points(db_conn, team.id, Decimal(pts))
    return tournament, contest, teams


def test_resolve_prizes_with_explicit_rules(db_conn, finished_contest):
    _, contest, (ann, ben, _) = finished_contest
    allocations = PrizeService().resolve_prizes(
        db_conn, contest.id, prize_rules=_rules((1, "50"), (2, "30"), (3, "20")), fee_percentage=Decimal("2.36")
    )
    assert [(a.rank, a.team_id) for a in allocations][:2] == [(1, ann.id), (2, ben.id)]
    assert allocations[0].net_amount == Decimal("4882.00")
    assert allocations[1].gross_amount == Decimal("3000.00")
    assert allocations[1].fee == Decimal("70.80")
    assert allocations[1].net_amount == Decimal("2929.20")


def test_resolve_refreshes_missing_ranks(db_conn, finished_contest):
    _, contest, teams = finished_contest
    assert all(TeamRepository().get(db_conn, t.id).rank is None for t in teams)
    PrizeService().resolve_prizes(db_conn, contest.id, prize_rules=_rules((1, "100")))
    assert TeamRepository().get(db_conn, teams[0].id).rank == 1


def test_min_players_tier_and_empty_ranks_skipped(db_conn, finished_contest):
    _, contest, _ = finished_contest
    rules = [
        PrizeRule(rank=1, percentage=Decimal("60")),
        PrizeRule(rank=2, percentage=Decimal("25"), min_players=5),
        PrizeRule(rank=4, percentage=Decimal("15")),
    ]
    allocations = PrizeService().resolve_prizes(db_conn, contest.id, prize_rules=rules)
    assert [a.rank for a in allocations] == [1]


def test_fee_defaults_to_configured_rate(db_conn, finished_contest):
    _, contest, _ = finished_contest
    allocations = PrizeService().resolve_prizes(db_conn, contest.id, prize_rules=_rules((1, "50"), (2, "50")))
    assert allocations[0].fee == Decimal("118.00")


def test_contest_rules_override_tournament_defaults(db_conn, finished_contest):
    tournament, contest, (ann, ben, _) = finished_contest
    service = PrizeService()
    service.set_prize_rules(db_conn, PrizeScope.TOURNAMENT, tournament.id, _rules((1, "100")))
    assert [a.rank for a in service.resolve_prizes(db_conn, contest.id)] == [1]

    service.set_prize_rules(db_conn, PrizeScope.CONTEST, contest.id, _rules((1, "70"), (2, "30")))
    allocations = service.resolve_prizes(db_conn, contest.id)
    assert [(a.rank, a.team_id) for a in allocations] == [(1, ann.id), (2, ben.id)]
    assert service.get_prize_rules(db_conn, PrizeScope.CONTEST, contest.id)[0].percentage == Decimal("70")


def test_set_prize_rules_rejects_bad_sum_and_keeps_old(db_conn, finished_contest):
    _, contest, _ = finished_contest
    service = PrizeService()
    service.set_prize_rules(db_conn, PrizeScope.CONTEST, contest.id, _rules((1, "100")))
    with pytest.raises(PrizeRulesInvalid):
        service.set_prize_rules(db_conn, PrizeScope.CONTEST, contest.id, _rules((1, "60"), (2, "39")))
    assert service.get_prize_rules(db_conn, PrizeScope.CONTEST, contest.id) == _rules((1, "100"))


def test_resolve_rejects_rules_summing_to_99(db_conn, finished_contest):
    _, contest, _ = finished_contest
    with pytest.raises(PrizeRulesInvalid):
        PrizeService().resolve_prizes(
            db_conn, contest.id, prize_rules=_rules((1, "50"), (2, "30"), (3, "19"))
        )


def test_no_rules_configured(db_conn, finished_contest):
    _, contest, _ = finished_contest
    with pytest.raises(PrizeRulesInvalid):
        PrizeService().resolve_prizes(db_conn, contest.id)


def test_distribute_prizes_once(db_conn, seed, finished_contest):
    _, contest, (ann, _, _) = finished_contest
    service = PrizeService()
    service.set_prize_rules(db_conn, PrizeScope.CONTEST, contest.id, _rules((1, "50"), (2, "30"), (3, "20")))
    with pytest.raises(ContestNotCompleted):
        service.distribute_prizes(db_conn, contest.id)

    seed.set_contest_status(contest, "COMPLETED")
    disbursements = service.distribute_prizes(db_conn, contest.id)

    assert len(disbursements) == 3
    assert disbursements[0].team_id == ann.id
    assert disbursements[0].net_amount == Decimal("4882.00")
    assert all(d.status == "PENDING" for d in disbursements)
    assert ContestRepository().get(db_conn, contest.id).prizes_distributed is True
    assert [d.rank for d in service.list_disbursements(db_conn, contest.id)] == [1, 2, 3]
    with pytest.raises(PrizesAlreadyDistributed):
        service.distribute_prizes(db_conn, contest.id)
