"""
Tests for roster validation and player pricing.
"""
from __future__ import annotations

from decimal import Decimal
from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from pickleball_fantasy.errors import (
    BudgetExceeded,
    CaptainRequired,
    CaptainViceCaptainSame,
    RosterSizeInvalid,
)
from pickleball_fantasy.models import ContestRules, Player, PlayerCategory
from pickleball_fantasy.roster import (
    RosterSelection,
    player_cost,
    raise_for_result,
    rank_based_price,
    validate_roster,
)


def _picks(n: int, captain: int | None = 0, vice: int | None = 1) -> list[RosterSelection]:
    return [RosterSelection(f"p{i}", is_captain=(i == captain), is_vice_captain=(i == vice)) for i in range(n)]


def _costs(n: int, each: str = "1000") -> dict[str, Decimal]:
    return {f"p{i}": Decimal(each) for i in range(n)}


def test_valid_roster_passes():
    result = validate_roster(_picks(7), ContestRules(), _costs(7))
    assert result.ok
    assert result.total_cost == Decimal("7000")


def test_size_must_match_exactly():
    result = validate_roster(_picks(6), ContestRules(), _costs(6))
    assert result.kinds() == ["size"]
    result = validate_roster(_picks(8), ContestRules(), _costs(8))
    assert "size" in result.kinds()


def test_missing_captain_and_vice():
    result = validate_roster(_picks(7, captain=None, vice=None), ContestRules(), _costs(7))
    assert result.kinds() == ["single-captain", "single-vice-captain"]


def test_two_captains_rejected():
    picks = _picks(7)
    picks[2] = RosterSelection("p2", is_captain=True)
    result = validate_roster(picks, ContestRules(), _costs(7))
    assert "single-captain" in result.kinds()


def test_captain_and_vice_same_player():
    picks = _picks(7, captain=0, vice=None)
    picks[0] = RosterSelection("p0", is_captain=True, is_vice_captain=True)
    result = validate_roster(picks, ContestRules(), _costs(7))
    assert "distinct-roles" in result.kinds()
    assert "single-captain" not in result.kinds()
    assert "single-vice-captain" not in result.kinds()


def test_duplicate_player():
    picks = _picks(7)
    picks[6] = RosterSelection("p5")
    result = validate_roster(picks, ContestRules(), _costs(7))
    assert "duplicate-entry" in result.kinds()
    dup = next(v for v in result.violations if v.kind == "duplicate-entry")
    assert dup.detail["player_ids"] == ["p5"]


def test_budget_exceeded_reports_totals():
    rules = ContestRules(wallet_size=Decimal("6999"))
    result = validate_roster(_picks(7), rules, _costs(7))
    assert result.kinds() == ["budget"]
    assert result.violations[0].detail == {"total_cost": "7000", "wallet_size": "6999"}


def test_budget_exactly_at_wallet_is_ok():
    rules = ContestRules(wallet_size=Decimal("7000"))
    assert validate_roster(_picks(7), rules, _costs(7)).ok


def test_all_violations_collected():
    rules = ContestRules(wallet_size=Decimal("10"))
    result = validate_roster(_picks(3, captain=None), rules, _costs(3))
    assert set(result.kinds()) == {"size", "single-captain", "budget"}


def test_raise_for_result_uses_first_violation_and_carries_all():
    result = validate_roster(_picks(6, captain=None), ContestRules(), _costs(6))
    with pytest.raises(RosterSizeInvalid) as exc:
        raise_for_result(result)
    kinds = [v["kind"] for v in exc.value.violations]
    assert kinds == ["size", "single-captain"]
    assert exc.value.to_dict()["kind"] == "RosterSizeInvalid"


def test_raise_for_result_error_types():
    with pytest.raises(CaptainRequired):
        raise_for_result(validate_roster(_picks(7, captain=None), ContestRules(), _costs(7)))
    picks = _picks(7, vice=None)
    picks[0] = RosterSelection("p0", is_captain=True, is_vice_captain=True)
    with pytest.raises(CaptainViceCaptainSame):
        raise_for_result(validate_roster(picks, ContestRules(), _costs(7)))
    with pytest.raises(BudgetExceeded):
        raise_for_result(validate_roster(_picks(7), ContestRules(wallet_size=Decimal("1")), _costs(7)))


def test_raise_for_result_passes_on_valid():
    raise_for_result(validate_roster(_picks(7), ContestRules(), _costs(7)))


# ---------- Pricing ----------


def test_rank_based_price():
    assert rank_based_price(1) == Decimal("1000")
    assert rank_based_price(2) == Decimal("500")
    assert rank_based_price(4) == Decimal("500")
    assert rank_based_price(None) == Decimal("500")


def test_player_cost_precedence():
    rules = ContestRules(player_categories=(PlayerCategory("Pro", "5.0", Decimal("15000")),))
    explicit = Player("a", "A", rank=1, skill_level="5.0", price=Decimal("20000"))
    by_category = Player("b", "B", rank=1, skill_level="5.0")
    by_rank = Player("c", "C", rank=1, skill_level="3.5")
    assert player_cost(explicit, rules) == Decimal("20000")
    assert player_cost(by_category, rules) == Decimal("15000")
    assert player_cost(by_rank, rules) == Decimal("1000")


def test_rules_blob_defaults_and_aliases():
    assert ContestRules.from_blob(None).team_size == 7
    assert ContestRules.from_blob(None).wallet_size == Decimal("100000")
    rules = ContestRules.from_blob(
        '{"fantasyTeamSize": 5, "walletSize": 5000, "changeFrequency": "matchday", "changeWindowStart": "18:00"}'
    )
    assert rules.team_size == 5
    assert rules.wallet_size == Decimal("5000")
    assert rules.change_frequency.value == "ROUNDS"
    assert rules.change_window_start == "18:00"


def test_rules_blob_rejects_bad_time():
    with pytest.raises(ValueError):
        ContestRules.from_blob({"changeWindowStart": "25:00"})
