"""
Tests for the edit-window state machine and its in-progress gates.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from pickleball_fantasy.edit_window import (
    EditWindowState,
    check_name_edit,
    check_roster_edit,
    players_introduced,
    resolve_edit_window,
    within_change_window,
)
from pickleball_fantasy.errors import (
    EditChangeCountExceeded,
    EditFrequencyExceeded,
    EditWindowClosed,
    TournamentAlreadyEnded,
)
from pickleball_fantasy.models import (
    ChangeFrequency,
    Contest,
    ContestRules,
    EditPhase,
    TeamEdit,
    Tournament,
)

START = datetime(2026, 6, 1, 9, 0, tzinfo=timezone.utc)
END = datetime(2026, 6, 4, 18, 0, tzinfo=timezone.utc)
OLD = ["a", "b", "c", "d", "e", "f", "g"]


def _tournament(status: str = "IN_PROGRESS") -> Tournament:
    return Tournament("t1", "Open", START, END, status)


def _contest(status: str = "IN_PROGRESS", **rules) -> Contest:
    return Contest(
        id="c1", tournament_id="t1", name="Contest", status=status,
        prize_pool=Decimal("1000"), entry_fee=Decimal("10"), max_entries=10, current_entries=1,
        rules=ContestRules(**rules), created_at=START - timedelta(days=5),
    )


def _edit(at: datetime, phase: EditPhase = EditPhase.IN_PROGRESS) -> TeamEdit:
    return TeamEdit(team_id="team", edited_at=at, phase=phase.value, players_changed=1)


# ---------- State resolution ----------


def test_open_full_before_start_regardless_of_rules():
    before = START - timedelta(minutes=1)
    assert resolve_edit_window(before, _tournament("UPCOMING"), _contest(allow_team_changes=False)) == EditWindowState.OPEN_FULL


def test_locked_ended_after_end_even_when_changes_allowed():
    after = END + timedelta(seconds=1)
    assert resolve_edit_window(after, _tournament(), _contest(allow_team_changes=True)) == EditWindowState.LOCKED_ENDED


def test_locked_ended_when_tournament_or_contest_completed():
    mid = START + timedelta(days=1)
    assert resolve_edit_window(mid, _tournament("COMPLETED"), _contest(allow_team_changes=True)) == EditWindowState.LOCKED_ENDED
    assert resolve_edit_window(mid, _tournament(), _contest("COMPLETED", allow_team_changes=True)) == EditWindowState.LOCKED_ENDED


def test_locked_disallowed_and_open_limited():
    mid = START + timedelta(days=1)
    assert resolve_edit_window(mid, _tournament(), _contest()) == EditWindowState.LOCKED_DISALLOWED
    assert resolve_edit_window(mid, _tournament(), _contest(allow_team_changes=True)) == EditWindowState.OPEN_LIMITED


def test_naive_now_treated_as_utc():
    naive = (START - timedelta(hours=1)).replace(tzinfo=None)
    assert resolve_edit_window(naive, _tournament(), _contest()) == EditWindowState.OPEN_FULL


# ---------- Roster edits ----------


def test_pre_tournament_edit_unbounded():
    new = ["h", "i", "j", "k", "l", "m", "n"]
    decision = check_roster_edit(START - timedelta(days=1), _tournament("UPCOMING"), _contest(), OLD, new, [])
    assert decision.phase == EditPhase.PRE_TOURNAMENT
    assert decision.players_changed == 7


def test_edit_after_end_raises_tournament_ended():
    with pytest.raises(TournamentAlreadyEnded):
        check_roster_edit(END + timedelta(hours=1), _tournament(), _contest(allow_team_changes=True), OLD, OLD, [])


def test_edit_when_changes_disallowed_raises_window_closed():
    with pytest.raises(EditWindowClosed):
        check_roster_edit(START + timedelta(hours=1), _tournament(), _contest(), OLD, OLD, [])


def test_time_of_day_window():
    contest = _contest(allow_team_changes=True, change_window_start="18:00", change_window_end="22:00")
    inside = datetime(2026, 6, 2, 18, 0, tzinfo=timezone.utc)
    outside = datetime(2026, 6, 2, 17, 59, tzinfo=timezone.utc)
    assert check_roster_edit(inside, _tournament(), contest, OLD, OLD, []).phase == EditPhase.IN_PROGRESS
    with pytest.raises(EditWindowClosed):
        check_roster_edit(outside, _tournament(), contest, OLD, OLD, [])


def test_time_window_uses_local_timezone():
    contest = _contest(allow_team_changes=True, change_window_start="18:00", change_window_end="22:00")
    # 23:00 UTC is 19:00 in New York (EDT)
    now = datetime(2026, 6, 2, 23, 0, tzinfo=timezone.utc)
    with pytest.raises(EditWindowClosed):
        check_roster_edit(now, _tournament(), contest, OLD, OLD, [], local_tz="UTC")
    check_roster_edit(now, _tournament(), contest, OLD, OLD, [], local_tz="America/New_York")


def test_window_wrapping_midnight():
    local = datetime(2026, 6, 2, 0, 0)
    assert within_change_window(local.replace(hour=23, minute=30), "22:00", "02:00")
    assert within_change_window(local.replace(hour=1, minute=0), "22:00", "02:00")
    assert not within_change_window(local.replace(hour=12), "22:00", "02:00")
    assert within_change_window(local.replace(hour=12), None, None)


def test_once_frequency_allows_single_in_progress_edit():
    contest = _contest(allow_team_changes=True, change_frequency=ChangeFrequency.ONCE)
    now = START + timedelta(days=1)
    pre = [_edit(START - timedelta(days=1), EditPhase.PRE_TOURNAMENT)]
    check_roster_edit(now, _tournament(), contest, OLD, OLD, pre)
    with pytest.raises(EditFrequencyExceeded):
        check_roster_edit(now, _tournament(), contest, OLD, OLD, pre + [_edit(START + timedelta(hours=2))])


def test_daily_unlimited_by_default():
    contest = _contest(allow_team_changes=True, change_frequency=ChangeFrequency.DAILY)
    now = START + timedelta(days=1)
    edits = [_edit(now - timedelta(minutes=i)) for i in range(1, 6)]
    check_roster_edit(now, _tournament(), contest, OLD, OLD, edits)


def test_daily_cap_counts_same_local_day_only():
    contest = _contest(allow_team_changes=True, change_frequency=ChangeFrequency.DAILY, max_changes_per_day=1)
    now = datetime(2026, 6, 3, 10, 0, tzinfo=timezone.utc)
    yesterday = [_edit(datetime(2026, 6, 2, 10, 0, tzinfo=timezone.utc))]
    check_roster_edit(now, _tournament(), contest, OLD, OLD, yesterday)
    with pytest.raises(EditFrequencyExceeded):
        check_roster_edit(now, _tournament(), contest, OLD, OLD, yesterday + [_edit(now - timedelta(hours=1))])


def test_none_frequency_blocks_in_progress_edits():
    contest = _contest(allow_team_changes=True, change_frequency=ChangeFrequency.NONE)
    with pytest.raises(EditWindowClosed):
        check_roster_edit(START + timedelta(hours=1), _tournament(), contest, OLD, OLD, [])


def test_rounds_frequency_permits_and_logs(caplog):
    contest = _contest(allow_team_changes=True, change_frequency=ChangeFrequency.ROUNDS)
    with caplog.at_level("INFO", logger="pickleball_fantasy.edit_window"):
        check_roster_edit(START + timedelta(hours=1), _tournament(), contest, OLD, OLD, [_edit(START)])
    assert "Round-based edit" in caplog.text


def test_change_count_cap():
    contest = _contest(allow_team_changes=True, max_players_to_change=2)
    now = START + timedelta(hours=1)
    two_new = OLD[:5] + ["x", "y"]
    three_new = OLD[:4] + ["x", "y", "z"]
    assert check_roster_edit(now, _tournament(), contest, OLD, two_new, []).players_changed == 2
    with pytest.raises(EditChangeCountExceeded):
        check_roster_edit(now, _tournament(), contest, OLD, three_new, [])


def test_captaincy_swap_introduces_no_players():
    assert players_introduced(OLD, list(reversed(OLD))) == 0


def test_name_edit_allowed_until_end():
    assert check_name_edit(START + timedelta(hours=1), _tournament(), _contest()) == EditWindowState.LOCKED_DISALLOWED
    with pytest.raises(TournamentAlreadyEnded):
        check_name_edit(END + timedelta(hours=1), _tournament(), _contest())
