"""
Edit-window policy: decides whether and how a fantasy team may be changed.

States:
  OPEN_FULL          tournament not started; any valid roster replacement
  OPEN_LIMITED       tournament running and the contest allows changes; gated
                     by time-of-day window, change frequency and change count
  LOCKED_ENDED       tournament over or contest/tournament completed
  LOCKED_DISALLOWED  tournament running, contest does not allow changes
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, time, timezone, tzinfo
from enum import Enum
from typing import Iterable
from zoneinfo import ZoneInfo

from pickleball_fantasy.errors import (
    EditChangeCountExceeded,
    EditFrequencyExceeded,
    EditWindowClosed,
    TournamentAlreadyEnded,
)
from pickleball_fantasy.models import (
    ChangeFrequency,
    Contest,
    ContestStatus,
    EditPhase,
    TeamEdit,
    Tournament,
    TournamentStatus,
)

logger = logging.getLogger(__name__)


class EditWindowState(str, Enum):
    OPEN_FULL = "OPEN_FULL"
    OPEN_LIMITED = "OPEN_LIMITED"
    LOCKED_ENDED = "LOCKED_ENDED"
    LOCKED_DISALLOWED = "LOCKED_DISALLOWED"


@dataclass(frozen=True)
class EditDecision:
    """A permitted roster edit: which phase it falls in and how many players it introduces."""
    state: EditWindowState
    phase: EditPhase
    players_changed: int


def _aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


def resolve_edit_window(now: datetime, tournament: Tournament, contest: Contest) -> EditWindowState:
    now = _aware(now)
    if now < _aware(tournament.start_date):
        return EditWindowState.OPEN_FULL
    if (
        now > _aware(tournament.end_date)
        or tournament.status == TournamentStatus.COMPLETED
        or contest.status == ContestStatus.COMPLETED
    ):
        return EditWindowState.LOCKED_ENDED
    if not contest.rules.allow_team_changes:
        return EditWindowState.LOCKED_DISALLOWED
    return EditWindowState.OPEN_LIMITED


def players_introduced(old_player_ids: Iterable[str], new_player_ids: Iterable[str]) -> int:
    """Players present in the new roster but not in the old one."""
    return len(set(new_player_ids) - set(old_player_ids))


def _hhmm(s: str) -> time:
    hours, minutes = s.split(":")
    return time(int(hours), int(minutes))


def within_change_window(local_now: datetime, start: str | None, end: str | None) -> bool:
    """
    Inclusive HH:MM window on local time of day. A window whose start is after
    its end wraps past midnight. A missing bound is open on that side.
    """
    if start is None and end is None:
        return True
    t = local_now.time().replace(second=0, microsecond=0)
    if start is None:
        return t <= _hhmm(end)
    if end is None:
        return t >= _hhmm(start)
    lo, hi = _hhmm(start), _hhmm(end)
    if lo <= hi:
        return lo <= t <= hi
    return t >= lo or t <= hi


def check_name_edit(now: datetime, tournament: Tournament, contest: Contest) -> EditWindowState:
    """Renames are allowed until the tournament is over."""
    state = resolve_edit_window(now, tournament, contest)
    if state == EditWindowState.LOCKED_ENDED:
        raise TournamentAlreadyEnded("Cannot edit team after tournament has ended", tournament_id=tournament.id)
    return state


def check_edit_allowed(now: datetime, tournament: Tournament, contest: Contest) -> EditWindowState:
    """Reject roster edits in the locked states, before the roster itself is looked at."""
    state = resolve_edit_window(now, tournament, contest)
    if state == EditWindowState.LOCKED_ENDED:
        raise TournamentAlreadyEnded("Cannot edit team after tournament has ended", tournament_id=tournament.id)
    if state == EditWindowState.LOCKED_DISALLOWED:
        raise EditWindowClosed("Team changes are not allowed during this tournament", contest_id=contest.id)
    return state


def check_roster_edit(
    now: datetime,
    tournament: Tournament,
    contest: Contest,
    old_player_ids: Iterable[str],
    new_player_ids: Iterable[str],
    prior_edits: list[TeamEdit],
    local_tz: tzinfo | str = "UTC",
) -> EditDecision:
    """
    Authorize replacing a team's roster. prior_edits is the team's edit log.
    Raises the specific edit error on rejection.
    """
    rules = contest.rules
    changed = players_introduced(old_player_ids, new_player_ids)
    state = check_edit_allowed(now, tournament, contest)

    if state == EditWindowState.OPEN_FULL:
        return EditDecision(state, EditPhase.PRE_TOURNAMENT, changed)

    tz = ZoneInfo(local_tz) if isinstance(local_tz, str) else local_tz
    local_now = _aware(now).astimezone(tz)

    if not within_change_window(local_now, rules.change_window_start, rules.change_window_end):
        raise EditWindowClosed(
            f"Team changes are only allowed between {rules.change_window_start or '00:00'} "
            f"and {rules.change_window_end or '23:59'}",
            window_start=rules.change_window_start,
            window_end=rules.change_window_end,
        )

    in_progress = [e for e in prior_edits if e.phase == EditPhase.IN_PROGRESS]
    frequency = rules.change_frequency
    if frequency == ChangeFrequency.NONE:
        raise EditWindowClosed("This contest does not permit changes once the tournament starts", contest_id=contest.id)
    if frequency == ChangeFrequency.ONCE and in_progress:
        raise EditFrequencyExceeded(
            "You can only change your team once during the tournament",
            change_frequency=frequency.value,
        )
    if frequency == ChangeFrequency.DAILY and rules.max_changes_per_day is not None:
        today = local_now.date()
        used = sum(1 for e in in_progress if _aware(e.edited_at).astimezone(tz).date() == today)
        if used >= rules.max_changes_per_day:
            raise EditFrequencyExceeded(
                f"You can only change your team {rules.max_changes_per_day} time(s) per day",
                change_frequency=frequency.value,
                changes_today=used,
            )
    if frequency == ChangeFrequency.ROUNDS:
        logger.info("Round-based edit permitted for contest %s (round limits not enforced)", contest.id)

    if changed > rules.max_players_to_change:
        raise EditChangeCountExceeded(
            f"You can only change up to {rules.max_players_to_change} players",
            max_players_to_change=rules.max_players_to_change,
            players_changed=changed,
        )
    return EditDecision(state, EditPhase.IN_PROGRESS, changed)
