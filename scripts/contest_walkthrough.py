#!/usr/bin/env python3
"""
Contest walkthrough: seed tournament → enter two teams → complete a match →
score → rank → settle prizes.
Run from project root: python3 scripts/contest_walkthrough.py
"""
from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

# Ensure project root on path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from pickleball_fantasy.logging_config import setup_logging
from pickleball_fantasy.models import Performance, PrizeRule, PrizeScope
from pickleball_fantasy.persistence import (
    ContestRepository,
    MatchRepository,
    PlayerRepository,
    TournamentRepository,
    get_connection,
    init_db,
)
from pickleball_fantasy.persistence.db import set_db_path
from pickleball_fantasy.roster import RosterSelection
from pickleball_fantasy.services import PrizeService, RankingService, ScoringService, TeamService


def main() -> None:
    setup_logging()
    # Fresh demo DB each run (distinct from the API's fantasy.db)
    db_path = PROJECT_ROOT / "data" / "walkthrough.db"
    for suffix in ("", "-wal", "-shm"):
        Path(f"{db_path}{suffix}").unlink(missing_ok=True)
    set_db_path(db_path)
    init_db(db_path=db_path)

    conn = get_connection()
    try:
        now = datetime.now(timezone.utc)

        # 1. Platform data: tournament, players, contest
        tournament = TournamentRepository().create(
            conn, "Desert Smash Open", now + timedelta(days=1), now + timedelta(days=4)
        )
        player_repo = PlayerRepository()
        players = [player_repo.create(conn, f"Seed {i}", rank=i, skill_level="5.0") for i in range(1, 10)]
        contest = ContestRepository().create(
            conn, tournament.id, "Desert Smash Main", max_entries=50,
            prize_pool=Decimal("10000"), entry_fee=Decimal("200"),
            rules={"teamSize": 7, "walletSize": 100000, "allowTeamChanges": True, "changeFrequency": "once"},
        )
        print(f"Tournament {tournament.name} starts {tournament.start_date:%Y-%m-%d}; contest {contest.id}")

        # 2. Two users enter before the tournament starts
        teams = TeamService(clock=lambda: now)
        team_a = teams.create_team(conn, "demo-alice", contest.id, "Third Shot Drop", [
            RosterSelection(p.id, is_captain=(i == 0), is_vice_captain=(i == 1)) for i, p in enumerate(players[:7])
        ])
        team_b = teams.create_team(conn, "demo-bob", contest.id, "Kitchen Kings", [
            RosterSelection(p.id, is_captain=(i == 6), is_vice_captain=(i == 0)) for i, p in enumerate(players[2:9])
        ])
        print(f"Created team A: {team_a.name} (id={team_a.id})")
        print(f"Created team B: {team_b.name} (id={team_b.id})")

        # 3. Tournament underway; a match completes
        TournamentRepository().update_status(conn, tournament.id, "IN_PROGRESS")
        ContestRepository().update_status(conn, contest.id, "IN_PROGRESS")
        match_repo = MatchRepository()
        match = match_repo.create(conn, tournament.id, players[0].id, players[8].id, round="Quarterfinal")
        match_repo.complete(conn, match.id, 11, 0, [
            Performance(match.id, players[0].id, Decimal("12")),
            Performance(match.id, players[8].id, Decimal("4")),
        ])

        # 4. Score it (twice, to show redelivery is harmless)
        scoring = ScoringService()
        report = scoring.apply_match_by_id(conn, match.id)
        print(f"Scored match {match.id}: {report.results}")
        print(f"  Deltas: { {t: str(d) for t, d in report.deltas.items()} }")
        print(f"  Redelivery: {scoring.apply_match_by_id(conn, match.id).results}")

        # 5. Standings
        board = RankingService().leaderboard(conn, contest.id)
        for entry in board["entries"]:
            print(f"  #{entry['rank']} {entry['team_name']}: {entry['total_points']}")

        # 6. Settle
        prizes = PrizeService()
        prizes.set_prize_rules(conn, PrizeScope.CONTEST, contest.id, [
            PrizeRule(rank=1, percentage=Decimal("70")),
            PrizeRule(rank=2, percentage=Decimal("30")),
        ])
        TournamentRepository().update_status(conn, tournament.id, "COMPLETED")
        ContestRepository().update_status(conn, contest.id, "COMPLETED")
        for d in prizes.distribute_prizes(conn, contest.id):
            print(f"  Rank {d.rank}: gross {d.amount}, fee {d.processing_fee}, net {d.net_amount} -> {d.user_id}")

        print("\nContest walkthrough complete.")
    finally:
        conn.close()


if __name__ == "__main__":
    main()
