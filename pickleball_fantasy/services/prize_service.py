"""
Prize rules and settlement.
Contest-scoped rules override tournament defaults. Rule sets that do not
sum to 100% are rejected, never adjusted.
"""
from __future__ import annotations

import logging
import sqlite3
from decimal import Decimal

from pickleball_fantasy.config import Settings, get_settings
from pickleball_fantasy.errors import (
    ContestNotCompleted,
    ContestNotFound,
    PrizeRulesInvalid,
    PrizesAlreadyDistributed,
    TournamentNotFound,
)
from pickleball_fantasy.models import (
    Contest,
    ContestStatus,
    PrizeAllocation,
    PrizeDisbursement,
    PrizeRule,
    PrizeScope,
)
from pickleball_fantasy.persistence.db import transaction
from pickleball_fantasy.persistence.repositories import (
    ContestRepository,
    PrizeDisbursementRepository,
    PrizeRuleRepository,
    TeamRepository,
    TournamentRepository,
)
from pickleball_fantasy.prizes import allocate, validate_prize_rules
from pickleball_fantasy.services.ranking_service import RankingService

logger = logging.getLogger(__name__)


class PrizeService:
    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self._contest_repo = ContestRepository()
        self._tournament_repo = TournamentRepository()
        self._team_repo = TeamRepository()
        self._rule_repo = PrizeRuleRepository()
        self._disbursement_repo = PrizeDisbursementRepository()
        self._ranking = RankingService()

    def _contest(self, conn: sqlite3.Connection, contest_id: str) -> Contest:
        contest = self._contest_repo.get(conn, contest_id)
        if contest is None:
            raise ContestNotFound(f"Contest not found: {contest_id}", contest_id=contest_id)
        return contest

    def _check_scope(self, conn: sqlite3.Connection, scope: PrizeScope, scope_id: str) -> None:
        if scope == PrizeScope.CONTEST:
            self._contest(conn, scope_id)
        elif self._tournament_repo.get(conn, scope_id) is None:
            raise TournamentNotFound(f"Tournament not found: {scope_id}", tournament_id=scope_id)

    # ---------- Rules ----------

    def get_prize_rules(self, conn: sqlite3.Connection, scope: PrizeScope, scope_id: str) -> list[PrizeRule]:
        self._check_scope(conn, scope, scope_id)
        return self._rule_repo.list(conn, scope, scope_id)

    def set_prize_rules(
        self, conn: sqlite3.Connection, scope: PrizeScope, scope_id: str, rules: list[PrizeRule]
    ) -> list[PrizeRule]:
        """Validate then replace the whole rule set for the scope."""
        self._check_scope(conn, scope, scope_id)
        validate_prize_rules(rules)
        with transaction(conn):
            self._rule_repo.replace(conn, scope, scope_id, rules)
        logger.info("Prize rules set for %s %s (%d ranks)", scope.value, scope_id, len(rules))
        return self._rule_repo.list(conn, scope, scope_id)

    def effective_rules(self, conn: sqlite3.Connection, contest: Contest) -> list[PrizeRule]:
        rules = self._rule_repo.list(conn, PrizeScope.CONTEST, contest.id)
        if not rules:
            rules = self._rule_repo.list(conn, PrizeScope.TOURNAMENT, contest.tournament_id)
        if not rules:
            raise PrizeRulesInvalid("No prize rules configured for this contest", contest_id=contest.id)
        return rules

    # ---------- Resolution ----------

    def resolve_prizes(
        self,
        conn: sqlite3.Connection,
        contest_id: str,
        prize_rules: list[PrizeRule] | None = None,
        fee_percentage: Decimal | None = None,
    ) -> list[PrizeAllocation]:
        """Payable amounts per rank, net of the payment-processing fee. Read-only apart from rank refresh."""
        contest = self._contest(conn, contest_id)
        rules = prize_rules if prize_rules is not None else self.effective_rules(conn, contest)
        validate_prize_rules(rules)
        fee = fee_percentage if fee_percentage is not None else self._settings.payment_fee_percentage

        teams = self._team_repo.list_by_contest(conn, contest_id)
        if any(t.rank is None for t in teams):
            self._ranking.refresh_ranks(conn, contest_id)
            teams = self._team_repo.list_by_contest(conn, contest_id)
        return allocate(rules, contest.prize_pool, fee, teams)

    def distribute_prizes(self, conn: sqlite3.Connection, contest_id: str) -> list[PrizeDisbursement]:
        """
        Settle a completed contest: persist one PENDING disbursement per allocation
        and mark the contest distributed. Runs once per contest.
        """
        contest = self._contest(conn, contest_id)
        if contest.status != ContestStatus.COMPLETED:
            raise ContestNotCompleted(
                f"Prizes can only be distributed for completed contests (current: {contest.status})",
                contest_id=contest_id,
            )
        if contest.prizes_distributed:
            raise PrizesAlreadyDistributed("Prizes already distributed for this contest", contest_id=contest_id)

        self._ranking.refresh_ranks(conn, contest_id)
        allocations = self.resolve_prizes(conn, contest_id)
        with transaction(conn):
            if not self._contest_repo.mark_prizes_distributed(conn, contest_id):
                raise PrizesAlreadyDistributed("Prizes already distributed for this contest", contest_id=contest_id)
            disbursements = [
                self._disbursement_repo.create(
                    conn, contest_id, a.team_id, a.user_id, a.rank, a.gross_amount, a.fee, a.net_amount
                )
                for a in allocations
            ]
        logger.info(
            "Distributed %d prize(s) for contest %s (net total %s)",
            len(disbursements), contest_id, sum((d.net_amount for d in disbursements), Decimal("0")),
        )
        return disbursements

    def list_disbursements(self, conn: sqlite3.Connection, contest_id: str) -> list[PrizeDisbursement]:
        self._contest(conn, contest_id)
        return self._disbursement_repo.list_by_contest(conn, contest_id)
