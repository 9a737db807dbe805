"""
Persistence layer for fantasy data.
No business logic: read/write interfaces and the transaction boundary.
"""
from .db import get_connection, init_db, transaction, with_retries
from .repositories import (
    TournamentRepository,
    PlayerRepository,
    MatchRepository,
    ContestRepository,
    TeamRepository,
    TeamEditRepository,
    PlayerMatchPointsRepository,
    BonusAwardRepository,
    PrizeRuleRepository,
    PrizeDisbursementRepository,
)

__all__ = [
    "get_connection",
    "init_db",
    "transaction",
    "with_retries",
    "TournamentRepository",
    "PlayerRepository",
    "MatchRepository",
    "ContestRepository",
    "TeamRepository",
    "TeamEditRepository",
    "PlayerMatchPointsRepository",
    "BonusAwardRepository",
    "PrizeRuleRepository",
    "PrizeDisbursementRepository",
]
