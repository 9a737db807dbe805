"""
Service layer: team lifecycle, scoring pipeline, rankings, prize settlement.
Services load inputs through repositories, call the pure rule modules and own the transaction boundary.
"""
from .team_service import TeamService
from .ranking_service import RankingService
from .scoring_service import MatchScoringReport, ScoringService
from .prize_service import PrizeService

__all__ = [
    "TeamService",
    "RankingService",
    "ScoringService",
    "MatchScoringReport",
    "PrizeService",
]
