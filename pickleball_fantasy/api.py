"""
REST API for the pickleball fantasy engine.
Thin wrappers around the services; domain errors map to their HTTP status,
infrastructure errors are retried a bounded number of times then answered with 503.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager, contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, AsyncGenerator, Callable, Generator, TypeVar

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field

from pickleball_fantasy.auth import decode_token
from pickleball_fantasy.config import get_settings
from pickleball_fantasy.errors import FantasyError, InfrastructureError
from pickleball_fantasy.logging_config import setup_logging
from pickleball_fantasy.models import PrizeScope
from pickleball_fantasy.persistence import get_connection, init_db, with_retries
from pickleball_fantasy.persistence.db import get_db_path
from pickleball_fantasy.prizes import parse_prize_rules
from pickleball_fantasy.roster import RosterSelection
from pickleball_fantasy.services import PrizeService, RankingService, ScoringService, TeamService

logger = logging.getLogger(__name__)

T = TypeVar("T")


@contextmanager
def db_conn() -> Generator:
    """Yield a DB connection, ensure close on exit."""
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


def _call(fn: Callable[[], T]) -> T:
    """Run a unit of work with retries and translate errors to HTTP."""
    try:
        return with_retries(fn)
    except FantasyError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_dict()) from e
    except InfrastructureError as e:
        logger.error("Giving up after retries: %s", e)
        raise HTTPException(
            status_code=e.status_code,
            detail={"kind": e.kind, "message": str(e), "retryable": True},
        ) from e


# ---------- Lifespan ----------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging(get_settings().log_level)
    init_db(db_path=get_db_path())
    yield


# ---------- FastAPI app ----------
app = FastAPI(
    title="Pickleball Fantasy API",
    description="Fantasy teams, match scoring, rankings and prize settlement",
    version="0.1.0",
    lifespan=lifespan,
)

security = HTTPBearer(auto_error=False)


# ---------- Request models ----------


class RosterPick(BaseModel):
    player_id: str
    is_captain: bool = False
    is_vice_captain: bool = False

    def to_selection(self) -> RosterSelection:
        return RosterSelection(self.player_id, self.is_captain, self.is_vice_captain)


class CreateTeamRequest(BaseModel):
    user_id: str | None = Field(None, description="Used when no bearer token is sent")
    name: str = Field(..., min_length=1, max_length=200)
    roster: list[RosterPick]


class UpdateTeamRequest(BaseModel):
    user_id: str | None = Field(None, description="Used when no bearer token is sent")
    name: str | None = Field(None, min_length=1, max_length=200)
    roster: list[RosterPick] | None = None


class PrizeRuleIn(BaseModel):
    rank: int
    percentage: Decimal
    min_players: int = Field(0, ge=0)


class SetPrizeRulesRequest(BaseModel):
    rules: list[PrizeRuleIn]


class AwardMvpRequest(BaseModel):
    player_id: str


def _get_current_user_id(credentials: HTTPAuthorizationCredentials | None = Depends(security)) -> str | None:
    """Return user_id from JWT or None if no/invalid token."""
    if credentials is None:
        return None
    return decode_token(credentials.credentials)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_clock() -> Callable[[], datetime]:
    """Time source for entry and edit-window checks."""
    return _utcnow


def _require_user(token_user: str | None, body_user: str | None) -> str:
    uid = token_user or body_user
    if not uid:
        raise HTTPException(status_code=401, detail="Login or user_id required")
    return uid


def _scope(scope: str) -> PrizeScope:
    try:
        return PrizeScope(scope)
    except ValueError:
        raise HTTPException(status_code=400, detail="scope must be 'contest' or 'tournament'") from None


# ---------- Teams ----------


@app.post("/contests/{contest_id}/teams")
def create_team(
    contest_id: str,
    req: CreateTeamRequest,
    user_id_from_token: str | None = Depends(_get_current_user_id),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> dict[str, Any]:
    """Create the caller's team in a contest."""
    uid = _require_user(user_id_from_token, req.user_id)
    roster = [p.to_selection() for p in req.roster]

    def work() -> dict[str, Any]:
        with db_conn() as conn:
            return TeamService(clock=clock).create_team(conn, uid, contest_id, req.name, roster).to_dict()

    return _call(work)


@app.patch("/teams/{team_id}")
def update_team(
    team_id: str,
    req: UpdateTeamRequest,
    user_id_from_token: str | None = Depends(_get_current_user_id),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> dict[str, Any]:
    """Rename and/or replace the roster, subject to the contest's edit window."""
    uid = _require_user(user_id_from_token, req.user_id)
    roster = [p.to_selection() for p in req.roster] if req.roster is not None else None

    def work() -> dict[str, Any]:
        with db_conn() as conn:
            return TeamService(clock=clock).update_team(conn, team_id, name=req.name, roster=roster, user_id=uid).to_dict()

    return _call(work)


@app.get("/teams/{team_id}")
def get_team(team_id: str) -> dict[str, Any]:
    def work() -> dict[str, Any]:
        with db_conn() as conn:
            return TeamService().get_team(conn, team_id).to_dict()

    return _call(work)


@app.get("/users/{user_id}/teams")
def get_user_teams(user_id: str) -> dict[str, Any]:
    def work() -> dict[str, Any]:
        with db_conn() as conn:
            return {"teams": [t.to_dict() for t in TeamService().get_user_teams(conn, user_id)]}

    return _call(work)


@app.get("/contests/{contest_id}/teams")
def get_contest_teams(contest_id: str) -> dict[str, Any]:
    def work() -> dict[str, Any]:
        with db_conn() as conn:
            return {"teams": [t.to_dict() for t in TeamService().get_contest_teams(conn, contest_id)]}

    return _call(work)


@app.get("/contests/{contest_id}/leaderboard")
def get_leaderboard(
    contest_id: str,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=50, ge=1, le=100),
) -> dict[str, Any]:
    def work() -> dict[str, Any]:
        with db_conn() as conn:
            return RankingService().leaderboard(conn, contest_id, page=page, page_size=page_size)

    return _call(work)


# ---------- Scoring triggers ----------


@app.post("/matches/{match_id}/score")
def score_match(match_id: str) -> dict[str, Any]:
    """Match-completion trigger. Safe to deliver more than once."""
    def work() -> dict[str, Any]:
        with db_conn() as conn:
            return ScoringService().apply_match_by_id(conn, match_id).to_dict()

    return _call(work)


@app.post("/tournaments/{tournament_id}/mvp")
def award_mvp(tournament_id: str, req: AwardMvpRequest) -> dict[str, Any]:
    def work() -> dict[str, Any]:
        with db_conn() as conn:
            awarded = ScoringService().award_mvp(conn, tournament_id, req.player_id)
            return {
                "tournament_id": tournament_id,
                "player_id": req.player_id,
                "awarded": {team_id: str(points) for team_id, points in awarded.items()},
            }

    return _call(work)


# ---------- Prizes ----------


@app.get("/prize-rules/{scope}/{scope_id}")
def get_prize_rules(scope: str, scope_id: str) -> dict[str, Any]:
    prize_scope = _scope(scope)

    def work() -> dict[str, Any]:
        with db_conn() as conn:
            rules = PrizeService().get_prize_rules(conn, prize_scope, scope_id)
            return {"scope": prize_scope.value, "scope_id": scope_id, "rules": [r.to_dict() for r in rules]}

    return _call(work)


@app.put("/prize-rules/{scope}/{scope_id}")
def set_prize_rules(scope: str, scope_id: str, req: SetPrizeRulesRequest) -> dict[str, Any]:
    prize_scope = _scope(scope)
    rules = parse_prize_rules(r.model_dump() for r in req.rules)

    def work() -> dict[str, Any]:
        with db_conn() as conn:
            saved = PrizeService().set_prize_rules(conn, prize_scope, scope_id, rules)
            return {"scope": prize_scope.value, "scope_id": scope_id, "rules": [r.to_dict() for r in saved]}

    return _call(work)


@app.get("/contests/{contest_id}/prizes")
def resolve_prizes(contest_id: str, fee_percentage: Decimal | None = Query(default=None, ge=0, le=100)) -> dict[str, Any]:
    def work() -> dict[str, Any]:
        with db_conn() as conn:
            allocations = PrizeService().resolve_prizes(conn, contest_id, fee_percentage=fee_percentage)
            return {"contest_id": contest_id, "allocations": [a.to_dict() for a in allocations]}

    return _call(work)


@app.post("/contests/{contest_id}/prizes/distribute")
def distribute_prizes(contest_id: str) -> dict[str, Any]:
    def work() -> dict[str, Any]:
        with db_conn() as conn:
            disbursements = PrizeService().distribute_prizes(conn, contest_id)
            return {"contest_id": contest_id, "disbursements": [d.to_dict() for d in disbursements]}

    return _call(work)
