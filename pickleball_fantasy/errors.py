"""
Error taxonomy for the fantasy engine.

Domain errors subclass FantasyError and carry a stable `kind` plus the HTTP
status the API layer answers with. InfrastructureError is not a FantasyError;
callers retry it.
"""
from __future__ import annotations

from typing import Any


class FantasyError(ValueError):
    """Base class for domain errors surfaced to callers."""

    kind = "FantasyError"
    status_code = 400

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"kind": self.kind, "message": self.message}
        if self.detail:
            d.update(self.detail)
        return d


# ---------- Missing entities ----------


class ContestNotFound(FantasyError):
    kind = "ContestNotFound"
    status_code = 404


class TeamNotFound(FantasyError):
    kind = "TeamNotFound"
    status_code = 404


class PlayerNotFound(FantasyError):
    kind = "PlayerNotFound"
    status_code = 404


class TournamentNotFound(FantasyError):
    kind = "TournamentNotFound"
    status_code = 404


# ---------- Entry ----------


class ContestFull(FantasyError):
    kind = "ContestFull"
    status_code = 409


class ContestNotOpen(FantasyError):
    """Contest is no longer accepting new teams."""
    kind = "ContestNotOpen"
    status_code = 409


class DuplicateTeam(FantasyError):
    kind = "DuplicateTeam"
    status_code = 409


class NotTeamOwner(FantasyError):
    kind = "NotTeamOwner"
    status_code = 403


# ---------- Roster validation ----------


class RosterError(FantasyError):
    """A roster failed validation. `violations` lists every broken rule, not just the first."""

    def __init__(self, message: str, violations: list[dict[str, Any]] | None = None, **detail: Any) -> None:
        super().__init__(message, **detail)
        self.violations = violations or []

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        if self.violations:
            d["violations"] = self.violations
        return d


class RosterSizeInvalid(RosterError):
    kind = "RosterSizeInvalid"


class CaptainRequired(RosterError):
    kind = "CaptainRequired"


class ViceCaptainRequired(RosterError):
    kind = "ViceCaptainRequired"


class CaptainViceCaptainSame(RosterError):
    kind = "CaptainViceCaptainSame"


class DuplicatePlayerInRoster(RosterError):
    kind = "DuplicatePlayerInRoster"


class BudgetExceeded(RosterError):
    kind = "BudgetExceeded"


# ---------- Edit window ----------


class EditWindowClosed(FantasyError):
    kind = "EditWindowClosed"
    status_code = 409


class EditFrequencyExceeded(FantasyError):
    kind = "EditFrequencyExceeded"
    status_code = 409


class EditChangeCountExceeded(FantasyError):
    kind = "EditChangeCountExceeded"
    status_code = 400


class TournamentAlreadyEnded(FantasyError):
    kind = "TournamentAlreadyEnded"
    status_code = 409


class TournamentNotCompleted(FantasyError):
    """Tournament-level bonuses wait for the tournament to finish."""
    kind = "TournamentNotCompleted"
    status_code = 409


# ---------- Prizes ----------


class PrizeRulesInvalid(FantasyError):
    kind = "PrizeRulesInvalid"
    status_code = 400


class ContestNotCompleted(FantasyError):
    kind = "ContestNotCompleted"
    status_code = 409


class PrizesAlreadyDistributed(FantasyError):
    kind = "PrizesAlreadyDistributed"
    status_code = 409


# ---------- Infrastructure ----------


class InfrastructureError(RuntimeError):
    """Persistence failure or timeout. Always retryable by the caller."""

    kind = "InfrastructureError"
    status_code = 503
    retryable = True
